"""
Convenience entry point for running freeslots directly.

Usage: python -m freeslots [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
