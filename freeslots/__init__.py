"""
freeslots - find common free meeting time across calendars.
"""

__version__ = "0.1.0"
