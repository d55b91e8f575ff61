"""
Adapters layer - External integrations (Google Calendar, Gemini, keyring).
"""

from .gemini_responder import GeminiResponder
from .google_calendar_client import GoogleCalendarClient
from .mock_calendar_client import MockCalendarClient
from .token_store import AccessTokenStore

__all__ = ["AccessTokenStore", "GeminiResponder", "GoogleCalendarClient", "MockCalendarClient"]
