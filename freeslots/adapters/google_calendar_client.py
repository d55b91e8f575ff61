"""
Google Calendar API client for fetching busy events.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import AuthenticationError, CalendarAPIError
from ..domain.models import BusyEvent, TimeInterval

logger = logging.getLogger(__name__)

UNTITLED_EVENT = "(no title)"


class GoogleCalendarClient:
    """
    Client for Google Calendar API event listing.

    Uses the /calendars/{calendarId}/events endpoint with recurring events
    already expanded by the server (``singleEvents=true``).
    """

    CALENDAR_API_ENDPOINT = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str,
        session: Optional[requests.Session] = None,
        calendar_ids: Optional[Dict[str, str]] = None,
        timeout: float = 30,
    ):
        """
        Initialize the Calendar API client.

        Args:
            access_token: Valid Google OAuth access token
            session: Optional requests session (for connection reuse / tests)
            calendar_ids: Optional mapping participant -> calendar id
            timeout: Per-request timeout in seconds
        """
        self.access_token = access_token
        self.session = session or requests.Session()
        self.calendar_ids = calendar_ids or {}
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

    async def get_events(
        self,
        participant: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyEvent]:
        """Fetch busy events without blocking the event loop."""
        return await asyncio.to_thread(
            self.fetch_events, participant, start_time, end_time, timezone
        )

    def fetch_events(
        self,
        participant: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyEvent]:
        """
        Get busy events for one participant.

        Args:
            participant: Participant email (or configured calendar alias)
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone identifier

        Returns:
            List of BusyEvent objects

        Raises:
            AuthenticationError: If the token was rejected
            CalendarAPIError: If the API call fails
        """
        calendar_id = self.calendar_ids.get(participant, participant)
        url = f"{self.CALENDAR_API_ENDPOINT}/calendars/{quote(calendar_id, safe='')}/events"

        params: Dict[str, Any] = {
            "timeMin": start_time.to_iso8601_string(),
            "timeMax": end_time.to_iso8601_string(),
            "timeZone": timezone,
            "singleEvents": "true",
            "orderBy": "startTime",
        }

        items: List[Dict[str, Any]] = []
        while True:
            data = self._get(url, params)
            items.extend(data.get("items", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        logger.debug("Fetched %d calendar items for %s", len(items), participant)
        return self._parse_events(items, participant, timezone)

    def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(f"Failed to fetch events from Google Calendar: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError("Access token was rejected. Please sign in again.")

        try:
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            raise CalendarAPIError(
                f"Failed to fetch events from Google Calendar: {response.status_code}"
            ) from e
        except ValueError as e:
            raise CalendarAPIError("Google Calendar returned a non-JSON response") from e

    def _parse_events(
        self,
        items: List[Dict[str, Any]],
        participant: str,
        timezone: str,
    ) -> List[BusyEvent]:
        """
        Parse event resources into our domain model.

        Item format:
        {
            "id": "...",
            "summary": "...",
            "status": "confirmed",
            "transparency": "opaque",
            "start": {"dateTime": "..."} | {"date": "YYYY-MM-DD"},
            "end": {"dateTime": "..."} | {"date": "YYYY-MM-DD"}
        }
        """
        events: List[BusyEvent] = []

        for item in items:
            # Cancelled and "show as free" entries do not block time
            if item.get("status") == "cancelled" or item.get("transparency") == "transparent":
                continue

            try:
                start_info = item["start"]
                end_info = item["end"]
                is_all_day = "dateTime" not in start_info
                start = self._parse_datetime(
                    start_info.get("dateTime") or start_info["date"], timezone
                )
                end = self._parse_datetime(
                    end_info.get("dateTime") or end_info["date"], timezone
                )
                interval = TimeInterval(start=start, end=end)
            except (KeyError, ValueError) as e:
                logger.warning("Skipping calendar item %s: %s", item.get("id", "?"), e)
                continue

            events.append(
                BusyEvent(
                    title=item.get("summary") or UNTITLED_EVENT,
                    interval=interval,
                    is_all_day=is_all_day,
                    participant=participant,
                    event_id=item.get("id", ""),
                    location=item.get("location"),
                )
            )

        return events

    def _parse_datetime(self, datetime_str: str, timezone: str) -> DateTime:
        """
        Parse an ISO 8601 date or datetime into ``timezone``.

        Bare dates (all-day events) become local midnight.
        """
        dt = pendulum.parse(datetime_str, tz=timezone)

        if isinstance(dt, DateTime):
            return dt.in_timezone(timezone)

        raise ValueError(f"Could not parse datetime: {datetime_str}")
