"""
Mock calendar client for working without a Google account.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError
from ..domain.models import BusyEvent, TimeInterval

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that serves events from a JSON file.

    Each entry carries a ``calendarId`` used to attribute it to a
    participant, plus ``title``, ``start``, ``end`` and optionally
    ``location`` and ``allDay``.
    """

    def __init__(
        self,
        data_file: Optional[Path] = None,
        calendar_ids: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file with events, defaults to the bundled sample
            calendar_ids: Optional mapping participant -> calendarId
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.calendar_ids = calendar_ids or {}
        self.calendar_events = self._load_calendar_data()

    def _load_calendar_data(self) -> List[Dict[str, Any]]:
        """Load mock calendar data from JSON file."""
        if not self.data_file.exists():
            raise CalendarAPIError(f"Mock calendar data not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise CalendarAPIError(f"Invalid mock calendar data in {self.data_file}: {exc}") from exc

        if not isinstance(data, list):
            raise CalendarAPIError("Mock calendar data must be a list of events.")
        return data

    async def get_events(
        self,
        participant: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyEvent]:
        """
        Load busy events for one participant overlapping the time window.
        """
        calendar_id = self.calendar_ids.get(participant, participant)
        events: List[BusyEvent] = []

        for index, entry in enumerate(self.calendar_events):
            if entry.get("calendarId") != calendar_id:
                continue

            try:
                event_start = pendulum.parse(entry["start"], tz=timezone)
                event_end = pendulum.parse(entry["end"], tz=timezone)
                interval = TimeInterval(start=event_start, end=event_end)
            except (KeyError, ValueError) as e:
                logger.warning("Skipping invalid mock event #%d: %s", index, e)
                continue

            if event_start < end_time and event_end > start_time:
                events.append(
                    BusyEvent(
                        title=entry.get("title", ""),
                        interval=interval,
                        is_all_day=bool(entry.get("allDay", False)),
                        participant=participant,
                        event_id=entry.get("id", f"mock-{index}"),
                        location=entry.get("location"),
                    )
                )

        logger.debug("Mock calendar served %d events for %s", len(events), participant)
        return events
