"""
Application service for finding shared free time.

The service coordinates fetching busy events via a calendar client adapter
and delegates the actual interval computation to the domain-level
functions. Calendar failures propagate: a participant whose calendar could
not be read is never treated as free.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Protocol, Sequence

from pendulum import DateTime

from ..domain.models import BusyEvent, FreeInterval, WorkWindow
from ..domain.slot_calculator import compute_free_slots, intersect_free_slots

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    async def get_events(
        self,
        participant: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyEvent]:
        """Return busy events of one participant."""


class FreeSlotFinderService:
    """
    Orchestrates busy-event retrieval and free-time calculation.

    Dependency inversion toward a protocol makes it easy to plug in the
    Google Calendar adapter or the mock implementation in tests.
    """

    def __init__(self, calendar_client: CalendarClientProtocol, window: WorkWindow) -> None:
        self._calendar_client = calendar_client
        self._window = window

    @property
    def window(self) -> WorkWindow:
        return self._window

    async def find_slots(
        self,
        *,
        participants: Sequence[str],
        start_date: DateTime,
        end_date: DateTime,
    ) -> List[FreeInterval]:
        """
        Retrieve busy events and compute the common free intervals.
        """
        events = await self.fetch_events(
            participants=participants,
            start_date=start_date,
            end_date=end_date,
        )
        return self.calculate_slots(
            participants=participants,
            start_date=start_date,
            end_date=end_date,
            events_by_participant=events,
        )

    async def fetch_events(
        self,
        *,
        participants: Sequence[str],
        start_date: DateTime,
        end_date: DateTime,
    ) -> Dict[str, List[BusyEvent]]:
        """
        Fetch every participant's events concurrently.

        Free time is computed per whole day, so the query covers the full
        local days of both boundaries even when ``start_date`` is mid-day.
        """
        participant_list = list(dict.fromkeys(participants))
        tz = self._window.timezone
        fetch_start = start_date.in_timezone(tz).start_of("day")
        fetch_end = end_date.in_timezone(tz).end_of("day")
        logger.info(
            "Fetching events for %d participant(s) between %s and %s",
            len(participant_list),
            fetch_start,
            fetch_end,
        )

        results = await asyncio.gather(
            *(
                self._calendar_client.get_events(
                    participant=participant,
                    start_time=fetch_start,
                    end_time=fetch_end,
                    timezone=tz,
                )
                for participant in participant_list
            )
        )

        return dict(zip(participant_list, results))

    def calculate_slots(
        self,
        *,
        participants: Sequence[str],
        start_date: DateTime,
        end_date: DateTime,
        events_by_participant: Dict[str, List[BusyEvent]],
    ) -> List[FreeInterval]:
        """Calculate common free intervals from already fetched events."""
        participant_list = list(dict.fromkeys(participants))
        missing = [p for p in participant_list if p not in events_by_participant]
        if missing:
            raise KeyError(f"No calendar data for participant(s): {', '.join(missing)}")

        per_participant = [
            compute_free_slots(
                events_by_participant[participant],
                start_date,
                end_date,
                self._window,
            )
            for participant in participant_list
        ]
        for participant, free in zip(participant_list, per_participant):
            logger.debug("%s has %d free interval(s)", participant, len(free))

        common = intersect_free_slots(per_participant, self._window.min_duration_minutes)
        logger.info("Found %d common free interval(s)", len(common))
        return common
