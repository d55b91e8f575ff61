"""
Core business logic for calculating free time.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O, no logging).
Every function receives its inputs explicitly and returns fresh output.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Sequence

from .exceptions import EmptyParticipantSetError, InvalidConfigError
from .models import BusyEvent, FreeInterval, TimeInterval, TimeSlot, WorkWindow, local_date


def _check_min_duration(min_duration_minutes: int) -> None:
    if min_duration_minutes <= 0:
        raise InvalidConfigError(
            f"min_duration_minutes must be positive, got {min_duration_minutes}"
        )


def derive_free_intervals(
    day_events: Iterable[BusyEvent],
    day_window: TimeInterval,
    min_duration_minutes: int,
) -> List[FreeInterval]:
    """
    Subtract one day's busy events from its working window.

    Example:
    Window: 09:00 - 19:00
    Busy: [10:00-11:00, 13:00-15:00]
    Result: [09:00-10:00, 11:00-13:00, 15:00-19:00]

    Events may be unsorted and may overlap each other. Anything outside the
    window is clipped away; gaps shorter than ``min_duration_minutes`` are
    dropped.
    """
    _check_min_duration(min_duration_minutes)

    clipped: List[TimeInterval] = []
    for event in day_events:
        part = event.interval.clip_to(day_window)
        if part is not None:
            clipped.append(part)

    clipped.sort(key=lambda r: (r.start, r.end))

    gaps: List[FreeInterval] = []
    cursor = day_window.start

    for busy in clipped:
        if cursor < busy.start:
            gaps.append(FreeInterval(start=cursor, end=busy.start))
        cursor = max(cursor, busy.end)

    if cursor < day_window.end:
        gaps.append(FreeInterval(start=cursor, end=day_window.end))

    return [gap for gap in gaps if gap.duration_minutes() >= min_duration_minutes]


def _events_for_day(
    events: Sequence[BusyEvent],
    day: date,
    day_window: TimeInterval,
    tz: str,
) -> List[BusyEvent]:
    """
    Select the events blocking ``day_window``.

    All-day events are widened to the whole window rather than read as
    midnight-to-midnight.
    """
    selected: List[BusyEvent] = []
    for event in events:
        if event.is_all_day:
            if event.covers_day(day, tz):
                selected.append(
                    BusyEvent(
                        title=event.title,
                        interval=day_window,
                        is_all_day=True,
                        participant=event.participant,
                        event_id=event.event_id,
                        location=event.location,
                    )
                )
        elif event.interval.overlaps(day_window):
            selected.append(event)
    return selected


def compute_free_slots(
    events: Sequence[BusyEvent],
    range_start: date,
    range_end: date,
    window: WorkWindow,
) -> List[FreeInterval]:
    """
    Compute one participant's free intervals over a range of dates.

    Both boundary dates are included in full regardless of their time of
    day. Intervals never cross from one day into the next.
    """
    first_day = local_date(range_start, window.timezone)
    last_day = local_date(range_end, window.timezone)

    free: List[FreeInterval] = []
    current = first_day

    while current <= last_day:
        if window.is_working_day(current):
            day_window = window.window_for(current)
            day_events = _events_for_day(events, current, day_window, window.timezone)
            free.extend(
                derive_free_intervals(day_events, day_window, window.min_duration_minutes)
            )
        current = current + timedelta(days=1)

    return free


def _intersect_two_lists(
    left: Sequence[FreeInterval],
    right: Sequence[FreeInterval],
    min_duration_minutes: int,
) -> List[FreeInterval]:
    """
    Intersect two sorted, non-overlapping interval lists.

    Two-pointer merge: advance whichever interval ends first.
    """
    left = sorted(left, key=lambda r: r.start)
    right = sorted(right, key=lambda r: r.start)

    result: List[FreeInterval] = []
    i = j = 0

    while i < len(left) and j < len(right):
        a, b = left[i], right[j]
        overlap_start = max(a.start, b.start)
        overlap_end = min(a.end, b.end)

        if overlap_start < overlap_end:
            candidate = FreeInterval(start=overlap_start, end=overlap_end)
            if candidate.duration_minutes() >= min_duration_minutes:
                result.append(candidate)

        if a.end <= b.end:
            i += 1
        else:
            j += 1

    return result


def intersect_free_slots(
    per_participant: Sequence[Sequence[FreeInterval]],
    min_duration_minutes: int,
) -> List[FreeInterval]:
    """
    Calculate the times when ALL participants are free.

    The threshold is re-applied after every fold since an intersection can
    shrink two qualifying intervals into a sliver.
    """
    if not per_participant:
        raise EmptyParticipantSetError("At least one participant is required")

    _check_min_duration(min_duration_minutes)

    if len(per_participant) == 1:
        return list(per_participant[0])

    result = list(per_participant[0])

    for other in per_participant[1:]:
        result = _intersect_two_lists(result, other, min_duration_minutes)

        # Early exit if no common time
        if not result:
            return []

    return result


class SlotCalculator:
    """
    Finds common free slots for a group under one working window.

    Algorithm:
    1. For each participant, derive free intervals day by day
    2. Intersect all participants' free intervals
    3. Re-filter by minimum duration after every intersection step
    """

    def __init__(self, window: WorkWindow):
        self.window = window

    def free_slots_for(
        self,
        events: Sequence[BusyEvent],
        start_date: date,
        end_date: date,
    ) -> List[FreeInterval]:
        """Free intervals of a single participant."""
        return compute_free_slots(events, start_date, end_date, self.window)

    def find_common_slots(
        self,
        events_by_participant: Dict[str, Sequence[BusyEvent]],
        start_date: date,
        end_date: date,
    ) -> List[TimeSlot]:
        """
        Find all slots in which every participant is free.

        Args:
            events_by_participant: Dict mapping participant to their busy events
            start_date: First date of the search period
            end_date: Last date of the search period (inclusive)

        Returns:
            List of TimeSlot objects in chronological order
        """
        participants = list(events_by_participant.keys())

        per_participant = [
            self.free_slots_for(events_by_participant[p], start_date, end_date)
            for p in participants
        ]

        common = intersect_free_slots(per_participant, self.window.min_duration_minutes)

        return [TimeSlot(interval=interval, participants=participants) for interval in common]
