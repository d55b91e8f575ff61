"""
Tests for domain models.
"""

from datetime import date

import pendulum
import pytest

from freeslots.domain.exceptions import InvalidConfigError, InvalidIntervalError
from freeslots.domain.models import BusyEvent, FreeInterval, TimeInterval, TimeSlot, WorkWindow

TZ = "Asia/Tokyo"


def _dt(value: str):
    return pendulum.parse(value, tz=TZ)


class TestTimeInterval:
    """Tests for TimeInterval model."""

    def test_create_valid_interval(self):
        """Test creating a valid interval."""
        start = _dt("2025-05-15 09:00")
        end = _dt("2025-05-15 19:00")

        interval = TimeInterval(start=start, end=end)

        assert interval.start == start
        assert interval.end == end
        assert interval.duration_minutes() == 600

    def test_inverted_interval_raises_error(self):
        """Start after end is rejected, never swapped."""
        with pytest.raises(InvalidIntervalError, match="Start time .* must be before end time"):
            TimeInterval(start=_dt("2025-05-15 17:00"), end=_dt("2025-05-15 09:00"))

    def test_zero_length_interval_raises_error(self):
        with pytest.raises(InvalidIntervalError):
            TimeInterval(start=_dt("2025-05-15 10:00"), end=_dt("2025-05-15 10:00"))

    def test_invalid_interval_is_a_value_error(self):
        with pytest.raises(ValueError):
            TimeInterval(start=_dt("2025-05-15 11:00"), end=_dt("2025-05-15 10:00"))

    def test_overlaps(self):
        """Test overlap detection; touching intervals do not overlap."""
        tr1 = TimeInterval(start=_dt("2025-05-15 09:00"), end=_dt("2025-05-15 12:00"))
        tr2 = TimeInterval(start=_dt("2025-05-15 11:00"), end=_dt("2025-05-15 14:00"))
        tr3 = TimeInterval(start=_dt("2025-05-15 14:00"), end=_dt("2025-05-15 17:00"))

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)
        assert not tr2.overlaps(tr3)

    def test_intersect(self):
        tr1 = TimeInterval(start=_dt("2025-05-15 09:00"), end=_dt("2025-05-15 12:00"))
        tr2 = TimeInterval(start=_dt("2025-05-15 11:00"), end=_dt("2025-05-15 14:00"))

        intersection = tr1.intersect(tr2)

        assert intersection == TimeInterval(start=_dt("2025-05-15 11:00"), end=_dt("2025-05-15 12:00"))

    def test_intersect_no_overlap(self):
        tr1 = TimeInterval(start=_dt("2025-05-15 09:00"), end=_dt("2025-05-15 12:00"))
        tr2 = TimeInterval(start=_dt("2025-05-15 14:00"), end=_dt("2025-05-15 17:00"))

        assert tr1.intersect(tr2) is None

    def test_clip_to_never_extends(self):
        window = TimeInterval(start=_dt("2025-05-15 09:00"), end=_dt("2025-05-15 19:00"))
        early = TimeInterval(start=_dt("2025-05-15 08:00"), end=_dt("2025-05-15 10:00"))
        inside = TimeInterval(start=_dt("2025-05-15 11:00"), end=_dt("2025-05-15 12:00"))

        assert early.clip_to(window) == TimeInterval(start=_dt("2025-05-15 09:00"), end=_dt("2025-05-15 10:00"))
        assert inside.clip_to(window) == inside

    def test_free_interval_iso_output(self):
        free = FreeInterval(start=_dt("2025-05-15 11:00"), end=_dt("2025-05-15 13:00"))

        assert free.to_iso() == ("2025-05-15T11:00:00+09:00", "2025-05-15T13:00:00+09:00")


class TestWorkWindow:
    """Tests for WorkWindow configuration."""

    def test_defaults(self):
        window = WorkWindow()

        assert (window.start_hour, window.end_hour) == (9, 19)
        assert window.min_duration_minutes == 30
        assert window.exclude_weekends is True

    def test_start_not_before_end_is_rejected(self):
        with pytest.raises(InvalidConfigError):
            WorkWindow(start_hour=19, end_hour=9)
        with pytest.raises(InvalidConfigError):
            WorkWindow(start_hour=9, end_hour=9)

    def test_hour_out_of_range_is_rejected(self):
        with pytest.raises(InvalidConfigError):
            WorkWindow(start_hour=9, end_hour=24)

    def test_non_positive_duration_is_rejected(self):
        with pytest.raises(InvalidConfigError):
            WorkWindow(min_duration_minutes=0)
        with pytest.raises(InvalidConfigError):
            WorkWindow(min_duration_minutes=-15)

    def test_is_working_day(self):
        window = WorkWindow()

        assert window.is_working_day(date(2025, 5, 15))  # Thursday
        assert not window.is_working_day(date(2025, 5, 17))  # Saturday
        assert not window.is_working_day(date(2025, 5, 18))  # Sunday

    def test_weekends_included_when_requested(self):
        window = WorkWindow(exclude_weekends=False)

        assert window.is_working_day(date(2025, 5, 17))

    def test_window_for_day(self):
        window = WorkWindow(start_hour=9, end_hour=19, timezone=TZ)

        day_window = window.window_for(date(2025, 5, 15))

        assert day_window.start == _dt("2025-05-15 09:00")
        assert day_window.end == _dt("2025-05-15 19:00")


class TestBusyEvent:
    """Tests for all-day coverage of BusyEvent."""

    def _all_day(self, start: str, end: str) -> BusyEvent:
        return BusyEvent(
            title="Offsite",
            interval=TimeInterval(start=_dt(start), end=_dt(end)),
            is_all_day=True,
        )

    def test_single_all_day_event_covers_only_its_date(self):
        event = self._all_day("2025-05-20", "2025-05-21")

        assert event.covers_day(date(2025, 5, 20), TZ)
        assert not event.covers_day(date(2025, 5, 19), TZ)
        assert not event.covers_day(date(2025, 5, 21), TZ)

    def test_multi_day_all_day_event(self):
        event = self._all_day("2025-05-20", "2025-05-23")

        assert event.covers_day(date(2025, 5, 20), TZ)
        assert event.covers_day(date(2025, 5, 22), TZ)
        assert not event.covers_day(date(2025, 5, 23), TZ)


class TestTimeSlot:
    def test_format_display(self):
        slot = TimeSlot(
            interval=FreeInterval(start=_dt("2025-05-15 11:00"), end=_dt("2025-05-15 13:00")),
            participants=["a@example.com"],
        )

        assert slot.format_display() == "Thursday, 15.05.2025 | 11:00 – 13:00 (120 min)"
