"""
Tests for slot rendering and the serialized hand-off payload.
"""

import json

import pendulum

from freeslots.domain.formatting import NO_FREE_TIME_MESSAGE, format_free_slots_message, format_interval
from freeslots.domain.models import FreeInterval
from freeslots.schemas import FreeSlotsPayload

TZ = "Asia/Tokyo"


def _free(day: int, start: int, end: int) -> FreeInterval:
    return FreeInterval(
        start=pendulum.datetime(2025, 5, day, start, tz=TZ),
        end=pendulum.datetime(2025, 5, day, end, tz=TZ),
    )


def test_format_interval():
    assert format_interval(_free(15, 11, 13)) == "Thu 15.05. 11:00–13:00"


def test_message_for_no_slots():
    assert format_free_slots_message([]) == NO_FREE_TIME_MESSAGE


def test_message_lists_slots():
    message = format_free_slots_message([_free(15, 11, 13), _free(16, 9, 10)])

    assert "- Thu 15.05. 11:00–13:00" in message
    assert "- Fri 16.05. 09:00–10:00" in message
    assert "more" not in message


def test_message_is_truncated():
    slots = [_free(15, hour, hour + 1) for hour in range(9, 19)] + [_free(16, 9, 10), _free(16, 11, 12)]

    message = format_free_slots_message(slots, limit=10)

    assert message.count("\n- ") == 10
    assert message.endswith("... and 2 more")


def test_payload_single_day():
    payload = FreeSlotsPayload.from_intervals([_free(15, 11, 13), _free(15, 16, 19)], TZ)

    assert payload.multi_day is False
    assert payload.slots[0].start == "2025-05-15T11:00:00+09:00"
    assert payload.slots[0].end == "2025-05-15T13:00:00+09:00"
    assert payload.slots[1].duration_minutes == 180


def test_payload_multi_day_serializes_deterministically():
    intervals = [_free(15, 11, 13), _free(16, 9, 10)]

    first = FreeSlotsPayload.from_intervals(intervals, TZ).model_dump_json()
    second = FreeSlotsPayload.from_intervals(intervals, TZ).model_dump_json()

    assert first == second
    data = json.loads(first)
    assert data["multi_day"] is True
    assert data["timezone"] == TZ
    assert len(data["slots"]) == 2


def test_payload_empty():
    payload = FreeSlotsPayload.from_intervals([], TZ)

    assert payload.slots == []
    assert payload.multi_day is False
