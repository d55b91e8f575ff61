"""
Human-readable rendering of free intervals.
"""

from typing import Sequence

from .models import TimeInterval

NO_FREE_TIME_MESSAGE = "No free time found in the requested period."


def format_interval(interval: TimeInterval) -> str:
    """Render an interval as ``Thu 15.05. 11:00–13:00``."""
    day = interval.start.format("ddd DD.MM.")
    return f"{day} {interval.start.format('HH:mm')}–{interval.end.format('HH:mm')}"


def format_free_slots_message(slots: Sequence[TimeInterval], limit: int = 10) -> str:
    """
    Build a short bullet list of free slots.

    At most ``limit`` slots are listed; the remainder is summarised in a
    trailing line.
    """
    if not slots:
        return NO_FREE_TIME_MESSAGE

    lines = [f"- {format_interval(slot)}" for slot in slots[:limit]]
    message = "The following times are free:\n\n" + "\n".join(lines)

    if len(slots) > limit:
        message += f"\n\n... and {len(slots) - limit} more"

    return message
