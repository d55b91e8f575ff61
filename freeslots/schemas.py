"""
Serializable payloads handed to the language-model responder.
"""

from typing import List, Literal, Sequence

from pydantic import BaseModel, Field

from .domain.models import FreeInterval, local_date


class ConversationTurn(BaseModel):
    role: Literal["user", "assistant"] = Field(..., description="Role of the speaker")
    content: str = Field(..., description="Message content for the conversation turn")


class FreeSlotEntry(BaseModel):
    start: str = Field(..., description="ISO8601 start datetime with timezone")
    end: str = Field(..., description="ISO8601 end datetime with timezone")
    duration_minutes: int = Field(..., gt=0, description="Length of the slot in minutes")


class FreeSlotsPayload(BaseModel):
    timezone: str = Field(..., description="Timezone the day windows were built in")
    multi_day: bool = Field(
        default=False, description="Whether the slots span more than one calendar date"
    )
    slots: List[FreeSlotEntry] = Field(default_factory=list, description="Free slots in order")

    @classmethod
    def from_intervals(cls, intervals: Sequence[FreeInterval], timezone: str) -> "FreeSlotsPayload":
        entries = []
        for interval in intervals:
            start, end = interval.to_iso()
            entries.append(
                FreeSlotEntry(start=start, end=end, duration_minutes=interval.duration_minutes())
            )
        dates = {local_date(interval.start, timezone) for interval in intervals}
        return cls(timezone=timezone, multi_day=len(dates) > 1, slots=entries)
