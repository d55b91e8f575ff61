"""
Answers scheduling questions by combining computed free time with a
language-model responder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..domain.models import FreeInterval
from ..schemas import ConversationTurn, FreeSlotsPayload
from .free_slot_finder import FreeSlotFinderService

logger = logging.getLogger(__name__)


class ResponderProtocol(Protocol):
    def respond(
        self,
        question: str,
        slots: FreeSlotsPayload,
        history: Sequence[ConversationTurn] = (),
        now: Optional[DateTime] = None,
    ) -> str:
        ...


@dataclass
class AssistantAnswer:
    text: str
    slots: List[FreeInterval]
    payload: FreeSlotsPayload


class SchedulingAssistant:
    """Computes free slots first, then hands them to the responder."""

    def __init__(self, finder: FreeSlotFinderService, responder: ResponderProtocol) -> None:
        self._finder = finder
        self._responder = responder

    async def ask(
        self,
        question: str,
        *,
        participants: Sequence[str],
        start_date: DateTime,
        end_date: DateTime,
        history: Sequence[ConversationTurn] = (),
        now: Optional[DateTime] = None,
    ) -> AssistantAnswer:
        slots = await self._finder.find_slots(
            participants=participants,
            start_date=start_date,
            end_date=end_date,
        )
        payload = FreeSlotsPayload.from_intervals(slots, self._finder.window.timezone)

        logger.info(
            "Asking responder with %d free slot(s) and %d prior turn(s)",
            len(slots),
            len(history),
        )
        text = self._responder.respond(question, payload, history=list(history), now=now)
        return AssistantAnswer(text=text, slots=slots, payload=payload)
