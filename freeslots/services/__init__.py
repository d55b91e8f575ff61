"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .free_slot_finder import CalendarClientProtocol, FreeSlotFinderService
from .scheduling_assistant import AssistantAnswer, SchedulingAssistant

__all__ = [
    "AssistantAnswer",
    "CalendarClientProtocol",
    "FreeSlotFinderService",
    "SchedulingAssistant",
]
