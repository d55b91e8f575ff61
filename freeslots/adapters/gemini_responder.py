"""
Gemini-backed responder turning free slots into a natural-language answer.

Every call is a single request carrying the system instruction, the
serialized free slots and the full conversation history, so no chat
session object is kept between calls.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import httpx
import pendulum
from google import genai
from google.genai import errors, types
from pendulum import DateTime

from ..domain.exceptions import ResponderError
from ..domain.models import WorkWindow
from ..schemas import ConversationTurn, FreeSlotsPayload

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"

SYSTEM_INSTRUCTION_TEMPLATE = """
You are an assistant specialised in schedule management and finding meeting times.
Follow these rules strictly when answering.

Basics:
- Current time: {now} ({timezone})
- User: {user_name}
- Interpret every time in {timezone}.

Rules:
- Only the window {start_hour:02d}:00-{end_hour:02d}:00 is considered for scheduling.
- Only continuous spans of at least {min_duration} minutes count as free time.
- {weekend_rule}
- Use only the free slots provided in the request; never invent slots or events.
- If no free slots are provided, say so plainly.

Output:
- Prefer short bullet lists that can be pasted into a chat as-is.
""".strip()


def build_system_instruction(window: WorkWindow, now: DateTime, user_name: str) -> str:
    weekend_rule = (
        "Weekends are excluded unless the user explicitly asks for them."
        if window.exclude_weekends
        else "Weekends are included."
    )
    return SYSTEM_INSTRUCTION_TEMPLATE.format(
        now=now.in_timezone(window.timezone).format("dddd, YYYY-MM-DD HH:mm"),
        timezone=window.timezone,
        user_name=user_name,
        start_hour=window.start_hour,
        end_hour=window.end_hour,
        min_duration=window.min_duration_minutes,
        weekend_rule=weekend_rule,
    )


def build_contents(
    question: str,
    slots: FreeSlotsPayload,
    history: Sequence[ConversationTurn],
) -> List[types.Content]:
    """Assemble the request: prior turns first, then slots plus the question."""
    contents: List[types.Content] = []
    for turn in history:
        if not turn.content.strip():
            continue
        role = "model" if turn.role == "assistant" else "user"
        contents.append(
            types.Content(role=role, parts=[types.Part.from_text(text=turn.content)])
        )

    user_prompt = (
        "Free slots (JSON):\n"
        f"{slots.model_dump_json(indent=2)}\n\n"
        f"Question:\n{question.strip()}"
    )
    contents.append(
        types.Content(role="user", parts=[types.Part.from_text(text=user_prompt)])
    )
    return contents


class GeminiResponder:
    """Stateless request/response wrapper around the Gemini API."""

    def __init__(
        self,
        client: genai.Client,
        window: WorkWindow,
        *,
        model_name: str = DEFAULT_MODEL,
        temperature: float = 0.2,
        user_name: str = "me",
    ):
        self.client = client
        self.window = window
        self.model_name = model_name
        self.temperature = temperature
        self.user_name = user_name

    @classmethod
    def from_api_key(cls, api_key: str, window: WorkWindow, **kwargs) -> "GeminiResponder":
        if not api_key:
            raise ResponderError("Gemini API key is missing.")
        return cls(genai.Client(api_key=api_key), window, **kwargs)

    def respond(
        self,
        question: str,
        slots: FreeSlotsPayload,
        history: Sequence[ConversationTurn] = (),
        now: Optional[DateTime] = None,
    ) -> str:
        """
        Answer ``question`` given the free slots and the conversation so far.

        Raises:
            ResponderError: If the API fails or returns no text
        """
        now = now or pendulum.now(self.window.timezone)
        config = types.GenerateContentConfig(
            system_instruction=build_system_instruction(self.window, now, self.user_name),
            temperature=self.temperature,
        )
        contents = build_contents(question, slots, history)

        logger.debug(
            "Sending %d turns and %d free slots to %s",
            len(contents),
            len(slots.slots),
            self.model_name,
        )

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        except (errors.APIError, httpx.HTTPError) as exc:
            raise ResponderError(f"Gemini request failed: {exc}") from exc

        text = getattr(response, "text", None)
        if not text or not text.strip():
            raise ResponderError("Gemini returned an empty response.")

        return text.strip()
