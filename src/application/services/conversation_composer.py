"""Conversation Composer: persona selection and final-answer messages."""

from functools import partial
from typing import Callable, Optional, Sequence

from domain.models import ActionResult, ChatMessage

FALLBACK_PERSONA = "Answer the user in a funny sarcastic way"

PersonaPolicy = Callable[[Sequence[ActionResult]], str]


def select_persona(results: Sequence[ActionResult], fallback: str = FALLBACK_PERSONA) -> str:
    """The first result's persona drives the answer; without results, the fallback."""
    if results:
        return results[0].response_system_prompt
    return fallback


class ConversationComposer:
    """Builds the ``[system, user]`` pair for the final streaming call.

    History is not included in the final call.
    """

    def __init__(self, persona_policy: Optional[PersonaPolicy] = None, fallback_persona: str = FALLBACK_PERSONA) -> None:
        self._persona_policy = persona_policy or partial(select_persona, fallback=fallback_persona)

    def compose(self, prompt: str, results: Sequence[ActionResult]) -> list[ChatMessage]:
        return [ChatMessage.system(self._persona_policy(results)), ChatMessage.user(prompt)]
