"""Budget Allocator: fits system/history/prompt into a model's context window.

Token counts come from a single conservative estimator instead of a
provider-exact tokenizer. The estimator over-counts (about three characters
per token plus a fixed per-message framing cost), so a trimmed conversation
that fits the estimate also fits the provider's real window.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from domain.models import ChatMessage

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 3
TOKENS_PER_MESSAGE = 4
REPLY_PRIMING_TOKENS = 3

TRIM_STEP_CHARS = 50
MIN_TEXT_CHARS = 50
MIN_HISTORY_ENTRIES = 1

TokenEstimator = Callable[[Sequence[ChatMessage]], int]


def estimate_tokens(messages: Iterable[ChatMessage]) -> int:
    """Estimate the prompt tokens a provider will count for these messages.

    Deterministic: the same messages always give the same estimate.
    """
    total = REPLY_PRIMING_TOKENS
    for message in messages:
        total += TOKENS_PER_MESSAGE + math.ceil(len(message.content) / CHARS_PER_TOKEN)
    return total


@dataclass
class BudgetState:
    """Request-scoped trimming state, mutated in place and then discarded."""

    system: str
    history: list[ChatMessage]
    prompt: str
    target_tokens: int
    reserved_tokens: int
    steps: int = field(default=0)

    def messages(self) -> list[ChatMessage]:
        return [ChatMessage.system(self.system), *self.history, ChatMessage.user(self.prompt)]


class BudgetAllocator:
    """Trims a conversation until its estimate fits ``context_window - reserved``.

    Trimming order, one step at a time, re-estimating after each step:

    1. drop the oldest history entry while more than one remains
    2. drop the trailing characters of the system text, never below the floor
    3. drop the trailing characters of the prompt, never below the floor
    4. stop and proceed over budget

    The loop always terminates; its step count is bounded by
    ``len(history) + ceil(len(system)/50) + ceil(len(prompt)/50)``.
    """

    def __init__(self, estimator: TokenEstimator = estimate_tokens) -> None:
        self._estimator = estimator

    def estimate(self, messages: Sequence[ChatMessage]) -> int:
        return self._estimator(messages)

    def trim(
        self,
        system: str,
        history: Sequence[ChatMessage],
        prompt: str,
        context_window: int,
        reserved_tokens: int,
    ) -> tuple[str, list[ChatMessage], str]:
        """Return ``(system, history, prompt)`` trimmed to the token budget.

        Args:
            system: System instruction text
            history: Prior messages, oldest first
            prompt: The user's current prompt
            context_window: The model's total token window
            reserved_tokens: Tokens kept free for the reply (and tools)

        Returns:
            The trimmed triple. Inputs are not mutated.
        """
        state = BudgetState(
            system=system or "",
            history=list(history),
            prompt=prompt or "",
            target_tokens=context_window - reserved_tokens,
            reserved_tokens=reserved_tokens,
        )

        estimate = self._estimator(state.messages())
        while estimate > state.target_tokens:
            if not self._step(state):
                logger.warning(f"⚠️ Proceeding over budget: estimate={estimate} target={state.target_tokens} after {state.steps} trim steps")
                break
            state.steps += 1
            estimate = self._estimator(state.messages())

        if state.steps:
            logger.debug(f"✂️ Trimmed conversation in {state.steps} steps (estimate={estimate}, target={state.target_tokens})")
        return state.system, state.history, state.prompt

    @staticmethod
    def _step(state: BudgetState) -> bool:
        """Apply one trimming step. Returns False when nothing can be trimmed."""
        if len(state.history) > MIN_HISTORY_ENTRIES:
            state.history.pop(0)
            return True
        if len(state.system) > MIN_TEXT_CHARS:
            state.system = state.system[: max(MIN_TEXT_CHARS, len(state.system) - TRIM_STEP_CHARS)]
            return True
        if len(state.prompt) > MIN_TEXT_CHARS:
            state.prompt = state.prompt[: max(MIN_TEXT_CHARS, len(state.prompt) - TRIM_STEP_CHARS)]
            return True
        return False
