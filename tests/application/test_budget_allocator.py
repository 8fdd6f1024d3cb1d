"""Unit tests for BudgetAllocator and the token estimator.

Tests cover:
- Deterministic estimation
- Trimming order (history, then system, then prompt)
- Floors and termination when the target cannot be met
- The step bound
- Idempotence on trimmed output
"""

import math

import pytest

from application.services.budget_allocator import BudgetAllocator, estimate_tokens
from domain.models import ChatMessage


def history_of(*contents: str) -> list[ChatMessage]:
    return [ChatMessage.user(content) if i % 2 == 0 else ChatMessage.assistant(content) for i, content in enumerate(contents)]


class CountingEstimator:
    """Wraps estimate_tokens and counts how often it is called."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, messages) -> int:
        self.calls += 1
        return estimate_tokens(messages)


class TestEstimateTokens:
    """Test the conservative token estimator."""

    def test_single_message(self):
        """Three characters per token, four tokens per message, three priming tokens."""
        assert estimate_tokens([ChatMessage.user("abc")]) == 3 + 4 + 1

    def test_rounds_partial_tokens_up(self):
        assert estimate_tokens([ChatMessage.user("abcd")]) == 3 + 4 + 2

    def test_empty_conversation(self):
        assert estimate_tokens([]) == 3

    def test_is_deterministic(self):
        messages = [ChatMessage.system("You are helpful."), ChatMessage.user("hello there")]
        assert estimate_tokens(messages) == estimate_tokens(list(messages))


class TestBudgetAllocatorTrimming:
    """Test the trimming order."""

    def test_within_budget_is_unchanged(self, allocator):
        history = history_of("hi", "hello")
        system, trimmed, prompt = allocator.trim("sys", history, "how are you?", context_window=4096, reserved_tokens=1024)

        assert system == "sys"
        assert trimmed == history
        assert prompt == "how are you?"

    def test_drops_oldest_history_first(self, allocator):
        history = history_of("a" * 300, "b" * 300, "c" * 300)
        system, trimmed, prompt = allocator.trim("sys", history, "hi", context_window=200, reserved_tokens=0)

        assert trimmed == [history[-1]]
        assert system == "sys"
        assert prompt == "hi"

    def test_trims_system_in_fifty_character_steps(self, allocator):
        system, trimmed, prompt = allocator.trim("a" * 200, [], "hi", context_window=62, reserved_tokens=0)

        assert system == "a" * 150
        assert trimmed == []
        assert prompt == "hi"

    def test_trims_prompt_after_system_reaches_floor(self, allocator):
        system, _, prompt = allocator.trim("s" * 120, [], "p" * 400, context_window=100, reserved_tokens=0)

        assert system == "s" * 50
        assert len(prompt) < 400
        assert len(prompt) >= 50
        assert prompt == "p" * len(prompt)

    def test_short_texts_are_never_trimmed(self, allocator):
        system, trimmed, prompt = allocator.trim("short system", history_of("only one"), "short prompt", context_window=1, reserved_tokens=0)

        assert system == "short system"
        assert trimmed == history_of("only one")
        assert prompt == "short prompt"

    def test_does_not_mutate_inputs(self, allocator):
        history = history_of("a" * 300, "b" * 300, "c" * 300)
        snapshot = list(history)

        allocator.trim("sys", history, "hi", context_window=10, reserved_tokens=0)

        assert history == snapshot


class TestBudgetAllocatorTermination:
    """Test termination when the target cannot be met."""

    def test_unmeetable_target_stops_at_floors(self, allocator):
        history = history_of("c" * 500, "d" * 500, "e" * 500)
        system, trimmed, prompt = allocator.trim("s" * 500, history, "p" * 500, context_window=10, reserved_tokens=0)

        assert trimmed == [history[-1]]
        assert system == "s" * 50
        assert prompt == "p" * 50

    @pytest.mark.parametrize("reserved_tokens", [4096, 5000])
    def test_reserved_at_or_above_window_terminates(self, allocator, reserved_tokens):
        """A target of zero or less is unmeetable; trimming still terminates at the floors."""
        history = history_of("x" * 90, "y" * 90)
        system, trimmed, prompt = allocator.trim("s" * 75, history, "p" * 75, context_window=4096, reserved_tokens=reserved_tokens)

        assert len(trimmed) == 1
        assert system == "s" * 50
        assert prompt == "p" * 50

    def test_step_count_is_bounded(self):
        estimator = CountingEstimator()
        allocator = BudgetAllocator(estimator=estimator)
        system, history, prompt = "s" * 520, history_of(*["h" * 200] * 4), "p" * 333

        allocator.trim(system, history, prompt, context_window=10, reserved_tokens=0)

        steps = estimator.calls - 1
        bound = len(history) + math.ceil(len(system) / 50) + math.ceil(len(prompt) / 50)
        assert steps <= bound

    def test_trim_is_idempotent(self, allocator):
        history = history_of("a" * 300, "b" * 300, "c" * 300)
        first = allocator.trim("s" * 400, history, "p" * 400, context_window=150, reserved_tokens=20)
        second = allocator.trim(first[0], first[1], first[2], context_window=150, reserved_tokens=20)

        assert second == first
