"""Application services: budget, resolution, dispatch, composition and streaming."""

from .action_dispatcher import ActionDispatcher
from .action_resolver import ActionResolver
from .budget_allocator import BudgetAllocator, estimate_tokens
from .conversation_composer import ConversationComposer, select_persona
from .message_service import MessageOptions, MessageService
from .rim_service import AnswerSampling, RimService, RimSession, RimState

__all__ = [
    "ActionDispatcher",
    "ActionResolver",
    "AnswerSampling",
    "BudgetAllocator",
    "ConversationComposer",
    "MessageOptions",
    "MessageService",
    "RimService",
    "RimSession",
    "RimState",
    "estimate_tokens",
    "select_persona",
]
