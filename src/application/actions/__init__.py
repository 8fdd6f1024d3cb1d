"""Domain actions the classifier can select, and their handlers."""

from .base import PROPERTIES_KEY, ActionContext, ActionHandler
from .blink_handlers import AddMemoHandler, SwapHandler, TransferSolHandler
from .catalog import ANSWER_DIRECTLY_TOOL_NAME, ToolCatalog, build_default_catalog
from .media_handlers import GenerateImageHandler, SearchYoutubeVideoHandler
from .wallet_handler import GetWalletInfoHandler

__all__ = [
    "ANSWER_DIRECTLY_TOOL_NAME",
    "PROPERTIES_KEY",
    "ActionContext",
    "ActionHandler",
    "AddMemoHandler",
    "GenerateImageHandler",
    "GetWalletInfoHandler",
    "SearchYoutubeVideoHandler",
    "SwapHandler",
    "ToolCatalog",
    "TransferSolHandler",
    "build_default_catalog",
]
