"""Outbound HTTP adapters: completions and action collaborators."""

from .completion_client import CompletionClient, HttpCompletionStream
from .image_generation_client import ImageGenerationClient
from .wallet_client import WalletClient, WalletRpcError
from .youtube_search_client import YoutubeSearchClient

__all__ = [
    "CompletionClient",
    "HttpCompletionStream",
    "ImageGenerationClient",
    "WalletClient",
    "WalletRpcError",
    "YoutubeSearchClient",
]
