"""Completion abstractions shared by the services and the HTTP adapter."""

from .completion import CompletionProvider, CompletionRequest, CompletionResponse, CompletionStream

__all__ = [
    "CompletionProvider",
    "CompletionRequest",
    "CompletionResponse",
    "CompletionStream",
]
