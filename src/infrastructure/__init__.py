"""Infrastructure layer: model registry, HTTP adapters and their lifecycle."""

from .http_clients_lifecycle import HttpClientsLifecycle
from .model_registry import ModelRegistry

__all__ = ["HttpClientsLifecycle", "ModelRegistry"]
