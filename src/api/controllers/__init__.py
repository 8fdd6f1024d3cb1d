"""API controllers, discovered by the neuroglia sub-app configuration."""

from .ai_controller import AiController

__all__ = ["AiController"]
