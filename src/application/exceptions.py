"""Application error hierarchy.

Every error carries a user-facing message, a categorized error code and
the HTTP status it maps to, so controllers and the streaming gateway can
render a uniform ``{status, message}`` envelope.

Design:
- Pre-commit errors (validation, configuration, upstream) become JSON responses
- Post-commit errors become a terminal in-band ``error`` event
- ActionExecutionError never leaves the dispatcher
"""

from typing import Any, Optional


class RimHostError(Exception):
    """Base error for the RIM Agent Host.

    Attributes:
        message: Human-readable error message
        error_code: Categorized error code for programmatic handling
        status_code: HTTP status the error maps to
        is_retryable: Whether the operation might succeed on retry
        details: Additional error context
    """

    default_status_code: int = 500
    default_error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        is_retryable: bool = False,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.status_code = status_code or self.default_status_code
        self.is_retryable = is_retryable
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "status": self.status_code,
            "message": self.message,
            "error_code": self.error_code,
            "is_retryable": self.is_retryable,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code}: {self.message})"


class RequestValidationError(RimHostError):
    """Raised when a request is missing required fields."""

    default_status_code = 400
    default_error_code = "validation_error"

    def __init__(self, message: str, missing_fields: Optional[list[str]] = None) -> None:
        super().__init__(message, details={"missing_fields": list(missing_fields or [])})
        self.missing_fields = list(missing_fields or [])

    @classmethod
    def for_missing(cls, *fields: str) -> "RequestValidationError":
        return cls(f"Missing required fields: {', '.join(fields)}", missing_fields=list(fields))


class ConfigurationError(RimHostError):
    """Raised when the host is configured inconsistently."""

    default_error_code = "configuration_error"


class UnknownModelError(ConfigurationError):
    """Raised when a model name is absent from every provider table."""

    def __init__(self, model: str) -> None:
        super().__init__(f"Unknown model: {model}", error_code="unknown_model", details={"model": model})
        self.model = model


class MissingCredentialError(ConfigurationError):
    """Raised when a provider has no configured credential."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"No credential configured for provider '{provider}'", error_code="missing_credential", details={"provider": provider})
        self.provider = provider


class UnknownProviderError(ConfigurationError):
    """Raised when no endpoint is known for a provider."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown provider: {provider}", error_code="unknown_provider", details={"provider": provider})
        self.provider = provider


class UpstreamRejectedError(RimHostError):
    """Raised when a provider answers with a non-2xx status.

    The upstream status and message are forwarded to the caller.
    """

    default_status_code = 502
    default_error_code = "upstream_rejected"

    def __init__(self, message: str, status_code: int, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            message,
            status_code=status_code,
            is_retryable=status_code == 429 or status_code >= 500,
            details=details,
        )


class UpstreamUnreachableError(RimHostError):
    """Raised when a provider cannot be reached at all."""

    default_status_code = 502
    default_error_code = "upstream_unreachable"

    def __init__(self, message: str = "The language model provider could not be reached", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, is_retryable=True, details=details)


class ActionExecutionError(RimHostError):
    """Wraps a failure raised by an action handler. Always recovered locally."""

    default_error_code = "action_failed"

    def __init__(self, action_name: str, cause: BaseException) -> None:
        super().__init__(
            f"Action '{action_name}' failed: {cause}",
            details={"action": action_name, "cause": type(cause).__name__},
        )
        self.action_name = action_name
        self.cause = cause


class StreamTerminatedEarlyError(RimHostError):
    """Signals that the caller went away before the stream completed."""

    default_status_code = 499
    default_error_code = "stream_terminated_early"
