"""Unified error taxonomy for contractAgent.

Load-time problems are contained and made visible (placeholder personas),
runtime problems end a session in the FAILED state, and output-contract
violations are never raised at all: the validator reports them as
``FailureKind`` values.
"""

from __future__ import annotations

from typing import Optional


class ContractAgentError(Exception):
    """Base exception for contractAgent errors."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class RegistryLoadError(ContractAgentError):
    """A persona's backing prompt resource could not be read.

    Attributes:
        resource: Name of the prompt resource (path as written in personas.yaml)
        cause: Underlying exception, if any
    """

    def __init__(self, resource: str, cause: Optional[BaseException] = None):
        self.resource = resource
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"Failed to load prompt from {resource}{detail}",
            user_message=f"ERROR: Could not load prompt file. Please check that {resource} exists.",
        )


class RegistryFrozenError(ContractAgentError):
    """Registration attempted after the registry was frozen."""
    pass


class TransportError(ContractAgentError):
    """The runtime stream failed mid-session.

    Attributes:
        elapsed_seconds: Time spent in the session before the failure
        cause: Underlying exception raised by the runtime
    """

    def __init__(
        self,
        message: str,
        elapsed_seconds: float = 0.0,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, user_message=handle_runtime_error(cause) if cause else None)
        self.elapsed_seconds = elapsed_seconds
        self.cause = cause


class SessionCancelledError(ContractAgentError):
    """The caller cancelled the session between two fragments."""
    pass


class SessionStateError(ContractAgentError):
    """An operation was attempted in the wrong session state."""
    pass


def handle_runtime_error(error: BaseException) -> str:
    """Convert runtime/transport errors to a short user-facing message.

    Args:
        error: Exception raised while consuming the runtime stream

    Returns:
        User-friendly error message
    """
    error_str = str(error).lower()

    if "rate_limit" in error_str or "429" in error_str:
        return "Runtime rate limit hit, try again later"

    if "timeout" in error_str or isinstance(error, TimeoutError):
        return "Runtime timed out while streaming the response"

    if "context_length" in error_str or "token" in error_str:
        return "Conversation is too long for the selected model"

    if "invalid_api_key" in error_str or "authentication" in error_str:
        return "Runtime credentials are invalid"

    if "overloaded" in error_str or "529" in error_str:
        return "Runtime is overloaded, try again later"

    return f"Runtime unavailable: {error}"


__all__ = [
    "ContractAgentError",
    "RegistryLoadError",
    "RegistryFrozenError",
    "TransportError",
    "SessionCancelledError",
    "SessionStateError",
    "handle_runtime_error",
]
