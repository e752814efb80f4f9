"""Utilities for contractAgent."""

from .logging_utils import (
    log_fragment,
    log_session_end,
    log_session_start,
    log_validation_report,
    setup_logging,
)
from .message_utils import _stringify_content, count_words
from .error_handler import (
    handle_runtime_error,
    ContractAgentError,
    RegistryLoadError,
    RegistryFrozenError,
    TransportError,
    SessionCancelledError,
    SessionStateError,
)

__all__ = [
    "setup_logging",
    "log_session_start",
    "log_fragment",
    "log_session_end",
    "log_validation_report",
    "_stringify_content",
    "count_words",
    "handle_runtime_error",
    "ContractAgentError",
    "RegistryLoadError",
    "RegistryFrozenError",
    "TransportError",
    "SessionCancelledError",
    "SessionStateError",
]
