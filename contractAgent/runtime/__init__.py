"""Execution sessions and runtime adapters."""

from .interfaces import CancellationToken, RuntimeClient, RuntimeInvocation
from .fragments import FragmentRole, ResponseFragment, fragments_from_event
from .session import (
    Budget,
    ExecutionRequest,
    ExecutionSession,
    SessionResult,
    SessionState,
    run_session,
)
from .graph_runtime import LangGraphRuntime

__all__ = [
    "CancellationToken",
    "RuntimeClient",
    "RuntimeInvocation",
    "FragmentRole",
    "ResponseFragment",
    "fragments_from_event",
    "Budget",
    "ExecutionRequest",
    "ExecutionSession",
    "SessionResult",
    "SessionState",
    "run_session",
    "LangGraphRuntime",
]
