"""Execution session - drives one persona invocation against the runtime.

States:
    IDLE -> CONFIGURING -> STREAMING -> COMPLETED
                                     -> FAILED (transport error or cancellation)

The session has no timeout of its own. It consumes the runtime stream until
the stream ends; the time budget is checked afterwards by the validator, and a
caller that wants to stop early passes a CancellationToken.
"""

from __future__ import annotations

import logging
import time
from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from contractAgent.config.settings import Settings, get_settings
from contractAgent.personas.resolver import PersonaResolver
from contractAgent.personas.schema import ModelTier, Persona
from contractAgent.utils.error_handler import (
    ContractAgentError,
    SessionCancelledError,
    SessionStateError,
    TransportError,
)
from contractAgent.utils.logging_utils import log_fragment, log_session_end, log_session_start

from .fragments import ResponseFragment, fragments_from_event
from .interfaces import CancellationToken, RuntimeClient, RuntimeInvocation

LOGGER = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Budget:
    """Per-invocation budget handed to the persona and checked afterwards."""

    max_duration_seconds: int = 600
    max_response_tokens_approx: int = 500


@dataclass(frozen=True)
class ExecutionRequest:
    """One invocation of a persona. Created per call, consumed once."""

    persona_id: str
    user_instruction: str
    budget: Budget = field(default_factory=Budget)


@dataclass
class SessionResult:
    """Outcome of a finished session.

    Attributes:
        state: COMPLETED or FAILED
        final_output: Concatenated assistant text; None unless COMPLETED
        elapsed_seconds: Wall-clock time from configuration to end of stream
        fragment_count: Number of fragments observed (all roles)
        error: TransportError or SessionCancelledError when FAILED
        partial_output: Assistant text accumulated before a failure (diagnostics only)
        persona: Resolved persona; None when the runtime default was used
    """

    state: SessionState
    final_output: Optional[str]
    elapsed_seconds: float
    fragment_count: int = 0
    error: Optional[ContractAgentError] = None
    partial_output: str = ""
    persona: Optional[Persona] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SessionState.COMPLETED


class ExecutionSession:
    """Drive one ExecutionRequest through the runtime.

    Args:
        request: What to run
        resolver: Persona resolver over the (frozen) registry
        runtime: Runtime client producing the event stream
        settings: Runtime defaults (model, permission mode, cwd)
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        request: ExecutionRequest,
        resolver: PersonaResolver,
        runtime: RuntimeClient,
        settings: Settings = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.request = request
        self.resolver = resolver
        self.runtime = runtime
        self.settings = settings or get_settings()
        self._clock = clock

        self.state = SessionState.IDLE
        self.persona: Optional[Persona] = None
        self.invocation: Optional[RuntimeInvocation] = None
        self.fragments: List[ResponseFragment] = []
        self._output_parts: List[str] = []
        self._started_at: Optional[float] = None
        self.result: Optional[SessionResult] = None

    # ========== Configuring ==========

    def configure(self) -> RuntimeInvocation:
        """Bind the request to its persona and build the runtime invocation.

        Raises:
            SessionStateError: The session is not IDLE
        """
        if self.state != SessionState.IDLE:
            raise SessionStateError(f"Cannot configure session in state {self.state.value}")

        self.state = SessionState.CONFIGURING
        self.persona = self.resolver.resolve(self.request.persona_id)
        runtime_settings = self.settings.runtime

        if self.persona is None:
            invocation = RuntimeInvocation(
                instruction_text=self.request.user_instruction,
                model=runtime_settings.model,
                permission_mode=runtime_settings.permission_mode,
                working_directory=runtime_settings.working_dir,
            )
        else:
            if self.persona.is_placeholder:
                LOGGER.warning(
                    f"Persona '{self.persona.id}' is a placeholder: {self.persona.load_error}"
                )
            model = runtime_settings.model
            # INHERIT keeps the configured model
            if self.persona.model_tier not in (None, ModelTier.INHERIT):
                model = self.persona.model_tier.value
            invocation = RuntimeInvocation(
                instruction_text=self.request.user_instruction,
                system_prompt=self.persona.prompt_template,
                allowed_tools=self.persona.allowed_tools,
                model=model,
                permission_mode=runtime_settings.permission_mode,
                working_directory=runtime_settings.working_dir,
            )

        self.invocation = invocation
        self._started_at = self._clock()
        log_session_start(LOGGER, self.request, persona_found=self.persona is not None)
        return invocation

    # ========== Streaming ==========

    async def run(self, cancel_token: Optional[CancellationToken] = None) -> SessionResult:
        """Run the session to completion.

        Transport errors and cancellation end the session in FAILED; they are
        reported in the result, not raised.

        Args:
            cancel_token: Checked once per fragment

        Returns:
            SessionResult

        Raises:
            SessionStateError: The session has already run
        """
        if self.state == SessionState.IDLE:
            self.configure()
        elif self.state != SessionState.CONFIGURING:
            raise SessionStateError(f"Cannot run session in state {self.state.value}")

        self.state = SessionState.STREAMING
        try:
            if cancel_token is not None and cancel_token.cancelled:
                raise SessionCancelledError(
                    f"Session for '{self.request.persona_id}' cancelled before streaming: "
                    f"{cancel_token.reason}"
                )
            async with aclosing(self.runtime.stream(self.invocation)) as stream:
                async for event in stream:
                    if cancel_token is not None and cancel_token.cancelled:
                        raise SessionCancelledError(
                            f"Session for '{self.request.persona_id}' cancelled: {cancel_token.reason}"
                        )
                    for fragment in fragments_from_event(event):
                        self._consume(fragment)
        except SessionCancelledError as e:
            return self._finish(SessionState.FAILED, error=e)
        except Exception as e:
            elapsed = self._elapsed()
            error = TransportError(
                f"Runtime stream failed for '{self.request.persona_id}' after {elapsed:.2f}s: {e}",
                elapsed_seconds=elapsed,
                cause=e,
            )
            return self._finish(SessionState.FAILED, error=error)

        return self._finish(SessionState.COMPLETED)

    def _consume(self, fragment: ResponseFragment) -> None:
        self.fragments.append(fragment)
        accumulated = fragment.is_assistant_text
        if accumulated:
            self._output_parts.append(fragment.text)
        log_fragment(LOGGER, fragment, accumulated)

    # ========== Completion ==========

    def _elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def _finish(
        self,
        state: SessionState,
        error: Optional[ContractAgentError] = None,
    ) -> SessionResult:
        self.state = state
        text = "".join(self._output_parts)
        self.result = SessionResult(
            state=state,
            final_output=text if state == SessionState.COMPLETED else None,
            elapsed_seconds=self._elapsed(),
            fragment_count=len(self.fragments),
            error=error,
            partial_output=text,
            persona=self.persona,
        )
        log_session_end(
            LOGGER,
            self.result,
            max_length=self.settings.observability.log_output_max_length,
        )
        return self.result


async def run_session(
    request: ExecutionRequest,
    resolver: PersonaResolver,
    runtime: RuntimeClient,
    settings: Settings = None,
    cancel_token: Optional[CancellationToken] = None,
) -> SessionResult:
    """Create and run a session in one call."""
    session = ExecutionSession(request, resolver, runtime, settings=settings)
    return await session.run(cancel_token=cancel_token)


__all__ = [
    "SessionState",
    "Budget",
    "ExecutionRequest",
    "SessionResult",
    "ExecutionSession",
    "run_session",
]
