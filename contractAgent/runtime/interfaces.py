"""Interfaces for the external agent runtime."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncGenerator, FrozenSet, Optional, Protocol


@dataclass(frozen=True)
class RuntimeInvocation:
    """Everything the runtime needs to start one worker.

    Attributes:
        instruction_text: The user instruction for this session
        system_prompt: Persona prompt; None lets the runtime use its default worker
        allowed_tools: Tool restriction; None means unrestricted
        model: Model selector (persona tier or configured model id)
        permission_mode: Runtime permission mode (e.g. "bypassPermissions")
        working_directory: Directory the worker operates in
    """

    instruction_text: str
    system_prompt: Optional[str] = None
    allowed_tools: Optional[FrozenSet[str]] = None
    model: Optional[str] = None
    permission_mode: str = "bypassPermissions"
    working_directory: Optional[str] = None


class RuntimeClient(Protocol):
    """Runtime that streams message events for one invocation.

    Events are langchain ``BaseMessage`` objects, or mappings/objects with
    ``role`` and ``content`` (a string or a list of ``{type, text?}`` blocks).
    The session closes the generator when it stops consuming it.
    """

    def stream(self, invocation: RuntimeInvocation) -> AsyncGenerator[Any, None]:
        ...


class CancellationToken:
    """Caller-side cancellation flag, checked by a session between fragments."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


__all__ = ["RuntimeInvocation", "RuntimeClient", "CancellationToken"]
