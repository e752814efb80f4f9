"""Runtime adapter for compiled LangGraph applications.

Runs the persona in an isolated thread (its own context id), seeds the state
with the persona prompt and the instruction, and yields every message the
graph appends after those, in order.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, AsyncGenerator, Dict, List, Optional

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from .interfaces import RuntimeInvocation

LOGGER = logging.getLogger(__name__)


class LangGraphRuntime:
    """Stream a compiled LangGraph app as a session runtime.

    Args:
        app_graph: Compiled graph exposing ``astream(state, config, stream_mode)``
        state_defaults: Extra keys merged into the initial state (e.g. "max_loops")
    """

    def __init__(self, app_graph: Any, state_defaults: Optional[Dict[str, Any]] = None):
        self.app_graph = app_graph
        self.state_defaults = dict(state_defaults or {})

    def build_initial_state(self, invocation: RuntimeInvocation, context_id: str) -> Dict[str, Any]:
        """Initial graph state for one invocation."""
        messages: List[BaseMessage] = []
        if invocation.system_prompt:
            messages.append(SystemMessage(content=invocation.system_prompt))
        messages.append(HumanMessage(content=invocation.instruction_text))

        state = {
            **self.state_defaults,
            "messages": messages,
            "allowed_tools": sorted(invocation.allowed_tools) if invocation.allowed_tools is not None else [],
            "tools_restricted": invocation.allowed_tools is not None,
            "model_pref": invocation.model,
            "permission_mode": invocation.permission_mode,
            "workspace_path": invocation.working_directory,
            "context_id": context_id,
            "thread_id": context_id,
        }
        return state

    async def stream(self, invocation: RuntimeInvocation) -> AsyncGenerator[BaseMessage, None]:
        """Yield each new message produced by the graph."""
        context_id = f"persona-{uuid.uuid4().hex[:8]}"
        state = self.build_initial_state(invocation, context_id)
        config = {"configurable": {"thread_id": context_id}}

        message_count = len(state["messages"])
        LOGGER.info(f"[{context_id}] Starting graph execution")

        async for state_snapshot in self.app_graph.astream(
            state,
            config=config,
            stream_mode="values",
        ):
            current_messages = state_snapshot.get("messages", [])
            for idx in range(message_count, len(current_messages)):
                yield current_messages[idx]
            message_count = max(message_count, len(current_messages))

        LOGGER.info(f"[{context_id}] Graph execution completed")


__all__ = ["LangGraphRuntime"]
