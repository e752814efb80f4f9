"""Persona schema.

A persona is a named behavioral contract: prompt, tool restriction, model tier
and (optionally) the output contract its final response is validated against.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from contractAgent.contract.schema import OutputContract
    from contractAgent.utils.error_handler import RegistryLoadError

GENERAL_PURPOSE_ID = "general-purpose"
GENERAL_PURPOSE_DESCRIPTION = "General-purpose agent for complex multi-step tasks"

# Tool vocabulary owned by the execution runtime
KNOWN_TOOLS: FrozenSet[str] = frozenset({
    "Read",
    "Write",
    "Edit",
    "Grep",
    "Glob",
    "Bash",
    "WebSearch",
    "WebFetch",
    "Task",
    "TodoWrite",
})


class ModelTier(str, Enum):
    """Model selector understood by the runtime"""
    SONNET = "sonnet"
    OPUS = "opus"
    HAIKU = "haiku"
    INHERIT = "inherit"  # Use the parent session's model


@dataclass(frozen=True)
class Persona:
    """A selectable worker persona.

    Attributes:
        id: Unique key (e.g. "research-agent-stateful")
        description: One-line summary for the planning prompt
        prompt_template: Instruction set handed to the runtime as system prompt
        allowed_tools: Tool restriction; None means all tools
        model_tier: Model selector; None means runtime default
        contract: Output contract; None means the configured default
        prompt_source: Prompt file the template came from, if any
        load_error: Set on placeholder personas whose prompt failed to load
    """

    id: str
    description: str
    prompt_template: str
    allowed_tools: Optional[FrozenSet[str]] = None
    model_tier: Optional[ModelTier] = None
    contract: Optional["OutputContract"] = None
    prompt_source: Optional[str] = None
    load_error: Optional["RegistryLoadError"] = None

    @property
    def is_placeholder(self) -> bool:
        """True if this persona stands in for one whose prompt could not be loaded."""
        return self.load_error is not None

    @property
    def restricts_tools(self) -> bool:
        return self.allowed_tools is not None

    def allows_tool(self, tool_name: str) -> bool:
        return self.allowed_tools is None or tool_name in self.allowed_tools

    def describe(self) -> str:
        """Planning-prompt line for this persona."""
        return f"- {self.id}: {self.description}"


__all__ = [
    "GENERAL_PURPOSE_ID",
    "GENERAL_PURPOSE_DESCRIPTION",
    "KNOWN_TOOLS",
    "ModelTier",
    "Persona",
]
