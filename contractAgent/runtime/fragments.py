"""Response fragments - normalized units of streamed runtime output.

The runtime may hand us langchain messages (AIMessage, ToolMessage, ...) or
SDK-style events ``{"role": ..., "content": [...]}``. Both are flattened into
one ResponseFragment per content block so the session only has to look at
``role`` and ``kind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional

from langchain_core.messages import BaseMessage

from contractAgent.utils.message_utils import _stringify_content


class FragmentRole(str, Enum):
    ASSISTANT = "assistant"
    TOOL = "tool"
    SYSTEM = "system"
    USER = "user"


# langchain message.type -> role
_MESSAGE_TYPE_ROLES = {
    "ai": FragmentRole.ASSISTANT,
    "AIMessageChunk": FragmentRole.ASSISTANT,
    "tool": FragmentRole.TOOL,
    "system": FragmentRole.SYSTEM,
    "human": FragmentRole.USER,
}

TEXT_KIND = "text"


@dataclass(frozen=True)
class ResponseFragment:
    """One content block of a streamed message.

    Attributes:
        role: Author of the message the block belongs to
        kind: Block type ("text", "tool_use", "tool_result", ...)
        text: Block text, when the block carries any
        payload: The raw block
    """

    role: FragmentRole
    kind: str
    text: Optional[str] = None
    payload: Any = None

    @property
    def is_assistant_text(self) -> bool:
        """Only these fragments make up the FinalOutput."""
        return self.role == FragmentRole.ASSISTANT and self.kind == TEXT_KIND and self.text is not None


def _role_of(raw_role: Any) -> FragmentRole:
    if isinstance(raw_role, FragmentRole):
        return raw_role
    raw_role = str(raw_role)
    if raw_role in _MESSAGE_TYPE_ROLES:
        return _MESSAGE_TYPE_ROLES[raw_role]
    try:
        return FragmentRole(raw_role)
    except ValueError:
        return FragmentRole.SYSTEM


def _blocks_to_fragments(role: FragmentRole, content: Any) -> List[ResponseFragment]:
    if content is None:
        return []

    if isinstance(content, str):
        if not content:
            return []
        return [ResponseFragment(role=role, kind=TEXT_KIND, text=content, payload=content)]

    if not isinstance(content, list):
        content = [content]

    fragments = []
    for block in content:
        if isinstance(block, str):
            fragments.append(ResponseFragment(role=role, kind=TEXT_KIND, text=block, payload=block))
        elif isinstance(block, Mapping):
            kind = str(block.get("type", TEXT_KIND))
            text = block.get("text")
            fragments.append(ResponseFragment(
                role=role,
                kind=kind,
                text=str(text) if text is not None else None,
                payload=block,
            ))
        else:
            kind = getattr(block, "type", TEXT_KIND)
            text = getattr(block, "text", None)
            fragments.append(ResponseFragment(role=role, kind=str(kind), text=text, payload=block))
    return fragments


def fragments_from_event(event: Any) -> List[ResponseFragment]:
    """Normalize one runtime event into fragments.

    Args:
        event: langchain BaseMessage, mapping with role/content, or object with
            role/content attributes

    Returns:
        One fragment per content block (empty list for events without content)
    """
    if isinstance(event, ResponseFragment):
        return [event]

    if isinstance(event, BaseMessage):
        role = _role_of(event.type)
        fragments = _blocks_to_fragments(role, event.content)
        # Tool calls on AI messages carry no text but are still observed
        for call in getattr(event, "tool_calls", None) or []:
            fragments.append(ResponseFragment(role=role, kind="tool_use", payload=call))
        return fragments

    if isinstance(event, Mapping):
        role = _role_of(event.get("role") or event.get("type", FragmentRole.SYSTEM.value))
        return _blocks_to_fragments(role, event.get("content"))

    if hasattr(event, "role"):
        return _blocks_to_fragments(_role_of(event.role), getattr(event, "content", None))

    return [ResponseFragment(
        role=FragmentRole.SYSTEM,
        kind="unknown",
        text=_stringify_content(event),
        payload=event,
    )]


__all__ = ["FragmentRole", "ResponseFragment", "TEXT_KIND", "fragments_from_event"]
