"""Persona Resolver - lookups on top of the registry.

Separates the built-in general-purpose worker (handled by the runtime itself)
from registered personas, and renders the persona list for a parent planning
prompt.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .registry import PersonaRegistry
from .schema import GENERAL_PURPOSE_DESCRIPTION, GENERAL_PURPOSE_ID, Persona

LOGGER = logging.getLogger(__name__)


class PersonaResolver:
    """Resolve persona ids against a (frozen) registry."""

    def __init__(self, registry: PersonaRegistry):
        self.registry = registry

    def is_registered(self, persona_id: str) -> bool:
        """True iff persona_id has a registry entry (False for the built-in id)."""
        return persona_id in self.registry

    def resolve(self, persona_id: str) -> Optional[Persona]:
        """Return the persona, or None to signal "use runtime default behavior".

        None is not an error: unknown ids and "general-purpose" both fall back
        to the runtime's own default worker.
        """
        persona = self.registry.get(persona_id)
        if persona is None:
            LOGGER.debug(f"No registered persona for '{persona_id}', using runtime default")
        return persona

    def available_ids(self) -> List[str]:
        return self.registry.list_ids()

    def describe_all(self) -> str:
        """Persona list for inclusion in a planning prompt.

        One ``- <id>: <description>`` line per available id, built-in first.
        The format is consumed verbatim by planning prompts; do not change it.
        """
        lines = []
        for persona_id in self.registry.list_ids():
            if persona_id == GENERAL_PURPOSE_ID:
                lines.append(f"- {GENERAL_PURPOSE_ID}: {GENERAL_PURPOSE_DESCRIPTION}")
                continue
            lines.append(self.registry.get(persona_id).describe())
        return "\n".join(lines)


__all__ = ["PersonaResolver"]
