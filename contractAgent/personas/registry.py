"""Persona Registry - keyed table of persona definitions.

Populated once at startup (see scanner.py) and frozen; after that it is only
read, so concurrent sessions can share it without locking.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from contractAgent.utils.error_handler import RegistryFrozenError, RegistryLoadError

from .schema import GENERAL_PURPOSE_ID, Persona

LOGGER = logging.getLogger(__name__)


class PersonaRegistry:
    """Persona registry.

    - register(persona): add or overwrite by id (last write wins)
    - get(persona_id): lookup, None when absent
    - list_ids(): built-in "general-purpose" first, then registration order
    - freeze(): reject further registration
    """

    def __init__(self):
        self._personas: Dict[str, Persona] = {}  # dicts keep insertion order
        self._frozen = False

    # ========== Registration Methods ==========

    def register(self, persona: Persona) -> None:
        """Register a persona, overwriting any entry with the same id.

        Args:
            persona: Persona definition

        Raises:
            RegistryFrozenError: The registry has been frozen
            ValueError: The id is the reserved built-in "general-purpose"
        """
        if persona.id == GENERAL_PURPOSE_ID:
            raise ValueError(f"Persona id '{GENERAL_PURPOSE_ID}' is reserved for the built-in worker")
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register persona '{persona.id}': registry is frozen"
            )

        if persona.id in self._personas:
            LOGGER.debug(f"Overwriting persona: {persona.id}")
        self._personas[persona.id] = persona

        if persona.is_placeholder:
            LOGGER.warning(f"Registered placeholder persona: {persona.id} ({persona.load_error})")
        else:
            LOGGER.debug(f"Registered persona: {persona.id}")

    def freeze(self) -> "PersonaRegistry":
        """Make the registry read-only. Returns self for chaining."""
        self._frozen = True
        LOGGER.info(f"Persona registry frozen with {len(self._personas)} personas")
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ========== Query Methods ==========

    def get(self, persona_id: str) -> Optional[Persona]:
        """Get a persona by id.

        Returns:
            Persona, or None if not registered ((always None for the reserved "general-purpose"))
        """
        return self._personas.get(persona_id)

    def list_ids(self) -> List[str]:
        """All selectable persona ids, built-in first.

        The built-in id has no registry entry; the runtime handles it itself.
        """
        return [GENERAL_PURPOSE_ID] + list(self._personas)

    def personas(self) -> Mapping[str, Persona]:
        """Read-only view of registered personas in registration order."""
        return MappingProxyType(self._personas)

    def load_errors(self) -> Dict[str, RegistryLoadError]:
        """Prompt load failures of placeholder personas, keyed by persona id."""
        return {
            persona_id: persona.load_error
            for persona_id, persona in self._personas.items()
            if persona.load_error is not None
        }

    def __contains__(self, persona_id: object) -> bool:
        return persona_id in self._personas

    def __len__(self) -> int:
        return len(self._personas)

    def __iter__(self) -> Iterator[Persona]:
        return iter(list(self._personas.values()))

    # ========== Statistics ==========

    def get_stats(self) -> Dict[str, int]:
        """Get registry statistics.

        Returns:
            Statistics dictionary
        """
        return {
            "registered": len(self._personas),
            "placeholders": len(self.load_errors()),
            "tool_restricted": sum(1 for p in self._personas.values() if p.restricts_tools),
            "with_contract": sum(1 for p in self._personas.values() if p.contract is not None),
        }


__all__ = ["PersonaRegistry"]
