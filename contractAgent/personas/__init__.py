"""Persona registry, resolver and scanner."""

from .schema import (
    GENERAL_PURPOSE_DESCRIPTION,
    GENERAL_PURPOSE_ID,
    KNOWN_TOOLS,
    ModelTier,
    Persona,
)
from .registry import PersonaRegistry
from .resolver import PersonaResolver
from .scanner import load_default_persona_registry, scan_personas_from_config

__all__ = [
    "GENERAL_PURPOSE_DESCRIPTION",
    "GENERAL_PURPOSE_ID",
    "KNOWN_TOOLS",
    "ModelTier",
    "Persona",
    "PersonaRegistry",
    "PersonaResolver",
    "load_default_persona_registry",
    "scan_personas_from_config",
]
