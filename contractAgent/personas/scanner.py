"""Persona scanner - builds the persona registry from personas.yaml

Responsibilities:
1. Read persona definitions from personas.yaml
2. Load large prompts from external prompt files (cached, read once)
3. Build Persona instances and register them in file order

A prompt file that cannot be read never aborts the scan: the persona is
registered as a placeholder whose prompt is a visible error string and whose
``load_error`` carries the typed RegistryLoadError.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from contractAgent.config.project_root import resolve_project_path
from contractAgent.config.settings import Settings, get_settings
from contractAgent.contract.schema import OutputContract
from contractAgent.utils.error_handler import RegistryLoadError

from .registry import PersonaRegistry
from .schema import KNOWN_TOOLS, ModelTier, Persona

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=64)
def _read_prompt_file(path: Path) -> str:
    # Failures raise and are therefore not cached
    return path.read_text(encoding="utf-8")


def load_prompt_file(resource: str, base_dir: Path | str) -> str:
    """Load a prompt from an external file.

    Args:
        resource: Path as written in personas.yaml (relative to base_dir unless absolute)
        base_dir: Directory containing personas.yaml

    Returns:
        Prompt text

    Raises:
        RegistryLoadError: The file is missing or unreadable
    """
    path = Path(resource)
    if not path.is_absolute():
        path = Path(base_dir) / path

    try:
        return _read_prompt_file(path.resolve())
    except (OSError, UnicodeDecodeError) as e:
        raise RegistryLoadError(resource, e) from e


def placeholder_persona(
    persona_id: str,
    description: str,
    error: RegistryLoadError,
    **kwargs: Any,
) -> Persona:
    """Persona standing in for one whose prompt failed to load."""
    return Persona(
        id=persona_id,
        description=description,
        prompt_template=error.user_message,
        prompt_source=error.resource,
        load_error=error,
        **kwargs,
    )


def parse_persona_from_config(
    persona_id: str,
    config: Dict[str, Any],
    base_dir: Path | str,
    default_contract: Optional[OutputContract] = None,
) -> Persona:
    """Parse one personas.yaml entry.

    Args:
        persona_id: Persona id (the YAML key)
        config: Persona configuration dictionary
        base_dir: Directory prompt_file paths are relative to
        default_contract: Base for a ``contract`` override block

    Returns:
        Persona instance (a placeholder if the prompt file cannot be loaded)

    Raises:
        KeyError: Missing description, or neither prompt nor prompt_file
        ValueError: Invalid model tier or contract block
    """
    description = config["description"]

    # ========== Tools ==========
    allowed_tools = None
    if config.get("tools") is not None:
        allowed_tools = frozenset(config["tools"])
        unknown = allowed_tools - KNOWN_TOOLS
        if unknown:
            LOGGER.warning(
                f"Persona '{persona_id}' allows tools outside the known vocabulary: "
                f"{', '.join(sorted(unknown))}"
            )

    # ========== Model ==========
    model_tier = ModelTier(config["model"]) if config.get("model") else None

    # ========== Contract ==========
    contract = None
    if config.get("contract"):
        contract = OutputContract.from_config(config["contract"], base=default_contract)

    # ========== Prompt ==========
    common = dict(allowed_tools=allowed_tools, model_tier=model_tier, contract=contract)

    if "prompt_file" in config:
        resource = config["prompt_file"]
        try:
            prompt = load_prompt_file(resource, base_dir)
        except RegistryLoadError as e:
            LOGGER.error(f"Failed to load prompt for persona '{persona_id}': {e}")
            return placeholder_persona(persona_id, description, e, **common)
        return Persona(
            id=persona_id,
            description=description,
            prompt_template=prompt,
            prompt_source=resource,
            **common,
        )

    if "prompt" not in config:
        raise KeyError(f"Persona '{persona_id}' needs either 'prompt' or 'prompt_file'")

    return Persona(
        id=persona_id,
        description=description,
        prompt_template=config["prompt"].strip(),
        **common,
    )


def load_personas_config(config_path: Path | str) -> Dict[str, Any]:
    """Load the personas.yaml configuration file.

    Raises:
        FileNotFoundError: The config file does not exist
        yaml.YAMLError: YAML parse error
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Persona config not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    LOGGER.debug(f"Loaded persona config from {config_path}")
    return config


def scan_personas_from_config(
    config_path: Path | str = None,
    settings: Settings = None,
    freeze: bool = True,
) -> PersonaRegistry:
    """Build a persona registry from personas.yaml.

    Args:
        config_path: personas.yaml path (default: PersonaSettings.personas_config)
        settings: Settings to take defaults from (default: get_settings())
        freeze: Freeze the registry after the scan

    Returns:
        Populated PersonaRegistry

    Raises:
        FileNotFoundError: The config file does not exist
        yaml.YAMLError: YAML parse error
    """
    settings = settings or get_settings()
    registry = PersonaRegistry()

    if config_path is None:
        config_path = settings.personas.personas_config
    config_path = resolve_project_path(config_path)

    config = load_personas_config(config_path)

    if not config.get("global", {}).get("enabled", True):
        LOGGER.info("Persona system is disabled in config")
        return registry.freeze() if freeze else registry

    default_contract = OutputContract.from_settings(settings)
    base_dir = config_path.parent

    for persona_id, persona_config in (config.get("personas") or {}).items():
        try:
            persona = parse_persona_from_config(
                persona_id, persona_config or {}, base_dir, default_contract
            )
            registry.register(persona)
        except (KeyError, ValueError, TypeError) as e:
            LOGGER.error(f"Failed to register persona '{persona_id}': {e}")

    stats = registry.get_stats()
    LOGGER.info(
        f"Persona scan complete: {stats['registered']} registered, "
        f"{stats['placeholders']} placeholders, "
        f"{stats['with_contract']} with output contract"
    )

    return registry.freeze() if freeze else registry


def load_default_persona_registry() -> PersonaRegistry:
    """Load the default persona registry (shortcut)."""
    return scan_personas_from_config()


__all__ = [
    "load_prompt_file",
    "placeholder_persona",
    "parse_persona_from_config",
    "load_personas_config",
    "scan_personas_from_config",
    "load_default_persona_registry",
]
