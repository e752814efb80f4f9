"""Top-level package exports for contractAgent."""

from .personas import PersonaRegistry, PersonaResolver, scan_personas_from_config
from .runtime import ExecutionRequest, ExecutionSession, LangGraphRuntime
from .validation import run_contract_check, validate

__all__ = [
    "PersonaRegistry",
    "PersonaResolver",
    "scan_personas_from_config",
    "ExecutionRequest",
    "ExecutionSession",
    "LangGraphRuntime",
    "run_contract_check",
    "validate",
]
