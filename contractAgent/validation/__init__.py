"""Output-contract validation."""

from .report import (
    BLOCKING_CRITERIA,
    Criterion,
    CriterionResult,
    CriterionStatus,
    FailureKind,
    ValidationReport,
)
from .validator import resolve_artifact_path, validate
from .harness import HarnessResult, contract_for, run_contract_check

__all__ = [
    "BLOCKING_CRITERIA",
    "Criterion",
    "CriterionResult",
    "CriterionStatus",
    "FailureKind",
    "ValidationReport",
    "resolve_artifact_path",
    "validate",
    "HarnessResult",
    "contract_for",
    "run_contract_check",
]
