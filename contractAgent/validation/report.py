"""Validation report types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class FailureKind(str, Enum):
    """Hard contract violations; each one fails the run."""
    MALFORMED_OUTPUT = "MalformedOutput"
    OUTPUT_TOO_LARGE = "OutputTooLarge"
    ARTIFACT_MISSING = "ArtifactMissing"
    MISSING_FIELDS = "MissingFields"


class CriterionStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"  # Flagged, never fails the run
    SKIPPED = "skipped"  # Not evaluable (e.g. output did not parse)


class Criterion(str, Enum):
    PARSEABLE = "parseable"
    SIZE = "size"
    ARTIFACT_EXISTS = "artifact_exists"
    ARTIFACT_SIZE = "artifact_size"
    SCHEMA = "schema"
    DURATION = "duration"


# Criteria whose failure fails the run
BLOCKING_CRITERIA: Tuple[Criterion, ...] = (
    Criterion.PARSEABLE,
    Criterion.SIZE,
    Criterion.ARTIFACT_EXISTS,
    Criterion.SCHEMA,
)


@dataclass(frozen=True)
class CriterionResult:
    status: CriterionStatus
    message: str = ""
    failure: Optional[FailureKind] = None

    @property
    def passed(self) -> bool:
        return self.status != CriterionStatus.FAIL


@dataclass(frozen=True)
class ValidationReport:
    """Result of checking one FinalOutput against an output contract.

    Attributes:
        criteria: Per-criterion results, in evaluation order
        missing_fields: Every required field absent from the output
        estimated_tokens: estimate_tokens(FinalOutput)
        output_status: Value of the output's status field, if parsed
        artifact_path: Path the artifact check looked at
        artifact_word_count: Artifact word count, if it was read
        elapsed_seconds: Session duration the report was computed for
        parsed: Parsed FinalOutput object, if it parsed
    """

    criteria: Dict[Criterion, CriterionResult]
    missing_fields: Tuple[str, ...] = ()
    estimated_tokens: int = 0
    output_status: Optional[str] = None
    artifact_path: Optional[str] = None
    artifact_word_count: Optional[int] = None
    elapsed_seconds: float = 0.0
    parsed: Optional[Dict[str, Any]] = field(default=None, compare=False)

    @property
    def overall_pass(self) -> bool:
        """Pass iff no blocking criterion failed; warnings never count."""
        return all(
            self.criteria[criterion].passed
            for criterion in BLOCKING_CRITERIA
            if criterion in self.criteria
        )

    @property
    def failures(self) -> List[FailureKind]:
        """Failure kinds in evaluation order."""
        return [
            result.failure
            for result in self.criteria.values()
            if result.status == CriterionStatus.FAIL and result.failure is not None
        ]

    @property
    def warnings(self) -> List[str]:
        return [
            f"{criterion.value}: {result.message}"
            for criterion, result in self.criteria.items()
            if result.status == CriterionStatus.WARN
        ]

    def status_of(self, criterion: Criterion) -> CriterionStatus:
        return self.criteria[criterion].status

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form: criterion -> status, plus the overall verdict."""
        return {
            "criteria": {c.value: r.status.value for c, r in self.criteria.items()},
            "overallPass": self.overall_pass,
            "failures": [f.value for f in self.failures],
            "warnings": self.warnings,
            "missingFields": list(self.missing_fields),
            "estimatedTokens": self.estimated_tokens,
            "artifactPath": self.artifact_path,
            "artifactWordCount": self.artifact_word_count,
        }


__all__ = [
    "FailureKind",
    "CriterionStatus",
    "Criterion",
    "BLOCKING_CRITERIA",
    "CriterionResult",
    "ValidationReport",
]
