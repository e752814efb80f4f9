"""Validator - retroactive check of a FinalOutput against its output contract.

The runtime cannot see inside a worker, so the contract is enforced after the
stream ends, on what is externally observable: the response text, the elapsed
time and the artifact file. Every criterion is evaluated on every call so that
one report lists all violations; nothing here raises on bad input.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from contractAgent.contract.schema import DEFAULT_CONTRACT, OutputContract
from contractAgent.contract.tokens import estimate_tokens, max_chars_for_tokens
from contractAgent.utils.message_utils import count_words

from .report import (
    Criterion,
    CriterionResult,
    CriterionStatus,
    FailureKind,
    ValidationReport,
)

LOGGER = logging.getLogger(__name__)


def _parse_output(text: str) -> Tuple[Optional[Dict[str, Any]], CriterionResult]:
    try:
        data = json.loads(text.strip())
    except (json.JSONDecodeError, ValueError, RecursionError) as e:
        return None, CriterionResult(
            CriterionStatus.FAIL,
            f"Response is not valid JSON: {e}",
            FailureKind.MALFORMED_OUTPUT,
        )

    if not isinstance(data, dict):
        return None, CriterionResult(
            CriterionStatus.FAIL,
            f"Response is JSON but not an object (got {type(data).__name__})",
            FailureKind.MALFORMED_OUTPUT,
        )

    return data, CriterionResult(CriterionStatus.PASS, "Response is a JSON object")


def _check_size(text: str, contract: OutputContract) -> Tuple[int, CriterionResult]:
    tokens = estimate_tokens(text)
    detail = f"{len(text)} chars (~{tokens} tokens, ceiling {contract.max_output_tokens})"
    if tokens <= contract.max_output_tokens:
        return tokens, CriterionResult(CriterionStatus.PASS, detail)
    return tokens, CriterionResult(
        CriterionStatus.FAIL,
        f"{detail}; at most {max_chars_for_tokens(contract.max_output_tokens)} chars allowed",
        FailureKind.OUTPUT_TOO_LARGE,
    )


def _check_schema(
    data: Optional[Dict[str, Any]],
    contract: OutputContract,
) -> Tuple[Tuple[str, ...], CriterionResult]:
    if data is None:
        return (), CriterionResult(CriterionStatus.SKIPPED, "Output did not parse")

    required = contract.required_fields_for(data)
    missing = tuple(name for name in required if name not in data)
    if missing:
        return missing, CriterionResult(
            CriterionStatus.FAIL,
            f"Missing fields: {', '.join(missing)}",
            FailureKind.MISSING_FIELDS,
        )
    return (), CriterionResult(CriterionStatus.PASS, f"All {len(required)} required fields present")


def resolve_artifact_path(
    data: Optional[Dict[str, Any]],
    contract: OutputContract,
    artifact_path_override: Optional[str | Path] = None,
    base_dir: Optional[str | Path] = None,
) -> Optional[Path]:
    """Where the artifact for this output should be.

    Order: explicit override, the output's artifact field, then (success
    outputs only) the path derived from the topic slug. Relative paths are
    resolved against ``base_dir`` when given.
    """
    candidate: Optional[Path] = None

    if artifact_path_override:
        candidate = Path(artifact_path_override)
    elif data is not None:
        value = data.get(contract.artifact_field)
        if isinstance(value, str) and value.strip():
            candidate = Path(value.strip())
        elif not contract.is_partial(data):
            topic = data.get(contract.topic_field)
            if isinstance(topic, str) and topic.strip():
                candidate = contract.artifact_path_for_topic(topic)

    if candidate is not None and base_dir is not None and not candidate.is_absolute():
        candidate = Path(base_dir) / candidate
    return candidate


def _check_artifact(
    data: Optional[Dict[str, Any]],
    path: Optional[Path],
    contract: OutputContract,
) -> CriterionResult:
    if path is None:
        if data is None:
            return CriterionResult(CriterionStatus.SKIPPED, "Output did not parse")
        if contract.is_partial(data):
            return CriterionResult(CriterionStatus.SKIPPED, "Partial output saved no artifact")
        return CriterionResult(
            CriterionStatus.FAIL,
            f"Output names no artifact ('{contract.artifact_field}' absent)",
            FailureKind.ARTIFACT_MISSING,
        )

    try:
        exists = path.is_file()
    except (OSError, ValueError) as e:
        return CriterionResult(
            CriterionStatus.FAIL,
            f"Artifact not accessible: {path}: {e}",
            FailureKind.ARTIFACT_MISSING,
        )

    if exists:
        return CriterionResult(CriterionStatus.PASS, f"Artifact exists: {path}")
    return CriterionResult(
        CriterionStatus.FAIL,
        f"Artifact does not exist: {path}",
        FailureKind.ARTIFACT_MISSING,
    )


def _check_artifact_size(
    path: Optional[Path],
    exists: bool,
    contract: OutputContract,
) -> Tuple[Optional[int], CriterionResult]:
    if path is None or not exists:
        return None, CriterionResult(CriterionStatus.SKIPPED, "No artifact to measure")

    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        return None, CriterionResult(CriterionStatus.WARN, f"Artifact unreadable: {e}")

    words = count_words(content)
    band = f"expected {contract.artifact_min_words}-{contract.artifact_max_words}"
    if words < contract.artifact_min_words:
        return words, CriterionResult(CriterionStatus.WARN, f"{words} words, fewer than {band}")
    if words > contract.artifact_max_words:
        return words, CriterionResult(CriterionStatus.WARN, f"{words} words, more than {band}")
    return words, CriterionResult(CriterionStatus.PASS, f"{words} words ({band})")


def _check_duration(elapsed_seconds: float, contract: OutputContract) -> CriterionResult:
    detail = f"{elapsed_seconds:.2f}s (budget {contract.max_duration_seconds}s)"
    if elapsed_seconds > contract.max_duration_seconds:
        return CriterionResult(CriterionStatus.WARN, f"Over time budget: {detail}")
    return CriterionResult(CriterionStatus.PASS, detail)


def validate(
    final_output_text: Optional[str],
    elapsed_seconds: float,
    artifact_path_override: Optional[str | Path] = None,
    *,
    contract: OutputContract = DEFAULT_CONTRACT,
    base_dir: Optional[str | Path] = None,
) -> ValidationReport:
    """Check a FinalOutput against an output contract.

    Args:
        final_output_text: Concatenated assistant text of a completed session
        elapsed_seconds: Session duration
        artifact_path_override: Artifact location to check instead of the one the output names
        contract: Output contract (default: built-in defaults)
        base_dir: Directory relative artifact paths are resolved against (default: cwd)

    Returns:
        ValidationReport; overall_pass is True iff parseability, size,
        artifact existence and schema all pass
    """
    text = final_output_text or ""

    data, parse_result = _parse_output(text)
    tokens, size_result = _check_size(text, contract)
    artifact_path = resolve_artifact_path(data, contract, artifact_path_override, base_dir)
    artifact_result = _check_artifact(data, artifact_path, contract)
    word_count, artifact_size_result = _check_artifact_size(
        artifact_path, artifact_result.status == CriterionStatus.PASS, contract
    )
    missing, schema_result = _check_schema(data, contract)
    duration_result = _check_duration(elapsed_seconds, contract)

    report = ValidationReport(
        criteria={
            Criterion.PARSEABLE: parse_result,
            Criterion.SIZE: size_result,
            Criterion.ARTIFACT_EXISTS: artifact_result,
            Criterion.ARTIFACT_SIZE: artifact_size_result,
            Criterion.SCHEMA: schema_result,
            Criterion.DURATION: duration_result,
        },
        missing_fields=missing,
        estimated_tokens=tokens,
        output_status=data.get(contract.status_field) if data is not None else None,
        artifact_path=str(artifact_path) if artifact_path is not None else None,
        artifact_word_count=word_count,
        elapsed_seconds=elapsed_seconds,
        parsed=data,
    )

    LOGGER.debug(
        f"Validated output: pass={report.overall_pass} "
        f"failures={[f.value for f in report.failures]}"
    )
    return report


__all__ = ["validate", "resolve_artifact_path"]
