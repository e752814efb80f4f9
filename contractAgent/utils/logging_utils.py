"""Logging utilities for contractAgent."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from contractAgent.runtime.fragments import ResponseFragment
    from contractAgent.runtime.session import ExecutionRequest, SessionResult
    from contractAgent.validation.report import ValidationReport


def setup_logging(
    level: int = logging.INFO,
    log_dir: Path | str = "logs",
    to_file: bool = True,
) -> logging.Logger:
    """Setup logging configuration for contractAgent.

    Args:
        level: Console logging level is fixed to WARNING; this controls the file handler
        log_dir: Directory for timestamped log files
        to_file: Disable to log to the console only

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("contractAgent")
    logger.setLevel(logging.DEBUG)  # Capture all child logs
    logger.propagate = False

    logger.handlers = []

    if to_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"contractagent_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("contractAgent logging started")
    logger.info("=" * 80)

    return logger


def _preview(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "... (truncated)"


def log_session_start(logger: logging.Logger, request: "ExecutionRequest", persona_found: bool) -> None:
    """Log the start of an execution session.

    Args:
        logger: Logger instance
        request: Request being executed
        persona_found: False when the session falls back to runtime defaults
    """
    logger.info("=" * 80)
    logger.info(f"Session start: persona={request.persona_id}")
    if not persona_found:
        logger.info("  No registered persona, using runtime default behavior")
    logger.info(f"  Instruction: {_preview(request.user_instruction, 100)}")
    logger.info(
        f"  Budget: {request.budget.max_duration_seconds}s, "
        f"~{request.budget.max_response_tokens_approx} tokens"
    )
    logger.info("=" * 80)


def log_fragment(logger: logging.Logger, fragment: "ResponseFragment", accumulated: bool) -> None:
    """Log one streamed fragment at debug level."""
    marker = "+" if accumulated else " "
    text = fragment.text or ""
    logger.debug(f"  [{marker}] {fragment.role.value}/{fragment.kind}: {_preview(text, 100)}")


def log_session_end(logger: logging.Logger, result: "SessionResult", max_length: int = 500) -> None:
    """Log the outcome of an execution session.

    Args:
        logger: Logger instance
        result: Finished session result
        max_length: Maximum number of output characters to log
    """
    logger.info(
        f"Session end: state={result.state.value} "
        f"elapsed={result.elapsed_seconds:.2f}s fragments={result.fragment_count}"
    )
    if result.error is not None:
        logger.error(f"  Error: {type(result.error).__name__}: {result.error}")
    if result.final_output is not None:
        logger.debug(f"  Output: {_preview(result.final_output, max_length)}")


def log_validation_report(
    logger: logging.Logger,
    report: "ValidationReport",
    persona_id: Optional[str] = None,
) -> None:
    """Log every criterion of a validation report.

    Args:
        logger: Logger instance
        report: Validation report
        persona_id: Persona the output belongs to (for context)
    """
    logger.info(f"\n{'='*80}")
    logger.info(f"Validation results{f' for {persona_id}' if persona_id else ''}:")
    for criterion, result in report.criteria.items():
        status = result.status.value.upper()
        line = f"  {status:<7} {criterion.value}: {result.message}"
        if result.status.value == "fail":
            logger.warning(line)
        else:
            logger.info(line)
    verdict = "PASSED" if report.overall_pass else "FAILED"
    logger.info(f"  → Overall: {verdict}")
    if report.failures:
        logger.info(f"  → Failures: {', '.join(kind.value for kind in report.failures)}")
    logger.info(f"{'='*80}\n")
