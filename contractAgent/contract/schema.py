"""Output contract definition.

A persona's output contract is everything the validator checks after the
session ends: the FinalOutput field set, its size ceiling, where the artifact
lives and how big it should be, and the soft time budget.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from contractAgent.config.settings import Settings

SUCCESS_STATUS = "success"
PARTIAL_STATUS = "partial"

DEFAULT_REQUIRED_FIELDS: Tuple[str, ...] = (
    "status",
    "artifactPath",
    "topic",
    "sourcesCount",
    "wordCount",
    "keyFindings",
)

DEFAULT_PARTIAL_REQUIRED_FIELDS: Tuple[str, ...] = (
    "status",
    "topic",
    "message",
    "sourcesCount",
    "wordCount",
)

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(text: str, max_length: int = 80) -> str:
    """Turn a topic into a filesystem-safe slug.

    Examples:
        >>> slugify("AI code generation 2024-2025")
        'ai-code-generation-2024-2025'
    """
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = _SLUG_STRIP.sub("-", normalized.lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or "untitled"


@dataclass(frozen=True)
class OutputContract:
    """Schema, size ceiling, artifact requirement and time budget for FinalOutput.

    Attributes:
        required_fields: Fields a success FinalOutput must carry
        partial_required_fields: Fields a "partial" (timed out) FinalOutput must carry
        artifact_field: FinalOutput field naming the artifact path
        topic_field: FinalOutput field used to derive an artifact path when none is given
        status_field: FinalOutput field holding "success" / "partial"
        max_output_tokens: Ceiling for estimate_tokens(FinalOutput)
        artifact_min_words: Lower bound of the expected artifact size band
        artifact_max_words: Upper bound of the expected artifact size band
        max_duration_seconds: Soft wall-clock budget for the whole session
        artifact_dir: Directory used for topic-derived artifact paths
    """

    required_fields: Tuple[str, ...] = DEFAULT_REQUIRED_FIELDS
    partial_required_fields: Tuple[str, ...] = DEFAULT_PARTIAL_REQUIRED_FIELDS
    artifact_field: str = "artifactPath"
    topic_field: str = "topic"
    status_field: str = "status"
    max_output_tokens: int = 500
    artifact_min_words: int = 3000
    artifact_max_words: int = 6000
    max_duration_seconds: int = 600
    artifact_dir: str = "research-outputs"

    def __post_init__(self):
        if self.max_output_tokens < 1:
            raise ValueError("max_output_tokens must be positive")
        if self.artifact_min_words > self.artifact_max_words:
            raise ValueError("artifact_min_words must not exceed artifact_max_words")

    # ========== Queries ==========

    def is_partial(self, data: Dict[str, Any]) -> bool:
        """True if the parsed FinalOutput declares the degraded "partial" status."""
        return data.get(self.status_field) == PARTIAL_STATUS

    def required_fields_for(self, data: Dict[str, Any]) -> Tuple[str, ...]:
        """Required field set for the variant the parsed FinalOutput declares."""
        if self.is_partial(data):
            return self.partial_required_fields
        return self.required_fields

    def artifact_path_for_topic(self, topic: str) -> Path:
        """Derived artifact location: ``<artifact_dir>/<topic-slug>.md``."""
        return Path(self.artifact_dir) / f"{slugify(topic)}.md"

    def word_band_contains(self, word_count: int) -> bool:
        return self.artifact_min_words <= word_count <= self.artifact_max_words

    # ========== Construction ==========

    @classmethod
    def from_settings(cls, settings: "Settings") -> "OutputContract":
        """Default contract from ContractSettings."""
        contract = settings.contract
        return cls(
            max_output_tokens=contract.max_output_tokens,
            artifact_min_words=contract.artifact_min_words,
            artifact_max_words=contract.artifact_max_words,
            max_duration_seconds=contract.max_duration_seconds,
            artifact_dir=contract.artifact_dir,
        )

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        base: Optional["OutputContract"] = None,
    ) -> "OutputContract":
        """Apply a personas.yaml ``contract`` block on top of ``base``.

        Raises:
            ValueError: Unknown contract key or inconsistent values
        """
        base = base or cls()
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ValueError(f"Unknown contract fields: {', '.join(sorted(unknown))}")

        overrides: Dict[str, Any] = {}
        for key, value in config.items():
            if key in ("required_fields", "partial_required_fields"):
                value = tuple(value)
            overrides[key] = value
        return replace(base, **overrides)


DEFAULT_CONTRACT = OutputContract()


__all__ = [
    "SUCCESS_STATUS",
    "PARTIAL_STATUS",
    "DEFAULT_REQUIRED_FIELDS",
    "DEFAULT_PARTIAL_REQUIRED_FIELDS",
    "DEFAULT_CONTRACT",
    "OutputContract",
    "slugify",
]
