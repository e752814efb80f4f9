"""Typed views of the FinalOutput wire shapes.

The validator works on plain dicts so that it can report every problem at
once; these models are for callers that want a typed summary after an output
has passed validation.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _FinalOutputBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    topic: str
    sources_count: int = Field(alias="sourcesCount", ge=0)
    word_count: int = Field(alias="wordCount", ge=0)

    def to_json(self) -> str:
        """Serialize with the camelCase wire names."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class SuccessOutput(_FinalOutputBase):
    """Completed run: artifact written, key findings summarized."""

    status: Literal["success"] = "success"
    artifact_path: str = Field(alias="artifactPath")
    key_findings: List[str] = Field(default_factory=list, alias="keyFindings")


class PartialOutput(_FinalOutputBase):
    """Run hit its time budget and reported whatever it completed."""

    status: Literal["partial"] = "partial"
    artifact_path: Optional[str] = Field(default=None, alias="artifactPath")
    message: str


FinalOutput = Union[SuccessOutput, PartialOutput]


def parse_final_output(data: Dict[str, Any]) -> FinalOutput:
    """Build the typed variant selected by ``status``.

    Raises:
        pydantic.ValidationError: The data does not match the selected variant
    """
    if data.get("status") == "partial":
        return PartialOutput.model_validate(data)
    return SuccessOutput.model_validate(data)


__all__ = ["SuccessOutput", "PartialOutput", "FinalOutput", "parse_final_output"]
