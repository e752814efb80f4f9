"""Output contract: what a persona's final response must look like."""

from .schema import (
    DEFAULT_CONTRACT,
    DEFAULT_PARTIAL_REQUIRED_FIELDS,
    DEFAULT_REQUIRED_FIELDS,
    PARTIAL_STATUS,
    SUCCESS_STATUS,
    OutputContract,
    slugify,
)
from .tokens import estimate_tokens, max_chars_for_tokens
from .models import FinalOutput, PartialOutput, SuccessOutput, parse_final_output

__all__ = [
    "DEFAULT_CONTRACT",
    "DEFAULT_PARTIAL_REQUIRED_FIELDS",
    "DEFAULT_REQUIRED_FIELDS",
    "PARTIAL_STATUS",
    "SUCCESS_STATUS",
    "OutputContract",
    "slugify",
    "estimate_tokens",
    "max_chars_for_tokens",
    "FinalOutput",
    "PartialOutput",
    "SuccessOutput",
    "parse_final_output",
]
