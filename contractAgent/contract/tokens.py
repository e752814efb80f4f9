"""Token-size heuristic for FinalOutput.

Kept in its own module so a real tokenizer can replace it without touching
the validator.
"""

from __future__ import annotations

import math

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Approximate token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def max_chars_for_tokens(max_tokens: int) -> int:
    """Largest text length whose estimate stays within ``max_tokens``."""
    return max_tokens * CHARS_PER_TOKEN


__all__ = ["CHARS_PER_TOKEN", "estimate_tokens", "max_chars_for_tokens"]
