"""Deterministic analysis of a single string.

Everything here is a pure function of the input text except for the
``created_at`` timestamp taken by :func:`analyze_string`.
"""
from collections import Counter
from datetime import datetime, timezone
from hashlib import new as new_hash
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict

from app.errors import TypeMismatch

# Stored ids are derived from these three constants. Changing any of them
# changes every existing id.
HASH_ALGORITHM = "sha256"
HASH_ENCODING = "utf-8"
# Lone surrogates cannot be encoded as strict UTF-8; hash their raw code units
# so every Python str still has an id.
HASH_ENCODING_ERRORS = "surrogatepass"


class AnalysisRecord(BaseModel):
    """Computed properties of one string. Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    id: str
    value: str
    length: int
    is_palindrome: bool
    word_count: int
    unique_character_count: int
    character_frequency: Dict[str, int]
    distinct_characters: Tuple[str, ...]
    created_at: datetime


# ---------------------------------------------------------------------------
# Text metrics
# ---------------------------------------------------------------------------
def code_point_length(value: str) -> int:
    return len(value)


def is_palindrome(value: str) -> bool:
    """Case-insensitive palindrome test; spaces and punctuation count."""
    folded = value.casefold()
    return folded == folded[::-1]


def count_words(value: str) -> int:
    # str.split() with no separator drops leading/trailing whitespace and
    # splits on runs of it, so "" and "   " both give 0.
    return len(value.split())


def character_frequency(value: str) -> Dict[str, int]:
    return dict(Counter(value))


def distinct_characters(frequency: Dict[str, int]) -> Tuple[str, ...]:
    return tuple(frequency)


# ---------------------------------------------------------------------------
# Content identity
# ---------------------------------------------------------------------------
def content_hash(value: str) -> str:
    """Lowercase hex SHA-256 of the UTF-8 bytes of ``value``, unnormalized."""
    if not isinstance(value, str):
        raise TypeMismatch(value)
    digest = new_hash(HASH_ALGORITHM)
    digest.update(value.encode(HASH_ENCODING, HASH_ENCODING_ERRORS))
    return digest.hexdigest()


# ---------------------------------------------------------------------------
# Record builder
# ---------------------------------------------------------------------------
def analyze_string(value: str) -> AnalysisRecord:
    """Analyze ``value`` and return its immutable record.

    No length gating happens here; callers enforce their own bounds.
    Raises TypeMismatch if ``value`` is not a str.
    """
    if not isinstance(value, str):
        raise TypeMismatch(value)

    frequency = character_frequency(value)
    return AnalysisRecord(
        id=content_hash(value),
        value=value,
        length=code_point_length(value),
        is_palindrome=is_palindrome(value),
        word_count=count_words(value),
        unique_character_count=len(frequency),
        character_frequency=frequency,
        distinct_characters=distinct_characters(frequency),
        created_at=datetime.now(timezone.utc),
    )
