"""Structured string filters: the model, its consistency checks, and the
translation into a SQL predicate over :class:`app.models.AnalyzedString`."""
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement

from app.errors import InfeasibleRange
from app.models import AnalyzedString, StringCharacter

# Largest integer a length or word-count filter may hold; the columns are
# plain SQL INTEGERs.
MAX_FILTER_VALUE = 2**31 - 1


class ParsedFilter(BaseModel):
    """Filter over analyzed strings; absent fields do not constrain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_palindrome: Optional[bool] = None
    word_count: Optional[int] = Field(default=None, ge=0, le=MAX_FILTER_VALUE)
    min_length: Optional[int] = Field(default=None, le=MAX_FILTER_VALUE)
    max_length: Optional[int] = Field(default=None, le=MAX_FILTER_VALUE)
    contains_character: Optional[str] = None

    @field_validator("contains_character")
    @classmethod
    def _single_code_point(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) != 1:
            raise ValueError("contains_character must be a single character")
        return v

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Consistency checks
# ---------------------------------------------------------------------------
def _check_length_range(f: ParsedFilter) -> None:
    if f.min_length is not None and f.max_length is not None and f.min_length > f.max_length:
        raise InfeasibleRange(f.min_length, f.max_length)


def _check_non_negative_max(f: ParsedFilter) -> None:
    # e.g. "shorter than 0 characters"
    if f.max_length is not None and f.max_length < 0:
        raise InfeasibleRange(0, f.max_length)


_CHECKS: Tuple[Callable[[ParsedFilter], None], ...] = (
    _check_length_range,
    _check_non_negative_max,
)


def validate_filter(f: ParsedFilter) -> ParsedFilter:
    """Return ``f`` unchanged if it is internally consistent.

    Raises InfeasibleRange when no string could satisfy the length bounds.
    """
    for check in _CHECKS:
        check(f)
    return f


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------
def compile_filter(f: ParsedFilter) -> ColumnElement[bool]:
    """Translate a filter into a WHERE clause for ``AnalyzedString`` queries.

    Used by both the query-parameter and the natural-language endpoints, so
    equal filters always produce identical SQL.
    """
    clauses = []
    if f.is_palindrome is not None:
        clauses.append(AnalyzedString.is_palindrome == f.is_palindrome)
    if f.min_length is not None:
        clauses.append(AnalyzedString.length >= f.min_length)
    if f.max_length is not None:
        clauses.append(AnalyzedString.length <= f.max_length)
    if f.word_count is not None:
        clauses.append(AnalyzedString.word_count == f.word_count)
    if f.contains_character is not None:
        clauses.append(AnalyzedString.characters.any(StringCharacter.character == f.contains_character))

    if not clauses:
        return true()
    return and_(*clauses)
