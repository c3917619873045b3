import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app import crud, models
from app.analyzer import HASH_ENCODING, analyze_string, content_hash
from app.config import settings
from app.errors import InvalidStringValue, StringNotFound
from app.filters import MAX_FILTER_VALUE, ParsedFilter, compile_filter, validate_filter
from app.NLP import interpret_nl_query

logger = logging.getLogger("string_analyzer.services")


def _to_response(row: models.AnalyzedString) -> Dict[str, Any]:
    return {
        "id": row.id,
        "value": row.value,
        "properties": {
            "length": row.length,
            "is_palindrome": row.is_palindrome,
            "unique_characters": row.unique_characters,
            "word_count": row.word_count,
            "sha256_hash": row.id,
            "character_frequency_map": row.character_frequency_map,
        },
        "created_at": row.created_at,
    }


def _check_value(value: str) -> None:
    length = len(value)
    if length < settings.MIN_STRING_LENGTH:
        raise InvalidStringValue(f"String too short. Minimum length is {settings.MIN_STRING_LENGTH}.")
    if length > settings.MAX_STRING_LENGTH:
        raise InvalidStringValue(f"String too long. Maximum length is {settings.MAX_STRING_LENGTH}.")
    try:
        value.encode(HASH_ENCODING)
    except UnicodeEncodeError:
        raise InvalidStringValue("String contains unpaired surrogate code points.")


def create_string(db: Session, value: str) -> Dict[str, Any]:
    _check_value(value)
    record = analyze_string(value)
    row = crud.insert_string(db, record)
    return _to_response(row)


def get_string_by_value(db: Session, string_value: str) -> Dict[str, Any]:
    """Lookup record by hashing the exact provided string value."""
    row = crud.get_string(db, content_hash(string_value))
    if row is None:
        raise StringNotFound(string_value)
    return _to_response(row)


def delete_string_by_value(db: Session, string_value: str) -> None:
    if not crud.delete_string(db, content_hash(string_value)):
        raise StringNotFound(string_value)


def validate_query_filters(
    is_palindrome: Optional[bool] = None,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    word_count: Optional[int] = None,
    contains_character: Optional[str] = None,
) -> ParsedFilter:
    for name, number in (("min_length", min_length), ("max_length", max_length), ("word_count", word_count)):
        if number is None:
            continue
        if number < 0:
            raise ValueError(f"{name} must be non-negative")
        if number > MAX_FILTER_VALUE:
            raise ValueError(f"{name} must be at most {MAX_FILTER_VALUE}")

    if contains_character is not None and len(contains_character) != 1:
        raise ValueError("contains_character must be a single character")

    filters = ParsedFilter(
        is_palindrome=is_palindrome,
        min_length=min_length,
        max_length=max_length,
        word_count=word_count,
        contains_character=contains_character,
    )
    return validate_filter(filters)


def get_all_strings_with_filters(
    db: Session,
    filters: ParsedFilter,
    *,
    page: int = 1,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    limit = limit or settings.DEFAULT_PAGE_SIZE
    rows, total = crud.query_strings(db, compile_filter(filters), limit=limit, offset=(page - 1) * limit)
    return {
        "data": [_to_response(r) for r in rows],
        "count": total,
        "page": page,
        "limit": limit,
        "filters_applied": filters.as_dict(),
    }


def get_strings_by_natural_language(db: Session, query: str) -> Dict[str, Any]:
    interpreted = interpret_nl_query(query)
    logger.info("Interpreted %r as %s", query, interpreted.parsed_filters.as_dict())
    rows, _ = crud.query_strings(db, compile_filter(interpreted.parsed_filters), limit=settings.NL_RESULT_LIMIT)
    return {
        "data": [_to_response(r) for r in rows],
        "count": len(rows),
        "interpreted_query": interpreted.model_dump(exclude_none=True),
    }
