from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.errors import (
    InfeasibleRange,
    InvalidStringValue,
    ParseConflict,
    StringAlreadyExists,
    StringNotFound,
    TypeMismatch,
    Unparseable,
)
from app.filters import MAX_FILTER_VALUE
from app.logging import ERROR_KIND_HEADER
from app.schemas import StringRequest, StringResponse, FilterResponse
from app.services import (
    create_string,
    get_string_by_value,
    delete_string_by_value,
    validate_query_filters,
    get_all_strings_with_filters,
    get_strings_by_natural_language,
)

router = APIRouter(tags=["Strings"])

# Phrase interpretation failures -> status code
_NL_ERROR_STATUS = {
    Unparseable: 400,
    TypeMismatch: 400,
    ParseConflict: 422,
    InfeasibleRange: 422,
}


def _http_error(status_code: int, e: Exception) -> HTTPException:
    kind = getattr(e, "kind", "invalid_filter")
    return HTTPException(status_code=status_code, detail=str(e), headers={ERROR_KIND_HEADER: kind})


@router.get("/health")
def health() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok"}


@router.post("/strings", response_model=StringResponse, status_code=201)
def create_string_endpoint(payload: StringRequest, db: Session = Depends(get_db)) -> dict:
    """Create and analyze a string."""
    try:
        return create_string(db, payload.value)
    except StringAlreadyExists as e:
        raise _http_error(409, e)
    except InvalidStringValue as e:
        raise _http_error(400, e)
    except TypeMismatch as e:
        raise _http_error(422, e)


@router.get("/strings/filter-by-natural-language", response_model=FilterResponse)
def filter_by_natural_language(query: str = Query(...), db: Session = Depends(get_db)) -> dict:
    """Filter strings using a natural language query."""
    try:
        return get_strings_by_natural_language(db, query)
    except tuple(_NL_ERROR_STATUS) as e:
        raise _http_error(_NL_ERROR_STATUS[type(e)], e)


@router.get("/strings", response_model=FilterResponse)
def get_all_strings(
    is_palindrome: bool = Query(None),
    min_length: int = Query(None),
    max_length: int = Query(None),
    word_count: int = Query(None),
    contains_character: str = Query(None),
    page: int = Query(1, ge=1, le=MAX_FILTER_VALUE),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> dict:
    """Get all strings with optional filtering."""
    try:
        filters = validate_query_filters(is_palindrome, min_length, max_length, word_count, contains_character)
    except ValueError as e:
        raise _http_error(400, e)
    return get_all_strings_with_filters(db, filters, page=page, limit=limit)


@router.get("/strings/{string_value:path}", response_model=StringResponse)
def get_string_endpoint(string_value: str, db: Session = Depends(get_db)) -> dict:
    """Get a specific string by its raw value."""
    try:
        return get_string_by_value(db, string_value)
    except StringNotFound as e:
        raise _http_error(404, e)


@router.delete("/strings/{string_value:path}", status_code=204)
def delete_string_endpoint(string_value: str, db: Session = Depends(get_db)) -> Response:
    """Delete a string by its raw value."""
    try:
        delete_string_by_value(db, string_value)
    except StringNotFound as e:
        raise _http_error(404, e)
    return Response(status_code=204)
