import logging
from typing import List, Optional, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app import models
from app.analyzer import AnalysisRecord
from app.errors import StringAlreadyExists

logger = logging.getLogger("string_analyzer.crud")


def get_string(db: Session, string_id: str) -> Optional[models.AnalyzedString]:
    return db.get(models.AnalyzedString, string_id)


def insert_string(db: Session, record: AnalysisRecord) -> models.AnalyzedString:
    """Persist a record keyed by its content hash; never overwrites."""
    if get_string(db, record.id) is not None:
        raise StringAlreadyExists(record.id)

    row = models.AnalyzedString(
        id=record.id,
        value=record.value,
        length=record.length,
        is_palindrome=record.is_palindrome,
        word_count=record.word_count,
        unique_characters=record.unique_character_count,
        character_frequency_map=dict(record.character_frequency),
        created_at=record.created_at,
        characters=[models.StringCharacter(character=c) for c in record.distinct_characters],
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same value
        db.rollback()
        raise StringAlreadyExists(record.id)
    db.refresh(row)
    logger.info("Stored string %s (length=%d)", row.id, row.length)
    return row


def delete_string(db: Session, string_id: str) -> bool:
    row = get_string(db, string_id)
    if row is None:
        logger.warning("AnalyzedString with id=%s not found.", string_id)
        return False
    db.delete(row)
    db.commit()
    logger.info("Deleted string %s", string_id)
    return True


def query_strings(
    db: Session,
    predicate: ColumnElement[bool],
    *,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[models.AnalyzedString], int]:
    """Return one page of matching rows (newest first) and the total match count."""
    total = db.scalar(select(func.count()).select_from(models.AnalyzedString).where(predicate)) or 0

    stmt = (
        select(models.AnalyzedString)
        .where(predicate)
        .order_by(desc(models.AnalyzedString.created_at), models.AnalyzedString.id)
        .offset(offset)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = list(db.scalars(stmt))
    logger.info("query_strings: %d of %d match(es) (limit=%s, offset=%d)", len(rows), total, limit, offset)
    return rows, total
