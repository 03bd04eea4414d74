"""
Stock mutation engine: create, set, adjust and delete per-location stock records.

set and adjust read the row with SELECT ... FOR UPDATE so the read and the
conditional write form one transaction; concurrent adjustments of the same
record are serialized and cannot both pass the floor check against a stale
quantity. Mutations return the state they committed, captured while the lock
is still held, never a re-read. Only adjust enforces quantity >= 0; create
and set are trusted overwrites and accept negative values.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from stockroom.core.errors import Conflict, InsufficientStock, NotFound, ValidationError
from stockroom.models import Article, StockRecord
from stockroom.schemas.inventory import QUANTITY_MAX, StockRecordCreate, StockRecordRead
from stockroom.services.catalog import article_exists

logger = logging.getLogger(__name__)


def _not_found(record_id: int) -> NotFound:
    return NotFound(f"Stock record with id {record_id} not found")


def _with_relations(stmt):
    return stmt.options(joinedload(StockRecord.article), joinedload(StockRecord.modifier))


def _normalize_location(location: str | None) -> str | None:
    if location is None:
        return None
    return location.strip() or None


def _lock_record(db: Session, record_id: int) -> StockRecord | None:
    # No joins here: FOR UPDATE cannot lock the nullable side of an outer join.
    stmt = (
        select(StockRecord)
        .where(StockRecord.id == record_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.scalars(stmt).one_or_none()


def _snapshot(db: Session, record: StockRecord) -> StockRecordRead:
    """Read model of a flushed record, taken before commit releases the row lock."""
    # Reload the relationships against the foreign keys just written.
    db.expire(record, ["article", "modifier"])
    return StockRecordRead.model_validate(record)


def list_stock(db: Session) -> list[StockRecord]:
    stmt = _with_relations(select(StockRecord).order_by(StockRecord.id))
    return list(db.scalars(stmt).unique().all())


def list_stock_for_article(db: Session, article_id: int) -> list[StockRecord]:
    """Stock records of one article; raises NotFound if the article is absent."""
    if not article_exists(db, article_id):
        raise NotFound(f"Article with id {article_id} not found")
    stmt = _with_relations(
        select(StockRecord).where(StockRecord.article_id == article_id).order_by(StockRecord.id)
    )
    return list(db.scalars(stmt).unique().all())


def list_stock_by_location(db: Session, location: str) -> list[StockRecord]:
    stmt = _with_relations(
        select(StockRecord).where(StockRecord.location == location).order_by(StockRecord.id)
    )
    return list(db.scalars(stmt).unique().all())


def get_stock_record(db: Session, record_id: int) -> StockRecord:
    stmt = _with_relations(select(StockRecord).where(StockRecord.id == record_id))
    record = db.scalars(stmt).unique().one_or_none()
    if record is None:
        raise _not_found(record_id)
    return record


def create_stock_record(
    db: Session,
    data: StockRecordCreate,
    actor_id: int,
    now: datetime | None = None,
) -> StockRecordRead:
    """
    Open a stock record for an (article, location) pair.

    Raises NotFound for an unknown article and Conflict if the pair already has
    a record. The quantity is stored as given, negative included.
    """
    article = db.get(Article, data.article_id)
    if article is None:
        raise NotFound(f"Article with id {data.article_id} not found")

    location = _normalize_location(data.location)
    conflict = Conflict(
        f"A stock record for article '{article.name}' at location '{location}' already exists"
    )
    occupied = db.scalar(
        select(StockRecord.id).where(
            StockRecord.article_id == data.article_id,
            StockRecord.location == location,
        )
    )
    if occupied is not None:
        raise conflict

    record = StockRecord(
        article_id=data.article_id,
        quantity=data.quantity,
        location=location,
        last_modified_by=actor_id,
        last_modified_at=now or datetime.now(UTC),
    )
    db.add(record)
    try:
        db.flush()
        created = _snapshot(db, record)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise conflict from exc
    logger.info(
        "Created stock record id=%s article_id=%s location=%s quantity=%s by user id=%s",
        created.id,
        data.article_id,
        location,
        data.quantity,
        actor_id,
    )
    return created


def set_stock_quantity(
    db: Session,
    record_id: int,
    quantity: int,
    actor_id: int,
    now: datetime | None = None,
) -> StockRecordRead:
    """Overwrite the quantity unconditionally (no floor) and re-stamp the record."""
    record = _lock_record(db, record_id)
    if record is None:
        db.rollback()
        raise _not_found(record_id)
    previous = record.quantity
    record.quantity = quantity
    record.last_modified_by = actor_id
    record.last_modified_at = now or datetime.now(UTC)
    db.flush()
    updated = _snapshot(db, record)
    db.commit()
    logger.info(
        "Set stock record id=%s quantity %s -> %s by user id=%s",
        record_id,
        previous,
        quantity,
        actor_id,
    )
    return updated


def adjust_stock_quantity(
    db: Session,
    record_id: int,
    delta: int,
    actor_id: int,
    now: datetime | None = None,
) -> StockRecordRead:
    """
    Apply a signed delta to a stock record.

    Raises InsufficientStock, leaving the record untouched, when the result
    would be negative, and ValidationError when it would not fit the column.
    The returned record is the state this adjustment committed.
    """
    record = _lock_record(db, record_id)
    if record is None:
        db.rollback()
        raise _not_found(record_id)

    current = record.quantity
    new_quantity = current + delta
    if new_quantity < 0:
        db.rollback()
        logger.info(
            "Rejected adjustment of stock record id=%s: quantity=%s delta=%s",
            record_id,
            current,
            delta,
        )
        raise InsufficientStock(current_quantity=current, requested_delta=delta)
    if new_quantity > QUANTITY_MAX:
        db.rollback()
        raise ValidationError(
            f"Adjustment would raise the quantity above {QUANTITY_MAX}. "
            f"Current quantity: {current}, requested adjustment: {delta}"
        )

    record.quantity = new_quantity
    record.last_modified_by = actor_id
    record.last_modified_at = now or datetime.now(UTC)
    db.flush()
    adjusted = _snapshot(db, record)
    db.commit()
    logger.info(
        "Adjusted stock record id=%s by %s: %s -> %s (user id=%s)",
        record_id,
        delta,
        current,
        new_quantity,
        actor_id,
    )
    return adjusted


def delete_stock_record(db: Session, record_id: int) -> None:
    """Remove one stock record; the article and its other records are untouched."""
    record = db.get(StockRecord, record_id)
    if record is None:
        raise _not_found(record_id)
    db.delete(record)
    db.commit()
    logger.info("Deleted stock record id=%s", record_id)
