"""Catalog repository: CRUD on articles, with audited touch of their stock on edit."""

import logging
from datetime import UTC, datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy.orm.exc import StaleDataError

from stockroom.core.errors import Conflict, NotFound, PersistenceError, ValidationError
from stockroom.models import Article, StockRecord
from stockroom.schemas.inventory import ArticleCreate, ArticleUpdate

logger = logging.getLogger(__name__)


def _not_found(article_id: int) -> NotFound:
    return NotFound(f"Article with id {article_id} not found")


def article_exists(db: Session, article_id: int) -> bool:
    """Fresh existence check that bypasses the session identity map."""
    return db.scalar(select(Article.id).where(Article.id == article_id)) is not None


def _sku_owner(db: Session, sku: str) -> int | None:
    return db.scalar(select(Article.id).where(Article.sku == sku))


def list_articles(
    db: Session,
    q: str | None = None,
    category: str | None = None,
) -> list[Article]:
    """
    List articles ordered by id.

    q matches name, sku or description case-insensitively; category matches a
    substring of the description.
    """
    stmt = select(Article).order_by(Article.id)
    if q and q.strip():
        term = q.strip()
        stmt = stmt.where(
            or_(
                Article.name.icontains(term, autoescape=True),
                Article.sku.icontains(term, autoescape=True),
                Article.description.icontains(term, autoescape=True),
            )
        )
    if category and category.strip():
        stmt = stmt.where(Article.description.contains(category.strip(), autoescape=True))
    return list(db.scalars(stmt).all())


def get_article(db: Session, article_id: int) -> Article:
    """Return an article with its stock records loaded; raises NotFound."""
    stmt = (
        select(Article)
        .options(selectinload(Article.stock_records).joinedload(StockRecord.modifier))
        .where(Article.id == article_id)
    )
    article = db.scalars(stmt).one_or_none()
    if article is None:
        raise _not_found(article_id)
    return article


def create_article(db: Session, data: ArticleCreate) -> Article:
    """Insert a new article; raises Conflict when the sku is already used."""
    if _sku_owner(db, data.sku) is not None:
        raise Conflict(f"An article with sku '{data.sku}' already exists")

    article = Article(
        sku=data.sku,
        name=data.name,
        description=data.description,
        cost_price=data.cost_price,
    )
    db.add(article)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race on the unique sku index.
        db.rollback()
        raise Conflict(f"An article with sku '{data.sku}' already exists") from exc
    db.refresh(article)
    logger.info("Created article id=%s sku=%s", article.id, article.sku)
    return article


def update_article(
    db: Session,
    article_id: int,
    data: ArticleUpdate,
    actor_id: int,
    now: datetime | None = None,
) -> Article:
    """
    Replace an article's fields and re-stamp all of its stock records.

    The stock touch runs in the same transaction as the article write. A
    concurrent delete surfaces as NotFound; any other concurrent write to the
    same row is a PersistenceError and is not retried.
    """
    if data.id != article_id:
        raise ValidationError("Article id in the path does not match the id in the body")

    article = db.get(Article, article_id)
    if article is None:
        raise _not_found(article_id)

    owner = _sku_owner(db, data.sku)
    if owner is not None and owner != article_id:
        raise Conflict(f"Sku '{data.sku}' is already used by another article")

    article.sku = data.sku
    article.name = data.name
    article.description = data.description
    article.cost_price = data.cost_price

    touched_at = now or datetime.now(UTC)
    try:
        db.flush()
        db.execute(
            update(StockRecord)
            .where(StockRecord.article_id == article_id)
            .values(last_modified_by=actor_id, last_modified_at=touched_at)
        )
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        if not article_exists(db, article_id):
            raise _not_found(article_id) from exc
        logger.error("Concurrent modification of article id=%s; update not applied", article_id)
        raise PersistenceError("Article was modified concurrently; update not applied") from exc
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(f"Sku '{data.sku}' is already used by another article") from exc

    db.refresh(article)
    logger.info("Updated article id=%s by user id=%s", article_id, actor_id)
    return article


def delete_article(db: Session, article_id: int) -> None:
    """Delete an article; its stock records go with it (ON DELETE CASCADE)."""
    article = db.get(Article, article_id)
    if article is None:
        raise _not_found(article_id)
    db.delete(article)
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        if not article_exists(db, article_id):
            raise _not_found(article_id) from exc
        raise PersistenceError("Article was modified concurrently; delete not applied") from exc
    logger.info("Deleted article id=%s", article_id)
