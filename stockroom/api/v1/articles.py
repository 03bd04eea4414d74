"""Catalog endpoints: list, read, create, update, delete articles."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from stockroom.api.v1.auth import require_inventory_editor
from stockroom.core.database import get_db
from stockroom.schemas.auth import CurrentUser
from stockroom.schemas.errors import ErrorResponse
from stockroom.schemas.inventory import (
    ArticleCreate,
    ArticleDetail,
    ArticleRead,
    ArticleUpdate,
)
from stockroom.services import catalog

router = APIRouter()

Editor = Annotated[CurrentUser, Depends(require_inventory_editor)]


@router.get("", response_model=list[ArticleRead])
def get_articles(
    db: Annotated[Session, Depends(get_db)],
    q: str | None = None,
    category: str | None = None,
) -> list[ArticleRead]:
    """
    List articles. `q` searches name, sku and description (case-insensitive);
    `category` filters on a substring of the description.
    """
    return [ArticleRead.model_validate(a) for a in catalog.list_articles(db, q, category)]


@router.get(
    "/{article_id}",
    response_model=ArticleDetail,
    responses={404: {"model": ErrorResponse}},
)
def get_article(
    article_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ArticleDetail:
    """Article detail including its stock records."""
    return ArticleDetail.model_validate(catalog.get_article(db, article_id))


@router.post(
    "",
    response_model=ArticleRead,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
def post_article(
    body: ArticleCreate,
    editor: Editor,
    db: Annotated[Session, Depends(get_db)],
) -> ArticleRead:
    """Create an article (Administrator or Manager)."""
    return ArticleRead.model_validate(catalog.create_article(db, body))


@router.put(
    "/{article_id}",
    response_model=ArticleRead,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def put_article(
    article_id: int,
    body: ArticleUpdate,
    editor: Editor,
    db: Annotated[Session, Depends(get_db)],
) -> ArticleRead:
    """Replace an article; every stock record of it is re-stamped with the editor."""
    return ArticleRead.model_validate(
        catalog.update_article(db, article_id, body, actor_id=editor.id)
    )


@router.delete(
    "/{article_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
def delete_article(
    article_id: int,
    editor: Editor,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete an article together with all of its stock records."""
    catalog.delete_article(db, article_id)
    return Response(status_code=204)
