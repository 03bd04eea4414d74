"""Stock ledger endpoints: per-location records, set, adjust, delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from stockroom.api.v1.auth import require_inventory_editor
from stockroom.core.database import get_db
from stockroom.schemas.auth import CurrentUser
from stockroom.schemas.errors import ErrorResponse, InsufficientStockResponse
from stockroom.schemas.inventory import (
    StockAdjustRequest,
    StockAdjustResponse,
    StockQuantitySet,
    StockRecordCreate,
    StockRecordRead,
)
from stockroom.services import stock

router = APIRouter()

Editor = Annotated[CurrentUser, Depends(require_inventory_editor)]


def _read_all(records) -> list[StockRecordRead]:
    return [StockRecordRead.model_validate(r) for r in records]


@router.get("", response_model=list[StockRecordRead])
def get_all_stock(
    db: Annotated[Session, Depends(get_db)],
) -> list[StockRecordRead]:
    """Every stock record with its article and last modifier."""
    return _read_all(stock.list_stock(db))


@router.get(
    "/article/{article_id}",
    response_model=list[StockRecordRead],
    responses={404: {"model": ErrorResponse}},
)
def get_stock_for_article(
    article_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> list[StockRecordRead]:
    return _read_all(stock.list_stock_for_article(db, article_id))


@router.get("/location/{location}", response_model=list[StockRecordRead])
def get_stock_by_location(
    location: str,
    db: Annotated[Session, Depends(get_db)],
) -> list[StockRecordRead]:
    return _read_all(stock.list_stock_by_location(db, location))


@router.post(
    "",
    response_model=StockRecordRead,
    status_code=201,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def post_stock_record(
    body: StockRecordCreate,
    editor: Editor,
    db: Annotated[Session, Depends(get_db)],
) -> StockRecordRead:
    """Open a stock record for an article at a location (quantity taken as given)."""
    return stock.create_stock_record(db, body, actor_id=editor.id)


@router.put(
    "/{record_id}",
    response_model=StockRecordRead,
    responses={404: {"model": ErrorResponse}},
)
def put_stock_quantity(
    record_id: int,
    body: StockQuantitySet,
    editor: Editor,
    db: Annotated[Session, Depends(get_db)],
) -> StockRecordRead:
    """Overwrite the quantity. Not floor-checked: negative values are stored."""
    return stock.set_stock_quantity(db, record_id, body.quantity, actor_id=editor.id)


@router.patch(
    "/{record_id}/adjust",
    response_model=StockAdjustResponse,
    responses={
        400: {"model": InsufficientStockResponse},
        404: {"model": ErrorResponse},
    },
)
def patch_stock_adjust(
    record_id: int,
    body: StockAdjustRequest,
    editor: Editor,
    db: Annotated[Session, Depends(get_db)],
) -> StockAdjustResponse:
    """
    Apply a signed delta; rejected if the result would drop below zero.
    The reported quantity is the one this adjustment committed.
    """
    record = stock.adjust_stock_quantity(db, record_id, body.delta, actor_id=editor.id)
    return StockAdjustResponse(
        message=f"Stock adjusted. New quantity: {record.quantity}",
        quantity=record.quantity,
    )


@router.delete(
    "/{record_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
def delete_stock_record(
    record_id: int,
    editor: Editor,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    stock.delete_stock_record(db, record_id)
    return Response(status_code=204)
