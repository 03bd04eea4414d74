"""Request/response schemas for catalog articles and stock records."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# Stock quantities are stored in a 32-bit INTEGER column.
QUANTITY_MIN = -(2**31)
QUANTITY_MAX = 2**31 - 1


class ArticleFields(BaseModel):
    """Editable article fields shared by create and update."""

    sku: str = Field(..., min_length=1, max_length=50, description="Stock keeping unit, unique")
    name: str = Field(..., min_length=1, max_length=150)
    description: str | None = None
    cost_price: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)


class ArticleCreate(ArticleFields):
    pass


class ArticleUpdate(ArticleFields):
    """Full replacement of an article; id must match the path id."""

    id: int


class ArticleRead(BaseModel):
    id: int
    sku: str
    name: str
    description: str | None = None
    cost_price: Decimal

    class Config:
        from_attributes = True


class StockLevel(BaseModel):
    """Stock record without its article (nested under an article)."""

    id: int
    article_id: int
    quantity: int
    location: str | None = None
    last_modified_by: int | None = None
    last_modified_by_name: str | None = None
    last_modified_at: datetime | None = None

    class Config:
        from_attributes = True


class StockRecordRead(StockLevel):
    """Stock record joined with its article."""

    article: ArticleRead


class ArticleDetail(ArticleRead):
    """Article with all of its stock records."""

    stock_records: list[StockLevel] = Field(default_factory=list)


class StockRecordCreate(BaseModel):
    article_id: int
    quantity: int = Field(default=0, ge=QUANTITY_MIN, le=QUANTITY_MAX)
    location: str | None = Field(default=None, max_length=50)


class StockQuantitySet(BaseModel):
    """Authoritative overwrite; negative values are accepted."""

    quantity: int = Field(..., ge=QUANTITY_MIN, le=QUANTITY_MAX)


class StockAdjustRequest(BaseModel):
    """Signed delta: positive for goods in, negative for goods out."""

    delta: int = Field(..., ge=QUANTITY_MIN, le=QUANTITY_MAX)


class StockAdjustResponse(BaseModel):
    message: str
    quantity: int
