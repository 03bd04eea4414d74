"""Error payload schemas (documented in OpenAPI responses)."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    message: str


class InsufficientStockResponse(ErrorResponse):
    current_quantity: int
    requested_delta: int
    attempted_quantity: int
