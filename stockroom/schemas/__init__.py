"""Pydantic request/response schemas."""

from stockroom.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    TokenClaims,
    TokenResponse,
    UserListItem,
    UsersListResponse,
)
from stockroom.schemas.errors import ErrorResponse, InsufficientStockResponse
from stockroom.schemas.health import HealthResponse
from stockroom.schemas.inventory import (
    ArticleCreate,
    ArticleDetail,
    ArticleRead,
    ArticleUpdate,
    StockAdjustRequest,
    StockAdjustResponse,
    StockLevel,
    StockQuantitySet,
    StockRecordCreate,
    StockRecordRead,
)

__all__ = [
    "ArticleCreate",
    "ArticleDetail",
    "ArticleRead",
    "ArticleUpdate",
    "CurrentUser",
    "ErrorResponse",
    "HealthResponse",
    "InsufficientStockResponse",
    "LoginRequest",
    "RegisterRequest",
    "RoleUpdateRequest",
    "StockAdjustRequest",
    "StockAdjustResponse",
    "StockLevel",
    "StockQuantitySet",
    "StockRecordCreate",
    "StockRecordRead",
    "TokenClaims",
    "TokenResponse",
    "UserListItem",
    "UsersListResponse",
]
