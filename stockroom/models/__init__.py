"""SQLAlchemy ORM models."""

from stockroom.models.article import Article
from stockroom.models.base import Base
from stockroom.models.role import ROLE_NAMES, Role, RoleId
from stockroom.models.stock_record import StockRecord
from stockroom.models.user import User

__all__ = ["ROLE_NAMES", "Article", "Base", "Role", "RoleId", "StockRecord", "User"]
