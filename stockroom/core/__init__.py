"""Core app configuration, database, and error types."""

from stockroom.core.config import get_settings, settings
from stockroom.core.database import get_db
from stockroom.core.errors import StockroomError

__all__ = ["StockroomError", "get_settings", "settings", "get_db"]
