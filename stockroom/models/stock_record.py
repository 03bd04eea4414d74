"""ORM model for per-article, per-location stock quantities."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from stockroom.models.base import Base


class StockRecord(Base):
    """
    Quantity of one article at one location, stamped with its last modifier.

    At most one row per (article_id, location). quantity is signed: only the
    adjust operation keeps it from going below zero.
    """

    __tablename__ = "stock_records"
    __table_args__ = (
        # NULLS NOT DISTINCT (PostgreSQL 15+): at most one unlocated record per article.
        UniqueConstraint(
            "article_id",
            "location",
            name="uq_stock_records_article_location",
            postgresql_nulls_not_distinct=True,
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(
        Integer,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quantity = Column(Integer, nullable=False, default=0)
    location = Column(String(50), nullable=True, index=True)
    last_modified_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    last_modified_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    article = relationship("Article", back_populates="stock_records")
    modifier = relationship("User")

    @property
    def last_modified_by_name(self) -> str | None:
        # Best effort: the modifier may have been deleted (FK set to NULL).
        return self.modifier.display_name if self.modifier is not None else None
