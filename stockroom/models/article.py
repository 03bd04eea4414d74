"""ORM model for catalog articles."""

from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from stockroom.models.base import Base


class Article(Base):
    """
    Catalog entry identified by a unique sku.

    version_id is bumped by the ORM on every UPDATE; a write against a row that
    changed or vanished since it was read raises StaleDataError at flush.
    Stock records are removed by the database (ON DELETE CASCADE).
    """

    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sku = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    cost_price = Column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
        server_default="0.00",
    )
    version_id = Column(Integer, nullable=False)

    stock_records = relationship(
        "StockRecord",
        back_populates="article",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="StockRecord.id",
    )

    __mapper_args__ = {"version_id_col": version_id}
