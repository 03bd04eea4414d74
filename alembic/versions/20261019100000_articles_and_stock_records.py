"""Articles catalog and per-location stock records.

Revision ID: 20261019100000
Revises: 20261019000000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019100000"
down_revision: Union[str, None] = "20261019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sku", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "cost_price",
            sa.Numeric(precision=10, scale=2),
            server_default="0.00",
            nullable=False,
        ),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_articles")),
    )
    op.create_index(op.f("ix_articles_sku"), "articles", ["sku"], unique=True)

    op.create_table(
        "stock_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(length=50), nullable=True),
        sa.Column("last_modified_by", sa.Integer(), nullable=True),
        sa.Column(
            "last_modified_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["article_id"],
            ["articles.id"],
            name=op.f("fk_stock_records_article_id_articles"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["last_modified_by"],
            ["users.id"],
            name=op.f("fk_stock_records_last_modified_by_users"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_stock_records")),
        sa.UniqueConstraint(
            "article_id",
            "location",
            name="uq_stock_records_article_location",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index(
        op.f("ix_stock_records_article_id"), "stock_records", ["article_id"], unique=False
    )
    op.create_index(
        op.f("ix_stock_records_location"), "stock_records", ["location"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_stock_records_location"), table_name="stock_records")
    op.drop_index(op.f("ix_stock_records_article_id"), table_name="stock_records")
    op.drop_table("stock_records")
    op.drop_index(op.f("ix_articles_sku"), table_name="articles")
    op.drop_table("articles")
