"""Service tests for stockroom.services.catalog against a temporary SQLite database."""

import unittest
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import func, select

from support import DatabaseTestCase

from stockroom.core.errors import Conflict, NotFound, PersistenceError, ValidationError
from stockroom.models import Article, RoleId, StockRecord
from stockroom.schemas.inventory import (
    ArticleCreate,
    ArticleUpdate,
    StockRecordCreate,
    StockRecordRead,
)
from stockroom.services import catalog
from stockroom.services.stock import create_stock_record


def _article(sku: str = "A-1", name: str = "Widget", **kwargs: object) -> ArticleCreate:
    defaults = {"description": None, "cost_price": Decimal("10.00")}
    defaults.update(kwargs)
    return ArticleCreate(sku=sku, name=name, **defaults)


def _update(article_id: int, sku: str = "A-1", name: str = "Widget", **kwargs: object) -> ArticleUpdate:
    defaults = {"description": None, "cost_price": Decimal("10.00")}
    defaults.update(kwargs)
    return ArticleUpdate(id=article_id, sku=sku, name=name, **defaults)


class CatalogTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.manager = self.add_user("manager", RoleId.MANAGER, "Marta Gestora")
        self.admin = self.add_user("admin", RoleId.ADMINISTRATOR, "Ada Admin")

    def article_count(self) -> int:
        return self.call(lambda db: db.scalar(select(func.count(Article.id))))

    def add_stock(self, article_id: int, location: str | None, quantity: int = 1) -> StockRecordRead:
        return self.call(
            create_stock_record,
            StockRecordCreate(article_id=article_id, quantity=quantity, location=location),
            self.manager.id,
        )


class TestCreateArticle(CatalogTestCase):
    def test_create_assigns_id_and_defaults_cost(self) -> None:
        article = self.call(catalog.create_article, ArticleCreate(sku="B-2", name="Bolt"))
        self.assertIsNotNone(article.id)
        self.assertEqual(article.cost_price, Decimal("0.00"))

    def test_duplicate_sku_conflicts_and_count_unchanged(self) -> None:
        self.call(catalog.create_article, _article())
        before = self.article_count()
        with self.assertRaises(Conflict) as ctx:
            self.call(catalog.create_article, _article(name="Other widget"))
        self.assertIn("A-1", ctx.exception.message)
        self.assertEqual(self.article_count(), before)


class TestListAndGetArticles(CatalogTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.call(catalog.create_article, _article("HW-10", "Hammer", description="Tools: steel hammer"))
        self.call(catalog.create_article, _article("SC-20", "Screwdriver", description="Tools: flat"))
        self.call(catalog.create_article, _article("PT-30", "Paint", description="Decor 100% acrylic"))

    def skus(self, **filters: str) -> list[str]:
        return [a.sku for a in self.call(catalog.list_articles, **filters)]

    def test_list_without_filters_returns_all_in_id_order(self) -> None:
        self.assertEqual(self.skus(), ["HW-10", "SC-20", "PT-30"])

    def test_query_is_case_insensitive_over_name_sku_description(self) -> None:
        self.assertEqual(self.skus(q="hammer"), ["HW-10"])
        self.assertEqual(self.skus(q="sc-2"), ["SC-20"])
        self.assertEqual(self.skus(q="ACRYLIC"), ["PT-30"])

    def test_query_wildcards_are_literal(self) -> None:
        self.assertEqual(self.skus(q="100%"), ["PT-30"])
        self.assertEqual(self.skus(q="%%"), [])

    def test_category_matches_description_substring(self) -> None:
        self.assertEqual(self.skus(category="Tools"), ["HW-10", "SC-20"])

    def test_get_includes_stock_records(self) -> None:
        hammer = self.call(catalog.list_articles, q="Hammer")[0]
        self.add_stock(hammer.id, "W1", quantity=4)
        detail = self.call(catalog.get_article, hammer.id)
        self.assertEqual([r.location for r in detail.stock_records], ["W1"])
        self.assertEqual(detail.stock_records[0].quantity, 4)
        self.assertEqual(detail.stock_records[0].last_modified_by_name, "Marta Gestora")

    def test_get_missing_raises_not_found(self) -> None:
        with self.assertRaises(NotFound):
            self.call(catalog.get_article, 999)


class TestUpdateArticle(CatalogTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.article = self.call(catalog.create_article, _article())
        self.other = self.call(catalog.create_article, _article("B-2", "Bolt"))

    def update(self, article_id: int, data: ArticleUpdate, **kwargs: object) -> Article:
        return self.call(catalog.update_article, article_id, data, actor_id=self.admin.id, **kwargs)

    def test_update_replaces_fields(self) -> None:
        updated = self.update(
            self.article.id,
            _update(self.article.id, sku="A-1b", name="Widget XL", cost_price=Decimal("12.50")),
        )
        self.assertEqual(updated.sku, "A-1b")
        self.assertEqual(updated.name, "Widget XL")
        self.assertEqual(updated.cost_price, Decimal("12.50"))

    def test_keeping_own_sku_is_not_a_conflict(self) -> None:
        updated = self.update(self.article.id, _update(self.article.id, name="Renamed"))
        self.assertEqual(updated.name, "Renamed")

    def test_sku_of_other_article_conflicts(self) -> None:
        with self.assertRaises(Conflict):
            self.update(self.article.id, _update(self.article.id, sku="B-2"))

    def test_missing_article_raises_not_found(self) -> None:
        with self.assertRaises(NotFound):
            self.update(999, _update(999))

    def test_path_body_id_mismatch_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            self.update(self.article.id, _update(self.other.id))

    def test_update_touches_every_stock_record_of_the_article(self) -> None:
        self.add_stock(self.article.id, "W1")
        self.add_stock(self.article.id, "W2")
        untouched = self.add_stock(self.other.id, "W1")
        touched_at = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

        self.update(self.article.id, _update(self.article.id, name="Widget v2"), now=touched_at)

        with self.database.session() as fresh:
            rows = fresh.scalars(
                select(StockRecord).where(StockRecord.article_id == self.article.id)
            ).all()
            self.assertEqual(len(rows), 2)
            for row in rows:
                self.assertEqual(row.last_modified_by, self.admin.id)
                self.assertEqual(
                    row.last_modified_at.replace(tzinfo=None), touched_at.replace(tzinfo=None)
                )
            self.assertEqual(fresh.get(StockRecord, untouched.id).last_modified_by, self.manager.id)

    def test_concurrent_delete_becomes_not_found(self) -> None:
        stale = self.database.session(expire_on_commit=False)
        try:
            # Held so the identity map keeps the version the session read.
            stale_article = stale.get(Article, self.article.id)
            stale.commit()
            self.assertEqual(stale_article.version_id, 1)
            self.call(catalog.delete_article, self.article.id)
            with self.assertRaises(NotFound):
                catalog.update_article(
                    stale, self.article.id, _update(self.article.id, name="Late"), actor_id=self.admin.id
                )
        finally:
            stale.close()

    def test_concurrent_modification_is_a_persistence_error(self) -> None:
        stale = self.database.session(expire_on_commit=False)
        try:
            stale_article = stale.get(Article, self.article.id)
            stale.commit()
            self.assertEqual(stale_article.version_id, 1)
            self.update(self.article.id, _update(self.article.id, name="First"))
            with self.assertRaises(PersistenceError):
                catalog.update_article(
                    stale, self.article.id, _update(self.article.id, name="Second"), actor_id=self.admin.id
                )
        finally:
            stale.close()
        self.assertEqual(self.call(catalog.get_article, self.article.id).name, "First")


class TestDeleteArticle(CatalogTestCase):
    def test_delete_cascades_to_stock_records(self) -> None:
        article = self.call(catalog.create_article, _article())
        for location in ("W1", "W2", None):
            self.add_stock(article.id, location, quantity=3)

        self.call(catalog.delete_article, article.id)

        with self.database.session() as fresh:
            self.assertIsNone(fresh.get(Article, article.id))
            remaining = fresh.scalar(
                select(func.count(StockRecord.id)).where(StockRecord.article_id == article.id)
            )
            self.assertEqual(remaining, 0)

    def test_delete_missing_raises_not_found(self) -> None:
        with self.assertRaises(NotFound):
            self.call(catalog.delete_article, 12345)


if __name__ == "__main__":
    unittest.main()
