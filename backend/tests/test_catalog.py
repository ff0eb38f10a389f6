# Overview: Pytest coverage for catalog replay and product workflows.

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from threadlog.errors import NotFoundError
from threadlog.services import catalog_service, transaction_store
from threadlog.services.catalog_service import project_catalog
from threadlog.services.replay import chronological, newest_first
from threadlog.validation import ValidationError


def row(id, type, details, minutes):
    return SimpleNamespace(
        id=id,
        type=type,
        category="system",
        date=datetime(2025, 1, 1) + timedelta(minutes=minutes),
        details=details,
    )


class TestReplayOrder:
    def test_chronological_reverses_ties(self):
        """Store order is newest-first; rows sharing a timestamp are reversed too."""
        a = row("a", "sale", {}, 0)
        b = row("b", "sale", {}, 0)
        c = row("c", "sale", {}, 5)
        assert [tx.id for tx in chronological([c, b, a])] == ["a", "b", "c"]

    def test_newest_first_is_stable(self):
        a = row("a", "sale", {}, 0)
        b = row("b", "sale", {}, 0)
        assert [tx.id for tx in newest_first([a, b])] == ["a", "b"]


class TestProjectCatalog:
    def test_delete_after_define_removes_product(self):
        define = row("d1", "define_product", {"name": "A", "price": 10}, 0)
        delete = row("x1", "delete_product", {"name": "A"}, 1)

        assert project_catalog([define, delete]) == []
        assert project_catalog([delete, define]) == []

    def test_define_after_delete_keeps_product(self):
        delete = row("x1", "delete_product", {"name": "A"}, 0)
        define = row("d1", "define_product", {"name": "A", "price": 10}, 1)

        for txs in ([delete, define], [define, delete]):
            catalog = project_catalog(txs)
            assert [p.name for p in catalog] == ["A"]
            assert catalog[0].id == "d1"

    def test_redefine_replaces_whole_entry(self):
        first = row("d1", "define_product", {"name": "Tee", "price": 300, "linkedColor": "Black", "order": 1}, 0)
        second = row("d2", "define_product", {"name": "Tee", "price": 350}, 1)

        [product] = project_catalog([second, first])
        assert product.id == "d2"
        assert float(product.price) == 350
        assert product.linked_color is None
        assert product.order == catalog_service.DEFAULT_ORDER
        assert product.category == "shirts"

    def test_update_merges_provided_fields(self):
        define = row("d1", "define_product", {"name": "Tee", "price": 300, "linkedColor": "Black", "imageUrl": "a.png"}, 0)
        update = row("u1", "update_product", {"name": "Tee", "price": 320}, 1)

        [product] = project_catalog([update, define])
        assert product.id == "u1"
        assert float(product.price) == 320
        assert product.linked_color == "Black"
        assert product.image_url == "a.png"

    def test_update_of_undefined_product_is_ignored(self):
        update = row("u1", "update_product", {"name": "Ghost", "price": 1}, 0)
        assert project_catalog([update]) == []

    def test_sorted_by_order_then_replay(self):
        txs = [
            row("d1", "define_product", {"name": "B", "price": 1}, 0),
            row("d2", "define_product", {"name": "A", "price": 1, "order": 2}, 1),
            row("d3", "define_product", {"name": "C", "price": 1}, 2),
            row("d4", "define_product", {"name": "D", "price": 1, "order": 1}, 3),
        ]
        assert [p.name for p in project_catalog(txs)] == ["D", "A", "B", "C"]


class TestProductWorkflows:
    def test_define_update_delete(self):
        catalog_service.define_product({"name": "Classic Tee", "price": "299.00", "linkedColor": "White"})
        catalog_service.update_product("Classic Tee", {"price": 279}, transaction_store.list_all())

        [product] = project_catalog(transaction_store.list_all())
        assert float(product.price) == 279
        assert product.linked_color == "White"

        catalog_service.delete_product("Classic Tee")
        assert project_catalog(transaction_store.list_all()) == []

    def test_define_requires_price(self):
        with pytest.raises(ValidationError):
            catalog_service.define_product({"name": "Tee"})

    def test_update_unknown_product(self):
        with pytest.raises(NotFoundError):
            catalog_service.update_product("Missing", {"price": 1}, transaction_store.list_all())

    def test_update_needs_a_field(self):
        catalog_service.define_product({"name": "Tee", "price": 100})
        with pytest.raises(ValidationError):
            catalog_service.update_product("Tee", {}, transaction_store.list_all())

    def test_update_can_clear_linked_color(self):
        catalog_service.define_product({"name": "Tee", "price": 100, "linkedColor": "Black"})
        catalog_service.update_product("Tee", {"linkedColor": None}, transaction_store.list_all())

        [product] = project_catalog(transaction_store.list_all())
        assert product.linked_color is None
