# Overview: Pytest coverage for the raw inventory fold and stock-moving workflows.

import itertools
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from threadlog.services import inventory_service, transaction_store
from threadlog.services.inventory_service import project_raw_inventory, sku_key
from threadlog.validation import ValidationError


def row(type, details=None, category="general", minutes=0, description=""):
    """Unsaved stand-in for a Transaction; the fold only reads attributes."""
    return SimpleNamespace(
        id=f"{type}-{minutes}",
        type=type,
        amount=Decimal("0"),
        description=description,
        category=category,
        date=datetime(2025, 1, 1) + timedelta(minutes=minutes),
        details=details,
    )


class TestSkuKey:
    def test_blank_key_from_category(self):
        tx = row("expense", {"color": "Black", "size": "M"}, category="blanks")
        assert sku_key(tx) == "shirt-black-m"

    def test_blank_key_from_details_category(self):
        tx = row("sale", {"color": "Navy", "size": "XL", "category": "blanks"}, category="sale")
        assert sku_key(tx) == "shirt-navy-xl"

    def test_linked_color_fallback(self):
        tx = row("sale", {"linkedColor": "White", "size": "S", "category": "blanks"})
        assert sku_key(tx) == "shirt-white-s"

    def test_blank_without_size_has_no_key(self):
        assert sku_key(row("expense", {"color": "Black"}, category="blanks")) is None

    def test_accessory_key_collapses_whitespace(self):
        tx = row("expense", {"subCategory": "  Tote   Bag "}, category="accessories")
        assert sku_key(tx) == "acc-tote-bag"

    def test_accessory_key_falls_back_to_description(self):
        tx = row("expense", {"quantity": 1}, description="Sticker Pack")
        assert sku_key(tx) == "acc-sticker-pack"


class TestProjectRawInventory:
    def test_single_blank_purchase(self):
        """One expense of 10 black M blanks."""
        txs = [row("expense", {"color": "Black", "size": "M", "quantity": 10}, category="blanks")]
        assert project_raw_inventory(txs) == {"shirt-black-m": 10}

    def test_surface_variants_fold_together(self):
        txs = [
            row("expense", {"color": "White", "size": "M", "quantity": 3}, category="blanks", minutes=1),
            row("expense", {"color": " white ", "size": "M", "quantity": 4}, category="blanks", minutes=2),
        ]
        assert project_raw_inventory(txs) == {"shirt-white-m": 7}

    def test_oversell_goes_negative(self):
        txs = [
            row("expense", {"color": "Black", "size": "M", "quantity": 5}, category="blanks", minutes=1),
            row("sale", {"color": "Black", "size": "M", "quantity": 7, "category": "blanks"}, minutes=2),
        ]
        assert project_raw_inventory(txs) == {"shirt-black-m": -2}

    def test_order_does_not_matter(self):
        txs = [
            row("expense", {"color": "Black", "size": "M", "quantity": 5}, category="blanks", minutes=1),
            row("sale", {"color": "Black", "size": "M", "quantity": 2, "category": "blanks"}, minutes=2),
            row("update_stock", {"color": "Black", "size": "M", "quantity": -1}, category="blanks", minutes=3),
            row("return", {"color": "Black", "size": "M", "quantity": 1, "category": "blanks"}, category="return", minutes=4),
            row("expense", {"subCategory": "Tote Bag", "quantity": 4}, category="accessories", minutes=5),
            row("sale", {"itemName": "Tote Bag", "quantity": 1}, minutes=6),
        ]
        expected = {"shirt-black-m": 3, "acc-tote-bag": 3}
        for perm in itertools.permutations(txs):
            assert project_raw_inventory(list(perm)) == expected

    def test_missing_quantity_contributes_zero(self):
        txs = [row("expense", {"color": "Red", "size": "L"}, category="blanks")]
        assert project_raw_inventory(txs) == {"shirt-red-l": 0}

    def test_non_stock_types_ignored(self):
        txs = [
            row("define_product", {"name": "Tee", "price": 300}, category="system"),
            row("voucher", {"code": "SAVE10"}, category="system"),
            row("expense", None, category="blanks"),
        ]
        assert project_raw_inventory(txs) == {}


class TestStockWorkflows:
    def test_receipt_then_summary(self, make_tx):
        inventory_service.record_stock_receipt({"color": "Black", "size": "m", "quantity": 12, "cost": 1200})
        inventory_service.record_stock_receipt({"category": "accessories", "subCategory": "Tote Bag", "quantity": 3})
        make_tx("sale", {"color": "Black", "size": "M", "quantity": 2, "category": "blanks"}, minutes=5)

        summary = inventory_service.inventory_summary(transaction_store.list_all())

        assert [(r["key"], r["quantity"]) for r in summary] == [
            ("shirt-black-m", 10),
            ("acc-tote-bag", 3),
        ]
        assert summary[0]["size"] == "m"
        assert summary[1]["name"] == "tote-bag"

    def test_summary_orders_sizes_by_ladder(self, make_tx):
        for minutes, size in enumerate(["XL", "S", "M"]):
            make_tx("expense", {"color": "White", "size": size, "quantity": 1}, category="blanks", minutes=minutes)

        keys = [r["key"] for r in inventory_service.inventory_summary(transaction_store.list_all())]
        assert keys == ["shirt-white-s", "shirt-white-m", "shirt-white-xl"]

    def test_receipt_rejects_unknown_size(self):
        with pytest.raises(ValidationError):
            inventory_service.record_stock_receipt({"color": "Black", "size": "XXXL", "quantity": 1})

    def test_receipt_rejects_zero_quantity(self):
        with pytest.raises(ValidationError):
            inventory_service.record_stock_receipt({"color": "Black", "size": "M", "quantity": 0})

    def test_adjustment_is_signed(self):
        inventory_service.record_stock_receipt({"color": "Pink", "size": "S", "quantity": 5})
        tx = inventory_service.adjust_stock({"color": "Pink", "size": "S", "quantity": "-2", "reason": "damaged"})

        assert tx.type == "update_stock"
        assert tx.details["reason"] == "damaged"
        assert project_raw_inventory(transaction_store.list_all()) == {"shirt-pink-s": 3}

    def test_adjustment_of_zero_rejected(self):
        with pytest.raises(ValidationError):
            inventory_service.adjust_stock({"color": "Pink", "size": "S", "quantity": 0})

    def test_return_restocks_and_records_refund(self):
        tx = inventory_service.record_return({"color": "Aqua", "size": "L", "quantity": 2, "refund": 500, "orderId": "O9"})

        assert tx.type == "return"
        assert tx.category == "return"
        assert float(tx.amount) == 500
        assert tx.details["orderId"] == "O9"
        assert project_raw_inventory(transaction_store.list_all()) == {"shirt-aqua-l": 2}

    def test_csv_export(self):
        inventory_service.record_stock_receipt({"color": "Black", "size": "M", "quantity": 4})

        lines = inventory_service.export_inventory_csv(transaction_store.list_all()).splitlines()
        assert lines[0] == "Key,Color,Size,Name,Quantity"
        assert lines[1] == "shirt-black-m,black,m,,4"
