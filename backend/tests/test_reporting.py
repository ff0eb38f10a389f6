# Overview: Pytest coverage for expenses and dashboard totals.

from datetime import datetime

import pytest

from threadlog.errors import NotFoundError
from threadlog.services import expense_service, reporting_service, transaction_store
from threadlog.validation import ValidationError


class TestExpenses:
    def test_record_expense(self):
        tx = expense_service.record_expense({"category": "Rent", "amount": "15000"}, "owner@shop.test")

        assert tx.type == "expense"
        assert tx.description == "Expense: Rent"
        assert tx.details == {"subCategory": "Rent", "createdBy": "owner@shop.test"}

    def test_other_needs_custom_category(self):
        with pytest.raises(ValidationError):
            expense_service.record_expense({"category": "Other", "amount": 10})

        tx = expense_service.record_expense({"category": "Other", "customCategory": "Permits", "amount": 10})
        assert tx.details["subCategory"] == "Permits"

    def test_update_expense_stamps_editor(self):
        tx = expense_service.record_expense({"category": "Rent", "amount": 100})
        updated = expense_service.update_expense(tx.id, {"amount": 120}, "staff@shop.test")

        assert float(updated.amount) == 120
        assert updated.details["updatedBy"] == "staff@shop.test"
        assert updated.details["updatedAt"].endswith("Z")

    def test_update_non_expense(self, make_tx):
        tx = make_tx("sale", {"orderId": "O1"})
        with pytest.raises(NotFoundError):
            expense_service.update_expense(tx.id, {"amount": 1})

    def test_list_includes_stock_purchases(self, make_tx):
        make_tx("expense", {"color": "Black", "size": "M", "quantity": 3}, category="blanks", amount=300, minutes=1)
        make_tx("expense", {"subCategory": "Rent"}, amount=100, minutes=2)
        make_tx("sale", {"orderId": "O1"}, amount=500, minutes=3)

        listed = expense_service.list_expenses(transaction_store.list_all())
        assert [float(tx.amount) for tx in listed] == [100.0, 300.0]


class TestDashboard:
    @pytest.fixture
    def ledger(self, make_tx):
        make_tx("sale", {"orderId": "O1"}, amount=500, minutes=0)  # 2025-03-01
        make_tx("expense", {"subCategory": "Rent"}, amount=200, minutes=60 * 24 * 3)  # 2025-03-04
        make_tx("sale", {"orderId": "O2"}, amount=100, minutes=60 * 24 * 40)  # 2025-04-10
        make_tx("voucher", {"code": "X"}, minutes=1)

    def test_all_time(self, ledger):
        summary = reporting_service.dashboard_summary(transaction_store.list_all(), "all", datetime(2025, 4, 10))
        assert summary["total_sales"] == 600.0
        assert summary["total_expenses"] == 200.0
        assert summary["net_profit"] == 400.0
        assert summary["transaction_count"] == 4

    def test_monthly(self, ledger):
        summary = reporting_service.dashboard_summary(transaction_store.list_all(), "monthly", datetime(2025, 3, 20))
        assert summary["total_sales"] == 500.0
        assert summary["net_profit"] == 300.0

    def test_daily(self, ledger):
        summary = reporting_service.dashboard_summary(transaction_store.list_all(), "daily", datetime(2025, 4, 10, 23, 0))
        assert summary["total_sales"] == 100.0
        assert summary["transaction_count"] == 1

    def test_unknown_period(self):
        with pytest.raises(ValidationError):
            reporting_service.dashboard_summary([], "weekly", datetime(2025, 1, 1))
