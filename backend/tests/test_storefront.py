# Overview: Pytest coverage for the customer storefront: stock gating, shipping and vouchers.

from datetime import date
from decimal import Decimal

import pytest

from threadlog.extensions import db
from threadlog.models import Customer
from threadlog.services import catalog_service, inventory_service, order_service, storefront_service, transaction_store, voucher_service
from threadlog.validation import ValidationError


SHIPPING = {
    "customerName": "Carla",
    "address": "12 Mabini St",
    "barangay": "San Antonio",
    "city": "Pasig",
    "contactNumber": "09171234567",
}


@pytest.fixture
def shop():
    catalog_service.define_product({"name": "Classic Tee", "price": 300, "linkedColor": "Black"})
    catalog_service.define_product({"name": "Cap", "price": 150, "category": "accessories"})
    inventory_service.record_stock_receipt({"color": "Black", "size": "M", "quantity": 2})


def order(**overrides):
    payload = dict(SHIPPING)
    payload.setdefault("items", [{"product": "Classic Tee", "size": "M", "quantity": 1}])
    payload.update(overrides)
    return storefront_service.place_online_order(payload, transaction_store.list_all(), today=date(2025, 1, 1))


class TestStorefrontCatalog:
    def test_stock_per_size(self, shop):
        listing = {p["name"]: p for p in storefront_service.storefront_catalog(transaction_store.list_all())}

        assert listing["Classic Tee"]["stock"]["M"] == 2
        assert listing["Classic Tee"]["stock"]["L"] == 0
        assert listing["Cap"]["stock"]["M"] == inventory_service.UNLIMITED_STOCK


class TestPlaceOnlineOrder:
    def test_order_lands_pending_and_unpaid(self, shop):
        created = order()

        [tx] = created
        assert tx.details["isOnlineOrder"] is True
        assert tx.details["fulfillmentStatus"] == "pending"
        assert tx.details["paymentStatus"] == "unpaid"
        assert tx.details["paymentMode"] == "COD"
        assert tx.details["shippingDetails"]["shippingFee"] == 100.0
        assert tx.details["shippingDetails"]["province"] == "Metro Manila"

        [grouped] = order_service.load_orders()
        assert grouped.is_online_order is True
        assert grouped.contact_number == "09171234567"

    def test_sale_consumes_linked_blank(self, shop):
        order()
        raw = inventory_service.project_raw_inventory(transaction_store.list_all())
        assert raw["shirt-black-m"] == 1

    def test_cannot_oversell(self, shop):
        with pytest.raises(ValidationError, match="Not enough stock"):
            order(items=[{"product": "Classic Tee", "size": "M", "quantity": 3}])

    def test_lines_for_same_blank_are_summed(self, shop):
        with pytest.raises(ValidationError):
            order(items=[
                {"product": "Classic Tee", "size": "M", "quantity": 2},
                {"product": "Classic Tee", "size": "m", "quantity": 1},
            ])

    def test_linked_product_needs_size(self, shop):
        with pytest.raises(ValidationError, match="size"):
            order(items=[{"product": "Classic Tee", "quantity": 1}])

    def test_proof_required_for_transfers(self, shop):
        with pytest.raises(ValidationError, match="proof of payment"):
            order(paymentMode="Gcash")

        [tx] = order(paymentMode="Gcash", proofOfPayment="https://img.example/receipt.png")
        assert tx.details["proofOfPayment"] == "https://img.example/receipt.png"

    def test_provincial_needs_province(self, shop):
        with pytest.raises(ValidationError):
            order(region="Provincial")

        [tx] = order(region="Provincial", province="Cebu")
        assert tx.details["shippingDetails"]["shippingFee"] == 200.0

    def test_voucher_discount_is_prorated(self, shop):
        voucher_service.create_voucher({"code": "SAVE10", "discountType": "percent", "value": 10}, transaction_store.list_all())

        created = order(
            items=[{"product": "Classic Tee", "size": "M", "quantity": 1}, {"product": "Cap", "quantity": 1}],
            voucherCode="save10",
        )

        assert [float(tx.amount) for tx in created] == [270.0, 135.0]
        assert [tx.details["discountShare"] for tx in created] == [30.0, 15.0]
        assert all(tx.details["voucherCode"] == "SAVE10" for tx in created)
        assert voucher_service.count_redemptions(transaction_store.list_all(), "SAVE10") == 1

    def test_rounding_tie_goes_to_later_line(self, shop):
        voucher_service.create_voucher({"code": "TEN", "discountType": "fixed", "value": 10}, transaction_store.list_all())
        for name in ("Sticker", "Pin", "Patch"):
            catalog_service.define_product({"name": name, "price": 100})

        created = order(
            items=[{"product": name, "quantity": 1} for name in ("Sticker", "Pin", "Patch")],
            voucherCode="TEN",
        )
        shares = [Decimal(str(tx.details["discountShare"])) for tx in created]
        assert shares == [Decimal("3.33"), Decimal("3.33"), Decimal("3.34")]
        assert sum(shares) == Decimal("10")

    def test_sub_cent_shares_never_go_negative(self):
        amounts = [Decimal("1.00")] * 5

        shares = storefront_service.allocate_discount(Decimal("0.03"), amounts)

        assert shares == [Decimal("0"), Decimal("0"), Decimal("0.01"), Decimal("0.01"), Decimal("0.01")]
        assert sum(shares) == Decimal("0.03")

    def test_shares_stay_within_line_totals(self):
        amounts = [Decimal("0.50"), Decimal("0.50"), Decimal("99.00")]

        shares = storefront_service.allocate_discount(Decimal("1.00"), amounts)

        assert shares == [Decimal("0"), Decimal("0.01"), Decimal("0.99")]
        assert all(Decimal("0") <= share <= amount for share, amount in zip(shares, amounts))

    def test_discount_larger_than_subtotal_is_capped(self):
        shares = storefront_service.allocate_discount(Decimal("50"), [Decimal("10.00"), Decimal("20.00")])
        assert shares == [Decimal("10.00"), Decimal("20.00")]

    def test_customer_saved_with_address(self, shop):
        order()
        customer = db.session.query(Customer).filter_by(name="Carla").one()
        assert customer.address == "12 Mabini St, San Antonio, Pasig, Metro Manila"
        assert customer.total_spent == Decimal("300")

    def test_empty_cart(self, shop):
        with pytest.raises(ValidationError):
            order(items=[])
