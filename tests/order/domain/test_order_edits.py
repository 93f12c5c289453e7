"""Domain tests for address, payment method, display status and tracking edits."""

import pytest

from storefront.errors import (
    AdminRequired,
    AlreadyCanceled,
    CannotModifyDeliveredOrder,
    CannotModifyPaidOrder,
    InvalidOrderStatus,
    InvalidPaymentMethod,
    InvalidRequestError,
    InvalidShippingAddress,
)
from storefront.order.events import OrderStatusUpdated, PaymentMethodChanged, TrackingInfoAdded
from storefront.order.order import Order


@pytest.fixture()
def order():
    return Order.place(
        user_id="user-1",
        items=[{"product_id": "prod-a", "name": "Mug", "price": 10.0, "quantity": 1}],
        shipping_address={"address": "1 High St", "city": "Leeds"},
        payment_method="COD",
    )


class TestShippingAddress:
    def test_update(self, order):
        order.update_shipping_address({"address": "9 Low Rd", "city": "York", "country": "UK"}, changed_by="user-1")
        assert order.shipping_address.address == "9 Low Rd"
        assert order.shipping_address.city == "York"
        assert order.history[-1].status == "Shipping Address Updated"

    def test_requires_address_and_city(self, order):
        with pytest.raises(InvalidShippingAddress):
            order.update_shipping_address({"address": "9 Low Rd"}, changed_by="user-1")

    def test_blocked_after_delivery(self, order):
        order.mark_paid("PAY-1", "COMPLETED")
        order.mark_delivered(delivered_by="admin-1", is_admin=True)
        with pytest.raises(CannotModifyDeliveredOrder):
            order.update_shipping_address({"address": "9 Low Rd", "city": "York"}, changed_by="user-1")

    def test_blocked_after_cancel(self, order):
        order.cancel(canceled_by="user-1")
        with pytest.raises(AlreadyCanceled):
            order.update_shipping_address({"address": "9 Low Rd", "city": "York"}, changed_by="user-1")


class TestPaymentMethod:
    def test_change(self, order):
        order.change_payment_method("Credit Card", changed_by="user-1")
        assert order.payment_method == "Credit Card"
        assert order.history[-1].status == "Payment Method Changed to Credit Card"
        event = order._events[-1]
        assert isinstance(event, PaymentMethodChanged)
        assert event.previous_method == "COD"

    def test_invalid_method(self, order):
        with pytest.raises(InvalidPaymentMethod):
            order.change_payment_method("Cheque", changed_by="user-1")

    def test_blocked_after_payment(self, order):
        order.mark_paid("PAY-1", "COMPLETED")
        with pytest.raises(CannotModifyPaidOrder):
            order.change_payment_method("Stripe", changed_by="user-1")


class TestCustomStatus:
    def test_admin_sets_status(self, order):
        order.set_custom_status("Processing", changed_by="admin-1", is_admin=True)
        assert order.custom_status == "Processing"
        assert order.history[-1].status == "Processing"
        event = order._events[-1]
        assert isinstance(event, OrderStatusUpdated)
        assert event.previous_status == "Pending"

    def test_does_not_change_lifecycle_flags(self, order):
        order.set_custom_status("Delivered", changed_by="admin-1", is_admin=True)
        assert order.is_delivered is False

    def test_unknown_status(self, order):
        with pytest.raises(InvalidOrderStatus):
            order.set_custom_status("Lost", changed_by="admin-1", is_admin=True)

    def test_customers_cannot_set_status(self, order):
        with pytest.raises(AdminRequired):
            order.set_custom_status("Shipped", changed_by="user-1", is_admin=False)


class TestTracking:
    def test_requires_payment(self, order):
        with pytest.raises(InvalidRequestError):
            order.add_tracking("UPS", "1Z999", changed_by="admin-1", is_admin=True)

    def test_default_tracking_url(self, order):
        order.mark_paid("PAY-1", "COMPLETED")
        order.add_tracking("UPS", "1Z999", changed_by="admin-1", is_admin=True)
        assert order.tracking_info.tracking_url == "https://track.ups.com/1Z999"
        assert order.history[-1].status == "Tracking Added - UPS: 1Z999"
        assert isinstance(order._events[-1], TrackingInfoAdded)

    def test_explicit_tracking_url(self, order):
        order.mark_paid("PAY-1", "COMPLETED")
        order.add_tracking("DHL", "JD01", changed_by="admin-1", is_admin=True, tracking_url="https://dhl.example/JD01")
        assert order.tracking_info.tracking_url == "https://dhl.example/JD01"

    def test_admin_only(self, order):
        order.mark_paid("PAY-1", "COMPLETED")
        with pytest.raises(AdminRequired):
            order.add_tracking("UPS", "1Z999", changed_by="user-1", is_admin=False)
