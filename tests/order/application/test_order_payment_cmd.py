import pytest
from protean import current_domain

from storefront.errors import (
    AdminRequired,
    AlreadyPaid,
    CannotDeliverUnpaid,
    CannotModifyPaidOrder,
    NotOrderOwner,
    OrderNotFound,
)
from storefront.order.fulfillment import MarkOrderAsDelivered
from storefront.order.payment import ChangePaymentMethod, MarkOrderAsPaid


def _pay(order_id, actor_id, payment_id="PAY-1", email_address=None, is_admin=False):
    current_domain.process(
        MarkOrderAsPaid(
            order_id=order_id,
            payment_id=payment_id,
            payment_status="COMPLETED",
            update_time="2024-05-01T10:00:00Z",
            email_address=email_address,
            actor_id=actor_id,
            actor_is_admin=is_admin,
        ),
        asynchronous=False,
    )


def _deliver(order_id, actor_id, is_admin=True):
    current_domain.process(
        MarkOrderAsDelivered(order_id=order_id, actor_id=actor_id, actor_is_admin=is_admin),
        asynchronous=False,
    )


@pytest.fixture()
def order_id(customer_id, make_product, place_order):
    product_id = make_product(price=10.0)
    return place_order(customer_id, [(product_id, 1, 10.0)])


class TestMarkAsPaid:
    def test_records_payment(self, order_id, customer_id, load_order):
        _pay(order_id, customer_id, email_address="payer@example.com")

        order = load_order(order_id)
        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.payment_result.payment_id == "PAY-1"
        assert order.payment_result.email_address == "payer@example.com"

    def test_email_defaults_to_owner(self, order_id, customer_id, load_order):
        _pay(order_id, customer_id)
        assert load_order(order_id).payment_result.email_address == "ada@example.com"

    def test_paying_twice_keeps_first_payment(self, order_id, customer_id, load_order):
        _pay(order_id, customer_id)
        paid_at = load_order(order_id).paid_at

        with pytest.raises(AlreadyPaid):
            _pay(order_id, customer_id, payment_id="PAY-2")

        order = load_order(order_id)
        assert order.paid_at == paid_at
        assert order.payment_result.payment_id == "PAY-1"

    def test_strangers_cannot_pay(self, order_id, make_user):
        with pytest.raises(NotOrderOwner):
            _pay(order_id, make_user(name="Eve"))

    def test_unknown_order(self, customer_id):
        with pytest.raises(OrderNotFound):
            _pay("no-such-order", customer_id)


class TestMarkAsDelivered:
    def test_delivers_paid_order(self, order_id, customer_id, admin_id, load_order):
        _pay(order_id, customer_id)
        _deliver(order_id, admin_id)

        order = load_order(order_id)
        assert order.is_delivered is True
        assert order.delivered_at is not None

    def test_unpaid_order(self, order_id, admin_id, load_order):
        with pytest.raises(CannotDeliverUnpaid):
            _deliver(order_id, admin_id)
        assert load_order(order_id).is_delivered is False

    def test_customers_cannot_deliver(self, order_id, customer_id):
        _pay(order_id, customer_id)
        with pytest.raises(AdminRequired):
            _deliver(order_id, customer_id, is_admin=False)


class TestChangePaymentMethod:
    def test_before_payment(self, order_id, customer_id, load_order):
        current_domain.process(
            ChangePaymentMethod(order_id=order_id, payment_method="Stripe", actor_id=customer_id),
            asynchronous=False,
        )
        assert load_order(order_id).payment_method == "Stripe"

    def test_after_payment(self, order_id, customer_id, load_order):
        _pay(order_id, customer_id)
        with pytest.raises(CannotModifyPaidOrder):
            current_domain.process(
                ChangePaymentMethod(order_id=order_id, payment_method="Stripe", actor_id=customer_id),
                asynchronous=False,
            )
        assert load_order(order_id).payment_method == "PayPal"
