from datetime import timedelta

from storefront.order.order import Order
from storefront.order.timeline import SYSTEM_ACTOR, build_timeline


def _order():
    return Order.place(
        user_id="user-1",
        items=[{"product_id": "prod-a", "name": "Mug", "price": 10.0, "quantity": 1}],
        shipping_address={"address": "1 High St", "city": "Leeds"},
        payment_method="PayPal",
    )


def test_new_order_has_only_placed_milestone():
    timeline = build_timeline(_order())
    assert [(e.status, e.automated) for e in timeline] == [("Order Placed", True)]
    assert timeline[0].by is None


def test_paid_and_delivered_milestones_are_added():
    order = _order()
    order.mark_paid("PAY-1", "COMPLETED", paid_by="user-1")
    order.mark_delivered(delivered_by="admin-1", is_admin=True)

    automated = [e.status for e in build_timeline(order) if e.automated]
    assert automated == ["Order Placed", "Payment Confirmed", "Delivered"]


def test_history_entries_name_their_actor():
    order = _order()
    order.mark_paid("PAY-1", "COMPLETED", paid_by="user-1")
    order.set_custom_status("Processing", changed_by="admin-1", is_admin=True)

    manual = [e for e in build_timeline(order, {"user-1": "Ada", "admin-1": "Grace"}) if not e.automated]
    assert [(e.status, e.by) for e in manual] == [("Payment Confirmed", "Ada"), ("Processing", "Grace")]


def test_unknown_actor_falls_back_to_id():
    order = _order()
    order.set_custom_status("Shipped", changed_by="admin-9", is_admin=True)
    entry = [e for e in build_timeline(order) if not e.automated][0]
    assert entry.by == "admin-9"


def test_changes_without_actor_are_attributed_to_system():
    order = _order()
    order.mark_paid("PAY-1", "COMPLETED")
    entry = [e for e in build_timeline(order) if not e.automated][0]
    assert entry.by == SYSTEM_ACTOR


def test_canceled_order_shows_milestone_and_history_entry():
    order = _order()
    order.cancel(canceled_by="user-1")
    statuses = [(e.status, e.automated) for e in build_timeline(order)]
    assert ("Canceled", True) in statuses
    assert ("Canceled", False) in statuses


def test_entries_are_sorted_oldest_first():
    order = _order()
    order.mark_paid("PAY-1", "COMPLETED", paid_by="user-1")
    order.add_tracking("UPS", "1Z", changed_by="admin-1", is_admin=True)
    timeline = build_timeline(order)
    dates = [e.date for e in timeline]
    assert dates == sorted(dates)
    assert dates[-1] - dates[0] >= timedelta(0)
