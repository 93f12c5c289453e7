"""Read side of the order workflow: single orders, listings and timelines."""

from dataclasses import dataclass
from datetime import datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront import settings
from storefront.customer.user import User
from storefront.errors import AdminRequired, InvalidRequestError
from storefront.order.order import Order
from storefront.order.repository import load_order
from storefront.order.timeline import TimelineEntry, build_timeline
from storefront.utils.clock import as_utc

MY_ORDER_FILTERS = {
    "paid": {"is_paid": True},
    "delivered": {"is_delivered": True},
    "canceled": {"is_canceled": True},
}

ADMIN_ORDER_FILTERS = {
    **MY_ORDER_FILTERS,
    "unpaid": {"is_paid": False},
}


@dataclass
class OrderPage:
    orders: list[Order]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0


def _page_window(page, limit, default, maximum) -> tuple[int, int]:
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or default), 1), maximum)
    return page, limit


def _status_filter(status, choices) -> dict:
    if not status:
        return {}
    try:
        return dict(choices[status])
    except KeyError:
        raise InvalidRequestError(f"Unknown status filter '{status}'", allowed=sorted(choices))


def get_order(order_id, actor_id, is_admin=False) -> Order:
    order = load_order(order_id)
    order.ensure_accessible_by(actor_id, is_admin)
    return order


def list_my_orders(actor_id, page=1, limit=None, status=None) -> OrderPage:
    page, limit = _page_window(page, limit, settings.MY_ORDERS_PAGE_SIZE, settings.MY_ORDERS_MAX_PAGE_SIZE)
    filters = {"user_id": actor_id, **_status_filter(status, MY_ORDER_FILTERS)}

    orders, total = current_domain.repository_for(Order).page(filters, offset=(page - 1) * limit, limit=limit)
    return OrderPage(orders=orders, total=total, page=page, limit=limit)


def list_orders(
    is_admin,
    page=1,
    limit=None,
    status=None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> OrderPage:
    """Every customer's orders, for administrators."""
    if not is_admin:
        raise AdminRequired("list all orders")

    page, limit = _page_window(page, limit, settings.ADMIN_ORDERS_PAGE_SIZE, settings.ADMIN_ORDERS_MAX_PAGE_SIZE)
    filters = _status_filter(status, ADMIN_ORDER_FILTERS)
    if start_date:
        filters["created_at__gte"] = as_utc(start_date)
    if end_date:
        filters["created_at__lte"] = as_utc(end_date)

    orders, total = current_domain.repository_for(Order).page(filters, offset=(page - 1) * limit, limit=limit)
    return OrderPage(orders=orders, total=total, page=page, limit=limit)


def _actor_names(order: Order) -> dict:
    repo = current_domain.repository_for(User)
    names = {}
    for actor_id in {str(change.changed_by) for change in order.status_history if change.changed_by}:
        try:
            names[actor_id] = repo.get(actor_id).name
        except ObjectNotFoundError:
            continue
    return names


def order_timeline(order_id, actor_id, is_admin=False) -> list[TimelineEntry]:
    order = get_order(order_id, actor_id, is_admin)
    return build_timeline(order, _actor_names(order))
