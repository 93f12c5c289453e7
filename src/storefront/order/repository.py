"""Order lookups and paginated listings."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import OrderNotFound
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def page(self, filters: dict, offset: int, limit: int):
        """Return ``(orders, total)`` for one page, newest first."""
        query = self._dao.query
        if filters:
            query = query.filter(**filters)

        results = query.order_by("-created_at").offset(offset).limit(limit).all()
        return results.items, results.total


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(order_id)
