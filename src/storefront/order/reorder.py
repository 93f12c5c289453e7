"""Reorder: place a fresh order for whatever is still available from an old one."""

from collections import Counter

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront import settings
from storefront.catalogue.management import load_product
from storefront.domain import storefront
from storefront.errors import NothingToReorder, NotOrderOwner, ProductNotFound
from storefront.order.creation import place_order
from storefront.order.order import Order
from storefront.order.repository import load_order
from storefront.utils.clock import utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class Reorder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)


def _unavailable(item, available_quantity):
    return {
        "product_id": str(item.product_id),
        "name": item.name,
        "requested_quantity": item.quantity,
        "available_quantity": available_quantity,
    }


@storefront.command_handler(part_of=Order)
class ReorderHandler:
    @handle(Reorder)
    def reorder(self, command):
        """Returns ``{"order_id": ..., "unavailable_items": [...]}``."""
        previous = load_order(command.order_id)
        if not previous.is_owned_by(command.actor_id):
            raise NotOrderOwner("Not authorized to reorder this order")

        now = utcnow()
        lines, unavailable = [], []
        claimed = Counter()
        for item in previous.active_items:
            try:
                product = load_product(item.product_id)
            except ProductNotFound:
                unavailable.append(_unavailable(item, 0))
                continue

            if not product.has_stock_for(claimed[product.id] + item.quantity):
                unavailable.append(_unavailable(item, product.count_in_stock - claimed[product.id]))
                continue

            claimed[product.id] += item.quantity
            lines.append((item.quantity, product))

        if not lines:
            raise NothingToReorder(unavailable_items=unavailable)

        items_price = round(sum(quantity * product.effective_price(now) for quantity, product in lines), 2)
        address = previous.shipping_address
        order = place_order(
            user_id=command.actor_id,
            items=[{"product_id": str(product.id), "quantity": quantity} for quantity, product in lines],
            shipping_address={
                "address": address.address,
                "city": address.city,
                "postal_code": address.postal_code,
                "country": address.country,
            },
            payment_method=previous.payment_method,
            items_price=items_price,
            shipping_price=previous.shipping_price,
            tax_price=round(items_price * settings.REORDER_TAX_RATE, 2),
        )

        logger.info(
            "order_reordered",
            previous_order_id=str(previous.id),
            order_id=str(order.id),
            unavailable=len(unavailable),
        )
        return {"order_id": str(order.id), "unavailable_items": unavailable}
