"""Whole-order and single-item cancellation, returning stock to the catalogue."""

from collections import Counter

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.repository import load_order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


@storefront.command(part_of="Order")
class CancelOrderItem:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


def restock(items) -> None:
    """Return the quantities of ``items`` to their products' stock."""
    quantities = Counter()
    for item in items:
        quantities[str(item.product_id)] += item.quantity

    repo = current_domain.repository_for(Product)
    for product_id, quantity in quantities.items():
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            # The product was removed from the catalogue after the order was placed
            logger.warning("restock_skipped_missing_product", product_id=product_id, quantity=quantity)
            continue

        product.release_stock(quantity)
        repo.add(product)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)
        order.ensure_accessible_by(command.actor_id, command.actor_is_admin)

        restocked = order.cancel(canceled_by=command.actor_id)
        restock(restocked)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_canceled",
            order_id=str(order.id),
            canceled_by=str(command.actor_id),
            restocked_lines=len(restocked),
        )

    @handle(CancelOrderItem)
    def cancel_order_item(self, command):
        order = load_order(command.order_id)
        order.ensure_accessible_by(command.actor_id, command.actor_is_admin)

        item = order.cancel_item(command.product_id, canceled_by=command.actor_id)
        restock([item])
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_item_canceled",
            order_id=str(order.id),
            product_id=str(command.product_id),
            total_price=order.total_price,
        )
