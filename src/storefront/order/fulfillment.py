"""Admin-side fulfillment: delivery, display status and tracking."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.repository import load_order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class MarkOrderAsDelivered:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


@storefront.command(part_of="Order")
class AddTrackingInfo:
    order_id = Identifier(required=True)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=100)
    tracking_url = String(max_length=500)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


@storefront.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(MarkOrderAsDelivered)
    def mark_order_as_delivered(self, command):
        order = load_order(command.order_id)
        order.mark_delivered(delivered_by=command.actor_id, is_admin=command.actor_is_admin)
        current_domain.repository_for(Order).add(order)

        logger.info("order_delivered", order_id=str(order.id))

    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = load_order(command.order_id)
        order.set_custom_status(command.status, changed_by=command.actor_id, is_admin=command.actor_is_admin)
        current_domain.repository_for(Order).add(order)

    @handle(AddTrackingInfo)
    def add_tracking_info(self, command):
        order = load_order(command.order_id)
        order.add_tracking(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            tracking_url=command.tracking_url,
            changed_by=command.actor_id,
            is_admin=command.actor_is_admin,
        )
        current_domain.repository_for(Order).add(order)

        logger.info("tracking_added", order_id=str(order.id), carrier=command.carrier)
