"""Customer edits to an open order."""

import json

from protean import handle
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.repository import load_order


@storefront.command(part_of="Order")
class UpdateShippingAddress:
    order_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


@storefront.command_handler(part_of=Order)
class OrderModificationHandler:
    @handle(UpdateShippingAddress)
    def update_shipping_address(self, command):
        order = load_order(command.order_id)
        order.ensure_accessible_by(command.actor_id, command.actor_is_admin)

        order.update_shipping_address(json.loads(command.shipping_address), changed_by=command.actor_id)
        current_domain.repository_for(Order).add(order)
