"""Recording payment and switching payment method before payment."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.customer.user import User
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.repository import load_order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class MarkOrderAsPaid:
    order_id = Identifier(required=True)
    payment_id = String(required=True, max_length=255)
    payment_status = String(required=True, max_length=50)
    update_time = String(max_length=100)
    email_address = String(max_length=254)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


@storefront.command(part_of="Order")
class ChangePaymentMethod:
    order_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


def _owner_email(order: Order) -> str | None:
    try:
        return current_domain.repository_for(User).get(order.user_id).email
    except ObjectNotFoundError:
        return None


@storefront.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(MarkOrderAsPaid)
    def mark_order_as_paid(self, command):
        order = load_order(command.order_id)
        order.ensure_accessible_by(command.actor_id, command.actor_is_admin)

        order.mark_paid(
            payment_id=command.payment_id,
            status=command.payment_status,
            update_time=command.update_time,
            email_address=command.email_address or _owner_email(order),
            paid_by=command.actor_id,
        )
        current_domain.repository_for(Order).add(order)

        logger.info("order_paid", order_id=str(order.id), payment_id=command.payment_id)

    @handle(ChangePaymentMethod)
    def change_payment_method(self, command):
        order = load_order(command.order_id)
        order.ensure_accessible_by(command.actor_id, command.actor_is_admin)

        order.change_payment_method(command.payment_method, changed_by=command.actor_id)
        current_domain.repository_for(Order).add(order)
