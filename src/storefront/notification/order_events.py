"""Customer e-mails for order lifecycle events.

Delivery is best effort: a failed or crashing send is logged and dropped,
never propagated back into the order workflow.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.customer.user import User
from storefront.domain import storefront
from storefront.notification.channel import get_email_channel
from storefront.notification.templates import (
    DeliveryConfirmationTemplate,
    ItemCancellationTemplate,
    OrderCancellationTemplate,
    OrderConfirmationTemplate,
    PaymentReceiptTemplate,
    ShippingUpdateTemplate,
)
from storefront.order.events import (
    OrderCanceled,
    OrderDelivered,
    OrderItemCanceled,
    OrderPaid,
    OrderPlaced,
    TrackingInfoAdded,
)
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def notify_customer(user_id, template, context: dict) -> bool:
    """Render ``template`` for the order's owner and send it. Returns True on success."""
    try:
        user = current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError:
        logger.warning("notification_recipient_missing", user_id=str(user_id), order_id=context.get("order_id"))
        return False

    message = template.render({"name": user.name, **context})
    try:
        result = get_email_channel().send(to=user.email, subject=message["subject"], body=message["body"])
    except Exception as exc:
        logger.error(
            "notification_send_crashed",
            user_id=str(user_id),
            order_id=context.get("order_id"),
            subject=message["subject"],
            error=str(exc),
        )
        return False

    if result.get("status") != "sent":
        logger.error(
            "notification_send_failed",
            user_id=str(user_id),
            order_id=context.get("order_id"),
            subject=message["subject"],
            error=result.get("error"),
        )
        return False

    logger.info(
        "notification_sent",
        order_id=context.get("order_id"),
        subject=message["subject"],
        message_id=result.get("message_id"),
    )
    return True


@storefront.event_handler(part_of=Order)
class OrderNotificationHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        notify_customer(
            event.user_id,
            OrderConfirmationTemplate,
            {
                "order_id": str(event.order_id),
                "item_count": event.item_count,
                "total_price": event.total_price,
            },
        )

    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        notify_customer(
            event.user_id,
            PaymentReceiptTemplate,
            {
                "order_id": str(event.order_id),
                "payment_id": event.payment_id,
                "total_price": event.total_price,
            },
        )

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        notify_customer(event.user_id, DeliveryConfirmationTemplate, {"order_id": str(event.order_id)})

    @handle(OrderCanceled)
    def on_order_canceled(self, event: OrderCanceled) -> None:
        notify_customer(event.user_id, OrderCancellationTemplate, {"order_id": str(event.order_id)})

    @handle(OrderItemCanceled)
    def on_order_item_canceled(self, event: OrderItemCanceled) -> None:
        notify_customer(
            event.user_id,
            ItemCancellationTemplate,
            {
                "order_id": str(event.order_id),
                "item_name": event.item_name,
                "total_price": event.total_price,
            },
        )

    @handle(TrackingInfoAdded)
    def on_tracking_info_added(self, event: TrackingInfoAdded) -> None:
        notify_customer(
            event.user_id,
            ShippingUpdateTemplate,
            {
                "order_id": str(event.order_id),
                "carrier": event.carrier,
                "tracking_number": event.tracking_number,
                "tracking_url": event.tracking_url,
            },
        )
