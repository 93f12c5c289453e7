"""Plain-text e-mail templates for order notifications.

Each template renders ``{"subject": ..., "body": ...}`` from a context dict
holding at least ``name`` and ``order_id``.
"""


def _money(amount) -> str:
    return f"${amount:,.2f}"


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Order Confirmation",
            "body": (
                f"Hi {context['name']},\n\n"
                f"Thank you for your order {context['order_id']}.\n"
                f"Items: {context['item_count']}\n"
                f"Total: {_money(context['total_price'])}\n\n"
                "We'll let you know when it ships."
            ),
        }


class PaymentReceiptTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Payment Received",
            "body": (
                f"Hi {context['name']},\n\n"
                f"We received your payment of {_money(context['total_price'])} "
                f"for order {context['order_id']} (payment reference {context['payment_id']})."
            ),
        }


class DeliveryConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Order Delivered",
            "body": f"Hi {context['name']},\n\nYour order {context['order_id']} has been delivered.",
        }


class OrderCancellationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Order Canceled",
            "body": f"Hi {context['name']},\n\nYour order {context['order_id']} has been canceled.",
        }


class ItemCancellationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Item Canceled",
            "body": (
                f"Hi {context['name']},\n\n"
                f'The item "{context["item_name"]}" has been canceled from your order {context["order_id"]}. '
                f"Updated total: {_money(context['total_price'])}"
            ),
        }


class ShippingUpdateTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        body = (
            f"Hi {context['name']},\n\n"
            f"Your order {context['order_id']} has been shipped! "
            f"Track it using {context['tracking_number']} on {context['carrier']}."
        )
        if context.get("tracking_url"):
            body += f"\n{context['tracking_url']}"
        return {"subject": "Order Shipped - Tracking Available", "body": body}
