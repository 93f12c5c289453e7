"""Domain events raised by the Order aggregate.

Notifications subscribe to these; nothing in the order workflow waits on
their consumers.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order and its stock was reserved."""

    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    item_count: Integer(required=True)
    items_price: Float(required=True)
    shipping_price: Float(required=True)
    tax_price: Float(required=True)
    total_price: Float(required=True)
    payment_method: String(required=True)
    placed_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    payment_id: String(required=True)
    total_price: Float(required=True)
    paid_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    delivered_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCanceled:
    """The whole order was canceled and its open items returned to stock."""

    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    canceled_by: Identifier()
    restocked_units: Integer(required=True)
    canceled_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderItemCanceled:
    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    item_name: String(required=True)
    quantity: Integer(required=True)
    items_price: Float(required=True)
    total_price: Float(required=True)


@storefront.event(part_of="Order")
class ShippingAddressUpdated:
    __version__ = 1

    order_id: Identifier(required=True)
    address: String(required=True)
    city: String(required=True)
    postal_code: String()
    country: String()


@storefront.event(part_of="Order")
class PaymentMethodChanged:
    __version__ = 1

    order_id: Identifier(required=True)
    previous_method: String(required=True)
    payment_method: String(required=True)


@storefront.event(part_of="Order")
class OrderStatusUpdated:
    """An administrator changed the order's display status."""

    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    previous_status: String()
    status: String(required=True)


@storefront.event(part_of="Order")
class TrackingInfoAdded:
    __version__ = 1

    order_id: Identifier(required=True)
    user_id: Identifier(required=True)
    carrier: String(required=True)
    tracking_number: String(required=True)
    tracking_url: String()
