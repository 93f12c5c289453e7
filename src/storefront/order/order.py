"""Order aggregate: line items, payment, delivery and cancellation state.

Lifecycle:
    Pending --(pay)--> Paid --(deliver)--> Delivered     [terminal]
    Pending | Paid --(cancel)--> Canceled                [terminal]
    any non-delivered --(cancel one item)--> same state, item canceled

``is_paid``, ``is_delivered`` and ``is_canceled`` drive the lifecycle.
``custom_status`` is an independent label that administrators set; none of
the transitions above touch it.
"""

from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import (
    AdminRequired,
    AlreadyCanceled,
    AlreadyDelivered,
    AlreadyPaid,
    CannotDeliverUnpaid,
    CannotModifyDeliveredOrder,
    CannotModifyPaidOrder,
    EmptyOrder,
    InvalidOrderStatus,
    InvalidPaymentMethod,
    InvalidRequestError,
    InvalidShippingAddress,
    ItemNotFound,
    NotOrderOwner,
)
from storefront.utils.clock import utcnow


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentMethod(Enum):
    PAYPAL = "PayPal"
    STRIPE = "Stripe"
    COD = "COD"
    CREDIT_CARD = "Credit Card"


class CustomStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELED = "Canceled"


class Milestone(Enum):
    PLACED = "Order Placed"
    PAID = "Payment Confirmed"
    DELIVERED = "Delivered"
    CANCELED = "Canceled"


PAYMENT_METHODS = [m.value for m in PaymentMethod]
CUSTOM_STATUSES = [s.value for s in CustomStatus]

# Rounding noise allowed between the stored total and its components
_TOTAL_EPSILON = 0.005


def _money(amount) -> float:
    return round(float(amount), 2)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships. Replaced wholesale when the customer edits it."""

    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        if not data.get("address") or not data.get("city"):
            raise InvalidShippingAddress()
        return cls(
            address=data["address"],
            city=data["city"],
            postal_code=data.get("postal_code"),
            country=data.get("country"),
        )


@storefront.value_object(part_of="Order")
class PaymentResult:
    """What the payment provider reported when the order was paid."""

    payment_id = String(required=True, max_length=255)
    status = String(required=True, max_length=50)
    update_time = String(max_length=100)
    email_address = String(max_length=254)


@storefront.value_object(part_of="Order")
class TrackingInfo:
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=100)
    tracking_url = String(max_length=500)
    added_at = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line item. Name, price and image are snapshots taken at placement."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    image = String(max_length=500)
    is_canceled = Boolean(default=False)

    @property
    def line_total(self) -> float:
        return _money(self.price * self.quantity)


@storefront.entity(part_of="Order")
class StatusChange:
    """An entry in the append-only status history.

    ``changed_by`` is empty for changes made by the system.
    """

    status = String(required=True, max_length=255)
    changed_at = DateTime(required=True)
    changed_by = Identifier()


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_result = ValueObject(PaymentResult)

    items_price = Float(default=0.0, min_value=0.0)
    shipping_price = Float(default=0.0, min_value=0.0)
    tax_price = Float(default=0.0, min_value=0.0)
    total_price = Float(default=0.0, min_value=0.0)

    is_paid = Boolean(default=False)
    paid_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    is_canceled = Boolean(default=False)
    canceled_at = DateTime()

    custom_status = String(max_length=50, default=CustomStatus.PENDING.value)
    status_history = HasMany(StatusChange)
    tracking_info = ValueObject(TrackingInfo)
    created_at = DateTime()

    @invariant.post
    def total_is_sum_of_components(self):
        expected = (self.items_price or 0.0) + (self.shipping_price or 0.0) + (self.tax_price or 0.0)
        if abs((self.total_price or 0.0) - expected) > _TOTAL_EPSILON:
            raise ValidationError({"total_price": ["Total must equal items + shipping + tax"]})

    @invariant.post
    def delivery_requires_payment(self):
        if self.is_delivered and not self.is_paid:
            raise ValidationError({"is_delivered": ["An order cannot be delivered before it is paid"]})

    @invariant.post
    def canceled_orders_are_never_delivered(self):
        if self.is_canceled and self.is_delivered:
            raise ValidationError({"is_canceled": ["A delivered order cannot be canceled"]})

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, items, shipping_address, payment_method, shipping_price=0.0, tax_price=0.0):
        """Build a new Pending order.

        ``items`` are dicts with ``product_id``, ``name``, ``price``,
        ``quantity`` and optionally ``image``. Prices must already be the
        authoritative prices from the catalogue.
        """
        from storefront.order.events import OrderPlaced

        if not items:
            raise EmptyOrder()
        address = ShippingAddress.from_dict(shipping_address)
        if payment_method not in PAYMENT_METHODS:
            raise InvalidPaymentMethod(payment_method, PAYMENT_METHODS)
        if (shipping_price or 0) < 0 or (tax_price or 0) < 0:
            raise InvalidRequestError("Shipping and tax prices cannot be negative")

        order_items = [
            OrderItem(
                product_id=item["product_id"],
                name=item["name"],
                price=_money(item["price"]),
                quantity=item["quantity"],
                image=item.get("image"),
            )
            for item in items
        ]
        items_price = _money(sum(item.line_total for item in order_items))
        shipping_price = _money(shipping_price or 0.0)
        tax_price = _money(tax_price or 0.0)
        now = utcnow()

        order = cls(
            user_id=user_id,
            items=order_items,
            shipping_address=address,
            payment_method=payment_method,
            items_price=items_price,
            shipping_price=shipping_price,
            tax_price=tax_price,
            total_price=_money(items_price + shipping_price + tax_price),
            custom_status=CustomStatus.PENDING.value,
            created_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                user_id=user_id,
                item_count=sum(item.quantity for item in order_items),
                items_price=order.items_price,
                shipping_price=order.shipping_price,
                tax_price=order.tax_price,
                total_price=order.total_price,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def ensure_accessible_by(self, actor_id, is_admin=False):
        if not (is_admin or self.is_owned_by(actor_id)):
            raise NotOrderOwner()

    @property
    def active_items(self) -> list[OrderItem]:
        return [item for item in self.items if not item.is_canceled]

    @property
    def history(self) -> list[StatusChange]:
        """Status history, oldest first."""
        return sorted(self.status_history, key=lambda entry: entry.changed_at)

    def _record(self, status, changed_by=None, at=None):
        self.add_status_history(
            StatusChange(
                status=status,
                changed_at=at or utcnow(),
                changed_by=changed_by,
            )
        )

    def _ensure_not_delivered(self, action):
        if self.is_delivered:
            raise CannotModifyDeliveredOrder(action)

    def _ensure_not_canceled(self):
        if self.is_canceled:
            raise AlreadyCanceled()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def mark_paid(self, payment_id, status, update_time=None, email_address=None, paid_by=None):
        from storefront.order.events import OrderPaid

        self._ensure_not_canceled()
        if self.is_paid:
            raise AlreadyPaid()

        now = utcnow()
        with atomic_change(self):
            self.is_paid = True
            self.paid_at = now
            self.payment_result = PaymentResult(
                payment_id=payment_id,
                status=status,
                update_time=update_time,
                email_address=email_address,
            )
        self._record(Milestone.PAID.value, changed_by=paid_by, at=now)

        self.raise_(
            OrderPaid(
                order_id=self.id,
                user_id=self.user_id,
                payment_id=payment_id,
                total_price=self.total_price,
                paid_at=now,
            )
        )

    def mark_delivered(self, delivered_by, is_admin):
        from storefront.order.events import OrderDelivered

        if not is_admin:
            raise AdminRequired("mark orders as delivered")
        self._ensure_not_canceled()
        if self.is_delivered:
            raise AlreadyDelivered()
        if not self.is_paid:
            raise CannotDeliverUnpaid()

        now = utcnow()
        with atomic_change(self):
            self.is_delivered = True
            self.delivered_at = now
        self._record(Milestone.DELIVERED.value, changed_by=delivered_by, at=now)

        self.raise_(OrderDelivered(order_id=self.id, user_id=self.user_id, delivered_at=now))

    def cancel(self, canceled_by) -> list[OrderItem]:
        """Cancel the whole order.

        Returns the items whose stock must go back to the catalogue. Each
        item is returned here exactly once: canceled items are skipped and a
        canceled order cannot be canceled again.
        """
        from storefront.order.events import OrderCanceled

        self._ensure_not_canceled()
        self._ensure_not_delivered("cancel")

        restocked = self.active_items
        now = utcnow()
        with atomic_change(self):
            self.is_canceled = True
            self.canceled_at = now
        self._record(Milestone.CANCELED.value, changed_by=canceled_by, at=now)

        self.raise_(
            OrderCanceled(
                order_id=self.id,
                user_id=self.user_id,
                canceled_by=canceled_by,
                restocked_units=sum(item.quantity for item in restocked),
                canceled_at=now,
            )
        )
        return restocked

    def cancel_item(self, product_id, canceled_by) -> OrderItem:
        """Cancel the first active line for ``product_id`` and reprice the order."""
        from storefront.order.events import OrderItemCanceled

        self._ensure_not_delivered("cancel items from")
        self._ensure_not_canceled()

        item = next(
            (i for i in self.active_items if str(i.product_id) == str(product_id)),
            None,
        )
        if item is None:
            raise ItemNotFound(product_id)

        with atomic_change(self):
            item.is_canceled = True
            self.items_price = _money(max(self.items_price - item.line_total, 0.0))
            self.total_price = _money(self.items_price + self.shipping_price + self.tax_price)
        self._record(f"Item Canceled - {item.name}", changed_by=canceled_by)

        self.raise_(
            OrderItemCanceled(
                order_id=self.id,
                user_id=self.user_id,
                product_id=item.product_id,
                item_name=item.name,
                quantity=item.quantity,
                items_price=self.items_price,
                total_price=self.total_price,
            )
        )
        return item

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------
    def update_shipping_address(self, shipping_address, changed_by):
        from storefront.order.events import ShippingAddressUpdated

        self._ensure_not_delivered("change the address of")
        self._ensure_not_canceled()

        self.shipping_address = ShippingAddress.from_dict(shipping_address)
        self._record("Shipping Address Updated", changed_by=changed_by)

        self.raise_(
            ShippingAddressUpdated(
                order_id=self.id,
                address=self.shipping_address.address,
                city=self.shipping_address.city,
                postal_code=self.shipping_address.postal_code,
                country=self.shipping_address.country,
            )
        )

    def change_payment_method(self, payment_method, changed_by):
        from storefront.order.events import PaymentMethodChanged

        if self.is_paid:
            raise CannotModifyPaidOrder("change the payment method of")
        self._ensure_not_canceled()
        if payment_method not in PAYMENT_METHODS:
            raise InvalidPaymentMethod(payment_method, PAYMENT_METHODS)

        previous = self.payment_method
        self.payment_method = payment_method
        self._record(f"Payment Method Changed to {payment_method}", changed_by=changed_by)

        self.raise_(
            PaymentMethodChanged(
                order_id=self.id,
                previous_method=previous,
                payment_method=payment_method,
            )
        )

    def set_custom_status(self, status, changed_by, is_admin):
        from storefront.order.events import OrderStatusUpdated

        if not is_admin:
            raise AdminRequired("update order status")
        if status not in CUSTOM_STATUSES:
            raise InvalidOrderStatus(status, CUSTOM_STATUSES)

        previous = self.custom_status
        self.custom_status = status
        self._record(status, changed_by=changed_by)

        self.raise_(
            OrderStatusUpdated(
                order_id=self.id,
                user_id=self.user_id,
                previous_status=previous,
                status=status,
            )
        )

    def add_tracking(self, carrier, tracking_number, changed_by, is_admin, tracking_url=None):
        from storefront.order.events import TrackingInfoAdded

        if not is_admin:
            raise AdminRequired("add tracking information")
        if not carrier or not tracking_number:
            raise InvalidRequestError("Tracking number and carrier are required")
        self._ensure_not_canceled()
        if not self.is_paid:
            raise InvalidRequestError("Cannot add tracking to an unpaid order")

        now = utcnow()
        url = tracking_url or f"https://track.{carrier.lower()}.com/{tracking_number}"
        self.tracking_info = TrackingInfo(
            carrier=carrier,
            tracking_number=tracking_number,
            tracking_url=url,
            added_at=now,
        )
        self._record(f"Tracking Added - {carrier}: {tracking_number}", changed_by=changed_by, at=now)

        self.raise_(
            TrackingInfoAdded(
                order_id=self.id,
                user_id=self.user_id,
                carrier=carrier,
                tracking_number=tracking_number,
                tracking_url=url,
            )
        )
