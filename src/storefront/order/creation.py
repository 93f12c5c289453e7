"""Order placement: validate, reserve stock, check prices and persist.

Everything happens inside the command handler's unit of work, so a failure
at any step (missing product, short stock, tampered price) leaves every
product's stock exactly as it was.
"""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront import settings
from storefront.catalogue.management import load_product
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import EmptyOrder, InvalidOrderItem, InvalidPaymentMethod, PriceMismatch
from storefront.order.order import PAYMENT_METHODS, Order, ShippingAddress
from storefront.utils.clock import utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id": ..., "quantity": ...}]
    shipping_address = Text(required=True)  # JSON: {"address", "city", "postal_code", "country"}
    payment_method = String(required=True, max_length=50)
    items_price = Float(required=True)
    shipping_price = Float(default=0.0)
    tax_price = Float(default=0.0)


def _parse_item(raw) -> tuple[str, int]:
    if not isinstance(raw, dict):
        raise InvalidOrderItem("Each order item must be an object")

    product_id = raw.get("product_id")
    quantity = raw.get("quantity")
    if not product_id:
        raise InvalidOrderItem("Each order item needs a product")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidOrderItem(f"Quantity for product {product_id} must be a positive integer")

    return str(product_id), quantity


def place_order(
    user_id,
    items,
    shipping_address,
    payment_method,
    items_price,
    shipping_price=0.0,
    tax_price=0.0,
) -> Order:
    """Reserve stock for ``items`` and persist a new Pending order.

    Must run inside a unit of work. Item prices come from the catalogue;
    ``items_price`` is what the client believes the items cost and is only
    used to detect stale or tampered carts.
    """
    if not items:
        raise EmptyOrder()
    ShippingAddress.from_dict(shipping_address)
    if payment_method not in PAYMENT_METHODS:
        raise InvalidPaymentMethod(payment_method, PAYMENT_METHODS)

    now = utcnow()
    products: dict[str, Product] = {}
    lines = []
    for raw in items:
        product_id, quantity = _parse_item(raw)
        product = products.get(product_id) or load_product(product_id)
        products[product_id] = product

        product.reserve_stock(quantity)
        lines.append(
            {
                "product_id": product_id,
                "name": product.name,
                "price": product.effective_price(now),
                "image": product.image,
                "quantity": quantity,
            }
        )

    calculated = round(sum(line["price"] * line["quantity"] for line in lines), 2)
    if items_price is None or abs(calculated - items_price) > settings.PRICE_TOLERANCE:
        raise PriceMismatch(expected=calculated, received=items_price)

    order = Order.place(
        user_id=user_id,
        items=lines,
        shipping_address=shipping_address,
        payment_method=payment_method,
        shipping_price=shipping_price,
        tax_price=tax_price,
    )

    product_repo = current_domain.repository_for(Product)
    for product in products.values():
        product_repo.add(product)
    current_domain.repository_for(Order).add(order)

    logger.info(
        "order_placed",
        order_id=str(order.id),
        user_id=str(user_id),
        total_price=order.total_price,
        products=len(products),
    )
    return order


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = place_order(
            user_id=command.user_id,
            items=json.loads(command.items),
            shipping_address=json.loads(command.shipping_address),
            payment_method=command.payment_method,
            items_price=command.items_price,
            shipping_price=command.shipping_price,
            tax_price=command.tax_price,
        )
        return str(order.id)
