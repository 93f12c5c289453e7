"""Administrative stock edits and flash-sale pricing."""

from protean import handle
from protean.fields import DateTime, Float, Identifier, Integer
from protean.utils.globals import current_domain

from storefront.catalogue.management import load_product
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class AdjustStock:
    product_id = Identifier(required=True)
    count_in_stock = Integer(required=True)


@storefront.command(part_of="Product")
class SetSalePrice:
    """Start a flash sale. Leaving ``sale_price`` empty ends any running sale."""

    product_id = Identifier(required=True)
    sale_price = Float(min_value=0.0)
    sale_end_date = DateTime()


@storefront.command_handler(part_of=Product)
class ProductStockHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        product = load_product(command.product_id)
        product.adjust_stock(command.count_in_stock)
        current_domain.repository_for(Product).add(product)

        logger.info(
            "stock_adjusted",
            product_id=str(product.id),
            count_in_stock=product.count_in_stock,
        )

    @handle(SetSalePrice)
    def set_sale_price(self, command):
        product = load_product(command.product_id)
        if command.sale_price is None:
            product.end_sale()
        else:
            product.put_on_sale(command.sale_price, command.sale_end_date)
        current_domain.repository_for(Product).add(product)
