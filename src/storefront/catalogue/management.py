"""Adding, editing and removing catalogue products."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import DuplicateProduct, ProductNotFound
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=200)
    brand = String(required=True, max_length=100)
    category = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    count_in_stock = Integer(default=0, min_value=0)
    description = Text()
    image = String(max_length=500)


@storefront.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    name = String(max_length=200)
    brand = String(max_length=100)
    category = String(max_length=100)
    price = Float(min_value=0.0)
    description = Text()
    image = String(max_length=500)


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


def load_product(product_id) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ProductNotFound(product_id)


@storefront.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(AddProduct)
    def add_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo.find_by_name(command.name) is not None:
            raise DuplicateProduct(command.name)

        product = Product.add(
            name=command.name,
            brand=command.brand,
            category=command.category,
            price=command.price,
            count_in_stock=command.count_in_stock,
            description=command.description,
            image=command.image,
        )
        repo.add(product)

        logger.info("product_added", product_id=str(product.id), name=product.name)
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_product_details(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)

        if command.name and command.name.lower() != product.name.lower():
            duplicate = repo.find_by_name(command.name)
            if duplicate is not None and duplicate.id != product.id:
                raise DuplicateProduct(command.name)

        changes = {
            field_name: getattr(command, field_name)
            for field_name in ("name", "brand", "category", "price", "description", "image")
            if getattr(command, field_name) is not None
        }
        product.update_details(**changes)
        repo.add(product)

        logger.info("product_updated", product_id=str(product.id), fields=sorted(changes))

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        product.remove()
        repo._dao.delete(product)

        logger.info("product_removed", product_id=str(command.product_id))
