"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    brand: String(required=True)
    category: String(required=True)
    price: Float(required=True)
    count_in_stock: Integer(required=True)
    added_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    brand: String(required=True)
    category: String(required=True)
    price: Float(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """An administrator set the stock level directly."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_count: Integer(required=True)
    new_count: Integer(required=True)
    adjusted_at: DateTime(required=True)


@storefront.event(part_of="Product")
class SalePriceSet:
    __version__ = 1

    product_id: Identifier(required=True)
    sale_price: Float()
    sale_end_date: DateTime()


@storefront.event(part_of="Product")
class ReviewAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    review_id: Identifier(required=True)
    user_id: Identifier(required=True)
    rating: Integer(required=True)
    new_average: Float(required=True)
    review_count: Integer(required=True)


@storefront.event(part_of="Product")
class ReviewModerated:
    __version__ = 1

    product_id: Identifier(required=True)
    review_id: Identifier(required=True)
    is_hidden: Boolean(required=True)
    new_average: Float(required=True)


@storefront.event(part_of="Product")
class ProductRemoved:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    brand: String(required=True)
    category: String(required=True)
    removed_at: DateTime(required=True)


@storefront.event(part_of="Product")
class QuestionAsked:
    __version__ = 1

    product_id: Identifier(required=True)
    question_id: Identifier(required=True)
    user_id: Identifier(required=True)


@storefront.event(part_of="Product")
class QuestionAnswered:
    __version__ = 1

    product_id: Identifier(required=True)
    question_id: Identifier(required=True)
    asker_id: Identifier(required=True)
    answered_by: Identifier(required=True)
