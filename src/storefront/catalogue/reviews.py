"""Customer reviews: posting, reporting, moderation and votes."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.catalogue.management import load_product
from storefront.catalogue.product import Product
from storefront.customer.registration import load_user
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class AddReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text()


@storefront.command(part_of="Product")
class ReportReview:
    product_id = Identifier(required=True)
    review_id = Identifier(required=True)


@storefront.command(part_of="Product")
class ModerateReview:
    product_id = Identifier(required=True)
    review_id = Identifier(required=True)
    hide = Boolean(required=True)


@storefront.command(part_of="Product")
class VoteOnReview:
    product_id = Identifier(required=True)
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    helpful = Boolean(required=True)


@storefront.command_handler(part_of=Product)
class ReviewHandler:
    @handle(AddReview)
    def add_review(self, command):
        product = load_product(command.product_id)
        user = load_user(command.user_id)

        review = product.add_review(
            user_id=str(user.id),
            name=user.name,
            rating=command.rating,
            comment=command.comment,
        )
        current_domain.repository_for(Product).add(product)

        logger.info(
            "review_added",
            product_id=str(product.id),
            review_id=str(review.id),
            rating=command.rating,
        )
        return str(review.id)

    @handle(ReportReview)
    def report_review(self, command):
        product = load_product(command.product_id)
        product.report_review(command.review_id)
        current_domain.repository_for(Product).add(product)

    @handle(ModerateReview)
    def moderate_review(self, command):
        product = load_product(command.product_id)
        product.moderate_review(command.review_id, hide=command.hide)
        current_domain.repository_for(Product).add(product)

    @handle(VoteOnReview)
    def vote_on_review(self, command):
        product = load_product(command.product_id)
        product.vote_on_review(command.review_id, str(command.user_id), helpful=command.helpful)
        current_domain.repository_for(Product).add(product)
