"""Product questions: shoppers ask, administrators answer."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.catalogue.management import load_product
from storefront.catalogue.product import Product
from storefront.customer.registration import load_user
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class AskQuestion:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    question = Text(required=True)


@storefront.command(part_of="Product")
class AnswerQuestion:
    product_id = Identifier(required=True)
    question_id = Identifier(required=True)
    answer = Text(required=True)
    answered_by = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class QuestionHandler:
    @handle(AskQuestion)
    def ask_question(self, command):
        product = load_product(command.product_id)
        user = load_user(command.user_id)

        question = product.ask_question(str(user.id), command.question)
        current_domain.repository_for(Product).add(product)

        logger.info("question_asked", product_id=str(product.id), question_id=str(question.id))
        return str(question.id)

    @handle(AnswerQuestion)
    def answer_question(self, command):
        product = load_product(command.product_id)
        product.answer_question(command.question_id, command.answer, answered_by=str(command.answered_by))
        current_domain.repository_for(Product).add(product)

        logger.info("question_answered", product_id=str(product.id), question_id=str(command.question_id))
