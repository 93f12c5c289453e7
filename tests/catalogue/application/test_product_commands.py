"""Catalogue commands: product management, stock, sales and reviews."""

from datetime import timedelta

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.catalogue.management import AddProduct, RemoveProduct, UpdateProductDetails
from storefront.catalogue.product import Product
from storefront.catalogue.questions import AnswerQuestion, AskQuestion
from storefront.catalogue.reviews import AddReview, ModerateReview, ReportReview, VoteOnReview
from storefront.catalogue.stock import AdjustStock, SetSalePrice
from storefront.errors import (
    AlreadyReviewed,
    DuplicateProduct,
    InvalidRequestError,
    ProductNotFound,
    QuestionNotFound,
    UserNotFound,
)
from storefront.utils.clock import utcnow


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestProductManagement:
    def test_add_product(self, make_product):
        product = _product(make_product(name="Kettle", price=30.0, count_in_stock=4))
        assert product.name == "Kettle"
        assert product.count_in_stock == 4
        assert product.rating == 0.0

    def test_names_are_unique_ignoring_case(self, make_product):
        make_product(name="Kettle")
        with pytest.raises(DuplicateProduct):
            make_product(name="kettle")

    def test_update_keeps_unspecified_fields(self, make_product):
        product_id = make_product(name="Kettle", price=30.0, brand="Boil")
        current_domain.process(UpdateProductDetails(product_id=product_id, price=25.0), asynchronous=False)

        product = _product(product_id)
        assert product.price == 25.0
        assert product.brand == "Boil"
        assert product.name == "Kettle"

    def test_rename_to_existing_name(self, make_product):
        make_product(name="Kettle")
        product_id = make_product(name="Toaster")
        with pytest.raises(DuplicateProduct):
            current_domain.process(UpdateProductDetails(product_id=product_id, name="KETTLE"), asynchronous=False)

    def test_remove_product(self, make_product):
        product_id = make_product()
        current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
        with pytest.raises(ProductNotFound):
            current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(
                AddProduct(name="Broken", brand="Acme", category="Gadgets", price=-1.0),
                asynchronous=False,
            )


class TestStock:
    def test_admin_sets_stock(self, make_product, stock_of):
        product_id = make_product(count_in_stock=5)
        current_domain.process(AdjustStock(product_id=product_id, count_in_stock=12), asynchronous=False)
        assert stock_of(product_id) == 12

    def test_negative_stock_is_rejected(self, make_product, stock_of):
        product_id = make_product(count_in_stock=5)
        with pytest.raises(InvalidRequestError):
            current_domain.process(AdjustStock(product_id=product_id, count_in_stock=-1), asynchronous=False)
        assert stock_of(product_id) == 5


class TestSale:
    def test_put_on_sale_and_end(self, make_product):
        product_id = make_product(price=20.0)
        current_domain.process(
            SetSalePrice(product_id=product_id, sale_price=15.0, sale_end_date=utcnow() + timedelta(days=2)),
            asynchronous=False,
        )
        assert _product(product_id).effective_price() == 15.0

        current_domain.process(SetSalePrice(product_id=product_id), asynchronous=False)
        product = _product(product_id)
        assert product.sale_price is None
        assert product.effective_price() == 20.0

    def test_end_date_must_be_in_future(self, make_product):
        product_id = make_product(price=20.0)
        with pytest.raises(InvalidRequestError):
            current_domain.process(
                SetSalePrice(product_id=product_id, sale_price=15.0, sale_end_date=utcnow() - timedelta(days=1)),
                asynchronous=False,
            )


class TestReviews:
    def _review(self, product_id, user_id, rating=4):
        return current_domain.process(
            AddReview(product_id=product_id, user_id=user_id, rating=rating, comment="Nice"),
            asynchronous=False,
        )

    def test_review_uses_reviewer_name(self, make_product, customer_id):
        product_id = make_product()
        review_id = self._review(product_id, customer_id)

        review = _product(product_id).find_review(review_id)
        assert review.name == "Ada Shopper"
        assert _product(product_id).rating == 4.0

    def test_unknown_reviewer(self, make_product):
        with pytest.raises(UserNotFound):
            self._review(make_product(), "ghost")

    def test_second_review_rejected(self, make_product, customer_id):
        product_id = make_product()
        self._review(product_id, customer_id)
        with pytest.raises(AlreadyReviewed):
            self._review(product_id, customer_id, rating=1)

    def test_report_then_hide(self, make_product, customer_id, make_user):
        product_id = make_product()
        hidden_id = self._review(product_id, customer_id, rating=1)
        self._review(product_id, make_user(name="Bob"), rating=5)

        current_domain.process(ReportReview(product_id=product_id, review_id=hidden_id), asynchronous=False)
        assert _product(product_id).find_review(hidden_id).is_reported is True

        current_domain.process(ModerateReview(product_id=product_id, review_id=hidden_id, hide=True), asynchronous=False)
        product = _product(product_id)
        assert product.rating == 5.0
        assert product.num_reviews == 1

    def test_votes(self, make_product, customer_id, make_user):
        product_id = make_product()
        review_id = self._review(product_id, customer_id)
        voter = make_user(name="Bob")

        current_domain.process(
            VoteOnReview(product_id=product_id, review_id=review_id, user_id=voter, helpful=True),
            asynchronous=False,
        )
        review = _product(product_id).find_review(review_id)
        assert review.helpful_votes == [voter]
        assert review.not_helpful_votes == []


class TestQuestions:
    def test_ask_and_answer(self, customer_id, admin_id, make_product):
        product_id = make_product()
        question_id = current_domain.process(
            AskQuestion(product_id=product_id, user_id=customer_id, question="Does it whistle?"),
            asynchronous=False,
        )

        current_domain.process(
            AnswerQuestion(product_id=product_id, question_id=question_id, answer="Yes.", answered_by=admin_id),
            asynchronous=False,
        )

        [question] = _product(product_id).questions
        assert str(question.id) == question_id
        assert str(question.user_id) == customer_id
        assert question.answer == "Yes."
        assert str(question.answered_by) == admin_id

    def test_asker_must_exist(self, make_product):
        with pytest.raises(UserNotFound):
            current_domain.process(
                AskQuestion(product_id=make_product(), user_id="ghost", question="Does it whistle?"),
                asynchronous=False,
            )

    def test_product_must_exist(self, customer_id):
        with pytest.raises(ProductNotFound):
            current_domain.process(
                AskQuestion(product_id="missing", user_id=customer_id, question="Does it whistle?"),
                asynchronous=False,
            )

    def test_answering_unknown_question(self, admin_id, make_product):
        product_id = make_product()
        with pytest.raises(QuestionNotFound):
            current_domain.process(
                AnswerQuestion(product_id=product_id, question_id="missing", answer="Yes.", answered_by=admin_id),
                asynchronous=False,
            )
        assert _product(product_id).questions == []
