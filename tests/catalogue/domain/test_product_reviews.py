"""Domain tests for product reviews, moderation and votes."""

import pytest

from storefront.catalogue.events import ReviewAdded, ReviewModerated
from storefront.catalogue.product import Product
from storefront.errors import AlreadyReviewed, InvalidRating, ReviewNotFound


@pytest.fixture()
def product():
    return Product.add(name="Kettle", brand="Boil", category="Kitchen", price=30.0, count_in_stock=3)


class TestAddReview:
    def test_first_review_sets_rating(self, product):
        review = product.add_review("user-1", "Ada", 4, "Solid")
        assert review.rating == 4
        assert product.rating == 4.0
        assert product.num_reviews == 1

    def test_rating_is_average_of_reviews(self, product):
        product.add_review("user-1", "Ada", 5)
        product.add_review("user-2", "Bob", 2)
        assert product.rating == 3.5
        assert product.num_reviews == 2

    def test_one_review_per_user(self, product):
        product.add_review("user-1", "Ada", 5)
        with pytest.raises(AlreadyReviewed):
            product.add_review("user-1", "Ada", 1)
        assert product.num_reviews == 1

    @pytest.mark.parametrize("rating", [0, 6, 2.5, True])
    def test_rating_must_be_between_one_and_five(self, product, rating):
        with pytest.raises(InvalidRating):
            product.add_review("user-1", "Ada", rating)

    def test_review_added_event(self, product):
        review = product.add_review("user-1", "Ada", 3)
        event = product._events[-1]
        assert isinstance(event, ReviewAdded)
        assert event.review_id == review.id
        assert event.new_average == 3.0


class TestModeration:
    def test_report_flags_review(self, product):
        review = product.add_review("user-1", "Ada", 1, "Spam spam")
        product.report_review(review.id)
        assert product.find_review(review.id).is_reported is True

    def test_hidden_reviews_do_not_count(self, product):
        product.add_review("user-1", "Ada", 5)
        bad = product.add_review("user-2", "Troll", 1)
        product.moderate_review(bad.id, hide=True)

        assert product.rating == 5.0
        assert product.num_reviews == 1
        assert isinstance(product._events[-1], ReviewModerated)

    def test_unhide_restores_rating(self, product):
        product.add_review("user-1", "Ada", 5)
        bad = product.add_review("user-2", "Troll", 1)
        product.moderate_review(bad.id, hide=True)
        product.moderate_review(bad.id, hide=False)
        assert product.rating == 3.0
        assert product.num_reviews == 2

    def test_unknown_review(self, product):
        with pytest.raises(ReviewNotFound):
            product.report_review("missing")


class TestVotes:
    def test_helpful_vote(self, product):
        review = product.add_review("user-1", "Ada", 4)
        product.vote_on_review(review.id, "user-2", helpful=True)
        assert product.find_review(review.id).helpful_votes == ["user-2"]

    def test_switching_vote_moves_it(self, product):
        review = product.add_review("user-1", "Ada", 4)
        product.vote_on_review(review.id, "user-2", helpful=True)
        product.vote_on_review(review.id, "user-2", helpful=False)

        updated = product.find_review(review.id)
        assert updated.helpful_votes == []
        assert updated.not_helpful_votes == ["user-2"]

    def test_repeat_vote_counts_once(self, product):
        review = product.add_review("user-1", "Ada", 4)
        product.vote_on_review(review.id, "user-2", helpful=True)
        product.vote_on_review(review.id, "user-2", helpful=True)
        assert product.find_review(review.id).helpful_votes == ["user-2"]
