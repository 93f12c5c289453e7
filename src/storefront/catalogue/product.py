"""Product aggregate: catalogue entry, stock ledger, customer reviews and questions."""

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, List, String, Text

from storefront.domain import storefront
from storefront.errors import (
    AlreadyReviewed,
    InvalidQuestion,
    InvalidRating,
    InvalidRequestError,
    InvalidStockLevel,
    OutOfStock,
    QuestionNotFound,
    ReviewNotFound,
)
from storefront.utils.clock import as_utc, utcnow

_UNSET = object()


@storefront.entity(part_of="Product")
class Review:
    """A customer's rating and comment. One per user per product."""

    user_id: Identifier(required=True)
    name: String(required=True, max_length=100)
    rating: Integer(required=True, min_value=1, max_value=5)
    comment: Text()
    is_reported: Boolean(default=False)
    is_hidden: Boolean(default=False)
    helpful_votes: List(content_type=String)
    not_helpful_votes: List(content_type=String)
    created_at: DateTime()


@storefront.entity(part_of="Product")
class Question:
    """A shopper's question about the product and the store's answer."""

    user_id: Identifier(required=True)
    question: Text(required=True)
    answer: Text()
    answered_by: Identifier()
    asked_at: DateTime()
    answered_at: DateTime()

    @property
    def is_answered(self) -> bool:
        return bool(self.answer)


@storefront.aggregate
class Product:
    """An item for sale together with its stock level.

    ``count_in_stock`` is the inventory ledger: order placement reserves from
    it and cancellations release back into it. It can never go negative.
    """

    name: String(required=True, max_length=200)
    brand: String(required=True, max_length=100)
    category: String(required=True, max_length=100)
    description: Text()
    image: String(max_length=500)
    price: Float(required=True, min_value=0.0)
    sale_price: Float(min_value=0.0)
    sale_end_date: DateTime()
    count_in_stock: Integer(default=0, min_value=0)
    rating: Float(default=0.0)
    num_reviews: Integer(default=0)
    reviews: HasMany(Review)
    questions: HasMany(Question)
    created_at: DateTime()

    @invariant.post
    def sale_price_must_undercut_regular_price(self):
        if self.sale_price is not None and self.price is not None and self.sale_price >= self.price:
            raise ValidationError({"sale_price": ["Sale price must be lower than the regular price"]})

    @invariant.post
    def sale_needs_an_end_date(self):
        if self.sale_price is not None and self.sale_end_date is None:
            raise ValidationError({"sale_end_date": ["A sale price requires a sale end date"]})

    @classmethod
    def add(cls, name, brand, category, price, count_in_stock=0, description=None, image=None):
        from storefront.catalogue.events import ProductAdded

        now = utcnow()
        product = cls(
            name=name,
            brand=brand,
            category=category,
            price=price,
            count_in_stock=count_in_stock,
            description=description,
            image=image,
            created_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=product.id,
                name=name,
                brand=brand,
                category=category,
                price=price,
                count_in_stock=count_in_stock,
                added_at=now,
            )
        )
        return product

    def on_sale(self, at=None) -> bool:
        if self.sale_price is None or self.sale_end_date is None:
            return False
        return (at or utcnow()) < as_utc(self.sale_end_date)

    def effective_price(self, at=None) -> float:
        """Sale price while the sale window is open, otherwise the regular price."""
        return self.sale_price if self.on_sale(at) else self.price

    def update_details(
        self,
        name=_UNSET,
        brand=_UNSET,
        category=_UNSET,
        description=_UNSET,
        image=_UNSET,
        price=_UNSET,
    ):
        from storefront.catalogue.events import ProductDetailsUpdated

        changes = {
            "name": name,
            "brand": brand,
            "category": category,
            "description": description,
            "image": image,
            "price": price,
        }
        with atomic_change(self):
            for field_name, value in changes.items():
                if value is not _UNSET:
                    setattr(self, field_name, value)

        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                name=self.name,
                brand=self.brand,
                category=self.category,
                price=self.price,
            )
        )

    def remove(self):
        """Record that the product is leaving the catalogue. The caller deletes it."""
        from storefront.catalogue.events import ProductRemoved

        self.raise_(
            ProductRemoved(
                product_id=self.id,
                name=self.name,
                brand=self.brand,
                category=self.category,
                removed_at=utcnow(),
            )
        )

    # ------------------------------------------------------------------
    # Stock ledger
    # ------------------------------------------------------------------
    def has_stock_for(self, quantity: int) -> bool:
        return self.count_in_stock >= quantity

    def reserve_stock(self, quantity: int):
        if quantity <= 0:
            raise InvalidStockLevel("Quantity to reserve must be positive")
        if not self.has_stock_for(quantity):
            raise OutOfStock(
                product_id=self.id,
                product_name=self.name,
                available=self.count_in_stock,
                requested=quantity,
            )
        self.count_in_stock -= quantity

    def release_stock(self, quantity: int):
        if quantity <= 0:
            raise InvalidStockLevel("Quantity to release must be positive")
        self.count_in_stock += quantity

    def adjust_stock(self, new_count: int):
        from storefront.catalogue.events import StockAdjusted

        if new_count is None or new_count < 0:
            raise InvalidStockLevel("Stock level cannot be negative")

        previous = self.count_in_stock
        self.count_in_stock = new_count
        self.raise_(
            StockAdjusted(
                product_id=self.id,
                previous_count=previous,
                new_count=new_count,
                adjusted_at=utcnow(),
            )
        )

    # ------------------------------------------------------------------
    # Flash sales
    # ------------------------------------------------------------------
    def put_on_sale(self, sale_price, sale_end_date):
        from storefront.catalogue.events import SalePriceSet

        if sale_price is not None and sale_end_date is not None and as_utc(sale_end_date) <= utcnow():
            raise InvalidRequestError("Sale end date must be in the future")

        with atomic_change(self):
            self.sale_price = sale_price
            self.sale_end_date = sale_end_date if sale_price is not None else None

        self.raise_(
            SalePriceSet(
                product_id=self.id,
                sale_price=self.sale_price,
                sale_end_date=self.sale_end_date,
            )
        )

    def end_sale(self):
        self.put_on_sale(None, None)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------
    def review_by(self, user_id):
        return next((r for r in self.reviews if r.user_id == user_id), None)

    def find_review(self, review_id) -> Review:
        review = next((r for r in self.reviews if r.id == review_id), None)
        if review is None:
            raise ReviewNotFound(review_id)
        return review

    def _recalculate_rating(self):
        visible = [r for r in self.reviews if not r.is_hidden]
        with atomic_change(self):
            self.num_reviews = len(visible)
            self.rating = round(sum(r.rating for r in visible) / len(visible), 2) if visible else 0.0

    def add_review(self, user_id, name, rating, comment=None) -> Review:
        from storefront.catalogue.events import ReviewAdded

        if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
            raise InvalidRating(rating)
        if self.review_by(user_id) is not None:
            raise AlreadyReviewed()

        review = Review(
            user_id=user_id,
            name=name,
            rating=rating,
            comment=comment,
            created_at=utcnow(),
        )
        self.add_reviews(review)
        self._recalculate_rating()

        self.raise_(
            ReviewAdded(
                product_id=self.id,
                review_id=review.id,
                user_id=user_id,
                rating=rating,
                new_average=self.rating,
                review_count=self.num_reviews,
            )
        )
        return review

    def report_review(self, review_id):
        self.find_review(review_id).is_reported = True

    def moderate_review(self, review_id, hide: bool):
        from storefront.catalogue.events import ReviewModerated

        review = self.find_review(review_id)
        review.is_hidden = hide
        self._recalculate_rating()

        self.raise_(
            ReviewModerated(
                product_id=self.id,
                review_id=review_id,
                is_hidden=hide,
                new_average=self.rating,
            )
        )

    def vote_on_review(self, review_id, user_id, helpful: bool):
        """Record a helpful/not-helpful vote. A user holds at most one vote per review."""
        review = self.find_review(review_id)
        helpful_votes = [v for v in (review.helpful_votes or []) if v != user_id]
        not_helpful_votes = [v for v in (review.not_helpful_votes or []) if v != user_id]

        if helpful:
            helpful_votes.append(user_id)
        else:
            not_helpful_votes.append(user_id)

        review.helpful_votes = helpful_votes
        review.not_helpful_votes = not_helpful_votes

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------
    def ask_question(self, user_id, text) -> Question:
        from storefront.catalogue.events import QuestionAsked

        text = (text or "").strip()
        if not 5 <= len(text) <= 500:
            raise InvalidQuestion("Question must be between 5 and 500 characters")

        question = Question(user_id=user_id, question=text, asked_at=utcnow())
        self.add_questions(question)

        self.raise_(QuestionAsked(product_id=self.id, question_id=question.id, user_id=user_id))
        return question

    def answer_question(self, question_id, answer, answered_by) -> Question:
        from storefront.catalogue.events import QuestionAnswered

        question = next((q for q in self.questions if q.id == question_id), None)
        if question is None:
            raise QuestionNotFound(question_id)

        answer = (answer or "").strip()
        if not answer:
            raise InvalidQuestion("Answer cannot be empty")

        question.answer = answer
        question.answered_by = answered_by
        question.answered_at = utcnow()

        self.raise_(
            QuestionAnswered(
                product_id=self.id,
                question_id=question_id,
                asker_id=question.user_id,
                answered_by=answered_by,
            )
        )
        return question
