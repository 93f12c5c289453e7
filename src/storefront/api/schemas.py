"""Pydantic request/response schemas for the storefront API.

These are the external contracts; they are translated to and from Protean
commands and aggregates in the routes.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.catalogue.product import Product
from storefront.order.order import Order
from storefront.order.timeline import TimelineEntry


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"
    message: str | None = None


class ShippingAddressSchema(BaseModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str | None = None
    country: str | None = None


# ---------------------------------------------------------------------------
# Order requests
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class CreateOrderRequest(BaseModel):
    order_items: list[OrderItemRequest]
    shipping_address: ShippingAddressSchema
    payment_method: str
    items_price: float = Field(ge=0)
    shipping_price: float = Field(ge=0, default=0.0)
    tax_price: float = Field(ge=0, default=0.0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_items": [{"product_id": "prod-001", "quantity": 2}],
                    "shipping_address": {
                        "address": "12 Market St",
                        "city": "Springfield",
                        "postal_code": "62701",
                        "country": "US",
                    },
                    "payment_method": "PayPal",
                    "items_price": 20.0,
                    "shipping_price": 5.0,
                    "tax_price": 2.0,
                }
            ]
        }
    }


class PaymentResultRequest(BaseModel):
    id: str = Field(min_length=1)
    status: str = Field(min_length=1)
    update_time: str | None = None
    email_address: str | None = None


class ChangePaymentMethodRequest(BaseModel):
    payment_method: str


class UpdateOrderStatusRequest(BaseModel):
    status: str


class TrackingInfoRequest(BaseModel):
    carrier: str = Field(min_length=1)
    tracking_number: str = Field(min_length=1)
    tracking_url: str | None = None


# ---------------------------------------------------------------------------
# Order responses
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    quantity: int
    price: float
    image: str | None = None
    is_canceled: bool = False


class PaymentResultResponse(BaseModel):
    id: str
    status: str
    update_time: str | None = None
    email_address: str | None = None


class TrackingInfoResponse(BaseModel):
    carrier: str
    tracking_number: str
    tracking_url: str | None = None
    added_at: datetime | None = None


class StatusChangeResponse(BaseModel):
    status: str
    changed_at: datetime
    changed_by: str | None = None


class OrderResponse(BaseModel):
    id: str
    user_id: str
    order_items: list[OrderItemResponse]
    shipping_address: ShippingAddressSchema | None = None
    payment_method: str
    payment_result: PaymentResultResponse | None = None
    items_price: float
    shipping_price: float
    tax_price: float
    total_price: float
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    is_canceled: bool
    canceled_at: datetime | None = None
    custom_status: str
    status_history: list[StatusChangeResponse]
    tracking_info: TrackingInfoResponse | None = None
    created_at: datetime | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        address = order.shipping_address
        payment = order.payment_result
        tracking = order.tracking_info
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            order_items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    quantity=item.quantity,
                    price=item.price,
                    image=item.image,
                    is_canceled=bool(item.is_canceled),
                )
                for item in order.items
            ],
            shipping_address=(
                ShippingAddressSchema(
                    address=address.address,
                    city=address.city,
                    postal_code=address.postal_code,
                    country=address.country,
                )
                if address
                else None
            ),
            payment_method=order.payment_method,
            payment_result=(
                PaymentResultResponse(
                    id=payment.payment_id,
                    status=payment.status,
                    update_time=payment.update_time,
                    email_address=payment.email_address,
                )
                if payment
                else None
            ),
            items_price=order.items_price,
            shipping_price=order.shipping_price,
            tax_price=order.tax_price,
            total_price=order.total_price,
            is_paid=bool(order.is_paid),
            paid_at=order.paid_at,
            is_delivered=bool(order.is_delivered),
            delivered_at=order.delivered_at,
            is_canceled=bool(order.is_canceled),
            canceled_at=order.canceled_at,
            custom_status=order.custom_status,
            status_history=[
                StatusChangeResponse(
                    status=change.status,
                    changed_at=change.changed_at,
                    changed_by=str(change.changed_by) if change.changed_by else None,
                )
                for change in order.history
            ],
            tracking_info=(
                TrackingInfoResponse(
                    carrier=tracking.carrier,
                    tracking_number=tracking.tracking_number,
                    tracking_url=tracking.tracking_url,
                    added_at=tracking.added_at,
                )
                if tracking
                else None
            ),
            created_at=order.created_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    page: int
    pages: int
    limit: int


class UnavailableItemResponse(BaseModel):
    product_id: str
    name: str
    requested_quantity: int
    available_quantity: int


class ReorderResponse(BaseModel):
    order_id: str
    unavailable_items: list[UnavailableItemResponse] = []


class TimelineEntryResponse(BaseModel):
    status: str
    date: datetime
    by: str | None = None
    automated: bool

    @classmethod
    def from_entry(cls, entry: TimelineEntry) -> "TimelineEntryResponse":
        return cls(status=entry.status, date=entry.date, by=entry.by, automated=entry.automated)


class TimelineResponse(BaseModel):
    order_id: str
    timeline: list[TimelineEntryResponse]


# ---------------------------------------------------------------------------
# Product requests
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    brand: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1, max_length=100)
    price: float = Field(ge=0)
    count_in_stock: int = Field(ge=0, default=0)
    description: str | None = None
    image: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Runner 2",
                    "brand": "Stride",
                    "category": "Shoes",
                    "price": 89.99,
                    "count_in_stock": 25,
                    "description": "Lightweight trail running shoe",
                    "image": "/images/trail-runner-2.jpg",
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    brand: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    price: float | None = Field(default=None, ge=0)
    description: str | None = None
    image: str | None = None


class AdjustStockRequest(BaseModel):
    count_in_stock: int = Field(ge=0)


class SetSaleRequest(BaseModel):
    sale_price: float | None = Field(default=None, ge=0)
    sale_end_date: datetime | None = None


class ReviewRequest(BaseModel):
    rating: int
    comment: str | None = None


class ModerateReviewRequest(BaseModel):
    hide: bool


class VoteReviewRequest(BaseModel):
    helpful: bool


class QuestionRequest(BaseModel):
    question: str


class AnswerRequest(BaseModel):
    answer: str


# ---------------------------------------------------------------------------
# Product responses
# ---------------------------------------------------------------------------
class ProductIdResponse(BaseModel):
    product_id: str


class QuestionIdResponse(BaseModel):
    question_id: str


class ReviewResponse(BaseModel):
    id: str
    user_id: str
    name: str
    rating: int
    comment: str | None = None
    is_reported: bool = False
    helpful_votes: int = 0
    not_helpful_votes: int = 0
    created_at: datetime | None = None


class QuestionResponse(BaseModel):
    id: str
    user_id: str
    question: str
    answer: str | None = None
    answered_by: str | None = None
    asked_at: datetime | None = None
    answered_at: datetime | None = None


class ProductResponse(BaseModel):
    id: str
    name: str
    brand: str
    category: str
    description: str | None = None
    image: str | None = None
    price: float
    current_price: float
    sale_price: float | None = None
    sale_end_date: datetime | None = None
    count_in_stock: int
    rating: float
    num_reviews: int
    view_count: int = 0
    reviews: list[ReviewResponse] = []
    questions: list[QuestionResponse] = []

    @classmethod
    def from_product(cls, product: Product, include_hidden: bool = False, view_count: int = 0) -> "ProductResponse":
        reviews = [r for r in product.reviews if include_hidden or not r.is_hidden]
        return cls(
            id=str(product.id),
            name=product.name,
            brand=product.brand,
            category=product.category,
            description=product.description,
            image=product.image,
            price=product.price,
            current_price=product.effective_price(),
            sale_price=product.sale_price,
            sale_end_date=product.sale_end_date,
            count_in_stock=product.count_in_stock,
            rating=product.rating or 0.0,
            num_reviews=product.num_reviews or 0,
            reviews=[
                ReviewResponse(
                    id=str(r.id),
                    user_id=str(r.user_id),
                    name=r.name,
                    rating=r.rating,
                    comment=r.comment,
                    is_reported=bool(r.is_reported),
                    helpful_votes=len(r.helpful_votes or []),
                    not_helpful_votes=len(r.not_helpful_votes or []),
                    created_at=r.created_at,
                )
                for r in reviews
            ],
            view_count=view_count,
            questions=[
                QuestionResponse(
                    id=str(q.id),
                    user_id=str(q.user_id),
                    question=q.question,
                    answer=q.answer,
                    answered_by=str(q.answered_by) if q.answered_by else None,
                    asked_at=q.asked_at,
                    answered_at=q.answered_at,
                )
                for q in product.questions
            ],
        )


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int
    page: int
    pages: int


class ProductCollectionResponse(BaseModel):
    products: list[ProductResponse]


class FacetResponse(BaseModel):
    values: list[str]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    is_admin: bool = False


class UserIdResponse(BaseModel):
    user_id: str


class WishlistResponse(BaseModel):
    product_id: str
    in_wishlist: bool
