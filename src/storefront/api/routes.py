"""FastAPI routes for the storefront: orders, products and users."""

import json
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront import settings
from storefront.api.auth import Actor, admin_actor, current_actor, optional_actor
from storefront.api.schemas import (
    AdjustStockRequest,
    AnswerRequest,
    ChangePaymentMethodRequest,
    CreateOrderRequest,
    CreateProductRequest,
    FacetResponse,
    ModerateReviewRequest,
    OrderListResponse,
    OrderResponse,
    PaymentResultRequest,
    ProductCollectionResponse,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    QuestionIdResponse,
    QuestionRequest,
    RegisterUserRequest,
    ReorderResponse,
    ReviewRequest,
    SetSaleRequest,
    ShippingAddressSchema,
    StatusResponse,
    TimelineEntryResponse,
    TimelineResponse,
    TrackingInfoRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
    UserIdResponse,
    VoteReviewRequest,
    WishlistResponse,
)
from storefront.catalogue.facets import list_brands, list_categories
from storefront.catalogue.management import AddProduct, RemoveProduct, UpdateProductDetails, load_product
from storefront.catalogue.popularity import list_trending, record_view, view_count, view_counts
from storefront.catalogue.product import Product
from storefront.catalogue.questions import AnswerQuestion, AskQuestion
from storefront.catalogue.reviews import AddReview, ModerateReview, ReportReview, VoteOnReview
from storefront.catalogue.stock import AdjustStock, SetSalePrice
from storefront.customer.registration import RegisterUser, ToggleWishlist
from storefront.errors import AdminRequired
from storefront.order.cancellation import CancelOrder, CancelOrderItem
from storefront.order.creation import PlaceOrder
from storefront.order.fulfillment import AddTrackingInfo, MarkOrderAsDelivered, UpdateOrderStatus
from storefront.order.modification import UpdateShippingAddress
from storefront.order.payment import ChangePaymentMethod, MarkOrderAsPaid
from storefront.order.queries import get_order, list_my_orders, list_orders, order_timeline
from storefront.order.reorder import Reorder

ActorDep = Annotated[Actor, Depends(current_actor)]
AdminDep = Annotated[Actor, Depends(admin_actor)]


def _order_response(order_id: str, actor: Actor) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id, actor.id, actor.is_admin))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, actor: ActorDep) -> OrderResponse:
    command = PlaceOrder(
        user_id=actor.id,
        items=json.dumps([item.model_dump() for item in body.order_items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        items_price=body.items_price,
        shipping_price=body.shipping_price,
        tax_price=body.tax_price,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(order_id, actor)


@order_router.get("/mine", response_model=OrderListResponse)
async def my_orders(
    actor: ActorDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1)] = settings.MY_ORDERS_PAGE_SIZE,
    status: str | None = None,
) -> OrderListResponse:
    result = list_my_orders(actor.id, page=page, limit=limit, status=status)
    return OrderListResponse(
        orders=[OrderResponse.from_order(order) for order in result.orders],
        total=result.total,
        page=result.page,
        pages=result.pages,
        limit=result.limit,
    )


@order_router.get("", response_model=OrderListResponse)
async def all_orders(
    actor: ActorDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1)] = settings.ADMIN_ORDERS_PAGE_SIZE,
    status: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> OrderListResponse:
    result = list_orders(
        actor.is_admin,
        page=page,
        limit=limit,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    return OrderListResponse(
        orders=[OrderResponse.from_order(order) for order in result.orders],
        total=result.total,
        page=result.page,
        pages=result.pages,
        limit=result.limit,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, actor: ActorDep) -> OrderResponse:
    return _order_response(order_id, actor)


@order_router.put("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(order_id: str, body: PaymentResultRequest, actor: ActorDep) -> OrderResponse:
    command = MarkOrderAsPaid(
        order_id=order_id,
        payment_id=body.id,
        payment_status=body.status,
        update_time=body.update_time,
        email_address=body.email_address,
        actor_id=actor.id,
        actor_is_admin=actor.is_admin,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id, actor)


@order_router.put("/{order_id}/deliver", response_model=OrderResponse)
async def deliver_order(order_id: str, actor: ActorDep) -> OrderResponse:
    command = MarkOrderAsDelivered(order_id=order_id, actor_id=actor.id, actor_is_admin=actor.is_admin)
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id, actor)


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, actor: ActorDep) -> StatusResponse:
    command = CancelOrder(order_id=order_id, actor_id=actor.id, actor_is_admin=actor.is_admin)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(message="Order canceled and stock restored")


@order_router.put("/{order_id}/items/{product_id}/cancel", response_model=StatusResponse)
async def cancel_order_item(order_id: str, product_id: str, actor: ActorDep) -> StatusResponse:
    command = CancelOrderItem(
        order_id=order_id,
        product_id=product_id,
        actor_id=actor.id,
        actor_is_admin=actor.is_admin,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(message="Item canceled and stock restored")


@order_router.post("/{order_id}/reorder", status_code=201, response_model=ReorderResponse)
async def reorder(order_id: str, actor: ActorDep) -> ReorderResponse:
    result = current_domain.process(Reorder(order_id=order_id, actor_id=actor.id), asynchronous=False)
    return ReorderResponse(**result)


@order_router.get("/{order_id}/timeline", response_model=TimelineResponse)
async def timeline(order_id: str, actor: ActorDep) -> TimelineResponse:
    entries = order_timeline(order_id, actor.id, actor.is_admin)
    return TimelineResponse(
        order_id=order_id,
        timeline=[TimelineEntryResponse.from_entry(entry) for entry in entries],
    )


@order_router.put("/{order_id}/address", response_model=OrderResponse)
async def update_address(order_id: str, body: ShippingAddressSchema, actor: ActorDep) -> OrderResponse:
    command = UpdateShippingAddress(
        order_id=order_id,
        shipping_address=json.dumps(body.model_dump()),
        actor_id=actor.id,
        actor_is_admin=actor.is_admin,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id, actor)


@order_router.put("/{order_id}/payment-method", response_model=OrderResponse)
async def change_payment_method(order_id: str, body: ChangePaymentMethodRequest, actor: ActorDep) -> OrderResponse:
    command = ChangePaymentMethod(
        order_id=order_id,
        payment_method=body.payment_method,
        actor_id=actor.id,
        actor_is_admin=actor.is_admin,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id, actor)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_status(order_id: str, body: UpdateOrderStatusRequest, actor: ActorDep) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        actor_id=actor.id,
        actor_is_admin=actor.is_admin,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id, actor)


@order_router.put("/{order_id}/tracking", response_model=OrderResponse)
async def add_tracking(order_id: str, body: TrackingInfoRequest, actor: ActorDep) -> OrderResponse:
    command = AddTrackingInfo(
        order_id=order_id,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        tracking_url=body.tracking_url,
        actor_id=actor.id,
        actor_is_admin=actor.is_admin,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id, actor)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


def _product_page(page, limit, **criteria) -> ProductListResponse:
    repo = current_domain.repository_for(Product)
    products, total = repo.search(offset=(page - 1) * limit, limit=limit, view_counts=view_counts, **criteria)
    views = view_counts([product.id for product in products])
    return ProductListResponse(
        products=[ProductResponse.from_product(p, view_count=views.get(str(p.id), 0)) for p in products],
        total=total,
        page=page,
        pages=(total + limit - 1) // limit if total else 0,
    )


def _collection(products) -> ProductCollectionResponse:
    views = view_counts([product.id for product in products])
    return ProductCollectionResponse(
        products=[ProductResponse.from_product(p, view_count=views.get(str(p.id), 0)) for p in products]
    )


@product_router.get("", response_model=ProductListResponse)
async def products(
    keyword: str | None = None,
    category: str | None = None,
    brand: str | None = None,
    min_price: Annotated[float | None, Query(ge=0)] = None,
    max_price: Annotated[float | None, Query(ge=0)] = None,
    min_rating: Annotated[float | None, Query(ge=0, le=5)] = None,
    in_stock: bool = False,
    on_sale: bool = False,
    sort_by: str = "newest",
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=settings.PRODUCTS_MAX_PAGE_SIZE)] = settings.PRODUCTS_PAGE_SIZE,
) -> ProductListResponse:
    return _product_page(
        page,
        limit,
        keyword=keyword,
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        in_stock=in_stock,
        on_sale=on_sale,
        sort_by=sort_by,
    )


@product_router.get("/trending", response_model=ProductCollectionResponse)
async def trending() -> ProductCollectionResponse:
    return _collection(list_trending())


@product_router.get("/categories", response_model=FacetResponse)
async def categories() -> FacetResponse:
    return FacetResponse(values=list_categories())


@product_router.get("/brands", response_model=FacetResponse)
async def brands() -> FacetResponse:
    return FacetResponse(values=list_brands())


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest, _admin: AdminDep) -> ProductIdResponse:
    product_id = current_domain.process(AddProduct(**body.model_dump()), asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_detail(
    product_id: str,
    actor: Annotated[Actor | None, Depends(optional_actor)],
) -> ProductResponse:
    product = load_product(product_id)
    record_view(product.id)
    return ProductResponse.from_product(
        product,
        include_hidden=actor is not None and actor.is_admin,
        view_count=view_count(product.id),
    )


@product_router.get("/{product_id}/related", response_model=ProductCollectionResponse)
async def related_products(product_id: str) -> ProductCollectionResponse:
    product = load_product(product_id)
    return _collection(current_domain.repository_for(Product).related(product, settings.RELATED_LIMIT))


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, body: UpdateProductRequest, _admin: AdminDep) -> ProductResponse:
    command = UpdateProductDetails(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(load_product(product_id), include_hidden=True)


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, _admin: AdminDep) -> StatusResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse(message="Product deleted")


@product_router.put("/{product_id}/stock", response_model=ProductResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest, _admin: AdminDep) -> ProductResponse:
    command = AdjustStock(product_id=product_id, count_in_stock=body.count_in_stock)
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(load_product(product_id), include_hidden=True)


@product_router.put("/{product_id}/sale", response_model=ProductResponse)
async def set_sale(product_id: str, body: SetSaleRequest, _admin: AdminDep) -> ProductResponse:
    command = SetSalePrice(
        product_id=product_id,
        sale_price=body.sale_price,
        sale_end_date=body.sale_end_date,
    )
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(load_product(product_id), include_hidden=True)


@product_router.post("/{product_id}/reviews", status_code=201, response_model=StatusResponse)
async def add_review(product_id: str, body: ReviewRequest, actor: ActorDep) -> StatusResponse:
    command = AddReview(
        product_id=product_id,
        user_id=actor.id,
        rating=body.rating,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(message="Review added")


@product_router.put("/{product_id}/reviews/{review_id}/report", response_model=StatusResponse)
async def report_review(product_id: str, review_id: str, _actor: ActorDep) -> StatusResponse:
    current_domain.process(ReportReview(product_id=product_id, review_id=review_id), asynchronous=False)
    return StatusResponse(message="Review reported")


@product_router.put("/{product_id}/reviews/{review_id}/moderate", response_model=StatusResponse)
async def moderate_review(
    product_id: str,
    review_id: str,
    body: ModerateReviewRequest,
    _admin: AdminDep,
) -> StatusResponse:
    command = ModerateReview(product_id=product_id, review_id=review_id, hide=body.hide)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(message="Review hidden" if body.hide else "Review unhidden")


@product_router.post("/{product_id}/reviews/{review_id}/vote", response_model=StatusResponse)
async def vote_review(
    product_id: str,
    review_id: str,
    body: VoteReviewRequest,
    actor: ActorDep,
) -> StatusResponse:
    command = VoteOnReview(
        product_id=product_id,
        review_id=review_id,
        user_id=actor.id,
        helpful=body.helpful,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(message="Vote recorded")


@product_router.post("/{product_id}/questions", status_code=201, response_model=QuestionIdResponse)
async def ask_question(product_id: str, body: QuestionRequest, actor: ActorDep) -> QuestionIdResponse:
    command = AskQuestion(product_id=product_id, user_id=actor.id, question=body.question)
    return QuestionIdResponse(question_id=current_domain.process(command, asynchronous=False))


@product_router.put("/{product_id}/questions/{question_id}/answer", response_model=StatusResponse)
async def answer_question(
    product_id: str,
    question_id: str,
    body: AnswerRequest,
    admin: AdminDep,
) -> StatusResponse:
    command = AnswerQuestion(
        product_id=product_id,
        question_id=question_id,
        answer=body.answer,
        answered_by=admin.id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(message="Answer added")


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserIdResponse)
async def register_user(
    body: RegisterUserRequest,
    actor: Annotated[Actor | None, Depends(optional_actor)],
) -> UserIdResponse:
    if body.is_admin and not (actor and actor.is_admin):
        raise AdminRequired("create administrator accounts")

    command = RegisterUser(name=body.name, email=body.email, is_admin=body.is_admin)
    user_id = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=user_id)


@user_router.put("/me/wishlist/{product_id}", response_model=WishlistResponse)
async def toggle_wishlist(product_id: str, actor: ActorDep) -> WishlistResponse:
    added = current_domain.process(
        ToggleWishlist(user_id=actor.id, product_id=product_id),
        asynchronous=False,
    )
    return WishlistResponse(product_id=product_id, in_wishlist=added)
