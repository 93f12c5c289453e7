"""Business errors raised by the storefront core.

Each error knows the HTTP status it maps to and a stable ``code`` that API
clients can switch on. ``details`` carries structured extras (for example the
items that could not be reordered).
"""


class StorefrontError(Exception):
    status_code = 400
    code = "storefront_error"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"success": False, "code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
class InvalidRequestError(StorefrontError):
    status_code = 400
    code = "invalid_request"


class AuthorizationError(StorefrontError):
    status_code = 403
    code = "forbidden"


class NotFoundError(StorefrontError):
    status_code = 404
    code = "not_found"


class ConflictError(StorefrontError):
    status_code = 409
    code = "conflict"


class TransientInfrastructureError(StorefrontError):
    status_code = 500
    code = "infrastructure_unavailable"


# ---------------------------------------------------------------------------
# Invalid input
# ---------------------------------------------------------------------------
class EmptyOrder(InvalidRequestError):
    code = "empty_order"

    def __init__(self):
        super().__init__("No order items")


class InvalidOrderItem(InvalidRequestError):
    code = "invalid_order_item"


class InvalidShippingAddress(InvalidRequestError):
    code = "invalid_shipping_address"

    def __init__(self, message: str = "Shipping address with address and city is required"):
        super().__init__(message)


class InvalidPaymentMethod(InvalidRequestError):
    code = "invalid_payment_method"

    def __init__(self, method, allowed):
        super().__init__(
            f"Invalid payment method '{method}'. Must be one of: {', '.join(allowed)}",
            allowed=list(allowed),
        )


class InvalidOrderStatus(InvalidRequestError):
    code = "invalid_order_status"

    def __init__(self, status, allowed):
        super().__init__(f"Invalid status '{status}'", allowed=list(allowed))


class InvalidRating(InvalidRequestError):
    code = "invalid_rating"

    def __init__(self, rating):
        super().__init__(f"Rating must be an integer between 1 and 5, got {rating}")


class InvalidQuestion(InvalidRequestError):
    code = "invalid_question"


class InvalidStockLevel(InvalidRequestError):
    code = "invalid_stock_level"


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------
class NotOrderOwner(AuthorizationError):
    code = "not_order_owner"

    def __init__(self, message: str = "Not authorized to access this order"):
        super().__init__(message)


class AdminRequired(AuthorizationError):
    code = "admin_required"

    def __init__(self, action: str):
        super().__init__(f"Only administrators can {action}")


# ---------------------------------------------------------------------------
# Missing resources
# ---------------------------------------------------------------------------
class OrderNotFound(NotFoundError):
    code = "order_not_found"

    def __init__(self, order_id):
        super().__init__("Order not found", order_id=order_id)


class ProductNotFound(NotFoundError):
    code = "product_not_found"

    def __init__(self, product_id):
        super().__init__(f"Product not found: {product_id}", product_id=product_id)


class ItemNotFound(NotFoundError):
    code = "item_not_found"

    def __init__(self, product_id):
        super().__init__("Item not found in order or already canceled", product_id=product_id)


class ReviewNotFound(NotFoundError):
    code = "review_not_found"

    def __init__(self, review_id):
        super().__init__("Review not found", review_id=review_id)


class QuestionNotFound(NotFoundError):
    code = "question_not_found"

    def __init__(self, question_id):
        super().__init__("Question not found", question_id=question_id)


class UserNotFound(NotFoundError):
    code = "user_not_found"

    def __init__(self, user_id):
        super().__init__("User not found", user_id=user_id)


# ---------------------------------------------------------------------------
# State conflicts
# ---------------------------------------------------------------------------
class OutOfStock(ConflictError):
    status_code = 400
    code = "out_of_stock"

    def __init__(self, product_id, product_name, available, requested):
        super().__init__(
            f"Not enough stock for {product_name}. Available: {available}",
            product_id=product_id,
            available=available,
            requested=requested,
        )


class PriceMismatch(ConflictError):
    status_code = 400
    code = "price_mismatch"

    def __init__(self, expected, received):
        super().__init__(
            "Price mismatch. Please refresh and try again.",
            expected=expected,
            received=received,
        )


class AlreadyPaid(ConflictError):
    code = "already_paid"

    def __init__(self):
        super().__init__("Order is already paid")


class AlreadyDelivered(ConflictError):
    code = "already_delivered"

    def __init__(self):
        super().__init__("Order is already delivered")


class AlreadyCanceled(ConflictError):
    code = "already_canceled"

    def __init__(self):
        super().__init__("Order is already canceled")


class CannotDeliverUnpaid(ConflictError):
    code = "cannot_deliver_unpaid"

    def __init__(self):
        super().__init__("Order must be paid before it can be delivered")


class CannotModifyDeliveredOrder(ConflictError):
    code = "order_delivered"

    def __init__(self, action: str = "modify"):
        super().__init__(f"Cannot {action} a delivered order")


class CannotModifyPaidOrder(ConflictError):
    code = "order_paid"

    def __init__(self, action: str = "modify"):
        super().__init__(f"Cannot {action} a paid order")


class NothingToReorder(ConflictError):
    status_code = 400
    code = "nothing_to_reorder"

    def __init__(self, unavailable_items):
        super().__init__(
            "None of the items from this order are currently available",
            unavailable_items=unavailable_items,
        )


class AlreadyReviewed(ConflictError):
    code = "already_reviewed"

    def __init__(self):
        super().__init__("Product already reviewed")


class DuplicateProduct(ConflictError):
    code = "duplicate_product"

    def __init__(self, name):
        super().__init__(f"A product named '{name}' already exists")


class DuplicateEmail(ConflictError):
    code = "duplicate_email"

    def __init__(self, email):
        super().__init__(f"A user with email {email} already exists")


class ConcurrentModification(TransientInfrastructureError):
    status_code = 409
    code = "concurrent_modification"

    def __init__(self):
        super().__init__("The resource was modified by another request. Please retry.")
