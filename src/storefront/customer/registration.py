"""User registration and wishlist commands."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.management import load_product
from storefront.customer.user import User
from storefront.domain import storefront
from storefront.errors import DuplicateEmail, UserNotFound
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="User")
class RegisterUser:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    is_admin = Boolean(default=False)


@storefront.command(part_of="User")
class ToggleWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


def load_user(user_id) -> User:
    try:
        return current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError:
        raise UserNotFound(user_id)


@storefront.command_handler(part_of=User)
class UserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        if repo.find_by_email(command.email) is not None:
            raise DuplicateEmail(command.email)

        user = User.register(name=command.name, email=command.email, is_admin=command.is_admin)
        repo.add(user)

        logger.info("user_registered", user_id=str(user.id))
        return str(user.id)

    @handle(ToggleWishlist)
    def toggle_wishlist(self, command):
        load_product(command.product_id)

        user = load_user(command.user_id)
        added = user.toggle_wishlist(str(command.product_id))
        current_domain.repository_for(User).add(user)
        return added
