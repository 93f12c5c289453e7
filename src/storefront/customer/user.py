"""User aggregate: the shopper or administrator acting on the storefront.

Credentials and sessions belong to the authentication service; this
aggregate keeps only what the order workflow needs.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, List, String

from storefront.customer.email import EmailAddress
from storefront.domain import storefront
from storefront.utils.clock import utcnow


@storefront.aggregate
class User:
    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254, unique=True)
    is_admin: Boolean(default=False)
    wishlist: List(content_type=String)
    registered_at: DateTime()

    @invariant.post
    def email_is_well_formed(self):
        try:
            EmailAddress(address=self.email)
        except ValidationError:
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @classmethod
    def register(cls, name, email, is_admin=False):
        return cls(
            name=name,
            email=email.strip().lower(),
            is_admin=is_admin,
            wishlist=[],
            registered_at=utcnow(),
        )

    def toggle_wishlist(self, product_id) -> bool:
        """Add or remove ``product_id``. Returns True when the product is now wishlisted."""
        current = list(self.wishlist or [])
        if product_id in current:
            current.remove(product_id)
            added = False
        else:
            current.append(product_id)
            added = True

        self.wishlist = current
        return added
