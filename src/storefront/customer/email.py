"""EmailAddress value object: structural checks for a shopper's e-mail."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.domain import storefront

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


@storefront.value_object
class EmailAddress:
    """One ``@``, a non-empty local part and a dotted domain.

    No whitespace, no consecutive or edge dots, no hyphen at either end of a
    domain label and none of the characters RFC 5322 reserves for quoting.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def address_is_well_formed(self):
        email = self.address
        invalid = ValidationError({"address": [f"Invalid email address: {email!r}"]})

        if any(ch.isspace() for ch in email) or email.count("@") != 1:
            raise invalid

        local_part, domain_part = email.split("@", 1)
        if not local_part or local_part.startswith(".") or local_part.endswith("."):
            raise invalid
        if not domain_part or "." not in domain_part or domain_part.startswith(".") or domain_part.endswith("."):
            raise invalid
        if ".." in local_part or ".." in domain_part:
            raise invalid
        if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
            raise invalid
        if any(ch in email for ch in _FORBIDDEN):
            raise invalid
