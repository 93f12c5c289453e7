"""Domain initialization and configuration."""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
#
# Products, orders and users live in one bounded context so that a stock
# decrement and the order that caused it commit in the same unit of work.
storefront = Domain(name="storefront")
