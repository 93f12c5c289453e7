"""Keep the cached catalogue facets in step with committed product changes.

Handlers run once the unit of work has committed, so a facet read racing
with a write can only ever cache the committed state.
"""

import structlog
from protean.utils.mixins import handle

from storefront.catalogue.events import ProductAdded, ProductDetailsUpdated, ProductRemoved
from storefront.catalogue.facets import invalidate_facets
from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Product)
class CatalogueFacetsEventHandler:
    @handle(ProductAdded)
    def on_product_added(self, event: ProductAdded) -> None:
        invalidate_facets()
        logger.debug("facets_invalidated", product_id=str(event.product_id), reason="added")

    @handle(ProductDetailsUpdated)
    def on_product_details_updated(self, event: ProductDetailsUpdated) -> None:
        invalidate_facets()
        logger.debug("facets_invalidated", product_id=str(event.product_id), reason="updated")

    @handle(ProductRemoved)
    def on_product_removed(self, event: ProductRemoved) -> None:
        invalidate_facets()
        logger.debug("facets_invalidated", product_id=str(event.product_id), reason="removed")
