"""Product views and the trending list built from them.

Views are counted in a projection rather than on the Product aggregate, so
browsing never competes with stock reservations for the product's version.
"""

from datetime import timedelta

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront import settings
from storefront.catalogue.events import ProductRemoved
from storefront.catalogue.facets import catalogue_cache
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.clock import utcnow

logger = structlog.get_logger(__name__)

TRENDING_KEY = ("catalogue", "trending")
_RANK_PAGE = 50


@storefront.projection
class ProductPopularity:
    product_id: Identifier(identifier=True, required=True)
    view_count: Integer(default=0)
    last_viewed_at: DateTime()


def record_view(product_id) -> None:
    """Count one view of ``product_id``. Best effort: a failure is logged and dropped."""
    repo = current_domain.repository_for(ProductPopularity)
    try:
        try:
            popularity = repo.get(product_id)
        except ObjectNotFoundError:
            popularity = ProductPopularity(product_id=product_id, view_count=0)

        popularity.view_count += 1
        popularity.last_viewed_at = utcnow()
        repo.add(popularity)
    except Exception as exc:
        logger.warning("product_view_not_recorded", product_id=str(product_id), error=str(exc))


def view_count(product_id) -> int:
    try:
        return current_domain.repository_for(ProductPopularity).get(product_id).view_count
    except ObjectNotFoundError:
        return 0


def view_counts(product_ids) -> dict[str, int]:
    ids = [str(product_id) for product_id in product_ids]
    if not ids:
        return {}

    rows = (
        current_domain.repository_for(ProductPopularity)
        ._dao.query.filter(product_id__in=ids)
        .limit(len(ids))
        .all()
        .items
    )
    return {str(row.product_id): row.view_count for row in rows}


def _rank_trending() -> list[str]:
    """Ids of the most viewed in-stock products over the trending window."""
    since = utcnow() - timedelta(days=settings.TRENDING_WINDOW_DAYS)
    query = (
        current_domain.repository_for(ProductPopularity)
        ._dao.query.filter(last_viewed_at__gte=since)
        .order_by(["-view_count", "-last_viewed_at"])
    )
    product_repo = current_domain.repository_for(Product)

    ranked, offset = [], 0
    while len(ranked) < settings.TRENDING_LIMIT:
        page = query.offset(offset).limit(_RANK_PAGE).all().items
        for row in page:
            try:
                product = product_repo.get(row.product_id)
            except ObjectNotFoundError:
                continue
            if product.count_in_stock > 0:
                ranked.append(str(product.id))
            if len(ranked) == settings.TRENDING_LIMIT:
                break

        if len(page) < _RANK_PAGE:
            break
        offset += _RANK_PAGE

    return ranked


def list_trending() -> list[Product]:
    """Trending products. The ranking is cached; the products are read fresh."""
    product_ids = catalogue_cache.get_or_load(TRENDING_KEY, _rank_trending, ttl=settings.TRENDING_CACHE_TTL)

    repo = current_domain.repository_for(Product)
    products = []
    for product_id in product_ids:
        try:
            products.append(repo.get(product_id))
        except ObjectNotFoundError:
            continue
    return products


@storefront.event_handler(part_of=Product)
class ProductPopularityEventHandler:
    @handle(ProductRemoved)
    def on_product_removed(self, event: ProductRemoved) -> None:
        repo = current_domain.repository_for(ProductPopularity)
        popularity = repo._dao.query.filter(product_id=str(event.product_id)).all().first
        if popularity is not None:
            repo._dao.delete(popularity)

        catalogue_cache.invalidate(TRENDING_KEY)
