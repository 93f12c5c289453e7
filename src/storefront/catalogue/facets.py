"""Cached catalogue facets (distinct categories and brands)."""

from protean.utils.globals import current_domain

from storefront import settings
from storefront.catalogue.product import Product
from storefront.utils.cache import QueryCache

CATEGORIES_KEY = ("catalogue", "categories")
BRANDS_KEY = ("catalogue", "brands")

catalogue_cache = QueryCache(default_ttl=settings.CATEGORIES_CACHE_TTL)


def _distinct(field_name: str) -> list[str]:
    repo = current_domain.repository_for(Product)
    return sorted({getattr(product, field_name) for product in repo.scan() if getattr(product, field_name)})


def list_categories() -> list[str]:
    return catalogue_cache.get_or_load(
        CATEGORIES_KEY,
        lambda: _distinct("category"),
        ttl=settings.CATEGORIES_CACHE_TTL,
    )


def list_brands() -> list[str]:
    return catalogue_cache.get_or_load(
        BRANDS_KEY,
        lambda: _distinct("brand"),
        ttl=settings.BRANDS_CACHE_TTL,
    )


def invalidate_facets() -> None:
    """Drop cached facets. Called after a product add, update or removal commits."""
    catalogue_cache.invalidate(CATEGORIES_KEY, BRANDS_KEY)
