"""Business settings for the storefront.

Every value can be overridden through an environment variable of the same
name prefixed with ``STOREFRONT_``.
"""

import os


def _float(name: str, default: float) -> float:
    return float(os.getenv(f"STOREFRONT_{name}", default))


def _int(name: str, default: int) -> int:
    return int(os.getenv(f"STOREFRONT_{name}", default))


def _str(name: str, default: str) -> str:
    return os.getenv(f"STOREFRONT_{name}", default)


# Pricing
PRICE_TOLERANCE = _float("PRICE_TOLERANCE", 0.01)
REORDER_TAX_RATE = _float("REORDER_TAX_RATE", 0.1)

# Pagination
MY_ORDERS_PAGE_SIZE = _int("MY_ORDERS_PAGE_SIZE", 10)
MY_ORDERS_MAX_PAGE_SIZE = _int("MY_ORDERS_MAX_PAGE_SIZE", 50)
ADMIN_ORDERS_PAGE_SIZE = _int("ADMIN_ORDERS_PAGE_SIZE", 20)
ADMIN_ORDERS_MAX_PAGE_SIZE = _int("ADMIN_ORDERS_MAX_PAGE_SIZE", 100)
PRODUCTS_PAGE_SIZE = _int("PRODUCTS_PAGE_SIZE", 10)
PRODUCTS_MAX_PAGE_SIZE = _int("PRODUCTS_MAX_PAGE_SIZE", 100)

# Catalogue facet cache, in seconds
CATEGORIES_CACHE_TTL = _int("CATEGORIES_CACHE_TTL", 600)
BRANDS_CACHE_TTL = _int("BRANDS_CACHE_TTL", 600)
TRENDING_CACHE_TTL = _int("TRENDING_CACHE_TTL", 300)

# Product discovery
TRENDING_LIMIT = _int("TRENDING_LIMIT", 10)
TRENDING_WINDOW_DAYS = _int("TRENDING_WINDOW_DAYS", 7)
RELATED_LIMIT = _int("RELATED_LIMIT", 8)

# Outbound e-mail
EMAIL_BACKEND = _str("EMAIL_BACKEND", "fake")
EMAIL_FROM = _str("EMAIL_FROM", "orders@storefront.local")
SMTP_HOST = _str("SMTP_HOST", "localhost")
SMTP_PORT = _int("SMTP_PORT", 587)
SMTP_USERNAME = _str("SMTP_USERNAME", "")
SMTP_PASSWORD = _str("SMTP_PASSWORD", "")
SMTP_TIMEOUT = _float("SMTP_TIMEOUT", 10.0)
