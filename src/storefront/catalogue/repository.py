"""Query methods for the Product aggregate."""

from protean.utils.query import Q

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.clock import utcnow

_SCAN_PAGE = 100

SORT_ORDERS = {
    "newest": "-created_at",
    "oldest": "created_at",
    "price_asc": "price",
    "price_desc": "-price",
    "rating_desc": "-rating",
    "name_asc": "name",
}
POPULAR = "popular"


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_by_name(self, name: str) -> Product | None:
        """Case-insensitive lookup by product name."""
        results = self._dao.query.filter(name__iexact=name).limit(1).all()
        return results.first

    def _filtered(
        self,
        keyword=None,
        category=None,
        brand=None,
        min_price=None,
        max_price=None,
        min_rating=None,
        in_stock=False,
        on_sale=False,
    ):
        query = self._dao.query
        if keyword:
            query = query.filter(Q(name__icontains=keyword) | Q(description__icontains=keyword))

        filters = {}
        if category:
            filters["category__iexact"] = category
        if brand:
            filters["brand__iexact"] = brand
        if min_price:
            filters["price__gte"] = min_price
        if max_price:
            filters["price__lte"] = max_price
        if min_rating:
            filters["rating__gte"] = min_rating
        if in_stock:
            filters["count_in_stock__gt"] = 0
        if on_sale:
            filters["sale_price__isnull"] = False
            filters["sale_end_date__gt"] = utcnow()

        return query.filter(**filters) if filters else query

    def search(self, offset=0, limit=10, sort_by="newest", view_counts=None, **criteria):
        """Return ``(products, total)`` for one page of the filtered catalogue.

        ``criteria`` are the keyword and facet filters of ``_filtered``. Unknown
        sort orders fall back to newest first. ``sort_by="popular"`` ranks by
        ``view_counts(product_ids) -> {id: views}``, newest first among equals.
        """
        query = self._filtered(**criteria)

        if sort_by == POPULAR and view_counts is not None:
            matches = list(self._all(query.order_by("-created_at")))
            views = view_counts([product.id for product in matches])
            matches.sort(key=lambda product: views.get(str(product.id), 0), reverse=True)
            return matches[offset : offset + limit], len(matches)

        order = SORT_ORDERS.get(sort_by, SORT_ORDERS["newest"])
        results = query.order_by(order).offset(offset).limit(limit).all()
        return results.items, results.total

    def related(self, product: Product, limit: int) -> list[Product]:
        """In-stock products from the same category, best rated first."""
        results = (
            self._dao.query.filter(category=product.category, count_in_stock__gt=0)
            .exclude(id=product.id)
            .order_by(["-rating", "-created_at"])
            .limit(limit)
            .all()
        )
        return results.items

    def _all(self, query):
        offset = 0
        while True:
            page = query.offset(offset).limit(_SCAN_PAGE).all().items
            yield from page
            if len(page) < _SCAN_PAGE:
                return
            offset += _SCAN_PAGE

    def scan(self):
        """Iterate over every product, one page at a time."""
        yield from self._all(self._dao.query.order_by("created_at"))
