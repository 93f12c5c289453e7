import pytest
from protean import current_domain

from storefront.catalogue import management
from storefront.catalogue.facets import BRANDS_KEY, CATEGORIES_KEY, catalogue_cache, list_brands, list_categories
from storefront.catalogue.management import AddProduct, RemoveProduct, UpdateProductDetails
from storefront.errors import DuplicateProduct


def test_categories_are_distinct_and_sorted(make_product):
    make_product(category="Kitchen")
    make_product(category="Garden")
    make_product(category="Kitchen")
    assert list_categories() == ["Garden", "Kitchen"]


def test_brands(make_product):
    make_product(brand="Zed")
    make_product(brand="Acme")
    assert list_brands() == ["Acme", "Zed"]


def test_result_is_cached(make_product):
    make_product(category="Kitchen")
    list_categories()
    assert CATEGORIES_KEY in catalogue_cache


def test_adding_a_product_invalidates(make_product):
    make_product(category="Kitchen", brand="Acme")
    assert list_categories() == ["Kitchen"]
    assert list_brands() == ["Acme"]

    make_product(category="Garden", brand="Boil")

    assert CATEGORIES_KEY not in catalogue_cache
    assert BRANDS_KEY not in catalogue_cache
    assert list_categories() == ["Garden", "Kitchen"]
    assert list_brands() == ["Acme", "Boil"]


def test_updating_a_product_invalidates(make_product):
    product_id = make_product(category="Kitchen")
    assert list_categories() == ["Kitchen"]

    current_domain.process(UpdateProductDetails(product_id=product_id, category="Garden"), asynchronous=False)
    assert list_categories() == ["Garden"]


def test_removing_a_product_invalidates(make_product):
    product_id = make_product(category="Kitchen")
    make_product(category="Garden")
    assert list_categories() == ["Garden", "Kitchen"]

    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    assert list_categories() == ["Garden"]


class _ReaderDuringCommit:
    """Stands in for the handler's logger: caches the pre-commit facets, as a
    concurrent reader would between the handler's writes and the commit."""

    def __init__(self, categories):
        self.categories = categories

    def info(self, *args, **kwargs):
        catalogue_cache.set(CATEGORIES_KEY, list(self.categories))


def test_facets_cached_before_commit_are_dropped_after_add(make_product, monkeypatch):
    make_product(category="Gadgets")
    assert list_categories() == ["Gadgets"]

    monkeypatch.setattr(management, "logger", _ReaderDuringCommit(["Gadgets"]))
    current_domain.process(
        AddProduct(name="Kettle", brand="Boil", category="Kitchen", price=30.0, count_in_stock=2),
        asynchronous=False,
    )

    assert list_categories() == ["Gadgets", "Kitchen"]


def test_facets_cached_before_commit_are_dropped_after_update(make_product, monkeypatch):
    product_id = make_product(category="Kitchen")
    assert list_categories() == ["Kitchen"]

    monkeypatch.setattr(management, "logger", _ReaderDuringCommit(["Kitchen"]))
    current_domain.process(UpdateProductDetails(product_id=product_id, category="Garden"), asynchronous=False)

    assert list_categories() == ["Garden"]


def test_facets_cached_before_commit_are_dropped_after_removal(make_product, monkeypatch):
    product_id = make_product(category="Kitchen")
    make_product(category="Garden")
    assert list_categories() == ["Garden", "Kitchen"]

    monkeypatch.setattr(management, "logger", _ReaderDuringCommit(["Garden", "Kitchen"]))
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)

    assert list_categories() == ["Garden"]


def test_rejected_write_keeps_cached_facets(make_product):
    name = "Kettle"
    make_product(name=name, category="Kitchen")
    assert list_categories() == ["Kitchen"]

    with pytest.raises(DuplicateProduct):
        current_domain.process(
            AddProduct(name=name, brand="Boil", category="Garden", price=30.0),
            asynchronous=False,
        )

    assert CATEGORIES_KEY in catalogue_cache
