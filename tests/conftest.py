import json
import os
from pathlib import Path
from uuid import uuid4

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before any test module imports the domain."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _storefront_domain():
    """Initialize the storefront domain once per session."""
    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, clean up infrastructure after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    from storefront.catalogue.facets import catalogue_cache
    from storefront.notification.channel import reset_email_channel

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()

    catalogue_cache.clear()
    reset_email_channel()
    ctx.pop()


@pytest.fixture()
def outbox():
    """The fake e-mail adapter, freshly installed for this test."""
    from storefront.notification.channel import set_email_channel
    from storefront.notification.channel.fake_email import FakeEmailAdapter

    adapter = FakeEmailAdapter()
    set_email_channel(adapter)
    return adapter


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
DEFAULT_ADDRESS = {
    "address": "12 Market St",
    "city": "Springfield",
    "postal_code": "62701",
    "country": "US",
}


@pytest.fixture()
def make_user():
    from protean import current_domain

    from storefront.customer.registration import RegisterUser

    def _make(name="Ada Shopper", email=None, is_admin=False):
        command = RegisterUser(
            name=name,
            email=email or f"user-{uuid4().hex[:8]}@example.com",
            is_admin=is_admin,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def customer_id(make_user):
    return make_user(name="Ada Shopper", email="ada@example.com")


@pytest.fixture()
def admin_id(make_user):
    return make_user(name="Grace Admin", email="grace@example.com", is_admin=True)


@pytest.fixture()
def make_product():
    from protean import current_domain

    from storefront.catalogue.management import AddProduct

    def _make(name=None, price=10.0, count_in_stock=5, brand="Acme", category="Gadgets", image=None):
        command = AddProduct(
            name=name or f"Widget {uuid4().hex[:6]}",
            brand=brand,
            category=category,
            price=price,
            count_in_stock=count_in_stock,
            image=image,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def stock_of():
    from protean import current_domain

    from storefront.catalogue.product import Product

    def _stock(product_id):
        return current_domain.repository_for(Product).get(product_id).count_in_stock

    return _stock


@pytest.fixture()
def place_order():
    """Place an order for ``lines`` of ``(product_id, quantity, unit_price)``.

    ``items_price`` defaults to the honest total of the lines.
    """
    from protean import current_domain

    from storefront.order.creation import PlaceOrder

    def _place(
        user_id,
        lines,
        items_price=None,
        shipping_price=5.0,
        tax_price=0.0,
        payment_method="PayPal",
        address=None,
    ):
        if items_price is None:
            items_price = round(sum(quantity * price for _, quantity, price in lines), 2)
        command = PlaceOrder(
            user_id=user_id,
            items=json.dumps([{"product_id": pid, "quantity": quantity} for pid, quantity, _ in lines]),
            shipping_address=json.dumps(address or DEFAULT_ADDRESS),
            payment_method=payment_method,
            items_price=items_price,
            shipping_price=shipping_price,
            tax_price=tax_price,
        )
        return current_domain.process(command, asynchronous=False)

    return _place


@pytest.fixture()
def load_order():
    from protean import current_domain

    from storefront.order.order import Order

    def _load(order_id):
        return current_domain.repository_for(Order).get(order_id)

    return _load
