"""Domain tests for the Product aggregate: pricing, stock ledger and sales."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from storefront.catalogue.events import ProductAdded, SalePriceSet, StockAdjusted
from storefront.catalogue.product import Product
from storefront.errors import InvalidRequestError, InvalidStockLevel, OutOfStock


def _make_product(**overrides):
    defaults = {
        "name": "Trail Runner",
        "brand": "Stride",
        "category": "Shoes",
        "price": 80.0,
        "count_in_stock": 5,
    }
    defaults.update(overrides)
    return Product.add(**defaults)


class TestProductCreation:
    def test_add_sets_fields(self):
        product = _make_product()
        assert product.name == "Trail Runner"
        assert product.count_in_stock == 5
        assert product.rating == 0.0
        assert product.num_reviews == 0
        assert product.created_at is not None

    def test_add_raises_product_added(self):
        product = _make_product()
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductAdded)
        assert event.product_id == product.id
        assert event.count_in_stock == 5

    def test_negative_stock_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(count_in_stock=-1)

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(price=-5.0)


class TestEffectivePrice:
    def test_regular_price_without_sale(self):
        assert _make_product().effective_price() == 80.0

    def test_sale_price_inside_window(self):
        product = _make_product()
        product.put_on_sale(60.0, datetime.now(UTC) + timedelta(days=1))
        assert product.on_sale()
        assert product.effective_price() == 60.0

    def test_regular_price_once_sale_has_ended(self):
        product = _make_product()
        end = datetime.now(UTC) + timedelta(hours=1)
        product.put_on_sale(60.0, end)
        assert product.effective_price(at=end + timedelta(seconds=1)) == 80.0

    def test_naive_end_date_is_treated_as_utc(self):
        product = _make_product()
        end = (datetime.now(UTC) + timedelta(days=2)).replace(tzinfo=None)
        product.put_on_sale(70.0, end)
        assert product.effective_price() == 70.0


class TestFlashSale:
    def test_sale_price_must_undercut_price(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.put_on_sale(90.0, datetime.now(UTC) + timedelta(days=1))

    def test_sale_end_must_be_in_the_future(self):
        product = _make_product()
        with pytest.raises(InvalidRequestError):
            product.put_on_sale(50.0, datetime.now(UTC) - timedelta(days=1))

    def test_sale_requires_end_date(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.put_on_sale(50.0, None)

    def test_end_sale_clears_both_fields(self):
        product = _make_product()
        product.put_on_sale(50.0, datetime.now(UTC) + timedelta(days=1))
        product.end_sale()
        assert product.sale_price is None
        assert product.sale_end_date is None
        assert product.effective_price() == 80.0

    def test_sale_raises_event(self):
        product = _make_product()
        product.put_on_sale(50.0, datetime.now(UTC) + timedelta(days=1))
        assert isinstance(product._events[-1], SalePriceSet)
        assert product._events[-1].sale_price == 50.0


class TestStockLedger:
    def test_reserve_decrements(self):
        product = _make_product(count_in_stock=5)
        product.reserve_stock(2)
        assert product.count_in_stock == 3

    def test_reserve_entire_stock(self):
        product = _make_product(count_in_stock=2)
        product.reserve_stock(2)
        assert product.count_in_stock == 0

    def test_reserve_beyond_stock_raises_and_leaves_stock(self):
        product = _make_product(count_in_stock=1)
        with pytest.raises(OutOfStock) as exc:
            product.reserve_stock(2)
        assert product.count_in_stock == 1
        assert "Trail Runner" in exc.value.message
        assert exc.value.details["available"] == 1

    def test_reserve_zero_is_rejected(self):
        with pytest.raises(InvalidStockLevel):
            _make_product().reserve_stock(0)

    def test_release_increments(self):
        product = _make_product(count_in_stock=0)
        product.release_stock(3)
        assert product.count_in_stock == 3

    def test_adjust_stock(self):
        product = _make_product(count_in_stock=5)
        product.adjust_stock(12)
        assert product.count_in_stock == 12
        event = product._events[-1]
        assert isinstance(event, StockAdjusted)
        assert event.previous_count == 5
        assert event.new_count == 12

    def test_adjust_stock_rejects_negative(self):
        product = _make_product(count_in_stock=5)
        with pytest.raises(InvalidStockLevel):
            product.adjust_stock(-1)
        assert product.count_in_stock == 5


class TestDetails:
    def test_partial_update_keeps_other_fields(self):
        product = _make_product()
        product.update_details(price=75.0)
        assert product.price == 75.0
        assert product.name == "Trail Runner"
        assert product.brand == "Stride"

    def test_update_can_clear_optional_fields(self):
        product = _make_product(description="Old copy")
        product.update_details(description=None)
        assert product.description is None
