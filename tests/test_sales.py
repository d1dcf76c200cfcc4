"""Tests for sale creation and voiding."""

from __future__ import annotations

import threading
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from pos_backend.config.database import Database
from pos_backend.core.exceptions import (
    AlreadyVoidedError, EmptyCartError, InsufficientStockError, InvalidDiscountError,
    PersistenceFailure, ProductNotFoundError, SaleNotFoundError
)
from pos_backend.modules.catalog.schemas import ProductUpdate
from pos_backend.modules.ledger.repository import LedgerRepository
from pos_backend.modules.sales.schemas import Discount
from pos_backend.modules.sales.service import SalesService
from pos_backend.shared.database.models import DiscountType, Sale, SaleStatus
from pos_backend.shared.services.inventory_service import InventoryService


def _sale_count(database) -> int:
    with database.session() as db:
        return db.query(Sale).count()


def test_create_sale_records_ledger_and_decrements_stock(sales, make_product, stock_of, cart_item, database):
    coffee = make_product(name="Coffee", price=500, stock=10)
    cake = make_product(name="Cake", price=1000, stock=4)

    result = sales.create_sale([
        cart_item(coffee, 500, 2, "Coffee"),
        cart_item(cake, 1000, 1, "Cake"),
    ])

    assert result.subtotal == 2000
    assert result.final_total == 2000
    assert stock_of(coffee) == 8
    assert stock_of(cake) == 3

    record = sales.get_sale(result.sale_id)
    assert record.status == SaleStatus.ACTIVE.value
    assert record.total_price == 2000
    assert [(i.product_id, i.name, i.unit_price, i.quantity) for i in record.items] == [
        (coffee, "Coffee", 500, 2),
        (cake, "Cake", 1000, 1),
    ]


def test_create_sale_with_discounts(sales, make_product, cart_item):
    coffee = make_product(price=500, stock=100)
    cake = make_product(price=1000, stock=100)
    cart = [cart_item(coffee, 500, 2), cart_item(cake, 1000, 1)]

    pct = sales.create_sale(cart, Discount(type=DiscountType.PERCENT, value=Decimal("10")))
    fixed = sales.create_sale(cart, Discount(type=DiscountType.FIXED, value=Decimal("300")))

    assert pct.final_total == 1800
    assert fixed.final_total == 1700

    record = sales.get_sale(fixed.sale_id)
    assert record.subtotal_price == 2000
    assert record.discount_type == "fixed"
    assert record.discount_value == Decimal("300")


def test_stored_discount_is_the_one_that_priced_the_sale(sales, make_product, cart_item, database):
    product = make_product(price=100_000, stock=10)

    result = sales.create_sale([cart_item(product, 100_000, 1)], Discount(type=DiscountType.PERCENT, value=Decimal("12.34")))
    assert result.final_total == 87_660
    assert sales.get_sale(result.sale_id).discount_value == Decimal("12.34")

    with pytest.raises(InvalidDiscountError):
        sales.create_sale([cart_item(product, 100_000, 1)], Discount(type=DiscountType.PERCENT, value=Decimal("12.345")))
    assert _sale_count(database) == 1


def test_empty_cart_is_rejected(sales, database):
    with pytest.raises(EmptyCartError):
        sales.create_sale([])
    assert _sale_count(database) == 0


def test_invalid_discount_changes_nothing(sales, make_product, stock_of, cart_item, database):
    product = make_product(stock=5)

    with pytest.raises(InvalidDiscountError):
        sales.create_sale([cart_item(product, 100, 1)], Discount(type=DiscountType.PERCENT, value=Decimal("150")))

    assert stock_of(product) == 5
    assert _sale_count(database) == 0


def test_unknown_product_rolls_back_whole_sale(sales, make_product, stock_of, cart_item, database):
    product = make_product(stock=5)

    with pytest.raises(ProductNotFoundError):
        sales.create_sale([cart_item(product, 100, 1), cart_item(9999, 100, 1)])

    assert stock_of(product) == 5
    assert _sale_count(database) == 0


def test_insufficient_stock_is_rejected_by_default(sales, make_product, stock_of, cart_item, database):
    product = make_product(stock=2)

    with pytest.raises(InsufficientStockError) as excinfo:
        sales.create_sale([cart_item(product, 100, 3)])

    assert excinfo.value.shortages == {product: {"stock": 2, "requested": 3}}
    assert stock_of(product) == 2
    assert _sale_count(database) == 0


def test_repeated_product_lines_are_checked_together(sales, make_product, stock_of, cart_item):
    product = make_product(stock=3)

    with pytest.raises(InsufficientStockError):
        sales.create_sale([cart_item(product, 100, 2), cart_item(product, 100, 2)])

    sales.create_sale([cart_item(product, 100, 1), cart_item(product, 100, 2)])
    assert stock_of(product) == 0


def test_overselling_when_negative_stock_allowed(database, make_product, stock_of, cart_item):
    product = make_product(stock=1)
    service = SalesService(database, allow_negative_stock=True)

    service.create_sale([cart_item(product, 100, 3)])

    assert stock_of(product) == -2


def test_persistence_failure_rolls_back(sales, make_product, stock_of, cart_item, database, monkeypatch):
    product = make_product(stock=5)

    def broken_decrement(db, requested):
        raise OperationalError("UPDATE products", {}, Exception("disk I/O error"))

    monkeypatch.setattr(InventoryService, "decrement_stock", staticmethod(broken_decrement))

    with pytest.raises(PersistenceFailure):
        sales.create_sale([cart_item(product, 100, 2)])

    assert stock_of(product) == 5
    assert _sale_count(database) == 0


def test_snapshot_survives_catalog_edits(sales, catalog, make_product, cart_item):
    product = make_product(name="Scone", price=300, stock=5)
    result = sales.create_sale([cart_item(product, 300, 1, "Scone")])

    catalog.update_product(ProductUpdate(id=product, name="Big scone", price=450, stock=5))

    item = sales.get_sale(result.sale_id).items[0]
    assert (item.name, item.unit_price) == ("Scone", 300)


def test_void_restores_stock_exactly(sales, make_product, stock_of, cart_item):
    a = make_product(stock=10)
    b = make_product(stock=7)
    result = sales.create_sale([cart_item(a, 100, 4), cart_item(b, 200, 2), cart_item(a, 100, 1)])
    assert (stock_of(a), stock_of(b)) == (5, 5)

    outcome = sales.void_sale(result.sale_id)

    assert outcome.restored_items == 3
    assert outcome.skipped_product_ids == []
    assert (stock_of(a), stock_of(b)) == (10, 7)

    record = sales.get_sale(result.sale_id)
    assert record.status == SaleStatus.VOID.value
    assert record.voided_at is not None


def test_second_void_fails_and_changes_nothing(sales, make_product, stock_of, cart_item, database):
    product = make_product(stock=10)
    result = sales.create_sale([cart_item(product, 100, 4)])
    sales.void_sale(result.sale_id)

    with database.session() as db:
        before = LedgerRepository(db).get_by_id(result.sale_id).voided_at

    with pytest.raises(AlreadyVoidedError):
        sales.void_sale(result.sale_id)

    assert stock_of(product) == 10
    with database.session() as db:
        sale = LedgerRepository(db).get_by_id(result.sale_id)
        assert sale.status == SaleStatus.VOID.value
        assert sale.voided_at == before


def test_void_unknown_sale(sales):
    with pytest.raises(SaleNotFoundError):
        sales.void_sale(424242)


def test_void_skips_deleted_products(sales, catalog, make_product, stock_of, cart_item):
    kept = make_product(stock=5)
    gone = make_product(stock=5)
    result = sales.create_sale([cart_item(kept, 100, 2), cart_item(gone, 100, 3)])
    catalog.delete_product(gone)

    outcome = sales.void_sale(result.sale_id)

    assert outcome.restored_items == 1
    assert outcome.skipped_product_ids == [gone]
    assert stock_of(kept) == 5
    assert stock_of(gone) is None
    assert sales.get_sale(result.sale_id).status == SaleStatus.VOID.value


def _checkout_concurrently(services, product_id, cart_item, quantity=3):
    barrier = threading.Barrier(len(services))
    outcomes = []
    lock = threading.Lock()

    def checkout(service):
        barrier.wait()
        try:
            service.create_sale([cart_item(product_id, 100, quantity)])
            outcome = "ok"
        except InsufficientStockError:
            outcome = "insufficient"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=checkout, args=(service,)) for service in services]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return sorted(outcomes)


def test_concurrent_checkouts_respect_stock_floor(sales, make_product, stock_of, cart_item, database):
    product = make_product(stock=5)

    outcomes = _checkout_concurrently([sales, sales], product, cart_item)

    assert outcomes == ["insufficient", "ok"]
    assert stock_of(product) == 2
    assert _sale_count(database) == 1


def test_concurrent_checkouts_without_floor_lose_no_updates(database, make_product, stock_of, cart_item):
    product = make_product(stock=5)
    service = SalesService(database, allow_negative_stock=True)

    outcomes = _checkout_concurrently([service, service], product, cart_item)

    assert outcomes == ["ok", "ok"]
    assert stock_of(product) == -1
    assert _sale_count(database) == 2


def test_many_concurrent_checkouts_never_oversell(sales, make_product, stock_of, cart_item):
    product = make_product(stock=10)

    outcomes = _checkout_concurrently([sales] * 8, product, cart_item, quantity=1)

    assert outcomes.count("ok") == 8
    assert stock_of(product) == 2


def test_writers_on_separate_handles_respect_stock_floor(database, make_product, stock_of, cart_item):
    # a second handle has its own engine and lock, like another worker process
    other = Database(database.database_url)
    product = make_product(stock=5)

    try:
        outcomes = _checkout_concurrently(
            [SalesService(database), SalesService(other)], product, cart_item
        )
    finally:
        other.dispose()

    assert outcomes == ["insufficient", "ok"]
    assert stock_of(product) == 2
    assert _sale_count(database) == 1
