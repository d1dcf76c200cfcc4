"""Tests for the ledger store and the line-item snapshot codec."""

from __future__ import annotations

import json

import pytest

from pos_backend.core.exceptions import ConflictError, PersistenceFailure, SaleNotFoundError
from pos_backend.modules.ledger.repository import LedgerRepository
from pos_backend.modules.ledger.schemas import (
    LINE_ITEMS_SCHEMA_VERSION, LineItem, SaleRecord, decode_line_items, encode_line_items
)
from pos_backend.shared.database.models import SaleStatus

ITEMS = [
    LineItem(product_id=1, name="Bagel", unit_price=250, quantity=2),
    LineItem(product_id=7, name="Juice", unit_price=399, quantity=1),
]


def test_snapshot_is_versioned():
    payload = json.loads(encode_line_items(ITEMS))
    assert payload["schema_version"] == LINE_ITEMS_SCHEMA_VERSION
    assert payload["items"][0] == {"product_id": 1, "name": "Bagel", "unit_price": 250, "quantity": 2}


def test_snapshot_decodes_back_in_order():
    assert decode_line_items(encode_line_items(ITEMS)) == ITEMS


def test_legacy_bare_list_is_upgraded():
    legacy = json.dumps([
        {"id": 3, "name": "Soda", "price": 150, "quantity": 4, "stock": 20, "barcode": "x"},
    ])
    assert decode_line_items(legacy) == [LineItem(product_id=3, name="Soda", unit_price=150, quantity=4)]


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps({"schema_version": 99, "items": []}),
        json.dumps({"items": []}),
        json.dumps("just a string"),
        json.dumps({"schema_version": 1, "items": [{"product_id": 1}]}),
    ],
)
def test_unreadable_snapshots_are_persistence_failures(raw):
    with pytest.raises(PersistenceFailure):
        decode_line_items(raw)


def _insert(database, total=899, items=ITEMS):
    with database.unit_of_work() as db:
        return LedgerRepository(db).insert(items=items, subtotal_price=total, total_price=total)


def test_insert_and_get_by_id(database):
    sale_id = _insert(database)

    with database.session() as db:
        repository = LedgerRepository(db)
        sale = repository.get_by_id(sale_id)
        assert sale.status == SaleStatus.ACTIVE.value
        assert sale.total_price == 899
        assert sale.created_at is not None
        assert repository.get_line_items(sale) == ITEMS

        record = SaleRecord.from_model(sale)
        assert record.items == ITEMS
        assert record.discount_type is None


def test_get_required_raises_for_unknown_id(database):
    with database.session() as db:
        assert LedgerRepository(db).get_by_id(12345) is None
        with pytest.raises(SaleNotFoundError):
            LedgerRepository(db).get_required(12345)


def test_set_status_only_moves_active_to_void(database):
    sale_id = _insert(database)

    with database.unit_of_work() as db:
        assert LedgerRepository(db).set_status(sale_id, SaleStatus.VOID) == 1

    with database.unit_of_work() as db:
        # Already void: nothing left to flip
        assert LedgerRepository(db).set_status(sale_id, SaleStatus.VOID) == 0

    with pytest.raises(ConflictError):
        with database.unit_of_work() as db:
            LedgerRepository(db).set_status(sale_id, SaleStatus.ACTIVE)

    with database.session() as db:
        sale = LedgerRepository(db).get_by_id(sale_id)
        assert sale.status == SaleStatus.VOID.value
        assert sale.voided_at is not None


def test_listings_are_newest_first(database):
    ids = [_insert(database, total=t) for t in (100, 200, 300, 400)]

    with database.session() as db:
        repository = LedgerRepository(db)
        assert [s.id for s in repository.get_all()] == list(reversed(ids))
        assert [s.id for s in repository.get_recent(2)] == [ids[3], ids[2]]
