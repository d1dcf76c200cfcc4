"""Shared pytest fixtures for the POS backend tests."""

from __future__ import annotations

from datetime import timezone
from pathlib import Path
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from pos_backend.config.database import Database
from pos_backend.config.settings import Settings
from pos_backend.main import create_app
from pos_backend.modules.analytics.service import AnalyticsService
from pos_backend.modules.catalog.schemas import ProductCreate
from pos_backend.modules.catalog.service import CatalogService
from pos_backend.modules.sales.schemas import CartItem
from pos_backend.modules.sales.service import SalesService
from pos_backend.shared.database.models import Product


@pytest.fixture
def database(tmp_path: Path) -> Iterator[Database]:
    """File-backed SQLite database so several threads can share it."""

    db = Database(f"sqlite:///{tmp_path / 'pos-test.db'}")
    db.create_schema()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def catalog(database: Database) -> CatalogService:
    return CatalogService(database)


@pytest.fixture
def sales(database: Database) -> SalesService:
    return SalesService(database)


@pytest.fixture
def analytics(database: Database) -> AnalyticsService:
    return AnalyticsService(database, tz=timezone.utc)


@pytest.fixture
def make_product(catalog: CatalogService) -> Callable[..., int]:
    """Factory adding a product and returning its id."""

    counter = {"n": 0}

    def _make(name: str | None = None, price: int = 500, stock: int = 10,
              barcode: str | None = None, detail: str = "") -> int:
        counter["n"] += 1
        return catalog.add_product(ProductCreate(
            name=name or f"Product {counter['n']}",
            price=price,
            stock=stock,
            detail=detail,
            barcode=barcode,
        ))

    return _make


@pytest.fixture
def stock_of(database: Database) -> Callable[[int], int | None]:
    """Read a product's current stock straight from the table."""

    def _stock(product_id: int) -> int | None:
        with database.session() as db:
            product = db.get(Product, product_id)
            return None if product is None else product.stock

    return _stock


@pytest.fixture
def cart_item() -> Callable[..., CartItem]:
    def _item(product_id: int, price: int, quantity: int, name: str = "Item") -> CartItem:
        return CartItem(product_id=product_id, name=name, unit_price=price, quantity=quantity)

    return _item


@pytest.fixture
def api_settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'pos-api.db'}",
        timezone="UTC",
        allow_negative_stock=False,
    )


@pytest.fixture
def client(api_settings: Settings) -> Iterator[TestClient]:
    app = create_app(api_settings)
    with TestClient(app) as test_client:
        yield test_client
