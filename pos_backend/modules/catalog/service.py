# pos_backend/modules/catalog/service.py
import logging
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError

from pos_backend.config.database import Database
from pos_backend.core.exceptions import (
    DuplicateBarcodeError, ProductNotFoundError, ValidationError
)
from .repository import CatalogRepository
from .schemas import Product, ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    """Catalog Store: product CRUD and paginated search"""

    def __init__(self, database: Database):
        self.database = database

    def add_product(self, product: ProductCreate) -> int:
        data = product.model_dump()
        with self.database.unit_of_work() as db:
            repository = CatalogRepository(db)
            if repository.barcode_taken(data['barcode']):
                raise DuplicateBarcodeError(data['barcode'])
            try:
                product_id = repository.add(data)
            except IntegrityError as e:
                raise DuplicateBarcodeError(data['barcode']) from e

        logger.info(f"Product {product_id} added: '{data['name']}'")
        return product_id

    def update_product(self, product: ProductUpdate) -> int:
        """Overwrite a product; returns 0 when the id is unknown"""
        data = product.model_dump()
        with self.database.unit_of_work() as db:
            repository = CatalogRepository(db)
            if repository.barcode_taken(data['barcode'], exclude_id=data['id']):
                raise DuplicateBarcodeError(data['barcode'])
            try:
                affected = repository.update(data)
            except IntegrityError as e:
                raise DuplicateBarcodeError(data['barcode']) from e

        logger.info(f"Product {data['id']} updated ({affected} row)")
        return affected

    def delete_product(self, product_id: int) -> int:
        with self.database.unit_of_work() as db:
            affected = CatalogRepository(db).delete(product_id)

        logger.info(f"Delete request for product {product_id}: {affected} row(s)")
        return affected

    def get_product(self, product_id: int) -> Product:
        with self.database.session() as db:
            product = CatalogRepository(db).get_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            return Product.model_validate(product)

    def get_all_products(self) -> List[Product]:
        with self.database.session() as db:
            return [Product.model_validate(p) for p in CatalogRepository(db).get_all()]

    def search_products(self, term: str = "", page: int = 1, page_size: int = 20) -> Tuple[List[Product], int]:
        """
        Offset pagination over the search results.

        Pages are 1-based: ``offset = (page - 1) * page_size``.
        """
        if page < 1:
            raise ValidationError("page must be >= 1", {"page": page})
        if page_size < 1:
            raise ValidationError("page_size must be >= 1", {"page_size": page_size})

        offset = (page - 1) * page_size
        with self.database.session() as db:
            rows, total = CatalogRepository(db).search(term, offset, page_size)
            return [Product.model_validate(p) for p in rows], total
