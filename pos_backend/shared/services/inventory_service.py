from typing import Dict, List
from sqlalchemy.orm import Session
import logging

from pos_backend.core.exceptions import InsufficientStockError, ProductNotFoundError
from pos_backend.shared.database.models import Product

logger = logging.getLogger(__name__)


class InventoryService:
    """Stock adjustments shared by sale creation and voiding"""

    @staticmethod
    def aggregate_quantities(items: List[Dict[str, int]]) -> Dict[int, int]:
        """Sum requested quantity per product id, keeping first-seen order"""
        requested: Dict[int, int] = {}
        for item in items:
            requested[item['product_id']] = requested.get(item['product_id'], 0) + item['quantity']
        return requested

    @staticmethod
    def validate_and_reserve_stock(
        db: Session,
        requested: Dict[int, int],
        allow_negative_stock: bool = False
    ) -> Dict[int, Product]:
        """
        Lock every referenced product row and validate the request.

        - SELECT FOR UPDATE in ascending id order (stable lock order)
        - Every product id must exist
        - Without allow_negative_stock, stock must cover the request

        Returns:
            Dict[product_id, Product]: locked rows

        Raises:
            ProductNotFoundError: unknown product id
            InsufficientStockError: stock would go negative
        """
        product_ids = sorted(requested)
        rows = db.query(Product).filter(
            Product.id.in_(product_ids)
        ).order_by(Product.id).with_for_update().all()
        reserved = {product.id: product for product in rows}

        for product_id in product_ids:
            if product_id not in reserved:
                raise ProductNotFoundError(product_id)

        if not allow_negative_stock:
            shortages = {
                product_id: {"stock": reserved[product_id].stock, "requested": quantity}
                for product_id, quantity in requested.items()
                if reserved[product_id].stock < quantity
            }
            if shortages:
                raise InsufficientStockError(shortages)

        return reserved

    @staticmethod
    def decrement_stock(db: Session, requested: Dict[int, int]) -> None:
        """Apply stock = stock - quantity in the database for each product"""
        for product_id, quantity in requested.items():
            affected = db.query(Product).filter(Product.id == product_id).update(
                {Product.stock: Product.stock - quantity},
                synchronize_session=False,
            )
            if affected != 1:
                # Row vanished between lock and update
                raise ProductNotFoundError(product_id)

    @staticmethod
    def restore_stock(db: Session, product_id: int, quantity: int) -> bool:
        """
        Add quantity back to a product.

        Returns False when the product no longer exists; the caller decides
        whether that is fatal.
        """
        affected = db.query(Product).filter(Product.id == product_id).update(
            {Product.stock: Product.stock + quantity},
            synchronize_session=False,
        )
        if not affected:
            logger.warning(f"Product {product_id} no longer exists, {quantity} unit(s) not restored")
            return False
        return True
