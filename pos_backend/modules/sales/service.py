# pos_backend/modules/sales/service.py
from contextlib import contextmanager
from typing import Iterator, List, Optional
import logging

from sqlalchemy.orm import Session

from pos_backend.config.database import Database
from pos_backend.core.exceptions import EmptyCartError
from pos_backend.modules.ledger.repository import LedgerRepository
from pos_backend.modules.ledger.schemas import LineItem, SaleRecord
from .pricing import calculate_subtotal, apply_discount
from .repository import SalesRepository
from .schemas import CartItem, Discount, SaleResult, VoidResult

logger = logging.getLogger(__name__)


class SalesService:
    """Transaction engine: atomic sale creation and voiding"""

    def __init__(self, database: Database, allow_negative_stock: bool = False):
        self.database = database
        self.allow_negative_stock = allow_negative_stock

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """Commit every write across catalog and ledger, or none of them"""
        with self.database.unit_of_work() as db:
            yield db

    def create_sale(self, items: List[CartItem], discount: Optional[Discount] = None) -> SaleResult:
        """
        Convert a cart into a sale.

        Responsibilities:
        - Validate cart and discount before any write
        - Compute subtotal and discounted total
        - Delegate the atomic write to the repository
        """
        if not items:
            raise EmptyCartError()

        subtotal = calculate_subtotal(items)
        final_total = apply_discount(subtotal, discount)

        line_items = [
            LineItem(
                product_id=item.product_id,
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
            )
            for item in items
        ]

        logger.info(f"Check out {len(items)} item(s), subtotal {subtotal}, total {final_total}")

        with self.unit_of_work() as db:
            sale_id = SalesRepository(db, self.allow_negative_stock).create_sale_atomic(
                items=line_items,
                subtotal_price=subtotal,
                total_price=final_total,
                discount_type=discount.type.value if discount else None,
                discount_value=discount.value if discount else None,
            )

        logger.info(f"Transaction completed - Sale #{sale_id}")
        return SaleResult(sale_id=sale_id, subtotal=subtotal, final_total=final_total)

    def void_sale(self, sale_id: int) -> VoidResult:
        """Reverse a sale's stock effect; the row stays as VOID"""
        with self.unit_of_work() as db:
            restored, skipped = SalesRepository(db, self.allow_negative_stock).void_sale_atomic(sale_id)

        if skipped:
            logger.warning(f"Sale #{sale_id} voided, stock not restored for deleted products {skipped}")
        else:
            logger.info(f"Sale #{sale_id} voided, {restored} line(s) restored")
        return VoidResult(sale_id=sale_id, restored_items=restored, skipped_product_ids=skipped)

    def get_sale(self, sale_id: int) -> SaleRecord:
        with self.database.session() as db:
            sale = LedgerRepository(db).get_required(sale_id)
            return SaleRecord.from_model(sale)
