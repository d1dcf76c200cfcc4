from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from decimal import Decimal
import logging

from pos_backend.core.exceptions import AlreadyVoidedError, PersistenceFailure
from pos_backend.modules.ledger.repository import LedgerRepository
from pos_backend.modules.ledger.schemas import LineItem
from pos_backend.shared.database.models import SaleStatus
from pos_backend.shared.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)


class SalesRepository:
    """
    Multi-table writes of the transaction engine.

    Both methods run on a session owned by an open unit of work and never
    commit; committing or rolling back is the unit of work's job.
    """

    def __init__(self, db: Session, allow_negative_stock: bool = False):
        self.db = db
        self.allow_negative_stock = allow_negative_stock
        self.ledger = LedgerRepository(db)
        self.inventory_service = InventoryService()

    def create_sale_atomic(
        self,
        items: List[LineItem],
        subtotal_price: int,
        total_price: int,
        discount_type: Optional[str] = None,
        discount_value: Optional[Decimal] = None
    ) -> int:
        """
        Record a sale and take its units out of stock.

        Process:
        1. Lock product rows (SELECT FOR UPDATE) and validate stock
        2. Insert the ACTIVE sale with the line-item snapshot
        3. Decrement stock for every product in the cart

        Returns:
            int: id of the new sale

        Raises:
            ProductNotFoundError: cart references an unknown product
            InsufficientStockError: stock floor would be violated
        """
        requested = self.inventory_service.aggregate_quantities(
            [{'product_id': item.product_id, 'quantity': item.quantity} for item in items]
        )

        # 1. lock + validate
        logger.info(f"Reserving stock for {len(requested)} product(s)")
        self.inventory_service.validate_and_reserve_stock(
            self.db, requested, allow_negative_stock=self.allow_negative_stock
        )

        # 2. ledger row
        sale_id = self.ledger.insert(
            items=items,
            subtotal_price=subtotal_price,
            total_price=total_price,
            discount_type=discount_type,
            discount_value=discount_value,
        )
        logger.info(f"Sale row created with ID: {sale_id}")

        # 3. stock
        self.inventory_service.decrement_stock(self.db, requested)
        logger.info("Inventory updated")

        return sale_id

    def void_sale_atomic(self, sale_id: int) -> Tuple[int, List[int]]:
        """
        Flip a sale to VOID and put its units back in stock.

        Products deleted since the sale are skipped; the void itself still
        succeeds.

        Returns:
            (restored line count, skipped product ids)

        Raises:
            SaleNotFoundError: unknown sale id
            AlreadyVoidedError: sale is already VOID
        """
        sale = self.ledger.get_required(sale_id, for_update=True)
        if sale.status == SaleStatus.VOID.value:
            raise AlreadyVoidedError(sale_id)

        items = self.ledger.get_line_items(sale)

        if self.ledger.set_status(sale_id, SaleStatus.VOID) != 1:
            raise PersistenceFailure(f"Sale {sale_id} changed while being voided")

        restored = 0
        skipped: List[int] = []
        for item in items:
            if self.inventory_service.restore_stock(self.db, item.product_id, item.quantity):
                restored += 1
            else:
                skipped.append(item.product_id)

        return restored, skipped
