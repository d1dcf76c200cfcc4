from sqlalchemy.orm import Session
from typing import List, Optional
from decimal import Decimal
import logging

from pos_backend.core.exceptions import ConflictError, SaleNotFoundError
from pos_backend.shared.database.models import Sale, SaleStatus, utc_now
from .schemas import LineItem, encode_line_items, decode_line_items

logger = logging.getLogger(__name__)


class LedgerRepository:
    """
    Ledger Store over the sales table.

    Rows are append-mostly: only status (and voided_at) ever change. Line
    items are written as an opaque snapshot and handed back decoded; the
    store does not interpret them.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(
        self,
        items: List[LineItem],
        subtotal_price: int,
        total_price: int,
        discount_type: Optional[str] = None,
        discount_value: Optional[Decimal] = None
    ) -> int:
        sale = Sale(
            subtotal_price=subtotal_price,
            total_price=total_price,
            items_json=encode_line_items(items),
            discount_type=discount_type,
            discount_value=discount_value,
            status=SaleStatus.ACTIVE.value,
            created_at=utc_now(),
        )
        self.db.add(sale)
        self.db.flush()  # assigns sale.id

        if not sale.id:
            raise RuntimeError("Sale id was not assigned on flush")
        return sale.id

    def get_by_id(self, sale_id: int, for_update: bool = False) -> Optional[Sale]:
        query = self.db.query(Sale).filter(Sale.id == sale_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_required(self, sale_id: int, for_update: bool = False) -> Sale:
        sale = self.get_by_id(sale_id, for_update=for_update)
        if sale is None:
            raise SaleNotFoundError(sale_id)
        return sale

    def set_status(self, sale_id: int, status: SaleStatus) -> int:
        """
        Change a sale's status; returns affected row count.

        Only ACTIVE -> VOID exists, so re-activation is refused.
        """
        if status != SaleStatus.VOID:
            raise ConflictError(
                f"Sale {sale_id} cannot move to status {status.value}",
                {"sale_id": sale_id, "status": status.value},
            )
        return self.db.query(Sale).filter(
            Sale.id == sale_id,
            Sale.status == SaleStatus.ACTIVE.value
        ).update(
            {Sale.status: status.value, Sale.voided_at: utc_now()},
            synchronize_session=False,
        )

    def get_all(self) -> List[Sale]:
        """Every sale, newest id first"""
        return self.db.query(Sale).order_by(Sale.id.desc()).all()

    def get_recent(self, limit: int) -> List[Sale]:
        return self.db.query(Sale).order_by(Sale.id.desc()).limit(limit).all()

    def get_line_items(self, sale: Sale) -> List[LineItem]:
        return decode_line_items(sale.items_json)
