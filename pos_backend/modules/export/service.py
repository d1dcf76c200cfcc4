from datetime import tzinfo
from typing import Iterable, List, Optional

from pos_backend.modules.analytics.service import AnalyticsService
from pos_backend.modules.ledger.schemas import SaleRecord
from pos_backend.shared.services.timezone_service import utc_to_local
from .schemas import LedgerRow


def flatten_sales(sales: Iterable[SaleRecord], tz: Optional[tzinfo] = None) -> List[LedgerRow]:
    """
    One row per line item, in ledger order.

    The stored timestamp is read as UTC and rendered in ``tz`` (system local
    zone when None). Voided sales are kept; status tells them apart.
    """
    rows = []
    for sale in sales:
        local = utc_to_local(sale.created_at, tz)
        for item in sale.items:
            rows.append(LedgerRow(
                sale_id=sale.id,
                date=local.strftime("%Y-%m-%d"),
                time=local.strftime("%H:%M:%S"),
                item_name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
                status=sale.status,
            ))
    return rows


class ExportService:
    def __init__(self, analytics: AnalyticsService):
        self.analytics = analytics

    def ledger_rows(self, tz: Optional[tzinfo] = None) -> List[LedgerRow]:
        return flatten_sales(self.analytics.full_ledger(), tz if tz is not None else self.analytics.tz)
