# pos_backend/modules/export/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from pos_backend.modules.analytics.router import get_analytics_service
from pos_backend.modules.analytics.service import AnalyticsService
from pos_backend.shared.services.timezone_service import resolve_timezone
from .service import ExportService
from .schemas import LedgerRowsResponse

router = APIRouter()


@router.get("/ledger-rows", response_model=LedgerRowsResponse)
def get_ledger_rows(
    tz: Optional[str] = Query(None, description="IANA timezone for date/time columns"),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    """
    Ledger flattened to one row per sold item

    Columns: sale_id, date, time, item_name, quantity, unit_price,
    line_total, status. Money stays in minor units.
    """
    rows = ExportService(analytics).ledger_rows(resolve_timezone(tz))
    return LedgerRowsResponse(success=True, rows=rows, count=len(rows), timezone=tz)
