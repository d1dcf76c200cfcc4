# pos_backend/modules/analytics/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from pos_backend.config.database import Database, get_database
from pos_backend.shared.services.timezone_service import resolve_timezone
from .service import AnalyticsService
from .schemas import AnalyticsResponse, TodayStatsResponse, LedgerResponse

router = APIRouter()


def get_analytics_service(request: Request, database: Database = Depends(get_database)) -> AnalyticsService:
    settings = request.app.state.settings
    return AnalyticsService(
        database,
        tz=resolve_timezone(settings.timezone),
        default_limit=settings.recent_sales_limit
    )


@router.get("", response_model=AnalyticsResponse)
def get_analytics_snapshot(
    limit: Optional[int] = Query(None, description="Recent sales to include"),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Dashboard snapshot

    **Includes:**
    - Today's revenue and order count (voided sales excluded)
    - Most recent sales, newest first (voided sales included)
    """
    return AnalyticsResponse(success=True, data=service.snapshot(limit))


@router.get("/today", response_model=TodayStatsResponse)
def get_today_stats(service: AnalyticsService = Depends(get_analytics_service)):
    stats = service.today_stats()
    return TodayStatsResponse(success=True, message=f"Sales for {stats.day}", data=stats)


@router.get("/ledger", response_model=LedgerResponse)
def get_full_ledger(service: AnalyticsService = Depends(get_analytics_service)):
    """Every sale newest first, for export"""
    sales = service.full_ledger()
    return LedgerResponse(success=True, sales=sales, count=len(sales))
