# pos_backend/modules/analytics/schemas.py
from pydantic import BaseModel
from typing import List
from datetime import date
from pos_backend.shared.schemas.common import BaseResponse
from pos_backend.modules.ledger.schemas import SaleRecord


class TodayStats(BaseModel):
    day: date
    revenue: int
    order_count: int


class AnalyticsSnapshot(BaseModel):
    today_revenue: int
    today_orders: int
    recent_sales: List[SaleRecord]


class AnalyticsResponse(BaseResponse):
    data: AnalyticsSnapshot


class TodayStatsResponse(BaseResponse):
    data: TodayStats


class LedgerResponse(BaseResponse):
    sales: List[SaleRecord]
    count: int
