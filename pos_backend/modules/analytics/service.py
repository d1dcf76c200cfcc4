# pos_backend/modules/analytics/service.py
from datetime import date, tzinfo
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from pos_backend.config.database import Database
from pos_backend.core.exceptions import ValidationError
from pos_backend.modules.ledger.repository import LedgerRepository
from pos_backend.modules.ledger.schemas import SaleRecord
from pos_backend.shared.services.timezone_service import local_day_bounds, local_today
from .repository import AnalyticsRepository
from .schemas import AnalyticsSnapshot, TodayStats

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10


class AnalyticsService:
    """Read-only aggregates over the ledger, recomputed on every call"""

    def __init__(
        self,
        database: Database,
        tz: Optional[tzinfo] = None,
        default_limit: int = DEFAULT_RECENT_LIMIT
    ):
        self.database = database
        self.tz = tz
        self.default_limit = default_limit

    def today_stats(self, target_date: Optional[date] = None) -> TodayStats:
        with self.database.session() as db:
            return self._today_stats(db, target_date)

    def recent_sales(self, limit: Optional[int] = None) -> List[SaleRecord]:
        """Newest first, voided sales included"""
        with self.database.session() as db:
            return self._recent_sales(db, limit)

    def full_ledger(self) -> List[SaleRecord]:
        """Every sale newest first, voided sales included"""
        with self.database.session() as db:
            return [SaleRecord.from_model(sale) for sale in LedgerRepository(db).get_all()]

    def snapshot(self, limit: Optional[int] = None) -> AnalyticsSnapshot:
        """Today's totals plus recent sales, read from one transaction snapshot"""
        with self.database.snapshot() as db:
            stats = self._today_stats(db)
            recent = self._recent_sales(db, limit)

        return AnalyticsSnapshot(
            today_revenue=stats.revenue,
            today_orders=stats.order_count,
            recent_sales=recent
        )

    # Helpers

    def _today_stats(self, db: Session, target_date: Optional[date] = None) -> TodayStats:
        day = target_date or local_today(self.tz)
        start, end = local_day_bounds(day, self.tz)
        summary = AnalyticsRepository(db).get_revenue_summary(start, end)
        logger.debug(f"Stats for {day}: {summary}")
        return TodayStats(day=day, **summary)

    def _recent_sales(self, db: Session, limit: Optional[int]) -> List[SaleRecord]:
        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise ValidationError("limit must be >= 1", {"limit": limit})
        return [SaleRecord.from_model(sale) for sale in LedgerRepository(db).get_recent(limit)]
