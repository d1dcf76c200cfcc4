from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from typing import Dict
from datetime import datetime

from pos_backend.shared.database.models import Sale, SaleStatus


class AnalyticsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_revenue_summary(self, start: datetime, end: datetime) -> Dict[str, int]:
        """
        Revenue and order count for sales created in [start, end).

        Aggregate query; voided sales never count.
        """
        summary = self.db.query(
            func.count(Sale.id).label('order_count'),
            func.coalesce(func.sum(Sale.total_price), 0).label('revenue')
        ).filter(
            and_(
                Sale.created_at >= start,
                Sale.created_at < end,
                Sale.status != SaleStatus.VOID.value
            )
        ).one()

        return {
            "revenue": int(summary.revenue or 0),
            "order_count": int(summary.order_count or 0)
        }
