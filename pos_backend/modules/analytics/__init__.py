# pos_backend/modules/analytics/__init__.py
"""
Analytics module - ledger aggregates

- Today's revenue / order count
- Recent sales
- Full ledger for export
"""

from .router import router
from .service import AnalyticsService
from .repository import AnalyticsRepository

__all__ = [
    "router",
    "AnalyticsService",
    "AnalyticsRepository"
]
