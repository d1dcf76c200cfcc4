# pos_backend/modules/sales/__init__.py
"""
Sales module - transaction engine

Handles:
- Sale registration with atomic stock decrement
- Percent / fixed order discounts
- Voiding with stock restoration

Architecture:
- router.py: sale endpoints
- service.py: unit of work orchestration
- repository.py: multi-table writes
- pricing.py: subtotal and discount rules
- schemas.py: request/response models
"""

from .router import router
from .service import SalesService
from .repository import SalesRepository

__all__ = [
    "router",
    "SalesService",
    "SalesRepository"
]
