# pos_backend/modules/export/__init__.py
"""
Export module - ledger rows for external reports

Row shape only; file formats belong to the client.
"""

from .router import router
from .service import ExportService, flatten_sales

__all__ = [
    "router",
    "ExportService",
    "flatten_sales"
]
