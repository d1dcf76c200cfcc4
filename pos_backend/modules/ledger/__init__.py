# pos_backend/modules/ledger/__init__.py
"""
Ledger module - sale records

- repository.py: insert / lookup / status flip / newest-first listings
- schemas.py: line-item snapshot codec and SaleRecord read model
"""

from .repository import LedgerRepository
from .schemas import LineItem, SaleRecord, encode_line_items, decode_line_items

__all__ = [
    "LedgerRepository",
    "LineItem",
    "SaleRecord",
    "encode_line_items",
    "decode_line_items"
]
