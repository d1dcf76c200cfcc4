# pos_backend/modules/catalog/__init__.py
"""
Catalog module - product records

Handles:
- Product create / update / delete
- Newest-first listing
- Paginated search by name or barcode

Architecture:
- router.py: product endpoints
- service.py: catalog operations inside units of work
- repository.py: product queries
- schemas.py: request/response models
"""

from .router import router
from .service import CatalogService
from .repository import CatalogRepository

__all__ = [
    "router",
    "CatalogService",
    "CatalogRepository"
]
