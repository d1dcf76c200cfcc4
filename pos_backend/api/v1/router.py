# pos_backend/api/v1/router.py
from fastapi import APIRouter
from pos_backend.modules.catalog.router import router as catalog_router
from pos_backend.modules.sales.router import router as sales_router
from pos_backend.modules.analytics.router import router as analytics_router
from pos_backend.modules.export.router import router as export_router


# Main API v1 router
api_router = APIRouter()

api_router.include_router(
    catalog_router,
    prefix="/products",
    tags=["Catalog"]
)

api_router.include_router(
    sales_router,
    prefix="/sales",
    tags=["Sales"]
)

api_router.include_router(
    analytics_router,
    prefix="/analytics",
    tags=["Analytics"]
)

api_router.include_router(
    export_router,
    prefix="/export",
    tags=["Export"]
)


@api_router.get("/")
async def api_root():
    """API v1 root"""
    return {
        "message": "POS Backend API v1",
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "products": "/api/v1/products",
            "sales": "/api/v1/sales",
            "analytics": "/api/v1/analytics",
            "export": "/api/v1/export/ledger-rows"
        }
    }
