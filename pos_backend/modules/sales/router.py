# pos_backend/modules/sales/router.py
from fastapi import APIRouter, Depends, Path, Request

from pos_backend.config.database import Database, get_database
from .service import SalesService
from .schemas import (
    SaleCreateRequest, SaleResponse, VoidSaleResponse, SaleDetailResponse
)

router = APIRouter()


def get_sales_service(request: Request, database: Database = Depends(get_database)) -> SalesService:
    settings = request.app.state.settings
    return SalesService(database, allow_negative_stock=settings.allow_negative_stock)


@router.post("", response_model=SaleResponse, status_code=201)
def create_sale(
    sale_request: SaleCreateRequest,
    service: SalesService = Depends(get_sales_service)
):
    """
    Register a sale from a cart

    **Includes:**
    - Subtotal from unit price x quantity (minor units)
    - Optional percent or fixed discount on the order
    - Stock decrement in the same transaction as the sale row
    """
    result = service.create_sale(sale_request.items, sale_request.discount)
    return SaleResponse(
        success=True,
        message="Sale registered",
        sale_id=result.sale_id,
        subtotal=result.subtotal,
        final_total=result.final_total,
        items_count=len(sale_request.items)
    )


@router.get("/{sale_id}", response_model=SaleDetailResponse)
def get_sale(
    sale_id: int = Path(..., ge=1),
    service: SalesService = Depends(get_sales_service)
):
    return SaleDetailResponse(success=True, sale=service.get_sale(sale_id))


@router.post("/{sale_id}/void", response_model=VoidSaleResponse)
def void_sale(
    sale_id: int = Path(..., ge=1),
    service: SalesService = Depends(get_sales_service)
):
    """
    Void a sale

    The record is kept for audit with status VOID; stock returns to the
    catalog. A second void of the same sale is rejected.
    """
    result = service.void_sale(sale_id)
    return VoidSaleResponse(
        success=True,
        message=f"Sale {sale_id} voided",
        sale_id=result.sale_id,
        restored_items=result.restored_items,
        skipped_product_ids=result.skipped_product_ids
    )
