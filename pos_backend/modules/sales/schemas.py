# pos_backend/modules/sales/schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from pos_backend.shared.database.models import DiscountType
from pos_backend.shared.schemas.common import BaseResponse
from pos_backend.modules.ledger.schemas import SaleRecord


class CartItem(BaseModel):
    product_id: int = Field(..., ge=1, description="Catalog product id")
    name: str = Field(..., description="Product name at checkout")
    unit_price: int = Field(..., ge=0, description="Unit price in minor units")
    quantity: int = Field(..., ge=1, description="Units requested")


class Discount(BaseModel):
    """Range checks live in pricing.apply_discount"""
    type: DiscountType = Field(..., description="percent or fixed")
    value: Decimal = Field(..., description="Percent (0-100) or amount in minor units")


class SaleCreateRequest(BaseModel):
    items: List[CartItem] = Field(..., description="Cart line items")
    discount: Optional[Discount] = Field(None, description="Optional order-level discount")


class SaleResult(BaseModel):
    sale_id: int
    subtotal: int
    final_total: int


class VoidResult(BaseModel):
    sale_id: int
    restored_items: int
    skipped_product_ids: List[int] = []


class SaleResponse(BaseResponse):
    sale_id: int
    subtotal: int
    final_total: int
    items_count: int


class VoidSaleResponse(BaseResponse):
    sale_id: int
    restored_items: int
    skipped_product_ids: List[int]


class SaleDetailResponse(BaseResponse):
    sale: SaleRecord
