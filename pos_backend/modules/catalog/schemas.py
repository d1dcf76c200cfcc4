# pos_backend/modules/catalog/schemas.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime
from pos_backend.shared.schemas.common import BaseResponse, PaginatedResponse


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    price: int = Field(..., ge=0, description="Unit price in minor currency units")
    stock: int = Field(1, description="Units on hand")
    detail: str = Field("", description="Free-form description")
    barcode: Optional[str] = Field(None, max_length=128, description="Unique barcode")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Product name cannot be blank')
        return v.strip()

    @field_validator('barcode')
    @classmethod
    def normalize_barcode(cls, v):
        # Empty barcode means "no barcode"
        if v is None:
            return None
        v = v.strip()
        return v or None


class ProductCreate(ProductBase):
    pass


class ProductUpdateBody(ProductBase):
    """Full replacement; stock must be stated so an update never resets it"""
    stock: int = Field(..., description="Units on hand")


class ProductUpdate(ProductUpdateBody):
    id: int = Field(..., ge=1)


class Product(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductCreatedResponse(BaseResponse):
    product_id: int


class ProductAffectedResponse(BaseResponse):
    product_id: int
    affected: int


class ProductResponse(BaseResponse):
    product: Product


class ProductListResponse(BaseResponse):
    products: List[Product]
    count: int


class ProductPageResponse(PaginatedResponse):
    items: List[Product]
    search: str = ""
