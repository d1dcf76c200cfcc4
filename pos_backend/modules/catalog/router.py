# pos_backend/modules/catalog/router.py
import math

from fastapi import APIRouter, Depends, Path, Query

from pos_backend.config.database import Database, get_database
from pos_backend.core.exceptions import ProductNotFoundError
from .service import CatalogService
from .schemas import (
    ProductCreate, ProductUpdate, ProductUpdateBody,
    ProductCreatedResponse, ProductAffectedResponse, ProductResponse,
    ProductListResponse, ProductPageResponse
)

router = APIRouter()


def get_catalog_service(database: Database = Depends(get_database)) -> CatalogService:
    return CatalogService(database)


@router.post("", response_model=ProductCreatedResponse, status_code=201)
def add_product(
    product: ProductCreate,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Add a product to the catalog

    **Validations:**
    - Name required, price >= 0 (minor units)
    - Barcode must be unique when present
    """
    product_id = service.add_product(product)
    return ProductCreatedResponse(
        success=True,
        message="Product created",
        product_id=product_id
    )


@router.get("", response_model=ProductPageResponse)
def search_products(
    search: str = Query("", description="Substring of name or barcode"),
    page: int = Query(1, description="1-based page number"),
    page_size: int = Query(20, description="Rows per page"),
    service: CatalogService = Depends(get_catalog_service)
):
    """List products newest first, optionally filtered by name or barcode"""
    items, total = service.search_products(search, page, page_size)
    return ProductPageResponse(
        success=True,
        message=f"{total} product(s) found",
        items=items,
        total=total,
        page=page,
        size=page_size,
        pages=math.ceil(total / page_size) if total else 0,
        search=search
    )


@router.get("/all", response_model=ProductListResponse)
def get_all_products(service: CatalogService = Depends(get_catalog_service)):
    """Every product, newest first"""
    products = service.get_all_products()
    return ProductListResponse(
        success=True,
        products=products,
        count=len(products)
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int = Path(..., ge=1),
    service: CatalogService = Depends(get_catalog_service)
):
    return ProductResponse(success=True, product=service.get_product(product_id))


@router.put("/{product_id}", response_model=ProductAffectedResponse)
def update_product(
    product: ProductUpdateBody,
    product_id: int = Path(..., ge=1),
    service: CatalogService = Depends(get_catalog_service)
):
    affected = service.update_product(ProductUpdate(id=product_id, **product.model_dump()))
    if affected == 0:
        raise ProductNotFoundError(product_id)
    return ProductAffectedResponse(
        success=True,
        message="Product updated",
        product_id=product_id,
        affected=affected
    )


@router.delete("/{product_id}", response_model=ProductAffectedResponse)
def delete_product(
    product_id: int = Path(..., ge=1),
    service: CatalogService = Depends(get_catalog_service)
):
    """Historical sales keep their own copy of name and price"""
    affected = service.delete_product(product_id)
    if affected == 0:
        raise ProductNotFoundError(product_id)
    return ProductAffectedResponse(
        success=True,
        message="Product deleted",
        product_id=product_id,
        affected=affected
    )
