# pos_backend/core/exceptions.py
"""
Domain errors raised by the stores and engines.

Every error carries an ``error_code`` and the HTTP status the API layer maps
it to. Services raise these instead of ``HTTPException`` so they can be used
outside a request; ``register_exception_handlers`` translates them into
``ErrorResponse`` bodies.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pos_backend.shared.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class PosError(Exception):
    status_code = 500
    error_code = "POS_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Validation: rejected before any mutation

class ValidationError(PosError):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class EmptyCartError(ValidationError):
    error_code = "EMPTY_CART"

    def __init__(self):
        super().__init__("Cart must contain at least one item")


class InvalidDiscountError(ValidationError):
    error_code = "INVALID_DISCOUNT"


# Not found

class NotFoundError(PosError):
    status_code = 404
    error_code = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found", {"product_id": product_id})
        self.product_id = product_id


class SaleNotFoundError(NotFoundError):
    error_code = "SALE_NOT_FOUND"

    def __init__(self, sale_id: int):
        super().__init__(f"Sale {sale_id} not found", {"sale_id": sale_id})
        self.sale_id = sale_id


# Conflicts

class ConflictError(PosError):
    status_code = 409
    error_code = "CONFLICT"


class DuplicateBarcodeError(ConflictError):
    error_code = "DUPLICATE_BARCODE"

    def __init__(self, barcode: str):
        super().__init__(f"Barcode '{barcode}' is already assigned", {"barcode": barcode})
        self.barcode = barcode


class AlreadyVoidedError(ConflictError):
    error_code = "ALREADY_VOIDED"

    def __init__(self, sale_id: int):
        super().__init__(f"Sale {sale_id} is already voided", {"sale_id": sale_id})
        self.sale_id = sale_id


class InsufficientStockError(ConflictError):
    error_code = "INSUFFICIENT_STOCK"

    def __init__(self, shortages: Dict[int, Dict[str, int]]):
        lines = [
            f"product {product_id} (stock: {info['stock']}, requested: {info['requested']})"
            for product_id, info in shortages.items()
        ]
        super().__init__(
            "Insufficient stock: " + "; ".join(lines),
            {"shortages": {str(k): v for k, v in shortages.items()}},
        )
        self.shortages = shortages


# Persistence

class PersistenceFailure(PosError):
    status_code = 503
    error_code = "PERSISTENCE_FAILURE"


def _error_body(exc: PosError) -> Dict[str, Any]:
    body = ErrorResponse(
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details or None,
    )
    return jsonable_encoder(body)


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors and request validation failures to ErrorResponse"""

    @app.exception_handler(PosError)
    async def pos_error_handler(request: Request, exc: PosError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        body = ErrorResponse(
            message="Invalid request data",
            error_code="VALIDATION_ERROR",
            details={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(status_code=422, content=jsonable_encoder(body))
