# pos_backend/modules/ledger/schemas.py
import json
from decimal import Decimal
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic import ValidationError as PydanticValidationError

from pos_backend.core.exceptions import PersistenceFailure
from pos_backend.shared.database.models import Sale

LINE_ITEMS_SCHEMA_VERSION = 1


class LineItem(BaseModel):
    """Frozen copy of a product's name and price at the moment of sale"""
    product_id: int
    name: str
    unit_price: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class LineItemSnapshot(BaseModel):
    """Versioned envelope stored in sales.items_json"""
    schema_version: int = LINE_ITEMS_SCHEMA_VERSION
    items: List[LineItem]


def encode_line_items(items: List[LineItem]) -> str:
    return LineItemSnapshot(items=items).model_dump_json()


def decode_line_items(raw: str) -> List[LineItem]:
    """
    Parse a stored snapshot back into line items.

    Accepts the current envelope and the legacy bare JSON list written by the
    desktop app (``id``/``price`` keys). Anything else is treated as corrupt
    ledger data.
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PersistenceFailure("Stored line items are not valid JSON") from e

    if isinstance(payload, list):
        payload = {
            "schema_version": LINE_ITEMS_SCHEMA_VERSION,
            "items": [_upgrade_legacy_item(item) for item in payload],
        }

    if not isinstance(payload, dict):
        raise PersistenceFailure("Stored line items have an unknown layout")

    version = payload.get("schema_version")
    if version != LINE_ITEMS_SCHEMA_VERSION:
        raise PersistenceFailure(
            f"Unsupported line item schema version: {version}",
            {"schema_version": version},
        )

    try:
        return LineItemSnapshot.model_validate(payload).items
    except PydanticValidationError as e:
        raise PersistenceFailure("Stored line items failed validation") from e


def _upgrade_legacy_item(item: dict) -> dict:
    if not isinstance(item, dict):
        return item
    return {
        "product_id": item.get("product_id", item.get("id")),
        "name": item.get("name", ""),
        "unit_price": item.get("unit_price", item.get("price")),
        "quantity": item.get("quantity"),
    }


class SaleRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subtotal_price: int
    total_price: int
    items: List[LineItem]
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = None
    status: str
    created_at: datetime
    voided_at: Optional[datetime] = None

    @field_serializer('discount_value')
    def serialize_discount_value(self, v: Optional[Decimal]) -> Optional[Union[int, float]]:
        if v is None:
            return None
        return int(v) if v == v.to_integral_value() else float(v)

    @classmethod
    def from_model(cls, sale: Sale) -> "SaleRecord":
        return cls(
            id=sale.id,
            subtotal_price=sale.subtotal_price,
            total_price=sale.total_price,
            items=decode_line_items(sale.items_json),
            discount_type=sale.discount_type,
            discount_value=sale.discount_value,
            status=sale.status,
            created_at=sale.created_at,
            voided_at=sale.voided_at,
        )
