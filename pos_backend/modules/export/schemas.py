# pos_backend/modules/export/schemas.py
from pydantic import BaseModel
from typing import List, Optional
from pos_backend.shared.schemas.common import BaseResponse


class LedgerRow(BaseModel):
    """One line item of one sale, flattened for tabular export"""
    sale_id: int
    date: str
    time: str
    item_name: str
    quantity: int
    unit_price: int
    line_total: int
    status: str


class LedgerRowsResponse(BaseResponse):
    rows: List[LedgerRow]
    count: int
    timezone: Optional[str] = None
