# pos_backend/shared/database/models.py
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Numeric, CheckConstraint,
    func
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    """Naive UTC timestamp; every stored datetime is UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SaleStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    VOID = "VOID"


class DiscountType(str, enum.Enum):
    PERCENT = "percent"
    FIXED = "fixed"


# sales.discount_value is NUMERIC(12, 2)
DISCOUNT_PRECISION = 12
DISCOUNT_SCALE = 2


# =====================================================
# TIMESTAMPS
# =====================================================
class TimestampMixin:
    """Adds created_at and updated_at columns"""
    created_at = Column(DateTime, nullable=False, default=utc_now, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now, server_default=func.current_timestamp())


# =====================================================
# CATALOG
# =====================================================

class Product(Base, TimestampMixin):
    """Catalog product. Prices are integers in minor currency units."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False)
    stock = Column(Integer, nullable=False, default=1)
    detail = Column(Text, nullable=False, default="")
    # NULL when the product has no barcode so several products may lack one
    barcode = Column(String(128), unique=True, index=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"


# =====================================================
# LEDGER
# =====================================================

class Sale(Base):
    """
    Sale record. Everything but status/voided_at is frozen at creation;
    line items are kept as a serialized snapshot in items_json.
    """
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    subtotal_price = Column(Integer, nullable=False)
    total_price = Column(Integer, nullable=False)
    items_json = Column(Text, nullable=False)
    discount_type = Column(String(20))
    discount_value = Column(Numeric(DISCOUNT_PRECISION, DISCOUNT_SCALE))
    status = Column(String(20), nullable=False, default=SaleStatus.ACTIVE.value,
                    server_default=SaleStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now,
                        server_default=func.current_timestamp(), index=True)
    voided_at = Column(DateTime)

    __table_args__ = (
        CheckConstraint("total_price >= 0", name="ck_sales_total_non_negative"),
        CheckConstraint("status IN ('ACTIVE', 'VOID')", name="ck_sales_status"),
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total={self.total_price} status={self.status}>"
