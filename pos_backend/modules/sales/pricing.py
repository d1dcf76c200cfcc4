"""Order pricing rules.

All money is integer minor units. The discount is applied once to the
order subtotal, never per line:

1. Percent discounts must be within [0, 100] with at most two decimals;
   the result is rounded half-up to a whole minor unit.
2. Fixed discounts are whole minor units up to MAX_FIXED_DISCOUNT and can
   never push the total below zero.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional

from pos_backend.core.exceptions import InvalidDiscountError, ValidationError
from pos_backend.shared.database.models import DISCOUNT_PRECISION, DISCOUNT_SCALE, DiscountType

from .schemas import CartItem, Discount

HUNDRED = Decimal(100)

# Largest values the ledger column stores without rounding or overflow
DISCOUNT_STEP = Decimal(1).scaleb(-DISCOUNT_SCALE)
MAX_FIXED_DISCOUNT = 10 ** (DISCOUNT_PRECISION - DISCOUNT_SCALE) - 1


def calculate_subtotal(items: Iterable[CartItem]) -> int:
    """Sum of unit_price x quantity in integer arithmetic."""
    subtotal = 0
    for item in items:
        if item.quantity < 1:
            raise ValidationError(
                f"Quantity for product {item.product_id} must be at least 1",
                {"product_id": item.product_id, "quantity": item.quantity},
            )
        if item.unit_price < 0:
            raise ValidationError(
                f"Unit price for product {item.product_id} cannot be negative",
                {"product_id": item.product_id, "unit_price": item.unit_price},
            )
        subtotal += item.unit_price * item.quantity
    return subtotal


def _as_decimal(value) -> Decimal:
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidDiscountError(f"Discount value {value!r} is not a number") from e
    if not result.is_finite():
        raise InvalidDiscountError(f"Discount value {value!r} is not a finite number")
    return result


def validate_discount(discount: Discount) -> Decimal:
    """Return the discount value once it is known to be usable."""
    value = _as_decimal(discount.value)

    if discount.type == DiscountType.PERCENT:
        if value < 0 or value > HUNDRED:
            raise InvalidDiscountError(
                f"Percent discount must be between 0 and 100, got {value}",
                {"type": discount.type.value, "value": str(value)},
            )
        if value != value.quantize(DISCOUNT_STEP):
            raise InvalidDiscountError(
                f"Percent discount allows at most {DISCOUNT_SCALE} decimal places, got {value}",
                {"type": discount.type.value, "value": str(value)},
            )
    elif discount.type == DiscountType.FIXED:
        if value < 0:
            raise InvalidDiscountError(
                f"Fixed discount cannot be negative, got {value}",
                {"type": discount.type.value, "value": str(value)},
            )
        if value != value.to_integral_value():
            raise InvalidDiscountError(
                "Fixed discount must be a whole number of minor units",
                {"type": discount.type.value, "value": str(value)},
            )
        if value > MAX_FIXED_DISCOUNT:
            raise InvalidDiscountError(
                f"Fixed discount cannot exceed {MAX_FIXED_DISCOUNT}, got {value}",
                {"type": discount.type.value, "value": str(value)},
            )
    else:
        raise InvalidDiscountError(f"Unknown discount type: {discount.type}")

    return value


def apply_discount(subtotal: int, discount: Optional[Discount]) -> int:
    """Final total for ``subtotal`` after ``discount`` (None means no discount)."""
    if discount is None:
        return subtotal

    value = validate_discount(discount)

    if discount.type == DiscountType.PERCENT:
        total = (Decimal(subtotal) * (HUNDRED - value) / HUNDRED).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        )
        return int(total)

    return max(0, subtotal - int(value))
