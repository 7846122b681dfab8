"""Sale price derivation."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

HUNDRED = Decimal("100")
# Matches the scale of the sale_price column
SALE_PRICE_QUANTUM = Decimal("0.000001")


def _to_decimal(value, field: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        # str() keeps floats like 19.99 from picking up binary noise
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{field} must be a number, got {value!r}") from e


def derive_sale_price(list_price, discount_percent=None) -> Decimal:
    """Derive the sale price from a list price and a discount percentage.

    ``sale = list_price * (1 - discount_percent / 100)``, computed exactly in
    decimal arithmetic and rounded half-up to six places. Two-place prices
    and discounts never need rounding. A missing discount counts as 0.

    Raises:
        ValueError: If the price is negative or the discount is outside 0-100
    """
    price = _to_decimal(list_price, "list_price")
    discount = Decimal("0") if discount_percent is None else _to_decimal(discount_percent, "discount_percent")

    if price < 0:
        raise ValueError("list_price must not be negative")
    if discount < 0 or discount > HUNDRED:
        raise ValueError("discount_percent must be between 0 and 100")

    return (price * (1 - discount / HUNDRED)).quantize(SALE_PRICE_QUANTUM, rounding=ROUND_HALF_UP)
