"""
Record types for the inventory ledger.

Prices are kept as Decimal so repeated backup/restore cycles do not drift;
the de facto precision is two decimal places, which is what every snapshot
writes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

# Console input is cut off at this many characters
MAX_NAME_LENGTH = 99

CENTS = Decimal("0.01")

# Prices at or above this are rejected; totals stay well inside Decimal's range
MAX_PRICE = Decimal("1e15")


def to_price(value: Any) -> Decimal:
    """Convert an int, float, str or Decimal into a Decimal price.

    Floats go through str() so that 2.5 becomes Decimal("2.5") rather than
    the exact binary expansion.

    Raises:
        ValueError: If the value is not a number, is NaN or infinite, or its
            magnitude is not below MAX_PRICE.
    """
    if isinstance(value, Decimal):
        price = value
    else:
        try:
            price = Decimal(str(value) if isinstance(value, float) else value)
        except InvalidOperation as e:
            raise ValueError(f"expected a price, got {value!r}") from e
    if not price.is_finite():
        raise ValueError(f"expected a finite price, got {value!r}")
    if abs(price) >= MAX_PRICE:
        raise ValueError(f"price {value!r} is too large (limit {MAX_PRICE:,f})")
    return price


def format_price(price: Decimal) -> str:
    """Format a price with exactly two decimals (half-up rounding)."""
    with localcontext() as ctx:
        # Line totals and sums can have more digits than the default precision
        ctx.prec = max(ctx.prec, price.adjusted() + 3)
        return str(price.quantize(CENTS, rounding=ROUND_HALF_UP))


@dataclass
class Product:
    """One inventory line item."""
    id: int
    name: str
    price: Decimal
    quantity: int

    def __post_init__(self):
        self.price = to_price(self.price)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": format_price(self.price),
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class BillDate:
    """Date stamped on a bill.

    Values are stored verbatim; 31/02/2024 or 0/13/-1 are accepted.
    """
    day: int
    month: int
    year: int

    def __str__(self) -> str:
        return f"{self.day}/{self.month}/{self.year}"


@dataclass(frozen=True)
class BillLine:
    id: int
    name: str
    price: Decimal
    quantity: int
    line_total: Decimal


@dataclass
class Bill:
    """Snapshot of every product at billing time, head-first."""
    date: BillDate
    lines: list[BillLine] = field(default_factory=list)
    total: Decimal = Decimal("0")

    def __len__(self) -> int:
        return len(self.lines)
