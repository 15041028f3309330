# storefront/app/services/cart_store.py
"""In-memory shopping cart for one UI session.

Lines are keyed by ``(product_id, variant)``: adding the same product with the
same variant (``None`` included) bumps the existing line, a different variant
opens a new one. Every mutation moves a quantity by exactly one unit, so a line
goes ``absent -> 1 -> ... -> k -> ... -> absent`` and never holds 0.

Totals are recomputed on every call from the price captured when the line was
first added; later catalog price changes do not reach existing lines.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional, Tuple

LineKey = Tuple[int, Optional[str]]

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Money as Decimal; floats go through str() so 19.99 stays 19.99."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class ProductSnapshot:
    """Product fields copied at add-time."""
    id: int
    name: str
    price: Decimal
    category: str = ""
    image: Optional[str] = None

    @classmethod
    def of(cls, product: Any) -> "ProductSnapshot":
        return cls(
            id=int(product.id),
            name=str(product.name),
            price=to_decimal(product.price),
            category=str(getattr(product, "category", "") or ""),
            image=getattr(product, "image", None),
        )


@dataclass
class CartLineItem:
    product: ProductSnapshot
    variant: Optional[str]
    quantity: int = 1

    @property
    def key(self) -> LineKey:
        return (self.product.id, self.variant)

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


class CartStore:
    """
    Ordered cart lines plus derived aggregates.

    The caller checks stock before `add`; the store itself accepts any product
    object exposing ``id``, ``name`` and ``price``.
    """

    def __init__(self) -> None:
        self._lines: Dict[LineKey, CartLineItem] = {}

    # ---------- mutations ----------

    def add(self, product: Any, variant: Optional[str] = None) -> None:
        key = (int(product.id), variant)
        line = self._lines.get(key)
        if line is not None:
            line.quantity += 1
            return
        self._lines[key] = CartLineItem(product=ProductSnapshot.of(product), variant=variant)

    def remove(self, product_id: int, variant: Optional[str] = None) -> None:
        key = (int(product_id), variant)
        line = self._lines.get(key)
        if line is None:
            return
        if line.quantity <= 1:
            del self._lines[key]
        else:
            line.quantity -= 1

    def clear(self) -> None:
        self._lines.clear()

    # ---------- queries ----------

    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), ZERO)

    @property
    def lines(self) -> Tuple[CartLineItem, ...]:
        """Copies of the lines in insertion order."""
        return tuple(replace(line) for line in self._lines.values())

    def get_line(self, product_id: int, variant: Optional[str] = None) -> Optional[CartLineItem]:
        line = self._lines.get((int(product_id), variant))
        return replace(line) if line is not None else None

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLineItem]:
        return iter(self.lines)

    def __repr__(self) -> str:
        return f"CartStore(lines={len(self)}, items={self.total_items()}, total={self.total_price()})"
