"""
Cart Module
===========
Read-only cart snapshot consumed at order submission time.

The cart itself (storage, totals) belongs to the storefront. This module
defines the snapshot types handed to the order form and the provider
interface it reads them through, plus a small in-memory cart used by the
demo runner and tests.
"""

import logging
from typing import Dict, List, Any, Tuple, Protocol
from dataclasses import dataclass, asdict


logger = logging.getLogger(__name__)


# ============================================================================
# IMMUTABLE LINE ITEM
# ============================================================================

@dataclass(frozen=True)
class LineItem:
    """
    Immutable cart line.

    price is the provider's already formatted currency string
    (e.g. "50,000"); it is never parsed here.
    """
    name: str
    quantity: int
    price: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        """Build from a provider mapping with name/quantity/price keys."""
        return cls(
            name=str(data["name"]),
            quantity=int(data["quantity"]),
            price=str(data["price"])
        )


# ============================================================================
# CART SNAPSHOT
# ============================================================================

@dataclass(frozen=True)
class CartSnapshot:
    """
    Point-in-time view of the cart.

    total_amount is supplied by the provider and trusted as-is.
    """
    items: Tuple[LineItem, ...] = ()
    total_amount: float = 0

    def is_empty(self) -> bool:
        """Check if the snapshot has no lines."""
        return len(self.items) == 0

    def item_count(self) -> int:
        """Total number of units across all lines."""
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "items": [item.to_dict() for item in self.items],
            "total_amount": self.total_amount,
        }


class CartProvider(Protocol):
    """Anything that can hand the order form a cart snapshot."""

    def snapshot(self) -> CartSnapshot:
        ...


# ============================================================================
# IN-MEMORY CART
# ============================================================================

class InMemoryCart:
    """
    Minimal cart provider.

    Keeps lines in insertion order, merges repeated names, and computes
    the total from unit prices the way a storefront cart would.
    """

    def __init__(self):
        self._lines: Dict[str, Dict[str, Any]] = {}

    def add_item(
        self,
        name: str,
        unit_price: int,
        quantity: int = 1,
        price_label: str = None
    ) -> bool:
        """
        Add units of an item to the cart.

        Args:
            name: Display name
            unit_price: Price per unit in the smallest currency unit
            quantity: Units to add
            price_label: Formatted unit price; defaults to "{unit_price:,}"

        Returns:
            True if added
        """
        if not name or quantity <= 0 or unit_price < 0:
            logger.warning(
                f"Rejected cart line: name={name!r} quantity={quantity} "
                f"unit_price={unit_price}"
            )
            return False

        line = self._lines.get(name)
        if line:
            line["quantity"] += quantity
        else:
            self._lines[name] = {
                "unit_price": unit_price,
                "quantity": quantity,
                "price": price_label or f"{unit_price:,}",
            }

        logger.debug(f"Cart line added: {name} x{quantity}")
        return True

    def clear(self):
        """Empty the cart."""
        self._lines.clear()
        logger.info("Cart cleared")

    @property
    def total_amount(self) -> int:
        return sum(
            line["unit_price"] * line["quantity"]
            for line in self._lines.values()
        )

    def items(self) -> List[LineItem]:
        return [
            LineItem(name=name, quantity=line["quantity"], price=line["price"])
            for name, line in self._lines.items()
        ]

    def snapshot(self) -> CartSnapshot:
        """Freeze the current lines and total."""
        return CartSnapshot(
            items=tuple(self.items()),
            total_amount=self.total_amount
        )

    def __len__(self) -> int:
        return len(self._lines)
