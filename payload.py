"""
Payload Composer
================
Turns contact details and a cart snapshot into the form-encoded order
submission sent to the order-intake endpoint.

Everything here is pure: same inputs, same payload, no I/O, no raising.
"""

import math
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple
from dataclasses import dataclass

from cart import CartSnapshot, LineItem
from contact_form import ContactForm, FIELD_NAMES


ORDER_DETAILS_FIELD = "order_details"
TOTAL_LABEL = "TOTAL AMOUNT"


# ============================================================================
# FORMATTING
# ============================================================================

def format_amount(
    amount: float,
    thousands_separator: str = ".",
    decimal_separator: str = ","
) -> str:
    """
    Format an amount with vi-VN style digit grouping.

    Up to three fractional digits are kept, trailing zeros dropped:
    100000 -> "100.000", 1234.5 -> "1.234,5".
    """
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return str(amount)

    if not math.isfinite(value):
        return str(value)

    value = round(value, 3)
    whole, _, fraction = f"{abs(value):,.3f}".partition(".")
    text = whole.replace(",", thousands_separator)

    fraction = fraction.rstrip("0")
    if fraction:
        text = f"{text}{decimal_separator}{fraction}"

    return f"-{text}" if value < 0 else text


def format_line_item(item: LineItem) -> str:
    """One order line: "- {name} x{quantity} ({price})"."""
    return f"- {item.name} x{item.quantity} ({item.price})"


def format_total_line(
    total_amount: float,
    currency_symbol: str = "₫",
    thousands_separator: str = ".",
    decimal_separator: str = ","
) -> str:
    amount = format_amount(total_amount, thousands_separator, decimal_separator)
    return f"{TOTAL_LABEL}: {amount}{currency_symbol}"


def compose_order_details(
    cart: CartSnapshot,
    currency_symbol: str = "₫",
    thousands_separator: str = ".",
    decimal_separator: str = ","
) -> str:
    """
    Human-readable order block.

    One line per item in cart order, a blank line, then the total line.
    An empty cart produces the total line alone.
    """
    total_line = format_total_line(
        cart.total_amount,
        currency_symbol,
        thousands_separator,
        decimal_separator
    )

    if not cart.items:
        return total_line

    lines = "\n".join(format_line_item(item) for item in cart.items)
    return f"{lines}\n\n{total_line}"


# ============================================================================
# ENDPOINT FIELD MAPPING
# ============================================================================

@dataclass(frozen=True)
class EntryMapping:
    """Opaque endpoint field identifier for each logical order field."""
    name: str
    email: str
    phone: str
    address: str
    order_details: str

    def entry_for(self, logical_field: str) -> str:
        return getattr(self, logical_field)

    def to_dict(self) -> Dict[str, str]:
        return {
            logical_field: self.entry_for(logical_field)
            for logical_field in FIELD_NAMES + (ORDER_DETAILS_FIELD,)
        }


# ============================================================================
# ORDER PAYLOAD
# ============================================================================

@dataclass(frozen=True)
class OrderPayload:
    """
    Ready-to-send order submission.

    fields maps endpoint entry identifiers to values, in submission order.
    """
    fields: Mapping[str, str]
    order_details: str = ""
    item_count: int = 0
    total_amount: float = 0

    def as_form_data(self) -> List[Tuple[str, str]]:
        """Ordered (entry_id, value) pairs for form encoding."""
        return list(self.fields.items())


def compose_payload(
    form: ContactForm,
    cart: CartSnapshot,
    mapping: EntryMapping,
    currency_symbol: str = "₫",
    thousands_separator: str = ".",
    decimal_separator: str = ","
) -> OrderPayload:
    """
    Compose the single submission payload for one attempt.

    Contact values are sent exactly as entered.
    """
    details = compose_order_details(
        cart,
        currency_symbol,
        thousands_separator,
        decimal_separator
    )

    values = form.to_dict()
    values[ORDER_DETAILS_FIELD] = details

    ordered_fields = FIELD_NAMES + (ORDER_DETAILS_FIELD,)
    entries = {
        mapping.entry_for(logical_field): values[logical_field]
        for logical_field in ordered_fields
    }

    return OrderPayload(
        fields=MappingProxyType(entries),
        order_details=details,
        item_count=cart.item_count(),
        total_amount=cart.total_amount
    )
