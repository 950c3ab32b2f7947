"""
Contact Form Module
===================
Buyer contact details entered on the order form.

Fields are updated one at a time. Every update produces a new immutable
ContactForm that differs from the previous one in exactly that field.
"""

import logging
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, asdict, fields, replace


logger = logging.getLogger(__name__)


class UnknownFieldError(ValueError):
    """Raised when a field name is not part of the contact form."""
    pass


@dataclass(frozen=True)
class ContactForm:
    """Buyer contact details. All fields start empty."""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary."""
        return asdict(self)


FIELD_NAMES: Tuple[str, ...] = tuple(f.name for f in fields(ContactForm))


class FormStateStore:
    """
    Holds the current ContactForm for one order form instance.

    Required-field checking lives here too: a form with any blank field
    must not be submitted.
    """

    def __init__(self, initial: Optional[ContactForm] = None):
        self._form = initial or ContactForm()
        self.edit_count = 0

    @property
    def form(self) -> ContactForm:
        """Current field values."""
        return self._form

    def set_field(self, field: str, value: str) -> ContactForm:
        """
        Update exactly one field, keeping all others.

        Args:
            field: One of name, email, phone, address
            value: New raw value (stored unmodified)

        Returns:
            The updated form

        Raises:
            UnknownFieldError: If field is not a contact form field
        """
        if field not in FIELD_NAMES:
            raise UnknownFieldError(
                f"Unknown contact field: {field!r} "
                f"(expected one of {', '.join(FIELD_NAMES)})"
            )

        self._form = replace(self._form, **{field: value})
        self.edit_count += 1
        return self._form

    def update(self, **values: str) -> ContactForm:
        """Apply several single-field updates in order."""
        for field, value in values.items():
            self.set_field(field, value)
        return self._form

    def missing_fields(self) -> List[str]:
        """Names of empty or whitespace-only fields, in form order."""
        return [
            name for name in FIELD_NAMES
            if not (getattr(self._form, name) or "").strip()
        ]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def reset(self):
        """Restore the empty form."""
        self._form = ContactForm()
        self.edit_count = 0
