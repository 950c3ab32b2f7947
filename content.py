"""
Content Module
==============
Display language selection and the page copy shown after an order is
accepted. Page copy is looked up through a ContentProvider so the
storefront can supply its own text.
"""

import logging
from enum import Enum
from typing import Dict, Mapping, Optional, Protocol


logger = logging.getLogger(__name__)


class Language(Enum):
    """Storefront display languages."""
    VN = "vn"
    EN = "en"


def parse_language(code) -> Language:
    """
    Resolve a language code ('vn', 'EN', Language.VN, ...).

    Raises:
        ValueError: If the code is not a supported language
    """
    if isinstance(code, Language):
        return code

    try:
        return Language(str(code).strip().lower())
    except ValueError:
        supported = ", ".join(language.value for language in Language)
        raise ValueError(
            f"Unsupported language: {code!r} (expected one of {supported})"
        )


class ContentProvider(Protocol):
    """Lookup of user-facing strings for a language."""

    def get(self, language: Language) -> Mapping[str, str]:
        ...


# Copy keys per view
FORM_KEYS = (
    "form_intro",
    "confirm_order",
    "sending",
)

CONFIRMATION_KEYS = (
    "confirmation_title",
    "confirmation_body",
    "confirmation_follow_up",
    "fanpage_prompt",
    "fanpage_label",
    "fanpage_url",
    "back_to_products",
)

FANPAGE_URL = "https://www.facebook.com/share/1NJwTBqBeV/?mibextid=wwXIfr"

DEFAULT_CONTENT: Dict[Language, Dict[str, str]] = {
    Language.VN: {
        "confirmation_title": "Cảm ơn bạn đã đặt hàng!",
        "confirmation_body": "Đơn hàng của bạn đã được ghi nhận thành công.",
        "confirmation_follow_up": (
            "Chúng tôi sẽ liên hệ với bạn qua số điện thoại đã cung cấp "
            "trong vòng 24 giờ tới để xác nhận chi tiết đơn hàng và thời "
            "gian giao nhận. Xin chân thành cảm ơn quý khách đã tin tưởng "
            "và ủng hộ!"
        ),
        "fanpage_prompt": "Nếu bạn có thắc mắc, vui lòng nhắn tin trực tiếp cho Fanpage:",
        "fanpage_label": "Coffee Form Fanpage",
        "fanpage_url": FANPAGE_URL,
        "back_to_products": "Quay lại cửa hàng",
        "confirm_order": "Xác nhận đặt hàng",
        "sending": "Đang gửi...",
        "form_intro": (
            "Vui lòng điền đầy đủ thông tin bên dưới để hoàn tất đơn hàng. "
            "Chúng tôi sẽ liên hệ xác nhận trong vòng 24 giờ."
        ),
    },
    Language.EN: {
        "confirmation_title": "Thank you for your order!",
        "confirmation_body": "Your order has been successfully recorded.",
        "confirmation_follow_up": (
            "We will contact you via the provided phone number within the "
            "next 24 hours to confirm order details and delivery time. "
            "Thank you sincerely for your trust and support!"
        ),
        "fanpage_prompt": "If you have any questions, please message our Fanpage:",
        "fanpage_label": "Coffee Form Fanpage",
        "fanpage_url": FANPAGE_URL,
        "back_to_products": "Back to collection",
        "confirm_order": "Confirm Order",
        "sending": "Sending...",
        "form_intro": (
            "Please fill in all the information below to complete your "
            "order. We will contact you for confirmation within 24 hours."
        ),
    },
}


class StaticContentProvider:
    """
    Content provider backed by in-process tables.

    Overrides replace individual keys per language; anything missing for
    a language falls back to the English copy.
    """

    def __init__(self, overrides: Optional[Dict[Language, Dict[str, str]]] = None):
        self._content: Dict[Language, Dict[str, str]] = {
            language: dict(table) for language, table in DEFAULT_CONTENT.items()
        }

        for language, table in (overrides or {}).items():
            self._content.setdefault(parse_language(language), {}).update(table)

    def get(self, language: Language) -> Mapping[str, str]:
        language = parse_language(language)
        merged = dict(self._content[Language.EN])
        merged.update(self._content.get(language, {}))
        return merged

    def text(self, language: Language, key: str) -> str:
        """Single string lookup; unknown keys come back as the key itself."""
        value = self.get(language).get(key)
        if value is None:
            logger.warning(f"Missing content key: {key} ({parse_language(language).value})")
            return key
        return value
