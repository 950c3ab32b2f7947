"""
Notification Module
===================
Transient success/error overlay state for the order form.

Only the state contract lives here; rendering is the storefront's job.
Dismissing closes the overlay but keeps kind and message until the next
notification replaces them, so a closing overlay never flickers to blank.
"""

import logging
from enum import Enum
from dataclasses import dataclass
from typing import Dict, Any, Optional

from content import Language, parse_language


logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    SUCCESS = "success"
    ERROR = "error"


# Built-in notification text (the only user-facing strings owned here)
NOTIFICATION_TEXT = {
    Language.VN: {
        "success_title": "Thành Công!",
        "error_title": "Lỗi!",
        "close": "Đóng",
        "success_message": "Đơn hàng của bạn đã được gửi thành công.",
        "error_message": "Có lỗi xảy ra. Vui lòng thử lại.",
    },
    Language.EN: {
        "success_title": "Success!",
        "error_title": "Error!",
        "close": "Close",
        "success_message": "Your order has been sent successfully.",
        "error_message": "Something went wrong. Please try again.",
    },
}


def failure_message(language: Language) -> str:
    """Generic retry-prompting message shown for any failed submission."""
    return NOTIFICATION_TEXT[parse_language(language)]["error_message"]


@dataclass(frozen=True)
class NotificationState:
    """Snapshot of the overlay."""
    is_open: bool = False
    kind: NotificationKind = NotificationKind.SUCCESS
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_open": self.is_open,
            "kind": self.kind.value,
            "message": self.message,
        }


class NotificationPresenter:
    """
    Holds one notification at a time.

    Showing a new notification replaces the current one.
    """

    def __init__(self, language: Language = Language.VN):
        self.language = parse_language(language)
        self._state = NotificationState()
        self.shown_count = 0

    @property
    def state(self) -> NotificationState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def kind(self) -> NotificationKind:
        return self._state.kind

    @property
    def message(self) -> str:
        return self._state.message

    def show(self, kind: NotificationKind, message: str) -> NotificationState:
        """Open the overlay with the given kind and message."""
        self._state = NotificationState(is_open=True, kind=kind, message=message)
        self.shown_count += 1
        logger.debug(f"Notification shown: {kind.value}")
        return self._state

    def show_error(self, message: Optional[str] = None) -> NotificationState:
        return self.show(
            NotificationKind.ERROR,
            message or self._text("error_message")
        )

    def show_success(self, message: Optional[str] = None) -> NotificationState:
        return self.show(
            NotificationKind.SUCCESS,
            message or self._text("success_message")
        )

    def dismiss(self) -> NotificationState:
        """Close the overlay. Kind and message are kept."""
        if self._state.is_open:
            self._state = NotificationState(
                is_open=False,
                kind=self._state.kind,
                message=self._state.message
            )
            logger.debug("Notification dismissed")
        return self._state

    def set_language(self, language: Language):
        self.language = parse_language(language)

    def title(self) -> str:
        """Heading for the current kind."""
        if self._state.kind == NotificationKind.SUCCESS:
            return self._text("success_title")
        return self._text("error_title")

    def close_label(self) -> str:
        return self._text("close")

    def _text(self, key: str) -> str:
        return NOTIFICATION_TEXT[self.language][key]
