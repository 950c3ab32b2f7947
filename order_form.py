"""
Order Form Controller
=====================
Central orchestration for one order form instance.

Responsibilities:
- Own the contact form, lifecycle phase and notification state
- Gate submission on required fields and on nothing being in flight
- Compose the payload once per attempt and send it once
- Fire the order-accepted callback after a successful send
- Convert every send failure into the FAILED phase

This class does NOT:
- Store or mutate the cart (the accepted callback is where callers do that)
- Render anything
- Retry on its own
"""

import inspect
import uuid
import structlog
from enum import Enum
from typing import Optional, Dict, Any, Callable, Mapping

from prometheus_client import Counter

from cart import CartProvider
from config import get_config, get_entry_mapping, is_metrics_enabled
from contact_form import ContactForm, FormStateStore
from content import (
    CONFIRMATION_KEYS,
    FORM_KEYS,
    Language,
    ContentProvider,
    StaticContentProvider,
    parse_language,
)
from gateway import SubmissionGateway, SubmissionResult
from notification import NotificationPresenter, failure_message
from order_state import OrderLifecycle, OrderPhase
from payload import EntryMapping, OrderPayload, compose_payload

# Structured logging
logger = structlog.get_logger(__name__)


order_submissions = Counter(
    'order_form_submissions_total',
    'Order form submit attempts',
    ['result']
)


class FormView(Enum):
    """Which presentation the order form shows."""
    FORM = "form"
    CONFIRMATION = "confirmation"


class OrderFormController:
    """
    Order form controller - orchestrates a single order submission.

    One instance per order form. Nothing is shared between instances
    except the read-only cart provider.
    """

    def __init__(
        self,
        cart_provider: CartProvider,
        gateway: SubmissionGateway,
        on_order_accepted: Optional[Callable[[], Any]] = None,
        language: Optional[Language] = None,
        content_provider: Optional[ContentProvider] = None,
        entry_mapping: Optional[EntryMapping] = None,
        currency_symbol: Optional[str] = None,
        thousands_separator: Optional[str] = None,
        decimal_separator: Optional[str] = None
    ):
        config = get_config()

        self.form_id = f"form_{uuid.uuid4().hex[:12]}"
        self.cart_provider = cart_provider
        self.gateway = gateway
        self.on_order_accepted = on_order_accepted
        self.content_provider = content_provider or StaticContentProvider()
        self.entry_mapping = entry_mapping or get_entry_mapping()

        self.language = parse_language(language or config.locale.default_language)
        self.currency_symbol = currency_symbol or config.locale.currency_symbol
        self.thousands_separator = thousands_separator or config.locale.thousands_separator
        self.decimal_separator = decimal_separator or config.locale.decimal_separator

        # Per-form state
        self.form_store = FormStateStore()
        self.lifecycle = OrderLifecycle(self.form_id)
        self.notification = NotificationPresenter(self.language)

        # Tracking
        self.attempt_count = 0
        self.failure_count = 0
        self.accepted_count = 0
        self.last_result: Optional[SubmissionResult] = None

        logger.info(
            "order_form_created",
            form_id=self.form_id,
            language=self.language.value
        )

    # ========================================================================
    # STATE ACCESS
    # ========================================================================

    @property
    def phase(self) -> OrderPhase:
        return self.lifecycle.current_phase

    @property
    def form(self) -> ContactForm:
        return self.form_store.form

    @property
    def submit_enabled(self) -> bool:
        """Submit control is disabled while sending and after completion."""
        return self.lifecycle.can_submit()

    @property
    def view(self) -> FormView:
        if self.phase == OrderPhase.COMPLETED:
            return FormView.CONFIRMATION
        return FormView.FORM

    def can_submit(self) -> bool:
        """Submit control is enabled and every required field is filled."""
        return self.submit_enabled and self.form_store.is_complete()

    # ========================================================================
    # USER EVENTS
    # ========================================================================

    def set_field(self, field: str, value: str) -> ContactForm:
        """Update one contact field."""
        return self.form_store.set_field(field, value)

    def set_language(self, language: Language):
        self.language = parse_language(language)
        self.notification.set_language(self.language)
        logger.debug("language_changed", form_id=self.form_id, language=self.language.value)

    def dismiss_notification(self):
        """Close the notification overlay. Phase and form are untouched."""
        self.notification.dismiss()

    async def submit(self) -> OrderPhase:
        """
        Submit the order.

        Returns:
            Phase after the attempt. Blocked attempts (missing fields or
            a send already in flight) return the unchanged phase.
        """
        if not self.submit_enabled:
            logger.warning(
                "submit_not_allowed",
                form_id=self.form_id,
                phase=self.phase.value
            )
            self._record("blocked")
            return self.phase

        missing = self.form_store.missing_fields()
        if missing:
            logger.info(
                "submit_blocked_missing_fields",
                form_id=self.form_id,
                missing=missing
            )
            self._record("blocked")
            return self.phase

        # Entered before any await so a second submit sees SUBMITTING
        self.lifecycle.transition(OrderPhase.SUBMITTING, reason="user_submit")
        self.attempt_count += 1

        logger.info(
            "order_submitting",
            form_id=self.form_id,
            attempt=self.attempt_count
        )

        try:
            payload = self._compose()
            result = await self.gateway.submit(payload)

        except Exception as e:
            logger.error(
                "order_submit_error",
                form_id=self.form_id,
                error=str(e),
                exc_info=True
            )
            self._enter_failed(reason="submit_error")
            return self.phase

        self.last_result = result

        if not result.sent:
            logger.warning(
                "order_transport_failure",
                form_id=self.form_id,
                error=result.error,
                duration_ms=round(result.duration_ms, 1)
            )
            self._enter_failed(reason="transport_error")
            return self.phase

        self.lifecycle.transition(OrderPhase.COMPLETED, reason="sent")
        self.accepted_count += 1
        self._record("completed")

        logger.info(
            "order_completed",
            form_id=self.form_id,
            attempt=self.attempt_count,
            duration_ms=round(result.duration_ms, 1)
        )

        await self._fire_order_accepted()
        return self.phase

    def start_new_order(self):
        """
        Reset to a fresh form and IDLE lifecycle.

        Not available while a send is in flight.
        """
        if self.lifecycle.is_submitting():
            logger.warning("reset_while_submitting", form_id=self.form_id)
            return

        self.form_store.reset()
        self.lifecycle = OrderLifecycle(self.form_id)
        self.notification = NotificationPresenter(self.language)
        self.last_result = None

        logger.info("order_form_reset", form_id=self.form_id)

    # ========================================================================
    # PRESENTATION
    # ========================================================================

    def confirmation_content(self) -> Dict[str, str]:
        """Localized copy for the confirmation view."""
        return self._view_copy(CONFIRMATION_KEYS)

    def form_content(self) -> Dict[str, str]:
        """Localized copy for the form view."""
        return self._view_copy(FORM_KEYS)

    def submit_label(self) -> str:
        """Submit button text; switches to the sending label while in flight."""
        key = "sending" if self.lifecycle.is_submitting() else "confirm_order"
        return self.content_provider.get(self.language).get(key, key)

    # ========================================================================
    # INTERNAL
    # ========================================================================

    def _view_copy(self, keys) -> Dict[str, str]:
        content: Mapping[str, str] = self.content_provider.get(self.language)
        return {key: content[key] for key in keys if key in content}

    def _compose(self) -> OrderPayload:
        cart = self.cart_provider.snapshot()
        return compose_payload(
            self.form_store.form,
            cart,
            self.entry_mapping,
            currency_symbol=self.currency_symbol,
            thousands_separator=self.thousands_separator,
            decimal_separator=self.decimal_separator
        )

    def _enter_failed(self, reason: str):
        self.lifecycle.transition(OrderPhase.FAILED, reason=reason)
        self.failure_count += 1
        self._record("failed")
        self.notification.show_error(failure_message(self.language))

    async def _fire_order_accepted(self):
        """Call the order-accepted callback once; errors are logged."""
        handler = self.on_order_accepted

        if not handler:
            return

        try:
            result = handler()
            if inspect.isawaitable(result):
                await result

        except Exception as e:
            logger.error(
                "order_accepted_callback_error",
                form_id=self.form_id,
                error=str(e),
                exc_info=True
            )

    def _record(self, result: str):
        if is_metrics_enabled():
            order_submissions.labels(result=result).inc()

    def get_stats(self) -> Dict[str, Any]:
        """Get order form statistics."""
        return {
            "form_id": self.form_id,
            "phase": self.phase.value,
            "view": self.view.value,
            "language": self.language.value,
            "attempts": self.attempt_count,
            "failures": self.failure_count,
            "accepted": self.accepted_count,
            "submit_enabled": self.submit_enabled,
            "notification": self.notification.state.to_dict(),
        }

    def __repr__(self):
        return f"<OrderFormController form_id={self.form_id} phase={self.phase.value}>"
