"""
Order Intake Runner
===================
Logging setup and a command-line entry point that submits one order
through the full order form workflow.

Usage:
    order-intake name="Linh" email=a@b.com phone=0901234567 \\
        address="123 Main St" item=Latte:2:50000 [lang=en]

Exit code is 0 when the order reaches COMPLETED, 1 otherwise.
"""

import sys
import asyncio
import logging
from typing import Dict, List, Optional, Tuple

import structlog

from cart import InMemoryCart
from config import ConfigurationError, get_config, validate_configuration
from gateway import SubmissionGateway
from order_form import OrderFormController
from order_state import OrderPhase

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    """Route stdlib and structlog output through one handler."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def parse_args(argv: List[str]) -> Tuple[Dict[str, str], List[Tuple[str, int, int]], Optional[str]]:
    """
    Split key=value arguments into contact fields, cart items and language.

    Raises:
        ValueError: On malformed arguments
    """
    fields: Dict[str, str] = {}
    items: List[Tuple[str, int, int]] = []
    language = None

    for arg in argv:
        key, sep, value = arg.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got {arg!r}")

        if key == "item":
            name, _, rest = value.partition(":")
            quantity, _, unit_price = rest.partition(":")
            try:
                quantity, unit_price = int(quantity), int(unit_price)
            except ValueError:
                raise ValueError(f"Expected item=NAME:QTY:PRICE, got {value!r}")
            if not name or quantity <= 0 or unit_price < 0:
                raise ValueError(
                    f"Item needs a name, a positive quantity and a non-negative price, got {value!r}"
                )
            items.append((name, quantity, unit_price))
        elif key == "lang":
            language = value
        else:
            fields[key] = value

    return fields, items, language


async def submit_order(
    fields: Dict[str, str],
    items: List[Tuple[str, int, int]],
    language: Optional[str] = None
) -> OrderFormController:
    """Run one order through the form workflow against the configured endpoint."""
    config = get_config()
    cart = InMemoryCart()
    for name, quantity, unit_price in items:
        cart.add_item(name, unit_price, quantity)

    async with SubmissionGateway.from_config(config) as gateway:
        controller = OrderFormController(
            cart_provider=cart,
            gateway=gateway,
            on_order_accepted=cart.clear,
            language=language
        )
        controller.form_store.update(**fields)
        await controller.submit()

    return controller


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.observability.log_level)
    validate_configuration()

    try:
        fields, items, language = parse_args(argv)
        controller = asyncio.run(submit_order(fields, items, language))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if controller.phase == OrderPhase.COMPLETED:
        content = controller.confirmation_content()
        print(content["confirmation_title"])
        print(content["confirmation_body"])
        return 0

    if controller.notification.is_open:
        print(f"{controller.notification.title()} {controller.notification.message}")
    else:
        missing = ", ".join(controller.form_store.missing_fields())
        print(f"Missing required fields: {missing}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
