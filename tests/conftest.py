"""
Shared fixtures for the order intake test suite.
"""

import asyncio
from typing import List, Optional

import pytest

import config
from cart import CartSnapshot, InMemoryCart, LineItem
from gateway import SubmissionOutcome, SubmissionResult
from payload import EntryMapping, OrderPayload


SAMPLE_FORM = {
    "name": "Linh",
    "email": "a@b.com",
    "phone": "0901234567",
    "address": "123 Main St",
}


class FakeGateway:
    """Records payloads and answers with a fixed outcome."""

    def __init__(
        self,
        outcome: SubmissionOutcome = SubmissionOutcome.SENT,
        hold: bool = False
    ):
        self.outcome = outcome
        self.payloads: List[OrderPayload] = []
        self.release = asyncio.Event() if hold else None

    @property
    def calls(self) -> int:
        return len(self.payloads)

    async def submit(self, payload: OrderPayload) -> SubmissionResult:
        self.payloads.append(payload)
        if self.release is not None:
            await self.release.wait()
        error: Optional[str] = None
        if self.outcome == SubmissionOutcome.TRANSPORT_ERROR:
            error = "ConnectError: connection refused"
        return SubmissionResult(outcome=self.outcome, error=error, duration_ms=1.0)


class RaisingGateway:
    """Gateway that breaks its contract and raises."""

    def __init__(self):
        self.calls = 0

    async def submit(self, payload: OrderPayload) -> SubmissionResult:
        self.calls += 1
        raise RuntimeError("socket exploded")


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Each test loads configuration from its own environment."""
    for key in (
        "ORDER_FORM_ACTION_URL",
        "ORDER_REQUEST_TIMEOUT",
        "ORDER_DEFAULT_LANGUAGE",
        "ORDER_CURRENCY_SYMBOL",
        "ORDER_THOUSANDS_SEPARATOR",
        "ORDER_DECIMAL_SEPARATOR",
        "LOG_LEVEL",
        "ENABLE_METRICS",
    ):
        monkeypatch.delenv(key, raising=False)
    for field in config.DEFAULT_ENTRY_IDS:
        monkeypatch.delenv(f"ORDER_FORM_ENTRY_{field.upper()}", raising=False)
    monkeypatch.setattr(config, "_config", None)


@pytest.fixture
def sample_form():
    return dict(SAMPLE_FORM)


@pytest.fixture
def latte_cart():
    cart = InMemoryCart()
    cart.add_item("Latte", 50000, quantity=2)
    return cart


@pytest.fixture
def latte_snapshot():
    return CartSnapshot(
        items=(LineItem(name="Latte", quantity=2, price="50,000"),),
        total_amount=100000
    )


@pytest.fixture
def entry_mapping():
    return EntryMapping(
        name="entry.1",
        email="entry.2",
        phone="entry.3",
        address="entry.4",
        order_details="entry.5"
    )


@pytest.fixture
def sent_gateway():
    return FakeGateway(SubmissionOutcome.SENT)


@pytest.fixture
def failing_gateway():
    return FakeGateway(SubmissionOutcome.TRANSPORT_ERROR)
