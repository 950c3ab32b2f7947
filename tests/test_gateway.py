"""
Tests for the submission gateway.

HTTP is served by httpx.MockTransport; nothing leaves the process.
"""

from urllib.parse import parse_qs

import httpx
import pytest

from config import get_config
from contact_form import ContactForm
from gateway import SubmissionGateway, SubmissionOutcome
from payload import compose_payload


ACTION_URL = "https://forms.example.test/formResponse"


@pytest.fixture
def payload(sample_form, latte_snapshot, entry_mapping):
    return compose_payload(ContactForm(**sample_form), latte_snapshot, entry_mapping)


def recording_transport(status_code=200, body=b""):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, content=body)

    return httpx.MockTransport(handler), requests


@pytest.mark.asyncio
async def test_posts_form_encoded_payload(payload):
    transport, requests = recording_transport()

    async with httpx.AsyncClient(transport=transport) as client:
        gateway = SubmissionGateway(ACTION_URL, client=client)
        result = await gateway.submit(payload)

    assert result.sent
    assert result.outcome == SubmissionOutcome.SENT
    assert result.error is None
    assert len(requests) == 1

    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == ACTION_URL
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"

    body = parse_qs(request.content.decode())
    assert body["entry.1"] == ["Linh"]
    assert body["entry.4"] == ["123 Main St"]
    assert body["entry.5"] == ["- Latte x2 (50,000)\n\nTOTAL AMOUNT: 100.000₫"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [200, 302, 400, 404, 500])
async def test_any_completed_response_counts_as_sent(payload, status_code):
    transport, _ = recording_transport(status_code, body=b"<html>rejected</html>")

    async with httpx.AsyncClient(transport=transport) as client:
        gateway = SubmissionGateway(ACTION_URL, client=client)
        result = await gateway.submit(payload)

    assert result.outcome == SubmissionOutcome.SENT


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    httpx.ConnectError("connection refused"),
    httpx.ReadTimeout("timed out"),
    RuntimeError("unexpected"),
])
async def test_transport_errors_become_transport_error(payload, error):
    def handler(request):
        raise error

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = SubmissionGateway(ACTION_URL, client=client)
        result = await gateway.submit(payload)

    assert not result.sent
    assert result.outcome == SubmissionOutcome.TRANSPORT_ERROR
    assert type(error).__name__ in result.error
    assert gateway.get_stats() == {"endpoint": ACTION_URL, "sent": 0, "failed": 1}


@pytest.mark.asyncio
async def test_one_request_per_submit(payload):
    transport, requests = recording_transport()

    async with httpx.AsyncClient(transport=transport) as client:
        gateway = SubmissionGateway(ACTION_URL, client=client)
        await gateway.submit(payload)
        await gateway.submit(payload)

    assert len(requests) == 2
    assert gateway.sent_count == 2


@pytest.mark.asyncio
async def test_injected_client_is_not_closed(payload):
    transport, _ = recording_transport()

    async with httpx.AsyncClient(transport=transport) as client:
        async with SubmissionGateway(ACTION_URL, client=client) as gateway:
            await gateway.submit(payload)
        assert not client.is_closed


@pytest.mark.asyncio
async def test_owned_client_lifecycle():
    gateway = SubmissionGateway(ACTION_URL, timeout=5)

    async with gateway:
        client = gateway._client
        assert isinstance(client, httpx.AsyncClient)

    assert client.is_closed
    assert gateway._client is None


def test_from_config(monkeypatch):
    monkeypatch.setenv("ORDER_FORM_ACTION_URL", ACTION_URL)
    monkeypatch.setenv("ORDER_REQUEST_TIMEOUT", "12")

    gateway = SubmissionGateway.from_config(get_config())

    assert gateway.action_url == ACTION_URL
    assert gateway.timeout == 12.0
