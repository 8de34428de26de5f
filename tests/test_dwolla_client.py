import json
from decimal import Decimal

import httpx
import pytest

from payhub_backend.core.exceptions import ExternalServiceError
from payhub_backend.modules.dwolla.client import DwollaClient
from payhub_backend.modules.dwolla.errors import DwollaRequestError

from .helpers import DWOLLA_API, customer_uri


class FakeDwolla:
    """Routes requests to canned responses and records what was sent."""

    def __init__(self):
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        self.requests: list[httpx.Request] = []
        self.token_requests = 0

    def add(self, method: str, url: str, response: httpx.Response) -> None:
        self.routes[(method, url)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url == f"{DWOLLA_API}/token":
            self.token_requests += 1
            return httpx.Response(
                200, json={"access_token": "token-abc", "expires_in": 3600}
            )
        self.requests.append(request)
        canned = self.routes.get((request.method, url))
        if canned is None:
            return httpx.Response(404, json={"code": "NotFound"})
        return httpx.Response(
            canned.status_code, headers=canned.headers, content=canned.content
        )


@pytest.fixture
def fake():
    return FakeDwolla()


@pytest.fixture
async def client(fake):
    http = httpx.AsyncClient(base_url=DWOLLA_API, transport=httpx.MockTransport(fake))
    client = DwollaClient(
        key="key", secret="secret", base_url=DWOLLA_API, http_client=http
    )
    yield client
    await client.aclose()


async def test_create_customer_returns_location(client, fake):
    location = customer_uri("new")
    fake.add(
        "POST",
        f"{DWOLLA_API}/customers",
        httpx.Response(201, headers={"Location": location}),
    )

    assert await client.create_customer({"firstName": "Ada"}) == location

    request = fake.requests[0]
    assert request.headers["Authorization"] == "Bearer token-abc"
    assert request.headers["Accept"] == "application/vnd.dwolla.v1.hal+json"
    assert json.loads(request.content) == {"firstName": "Ada"}


async def test_access_token_is_reused(client, fake):
    fake.add(
        "GET",
        customer_uri("c1"),
        httpx.Response(200, json={"id": "c1", "status": "verified"}),
    )

    await client.get_customer(customer_uri("c1"))
    customer = await client.get_customer(customer_uri("c1"))

    assert customer.status == "verified"
    assert fake.token_requests == 1


async def test_missing_location_header_is_a_service_error(client, fake):
    fake.add("POST", f"{DWOLLA_API}/customers", httpx.Response(201))

    with pytest.raises(ExternalServiceError):
        await client.create_customer({})


async def test_validation_errors_are_parsed(client, fake):
    fake.add(
        "POST",
        f"{DWOLLA_API}/customers",
        httpx.Response(
            400,
            json={
                "code": "ValidationError",
                "message": "Validation error(s) present.",
                "_embedded": {
                    "errors": [
                        {
                            "code": "Duplicate",
                            "message": "A customer with the specified email "
                            "already exists.",
                            "path": "/email",
                        }
                    ]
                },
            },
        ),
    )

    with pytest.raises(DwollaRequestError) as exc:
        await client.create_customer({"email": "ada@example.com"})

    error = exc.value
    assert error.status_code == 400
    assert error.code == "ValidationError"
    assert error.errors[0].field == "email"

    translated = error.to_validation_error()
    assert translated.field == "email"
    assert translated.details["processor_code"] == "ValidationError"


async def test_transport_failure_is_a_service_error():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(base_url=DWOLLA_API, transport=httpx.MockTransport(fail))
    client = DwollaClient(key="k", secret="s", base_url=DWOLLA_API, http_client=http)

    with pytest.raises(ExternalServiceError):
        await client.get_customer(customer_uri("c1"))
    await client.aclose()


async def test_create_transfer_formats_amount(client, fake):
    location = f"{DWOLLA_API}/transfers/t1"
    fake.add(
        "POST",
        f"{DWOLLA_API}/transfers",
        httpx.Response(201, headers={"Location": location}),
    )

    result = await client.create_transfer(
        f"{DWOLLA_API}/funding-sources/balance",
        f"{DWOLLA_API}/funding-sources/bank",
        Decimal("12.5"),
    )

    assert result == location
    body = json.loads(fake.requests[0].content)
    assert body["amount"] == {"currency": "USD", "value": "12.50"}
    assert body["_links"]["source"]["href"].endswith("/balance")


async def test_balance_funding_source_skips_removed(client, fake):
    fake.add(
        "GET",
        f"{customer_uri('c1')}/funding-sources",
        httpx.Response(
            200,
            json={
                "_embedded": {
                    "funding-sources": [
                        {"id": "bank", "type": "bank", "removed": False},
                        {"id": "old", "type": "balance", "removed": True},
                        {
                            "id": "bal",
                            "type": "balance",
                            "removed": False,
                            "_links": {
                                "self": {"href": f"{DWOLLA_API}/funding-sources/bal"}
                            },
                        },
                    ]
                }
            },
        ),
    )

    balance = await client.get_balance_funding_source(customer_uri("c1"))

    assert balance.id == "bal"
    assert balance.location == f"{DWOLLA_API}/funding-sources/bal"


async def test_cancel_transfer_confirms_status(client, fake):
    location = f"{DWOLLA_API}/transfers/t1"
    fake.add("POST", location, httpx.Response(200, json={"status": "cancelled"}))

    assert await client.cancel_transfer(location) is True


async def test_business_classifications_are_nested(client, fake):
    fake.add(
        "GET",
        f"{DWOLLA_API}/business-classifications",
        httpx.Response(
            200,
            json={
                "_embedded": {
                    "business-classifications": [
                        {
                            "id": "b1",
                            "name": "Services",
                            "_embedded": {
                                "industry-classifications": [
                                    {"id": "i1", "name": "Staffing"}
                                ]
                            },
                        }
                    ]
                }
            },
        ),
    )

    [classification] = await client.list_business_classifications()

    assert classification.name == "Services"
    assert classification.industry_classifications[0].id == "i1"


# =============================================================================
# WEBHOOK SUBSCRIPTIONS
# =============================================================================


def _subscriptions(*items) -> httpx.Response:
    return httpx.Response(
        200, json={"_embedded": {"webhook-subscriptions": list(items)}}
    )


def _subscription(name: str, url: str, paused: bool = False) -> dict:
    return {
        "id": name,
        "url": url,
        "paused": paused,
        "_links": {"self": {"href": f"{DWOLLA_API}/webhook-subscriptions/{name}"}},
    }


async def test_sync_registers_missing_subscription(client, fake):
    hook_url = "https://payhub.example/api/dwolla/events"
    fake.add(
        "GET",
        f"{DWOLLA_API}/webhook-subscriptions",
        _subscriptions(_subscription("other", "https://elsewhere.example/hook")),
    )
    fake.add(
        "POST",
        f"{DWOLLA_API}/webhook-subscriptions",
        httpx.Response(
            201, headers={"Location": f"{DWOLLA_API}/webhook-subscriptions/new"}
        ),
    )

    location = await client.sync_webhook_subscription(hook_url)

    assert location == f"{DWOLLA_API}/webhook-subscriptions/new"
    assert [r.method for r in fake.requests] == ["GET", "POST"]
    assert json.loads(fake.requests[1].content)["url"] == hook_url


async def test_sync_unpauses_existing_subscription(client, fake):
    hook_url = "https://payhub.example/api/dwolla/events"
    fake.add(
        "GET",
        f"{DWOLLA_API}/webhook-subscriptions",
        _subscriptions(_subscription("ours", hook_url, paused=True)),
    )
    fake.add(
        "POST",
        f"{DWOLLA_API}/webhook-subscriptions/ours",
        httpx.Response(200, json={"paused": False}),
    )

    location = await client.sync_webhook_subscription(hook_url)

    assert location == f"{DWOLLA_API}/webhook-subscriptions/ours"
    assert json.loads(fake.requests[1].content) == {"paused": False}


async def test_get_transfer_reads_status_and_amount(client, fake):
    location = f"{DWOLLA_API}/transfers/t1"
    fake.add(
        "GET",
        location,
        httpx.Response(
            200,
            json={
                "id": "t1",
                "status": "processed",
                "amount": {"value": "12.50", "currency": "USD"},
            },
        ),
    )

    transfer = await client.get_transfer(location)

    assert transfer.status == "processed"
    assert transfer.amount.value == Decimal("12.50")


async def test_delete_webhook_subscription(client, fake):
    location = f"{DWOLLA_API}/webhook-subscriptions/old"
    fake.add("DELETE", location, httpx.Response(200, json={}))

    await client.delete_webhook_subscription(location)

    assert [(r.method, str(r.url)) for r in fake.requests] == [("DELETE", location)]
