"""
Dwolla API client.

Thin async wrapper over the Dwolla v2 REST API. Created resources are
identified by the ``Location`` header the API answers with; that URI is what
the rest of the backend stores as the external reference.
"""

import asyncio
import time
from decimal import Decimal
from typing import Any

import httpx
from fastapi import Request

from ...config import Settings
from ...core.exceptions import ExternalServiceError
from ...core.logging import get_logger
from .errors import DwollaRequestError
from .schemas import (
    BusinessClassification,
    DwollaBeneficialOwner,
    DwollaCustomer,
    DwollaDocument,
    DwollaFundingSource,
    DwollaTransfer,
    WebhookSubscription,
)

logger = get_logger(__name__)

HAL_MEDIA_TYPE = "application/vnd.dwolla.v1.hal+json"

# Refresh the access token this many seconds before Dwolla expires it
TOKEN_EXPIRY_MARGIN_SECONDS = 60


def _embedded(body: dict, name: str) -> list[dict]:
    return body.get("_embedded", {}).get(name, [])


class DwollaClient:
    """Client-credentials authenticated Dwolla client."""

    def __init__(
        self,
        key: str,
        secret: str,
        base_url: str,
        webhook_secret: str | None = None,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.key = key
        self.secret = secret
        self.base_url = base_url.rstrip("/")
        self.webhook_secret = webhook_secret
        self._http = http_client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout
        )
        self._access_token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DwollaClient":
        return cls(
            key=settings.dwolla_key,
            secret=settings.dwolla_secret,
            base_url=settings.dwolla_api_url,
            webhook_secret=settings.dwolla_webhook_secret,
            timeout=settings.dwolla_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    # ----- Transport -----

    async def _get_access_token(self) -> str:
        async with self._token_lock:
            if self._access_token and time.monotonic() < self._token_expires_at:
                return self._access_token

            try:
                response = await self._http.post(
                    f"{self.base_url}/token",
                    auth=(self.key, self.secret),
                    data={"grant_type": "client_credentials"},
                )
            except httpx.HTTPError as e:
                raise ExternalServiceError(
                    "dwolla", "authorize", details={"error": str(e)}
                ) from e

            if response.is_error:
                raise DwollaRequestError.from_response(response)

            body = response.json()
            self._access_token = body["access_token"]
            expires_in = int(body.get("expires_in", 3600))
            self._token_expires_at = (
                time.monotonic() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
            )
            logger.debug("Obtained Dwolla access token")
            return self._access_token

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> httpx.Response:
        token = await self._get_access_token()
        headers = {"Authorization": f"Bearer {token}", "Accept": HAL_MEDIA_TYPE}
        if json is not None:
            headers["Content-Type"] = HAL_MEDIA_TYPE

        try:
            response = await self._http.request(
                method, url, headers=headers, json=json, files=files, data=data
            )
        except httpx.HTTPError as e:
            logger.error(f"Dwolla {method} {url} failed: {e}")
            raise ExternalServiceError(
                "dwolla", f"{method} {url}", details={"error": str(e)}
            ) from e

        if response.is_error:
            error = DwollaRequestError.from_response(response)
            logger.warning(
                f"Dwolla rejected {method} {url}: {error.status_code} {error.code}",
                extra={"dwolla_errors": [e.as_dict() for e in error.errors]},
            )
            raise error
        return response

    async def _get(self, url: str) -> dict:
        response = await self._request("GET", url)
        return response.json()

    async def _create(self, url: str, payload: dict[str, Any]) -> str:
        """POST a new resource and return its location."""
        response = await self._request("POST", url, json=payload)
        location = response.headers.get("location")
        if not location:
            raise ExternalServiceError(
                "dwolla", f"POST {url}", details={"error": "missing Location header"}
            )
        return location

    async def _post_body(self, url: str, payload: dict[str, Any]) -> dict:
        response = await self._request("POST", url, json=payload)
        return response.json() if response.content else {}

    # ----- Customers -----

    async def create_customer(self, payload: dict[str, Any]) -> str:
        return await self._create("customers", payload)

    async def get_customer(self, location: str) -> DwollaCustomer:
        return DwollaCustomer.model_validate(await self._get(location))

    async def update_customer(
        self, location: str, payload: dict[str, Any]
    ) -> DwollaCustomer:
        """Update (or retry) a customer and return its new state."""
        body = await self._post_body(location, payload)
        if not body:
            return await self.get_customer(location)
        return DwollaCustomer.model_validate(body)

    # ----- Beneficial owners -----

    async def create_beneficial_owner(
        self, customer_location: str, payload: dict[str, Any]
    ) -> str:
        return await self._create(f"{customer_location}/beneficial-owners", payload)

    async def get_beneficial_owner(self, location: str) -> DwollaBeneficialOwner:
        return DwollaBeneficialOwner.model_validate(await self._get(location))

    async def update_beneficial_owner(
        self, location: str, payload: dict[str, Any]
    ) -> DwollaBeneficialOwner:
        body = await self._post_body(location, payload)
        if not body:
            return await self.get_beneficial_owner(location)
        return DwollaBeneficialOwner.model_validate(body)

    async def delete_beneficial_owner(self, location: str) -> None:
        await self._request("DELETE", location)

    async def certify_beneficial_ownership(self, customer_location: str) -> str:
        """Certify the owners of a business customer, returning the new status."""
        body = await self._post_body(
            f"{customer_location}/beneficial-ownership", {"status": "certified"}
        )
        return body.get("status", "certified")

    async def list_business_classifications(self) -> list[BusinessClassification]:
        body = await self._get("business-classifications")
        classifications = []
        for item in _embedded(body, "business-classifications"):
            industries = [
                BusinessClassification(id=i["id"], name=i["name"])
                for i in _embedded(item, "industry-classifications")
            ]
            classifications.append(
                BusinessClassification(
                    id=item["id"],
                    name=item["name"],
                    industry_classifications=industries,
                )
            )
        return classifications

    # ----- Funding sources -----

    async def create_funding_source(
        self,
        customer_location: str,
        routing_number: str,
        account_number: str,
        bank_account_type: str,
        name: str,
    ) -> str:
        return await self._create(
            f"{customer_location}/funding-sources",
            {
                "routingNumber": routing_number,
                "accountNumber": account_number,
                "bankAccountType": bank_account_type,
                "name": name,
            },
        )

    async def get_funding_source(self, location: str) -> DwollaFundingSource:
        return DwollaFundingSource.model_validate(await self._get(location))

    async def list_funding_sources(
        self, customer_location: str
    ) -> list[DwollaFundingSource]:
        body = await self._get(f"{customer_location}/funding-sources")
        return [
            DwollaFundingSource.model_validate(item)
            for item in _embedded(body, "funding-sources")
        ]

    async def remove_funding_source(self, location: str) -> None:
        await self._request("POST", location, json={"removed": True})

    async def get_balance_funding_source(
        self, customer_location: str
    ) -> DwollaFundingSource | None:
        for source in await self.list_funding_sources(customer_location):
            if source.type == "balance" and not source.removed:
                return source
        return None

    # ----- Transfers -----

    async def create_transfer(
        self,
        source_location: str,
        destination_location: str,
        amount: Decimal,
        currency: str = "USD",
    ) -> str:
        return await self._create(
            "transfers",
            {
                "_links": {
                    "source": {"href": source_location},
                    "destination": {"href": destination_location},
                },
                "amount": {"currency": currency, "value": f"{amount:.2f}"},
            },
        )

    async def get_transfer(self, location: str) -> DwollaTransfer:
        return DwollaTransfer.model_validate(await self._get(location))

    async def cancel_transfer(self, location: str) -> bool:
        """Cancel a transfer; True when Dwolla confirms the cancellation."""
        body = await self._post_body(location, {"status": "cancelled"})
        return body.get("status") == "cancelled"

    # ----- Documents -----

    async def create_document(
        self,
        owner_location: str,
        content: bytes,
        file_name: str,
        document_type: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload a verification document for a customer or beneficial owner."""
        url = f"{owner_location}/documents"
        response = await self._request(
            "POST",
            url,
            files={"file": (file_name, content, content_type)},
            data={"documentType": document_type},
        )
        location = response.headers.get("location")
        if not location:
            raise ExternalServiceError(
                "dwolla", f"POST {url}", details={"error": "missing Location header"}
            )
        return location

    async def get_document(self, location: str) -> DwollaDocument:
        return DwollaDocument.model_validate(await self._get(location))

    async def list_documents(self, owner_location: str) -> list[DwollaDocument]:
        body = await self._get(f"{owner_location}/documents")
        return [
            DwollaDocument.model_validate(item) for item in _embedded(body, "documents")
        ]

    # ----- Webhook subscriptions -----

    async def register_webhook_subscription(self, url: str) -> str:
        return await self._create(
            "webhook-subscriptions", {"url": url, "secret": self.webhook_secret}
        )

    async def list_webhook_subscriptions(self) -> list[WebhookSubscription]:
        body = await self._get("webhook-subscriptions")
        return [
            WebhookSubscription.model_validate(item)
            for item in _embedded(body, "webhook-subscriptions")
        ]

    async def delete_webhook_subscription(self, location: str) -> None:
        await self._request("DELETE", location)

    async def unpause_webhook_subscription(self, location: str) -> None:
        await self._request("POST", location, json={"paused": False})

    async def sync_webhook_subscription(self, url: str) -> str:
        """
        Make sure Dwolla delivers events to ``url``.

        Registers the subscription when missing and unpauses it when Dwolla
        paused it after failed deliveries. Other subscriptions are left alone.

        Returns:
            Location of the subscription for ``url``
        """
        for subscription in await self.list_webhook_subscriptions():
            logger.info(f"Dwolla webhook subscription: {subscription.url}")
            if subscription.url != url:
                continue
            if subscription.paused:
                logger.info(f"Unpausing Dwolla webhook subscription {subscription.url}")
                await self.unpause_webhook_subscription(subscription.location)
            return subscription.location

        logger.info(f"Registering Dwolla webhook subscription for {url}")
        return await self.register_webhook_subscription(url)


def get_dwolla_client(request: Request) -> DwollaClient:
    """Dependency returning the client created at application startup."""
    return request.app.state.dwolla_client
