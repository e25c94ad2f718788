"""PayPal REST client for the checkout flow."""

import logging
from typing import Any, Optional

import httpx

from ..core.config import Settings
from ..core.exceptions import ProviderAPIError, ProviderAuthError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/oauth2/token"
ORDERS_PATH = "/v2/checkout/orders"


def _response_body(response: httpx.Response) -> Any:
    """Decoded JSON body when there is one, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text


def approval_link(order: dict[str, Any]) -> Optional[str]:
    """Return the href of the order's ``rel == "approve"`` link, if present."""
    for link in order.get("links") or []:
        if isinstance(link, dict) and link.get("rel") == "approve" and link.get("href"):
            return link["href"]
    return None


class PayPalClient:
    """
    Thin async client over the two PayPal endpoints checkout needs.

    Use as an async context manager; the underlying ``httpx.AsyncClient`` lives
    for the duration of the block. A fresh access token is requested for every
    order.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "PayPalClient":
        return cls(
            client_id=settings.paypal_client_id,
            client_secret=settings.paypal_client_secret,
            base_url=settings.paypal_base_url,
            timeout=settings.paypal_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "PayPalClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            trust_env=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("PayPalClient must be used inside 'async with'")
        return self._client

    async def get_access_token(self) -> str:
        """
        Exchange the client credentials for an access token.

        Raises:
            ProviderAuthError: Credentials are not configured or were rejected
        """
        if not self.client_id or not self.client_secret:
            logger.error("PayPal credentials are not configured")
            raise ProviderAuthError(detail="Payment provider credentials are not configured")

        try:
            response = await self.http.post(
                TOKEN_PATH,
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error("PayPal token request failed", extra={"error": str(e)})
            raise ProviderAuthError(
                detail="Payment provider token endpoint could not be reached",
                diagnostics={"error": str(e)},
            ) from e

        if response.is_error:
            logger.error(
                "PayPal rejected the client credentials",
                extra={"status_code": response.status_code}
            )
            raise ProviderAuthError(
                diagnostics={
                    "provider_status": response.status_code,
                    "provider_body": _response_body(response),
                }
            )

        body = _response_body(response)
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise ProviderAuthError(
                detail="Payment provider token response had no access token",
                diagnostics={"provider_status": response.status_code},
            )
        return token

    async def create_order(
        self,
        payload: dict[str, Any],
        request_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Create a provider order.

        Args:
            payload: Order body as documented by ``POST /v2/checkout/orders``
            request_id: Sent as ``PayPal-Request-Id`` so the provider deduplicates retries

        Returns:
            The decoded order, guaranteed to carry an ``id``

        Raises:
            ProviderAuthError: Token exchange failed
            ProviderAPIError: Non-2xx answer or malformed body
        """
        token = await self.get_access_token()

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        if request_id:
            headers["PayPal-Request-Id"] = request_id

        try:
            response = await self.http.post(ORDERS_PATH, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("PayPal order request failed", extra={"error": str(e)})
            raise ProviderAPIError(
                detail="Payment provider could not be reached",
                body=str(e),
            ) from e

        if response.is_error:
            body = _response_body(response)
            logger.error(
                "PayPal rejected the order",
                extra={"status_code": response.status_code, "provider_body": body}
            )
            raise ProviderAPIError(status=response.status_code, body=body)

        body = _response_body(response)
        if not isinstance(body, dict) or not body.get("id"):
            raise ProviderAPIError(
                detail="Payment provider returned a malformed order",
                status=response.status_code,
                body=body,
            )

        logger.info(
            "PayPal order created",
            extra={"provider_order_id": body["id"], "provider_status": body.get("status")}
        )
        return body
