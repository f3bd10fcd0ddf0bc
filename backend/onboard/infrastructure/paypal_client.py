"""
PayPal Orders v2 gateway over httpx.

Flow: create an order, send the buyer to the `approve` link, then on return
fetch the order, require status APPROVED from the expected payer and capture
it. Demo mode fabricates `DEMO-` orders that approve themselves through a
same-origin success URL; each can be captured once, for its own booking.
"""

import asyncio
import secrets
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from onboard.core.config import Settings
from onboard.core.exceptions import PaymentDeclinedError, ProviderError, ProviderUnavailableError
from onboard.core.logging import get_logger

logger = get_logger(__name__)

DEMO_ORDER_PREFIX = "DEMO-"
DEMO_PAYER_ID = "DEMOPAYER"


def _amount(value: float) -> str:
    return f"{value:.2f}"


class PayPalGateway:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = settings.PAYPAL_CLIENT_ID
        self.client_secret = settings.PAYPAL_CLIENT_SECRET
        self.base_url = settings.paypal_base_url
        self.client_url = settings.CLIENT_URL.rstrip("/")
        self.demo_mode = settings.PAYMENTS_DEMO_MODE
        self.simulation_delay = settings.CARD_SIMULATION_DELAY_SECONDS
        self.timeout = settings.PROVIDER_TIMEOUT_SECONDS
        self.transport = transport
        # demo order id -> booking id
        self._demo_orders: dict[str, int] = {}

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            "/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
        )
        self._raise_for_status(response, "oauth_token")
        return response.json()["access_token"]

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        if response.is_success:
            return
        logger.error(
            "paypal_request_failed",
            operation=operation,
            status_code=response.status_code,
            body=response.text[:2000],
        )
        if response.status_code == 422:
            # Unprocessable: the order cannot be captured (declined, not approved)
            raise PaymentDeclinedError()
        raise ProviderError()

    async def _request(self, operation: str, method: str, path: str, **kwargs) -> dict[str, Any]:
        if not self.configured:
            raise ProviderUnavailableError("PayPal is not configured")
        try:
            async with self._client() as client:
                token = await self._access_token(client)
                response = await client.request(
                    method,
                    path,
                    headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                    **kwargs,
                )
                self._raise_for_status(response, operation)
                return response.json()
        except httpx.HTTPError as e:
            logger.error("paypal_unreachable", operation=operation, error=str(e))
            raise ProviderError() from e

    async def create_order(self, booking_id: int, pnr: str, amount: float, currency: str) -> dict[str, str]:
        """Create a CAPTURE order; returns order id and approval URL."""
        if self.demo_mode:
            order_id = f"{DEMO_ORDER_PREFIX}{secrets.token_hex(8).upper()}"
            self._demo_orders[order_id] = booking_id
            query = urlencode({"token": order_id, "PayerID": DEMO_PAYER_ID, "bookingId": booking_id})
            logger.info("paypal_demo_order_created", booking_id=booking_id, order_id=order_id)
            return {"id": order_id, "approval_url": f"{self.client_url}/payment/success?{query}"}

        order = await self._request(
            "create_order",
            "POST",
            "/v2/checkout/orders",
            json={
                "intent": "CAPTURE",
                "purchase_units": [
                    {
                        "reference_id": str(booking_id),
                        "custom_id": pnr,
                        "description": f"OnboardTicket Flight Reservation - {pnr}",
                        "amount": {"currency_code": currency, "value": _amount(amount)},
                    }
                ],
                "application_context": {
                    "brand_name": "OnboardTicket",
                    "landing_page": "NO_PREFERENCE",
                    "user_action": "PAY_NOW",
                    "return_url": f"{self.client_url}/payment/success",
                    "cancel_url": f"{self.client_url}/payment/cancel",
                },
            },
        )
        approval_url = next(
            (link["href"] for link in order.get("links", []) if link.get("rel") in ("approve", "payer-action")),
            None,
        )
        if not approval_url:
            logger.error("paypal_order_missing_approval_link", order_id=order.get("id"))
            raise ProviderError()
        logger.info("paypal_order_created", booking_id=booking_id, order_id=order["id"])
        return {"id": order["id"], "approval_url": approval_url}

    async def capture_order(self, order_id: str, payer_id: str, booking_id: int) -> dict[str, Any]:
        """
        Verify the order was approved by payer_id for this booking, then capture.

        Returns the capture id and status. Anything other than a COMPLETED
        capture is a decline.
        """
        if self.demo_mode:
            if order_id not in self._demo_orders or payer_id != DEMO_PAYER_ID:
                raise PaymentDeclinedError("PayPal order was not approved")
            if self._demo_orders[order_id] != booking_id:
                logger.warning("paypal_order_booking_mismatch", order_id=order_id, booking_id=booking_id, demo=True)
                raise PaymentDeclinedError("Payment does not match this booking")
            await asyncio.sleep(self.simulation_delay)
            self._demo_orders.pop(order_id, None)
            return {"capture_id": f"DEMOCAPTURE-{secrets.token_hex(6).upper()}", "status": "COMPLETED"}

        order = await self._request("get_order", "GET", f"/v2/checkout/orders/{order_id}")
        approved_by = (order.get("payer") or {}).get("payer_id")
        units = order.get("purchase_units") or [{}]
        if order.get("status") != "APPROVED" or approved_by != payer_id:
            logger.warning(
                "paypal_order_not_approved",
                order_id=order_id,
                status=order.get("status"),
                payer_matches=approved_by == payer_id,
            )
            raise PaymentDeclinedError("PayPal order was not approved")
        if units[0].get("reference_id") != str(booking_id):
            logger.warning("paypal_order_booking_mismatch", order_id=order_id, booking_id=booking_id)
            raise PaymentDeclinedError("Payment does not match this booking")

        capture = await self._request("capture_order", "POST", f"/v2/checkout/orders/{order_id}/capture")
        if capture.get("status") != "COMPLETED":
            logger.warning("paypal_capture_incomplete", order_id=order_id, status=capture.get("status"))
            raise PaymentDeclinedError()

        captures = (capture.get("purchase_units") or [{}])[0].get("payments", {}).get("captures", [])
        capture_id = captures[0]["id"] if captures else None
        return {"capture_id": capture_id, "status": capture["status"]}

    async def refund_capture(self, capture_id: Optional[str]) -> Optional[str]:
        if self.demo_mode or not capture_id or capture_id.startswith("DEMOCAPTURE-"):
            return None
        refund = await self._request("refund_capture", "POST", f"/v2/payments/captures/{capture_id}/refund", json={})
        logger.info("paypal_refund_created", capture_id=capture_id, refund_id=refund.get("id"))
        return refund.get("id")
