"""
Stripe PaymentIntent gateway.

The Stripe SDK is synchronous, so calls are pushed to a worker thread to keep
the event loop free. In demo mode no request leaves the process: intents are
fabricated with a recognisable `pi_demo_` prefix and remembered against
their booking and amount; verification only accepts an intent for the
booking it was created for, once.
"""

import asyncio
import secrets
from typing import Any, Optional

import stripe

from onboard.core.config import Settings
from onboard.core.exceptions import PaymentDeclinedError, ProviderError, ProviderUnavailableError
from onboard.core.logging import get_logger

logger = get_logger(__name__)

DEMO_PREFIX = "pi_demo_"
CONFIRMABLE_STATUSES = ("requires_confirmation", "requires_action")


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


class StripeGateway:
    def __init__(self, settings: Settings):
        self.secret_key = settings.STRIPE_SECRET_KEY
        self.publishable_key = settings.STRIPE_PUBLISHABLE_KEY
        self.demo_mode = settings.PAYMENTS_DEMO_MODE
        self.simulation_delay = settings.CARD_SIMULATION_DELAY_SECONDS
        # demo intent id -> (booking id, amount in minor units)
        self._demo_intents: dict[str, tuple[int, int]] = {}

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def _require_configured(self) -> None:
        if not self.configured:
            raise ProviderUnavailableError("Stripe is not configured")

    async def _call(self, operation: str, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, api_key=self.secret_key, **kwargs)
        except stripe.CardError as e:
            logger.warning("stripe_card_declined", operation=operation, code=e.code, error=str(e))
            raise PaymentDeclinedError() from e
        except stripe.StripeError as e:
            logger.error(
                "stripe_request_failed",
                operation=operation,
                error=str(e),
                http_status=getattr(e, "http_status", None),
                body=getattr(e, "json_body", None),
            )
            raise ProviderError() from e

    async def create_intent(
        self,
        amount: float,
        currency: str,
        booking_id: int,
        pnr: str,
        receipt_email: Optional[str] = None,
    ) -> dict[str, Any]:
        """Create a PaymentIntent tied to one booking. Returns id and client secret."""
        if self.demo_mode:
            intent_id = f"{DEMO_PREFIX}{secrets.token_hex(12)}"
            self._demo_intents[intent_id] = (booking_id, to_minor_units(amount))
            logger.info("stripe_demo_intent_created", booking_id=booking_id, intent_id=intent_id)
            return {"id": intent_id, "client_secret": f"{intent_id}_secret_{secrets.token_hex(8)}"}

        self._require_configured()
        intent = await self._call(
            "create_intent",
            stripe.PaymentIntent.create,
            amount=to_minor_units(amount),
            currency=currency.lower(),
            metadata={"booking_id": str(booking_id), "pnr": pnr},
            description=f"OnboardTicket Flight Reservation - {pnr}",
            receipt_email=receipt_email,
            automatic_payment_methods={"enabled": True},
        )
        logger.info("stripe_intent_created", booking_id=booking_id, intent_id=intent["id"])
        return {"id": intent["id"], "client_secret": intent["client_secret"]}

    async def verify_intent(
        self,
        intent_id: str,
        booking_id: int,
        amount: float,
        payment_method_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Check that an intent paid for this booking.

        requires_confirmation / requires_action intents are confirmed once
        and must come back succeeded. Anything else is a decline.
        """
        if self.demo_mode:
            expected = self._demo_intents.get(intent_id)
            if expected is None:
                raise PaymentDeclinedError("Unknown payment intent")
            if expected != (booking_id, to_minor_units(amount)):
                logger.warning("stripe_intent_mismatch", intent_id=intent_id, booking_id=booking_id, demo=True)
                raise PaymentDeclinedError("Payment does not match this booking")
            await asyncio.sleep(self.simulation_delay)
            self._demo_intents.pop(intent_id, None)
            return {"id": intent_id, "status": "succeeded", "demo": True}

        self._require_configured()
        intent = await self._call("retrieve_intent", stripe.PaymentIntent.retrieve, intent_id)

        metadata = intent.get("metadata") or {}
        if metadata.get("booking_id") != str(booking_id) or intent["amount"] != to_minor_units(amount):
            logger.warning(
                "stripe_intent_mismatch",
                intent_id=intent_id,
                booking_id=booking_id,
                intent_booking=metadata.get("booking_id"),
                intent_amount=intent["amount"],
            )
            raise PaymentDeclinedError("Payment does not match this booking")

        if intent["status"] in CONFIRMABLE_STATUSES:
            params = {"payment_method": payment_method_id} if payment_method_id else {}
            intent = await self._call("confirm_intent", stripe.PaymentIntent.confirm, intent_id, **params)

        if intent["status"] != "succeeded":
            logger.warning("stripe_intent_not_succeeded", intent_id=intent_id, status=intent["status"])
            raise PaymentDeclinedError()

        return {"id": intent["id"], "status": intent["status"], "demo": False}

    async def refund(self, intent_id: str) -> Optional[str]:
        if self.demo_mode or intent_id.startswith(DEMO_PREFIX):
            return None
        self._require_configured()
        refund = await self._call("refund", stripe.Refund.create, payment_intent=intent_id)
        logger.info("stripe_refund_created", intent_id=intent_id, refund_id=refund["id"])
        return refund["id"]
