"""
Payment orchestration: card simulation, Stripe and PayPal.

CONCURRENCY STRATEGY: Per-booking lock + conditional confirm
============================================================

Problem:
  Two requests pay the same pending booking at once. Each reads
  status='pending', each charges the provider, each writes a completed
  transaction and confirms the booking. The customer pays twice.

Solution (two layers):
  1. Within a process, attempts on one booking are serialised by an
     asyncio.Lock keyed on the booking id. The second attempt re-reads the
     booking after the first has committed, sees 'confirmed' and is
     rejected before any provider call.
  2. Across processes, the booking is confirmed with a conditional update
     (pending -> confirmed only). If it affects nothing, another worker won;
     the attempt is recorded as failed, not completed, and flagged for
     manual refund in the logs.

  Either way a booking ends up with at most one completed transaction.

Side effects after a successful payment (ticket PDF, email) are
best-effort: they run after the commit and their failures are logged only.
"""

import asyncio
import random
import re
import secrets
import time
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional

from onboard.core.config import Settings
from onboard.core.exceptions import (
    ConflictError,
    NotFoundError,
    PaymentDeclinedError,
    ProviderError,
    ValidationError,
)
from onboard.core.logging import get_logger
from onboard.core.metrics import payment_latency, record_payment_attempt, record_ticket, refunds
from onboard.infrastructure.paypal_client import PayPalGateway
from onboard.infrastructure.stripe_client import StripeGateway
from onboard.models import Booking, Transaction, User
from onboard.models.booking import CANCELLED, CONFIRMED, PENDING
from onboard.schemas.payment import PaymentDetails
from onboard.services.booking_service import update_booking_status
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher
from onboard.services.ticket_generator import TicketGenerator

logger = get_logger(__name__)

CARD_NUMBER_RE = re.compile(r"^\d{16}$")
EXPIRY_RE = re.compile(r"^(\d{2})/(\d{2})$")
CVV_RE = re.compile(r"^\d{3,4}$")


def generate_transaction_reference() -> str:
    return f"txn_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def validate_card(details: PaymentDetails, now: Optional[datetime] = None) -> list[str]:
    """
    Return a list of problems with the card fields; empty means valid.

    The expiry month is treated as starting on its first day, and must be
    strictly in the future.
    """
    now = now or datetime.now()
    number = (details.card_number or "").replace(" ", "")
    errors = []

    if not CARD_NUMBER_RE.match(number):
        errors.append("cardNumber: must be 16 digits")

    match = EXPIRY_RE.match((details.expiry_date or "").strip())
    if not match:
        errors.append("expiryDate: must be MM/YY")
    else:
        month, year = int(match.group(1)), 2000 + int(match.group(2))
        if not 1 <= month <= 12:
            errors.append("expiryDate: invalid month")
        elif datetime(year, month, 1) <= now:
            errors.append("expiryDate: card has expired")

    if not CVV_RE.match((details.cvv or "").strip()):
        errors.append("cvv: must be 3 or 4 digits")

    if not (details.cardholder_name or "").strip():
        errors.append("cardholderName: is required")

    return errors


class BookingLocks:
    """One asyncio.Lock per booking id, dropped when nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}
        self._waiters: dict[int, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, booking_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(booking_id, asyncio.Lock())
        self._waiters[booking_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[booking_id] -= 1
            if self._waiters[booking_id] == 0:
                del self._waiters[booking_id]
                self._locks.pop(booking_id, None)


class PaymentOrchestrator:
    def __init__(
        self,
        settings: Settings,
        stripe_gateway: StripeGateway,
        paypal_gateway: PayPalGateway,
        tickets: TicketGenerator,
        notifier: NotificationDispatcher,
    ):
        self.settings = settings
        self.demo_mode = settings.PAYMENTS_DEMO_MODE
        self.stripe = stripe_gateway
        self.paypal = paypal_gateway
        self.tickets = tickets
        self.notifier = notifier
        self.locks = BookingLocks()
        self.card_delay = settings.CARD_SIMULATION_DELAY_SECONDS
        self.card_success_rate = settings.CARD_SIMULATION_SUCCESS_RATE

    # -- booking access -------------------------------------------------

    async def _payable_booking(
        self,
        storage: Storage,
        booking_id: int,
        user: Optional[User],
        contact_email: Optional[str] = None,
    ) -> Booking:
        """
        Load a booking the caller may pay for.

        Account holders pay their own bookings. Without a user, the booking
        must be a guest booking and contact_email must match it.
        """
        booking = await storage.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")

        if user is not None:
            owns = booking.user_id == user.id
        else:
            owns = booking.is_guest and bool(contact_email) and booking.contact_email == contact_email.strip().lower()
        if not owns:
            raise NotFoundError("Booking not found")

        if booking.status != PENDING:
            raise ConflictError("Booking is not eligible for payment")
        return booking

    # -- provider handshakes ---------------------------------------------

    async def create_stripe_intent(self, storage: Storage, booking_id: int, user: User) -> dict[str, Any]:
        booking = await self._payable_booking(storage, booking_id, user)
        intent = await self.stripe.create_intent(
            booking.total_amount, booking.currency, booking.id, booking.pnr, receipt_email=user.email
        )
        return {
            "client_secret": intent["client_secret"],
            "payment_intent_id": intent["id"],
            "amount": booking.total_amount,
            "currency": booking.currency,
            "demo_mode": self.demo_mode,
        }

    async def create_paypal_order(
        self,
        storage: Storage,
        booking_id: int,
        user: Optional[User],
        amount: Optional[float] = None,
        contact_email: Optional[str] = None,
    ) -> dict[str, Any]:
        booking = await self._payable_booking(storage, booking_id, user, contact_email)
        if amount is not None and round(amount, 2) != round(booking.total_amount, 2):
            raise ValidationError("Amount does not match the booking total")
        order = await self.paypal.create_order(booking.id, booking.pnr, booking.total_amount, booking.currency)
        return {"order_id": order["id"], "approval_url": order["approval_url"], "demo_mode": self.demo_mode}

    # -- charging ---------------------------------------------------------

    async def _charge_card(self, booking: Booking, details: PaymentDetails) -> dict[str, Any]:
        # Simulated processor: no card data leaves the server
        await asyncio.sleep(self.card_delay)
        if random.random() >= self.card_success_rate:
            raise PaymentDeclinedError()
        number = details.card_number.replace(" ", "")
        return {"details": {"card_last4": number[-4:], "cardholder_name": details.cardholder_name.strip()}}

    async def _charge_stripe(self, booking: Booking, details: PaymentDetails) -> dict[str, Any]:
        intent = await self.stripe.verify_intent(
            details.stripe_payment_intent_id,
            booking.id,
            booking.total_amount,
            details.stripe_payment_method_id,
        )
        return {"stripe_payment_intent_id": intent["id"], "details": {"demo": intent["demo"]}}

    async def _charge_paypal(self, booking: Booking, details: PaymentDetails) -> dict[str, Any]:
        capture = await self.paypal.capture_order(details.paypal_order_id, details.paypal_payer_id, booking.id)
        return {
            "paypal_order_id": details.paypal_order_id,
            "paypal_payer_id": details.paypal_payer_id,
            "details": {"capture_id": capture["capture_id"]},
        }

    def _validate(self, method: str, details: PaymentDetails) -> tuple[Optional[str], list[str]]:
        """Return (message, problems); message is None when the details are usable."""
        if method == "card":
            if not (details.card_number and details.expiry_date and details.cvv and details.cardholder_name):
                return "Missing required card details", []
            problems = validate_card(details)
            return ("Invalid card details", problems) if problems else (None, [])
        if method == "stripe" and not details.stripe_payment_intent_id:
            return "Missing Stripe payment intent", ["stripePaymentIntentId: is required"]
        if method == "paypal" and not (details.paypal_order_id and details.paypal_payer_id):
            return "Missing PayPal order details", ["paypalOrderId and paypalPayerId are required"]
        return None, []

    def _charger(self, method: str):
        return {"card": self._charge_card, "stripe": self._charge_stripe, "paypal": self._charge_paypal}[method]

    def _provider_refs(self, method: str, details: PaymentDetails) -> dict[str, Any]:
        if method == "stripe":
            return {"stripe_payment_intent_id": details.stripe_payment_intent_id}
        if method == "paypal":
            return {"paypal_order_id": details.paypal_order_id, "paypal_payer_id": details.paypal_payer_id}
        return {}

    async def _record(
        self,
        storage: Storage,
        booking: Booking,
        method: str,
        status: str,
        refs: dict[str, Any],
        failure_reason: Optional[str] = None,
    ) -> Transaction:
        refs = dict(refs)
        details = refs.pop("details", None)
        return await storage.transactions.add(
            Transaction(
                reference=generate_transaction_reference(),
                booking_id=booking.id,
                user_id=booking.user_id,
                amount=booking.total_amount,
                currency=booking.currency,
                payment_method=method,
                status=status,
                payment_details=details,
                failure_reason=failure_reason,
                **refs,
            )
        )

    async def process_payment(
        self,
        storage: Storage,
        booking_id: int,
        method: str,
        details: PaymentDetails,
        user: Optional[User] = None,
        contact_email: Optional[str] = None,
    ) -> tuple[Transaction, Booking]:
        """
        Charge a pending booking and confirm it.

        Failed attempts are stored as failed transactions and leave the
        booking pending so the customer can retry, possibly with another
        method.
        """
        async with self.locks.hold(booking_id):
            booking = await self._payable_booking(storage, booking_id, user, contact_email)

            message, problems = self._validate(method, details)
            if message:
                await self._record(
                    storage, booking, method, "failed", self._provider_refs(method, details), message
                )
                await storage.commit()
                record_payment_attempt(method, "failed")
                logger.info("payment_rejected_invalid_details", booking_id=booking_id, method=method)
                raise ValidationError(message, problems or None)

            started = time.perf_counter()
            try:
                charge = await self._charger(method)(booking, details)
            except ProviderError as e:
                await self._record(
                    storage, booking, method, "failed", self._provider_refs(method, details), e.message
                )
                await storage.commit()
                record_payment_attempt(method, "failed")
                logger.warning(
                    "payment_failed",
                    booking_id=booking_id,
                    method=method,
                    error_type=type(e).__name__,
                )
                raise
            finally:
                payment_latency.labels(method=method).observe(time.perf_counter() - started)

            if not await storage.bookings.transition(booking.id, [PENDING], CONFIRMED):
                # Another worker confirmed it between our read and now
                await self._record(storage, booking, method, "failed", charge, "Booking already confirmed")
                await storage.commit()
                record_payment_attempt(method, "conflict")
                logger.error(
                    "payment_duplicate_capture",
                    booking_id=booking_id,
                    method=method,
                    action="manual_refund_required",
                )
                raise ConflictError("Booking is not eligible for payment")

            transaction = await self._record(storage, booking, method, "completed", charge)
            await storage.commit()

        record_payment_attempt(method, "completed")
        logger.info(
            "payment_completed",
            booking_id=booking.id,
            transaction_id=transaction.id,
            method=method,
            amount=transaction.amount,
        )

        transaction_id = transaction.id
        booking = await storage.bookings.get(booking.id)
        await self._issue_ticket(storage, booking, transaction)

        # A failed ticket write rolls back and expires loaded rows
        booking = await storage.bookings.get(booking_id)
        transaction = await storage.transactions.get(transaction_id)
        await self.notifier.send_payment_confirmation(booking, transaction)
        return transaction, booking

    async def _issue_ticket(self, storage: Storage, booking: Booking, transaction: Transaction) -> None:
        """Render the e-ticket and store its URL. Failures are logged, never raised."""
        booking_id, pnr = booking.id, booking.pnr
        try:
            ticket_url = await self.tickets.generate(booking, transaction)
        except Exception as e:
            record_ticket(False)
            logger.error("ticket_generation_failed", booking_id=booking_id, pnr=pnr, error=str(e))
            return

        try:
            await storage.bookings.set_ticket_url(booking_id, ticket_url)
            await storage.commit()
        except Exception as e:
            await storage.rollback()
            self.tickets.delete(pnr)
            record_ticket(False)
            logger.error("ticket_url_save_failed", booking_id=booking_id, pnr=pnr, error=str(e))
            return

        booking.ticket_url = ticket_url
        record_ticket(True)

    # -- refunds -----------------------------------------------------------

    async def refund(self, storage: Storage, transaction_id: int, reason: str) -> tuple[Transaction, Booking]:
        """
        Refund a completed transaction in full and cancel its booking.
        """
        transaction = await storage.transactions.get(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction not found")
        if transaction.status != "completed":
            raise ConflictError("Only completed transactions can be refunded")

        if transaction.payment_method == "stripe" and transaction.stripe_payment_intent_id:
            await self.stripe.refund(transaction.stripe_payment_intent_id)
        elif transaction.payment_method == "paypal":
            await self.paypal.refund_capture((transaction.payment_details or {}).get("capture_id"))

        if not await storage.transactions.transition(
            transaction.id, "completed", "refunded", refund_reason=reason
        ):
            raise ConflictError("Only completed transactions can be refunded")
        booking = await update_booking_status(storage, transaction.booking_id, CANCELLED, via_refund=True)
        await storage.commit()

        refunds.inc()
        logger.info("payment_refunded", transaction_id=transaction.id, booking_id=transaction.booking_id)

        transaction = await storage.transactions.get(transaction.id)
        await self.notifier.send_refund_notification(booking, transaction)
        return transaction, booking
