"""
Payment endpoints: card, Stripe and PayPal.

Static paths (history, stripe/config) are declared before /{transaction_id}
so they are not captured by it.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from onboard.api.deps import get_app_settings, get_current_user, get_directory, get_optional_user, get_payments, get_storage
from onboard.core.config import Settings
from onboard.core.exceptions import AuthError, NotFoundError
from onboard.models import User
from onboard.schemas.booking import BookingResponse
from onboard.schemas.payment import (
    PaymentDetails,
    PaymentRequest,
    PaymentResponse,
    PayPalCaptureRequest,
    PayPalOrderRequest,
    PayPalOrderResponse,
    StripeConfigResponse,
    StripeIntentRequest,
    StripeIntentResponse,
    TransactionEnvelope,
    TransactionListResponse,
    TransactionResponse,
)
from onboard.services.airport_directory import AirportDirectory
from onboard.services.interfaces.storage import Storage
from onboard.services.payment_service import PaymentOrchestrator

router = APIRouter(prefix="/payments", tags=["Payments"])


def _payment_response(transaction, booking, directory: AirportDirectory) -> PaymentResponse:
    return PaymentResponse(
        message="Payment processed successfully",
        transaction_id=transaction.reference,
        transaction=TransactionResponse.model_validate(transaction),
        booking=BookingResponse.from_booking(booking, directory),
    )


def _require_identity(user: Optional[User], contact_email: Optional[str]) -> None:
    if user is None and not contact_email:
        raise AuthError("No token provided")


@router.post("", response_model=PaymentResponse)
async def process_payment(
    payment: PaymentRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    payments: PaymentOrchestrator = Depends(get_payments),
    directory: AirportDirectory = Depends(get_directory),
):
    """
    Pay for a pending booking.

    A failed attempt is stored as a failed transaction and the booking stays
    pending, so the client may retry, possibly with another method.
    """
    transaction, booking = await payments.process_payment(
        storage, payment.booking_id, payment.payment_method, payment.payment_details, user=user
    )
    return _payment_response(transaction, booking, directory)


@router.get("/history", response_model=TransactionListResponse)
async def payment_history(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    transactions = await storage.transactions.list_for_user(user.id)
    return TransactionListResponse(transactions=[TransactionResponse.model_validate(t) for t in transactions])


@router.get("/stripe/config", response_model=StripeConfigResponse)
async def stripe_config(settings: Settings = Depends(get_app_settings)):
    """Publishable key and demo flag for the client. Public."""
    return StripeConfigResponse(
        publishable_key=settings.STRIPE_PUBLISHABLE_KEY or None,
        demo_mode=settings.PAYMENTS_DEMO_MODE,
    )


@router.post("/stripe/create-intent", response_model=StripeIntentResponse)
async def create_stripe_intent(
    payload: StripeIntentRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    payments: PaymentOrchestrator = Depends(get_payments),
):
    intent = await payments.create_stripe_intent(storage, payload.booking_id, user)
    return StripeIntentResponse(**intent)


@router.post("/paypal/create-order", response_model=PayPalOrderResponse)
async def create_paypal_order(
    payload: PayPalOrderRequest,
    user: Optional[User] = Depends(get_optional_user),
    storage: Storage = Depends(get_storage),
    payments: PaymentOrchestrator = Depends(get_payments),
):
    """Create a PayPal order. Guests identify with contactEmail."""
    _require_identity(user, payload.contact_email)
    order = await payments.create_paypal_order(
        storage, payload.booking_id, user, amount=payload.amount, contact_email=payload.contact_email
    )
    return PayPalOrderResponse(**order)


@router.post("/paypal/capture", response_model=PaymentResponse)
async def capture_paypal_order(
    payload: PayPalCaptureRequest,
    user: Optional[User] = Depends(get_optional_user),
    storage: Storage = Depends(get_storage),
    payments: PaymentOrchestrator = Depends(get_payments),
    directory: AirportDirectory = Depends(get_directory),
):
    """Capture an approved PayPal order and confirm the booking."""
    _require_identity(user, payload.contact_email)
    details = PaymentDetails(paypal_order_id=payload.order_id, paypal_payer_id=payload.payer_id)
    transaction, booking = await payments.process_payment(
        storage, payload.booking_id, "paypal", details, user=user, contact_email=payload.contact_email
    )
    return _payment_response(transaction, booking, directory)


@router.get("/{transaction_id}", response_model=TransactionEnvelope)
async def get_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    transaction = await storage.transactions.get(transaction_id)
    if transaction is None or (transaction.user_id != user.id and not user.is_admin):
        raise NotFoundError("Transaction not found")
    return TransactionEnvelope(transaction=TransactionResponse.model_validate(transaction))
