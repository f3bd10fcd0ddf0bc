"""
Pydantic schemas for payments, provider handshakes and refunds.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from onboard.schemas.booking import BookingResponse
from onboard.schemas.common import CamelModel, Pagination

PaymentMethod = Literal["card", "paypal", "stripe"]
TransactionStatus = Literal["pending", "completed", "failed", "refunded"]


class PaymentDetails(CamelModel):
    card_number: Optional[str] = None
    expiry_date: Optional[str] = None
    cvv: Optional[str] = None
    cardholder_name: Optional[str] = None
    country: Optional[str] = None
    paypal_order_id: Optional[str] = None
    paypal_payer_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    stripe_payment_method_id: Optional[str] = None


class PaymentRequest(CamelModel):
    booking_id: int
    payment_method: PaymentMethod
    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)


class TransactionResponse(CamelModel):
    id: int
    reference: str
    booking_id: int
    user_id: int
    amount: float
    currency: str
    payment_method: str
    status: str
    stripe_payment_intent_id: Optional[str] = None
    paypal_order_id: Optional[str] = None
    paypal_payer_id: Optional[str] = None
    failure_reason: Optional[str] = None
    refund_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PaymentResponse(CamelModel):
    success: bool = True
    message: str
    transaction_id: str
    transaction: TransactionResponse
    booking: BookingResponse


class TransactionEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    transaction: TransactionResponse


class TransactionListResponse(CamelModel):
    success: bool = True
    transactions: list[TransactionResponse]
    pagination: Optional[Pagination] = None


class StripeIntentRequest(CamelModel):
    booking_id: int


class StripeIntentResponse(CamelModel):
    success: bool = True
    client_secret: str
    payment_intent_id: str
    amount: float
    currency: str
    demo_mode: bool


class StripeConfigResponse(CamelModel):
    success: bool = True
    publishable_key: Optional[str] = None
    demo_mode: bool


class PayPalOrderRequest(CamelModel):
    booking_id: int
    amount: Optional[float] = Field(None, gt=0)
    # Guests identify themselves with the booking's contact email
    contact_email: Optional[EmailStr] = None


class PayPalOrderResponse(CamelModel):
    success: bool = True
    order_id: str
    approval_url: str
    demo_mode: bool


class PayPalCaptureRequest(CamelModel):
    booking_id: int
    order_id: str = Field(..., min_length=1)
    payer_id: str = Field(..., min_length=1)
    contact_email: Optional[EmailStr] = None


class RefundRequest(CamelModel):
    reason: str = Field("Refund issued by administrator", min_length=1, max_length=500)
