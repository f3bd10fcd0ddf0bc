from onboard.schemas.user import UserCreate, UserLogin, UserResponse, AuthResponse
from onboard.schemas.booking import BookingCreate, BookingResponse, BookingEnvelope
from onboard.schemas.payment import PaymentRequest, PaymentResponse, TransactionResponse
from onboard.schemas.support import SupportTicketCreate, SupportTicketResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "AuthResponse",
    "BookingCreate", "BookingResponse", "BookingEnvelope",
    "PaymentRequest", "PaymentResponse", "TransactionResponse",
    "SupportTicketCreate", "SupportTicketResponse",
]
