from onboard.services.interfaces.storage import (
    BookingRepository,
    DuplicatePNRError,
    Storage,
    StorageProvider,
    SupportTicketRepository,
    TransactionRepository,
    UserRepository,
)

__all__ = [
    "BookingRepository",
    "DuplicatePNRError",
    "Storage",
    "StorageProvider",
    "SupportTicketRepository",
    "TransactionRepository",
    "UserRepository",
]
