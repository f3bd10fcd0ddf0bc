"""
Storage interfaces.

Allows swapping between the relational store and the in-process store without
touching the services. Exactly one StorageProvider is built at startup (see
storage_factory); request handlers receive a Storage from it and never decide
per call where data lives.

Implementations:
- SqlStorageProvider: SQLAlchemy async session per request
- MemoryStorageProvider: process-local tables, lost on restart
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any, Iterable, Optional

from onboard.models import Booking, SupportTicket, Transaction, User


class DuplicatePNRError(Exception):
    """Raised by BookingRepository.add when the PNR is already taken."""


class UserRepository(ABC):
    @abstractmethod
    async def get(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""
        pass

    @abstractmethod
    async def add(self, user: User) -> User:
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Persist attribute changes made to a loaded user."""
        pass

    @abstractmethod
    async def list(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[User], int]:
        """Non-system users, newest first, with the unpaged total."""
        pass

    @abstractmethod
    async def count_active(self) -> int:
        pass


class BookingRepository(ABC):
    @abstractmethod
    async def add(self, booking: Booking) -> Booking:
        """
        Insert a booking together with its passengers, atomically.

        Raises DuplicatePNRError if the PNR is taken; nothing is written in
        that case.
        """
        pass

    @abstractmethod
    async def get(self, booking_id: int) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_by_pnr(self, pnr: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int, limit: Optional[int] = None) -> list[Booking]:
        pass

    @abstractmethod
    async def list(self, page: int, limit: int, status: Optional[str] = None) -> tuple[list[Booking], int]:
        pass

    @abstractmethod
    async def transition(self, booking_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        """
        Set status only if the current status is one of from_statuses.

        Returns False when the row was not in an expected state, which is how
        concurrent confirmations of the same booking are told apart.
        """
        pass

    @abstractmethod
    async def set_ticket_url(self, booking_id: int, ticket_url: str) -> None:
        pass

    @abstractmethod
    async def stats(self) -> dict[str, Any]:
        """Totals: count, by_status, confirmed revenue."""
        pass


class TransactionRepository(ABC):
    @abstractmethod
    async def add(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    async def get(self, transaction_id: int) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int) -> list[Transaction]:
        pass

    @abstractmethod
    async def list(self, page: int, limit: int, status: Optional[str] = None) -> tuple[list[Transaction], int]:
        pass

    @abstractmethod
    async def transition(
        self,
        transaction_id: int,
        from_status: str,
        to_status: str,
        **values: Any,
    ) -> bool:
        pass


class SupportTicketRepository(ABC):
    @abstractmethod
    async def add(self, ticket: SupportTicket) -> SupportTicket:
        pass

    @abstractmethod
    async def get(self, ticket_id: int) -> Optional[SupportTicket]:
        pass

    @abstractmethod
    async def save(self, ticket: SupportTicket) -> SupportTicket:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int) -> list[SupportTicket]:
        pass

    @abstractmethod
    async def list(self, status: Optional[str] = None, priority: Optional[str] = None) -> list[SupportTicket]:
        pass

    @abstractmethod
    async def stats(self) -> dict[str, Any]:
        """Counts: total, by_status, by_priority."""
        pass


class Storage(ABC):
    """Unit of work handed to the services for one request."""

    users: UserRepository
    bookings: BookingRepository
    transactions: TransactionRepository
    support_tickets: SupportTicketRepository

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass


class StorageProvider(ABC):
    name: str

    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[Storage]:
        """Yield a Storage; commit on normal exit, roll back on error."""
        pass

    @abstractmethod
    async def startup(self) -> None:
        """Prepare the schema and seed reference data."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass

    async def shutdown(self) -> None:
        return None
