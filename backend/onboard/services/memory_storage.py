"""
In-process storage.

Rows are ordinary (transient) model instances kept in dicts keyed by
sequential integer ids. Nothing survives a restart.

Every check-and-set below runs without an await between the check and the
write, so on a single event loop it is atomic with respect to other
requests. Porting this to threads would need a lock around each table.
"""

import itertools
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Optional

from onboard.db.base import utcnow
from onboard.models import Booking, SupportTicket, Transaction, User
from onboard.models.booking import CONFIRMED
from onboard.services.interfaces.storage import (
    BookingRepository,
    DuplicatePNRError,
    Storage,
    StorageProvider,
    SupportTicketRepository,
    TransactionRepository,
    UserRepository,
)


def _apply_defaults(row: Any) -> None:
    """Fill column defaults the way a flush would."""
    for column in row.__table__.columns:
        if getattr(row, column.key, None) is not None or column.default is None:
            continue
        if column.default.is_callable:
            setattr(row, column.key, column.default.arg(None))
        elif column.default.is_scalar:
            setattr(row, column.key, column.default.arg)


def _page(rows: list, page: int, limit: int) -> list:
    start = max(page - 1, 0) * limit
    return rows[start:start + limit]


def _newest_first(rows: Iterable) -> list:
    return sorted(rows, key=lambda row: (row.created_at, row.id), reverse=True)


class MemoryTables:
    """Process-wide tables shared by every MemoryStorage."""

    def __init__(self):
        self.users: dict[int, User] = {}
        self.bookings: dict[int, Booking] = {}
        self.transactions: dict[int, Transaction] = {}
        self.support_tickets: dict[int, SupportTicket] = {}
        self.pnrs: dict[str, int] = {}
        self._ids = {name: itertools.count(1) for name in ("users", "bookings", "passengers", "transactions", "tickets")}

    def next_id(self, table: str) -> int:
        return next(self._ids[table])

    def stamp(self, row: Any, table: str) -> None:
        row.id = self.next_id(table)
        _apply_defaults(row)


class MemoryUserRepository(UserRepository):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def get(self, user_id: int) -> Optional[User]:
        return self.tables.users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        return next((user for user in self.tables.users.values() if user.email == wanted), None)

    async def add(self, user: User) -> User:
        self.tables.stamp(user, "users")
        self.tables.users[user.id] = user
        return user

    async def save(self, user: User) -> User:
        user.updated_at = utcnow()
        return user

    async def list(self, page, limit, status=None, search=None):
        rows = [user for user in self.tables.users.values() if not user.is_guest]
        if status:
            rows = [user for user in rows if user.status == status]
        if search:
            term = search.strip().lower()
            rows = [
                user for user in rows
                if term in user.email or term in user.first_name.lower() or term in user.last_name.lower()
            ]
        rows = _newest_first(rows)
        return _page(rows, page, limit), len(rows)

    async def count_active(self) -> int:
        return sum(1 for user in self.tables.users.values() if user.status == "active" and not user.is_guest)


class MemoryBookingRepository(BookingRepository):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def add(self, booking: Booking) -> Booking:
        if booking.pnr in self.tables.pnrs:
            raise DuplicatePNRError(booking.pnr)
        self.tables.stamp(booking, "bookings")
        for passenger in booking.passengers:
            self.tables.stamp(passenger, "passengers")
            passenger.booking_id = booking.id
        self.tables.bookings[booking.id] = booking
        self.tables.pnrs[booking.pnr] = booking.id
        return booking

    async def get(self, booking_id: int) -> Optional[Booking]:
        return self.tables.bookings.get(booking_id)

    async def get_by_pnr(self, pnr: str) -> Optional[Booking]:
        booking_id = self.tables.pnrs.get(pnr)
        return self.tables.bookings.get(booking_id) if booking_id else None

    async def list_for_user(self, user_id: int, limit: Optional[int] = None) -> list[Booking]:
        rows = _newest_first(b for b in self.tables.bookings.values() if b.user_id == user_id)
        return rows[:limit] if limit else rows

    async def list(self, page, limit, status=None):
        rows = list(self.tables.bookings.values())
        if status:
            rows = [booking for booking in rows if booking.status == status]
        rows = _newest_first(rows)
        return _page(rows, page, limit), len(rows)

    async def transition(self, booking_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        booking = self.tables.bookings.get(booking_id)
        if booking is None or booking.status not in set(from_statuses):
            return False
        booking.status = to_status
        booking.updated_at = utcnow()
        return True

    async def set_ticket_url(self, booking_id: int, ticket_url: str) -> None:
        booking = self.tables.bookings.get(booking_id)
        if booking is not None:
            booking.ticket_url = ticket_url
            booking.updated_at = utcnow()

    async def stats(self) -> dict[str, Any]:
        by_status: dict[str, int] = {}
        revenue = 0.0
        for booking in self.tables.bookings.values():
            by_status[booking.status] = by_status.get(booking.status, 0) + 1
            if booking.status == CONFIRMED:
                revenue += booking.total_amount
        return {"total": len(self.tables.bookings), "by_status": by_status, "revenue": revenue}


class MemoryTransactionRepository(TransactionRepository):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def add(self, transaction: Transaction) -> Transaction:
        self.tables.stamp(transaction, "transactions")
        self.tables.transactions[transaction.id] = transaction
        return transaction

    async def get(self, transaction_id: int) -> Optional[Transaction]:
        return self.tables.transactions.get(transaction_id)

    async def list_for_user(self, user_id: int) -> list[Transaction]:
        return _newest_first(t for t in self.tables.transactions.values() if t.user_id == user_id)

    async def list(self, page, limit, status=None):
        rows = list(self.tables.transactions.values())
        if status:
            rows = [txn for txn in rows if txn.status == status]
        rows = _newest_first(rows)
        return _page(rows, page, limit), len(rows)

    async def transition(self, transaction_id, from_status, to_status, **values) -> bool:
        transaction = self.tables.transactions.get(transaction_id)
        if transaction is None or transaction.status != from_status:
            return False
        transaction.status = to_status
        for key, value in values.items():
            setattr(transaction, key, value)
        transaction.updated_at = utcnow()
        return True


class MemorySupportTicketRepository(SupportTicketRepository):
    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def add(self, ticket: SupportTicket) -> SupportTicket:
        self.tables.stamp(ticket, "tickets")
        self.tables.support_tickets[ticket.id] = ticket
        return ticket

    async def get(self, ticket_id: int) -> Optional[SupportTicket]:
        return self.tables.support_tickets.get(ticket_id)

    async def save(self, ticket: SupportTicket) -> SupportTicket:
        ticket.updated_at = utcnow()
        return ticket

    async def list_for_user(self, user_id: int) -> list[SupportTicket]:
        return _newest_first(t for t in self.tables.support_tickets.values() if t.user_id == user_id)

    async def list(self, status=None, priority=None) -> list[SupportTicket]:
        rows = list(self.tables.support_tickets.values())
        if status:
            rows = [ticket for ticket in rows if ticket.status == status]
        if priority:
            rows = [ticket for ticket in rows if ticket.priority == priority]
        return _newest_first(rows)

    async def stats(self) -> dict[str, Any]:
        by_status: dict[str, int] = {}
        by_priority: dict[str, int] = {}
        for ticket in self.tables.support_tickets.values():
            by_status[ticket.status] = by_status.get(ticket.status, 0) + 1
            by_priority[ticket.priority] = by_priority.get(ticket.priority, 0) + 1
        return {"total": len(self.tables.support_tickets), "by_status": by_status, "by_priority": by_priority}


class MemoryStorage(Storage):
    def __init__(self, tables: MemoryTables):
        self.users = MemoryUserRepository(tables)
        self.bookings = MemoryBookingRepository(tables)
        self.transactions = MemoryTransactionRepository(tables)
        self.support_tickets = MemorySupportTicketRepository(tables)

    async def commit(self) -> None:
        return None

    async def rollback(self) -> None:
        # Writes land immediately; services validate before writing.
        return None


class MemoryStorageProvider(StorageProvider):
    name = "memory"

    def __init__(self, tables: Optional[MemoryTables] = None):
        self.tables = tables or MemoryTables()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Storage]:
        yield MemoryStorage(self.tables)

    async def startup(self) -> None:
        # The airport directory is already in memory; nothing to seed here.
        return None

    async def ping(self) -> bool:
        return True
