"""
Relational storage on SQLAlchemy async sessions.

CONCURRENCY STRATEGY: Conditional UPDATE
========================================

Problem:
  Two payment captures for the same booking run at once. Both read
  status='pending', both charge, both flip the booking to 'confirmed' and
  both write a completed transaction.

Solution:
  Status changes are issued as

    UPDATE bookings SET status = :new
    WHERE id = :id AND status IN (:expected)

  and the caller inspects rowcount. Only one writer can move the row out
  of 'pending'; the loser sees rowcount == 0 and records its attempt as
  failed instead of completed. No SELECT FOR UPDATE is needed, so reads of
  the booking never block.

PNR collisions:
  The unique constraint on bookings.pnr is authoritative. The insert runs
  inside a SAVEPOINT so a collision only discards that insert, not the
  surrounding request transaction, and the caller retries with a new code.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Optional

from sqlalchemy import func, or_, select, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from onboard.core.config import Settings
from onboard.core.logging import get_logger
from onboard.db.base import Base, utcnow
from onboard.db.session import create_engine, create_session_factory
from onboard.models import Airport, Booking, SupportTicket, Transaction, User
from onboard.models.booking import CONFIRMED
from onboard.services.airport_directory import AirportDirectory
from onboard.services.interfaces.storage import (
    BookingRepository,
    DuplicatePNRError,
    Storage,
    StorageProvider,
    SupportTicketRepository,
    TransactionRepository,
    UserRepository,
)

logger = get_logger(__name__)


def _offset(page: int, limit: int) -> int:
    return max(page - 1, 0) * limit


class SqlUserRepository(UserRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def add(self, user: User) -> User:
        self.db.add(user)
        await self.db.flush()
        return user

    async def save(self, user: User) -> User:
        await self.db.flush()
        return user

    async def list(self, page, limit, status=None, search=None):
        query = select(User).where(User.is_guest.is_(False))
        if status:
            query = query.where(User.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    User.email.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                )
            )

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
        result = await self.db.execute(
            query.order_by(User.created_at.desc(), User.id.desc()).offset(_offset(page, limit)).limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def count_active(self) -> int:
        total = await self.db.scalar(
            select(func.count(User.id)).where(User.status == "active", User.is_guest.is_(False))
        )
        return total or 0


class SqlBookingRepository(BookingRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, booking: Booking) -> Booking:
        try:
            async with self.db.begin_nested():
                self.db.add(booking)
                await self.db.flush()
        except IntegrityError as exc:
            if "pnr" in str(exc.orig).lower():
                raise DuplicatePNRError(booking.pnr) from exc
            raise
        return booking

    async def get(self, booking_id: int) -> Optional[Booking]:
        # Full reload so passengers are loaded even after a rollback expired the row
        return await self.db.get(Booking, booking_id, populate_existing=True)

    async def get_by_pnr(self, pnr: str) -> Optional[Booking]:
        result = await self.db.execute(select(Booking).where(Booking.pnr == pnr))
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int, limit: Optional[int] = None) -> list[Booking]:
        query = (
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list(self, page, limit, status=None):
        query = select(Booking)
        if status:
            query = query.where(Booking.status == status)

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
        result = await self.db.execute(
            query.order_by(Booking.created_at.desc(), Booking.id.desc()).offset(_offset(page, limit)).limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def transition(self, booking_id: int, from_statuses: Iterable[str], to_status: str) -> bool:
        result = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status.in_(list(from_statuses)))
            .values(status=to_status, updated_at=utcnow())
        )
        return result.rowcount == 1

    async def set_ticket_url(self, booking_id: int, ticket_url: str) -> None:
        await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(ticket_url=ticket_url, updated_at=utcnow())
        )

    async def stats(self) -> dict[str, Any]:
        rows = await self.db.execute(select(Booking.status, func.count(Booking.id)).group_by(Booking.status))
        by_status = {status: count for status, count in rows.all()}
        revenue = await self.db.scalar(
            select(func.coalesce(func.sum(Booking.total_amount), 0)).where(Booking.status == CONFIRMED)
        )
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "revenue": float(revenue or 0),
        }


class SqlTransactionRepository(TransactionRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, transaction: Transaction) -> Transaction:
        self.db.add(transaction)
        await self.db.flush()
        return transaction

    async def get(self, transaction_id: int) -> Optional[Transaction]:
        return await self.db.get(Transaction, transaction_id)

    async def list_for_user(self, user_id: int) -> list[Transaction]:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        )
        return list(result.scalars().all())

    async def list(self, page, limit, status=None):
        query = select(Transaction)
        if status:
            query = query.where(Transaction.status == status)

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
        result = await self.db.execute(
            query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset(_offset(page, limit))
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def transition(self, transaction_id, from_status, to_status, **values) -> bool:
        result = await self.db.execute(
            update(Transaction)
            .where(Transaction.id == transaction_id, Transaction.status == from_status)
            .values(status=to_status, updated_at=utcnow(), **values)
        )
        return result.rowcount == 1


class SqlSupportTicketRepository(SupportTicketRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, ticket: SupportTicket) -> SupportTicket:
        self.db.add(ticket)
        await self.db.flush()
        return ticket

    async def get(self, ticket_id: int) -> Optional[SupportTicket]:
        return await self.db.get(SupportTicket, ticket_id)

    async def save(self, ticket: SupportTicket) -> SupportTicket:
        await self.db.flush()
        return ticket

    async def list_for_user(self, user_id: int) -> list[SupportTicket]:
        result = await self.db.execute(
            select(SupportTicket)
            .where(SupportTicket.user_id == user_id)
            .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
        )
        return list(result.scalars().all())

    async def list(self, status=None, priority=None) -> list[SupportTicket]:
        query = select(SupportTicket)
        if status:
            query = query.where(SupportTicket.status == status)
        if priority:
            query = query.where(SupportTicket.priority == priority)
        result = await self.db.execute(query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()))
        return list(result.scalars().all())

    async def stats(self) -> dict[str, Any]:
        by_status = dict(
            (await self.db.execute(
                select(SupportTicket.status, func.count(SupportTicket.id)).group_by(SupportTicket.status)
            )).all()
        )
        by_priority = dict(
            (await self.db.execute(
                select(SupportTicket.priority, func.count(SupportTicket.id)).group_by(SupportTicket.priority)
            )).all()
        )
        return {"total": sum(by_status.values()), "by_status": by_status, "by_priority": by_priority}


class SqlStorage(Storage):
    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = SqlUserRepository(db)
        self.bookings = SqlBookingRepository(db)
        self.transactions = SqlTransactionRepository(db)
        self.support_tickets = SqlSupportTicketRepository(db)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()


class SqlStorageProvider(StorageProvider):
    name = "database"

    def __init__(
        self,
        engine: AsyncEngine,
        directory: AirportDirectory,
        create_schema: bool = False,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        self.engine = engine
        self.directory = directory
        self.create_schema = create_schema
        self.session_factory = session_factory or create_session_factory(engine)

    @classmethod
    def from_settings(cls, settings: Settings, directory: AirportDirectory) -> "SqlStorageProvider":
        return cls(create_engine(settings), directory, create_schema=settings.DB_CREATE_SCHEMA)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Storage]:
        async with self.session_factory() as db:
            try:
                yield SqlStorage(db)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    async def startup(self) -> None:
        if self.create_schema:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("database_schema_ready")

        async with self.session_factory() as db:
            existing = set((await db.execute(select(Airport.code))).scalars().all())
            missing = [airport for airport in self.directory if airport.code not in existing]
            for airport in missing:
                db.add(
                    Airport(
                        code=airport.code,
                        name=airport.name,
                        city=airport.city,
                        country=airport.country,
                        region=airport.region,
                    )
                )
            await db.commit()
        if missing:
            logger.info("airports_seeded", count=len(missing))

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("database_ping_failed", error=str(e))
            return False

    async def shutdown(self) -> None:
        await self.engine.dispose()
