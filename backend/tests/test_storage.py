"""
Storage-level tests run against both backends: PNR uniqueness and
conditional status transitions.
"""

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from onboard.core.exceptions import ConflictError
from onboard.models import Airport, User
from onboard.models.booking import CANCELLED, CONFIRMED, PENDING
from onboard.schemas.booking import BookingCreate
from onboard.services import booking_service
from onboard.services.airport_directory import get_airport_directory
from onboard.services.booking_service import MAX_PNR_ATTEMPTS, create_booking, update_booking_status
from onboard.services.storage_factory import build_storage_provider


@pytest_asyncio.fixture(params=["database", "memory"])
async def provider(request, make_settings):
    settings = make_settings(STORAGE_BACKEND=request.param)
    provider = build_storage_provider(settings)
    await provider.startup()
    yield provider
    await provider.shutdown()


@pytest_asyncio.fixture
async def owner(provider) -> User:
    async with provider.session() as storage:
        user = await storage.users.add(
            User(email="owner@example.com", hashed_password="x", first_name="Olive", last_name="Owner", title="Ms")
        )
    return user


def pnr_sequence(monkeypatch, *codes):
    codes = iter(codes)
    monkeypatch.setattr(booking_service, "generate_pnr", lambda: next(codes))


@pytest.mark.asyncio
async def test_pnr_collision_is_retried(provider, owner, settings, booking_payload, monkeypatch):
    pnr_sequence(monkeypatch, "AAAAAA", "AAAAAA", "BBBBBB")
    data = BookingCreate.model_validate(booking_payload(passengers=2))

    async with provider.session() as storage:
        first = await create_booking(storage, get_airport_directory(), settings, owner, data)
        second = await create_booking(storage, get_airport_directory(), settings, owner, data)

    assert first.pnr == "AAAAAA"
    assert second.pnr == "BBBBBB"

    async with provider.session() as storage:
        stored = await storage.bookings.get_by_pnr("BBBBBB")
        assert stored is not None
        # The discarded attempt left no passengers behind
        assert len(stored.passengers) == 2
        _, total = await storage.bookings.list(1, 10)
        assert total == 2


@pytest.mark.asyncio
async def test_pnr_attempts_are_bounded(provider, owner, settings, booking_payload, monkeypatch):
    pnr_sequence(monkeypatch, *["CCCCCC"] * (MAX_PNR_ATTEMPTS + 1))
    data = BookingCreate.model_validate(booking_payload())

    async with provider.session() as storage:
        await create_booking(storage, get_airport_directory(), settings, owner, data)
        with pytest.raises(ConflictError):
            await create_booking(storage, get_airport_directory(), settings, owner, data)


@pytest.mark.asyncio
async def test_conditional_transition(provider, owner, settings, booking_payload):
    data = BookingCreate.model_validate(booking_payload())
    async with provider.session() as storage:
        booking = await create_booking(storage, get_airport_directory(), settings, owner, data)

    async with provider.session() as storage:
        assert await storage.bookings.transition(booking.id, [PENDING], CONFIRMED) is True
        # Already confirmed: the second writer affects nothing
        assert await storage.bookings.transition(booking.id, [PENDING], CONFIRMED) is False

    async with provider.session() as storage:
        assert (await storage.bookings.get(booking.id)).status == CONFIRMED


@pytest.mark.asyncio
async def test_illegal_status_change_is_rejected(provider, owner, settings, booking_payload):
    data = BookingCreate.model_validate(booking_payload())
    async with provider.session() as storage:
        booking = await create_booking(storage, get_airport_directory(), settings, owner, data)
        # Confirmation belongs to the payment flow
        with pytest.raises(ConflictError):
            await update_booking_status(storage, booking.id, CONFIRMED)
        assert await storage.bookings.transition(booking.id, [PENDING], CONFIRMED) is True

        with pytest.raises(ConflictError):
            await update_booking_status(storage, booking.id, PENDING)
        with pytest.raises(ConflictError):
            await update_booking_status(storage, booking.id, CANCELLED)

        cancelled = await update_booking_status(storage, booking.id, CANCELLED, via_refund=True)
        assert cancelled.status == CANCELLED


@pytest.mark.asyncio
async def test_email_lookup_is_case_insensitive(provider, owner):
    async with provider.session() as storage:
        found = await storage.users.get_by_email("OWNER@Example.com")
    assert found is not None
    assert found.id == owner.id


@pytest.mark.asyncio
async def test_sql_startup_seeds_airports(make_settings):
    provider = build_storage_provider(make_settings())
    await provider.startup()
    # A second startup finds nothing missing
    await provider.startup()
    async with provider.session_factory() as db:
        count = await db.scalar(select(func.count(Airport.code)))
    await provider.shutdown()
    assert count == len(get_airport_directory())
