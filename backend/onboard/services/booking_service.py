"""
Booking service: creation, lookup and status changes.

PNR GENERATION
==============

A PNR is 6 characters drawn from A-Z0-9 (36^6, about 2.2 billion codes).
Collisions are rare but possible, so the store enforces uniqueness and we
retry with a fresh code on conflict, up to MAX_PNR_ATTEMPTS.

Booking and passengers are written in one insert; a failure leaves neither.

STATUS CHANGES
==============

Transitions follow BOOKING_TRANSITIONS and are applied with a conditional
update keyed on the status we observed. If another request moved the
booking first, the update affects nothing and we report a conflict instead
of overwriting its result.
"""

import secrets
import string
from datetime import date
from typing import Optional

from onboard.core.config import Settings
from onboard.core.exceptions import ConflictError, NotFoundError, UnknownAirportError, ValidationError
from onboard.core.logging import get_logger
from onboard.core.metrics import pnr_collisions, record_booking_attempt
from onboard.models import Booking, Passenger, User
from onboard.models.booking import CANCELLED, CONFIRMED, PENDING, can_transition
from onboard.schemas.booking import BookingCreate
from onboard.services.airport_directory import AirportDirectory
from onboard.services.interfaces.storage import DuplicatePNRError, Storage

logger = get_logger(__name__)

MAX_PNR_ATTEMPTS = 5
PNR_LENGTH = 6
PNR_ALPHABET = string.ascii_uppercase + string.digits


def generate_pnr() -> str:
    return "".join(secrets.choice(PNR_ALPHABET) for _ in range(PNR_LENGTH))


def quote_total(passenger_count: int, unit_price: float) -> float:
    return round(passenger_count * unit_price, 2)


def _build_booking(user: User, data: BookingCreate, pnr: str, unit_price: float, currency: str) -> Booking:
    route = data.route
    return Booking(
        user_id=user.id,
        is_guest=user.is_guest,
        pnr=pnr,
        status=PENDING,
        from_airport_code=route.origin.code.upper(),
        to_airport_code=route.destination.code.upper(),
        departure_date=route.departure_date,
        return_date=route.return_date if route.trip_type == "roundtrip" else None,
        trip_type=route.trip_type,
        unit_price=unit_price,
        total_amount=quote_total(len(data.passengers), unit_price),
        currency=currency,
        contact_email=data.contact_email.strip().lower(),
        contact_phone=data.contact_phone,
        terms_accepted=data.terms_accepted,
        passengers=[
            Passenger(
                title=p.title,
                first_name=p.first_name.strip(),
                last_name=p.last_name.strip(),
                email=p.email.strip().lower(),
            )
            for p in data.passengers
        ],
    )


async def create_booking(
    storage: Storage,
    directory: AirportDirectory,
    settings: Settings,
    user: User,
    data: BookingCreate,
) -> Booking:
    """
    Create a pending booking for `user` (the shared guest user for guest
    checkout). Both airport codes must exist in the directory.
    """
    origin = directory.get(data.route.origin.code)
    destination = directory.get(data.route.destination.code)
    if origin is None or destination is None:
        record_booking_attempt("rejected", guest=user.is_guest)
        logger.warning(
            "booking_rejected_unknown_airport",
            origin=data.route.origin.code,
            destination=data.route.destination.code,
        )
        raise UnknownAirportError()

    unit_price = data.unit_price or settings.FALLBACK_UNIT_PRICE

    for attempt in range(1, MAX_PNR_ATTEMPTS + 1):
        booking = _build_booking(user, data, generate_pnr(), unit_price, settings.CURRENCY)
        try:
            await storage.bookings.add(booking)
        except DuplicatePNRError:
            pnr_collisions.inc()
            logger.info("booking_retry", reason="pnr_collision", pnr=booking.pnr, attempt=attempt)
            continue

        record_booking_attempt("created", guest=user.is_guest)
        logger.info(
            "booking_created",
            booking_id=booking.id,
            pnr=booking.pnr,
            user_id=user.id,
            guest=user.is_guest,
            passengers=len(booking.passengers),
            total_amount=booking.total_amount,
            attempt=attempt,
        )
        return booking

    record_booking_attempt("rejected", guest=user.is_guest)
    logger.error("booking_failed_pnr_exhausted", attempts=MAX_PNR_ATTEMPTS)
    raise ConflictError("Could not allocate a booking reference. Please try again.")


async def get_guest_booking(storage: Storage, pnr: Optional[str], email: Optional[str]) -> Booking:
    """
    Look up a booking by PNR and contact email.

    PNR is compared upper-cased and email lower-cased, matching how both are
    stored. Any mismatch is reported the same way as an unknown PNR.
    """
    if not pnr or not email:
        raise ValidationError("PNR and email are required")

    booking = await storage.bookings.get_by_pnr(pnr.strip().upper())
    if booking is None or booking.contact_email != email.strip().lower():
        logger.info("guest_lookup_failed", pnr=pnr)
        raise NotFoundError("Booking not found or email does not match")
    return booking


async def get_user_booking(storage: Storage, user: User, booking_id: int) -> Booking:
    booking = await storage.bookings.get(booking_id)
    # Other users' bookings are reported as missing
    if booking is None or (booking.user_id != user.id and not user.is_admin):
        raise NotFoundError("Booking not found")
    return booking


async def get_user_bookings(storage: Storage, user_id: int, limit: Optional[int] = None) -> list[Booking]:
    """Get all bookings for a user, newest first."""
    return await storage.bookings.list_for_user(user_id, limit)


async def update_booking_status(
    storage: Storage,
    booking_id: int,
    new_status: str,
    via_refund: bool = False,
) -> Booking:
    """
    Move a booking to `new_status` if the transition is legal.

    confirmed -> cancelled is only allowed when driven by a refund, so a
    paid booking cannot be cancelled while its payment stays completed.
    Bookings never reach confirmed here: only a completed payment in
    PaymentOrchestrator confirms them.
    """
    booking = await storage.bookings.get(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")

    current = booking.status
    if new_status == CONFIRMED:
        raise ConflictError("Bookings are confirmed only by a completed payment")
    if not can_transition(current, new_status):
        raise ConflictError(f"Cannot change booking status from {current} to {new_status}")
    if current == CONFIRMED and new_status == CANCELLED and not via_refund:
        raise ConflictError("Confirmed bookings can only be cancelled through a refund")

    if not await storage.bookings.transition(booking_id, [current], new_status):
        logger.warning("booking_status_conflict", booking_id=booking_id, expected=current, target=new_status)
        raise ConflictError("Booking was modified by another request. Please retry.")

    logger.info("booking_status_changed", booking_id=booking_id, from_status=current, to_status=new_status)
    return await storage.bookings.get(booking_id)


async def cancel_booking(storage: Storage, user: User, booking_id: int) -> Booking:
    """Cancel an unpaid booking owned by the user."""
    booking = await get_user_booking(storage, user, booking_id)
    if booking.status != PENDING:
        raise ConflictError("Only pending bookings can be cancelled")
    return await update_booking_status(storage, booking.id, CANCELLED)


def upcoming_trips(bookings: list[Booking], today: Optional[date] = None, limit: int = 3) -> list[Booking]:
    today = today or date.today()
    trips = [b for b in bookings if b.status == CONFIRMED and b.departure_date >= today]
    return sorted(trips, key=lambda b: b.departure_date)[:limit]
