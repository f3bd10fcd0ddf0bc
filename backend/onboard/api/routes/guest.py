"""
Guest checkout: book without an account, look up by PNR and contact email.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from onboard.api.deps import get_app_settings, get_directory, get_notifier, get_storage
from onboard.core.config import Settings
from onboard.schemas.booking import BookingCreate, BookingEnvelope, BookingResponse
from onboard.services.airport_directory import AirportDirectory
from onboard.services.auth_service import get_guest_user
from onboard.services.booking_service import create_booking, get_guest_booking
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher

router = APIRouter(prefix="/guest", tags=["Guest"])


@router.post("/bookings", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
async def create_guest_booking(
    booking_data: BookingCreate,
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
    notifier: NotificationDispatcher = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    """Create a pending booking owned by the shared guest identity."""
    guest = await get_guest_user(storage, settings)
    booking = await create_booking(storage, directory, settings, guest, booking_data)
    await storage.commit()
    await notifier.send_booking_confirmation(booking)
    return BookingEnvelope(
        message="Guest booking created successfully",
        booking=BookingResponse.from_booking(booking, directory),
    )


@router.get("/bookings/{pnr}", response_model=BookingEnvelope)
async def lookup_guest_booking(
    pnr: str,
    email: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
):
    """Find a booking by PNR; the contact email must match."""
    booking = await get_guest_booking(storage, pnr, email)
    return BookingEnvelope(booking=BookingResponse.from_booking(booking, directory))
