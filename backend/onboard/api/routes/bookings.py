"""
Booking endpoints for signed-in users.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from onboard.api.deps import get_app_settings, get_current_user, get_directory, get_notifier, get_storage
from onboard.core.config import Settings
from onboard.models import User
from onboard.schemas.booking import BookingCreate, BookingEnvelope, BookingListResponse, BookingResponse
from onboard.services.airport_directory import AirportDirectory
from onboard.services.booking_service import cancel_booking, create_booking, get_user_booking, get_user_bookings
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
    notifier: NotificationDispatcher = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a pending booking.

    The PNR is unique; a colliding code is regenerated transparently.
    Payment is a separate step (POST /api/payments).
    """
    booking = await create_booking(storage, directory, settings, user, booking_data)
    await storage.commit()
    await notifier.send_booking_confirmation(booking)
    return BookingEnvelope(
        message="Booking created successfully",
        booking=BookingResponse.from_booking(booking, directory),
    )


@router.get("", response_model=BookingListResponse)
async def list_user_bookings(
    limit: Optional[int] = Query(None, ge=1, le=100),
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
):
    """Get all bookings for the authenticated user, newest first."""
    bookings = await get_user_bookings(storage, user.id, limit)
    return BookingListResponse(bookings=[BookingResponse.from_booking(b, directory) for b in bookings])


@router.get("/{booking_id}", response_model=BookingEnvelope)
async def get_booking_endpoint(
    booking_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
):
    booking = await get_user_booking(storage, user, booking_id)
    return BookingEnvelope(booking=BookingResponse.from_booking(booking, directory))


@router.put("/{booking_id}/cancel", response_model=BookingEnvelope)
async def cancel_booking_endpoint(
    booking_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
):
    """Cancel an unpaid booking. Paid bookings are cancelled by refund only."""
    booking = await cancel_booking(storage, user, booking_id)
    await storage.commit()
    return BookingEnvelope(
        message="Booking cancelled successfully",
        booking=BookingResponse.from_booking(booking, directory),
    )
