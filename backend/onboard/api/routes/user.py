"""
Signed-in user's dashboard and profile.
"""

from fastapi import APIRouter, Depends

from onboard.api.deps import get_current_user, get_directory, get_storage
from onboard.models import User
from onboard.models.booking import CONFIRMED, PENDING
from onboard.schemas.booking import BookingResponse, DashboardResponse, DashboardStats
from onboard.schemas.user import ProfileUpdate, UserEnvelope, UserResponse
from onboard.services.airport_directory import AirportDirectory
from onboard.services.auth_service import update_profile
from onboard.services.booking_service import get_user_bookings, upcoming_trips
from onboard.services.interfaces.storage import Storage

router = APIRouter(prefix="/user", tags=["User"])

RECENT_BOOKINGS = 5


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
):
    """Booking stats, recent bookings and upcoming confirmed trips."""
    bookings = await get_user_bookings(storage, user.id)
    confirmed = [b for b in bookings if b.status == CONFIRMED]

    stats = DashboardStats(
        total_bookings=len(bookings),
        confirmed_bookings=len(confirmed),
        pending_bookings=sum(1 for b in bookings if b.status == PENDING),
        total_spent=round(sum(b.total_amount for b in confirmed), 2),
    )
    return DashboardResponse(
        user=UserResponse.model_validate(user).model_dump(by_alias=True, mode="json"),
        stats=stats,
        recent_bookings=[BookingResponse.from_booking(b, directory) for b in bookings[:RECENT_BOOKINGS]],
        upcoming_trips=[BookingResponse.from_booking(b, directory) for b in upcoming_trips(bookings)],
    )


@router.put("/profile", response_model=UserEnvelope)
async def update_profile_endpoint(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    user = await update_profile(storage, user, data)
    await storage.commit()
    return UserEnvelope(message="Profile updated successfully", user=UserResponse.model_validate(user))
