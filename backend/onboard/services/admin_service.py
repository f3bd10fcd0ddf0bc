"""
Administrative reporting and account moderation.
"""

from typing import Any

from onboard.core.exceptions import ForbiddenError, NotFoundError
from onboard.core.logging import get_logger
from onboard.models import User
from onboard.services.interfaces.storage import Storage

logger = get_logger(__name__)


async def get_stats(storage: Storage) -> dict[str, Any]:
    bookings = await storage.bookings.stats()
    active_users = await storage.users.count_active()
    confirmed = bookings["by_status"].get("confirmed", 0)
    return {
        "total_bookings": bookings["total"],
        "total_revenue": round(bookings["revenue"], 2),
        "active_users": active_users,
        "bookings_by_status": bookings["by_status"],
        "average_booking_value": round(bookings["revenue"] / confirmed, 2) if confirmed else 0.0,
    }


async def update_user_status(storage: Storage, admin: User, user_id: int, status: str) -> User:
    user = await storage.users.get(user_id)
    if user is None or user.is_guest:
        raise NotFoundError("User not found")
    if user.id == admin.id:
        raise ForbiddenError("Administrators cannot change their own status")

    previous = user.status
    user.status = status
    await storage.users.save(user)
    logger.info("user_status_changed", user_id=user.id, from_status=previous, to_status=status, admin_id=admin.id)
    return user
