from onboard.schemas.common import CamelModel


class AdminStats(CamelModel):
    total_bookings: int
    total_revenue: float
    active_users: int
    bookings_by_status: dict[str, int]
    average_booking_value: float


class AdminStatsResponse(CamelModel):
    success: bool = True
    stats: AdminStats
