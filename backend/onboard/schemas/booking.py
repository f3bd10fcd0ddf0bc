"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field, model_validator

from onboard.schemas.common import CamelModel, Pagination
from onboard.schemas.user import Title
from onboard.services.airport_directory import AirportDirectory, get_airport_directory

BookingStatus = Literal["pending", "confirmed", "cancelled", "expired"]


class AirportRef(CamelModel):
    code: str = Field(..., min_length=3, max_length=3)
    name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class RouteCreate(CamelModel):
    origin: AirportRef = Field(..., alias="from")
    destination: AirportRef = Field(..., alias="to")
    departure_date: date
    return_date: Optional[date] = None
    trip_type: Literal["oneway", "roundtrip"] = "oneway"

    @model_validator(mode="after")
    def check_dates(self) -> "RouteCreate":
        if self.trip_type == "roundtrip" and self.return_date is None:
            raise ValueError("returnDate is required for roundtrip bookings")
        if self.return_date is not None and self.return_date < self.departure_date:
            raise ValueError("returnDate must not be before departureDate")
        if self.origin.code.upper() == self.destination.code.upper():
            raise ValueError("Origin and destination must differ")
        return self


class PassengerCreate(CamelModel):
    title: Title
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr


class BookingCreate(CamelModel):
    route: RouteCreate
    passengers: list[PassengerCreate] = Field(..., min_length=1, max_length=9)
    contact_email: EmailStr
    contact_phone: Optional[str] = Field(None, max_length=30)
    terms_accepted: bool
    # Quoted fare carried over from the search step; falls back to the
    # configured unit price when absent
    unit_price: Optional[float] = Field(None, gt=0, le=100000)

    @model_validator(mode="after")
    def check_terms(self) -> "BookingCreate":
        if not self.terms_accepted:
            raise ValueError("Terms and conditions must be accepted")
        return self


class BookingStatusUpdate(CamelModel):
    status: BookingStatus


class AirportSummary(CamelModel):
    code: str
    name: str
    city: str
    country: str


class RouteResponse(CamelModel):
    origin: AirportSummary = Field(..., alias="from")
    destination: AirportSummary = Field(..., alias="to")
    departure_date: date
    return_date: Optional[date] = None
    trip_type: str


class PassengerResponse(CamelModel):
    id: int
    title: str
    first_name: str
    last_name: str
    email: Optional[str] = None


class BookingResponse(CamelModel):
    id: int
    pnr: str
    status: str
    user_id: Optional[int] = None
    is_guest: bool
    route: RouteResponse
    passengers: list[PassengerResponse]
    passenger_count: int
    unit_price: float
    total_amount: float
    currency: str
    contact_email: str
    contact_phone: Optional[str] = None
    terms_accepted: bool
    ticket_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_booking(cls, booking, directory: Optional[AirportDirectory] = None) -> "BookingResponse":
        directory = directory or get_airport_directory()

        def summary(code: str) -> AirportSummary:
            airport = directory.get(code)
            if airport is None:
                return AirportSummary(code=code, name=code, city="", country="")
            return AirportSummary(code=airport.code, name=airport.name, city=airport.city, country=airport.country)

        return cls(
            id=booking.id,
            pnr=booking.pnr,
            status=booking.status,
            user_id=None if booking.is_guest else booking.user_id,
            is_guest=booking.is_guest,
            route=RouteResponse(
                origin=summary(booking.from_airport_code),
                destination=summary(booking.to_airport_code),
                departure_date=booking.departure_date,
                return_date=booking.return_date,
                trip_type=booking.trip_type,
            ),
            passengers=[PassengerResponse.model_validate(p) for p in booking.passengers],
            passenger_count=len(booking.passengers),
            unit_price=booking.unit_price,
            total_amount=booking.total_amount,
            currency=booking.currency,
            contact_email=booking.contact_email,
            contact_phone=booking.contact_phone,
            terms_accepted=booking.terms_accepted,
            ticket_url=booking.ticket_url,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class BookingEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    booking: BookingResponse


class BookingListResponse(CamelModel):
    success: bool = True
    bookings: list[BookingResponse]
    pagination: Optional[Pagination] = None


class DashboardStats(CamelModel):
    total_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    total_spent: float


class DashboardResponse(CamelModel):
    success: bool = True
    user: dict
    stats: DashboardStats
    recent_bookings: list[BookingResponse]
    upcoming_trips: list[BookingResponse]
