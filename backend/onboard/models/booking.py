"""
Booking and Passenger models.

Key design decisions:
- PNR carries a unique constraint; creation retries on collision
- Status only moves along BOOKING_TRANSITIONS; confirmation is applied with a
  conditional UPDATE so a booking is confirmed at most once
- Guest bookings point at the shared guest user and set is_guest
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, Date, Numeric, ForeignKey, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from onboard.db.base import Base, TimestampMixin

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
EXPIRED = "expired"

BOOKING_STATUSES = (PENDING, CONFIRMED, CANCELLED, EXPIRED)
TRIP_TYPES = ("oneway", "roundtrip")

# confirmed -> cancelled is only reachable through a refund
BOOKING_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED, EXPIRED},
    CONFIRMED: {CANCELLED},
}


def can_transition(current: str, new: str) -> bool:
    return new in BOOKING_TRANSITIONS.get(current, set())


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_guest = Column(Boolean, nullable=False, default=False)
    pnr = Column(String(6), nullable=False)
    status = Column(String(20), nullable=False, default=PENDING)
    from_airport_code = Column(String(3), ForeignKey("airports.code"), nullable=False)
    to_airport_code = Column(String(3), ForeignKey("airports.code"), nullable=False)
    departure_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    trip_type = Column(String(10), nullable=False, default="oneway")
    unit_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    total_amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    contact_email = Column(String(255), nullable=False, index=True)
    contact_phone = Column(String(30), nullable=True)
    terms_accepted = Column(Boolean, nullable=False, default=False)
    ticket_url = Column(String(255), nullable=True)

    user = relationship("User", back_populates="bookings")
    passengers = relationship(
        "Passenger",
        back_populates="booking",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Passenger.id",
    )
    transactions = relationship("Transaction", back_populates="booking")

    __table_args__ = (
        UniqueConstraint("pnr", name="uq_booking_pnr"),
        CheckConstraint("total_amount >= 0", name="check_booking_amount_non_negative"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'expired')",
            name="check_booking_status",
        ),
        CheckConstraint("trip_type IN ('oneway', 'roundtrip')", name="check_booking_trip_type"),
    )

    @property
    def passenger_count(self) -> int:
        return len(self.passengers)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, pnr={self.pnr}, status={self.status})>"


class Passenger(Base, TimestampMixin):
    __tablename__ = "passengers"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(10), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)

    booking = relationship("Booking", back_populates="passengers")

    def __repr__(self) -> str:
        return f"<Passenger(id={self.id}, booking={self.booking_id})>"
