"""
User accounts, including the seeded admin and the shared guest identity.

Emails are stored lower-cased so uniqueness is case-insensitive.
"""

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint
from sqlalchemy.orm import relationship

from onboard.db.base import Base, TimestampMixin

USER_TITLES = ("Mr", "Ms", "Mrs")
USER_STATUSES = ("active", "suspended", "banned")


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    title = Column(String(10), nullable=False, default="Mr")
    status = Column(String(20), nullable=False, default="active")
    is_admin = Column(Boolean, nullable=False, default=False)
    is_guest = Column(Boolean, nullable=False, default=False)
    email_verified = Column(Boolean, nullable=False, default=False)

    bookings = relationship("Booking", back_populates="user")

    __table_args__ = (
        CheckConstraint("title IN ('Mr', 'Ms', 'Mrs')", name="check_user_title"),
        CheckConstraint("status IN ('active', 'suspended', 'banned')", name="check_user_status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, status={self.status})>"
