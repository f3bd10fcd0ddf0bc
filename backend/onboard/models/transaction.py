"""
Payment attempts against a booking.

A booking may collect several rows (failed attempts, then a success); only a
completed row proves payment.
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import relationship

from onboard.db.base import Base, TimestampMixin

PAYMENT_METHODS = ("card", "paypal", "stripe")
TRANSACTION_STATUSES = ("pending", "completed", "failed", "refunded")


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(40), unique=True, nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    payment_method = Column(String(10), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    stripe_payment_intent_id = Column(String(255), nullable=True)
    paypal_order_id = Column(String(255), nullable=True)
    paypal_payer_id = Column(String(255), nullable=True)
    payment_details = Column(JSON, nullable=True)
    failure_reason = Column(String(255), nullable=True)
    refund_reason = Column(String(500), nullable=True)

    booking = relationship("Booking", back_populates="transactions")

    __table_args__ = (
        CheckConstraint("payment_method IN ('card', 'paypal', 'stripe')", name="check_txn_method"),
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded')",
            name="check_txn_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, booking={self.booking_id}, status={self.status})>"
