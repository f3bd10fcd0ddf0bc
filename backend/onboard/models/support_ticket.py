from sqlalchemy import Column, Integer, String, Text, ForeignKey, CheckConstraint

from onboard.db.base import Base, TimestampMixin

TICKET_STATUSES = ("open", "in_progress", "resolved", "closed")
TICKET_PRIORITIES = ("low", "medium", "high", "urgent")
TICKET_CATEGORIES = ("booking", "payment", "technical", "general")


class SupportTicket(Base, TimestampMixin):
    __tablename__ = "support_tickets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, default="general")
    priority = Column(String(10), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="open")
    admin_response = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('open', 'in_progress', 'resolved', 'closed')",
            name="check_ticket_status",
        ),
        CheckConstraint("priority IN ('low', 'medium', 'high', 'urgent')", name="check_ticket_priority"),
    )

    def __repr__(self) -> str:
        return f"<SupportTicket(id={self.id}, status={self.status})>"
