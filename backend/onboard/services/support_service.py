"""
Support tickets raised by signed-in users and handled by administrators.
"""

from onboard.core.exceptions import ConflictError, NotFoundError
from onboard.core.logging import get_logger
from onboard.models import SupportTicket, User
from onboard.schemas.support import SupportTicketCreate, SupportTicketStatusUpdate
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher

logger = get_logger(__name__)


async def create_ticket(
    storage: Storage,
    notifier: NotificationDispatcher,
    user: User,
    data: SupportTicketCreate,
) -> SupportTicket:
    ticket = await storage.support_tickets.add(
        SupportTicket(
            user_id=user.id,
            subject=data.subject.strip(),
            message=data.message.strip(),
            category=data.category,
            priority=data.priority,
            status="open",
        )
    )
    await storage.commit()
    logger.info("support_ticket_created", ticket_id=ticket.id, user_id=user.id, priority=ticket.priority)

    await notifier.send_support_ticket_confirmation(user, ticket)
    return ticket


async def get_user_ticket(storage: Storage, user: User, ticket_id: int) -> SupportTicket:
    ticket = await storage.support_tickets.get(ticket_id)
    if ticket is None or ticket.user_id != user.id:
        raise NotFoundError("Support ticket not found")
    return ticket


async def close_ticket(storage: Storage, user: User, ticket_id: int) -> SupportTicket:
    ticket = await get_user_ticket(storage, user, ticket_id)
    if ticket.status == "closed":
        raise ConflictError("Support ticket is already closed")
    ticket.status = "closed"
    await storage.support_tickets.save(ticket)
    logger.info("support_ticket_closed", ticket_id=ticket.id, user_id=user.id)
    return ticket


async def update_ticket_status(storage: Storage, ticket_id: int, data: SupportTicketStatusUpdate) -> SupportTicket:
    ticket = await storage.support_tickets.get(ticket_id)
    if ticket is None:
        raise NotFoundError("Support ticket not found")

    ticket.status = data.status
    if data.admin_response is not None:
        ticket.admin_response = data.admin_response.strip()
    await storage.support_tickets.save(ticket)
    logger.info("support_ticket_updated", ticket_id=ticket.id, status=ticket.status)
    return ticket
