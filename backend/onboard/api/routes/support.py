"""
Support tickets for signed-in users.
"""

from fastapi import APIRouter, Depends, status

from onboard.api.deps import get_current_user, get_notifier, get_storage
from onboard.models import User
from onboard.schemas.support import (
    SupportTicketCreate,
    SupportTicketEnvelope,
    SupportTicketListResponse,
    SupportTicketResponse,
)
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher
from onboard.services.support_service import close_ticket, create_ticket, get_user_ticket

router = APIRouter(prefix="/support", tags=["Support"])


@router.post("/tickets", response_model=SupportTicketEnvelope, status_code=status.HTTP_201_CREATED)
async def create_ticket_endpoint(
    data: SupportTicketCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Open a support ticket; a confirmation email is sent."""
    ticket = await create_ticket(storage, notifier, user, data)
    return SupportTicketEnvelope(
        message="Support ticket created successfully",
        ticket=SupportTicketResponse.model_validate(ticket),
    )


@router.get("/tickets", response_model=SupportTicketListResponse)
async def list_tickets(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    tickets = await storage.support_tickets.list_for_user(user.id)
    return SupportTicketListResponse(tickets=[SupportTicketResponse.model_validate(t) for t in tickets])


@router.get("/tickets/{ticket_id}", response_model=SupportTicketEnvelope)
async def get_ticket(
    ticket_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    ticket = await get_user_ticket(storage, user, ticket_id)
    return SupportTicketEnvelope(ticket=SupportTicketResponse.model_validate(ticket))


@router.put("/tickets/{ticket_id}/close", response_model=SupportTicketEnvelope)
async def close_ticket_endpoint(
    ticket_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    ticket = await close_ticket(storage, user, ticket_id)
    await storage.commit()
    return SupportTicketEnvelope(
        message="Support ticket closed",
        ticket=SupportTicketResponse.model_validate(ticket),
    )
