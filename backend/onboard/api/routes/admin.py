"""
Administrator endpoints. Every route requires an admin bearer token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from onboard.api.deps import get_directory, get_payments, get_storage, require_admin
from onboard.models import User
from onboard.schemas.admin import AdminStats, AdminStatsResponse
from onboard.schemas.booking import BookingEnvelope, BookingListResponse, BookingResponse, BookingStatus, BookingStatusUpdate
from onboard.schemas.common import Pagination
from onboard.schemas.payment import PaymentResponse, RefundRequest, TransactionListResponse, TransactionResponse, TransactionStatus
from onboard.schemas.support import (
    SupportStats,
    SupportStatsResponse,
    SupportTicketEnvelope,
    SupportTicketListResponse,
    SupportTicketResponse,
    SupportTicketStatusUpdate,
    TicketPriority,
    TicketStatus,
)
from onboard.schemas.user import UserEnvelope, UserListResponse, UserResponse, UserStatus, UserStatusUpdate
from onboard.services.admin_service import get_stats, update_user_status
from onboard.services.airport_directory import AirportDirectory
from onboard.services.booking_service import update_booking_status
from onboard.services.interfaces.storage import Storage
from onboard.services.payment_service import PaymentOrchestrator
from onboard.services.support_service import update_ticket_status

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=AdminStatsResponse)
async def admin_stats(storage: Storage = Depends(get_storage)):
    return AdminStatsResponse(stats=AdminStats(**await get_stats(storage)))


@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[UserStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    storage: Storage = Depends(get_storage),
):
    users, total = await storage.users.list(page, limit, status=status, search=search)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.put("/users/{user_id}/status", response_model=UserEnvelope)
async def change_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    admin: User = Depends(require_admin),
    storage: Storage = Depends(get_storage),
):
    """Activate, suspend or ban an account."""
    user = await update_user_status(storage, admin, user_id, payload.status)
    await storage.commit()
    return UserEnvelope(message="User status updated", user=UserResponse.model_validate(user))


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[BookingStatus] = Query(None),
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
):
    bookings, total = await storage.bookings.list(page, limit, status=status)
    return BookingListResponse(
        bookings=[BookingResponse.from_booking(b, directory) for b in bookings],
        pagination=Pagination.build(page, limit, total),
    )


@router.put("/bookings/{booking_id}/status", response_model=BookingEnvelope)
async def change_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    storage: Storage = Depends(get_storage),
    directory: AirportDirectory = Depends(get_directory),
):
    """
    Manual status override, restricted to legal transitions.
    Confirmed bookings are cancelled through a refund instead.
    """
    booking = await update_booking_status(storage, booking_id, payload.status)
    await storage.commit()
    return BookingEnvelope(
        message="Booking status updated",
        booking=BookingResponse.from_booking(booking, directory),
    )


@router.get("/payments", response_model=TransactionListResponse)
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[TransactionStatus] = Query(None),
    storage: Storage = Depends(get_storage),
):
    transactions, total = await storage.transactions.list(page, limit, status=status)
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/payments/{transaction_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    transaction_id: int,
    payload: Optional[RefundRequest] = None,
    storage: Storage = Depends(get_storage),
    payments: PaymentOrchestrator = Depends(get_payments),
    directory: AirportDirectory = Depends(get_directory),
):
    """Refund a completed transaction in full; its booking is cancelled."""
    payload = payload or RefundRequest()
    transaction, booking = await payments.refund(storage, transaction_id, payload.reason)
    return PaymentResponse(
        message="Refund processed successfully",
        transaction_id=transaction.reference,
        transaction=TransactionResponse.model_validate(transaction),
        booking=BookingResponse.from_booking(booking, directory),
    )


@router.get("/support/tickets", response_model=SupportTicketListResponse)
async def list_support_tickets(
    status: Optional[TicketStatus] = Query(None),
    priority: Optional[TicketPriority] = Query(None),
    storage: Storage = Depends(get_storage),
):
    tickets = await storage.support_tickets.list(status=status, priority=priority)
    return SupportTicketListResponse(tickets=[SupportTicketResponse.model_validate(t) for t in tickets])


@router.put("/support/tickets/{ticket_id}/status", response_model=SupportTicketEnvelope)
async def change_support_ticket_status(
    ticket_id: int,
    payload: SupportTicketStatusUpdate,
    storage: Storage = Depends(get_storage),
):
    ticket = await update_ticket_status(storage, ticket_id, payload)
    await storage.commit()
    return SupportTicketEnvelope(
        message="Support ticket updated",
        ticket=SupportTicketResponse.model_validate(ticket),
    )


@router.get("/support/stats", response_model=SupportStatsResponse)
async def support_stats(storage: Storage = Depends(get_storage)):
    return SupportStatsResponse(stats=SupportStats(**await storage.support_tickets.stats()))
