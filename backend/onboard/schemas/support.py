"""
Pydantic schemas for support tickets.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from onboard.schemas.common import CamelModel

TicketStatus = Literal["open", "in_progress", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high", "urgent"]
TicketCategory = Literal["booking", "payment", "technical", "general"]


class SupportTicketCreate(CamelModel):
    subject: str = Field(..., min_length=5, max_length=200)
    message: str = Field(..., min_length=10, max_length=2000)
    priority: TicketPriority = "medium"
    category: TicketCategory = "general"


class SupportTicketStatusUpdate(CamelModel):
    status: TicketStatus
    admin_response: Optional[str] = Field(None, max_length=2000)


class SupportTicketResponse(CamelModel):
    id: int
    user_id: int
    subject: str
    message: str
    category: str
    priority: str
    status: str
    admin_response: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SupportTicketEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    ticket: SupportTicketResponse


class SupportTicketListResponse(CamelModel):
    success: bool = True
    tickets: list[SupportTicketResponse]


class SupportStats(CamelModel):
    total: int
    by_status: dict[str, int]
    by_priority: dict[str, int]


class SupportStatsResponse(CamelModel):
    success: bool = True
    stats: SupportStats
