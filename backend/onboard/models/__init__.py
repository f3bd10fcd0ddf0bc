from onboard.models.user import User
from onboard.models.airport import Airport
from onboard.models.booking import Booking, Passenger
from onboard.models.transaction import Transaction
from onboard.models.support_ticket import SupportTicket

__all__ = ["User", "Airport", "Booking", "Passenger", "Transaction", "SupportTicket"]
