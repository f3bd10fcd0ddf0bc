"""
Transactional email.

Every send is best-effort: failures are logged and counted, never raised,
so nothing here can change the outcome of a booking or a payment.
"""

from typing import Optional
from urllib.parse import urlencode

from onboard.core.config import Settings
from onboard.core.logging import get_logger
from onboard.core.metrics import record_email
from onboard.infrastructure.mailer import SmtpMailer
from onboard.models import Booking, SupportTicket, Transaction, User

logger = get_logger(__name__)

HTML_LAYOUT = """\
<html>
  <body style="font-family: Arial, sans-serif; color: #1f2937;">
    <div style="max-width: 600px; margin: 0 auto;">
      <h2 style="color: #1d4ed8;">OnboardTicket</h2>
      {body}
      <p style="font-size: 12px; color: #6b7280;">Questions? Write to {support}.</p>
    </div>
  </body>
</html>
"""


def _paragraphs(lines: list[str]) -> str:
    return "\n".join(f"<p>{line}</p>" for line in lines if line)


def _route(booking: Booking) -> str:
    return f"{booking.from_airport_code} → {booking.to_airport_code}"


class NotificationDispatcher:
    def __init__(self, settings: Settings, mailer: Optional[SmtpMailer] = None):
        self.enabled = settings.EMAIL_ENABLED
        self.client_url = settings.CLIENT_URL.rstrip("/")
        self.support_email = settings.SUPPORT_EMAIL
        self.mailer = mailer or SmtpMailer(settings)

    async def _dispatch(self, template: str, to_email: str, subject: str, lines: list[str]) -> bool:
        if not self.enabled:
            logger.debug("email_skipped", template=template, to=to_email)
            record_email(template, "skipped")
            return False

        html = HTML_LAYOUT.format(body=_paragraphs(lines), support=self.support_email)
        message = self.mailer.build_message(to_email, subject, "\n\n".join(lines), html)
        try:
            await self.mailer.send(message)
        except Exception as e:
            logger.error("email_send_failed", template=template, to=to_email, error=str(e))
            record_email(template, "error")
            return False

        logger.info("email_sent", template=template, to=to_email)
        record_email(template, "sent")
        return True

    def lookup_url(self, booking: Booking) -> str:
        query = urlencode({"pnr": booking.pnr, "email": booking.contact_email})
        return f"{self.client_url}/guest-booking-lookup?{query}"

    async def send_welcome_email(self, user: User) -> bool:
        return await self._dispatch(
            "welcome",
            user.email,
            "Welcome to OnboardTicket",
            [
                f"Hello {user.title} {user.last_name},",
                "Your account is ready. You can now search flights and manage your bookings.",
                f"Start here: {self.client_url}/dashboard",
            ],
        )

    async def send_verification_email(self, user: User, token: str) -> bool:
        link = f"{self.client_url}/verify-email?{urlencode({'token': token})}"
        return await self._dispatch(
            "verification",
            user.email,
            "Verify your email address",
            [
                f"Hello {user.first_name},",
                "Please confirm your email address by opening the link below.",
                link,
                "The link expires in 24 hours.",
            ],
        )

    async def send_password_reset_email(self, user: User, token: str, expires_minutes: int) -> bool:
        link = f"{self.client_url}/reset-password?{urlencode({'token': token})}"
        return await self._dispatch(
            "password_reset",
            user.email,
            "Reset your password",
            [
                f"Hello {user.first_name},",
                "We received a request to reset your OnboardTicket password.",
                link,
                f"The link expires in {expires_minutes} minutes and can be used once.",
                "If you did not ask for this, you can ignore this email.",
            ],
        )

    async def send_booking_confirmation(self, booking: Booking) -> bool:
        return await self._dispatch(
            "booking_confirmation",
            booking.contact_email,
            f"Booking received - {booking.pnr}",
            [
                f"Your booking reference is {booking.pnr}.",
                f"Route: {_route(booking)}, departing {booking.departure_date.isoformat()}.",
                f"Passengers: {len(booking.passengers)}. Total: {booking.total_amount:.2f} {booking.currency}.",
                "The reservation is held until payment is completed.",
                f"Manage it at {self.lookup_url(booking)}",
            ],
        )

    async def send_payment_confirmation(self, booking: Booking, transaction: Transaction) -> bool:
        ticket_line = f"Download your e-ticket: {self.client_url}{booking.ticket_url}" if booking.ticket_url else ""
        return await self._dispatch(
            "payment_confirmation",
            booking.contact_email,
            f"Payment confirmed - {booking.pnr}",
            [
                f"We received {transaction.amount:.2f} {transaction.currency} for booking {booking.pnr}.",
                f"Transaction: {transaction.reference} ({transaction.payment_method}).",
                f"Route: {_route(booking)}, departing {booking.departure_date.isoformat()}.",
                ticket_line,
            ],
        )

    async def send_refund_notification(self, booking: Booking, transaction: Transaction) -> bool:
        return await self._dispatch(
            "refund",
            booking.contact_email,
            f"Refund issued - {booking.pnr}",
            [
                f"Transaction {transaction.reference} for {transaction.amount:.2f} {transaction.currency} was refunded.",
                f"Booking {booking.pnr} has been cancelled.",
            ],
        )

    async def send_support_ticket_confirmation(self, user: User, ticket: SupportTicket) -> bool:
        return await self._dispatch(
            "support_ticket",
            user.email,
            f"Support ticket #{ticket.id} received",
            [
                f"Hello {user.first_name},",
                f'We received your request "{ticket.subject}" ({ticket.priority} priority).',
                "Our team will reply as soon as possible.",
            ],
        )
