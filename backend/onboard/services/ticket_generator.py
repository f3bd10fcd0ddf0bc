"""
PDF e-ticket generator with a guest-lookup QR code.

One file per booking, named after the PNR, under TICKETS_DIR; the app serves
that directory at /tickets. Rendering is a pure function of the persisted
booking, so regenerating simply overwrites the previous file.
"""

import asyncio
import io
import os
from typing import Optional
from urllib.parse import urlencode

import qrcode
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from onboard.core.config import Settings
from onboard.core.logging import get_logger
from onboard.db.base import utcnow
from onboard.models import Booking, Transaction
from onboard.services.airport_directory import AirportDirectory, get_airport_directory

logger = get_logger(__name__)

TICKETS_URL_PREFIX = "/tickets"

BRAND_BLUE = "#1D4ED8"
DARK = "#111827"
MUTED = "#6B7280"
LIGHT = "#EFF6FF"

IMPORTANT_INFORMATION = (
    "Arrive at the airport at least 2 hours before domestic and 3 hours before international departures.",
    "Carry a valid government-issued photo ID or passport matching the passenger name.",
    "Check-in closes 60 minutes before departure.",
    "Keep this e-ticket available on your phone or printed at all times.",
)


def build_qr_image(data: str) -> ImageReader:
    qr = qrcode.QRCode(version=None, box_size=8, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    buffer = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buffer)
    buffer.seek(0)
    return ImageReader(buffer)


class TicketGenerator:
    def __init__(self, settings: Settings, directory: Optional[AirportDirectory] = None):
        self.tickets_dir = settings.TICKETS_DIR
        self.client_url = settings.CLIENT_URL.rstrip("/")
        self.directory = directory or get_airport_directory()

    def path_for(self, pnr: str) -> str:
        return os.path.join(self.tickets_dir, f"{pnr}.pdf")

    def url_for(self, pnr: str) -> str:
        return f"{TICKETS_URL_PREFIX}/{pnr}.pdf"

    def lookup_url(self, booking: Booking) -> str:
        query = urlencode({"pnr": booking.pnr, "email": booking.contact_email})
        return f"{self.client_url}/guest-booking-lookup?{query}"

    async def generate(self, booking: Booking, transaction: Optional[Transaction] = None) -> str:
        """Render the ticket off the event loop and return its public URL."""
        await asyncio.to_thread(self.render, booking, transaction)
        logger.info("ticket_generated", pnr=booking.pnr, booking_id=booking.id)
        return self.url_for(booking.pnr)

    def delete(self, pnr: str) -> bool:
        path = self.path_for(pnr)
        if not os.path.exists(path):
            return False
        os.remove(path)
        logger.info("ticket_deleted", pnr=pnr)
        return True

    def _airport_label(self, code: str) -> tuple[str, str]:
        airport = self.directory.get(code)
        if airport is None:
            return code, ""
        return f"{airport.city} ({airport.code})", airport.name

    def render(self, booking: Booking, transaction: Optional[Transaction] = None) -> str:
        os.makedirs(self.tickets_dir, exist_ok=True)
        path = self.path_for(booking.pnr)

        c = canvas.Canvas(path, pagesize=A4)
        width, height = A4
        c.setTitle(f"E-Ticket {booking.pnr}")

        # Header band
        c.setFillColor(colors.HexColor(BRAND_BLUE))
        c.rect(0, height - 90, width, 90, fill=1, stroke=0)
        c.setFillColor(colors.white)
        c.setFont("Helvetica-Bold", 24)
        c.drawString(40, height - 50, "OnboardTicket")
        c.setFont("Helvetica", 11)
        c.drawString(40, height - 70, "E-TICKET RECEIPT")
        c.setFont("Helvetica-Bold", 16)
        c.drawRightString(width - 40, height - 50, booking.pnr)
        c.setFont("Helvetica", 9)
        c.drawRightString(width - 40, height - 66, "BOOKING REFERENCE")

        # Flight details
        y = height - 130
        origin, origin_name = self._airport_label(booking.from_airport_code)
        destination, destination_name = self._airport_label(booking.to_airport_code)

        c.setFillColor(colors.HexColor(DARK))
        c.setFont("Helvetica-Bold", 14)
        c.drawString(40, y, "Flight Details")
        y -= 28
        c.setFont("Helvetica-Bold", 18)
        c.drawString(40, y, origin)
        c.drawRightString(width - 180, y, destination)
        c.setFont("Helvetica", 9)
        c.setFillColor(colors.HexColor(MUTED))
        c.drawString(40, y - 14, origin_name)
        c.drawRightString(width - 180, y - 14, destination_name)

        y -= 40
        c.setFillColor(colors.HexColor(DARK))
        c.setFont("Helvetica", 10)
        trip = "Round trip" if booking.trip_type == "roundtrip" else "One way"
        c.drawString(40, y, f"Departure: {booking.departure_date.strftime('%a, %d %b %Y')}")
        if booking.return_date:
            c.drawString(40, y - 14, f"Return: {booking.return_date.strftime('%a, %d %b %Y')}")
        c.drawString(300, y, f"Trip type: {trip}")
        c.drawString(300, y - 14, f"Status: {booking.status.upper()}")

        # QR code back to the guest lookup page
        c.drawImage(build_qr_image(self.lookup_url(booking)), width - 150, height - 250, width=110, height=110)
        c.setFont("Helvetica", 7)
        c.setFillColor(colors.HexColor(MUTED))
        c.drawCentredString(width - 95, height - 262, "Scan to view your booking")

        # Passengers
        y -= 60
        c.setFillColor(colors.HexColor(DARK))
        c.setFont("Helvetica-Bold", 14)
        c.drawString(40, y, "Passengers")
        rows = [["#", "Name", "Email"]]
        for index, passenger in enumerate(booking.passengers, start=1):
            rows.append([
                str(index),
                f"{passenger.title} {passenger.first_name} {passenger.last_name}",
                passenger.email or "",
            ])
        table = Table(rows, colWidths=[30, 220, 265])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(BRAND_BLUE)),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONT", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONT", (0, 1), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor(LIGHT)]),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor(MUTED)),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
        ]))
        _, table_height = table.wrapOn(c, width, height)
        y -= 12 + table_height
        table.drawOn(c, 40, y)

        # Payment details
        y -= 36
        c.setFont("Helvetica-Bold", 14)
        c.drawString(40, y, "Payment Details")
        c.setFont("Helvetica", 10)
        y -= 18
        c.drawString(40, y, f"Fare: {booking.unit_price:.2f} {booking.currency} x {len(booking.passengers)}")
        c.drawString(300, y, f"Total paid: {booking.total_amount:.2f} {booking.currency}")
        if transaction is not None:
            y -= 14
            c.drawString(40, y, f"Method: {transaction.payment_method.upper()}")
            c.drawString(300, y, f"Transaction: {transaction.reference}")

        # Important information
        y -= 36
        c.setFont("Helvetica-Bold", 12)
        c.drawString(40, y, "Important Information")
        c.setFont("Helvetica", 9)
        for line in IMPORTANT_INFORMATION:
            y -= 14
            c.drawString(48, y, f"- {line}")

        # Footer
        c.setFont("Helvetica", 8)
        c.setFillColor(colors.HexColor(MUTED))
        c.drawString(40, 40, f"Contact: {booking.contact_email}")
        c.drawRightString(width - 40, 40, f"Issued {utcnow().strftime('%d %b %Y %H:%M UTC')}")

        c.showPage()
        c.save()
        return path
