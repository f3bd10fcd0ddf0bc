"""
SMTP transport for transactional email.
"""

from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from onboard.core.config import Settings


class SmtpMailer:
    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME or None
        self.password = settings.SMTP_PASSWORD or None
        self.use_tls = settings.SMTP_USE_TLS
        self.sender = settings.EMAIL_FROM
        self.timeout = settings.PROVIDER_TIMEOUT_SECONDS

    def build_message(self, to_email: str, subject: str, text: str, html: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    async def send(self, message: EmailMessage) -> None:
        """Deliver one message. Errors propagate; callers decide what to swallow."""
        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            start_tls=self.use_tls,
            username=self.username,
            password=self.password,
            timeout=self.timeout,
        )
