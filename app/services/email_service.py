"""
OTP email delivery over SMTP.

smtplib is blocking; send_otp runs the SMTP conversation in a worker thread.
Delivery failures propagate: without the mail there is no way to finish sign-up.
"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import Settings
from app.services.otp_service import OTP_EXPIRY

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your OTP Code"

OTP_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">Your OTP Code</h2>
  <p>Your One-Time Password (OTP) is:</p>
  <div style="background-color: #f4f4f4; padding: 20px; text-align: center; margin: 20px 0;">
    <h1 style="color: #007bff; font-size: 32px; margin: 0; letter-spacing: 5px;">{otp}</h1>
  </div>
  <p>This code will expire in {minutes} minutes.</p>
  <p style="color: #666; font-size: 12px;">If you didn't request this code, please ignore this email.</p>
</div>
"""


class EmailNotConfiguredError(RuntimeError):
    pass


def render_otp_email(otp: str) -> str:
    return OTP_TEMPLATE.format(otp=otp, minutes=int(OTP_EXPIRY.total_seconds() // 60))


class EmailService:
    def __init__(self, settings: Settings) -> None:
        self.host = settings.email_host
        self.port = settings.email_port
        self.user = settings.email_user
        self.password = settings.email_password
        self.sender = settings.email_sender

    @property
    def configured(self) -> bool:
        return bool(self.user and self.sender)

    async def send_otp(self, email: str, otp: str) -> None:
        await self.send(to=email, subject=OTP_SUBJECT, html=render_otp_email(otp))

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.configured:
            raise EmailNotConfiguredError(
                "Email service not configured. Please set EMAIL_USER and EMAIL_PASSWORD environment variables."
            )
        msg = MIMEMultipart("alternative")
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))

        await asyncio.to_thread(self._deliver, to, msg.as_string())
        logger.info("Sent '%s' email to %s", subject, to)

    def _deliver(self, to: str, message: str) -> None:
        # Port 465 is implicit TLS; anything else upgrades with STARTTLS
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=30) as server:
                server.login(self.user, self.password or "")
                server.sendmail(self.sender, [to], message)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.starttls()
                server.login(self.user, self.password or "")
                server.sendmail(self.sender, [to], message)
