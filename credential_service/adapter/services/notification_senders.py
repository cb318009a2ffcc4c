"""
Notification Senders

Adapters that deliver password reset tokens to users.
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Any, Dict, Optional

from credential_service.app.services.notification_sender import (
    DeliveryResult,
    INotificationSender,
)
from credential_service.domain.errors import NotificationFailure

logger = logging.getLogger(__name__)


class LoggingNotificationSender(INotificationSender):
    """Development sender: records the delivery without sending anything"""

    async def send(
        self, address: str, token: str, context: Dict[str, Any]
    ) -> DeliveryResult:
        # The token itself is never written to logs
        logger.info(
            f"Password reset notification for {context.get('username')} "
            f"to {address} (no transport configured)"
        )
        return DeliveryResult(delivered=True, detail="logged")


class SmtpNotificationSender(INotificationSender):
    """
    SMTP sender using the standard library client.

    smtplib is blocking, so delivery runs in a worker thread; the caller
    bounds it with its own timeout.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _render(self, address: str, token: str, context: Dict[str, Any]) -> EmailMessage:
        reset_link = f"{context['reset_url']}?token={token}"

        msg = EmailMessage()
        msg["Subject"] = "Password Reset Request"
        msg["From"] = self.sender
        msg["To"] = address
        msg.set_content(
            f"Hello {context.get('username', '')},\n\n"
            f"You requested to reset your password. Use the link below to proceed:\n\n"
            f"{reset_link}\n\n"
            f"This link expires at {context.get('expires_at')} UTC.\n\n"
            f"If you didn't request this, please ignore this email."
        )
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(msg)

    async def send(
        self, address: str, token: str, context: Dict[str, Any]
    ) -> DeliveryResult:
        msg = self._render(address, token, context)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationFailure(f"SMTP delivery to {address} failed: {exc}") from exc

        return DeliveryResult(delivered=True, detail=f"smtp:{self.host}")
