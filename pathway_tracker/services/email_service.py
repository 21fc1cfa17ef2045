"""
SMTP email service for member follow-ups.
"""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage

import structlog

from pathway_tracker.core.config import settings

logger = structlog.get_logger()


class EmailService:
    """
    Plain-text follow-up mail over SMTP

    An unset ``SMTP_HOST`` switches the service to simulation mode, where
    messages are logged instead of delivered.
    """

    def __init__(self) -> None:
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.smtp_from = settings.SMTP_FROM
        self.smtp_use_tls = settings.SMTP_USE_TLS
        self.smtp_use_ssl = settings.SMTP_USE_SSL
        self.smtp_timeout = settings.SMTP_TIMEOUT_SECONDS
        self.max_retries = max(settings.SMTP_MAX_RETRIES, 1)

    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_from)

    def _open_smtp(self) -> smtplib.SMTP:
        if self.smtp_use_ssl:
            return smtplib.SMTP_SSL(
                self.smtp_host,
                self.smtp_port,
                timeout=self.smtp_timeout,
                context=ssl.create_default_context(),
            )

        smtp = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.smtp_timeout)
        if self.smtp_use_tls:
            smtp.starttls(context=ssl.create_default_context())
        return smtp

    def _compose(self, to_email: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.smtp_from
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with self._open_smtp() as smtp:
            if self.smtp_user:
                smtp.login(self.smtp_user, self.smtp_password)
            smtp.send_message(message)

    def send_email(self, *, to_email: str, subject: str, body: str) -> None:
        """
        Deliver one message, making up to ``SMTP_MAX_RETRIES`` attempts

        Raises:
            RuntimeError: If every attempt failed
        """
        if not self.is_configured():
            logger.info("Email simulation mode, message not delivered", to=to_email, subject=subject)
            return

        message = self._compose(to_email, subject, body)
        errors = []
        for attempt in range(1, self.max_retries + 1):
            try:
                self._deliver(message)
            except (smtplib.SMTPException, OSError) as exc:
                errors.append(exc)
                logger.warning("Email attempt failed", to=to_email, attempt=attempt, error=str(exc))
                continue

            logger.info("Email sent", to=to_email, subject=subject, attempt=attempt)
            return

        raise RuntimeError(f"Failed to send email after {self.max_retries} attempts: {errors[-1]}")

    async def send_follow_up(self, *, to_email: str, subject: str, body: str) -> None:
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self.send_email, to_email=to_email, subject=subject, body=body)


email_service = EmailService()
