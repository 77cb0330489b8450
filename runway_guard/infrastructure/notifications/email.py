"""SMTP email notifier for alerts and the weekly digest"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable, Optional

from runway_guard.config import settings
from runway_guard.domain.digest import FOOTER, format_weekly_digest
from runway_guard.domain.exceptions import NotificationDeliveryError
from runway_guard.domain.models import NotificationMessage, NotificationResult, Severity, WeeklyDigestData

SEVERITY_LABEL = {
    Severity.CRITICAL: "🚨 URGENT",
    Severity.WARNING: "⚠️ Alert",
    Severity.INFO: "ℹ️ Update",
}


def build_alert_email(sender: str, to: str, message: NotificationMessage) -> MIMEText:
    """Plain-text alert email with severity-coded subject"""
    body = message.body
    if message.action_url:
        body += f"\n\nView details: {message.action_url}"
    body += f"\n\n—\n{FOOTER}"

    msg = MIMEText(body, "plain", "utf-8")
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = f"{SEVERITY_LABEL[Severity(message.severity)]} {message.title}"
    return msg


def build_digest_email(sender: str, to: str, subject: str, text: str, html: str) -> MIMEMultipart:
    """multipart/alternative message with parallel text and HTML bodies"""
    msg = MIMEMultipart("alternative")
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


class EmailNotifier:
    """
    Sends email over SMTP.

    smtplib is blocking, so each send runs in a worker thread to keep the
    event loop free for the other channels.
    """

    channel = "email"

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_starttls: Optional[bool] = None,
        timeout: Optional[float] = None,
        dashboard_url: Optional[str] = None,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ):
        self.host = host if host is not None else settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.sender = sender or settings.smtp_sender
        self.use_starttls = settings.smtp_starttls if use_starttls is None else use_starttls
        self.timeout = timeout or settings.http_timeout_seconds
        self.dashboard_url = dashboard_url or f"{settings.app_base_url}/app"
        self.smtp_factory = smtp_factory

    def _deliver(self, to: str, msg) -> None:
        if not self.host:
            raise NotificationDeliveryError("Email transport not configured: set SMTP_HOST")

        try:
            with self.smtp_factory(self.host, self.port, timeout=self.timeout) as server:
                if self.use_starttls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(self.sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationDeliveryError(f"SMTP error: {e}") from e

    async def send(self, to: str, message: NotificationMessage) -> NotificationResult:
        """Send one alert email. Never raises."""
        try:
            await asyncio.to_thread(self._deliver, to, build_alert_email(self.sender, to, message))
            return NotificationResult(channel=self.channel, success=True)
        except Exception as e:
            return NotificationResult(channel=self.channel, success=False, error=str(e) or type(e).__name__)

    async def send_weekly_digest(self, to: str, data: WeeklyDigestData) -> NotificationResult:
        """Format and send the weekly digest as text + HTML. Never raises."""
        try:
            digest = format_weekly_digest(data, self.dashboard_url)
            msg = build_digest_email(self.sender, to, digest.subject, digest.body, digest.html)
            await asyncio.to_thread(self._deliver, to, msg)
            return NotificationResult(channel=self.channel, success=True)
        except Exception as e:
            return NotificationResult(channel=self.channel, success=False, error=str(e) or type(e).__name__)
