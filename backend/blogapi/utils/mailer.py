"""SMTP mail transport"""
import smtplib
from email.message import EmailMessage
from typing import Optional

from blogapi.config import Settings
from blogapi.errors import UpstreamError
from blogapi.utils.logger import logger


class Mailer:
    """Plain-text mail over SMTP (STARTTLS unless disabled).

    Each message opens its own connection; ``timeout`` bounds connect and I/O so
    a stalled server cannot hold a request open indefinitely.
    """

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_tls: bool = True,
        timeout: int = 10,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            host=settings.mail_host,
            port=settings.mail_port,
            username=settings.MAIL_USER,
            password=settings.MAIL_PASSWORD,
            sender=settings.MAIL_FROM,
            use_tls=settings.MAIL_USE_TLS,
            timeout=settings.MAIL_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.sender)

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            server.starttls()
        if self.username and self.password:
            server.login(self.username, self.password)
        return server

    def verify_connection(self) -> bool:
        """Open and close a connection; logs the outcome, never raises."""
        if not self.is_configured:
            logger.warning("Mail transport not configured")
            return False
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Error with mail transporter", extra={"error": str(exc)})
            return False
        logger.info("Mail transporter configured successfully")
        return True

    def send_mail(self, to: str, subject: str, text: str) -> None:
        """Send a plain-text message.

        Raises:
            UpstreamError: transport not configured or delivery failed.
        """
        if not self.is_configured:
            raise UpstreamError("Mail transport is not configured")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)

        try:
            with self._connect() as server:
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise UpstreamError(f"Mail delivery failed: {exc}") from exc

        logger.info("Email sent successfully", extra={"action": "send_mail"})
