"""SMTP email provider implementation.

Uses aiosmtplib for asynchronous email sending via SMTP.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from pydantic import BaseModel, ConfigDict

from reelauth.core.config import Settings
from reelauth.core.logging import get_logger
from reelauth.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class SMTPSettings(BaseModel):
    """Configuration settings for the SMTP provider."""

    model_config = ConfigDict(from_attributes=True)

    host: str
    port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = True
    use_ssl: bool = False
    from_email: str
    from_name: str = "ReelAuth"
    reply_to: Optional[str] = None
    timeout: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["SMTPSettings"]:
        """Build SMTP settings from app settings, or None if SMTP is not configured."""
        if not settings.smtp_host:
            return None
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            use_ssl=settings.smtp_use_ssl,
            from_email=settings.email_from_address,
            from_name=settings.email_from_name,
            timeout=settings.smtp_timeout,
        )


class SMTPProvider(EmailProvider):
    """SMTP email provider implementation."""

    def __init__(self, settings: SMTPSettings) -> None:
        """Initialize the SMTP provider.

        Args:
            settings: SMTP configuration settings.
        """
        self.settings = settings

    def _build_message(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_email: str,
        from_name: str,
        reply_to: Optional[str],
    ) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{from_name or self.settings.from_name} <{from_email or self.settings.from_email}>"
        message["To"] = to

        reply_addr = reply_to or self.settings.reply_to
        if reply_addr:
            message["Reply-To"] = reply_addr

        message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))
        return message

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_email: str,
        from_name: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send an email via SMTP.

        Raises:
            Exception: If SMTP connection or sending fails.
        """
        message = self._build_message(
            to, subject, html_body, text_body, from_email, from_name, reply_to
        )

        try:
            async with aiosmtplib.SMTP(
                hostname=self.settings.host,
                port=self.settings.port,
                use_tls=self.settings.use_ssl,  # aiosmtplib uses use_tls for SSL/TLS on connection
                start_tls=self.settings.use_tls and not self.settings.use_ssl,
                timeout=self.settings.timeout,
            ) as smtp:
                if self.settings.username:
                    await smtp.login(self.settings.username, self.settings.password)
                await smtp.send_message(message)
            return True
        except Exception as e:
            logger.error("Failed to send email via SMTP", host=self.settings.host, error=str(e))
            raise
