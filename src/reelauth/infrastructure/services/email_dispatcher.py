"""Outbound email dispatcher.

Verification emails are handed to an in-process queue and delivered by an
independent worker task. Enqueueing never fails the caller: the state
change that produced the email (a stored verification token) is already
committed, and a delivery failure is only logged.
"""

import asyncio
from dataclasses import dataclass
from urllib.parse import urlencode

from reelauth.core.config import Settings
from reelauth.core.logging import get_logger
from reelauth.infrastructure.services.email.email_provider import EmailProvider
from reelauth.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from reelauth.infrastructure.services.email.template_renderer import TemplateRenderer

logger = get_logger(__name__)


@dataclass(frozen=True)
class VerificationEmail:
    """A verification email waiting to be delivered."""

    to: str
    name: str
    token: str
    verification_url: str


class EmailDispatcher:
    """Queue-backed sender for verification emails."""

    def __init__(
        self,
        provider: EmailProvider | None,
        *,
        app_name: str = "ReelAuth",
        app_url: str = "http://localhost:3000",
        from_email: str = "no-reply@reelauth.local",
        from_name: str = "ReelAuth",
        renderer: TemplateRenderer | None = None,
        max_queue_size: int = 1000,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            provider: Delivery backend. None disables delivery (messages are
                logged and dropped).
            app_name: Product name used in email copy.
            app_url: Frontend base URL for the verification link.
            from_email: Sender address.
            from_name: Sender display name.
            renderer: Template renderer; a default one is created if omitted.
            max_queue_size: Maximum number of undelivered messages.
        """
        self.provider = provider
        self.app_name = app_name
        self.app_url = app_url
        self.from_email = from_email
        self.from_name = from_name
        self.renderer = renderer or TemplateRenderer()
        self._queue: asyncio.Queue[VerificationEmail] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailDispatcher":
        """Create a dispatcher using SMTP when it is configured."""
        smtp_settings = SMTPSettings.from_settings(settings)
        provider = SMTPProvider(smtp_settings) if smtp_settings else None
        return cls(
            provider,
            app_name=settings.app_name,
            app_url=settings.app_url,
            from_email=settings.email_from_address,
            from_name=settings.email_from_name,
        )

    @property
    def pending(self) -> int:
        """Number of messages waiting for delivery."""
        return self._queue.qsize()

    def build_verification_url(self, token: str) -> str:
        """Build the link the user follows to verify their email."""
        return f"{self.app_url.rstrip('/')}/verify-email?{urlencode({'token': token})}"

    def send_verification_email(self, email: str, name: str, token: str) -> None:
        """Queue a verification email for delivery.

        Never raises; a full queue drops the message with an error log.
        """
        message = VerificationEmail(
            to=email,
            name=name,
            token=token,
            verification_url=self.build_verification_url(token),
        )
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.error("Email queue full, verification email dropped", email=email)
            return
        logger.debug("Verification email queued", email=email, pending=self.pending)

    async def deliver(self, message: VerificationEmail) -> bool:
        """Render and send one message.

        Returns:
            True if the provider accepted the message.
        """
        if self.provider is None:
            logger.info(
                "Email delivery disabled, verification email not sent",
                email=message.to,
                verification_url=message.verification_url,
            )
            return False

        try:
            subject, html_body, text_body = self.renderer.render_verification_email(
                {
                    "app_name": self.app_name,
                    "name": message.name,
                    "token": message.token,
                    "verification_url": message.verification_url,
                }
            )
            sent = await self.provider.send_email(
                to=message.to,
                subject=subject,
                html_body=html_body,
                text_body=text_body,
                from_email=self.from_email,
                from_name=self.from_name,
            )
        except Exception as e:
            logger.error("Verification email delivery failed", email=message.to, error=str(e))
            return False

        if sent:
            logger.info("Verification email sent", email=message.to)
        else:
            logger.error("Verification email rejected by provider", email=message.to)
        return sent

    async def drain(self) -> int:
        """Deliver every queued message now.

        Returns:
            Number of messages processed.
        """
        processed = 0
        while True:
            try:
                message = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return processed
            try:
                await self.deliver(message)
            finally:
                self._queue.task_done()
            processed += 1

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self.deliver(message)
            except Exception:
                logger.exception("Email worker failed to process message", email=message.to)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        """Start the background delivery worker."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="email-dispatcher")
            logger.info("Email dispatcher started", delivery_enabled=self.provider is not None)

    async def stop(self) -> None:
        """Stop the worker after delivering what is left in the queue."""
        if self._worker is not None:
            if not self._worker.done():
                await self._queue.join()
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        await self.drain()
        logger.info("Email dispatcher stopped")
