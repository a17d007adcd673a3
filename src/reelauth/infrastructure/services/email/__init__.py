"""Email providers and template rendering."""

from reelauth.infrastructure.services.email.email_provider import EmailProvider
from reelauth.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from reelauth.infrastructure.services.email.template_renderer import TemplateRenderer

__all__ = ["EmailProvider", "SMTPProvider", "SMTPSettings", "TemplateRenderer"]
