"""Jinja2 template renderer for outgoing emails.

Provides safe template rendering with HTML escaping and error handling.
"""

from jinja2 import StrictUndefined, TemplateSyntaxError, UndefinedError
from jinja2.sandbox import SandboxedEnvironment

from reelauth.core.logging import get_logger

logger = get_logger(__name__)

VERIFICATION_SUBJECT = "Verify your {{ app_name }} account"

VERIFICATION_HTML = """\
<p>Hi {{ name }},</p>
<p>Thanks for signing up to {{ app_name }}. Please confirm your email address:</p>
<p><a href="{{ verification_url }}">Verify my email</a></p>
<p>If the link does not work, use this token: <code>{{ token }}</code></p>
"""

VERIFICATION_TEXT = """\
Hi {{ name }},

Thanks for signing up to {{ app_name }}. Please confirm your email address:

{{ verification_url }}

If the link does not work, use this token: {{ token }}
"""


class TemplateRenderer:
    """Jinja2 template renderer.

    Uses a sandboxed environment to prevent code execution in templates.
    Missing variables are an error rather than an empty string.
    """

    def __init__(self) -> None:
        """Initialize the template renderer with sandboxed environment."""
        self.env = SandboxedEnvironment(
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        # Plain-text bodies and subjects must not be HTML-escaped
        self.text_env = SandboxedEnvironment(
            autoescape=False,
            undefined=StrictUndefined,
        )

    def render(self, template_string: str, variables: dict[str, str], *, html: bool = True) -> str:
        """Render a template string with variables.

        Raises:
            TemplateSyntaxError: If template syntax is invalid.
            UndefinedError: If a required variable is missing.
        """
        env = self.env if html else self.text_env
        try:
            return env.from_string(template_string).render(**variables)
        except TemplateSyntaxError as e:
            logger.error("Template syntax error", error=str(e), line=e.lineno)
            raise
        except UndefinedError as e:
            logger.error("Undefined variable in template", error=str(e))
            raise

    def render_verification_email(self, variables: dict[str, str]) -> tuple[str, str, str]:
        """Render subject, HTML body and text body of the verification email."""
        return (
            self.render(VERIFICATION_SUBJECT, variables, html=False),
            self.render(VERIFICATION_HTML, variables),
            self.render(VERIFICATION_TEXT, variables, html=False),
        )
