"""ReelAuth - email/password authentication with email verification.

Registration, login, logout and a debounced email-verification flow
served over a FastAPI HTTP API.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
