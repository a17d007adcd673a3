"""Infrastructure layer: persistence, tokens, email delivery and the HTTP API."""
