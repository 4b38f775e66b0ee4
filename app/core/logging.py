"""
Logging utilities for the OAuth gateway.

Provides a consistent logging format and keeps credentials out of log output.
"""

import logging
import re
import sys

_SECRET_PATTERN = re.compile(
    r"(?P<key>access_token|refresh_token|client_secret)(?P<sep>['\"]?\s*[:=]\s*['\"]?)[^\s'\"&,}]+"
)


class SecretRedactingFilter(logging.Filter):
    """Mask token and secret values in rendered log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _SECRET_PATTERN.sub(r"\g<key>\g<sep>***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    root = logging.getLogger()
    for handler in root.handlers:
        if not any(isinstance(f, SecretRedactingFilter) for f in handler.filters):
            handler.addFilter(SecretRedactingFilter())


__all__ = ["SecretRedactingFilter", "configure_logging"]
