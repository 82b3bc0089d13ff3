"""Helpers for turning engine errors into safe, short operator messages."""

import logging
import re
from typing import Any, Dict, Optional

# Patterns that might indicate sensitive data
SENSITIVE_PATTERNS = [
    r"password\s*[:=]\s*['\"]?([^'\"\s]+)['\"]?",
    r"secret\s*[:=]\s*['\"]?([^'\"\s]+)['\"]?",
    r"postgres(?:ql)?://[^:/]+:([^@]+)@",  # Database password in URL
    r"\b\w+/([^@\s/]+)@[\w.\-]+",  # Oracle user/password@connect_string
]

# Oracle and asyncpg both prefix the useful line; keep only the first one
_MULTILINE_SPLIT = re.compile(r"\r?\n")


def sanitize_error_message(message: str) -> str:
    """
    Sanitize error message to remove potentially sensitive data.

    Args:
        message: The error message to sanitize

    Returns:
        Sanitized error message with sensitive data masked
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: (
                m.group(0).replace(m.group(1), "***REDACTED***")
                if m.lastindex
                else m.group(0)
            ),
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def truncate_error_message(error: BaseException, max_length: int = 200) -> str:
    """
    Truncate long error messages to keep console output readable.

    Also sanitizes sensitive data from error messages.

    Args:
        error: The exception to format
        max_length: Maximum length of the error message

    Returns:
        Truncated and sanitized error message
    """
    error_str = sanitize_error_message(str(error))

    # Engine errors often carry a help URL or stack on following lines
    lines = [line for line in _MULTILINE_SPLIT.split(error_str) if line.strip()]
    if lines:
        error_str = lines[0].strip()

    if len(error_str) > max_length:
        error_str = error_str[:max_length] + "..."

    return error_str


def safe_log_error(
    logger_instance: logging.Logger,
    message: str,
    exc_info: bool = False,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Safely log an error message, ensuring no sensitive data is exposed.

    Args:
        logger_instance: The logger instance to use
        message: The error message (will be sanitized)
        exc_info: Whether to include exception info
        extra: Additional context to log
    """
    sanitized_extra = None
    if extra:
        sanitized_extra = {
            key: sanitize_error_message(value) if isinstance(value, str) else value
            for key, value in extra.items()
        }

    logger_instance.error(
        sanitize_error_message(message), exc_info=exc_info, extra=sanitized_extra
    )
