"""Sensitive data sanitization for logging.

Producer records carry a personal tax identifier (CPF) or a company one
(CNPJ). Those values, together with the usual credentials, must never reach
the logs in clear text. This module redacts them from error context, log
extras and SQL parameters before they are written.

Sanitization is applied at logging time only; stored data and API responses
are unchanged.
"""

from __future__ import annotations

import re
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from src.core.config import get_settings

SanitizableValue = (
    str | int | float | bool | None | dict[str, Any] | list[Any] | tuple[Any, ...]
)

REDACTED = "[REDACTED]"

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|secret|token|api[_-]?key|authorization|credential|"
    r"cpf|cnpj|tax[_-]?id|taxid)",
    re.IGNORECASE,
)

MAX_DEPTH: Final[int] = 10

# Number of trailing digits kept visible when masking a tax identifier
TAX_ID_VISIBLE_DIGITS: Final[int] = 2


class _SensitiveFieldsState:
    """Sensitive fields installed by the running application."""

    def __init__(self) -> None:
        self.fields: list[str] | None = None


_sensitive_fields = _SensitiveFieldsState()


def configure_sensitive_fields(fields: list[str] | None) -> None:
    """Install the sensitive fields of the application's own settings.

    Until this is called (or after it is called with None), the fields come
    from the global :func:`get_settings`.

    Args:
        fields: Field names to redact, or None to fall back to the settings.
    """
    _sensitive_fields.fields = list(fields) if fields is not None else None


@lru_cache(maxsize=1)
def _settings_sensitive_fields() -> list[str]:
    settings = get_settings()
    return settings.log_config.sensitive_fields


def _get_sensitive_fields() -> list[str]:
    """Get the sensitive fields installed by the app, else from settings."""
    if _sensitive_fields.fields is not None:
        return _sensitive_fields.fields
    return _settings_sensitive_fields()


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Checks against both the default pattern and the configured
    sensitive fields list (case-insensitive substring match).

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    field_lower = field_name.lower()
    return any(
        sensitive_field.lower() in field_lower
        for sensitive_field in _get_sensitive_fields()
    )


def mask_tax_id(tax_id: str) -> str:
    """Mask a CPF/CNPJ keeping only its check digits visible.

    Args:
        tax_id: The identifier, formatted or not.

    Returns:
        str: The identifier with every digit but the last two replaced by ``*``.

    Examples:
        >>> mask_tax_id("529.982.247-25")
        '***.***.***-25'
    """
    total_digits = sum(char.isdigit() for char in tax_id)
    hidden = total_digits - TAX_ID_VISIBLE_DIGITS
    masked = []
    for char in tax_id:
        if char.isdigit() and hidden > 0:
            masked.append("*")
            hidden -= 1
        else:
            masked.append(char)
    return "".join(masked)


def sanitize_value(
    value: SanitizableValue, field_name: str = "", depth: int = 0
) -> SanitizableValue:
    """Sanitize a value if it appears to be sensitive.

    Nested dicts, lists and tuples are walked up to MAX_DEPTH.

    Args:
        value: The value to potentially sanitize.
        field_name: The field name for context.
        depth: Current recursion depth.

    Returns:
        SanitizableValue: Sanitized value or original if not sensitive.
    """
    if depth > MAX_DEPTH:
        return REDACTED

    if field_name and is_sensitive_field(field_name):
        return REDACTED

    if isinstance(value, dict):
        return {k: sanitize_value(v, str(k), depth + 1) for k, v in value.items()}

    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1) for item in value]

    if isinstance(value, tuple):
        return tuple(sanitize_value(item, "", depth + 1) for item in value)

    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive values redacted."""
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Create sanitized error context for logging.

    Args:
        error: The exception to create context for.
        context: Additional context to include (will be sanitized).

    Returns:
        dict[str, Any]: Sanitized error context safe for logging.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        error_context.update(sanitize_dict(context))

    # Domain errors carry their own context dict
    error_details = getattr(error, "context", None)
    if isinstance(error_details, dict) and error_details:
        error_context["error_details"] = sanitize_dict(error_details)

    return error_context


def sanitize_sql_params(params: object) -> object:
    """Sanitize SQL query parameters for safe logging.

    Named parameters are sanitized by key. Positional parameters carry no
    names, so they are redacted as a whole.

    Args:
        params: SQL query parameters in the format SQLAlchemy passed them.

    Returns:
        object: Sanitized parameters, or REDACTED when they cannot be inspected.
    """
    if params is None:
        return None

    if isinstance(params, dict):
        return sanitize_dict(params)

    return REDACTED
