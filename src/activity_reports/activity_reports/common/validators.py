from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError

_HHMM_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_string(value, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value


def require_non_empty(value: str, field_name: str) -> str:
    value = require_string(value, field_name)
    if not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if len(require_string(value, field_name)) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_text(value: str, field_name: str, max_len: Optional[int] = None) -> str:
    value = require_non_empty(value, field_name)
    if max_len is not None:
        require_max_length(value, field_name, max_len)
    return value


def require_verbatim(value: str, field_name: str, max_len: Optional[int] = None) -> str:
    """Like ``require_text`` but hands back the value exactly as given."""
    require_non_empty(value, field_name)
    if max_len is not None:
        require_max_length(value, field_name, max_len)
    return value


def require_hhmm(value: str, field_name: str) -> str:
    """Validate a 24h ``HH:MM`` time and normalize it to two-digit hours."""
    v = require_string(value, field_name).strip()
    if not _HHMM_RE.match(v):
        raise ValidationError(f"{field_name} must be a valid time (HH:MM)")
    hours, minutes = v.split(":")
    return f"{int(hours):02d}:{minutes}"


def require_email(value: str, field_name: str, max_len: int) -> str:
    v = require_non_empty(value, field_name)
    if not _EMAIL_RE.match(v):
        raise ValidationError(f"{field_name} is not a valid email address")
    return require_max_length(v, field_name, max_len)


def require_date(value, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")
