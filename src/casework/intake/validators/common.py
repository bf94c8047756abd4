"""Built-in field validators.

Every validator is a callable ``(value, **params) -> FieldError | None``
registered by name in :data:`VALIDATORS`. Format validators accept an
empty value; pair them with ``required`` when the field is mandatory.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Callable

from casework.core.types import ErrorKind
from casework.intake.models import FieldError
from casework.intake.validators.documents import (
    is_valid_cpf,
    is_valid_nis,
    is_valid_voter_registration,
)

# Registry of validator functions: name -> callable(value, **params) -> FieldError | None
VALIDATORS: dict[str, Callable[..., FieldError | None]] = {}

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def register(name: str):
    """Decorator to register a validator function."""
    def decorator(fn):
        VALIDATORS[name] = fn
        return fn
    return decorator


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_date(value: Any) -> date | None:
    """Parse an ISO date, ignoring any time or UTC offset component."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def age_on(birth_date: date, reference: date) -> int:
    """Full years between *birth_date* and *reference*."""
    years = reference.year - birth_date.year
    if (reference.month, reference.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def is_valid_name(name: str, require_surname: bool = False) -> bool:
    trimmed = (name or "").strip()
    if len(trimmed) < 3:
        return False
    if trimmed.isdigit():
        return False
    if re.fullmatch(r"(\w)\1+", trimmed):
        return False
    if require_surname and len(trimmed.split()) < 2:
        return False
    return True


def is_meaningful_text(text: str) -> bool:
    """Reject strings that open with six or more copies of one character."""
    trimmed = (text or "").strip()
    if not trimmed:
        return True
    return re.match(r"(\S)\1{5,}", trimmed) is None


def is_valid_email(email: str) -> bool:
    if not (email or "").strip():
        return True
    return _EMAIL_PATTERN.fullmatch(email) is not None


def is_date_not_future(value: Any, today: date | None = None) -> bool:
    parsed = parse_date(value)
    if parsed is None:
        return False
    return parsed <= (today or date.today())


@register("required")
def validate_required(value: Any, message: str = "This field is required.", **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return FieldError(kind=ErrorKind.REQUIRED, message=message)
    return None


@register("selected")
def validate_selected(value: Any, message: str = "Please make a selection.", **_kwargs: Any) -> FieldError | None:
    if not value:
        return FieldError(kind=ErrorKind.REQUIRED, message=message)
    return None


@register("name")
def validate_name(value: Any, require_surname: bool = False, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if isinstance(require_surname, str):
        require_surname = require_surname.lower() in ("true", "1", "yes")
    if not is_valid_name(value, require_surname=require_surname):
        message = "Please enter a valid first and last name." if require_surname else "Please enter a valid name."
        return FieldError(kind=ErrorKind.FORMAT, message=message)
    return None


@register("meaningful_text")
def validate_meaningful_text(value: Any, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if not is_meaningful_text(value):
        return FieldError(kind=ErrorKind.FORMAT, message="Please enter a meaningful value.")
    return None


@register("max_length")
def validate_max_length(value: Any, limit: int = 20, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if len(str(value)) > int(limit):
        return FieldError(kind=ErrorKind.RANGE, message=f"Must be {limit} characters or fewer.")
    return None


@register("email")
def validate_email(value: Any, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if not is_valid_email(value):
        return FieldError(kind=ErrorKind.FORMAT, message="Please enter a valid email address.")
    return None


@register("cpf")
def validate_cpf(value: Any, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if not is_valid_cpf(value):
        return FieldError(kind=ErrorKind.FORMAT, message="Invalid CPF.")
    return None


@register("nis")
def validate_nis(value: Any, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if not is_valid_nis(value):
        return FieldError(kind=ErrorKind.FORMAT, message="Invalid NIS.")
    return None


@register("voter_registration")
def validate_voter_registration(value: Any, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if not is_valid_voter_registration(value):
        return FieldError(kind=ErrorKind.FORMAT, message="Invalid voter registration number.")
    return None


@register("past_date")
def validate_past_date(value: Any, today: date | None = None, **_kwargs: Any) -> FieldError | None:
    if _is_blank(value):
        return None
    if parse_date(value) is None:
        return FieldError(kind=ErrorKind.FORMAT, message="Please enter a valid date in YYYY-MM-DD format.")
    if not is_date_not_future(value, today=today):
        return FieldError(kind=ErrorKind.RANGE, message="Date cannot be in the future.")
    return None


@register("min_age")
def validate_min_age(
    value: Any, years: int = 18, reference: date | None = None, **_kwargs: Any
) -> FieldError | None:
    birth = parse_date(value)
    if birth is None:
        return None
    if age_on(birth, reference or date.today()) < int(years):
        return FieldError(kind=ErrorKind.RANGE, message=f"Must be at least {years} years old.")
    return None


@register("non_negative")
def validate_non_negative(value: Any, **_kwargs: Any) -> FieldError | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return FieldError(kind=ErrorKind.FORMAT, message="Please enter a valid number.")
    if number < 0:
        return FieldError(kind=ErrorKind.RANGE, message="Value cannot be negative.")
    return None
