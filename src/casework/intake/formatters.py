"""String transforms applied to form input.

Masks are progressive: a partially typed value is formatted as far as its
digits go, so the same function serves display and keystroke handling.
A value with more digits than the mask holds is returned unchanged.
"""

from __future__ import annotations

import re
from typing import Any, Callable


def numeric_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def format_cpf(value: str) -> str:
    """Format as ``XXX.XXX.XXX-XX``."""
    digits = numeric_only(value)
    if len(digits) > 11:
        return value
    head = ".".join(part for part in (digits[:3], digits[3:6], digits[6:9]) if part)
    tail = digits[9:11]
    return f"{head}-{tail}" if tail else head


def format_phone(value: str) -> str:
    """Format as ``(XX) XXXXX-XXXX``."""
    digits = numeric_only(value)
    if len(digits) > 11:
        return value
    area, prefix, line = digits[:2], digits[2:7], digits[7:11]
    formatted = ""
    if area:
        formatted += f"({area}"
    if prefix:
        formatted += f") {prefix}"
    if line:
        formatted += f"-{line}"
    return formatted


def format_cep(value: str) -> str:
    """Format a postal code as ``XXXXX-XXX``."""
    digits = numeric_only(value)
    if len(digits) > 8:
        return value
    return digits[:5] + (f"-{digits[5:8]}" if digits[5:8] else "")


def format_uf(value: str) -> str:
    """Two upper-case letters, anything else dropped."""
    return re.sub(r"[^a-zA-Z]", "", value or "").upper()[:2]


def to_upper(value: str) -> str:
    return (value or "").upper()


def clean_extra_spaces(text: str) -> str:
    """Trim and collapse runs of whitespace to a single space."""
    return re.sub(r"\s\s+", " ", (text or "").strip())


def parse_currency(value: Any) -> float:
    """Parse ``"R$ 1.234,56"`` style input; unparseable input yields 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return 0.0
    cleaned = value.replace("R$", "").strip().replace(".", "").replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


# Formatter applied when a field with this name is set through the editors.
FIELD_FORMATTERS: dict[str, Callable[[str], str]] = {
    "cpf": format_cpf,
    "id_document": numeric_only,
    "issuing_authority": to_upper,
    "phone": format_phone,
    "message_phone": format_phone,
    "nis": numeric_only,
    "voter_registration": numeric_only,
    "postal_code": format_cep,
    "state": format_uf,
}


def format_field(name: str, value: Any) -> Any:
    """Apply the formatter registered for *name*; non-strings pass through."""
    fn = FIELD_FORMATTERS.get(name)
    if fn is None or not isinstance(value, str):
        return value
    return fn(value)
