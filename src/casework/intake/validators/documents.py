"""Check-digit validators for Brazilian identity documents.

All functions accept the raw user input; non-digit characters are stripped
before the check digits are computed.
"""

from __future__ import annotations

import re

_NIS_WEIGHTS = (3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_VOTER_SEQUENCE_WEIGHTS = (2, 3, 4, 5, 6, 7, 8, 9)
_VOTER_STATE_WEIGHTS = (7, 8, 9)

# Electoral state codes run from 01 (SP) to 28 (ZZ, abroad).
_VOTER_STATE_RANGE = range(1, 29)


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def _weighted_sum(digits: str, weights: tuple[int, ...] | range) -> int:
    return sum(int(d) * w for d, w in zip(digits, weights))


def cpf_check_digits(base: str) -> str:
    """Compute the two CPF check digits for a 9-digit base."""
    first = (_weighted_sum(base[:9], range(10, 1, -1)) * 10) % 11
    if first >= 10:
        first = 0
    second = (_weighted_sum(base[:9] + str(first), range(11, 1, -1)) * 10) % 11
    if second >= 10:
        second = 0
    return f"{first}{second}"


def is_valid_cpf(value: str) -> bool:
    """Return True if *value* is an 11-digit CPF with matching check digits.

    Sequences of one repeated digit (``111.111.111-11``) satisfy the
    arithmetic but are rejected.
    """
    digits = digits_only(value)
    if len(digits) != 11 or len(set(digits)) == 1:
        return False
    return digits[9:] == cpf_check_digits(digits)


def nis_check_digit(base: str) -> int:
    remainder = _weighted_sum(base[:10], _NIS_WEIGHTS) % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_nis(value: str) -> bool:
    """Validate a NIS/PIS social-registry number (11 digits)."""
    digits = digits_only(value)
    if len(digits) != 11:
        return False
    return int(digits[10]) == nis_check_digit(digits)


def voter_check_digits(sequence: str, state_code: str) -> str:
    """Compute both check digits of a voter-registration number."""
    first = _weighted_sum(sequence[:8], _VOTER_SEQUENCE_WEIGHTS) % 11
    if first == 10:
        first = 0
    second = _weighted_sum(state_code[:2] + str(first), _VOTER_STATE_WEIGHTS) % 11
    if second == 10:
        second = 0
    return f"{first}{second}"


def is_valid_voter_registration(value: str) -> bool:
    """Validate a 12-digit voter-registration number (Título de Eleitor).

    Layout: 8-digit sequence, 2-digit state code, 2 check digits.
    """
    digits = digits_only(value)
    if len(digits) != 12:
        return False
    if int(digits[8:10]) not in _VOTER_STATE_RANGE:
        return False
    return digits[10:] == voter_check_digits(digits[:8], digits[8:10])
