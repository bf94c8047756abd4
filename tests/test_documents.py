"""Tests for document check-digit validators."""

from __future__ import annotations

import pytest

from casework.intake.validators.documents import (
    cpf_check_digits,
    digits_only,
    is_valid_cpf,
    is_valid_nis,
    is_valid_voter_registration,
    nis_check_digit,
    voter_check_digits,
)


class TestCPF:
    def test_valid_formatted(self):
        assert is_valid_cpf("529.982.247-25") is True

    def test_valid_digits_only(self):
        assert is_valid_cpf("11144477735") is True

    def test_check_digits(self):
        assert cpf_check_digits("529982247") == "25"
        assert cpf_check_digits("111444777") == "35"

    @pytest.mark.parametrize("position", range(11))
    def test_single_digit_change_invalidates(self, position):
        digits = list("52998224725")
        digits[position] = str((int(digits[position]) + 1) % 10)
        assert is_valid_cpf("".join(digits)) is False

    def test_repeated_digits_rejected(self):
        assert is_valid_cpf("111.111.111-11") is False
        assert is_valid_cpf("00000000000") is False

    def test_wrong_length(self):
        assert is_valid_cpf("529.982.247-2") is False
        assert is_valid_cpf("529982247251") is False
        assert is_valid_cpf("") is False


class TestNIS:
    def test_valid(self):
        assert is_valid_nis("17012345673") is True
        assert is_valid_nis("170.12345.67-3") is True

    def test_remainder_below_two_gives_zero(self):
        assert nis_check_digit("1234567890") == 0
        assert is_valid_nis("12345678900") is True

    def test_wrong_check_digit(self):
        assert is_valid_nis("17012345674") is False

    def test_wrong_length(self):
        assert is_valid_nis("1701234567") is False


class TestVoterRegistration:
    def test_valid(self):
        assert voter_check_digits("12345678", "01") == "91"
        assert is_valid_voter_registration("123456780191") is True

    def test_wrong_check_digit(self):
        assert is_valid_voter_registration("123456780192") is False

    def test_state_code_out_of_range(self):
        assert is_valid_voter_registration("123456782991") is False
        assert is_valid_voter_registration("123456780091") is False

    def test_wrong_length(self):
        assert is_valid_voter_registration("12345678019") is False


def test_digits_only():
    assert digits_only("529.982.247-25") == "52998224725"
    assert digits_only(None) == ""
