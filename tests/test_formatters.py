"""Tests for input formatters."""

from __future__ import annotations

from casework.intake.formatters import (
    clean_extra_spaces,
    format_cep,
    format_cpf,
    format_field,
    format_phone,
    format_uf,
    numeric_only,
    parse_currency,
    to_upper,
)


class TestMasks:
    def test_cpf_full(self):
        assert format_cpf("52998224725") == "529.982.247-25"

    def test_cpf_partial(self):
        assert format_cpf("529") == "529"
        assert format_cpf("5299") == "529.9"
        assert format_cpf("529982247") == "529.982.247"
        assert format_cpf("5299822472") == "529.982.247-2"

    def test_cpf_idempotent(self):
        once = format_cpf("52998224725")
        assert format_cpf(once) == once

    def test_cpf_too_many_digits_unchanged(self):
        assert format_cpf("529982247251") == "529982247251"

    def test_phone(self):
        assert format_phone("17991234567") == "(17) 99123-4567"
        assert format_phone("17") == "(17"
        assert format_phone("179") == "(17) 9"

    def test_phone_idempotent(self):
        once = format_phone("17991234567")
        assert format_phone(once) == once

    def test_cep(self):
        assert format_cep("14700000") == "14700-000"
        assert format_cep("14700") == "14700"
        assert format_cep("14700-000") == "14700-000"

    def test_uf(self):
        assert format_uf("sp") == "SP"
        assert format_uf("s1p2x") == "SP"


class TestText:
    def test_numeric_only(self):
        assert numeric_only("12.345-6") == "123456"

    def test_to_upper(self):
        assert to_upper("ssp") == "SSP"

    def test_clean_extra_spaces(self):
        assert clean_extra_spaces("  Maria   da  Silva ") == "Maria da Silva"


class TestParseCurrency:
    def test_brazilian_format(self):
        assert parse_currency("R$ 1.234,56") == 1234.56

    def test_numbers_pass_through(self):
        assert parse_currency(600) == 600.0
        assert parse_currency(12.5) == 12.5

    def test_unparseable_is_zero(self):
        assert parse_currency("abc") == 0.0
        assert parse_currency(None) == 0.0
        assert parse_currency(True) == 0.0


class TestFormatField:
    def test_registered_field(self):
        assert format_field("cpf", "52998224725") == "529.982.247-25"
        assert format_field("issuing_authority", "ssp") == "SSP"

    def test_unregistered_field_unchanged(self):
        assert format_field("full_name", "maria") == "maria"

    def test_non_string_unchanged(self):
        assert format_field("cpf", None) is None
