"""Tests for converting persisted records to and from the editable model."""

from __future__ import annotations

from casework.core.config import IntakeConfig
from casework.core.types import (
    ConstructionType,
    EducationLevel,
    MemberRole,
    PublicService,
    Sex,
    Tenure,
)
from casework.intake.mapper import dehydrate, hydrate, new_record, seed_mandatory_expenses
from casework.intake.models import ExpenseEntry, IntakeRecord
from tests.conftest import VALID_CPF, make_valid_record


class TestNewRecord:
    def test_defaults(self):
        record = new_record()
        assert record.case_id is None
        assert record.address.city == "Bebedouro"
        assert record.address.state == "SP"
        assert record.responsible.role == MemberRole.RESPONSIBLE
        assert record.members == []

    def test_config_defaults(self):
        record = new_record(IntakeConfig(default_city="Ribeirao Preto", default_state="SP"))
        assert record.address.city == "Ribeirao Preto"

    def test_mandatory_expenses_seeded(self, reference_data):
        record = new_record(reference=reference_data)
        assert [(e.expense_type_id, e.amount) for e in record.expenses] == [(20, 0.0), (21, 0.0)]


class TestHydrate:
    def test_missing_sections_get_defaults(self):
        record = hydrate({"id": 7, "responsible": {"full_name": "Maria da Silva"}})
        assert isinstance(record, IntakeRecord)
        assert record.case_id == 7
        assert record.responsible.full_name == "Maria da Silva"
        assert record.health.disability.flag is False
        assert record.health.disability.detail == ""
        assert record.housing.garbage_collection is True
        assert record.housing.construction_type == ConstructionType.MASONRY
        assert record.income.total_income == 0.0
        assert record.social_participation.public_services == []

    def test_none_and_empty(self):
        assert hydrate(None).responsible.role == MemberRole.RESPONSIBLE
        assert hydrate({}).address.city == "Bebedouro"

    def test_null_fields(self):
        record = hydrate({"responsible": {"full_name": None, "monthly_income": None}, "housing": None})
        assert record.responsible.full_name == ""
        assert record.responsible.monthly_income == 0.0
        assert record.housing.rooms == 0

    def test_dates_lose_time_component(self):
        record = hydrate({
            "attendance_date": "2024-06-15T13:45:00.000Z",
            "responsible": {"birth_date": "1985-03-10T00:00:00Z"},
        })
        assert record.attendance_date == "2024-06-15"
        assert record.responsible.birth_date == "1985-03-10"

    def test_single_choice_lists_and_unknown_values(self):
        record = hydrate({
            "responsible": {"sex": ["male"], "education": "doctorate"},
            "housing": {"tenure": ["rented"], "construction_type": []},
        })
        assert record.responsible.sex == Sex.MALE
        assert record.responsible.education == EducationLevel.ILLITERATE
        assert record.housing.tenure == Tenure.RENTED
        assert record.housing.construction_type == ConstructionType.MASONRY

    def test_legacy_conditional_keys(self):
        record = hydrate({
            "health": {"has_disability": True, "disability_detail": "Visual"},
            "social_participation": {"attends_religious_group": "true", "religion_detail": "Choir"},
        })
        assert record.health.disability.flag is True
        assert record.health.disability.detail == "Visual"
        assert record.social_participation.religion.flag is True
        assert record.social_participation.religion.detail == "Choir"

    def test_nested_conditional(self):
        record = hydrate({"health": {"continuous_medication": {"flag": True, "detail": "Insulin"}}})
        assert record.health.continuous_medication.effective_detail == "Insulin"

    def test_responsible_dropped_from_members(self):
        record = hydrate({
            "responsible": {"full_name": "Maria da Silva"},
            "members": [
                {"full_name": "Maria da Silva", "role": "responsible"},
                {"full_name": "Joao da Silva", "role": "child", "monthly_income": "R$ 1.200,00"},
            ],
        })
        assert [m.full_name for m in record.members] == ["Joao da Silva"]
        assert record.members[0].monthly_income == 1200.0

    def test_public_services_deduplicated(self):
        record = hydrate({"social_participation": {"public_services": ["cras", "cras", "unknown", "health"]}})
        assert record.social_participation.public_services == [PublicService.CRAS, PublicService.HEALTH]

    def test_collections_deduplicated_and_seeded(self, reference_data):
        record = hydrate(
            {
                "program_enrollments": [
                    {"program_id": 10, "amount": 600},
                    {"program_id": 10, "amount": 300},
                ],
                "expenses": [{"expense_type_id": 21, "amount": "85,50"}],
            },
            reference=reference_data,
        )
        assert [(p.program_id, p.amount) for p in record.program_enrollments] == [(10, 600.0)]
        assert [(e.expense_type_id, e.amount) for e in record.expenses] == [(21, 85.5), (20, 0.0)]


class TestDehydrate:
    def test_responsible_role_forced(self):
        record = make_valid_record()
        payload = dehydrate(record)
        assert payload["responsible"]["role"] == "responsible"
        assert payload["responsible"]["cpf"] == VALID_CPF

    def test_member_ids_excluded(self):
        payload = dehydrate(make_valid_record())
        assert "member_id" not in payload["responsible"]
        assert all("member_id" not in m for m in payload["members"])

    def test_hydrate_of_payload_preserves_data(self):
        record = make_valid_record()
        rebuilt = hydrate(dehydrate(record))
        assert rebuilt.responsible.full_name == record.responsible.full_name
        assert [m.cpf for m in rebuilt.members] == [m.cpf for m in record.members]
        assert rebuilt.address == record.address


def test_seed_keeps_existing_amounts(reference_data):
    expenses = [ExpenseEntry(expense_type_id=20, amount=40.0)]
    seeded = seed_mandatory_expenses(expenses, reference_data)
    assert [(e.expense_type_id, e.amount) for e in seeded] == [(20, 40.0), (21, 0.0)]


def test_dehydrate_overrides_any_responsible_role():
    record = make_valid_record()
    record.responsible.role = MemberRole.SPOUSE
    assert dehydrate(record)["responsible"]["role"] == "responsible"


class TestNumericCoercion:
    def test_decimal_strings_keep_their_value(self):
        record = hydrate({
            "responsible": {"monthly_income": "1500.00"},
            "income": {"total_income": "2300.50"},
            "program_enrollments": [{"program_id": 10, "amount": "600.00"}],
            "expenses": [{"expense_type_id": 20, "amount": "85.90"}],
        })
        assert record.responsible.monthly_income == 1500.0
        assert record.income.total_income == 2300.5
        assert record.program_enrollments[0].amount == 600.0
        assert record.expenses[0].amount == 85.9

    def test_currency_strings_still_parsed(self):
        record = hydrate({"income": {"total_income": "R$ 1.234,56"}})
        assert record.income.total_income == 1234.56

    def test_reload_of_submitted_amounts_is_stable(self):
        payload = dehydrate(make_valid_record())
        payload["income"]["total_income"] = "2300.50"
        assert hydrate(hydrate(payload).model_dump(mode="json")).income.total_income == 2300.5
