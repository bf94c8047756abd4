"""Shared test fixtures and helpers."""

from __future__ import annotations

from datetime import date

import pytest

from casework.core.config import IntakeConfig, ServiceConfig
from casework.core.types import MemberRole
from casework.intake.models import (
    Address,
    CaseWorker,
    ExpenseType,
    Facility,
    HouseholdMember,
    IntakeRecord,
    ReferenceData,
    SocialProgram,
)

BASE_URL = "http://case.test"

# Check digits verified by hand against the published algorithms.
VALID_CPF = "529.982.247-25"
OTHER_VALID_CPF = "111.444.777-35"
VALID_NIS = "17012345673"
VALID_VOTER_REGISTRATION = "123456780191"

ATTENDANCE_DATE = "2024-06-15"
TODAY = date(2024, 6, 15)

FACILITIES = [{"id": 1, "name": "CRAS Centro", "region": "Centro"}]
CASE_WORKERS = [{"id": 3, "name": "Ana Souza"}]
PROGRAMS = [
    {"id": 10, "code": "PBF", "name": "Bolsa Familia", "default_amount": 600.0},
    {"id": 11, "code": "BPC", "name": "BPC", "default_amount": 1412.0},
]
EXPENSE_TYPES = [
    {"id": 20, "code": "AGUA", "name": "Water", "mandatory": True},
    {"id": 21, "code": "LUZ", "name": "Electricity", "mandatory": True},
    {"id": 22, "code": "LAZER", "name": "Leisure", "mandatory": False},
]


def service_config(**overrides) -> ServiceConfig:
    defaults = {"base_url": BASE_URL, "token": "test-token"}
    defaults.update(overrides)
    return ServiceConfig(**defaults)


def mock_reference_data(httpx_mock) -> None:
    """Register one response per catalogue endpoint."""
    httpx_mock.add_response(url=f"{BASE_URL}/facilities", method="GET", json=FACILITIES)
    httpx_mock.add_response(url=f"{BASE_URL}/case-workers", method="GET", json=CASE_WORKERS)
    httpx_mock.add_response(url=f"{BASE_URL}/social-programs", method="GET", json=PROGRAMS)
    httpx_mock.add_response(url=f"{BASE_URL}/expense-types", method="GET", json=EXPENSE_TYPES)


def make_valid_record(**overrides) -> IntakeRecord:
    """A record that passes validation on every step."""
    data = {
        "attendance_date": ATTENDANCE_DATE,
        "case_worker_id": 3,
        "facility_id": 1,
        "responsible": HouseholdMember(
            role=MemberRole.RESPONSIBLE,
            full_name="Maria da Silva",
            birth_date="1985-03-10",
            cpf=VALID_CPF,
            id_document="123456789",
        ),
        "address": Address(
            street="Rua das Flores",
            number="100",
            neighborhood="Centro",
            city="Bebedouro",
            state="SP",
        ),
        "members": [
            HouseholdMember(full_name="Joao da Silva", birth_date="2010-01-20", cpf=OTHER_VALID_CPF),
        ],
    }
    data.update(overrides)
    return IntakeRecord(**data)


@pytest.fixture
def intake_config() -> IntakeConfig:
    return IntakeConfig()


@pytest.fixture
def reference_data() -> ReferenceData:
    return ReferenceData(
        facilities=[Facility.model_validate(f) for f in FACILITIES],
        case_workers=[CaseWorker.model_validate(c) for c in CASE_WORKERS],
        programs=[SocialProgram.model_validate(p) for p in PROGRAMS],
        expense_types=[ExpenseType.model_validate(t) for t in EXPENSE_TYPES],
    )


@pytest.fixture
def valid_record() -> IntakeRecord:
    return make_valid_record()
