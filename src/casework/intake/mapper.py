"""Conversion between persisted case records and the editable record model.

Persisted records come from the case service and may be partially
populated or carry older field layouts. :func:`hydrate` reads every field
with an explicit default so editing never hits a missing value;
:func:`dehydrate` produces the submission payload.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import StrEnum
from typing import Any, TypeVar

from casework.core.config import IntakeConfig
from casework.core.types import (
    ConstructionType,
    EducationLevel,
    Electricity,
    MaritalStatus,
    MemberRole,
    PublicService,
    Sewage,
    Sex,
    Tenure,
    WaterSupply,
)
from casework.intake.formatters import parse_currency
from casework.intake.models import (
    Address,
    ConditionalDetail,
    ExpenseEntry,
    HealthProfile,
    HouseholdMember,
    HousingProfile,
    IncomeProfile,
    IntakeRecord,
    ProgramEnrollment,
    ReferenceData,
    SocialProfile,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=StrEnum)

# Older records stored each conditional answer as two flat keys.
_LEGACY_HEALTH_KEYS: dict[str, tuple[str, str]] = {
    "disability": ("has_disability", "disability_detail"),
    "health_treatment": ("in_health_treatment", "treatment_detail"),
    "continuous_medication": ("uses_continuous_medication", "medication_detail"),
    "dependent_care": ("has_dependent_needing_care", "dependent_detail"),
}
_LEGACY_SOCIAL_KEYS: dict[str, tuple[str, str]] = {
    "religion": ("attends_religious_group", "religion_detail"),
    "social_action": ("attends_social_action", "social_action_detail"),
}

_MEMBER_TEXT_FIELDS = (
    "full_name",
    "cpf",
    "id_document",
    "issuing_authority",
    "birthplace",
    "phone",
    "message_phone",
    "email",
    "nis",
    "voter_registration",
    "labor_card",
    "occupation",
)


# --- Field readers ---


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def _text(raw: dict[str, Any], key: str, default: str = "") -> str:
    value = raw.get(key)
    if value is None:
        return default
    return str(value)


def _number(raw: dict[str, Any], key: str) -> float:
    """Decimal columns arrive as plain strings (``"1500.00"``); only
    currency-formatted input goes through :func:`parse_currency`."""
    value = raw.get(key)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    return parse_currency(value)


def _integer(raw: dict[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _optional_id(raw: dict[str, Any], key: str) -> int | None:
    value = raw.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _flag(raw: dict[str, Any], key: str, default: bool = False) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "sim")
    return bool(value)


def _date(raw: dict[str, Any], key: str) -> str:
    """Date-only ISO string; timestamps lose their time component."""
    value = raw.get(key)
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).split("T")[0].strip()


def _choice(enum_cls: type[E], raw: dict[str, Any], key: str, default: E) -> E:
    value = raw.get(key)
    # The new-case form stored single-choice answers as one-element lists.
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug("Unknown %s value for %r, using default", enum_cls.__name__, key)
        return default


def _conditional(raw: dict[str, Any], key: str, legacy: tuple[str, str] | None = None) -> ConditionalDetail:
    value = raw.get(key)
    if isinstance(value, dict):
        return ConditionalDetail(flag=_flag(value, "flag"), detail=_text(value, "detail"))
    if legacy is not None:
        flag_key, detail_key = legacy
        return ConditionalDetail(flag=_flag(raw, flag_key), detail=_text(raw, detail_key))
    return ConditionalDetail()


# --- Sub-records ---


def hydrate_member(raw: dict[str, Any], role: MemberRole | None = None) -> HouseholdMember:
    """Build a fully-defaulted member. *role* overrides the stored role."""
    fields: dict[str, Any] = {name: _text(raw, name) for name in _MEMBER_TEXT_FIELDS}
    return HouseholdMember(
        id=_optional_id(raw, "id"),
        birth_date=_date(raw, "birth_date"),
        sex=_choice(Sex, raw, "sex", Sex.FEMALE),
        marital_status=_choice(MaritalStatus, raw, "marital_status", MaritalStatus.SINGLE),
        education=_choice(EducationLevel, raw, "education", EducationLevel.ILLITERATE),
        role=role or _choice(MemberRole, raw, "role", MemberRole.CHILD),
        monthly_income=_number(raw, "monthly_income"),
        **fields,
    )


def hydrate_address(raw: dict[str, Any], config: IntakeConfig) -> Address:
    return Address(
        street=_text(raw, "street"),
        number=_text(raw, "number"),
        complement=_text(raw, "complement"),
        neighborhood=_text(raw, "neighborhood"),
        city=_text(raw, "city") or config.default_city,
        state=_text(raw, "state") or config.default_state,
        postal_code=_text(raw, "postal_code"),
        landmark=_text(raw, "landmark"),
        residency_duration=_text(raw, "residency_duration"),
    )


def hydrate_health(raw: dict[str, Any]) -> HealthProfile:
    conditionals = {
        name: _conditional(raw, name, legacy) for name, legacy in _LEGACY_HEALTH_KEYS.items()
    }
    return HealthProfile(notes=_text(raw, "notes"), **conditionals)


def hydrate_housing(raw: dict[str, Any]) -> HousingProfile:
    return HousingProfile(
        rooms=_integer(raw, "rooms"),
        bedrooms=_integer(raw, "bedrooms"),
        construction_type=_choice(ConstructionType, raw, "construction_type", ConstructionType.MASONRY),
        conflict_area=_flag(raw, "conflict_area"),
        tenure=_choice(Tenure, raw, "tenure", Tenure.OWNED_PAID_OFF),
        electricity=_choice(Electricity, raw, "electricity", Electricity.OWN),
        water=_choice(WaterSupply, raw, "water", WaterSupply.OWN),
        sewage=_choice(Sewage, raw, "sewage", Sewage.NETWORK),
        garbage_collection=_flag(raw, "garbage_collection", default=True),
    )


def hydrate_income(raw: dict[str, Any]) -> IncomeProfile:
    return IncomeProfile(
        who_works=_text(raw, "who_works"),
        total_income=_number(raw, "total_income"),
        notes=_text(raw, "notes"),
    )


def hydrate_social(raw: dict[str, Any]) -> SocialProfile:
    services: list[PublicService] = []
    for value in raw.get("public_services") or []:
        try:
            service = PublicService(value)
        except ValueError:
            logger.debug("Dropping unknown public service %r", value)
            continue
        if service not in services:
            services.append(service)
    conditionals = {
        name: _conditional(raw, name, legacy) for name, legacy in _LEGACY_SOCIAL_KEYS.items()
    }
    return SocialProfile(public_services=services, notes=_text(raw, "notes"), **conditionals)


def _hydrate_enrollments(entries: Any) -> list[ProgramEnrollment]:
    result: list[ProgramEnrollment] = []
    seen: set[int] = set()
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        program_id = _optional_id(entry, "program_id")
        if program_id is None or program_id in seen:
            continue
        seen.add(program_id)
        result.append(ProgramEnrollment(program_id=program_id, amount=_number(entry, "amount")))
    return result


def _hydrate_expenses(entries: Any) -> list[ExpenseEntry]:
    result: list[ExpenseEntry] = []
    seen: set[int] = set()
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        type_id = _optional_id(entry, "expense_type_id")
        if type_id is None or type_id in seen:
            continue
        seen.add(type_id)
        result.append(ExpenseEntry(expense_type_id=type_id, amount=_number(entry, "amount")))
    return result


def seed_mandatory_expenses(expenses: list[ExpenseEntry], reference: ReferenceData) -> list[ExpenseEntry]:
    """Append a zero entry for every mandatory expense type not yet present."""
    present = {e.expense_type_id for e in expenses}
    seeded = list(expenses)
    for expense_type in reference.mandatory_expense_types():
        if expense_type.id not in present:
            seeded.append(ExpenseEntry(expense_type_id=expense_type.id, amount=0.0))
    return seeded


# --- Public API ---


def new_record(config: IntakeConfig | None = None, reference: ReferenceData | None = None) -> IntakeRecord:
    """A blank record for a new case, with mandatory expenses pre-seeded."""
    config = config or IntakeConfig()
    record = IntakeRecord(address=Address(city=config.default_city, state=config.default_state))
    if reference is not None:
        record.expenses = seed_mandatory_expenses(record.expenses, reference)
    return record


def hydrate(
    persisted: dict[str, Any] | None,
    reference: ReferenceData | None = None,
    config: IntakeConfig | None = None,
) -> IntakeRecord:
    """Convert a persisted record into a fully-defaulted :class:`IntakeRecord`.

    Missing sub-objects are defaulted independently; nothing here raises on
    absent or null fields.
    """
    config = config or IntakeConfig()
    raw = persisted or {}

    members = [
        hydrate_member(m)
        for m in raw.get("members") or []
        if isinstance(m, dict) and m.get("role") != MemberRole.RESPONSIBLE.value
    ]
    expenses = _hydrate_expenses(raw.get("expenses"))
    if reference is not None:
        expenses = seed_mandatory_expenses(expenses, reference)

    return IntakeRecord(
        case_id=_optional_id(raw, "case_id") or _optional_id(raw, "id"),
        attendance_date=_date(raw, "attendance_date") or date.today().isoformat(),
        case_worker_id=_integer(raw, "case_worker_id"),
        record_number=_text(raw, "record_number"),
        facility_id=_integer(raw, "facility_id"),
        responsible=hydrate_member(_section(raw, "responsible"), role=MemberRole.RESPONSIBLE),
        address=hydrate_address(_section(raw, "address"), config),
        members=members,
        health=hydrate_health(_section(raw, "health")),
        housing=hydrate_housing(_section(raw, "housing")),
        income=hydrate_income(_section(raw, "income")),
        social_participation=hydrate_social(_section(raw, "social_participation")),
        program_enrollments=_hydrate_enrollments(raw.get("program_enrollments")),
        expenses=expenses,
    )


def dehydrate(record: IntakeRecord) -> dict[str, Any]:
    """Submission payload for *record*.

    The payload mirrors the record; local member ids are dropped and the
    responsible member's role is forced to ``responsible``.
    """
    payload = record.model_dump(
        mode="json",
        exclude={
            "responsible": {"member_id"},
            "members": {"__all__": {"member_id"}},
        },
    )
    payload["responsible"]["role"] = MemberRole.RESPONSIBLE.value
    return payload
