"""Pure record transitions for the intake form.

Every edit is an action applied by :func:`reduce`, which returns a new
:class:`IntakeRecord` and never mutates its input. Household members are
addressed by their stable ``member_id``; a positional ``index`` is
accepted as well for callers that only know the row.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from casework.core.types import MemberRole, PublicService
from casework.intake.formatters import format_field, parse_currency
from casework.intake.models import (
    ExpenseEntry,
    HouseholdMember,
    IntakeRecord,
    ProgramEnrollment,
    ReferenceData,
)

_COLLECTION_FIELDS = {"members", "program_enrollments", "expenses"}
_READONLY_MEMBER_FIELDS = {"id", "member_id"}
# Amount inputs never go below zero.
_CLAMPED_FIELDS = {"total_income", "monthly_income"}


# --- Actions ---


class SetField(BaseModel):
    """Set a scalar field addressed by a dotted path, e.g. ``address.state``."""

    type: Literal["set_field"] = "set_field"
    path: str
    value: Any = None


class AddMember(BaseModel):
    type: Literal["add_member"] = "add_member"


class RemoveMember(BaseModel):
    type: Literal["remove_member"] = "remove_member"
    member_id: str | None = None
    index: int | None = None


class UpdateMember(BaseModel):
    type: Literal["update_member"] = "update_member"
    member_id: str | None = None
    index: int | None = None
    field: str
    value: Any = None


class ToggleProgram(BaseModel):
    type: Literal["toggle_program"] = "toggle_program"
    program_id: int
    enrolled: bool
    default_amount: float = 0.0


class SetProgramAmount(BaseModel):
    type: Literal["set_program_amount"] = "set_program_amount"
    program_id: int
    amount: Any = 0


class SetExpenseAmount(BaseModel):
    type: Literal["set_expense_amount"] = "set_expense_amount"
    expense_type_id: int
    amount: Any = 0


class TogglePublicService(BaseModel):
    type: Literal["toggle_public_service"] = "toggle_public_service"
    service: PublicService
    enabled: bool


Action = Annotated[
    Union[
        SetField,
        AddMember,
        RemoveMember,
        UpdateMember,
        ToggleProgram,
        SetProgramAmount,
        SetExpenseAmount,
        TogglePublicService,
    ],
    Field(discriminator="type"),
]


# --- Helpers ---


def _amount(value: Any) -> float:
    return max(0.0, parse_currency(value))


def _resolve_member(record: IntakeRecord, member_id: str | None, index: int | None) -> int:
    if member_id is not None:
        position = record.member_index(member_id)
        if position is None:
            raise KeyError(f"Household member {member_id!r} not found")
        return position
    if index is None or not 0 <= index < len(record.members):
        raise KeyError(f"Household member at position {index!r} not found")
    return index


# --- Transitions ---


def set_field(record: IntakeRecord, path: str, value: Any) -> IntakeRecord:
    """Return a copy of *record* with the field at *path* replaced.

    The formatter registered for the field name is applied first, so a CPF
    typed as digits is stored masked.

    Raises:
        ValueError: If the path is unknown, targets a collection, or the
            value is not valid for the field.
    """
    parts = path.split(".")
    if not parts[0] or parts[0] in _COLLECTION_FIELDS:
        raise ValueError(f"Field path {path!r} cannot be set directly")
    if parts[-1] in _CLAMPED_FIELDS:
        value = _amount(value)
    if parts[:2] == ["responsible", "role"]:
        raise ValueError("The responsible member's role is fixed")

    data = record.model_dump()
    node = data
    for key in parts[:-1]:
        child = node.get(key) if isinstance(node, dict) else None
        if not isinstance(child, dict):
            raise ValueError(f"Unknown field path {path!r}")
        node = child
    if parts[-1] not in node or isinstance(node[parts[-1]], (dict, list)):
        raise ValueError(f"Unknown field path {path!r}")
    node[parts[-1]] = format_field(parts[-1], value)
    return IntakeRecord.model_validate(data)


def add_member(record: IntakeRecord) -> IntakeRecord:
    """Append an empty member with the default ``child`` role."""
    updated = record.model_copy(deep=True)
    updated.members.append(HouseholdMember(role=MemberRole.CHILD))
    return updated


def remove_member(record: IntakeRecord, member_id: str | None = None, index: int | None = None) -> IntakeRecord:
    position = _resolve_member(record, member_id, index)
    updated = record.model_copy(deep=True)
    del updated.members[position]
    return updated


def update_member(
    record: IntakeRecord,
    field: str,
    value: Any,
    member_id: str | None = None,
    index: int | None = None,
) -> IntakeRecord:
    """Replace one field of a member, preserving all others."""
    position = _resolve_member(record, member_id, index)
    member = record.members[position]
    if field in _READONLY_MEMBER_FIELDS:
        raise ValueError(f"Member field {field!r} cannot be edited")
    if field not in HouseholdMember.model_fields:
        raise ValueError(f"Unknown member field {field!r}")
    if field == "role" and value == MemberRole.RESPONSIBLE.value:
        raise ValueError("A household member cannot take the responsible role")
    if field in _CLAMPED_FIELDS:
        value = _amount(value)

    data = member.model_dump()
    data[field] = format_field(field, value)
    updated = record.model_copy(deep=True)
    updated.members[position] = HouseholdMember.model_validate(data)
    return updated


def toggle_program(
    record: IntakeRecord,
    program_id: int,
    enrolled: bool,
    default_amount: float = 0.0,
) -> IntakeRecord:
    """Enroll (seeding the amount) or unenroll the household from a program."""
    updated = record.model_copy(deep=True)
    current = updated.enrollment(program_id)
    if enrolled and current is None:
        updated.program_enrollments.append(
            ProgramEnrollment(program_id=program_id, amount=max(0.0, default_amount))
        )
    elif not enrolled and current is not None:
        updated.program_enrollments = [
            p for p in updated.program_enrollments if p.program_id != program_id
        ]
    return updated


def set_program_amount(record: IntakeRecord, program_id: int, amount: Any) -> IntakeRecord:
    """Update the amount of an existing enrollment; unenrolled programs are ignored."""
    updated = record.model_copy(deep=True)
    current = updated.enrollment(program_id)
    if current is not None:
        current.amount = _amount(amount)
    return updated


def set_expense_amount(record: IntakeRecord, expense_type_id: int, amount: Any) -> IntakeRecord:
    """Upsert the entry for *expense_type_id*; entries are never removed."""
    updated = record.model_copy(deep=True)
    current = updated.expense(expense_type_id)
    if current is None:
        updated.expenses.append(ExpenseEntry(expense_type_id=expense_type_id, amount=_amount(amount)))
    else:
        current.amount = _amount(amount)
    return updated


def toggle_public_service(record: IntakeRecord, service: PublicService, enabled: bool) -> IntakeRecord:
    updated = record.model_copy(deep=True)
    services = updated.social_participation.public_services
    if enabled and service not in services:
        services.append(service)
    elif not enabled and service in services:
        services.remove(service)
    return updated


def reduce(record: IntakeRecord, action: Any, reference: ReferenceData | None = None) -> IntakeRecord:
    """Apply one action to *record* and return the resulting record.

    Raises:
        KeyError: If the action addresses a member that does not exist.
        ValueError: If the action is unknown or carries an invalid value.
    """
    if isinstance(action, SetField):
        return set_field(record, action.path, action.value)
    if isinstance(action, AddMember):
        return add_member(record)
    if isinstance(action, RemoveMember):
        return remove_member(record, member_id=action.member_id, index=action.index)
    if isinstance(action, UpdateMember):
        return update_member(
            record, action.field, action.value, member_id=action.member_id, index=action.index
        )
    if isinstance(action, ToggleProgram):
        default_amount = action.default_amount
        program = reference.program(action.program_id) if reference else None
        if program is not None:
            default_amount = program.default_amount
        return toggle_program(record, action.program_id, action.enrolled, default_amount)
    if isinstance(action, SetProgramAmount):
        return set_program_amount(record, action.program_id, action.amount)
    if isinstance(action, SetExpenseAmount):
        return set_expense_amount(record, action.expense_type_id, action.amount)
    if isinstance(action, TogglePublicService):
        return toggle_public_service(record, action.service, action.enabled)
    raise ValueError(f"Unsupported action: {action!r}")
