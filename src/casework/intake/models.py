"""Record model for the household intake wizard.

The editable form shape and the submission payload share these models:
one :class:`IntakeRecord` owns every sub-record and collection, and all of
them are created and discarded together with it.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from casework.core.types import (
    ConstructionType,
    EducationLevel,
    Electricity,
    ErrorKind,
    MaritalStatus,
    MemberRole,
    PublicService,
    Sewage,
    Sex,
    Tenure,
    WaterSupply,
)


def _today() -> str:
    return date.today().isoformat()


def _new_member_id() -> str:
    return uuid.uuid4().hex[:12]


# --- Record ---


class HouseholdMember(BaseModel):
    """A person in the household, including the responsible member."""

    id: int | None = None
    member_id: str = Field(default_factory=_new_member_id)
    full_name: str = ""
    birth_date: str = ""
    sex: Sex = Sex.FEMALE
    cpf: str = ""
    id_document: str = ""
    issuing_authority: str = ""
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    education: EducationLevel = EducationLevel.ILLITERATE
    birthplace: str = ""
    phone: str = ""
    message_phone: str = ""
    email: str = ""
    nis: str = ""
    voter_registration: str = ""
    labor_card: str = ""
    role: MemberRole = MemberRole.CHILD
    occupation: str = ""
    monthly_income: float = 0.0


class Address(BaseModel):
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    landmark: str = ""
    residency_duration: str = ""


class ConditionalDetail(BaseModel):
    """A yes/no answer paired with a "which/what" text.

    The text only matters while ``flag`` is true; it is kept, not cleared,
    when the flag is switched off.
    """

    flag: bool = False
    detail: str = ""

    @property
    def effective_detail(self) -> str:
        return self.detail if self.flag else ""

    @property
    def missing_detail(self) -> bool:
        return self.flag and not self.detail.strip()


class HealthProfile(BaseModel):
    disability: ConditionalDetail = Field(default_factory=ConditionalDetail)
    health_treatment: ConditionalDetail = Field(default_factory=ConditionalDetail)
    continuous_medication: ConditionalDetail = Field(default_factory=ConditionalDetail)
    dependent_care: ConditionalDetail = Field(default_factory=ConditionalDetail)
    notes: str = ""


class HousingProfile(BaseModel):
    rooms: int = 0
    bedrooms: int = 0
    construction_type: ConstructionType = ConstructionType.MASONRY
    conflict_area: bool = False
    tenure: Tenure = Tenure.OWNED_PAID_OFF
    electricity: Electricity = Electricity.OWN
    water: WaterSupply = WaterSupply.OWN
    sewage: Sewage = Sewage.NETWORK
    garbage_collection: bool = True


class IncomeProfile(BaseModel):
    who_works: str = ""
    total_income: float = 0.0
    notes: str = ""


class SocialProfile(BaseModel):
    religion: ConditionalDetail = Field(default_factory=ConditionalDetail)
    social_action: ConditionalDetail = Field(default_factory=ConditionalDetail)
    public_services: list[PublicService] = Field(default_factory=list)
    notes: str = ""


class ProgramEnrollment(BaseModel):
    program_id: int
    amount: float = 0.0


class ExpenseEntry(BaseModel):
    expense_type_id: int
    amount: float = 0.0


def _default_responsible() -> HouseholdMember:
    return HouseholdMember(role=MemberRole.RESPONSIBLE)


class IntakeRecord(BaseModel):
    """Root of a household's case record."""

    case_id: int | None = None
    attendance_date: str = Field(default_factory=_today)
    case_worker_id: int = 0
    record_number: str = ""
    facility_id: int = 0
    responsible: HouseholdMember = Field(default_factory=_default_responsible)
    address: Address = Field(default_factory=Address)
    members: list[HouseholdMember] = Field(default_factory=list)
    health: HealthProfile = Field(default_factory=HealthProfile)
    housing: HousingProfile = Field(default_factory=HousingProfile)
    income: IncomeProfile = Field(default_factory=IncomeProfile)
    social_participation: SocialProfile = Field(default_factory=SocialProfile)
    program_enrollments: list[ProgramEnrollment] = Field(default_factory=list)
    expenses: list[ExpenseEntry] = Field(default_factory=list)

    def member_index(self, member_id: str) -> int | None:
        for i, member in enumerate(self.members):
            if member.member_id == member_id:
                return i
        return None

    def enrollment(self, program_id: int) -> ProgramEnrollment | None:
        return next((p for p in self.program_enrollments if p.program_id == program_id), None)

    def expense(self, expense_type_id: int) -> ExpenseEntry | None:
        return next((e for e in self.expenses if e.expense_type_id == expense_type_id), None)


# --- Reference data ---


class Facility(BaseModel):
    id: int
    name: str = ""
    region: str = ""


class CaseWorker(BaseModel):
    id: int
    name: str = ""


class SocialProgram(BaseModel):
    id: int
    code: str = ""
    name: str = ""
    default_amount: float = 0.0


class ExpenseType(BaseModel):
    id: int
    code: str = ""
    name: str = ""
    mandatory: bool = False


class ReferenceData(BaseModel):
    """Catalogues loaded once before the form becomes usable."""

    facilities: list[Facility] = Field(default_factory=list)
    case_workers: list[CaseWorker] = Field(default_factory=list)
    programs: list[SocialProgram] = Field(default_factory=list)
    expense_types: list[ExpenseType] = Field(default_factory=list)

    def program(self, program_id: int) -> SocialProgram | None:
        return next((p for p in self.programs if p.id == program_id), None)

    def mandatory_expense_types(self) -> list[ExpenseType]:
        return [t for t in self.expense_types if t.mandatory]


# --- Wizard ---


class StepDefinition(BaseModel):
    """Definition of a single wizard step."""

    id: str
    title: str
    description: str = ""


class WizardDefinition(BaseModel):
    """Step catalogue loaded from YAML."""

    id: str
    title: str
    description: str = ""
    steps: list[StepDefinition] = Field(default_factory=list)


class FieldError(BaseModel):
    """A single validation failure at one field."""

    kind: ErrorKind
    message: str


# Sparse tree mirroring IntakeRecord: dicts for sub-records, lists (with
# ``None`` placeholders) for collections, FieldError at the leaves.
ErrorTree = dict[str, Any]


class SubmitResult(BaseModel):
    """Outcome of a submission attempt."""

    success: bool
    case_id: int | None = None
    message: str = ""
    failed_step: int | None = None
    errors: dict[str, Any] = Field(default_factory=dict)
