"""Core type definitions shared across the casework modules.

Every closed set of values the intake form offers is modelled here as a
``StrEnum`` so the record model rejects free-form strings at its boundary.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class WizardStep(IntEnum):
    """The six sequential sections of the intake form."""

    IDENTIFICATION = 0
    FAMILY = 1
    HEALTH = 2
    HOUSING = 3
    INCOME = 4
    SOCIAL = 5


class SessionStatus(StrEnum):
    """Lifecycle of a wizard session."""

    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    FAILED = "failed"
    SUBMITTED = "submitted"


class ErrorKind(StrEnum):
    """Category of a validation error attached to a field."""

    REQUIRED = "required"
    FORMAT = "format"
    RANGE = "range"


class Sex(StrEnum):
    FEMALE = "female"
    MALE = "male"
    OTHER = "other"


class MaritalStatus(StrEnum):
    SINGLE = "single"
    MARRIED = "married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"
    STABLE_UNION = "stable_union"
    SEPARATED = "separated"


class EducationLevel(StrEnum):
    ILLITERATE = "illiterate"
    ELEMENTARY_INCOMPLETE = "elementary_incomplete"
    ELEMENTARY_COMPLETE = "elementary_complete"
    HIGH_SCHOOL_INCOMPLETE = "high_school_incomplete"
    HIGH_SCHOOL_COMPLETE = "high_school_complete"
    HIGHER_INCOMPLETE = "higher_incomplete"
    HIGHER_COMPLETE = "higher_complete"
    POSTGRADUATE = "postgraduate"


class MemberRole(StrEnum):
    """Relationship of a household member to the responsible member."""

    RESPONSIBLE = "responsible"
    SPOUSE = "spouse"
    CHILD = "child"
    FATHER = "father"
    MOTHER = "mother"
    SIBLING = "sibling"
    GRANDPARENT = "grandparent"
    GRANDCHILD = "grandchild"
    OTHER = "other"


class ConstructionType(StrEnum):
    MASONRY = "masonry"
    WOOD = "wood"
    MIXED = "mixed"
    WATTLE_AND_DAUB = "wattle_and_daub"
    OTHER = "other"


class Tenure(StrEnum):
    """Occupancy condition of the household's dwelling."""

    OWNED_PAID_OFF = "owned_paid_off"
    OWNED_FINANCED = "owned_financed"
    RENTED = "rented"
    LENT = "lent"
    OCCUPIED = "occupied"
    HOMELESS = "homeless"


class Electricity(StrEnum):
    OWN = "own"
    SHARED = "shared"
    NONE = "none"


class WaterSupply(StrEnum):
    OWN = "own"
    SHARED = "shared"
    PUBLIC_NETWORK = "public_network"
    WELL = "well"
    WATER_TRUCK = "water_truck"
    NONE = "none"


class Sewage(StrEnum):
    NETWORK = "network"
    SEPTIC_TANK = "septic_tank"
    CESSPIT = "cesspit"
    OPEN_AIR = "open_air"
    NONE = "none"


class PublicService(StrEnum):
    """Public services the household already uses."""

    CRAS = "cras"
    CREAS = "creas"
    HEALTH = "health"
    EDUCATION = "education"
    HOUSING = "housing"
    SOCIAL_ASSISTANCE = "social_assistance"
