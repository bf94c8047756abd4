"""Field validators for intake records."""

from casework.intake.validators.common import VALIDATORS, register

__all__ = ["VALIDATORS", "register"]
