"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class ServiceConfig(BaseSettings):
    """Case-management REST service configuration."""

    model_config = {"env_prefix": "CASEWORK_SERVICE_"}

    base_url: str = "http://localhost:3000/api"
    token: str | None = None
    timeout_seconds: int = 30

    facilities_path: str = "/facilities"
    case_workers_path: str = "/case-workers"
    programs_path: str = "/social-programs"
    expense_types_path: str = "/expense-types"
    records_path: str = "/households"


class IntakeConfig(BaseSettings):
    """Intake wizard configuration."""

    model_config = {"env_prefix": "CASEWORK_INTAKE_"}

    wizard_path: str = "config/wizard.yml"
    default_city: str = "Bebedouro"
    default_state: str = "SP"
    minimum_responsible_age: int = 18
    max_document_length: int = 20


class DraftConfig(BaseSettings):
    """Local draft snapshot configuration."""

    model_config = {"env_prefix": "CASEWORK_DRAFT_"}

    drafts_dir: str = "data/drafts"
    new_case_key: str = "family_draft"
    edit_case_key: str = "family_draft_edit"


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "CASEWORK_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    intake: IntakeConfig = Field(default_factory=IntakeConfig)
    draft: DraftConfig = Field(default_factory=DraftConfig)
