"""FastAPI application for the household intake service.

Provides REST endpoints for driving intake wizard sessions plus a health
check.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from casework.core.config import Settings
from casework.intake.client import CaseServiceClient
from casework.intake.controller import load_wizard_definition
from casework.intake.drafts import DraftStore
from casework.intake.store import IntakeStore
from casework.intake.validation import ValidationEngine
from casework.web.intake_router import router as intake_router


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"


def create_app(
    settings: Settings | None = None,
    client: CaseServiceClient | None = None,
    draft_store: DraftStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with a mocked case-service transport or a temporary drafts directory.

    Args:
        settings: Application settings. Defaults to Settings().
        client: Optional pre-built CaseServiceClient.
        draft_store: Optional pre-built DraftStore.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("casework").setLevel(settings.log_level.upper())

    if client is None:
        client = CaseServiceClient(config=settings.service)
    if draft_store is None:
        draft_store = DraftStore(config=settings.draft)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await client.close()

    app = FastAPI(
        title="Casework Intake",
        description="Household intake for municipal social-assistance case records",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.case_client = client
    app.state.draft_store = draft_store
    app.state.intake_store = IntakeStore()
    app.state.validation_engine = ValidationEngine(config=settings.intake)
    app.state.wizard_definition = load_wizard_definition(settings.intake.wizard_path)

    app.include_router(intake_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", service="casework-intake")

    return app
