"""FastAPI router for household intake wizard sessions."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from casework.intake.controller import WizardController
from casework.intake.editors import Action
from casework.intake.errors import RecordLoadError, ReferenceDataLoadError

router = APIRouter()

_action_adapter: TypeAdapter[Any] = TypeAdapter(Action)


# --- Request/Response models ---


class StartSessionRequest(BaseModel):
    record_id: int | None = None


class SessionResponse(BaseModel):
    id: str
    status: str
    edit_mode: bool
    current_step: int
    completed_steps: list[bool]
    record: dict[str, Any]
    errors: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    progress: dict[str, Any] = Field(default_factory=dict)


class DraftResponse(BaseModel):
    success: bool
    session: SessionResponse


class SubmitResponse(BaseModel):
    success: bool
    case_id: int | None = None
    message: str = ""


def _get_controller(request: Request, session_id: str) -> WizardController:
    controller = request.app.state.intake_store.get(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail=f"Intake session {session_id!r} not found")
    return controller


def _session_response(controller: WizardController) -> SessionResponse:
    return SessionResponse(**controller.snapshot())


# --- Endpoints ---


@router.post("/api/intake/sessions")
async def start_session(body: StartSessionRequest, request: Request) -> SessionResponse:
    state = request.app.state
    try:
        controller = await WizardController.open(
            state.case_client,
            record_id=body.record_id,
            validation_engine=state.validation_engine,
            drafts=state.draft_store,
            definition=state.wizard_definition,
            config=state.settings.intake,
        )
    except ReferenceDataLoadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except RecordLoadError as e:
        status_code = 404 if e.status_code == 404 else 502
        raise HTTPException(status_code=status_code, detail=str(e))

    state.intake_store.save(controller)
    return _session_response(controller)


@router.get("/api/intake/sessions/{session_id}")
async def get_session(session_id: str, request: Request) -> SessionResponse:
    return _session_response(_get_controller(request, session_id))


@router.post("/api/intake/sessions/{session_id}/actions")
async def apply_action(session_id: str, body: dict[str, Any], request: Request) -> SessionResponse:
    controller = _get_controller(request, session_id)
    try:
        action = _action_adapter.validate_python(body)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    try:
        controller.dispatch(action)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _session_response(controller)


@router.post("/api/intake/sessions/{session_id}/advance")
async def advance(session_id: str, request: Request) -> SessionResponse:
    controller = _get_controller(request, session_id)
    try:
        controller.advance()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _session_response(controller)


@router.post("/api/intake/sessions/{session_id}/back")
async def go_back(session_id: str, request: Request) -> SessionResponse:
    controller = _get_controller(request, session_id)
    try:
        controller.retreat()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _session_response(controller)


@router.post("/api/intake/sessions/{session_id}/goto/{step}")
async def go_to_step(session_id: str, step: int, request: Request) -> SessionResponse:
    controller = _get_controller(request, session_id)
    try:
        controller.go_to(step)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _session_response(controller)


@router.post("/api/intake/sessions/{session_id}/submit")
async def submit(session_id: str, request: Request) -> SubmitResponse:
    controller = _get_controller(request, session_id)
    try:
        result = await controller.submit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if result.failed_step is not None:
        raise HTTPException(
            status_code=422,
            detail={
                "message": result.message,
                "failed_step": result.failed_step,
                "errors": result.errors,
            },
        )
    if not result.success:
        raise HTTPException(status_code=502, detail=result.message)
    request.app.state.intake_store.remove(session_id)
    return SubmitResponse(success=True, case_id=result.case_id, message=result.message)


@router.post("/api/intake/sessions/{session_id}/draft")
async def save_draft(session_id: str, request: Request) -> DraftResponse:
    controller = _get_controller(request, session_id)
    controller.save_draft()
    return DraftResponse(success=True, session=_session_response(controller))


@router.post("/api/intake/sessions/{session_id}/draft/restore")
async def restore_draft(session_id: str, request: Request) -> DraftResponse:
    controller = _get_controller(request, session_id)
    try:
        restored = controller.restore_draft()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return DraftResponse(success=restored, session=_session_response(controller))


@router.delete("/api/intake/sessions/{session_id}/draft")
async def discard_draft(session_id: str, request: Request) -> DraftResponse:
    controller = _get_controller(request, session_id)
    discarded = controller.discard_draft()
    return DraftResponse(success=discarded, session=_session_response(controller))
