"""Wizard state machine for the household intake form."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any

import yaml

from casework.core.config import IntakeConfig
from casework.core.types import SessionStatus, WizardStep
from casework.intake.client import CaseServiceClient
from casework.intake.drafts import DraftStore
from casework.intake.editors import reduce
from casework.intake.errors import IntakeError, SubmissionError
from casework.intake.mapper import dehydrate, hydrate, new_record
from casework.intake.models import (
    ErrorTree,
    IntakeRecord,
    ReferenceData,
    StepDefinition,
    SubmitResult,
    WizardDefinition,
)
from casework.intake.validation import ValidationEngine, dump_tree

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_DEFAULT_WIZARD_PATH = _PROJECT_ROOT / "config" / "wizard.yml"

STEP_COUNT = len(WizardStep)

MSG_FIX_ERRORS = "Please fix the highlighted fields before continuing."
MSG_FORM_INVALID = "The form has errors. Please review the highlighted fields."
MSG_SUBMITTED = "Household record saved."
MSG_DRAFT_SAVED = "Draft saved."


def load_wizard_definition(path: str | Path | None = None) -> WizardDefinition:
    """Load the step catalogue; falls back to built-in titles if the file is absent.

    Raises:
        ValueError: If the file does not list exactly one step per wizard step.
    """
    path = Path(path) if path else _DEFAULT_WIZARD_PATH
    if not path.is_absolute() and not path.exists():
        path = _PROJECT_ROOT / path
    if not path.exists():
        return WizardDefinition(
            id="household_intake",
            title="Household Intake",
            steps=[StepDefinition(id=s.name.lower(), title=s.name.title()) for s in WizardStep],
        )
    with open(path) as fh:
        data = yaml.safe_load(fh) or {}
    steps = [
        StepDefinition(
            id=s["id"],
            title=s.get("title", s["id"]),
            description=s.get("description", ""),
        )
        for s in data.get("steps", [])
    ]
    if len(steps) != STEP_COUNT:
        raise ValueError(f"Wizard {path} defines {len(steps)} steps, expected {STEP_COUNT}")
    return WizardDefinition(
        id=data.get("id", "household_intake"),
        title=data.get("title", "Household Intake"),
        description=data.get("description", ""),
        steps=steps,
    )


class WizardController:
    """Drives one intake session: step position, validation gating and submission.

    The controller owns an exclusive :class:`IntakeRecord` for its lifetime.
    Edits go through :meth:`dispatch`; forward navigation is gated by the
    :class:`ValidationEngine`; backward navigation never validates.
    """

    def __init__(
        self,
        record: IntakeRecord | None = None,
        reference: ReferenceData | None = None,
        *,
        client: CaseServiceClient | None = None,
        validation_engine: ValidationEngine | None = None,
        drafts: DraftStore | None = None,
        definition: WizardDefinition | None = None,
        config: IntakeConfig | None = None,
        edit_mode: bool = False,
    ) -> None:
        self.id = str(uuid.uuid4())
        self.config = config or IntakeConfig()
        self.reference = reference or ReferenceData()
        self.record = record or new_record(self.config, self.reference)
        self.definition = definition or load_wizard_definition(self.config.wizard_path)
        self.edit_mode = edit_mode
        self.status = SessionStatus.READY
        self.current_step = 0
        # Existing records already carry data for every step.
        self.completed_steps = [edit_mode] * STEP_COUNT
        self.errors: ErrorTree = {}
        self.message = ""
        self._client = client
        self._validation = validation_engine or ValidationEngine(self.config)
        self._drafts = drafts

    @classmethod
    async def open(
        cls,
        client: CaseServiceClient,
        record_id: int | None = None,
        **kwargs: Any,
    ) -> WizardController:
        """Load reference data (and the record, in edit mode) and return a ready controller.

        Raises:
            ReferenceDataLoadError: If any catalogue fails to load.
            RecordLoadError: If the record to edit cannot be loaded.
        """
        controller = cls(client=client, edit_mode=record_id is not None, **kwargs)
        await controller.load(record_id)
        return controller

    async def load(self, record_id: int | None = None) -> None:
        if self._client is None:
            raise ValueError("No case service client configured.")
        self.status = SessionStatus.LOADING
        try:
            self.reference = await self._client.load_reference_data()
            if record_id is None:
                self.record = new_record(self.config, self.reference)
            else:
                persisted = await self._client.get_record(record_id)
                self.record = hydrate(persisted, self.reference, self.config)
        except IntakeError as exc:
            self.status = SessionStatus.FAILED
            self.message = str(exc)
            logger.error("Wizard %s failed to load: %s", self.id, exc)
            raise
        self.status = SessionStatus.READY

    # -- state ---------------------------------------------------------------

    @property
    def step(self) -> WizardStep:
        return WizardStep(self.current_step)

    @property
    def is_last_step(self) -> bool:
        return self.current_step == STEP_COUNT - 1

    def _ensure_editable(self) -> None:
        if self.status != SessionStatus.READY:
            raise ValueError(f"Wizard is {self.status.value}; no further changes are accepted.")

    def progress(self) -> dict[str, Any]:
        steps = []
        for i, step_def in enumerate(self.definition.steps):
            steps.append({
                "id": step_def.id,
                "title": step_def.title,
                "current": i == self.current_step,
                "completed": self.completed_steps[i],
                "accessible": i <= self.current_step or self.completed_steps[i],
            })
        return {
            "current_step": self.current_step,
            "total_steps": STEP_COUNT,
            "percent": round((self.current_step + 1) / STEP_COUNT * 100),
            "steps": steps,
        }

    def snapshot(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "edit_mode": self.edit_mode,
            "current_step": self.current_step,
            "completed_steps": list(self.completed_steps),
            "record": self.record.model_dump(mode="json"),
            "errors": dump_tree(self.errors),
            "message": self.message,
            "progress": self.progress(),
        }

    # -- navigation ----------------------------------------------------------

    def advance(self) -> ErrorTree:
        """Validate the current step and move forward if it is clean.

        Returns the step's error tree; empty means the step was accepted.
        On the last step a clean validation completes it without moving.
        """
        self._ensure_editable()
        tree = self._validation.validate_step(self.record, self.current_step)
        if tree:
            self.errors = tree
            self.message = MSG_FIX_ERRORS
            return tree

        self.errors = {}
        self.message = ""
        self.completed_steps[self.current_step] = True
        if not self.is_last_step:
            self.current_step += 1
        return {}

    def retreat(self) -> None:
        self._ensure_editable()
        self.errors = {}
        self.message = ""
        if self.current_step > 0:
            self.current_step -= 1

    def go_to(self, step: int) -> None:
        """Jump to an earlier step or to any step already completed.

        Raises:
            ValueError: If *step* is out of range or not yet reachable.
        """
        self._ensure_editable()
        if not 0 <= step < STEP_COUNT:
            raise ValueError(f"Step {step} is out of range.")
        if step > self.current_step and not self.completed_steps[step]:
            raise ValueError(f"Step {step} is not reachable yet.")
        self.errors = {}
        self.message = ""
        self.current_step = int(step)

    # -- editing -------------------------------------------------------------

    def dispatch(self, action: Any) -> IntakeRecord:
        """Apply an editor action to the live record."""
        self._ensure_editable()
        self.record = reduce(self.record, action, self.reference)
        return self.record

    # -- drafts --------------------------------------------------------------

    def _draft_store(self) -> DraftStore:
        if self._drafts is None:
            raise ValueError("No draft store configured.")
        return self._drafts

    def save_draft(self) -> Path:
        store = self._draft_store()
        path = store.save(store.key_for(self.edit_mode), self.record)
        self.message = MSG_DRAFT_SAVED
        return path

    def restore_draft(self) -> bool:
        """Replace the live record with the saved draft, if one matches.

        An edit-mode draft only applies to the same case.
        """
        self._ensure_editable()
        store = self._draft_store()
        draft = store.load(store.key_for(self.edit_mode))
        if draft is None:
            return False
        if self.edit_mode and draft.case_id != self.record.case_id:
            return False
        self.record = draft
        self.errors = {}
        return True

    def discard_draft(self) -> bool:
        store = self._draft_store()
        return store.delete(store.key_for(self.edit_mode))

    # -- submission ----------------------------------------------------------

    async def submit(self) -> SubmitResult:
        """Validate every step and send the record to the case service.

        On validation failure the wizard moves to the first invalid step.
        A transport failure leaves all state intact so the user can retry.
        """
        self._ensure_editable()
        if self._client is None:
            raise ValueError("No case service client configured.")

        failed_step, tree = self._validation.first_invalid_step(self.record)
        if failed_step is not None:
            self.current_step = int(failed_step)
            self.errors = tree
            self.message = MSG_FORM_INVALID
            return SubmitResult(
                success=False,
                message=self.message,
                failed_step=int(failed_step),
                errors=dump_tree(tree),
            )

        payload = dehydrate(self.record)
        # Blocks edits and a second submit while the request is in flight.
        self.status = SessionStatus.SUBMITTING
        try:
            if self.record.case_id is not None:
                body = await self._client.update_record(self.record.case_id, payload)
            else:
                body = await self._client.create_record(payload)
        except SubmissionError as exc:
            self.status = SessionStatus.READY
            self.message = f"Could not save the record: {exc}"
            return SubmitResult(success=False, message=self.message)
        except Exception:
            self.status = SessionStatus.READY
            raise

        case_id = body.get("id", self.record.case_id)
        self.record = self.record.model_copy(update={"case_id": case_id})
        self.errors = {}
        self.completed_steps = [True] * STEP_COUNT
        self.status = SessionStatus.SUBMITTED
        self.message = MSG_SUBMITTED
        logger.info("Wizard %s submitted case %s", self.id, case_id)
        return SubmitResult(success=True, case_id=case_id, message=self.message)
