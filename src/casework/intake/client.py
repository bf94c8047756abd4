"""HTTP client for the case-management service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from casework.core.config import ServiceConfig
from casework.intake.errors import RecordLoadError, ReferenceDataLoadError, SubmissionError
from casework.intake.models import (
    CaseWorker,
    ExpenseType,
    Facility,
    ReferenceData,
    SocialProgram,
)

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    """Server-provided message if the body carries one, else the status line."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {resp.status_code}"


def _as_list(data: Any) -> list[dict[str, Any]]:
    # Catalogue endpoints occasionally answer with a non-list; treat as empty.
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


class CaseServiceClient:
    """Talks to the case service's reference-data and record endpoints.

    Requests carry the configured bearer token. No retries are attempted;
    failures surface as :mod:`casework.intake.errors` exceptions.
    """

    def __init__(self, config: ServiceConfig | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config or ServiceConfig()
        headers: dict[str, str] = {}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout_seconds),
            headers=headers,
            transport=transport,
        )

    # -- reference data ------------------------------------------------------

    async def _get_catalogue(self, path: str) -> list[dict[str, Any]]:
        try:
            resp = await self._http.get(path)
            resp.raise_for_status()
            return _as_list(resp.json())
        except httpx.HTTPStatusError as exc:
            logger.error("Catalogue %s returned %d", path, exc.response.status_code)
            raise ReferenceDataLoadError(
                f"Could not load {path}: {_error_message(exc.response)}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Catalogue %s failed: %s", path, exc)
            raise ReferenceDataLoadError(f"Could not load {path}: {exc}") from exc

    async def get_facilities(self) -> list[Facility]:
        return [Facility.model_validate(f) for f in await self._get_catalogue(self.config.facilities_path)]

    async def get_case_workers(self) -> list[CaseWorker]:
        return [CaseWorker.model_validate(u) for u in await self._get_catalogue(self.config.case_workers_path)]

    async def get_programs(self) -> list[SocialProgram]:
        return [SocialProgram.model_validate(p) for p in await self._get_catalogue(self.config.programs_path)]

    async def get_expense_types(self) -> list[ExpenseType]:
        return [ExpenseType.model_validate(t) for t in await self._get_catalogue(self.config.expense_types_path)]

    async def load_reference_data(self) -> ReferenceData:
        """Fetch all four catalogues concurrently; any failure fails the load."""
        facilities, case_workers, programs, expense_types = await asyncio.gather(
            self.get_facilities(),
            self.get_case_workers(),
            self.get_programs(),
            self.get_expense_types(),
        )
        logger.info(
            "Loaded reference data: %d facilities, %d case workers, %d programs, %d expense types",
            len(facilities), len(case_workers), len(programs), len(expense_types),
        )
        return ReferenceData(
            facilities=facilities,
            case_workers=case_workers,
            programs=programs,
            expense_types=expense_types,
        )

    # -- records -------------------------------------------------------------

    async def get_record(self, record_id: int) -> dict[str, Any]:
        path = f"{self.config.records_path}/{record_id}"
        try:
            resp = await self._http.get(path)
        except httpx.HTTPError as exc:
            logger.error("Loading record %s failed: %s", record_id, exc)
            raise RecordLoadError(f"Could not load record {record_id}: {exc}") from exc
        if resp.status_code >= 400:
            logger.error("Loading record %s returned %d", record_id, resp.status_code)
            raise RecordLoadError(
                f"Could not load record {record_id}: {_error_message(resp)}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise RecordLoadError(f"Record {record_id} is not valid JSON") from exc
        if not isinstance(data, dict):
            raise RecordLoadError(f"Record {record_id} has an unexpected shape")
        return data

    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._http.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise SubmissionError(f"Could not reach the case service: {exc}") from exc
        if resp.status_code >= 400:
            logger.warning("%s %s returned %d", method, path, resp.status_code)
            raise SubmissionError(_error_message(resp), status_code=resp.status_code)
        try:
            body = resp.json()
        except ValueError:
            body = None
        return body if isinstance(body, dict) else {}

    async def create_record(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._send("POST", self.config.records_path, payload)

    async def update_record(self, record_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._send("PUT", f"{self.config.records_path}/{record_id}", payload)

    async def close(self) -> None:
        await self._http.aclose()
