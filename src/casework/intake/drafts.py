"""Local draft snapshots of in-progress records.

Drafts live on the case worker's machine only and are never synchronised
with the case service. One slot exists for new cases and one for edits;
saving overwrites the slot. Restoring is always an explicit request.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from casework.core.config import DraftConfig
from casework.intake.models import IntakeRecord

logger = logging.getLogger(__name__)


class DraftStore:
    """JSON file per draft key under ``config.drafts_dir``."""

    def __init__(self, config: DraftConfig | None = None) -> None:
        self._config = config or DraftConfig()
        self._dir = Path(self._config.drafts_dir)

    def key_for(self, edit_mode: bool) -> str:
        return self._config.edit_case_key if edit_mode else self._config.new_case_key

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def save(self, key: str, record: IntakeRecord) -> Path:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        envelope = {
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "record": json.loads(record.model_dump_json()),
        }
        path.write_text(json.dumps(envelope, ensure_ascii=False))
        logger.info("Saved draft %r", key)
        return path

    def load(self, key: str) -> IntakeRecord | None:
        """Return the stored draft, or None if absent or unreadable."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            envelope = json.loads(path.read_text())
            return IntakeRecord.model_validate(envelope["record"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable draft %r: %s", key, exc)
            return None

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True
