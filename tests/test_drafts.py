"""Tests for local draft snapshots."""

from __future__ import annotations

import json

import pytest

from casework.core.config import DraftConfig
from casework.intake.drafts import DraftStore
from tests.conftest import make_valid_record


@pytest.fixture
def drafts(tmp_path):
    return DraftStore(DraftConfig(drafts_dir=str(tmp_path / "drafts")))


class TestDraftStore:
    def test_keys(self, drafts):
        assert drafts.key_for(edit_mode=False) == "family_draft"
        assert drafts.key_for(edit_mode=True) == "family_draft_edit"

    def test_save_and_load(self, drafts):
        record = make_valid_record()
        path = drafts.save("family_draft", record)
        assert path.exists()
        envelope = json.loads(path.read_text())
        assert "saved_at" in envelope
        loaded = drafts.load("family_draft")
        assert loaded == record

    def test_save_overwrites(self, drafts):
        drafts.save("family_draft", make_valid_record(record_number="A-1"))
        drafts.save("family_draft", make_valid_record(record_number="A-2"))
        assert drafts.load("family_draft").record_number == "A-2"

    def test_missing(self, drafts):
        assert drafts.load("family_draft") is None
        assert drafts.delete("family_draft") is False

    def test_corrupt_draft_ignored(self, drafts, tmp_path):
        (tmp_path / "drafts").mkdir()
        (tmp_path / "drafts" / "family_draft.json").write_text("{not json")
        assert drafts.load("family_draft") is None

    def test_delete(self, drafts):
        drafts.save("family_draft", make_valid_record())
        assert drafts.delete("family_draft") is True
        assert drafts.load("family_draft") is None
