"""
Tests for persistence — provider table and audit ledger.
"""

import json
from pathlib import Path

import pytest

from rocktree.core.errors import RepoIOError
from rocktree.core.persistence.audit import AuditEntry, AuditWriter
from rocktree.core.persistence.providers import ProviderTable, load_providers, save_providers


class TestProviderTable:
    def test_record_and_find(self):
        table = ProviderTable()
        table.record(Path("/t/a.lua"), "pkg", "1.0-1")
        record = table.find_current_provider(Path("/t/a.lua"))
        assert (record.name, record.version) == ("pkg", "1.0-1")

    def test_record_overwrites(self):
        table = ProviderTable()
        table.record(Path("/t/a.lua"), "old", "1")
        table.record(Path("/t/a.lua"), "new", "2")
        assert table.find_current_provider(Path("/t/a.lua")).name == "new"

    def test_untracked_raises(self):
        with pytest.raises(LookupError, match="not tracked"):
            ProviderTable().find_current_provider(Path("/t/a.lua"))

    def test_forget_only_matching_instance(self):
        table = ProviderTable()
        table.record(Path("/t/a.lua"), "pkg", "2.0-1")

        assert not table.forget(Path("/t/a.lua"), "pkg", "1.0-1")
        assert not table.forget(Path("/t/a.lua"), "other", "2.0-1")
        assert table.forget(Path("/t/a.lua"), "pkg", "2.0-1")
        assert table.providers == {}


class TestProviderFile:
    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "rocks" / "providers.json"
        table = ProviderTable()
        table.record(Path("/t/a.lua"), "pkg", "1.0-1")

        save_providers(table, path)
        loaded = load_providers(path)

        assert loaded.find_current_provider(Path("/t/a.lua")).version == "1.0-1"
        assert json.loads(path.read_text())["schema_version"] == 1

    def test_no_temp_files_left(self, tmp_path: Path):
        save_providers(ProviderTable(), tmp_path / "providers.json")
        assert [p.name for p in tmp_path.iterdir()] == ["providers.json"]

    def test_missing_is_empty(self, tmp_path: Path):
        assert load_providers(tmp_path / "none.json").providers == {}

    def test_corrupt_is_empty(self, tmp_path: Path):
        path = tmp_path / "providers.json"
        path.write_text("{not json")
        assert load_providers(path).providers == {}

    def test_wrong_shape_is_empty(self, tmp_path: Path):
        path = tmp_path / "providers.json"
        path.write_text('{"providers": {"/t/a.lua": "pkg"}}')
        assert load_providers(path).providers == {}

    def test_unreadable_raises(self, tmp_path: Path):
        path = tmp_path / "providers.json"
        path.mkdir()
        with pytest.raises(RepoIOError, match="Cannot read provider table"):
            load_providers(path)

    def test_unwritable_raises(self, tmp_path: Path):
        path = tmp_path / "providers.json"
        path.mkdir()
        with pytest.raises(RepoIOError, match="Cannot save provider table"):
            save_providers(ProviderTable(), path)
        assert [p.name for p in tmp_path.iterdir()] == ["providers.json"]


class TestAuditLedger:
    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        writer.write(AuditEntry(operation_type="deploy", package="pkg", version="1.0-1", status="ok"))
        writer.write(AuditEntry(operation_type="remove", package="pkg", version="1.0-1", status="failed",
                                errors=["boom"]))

        entries = writer.read_all()
        assert [e.operation_type for e in entries] == ["deploy", "remove"]
        assert entries[1].errors == ["boom"]
        assert entries[0].timestamp

    def test_skips_corrupt_lines(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(operation_type="deploy"))
        with path.open("a") as f:
            f.write("garbage\n\n")
        writer.write(AuditEntry(operation_type="remove"))

        assert [e.operation_type for e in writer.read_all()] == ["deploy", "remove"]

    def test_missing_ledger(self, tmp_path: Path):
        assert AuditWriter(tmp_path / "none.ndjson").read_all() == []

    def test_write_failure_is_swallowed(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        AuditWriter(blocker / "audit.ndjson").write(AuditEntry(operation_type="deploy"))
