"""
Unit tests for the storage adapters.
"""

import json

import pytest

from bpmap.config import Settings, StorageBackend
from bpmap.core.demo import DemoManager
from bpmap.core.exceptions import StorageError
from bpmap.core.storage import JsonFileStorage, MemoryStorage, SQLiteStorage, open_storage


@pytest.fixture
def snapshot():
    return DemoManager.snapshot()


class TestJsonFileStorage:
    def test_missing_file_loads_none(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "model.json")
        assert storage.exists() is False
        assert storage.load() is None

    def test_round_trip(self, tmp_path, snapshot):
        storage = JsonFileStorage(tmp_path / "nested" / "model.json")
        storage.save(snapshot)
        assert storage.exists()
        assert storage.load() == snapshot
        assert list(tmp_path.joinpath("nested").glob("*.tmp")) == []

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text("{not json")
        with pytest.raises(StorageError):
            JsonFileStorage(path).load()

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text(json.dumps([1, 2]))
        with pytest.raises(StorageError):
            JsonFileStorage(path).load()

    def test_describe(self, tmp_path):
        assert JsonFileStorage(tmp_path / "m.json").describe().startswith("json:")


class TestSQLiteStorage:
    def test_schema_version(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "bpmap.db")
        assert storage.get_schema_version() == 2

    def test_empty_database(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "bpmap.db")
        assert storage.exists() is False
        assert storage.load() is None
        assert storage.revisions() == []

    def test_latest_revision_wins(self, tmp_path, snapshot):
        storage = SQLiteStorage(tmp_path / "bpmap.db")
        storage.save({"processes": [], "systems": [], "vendors": []})
        storage.save(snapshot)

        assert storage.load() == snapshot
        assert storage.load_revision(1) == {"processes": [], "systems": [], "vendors": []}

        revisions = storage.revisions()
        assert [r["revision"] for r in revisions] == [2, 1]
        assert revisions[0]["entity_count"] == 16
        assert revisions[1]["entity_count"] == 0

    def test_reopen_keeps_data(self, tmp_path, snapshot):
        SQLiteStorage(tmp_path / "bpmap.db").save(snapshot)
        reopened = SQLiteStorage(tmp_path / "bpmap.db")
        assert reopened.exists()
        assert reopened.load() == snapshot
        assert reopened.get_schema_version() == 2

    def test_prunes_old_revisions(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "bpmap.db", keep_revisions=2)
        for i in range(3):
            storage.save({"processes": [{"id": f"p{i}", "name": "P", "subProcesses": []}]})
        assert [r["revision"] for r in storage.revisions()] == [3, 2]
        assert storage.load_revision(1) is None


class TestMemoryStorage:
    def test_copies_on_save_and_load(self, snapshot):
        storage = MemoryStorage()
        assert storage.exists() is False
        storage.save(snapshot)
        snapshot["processes"].clear()
        loaded = storage.load()
        assert len(loaded["processes"]) == 4
        loaded["systems"].clear()
        assert len(storage.load()["systems"]) == 5


class TestOpenStorage:
    def test_default_is_json_in_data_dir(self, tmp_path):
        storage = open_storage(Settings(), tmp_path)
        assert isinstance(storage, JsonFileStorage)
        assert storage.path == tmp_path / ".bpmap" / "model.json"

    def test_sqlite_backend(self, tmp_path):
        settings = Settings()
        settings.storage.backend = StorageBackend.SQLITE
        storage = open_storage(settings, tmp_path)
        assert isinstance(storage, SQLiteStorage)
        assert storage.db_path == tmp_path / ".bpmap" / "bpmap.db"

    def test_custom_path(self, tmp_path):
        settings = Settings.model_validate({"storage": {"path": "data/model.json"}})
        storage = open_storage(settings, tmp_path)
        assert storage.path == tmp_path / "data" / "model.json"
