"""
Unit tests for snapshot load/export.
"""

import copy

import pytest

from bpmap.core.demo import DemoManager
from bpmap.core.exceptions import ValidationError
from bpmap.core.snapshot import Snapshot
from bpmap.core.store import EntityStore
from bpmap.core.types import EntityKind


class TestRoundTrip:
    def test_export_of_load_is_identical(self):
        """Loading then exporting reproduces the snapshot."""
        snapshot = DemoManager.snapshot()
        store = EntityStore.from_snapshot(copy.deepcopy(snapshot))
        assert store.export() == snapshot

    def test_load_of_export_keeps_structure(self, demo_store):
        first = demo_store.export()
        demo_store.load(first)
        assert demo_store.export() == first

    def test_export_after_mutations(self, store):
        store.create(EntityKind.VENDOR, "Bank")
        store.set_links("sp1", EntityKind.VENDOR, ["v1"])
        assert store.export() == {
            "processes": [{
                "id": "p1",
                "name": "Onboarding",
                "subProcesses": [
                    {"id": "sp1", "name": "ID Check", "systems": ["s1"], "vendors": ["v1"]},
                ],
            }],
            "systems": [{"id": "s1", "name": "CRM"}],
            "vendors": [{"id": "v1", "name": "Bank"}],
        }


class TestLegacySnapshots:
    def test_flat_process_becomes_implicit_sub_process(self):
        """Legacy processes with direct links get one sub-process."""
        store = EntityStore.from_snapshot({
            "processes": [
                {"id": "p1", "name": "Billing", "systems": ["s1"], "providers": ["v1"]},
                {"id": "p2", "name": "Sales", "subProcesses": [
                    {"id": "sp3", "name": "Quote", "systems": [], "vendors": []},
                ]},
            ],
            "systems": [{"id": "s1", "name": "ERP"}],
            "providers": [{"id": "v1", "name": "Bank"}],
        })

        implicit = store.sub_processes_of("p1")
        assert [(sp.id, sp.name) for sp in implicit] == [("sp4", "Billing")]
        assert store.index.related_to("sp4", EntityKind.SYSTEM) == ["s1"]
        assert store.index.related_to("sp4", EntityKind.VENDOR) == ["v1"]

    def test_exported_legacy_model_uses_current_shape(self):
        store = EntityStore.from_snapshot({
            "processes": [{"id": "p1", "name": "Billing", "vendors": []}],
        })
        exported = store.export()
        assert exported["processes"][0] == {
            "id": "p1",
            "name": "Billing",
            "subProcesses": [{"id": "sp1", "name": "Billing", "systems": [], "vendors": []}],
        }
        assert "providers" not in exported


class TestSnapshotParse:
    def test_none_is_empty(self):
        assert Snapshot.parse(None) == Snapshot()

    def test_passthrough(self):
        snapshot = Snapshot()
        assert Snapshot.parse(snapshot) is snapshot

    @pytest.mark.parametrize("data", [
        {"processes": [{"name": "no id"}]},
        {"processes": [{"id": "", "name": "empty id"}]},
        {"systems": "s1"},
        [1, 2, 3],
    ])
    def test_malformed(self, data):
        with pytest.raises(ValidationError):
            Snapshot.parse(data)

    def test_extra_fields_ignored(self):
        snapshot = Snapshot.parse({"version": 3, "systems": [{"id": "s1", "name": "A", "color": "red"}]})
        assert snapshot.systems[0].id == "s1"
