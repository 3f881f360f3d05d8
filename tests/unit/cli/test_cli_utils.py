"""
Unit tests for shared CLI helpers.
"""

import click
import pytest
from click.testing import CliRunner

from bpmap.core.exceptions import NotFoundError, ValidationError
from bpmap.core.types import EntityKind, EntityRef
from bpmap.cli.utils import handle_errors, open_workspace, resolve_entity


class TestResolveEntity:
    def test_exact_id(self, demo_store):
        assert resolve_entity(demo_store, "sp3") == EntityRef(id="sp3", kind=EntityKind.SUB_PROCESS)

    def test_exact_name_case_insensitive(self, demo_store):
        assert resolve_entity(demo_store, "crm system").id == "s1"

    def test_exact_name_beats_substring(self, demo_store):
        demo_store.create(EntityKind.SYSTEM, "ERP Platform Archive")
        assert resolve_entity(demo_store, "ERP Platform").id == "s2"

    def test_substring(self, demo_store):
        assert resolve_entity(demo_store, "gateway") == EntityRef(id="v2", kind=EntityKind.VENDOR)

    def test_kind_narrows(self, demo_store):
        assert resolve_entity(demo_store, "Customer", EntityKind.PROCESS).id == "p1"

    def test_ambiguous(self, demo_store):
        with pytest.raises(ValidationError) as exc:
            resolve_entity(demo_store, "Customer")
        assert "process:p1" in str(exc.value)
        assert "system:s3" in str(exc.value)

    def test_kind_applies_to_ids(self, demo_store):
        """An id of another kind is not a match."""
        assert resolve_entity(demo_store, "s1").kind == EntityKind.SYSTEM
        with pytest.raises(NotFoundError):
            resolve_entity(demo_store, "s1", "vendor")

    def test_not_found(self, demo_store):
        with pytest.raises(NotFoundError):
            resolve_entity(demo_store, "Mainframe")


class TestWorkspace:
    def test_empty_project(self, tmp_path):
        ws = open_workspace(str(tmp_path))
        assert len(ws.store) == 0
        assert ws.root == tmp_path.resolve()

    def test_save_round_trip(self, project):
        ws = open_workspace(str(project))
        ws.store.create(EntityKind.VENDOR, "Courier")
        ws.save()
        assert open_workspace(str(project)).store.get(EntityKind.VENDOR, "v4").name == "Courier"


class TestHandleErrors:
    def test_bpmap_errors_exit_1(self):
        @click.command()
        @handle_errors
        def boom():
            raise NotFoundError("system", "s9")

        result = CliRunner().invoke(boom)
        assert result.exit_code == 1
        assert "system not found: s9" in result.output
