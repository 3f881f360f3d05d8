"""
Unit tests for the RelationshipIndex.
"""

import pytest

from bpmap.core.exceptions import NotFoundError, ValidationError
from bpmap.core.relationships import RelationshipIndex
from bpmap.core.types import EntityKind

SYSTEM = EntityKind.SYSTEM
VENDOR = EntityKind.VENDOR


@pytest.fixture
def index():
    idx = RelationshipIndex()
    idx.register(EntityKind.PROCESS, "p1")
    idx.register(EntityKind.PROCESS, "p2")
    idx.register(EntityKind.SUB_PROCESS, "sp1", "p1")
    idx.register(EntityKind.SUB_PROCESS, "sp2", "p1")
    idx.register(EntityKind.SUB_PROCESS, "sp3", "p2")
    for sid in ("s1", "s2", "s3"):
        idx.register(SYSTEM, sid)
    for vid in ("v1", "v2"):
        idx.register(VENDOR, vid)
    return idx


def assert_symmetric(index: RelationshipIndex) -> None:
    for kind in (SYSTEM, VENDOR):
        for sp, targets in index._forward[kind].items():
            for target in targets:
                assert sp in index._reverse[kind][target]
        for target, sps in index._reverse[kind].items():
            for sp in sps:
                assert target in index._forward[kind][sp]
    assert index.check_integrity() == []


class TestRegister:
    def test_sub_process_needs_registered_owner(self, index):
        """Registering a sub-process requires its owner first."""
        with pytest.raises(ValidationError):
            index.register(EntityKind.SUB_PROCESS, "sp9", "p9")
        assert not index.has(EntityKind.SUB_PROCESS, "sp9")

    def test_ownership(self, index):
        assert index.sub_processes_of("p1") == ["sp1", "sp2"]
        assert index.owner_of("sp3") == "p2"
        assert index.sub_processes_of("p9") == []

    def test_kind_of(self, index):
        assert index.kind_of("sp1") == EntityKind.SUB_PROCESS
        assert index.kind_of("v2") == VENDOR
        assert index.kind_of("nope") is None


class TestLinking:
    def test_link_and_unlink(self, index):
        assert index.link("sp1", SYSTEM, "s1") is True
        assert index.link("sp1", SYSTEM, "s1") is False
        assert index.is_linked("sp1", SYSTEM, "s1")
        assert index.related_to("s1", EntityKind.SUB_PROCESS) == ["sp1"]

        assert index.unlink("sp1", SYSTEM, "s1") is True
        assert index.unlink("sp1", SYSTEM, "s1") is False
        assert index.related_to("s1", EntityKind.SUB_PROCESS) == []

    def test_link_missing_endpoint(self, index):
        assert index.link("sp9", SYSTEM, "s1") is False
        assert index.link("sp1", SYSTEM, "s9") is False
        assert index.link_count(SYSTEM) == 0

    def test_only_leaf_targets(self, index):
        """Only systems and vendors can be link targets."""
        with pytest.raises(ValidationError):
            index.link("sp1", EntityKind.PROCESS, "p2")

    def test_symmetry_after_mixed_operations(self, index):
        """Forward and reverse maps agree after any sequence of edits."""
        index.link("sp1", SYSTEM, "s1")
        index.link("sp1", SYSTEM, "s2")
        index.link("sp2", SYSTEM, "s1")
        index.link("sp3", VENDOR, "v1")
        index.unlink("sp1", SYSTEM, "s1")
        index.set_links("sp2", SYSTEM, ["s2", "s3"])
        index.set_links("sp1", VENDOR, ["v1", "v2"])
        index.set_links("sp3", VENDOR, [])
        assert_symmetric(index)
        assert index.related_to("v1", EntityKind.SUB_PROCESS) == ["sp1"]
        assert index.related_to("s2", EntityKind.SUB_PROCESS) == ["sp1", "sp2"]


class TestSetLinks:
    def test_adds_without_touching_existing(self, index):
        """set_links only applies the difference."""
        index.link("sp1", SYSTEM, "s1")
        before = index._reverse[SYSTEM]["s1"]

        added, removed = index.set_links("sp1", SYSTEM, ["s1", "s2"])

        assert added == ["s2"]
        assert removed == []
        assert index._reverse[SYSTEM]["s1"] is before
        assert list(before) == ["sp1"]
        assert index.related_to("sp1", SYSTEM) == ["s1", "s2"]

    def test_keeps_position_of_surviving_links(self, index):
        index.link("sp2", SYSTEM, "s1")
        index.link("sp1", SYSTEM, "s1")
        index.set_links("sp2", SYSTEM, ["s1", "s3"])
        assert index.related_to("s1", EntityKind.SUB_PROCESS) == ["sp2", "sp1"]

    def test_removes(self, index):
        index.set_links("sp1", VENDOR, ["v1", "v2"])
        added, removed = index.set_links("sp1", VENDOR, ["v2"])
        assert added == []
        assert removed == ["v1"]
        assert index.related_to("v1", EntityKind.SUB_PROCESS) == []

    def test_duplicate_ids_collapse(self, index):
        added, _ = index.set_links("sp1", SYSTEM, ["s1", "s1"])
        assert added == ["s1"]

    def test_unknown_target_changes_nothing(self, index):
        """An unknown target rejects the whole update."""
        index.link("sp1", SYSTEM, "s1")
        with pytest.raises(NotFoundError):
            index.set_links("sp1", SYSTEM, ["s2", "s9"])
        assert index.related_to("sp1", SYSTEM) == ["s1"]

    def test_unknown_sub_process(self, index):
        with pytest.raises(NotFoundError):
            index.set_links("sp9", SYSTEM, ["s1"])


class TestDerivedRelationships:
    @pytest.fixture
    def linked(self, index):
        index.set_links("sp1", SYSTEM, ["s1", "s2"])
        index.set_links("sp2", SYSTEM, ["s2", "s3"])
        index.set_links("sp1", VENDOR, ["v1"])
        index.set_links("sp3", SYSTEM, ["s1"])
        index.set_links("sp3", VENDOR, ["v2"])
        return index

    def test_process_leaves_are_ordered_unions(self, linked):
        assert linked.process_systems("p1") == ["s1", "s2", "s3"]
        assert linked.process_vendors("p1") == ["v1"]
        assert linked.related_to("p2", SYSTEM) == ["s1"]

    def test_leaf_to_processes(self, linked):
        assert linked.related_to("s1", EntityKind.PROCESS) == ["p1", "p2"]
        assert linked.related_to("s2", EntityKind.PROCESS) == ["p1"]

    def test_leaf_to_other_leaf_kind(self, linked):
        assert linked.related_to("s1", VENDOR) == ["v1", "v2"]
        assert linked.related_to("v1", SYSTEM) == ["s1", "s2"]

    def test_leaf_to_same_kind_excludes_itself(self, linked):
        """A leaf is not related to itself."""
        assert linked.related_to("s2", SYSTEM) == ["s1", "s3"]

    def test_sub_process_to_process(self, linked):
        assert linked.related_to("sp3", EntityKind.PROCESS) == ["p2"]

    def test_unknown_entity(self, linked):
        assert linked.related_to("zzz", SYSTEM) == []
        assert linked.related_to("s1", SYSTEM, source_kind=VENDOR) == []


class TestCascade:
    def test_process_cascade_is_complete(self, index):
        """Deleting a process leaves no link behind."""
        index.set_links("sp1", SYSTEM, ["s1"])
        index.set_links("sp2", VENDOR, ["v1"])
        index.set_links("sp3", SYSTEM, ["s1"])

        dropped = index.cascade_delete_entity(EntityKind.PROCESS, "p1")

        assert dropped == ["sp1", "sp2"]
        assert not index.has(EntityKind.PROCESS, "p1")
        assert index.owner_of("sp1") is None
        assert index.related_to("s1", EntityKind.SUB_PROCESS) == ["sp3"]
        assert index.related_to("v1", EntityKind.SUB_PROCESS) == []
        assert_symmetric(index)

    def test_leaf_cascade(self, index):
        index.set_links("sp1", SYSTEM, ["s1", "s2"])
        index.set_links("sp2", SYSTEM, ["s1"])
        assert index.cascade_delete_entity(SYSTEM, "s1") == []
        assert index.related_to("sp1", SYSTEM) == ["s2"]
        assert index.related_to("sp2", SYSTEM) == []
        assert not index.has(SYSTEM, "s1")
        assert_symmetric(index)

    def test_sub_process_cascade(self, index):
        index.set_links("sp1", VENDOR, ["v2"])
        assert index.cascade_delete_entity(EntityKind.SUB_PROCESS, "sp1") == ["sp1"]
        assert index.sub_processes_of("p1") == ["sp2"]
        assert index.related_to("v2", EntityKind.SUB_PROCESS) == []

    def test_missing_entity_is_noop(self, index):
        assert index.cascade_delete_entity(VENDOR, "v9") == []

    def test_clear(self, index):
        index.link("sp1", SYSTEM, "s1")
        index.clear()
        assert index.kind_of("sp1") is None
        assert index.link_count(SYSTEM) == 0
