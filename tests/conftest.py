"""Shared fixtures: seeded stores and on-disk projects."""

import pytest

from bpmap.config import CONFIG_ENV_VAR
from bpmap.core.demo import DemoManager
from bpmap.core.storage import JsonFileStorage
from bpmap.core.store import EntityStore
from bpmap.core.types import EntityKind


@pytest.fixture(autouse=True)
def _no_config_override(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def store():
    """Onboarding (p1) -> ID Check (sp1) -> CRM (s1)."""
    s = EntityStore()
    s.create(EntityKind.PROCESS, "Onboarding")
    s.create(EntityKind.SUB_PROCESS, "ID Check", "p1")
    s.create(EntityKind.SYSTEM, "CRM")
    s.index.link("sp1", EntityKind.SYSTEM, "s1")
    return s


@pytest.fixture
def demo_store():
    return DemoManager.build_store()


@pytest.fixture
def project(tmp_path):
    """A project directory holding the demo model in the default JSON location."""
    storage = JsonFileStorage(tmp_path / ".bpmap" / "model.json")
    DemoManager(storage).provision()
    return tmp_path
