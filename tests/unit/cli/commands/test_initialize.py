"""
Unit tests for the 'init' command.
"""

from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from bpmap.cli.commands.initialize import init
from bpmap.core.storage import SQLiteStorage


class TestInitCommand:
    """Test the init command."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_init_writes_config(self, runner, tmp_path):
        result = runner.invoke(init, ["-p", str(tmp_path)])

        assert result.exit_code == 0
        assert "Initialized successfully" in result.output

        config = yaml.safe_load((tmp_path / ".bpmap" / "config.yaml").read_text())
        assert config["project_name"] == tmp_path.name
        assert config["storage"]["backend"] == "json"
        assert not (tmp_path / ".bpmap" / "model.json").exists()

    def test_init_demo_seeds_model(self, runner, tmp_path):
        result = runner.invoke(init, ["--demo", "-p", str(tmp_path)])
        assert result.exit_code == 0
        assert "Seeded the demo model" in result.output
        assert "Customer Onboarding" in (tmp_path / ".bpmap" / "model.json").read_text()

    def test_init_sqlite_backend(self, runner, tmp_path):
        result = runner.invoke(init, ["--demo", "--backend", "sqlite", "-p", str(tmp_path)])
        assert result.exit_code == 0
        storage = SQLiteStorage(tmp_path / ".bpmap" / "bpmap.db")
        assert len(storage.load()["processes"]) == 4

    def test_gitignore(self, runner, tmp_path):
        (tmp_path / ".gitignore").write_text("node_modules/\n")
        runner.invoke(init, ["-p", str(tmp_path)])
        runner.invoke(init, ["--force", "-p", str(tmp_path)])
        content = (tmp_path / ".gitignore").read_text()
        assert "node_modules/" in content
        assert content.count(".bpmap/") == 1

    @patch("bpmap.cli.commands.initialize.Confirm.ask")
    def test_existing_config_declined(self, mock_confirm, runner, tmp_path):
        runner.invoke(init, ["-p", str(tmp_path)])
        mock_confirm.return_value = False

        result = runner.invoke(init, ["--backend", "sqlite", "-p", str(tmp_path)])

        assert result.exit_code == 0
        assert "Aborted." in result.output
        config = yaml.safe_load((tmp_path / ".bpmap" / "config.yaml").read_text())
        assert config["storage"]["backend"] == "json"

    def test_demo_keeps_existing_model_without_force(self, runner, project):
        (project / ".bpmap" / "model.json").write_text('{"processes": []}')
        result = runner.invoke(init, ["--demo", "-p", str(project)])
        assert result.exit_code == 0
        assert "demo not written" in result.output
        assert (project / ".bpmap" / "model.json").read_text() == '{"processes": []}'
