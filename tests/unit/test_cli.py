"""Unit tests for the objpool CLI."""

import json
import logging

import pytest

from objpool import cli
from objpool import settings as settings_module
from objpool.config import PoolConfig
from objpool.settings import Settings


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Run the CLI against settings built from a clean environment."""
    monkeypatch.setattr(settings_module, "_settings", Settings())


class TestRun:
    """Test the borrow/return run used by the CLI."""

    def test_run_returns_everything(self):
        stats = cli.run(PoolConfig(minimum=2, maximum=3), borrows=4, hold=False)

        assert stats.borrowed == 4
        assert stats.returned == 4
        assert stats.managed == 4
        assert stats.available == 4
        assert stats.outstanding == 0

    def test_run_hold(self):
        stats = cli.run(PoolConfig(minimum=1), borrows=3, hold=True)

        assert stats.returned == 0
        assert stats.outstanding == 3

    def test_token_numbering_starts_fresh_each_run(self, caplog):
        """Serials restart at 1 for every run."""
        with caplog.at_level(logging.DEBUG, logger="objpool.cli"):
            cli.run(PoolConfig(), borrows=1, hold=True)
            cli.run(PoolConfig(), borrows=1, hold=True)

        borrow_lines = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Borrow")]
        assert borrow_lines == ["Borrow 1/1: Token(1)", "Borrow 1/1: Token(1)"]


class TestMain:
    """Test argument handling and exit codes."""

    def test_text_output(self, capsys):
        exit_code = cli.main(["--minimum", "2", "--maximum", "3", "--borrows", "2"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "managed:     2" in out
        assert "borrowed:    2" in out

    def test_json_output(self, capsys):
        exit_code = cli.main(["--minimum", "1", "--borrows", "3", "--hold", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert data["status"] == "ok"
        assert data["managed"] == 3
        assert data["outstanding"] == 3
        assert data["bound"] == "idle"

    def test_idle_bound_allows_growth(self, capsys):
        """With the default bound, borrowing past maximum still succeeds."""
        exit_code = cli.main(["--minimum", "2", "--maximum", "3", "--borrows", "4", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert data["managed"] == 4

    def test_managed_bound_capacity_exceeded(self, capsys):
        exit_code = cli.main(["--minimum", "2", "--maximum", "3", "--bound", "managed", "--borrows", "4", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 2
        assert data["status"] == "error"
        assert "full pool" in data["error"]

    def test_invalid_bounds(self):
        assert cli.main(["--minimum", "5", "--maximum", "1"]) == 1

    def test_missing_config_file(self, tmp_path):
        assert cli.main(["--config", str(tmp_path / "missing.yaml")]) == 1

    def test_config_file_with_flag_override(self, tmp_path, capsys):
        path = tmp_path / "pool.yaml"
        path.write_text("pool:\n  minimum: 1\n  maximum: 2\n  bound: managed\n")

        exit_code = cli.main(["--config", str(path), "--maximum", "5", "--borrows", "5", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert data["maximum"] == 5
        assert data["bound"] == "managed"

    def test_settings_used_when_no_flags(self, monkeypatch, capsys):
        monkeypatch.setattr(settings_module, "_settings", Settings(pool_minimum=3))

        exit_code = cli.main(["--borrows", "0", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert data["available"] == 3

    def test_invalid_environment_is_configuration_error(self, monkeypatch, capsys, caplog):
        """Bad POOL_* values exit with code 1 and a logged error, not a traceback."""
        monkeypatch.setenv("POOL_MINIMUM", "-1")
        monkeypatch.setattr(settings_module, "_settings", None)

        with caplog.at_level(logging.ERROR, logger="objpool.cli"):
            exit_code = cli.main(["--json"])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert captured.out == ""
        assert "Traceback" not in captured.err
        assert "Invalid environment settings" in caplog.text
        assert "POOL_MINIMUM" in caplog.text
