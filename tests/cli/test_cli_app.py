"""
Tests for the Typer command-line interface.
"""

import pytest
from typer.testing import CliRunner

import tadpoles_cli.cli.app as cli_app
from tadpoles_cli.exceptions import ListingError
from tadpoles_cli.models.stats import IngestStats

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "tadpoles-cli" / "config.ini"
    monkeypatch.setattr(cli_app, "CONFIG_FILE", path)
    return path


def init_config(*extra_args):
    return runner.invoke(
        cli_app.app, ["init", "parent@example.com", "pw", "--force", *extra_args]
    )


def test_version():
    result = runner.invoke(cli_app.app, ["--version"])

    assert result.exit_code == 0
    assert cli_app.__version__ in result.output


def test_validate_without_config(config_file):
    result = runner.invoke(cli_app.app, ["validate"])

    assert result.exit_code == cli_app.EXIT_EXPECTED_ERROR


def test_init_then_validate(config_file):
    assert init_config().exit_code == 0
    assert config_file.is_file()

    result = runner.invoke(cli_app.app, ["validate"])

    assert result.exit_code == 0
    assert "parent@example.com" in result.output


def test_init_rejects_pattern_without_key(config_file):
    result = init_config("--file-pattern", "%YYYY%-%MM%-%DD%")

    assert result.exit_code == cli_app.EXIT_EXPECTED_ERROR


def test_show_config_hides_password(config_file):
    init_config()

    result = runner.invoke(cli_app.app, ["--show-config"])

    assert result.exit_code == 0
    assert "[hidden]" in result.output


def test_sync_reports_summary(config_file, monkeypatch):
    init_config()
    seen = {}

    async def fake_run_sync(config):
        seen["file_pattern"] = config.file_pattern
        return IngestStats(pages_fetched=2, events_seen=3, attachments_downloaded=3)

    monkeypatch.setattr(cli_app, "run_sync", fake_run_sync)

    result = runner.invoke(cli_app.app, ["sync", "--file-pattern", "%imgkey%"])

    assert result.exit_code == 0
    assert seen["file_pattern"] == "%imgkey%"


def test_sync_expected_error_exit_code(config_file, monkeypatch):
    init_config()

    async def failing_run_sync(config):
        raise ListingError("Error retrieving events: 500")

    monkeypatch.setattr(cli_app, "run_sync", failing_run_sync)

    result = runner.invoke(cli_app.app, ["sync"])

    assert result.exit_code == cli_app.EXIT_EXPECTED_ERROR


def test_sync_unexpected_error_exit_code(config_file, monkeypatch):
    init_config()

    async def crashing_run_sync(config):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli_app, "run_sync", crashing_run_sync)

    result = runner.invoke(cli_app.app, ["sync"])

    assert result.exit_code == cli_app.EXIT_UNEXPECTED_ERROR


def test_sync_without_config(config_file):
    result = runner.invoke(cli_app.app, ["sync"])

    assert result.exit_code == cli_app.EXIT_EXPECTED_ERROR
