"""End-to-end tests for the rec-trends CLI commands."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from rec_trends.cli import app

runner = CliRunner()

NOW = 1_792_411_200_000


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """A self-contained config whose paths all live under ``tmp_path``."""
    for var in ("REC_TRENDS_DB_PATH", "REC_TRENDS_CATALOG_FILE", "REC_TRENDS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    catalog = tmp_path / "catalog.json"
    catalog.write_text(json.dumps({
        "bundles": [{"id": "bundle-a", "name": 'Pro, "Plus"', "category": "Analytics", "discount": 20}],
    }))
    path = tmp_path / "app.toml"
    path.write_text(
        f'[database]\ndb_path = "{(tmp_path / "events.db").as_posix()}"\n'
        f'[data]\ncatalog_file = "{catalog.as_posix()}"\n'
        f'[reporting]\noutput_dir = "{(tmp_path / "reports").as_posix()}"\n'
        '[logging]\nlevel = "WARNING"\nlog_file = ""\n'
    )
    return path


@pytest.fixture
def events_file(tmp_path):
    path = tmp_path / "batch.json"
    path.write_text(json.dumps([
        {"item_id": "bundle-a", "timestamp": NOW - 1000, "subject_id": "agent-1",
         "confidence": 80, "position": 1},
        {"item_id": "bundle-a", "timestamp": NOW - 2000, "subject_id": "agent-2",
         "confidence": 90, "position": 1},
        {"item_id": "mystery", "timestamp": NOW - 3000, "subject_id": "agent-1",
         "confidence": 60, "position": 2},
    ]))
    return path


def test_init_db(config_file, tmp_path):
    result = runner.invoke(app, ["init-db", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert "[OK] Database ready." in result.output
    assert (tmp_path / "events.db").exists()


def test_validate_config(config_file):
    result = runner.invoke(app, ["validate-config", "--config", str(config_file), "--full"])
    assert result.exit_code == 0, result.output
    assert "Default range:   7d" in result.output


def test_validate_config_missing_file(tmp_path):
    result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "none.toml")])
    assert result.exit_code == 1


def test_import_dry_run_writes_nothing(config_file, events_file, tmp_path):
    result = runner.invoke(
        app, ["import-events", "--file", str(events_file), "--config", str(config_file), "--dry-run"]
    )
    assert result.exit_code == 0, result.output
    assert "Validated 3 event(s)." in result.output
    assert not (tmp_path / "events.db").exists()


def test_import_rejects_invalid_file(config_file, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([
        {"item_id": "a", "timestamp": 1, "subject_id": "s", "confidence": 500, "position": 1}
    ]))
    result = runner.invoke(app, ["import-events", "--file", str(bad), "--config", str(config_file)])
    assert result.exit_code == 1


def test_import_then_show_and_export(config_file, events_file, tmp_path):
    result = runner.invoke(
        app, ["import-events", "--file", str(events_file), "--config", str(config_file)]
    )
    assert result.exit_code == 0, result.output
    assert "Appended 3 event(s)" in result.output

    result = runner.invoke(
        app, ["show-trends", "--range", "24h", "--now", str(NOW), "--config", str(config_file)]
    )
    assert result.exit_code == 0, result.output
    assert "Total recommendations: 3" in result.output
    assert "Unknown Bundle" in result.output

    result = runner.invoke(
        app,
        ["export-report", "--range", "7d", "--now", str(NOW), "--config", str(config_file)],
    )
    assert result.exit_code == 0, result.output
    csv_path = tmp_path / "reports" / f"ai-recommendations-7d-{NOW}.csv"
    html_path = tmp_path / "reports" / f"ai-recommendations-7d-{NOW}.html"
    assert csv_path.exists()
    assert html_path.exists()
    lines = csv_path.read_text(encoding="utf-8").split("\n")
    assert lines[1].startswith('"Pro, ""Plus""",bundle,Analytics,20%,2,85%,#1,up,')


def test_show_trends_unknown_range(config_file):
    result = runner.invoke(app, ["show-trends", "--range", "1y", "--config", str(config_file)])
    assert result.exit_code == 1


def test_export_unknown_format(config_file):
    result = runner.invoke(app, ["export-report", "--format", "pdf", "--config", str(config_file)])
    assert result.exit_code == 1


def test_import_resolves_relative_name_in_import_dir(tmp_path, monkeypatch, events_file):
    for var in ("REC_TRENDS_DB_PATH", "REC_TRENDS_CATALOG_FILE", "REC_TRENDS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    import_dir = tmp_path / "imports"
    import_dir.mkdir()
    events_file.rename(import_dir / "queued.json")
    config = tmp_path / "app.toml"
    config.write_text(
        f'[data]\nimport_dir = "{import_dir.as_posix()}"\n'
        '[logging]\nlevel = "WARNING"\nlog_file = ""\n'
    )
    result = runner.invoke(
        app, ["import-events", "--file", "queued.json", "--config", str(config), "--dry-run"]
    )
    assert result.exit_code == 0, result.output
    assert "Validated 3 event(s)." in result.output


@pytest.mark.parametrize("command", ["init-db", "show-trends", "export-report"])
def test_corrupt_database_reports_error(config_file, tmp_path, command):
    bad_db = tmp_path / "bad.db"
    bad_db.write_bytes(b"\x00garbage, not sqlite\x00" * 200)
    result = runner.invoke(
        app, [command, "--db-path", str(bad_db), "--config", str(config_file)]
    )
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "[ERROR] Event store unavailable during open" in result.output


def test_import_into_corrupt_database_reports_error(config_file, events_file, tmp_path):
    bad_db = tmp_path / "bad.db"
    bad_db.write_bytes(b"\x00garbage, not sqlite\x00" * 200)
    result = runner.invoke(
        app,
        ["import-events", "--file", str(events_file), "--db-path", str(bad_db),
         "--config", str(config_file)],
    )
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
