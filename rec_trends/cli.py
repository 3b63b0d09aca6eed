"""
Recommendation trend engine — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (range tokens, file formats).
  4. Execute action (DB init, event import, trend query, report export).
  5. Report result to stdout.

Install and run::

    pip install -e .
    rec-trends --help
    rec-trends init-db
    rec-trends validate-config
    rec-trends import-events --file data/imports/batch.json
    rec-trends show-trends --range 7d
    rec-trends export-report --range 30d --format both
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="rec-trends",
    help="AI recommendation history and trend analytics CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from pydantic import ValidationError

    from rec_trends.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from rec_trends.utils.logging import configure_logging
    configure_logging(config.logging)


def _resolve_range_or_exit(token: str):
    from rec_trends.analytics.windows import parse_time_range
    from rec_trends.errors import UnknownRangeError

    try:
        return parse_time_range(token)
    except UnknownRangeError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _load_lookup(config):
    """Load the descriptor catalog; fall back to an all-placeholder lookup."""
    from rec_trends.catalog import CatalogLookup, load_catalog

    catalog_path = Path(config.data.catalog_file)
    if not catalog_path.exists():
        typer.echo(
            f"[WARN] Catalog not found at {catalog_path}; item names will show as placeholders.",
            err=True,
        )
        return CatalogLookup()
    try:
        return load_catalog(catalog_path)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite event store and apply the schema.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from rec_trends.db.connection import get_connection
    from rec_trends.db.schema import ALL_TABLE_NAMES, apply_schema
    from rec_trends.errors import StoreUnavailableError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    try:
        with get_connection(
            target_path,
            wal_mode=config.database.wal_mode,
            busy_timeout_ms=config.database.busy_timeout_ms,
        ) as conn:
            apply_schema(conn)
    except StoreUnavailableError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:   {config.database.db_path}")
    typer.echo(f"  Catalog file:    {config.data.catalog_file}")
    typer.echo(f"  Default range:   {config.reporting.default_range}")
    typer.echo(f"  Report dir:      {config.reporting.output_dir}")
    typer.echo(f"  Log level:       {config.logging.level}")
    typer.echo(f"  Debug mode:      {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("import-events")
def import_events(
    events_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="Events file (.json or .csv); relative names also searched in data.import_dir.",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate events but do not write to the database.",
    ),
) -> None:
    """Append recommendation events from a JSON or CSV file.

    \b
      .json — array of event objects, {"events": [...]}, or a saved oracle
              response {"subject_id", "timestamp", "recommendations": [...]}.
      .csv  — header row: item_id, timestamp, subject_id, confidence, position.

    The whole file is validated first; one bad row rejects the file.
    Events are appended, never deduplicated.
    """
    from rec_trends.db.connection import get_connection
    from rec_trends.db.repositories.event_repo import SQLiteEventStore
    from rec_trends.db.schema import apply_schema
    from rec_trends.errors import StoreUnavailableError
    from rec_trends.ingestion.event_import import load_events_file

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    events_path = Path(events_file)
    if not events_path.exists() and not events_path.is_absolute():
        events_path = Path(config.data.import_dir) / events_path
    typer.echo(f"Loading events from: {events_path}")

    try:
        validated = load_events_file(events_path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Validated {len(validated)} event(s).")

    if dry_run:
        typer.echo("[DRY RUN] No events written to database.")
        for ev in validated:
            typer.echo(
                f"  {ev.item_id} | {ev.subject_id} | t={ev.timestamp} | "
                f"conf={ev.confidence:g} | pos={ev.position}"
            )
        return

    try:
        with get_connection(
            db_path or config.database.db_path,
            wal_mode=config.database.wal_mode,
            busy_timeout_ms=config.database.busy_timeout_ms,
        ) as conn:
            apply_schema(conn)
            stored = SQLiteEventStore(conn).append(validated)
    except StoreUnavailableError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Appended {len(stored)} event(s) to the store.")
    typer.echo("[OK] Events imported.")


@app.command("show-trends")
def show_trends(
    time_range: Optional[str] = typer.Option(
        None,
        "--range",
        "-r",
        help="Window: 24h, 7d, 30d or all (default from config).",
    ),
    now: Optional[int] = typer.Option(
        None,
        "--now",
        help="Reference time in epoch milliseconds (default: current time).",
    ),
    top_n: Optional[int] = typer.Option(
        None,
        "--top-n",
        help="Rows per section (default from config).",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print top, rising and high-confidence recommendation trends."""
    from rec_trends.analytics.service import TrendQueryService
    from rec_trends.db.connection import get_connection
    from rec_trends.db.repositories.event_repo import SQLiteEventStore
    from rec_trends.db.schema import apply_schema
    from rec_trends.errors import StoreUnavailableError
    from rec_trends.reporting.formatters import format_trend_summary

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    resolved = _resolve_range_or_exit(time_range or config.reporting.default_range)
    lookup = _load_lookup(config)

    try:
        with get_connection(
            db_path or config.database.db_path,
            wal_mode=config.database.wal_mode,
            busy_timeout_ms=config.database.busy_timeout_ms,
        ) as conn:
            apply_schema(conn)
            service = TrendQueryService(SQLiteEventStore(conn), lookup)
            summary = service.get_summary(resolved, now)
    except StoreUnavailableError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_trend_summary(summary, top_n or config.reporting.top_n))


@app.command("export-report")
def export_report(
    time_range: Optional[str] = typer.Option(
        None,
        "--range",
        "-r",
        help="Window: 24h, 7d, 30d or all (default from config).",
    ),
    fmt: str = typer.Option(
        "both",
        "--format",
        help="csv, html or both.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for report files (default from config).",
    ),
    now: Optional[int] = typer.Option(
        None,
        "--now",
        help="Reference time in epoch milliseconds (default: current time).",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Render trend reports to CSV and/or printable HTML files.

    Open the HTML file in a browser and print it to save a PDF.
    """
    from rec_trends.analytics.service import TrendQueryService
    from rec_trends.db.connection import get_connection
    from rec_trends.db.repositories.event_repo import SQLiteEventStore
    from rec_trends.db.schema import apply_schema
    from rec_trends.errors import StoreUnavailableError
    from rec_trends.reporting.csv_report import render_trends_csv
    from rec_trends.reporting.export import build_report_filename, write_report
    from rec_trends.reporting.html_report import render_trends_html
    from rec_trends.utils.time_utils import ms_to_datetime

    fmt = fmt.strip().lower()
    if fmt not in ("csv", "html", "both"):
        typer.echo(f"[ERROR] Unknown format '{fmt}'. Use csv, html or both.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    resolved = _resolve_range_or_exit(time_range or config.reporting.default_range)
    lookup = _load_lookup(config)

    try:
        with get_connection(
            db_path or config.database.db_path,
            wal_mode=config.database.wal_mode,
            busy_timeout_ms=config.database.busy_timeout_ms,
        ) as conn:
            apply_schema(conn)
            service = TrendQueryService(SQLiteEventStore(conn), lookup)
            summary = service.get_summary(resolved, now)
    except StoreUnavailableError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    generated_at = ms_to_datetime(summary.reference_now)
    out_dir = Path(output_dir or config.reporting.output_dir)
    written: list[Path] = []

    if fmt in ("csv", "both"):
        path = out_dir / build_report_filename(resolved, generated_at, "csv")
        written.append(write_report(render_trends_csv(summary.rows), path))

    if fmt in ("html", "both"):
        html = render_trends_html(
            summary.rows,
            resolved,
            generated_at,
            title=config.reporting.title,
            subtitle=config.reporting.subtitle,
            footer_lines=config.reporting.footer_lines,
        )
        path = out_dir / build_report_filename(resolved, generated_at, "html")
        written.append(write_report(html, path))

    typer.echo(
        f"Exported {summary.unique_items} item(s), "
        f"{summary.total_recommendations} recommendation(s):"
    )
    for path in written:
        typer.echo(f"  {path}")
    typer.echo("[OK] Report export complete.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
