"""
Import parsers for recommendation event batches.

Batches arrive from the scoring oracle in three shapes:

  1. A single oracle response — an ordered list of ``{item_id, confidence}``
     dicts for one subject. ``events_from_ranked_batch()`` turns it into
     events sharing one timestamp with positions ``1..n``.
  2. A JSON file — an array of event objects, ``{"events": [...]}``, or a
     saved oracle response ``{"subject_id", "timestamp", "recommendations"}``.
  3. A CSV file — header row with the event columns.

Accepted field names (camelCase aliases match the product's stored history):

  item_id     ← ``itemId``, ``bundleId``
  subject_id  ← ``subjectId``, ``agentId``
  timestamp, confidence, position

All rows are validated before any are returned. If any row fails, a single
``InvalidEventError`` lists the first 10 failures.
"""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rec_trends.errors import InvalidEventError
from rec_trends.events.store import summarize_validation_error
from rec_trends.models.event import RecommendationEvent

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = frozenset({"item_id", "timestamp", "subject_id", "confidence", "position"})

_FIELD_ALIASES: dict[str, str] = {
    "itemId":    "item_id",
    "bundleId":  "item_id",
    "subjectId": "subject_id",
    "agentId":   "subject_id",
}

# The product keeps the oracle's top three suggestions per call.
DEFAULT_BATCH_LIMIT = 3


def events_from_ranked_batch(
    subject_id: str,
    ranked: Iterable[Mapping[str, Any]],
    timestamp_ms: int,
    limit: int = DEFAULT_BATCH_LIMIT,
) -> list[RecommendationEvent]:
    """Build events from one oracle response.

    Args:
        subject_id:   Agent/account the recommendations were generated for.
        ranked:       Oracle results best-first; each has ``item_id`` (or
                      ``bundleId``) and ``confidence``.
        timestamp_ms: Creation time shared by the whole batch.
        limit:        Keep at most this many results.

    Returns:
        Validated events with ``position`` 1, 2, ... in oracle order.

    Raises:
        InvalidEventError: If any kept result is invalid.
    """
    records: list[dict[str, Any]] = []
    for position, result in enumerate(ranked, start=1):
        if position > limit:
            break
        record = _normalize_keys(result) if isinstance(result, Mapping) else {}
        records.append(
            {
                "item_id": record.get("item_id"),
                "subject_id": subject_id,
                "timestamp": timestamp_ms,
                "confidence": record.get("confidence"),
                "position": position,
            }
        )
    return parse_event_records(records)


def parse_event_records(records: Iterable[Mapping[str, Any]]) -> list[RecommendationEvent]:
    """Validate raw event dicts into ``RecommendationEvent`` objects.

    Raises:
        InvalidEventError: If any record fails validation.
    """
    events: list[RecommendationEvent] = []
    errors: list[str] = []

    for i, record in enumerate(records):
        if not isinstance(record, Mapping):
            errors.append(f"Row {i + 1}: expected an object, got {type(record).__name__}")
            continue
        data = _normalize_keys(record)
        missing = REQUIRED_FIELDS - {k for k, v in data.items() if v not in (None, "")}
        if missing:
            errors.append(f"Row {i + 1}: missing field(s) {sorted(missing)}")
            continue
        try:
            events.append(
                RecommendationEvent(
                    item_id=data["item_id"],
                    subject_id=data["subject_id"],
                    timestamp=data["timestamp"],
                    confidence=data["confidence"],
                    position=data["position"],
                )
            )
        except ValidationError as exc:
            errors.append(f"Row {i + 1}: {summarize_validation_error(exc)}")

    if errors:
        raise InvalidEventError(errors)
    return events


def parse_event_json(path: Path) -> list[RecommendationEvent]:
    """Parse a JSON file of events.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not valid JSON or has the wrong shape.
        InvalidEventError: If any event fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Event JSON file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Event file is not valid JSON: {path}: {exc}") from exc

    if isinstance(data, dict) and "recommendations" in data:
        events = _events_from_oracle_response(data)
        logger.info("Parsed %d events from oracle response %s", len(events), path.name)
        return events

    if isinstance(data, dict):
        data = data.get("events")
    if not isinstance(data, list):
        raise ValueError(
            f"Event JSON must be an array or an object with an 'events' array: {path}"
        )

    events = parse_event_records(data)
    logger.info("Parsed %d events from %s", len(events), path.name)
    return events


def parse_event_csv(path: Path) -> list[RecommendationEvent]:
    """Parse a CSV file of events (header row required).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the header is missing or lacks required columns.
        InvalidEventError: If any row fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Event CSV file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = {_FIELD_ALIASES.get(c.strip(), c.strip()) for c in reader.fieldnames}
        missing = REQUIRED_FIELDS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = list(reader)

    if not rows:
        logger.warning("Event CSV is empty (header only): %s", path)
        return []

    events = parse_event_records(rows)
    logger.info("Parsed %d events from %s", len(events), path.name)
    return events


def load_events_file(path: Path) -> list[RecommendationEvent]:
    """Parse ``path`` as JSON or CSV depending on its suffix.

    Raises:
        ValueError: For unsupported suffixes.
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        return parse_event_json(path)
    if suffix == ".csv":
        return parse_event_csv(path)
    raise ValueError(f"Unsupported event file format '{suffix}'. Use .json or .csv.")


def _events_from_oracle_response(data: dict[str, Any]) -> list[RecommendationEvent]:
    """Handle ``{"subject_id", "timestamp", "recommendations": [...]}`` documents."""
    header = _normalize_keys({k: v for k, v in data.items() if k != "recommendations"})
    missing = [k for k in ("subject_id", "timestamp") if header.get(k) in (None, "")]
    if missing:
        raise InvalidEventError([f"Oracle response: missing field(s) {missing}"])
    ranked = data["recommendations"]
    if not isinstance(ranked, list):
        raise ValueError("Oracle response 'recommendations' must be an array.")
    try:
        timestamp_ms = int(header["timestamp"])
    except (TypeError, ValueError) as exc:
        raise InvalidEventError([f"Oracle response: bad timestamp {header['timestamp']!r}"]) from exc
    return events_from_ranked_batch(
        subject_id=str(header["subject_id"]),
        ranked=ranked,
        timestamp_ms=timestamp_ms,
        limit=int(header.get("limit", DEFAULT_BATCH_LIMIT)),
    )


def _normalize_keys(record: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase aliases onto canonical field names; strip string values."""
    out: dict[str, Any] = {}
    for key, val in record.items():
        key = str(key).strip()
        canonical = _FIELD_ALIASES.get(key, key)
        out[canonical] = val.strip() if isinstance(val, str) else val
    return out
