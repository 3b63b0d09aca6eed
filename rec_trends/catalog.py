"""
Item descriptor lookup.

The engine only knows item ids; names, categories, kinds and discounts
belong to the host's catalog. A lookup is any callable
``item_id -> ItemDescriptor``. Two pieces live here:

  - ``CatalogLookup`` — a total lookup built from a catalog JSON file of
    the form ``{"bundles": [...], "subscriptions": [...]}``. Bundles are
    consulted before subscriptions; unknown ids get the placeholder.
  - ``resolve_descriptor`` — wraps *any* host lookup so a miss (``None``,
    ``KeyError``/``LookupError``) becomes the placeholder plus a warning
    instead of aborting a report half-way through.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from rec_trends.models.trend import PLACEHOLDER_DESCRIPTOR, ItemDescriptor, ItemKind

logger = logging.getLogger(__name__)

DescriptorLookup = Callable[[str], Optional[ItemDescriptor]]


class CatalogLookup:
    """Total ``item_id -> ItemDescriptor`` lookup over bundles and subscriptions.

    Attributes:
        placeholder: Descriptor returned for ids not in the catalog.
    """

    def __init__(
        self,
        bundles: Iterable[Mapping[str, Any]] = (),
        subscriptions: Iterable[Mapping[str, Any]] = (),
        placeholder: ItemDescriptor = PLACEHOLDER_DESCRIPTOR,
    ) -> None:
        self.placeholder = placeholder
        self._entries: dict[str, ItemDescriptor] = {}
        # Subscriptions first so a bundle with the same id wins.
        for entry in subscriptions:
            self._add(entry, ItemKind.SUBSCRIPTION)
        for entry in bundles:
            self._add(entry, ItemKind.BUNDLE)

    def __call__(self, item_id: str) -> ItemDescriptor:
        return self._entries.get(item_id, self.placeholder)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _add(self, entry: Mapping[str, Any], kind: ItemKind) -> None:
        item_id = str(entry.get("id", "")).strip()
        if not item_id:
            raise ValueError(f"Catalog {kind} entry has no 'id': {dict(entry)!r}")
        try:
            self._entries[item_id] = ItemDescriptor(
                name=entry["name"],
                category=entry.get("category", PLACEHOLDER_DESCRIPTOR.category),
                kind=kind,
                discount_pct=entry.get("discount", 0),
            )
        except (KeyError, ValidationError) as exc:
            raise ValueError(f"Invalid catalog {kind} entry '{item_id}': {exc}") from exc


def load_catalog(path: Path) -> CatalogLookup:
    """Load a catalog JSON file into a ``CatalogLookup``.

    Args:
        path: JSON file with optional ``bundles`` and ``subscriptions`` arrays.

    Returns:
        A ``CatalogLookup``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the JSON is malformed or an entry is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Catalog file is not valid JSON: {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Catalog root must be an object, got {type(data).__name__}.")

    lookup = CatalogLookup(
        bundles=data.get("bundles", []),
        subscriptions=data.get("subscriptions", []),
    )
    logger.info("Loaded %d catalog entries from %s", len(lookup), path.name)
    return lookup


def resolve_descriptor(lookup: DescriptorLookup, item_id: str) -> ItemDescriptor:
    """Resolve ``item_id`` through ``lookup``, substituting the placeholder on a miss.

    Only lookup misses are absorbed; any other exception from the host
    lookup propagates.
    """
    try:
        descriptor = lookup(item_id)
    except LookupError:
        descriptor = None
    if descriptor is None:
        logger.warning("No descriptor for item '%s'; using placeholder.", item_id)
        return PLACEHOLDER_DESCRIPTOR
    return descriptor
