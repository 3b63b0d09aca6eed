"""Tests for the item catalog lookup and placeholder substitution."""

from __future__ import annotations

import json
import logging

import pytest

from rec_trends.catalog import CatalogLookup, load_catalog, resolve_descriptor
from rec_trends.models.trend import PLACEHOLDER_DESCRIPTOR, ItemDescriptor, ItemKind


class TestCatalogLookup:
    def test_resolves_bundles_and_subscriptions(self, sample_catalog):
        assert sample_catalog("bundle-b").name == 'Pro, "Plus"'
        assert sample_catalog("bundle-b").discount_pct == 20
        assert sample_catalog("sub-c").kind == ItemKind.SUBSCRIPTION
        assert len(sample_catalog) == 3
        assert "bundle-a" in sample_catalog

    def test_unknown_id_gives_placeholder(self, sample_catalog):
        assert sample_catalog("nope") == PLACEHOLDER_DESCRIPTOR

    def test_bundle_wins_over_subscription_with_same_id(self):
        lookup = CatalogLookup(
            bundles=[{"id": "x", "name": "Bundle X"}],
            subscriptions=[{"id": "x", "name": "Sub X"}],
        )
        assert lookup("x").name == "Bundle X"
        assert lookup("x").kind == ItemKind.BUNDLE

    def test_entry_without_id_rejected(self):
        with pytest.raises(ValueError, match="no 'id'"):
            CatalogLookup(bundles=[{"name": "Nameless"}])

    def test_entry_without_name_rejected(self):
        with pytest.raises(ValueError, match="Invalid catalog"):
            CatalogLookup(bundles=[{"id": "x"}])


class TestLoadCatalog:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"bundles": [{"id": "a", "name": "A", "category": "C"}]}))
        lookup = load_catalog(path)
        assert lookup("a").category == "C"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "missing.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("[")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_catalog(path)

    def test_root_must_be_object(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="root must be an object"):
            load_catalog(path)


class TestResolveDescriptor:
    def test_none_becomes_placeholder(self, caplog):
        with caplog.at_level(logging.WARNING):
            desc = resolve_descriptor(lambda _id: None, "ghost")
        assert desc == PLACEHOLDER_DESCRIPTOR
        assert "ghost" in caplog.text

    def test_key_error_becomes_placeholder(self):
        assert resolve_descriptor({}.__getitem__, "ghost") == PLACEHOLDER_DESCRIPTOR

    def test_other_errors_propagate(self):
        def broken(_id):
            raise RuntimeError("catalog service down")

        with pytest.raises(RuntimeError):
            resolve_descriptor(broken, "a")

    def test_hit_passes_through(self):
        desc = ItemDescriptor(name="N", category="C")
        assert resolve_descriptor(lambda _id: desc, "a") is desc
