#!/usr/bin/env python3
"""Tests for the interval catalog."""

import pytest

from models import Catalog, CatalogItem, DEFAULT_CATALOG, UnknownItemError


class TestCatalogItem:
    """Tests for CatalogItem class."""

    def test_display_name_with_icon(self):
        item = CatalogItem("coolant", 40000, "Coolant", "🌡️")
        assert item.display_name == "🌡️ Coolant"

    def test_display_name_without_icon(self):
        item = CatalogItem("coolant", 40000, "Coolant")
        assert item.display_name == "Coolant"


class TestCatalog:
    """Tests for Catalog lookups and validation."""

    def test_default_catalog_intervals(self):
        assert DEFAULT_CATALOG.require("engine_oil").interval_km == 10000
        assert DEFAULT_CATALOG.require("air_filter").interval_km == 20000
        assert len(DEFAULT_CATALOG) == 10

    def test_iteration_follows_definition_order(self):
        catalog = Catalog([CatalogItem("b", 1, "B"), CatalogItem("a", 2, "A")])
        assert [item.key for item in catalog] == ["b", "a"]

    def test_contains(self):
        assert "engine_oil" in DEFAULT_CATALOG
        assert "flux_capacitor" not in DEFAULT_CATALOG

    def test_get_unknown_is_none(self):
        assert DEFAULT_CATALOG.get("flux_capacitor") is None

    def test_require_unknown_lists_available(self):
        with pytest.raises(UnknownItemError) as excinfo:
            DEFAULT_CATALOG.require("flux_capacitor")
        assert excinfo.value.key == "flux_capacitor"
        assert "engine_oil" in str(excinfo.value)

    def test_unknown_item_is_a_key_error(self):
        with pytest.raises(KeyError):
            DEFAULT_CATALOG.require("flux_capacitor")

    def test_duplicate_key_rejected(self):
        with pytest.raises(ValueError):
            Catalog([CatalogItem("a", 1, "A"), CatalogItem("a", 2, "A again")])

    def test_non_positive_interval_rejected(self):
        with pytest.raises(ValueError):
            Catalog([CatalogItem("a", 0, "A")])
