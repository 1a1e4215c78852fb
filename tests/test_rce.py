#!/usr/bin/env python3
"""Tests for rce CLI formatting helpers and commands."""

import pytest

from config import ENV_VARS
from models import CatalogItem, MaintenanceStatus, Status, UNKNOWN_DAYS
from rce import (
    format_days,
    format_km,
    main,
    make_status_table,
    truncate,
)

PHONE = "+15550100"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials and settings out of CLI runs."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestFormatKm:
    """Tests for format_km."""

    def test_formats_number(self):
        assert format_km(50000) == "50,000"
        assert format_km(0) == "0"

    def test_none_returns_dash(self):
        assert format_km(None) == "-"


class TestFormatDays:
    """Tests for format_days."""

    def test_months_and_days(self):
        assert format_days(105) == "3mo 15d"

    def test_days_only(self):
        assert format_days(20) == "20d"

    def test_unknown_pace(self):
        assert format_days(UNKNOWN_DAYS) == "?"


class TestTruncate:
    """Tests for truncate."""

    def test_none_returns_dash(self):
        assert truncate(None) == "-"

    def test_long_text_truncated_with_ellipsis(self):
        assert truncate("a" * 40, max_len=10) == "aaaaaaa..."

    def test_newlines_flattened(self):
        assert truncate("Hi\nthere") == "Hi there"


class TestMakeStatusTable:
    """Tests for make_status_table."""

    def test_single_row(self):
        status = MaintenanceStatus(
            item=CatalogItem("engine_oil", 10000, "Engine oil"),
            status=Status.URGENT,
            last_done_km=0,
            next_due_km=10000,
            km_remaining=800,
            days_remaining=20,
            due_date="2026-08-04",
        )
        assert make_status_table([status]) == [
            ["Engine oil", "-", "10,000", "800", "20d", "2026-08-04"]
        ]


class TestCommands:
    """End-to-end command runs against a temporary data directory."""

    @pytest.fixture
    def data_dir(self, tmp_path):
        return str(tmp_path / "data")

    def register(self, data_dir, odometer="9200"):
        return main([data_dir, "register", "Jane Doe", PHONE, "Civic", "--odometer", odometer])

    def test_register_and_status(self, data_dir, capsys):
        assert self.register(data_dir) == 0
        assert main([data_dir, "status", PHONE]) == 0
        out = capsys.readouterr().out
        assert "Vehicle saved" in out
        assert "Estimated mileage: 9,200 km" in out
        assert "URGENT:" in out

    def test_register_dry_run_writes_nothing(self, data_dir, capsys):
        main([data_dir, "register", "Jane Doe", PHONE, "Civic", "--dry-run"])
        assert main([data_dir, "status", PHONE]) == 1
        assert "Vehicle not found" in capsys.readouterr().out

    def test_visit_and_history(self, data_dir, capsys):
        self.register(data_dir)
        assert main([data_dir, "visit", PHONE, "9300", "--services", "engine_oil"]) == 0
        assert main([data_dir, "history", PHONE]) == 0
        out = capsys.readouterr().out
        assert "Visit recorded" in out
        assert "Total services: 1" in out

    def test_lower_reading_is_error(self, data_dir, capsys):
        self.register(data_dir)
        assert main([data_dir, "visit", PHONE, "100"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_service_unknown_item(self, data_dir, capsys):
        self.register(data_dir)
        assert main([data_dir, "service", PHONE, "flux_capacitor", "9200"]) == 1
        assert "Available:" in capsys.readouterr().out

    def test_due_run_and_logs(self, data_dir, capsys):
        self.register(data_dir)
        assert main([data_dir, "due"]) == 0
        assert main([data_dir, "run", "--dry-run"]) == 0
        assert main([data_dir, "logs"]) == 0
        out = capsys.readouterr().out
        assert "Vehicles due: 1" in out
        assert "Campaign complete: 1/1 sent" in out
        assert "engine_oil" in out

    def test_send_dry_run(self, data_dir, capsys):
        assert main([data_dir, "send", PHONE, "Ready for pickup", "--dry-run"]) == 0
        assert f"Sent to {PHONE}" in capsys.readouterr().out

    def test_catalog(self, data_dir, capsys):
        assert main([data_dir, "catalog"]) == 0
        out = capsys.readouterr().out
        assert "engine_oil" in out
        assert "10,000 km" in out
