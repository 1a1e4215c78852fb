#!/usr/bin/env python3
"""Tests for YAML loading and saving utilities and the stores."""

from datetime import date, datetime

import pytest
import yaml

from models import (
    Catalog,
    CatalogItem,
    DeliveryStatus,
    MemoryStore,
    OutreachLogEntry,
    ServiceHistoryEntry,
    StoreError,
    Vehicle,
    YamlStore,
    load_catalog,
    load_vehicle,
    save_vehicle,
)


def make_entry(vehicle_id="15550100", sent_at="2026-07-15T10:00:00", status=DeliveryStatus.SENT):
    return OutreachLogEntry(
        vehicle_id=vehicle_id,
        phone="+1 555-0100",
        message="Hi",
        items_alerted=["engine_oil"],
        status=status,
        sent_at=sent_at,
    )


# =============================================================================
# load_vehicle / save_vehicle tests
# =============================================================================


class TestLoadVehicle:
    """Tests for load_vehicle function."""

    def test_loads_minimal_vehicle(self, tmp_path):
        """Load a minimal valid vehicle file."""
        yaml_file = tmp_path / "15550100.yaml"
        yaml_file.write_text("""
ownerName: Jane Doe
ownerPhone: '+1 555-0100'
vehicleModel: Civic
""")
        vehicle = load_vehicle(yaml_file)

        assert isinstance(vehicle, Vehicle)
        assert vehicle.owner_name == "Jane Doe"
        assert vehicle.vehicle_type == "sedan"
        assert vehicle.registration_odometer == 0
        assert vehicle.first_visit_odometer is None
        assert vehicle.history == []

    def test_loads_visits_and_history(self, tmp_path):
        """Unquoted YAML dates come back as ISO strings."""
        yaml_file = tmp_path / "15550100.yaml"
        yaml_file.write_text("""
ownerName: Jane Doe
ownerPhone: '+1 555-0100'
vehicleModel: Sorento
vehicleType: suv
registrationYear: 2020
firstVisitOdometer: 38000
firstVisitDate: 2026-01-15
lastVisitOdometer: 45000
lastVisitDate: 2026-07-15
measuredAvgKmPerMonth: 1166.67
visitCount: 2
history:
  - itemKey: engine_oil
    odometerAtService: 45000
    date: 2026-07-15
    nextDueOdometer: 55000
    notes: synthetic 5W-30
""")
        vehicle = load_vehicle(yaml_file)

        assert vehicle.vehicle_type == "suv"
        assert vehicle.first_visit_date == "2026-01-15"
        assert vehicle.last_visit_odometer == 45000
        assert vehicle.visit_count == 2
        assert len(vehicle.history) == 1
        entry = vehicle.history[0]
        assert isinstance(entry, ServiceHistoryEntry)
        assert entry.date == "2026-07-15"
        assert entry.next_due_odometer == 55000
        assert entry.notes == "synthetic 5W-30"

    def test_save_then_load_keeps_first_visit(self, tmp_path):
        vehicle = Vehicle("Jane Doe", "+1 555-0100", "Civic")
        vehicle.record_visit(38000, date(2026, 1, 15))
        vehicle.record_service(CatalogItem("engine_oil", 10000, "Oil"), 38000, date(2026, 1, 15))
        path = tmp_path / "v.yaml"

        save_vehicle(path, vehicle)
        loaded = load_vehicle(path)

        assert loaded.first_visit_odometer == 38000
        assert loaded.first_visit_date == "2026-01-15"
        assert loaded.visit_count == 1
        assert loaded.history[0].next_due_odometer == 48000

    def test_saved_file_omits_unset_fields(self, tmp_path):
        path = tmp_path / "v.yaml"
        save_vehicle(path, Vehicle("Jane Doe", "+1 555-0100", "Civic"))
        data = yaml.safe_load(path.read_text())
        assert "firstVisitOdometer" not in data
        assert "measuredAvgKmPerMonth" not in data
        assert data["history"] == []


class TestLoadCatalog:
    """Tests for load_catalog function."""

    def test_loads_items_in_order(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("""
items:
  - key: engine_oil
    intervalKm: 8000
    label: Engine oil
  - key: wipers
    intervalKm: 15000
""")
        catalog = load_catalog(path)
        assert isinstance(catalog, Catalog)
        assert catalog.keys == ["engine_oil", "wipers"]
        assert catalog.require("engine_oil").interval_km == 8000
        assert catalog.require("wipers").label == "wipers"

    def test_rejects_non_positive_interval(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("items:\n  - key: bad\n    intervalKm: 0\n")
        with pytest.raises(ValueError):
            load_catalog(path)


# =============================================================================
# Store tests
# =============================================================================


class TestMemoryStore:
    """Tests for the in-process store."""

    def test_get_vehicle_by_phone_formatting(self):
        vehicle = Vehicle("Jane Doe", "+1 555-0100", "Civic")
        store = MemoryStore([vehicle])
        assert store.get_vehicle("15550100") is vehicle
        assert store.get_vehicle("+1 (555) 0100") is vehicle
        assert store.get_vehicle("no digits") is None

    def test_last_outreach_any_status(self):
        store = MemoryStore()
        store.append_outreach(make_entry(sent_at="2026-07-01T10:00:00"))
        store.append_outreach(make_entry(sent_at="2026-07-10T10:00:00", status=DeliveryStatus.FAILED))
        store.append_outreach(make_entry(vehicle_id="other", sent_at="2026-07-20T10:00:00"))
        last = store.last_outreach("15550100")
        assert last.sent_at == "2026-07-10T10:00:00"
        assert last.status is DeliveryStatus.FAILED

    def test_last_outreach_none(self):
        assert MemoryStore().last_outreach("15550100") is None

    def test_list_outreach_newest_first_with_limit(self):
        store = MemoryStore()
        for day in (1, 3, 2):
            store.append_outreach(make_entry(sent_at=f"2026-07-0{day}T10:00:00"))
        entries = store.list_outreach(limit=2)
        assert [e.sent_at[:10] for e in entries] == ["2026-07-03", "2026-07-02"]

    def test_list_outreach_since(self):
        store = MemoryStore()
        for day in (1, 3, 2):
            store.append_outreach(make_entry(sent_at=f"2026-07-0{day}T10:00:00"))
        entries = store.list_outreach_since(datetime(2026, 7, 2))
        assert [e.sent_at[:10] for e in entries] == ["2026-07-02", "2026-07-03"]


class TestYamlStore:
    """Tests for the file-backed store."""

    @pytest.fixture
    def store(self, tmp_path):
        return YamlStore(tmp_path / "data")

    def test_creates_vehicles_dir(self, store):
        assert store.vehicles_dir.is_dir()

    def test_save_and_get_vehicle(self, store):
        vehicle = Vehicle("Jane Doe", "+1 555-0100", "Civic")
        vehicle.record_visit(38000, date(2026, 1, 15))
        store.save_vehicle(vehicle)

        assert store.get_vehicle_path("15550100").exists()
        loaded = store.get_vehicle("+1 555-0100")
        assert loaded.first_visit_odometer == 38000
        assert [v.vehicle_id for v in store.list_vehicles()] == ["15550100"]

    def test_missing_vehicle_is_none(self, store):
        assert store.get_vehicle("+1 555-0199") is None

    def test_outreach_appended_to_file(self, store):
        store.append_outreach(make_entry(sent_at="2026-07-01T10:00:00"))
        store.append_outreach(make_entry(sent_at="2026-07-02T10:00:00", status=DeliveryStatus.FAILED))

        data = yaml.safe_load(store.outreach_path.read_text())
        assert [d["status"] for d in data] == ["sent", "failed"]
        entries = store.all_outreach()
        assert entries[1].status is DeliveryStatus.FAILED
        assert entries[0].items_alerted == ["engine_oil"]

    def test_empty_outreach_log(self, store):
        assert store.all_outreach() == []

    def test_corrupt_vehicle_raises_store_error(self, store):
        store.get_vehicle_path("15550100").write_text("ownerPhone: [unclosed\n")
        with pytest.raises(StoreError):
            store.list_vehicles()

    def test_corrupt_outreach_raises_store_error(self, store):
        store.outreach_path.write_text("- vehicleId: x\n")
        with pytest.raises(StoreError):
            store.all_outreach()
