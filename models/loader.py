"""YAML loading and saving utilities, and the vehicle/outreach stores."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .catalog import Catalog, CatalogItem
from .errors import StoreError
from .history_entry import ServiceHistoryEntry
from .outreach_entry import DeliveryStatus, OutreachLogEntry
from .vehicle import Vehicle, vehicle_id_for_phone


def _parse_object(dct: Dict[str, Any]) -> Union[Vehicle, ServiceHistoryEntry, CatalogItem, dict]:
    """Parse dictionary into appropriate object type."""
    # Service history entry
    if "itemKey" in dct and "odometerAtService" in dct:
        return ServiceHistoryEntry(
            dct["itemKey"],
            dct["odometerAtService"],
            dct["date"],
            dct["nextDueOdometer"],
            dct.get("notes"),
        )
    # Catalog item
    elif "key" in dct and "intervalKm" in dct:
        return CatalogItem(
            dct["key"],
            dct["intervalKm"],
            dct.get("label") or dct["key"],
            dct.get("icon") or "",
        )
    # Top-level vehicle object
    elif "ownerPhone" in dct and "vehicleModel" in dct:
        return Vehicle(
            dct.get("ownerName") or "",
            dct["ownerPhone"],
            dct["vehicleModel"],
            dct.get("vehicleType"),
            dct.get("registrationYear"),
            dct.get("registrationOdometer") or 0,
            dct.get("firstVisitOdometer"),
            dct.get("firstVisitDate"),
            dct.get("lastVisitOdometer"),
            dct.get("lastVisitDate"),
            dct.get("measuredAvgKmPerMonth"),
            dct.get("visitCount") or 0,
            dct.get("history"),
            dct.get("notes"),
        )
    else:
        return dct


def _read_yaml(filename: Union[str, Path]) -> Any:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader)


def _write_yaml(filename: Union[str, Path], data: Any) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _history_to_dict(entry: ServiceHistoryEntry) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "itemKey": entry.item_key,
        "odometerAtService": entry.odometer_at_service,
        "date": entry.date,
        "nextDueOdometer": entry.next_due_odometer,
    }
    if entry.notes is not None:
        d["notes"] = entry.notes
    return d


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "ownerName": vehicle.owner_name,
        "ownerPhone": vehicle.owner_phone,
        "vehicleModel": vehicle.vehicle_model,
        "vehicleType": vehicle.vehicle_type,
        "registrationOdometer": vehicle.registration_odometer,
        "visitCount": vehicle.visit_count,
    }
    optional = {
        "registrationYear": vehicle.registration_year,
        "firstVisitOdometer": vehicle.first_visit_odometer,
        "firstVisitDate": vehicle.first_visit_date,
        "lastVisitOdometer": vehicle.last_visit_odometer,
        "lastVisitDate": vehicle.last_visit_date,
        "measuredAvgKmPerMonth": vehicle.measured_avg_km_per_month,
        "notes": vehicle.notes,
    }
    for key, value in optional.items():
        if value is not None:
            d[key] = value
    d["history"] = [_history_to_dict(h) for h in vehicle.history]
    return d


def _outreach_to_dict(entry: OutreachLogEntry) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "vehicleId": entry.vehicle_id,
        "phone": entry.phone,
        "message": entry.message,
        "itemsAlerted": list(entry.items_alerted),
        "status": entry.status.value,
        "sentAt": entry.sent_at,
    }
    if entry.external_id is not None:
        d["externalId"] = entry.external_id
    return d


def _outreach_from_dict(dct: Dict[str, Any]) -> OutreachLogEntry:
    sent_at = dct["sentAt"]
    if isinstance(sent_at, datetime):
        sent_at = sent_at.isoformat()
    return OutreachLogEntry(
        vehicle_id=str(dct["vehicleId"]),
        phone=dct["phone"],
        message=dct["message"],
        items_alerted=dct.get("itemsAlerted") or [],
        status=DeliveryStatus(dct.get("status", "sent")),
        sent_at=str(sent_at),
        external_id=dct.get("externalId"),
    )


def load_vehicle(filename: Union[str, Path]) -> Vehicle:
    """Load a vehicle from a YAML file."""
    with open(filename, "rb") as fp:
        json_data = json.dumps(
            yaml.load(fp, Loader=yaml.SafeLoader), indent=4, default=str
        )
        return json.loads(json_data, object_hook=_parse_object)


def save_vehicle(filename: Union[str, Path], vehicle: Vehicle) -> None:
    """Write a vehicle, including its service history, to a YAML file."""
    _write_yaml(filename, _vehicle_to_dict(vehicle))


def load_catalog(filename: Union[str, Path]) -> Catalog:
    """
    Load an interval catalog from a YAML file.

    The file holds an ``items`` list of {key, intervalKm, label, icon}.
    """
    with open(filename, "rb") as fp:
        json_data = json.dumps(yaml.load(fp, Loader=yaml.SafeLoader), default=str)
        data = json.loads(json_data, object_hook=_parse_object)
    return Catalog(data["items"])


# =============================================================================
# Stores
# =============================================================================


class Store:
    """CRUD over vehicles (with their service history) and the outreach log."""

    def list_vehicles(self) -> List[Vehicle]:
        raise NotImplementedError

    def get_vehicle_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        raise NotImplementedError

    def save_vehicle(self, vehicle: Vehicle) -> None:
        raise NotImplementedError

    def append_outreach(self, entry: OutreachLogEntry) -> None:
        raise NotImplementedError

    def all_outreach(self) -> List[OutreachLogEntry]:
        raise NotImplementedError

    def get_vehicle(self, phone: str) -> Optional[Vehicle]:
        """Find a vehicle by its owner's phone number."""
        try:
            vehicle_id = vehicle_id_for_phone(phone)
        except ValueError:
            return None
        return self.get_vehicle_by_id(vehicle_id)

    def last_outreach(self, vehicle_id: str) -> Optional[OutreachLogEntry]:
        """Most recent outreach attempt for a vehicle, whatever its status."""
        entries = [e for e in self.all_outreach() if e.vehicle_id == vehicle_id]
        if not entries:
            return None
        return max(entries, key=lambda e: e.sent_at_datetime)

    def list_outreach(self, limit: int = 50) -> List[OutreachLogEntry]:
        """Outreach entries, newest first."""
        entries = sorted(
            self.all_outreach(), key=lambda e: e.sent_at_datetime, reverse=True
        )
        return entries[:limit]

    def list_outreach_since(self, since: datetime) -> List[OutreachLogEntry]:
        """Outreach entries sent at or after a timestamp, oldest first."""
        entries = [e for e in self.all_outreach() if e.sent_at_datetime >= since]
        return sorted(entries, key=lambda e: e.sent_at_datetime)


class MemoryStore(Store):
    """In-process store, used for dry runs and tests."""

    def __init__(self, vehicles: Optional[List[Vehicle]] = None):
        self._vehicles: Dict[str, Vehicle] = {}
        self._outreach: List[OutreachLogEntry] = []
        for vehicle in vehicles or []:
            self.save_vehicle(vehicle)

    def list_vehicles(self) -> List[Vehicle]:
        return list(self._vehicles.values())

    def get_vehicle_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        return self._vehicles.get(vehicle_id)

    def save_vehicle(self, vehicle: Vehicle) -> None:
        self._vehicles[vehicle.vehicle_id] = vehicle

    def append_outreach(self, entry: OutreachLogEntry) -> None:
        self._outreach.append(entry)

    def all_outreach(self) -> List[OutreachLogEntry]:
        return list(self._outreach)


VEHICLES_DIRNAME = "vehicles"
OUTREACH_FILENAME = "outreach.yaml"


class YamlStore(Store):
    """
    Store backed by YAML files in a data directory.

    Layout:
        <data_dir>/vehicles/<vehicle_id>.yaml   one file per vehicle
        <data_dir>/outreach.yaml                outreach log (a list)

    Every call reads or writes the files directly. File and YAML errors are
    raised as StoreError.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.vehicles_dir = self.data_dir / VEHICLES_DIRNAME
        self.outreach_path = self.data_dir / OUTREACH_FILENAME
        try:
            self.vehicles_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create data directory {self.data_dir}: {e}") from e

    def get_vehicle_path(self, vehicle_id: str) -> Path:
        """Get full path for a vehicle ID."""
        return self.vehicles_dir / f"{vehicle_id}.yaml"

    def get_vehicle_files(self) -> List[Path]:
        """Get all vehicle YAML files."""
        return sorted(self.vehicles_dir.glob("*.yaml"))

    def list_vehicles(self) -> List[Vehicle]:
        try:
            return [load_vehicle(path) for path in self.get_vehicle_files()]
        except (OSError, yaml.YAMLError, KeyError, ValueError) as e:
            raise StoreError(f"Cannot load vehicles from {self.vehicles_dir}: {e}") from e

    def get_vehicle_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        path = self.get_vehicle_path(vehicle_id)
        if not path.exists():
            return None
        try:
            return load_vehicle(path)
        except (OSError, yaml.YAMLError, KeyError, ValueError) as e:
            raise StoreError(f"Cannot load vehicle {path}: {e}") from e

    def save_vehicle(self, vehicle: Vehicle) -> None:
        path = self.get_vehicle_path(vehicle.vehicle_id)
        try:
            save_vehicle(path, vehicle)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot save vehicle {path}: {e}") from e

    def all_outreach(self) -> List[OutreachLogEntry]:
        if not self.outreach_path.exists():
            return []
        try:
            data = _read_yaml(self.outreach_path) or []
            return [_outreach_from_dict(d) for d in data]
        except (OSError, yaml.YAMLError, KeyError, ValueError) as e:
            raise StoreError(f"Cannot load outreach log {self.outreach_path}: {e}") from e

    def append_outreach(self, entry: OutreachLogEntry) -> None:
        """
        Append an entry to the outreach log.

        Loads the raw YAML list, appends the entry, and writes back to the file.
        """
        try:
            data = []
            if self.outreach_path.exists():
                data = _read_yaml(self.outreach_path) or []
            data.append(_outreach_to_dict(entry))
            _write_yaml(self.outreach_path, data)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot append to outreach log {self.outreach_path}: {e}") from e
