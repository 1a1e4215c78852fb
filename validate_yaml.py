#!/usr/bin/env python3
"""
Validate a data directory written by YamlStore.

Checks every vehicles/*.yaml file and outreach.yaml against schema.yaml, then
checks what the schema cannot express: odometer ordering, visit counts,
file names matching owner phones, service history against the catalog, and
outreach entries pointing at known vehicles.
"""
import argparse
import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft7Validator

from models import DEFAULT_CATALOG, Catalog, load_catalog, vehicle_id_for_phone
from models.loader import OUTREACH_FILENAME, VEHICLES_DIRNAME


def load_schemas() -> Dict[str, dict]:
    """Load the vehicle and outreach-log schemas from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _load(filepath: Path) -> Any:
    # Unquoted dates and timestamps come back as strings, as in load_vehicle
    with open(filepath, "rb") as fp:
        return json.loads(json.dumps(yaml.safe_load(fp), default=str))


def _schema_errors(data: Any, schema: dict) -> List[str]:
    errors = []
    validator = Draft7Validator(schema)
    for e in sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.path))):
        location = ".".join(str(p) for p in e.path)
        errors.append(f"Schema validation error: {e.message}" + (f" (at {location})" if location else ""))
    return errors


def _check_date(value: Optional[str], name: str, errors: List[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        errors.append(f"{name} is not a valid date: {value}")
        return None


def check_vehicle(
    data: dict, vehicle_id: Optional[str] = None, catalog: Optional[Catalog] = None
) -> List[str]:
    """
    Check a schema-valid vehicle record for consistency.

    vehicle_id is the file's stem; when given, it must be the digits of
    ownerPhone. When catalog is given, every history itemKey must be in it.
    """
    errors = []
    registration = data.get("registrationOdometer") or 0
    first = data.get("firstVisitOdometer")
    last = data.get("lastVisitOdometer")

    if first is not None and first < registration:
        errors.append(
            f"firstVisitOdometer {first} is below registrationOdometer {registration}"
        )
    if first is not None and last is not None and last < first:
        errors.append(f"lastVisitOdometer {last} is below firstVisitOdometer {first}")
    if first is not None and (data.get("visitCount") or 0) < 1:
        errors.append("visitCount must be at least 1 once a first visit is recorded")

    first_date = _check_date(data.get("firstVisitDate"), "firstVisitDate", errors)
    last_date = _check_date(data.get("lastVisitDate"), "lastVisitDate", errors)
    if first_date and last_date and last_date < first_date:
        errors.append(f"lastVisitDate {last_date} is before firstVisitDate {first_date}")

    if vehicle_id is not None:
        try:
            expected = vehicle_id_for_phone(data["ownerPhone"])
        except ValueError as e:
            errors.append(str(e))
        else:
            if expected != vehicle_id:
                errors.append(
                    f"File name {vehicle_id}.yaml does not match ownerPhone (expected {expected}.yaml)"
                )

    for i, entry in enumerate(data.get("history") or []):
        where = f"history[{i}]"
        if entry["nextDueOdometer"] <= entry["odometerAtService"]:
            errors.append(f"{where}: nextDueOdometer must be above odometerAtService")
        _check_date(entry["date"], f"{where}.date", errors)
        if catalog is not None and entry["itemKey"] not in catalog:
            errors.append(f"{where}: unknown itemKey '{entry['itemKey']}'")
    return errors


def validate_vehicle_file(
    filepath: Path, schema: dict, catalog: Optional[Catalog] = None
) -> List[str]:
    """Validate a single vehicle YAML file. Returns list of errors."""
    try:
        data = _load(filepath)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    errors = _schema_errors(data, schema)
    if errors:
        return errors
    return check_vehicle(data, vehicle_id=filepath.stem, catalog=catalog)


def validate_outreach_file(
    filepath: Path, schema: dict, vehicle_ids: Optional[set] = None
) -> List[str]:
    """
    Validate the outreach log. Returns list of errors.

    When vehicle_ids is given, every entry must refer to one of them.
    """
    try:
        data = _load(filepath)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    data = data or []
    errors = _schema_errors(data, schema)
    if errors:
        return errors

    for i, entry in enumerate(data):
        where = f"entry {i}"
        try:
            datetime.fromisoformat(entry["sentAt"])
        except ValueError:
            errors.append(f"{where}: sentAt is not a valid timestamp: {entry['sentAt']}")
        if vehicle_ids is not None and entry["vehicleId"] not in vehicle_ids:
            errors.append(f"{where}: unknown vehicleId {entry['vehicleId']}")
        try:
            phone_id = vehicle_id_for_phone(entry["phone"])
        except ValueError as e:
            errors.append(f"{where}: {e}")
        else:
            if phone_id != entry["vehicleId"]:
                errors.append(f"{where}: phone does not match vehicleId {entry['vehicleId']}")
    return errors


def _report(name: str, errors: List[str]) -> bool:
    if errors:
        print(f"FAIL: {name}")
        for error in errors:
            print(f"  {error}")
        return False
    print(f"OK: {name}")
    return True


def main(argv=None):
    """Validate the vehicle files and outreach log in a data directory."""
    parser = argparse.ArgumentParser(description="Validate a vehicle data directory")
    parser.add_argument(
        "data_dir", nargs="?", default=str(Path(__file__).parent / "data"), help="Data directory"
    )
    parser.add_argument("--catalog", help="Catalog YAML file (default: built-in catalog)")
    args = parser.parse_args(argv)

    data_dir = Path(args.data_dir)
    vehicles_dir = data_dir / VEHICLES_DIRNAME
    outreach_path = data_dir / OUTREACH_FILENAME

    if not vehicles_dir.exists():
        print(f"Error: vehicles directory not found: {vehicles_dir}")
        return 1

    schemas = load_schemas()
    catalog = load_catalog(args.catalog) if args.catalog else DEFAULT_CATALOG

    yaml_files = sorted(vehicles_dir.glob("*.yaml"))
    if not yaml_files and not outreach_path.exists():
        print(f"Warning: No YAML files found in {data_dir}")
        return 0

    all_valid = True
    for filepath in yaml_files:
        errors = validate_vehicle_file(filepath, schemas["vehicle"], catalog)
        all_valid = _report(f"{VEHICLES_DIRNAME}/{filepath.name}", errors) and all_valid

    if outreach_path.exists():
        vehicle_ids = {path.stem for path in yaml_files}
        errors = validate_outreach_file(outreach_path, schemas["outreachLog"], vehicle_ids)
        all_valid = _report(OUTREACH_FILENAME, errors) and all_valid

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
