"""Flask web application: operator API for vehicles, due lists and campaigns."""

import logging
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request

# Add parent directory to path for model imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Settings
from models import (
    MaintenanceStatus,
    OutreachLogEntry,
    RceError,
    Store,
    TIER_LABELS,
    UnknownItemError,
    Vehicle,
)
from outreach import CampaignScheduler, OutreachService, Transport, VehicleNotFound

logger = logging.getLogger(__name__)

# Number of items shown on the vehicle detail view
STATUS_ITEMS_SHOWN = 8


def vehicle_to_dict(vehicle: Vehicle) -> dict:
    """Serialize a vehicle for JSON responses (camelCase keys)."""
    return {
        "id": vehicle.vehicle_id,
        "ownerName": vehicle.owner_name,
        "ownerPhone": vehicle.owner_phone,
        "vehicleModel": vehicle.vehicle_model,
        "vehicleType": vehicle.vehicle_type,
        "registrationYear": vehicle.registration_year,
        "registrationOdometer": vehicle.registration_odometer,
        "firstVisitOdometer": vehicle.first_visit_odometer,
        "firstVisitDate": vehicle.first_visit_date,
        "lastVisitOdometer": vehicle.last_visit_odometer,
        "lastVisitDate": vehicle.last_visit_date,
        "measuredAvgKmPerMonth": vehicle.measured_avg_km_per_month,
        "visitCount": vehicle.visit_count,
    }


def outreach_to_dict(entry: OutreachLogEntry) -> dict:
    return {
        "vehicleId": entry.vehicle_id,
        "phone": entry.phone,
        "message": entry.message,
        "itemsAlerted": entry.items_alerted,
        "status": entry.status.value,
        "sentAt": entry.sent_at,
        "externalId": entry.external_id,
    }


def urgency_label(status: MaintenanceStatus) -> str:
    """Label shown next to a due item."""
    return "Replace now" if status.urgent else "Coming up"


def error(message: str, code: int = 400):
    return jsonify({"error": message}), code


def _number(value, name: str, required: bool = False) -> Optional[float]:
    """Parse an optional numeric field from a JSON body or query string."""
    if value is None or value == "":
        if required:
            raise ValueError(f"{name} is required")
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number") from None


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[Store] = None,
    transport: Optional[Transport] = None,
    service: Optional[OutreachService] = None,
    scheduler: Optional[CampaignScheduler] = None,
) -> Flask:
    """Build the app around a service and its daily scheduler."""
    settings = settings or Settings.from_env()
    service = service or OutreachService(settings, store=store, transport=transport)
    scheduler = scheduler or CampaignScheduler(
        service.runner, run_at=settings.run_at, timezone=settings.timezone
    )

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["RCE_SERVICE"] = service
    app.config["RCE_SCHEDULER"] = scheduler

    @app.errorhandler(VehicleNotFound)
    def handle_not_found(e):
        return error(str(e), 404)

    @app.errorhandler(UnknownItemError)
    def handle_unknown_item(e):
        return error(str(e), 400)

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return error(str(e), 400)

    @app.errorhandler(RceError)
    def handle_engine_error(e):
        logger.error("Request failed: %s", e)
        return error(str(e), 500)

    @app.route("/api/vehicles", methods=["GET"])
    def list_vehicles():
        """All vehicles with their estimated mileage."""
        result = []
        for vehicle in service.store.list_vehicles():
            estimate = service.estimate(vehicle)
            data = vehicle_to_dict(vehicle)
            data["estimatedKm"] = estimate.km
            data["predictionTier"] = estimate.tier
            result.append(data)
        return jsonify(result)

    @app.route("/api/vehicles", methods=["POST"])
    def register_vehicle():
        """Register a vehicle or update its owner details."""
        body = request.get_json(silent=True) or {}
        reg_year = body.get("registrationYear")
        vehicle = service.register_vehicle(
            owner_name=body.get("ownerName"),
            owner_phone=body.get("ownerPhone"),
            vehicle_model=body.get("vehicleModel"),
            vehicle_type=body.get("vehicleType"),
            registration_year=int(reg_year) if reg_year else None,
            registration_odometer=_number(body.get("registrationOdometer"), "registrationOdometer"),
            current_odometer=_number(body.get("currentKm"), "currentKm"),
        )
        return jsonify(vehicle_to_dict(vehicle)), 201

    @app.route("/api/vehicles/<phone>", methods=["GET"])
    def vehicle_detail(phone: str):
        """Vehicle with mileage estimate and its most pressing items."""
        vehicle = service.get_vehicle(phone)
        estimate = service.estimate(vehicle)
        statuses = sorted(service.maintenance_status(vehicle), key=lambda s: s.km_remaining)
        return jsonify(
            {
                "vehicle": vehicle_to_dict(vehicle),
                "estimatedKm": estimate.km,
                "predictionTier": estimate.tier,
                "predictionTierLabel": TIER_LABELS[estimate.tier],
                "maintenanceStatus": [s.to_dict() for s in statuses[:STATUS_ITEMS_SHOWN]],
                "availableItems": [
                    {"key": i.key, "intervalKm": i.interval_km, "label": i.label, "icon": i.icon}
                    for i in service.catalog
                ],
            }
        )

    @app.route("/api/vehicles/<phone>/visit", methods=["POST"])
    def record_visit(phone: str):
        """Record a visit odometer reading and services done at it."""
        body = request.get_json(silent=True) or {}
        odometer = _number(body.get("currentKm"), "currentKm", required=True)
        services = body.get("services") or []
        if not isinstance(services, list):
            raise ValueError("services must be a list of item keys")
        vehicle = service.record_visit(phone, odometer, services)
        estimate = service.estimate(vehicle)
        return jsonify(
            {
                "vehicle": vehicle_to_dict(vehicle),
                "estimatedKm": estimate.km,
                "predictionTier": estimate.tier,
                "servicesRecorded": services,
            }
        )

    @app.route("/api/service", methods=["POST"])
    def record_service():
        """Record a completed maintenance item."""
        body = request.get_json(silent=True) or {}
        phone = body.get("phone")
        item_key = body.get("itemKey")
        if not phone or not item_key:
            raise ValueError("phone, itemKey, doneAtKm required")
        odometer = _number(body.get("doneAtKm"), "doneAtKm", required=True)
        vehicle = service.get_vehicle(phone)
        item = service.catalog.get(item_key)
        if item is None:
            return error(f"Unknown itemKey. Available: {', '.join(service.catalog.keys)}")
        entry = service.record_service(phone, item_key, odometer, body.get("notes"))
        return jsonify(
            {
                "ok": True,
                "vehicleId": vehicle.vehicle_id,
                "itemKey": item_key,
                "doneAtKm": entry.odometer_at_service,
                "nextDueKm": entry.next_due_odometer,
                "label": item.label,
            }
        )

    @app.route("/api/due", methods=["GET"])
    def due():
        """Vehicles due for a reminder at a threshold."""
        threshold = _number(request.args.get("threshold"), "threshold")
        if threshold is None:
            threshold = settings.threshold_km
        targets = service.due_targets(threshold)
        return jsonify(
            {
                "count": len(targets),
                "thresholdKm": threshold,
                "targets": [
                    {
                        "vehicle": vehicle_to_dict(t.vehicle),
                        "estimatedKm": t.estimated_km,
                        "dueItems": [
                            {**s.to_dict(), "urgencyLabel": urgency_label(s)}
                            for s in t.due_items
                        ],
                    }
                    for t in targets
                ],
            }
        )

    @app.route("/api/logs", methods=["GET"])
    def logs():
        """Recent outreach attempts, newest first."""
        limit = request.args.get("limit", 50, type=int)
        vehicles = {}
        result = []
        for entry in service.recent_logs(limit):
            if entry.vehicle_id not in vehicles:
                vehicles[entry.vehicle_id] = service.store.get_vehicle_by_id(entry.vehicle_id)
            vehicle = vehicles[entry.vehicle_id]
            data = outreach_to_dict(entry)
            data["ownerName"] = vehicle.owner_name if vehicle else None
            data["vehicleModel"] = vehicle.vehicle_model if vehicle else None
            result.append(data)
        return jsonify(result)

    @app.route("/api/run", methods=["POST"])
    def run_campaign():
        """Start a campaign in the background and respond at once."""
        scheduler.trigger()
        return jsonify({"status": "started", "message": "Campaign triggered"}), 202

    @app.route("/api/send", methods=["POST"])
    def send():
        """Send one ad-hoc message."""
        body = request.get_json(silent=True) or {}
        phone = body.get("phone")
        result = service.send_message(phone, body.get("message"))
        return (
            jsonify({"ok": result.success, "sid": result.external_id, "phone": phone}),
            200 if result.success else 502,
        )

    @app.route("/api/scheduler", methods=["GET"])
    def scheduler_state():
        next_run = scheduler.next_run
        return jsonify(
            {
                "running": scheduler.running,
                "runAt": scheduler.run_at,
                "timezone": scheduler.timezone,
                "nextRun": next_run.isoformat() if next_run else None,
            }
        )

    @app.route("/api/scheduler/start", methods=["POST"])
    def scheduler_start():
        started = scheduler.start()
        return jsonify({"running": True, "changed": started})

    @app.route("/api/scheduler/stop", methods=["POST"])
    def scheduler_stop():
        stopped = scheduler.stop()
        return jsonify({"running": False, "changed": stopped})

    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = create_app()
    app.config["RCE_SCHEDULER"].start()
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(host="0.0.0.0", port=5001)
