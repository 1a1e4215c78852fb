"""Operator façade: wires the store, selector, runner and transport together."""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from config import Settings
from models import (
    Catalog,
    DEFAULT_CATALOG,
    MaintenanceStatus,
    MileageEstimate,
    OutreachLogEntry,
    ServiceHistoryEntry,
    Store,
    Vehicle,
    YamlStore,
    load_catalog,
)

from .campaign import CampaignResult, CampaignRunner
from .selector import DueSelector, DueVehicle
from .transport import SendResult, Transport, make_transport

logger = logging.getLogger(__name__)


class VehicleNotFound(LookupError):
    """No vehicle is registered under a phone number."""


class OutreachService:
    """Operator operations over vehicles, service records and campaigns."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[Store] = None,
        transport: Optional[Transport] = None,
        catalog: Optional[Catalog] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.store = store if store is not None else YamlStore(settings.data_dir)
        self.transport = transport or make_transport(settings)
        if catalog is None:
            catalog = (
                load_catalog(settings.catalog_file)
                if settings.catalog_file
                else DEFAULT_CATALOG
            )
        self.catalog = catalog
        self.clock = clock
        self.selector = DueSelector(
            self.store, self.catalog, clock=clock, urgent_km=settings.urgent_km
        )
        self.runner = CampaignRunner(
            self.store, self.selector, self.transport, settings, sleep=sleep, clock=clock
        )

    def today(self):
        return self.clock().date()

    def get_vehicle(self, phone: str) -> Vehicle:
        vehicle = self.store.get_vehicle(phone)
        if vehicle is None:
            raise VehicleNotFound(f"Vehicle not found: {phone}")
        return vehicle

    def register_vehicle(
        self,
        owner_name: str,
        owner_phone: str,
        vehicle_model: str,
        vehicle_type: Optional[str] = None,
        registration_year: Optional[int] = None,
        registration_odometer: Optional[float] = None,
        current_odometer: Optional[float] = None,
    ) -> Vehicle:
        """
        Register a vehicle, or update the owner details of an existing one.

        A current odometer reading is recorded as a visit.
        """
        if not owner_name or not owner_phone or not vehicle_model:
            raise ValueError("owner name, owner phone and vehicle model are required")

        vehicle = self.store.get_vehicle(owner_phone)
        if vehicle is None:
            vehicle = Vehicle(
                owner_name=owner_name,
                owner_phone=owner_phone,
                vehicle_model=vehicle_model,
                vehicle_type=vehicle_type or "sedan",
                registration_year=registration_year,
                registration_odometer=registration_odometer or 0,
            )
            logger.info("Registering vehicle %s (%s)", vehicle.vehicle_id, vehicle_model)
        else:
            vehicle.owner_name = owner_name
            vehicle.vehicle_model = vehicle_model
            if vehicle_type:
                vehicle.vehicle_type = vehicle_type
            if registration_year is not None:
                vehicle.registration_year = registration_year

        if current_odometer is not None:
            vehicle.record_visit(current_odometer, self.today())
        self.store.save_vehicle(vehicle)
        return vehicle

    def record_visit(
        self, phone: str, odometer: float, services: Optional[List[str]] = None
    ) -> Vehicle:
        """Record an odometer reading and any services done at the visit."""
        vehicle = self.get_vehicle(phone)
        items = [self.catalog.require(key) for key in services or []]
        today = self.today()
        vehicle.record_visit(odometer, today)
        for item in items:
            vehicle.record_service(item, odometer, today)
        self.store.save_vehicle(vehicle)
        logger.info(
            "Visit recorded for %s at %s km (%d service(s))",
            vehicle.vehicle_id,
            f"{odometer:,.0f}",
            len(items),
        )
        return vehicle

    def record_service(
        self, phone: str, item_key: str, odometer: float, notes: Optional[str] = None
    ) -> ServiceHistoryEntry:
        """Record a completed maintenance item."""
        vehicle = self.get_vehicle(phone)
        item = self.catalog.require(item_key)
        entry = vehicle.record_service(item, odometer, self.today(), notes)
        self.store.save_vehicle(vehicle)
        return entry

    def estimate(self, vehicle: Vehicle) -> MileageEstimate:
        return vehicle.estimate_current_km(self.today())

    def maintenance_status(self, vehicle: Vehicle) -> List[MaintenanceStatus]:
        return vehicle.get_all_maintenance_status(
            self.today(),
            self.catalog,
            urgent_km=self.settings.urgent_km,
            due_soon_km=self.settings.threshold_km,
        )

    def due_targets(self, threshold_km: Optional[float] = None) -> List[DueVehicle]:
        """Vehicles currently due for a reminder."""
        if threshold_km is None:
            threshold_km = self.settings.threshold_km
        return self.selector.select_due(
            threshold_km=threshold_km, cooldown_days=self.settings.cooldown_days
        )

    def recent_logs(self, limit: int = 50) -> List[OutreachLogEntry]:
        return self.store.list_outreach(limit)

    def run_campaign(self) -> CampaignResult:
        return self.runner.run()

    def send_message(self, phone: str, body: str) -> SendResult:
        if not phone or not body:
            raise ValueError("phone and message are required")
        return self.runner.send_single(phone, body)
