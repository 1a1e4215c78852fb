"""
Vehicle maintenance outreach models.

This package provides the data model behind mileage-based outreach:
- Status: Urgency levels (URGENT, UPCOMING, OK)
- CatalogItem / Catalog: Maintenance interval definitions
- ServiceHistoryEntry: Completed service records
- OutreachLogEntry: Notification attempts
- MaintenanceStatus: Calculated per-item due status
- Vehicle: Aggregate root combining visits and history
- MemoryStore / YamlStore: Persistence
"""

from .status import Status
from .errors import RceError, StoreError, TransportError, UnknownItemError
from .catalog import Catalog, CatalogItem, DEFAULT_CATALOG
from .history_entry import ServiceHistoryEntry
from .outreach_entry import DeliveryStatus, OutreachLogEntry
from .maintenance_status import MaintenanceStatus
from .vehicle import Vehicle, vehicle_id_for_phone
from .calculations import (
    MileageEstimate,
    TIER_LABELS,
    UNKNOWN_DAYS,
    calc_days_remaining,
    calc_due_date,
    calc_next_due_km,
    check_status,
    default_avg_km_per_month,
    estimate_mileage,
    month_diff,
)
from .loader import (
    MemoryStore,
    Store,
    YamlStore,
    load_catalog,
    load_vehicle,
    save_vehicle,
)

__all__ = [
    "Status",
    "RceError",
    "StoreError",
    "TransportError",
    "UnknownItemError",
    "Catalog",
    "CatalogItem",
    "DEFAULT_CATALOG",
    "ServiceHistoryEntry",
    "DeliveryStatus",
    "OutreachLogEntry",
    "MaintenanceStatus",
    "Vehicle",
    "vehicle_id_for_phone",
    "MileageEstimate",
    "TIER_LABELS",
    "UNKNOWN_DAYS",
    "calc_days_remaining",
    "calc_due_date",
    "calc_next_due_km",
    "check_status",
    "default_avg_km_per_month",
    "estimate_mileage",
    "month_diff",
    "MemoryStore",
    "Store",
    "YamlStore",
    "load_catalog",
    "load_vehicle",
    "save_vehicle",
]
