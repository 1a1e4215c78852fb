"""Runtime settings, read from environment variables and an optional YAML file."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

# Environment variable → settings field
ENV_VARS = {
    "RCE_DATA_DIR": "data_dir",
    "RCE_CATALOG_FILE": "catalog_file",
    "RCE_THRESHOLD_KM": "threshold_km",
    "RCE_URGENT_KM": "urgent_km",
    "RCE_COOLDOWN_DAYS": "cooldown_days",
    "RCE_SEND_DELAY_MS": "send_delay_ms",
    "RCE_RUN_AT": "run_at",
    "RCE_TIMEZONE": "timezone",
    "RCE_DRY_RUN": "dry_run",
    "MOCK_MODE": "dry_run",
    "RCE_BOOKING_URL": "booking_url",
    "TWILIO_ACCOUNT_SID": "twilio_account_sid",
    "TWILIO_AUTH_TOKEN": "twilio_auth_token",
    "TWILIO_PHONE_NUMBER": "twilio_phone_number",
    "SECRET_KEY": "secret_key",
}

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Operator-configurable knobs for the outreach engine."""

    data_dir: str = "data"
    catalog_file: Optional[str] = None
    threshold_km: float = 1500
    urgent_km: float = 1000
    cooldown_days: float = 30
    send_delay_ms: int = 200
    run_at: str = "10:00"
    timezone: str = "Asia/Seoul"
    dry_run: bool = False
    booking_url: Optional[str] = None
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    secret_key: str = "dev-secret-key-change-in-prod"

    def __post_init__(self):
        if self.threshold_km < 0:
            raise ValueError("threshold_km must not be negative")
        if self.cooldown_days < 0:
            raise ValueError("cooldown_days must not be negative")
        if self.send_delay_ms < 0:
            raise ValueError("send_delay_ms must not be negative")
        parse_run_at(self.run_at)

    @property
    def twilio_configured(self) -> bool:
        return bool(
            self.twilio_account_sid
            and self.twilio_auth_token
            and self.twilio_phone_number
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables, defaults for the rest."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for var, name in ENV_VARS.items():
            raw = environ.get(var)
            if raw is None or raw == "":
                continue
            if name == "dry_run" and values.get("dry_run"):
                continue
            values[name] = _convert(name, raw, var)
        return cls(**values)

    @classmethod
    def from_yaml(
        cls, filename: Union[str, Path], base: Optional["Settings"] = None
    ) -> "Settings":
        """
        Overlay settings from a YAML mapping of field names onto base.

        Unknown keys are rejected so typos surface early.
        """
        with open(filename, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{filename}: expected a mapping of settings")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"{filename}: unknown settings: {', '.join(unknown)}")
        values = {k: _convert(k, v, k) if isinstance(v, str) else v for k, v in data.items()}
        return replace(base or cls(), **values)


def _convert(name: str, raw: str, source: str) -> Any:
    """Convert a raw string to the type of the named settings field."""
    try:
        if name in ("threshold_km", "urgent_km", "cooldown_days"):
            return float(raw)
        if name == "send_delay_ms":
            return int(raw)
    except ValueError:
        raise ValueError(f"{source}: expected a number, got '{raw}'") from None
    if name == "dry_run":
        return raw.strip().lower() in TRUE_VALUES
    return raw


def parse_run_at(run_at: str):
    """Parse an 'HH:MM' time of day into (hour, minute)."""
    try:
        hour_str, minute_str = run_at.split(":")
        hour, minute = int(hour_str), int(minute_str)
    except (AttributeError, ValueError):
        raise ValueError(f"run_at must be HH:MM, got '{run_at}'") from None
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"run_at out of range: '{run_at}'")
    return hour, minute
