#!/usr/bin/env python3
"""Tests for runtime settings."""

import pytest

from config import Settings, parse_run_at


class TestDefaults:
    """Tests for default settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.threshold_km == 1500
        assert settings.urgent_km == 1000
        assert settings.cooldown_days == 30
        assert settings.send_delay_ms == 200
        assert settings.run_at == "10:00"
        assert settings.timezone == "Asia/Seoul"
        assert settings.twilio_configured is False

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            Settings(threshold_km=-1)

    def test_bad_run_at_rejected(self):
        with pytest.raises(ValueError):
            Settings(run_at="25:00")


class TestFromEnv:
    """Tests for Settings.from_env."""

    def test_reads_values(self):
        settings = Settings.from_env(
            {
                "RCE_DATA_DIR": "/srv/rce",
                "RCE_THRESHOLD_KM": "2000",
                "RCE_COOLDOWN_DAYS": "14",
                "RCE_SEND_DELAY_MS": "0",
                "RCE_RUN_AT": "09:30",
                "TWILIO_ACCOUNT_SID": "AC1",
                "TWILIO_AUTH_TOKEN": "token",
                "TWILIO_PHONE_NUMBER": "+15550000",
            }
        )
        assert settings.data_dir == "/srv/rce"
        assert settings.threshold_km == 2000
        assert settings.cooldown_days == 14
        assert settings.send_delay_ms == 0
        assert settings.run_at == "09:30"
        assert settings.twilio_configured is True

    def test_empty_environment_gives_defaults(self):
        assert Settings.from_env({}) == Settings()

    def test_mock_mode_enables_dry_run(self):
        assert Settings.from_env({"MOCK_MODE": "true"}).dry_run is True
        assert Settings.from_env({"RCE_DRY_RUN": "1", "MOCK_MODE": "false"}).dry_run is True
        assert Settings.from_env({"RCE_DRY_RUN": "no"}).dry_run is False

    def test_bad_number_names_variable(self):
        with pytest.raises(ValueError, match="RCE_THRESHOLD_KM"):
            Settings.from_env({"RCE_THRESHOLD_KM": "lots"})


class TestFromYaml:
    """Tests for Settings.from_yaml."""

    def test_overlays_base(self, tmp_path):
        path = tmp_path / "rce.yaml"
        path.write_text("threshold_km: 2500\nbooking_url: https://example.com/book\n")
        base = Settings(cooldown_days=7)
        settings = Settings.from_yaml(path, base=base)
        assert settings.threshold_km == 2500
        assert settings.booking_url == "https://example.com/book"
        assert settings.cooldown_days == 7

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "rce.yaml"
        path.write_text("threshhold_km: 2500\n")
        with pytest.raises(ValueError, match="threshhold_km"):
            Settings.from_yaml(path)


class TestParseRunAt:
    """Tests for parse_run_at function."""

    def test_valid(self):
        assert parse_run_at("07:05") == (7, 5)

    @pytest.mark.parametrize("value", ["7", "ten:00", "12:60", "24:00"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_run_at(value)
