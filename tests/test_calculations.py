#!/usr/bin/env python3
"""Tests for calculation helper functions."""
from datetime import date

from models import (
    Status,
    UNKNOWN_DAYS,
    calc_days_remaining,
    calc_due_date,
    calc_next_due_km,
    check_status,
    default_avg_km_per_month,
    month_diff,
)


class TestMonthDiff:
    """Tests for month_diff approximation."""

    def test_whole_months(self):
        assert month_diff(date(2026, 1, 15), date(2026, 7, 15)) == 6

    def test_across_years(self):
        assert month_diff(date(2025, 11, 1), date(2026, 2, 1)) == 3

    def test_day_difference_scaled_by_thirty(self):
        """15 extra days count as half a month regardless of month length."""
        assert month_diff(date(2025, 1, 15), date(2025, 3, 30)) == 2.5

    def test_month_boundary_bias_preserved(self):
        """Jan 31 → Feb 1 is 1 month minus 30/30, i.e. exactly zero."""
        assert month_diff(date(2025, 1, 31), date(2025, 2, 1)) == 0

    def test_negative_floored_at_zero(self):
        assert month_diff(date(2026, 7, 15), date(2026, 1, 15)) == 0

    def test_same_day(self):
        assert month_diff(date(2026, 7, 15), date(2026, 7, 15)) == 0


class TestDefaultAverage:
    """Tests for the vehicle-type default pace table."""

    def test_known_types(self):
        assert default_avg_km_per_month("compact") == 700
        assert default_avg_km_per_month("sedan") == 1200
        assert default_avg_km_per_month("truck") == 2500
        assert default_avg_km_per_month("van") == 2000

    def test_case_insensitive(self):
        assert default_avg_km_per_month("SUV") == 1300

    def test_unknown_falls_back_to_default(self):
        assert default_avg_km_per_month("hovercraft") == 1250
        assert default_avg_km_per_month(None) == 1250


class TestCalcNextDueKm:
    """Tests for calc_next_due_km."""

    def test_with_history(self):
        assert calc_next_due_km(50000, 10000) == 60000

    def test_without_history_due_from_zero(self):
        assert calc_next_due_km(None, 10000) == 10000


class TestCalcDaysRemaining:
    """Tests for calc_days_remaining."""

    def test_scaled_by_pace(self):
        # 800 km at 1200 km/month → 2/3 month → 20 days
        assert calc_days_remaining(800, 1200) == 20

    def test_rounds_half_up(self):
        # 25 km at 1000 km/month → 0.75 days → 1
        assert calc_days_remaining(25, 1000) == 1

    def test_zero_pace_is_unknown(self):
        assert calc_days_remaining(800, 0) == UNKNOWN_DAYS

    def test_missing_pace_is_unknown(self):
        assert calc_days_remaining(800, None) == UNKNOWN_DAYS


class TestCalcDueDate:
    """Tests for calc_due_date."""

    def test_adds_days(self):
        assert calc_due_date(date(2026, 1, 15), 20) == date(2026, 2, 4)

    def test_unknown_pace_has_no_date(self):
        assert calc_due_date(date(2026, 1, 15), UNKNOWN_DAYS) is None


class TestCheckStatus:
    """Tests for check_status helper function."""

    def test_urgent(self):
        assert check_status(999, 1000, 1500) == Status.URGENT
        assert check_status(0, 1000, 1500) == Status.URGENT

    def test_urgent_boundary_is_exclusive(self):
        assert check_status(1000, 1000, 1500) == Status.UPCOMING

    def test_upcoming(self):
        assert check_status(1500, 1000, 1500) == Status.UPCOMING

    def test_ok(self):
        assert check_status(1501, 1000, 1500) == Status.OK
