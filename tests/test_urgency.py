"""
Test urgency scoring for flow and fixed goals.
"""

import pytest
from allocation.urgency import (
    TIER_CRITICAL,
    TIER_HIGH,
    TIER_LOW,
    TIER_MODERATE,
    compute_urgency,
    fixed_base_urgency,
    flow_base_urgency,
    urgency_tier,
)


class TestFlowUrgency:
    """Flow goals escalate as the start date approaches."""

    def test_active_flow_without_start(self, make_vault, today):
        vault = make_vault(1, monthly_need=300.0)
        assert compute_urgency(vault, today, 3000.0, 300.0) == pytest.approx(23.0)

    def test_next_month_is_capped(self, make_vault, today, add_months):
        vault = make_vault(1, monthly_need=600.0, start_date=add_months(today, 1))
        assert compute_urgency(vault, today, 1200.0, 600.0) == pytest.approx(30.0)

    def test_two_months_uses_steep_multiplier(self, make_vault, today, add_months):
        vault = make_vault(1, monthly_need=100.0, start_date=add_months(today, 2))
        assert compute_urgency(vault, today, 1000.0, 90.0) == pytest.approx(13.8)

    def test_three_months_uses_gentle_multiplier(self, make_vault, today, add_months):
        vault = make_vault(1, monthly_need=500.0, start_date=add_months(today, 3))
        assert compute_urgency(vault, today, 2000.0, 375.0) == pytest.approx(9.0)

    def test_no_income_assumes_heavy_pressure(self, make_vault, today, add_months):
        vault = make_vault(1, monthly_need=200.0, start_date=add_months(today, 8))
        assert compute_urgency(vault, today, 0.0, 60.0) == pytest.approx(10.5)

    def test_distant_flow(self, make_vault, today, add_months):
        vault = make_vault(1, monthly_need=0.0, start_date=add_months(today, 20))
        assert compute_urgency(vault, today, 1000.0, 0.0) == pytest.approx(1.5)

    def test_flow_takes_precedence_over_target_date(self, make_vault, today, add_months):
        vault = make_vault(1, monthly_need=300.0, target_date=add_months(today, 30),
                           target_amount=5000.0)
        assert compute_urgency(vault, today, 3000.0, 300.0) == pytest.approx(23.0)

    def test_base_schedule(self):
        assert [flow_base_urgency(m) for m in (0, 1, 2, 3, 6, 12, 13)] == [
            20.0, 18.0, 12.0, 8.0, 5.0, 3.0, 1.5,
        ]


class TestFixedUrgency:
    """Fixed goals escalate gently toward the deadline."""

    def test_mid_term_goal(self, make_vault, today, add_months):
        vault = make_vault(1, target_amount=5000.0, target_date=add_months(today, 9))
        assert compute_urgency(vault, today, 1000.0, 500.0) == pytest.approx(3.45)

    def test_due_this_month_without_desired_amount(self, make_vault, today):
        vault = make_vault(1, target_amount=500.0, current_balance=500.0, target_date=today)
        assert compute_urgency(vault, today, 1000.0, 0.0) == pytest.approx(13.0)

    def test_income_pressure_is_capped(self, make_vault, today, add_months):
        vault = make_vault(1, target_amount=300_000.0, target_date=add_months(today, 30))
        assert compute_urgency(vault, today, 1000.0, 10_000.0) == pytest.approx(2.5)

    def test_base_schedule(self):
        assert [fixed_base_urgency(m) for m in (0, 3, 6, 12, 24, 25)] == [
            10.0, 7.0, 5.0, 3.0, 2.0, 1.0,
        ]


class TestDefaultsAndTiers:

    def test_unscheduled_vault(self, make_vault, today):
        vault = make_vault(1, target_amount=1000.0)
        assert compute_urgency(vault, today, 1000.0, 0.0) == 0.5

    def test_tier_boundaries(self):
        assert urgency_tier(15.0) == TIER_CRITICAL
        assert urgency_tier(14.99) == TIER_HIGH
        assert urgency_tier(8.0) == TIER_HIGH
        assert urgency_tier(7.99) == TIER_MODERATE
        assert urgency_tier(4.0) == TIER_MODERATE
        assert urgency_tier(3.99) == TIER_LOW
        assert urgency_tier(0.5) == TIER_LOW
