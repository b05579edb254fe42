"""
Urgency scoring for vaults.

Flow goals escalate sharply as their start date approaches and as their monthly
need eats into income; fixed goals escalate gently toward their deadline.
"""

from datetime import date

try:
    from ..models import Vault
    from ..config import (
        CRITICAL_URGENCY, HIGH_URGENCY, MODERATE_URGENCY, MAX_FLOW_URGENCY, DEFAULT_URGENCY,
    )
except ImportError:
    from models import Vault
    from config import (
        CRITICAL_URGENCY, HIGH_URGENCY, MODERATE_URGENCY, MAX_FLOW_URGENCY, DEFAULT_URGENCY,
    )

from .helpers import months_until

TIER_CRITICAL = "critical"
TIER_HIGH = "high"
TIER_MODERATE = "moderate"
TIER_LOW = "low"


def flow_base_urgency(months_until_start: int) -> float:
    if months_until_start <= 0:
        return 20.0  # already active
    if months_until_start == 1:
        return 18.0
    if months_until_start == 2:
        return 12.0
    if months_until_start == 3:
        return 8.0
    if months_until_start <= 6:
        return 5.0
    if months_until_start <= 12:
        return 3.0
    return 1.5


def fixed_base_urgency(months_remaining: int) -> float:
    if months_remaining <= 0:
        return 10.0
    if months_remaining <= 3:
        return 7.0
    if months_remaining <= 6:
        return 5.0
    if months_remaining <= 12:
        return 3.0
    if months_remaining <= 24:
        return 2.0
    return 1.0


def flow_urgency(monthly_need: float, months_until_start: int, monthly_income: float) -> float:
    if monthly_income > 0.0:
        income_pressure = min(max(monthly_need / monthly_income, 0.0), 10.0)
    else:
        income_pressure = 5.0

    # Imminent flows get a much steeper pressure multiplier
    if months_until_start <= 2:
        multiplier = 1.0 + income_pressure * 1.5
    else:
        multiplier = 1.0 + income_pressure * 0.5

    return min(flow_base_urgency(months_until_start) * multiplier, MAX_FLOW_URGENCY)


def fixed_urgency(months_remaining: int, desired_monthly: float, monthly_income: float) -> float:
    if monthly_income > 0.0 and desired_monthly > 0.0:
        income_pressure = min(max(desired_monthly / monthly_income, 0.0), 5.0)
    else:
        income_pressure = 1.0
    return fixed_base_urgency(months_remaining) * (1.0 + income_pressure * 0.3)


def compute_urgency(vault: Vault, today: date, monthly_income: float, desired_monthly: float) -> float:
    """Urgency score for a vault; vaults with no schedule get a low default."""
    if vault.is_flow_goal:
        return flow_urgency(
            monthly_need=vault.monthly_need,
            months_until_start=months_until(vault.start_date, today),
            monthly_income=monthly_income,
        )
    if vault.is_fixed_goal:
        return fixed_urgency(
            months_remaining=months_until(vault.target_date, today),
            desired_monthly=desired_monthly,
            monthly_income=monthly_income,
        )
    return DEFAULT_URGENCY


def urgency_tier(urgency: float) -> str:
    if urgency >= CRITICAL_URGENCY:
        return TIER_CRITICAL
    if urgency >= HIGH_URGENCY:
        return TIER_HIGH
    if urgency >= MODERATE_URGENCY:
        return TIER_MODERATE
    return TIER_LOW
