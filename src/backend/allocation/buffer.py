"""
Adaptive safety buffer: how much of the monthly income stays in the main account.

The configured buffer percent is nudged by recent spending (relative to the
buffer) and by the current main-account balance, then clamped so it never drops
below the configured floor or leaves room for more than the allowed allocation.
"""

import logging
from typing import Sequence

import numpy as np

try:
    from ..models import AdaptiveBufferResult, SpendingTrend
    from ..config import (
        UNDER_BUDGET_RATIO, OVER_BUDGET_RATIO, LOW_BALANCE_RATIO, HIGH_BALANCE_RATIO,
    )
except ImportError:
    from models import AdaptiveBufferResult, SpendingTrend
    from config import (
        UNDER_BUDGET_RATIO, OVER_BUDGET_RATIO, LOW_BALANCE_RATIO, HIGH_BALANCE_RATIO,
    )

logger = logging.getLogger(__name__)

# trend -> (buffer adjustment, allocation multiplier)
TREND_ADJUSTMENTS = {
    SpendingTrend.UNDER_BUDGET: (-0.05, 1.10),
    SpendingTrend.ON_TARGET: (0.0, 1.0),
    SpendingTrend.OVER_BUDGET: (0.05, 0.90),
}


def classify_spending(spending_ratio: float) -> SpendingTrend:
    if spending_ratio < UNDER_BUDGET_RATIO:
        return SpendingTrend.UNDER_BUDGET
    if spending_ratio > OVER_BUDGET_RATIO:
        return SpendingTrend.OVER_BUDGET
    return SpendingTrend.ON_TARGET


def _clamp_buffer(percent: float, min_buffer: float, max_allocation: float) -> float:
    ceiling = 1.0 - max_allocation
    # The floor wins if the two limits cross
    return max(min_buffer, min(percent, ceiling))


def calculate_adaptive_buffer(
    base_buffer_percent: float,
    recent_expenses: Sequence[float],
    monthly_income: float,
    main_account_balance: float,
    min_buffer: float,
    max_allocation: float,
) -> AdaptiveBufferResult:
    """
    Adjust the buffer percent to actual behavior.

    Args:
        base_buffer_percent: configured share of income kept as buffer
        recent_expenses: trailing monthly expense totals
        monthly_income: income for the cycle
        main_account_balance: current main-account balance
        min_buffer: lowest buffer percent allowed
        max_allocation: highest share of income that may go to vaults

    Returns:
        AdaptiveBufferResult with the clamped buffer and the funds multiplier
    """
    if len(recent_expenses) == 0 or monthly_income <= 0.0:
        return AdaptiveBufferResult(
            adjusted_buffer_percent=base_buffer_percent,
            allocation_multiplier=1.0,
            spending_trend=SpendingTrend.ON_TARGET,
        )

    base_buffer = monthly_income * base_buffer_percent
    if base_buffer <= 0.0:
        return AdaptiveBufferResult(
            adjusted_buffer_percent=_clamp_buffer(base_buffer_percent, min_buffer, max_allocation),
            allocation_multiplier=1.0,
            spending_trend=SpendingTrend.ON_TARGET,
        )

    avg_expenses = float(np.mean(np.asarray(recent_expenses, dtype=float)))
    spending_ratio = avg_expenses / base_buffer
    trend = classify_spending(spending_ratio)
    adjustment, multiplier = TREND_ADJUSTMENTS[trend]

    balance_ratio = main_account_balance / base_buffer
    if balance_ratio < LOW_BALANCE_RATIO:
        adjustment += 0.05
    elif balance_ratio > HIGH_BALANCE_RATIO:
        adjustment -= 0.03

    adjusted = _clamp_buffer(base_buffer_percent + adjustment, min_buffer, max_allocation)
    logger.debug(
        "spending_ratio=%.2f balance_ratio=%.2f trend=%s buffer=%.3f multiplier=%.2f",
        spending_ratio, balance_ratio, trend.value, adjusted, multiplier,
    )
    return AdaptiveBufferResult(
        adjusted_buffer_percent=adjusted,
        allocation_multiplier=multiplier,
        spending_trend=trend,
    )
