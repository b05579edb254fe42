"""
Desired monthly amounts, independent of the funds available.
"""

from datetime import date

try:
    from ..models import Vault
except ImportError:
    from models import Vault

from .helpers import months_until


def flow_ramp(months_until_start: int) -> float:
    """Share of the monthly need requested ahead of a flow goal's start."""
    if months_until_start <= 1:
        return 1.0
    if months_until_start == 2:
        return 0.9
    if months_until_start == 3:
        return 0.75
    if months_until_start <= 6:
        return 0.5
    return 0.3


def compute_desired_monthly(vault: Vault, today: date, pending_amount: float = 0.0) -> float:
    """
    How much a vault wants this cycle.

    Flow goals ramp toward their full monthly need as the start date nears;
    fixed goals spread what is left evenly until their deadline. Pending
    (not yet reconciled) contributions already count toward the goal.
    """
    pending = max(pending_amount, 0.0)

    if vault.is_flow_goal:
        ramp = flow_ramp(months_until(vault.start_date, today))
        return max(vault.monthly_need * ramp - pending, 0.0)

    remaining = max(vault.target_amount - (vault.current_balance + pending), 0.0)
    if vault.target_date is not None:
        return remaining / max(months_until(vault.target_date, today), 1)
    # Cannot pace without a deadline
    return 0.0


def compute_remaining_need(vault: Vault, ramp_window_months: int, pending_amount: float = 0.0) -> float:
    """What the vault still lacks; flow goals without a target look one ramp window ahead."""
    funded = vault.current_balance + max(pending_amount, 0.0)
    if vault.is_flow_goal and vault.target_amount <= 0.0:
        return max(vault.monthly_need * ramp_window_months - funded, 0.0)
    return max(vault.target_amount - funded, 0.0)
