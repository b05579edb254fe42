"""
Calendar and currency helpers shared by the allocation calculators.
"""

import math
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

try:
    from ..models import Vault, VaultDeduction
except ImportError:
    from models import Vault, VaultDeduction


def months_until(target: Optional[date], today: date) -> int:
    """
    Whole calendar months from ``today``'s month to ``target``'s month.

    Both dates are reduced to the first of their month, so the result does not
    depend on day-of-month. Past targets (and a missing target) give 0.
    """
    if target is None:
        return 0
    months = (target.year - today.year) * 12 + (target.month - today.month)
    return max(months, 0)


def to_cents(amount: float) -> int:
    """Convert a currency amount to integer cents, rounding half up."""
    if amount is None or not math.isfinite(amount):
        return 0
    return int(Decimal(str(amount)).scaleb(2).quantize(Decimal(1), ROUND_HALF_UP))


def from_cents(cents: int) -> float:
    return float(Decimal(cents).scaleb(-2))


def calculate_total_need(vault: Vault) -> float:
    """Total amount still needed by a vault over its lifetime."""
    if vault.monthly_need is not None and vault.start_date is not None and vault.end_date is not None:
        months = months_until(vault.end_date, vault.start_date)
        return max(vault.monthly_need * months, 0.0)
    return max(vault.target_amount - vault.current_balance, 0.0)


def calculate_monthly_contribution(vault: Vault, today: date) -> float:
    """Suggested monthly contribution, ignoring funds available."""
    if vault.monthly_need is not None:
        return vault.monthly_need

    remaining = max(vault.target_amount - vault.current_balance, 0.0)
    if vault.target_date is not None:
        return remaining / max(months_until(vault.target_date, today), 1)
    return 0.0


def compute_vault_deduction(expense_amount: float, vault_balance: float) -> VaultDeduction:
    """Pay an expense from a vault; whatever the vault cannot cover overflows to the main account."""
    expense = max(expense_amount, 0.0)
    balance = max(vault_balance, 0.0)
    return VaultDeduction(
        deduction=min(expense, balance),
        overflow=max(0.0, expense - balance),
    )
