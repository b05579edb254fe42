"""
Lump-sum distribution across vaults: the per-expense saving tax and paychecks.

Both paths turn the dynamic weights into cent-exact contributions with the
largest-remainder distributor, so the contributions of one run always add up
to the amount being distributed.
"""

import logging
import math
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence

try:
    from ..models import PlannedContribution, Vault, VaultAllocationMode
except ImportError:
    from models import PlannedContribution, Vault, VaultAllocationMode

from .cents import apply_overrides, distribute_cents
from .helpers import to_cents
from .weights import compute_weights

logger = logging.getLogger(__name__)


def saving_tax_budget(expense_amount: float, rate: float) -> float:
    """Tax skim for one expense, rounded up to the whole currency unit."""
    return float(math.ceil(round(expense_amount * rate, 6)))


def _is_tax_eligible(vault: Vault) -> bool:
    return not vault.archived and vault.target_amount > 0.0 and vault.target_amount - vault.current_balance > 0.0


def distribute_tax(
    expense_amount: float,
    rate: float,
    vaults: Sequence[Vault],
    overrides: Optional[Mapping[int, float]] = None,
    today: Optional[date] = None,
    mode: VaultAllocationMode = VaultAllocationMode.DYNAMIC_AUTO,
    minimum_contribution: float = 0.0,
) -> List[PlannedContribution]:
    """
    Split the saving tax of one expense across the vaults still short of target.

    Args:
        expense_amount: amount of the logged expense
        rate: base saving-tax rate, clamped to [0, 1]
        vaults: vault snapshot
        overrides: vault id -> own tax rate; falls back to each vault's
            ``saving_tax_rate_override``
        today: expense date, used for deadline proximity
        mode: global vault allocation mode
        minimum_contribution: smallest skim and smallest per-vault amount kept

    Returns:
        Planned contributions summing to the skimmed budget
    """
    base_rate = min(max(rate, 0.0), 1.0) if math.isfinite(rate) else 0.0
    if base_rate <= 0.0 or not expense_amount > 0.0:
        return []

    eligible = [v for v in vaults if _is_tax_eligible(v)]
    if not eligible:
        return []

    budget = saving_tax_budget(expense_amount, base_rate)
    if budget < minimum_contribution:
        return []

    weights = compute_weights(eligible, mode, today or date.today())
    if not weights:
        return []

    explicit = dict(overrides or {})
    rate_overrides = {v.id: explicit.get(v.id, v.saving_tax_rate_override) for v in eligible}
    weight_map = {w.vault_id: w.weight for w in weights}
    adjusted = apply_overrides(
        {v.id: weight_map.get(v.id, 0.0) for v in eligible},
        base_rate,
        rate_overrides,
    )
    if sum(adjusted.values()) <= 0.0:
        # Every vault opted out through a zero override
        return []

    budget_cents = to_cents(budget)
    cents = distribute_cents(adjusted, budget_cents)
    logger.debug("saving tax expense=%.2f rate=%.4f budget=%d cents vaults=%d",
                 expense_amount, base_rate, budget_cents, len(cents))

    minimum_cents = to_cents(minimum_contribution)
    return [
        PlannedContribution(vault_id=vault_id, cents=c)
        for vault_id, c in cents.items()
        if c > 0 and c >= minimum_cents
    ]


def distribute_income(
    amount: float,
    vaults: Sequence[Vault],
    mode: VaultAllocationMode = VaultAllocationMode.DYNAMIC_AUTO,
    payday: Optional[date] = None,
) -> List[PlannedContribution]:
    """Split a paycheck across the non-archived vaults by dynamic weight."""
    if not amount > 0.0:
        return []
    active = [v for v in vaults if not v.archived]
    if not active:
        return []

    weights: Dict[int, float] = {
        w.vault_id: w.weight for w in compute_weights(active, mode, payday or date.today())
    }
    cents = distribute_cents(weights, to_cents(amount))
    return [PlannedContribution(vault_id=vault_id, cents=c) for vault_id, c in cents.items() if c > 0]
