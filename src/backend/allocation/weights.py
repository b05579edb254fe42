"""
Dynamic allocation weights for continuous distribution (paychecks, saving tax).

Manual vaults claim their configured percent first; the rest of the pool is
shared among the remaining vaults by a score built from the funding gap,
priority, deadline proximity and progress.
"""

import math
from datetime import date
from typing import Dict, List, Optional, Sequence

import numpy as np

try:
    from ..models import AllocationWeight, Vault, VaultAllocationMode, VaultPriority
except ImportError:
    from models import AllocationWeight, Vault, VaultAllocationMode, VaultPriority

PRIORITY_FACTORS = {
    VaultPriority.LOW: 0.7,
    VaultPriority.MEDIUM: 1.0,
    VaultPriority.HIGH: 1.25,
    VaultPriority.CRITICAL: 1.55,
}


def deadline_factor(vault: Vault, today: date) -> float:
    if vault.target_date is None:
        return 1.0
    days_remaining = (vault.target_date - today).days
    if days_remaining <= 0:
        return 1.6
    if days_remaining <= 30:
        return 1.45
    if days_remaining <= 90:
        return 1.25
    if days_remaining <= 180:
        return 1.1
    if days_remaining <= 365:
        return 1.0
    return 0.85


def progress_factor(vault: Vault) -> float:
    ratio = vault.progress_percent
    if ratio >= 1.0:
        return 0.2
    if ratio >= 0.8:
        return 0.55
    if ratio >= 0.6:
        return 0.85
    if ratio >= 0.4:
        return 1.0
    if ratio >= 0.2:
        return 1.2
    return 1.4


def raw_score(vault: Vault, today: date) -> float:
    gap = max(vault.target_amount - vault.current_balance, 1.0)
    return gap * PRIORITY_FACTORS[vault.priority] * deadline_factor(vault, today) * progress_factor(vault)


def _manual_percent(percent: Optional[float], fallback: float) -> float:
    if percent is None:
        percent = fallback
    return percent if math.isfinite(percent) and percent > 0.0 else 0.0


def _manual_weights(vaults: Sequence[Vault], global_mode: VaultAllocationMode) -> Dict[int, float]:
    if global_mode == VaultAllocationMode.MANUAL:
        fallback = 1.0 / len(vaults)
        raw = {v.id: _manual_percent(v.manual_allocation_percent, fallback) for v in vaults}
    else:
        raw = {
            v.id: _manual_percent(v.manual_allocation_percent, 0.0)
            for v in vaults
            if v.allocation_mode == VaultAllocationMode.MANUAL and v.manual_allocation_percent is not None
        }

    total = sum(raw.values())
    if total <= 0.0:
        scale = 0.0
    elif total <= 1.0:
        scale = 1.0
    else:
        scale = 1.0 / total
    return {vault_id: w * scale for vault_id, w in raw.items()}


def _dynamic_weights(vaults: Sequence[Vault], share: float, today: date) -> Dict[int, float]:
    if not vaults or share <= 0.0:
        return {}
    scores = np.array([raw_score(v, today) for v in vaults], dtype=float)
    total = scores.sum()
    if total <= 0.0:
        return {v.id: share / len(vaults) for v in vaults}
    weights = np.where(scores > 0.0, scores / total * share, 0.0)
    return {v.id: float(w) for v, w in zip(vaults, weights)}


def compute_weights(
    vaults: Sequence[Vault],
    global_mode: VaultAllocationMode = VaultAllocationMode.DYNAMIC_AUTO,
    today: Optional[date] = None,
) -> List[AllocationWeight]:
    """
    Normalized share weights for each vault.

    Returns:
        One AllocationWeight per vault with a positive share, summing to 1.0;
        empty when ``vaults`` is empty
    """
    if not vaults:
        return []
    today = today or date.today()

    manual = _manual_weights(vaults, global_mode)
    manual_share = sum(manual.values())
    dynamic_vaults = [v for v in vaults if v.id not in manual]
    dynamic = _dynamic_weights(dynamic_vaults, max(1.0 - manual_share, 0.0), today)

    combined = {vault_id: w for vault_id, w in manual.items() if w > 0.0}
    combined.update({vault_id: w for vault_id, w in dynamic.items() if w > 0.0})

    total = sum(combined.values())
    if total <= 0.0:
        equal = 1.0 / len(vaults)
        return [AllocationWeight(vault_id=v.id, weight=equal) for v in vaults]

    return [AllocationWeight(vault_id=vault_id, weight=min(w / total, 1.0)) for vault_id, w in combined.items()]
