"""
Fair cent distribution using the largest-remainder (Hamilton) method.

Every vault gets the floor of its exact share; the cents lost to flooring are
handed out one at a time to the vaults with the largest fractional remainders.
The result always sums to the budget exactly.
"""

import math
from typing import Dict, Mapping, Optional

import numpy as np


def sanitize_weights(weights: Mapping[int, float]) -> Dict[int, float]:
    """Replace negative, NaN and infinite weights with 0."""
    clean = {}
    for vault_id, w in weights.items():
        w = float(w) if w is not None else 0.0
        clean[vault_id] = w if math.isfinite(w) and w > 0.0 else 0.0
    return clean


def override_multiplier(base_rate: float, override: Optional[float]) -> float:
    """
    Weight multiplier for a vault with its own saving-tax rate.

    The ratio override/base_rate scales the vault's share; a missing override or
    unusable base rate leaves the weight alone.
    """
    if override is None:
        return 1.0
    if not (base_rate > 0.0 and math.isfinite(base_rate)):
        return 1.0
    ratio = override / base_rate
    if not math.isfinite(ratio):
        return 1.0
    if ratio <= 0.0:
        return 0.0
    return ratio


def apply_overrides(
    weights: Mapping[int, float],
    base_rate: float,
    overrides: Mapping[int, Optional[float]],
) -> Dict[int, float]:
    """Scale weights by per-vault override ratios and renormalize to 1.0."""
    scaled = {
        vault_id: w * override_multiplier(base_rate, overrides.get(vault_id))
        for vault_id, w in sanitize_weights(weights).items()
    }
    total = sum(scaled.values())
    if total <= 0.0:
        return {vault_id: 0.0 for vault_id in scaled}
    return {vault_id: w / total for vault_id, w in scaled.items()}


def distribute_cents(weights: Mapping[int, float], budget_cents: int) -> Dict[int, int]:
    """
    Apportion an integer cent budget across weighted vaults.

    Args:
        weights: vault id -> weight; renormalized internally
        budget_cents: total to distribute

    Returns:
        vault id -> cents, in the same order as ``weights``, summing to
        ``budget_cents`` (or all zeros for a non-positive budget)
    """
    ids = list(weights.keys())
    if not ids:
        return {}

    budget = int(budget_cents)
    if budget <= 0:
        return {vault_id: 0 for vault_id in ids}

    clean = sanitize_weights(weights)
    w = np.array([clean[vault_id] for vault_id in ids], dtype=float)
    total = w.sum()
    if total <= 0.0:
        # Degenerate: nothing to go on, split evenly
        w = np.ones(len(ids), dtype=float)
        total = float(len(ids))
    w = w / total

    raw = w * budget
    floors = np.floor(raw).astype(np.int64)
    remainders = raw - floors
    leftover = budget - int(floors.sum())

    if leftover > 0:
        # Only vaults with a share take part in the remainder pass
        eligible = np.flatnonzero(w > 0.0)
        order = eligible[np.argsort(-remainders[eligible], kind="stable")]
        rounds, extra = divmod(leftover, len(order))
        floors[order] += rounds
        floors[order[:extra]] += 1

    return {vault_id: int(c) for vault_id, c in zip(ids, floors)}
