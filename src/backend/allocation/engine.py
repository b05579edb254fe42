"""
Core monthly allocation engine for savings vaults.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Sequence, Tuple

try:
    from ..models import AllocationDetail, AllocationInput, AllocationResult, Vault
    from ..config import COMMIT_THRESHOLD
except ImportError:
    from models import AllocationDetail, AllocationInput, AllocationResult, Vault
    from config import COMMIT_THRESHOLD

from .buffer import calculate_adaptive_buffer
from .desired import compute_desired_monthly, compute_remaining_need
from .helpers import from_cents, months_until, to_cents
from .urgency import TIER_CRITICAL, TIER_HIGH, TIER_LOW, TIER_MODERATE, compute_urgency, urgency_tier

logger = logging.getLogger(__name__)

COMMIT_THRESHOLD_CENTS = to_cents(COMMIT_THRESHOLD)

# (tier, fallback reason), most urgent first
TIERS = (
    (TIER_CRITICAL, "Critical: imminent flow goal"),
    (TIER_HIGH, "High urgency"),
    (TIER_MODERATE, "Moderate urgency"),
    (TIER_LOW, "Building long-term goal"),
)
TIER_RANK = {tier: rank for rank, (tier, _) in enumerate(TIERS)}


@dataclass(frozen=True)
class VaultState:
    """Per-vault figures for one allocation run. Money is in cents."""
    vault: Vault
    urgency: float
    desired_monthly: float
    desired_cents: int
    remaining_cents: int
    pending_amount: float
    priority_weight: float

    @property
    def effective_priority(self) -> float:
        return self.priority_weight * self.urgency


class TierGrant(NamedTuple):
    cents: int
    tier: str


def _format_currency(amount: float) -> str:
    return f"${amount:,.2f}"


def allocate_tier(
    states: Sequence[VaultState],
    pool_cents: int,
    allocations: Dict[int, TierGrant],
    tier: str,
) -> Tuple[Dict[int, TierGrant], int]:
    """
    Fund one urgency tier from the remaining pool.

    If the pool covers everyone's desired amount each vault gets it in full.
    Otherwise the pool available on entry is split by effective priority, each
    share capped at the vault's desired amount and remaining need. Funds left
    over by those caps stay in the pool for the next tier.

    Returns:
        (allocations including this tier, pool left afterwards)
    """
    granted = dict(allocations)
    if not states or pool_cents <= 0:
        return granted, pool_cents

    remaining = pool_cents
    total_desired = sum(s.desired_cents for s in states)

    if total_desired <= remaining:
        for s in states:
            if s.desired_cents > COMMIT_THRESHOLD_CENTS:
                granted[s.vault.id] = TierGrant(s.desired_cents, tier)
                remaining -= s.desired_cents
                logger.debug("tier=%s full id=%s allocated=%d remaining=%d",
                             tier, s.vault.id, s.desired_cents, remaining)
        return granted, remaining

    total_weight = sum(s.effective_priority for s in states)
    for s in states:
        if total_weight > 0.0:
            # epsilon absorbs float error on exact splits; shares still never exceed the pool
            share = int(math.floor(pool_cents * s.effective_priority / total_weight + 1e-6))
        else:
            share = pool_cents // len(states)
        amount = min(share, s.desired_cents, s.remaining_cents)
        logger.debug("tier=%s id=%s share=%d chosen=%d remaining=%d",
                     tier, s.vault.id, share, amount, remaining)
        if amount > COMMIT_THRESHOLD_CENTS:
            granted[s.vault.id] = TierGrant(amount, tier)
            remaining -= amount

    return granted, remaining


class AllocationEngine:
    """Tiered monthly allocation of income across savings vaults."""

    def __init__(self, allocation_input: AllocationInput):
        """
        Initialize the allocation engine.

        Args:
            allocation_input: Snapshot of vaults, income and settings for this cycle
        """
        self.inp = allocation_input
        self.today = allocation_input.today

    def _vault_state(self, vault: Vault) -> VaultState:
        pending = max(self.inp.pending_contributions.get(vault.id, 0.0), 0.0)
        desired = compute_desired_monthly(vault, self.today, pending)
        remaining = compute_remaining_need(vault, self.inp.ramp_window_months, pending)
        return VaultState(
            vault=vault,
            urgency=compute_urgency(vault, self.today, self.inp.monthly_income, desired),
            desired_monthly=desired,
            desired_cents=to_cents(desired),
            remaining_cents=to_cents(remaining),
            pending_amount=pending,
            priority_weight=vault.effective_priority_weight,
        )

    def _reason(self, state: VaultState, fallback: str) -> str:
        vault = state.vault
        if vault.is_flow_goal and vault.start_date is not None:
            months = months_until(vault.start_date, self.today)
            need = _format_currency(vault.monthly_need)
            if months <= 0:
                base = f"Active flow: {need}/month needed"
            elif months == 1:
                base = f"URGENT: Flow starts next month ({need}/month)"
            elif months <= 3:
                base = f"Flow starts in {months} months ({need}/month)"
            else:
                base = f"Pre-funding flow goal (starts in {months} months)"
        elif vault.is_flow_goal:
            base = "Recurring flow goal"
        elif vault.is_fixed_goal:
            months = months_until(vault.target_date, self.today)
            base = f"Fixed goal: {months} month{'' if months == 1 else 's'} remaining"
        else:
            base = fallback

        if state.pending_amount > 0.0:
            return f"{base} (awaiting {_format_currency(state.pending_amount)} transfer)"
        return base

    def run(self) -> AllocationResult:
        """
        Run the monthly allocation.

        Returns:
            AllocationResult with per-vault amounts, archive candidates and details
        """
        inp = self.inp
        active = [v for v in inp.vaults if not v.archived and not v.excluded_from_auto_allocation]
        archive_ids = [v.id for v in active if v.is_complete]

        buffer = calculate_adaptive_buffer(
            base_buffer_percent=inp.safe_buffer_percent,
            recent_expenses=inp.recent_monthly_expenses,
            monthly_income=inp.monthly_income,
            main_account_balance=inp.main_account_balance,
            min_buffer=inp.min_buffer_percent,
            max_allocation=inp.max_allocation_percent,
        )
        buffer_amount = inp.monthly_income * buffer.adjusted_buffer_percent
        shortfall = max(0.0, buffer_amount - inp.main_account_balance)
        ceiling = max(inp.monthly_income * inp.max_allocation_percent, 0.0)
        available = min(max(inp.monthly_income - shortfall, 0.0), ceiling)
        logger.debug("buffer_amount=%.2f shortfall=%.2f available(before)=%.2f",
                     buffer_amount, shortfall, available)

        if available <= 0.0 or not active:
            return AllocationResult(
                archive_vault_ids=archive_ids,
                adjusted_buffer_percent=buffer.adjusted_buffer_percent,
                main_account_safety_margin=round(inp.main_account_balance - buffer_amount, 2),
                spending_trend=buffer.spending_trend,
            )

        available_cents = to_cents(available * buffer.allocation_multiplier)
        logger.debug("allocation_multiplier=%.2f available(after)=%d cents",
                     buffer.allocation_multiplier, available_cents)

        states: List[VaultState] = sorted(
            (self._vault_state(v) for v in active),
            key=lambda s: s.effective_priority,
            reverse=True,
        )
        for s in states:
            logger.debug("vault id=%s urgency=%.2f desired=%d pending=%.2f remaining=%d weight=%.2f",
                         s.vault.id, s.urgency, s.desired_cents, s.pending_amount,
                         s.remaining_cents, s.effective_priority)

        allocations: Dict[int, TierGrant] = {}
        pool = available_cents
        for tier, _ in TIERS:
            # Vaults left unfunded by a higher tier stay eligible for lower ones
            tier_states = [
                s for s in states
                if s.vault.id not in allocations
                and s.remaining_cents > 0
                and TIER_RANK[urgency_tier(s.urgency)] <= TIER_RANK[tier]
            ]
            allocations, pool = allocate_tier(tier_states, pool, allocations, tier)

        fallback_reasons = dict(TIERS)
        by_id = {s.vault.id: s for s in states}
        amounts: Dict[int, float] = {}
        details: Dict[int, AllocationDetail] = {}
        for vault_id, grant in allocations.items():
            state = by_id[vault_id]
            amount = from_cents(grant.cents)
            amounts[vault_id] = amount
            details[vault_id] = AllocationDetail(
                vault_id=vault_id,
                vault_name=state.vault.name,
                amount=amount,
                urgency_score=state.urgency,
                desired_amount=round(state.desired_monthly, 2),
                priority_weight=state.priority_weight,
                tier=grant.tier,
                reason=self._reason(state, fallback_reasons[grant.tier]),
            )

        total_cents = sum(g.cents for g in allocations.values())
        total_allocated = from_cents(total_cents)
        safety_margin = inp.main_account_balance + (inp.monthly_income - total_allocated) - buffer_amount
        logger.debug("total_allocated=%.2f safety_margin=%.2f unallocated=%d cents",
                     total_allocated, safety_margin, pool)

        return AllocationResult(
            allocations=amounts,
            total_allocated=total_allocated,
            archive_vault_ids=archive_ids,
            adjusted_buffer_percent=buffer.adjusted_buffer_percent,
            main_account_safety_margin=round(safety_margin, 2),
            allocation_details=details,
            available_for_vaults=from_cents(available_cents),
            spending_trend=buffer.spending_trend,
        )


def run_monthly_allocation(allocation_input: AllocationInput) -> AllocationResult:
    """Entry point for the periodic allocation job."""
    return AllocationEngine(allocation_input).run()
