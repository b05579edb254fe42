"""
Pydantic models for the vault allocation engine.
All data models and validation logic.
"""

from datetime import date
from enum import Enum
from typing import List, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, confloat, conint

from config import (
    DEFAULT_MAX_ALLOCATION_PERCENT,
    DEFAULT_MIN_BUFFER_PERCENT,
    DEFAULT_RAMP_WINDOW_MONTHS,
    DEFAULT_SAFE_BUFFER_PERCENT,
    DEFAULT_SAVING_TAX_RATE,
)


# ============================
# Enums
# ============================
class VaultPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class VaultAllocationMode(str, Enum):
    DYNAMIC_AUTO = "DYNAMIC_AUTO"
    MANUAL = "MANUAL"


class SpendingTrend(str, Enum):
    UNDER_BUDGET = "UNDER_BUDGET"
    ON_TARGET = "ON_TARGET"
    OVER_BUDGET = "OVER_BUDGET"


# ============================
# Vault Models
# ============================
class Vault(BaseModel):
    """Savings goal snapshot.

    A vault with ``monthly_need`` is a flow goal (recurring need starting on
    ``start_date``). Otherwise a vault with ``target_date`` is a fixed goal
    paced to its deadline. A vault may also be neither.
    """
    id: int
    name: str = ""
    target_amount: confloat(ge=0) = 0.0  # 0 means no fixed target
    current_balance: confloat(ge=0) = 0.0

    # Fixed goal
    target_date: Optional[date] = None

    # Flow goal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_need: Optional[float] = None

    priority_weight: float = 1.0
    priority: VaultPriority = VaultPriority.MEDIUM
    allocation_mode: VaultAllocationMode = VaultAllocationMode.DYNAMIC_AUTO
    manual_allocation_percent: Optional[float] = None
    saving_tax_rate_override: Optional[float] = None

    archived: bool = False
    excluded_from_auto_allocation: bool = False

    @property
    def is_flow_goal(self) -> bool:
        return self.monthly_need is not None

    @property
    def is_fixed_goal(self) -> bool:
        return not self.is_flow_goal and self.target_date is not None

    @property
    def is_complete(self) -> bool:
        return self.target_amount > 0.0 and self.current_balance >= self.target_amount

    @property
    def progress_percent(self) -> float:
        if self.target_amount <= 0.0:
            return 0.0
        return min(max(self.current_balance / self.target_amount, 0.0), 1.0)

    @property
    def effective_priority_weight(self) -> float:
        return self.priority_weight if self.priority_weight > 0.0 else 1.0


# ============================
# Monthly Allocation Models
# ============================
class AllocationInput(BaseModel):
    """Immutable snapshot consumed by a monthly allocation run."""
    model_config = ConfigDict(frozen=True)

    vaults: List[Vault] = Field(default_factory=list)
    monthly_income: float
    main_account_balance: float
    safe_buffer_percent: float = DEFAULT_SAFE_BUFFER_PERCENT
    today: date = Field(default_factory=date.today)
    ramp_window_months: conint(ge=1) = DEFAULT_RAMP_WINDOW_MONTHS
    recent_monthly_expenses: List[float] = Field(default_factory=list)
    min_buffer_percent: float = DEFAULT_MIN_BUFFER_PERCENT
    max_allocation_percent: float = DEFAULT_MAX_ALLOCATION_PERCENT
    pending_contributions: Dict[int, float] = Field(default_factory=dict)


class AdaptiveBufferResult(BaseModel):
    """Buffer percent after adapting to spending, plus the funds multiplier."""
    adjusted_buffer_percent: float
    allocation_multiplier: float = 1.0
    spending_trend: SpendingTrend = SpendingTrend.ON_TARGET


class AllocationDetail(BaseModel):
    """Explanation for one funded vault."""
    vault_id: int
    vault_name: str
    amount: float
    urgency_score: float
    desired_amount: float
    priority_weight: float
    tier: str
    reason: str


class AllocationResult(BaseModel):
    """Results from a monthly allocation run"""
    allocations: Dict[int, float] = Field(default_factory=dict)
    total_allocated: float = 0.0
    archive_vault_ids: List[int] = Field(default_factory=list)
    adjusted_buffer_percent: float
    main_account_safety_margin: float
    allocation_details: Dict[int, AllocationDetail] = Field(default_factory=dict)
    available_for_vaults: float = 0.0
    spending_trend: SpendingTrend = SpendingTrend.ON_TARGET


# ============================
# Continuous Distribution Models
# ============================
class AllocationWeight(BaseModel):
    vault_id: int
    weight: confloat(ge=0, le=1)


class PlannedContribution(BaseModel):
    """Cent-exact contribution to a vault."""
    vault_id: int
    cents: conint(ge=0)

    @computed_field
    @property
    def amount(self) -> float:
        return self.cents / 100.0


class VaultDeduction(BaseModel):
    """Expense paid from a vault, with the part the vault cannot cover."""
    deduction: float
    overflow: float


# ============================
# Settings
# ============================
class SavingTaxSettings(BaseModel):
    """Profile settings read when skimming saving tax"""
    vault_allocation_mode: VaultAllocationMode = VaultAllocationMode.DYNAMIC_AUTO
    saving_tax_rate: float = DEFAULT_SAVING_TAX_RATE
    minimum_contribution: float = 0.0


# ============================
# Request Models
# ============================
class WeightsRequest(BaseModel):
    vaults: List[Vault]
    mode: VaultAllocationMode = VaultAllocationMode.DYNAMIC_AUTO
    today: date = Field(default_factory=date.today)


class SavingTaxRequest(BaseModel):
    expense_amount: float
    vaults: List[Vault]
    settings: SavingTaxSettings = SavingTaxSettings()
    overrides: Dict[int, float] = Field(default_factory=dict)
    expense_date: date = Field(default_factory=date.today)
    description: str = ""


class PaycheckRequest(BaseModel):
    amount: float
    vaults: List[Vault]
    mode: VaultAllocationMode = VaultAllocationMode.DYNAMIC_AUTO
    payday: date = Field(default_factory=date.today)


class DeductionRequest(BaseModel):
    expense_amount: float
    vault_balance: float
