"""
Vault allocation engines.
"""

from .engine import AllocationEngine, run_monthly_allocation
from .weights import compute_weights
from .saving_tax import distribute_tax, distribute_income
from .cents import distribute_cents
from .helpers import compute_vault_deduction, months_until

__all__ = [
    "AllocationEngine",
    "run_monthly_allocation",
    "compute_weights",
    "distribute_tax",
    "distribute_income",
    "distribute_cents",
    "compute_vault_deduction",
    "months_until",
]
