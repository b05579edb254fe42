"""
Shared fixtures for allocation engine testing.
"""

import sys
import os
from datetime import date

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src', 'backend'))
os.environ.setdefault("ALLOCATION_DB_URL", "sqlite://")

from models import AllocationInput, Vault


@pytest.fixture
def today():
    """Fixed 'today' so month arithmetic is deterministic."""
    return date(2025, 3, 15)


@pytest.fixture
def add_months():
    """Shift a date by whole months, keeping the day (clamped to 28)."""
    def _add(d, months):
        total = d.year * 12 + (d.month - 1) + months
        return date(total // 12, total % 12 + 1, min(d.day, 28))
    return _add


@pytest.fixture
def make_vault():
    """Factory fixture for vaults with sensible defaults."""
    def _make(vault_id, **kwargs):
        kwargs.setdefault("name", f"Vault {vault_id}")
        return Vault(id=vault_id, **kwargs)
    return _make


@pytest.fixture
def no_buffer_input(today):
    """Factory for inputs with no buffer and no allocation cap."""
    def _make(vaults, income, **kwargs):
        params = {
            "vaults": vaults,
            "monthly_income": income,
            "main_account_balance": kwargs.pop("main_account_balance", 0.0),
            "safe_buffer_percent": 0.0,
            "min_buffer_percent": 0.0,
            "max_allocation_percent": 1.0,
            "today": today,
        }
        params.update(kwargs)
        return AllocationInput(**params)
    return _make
