from __future__ import annotations
import logging
from datetime import date
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import config
import database
from allocation import (
    compute_vault_deduction,
    compute_weights,
    distribute_income,
    distribute_tax,
    run_monthly_allocation,
)
from models import (
    AllocationInput,
    AllocationResult,
    AllocationWeight,
    DeductionRequest,
    PaycheckRequest,
    PlannedContribution,
    SavingTaxRequest,
    Vault,
    VaultDeduction,
    VaultPriority,
    WeightsRequest,
)

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO), format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

database.init_db()

# ============================
# FastAPI app
# ============================
app = FastAPI(title=config.API_TITLE, description=config.API_DESCRIPTION, version=config.API_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=config.CORS_CREDENTIALS,
    allow_methods=config.CORS_METHODS,
    allow_headers=config.CORS_HEADERS,
)


def _persist(pairs, on: date, source: str, note: str) -> None:
    with database.get_session() as s:
        rows = database.record_allocations(s, pairs, on, source, note)
        logger.info("recorded %d %s contributions for %s", len(rows), source, on.isoformat())


@app.get("/")
def root():
    return {"message": config.API_TITLE, "docs": "Visit /docs for API documentation"}


@app.get("/api/default_input")
def default_input() -> AllocationInput:
    today = date.today()
    return AllocationInput(
        vaults=[
            Vault(id=1, name="Emergency fund", target_amount=6_000, current_balance=1_500,
                  priority=VaultPriority.HIGH, priority_weight=1.5),
            Vault(id=2, name="Car", target_amount=5_000, current_balance=800,
                  target_date=date(today.year + 1, today.month, 1)),
            Vault(id=3, name="Rent deposit", monthly_need=600,
                  start_date=date(today.year + (today.month // 12), today.month % 12 + 1, 1)),
        ],
        monthly_income=3_200,
        main_account_balance=1_800,
        today=today,
        recent_monthly_expenses=[1_250, 1_400, 1_320],
    )


@app.post("/api/allocations/monthly")
def monthly_allocation(allocation_input: AllocationInput, persist: bool = False) -> AllocationResult:
    try:
        result = run_monthly_allocation(allocation_input)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if persist and result.allocations:
        _persist(result.allocations.items(), allocation_input.today,
                 config.SOURCE_SMART_ALLOCATION, "Monthly suggested allocation")
    return result


@app.post("/api/weights")
def weights(req: WeightsRequest) -> List[AllocationWeight]:
    return compute_weights(req.vaults, req.mode, req.today)


@app.post("/api/saving_tax")
def saving_tax(req: SavingTaxRequest, persist: bool = False) -> List[PlannedContribution]:
    try:
        plans = distribute_tax(
            req.expense_amount,
            req.settings.saving_tax_rate,
            req.vaults,
            overrides=req.overrides,
            today=req.expense_date,
            mode=req.settings.vault_allocation_mode,
            minimum_contribution=req.settings.minimum_contribution,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if persist and plans:
        _persist(((p.vault_id, p.amount) for p in plans), req.expense_date,
                 config.SOURCE_SAVING_TAX, f"Saving tax from {req.description}".strip())
    return plans


@app.post("/api/paycheck")
def paycheck(req: PaycheckRequest, persist: bool = False) -> List[PlannedContribution]:
    plans = distribute_income(req.amount, req.vaults, req.mode, req.payday)
    if persist and plans:
        _persist(((p.vault_id, p.amount) for p in plans), req.payday,
                 config.SOURCE_INCOME, "Paycheck allocation")
    return plans


@app.post("/api/deduction")
def deduction(req: DeductionRequest) -> VaultDeduction:
    return compute_vault_deduction(req.expense_amount, req.vault_balance)


@app.get("/api/allocations/history")
def allocation_history(vault_id: Optional[int] = None):
    with database.get_session() as s:
        rows = database.list_history(s, vault_id)
        return [
            {"id": r.id, "vault_id": r.vault_id, "amount": r.amount, "date": r.date.isoformat(),
             "source": r.source, "note": r.note}
            for r in rows
        ]
