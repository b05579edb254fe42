"""
Test the HTTP endpoints and the allocation history log.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import database
from main import app


@pytest.fixture
def client(monkeypatch):
    """Test client backed by a fresh in-memory history database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    monkeypatch.setattr(database, "engine", engine)
    database.init_db(engine)
    with TestClient(app) as c:
        yield c
    engine.dispose()


def _monthly_body(**overrides):
    body = {
        "vaults": [
            {"id": 1, "name": "Rent", "monthly_need": 600},
            {"id": 2, "name": "Done", "target_amount": 100, "current_balance": 100},
        ],
        "monthly_income": 1000,
        "main_account_balance": 0,
        "safe_buffer_percent": 0,
        "min_buffer_percent": 0,
        "max_allocation_percent": 1.0,
        "today": "2025-03-15",
    }
    body.update(overrides)
    return body


class TestInfoEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Vault Allocation API"

    def test_default_input_is_runnable(self, client):
        response = client.get("/api/default_input")
        assert response.status_code == 200
        sample = response.json()
        assert len(sample["vaults"]) == 3

        result = client.post("/api/allocations/monthly", json=sample)
        assert result.status_code == 200
        assert result.json()["total_allocated"] > 0


class TestMonthlyAllocation:

    def test_run_without_persisting(self, client):
        response = client.post("/api/allocations/monthly", json=_monthly_body())
        assert response.status_code == 200
        data = response.json()
        assert data["allocations"] == {"1": pytest.approx(600.0)}
        assert data["archive_vault_ids"] == [2]
        assert data["allocation_details"]["1"]["reason"] == "Recurring flow goal"

        assert client.get("/api/allocations/history").json() == []

    def test_persisted_run_is_logged(self, client):
        response = client.post("/api/allocations/monthly?persist=true", json=_monthly_body())
        assert response.status_code == 200

        history = client.get("/api/allocations/history").json()
        assert len(history) == 1
        assert history[0]["vault_id"] == 1
        assert history[0]["amount"] == pytest.approx(600.0)
        assert history[0]["date"] == "2025-03-15"
        assert history[0]["source"] == "SMART_ALLOCATION"

    def test_invalid_body(self, client):
        body = _monthly_body()
        del body["monthly_income"]
        assert client.post("/api/allocations/monthly", json=body).status_code == 422

    def test_ramp_window_must_be_positive(self, client):
        body = _monthly_body(ramp_window_months=0)
        assert client.post("/api/allocations/monthly", json=body).status_code == 422


class TestDistributionEndpoints:

    def test_weights(self, client):
        response = client.post("/api/weights", json={
            "vaults": [{"id": 1, "target_amount": 500}, {"id": 2, "target_amount": 500}],
            "today": "2025-03-15",
        })
        assert response.status_code == 200
        assert {w["vault_id"]: w["weight"] for w in response.json()} == {
            1: pytest.approx(0.5), 2: pytest.approx(0.5),
        }

    def test_saving_tax_persisted(self, client):
        response = client.post("/api/saving_tax?persist=true", json={
            "expense_amount": 150,
            "vaults": [{"id": 1, "target_amount": 1000}, {"id": 2, "target_amount": 1000}],
            "settings": {"saving_tax_rate": 0.1},
            "expense_date": "2025-03-15",
            "description": "groceries",
        })
        assert response.status_code == 200
        plans = response.json()
        assert [(p["vault_id"], p["cents"], p["amount"]) for p in plans] == [(1, 750, 7.5), (2, 750, 7.5)]

        history = client.get("/api/allocations/history", params={"vault_id": 1}).json()
        assert len(history) == 1
        assert history[0]["source"] == "SAVING_TAX"
        assert history[0]["note"] == "Saving tax from groceries"

    def test_paycheck(self, client):
        response = client.post("/api/paycheck", json={
            "amount": 1000.01,
            "vaults": [{"id": 1, "target_amount": 3000}, {"id": 2, "target_amount": 1000}],
            "payday": "2025-03-15",
        })
        assert response.status_code == 200
        assert sum(p["cents"] for p in response.json()) == 100001

    def test_deduction(self, client):
        response = client.post("/api/deduction", json={"expense_amount": 150, "vault_balance": 100})
        assert response.status_code == 200
        assert response.json() == {"deduction": 100.0, "overflow": 50.0}

    def test_saving_tax_settings_defaults(self, client):
        response = client.post("/api/saving_tax", json={
            "expense_amount": 100,
            "vaults": [{"id": 1, "target_amount": 1000}],
            "expense_date": "2025-03-15",
        })
        assert response.status_code == 200
        assert [(p["vault_id"], p["cents"]) for p in response.json()] == [(1, 500)]
