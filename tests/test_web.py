"""Tests for the HTTP API."""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from finlove.database.sqlalchemy_db import SQLAlchemyDatabase
from finlove.domain.entities import TransactionType
from finlove.domain.gamification import GamificationService
from finlove.web import create_app


@pytest.fixture
def client(app_context):
    """Test client bound to the temporary database."""
    return TestClient(create_app(app_context))


def register(client, name="Ana Souza", email="ana@example.com", password="secret123"):
    response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201
    return response.json()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestAuthEndpoints:
    """Tests for registration and login."""

    def test_register_and_login(self, client):
        body = register(client)
        assert body["user"]["email"] == "ana@example.com"
        assert body["token"]

        response = client.post("/api/auth/login", json={"email": "ANA@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["user"]["id"] == body["user"]["id"]

    def test_duplicate_email_conflicts(self, client):
        register(client)
        response = client.post(
            "/api/auth/register", json={"name": "Other", "email": "ana@example.com", "password": "secret123"}
        )
        assert response.status_code == 409

    def test_wrong_password(self, client):
        register(client)
        response = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "nope123"})
        assert response.status_code == 401
        assert "error" in response.json()

    def test_requires_token(self, client):
        assert client.get("/api/transactions").status_code == 401
        assert client.get("/api/transactions", headers=auth("garbage")).status_code == 401

    def test_password_reset_flow(self, client, mailer):
        register(client)

        response = client.post("/api/auth/forgot-password", json={"email": "ana@example.com"})
        assert response.status_code == 202
        (email, link), = mailer.resets
        assert email == "ana@example.com"
        token = link.split("token=")[1]

        response = client.post("/api/auth/reset-password", json={"token": token, "password": "newpass1"})
        assert response.status_code == 200

        response = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "newpass1"})
        assert response.status_code == 200

        response = client.post("/api/auth/reset-password", json={"token": token, "password": "again12"})
        assert response.status_code == 401


class TestTransactionEndpoints:
    """Tests for transaction CRUD."""

    def test_create_list_update_delete(self, client):
        token = register(client)["token"]

        response = client.post(
            "/api/transactions",
            json={
                "description": "Groceries",
                "amount": "150.00",
                "type": "EXPENSE",
                "category": "Food",
                "date": "2024-03-05",
            },
            headers=auth(token),
        )
        assert response.status_code == 201
        (txn_id,) = response.json()["transaction_ids"]

        response = client.get(
            "/api/transactions", params={"start": "2024-03-01", "end": "2024-03-31"}, headers=auth(token)
        )
        assert response.status_code == 200
        rows = response.json()
        assert [row["description"] for row in rows] == ["Groceries"]
        assert rows[0]["is_paid"] is True

        response = client.put(
            f"/api/transactions/{txn_id}",
            json={"amount": "175.25", "type": "INVESTMENT"},
            headers=auth(token),
        )
        assert response.status_code == 200
        assert response.json()["type"] == "INVESTMENT"
        assert response.json()["amount"] == "175.25"

        response = client.delete(f"/api/transactions/{txn_id}", headers=auth(token))
        assert response.json() == {"deleted": 1}

        response = client.delete(f"/api/transactions/{txn_id}", headers=auth(token))
        assert response.status_code == 404

    def test_invalid_amount_is_rejected(self, client):
        token = register(client)["token"]
        response = client.post(
            "/api/transactions",
            json={"description": "Bad", "amount": "-5", "type": "EXPENSE", "category": "Food"},
            headers=auth(token),
        )
        assert response.status_code == 422

    def test_installment_group_delete(self, client):
        token = register(client)["token"]
        response = client.post(
            "/api/transactions",
            json={
                "description": "Laptop",
                "amount": "1000.00",
                "type": "EXPENSE",
                "category": "Shopping",
                "date": "2024-03-05",
                "payment_method": "CREDIT",
                "installments": 4,
            },
            headers=auth(token),
        )
        assert response.status_code == 201
        body = response.json()
        assert len(body["transaction_ids"]) == 4
        assert body["installment_id"]

        response = client.delete(f"/api/transactions/group/{body['installment_id']}", headers=auth(token))
        assert response.json() == {"deleted": 4}

        assert client.get("/api/transactions", headers=auth(token)).json() == []

    def test_badge_failure_keeps_created_transaction(self, client, monkeypatch):
        token = register(client)["token"]

        def broken_check(self, user_id):
            raise RuntimeError("badge rules unavailable")

        monkeypatch.setattr(GamificationService, "check_badges", broken_check)

        response = client.post(
            "/api/transactions",
            json={"description": "Groceries", "amount": "20.00", "type": "EXPENSE", "category": "Food"},
            headers=auth(token),
        )

        assert response.status_code == 201
        rows = client.get("/api/transactions", headers=auth(token)).json()
        assert [row["description"] for row in rows] == ["Groceries"]


class TestPartnerEndpoints:
    """Tests for linking partners."""

    def test_link_shares_transactions(self, client):
        ana = register(client)["token"]
        bruno = register(client, name="Bruno Lima", email="bruno@example.com")["token"]

        response = client.post("/api/partner/link", json={"email": "bruno@example.com"}, headers=auth(ana))
        assert response.status_code == 200
        assert response.json()["name"] == "Bruno Lima"

        client.post(
            "/api/transactions",
            json={"description": "Dinner", "amount": "80.00", "type": "EXPENSE", "category": "Food"},
            headers=auth(bruno),
        )
        rows = client.get("/api/transactions", headers=auth(ana)).json()
        assert [row["description"] for row in rows] == ["Dinner"]

        response = client.post("/api/partner/link", json={"email": "bruno@example.com"}, headers=auth(ana))
        assert response.status_code == 409

    def test_unknown_partner(self, client):
        token = register(client)["token"]
        response = client.post("/api/partner/link", json={"email": "nobody@example.com"}, headers=auth(token))
        assert response.status_code == 404

    def test_badge_failure_keeps_link(self, client, monkeypatch):
        ana = register(client)["token"]
        register(client, name="Bruno Lima", email="bruno@example.com")

        def broken_check(self, user_id):
            raise RuntimeError("badge rules unavailable")

        monkeypatch.setattr(GamificationService, "check_badges", broken_check)

        response = client.post("/api/partner/link", json={"email": "bruno@example.com"}, headers=auth(ana))

        assert response.status_code == 200
        assert response.json()["name"] == "Bruno Lima"


class TestCronEndpoint:
    """Tests for the rollover trigger."""

    def test_rejects_missing_or_wrong_secret(self, client):
        assert client.get("/api/cron").status_code == 401
        assert client.get("/api/cron", headers={"Authorization": "Bearer wrong"}).status_code == 401

    def test_runs_with_secret(self, client):
        response = client.get("/api/cron", headers={"Authorization": "Bearer cron-secret"})
        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "created": 0,
            "templates_updated": 0,
            "notifications": 0,
            "notifications_failed": 0,
        }

    def test_failed_rollover_writes_nothing(self, app_context, temp_db, sample_user, monkeypatch):
        today = date.today()
        recurring_id = temp_db.create_recurring(
            user_id=sample_user.id,
            transaction_type=TransactionType.EXPENSE,
            amount=Decimal("99.90"),
            description="Internet",
            category="Bills",
            next_run=today,
            day_of_month=today.day,
        )

        def broken_update(self, recurring_id, next_run):
            raise RuntimeError("disk full")

        monkeypatch.setattr(SQLAlchemyDatabase, "update_recurring_next_run", broken_update)
        client = TestClient(create_app(app_context), raise_server_exceptions=False)

        response = client.get("/api/cron", headers={"Authorization": "Bearer cron-secret"})

        assert response.status_code == 500
        assert response.json() == {"error": "Rollover failed"}
        fresh = temp_db.clone()
        try:
            assert fresh.list_transactions([sample_user.id]) == []
            assert fresh.get_recurring(recurring_id).next_run == today
        finally:
            fresh.disconnect()
