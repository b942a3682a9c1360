"""Tests for financial advice."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from finlove.domain.advice import (
    GENERAL_CONTEXT,
    NO_DATA_MESSAGE,
    AdviceService,
    planning_context,
)
from finlove.domain.budget import BudgetService
from finlove.domain.entities import TransactionType
from finlove.domain.errors import NotFoundError
from finlove.domain.transaction import TransactionInput

from conftest import FakeAdviceClient

NOW = datetime(2024, 3, 20, 15, 0, tzinfo=UTC)


@pytest.fixture
def advice_client():
    return FakeAdviceClient()


@pytest.fixture
def advice_service(temp_db, advice_client):
    """Create an AdviceService backed by a fake client."""
    return AdviceService(temp_db, advice_client, cache_ttl=timedelta(hours=24))


def _spend(transaction_service, user_id, description, amount, when):
    transaction_service.create_transaction(
        user_id,
        TransactionInput(
            description=description,
            amount=Decimal(amount),
            type=TransactionType.EXPENSE,
            category="Food",
            date=when,
        ),
    )


def test_planning_context_name():
    assert planning_context(3, 2024) == "PLANNING_3_2024"


class TestFinancialAdvice:
    """Tests for generate_financial_advice."""

    def test_no_recent_data(self, advice_service, advice_client, transaction_service, sample_user):
        _spend(transaction_service, sample_user.id, "Old dinner", "80", (NOW - timedelta(days=45)).date())

        assert advice_service.generate_financial_advice(sample_user.id, now=NOW) == NO_DATA_MESSAGE
        assert advice_client.prompts == []

    def test_prompt_uses_couple_activity_and_tone(
        self, advice_service, advice_client, transaction_service, couple
    ):
        user, partner = couple
        _spend(transaction_service, user.id, "Sushi", "120", NOW.date())
        _spend(transaction_service, partner.id, "Pharmacy", "35.50", (NOW - timedelta(days=3)).date())

        advice = advice_service.generate_financial_advice(user.id, tone="strict", now=NOW)

        assert advice == advice_client.answer
        prompt = advice_client.prompts[0]
        assert "strict financial auditor" in prompt
        assert "Sushi (Food): 120.00 [Expense]" in prompt
        assert "Pharmacy" in prompt
        assert "Ana Souza" in prompt

        history = advice_service.get_history(user.id)
        assert [m.message for m in history] == [advice]
        assert history[0].role == "model"
        assert history[0].context == GENERAL_CONTEXT

    def test_unknown_tone_falls_back_to_friendly(
        self, advice_service, advice_client, transaction_service, sample_user
    ):
        _spend(transaction_service, sample_user.id, "Coffee", "8", NOW.date())
        advice_service.generate_financial_advice(sample_user.id, tone="SARCASTIC", now=NOW)
        assert "friendly advisor" in advice_client.prompts[0]

    def test_answer_is_cached(self, advice_service, advice_client, transaction_service, sample_user):
        _spend(transaction_service, sample_user.id, "Coffee", "8", NOW.date())

        first = advice_service.generate_financial_advice(sample_user.id, now=NOW)
        advice_client.answer = "Fresh advice"
        cached = advice_service.generate_financial_advice(sample_user.id, now=NOW + timedelta(hours=5))

        assert cached == first
        assert len(advice_client.prompts) == 1

        fresh = advice_service.generate_financial_advice(sample_user.id, now=NOW + timedelta(hours=25))
        assert fresh == "Fresh advice"
        assert len(advice_client.prompts) == 2

    def test_unknown_user(self, advice_service):
        with pytest.raises(NotFoundError):
            advice_service.generate_financial_advice(999, now=NOW)


class TestPlanningAdvice:
    """Tests for generate_planning_advice and history."""

    def test_planning_advice_is_stored_per_month(self, advice_service, advice_client, temp_db, sample_user):
        BudgetService(temp_db).save_budget(
            sample_user.id,
            3,
            2024,
            {
                "incomes": [{"name": "Salary", "amount": "5000"}],
                "fixed_expenses": [{"name": "Rent", "amount": "1800", "day": 10}],
            },
        )

        advice = advice_service.generate_planning_advice(sample_user.id, 3, 2024)

        prompt = advice_client.prompts[0]
        assert "03/2024" in prompt
        assert "Salary" in prompt
        assert "Rent" in prompt
        context = planning_context(3, 2024)
        assert [m.message for m in advice_service.get_history(sample_user.id, context)] == [advice]
        assert advice_service.get_history(sample_user.id) == []

    def test_planning_without_budget(self, advice_service, advice_client, sample_user):
        with pytest.raises(NotFoundError):
            advice_service.generate_planning_advice(sample_user.id, 3, 2024)
        assert advice_client.prompts == []

    def test_clear_history(self, advice_service, transaction_service, sample_user):
        _spend(transaction_service, sample_user.id, "Coffee", "8", NOW.date())
        advice_service.generate_financial_advice(sample_user.id, now=NOW)

        assert advice_service.clear_history(sample_user.id) == 1
        assert advice_service.get_history(sample_user.id) == []
