"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from finlove.domain import entities


def _draft(user_id, amount="10.00", txn_date=date(2024, 3, 5), **overrides):
    values = dict(
        user_id=user_id,
        type=entities.TransactionType.EXPENSE,
        amount=Decimal(amount),
        description="Coffee",
        category="Food",
        date=txn_date,
    )
    values.update(overrides)
    return entities.TransactionDraft(**values)


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_user_returns_domain_model(self, temp_db):
        user_id = temp_db.create_user("Ana", "Ana@Example.com", "hash", Decimal("2000.00"))

        user = temp_db.get_user(user_id)

        assert isinstance(user, entities.User)
        assert user.email == "ana@example.com"
        assert isinstance(user.created_at, datetime)
        assert temp_db.get_user_by_email(" ANA@example.com ").id == user_id

    def test_missing_rows_return_none(self, temp_db):
        assert temp_db.get_user(999) is None
        assert temp_db.get_transaction(999) is None
        assert temp_db.get_credit_card(999) is None
        assert temp_db.get_recurring(999) is None

    def test_update_user_rejects_unknown_fields(self, temp_db, sample_user):
        with pytest.raises(ValueError, match="Unknown user fields"):
            temp_db.update_user(sample_user.id, is_admin=True)

    def test_create_transactions_returns_ids_in_order(self, temp_db, sample_user):
        ids = temp_db.create_transactions(
            [_draft(sample_user.id, "1.00"), _draft(sample_user.id, "2.00")]
        )

        assert len(ids) == 2
        first = temp_db.get_transaction(ids[0])
        assert isinstance(first, entities.Transaction)
        assert first.amount == Decimal("1.00")
        assert first.payment_method is entities.PaymentMethod.DEBIT

    def test_list_transactions_filters_by_couple_and_range(self, temp_db, couple):
        user, partner = couple
        temp_db.create_transaction(_draft(user.id, txn_date=date(2024, 3, 1)))
        temp_db.create_transaction(_draft(partner.id, txn_date=date(2024, 3, 20)))
        temp_db.create_transaction(_draft(partner.id, txn_date=date(2024, 4, 2)))

        march = temp_db.list_transactions(
            [user.id, partner.id], start_date=date(2024, 3, 1), end_date=date(2024, 3, 31)
        )
        mine = temp_db.list_transactions([user.id])

        assert [txn.date for txn in march] == [date(2024, 3, 20), date(2024, 3, 1)]
        assert len(mine) == 1

    def test_sum_transactions_excludes_payment_method(self, temp_db, sample_user):
        temp_db.create_transaction(_draft(sample_user.id, "100.00"))
        temp_db.create_transaction(
            _draft(sample_user.id, "40.00", payment_method=entities.PaymentMethod.CREDIT, is_paid=False)
        )

        total = temp_db.sum_transactions([sample_user.id])
        cash = temp_db.sum_transactions(
            [sample_user.id], exclude_payment_method=entities.PaymentMethod.CREDIT
        )

        assert total == Decimal("140.00")
        assert cash == Decimal("100.00")
        assert temp_db.sum_transactions([999]) == Decimal("0.00")

    def test_delete_transactions_only_touches_owner_rows(self, temp_db, couple):
        user, partner = couple
        own = temp_db.create_transaction(_draft(user.id))
        other = temp_db.create_transaction(_draft(partner.id))

        deleted = temp_db.delete_transactions(user.id, [own, other])

        assert deleted == 1
        assert temp_db.get_transaction(other) is not None

    def test_list_due_recurring(self, temp_db, sample_user):
        due = temp_db.create_recurring(
            sample_user.id,
            entities.TransactionType.EXPENSE,
            Decimal("39.90"),
            "Streaming",
            "Subscriptions",
            next_run=date(2024, 3, 10),
            day_of_month=10,
        )
        temp_db.create_recurring(
            sample_user.id,
            entities.TransactionType.EXPENSE,
            Decimal("100.00"),
            "Gym",
            "Health",
            next_run=date(2024, 4, 10),
        )
        paused = temp_db.create_recurring(
            sample_user.id,
            entities.TransactionType.EXPENSE,
            Decimal("20.00"),
            "Music",
            "Subscriptions",
            next_run=date(2024, 3, 1),
        )
        temp_db.set_recurring_active(paused, False)

        result = temp_db.list_due_recurring(date(2024, 3, 17))

        assert [rec.id for rec in result] == [due]
        assert isinstance(result[0], entities.RecurringTransaction)

    def test_upsert_monthly_budget_replaces_data(self, temp_db, sample_user):
        temp_db.upsert_monthly_budget(sample_user.id, 3, 2024, {"incomes": []})
        temp_db.upsert_monthly_budget(sample_user.id, 3, 2024, {"incomes": [{"name": "Salary"}]})

        budget = temp_db.get_monthly_budget(sample_user.id, 3, 2024)

        assert isinstance(budget, entities.MonthlyBudget)
        assert budget.data == {"incomes": [{"name": "Salary"}]}
        assert temp_db.get_monthly_budget(sample_user.id, 4, 2024) is None

    def test_delete_user_detaches_partner(self, temp_db, couple):
        user, partner = couple

        temp_db.delete_user(user.id)

        assert temp_db.get_user(user.id) is None
        assert temp_db.get_user(partner.id).partner_id is None


class TestUnitOfWork:
    """Tests for grouped writes."""

    def test_commits_when_block_succeeds(self, temp_db, sample_user):
        with temp_db.unit_of_work():
            txn_id = temp_db.create_transaction(_draft(sample_user.id))

        other = temp_db.clone()
        try:
            assert other.get_transaction(txn_id) is not None
        finally:
            other.disconnect()

    def test_rolls_back_every_write_on_error(self, temp_db, sample_user):
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work():
                temp_db.create_transaction(_draft(sample_user.id, "1.00"))
                with temp_db.unit_of_work():
                    temp_db.create_transaction(_draft(sample_user.id, "2.00"))
                raise RuntimeError("boom")

        assert temp_db.list_transactions([sample_user.id]) == []

    def test_clone_shares_engine_with_own_session(self, temp_db):
        other = temp_db.clone()
        try:
            assert other.session_factory is temp_db.session_factory
            assert other is not temp_db
        finally:
            other.disconnect()


class TestAggregatesAndPortfolio:
    """Tests for grouped sums and investment rows."""

    def test_sum_by_category_groups_and_limits(self, temp_db, sample_user):
        temp_db.create_transactions(
            [
                _draft(sample_user.id, "5.00", category="Food"),
                _draft(sample_user.id, "7.25", category="Food"),
                _draft(sample_user.id, "30.00", category="Rent"),
                _draft(sample_user.id, "1.00", category="Fun"),
            ]
        )

        rows = temp_db.sum_by_category([sample_user.id], limit=2)

        assert rows == [("Rent", Decimal("30.00")), ("Food", Decimal("12.25"))]

    def test_investment_rows(self, temp_db, sample_user):
        investment_id = temp_db.create_investment(
            sample_user.id, "Fund", "Stocks", Decimal("100.00"), Decimal("100.00")
        )

        temp_db.update_investment_amount(investment_id, Decimal("87.40"))
        (investment,) = temp_db.list_investments(sample_user.id)
        assert isinstance(investment, entities.Investment)
        assert investment.current_amount == Decimal("87.40")
        assert investment.origin_transaction_id is None

        temp_db.delete_investment(investment_id)
        assert temp_db.get_investment(investment_id) is None
        with pytest.raises(ValueError, match="Investment"):
            temp_db.update_investment_amount(investment_id, Decimal("1.00"))
