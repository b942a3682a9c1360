"""Tests for the recurring-bill rollover."""

from datetime import date
from decimal import Decimal

import pytest

from finlove.domain.entities import PaymentMethod, TransactionType
from finlove.domain.recurring import AUTO_SUFFIX, RolloverService, project_occurrences
from finlove.domain.transaction import TransactionInput

from conftest import FailingMailer


def _template(db, user_id, next_run, day=None, amount="89.90", description="Internet"):
    recurring_id = db.create_recurring(
        user_id=user_id,
        transaction_type=TransactionType.EXPENSE,
        amount=Decimal(amount),
        description=description,
        category="Bills",
        next_run=next_run,
        day_of_month=day,
    )
    return db.get_recurring(recurring_id)


class TestProjectOccurrences:
    """Tests for project_occurrences."""

    def test_single_due_occurrence(self, temp_db, sample_user):
        template = _template(temp_db, sample_user.id, date(2024, 3, 10), day=10)
        dates, next_run = project_occurrences(template, date(2024, 3, 17))
        assert dates == [date(2024, 3, 10)]
        assert next_run == date(2024, 4, 10)

    def test_catches_up_missed_months(self, temp_db, sample_user):
        template = _template(temp_db, sample_user.id, date(2024, 1, 5), day=5)
        dates, next_run = project_occurrences(template, date(2024, 3, 12))
        assert dates == [date(2024, 1, 5), date(2024, 2, 5), date(2024, 3, 5)]
        assert next_run == date(2024, 4, 5)

    def test_anchor_day_31_clamps_and_recovers(self, temp_db, sample_user):
        template = _template(temp_db, sample_user.id, date(2024, 1, 31), day=31)
        dates, next_run = project_occurrences(template, date(2024, 4, 30))
        assert dates == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
        assert next_run == date(2024, 5, 31)

    def test_iteration_cap(self, temp_db, sample_user):
        template = _template(temp_db, sample_user.id, date(2020, 1, 1), day=1)
        dates, next_run = project_occurrences(template, date(2024, 1, 1), max_iterations=12)
        assert len(dates) == 12
        assert next_run == date(2021, 1, 1)

    def test_nothing_due(self, temp_db, sample_user):
        template = _template(temp_db, sample_user.id, date(2024, 5, 1), day=1)
        dates, next_run = project_occurrences(template, date(2024, 4, 1))
        assert dates == []
        assert next_run == date(2024, 5, 1)


class TestRolloverService:
    """Tests for RolloverService.run."""

    def test_creates_unpaid_auto_entries(self, temp_db, sample_user, mailer):
        template = _template(temp_db, sample_user.id, date(2024, 3, 10), day=10)
        service = RolloverService(temp_db, mailer)

        result = service.run(date(2024, 3, 5), lookahead_days=7)

        assert result.created == 1
        assert result.templates_updated == 1
        transactions = temp_db.list_transactions([sample_user.id])
        assert len(transactions) == 1
        txn = transactions[0]
        assert txn.description == f"Internet{AUTO_SUFFIX}"
        assert txn.amount == Decimal("89.90")
        assert txn.date == date(2024, 3, 10)
        assert txn.is_paid is False
        assert txn.payment_method == PaymentMethod.DEBIT
        assert txn.type == TransactionType.EXPENSE
        assert temp_db.get_recurring(template.id).next_run == date(2024, 4, 10)

    def test_run_is_idempotent_for_same_window(self, temp_db, sample_user, mailer):
        _template(temp_db, sample_user.id, date(2024, 3, 10), day=10)
        service = RolloverService(temp_db, mailer)

        service.run(date(2024, 3, 5))
        second = service.run(date(2024, 3, 5))

        assert second.created == 0
        assert len(temp_db.list_transactions([sample_user.id])) == 1

    def test_nothing_due_sends_nothing(self, temp_db, sample_user, mailer):
        _template(temp_db, sample_user.id, date(2024, 6, 1), day=1)
        result = RolloverService(temp_db, mailer).run(date(2024, 3, 5))

        assert result.created == 0
        assert result.notifications == 0
        assert mailer.bills == []

    def test_inactive_templates_are_skipped(self, temp_db, sample_user, mailer):
        template = _template(temp_db, sample_user.id, date(2024, 3, 6), day=6)
        temp_db.set_recurring_active(template.id, False)

        result = RolloverService(temp_db, mailer).run(date(2024, 3, 5))

        assert result.created == 0

    def test_one_reminder_per_user(self, temp_db, couple, mailer):
        user, partner = couple
        _template(temp_db, user.id, date(2024, 3, 6), day=6, description="Rent", amount="1500")
        _template(temp_db, user.id, date(2024, 3, 8), day=8, description="Gym", amount="99.90")
        _template(temp_db, partner.id, date(2024, 3, 9), day=9, description="Phone", amount="45")

        result = RolloverService(temp_db, mailer).run(date(2024, 3, 5))

        assert result.created == 3
        assert result.notifications == 2
        assert result.notifications_failed == 0
        by_email = {email: bills for email, _, bills in mailer.bills}
        assert sorted(b.description for b in by_email[user.email]) == ["Gym", "Rent"]
        assert [b.description for b in by_email[partner.email]] == ["Phone"]
        names = {email: name for email, name, _ in mailer.bills}
        assert names[user.email] == "Ana"

    def test_failed_reminder_does_not_undo_entries(self, temp_db, couple):
        user, partner = couple
        _template(temp_db, user.id, date(2024, 3, 6), day=6)
        _template(temp_db, partner.id, date(2024, 3, 7), day=7)
        mailer = FailingMailer({user.email})

        result = RolloverService(temp_db, mailer).run(date(2024, 3, 5))

        assert result.created == 2
        assert result.notifications == 2
        assert result.notifications_failed == 1
        assert [email for email, _, _ in mailer.bills] == [partner.email]
        assert len(temp_db.list_transactions([user.id, partner.id])) == 2

    def test_storage_failure_writes_nothing(self, temp_db, sample_user, mailer, monkeypatch):
        first = _template(temp_db, sample_user.id, date(2024, 3, 6), day=6)
        _template(temp_db, sample_user.id, date(2024, 3, 7), day=7)

        calls = []

        def failing_update(recurring_id, next_run):
            calls.append(recurring_id)
            if len(calls) == 2:
                raise RuntimeError("disk full")
            type(temp_db).update_recurring_next_run(temp_db, recurring_id, next_run)

        monkeypatch.setattr(temp_db, "update_recurring_next_run", failing_update)

        with pytest.raises(RuntimeError):
            RolloverService(temp_db, mailer).run(date(2024, 3, 5))

        assert temp_db.list_transactions([sample_user.id]) == []
        assert temp_db.get_recurring(first.id).next_run == date(2024, 3, 6)
        assert mailer.bills == []

    def test_cap_limits_catch_up(self, temp_db, sample_user, mailer):
        template = _template(temp_db, sample_user.id, date(2022, 1, 15), day=15)

        result = RolloverService(temp_db, mailer).run(
            date(2024, 3, 1), lookahead_days=7, max_iterations=12
        )

        assert result.created == 12
        assert temp_db.get_recurring(template.id).next_run == date(2023, 1, 15)

    def test_template_created_with_transaction_rolls_next_month(
        self, temp_db, sample_user, transaction_service, mailer
    ):
        result = transaction_service.create_transaction(
            sample_user.id,
            TransactionInput(
                description="Streaming",
                amount=Decimal("39.90"),
                type=TransactionType.EXPENSE,
                category="Leisure",
                date=date(2024, 1, 31),
                is_recurring=True,
                recurring_day=31,
            ),
        )
        template = temp_db.get_recurring(result.recurring_id)
        assert template.next_run == date(2024, 2, 29)

        RolloverService(temp_db, mailer).run(date(2024, 2, 25))

        assert temp_db.get_recurring(template.id).next_run == date(2024, 3, 31)
        dates = sorted(txn.date for txn in temp_db.list_transactions([sample_user.id]))
        assert dates == [date(2024, 1, 31), date(2024, 2, 29)]
