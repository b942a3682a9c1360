"""Tests for the user service: profile, partner link and messages."""

from datetime import date
from decimal import Decimal

import pytest

from finlove.domain.entities import MessageCategory, PaymentMethod, TransactionType
from finlove.domain.errors import ConflictError, NotFoundError, ValidationError
from finlove.domain.transaction import TransactionInput


def _entry(txn_type, amount, method=PaymentMethod.DEBIT):
    return TransactionInput(
        description="Entry",
        amount=Decimal(amount),
        type=txn_type,
        category="Misc",
        date=date(2024, 3, 1),
        payment_method=method,
    )


class TestProfile:
    """Tests for profile updates."""

    def test_get_missing_user(self, user_service):
        with pytest.raises(NotFoundError):
            user_service.get_user(999)

    def test_update_name(self, user_service, sample_user):
        user_service.update_name(sample_user.id, "  Ana Maria ")
        assert user_service.get_user(sample_user.id).name == "Ana Maria"
        with pytest.raises(ValidationError):
            user_service.update_name(sample_user.id, "A")

    def test_spending_limit(self, user_service, sample_user):
        user_service.update_spending_limit(sample_user.id, Decimal("3500.5"))
        assert user_service.get_user(sample_user.id).spending_limit == Decimal("3500.50")
        with pytest.raises(ValidationError):
            user_service.update_spending_limit(sample_user.id, Decimal("-1"))

    def test_savings_goal_is_shared_with_partner(self, user_service, couple):
        user, partner = couple
        user_service.update_savings_goal(user.id, " Trip to Lisbon ")
        assert user_service.get_user(user.id).savings_goal == "Trip to Lisbon"
        assert user_service.get_user(partner.id).savings_goal == "Trip to Lisbon"

        user_service.update_savings_goal(partner.id, "")
        assert user_service.get_user(user.id).savings_goal is None


class TestPartnerLink:
    """Tests for link_partner and unlink_partner."""

    def test_link_sets_both_sides(self, user_service, sample_user, sample_partner):
        partner = user_service.link_partner(sample_user.id, "BRUNO@example.com")

        assert partner.id == sample_partner.id
        assert partner.partner_id == sample_user.id
        assert user_service.get_user(sample_user.id).partner_id == sample_partner.id
        assert user_service.couple_ids(sample_user.id) == [sample_user.id, sample_partner.id]

    def test_link_unknown_email(self, user_service, sample_user):
        with pytest.raises(NotFoundError):
            user_service.link_partner(sample_user.id, "ghost@example.com")

    def test_link_self(self, user_service, sample_user):
        with pytest.raises(ValidationError):
            user_service.link_partner(sample_user.id, sample_user.email)

    def test_link_when_already_linked(self, user_service, auth_service, couple):
        user, _ = couple
        _, third = auth_service.register("Carla Dias", "carla@example.com", "secret123")
        with pytest.raises(ConflictError):
            user_service.link_partner(user.id, third.email)
        with pytest.raises(ConflictError):
            user_service.link_partner(third.id, user.email)

    def test_unlink(self, user_service, couple):
        user, partner = couple
        user_service.unlink_partner(partner.id)
        assert user_service.get_partner(user.id) is None
        assert user_service.get_partner(partner.id) is None
        with pytest.raises(ValidationError):
            user_service.unlink_partner(user.id)

    def test_delete_user_unlinks_partner(self, user_service, transaction_service, couple):
        user, partner = couple
        transaction_service.create_transaction(user.id, _entry(TransactionType.EXPENSE, "10"))

        user_service.delete_user(user.id)

        with pytest.raises(NotFoundError):
            user_service.get_user(user.id)
        assert user_service.get_user(partner.id).partner_id is None


def test_balance_counts_paid_entries_of_couple(user_service, transaction_service, couple):
    user, partner = couple
    transaction_service.create_transaction(user.id, _entry(TransactionType.INCOME, "3000"))
    transaction_service.create_transaction(partner.id, _entry(TransactionType.EXPENSE, "500"))
    transaction_service.create_transaction(user.id, _entry(TransactionType.INVESTMENT, "250"))
    # Pending credit purchase does not count yet
    transaction_service.create_transaction(
        user.id, _entry(TransactionType.EXPENSE, "800", PaymentMethod.CREDIT)
    )

    assert user_service.get_balance(user.id) == Decimal("2250.00")


class TestPartnerMessages:
    """Tests for partner messages."""

    def test_send_and_list_oldest_first(self, user_service, couple):
        user, partner = couple
        user_service.send_partner_message(user.id, "Dinner tonight?")
        user_service.send_partner_message(partner.id, "Yes!", category="FINANCE")

        messages = user_service.list_partner_messages(user.id)
        assert [m.message for m in messages] == ["Dinner tonight?", "Yes!"]
        assert messages[0].category == MessageCategory.LOVE
        assert messages[1].category == MessageCategory.FINANCE
        assert messages[1].receiver_id == user.id

    def test_message_needs_partner(self, user_service, sample_user):
        with pytest.raises(ValidationError, match="No partner"):
            user_service.send_partner_message(sample_user.id, "Hello")

    @pytest.mark.parametrize(
        "text,category",
        [("   ", "LOVE"), ("x" * 501, "LOVE"), ("Hi", "GOSSIP")],
    )
    def test_invalid_messages(self, user_service, couple, text, category):
        user, _ = couple
        with pytest.raises(ValidationError):
            user_service.send_partner_message(user.id, text, category=category)
