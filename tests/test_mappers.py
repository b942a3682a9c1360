"""Tests for mappers between domain models and SQLAlchemy models."""

from datetime import date, datetime, UTC
from decimal import Decimal

from finlove.domain import entities as domain
from finlove.database.models import (
    User as ORMUser,
    Transaction as ORMTransaction,
    RecurringTransaction as ORMRecurringTransaction,
    CreditCard as ORMCreditCard,
    Investment as ORMInvestment,
    Category as ORMCategory,
    Badge as ORMBadge,
    MonthlyBudget as ORMMonthlyBudget,
    AiChat as ORMAiChat,
    PartnerMessage as ORMPartnerMessage,
)
from finlove.database.mappers import (
    user_to_domain,
    transaction_to_domain,
    draft_to_orm,
    recurring_to_domain,
    credit_card_to_domain,
    investment_to_domain,
    category_to_domain,
    badge_to_domain,
    budget_to_domain,
    chat_to_domain,
    partner_message_to_domain,
)


class TestUserMapper:
    """Tests for user mapper."""

    def test_user_to_domain(self):
        orm_user = ORMUser(
            id=1,
            name="Ana Souza",
            email="ana@example.com",
            password_hash="hash",
            spending_limit=Decimal("3000.00"),
            savings_goal="Trip to Lisbon",
            partner_id=2,
            created_at=datetime.now(UTC),
        )

        user = user_to_domain(orm_user)

        assert isinstance(user, domain.User)
        assert user.id == 1
        assert user.email == "ana@example.com"
        assert user.spending_limit == Decimal("3000.00")
        assert user.partner_id == 2
        assert user.first_name == "Ana"
        assert user.reset_token is None


class TestTransactionMapper:
    """Tests for transaction mappers."""

    def test_transaction_to_domain_converts_enums(self):
        orm_txn = ORMTransaction(
            id=7,
            user_id=1,
            type="EXPENSE",
            amount=Decimal("120.50"),
            description="Groceries",
            category="Food",
            date=date(2024, 3, 5),
            payment_method="CREDIT",
            is_paid=False,
            installment_id="abc",
            installments=3,
            current_installment=2,
            credit_card_id=4,
            created_at=datetime.now(UTC),
        )

        txn = transaction_to_domain(orm_txn)

        assert isinstance(txn, domain.Transaction)
        assert txn.type is domain.TransactionType.EXPENSE
        assert txn.payment_method is domain.PaymentMethod.CREDIT
        assert txn.amount == Decimal("120.50")
        assert txn.is_paid is False
        assert txn.installment_id == "abc"
        assert txn.current_installment == 2
        assert txn.credit_card_id == 4

    def test_draft_to_orm_stores_enum_values(self):
        draft = domain.TransactionDraft(
            user_id=1,
            type=domain.TransactionType.INCOME,
            amount=Decimal("5000.00"),
            description="Salary",
            category="Salary",
            date=date(2024, 3, 1),
        )

        orm_txn = draft_to_orm(draft)

        assert isinstance(orm_txn, ORMTransaction)
        assert orm_txn.id is None
        assert orm_txn.type == "INCOME"
        assert orm_txn.payment_method == "DEBIT"
        assert orm_txn.is_paid is True
        assert orm_txn.installment_id is None


class TestRecurringMapper:
    """Tests for recurring template mapper."""

    def test_recurring_to_domain(self):
        orm_recurring = ORMRecurringTransaction(
            id=3,
            user_id=1,
            type="EXPENSE",
            amount=Decimal("39.90"),
            description="Streaming",
            category="Subscriptions",
            frequency="MONTHLY",
            day_of_month=31,
            next_run=date(2024, 2, 29),
            active=True,
            created_at=datetime.now(UTC),
        )

        recurring = recurring_to_domain(orm_recurring)

        assert isinstance(recurring, domain.RecurringTransaction)
        assert recurring.type is domain.TransactionType.EXPENSE
        assert recurring.day_of_month == 31
        assert recurring.next_run == date(2024, 2, 29)
        assert recurring.active is True


class TestCardAndCategoryMappers:
    """Tests for credit card and category mappers."""

    def test_credit_card_to_domain(self):
        orm_card = ORMCreditCard(
            id=2,
            user_id=1,
            name="Nubank",
            closing_day=10,
            due_day=17,
            limit=Decimal("8000.00"),
            created_at=datetime.now(UTC),
        )

        card = credit_card_to_domain(orm_card)

        assert isinstance(card, domain.CreditCard)
        assert card.name == "Nubank"
        assert card.closing_day == 10
        assert card.due_day == 17
        assert card.limit == Decimal("8000.00")

    def test_investment_to_domain(self):
        orm_investment = ORMInvestment(
            id=4,
            user_id=1,
            name="Tesouro Selic",
            category="Fixed income",
            invested_amount=Decimal("1000.00"),
            current_amount=Decimal("1043.10"),
            origin_transaction_id=12,
            deposit_transaction_id=None,
            created_at=datetime.now(UTC),
        )

        investment = investment_to_domain(orm_investment)

        assert isinstance(investment, domain.Investment)
        assert investment.current_amount == Decimal("1043.10")
        assert investment.origin_transaction_id == 12
        assert investment.deposit_transaction_id is None

    def test_category_to_domain(self):
        orm_category = ORMCategory(
            id=5,
            user_id=1,
            name="Freelance",
            color="#22c55e",
            icon="Briefcase",
            category_type="INCOME",
            created_at=datetime.now(UTC),
        )

        category = category_to_domain(orm_category)

        assert isinstance(category, domain.Category)
        assert category.category_type is domain.CategoryType.INCOME
        assert category.color == "#22c55e"


class TestOtherMappers:
    """Tests for badge, budget, chat and partner message mappers."""

    def test_badge_to_domain(self):
        orm_badge = ORMBadge(
            id=1,
            user_id=1,
            code="FIRST_STEP",
            name="First step",
            description="Recorded the first transaction",
            icon="Footprints",
            earned_at=datetime.now(UTC),
        )

        badge = badge_to_domain(orm_badge)

        assert isinstance(badge, domain.Badge)
        assert badge.code == "FIRST_STEP"

    def test_budget_to_domain_defaults_missing_data(self):
        orm_budget = ORMMonthlyBudget(id=1, user_id=1, month=3, year=2024, data=None)

        budget = budget_to_domain(orm_budget)

        assert isinstance(budget, domain.MonthlyBudget)
        assert budget.month == 3
        assert budget.data == {}

    def test_chat_to_domain(self):
        orm_chat = ORMAiChat(
            id=9,
            user_id=1,
            role="user",
            message="How are we doing?",
            context="GENERAL",
            created_at=datetime.now(UTC),
        )

        chat = chat_to_domain(orm_chat)

        assert isinstance(chat, domain.AiChatMessage)
        assert chat.role == "user"
        assert chat.context == "GENERAL"

    def test_partner_message_to_domain(self):
        orm_message = ORMPartnerMessage(
            id=4,
            sender_id=1,
            receiver_id=2,
            category="FINANCE",
            message="Paid the rent",
            created_at=datetime.now(UTC),
        )

        message = partner_message_to_domain(orm_message)

        assert isinstance(message, domain.PartnerMessage)
        assert message.category is domain.MessageCategory.FINANCE
        assert message.receiver_id == 2
