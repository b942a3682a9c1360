"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from finlove.domain.entities import (
    AiChatMessage,
    Badge,
    Category,
    CreditCard,
    Investment,
    MonthlyBudget,
    PartnerMessage,
    RecurringTransaction,
    Transaction,
    TransactionDraft,
    TransactionType,
    PaymentMethod,
    User,
)


class Database(ABC):
    """Abstract database interface for finlove.

    Every write method commits on its own unless it runs inside
    ``unit_of_work()``, in which case the whole block commits or rolls back
    together.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def clone(self) -> "Database":
        """Return a handle with its own session over the same storage.

        Used to give each concurrent request its own session.
        """
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group writes into one all-or-nothing transaction.

        Blocks may nest; only the outermost block commits. Any exception
        raised inside the block rolls everything back and propagates.
        """
        pass

    # User operations
    @abstractmethod
    def create_user(
        self, name: str, email: str, password_hash: str, spending_limit: Decimal
    ) -> int:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        pass

    @abstractmethod
    def get_user_by_reset_token(self, token: str) -> Optional[User]:
        """Get the user holding a password reset token."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users."""
        pass

    @abstractmethod
    def update_user(self, user_id: int, **fields: Any) -> None:
        """Update user columns. Passing None clears a nullable column."""
        pass

    @abstractmethod
    def delete_user(self, user_id: int) -> None:
        """Delete a user and everything they own."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(self, draft: TransactionDraft) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def create_transactions(self, drafts: Sequence[TransactionDraft]) -> list[int]:
        """Create several transactions in one write. Returns their IDs in order."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, **fields: Any) -> None:
        """Update transaction columns."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def delete_transactions(self, user_id: int, transaction_ids: Sequence[int]) -> int:
        """Delete the given transactions owned by ``user_id``. Returns count deleted."""
        pass

    @abstractmethod
    def delete_installment_group(self, user_id: int, installment_id: str) -> int:
        """Delete every installment of a group owned by ``user_id``. Returns count deleted."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_ids: Sequence[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
        payment_method: Optional[PaymentMethod] = None,
        is_paid: Optional[bool] = None,
        credit_card_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def count_transactions(self, user_id: int) -> int:
        """Count transactions owned by a user."""
        pass

    @abstractmethod
    def sum_transactions(
        self,
        user_ids: Sequence[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
        payment_method: Optional[PaymentMethod] = None,
        exclude_payment_method: Optional[PaymentMethod] = None,
        is_paid: Optional[bool] = None,
        credit_card_id: Optional[int] = None,
    ) -> Decimal:
        """Sum transaction amounts matching the filters (0.00 when none match)."""
        pass

    @abstractmethod
    def mark_card_transactions_paid(
        self, user_id: int, credit_card_id: int, start_date: date, end_date: date
    ) -> int:
        """Mark unpaid card transactions in a date range as paid. Returns count updated."""
        pass

    @abstractmethod
    def sum_by_category(
        self,
        user_ids: Sequence[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
        limit: Optional[int] = None,
    ) -> list[tuple[str, Decimal]]:
        """Sum amounts per category, largest total first."""
        pass

    # Recurring transaction operations
    @abstractmethod
    def create_recurring(
        self,
        user_id: int,
        transaction_type: TransactionType,
        amount: Decimal,
        description: str,
        category: str,
        next_run: date,
        day_of_month: Optional[int] = None,
        frequency: str = "MONTHLY",
    ) -> int:
        """Create a recurring template. Returns template ID."""
        pass

    @abstractmethod
    def get_recurring(self, recurring_id: int) -> Optional[RecurringTransaction]:
        """Get recurring template by ID."""
        pass

    @abstractmethod
    def list_recurring(self, user_id: int, active_only: bool = True) -> list[RecurringTransaction]:
        """List a user's templates, largest amount first."""
        pass

    @abstractmethod
    def list_due_recurring(self, limit_date: date) -> list[RecurringTransaction]:
        """List active templates (all users) whose next run is on or before ``limit_date``."""
        pass

    @abstractmethod
    def update_recurring_next_run(self, recurring_id: int, next_run: date) -> None:
        """Move a template's next-run pointer."""
        pass

    @abstractmethod
    def set_recurring_active(self, recurring_id: int, active: bool) -> None:
        """Activate or deactivate a template."""
        pass

    # Credit card operations
    @abstractmethod
    def create_credit_card(
        self, user_id: int, name: str, closing_day: int, due_day: int, limit: Decimal
    ) -> int:
        """Create a credit card. Returns card ID."""
        pass

    @abstractmethod
    def get_credit_card(self, card_id: int) -> Optional[CreditCard]:
        """Get credit card by ID."""
        pass

    @abstractmethod
    def list_credit_cards(self, user_id: int) -> list[CreditCard]:
        """List a user's credit cards by name."""
        pass

    @abstractmethod
    def delete_credit_card(self, card_id: int) -> None:
        """Delete a card. Linked transactions keep their history without the card."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, user_id: int, name: str, color: Optional[str], icon: str, category_type: str
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, user_id: int) -> list[Category]:
        """List a user's categories by name."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category."""
        pass

    # Badge operations
    @abstractmethod
    def create_badge(self, user_id: int, code: str, name: str, description: str, icon: str) -> int:
        """Award a badge. Returns badge ID."""
        pass

    @abstractmethod
    def list_badges(self, user_id: int) -> list[Badge]:
        """List a user's badges, newest first."""
        pass

    # Monthly budget operations
    @abstractmethod
    def get_monthly_budget(self, user_id: int, month: int, year: int) -> Optional[MonthlyBudget]:
        """Get the stored plan for a month."""
        pass

    @abstractmethod
    def upsert_monthly_budget(self, user_id: int, month: int, year: int, data: dict[str, Any]) -> None:
        """Create or replace the stored plan for a month."""
        pass

    # Advice chat operations
    @abstractmethod
    def add_chat_message(self, user_id: int, role: str, message: str, context: str) -> int:
        """Append a chat history entry. Returns its ID."""
        pass

    @abstractmethod
    def list_chat_messages(self, user_id: int, context: str, limit: int = 50) -> list[AiChatMessage]:
        """List chat history for a context, oldest first."""
        pass

    @abstractmethod
    def clear_chat_messages(self, user_id: int, context: str) -> int:
        """Delete chat history for a context. Returns count deleted."""
        pass

    # Partner message operations
    @abstractmethod
    def create_partner_message(self, sender_id: int, receiver_id: int, category: str, message: str) -> int:
        """Store a partner message. Returns its ID."""
        pass

    @abstractmethod
    def list_partner_messages(self, user_id: int, limit: int = 10) -> list[PartnerMessage]:
        """List messages sent or received by a user, newest first."""
        pass

    # Investment operations
    @abstractmethod
    def create_investment(
        self,
        user_id: int,
        name: str,
        category: str,
        invested_amount: Decimal,
        current_amount: Decimal,
        origin_transaction_id: Optional[int] = None,
        deposit_transaction_id: Optional[int] = None,
    ) -> int:
        """Create a portfolio entry. Returns its ID."""
        pass

    @abstractmethod
    def get_investment(self, investment_id: int) -> Optional[Investment]:
        """Get portfolio entry by ID."""
        pass

    @abstractmethod
    def list_investments(self, user_id: int) -> list[Investment]:
        """List a user's portfolio, largest current amount first."""
        pass

    @abstractmethod
    def update_investment_amount(self, investment_id: int, current_amount: Decimal) -> None:
        """Set the current amount of a portfolio entry."""
        pass

    @abstractmethod
    def delete_investment(self, investment_id: int) -> None:
        """Delete a portfolio entry."""
        pass
