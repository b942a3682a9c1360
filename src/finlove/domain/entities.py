"""Domain model entities for finlove.

These are pure data classes representing business concepts, independent of
the database schema. Services receive and return these; the SQLAlchemy models
never leave the database package.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class TransactionType(str, Enum):
    """Kind of ledger entry."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    INVESTMENT = "INVESTMENT"


class PaymentMethod(str, Enum):
    """How an expense was paid."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class CategoryType(str, Enum):
    """Whether a user category groups income or expenses."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class MessageCategory(str, Enum):
    """Tag for messages exchanged between partners."""

    LOVE = "LOVE"
    FINANCE = "FINANCE"
    ALERT = "ALERT"


@dataclass(frozen=True)
class User:
    """User account domain entity."""

    id: int
    name: str
    email: str
    password_hash: str
    spending_limit: Decimal
    savings_goal: Optional[str]
    partner_id: Optional[int]
    last_advice: Optional[str]
    last_advice_at: Optional[datetime]
    reset_token: Optional[str]
    reset_token_expiry: Optional[datetime]
    created_at: datetime

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""


@dataclass(frozen=True)
class Transaction:
    """Transaction (ledger entry) domain entity."""

    id: int
    user_id: int
    type: TransactionType
    amount: Decimal
    description: str
    category: str
    date: date
    payment_method: PaymentMethod
    is_paid: bool
    installment_id: Optional[str]
    installments: Optional[int]
    current_installment: Optional[int]
    credit_card_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction that has not been written yet.

    Batch writers (installment groups, the recurring rollover, imports) build
    lists of drafts and hand them to the database in one unit of work.
    """

    user_id: int
    type: TransactionType
    amount: Decimal
    description: str
    category: str
    date: date
    payment_method: PaymentMethod = PaymentMethod.DEBIT
    is_paid: bool = True
    installment_id: Optional[str] = None
    installments: Optional[int] = None
    current_installment: Optional[int] = None
    credit_card_id: Optional[int] = None


@dataclass(frozen=True)
class RecurringTransaction:
    """Template for a monthly recurring bill or income."""

    id: int
    user_id: int
    type: TransactionType
    amount: Decimal
    description: str
    category: str
    frequency: str
    day_of_month: Optional[int]
    next_run: date
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class CreditCard:
    """Credit card domain entity."""

    id: int
    user_id: int
    name: str
    closing_day: int
    due_day: int
    limit: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Investment:
    """Portfolio entry: what was put in and what it is worth now.

    ``origin_transaction_id`` is the ``INVESTMENT`` ledger entry that paid for
    it and ``deposit_transaction_id`` the automatic top-up income, when any.
    """

    id: int
    user_id: int
    name: str
    category: str
    invested_amount: Decimal
    current_amount: Decimal
    origin_transaction_id: Optional[int]
    deposit_transaction_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """User-defined category domain entity."""

    id: int
    user_id: int
    name: str
    color: Optional[str]
    icon: str
    category_type: CategoryType
    created_at: datetime


@dataclass(frozen=True)
class Badge:
    """Gamification badge earned by a user."""

    id: int
    user_id: int
    code: str
    name: str
    description: str
    icon: str
    earned_at: datetime


@dataclass(frozen=True)
class MonthlyBudget:
    """Stored monthly plan. ``data`` is the raw JSON document."""

    id: int
    user_id: int
    month: int
    year: int
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AiChatMessage:
    """One entry of the advice chat history."""

    id: int
    user_id: int
    role: str
    message: str
    context: str
    created_at: datetime


@dataclass(frozen=True)
class PartnerMessage:
    """Short message sent from one partner to the other."""

    id: int
    sender_id: int
    receiver_id: int
    category: MessageCategory
    message: str
    created_at: datetime
