"""Investment portfolio domain service.

Every portfolio entry can be backed by an INVESTMENT transaction so the
money leaves the couple's balance. When the balance is short, an automatic
top-up income may cover the gap; the entry remembers both transactions so
deleting it reverses them.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from finlove.database.base import Database
from finlove.domain.entities import Investment, PaymentMethod, TransactionDraft, TransactionType
from finlove.domain.errors import NotFoundError, ValidationError, investment_not_found
from finlove.domain.user import UserService
from finlove.utils.amount_parser import format_brl, to_money

logger = structlog.get_logger(__name__)

INVESTMENT_CATEGORY = "Investments"
TOP_UP_CATEGORY = "Investment Top-up"
REDEMPTION_CATEGORY = "Investment Redemption"
DEFAULT_ASSET_CATEGORY = "Other"


@dataclass(frozen=True)
class Portfolio:
    """A user's entries and the linked partner's."""

    mine: list[Investment]
    partner: list[Investment]

    @property
    def total_current(self) -> Decimal:
        return sum((inv.current_amount for inv in self.mine + self.partner), Decimal("0.00"))


def _amount(value, label: str) -> Decimal:
    try:
        amount = to_money(value)
    except ValueError as e:
        raise ValidationError(str(e))
    if amount < 0:
        raise ValidationError(f"{label} cannot be negative")
    return amount


class InvestmentService:
    """Service for the couple's investment portfolio."""

    def __init__(self, db: Database):
        """Initialize investment service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_investment(self, user_id: int, investment_id: int) -> Investment:
        """Get a portfolio entry owned by the user.

        Raises:
            NotFoundError: If the entry is missing or owned by someone else
        """
        investment = self.db.get_investment(investment_id)
        if investment is None or investment.user_id != user_id:
            raise NotFoundError(investment_not_found(investment_id))
        return investment

    def list_portfolio(self, user_id: int) -> Portfolio:
        """The user's entries and, when linked, the partner's."""
        user = UserService(self.db).get_user(user_id)
        partner = self.db.list_investments(user.partner_id) if user.partner_id else []
        return Portfolio(mine=self.db.list_investments(user.id), partner=partner)

    def create_investment(
        self,
        user_id: int,
        name: str,
        invested_amount,
        category: str = DEFAULT_ASSET_CATEGORY,
        current_amount=None,
        record_transaction: bool = True,
        auto_top_up: bool = False,
        txn_date: Optional[date] = None,
    ) -> int:
        """Add an entry to the portfolio.

        With ``record_transaction`` the invested amount is booked as a paid
        INVESTMENT transaction, which requires the couple's balance to cover
        it. ``auto_top_up`` books the missing part as an INCOME first.

        Args:
            user_id: Owner
            name: Asset name
            invested_amount: Amount put in
            category: Asset class, e.g. "Fixed income"
            current_amount: Current value (defaults to the invested amount)
            record_transaction: Book the money movement in the ledger
            auto_top_up: Cover a short balance with an automatic income
            txn_date: Date of the booked transactions (defaults to today)

        Returns:
            Investment ID

        Raises:
            ValidationError: If an amount is invalid or the balance is short
        """
        if not name or not name.strip():
            raise ValidationError("Investment name is required")
        name = name.strip()
        category = (category or "").strip() or DEFAULT_ASSET_CATEGORY
        invested = _amount(invested_amount, "Invested amount")
        if invested == 0:
            raise ValidationError("Invested amount must be greater than zero")
        current = invested if current_amount is None else _amount(current_amount, "Current amount")
        when = txn_date or date.today()

        top_up = Decimal("0.00")
        if record_transaction:
            balance = UserService(self.db).get_balance(user_id)
            if invested > balance:
                if not auto_top_up:
                    raise ValidationError(
                        f"Insufficient balance ({format_brl(balance)}). "
                        "Enable automatic top-up to cover the difference"
                    )
                top_up = invested - max(balance, Decimal("0.00"))

        with self.db.unit_of_work():
            deposit_id = None
            origin_id = None
            if top_up > 0:
                deposit_id = self.db.create_transaction(
                    TransactionDraft(
                        user_id=user_id,
                        type=TransactionType.INCOME,
                        amount=top_up,
                        description=f"Automatic top-up: {name}",
                        category=TOP_UP_CATEGORY,
                        date=when,
                        payment_method=PaymentMethod.DEBIT,
                    )
                )
            if record_transaction:
                origin_id = self.db.create_transaction(
                    TransactionDraft(
                        user_id=user_id,
                        type=TransactionType.INVESTMENT,
                        amount=invested,
                        description=f"Investment: {name}",
                        category=INVESTMENT_CATEGORY,
                        date=when,
                        payment_method=PaymentMethod.DEBIT,
                    )
                )
            investment_id = self.db.create_investment(
                user_id=user_id,
                name=name,
                category=category,
                invested_amount=invested,
                current_amount=current,
                origin_transaction_id=origin_id,
                deposit_transaction_id=deposit_id,
            )

        logger.info(
            "investment_created",
            user_id=user_id,
            investment_id=investment_id,
            invested=str(invested),
            top_up=str(top_up),
        )
        return investment_id

    def redeem(self, user_id: int, investment_id: int, amount, today: Optional[date] = None) -> Decimal:
        """Take money out of an entry and book it as income.

        Returns:
            The entry's remaining current amount

        Raises:
            NotFoundError: If the entry is missing or owned by someone else
            ValidationError: If the amount is not positive or exceeds the current amount
        """
        investment = self.get_investment(user_id, investment_id)
        amount = _amount(amount, "Redemption amount")
        if amount == 0:
            raise ValidationError("Redemption amount must be greater than zero")
        if amount > investment.current_amount:
            raise ValidationError(
                f"Cannot redeem {format_brl(amount)}: only {format_brl(investment.current_amount)} available"
            )

        remaining = investment.current_amount - amount
        with self.db.unit_of_work():
            self.db.update_investment_amount(investment_id, remaining)
            self.db.create_transaction(
                TransactionDraft(
                    user_id=user_id,
                    type=TransactionType.INCOME,
                    amount=amount,
                    description=f"Redemption: {investment.name}",
                    category=REDEMPTION_CATEGORY,
                    date=today or date.today(),
                    payment_method=PaymentMethod.DEBIT,
                )
            )

        logger.info("investment_redeemed", user_id=user_id, investment_id=investment_id, amount=str(amount))
        return remaining

    def update_balance(self, user_id: int, investment_id: int, current_amount) -> None:
        """Set the entry's current value, e.g. after interest."""
        self.get_investment(user_id, investment_id)
        current = _amount(current_amount, "Current amount")
        self.db.update_investment_amount(investment_id, current)

    def delete_investment(self, user_id: int, investment_id: int) -> int:
        """Delete an entry and the transactions it booked.

        Returns:
            Number of ledger transactions removed
        """
        investment = self.get_investment(user_id, investment_id)
        removed = 0
        with self.db.unit_of_work():
            for txn_id in (investment.origin_transaction_id, investment.deposit_transaction_id):
                if txn_id is not None and self.db.get_transaction(txn_id) is not None:
                    self.db.delete_transaction(txn_id)
                    removed += 1
            self.db.delete_investment(investment_id)

        logger.info("investment_deleted", user_id=user_id, investment_id=investment_id, removed=removed)
        return removed
