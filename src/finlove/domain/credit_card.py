"""Credit card domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from finlove.database.base import Database
from finlove.domain.entities import CreditCard, PaymentMethod, TransactionDraft, TransactionType
from finlove.domain.errors import (
    NotFoundError,
    ValidationError,
    credit_card_not_found,
    day_out_of_range,
)
from finlove.utils.amount_parser import to_money
from finlove.utils.date_parser import month_bounds

logger = structlog.get_logger(__name__)

BILL_PAYMENT_CATEGORY = "Credit Card Bill"


def _validate_day(field: str, value: int) -> None:
    if not 1 <= value <= 31:
        raise ValidationError(day_out_of_range(field, value))


class CreditCardService:
    """Service for managing credit cards and paying their bills."""

    def __init__(self, db: Database):
        """Initialize credit card service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_card(
        self,
        user_id: int,
        name: str,
        closing_day: int,
        due_day: int,
        limit: Decimal = Decimal("0"),
    ) -> int:
        """Create a credit card.

        Args:
            user_id: Owner
            name: Card name
            closing_day: Day of month the bill closes (1..31)
            due_day: Day of month the bill is due (1..31)
            limit: Credit limit

        Returns:
            Card ID

        Raises:
            ValidationError: If the name is empty or a day is out of range
        """
        if not name or not name.strip():
            raise ValidationError("Card name is required")
        _validate_day("Closing day", closing_day)
        _validate_day("Due day", due_day)
        try:
            limit = to_money(limit)
        except ValueError as e:
            raise ValidationError(str(e))
        if limit < 0:
            raise ValidationError("Card limit cannot be negative")

        return self.db.create_credit_card(
            user_id=user_id, name=name.strip(), closing_day=closing_day, due_day=due_day, limit=limit
        )

    def get_card(self, user_id: int, card_id: int) -> CreditCard:
        """Get a card owned by the user.

        Raises:
            NotFoundError: If the card is missing or owned by someone else
        """
        card = self.db.get_credit_card(card_id)
        if card is None or card.user_id != user_id:
            raise NotFoundError(credit_card_not_found(card_id))
        return card

    def list_cards(self, user_id: int) -> list[CreditCard]:
        """List the user's cards by name."""
        return self.db.list_credit_cards(user_id)

    def delete_card(self, user_id: int, card_id: int) -> None:
        """Delete a card. Its transactions stay, without the card reference."""
        self.get_card(user_id, card_id)
        self.db.delete_credit_card(card_id)

    def invoice_total(self, user_id: int, card_id: int, month: int, year: int) -> Decimal:
        """Sum of the card's expenses dated in the given month (1..12)."""
        self.get_card(user_id, card_id)
        start, end = month_bounds(month, year)
        return self.db.sum_transactions(
            [user_id],
            start_date=start,
            end_date=end,
            transaction_type=TransactionType.EXPENSE,
            credit_card_id=card_id,
        )

    def pay_bill(
        self, user_id: int, card_id: int, month: int, year: int, today: Optional[date] = None
    ) -> Decimal:
        """Pay a card's bill for one month.

        Marks the month's unpaid card transactions as paid and, when the bill
        is positive, records the payment as a paid debit expense. Both steps
        happen in one unit of work.

        Args:
            user_id: Acting user
            card_id: Card to pay
            month: Bill month (1..12)
            year: Bill year
            today: Date of the payment entry (defaults to date.today())

        Returns:
            The bill total

        Raises:
            NotFoundError: If the card is missing or owned by someone else
            ValidationError: If the month is out of range
        """
        card = self.get_card(user_id, card_id)
        try:
            start, end = month_bounds(month, year)
        except ValueError as e:
            raise ValidationError(str(e))

        with self.db.unit_of_work():
            marked = self.db.mark_card_transactions_paid(user_id, card_id, start, end)
            total = self.db.sum_transactions(
                [user_id],
                start_date=start,
                end_date=end,
                transaction_type=TransactionType.EXPENSE,
                credit_card_id=card_id,
            )
            if total > 0:
                self.db.create_transaction(
                    TransactionDraft(
                        user_id=user_id,
                        type=TransactionType.EXPENSE,
                        amount=total,
                        description=f"Card bill payment: {card.name}",
                        category=BILL_PAYMENT_CATEGORY,
                        date=today or date.today(),
                        payment_method=PaymentMethod.DEBIT,
                        is_paid=True,
                    )
                )

        logger.info(
            "card_bill_paid",
            user_id=user_id,
            card_id=card_id,
            month=month,
            year=year,
            total=str(total),
            marked=marked,
        )
        return total
