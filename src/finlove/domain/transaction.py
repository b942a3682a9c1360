"""Transaction domain service."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

import structlog

from finlove.database.base import Database
from finlove.domain.entities import (
    PaymentMethod,
    RecurringTransaction,
    Transaction as TransactionEntity,
    TransactionDraft,
    TransactionType,
)
from finlove.domain.errors import (
    NotFoundError,
    ValidationError,
    credit_card_not_found,
    day_out_of_range,
    recurring_not_found,
    transaction_not_found,
)
from finlove.domain.installments import billing_start_date, build_installment_schedule, to_cents
from finlove.utils.amount_parser import to_money
from finlove.utils.date_parser import add_months

logger = structlog.get_logger(__name__)

MIN_AMOUNT = Decimal("0.01")


@dataclass(frozen=True)
class TransactionInput:
    """Fields submitted when a user records a new transaction."""

    description: str
    amount: Decimal
    type: TransactionType
    category: str
    date: Optional[date] = None
    payment_method: PaymentMethod = PaymentMethod.DEBIT
    installments: int = 1
    is_recurring: bool = False
    recurring_day: Optional[int] = None
    credit_card_id: Optional[int] = None


@dataclass(frozen=True)
class CreateTransactionResult:
    """IDs written by ``create_transaction``."""

    transaction_ids: list[int]
    installment_id: Optional[str] = None
    recurring_id: Optional[int] = None


@dataclass(frozen=True)
class ImportCandidate:
    """A row read from a statement, not yet checked for duplicates.

    ``owner`` optionally names who made the purchase; when it matches the
    partner's first name the row is recorded for the partner.
    """

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category: str = "Other"
    payment_method: PaymentMethod = PaymentMethod.DEBIT
    owner: Optional[str] = None


@dataclass(frozen=True)
class ImportResult:
    """Counts reported after an import."""

    total: int = 0
    imported: int = 0
    ignored: int = 0
    transaction_ids: list[int] = field(default_factory=list)


def normalize_description(text: str) -> str:
    """Lowercase a description and keep only letters and digits."""
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _money(value) -> Decimal:
    try:
        return to_money(value)
    except ValueError as e:
        raise ValidationError(str(e))


def _coerce_type(value) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise ValidationError(f"Invalid transaction type '{value}'")


def _coerce_payment_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationError(f"Invalid payment method '{value}'")


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_input(self, data: TransactionInput) -> None:
        if not data.description or not data.description.strip():
            raise ValidationError("Description is required")
        if not data.category or not data.category.strip():
            raise ValidationError("Category is required")
        if _money(data.amount) < MIN_AMOUNT:
            raise ValidationError("Amount must be at least 0.01")
        if data.installments < 1:
            raise ValidationError("Installments must be at least 1")
        if data.recurring_day is not None and not 1 <= data.recurring_day <= 31:
            raise ValidationError(day_out_of_range("Recurring day", data.recurring_day))

    def create_transaction(
        self, user_id: int, data: TransactionInput, today: Optional[date] = None
    ) -> CreateTransactionResult:
        """Record a transaction, an installment group, or a recurring bill.

        A credit expense with more than one installment is split into a
        group of entries, one per month. Credit purchases made on or after
        the card's closing day start in the next billing cycle. When
        ``is_recurring`` is set a monthly template is created as well.

        Args:
            user_id: Acting user
            data: Submitted fields
            today: Date used when ``data.date`` is empty (defaults to date.today())

        Returns:
            CreateTransactionResult with the created IDs

        Raises:
            ValidationError: If the input is invalid
            NotFoundError: If the credit card does not belong to the user
        """
        self._validate_input(data)
        txn_type = _coerce_type(data.type)
        method = _coerce_payment_method(data.payment_method)
        amount = _money(data.amount)
        description = data.description.strip()
        category = data.category.strip()
        base_date = data.date or today or date.today()

        card_id = None
        if method == PaymentMethod.CREDIT and data.credit_card_id is not None:
            card = self.db.get_credit_card(data.credit_card_id)
            if card is None or card.user_id != user_id:
                raise NotFoundError(credit_card_not_found(data.credit_card_id))
            card_id = card.id
            base_date = billing_start_date(base_date, card.closing_day)

        is_paid = method != PaymentMethod.CREDIT
        installment_id = None

        if txn_type == TransactionType.EXPENSE and method == PaymentMethod.CREDIT and data.installments > 1:
            installment_id = str(uuid.uuid4())
            drafts = [
                TransactionDraft(
                    user_id=user_id,
                    type=txn_type,
                    amount=plan.amount,
                    description=f"{description} ({plan.position}/{plan.count})",
                    category=category,
                    date=plan.date,
                    payment_method=method,
                    is_paid=False,
                    installment_id=installment_id,
                    installments=plan.count,
                    current_installment=plan.position,
                    credit_card_id=card_id,
                )
                for plan in build_installment_schedule(amount, data.installments, base_date)
            ]
        else:
            drafts = [
                TransactionDraft(
                    user_id=user_id,
                    type=txn_type,
                    amount=amount,
                    description=description,
                    category=category,
                    date=base_date,
                    payment_method=method,
                    is_paid=is_paid,
                    credit_card_id=card_id,
                )
            ]

        recurring_id = None
        with self.db.unit_of_work():
            transaction_ids = self.db.create_transactions(drafts)
            if data.is_recurring:
                recurring_id = self.db.create_recurring(
                    user_id=user_id,
                    transaction_type=txn_type,
                    amount=amount,
                    description=description,
                    category=category,
                    next_run=add_months(base_date, 1, anchor_day=data.recurring_day),
                    day_of_month=data.recurring_day,
                )

        logger.info(
            "transaction_created",
            user_id=user_id,
            count=len(transaction_ids),
            installment_id=installment_id,
            recurring_id=recurring_id,
        )
        return CreateTransactionResult(
            transaction_ids=transaction_ids,
            installment_id=installment_id,
            recurring_id=recurring_id,
        )

    def get_transaction(self, user_id: int, transaction_id: int) -> TransactionEntity:
        """Get a transaction owned by the user.

        Raises:
            NotFoundError: If the transaction is missing or owned by someone else
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None or txn.user_id != user_id:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def couple_ids(self, user_id: int) -> list[int]:
        """Return the user's ID plus the partner's, when linked."""
        user = self.db.get_user(user_id)
        if user is None:
            return [user_id]
        if user.partner_id is not None:
            return [user_id, user.partner_id]
        return [user_id]

    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_partner: bool = True,
        limit: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List transactions, newest first.

        Args:
            user_id: Acting user
            start_date: Optional inclusive lower bound
            end_date: Optional inclusive upper bound
            include_partner: Include the linked partner's transactions
            limit: Optional maximum number of rows

        Returns:
            List of Transaction entities
        """
        user_ids = self.couple_ids(user_id) if include_partner else [user_id]
        return self.db.list_transactions(
            user_ids, start_date=start_date, end_date=end_date, limit=limit
        )

    def update_transaction(
        self,
        user_id: int,
        transaction_id: int,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        transaction_type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
        is_paid: Optional[bool] = None,
    ) -> TransactionEntity:
        """Update the given fields of a transaction.

        Raises:
            NotFoundError: If the transaction is missing or owned by someone else
            ValidationError: If a new value is invalid
        """
        self.get_transaction(user_id, transaction_id)

        fields: dict = {}
        if description is not None:
            if not description.strip():
                raise ValidationError("Description is required")
            fields["description"] = description.strip()
        if amount is not None:
            amount = _money(amount)
            if amount < MIN_AMOUNT:
                raise ValidationError("Amount must be at least 0.01")
            fields["amount"] = amount
        if transaction_type is not None:
            fields["type"] = _coerce_type(transaction_type)
        if category is not None:
            if not category.strip():
                raise ValidationError("Category is required")
            fields["category"] = category.strip()
        if date is not None:
            fields["date"] = date
        if payment_method is not None:
            fields["payment_method"] = _coerce_payment_method(payment_method)
        if is_paid is not None:
            fields["is_paid"] = is_paid

        if fields:
            self.db.update_transaction(transaction_id, **fields)
        return self.db.get_transaction(transaction_id)

    def delete_transaction(self, user_id: int, transaction_id: int) -> None:
        """Delete one transaction owned by the user.

        Raises:
            NotFoundError: If the transaction is missing or owned by someone else
        """
        self.get_transaction(user_id, transaction_id)
        self.db.delete_transaction(transaction_id)

    def delete_transactions(self, user_id: int, transaction_ids: Sequence[int]) -> int:
        """Delete several transactions; IDs owned by someone else are skipped.

        Returns:
            Number of transactions deleted
        """
        return self.db.delete_transactions(user_id, list(transaction_ids))

    def delete_installment_group(self, user_id: int, installment_id: str) -> int:
        """Delete all installments of a purchase.

        Raises:
            NotFoundError: If the user has no installment in that group
        """
        count = self.db.delete_installment_group(user_id, installment_id)
        if count == 0:
            raise NotFoundError(f"Installment group {installment_id} not found")
        return count

    def toggle_paid(self, user_id: int, transaction_id: int) -> bool:
        """Flip the paid flag of a transaction. Returns the new state."""
        txn = self.get_transaction(user_id, transaction_id)
        new_state = not txn.is_paid
        self.db.update_transaction(transaction_id, is_paid=new_state)
        return new_state

    def import_transactions(self, user_id: int, candidates: Sequence[ImportCandidate]) -> ImportResult:
        """Import statement rows, skipping the ones already recorded.

        A row is a duplicate of an existing entry of the couple when the date,
        the amount (to the cent) and the type match, and the descriptions are
        equal once normalised, or the row's description (longer than three
        characters) is contained in the existing one.

        Returns:
            ImportResult with total, imported and ignored counts
        """
        if not candidates:
            return ImportResult()

        user = self.db.get_user(user_id)
        partner = self.db.get_user(user.partner_id) if user and user.partner_id else None
        user_ids = [user_id] + ([partner.id] if partner else [])

        start = min(c.date for c in candidates) - timedelta(days=1)
        end = max(c.date for c in candidates) + timedelta(days=1)
        existing = self.db.list_transactions(user_ids, start_date=start, end_date=end)

        drafts = []
        for candidate in candidates:
            if not candidate.description or not candidate.description.strip():
                raise ValidationError("Imported rows need a description")
            txn_type = _coerce_type(candidate.type)
            amount = abs(_money(candidate.amount))
            if self._is_duplicate(candidate, txn_type, amount, existing):
                continue

            owner_id = user_id
            if partner is not None and candidate.owner:
                if candidate.owner.strip().lower() == partner.first_name.lower():
                    owner_id = partner.id

            method = _coerce_payment_method(candidate.payment_method)
            drafts.append(
                TransactionDraft(
                    user_id=owner_id,
                    type=txn_type,
                    amount=amount,
                    description=candidate.description.strip(),
                    category=candidate.category or "Other",
                    date=candidate.date,
                    payment_method=method,
                    is_paid=method != PaymentMethod.CREDIT,
                )
            )

        with self.db.unit_of_work():
            ids = self.db.create_transactions(drafts)

        result = ImportResult(
            total=len(candidates),
            imported=len(ids),
            ignored=len(candidates) - len(ids),
            transaction_ids=ids,
        )
        logger.info(
            "transactions_imported",
            user_id=user_id,
            total=result.total,
            imported=result.imported,
            ignored=result.ignored,
        )
        return result

    @staticmethod
    def _is_duplicate(
        candidate: ImportCandidate,
        txn_type: TransactionType,
        amount: Decimal,
        existing: Sequence[TransactionEntity],
    ) -> bool:
        wanted = normalize_description(candidate.description)
        for txn in existing:
            if txn.date != candidate.date or txn.type != txn_type:
                continue
            if to_cents(txn.amount) != to_cents(amount):
                continue
            have = normalize_description(txn.description)
            if have == wanted or (len(wanted) > 3 and wanted in have):
                return True
        return False

    def list_subscriptions(self, user_id: int) -> list[RecurringTransaction]:
        """List the user's active recurring templates, largest amount first."""
        return self.db.list_recurring(user_id, active_only=True)

    def deactivate_recurring(self, user_id: int, recurring_id: int) -> None:
        """Stop a recurring template. Templates are never deleted.

        Raises:
            NotFoundError: If the template is missing or owned by someone else
        """
        template = self.db.get_recurring(recurring_id)
        if template is None or template.user_id != user_id:
            raise NotFoundError(recurring_not_found(recurring_id))
        self.db.set_recurring_active(recurring_id, False)
