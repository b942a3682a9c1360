"""Summaries and reports over the couple's transactions."""

import csv
import io
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from dateutil.relativedelta import relativedelta

from finlove.database.base import Database
from finlove.domain.entities import PaymentMethod, TransactionType
from finlove.domain.errors import NotFoundError, ValidationError, user_not_found
from finlove.utils.date_parser import month_bounds, previous_month

EXPORT_HEADER = ["Date", "Who", "Description", "Category", "Type", "Amount", "Status"]
FORMULA_PREFIXES = ("=", "+", "-", "@")


@dataclass(frozen=True)
class FinancialSummary:
    """Cash balance and open credit of a couple.

    ``accumulated_balance`` leaves credit expenses out: that money leaves the
    account when the card bill is paid, as a debit entry.
    """

    accumulated_balance: Decimal
    total_credit_open: Decimal


@dataclass(frozen=True)
class MonthlyComparison:
    current_total: Decimal
    previous_total: Decimal
    diff_percent: Decimal
    increased: bool


@dataclass(frozen=True)
class ProjectionPoint:
    label: str
    amount: Decimal


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    amount: Decimal


def _safe_cell(value: str) -> str:
    """Neutralise spreadsheet formulas in exported text."""
    if value and value.startswith(FORMULA_PREFIXES):
        return f"'{value}"
    return value


class AnalyticsService:
    """Read-only reports. Every report spans the user and the linked partner."""

    def __init__(self, db: Database):
        """Initialize analytics service.

        Args:
            db: Database instance
        """
        self.db = db

    def _couple(self, user_id: int) -> list[int]:
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        return [user.id] + ([user.partner_id] if user.partner_id else [])

    def _bounds(self, month: int, year: int) -> tuple[date, date]:
        try:
            return month_bounds(month, year)
        except ValueError as e:
            raise ValidationError(str(e))

    def financial_summary(
        self, user_id: int, month: Optional[int] = None, year: Optional[int] = None
    ) -> FinancialSummary:
        """Accumulated balance and unpaid credit.

        When a month is given, open credit only counts entries dated up to
        the end of that month.
        """
        user_ids = self._couple(user_id)
        income = self.db.sum_transactions(user_ids, transaction_type=TransactionType.INCOME)
        expense = self.db.sum_transactions(
            user_ids,
            transaction_type=TransactionType.EXPENSE,
            exclude_payment_method=PaymentMethod.CREDIT,
        )
        invested = self.db.sum_transactions(user_ids, transaction_type=TransactionType.INVESTMENT)

        end = None
        if month is not None and year is not None:
            _, end = self._bounds(month, year)
        credit_open = self.db.sum_transactions(
            user_ids,
            end_date=end,
            transaction_type=TransactionType.EXPENSE,
            payment_method=PaymentMethod.CREDIT,
            is_paid=False,
        )
        return FinancialSummary(
            accumulated_balance=income - expense - invested,
            total_credit_open=credit_open,
        )

    def monthly_comparison(self, user_id: int, month: int, year: int) -> MonthlyComparison:
        """Expense totals of a month against the month before."""
        user_ids = self._couple(user_id)

        def month_total(m: int, y: int) -> Decimal:
            start, end = self._bounds(m, y)
            return self.db.sum_transactions(
                user_ids, start_date=start, end_date=end, transaction_type=TransactionType.EXPENSE
            )

        current = month_total(month, year)
        previous = month_total(*previous_month(month, year))

        if previous > 0:
            diff = (current - previous) / previous * 100
        elif current > 0:
            diff = Decimal("100")
        else:
            diff = Decimal("0")

        return MonthlyComparison(
            current_total=current,
            previous_total=previous,
            diff_percent=diff.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP),
            increased=current > previous,
        )

    def projection(self, user_id: int, today: date, months: int = 12) -> list[ProjectionPoint]:
        """Future expenses grouped by month (``MM/YYYY``), in date order."""
        user_ids = self._couple(user_id)
        end = today + relativedelta(months=months)
        transactions = self.db.list_transactions(
            user_ids, start_date=today, end_date=end, transaction_type=TransactionType.EXPENSE
        )

        totals: dict[tuple[int, int], Decimal] = {}
        for txn in transactions:
            key = (txn.date.year, txn.date.month)
            totals[key] = totals.get(key, Decimal("0.00")) + txn.amount

        return [
            ProjectionPoint(label=f"{m:02d}/{y}", amount=totals[(y, m)])
            for (y, m) in sorted(totals)
        ]

    def category_breakdown(self, user_id: int, month: int, year: int, limit: int = 5) -> list[CategoryTotal]:
        """The couple's biggest expense categories of a month, largest first."""
        if limit < 1:
            raise ValidationError(f"Limit must be at least 1 (got {limit})")
        user_ids = self._couple(user_id)
        start, end = self._bounds(month, year)
        rows = self.db.sum_by_category(
            user_ids,
            start_date=start,
            end_date=end,
            transaction_type=TransactionType.EXPENSE,
            limit=limit,
        )
        return [CategoryTotal(category=category, amount=amount) for category, amount in rows]

    def export_csv(self, user_id: int, month: int, year: int) -> str:
        """The couple's transactions of a month as CSV text."""
        user_ids = self._couple(user_id)
        start, end = self._bounds(month, year)
        names = {uid: self.db.get_user(uid).first_name for uid in user_ids}

        rows = sorted(
            self.db.list_transactions(user_ids, start_date=start, end_date=end),
            key=lambda txn: (txn.date, txn.id),
        )

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for txn in rows:
            writer.writerow(
                [
                    txn.date.strftime("%d/%m/%Y"),
                    _safe_cell(names.get(txn.user_id, "")),
                    _safe_cell(txn.description),
                    _safe_cell(txn.category),
                    txn.type.value,
                    f"{txn.amount:.2f}",
                    "Paid" if txn.is_paid else "Pending",
                ]
            )
        return buffer.getvalue()
