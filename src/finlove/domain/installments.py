"""Installment splitting for credit card purchases.

All arithmetic runs on integer cents. The total is divided with floor
division and the whole remainder goes to the last installment, so the
installments of one purchase always add back up to the original total.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from finlove.domain.errors import ValidationError
from finlove.utils.date_parser import add_months

CENT = Decimal("0.01")


@dataclass(frozen=True)
class InstallmentPlan:
    """One planned installment of a purchase."""

    position: int
    count: int
    amount: Decimal
    date: date


def to_cents(amount: Decimal) -> int:
    """Convert an amount to integer cents (half-up)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-decimal amount."""
    return (Decimal(cents) / 100).quantize(CENT)


def split_installments(total: Decimal, count: int) -> list[Decimal]:
    """Split a total into ``count`` installment amounts.

    Example: 100.00 in 3 -> [33.33, 33.33, 33.34].

    Raises:
        ValidationError: If count < 2 or total is negative
    """
    if count < 2:
        raise ValidationError(f"Installment count must be greater than 1 (got {count})")
    cents = to_cents(total)
    if cents < 0:
        raise ValidationError("Installment total cannot be negative")

    base, remainder = divmod(cents, count)
    amounts = [base] * count
    amounts[-1] += remainder
    return [from_cents(value) for value in amounts]


def billing_start_date(purchase_date: date, closing_day: int) -> date:
    """Return the date a credit purchase is billed from.

    Purchases on or after the card's closing day fall into the next billing
    cycle and move one month forward.
    """
    if purchase_date.day >= closing_day:
        return add_months(purchase_date, 1)
    return purchase_date


def build_installment_schedule(total: Decimal, count: int, first_date: date) -> list[InstallmentPlan]:
    """Build the full schedule of a purchase split in ``count`` installments.

    Installment i (0-based) is dated ``first_date`` plus i months, each date
    computed from ``first_date`` so short months never shift later entries.
    """
    amounts = split_installments(total, count)
    return [
        InstallmentPlan(
            position=index + 1,
            count=count,
            amount=amount,
            date=add_months(first_date, index),
        )
        for index, amount in enumerate(amounts)
    ]
