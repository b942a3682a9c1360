"""Tests for installment splitting."""

from datetime import date
from decimal import Decimal

import pytest

from finlove.domain.errors import ValidationError
from finlove.domain.installments import (
    billing_start_date,
    build_installment_schedule,
    from_cents,
    split_installments,
    to_cents,
)


class TestSplitInstallments:
    """Tests for split_installments."""

    def test_remainder_goes_to_last_installment(self):
        assert split_installments(Decimal("100.00"), 3) == [
            Decimal("33.33"),
            Decimal("33.33"),
            Decimal("33.34"),
        ]

    def test_even_split(self):
        assert split_installments(Decimal("1200.00"), 12) == [Decimal("100.00")] * 12

    @pytest.mark.parametrize(
        "total,count",
        [("0.10", 3), ("999.99", 7), ("1.00", 6), ("12345.67", 11), ("0.02", 2)],
    )
    def test_installments_add_up_to_total(self, total, count):
        amounts = split_installments(Decimal(total), count)
        assert len(amounts) == count
        assert sum(amounts) == Decimal(total)
        assert all(a == amounts[0] for a in amounts[:-1])
        assert amounts[-1] >= amounts[0]

    def test_count_below_two_is_rejected(self):
        with pytest.raises(ValidationError):
            split_installments(Decimal("10.00"), 1)

    def test_negative_total_is_rejected(self):
        with pytest.raises(ValidationError):
            split_installments(Decimal("-10.00"), 2)


def test_cents_conversion_rounds_half_up():
    assert to_cents(Decimal("10.005")) == 1001
    assert from_cents(1001) == Decimal("10.01")


class TestBillingStartDate:
    """Tests for billing_start_date."""

    def test_purchase_before_closing_day_stays(self):
        assert billing_start_date(date(2024, 3, 9), 10) == date(2024, 3, 9)

    def test_purchase_on_closing_day_moves_to_next_cycle(self):
        assert billing_start_date(date(2024, 3, 10), 10) == date(2024, 4, 10)

    def test_end_of_month_purchase_clamps(self):
        assert billing_start_date(date(2024, 1, 31), 5) == date(2024, 2, 29)


def test_schedule_dates_do_not_drift_after_short_month():
    schedule = build_installment_schedule(Decimal("300.00"), 3, date(2024, 1, 31))
    assert [plan.date for plan in schedule] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
    ]
    assert [plan.position for plan in schedule] == [1, 2, 3]
    assert all(plan.count == 3 for plan in schedule)
