"""Utility functions for finlove."""

from finlove.utils.date_parser import add_months, month_bounds, parse_date
from finlove.utils.amount_parser import format_brl, parse_amount, to_money

__all__ = ["add_months", "month_bounds", "parse_date", "format_brl", "parse_amount", "to_money"]
