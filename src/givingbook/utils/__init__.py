"""Utility functions for givingbook."""

from givingbook.utils.date_parser import parse_date, parse_month
from givingbook.utils.amount_parser import parse_amount, coerce_amount

__all__ = ["parse_date", "parse_month", "parse_amount", "coerce_amount"]
