"""Utility functions for ledgerflow."""

from ledgerflow.utils.date_parser import parse_date, tax_year_range
from ledgerflow.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount", "tax_year_range"]
