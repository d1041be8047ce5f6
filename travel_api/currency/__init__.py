"""
Module 'currency' (feature-first): point d'entrée public.
Table de taux figée + conversion/formatage des montants.
"""

from .rates import RateTable, DEFAULT_RATES, get_rate_table
from .converter import convert, round_money, to_minor_units, format_amount, CURRENCY_SYMBOLS

__all__ = [
    # rates
    "RateTable",
    "DEFAULT_RATES",
    "get_rate_table",
    # converter
    "convert",
    "round_money",
    "to_minor_units",
    "format_amount",
    "CURRENCY_SYMBOLS",
]
