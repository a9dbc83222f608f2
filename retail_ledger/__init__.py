"""
Retail Ledger

Account and transaction core for a small retail bank: owners, basic,
checking, savings and money-market accounts, with integer-cent money and
per-product withdrawal and deposit rules.
"""

__version__ = "1.0.0"
