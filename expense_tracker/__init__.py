"""
Expense Tracker - Source Package

A personal expense tracker core: a validated, persistent collection of
dated, currency-tagged expenses and the aggregation engine that turns it
into daily/weekly/monthly summaries per currency.

DESIGN PRINCIPLES:
1. The store is the only thing that mutates the expense collection
2. Bad legacy data is tolerated, bad new data is rejected
3. Aggregation is pure and never mixes currencies
4. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
