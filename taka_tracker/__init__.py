"""
Taka Tracker - Source Package

A personal income and expense tracker for a single local user:
a ledger of transactions, monthly category budgets, period statistics,
an expense distribution chart and a PIN lock.

DESIGN PRINCIPLES:
1. Amounts are exact decimals and always positive
2. Validate before mutating, never silently fix input
3. In-memory state is authoritative for the session
4. Every change is written as a full snapshot
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Taka Tracker Team"
