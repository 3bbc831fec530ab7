"""
BudgetUp - Currency Core

The multi-currency value pipeline of a personal-finance tracker:
rate conversion with TTL caching, locale-aware formatting, and a
versioned record store that migrates persisted data safely.

DESIGN PRINCIPLES:
1. Conversion and formatting never crash the caller (fail open)
2. Recorded currency is historical fact - never rewritten
3. Migrations are pure, total and idempotent
4. No hidden global state - components are wired explicitly
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BudgetUp Team"
