"""
Finance Tracker - Source Package

A personal finance tracker: record expenses, keep per-category budgets,
and read spending statistics, history and a monthly report.

DESIGN PRINCIPLES:
1. Stores are the only place data mutates
2. Nothing is committed in memory until it is written to storage
3. Statistics are recomputed from snapshots, never cached
4. Bad stored data degrades to defaults, never crashes
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
