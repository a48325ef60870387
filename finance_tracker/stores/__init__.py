"""
Stores Package

In-memory owners of the tracker's mutable state. Each store validates its
input and writes through Persistence Sync before committing.
"""

from finance_tracker.stores.budgets import BudgetStore
from finance_tracker.stores.records import RecordStore
from finance_tracker.stores.session import (
    NotAuthenticatedError,
    SessionStore,
    SettingsStore,
)

__all__ = [
    "BudgetStore",
    "RecordStore",
    "NotAuthenticatedError",
    "SessionStore",
    "SettingsStore",
]
