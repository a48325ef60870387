"""
Budget Store

Holds exactly one spending limit per category.

DESIGN DECISION: The category set is closed, so the store always covers
every category. initialize() refuses a partial set instead of silently
leaving categories without a limit.
"""

from decimal import Decimal
from typing import Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.models.expense import Budget, Category, initial_budgets
from finance_tracker.services.persistence import PersistenceSync
from finance_tracker.validation import (
    InputError,
    InvalidCategory,
    parse_amount,
    parse_category,
)


class BudgetStore:
    """Mapping from category to limit, listed in category order."""

    def __init__(
        self,
        budgets=None,
        persistence: Optional[PersistenceSync] = None,
        audit_logger: Optional[AuditLogger] = None,
        defaults=None,
    ):
        """
        Args:
            budgets: Starting budgets. None means the defaults.
            persistence: Mirrors every mutation
            audit_logger: Receives budget events
            defaults: Budgets restored by initialize()/reset().
                      Defaults to initial_budgets().
        """
        self._defaults: tuple[Budget, ...] = tuple(defaults) if defaults else initial_budgets()
        self._persistence = persistence
        self._audit_logger = audit_logger
        self._budgets: dict[Category, Budget] = {}
        for budget in budgets if budgets is not None else self._defaults:
            self._budgets.setdefault(budget.category, budget)

    def initialize(self, categories=None) -> tuple[Budget, ...]:
        """
        Replace all budgets with the default limit for each category.

        Args:
            categories: The categories to cover. Must name every category;
                        None means all of them.

        Raises:
            InvalidCategory: Unknown category, or a category left out
            PersistenceWriteFailure: Storage write failed, store unchanged
        """
        if categories is None:
            categories = tuple(Category)
        try:
            requested = {parse_category(c) for c in categories}
            left_out = [c.value for c in Category if c not in requested]
            if left_out:
                raise InvalidCategory(f"Budgets must cover every category; missing {', '.join(left_out)}")
        except InputError as e:
            if self._audit_logger:
                self._audit_logger.log_input_rejected("budget", e.field, str(e))
            raise

        defaults = {b.category: b for b in self._defaults}
        budgets = tuple(
            defaults.get(category) or initial_budgets([category])[0]
            for category in Category
        )
        self._replace(budgets)

        if self._audit_logger:
            self._audit_logger.log_budgets_initialized([b.category.value for b in budgets])
        return budgets

    def reset(self) -> tuple[Budget, ...]:
        """Restore every default limit."""
        return self.initialize()

    def set_limit(self, category, limit) -> Budget:
        """
        Change the limit for one category.

        Raises:
            InvalidCategory, InvalidAmount: Input rejected, store unchanged
            PersistenceWriteFailure: Storage write failed, store unchanged
        """
        try:
            clean_category = parse_category(category)
            clean_limit = parse_amount(limit)
        except InputError as e:
            if self._audit_logger:
                self._audit_logger.log_input_rejected("budget", e.field, str(e))
            raise

        previous = self._budgets.get(clean_category)
        budget = Budget(category=clean_category, limit=clean_limit)

        updated = dict(self._budgets)
        updated[clean_category] = budget
        self._replace(tuple(updated[c] for c in Category if c in updated))

        if self._audit_logger:
            old_limit = str(previous.limit) if previous else str(Decimal(0))
            self._audit_logger.log_budget_updated(clean_category.value, old_limit, str(clean_limit))
        return budget

    def all(self) -> tuple[Budget, ...]:
        """Snapshot in category order."""
        return tuple(self._budgets[c] for c in Category if c in self._budgets)

    def get(self, category) -> Optional[Budget]:
        return self._budgets.get(parse_category(category))

    def _replace(self, budgets: tuple[Budget, ...]) -> None:
        if self._persistence:
            self._persistence.save_budgets(budgets)
        self._budgets = {b.category: b for b in budgets}
