"""
Record Store

The only place expense records are created or destroyed.

DESIGN DECISION: Records are immutable and the store only appends or
removes. Every mutation is written through Persistence Sync BEFORE it is
committed in memory, so a failed write leaves the store exactly as it was
and the error reaches the caller.
"""

from typing import Callable, Iterator, Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.models.expense import Expense, new_expense_id
from finance_tracker.services.persistence import PersistenceSync
from finance_tracker.validation import (
    InputError,
    parse_amount,
    parse_category,
    parse_date,
    parse_description,
)


class RecordStore:
    """
    Ordered collection of expenses, most recent first.

    Ids handed out by this store (and ids it was loaded with) are never
    issued again, even after the record is removed.
    """

    def __init__(
        self,
        expenses=(),
        persistence: Optional[PersistenceSync] = None,
        audit_logger: Optional[AuditLogger] = None,
        id_factory: Callable[[], str] = new_expense_id,
    ):
        """
        Args:
            expenses: Records to start with (e.g. from PersistenceSync.load)
            persistence: Mirrors every mutation. None keeps the store in memory.
            audit_logger: Receives added/removed/rejected events
            id_factory: Produces candidate ids for new records
        """
        self._expenses: tuple[Expense, ...] = tuple(expenses)
        self._persistence = persistence
        self._audit_logger = audit_logger
        self._id_factory = id_factory
        self._issued_ids = {expense.id for expense in self._expenses}

    def add(self, amount, category, description="", date=None) -> Expense:
        """
        Record a new expense.

        Args:
            amount: Non-negative number or numeric string
            category: Category member or its display value
            description: Free text, may be empty
            date: date or YYYY-MM-DD string. None means today.

        Returns:
            The stored Expense with its new id

        Raises:
            InvalidAmount, InvalidCategory, InvalidDate: Input rejected, store unchanged
            PersistenceWriteFailure: Storage write failed, store unchanged
        """
        try:
            clean_amount = parse_amount(amount)
            clean_category = parse_category(category)
            clean_date = parse_date(date)
            clean_description = parse_description(description)
        except InputError as e:
            if self._audit_logger:
                self._audit_logger.log_input_rejected("expense", e.field, str(e))
            raise

        expense = Expense(
            id=self._next_id(),
            amount=clean_amount,
            category=clean_category,
            description=clean_description,
            date=clean_date,
        )

        updated = (expense,) + self._expenses
        if self._persistence:
            self._persistence.save_expenses(updated)

        self._expenses = updated
        self._issued_ids.add(expense.id)

        if self._audit_logger:
            self._audit_logger.log_expense_added(
                expense.id, expense.category.value, str(expense.amount)
            )

        return expense

    def remove(self, expense_id: str) -> None:
        """
        Delete the record with this id.

        Removing an id that is not present is a no-op.

        Raises:
            PersistenceWriteFailure: Storage write failed, store unchanged
        """
        if self.get(expense_id) is None:
            return

        updated = tuple(e for e in self._expenses if e.id != expense_id)
        if self._persistence:
            self._persistence.save_expenses(updated)

        self._expenses = updated

        if self._audit_logger:
            self._audit_logger.log_expense_removed(expense_id)

    def all(self) -> tuple[Expense, ...]:
        """Point-in-time snapshot, most recent first."""
        return self._expenses

    def get(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    def _next_id(self) -> str:
        candidate = self._id_factory()
        while candidate in self._issued_ids:
            candidate = self._id_factory()
        return candidate

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(self._expenses)
