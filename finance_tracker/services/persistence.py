"""
Persistence Sync

Mirrors the tracker's four independent documents (user, settings,
expenses, budgets) into a key-value storage medium and rehydrates them
on startup.

DESIGN DECISION: Loading validates field by field. A settings document
with an unknown currency keeps its valid language; an expenses list keeps
its valid entries and drops the broken ones. Nothing read from storage is
trusted just because it parses, and nothing read from storage can crash
startup. Every repair is reported as a ValidationIssue and audited.

Saving is the opposite: a failed write raises, so callers never commit a
mutation in memory that did not reach storage.
"""

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.models.expense import (
    DEFAULT_CURRENCY,
    DEFAULT_LANGUAGE,
    Budget,
    Category,
    Expense,
    User,
    UserSettings,
    ValidationIssue,
    initial_budgets,
)
from finance_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceReadFailure,
    PersistenceWriteFailure,
)
from finance_tracker.validation import InvalidSetting, parse_currency, parse_language


class StorageKey(str, Enum):
    """The four logically independent documents."""
    USER = "user"
    SETTINGS = "settings"
    EXPENSES = "expenses"
    BUDGETS = "budgets"


class PersistedState(BaseModel):
    """Everything rehydrated by load()."""

    user: Optional[User] = None
    settings: UserSettings = Field(default_factory=UserSettings)
    expenses: tuple[Expense, ...] = ()
    budgets: tuple[Budget, ...] = Field(default_factory=initial_budgets)
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="Problems found in stored data and how they were repaired"
    )
    stale_keys: list[StorageKey] = Field(
        default_factory=list,
        description="Documents whose stored form differs from the loaded state"
    )

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def _first_error(error: ValidationError) -> str:
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "value"
    return f"{location}: {first.get('msg', 'invalid')}"


class PersistenceSync:
    """
    Reads and writes the tracker's documents.

    Keys are namespaced with a prefix (default "smarty_") so several
    applications can share one storage medium.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key_prefix: str = "smarty_",
        audit_logger: Optional[AuditLogger] = None,
        default_budgets: Optional[tuple[Budget, ...]] = None,
    ):
        """
        Args:
            storage: Durable key-value medium
            key_prefix: Namespace for the four keys
            audit_logger: Receives load repairs and save events
            default_budgets: Budgets used when none are stored.
                             Defaults to initial_budgets().
        """
        self._storage = storage
        self._prefix = key_prefix
        self._audit_logger = audit_logger
        self._default_budgets = default_budgets or initial_budgets()

    @property
    def default_budgets(self) -> tuple[Budget, ...]:
        return self._default_budgets

    def storage_key(self, key: StorageKey) -> str:
        """Physical key for a logical document."""
        return f"{self._prefix}{StorageKey(key).value}"

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> PersistedState:
        """
        Rehydrate all four documents.

        Absent keys get defaults silently. Unreadable or malformed data is
        replaced by defaults and reported in `issues`.
        """
        issues: list[ValidationIssue] = []
        missing: set[StorageKey] = set()
        stale: list[StorageKey] = []

        loaders = (
            (StorageKey.USER, self._load_user),
            (StorageKey.SETTINGS, self._load_settings),
            (StorageKey.EXPENSES, self._load_expenses),
            (StorageKey.BUDGETS, self._load_budgets),
        )
        values = {}
        for key, loader in loaders:
            before = len(issues)
            values[key.value] = loader(issues, missing)
            # An absent user means signed out, not stale
            if len(issues) > before or (key in missing and key != StorageKey.USER):
                stale.append(key)

        state = PersistedState(**values, issues=issues, stale_keys=stale)

        if self._audit_logger:
            for issue in issues:
                self._audit_logger.log_state_repaired(issue.field, issue.issue_type, issue.message)
            self._audit_logger.log_state_loaded(
                authenticated=state.is_authenticated,
                expense_count=len(state.expenses),
                repaired=len(issues),
            )

        return state

    def _read_json(self, key: StorageKey) -> Any:
        """
        Read and decode one document.

        Returns None when the key is absent.

        Raises:
            PersistenceReadFailure: If the value cannot be read or parsed
        """
        name = self.storage_key(key)
        raw = self._storage.read(name)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise PersistenceReadFailure(name, f"Stored {key.value} is not valid JSON: {e}")

    def _read_or_report(self, key: StorageKey, issues: list[ValidationIssue], missing: set) -> Any:
        try:
            data = self._read_json(key)
        except PersistenceReadFailure as e:
            issues.append(ValidationIssue(
                field=key.value,
                issue_type="unparsable",
                message=f"{e}. Using defaults.",
            ))
            return None
        if data is None:
            missing.add(key)
        return data

    def _load_user(self, issues: list[ValidationIssue], missing: set) -> Optional[User]:
        data = self._read_or_report(StorageKey.USER, issues, missing)
        if data is None:
            return None
        try:
            return User.model_validate(data)
        except ValidationError as e:
            issues.append(ValidationIssue(
                field=StorageKey.USER.value,
                issue_type="invalid_shape",
                message=f"Stored user is invalid ({_first_error(e)}). Signed out.",
            ))
            return None

    def _load_settings(self, issues: list[ValidationIssue], missing: set) -> UserSettings:
        data = self._read_or_report(StorageKey.SETTINGS, issues, missing)
        if data is None:
            return UserSettings()
        if not isinstance(data, dict):
            issues.append(ValidationIssue(
                field=StorageKey.SETTINGS.value,
                issue_type="invalid_shape",
                message="Stored settings are not an object. Using defaults.",
            ))
            return UserSettings()

        currency = DEFAULT_CURRENCY
        raw_currency = data.get("currency")
        if raw_currency is not None:
            # Stored as {"code", "symbol", "name"} or as a bare code
            code = raw_currency.get("code") if isinstance(raw_currency, dict) else raw_currency
            try:
                currency = parse_currency(code)
            except InvalidSetting as e:
                issues.append(ValidationIssue(
                    field="settings.currency",
                    issue_type="invalid_entry",
                    message=f"{e}. Using {DEFAULT_CURRENCY.code}.",
                ))

        language = DEFAULT_LANGUAGE
        raw_language = data.get("language")
        if raw_language is not None:
            try:
                language = parse_language(raw_language)
            except InvalidSetting as e:
                issues.append(ValidationIssue(
                    field="settings.language",
                    issue_type="invalid_entry",
                    message=f"{e}. Using {DEFAULT_LANGUAGE.value}.",
                ))

        return UserSettings(currency=currency, language=language)

    def _load_expenses(self, issues: list[ValidationIssue], missing: set) -> tuple[Expense, ...]:
        data = self._read_or_report(StorageKey.EXPENSES, issues, missing)
        if data is None:
            return ()
        if not isinstance(data, list):
            issues.append(ValidationIssue(
                field=StorageKey.EXPENSES.value,
                issue_type="invalid_shape",
                message="Stored expenses are not a list. Starting empty.",
            ))
            return ()

        expenses = []
        seen_ids = set()
        for index, entry in enumerate(data):
            try:
                expense = Expense.model_validate(entry)
            except ValidationError as e:
                issues.append(ValidationIssue(
                    field=f"expenses[{index}]",
                    issue_type="invalid_entry",
                    message=f"Dropped malformed expense ({_first_error(e)})",
                ))
                continue
            if expense.id in seen_ids:
                issues.append(ValidationIssue(
                    field=f"expenses[{index}]",
                    issue_type="duplicate",
                    message=f"Dropped expense with repeated id {expense.id}",
                ))
                continue
            seen_ids.add(expense.id)
            expenses.append(expense)

        return tuple(expenses)

    def _load_budgets(self, issues: list[ValidationIssue], missing: set) -> tuple[Budget, ...]:
        data = self._read_or_report(StorageKey.BUDGETS, issues, missing)
        if data is None:
            return self._default_budgets
        if not isinstance(data, list):
            issues.append(ValidationIssue(
                field=StorageKey.BUDGETS.value,
                issue_type="invalid_shape",
                message="Stored budgets are not a list. Using defaults.",
            ))
            return self._default_budgets

        by_category: dict[Category, Budget] = {}
        for index, entry in enumerate(data):
            try:
                budget = Budget.model_validate(entry)
            except ValidationError as e:
                issues.append(ValidationIssue(
                    field=f"budgets[{index}]",
                    issue_type="invalid_entry",
                    message=f"Dropped malformed budget ({_first_error(e)})",
                ))
                continue
            if budget.category in by_category:
                issues.append(ValidationIssue(
                    field=f"budgets[{index}]",
                    issue_type="duplicate",
                    message=f"Dropped second budget for {budget.category.value}",
                ))
                continue
            by_category[budget.category] = budget

        defaults = {b.category: b for b in self._default_budgets}
        budgets = []
        for category in Category:
            if category in by_category:
                budgets.append(by_category[category])
            else:
                issues.append(ValidationIssue(
                    field=StorageKey.BUDGETS.value,
                    issue_type="missing",
                    message=f"No stored budget for {category.value}. Using default.",
                    severity="info",
                ))
                budgets.append(defaults.get(category) or initial_budgets([category])[0])
        return tuple(budgets)

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_jsonable(value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, (list, tuple)):
            return [PersistenceSync._to_jsonable(item) for item in value]
        return value

    def save(self, key: StorageKey, value: Any) -> None:
        """
        Serialize a value and write it under a key.

        Raises:
            PersistenceWriteFailure: If the write did not complete
        """
        key = StorageKey(key)
        name = self.storage_key(key)
        text = json.dumps(self._to_jsonable(value), ensure_ascii=False)

        try:
            self._storage.write(name, text)
        except PersistenceWriteFailure as e:
            if self._audit_logger:
                self._audit_logger.log_save_failed(name, str(e))
            raise

        if self._audit_logger:
            self._audit_logger.log_state_saved(name, len(text))

    def save_user(self, user: User) -> None:
        self.save(StorageKey.USER, user)

    def save_settings(self, settings: UserSettings) -> None:
        self.save(StorageKey.SETTINGS, settings)

    def save_expenses(self, expenses) -> None:
        self.save(StorageKey.EXPENSES, tuple(expenses))

    def save_budgets(self, budgets) -> None:
        self.save(StorageKey.BUDGETS, tuple(budgets))

    def clear_user(self) -> None:
        """Remove only the user document. Financial data stays."""
        name = self.storage_key(StorageKey.USER)
        try:
            self._storage.delete(name)
        except PersistenceWriteFailure as e:
            if self._audit_logger:
                self._audit_logger.log_save_failed(name, str(e))
            raise

    def write_back(self, state: PersistedState) -> list[StorageKey]:
        """
        Store the repaired or defaulted form of every stale document.

        Each document is written independently; one failing write does not
        stop the others. Returns the keys that could not be written.
        """
        failed = []
        for key in state.stale_keys:
            try:
                if key == StorageKey.USER:
                    if state.user is None:
                        self.clear_user()
                    else:
                        self.save_user(state.user)
                elif key == StorageKey.SETTINGS:
                    self.save_settings(state.settings)
                elif key == StorageKey.EXPENSES:
                    self.save_expenses(state.expenses)
                elif key == StorageKey.BUDGETS:
                    self.save_budgets(state.budgets)
            except PersistenceWriteFailure:
                # Already audited by save(); the next mutation retries
                failed.append(key)
        return failed
