"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.expense import (
    CATEGORY_COLORS,
    CURRENCIES,
    DEFAULT_CURRENCY,
    DEFAULT_LANGUAGE,
    DEFAULT_HOUSING_LIMIT,
    DEFAULT_STANDARD_LIMIT,
    HOUSING_CATEGORY,
    LANGUAGE_NAMES,
    MAX_AMOUNT,
    AIInsight,
    Budget,
    Category,
    CategorySpend,
    Currency,
    DashboardSummary,
    Expense,
    Language,
    MonthlyReport,
    ReportPeriod,
    User,
    UserSettings,
    ValidationIssue,
    currency_by_code,
    initial_budgets,
    new_expense_id,
)
from finance_tracker.models.translations import (
    TRANSLATIONS,
    translate,
    translator,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "CATEGORY_COLORS",
    "CURRENCIES",
    "DEFAULT_CURRENCY",
    "DEFAULT_LANGUAGE",
    "DEFAULT_HOUSING_LIMIT",
    "DEFAULT_STANDARD_LIMIT",
    "HOUSING_CATEGORY",
    "LANGUAGE_NAMES",
    "MAX_AMOUNT",
    "AIInsight",
    "Budget",
    "Category",
    "CategorySpend",
    "Currency",
    "DashboardSummary",
    "Expense",
    "Language",
    "MonthlyReport",
    "ReportPeriod",
    "User",
    "UserSettings",
    "ValidationIssue",
    "currency_by_code",
    "initial_budgets",
    "new_expense_id",
    # Translations
    "TRANSLATIONS",
    "translate",
    "translator",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
