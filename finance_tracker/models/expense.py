"""
Core Data Models for Finance Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the closed category set at runtime
2. Keep money as Decimal, never float
3. Be serializable for storage and logging
4. Stay immutable once created (records change only by replacement)

DESIGN DECISION: Amounts are written to storage as JSON numbers, the way
the original browser app stored them, and read back from either a number
or a numeric string. An amount a float cannot carry exactly (e.g. more
decimal places than a double holds) is written as a numeric string so
nothing is lost across a restart.
"""

import datetime
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
)


# =============================================================================
# MONEY
# =============================================================================

def _coerce_money(value):
    """Normalize raw input before Decimal validation."""
    if isinstance(value, bool):
        raise ValueError("Amount must be a number, not a boolean")
    if isinstance(value, float):
        # Through str so 0.1 stays 0.1
        return Decimal(str(value))
    if isinstance(value, str):
        return value.strip()
    return value


def _money_to_json(value: Decimal) -> Union[float, str]:
    """A JSON number when a float carries the value exactly, else a numeric string."""
    as_float = float(value)
    if Decimal(str(as_float)) == value:
        return as_float
    return str(value)


# Largest amount a record or limit may hold
MAX_AMOUNT = Decimal("999999999999.99")


Money = Annotated[
    Decimal,
    BeforeValidator(_coerce_money),
    PlainSerializer(_money_to_json, return_type=Union[float, str], when_used="json"),
    Field(ge=0, le=MAX_AMOUNT),
]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(str, Enum):
    """
    Expense categories.

    DESIGN DECISION: The set is closed. Every store mutation checks
    membership, so nothing outside this set can reach storage.
    """
    FOOD = "Food"
    TUITION = "Tuition"
    SOCIAL = "Social"
    BOOKS = "Books"
    RENT = "Rent"
    TRANSPORT = "Transport"
    MISC = "Misc"


# Rent is the housing category and gets the larger default budget
HOUSING_CATEGORY = Category.RENT

CATEGORY_COLORS: dict[Category, str] = {
    Category.FOOD: "#3b82f6",
    Category.TUITION: "#6366f1",
    Category.SOCIAL: "#8b5cf6",
    Category.BOOKS: "#06b6d4",
    Category.RENT: "#1e293b",
    Category.TRANSPORT: "#0ea5e9",
    Category.MISC: "#64748b",
}


class Language(str, Enum):
    """Interface languages a user can pick."""
    EN = "en"
    HI = "hi"
    BN = "bn"
    ES = "es"
    FR = "fr"


LANGUAGE_NAMES: dict[Language, str] = {
    Language.EN: "English",
    Language.HI: "हिन्दी",
    Language.BN: "বাংলা",
    Language.ES: "Español",
    Language.FR: "Français",
}


# =============================================================================
# SETTINGS AND IDENTITY
# =============================================================================

class Currency(BaseModel):
    """
    A display currency.

    Only affects formatting. Amounts are never converted.
    """
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=3, max_length=3)
    symbol: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

    def format(self, amount) -> str:
        """Render an amount as symbol plus grouped, two-decimal number."""
        return f"{self.symbol}{Decimal(amount):,.2f}"


CURRENCIES: tuple[Currency, ...] = (
    Currency(code="INR", symbol="₹", name="Rupee"),
    Currency(code="USD", symbol="$", name="Dollar"),
    Currency(code="EUR", symbol="€", name="Euro"),
    Currency(code="BDT", symbol="৳", name="Taka"),
)

DEFAULT_CURRENCY = CURRENCIES[0]
DEFAULT_LANGUAGE = Language.EN


def currency_by_code(code: str) -> Optional[Currency]:
    """Look up one of the supported currencies by ISO code."""
    code = (code or "").strip().upper()
    for currency in CURRENCIES:
        if currency.code == code:
            return currency
    return None


class UserSettings(BaseModel):
    """Display preferences. One per installation."""
    model_config = ConfigDict(frozen=True)

    currency: Currency = DEFAULT_CURRENCY
    language: Language = DEFAULT_LANGUAGE


class User(BaseModel):
    """The signed-in user. Exists only while a session is active."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: uuid4().hex, min_length=1)
    email: str = Field(..., min_length=3, max_length=254)
    name: str = Field(..., min_length=1, max_length=100)


# =============================================================================
# CORE FINANCIAL RECORDS
# =============================================================================

def new_expense_id() -> str:
    return str(uuid4())


class Expense(BaseModel):
    """
    A single recorded expense.

    Immutable: an expense is created once and can only be deleted.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_expense_id,
        min_length=1,
        description="Opaque unique token, never reused"
    )
    amount: Money
    category: Category
    description: str = Field(
        default="",
        description="Free-text note"
    )
    date: datetime.date = Field(
        ...,
        description="Calendar date the money was spent"
    )


class Budget(BaseModel):
    """Spending limit for one category. The category is the key."""
    model_config = ConfigDict(frozen=True)

    category: Category
    limit: Money


DEFAULT_HOUSING_LIMIT = Decimal("15000")
DEFAULT_STANDARD_LIMIT = Decimal("2000")


def initial_budgets(
    categories=None,
    housing_limit: Decimal = DEFAULT_HOUSING_LIMIT,
    standard_limit: Decimal = DEFAULT_STANDARD_LIMIT,
) -> tuple[Budget, ...]:
    """
    One budget per category, with the first-run default limits.

    Duplicate categories in the input collapse to one budget.
    """
    if categories is None:
        categories = tuple(Category)
    budgets = []
    seen = set()
    for category in categories:
        category = Category(category)
        if category in seen:
            continue
        seen.add(category)
        limit = housing_limit if category == HOUSING_CATEGORY else standard_limit
        budgets.append(Budget(category=category, limit=limit))
    return tuple(budgets)


class AIInsight(BaseModel):
    """
    Qualitative feedback on spending produced by the insight gateway.

    Never persisted. Any change to records or budgets makes it stale.
    """

    score: float = Field(
        ...,
        ge=0,
        le=100,
        description="Overall financial health score"
    )
    summary: str = Field(..., min_length=1)
    tips: list[str] = Field(default_factory=list)


# =============================================================================
# REPORTING MODELS
# =============================================================================

class ReportPeriod(BaseModel):
    """A calendar month."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def of(cls, day: date) -> "ReportPeriod":
        return cls(year=day.year, month=day.month)

    @classmethod
    def parse(cls, value: str) -> "ReportPeriod":
        """Parse a `YYYY-MM` string."""
        try:
            year, month = value.strip().split("-")
            return cls(year=int(year), month=int(month))
        except (AttributeError, ValueError) as e:
            raise ValueError(f"Report period must look like YYYY-MM, got {value!r}") from e

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class CategorySpend(BaseModel):
    """Spend against budget for one category."""

    category: Category
    spent: Decimal
    limit: Optional[Decimal] = None
    utilization: float = Field(default=0.0, ge=0.0, le=100.0)
    near_limit: bool = False


class MonthlyReport(BaseModel):
    """Per-category breakdown for one month."""

    period: ReportPeriod
    total: Decimal
    lines: list[CategorySpend] = Field(default_factory=list)
    over_budget: list[Category] = Field(default_factory=list)

    @property
    def has_spending(self) -> bool:
        return self.total > 0


class DashboardSummary(BaseModel):
    """Figures shown on the dashboard."""

    total_spent: Decimal
    expense_count: int = Field(ge=0)
    top_category: Optional[Category] = None
    goals: list[CategorySpend] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found while validating input or stored data."""

    field: str = Field(
        ...,
        description="Field or storage key with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'unparsable', 'invalid_entry', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="warning",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
