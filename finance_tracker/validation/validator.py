"""
Input Validation

DESIGN DECISION: Every value that reaches a store goes through one of the
parsers below. The category set, amount rules and date format are enforced
here, at the mutation boundary, not assumed from UI widgets.

Each parser either returns a clean value or raises a specific InputError
subclass. Validation NEVER silently fixes input: a negative amount is
rejected, not made positive.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from finance_tracker.models.expense import (
    Category,
    Currency,
    MAX_AMOUNT,
    Language,
    currency_by_code,
)


class InputError(ValueError):
    """Base exception for rejected user input."""

    field = "value"


class InvalidCategory(InputError):
    """Category outside the fixed category set."""

    field = "category"


class InvalidAmount(InputError):
    """Amount that is negative, not a number, or not finite."""

    field = "amount"


class InvalidDate(InputError):
    """Date that is not a calendar date."""

    field = "date"


class InvalidSetting(InputError):
    """Unknown currency or language."""

    field = "settings"


class InvalidUser(InputError):
    """Login details that cannot identify a user."""

    field = "user"


def parse_category(value) -> Category:
    """
    Resolve a category.

    Accepts a Category member or its exact display value ("Food").
    """
    if isinstance(value, Category):
        return value
    try:
        return Category(value)
    except ValueError:
        allowed = ", ".join(c.value for c in Category)
        raise InvalidCategory(f"Unknown category {value!r}. Allowed: {allowed}")


def parse_amount(value) -> Decimal:
    """
    Parse a non-negative money amount.

    Accepts Decimal, int, float or a numeric string. Floats go through
    str so that 0.1 becomes Decimal("0.1"). Amounts above MAX_AMOUNT are
    rejected.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount(f"Amount must be a number, got {value!r}")

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, (int, float)):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip().replace(",", ""))
        else:
            raise InvalidAmount(f"Amount must be a number, got {type(value).__name__}")
    except InvalidOperation:
        raise InvalidAmount(f"Amount is not a number: {value!r}")

    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmount(f"Amount cannot be negative, got {value!r}")
    if amount > MAX_AMOUNT:
        raise InvalidAmount(f"Amount cannot be more than {MAX_AMOUNT:,}")

    return amount


def parse_date(value, today: Optional[date] = None) -> date:
    """
    Parse a calendar date.

    None means today. Strings must be ISO formatted (YYYY-MM-DD).
    """
    if value is None:
        return today or date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidDate(f"Date must be YYYY-MM-DD, got {value!r}")
    raise InvalidDate(f"Date must be a date or YYYY-MM-DD string, got {type(value).__name__}")


def parse_description(value) -> str:
    """Free text; None becomes empty."""
    if value is None:
        return ""
    return str(value).strip()


def parse_currency(value) -> Currency:
    """Resolve a supported currency from a Currency or an ISO code."""
    if isinstance(value, Currency):
        code = value.code
    else:
        code = value
    currency = currency_by_code(code) if isinstance(code, str) else None
    if currency is None:
        raise InvalidSetting(f"Unsupported currency: {value!r}")
    return currency


def parse_language(value) -> Language:
    """Resolve a supported language from a Language or its code."""
    if isinstance(value, Language):
        return value
    try:
        return Language(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(lang.value for lang in Language)
        raise InvalidSetting(f"Unsupported language {value!r}. Allowed: {allowed}")


def parse_login(email, name) -> tuple[str, str]:
    """
    Clean login details.

    The email needs an "@" with something on both sides; the name must not
    be blank. No credential checking happens here.
    """
    email = str(email or "").strip()
    name = str(name or "").strip()
    local, _, domain = email.partition("@")
    if not local or not domain:
        raise InvalidUser(f"Email address is not valid: {email!r}")
    if len(email) > 254:
        raise InvalidUser("Email address cannot be longer than 254 characters")
    if not name:
        raise InvalidUser("Name cannot be empty")
    if len(name) > 100:
        raise InvalidUser("Name cannot be longer than 100 characters")
    return email, name
