"""Input validation package."""

from finance_tracker.validation.validator import (
    InputError,
    InvalidAmount,
    InvalidCategory,
    InvalidDate,
    InvalidSetting,
    InvalidUser,
    parse_amount,
    parse_category,
    parse_currency,
    parse_date,
    parse_description,
    parse_language,
    parse_login,
)

__all__ = [
    "InputError",
    "InvalidAmount",
    "InvalidCategory",
    "InvalidDate",
    "InvalidSetting",
    "InvalidUser",
    "parse_amount",
    "parse_category",
    "parse_currency",
    "parse_date",
    "parse_description",
    "parse_language",
    "parse_login",
]
