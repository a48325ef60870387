"""Tests for input parsers at the mutation boundary."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from finance_tracker.models import MAX_AMOUNT, Category, Language
from finance_tracker.validation import (
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


class TestParseAmount:

    @pytest.mark.parametrize("raw, expected", [
        (500, Decimal("500")),
        ("12.50", Decimal("12.50")),
        (" 1,250.75 ", Decimal("1250.75")),
        (0.1, Decimal("0.1")),
        (Decimal("0"), Decimal("0")),
    ])
    def test_accepts_numbers(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", [-1, "-0.01", "abc", "", None, True, float("nan"), "inf", [1]])
    def test_rejects_invalid(self, raw):
        with pytest.raises(InvalidAmount):
            parse_amount(raw)

    @pytest.mark.parametrize("raw", ["1e400", "12345678901234567.89", "1" + "0" * 600])
    def test_rejects_amounts_above_maximum(self, raw):
        with pytest.raises(InvalidAmount):
            parse_amount(raw)

    def test_accepts_maximum(self):
        assert parse_amount("999,999,999,999.99") == MAX_AMOUNT

    def test_errors_are_value_errors(self):
        """Callers that only know ValueError still catch rejections."""
        with pytest.raises(ValueError):
            parse_amount("nope")
        assert issubclass(InvalidAmount, InputError)
        assert InvalidAmount.field == "amount"


class TestParseCategory:

    def test_accepts_display_value(self):
        assert parse_category("Rent") == Category.RENT

    def test_accepts_member(self):
        assert parse_category(Category.BOOKS) is Category.BOOKS

    @pytest.mark.parametrize("raw", ["Gadgets", "food", "", None])
    def test_rejects_outside_closed_set(self, raw):
        with pytest.raises(InvalidCategory):
            parse_category(raw)


class TestParseDate:

    def test_iso_string(self):
        assert parse_date("2024-03-01") == date(2024, 3, 1)

    def test_datetime_truncated(self):
        assert parse_date(datetime(2024, 3, 1, 18, 30)) == date(2024, 3, 1)

    def test_none_means_today(self):
        assert parse_date(None, today=date(2024, 5, 5)) == date(2024, 5, 5)

    @pytest.mark.parametrize("raw", ["2024-02-30", "01/03/2024", "yesterday", 20240301])
    def test_rejects_invalid(self, raw):
        with pytest.raises(InvalidDate):
            parse_date(raw)


class TestParseSettings:

    def test_currency_code_case_insensitive(self):
        assert parse_currency("usd").code == "USD"

    def test_unknown_currency(self):
        with pytest.raises(InvalidSetting):
            parse_currency("XYZ")

    def test_language(self):
        assert parse_language("FR") == Language.FR

    def test_unknown_language(self):
        with pytest.raises(InvalidSetting):
            parse_language("de")


class TestParseLogin:

    def test_strips_input(self):
        assert parse_login("  ana@example.com ", " Ana ") == ("ana@example.com", "Ana")

    @pytest.mark.parametrize("email, name", [
        ("not-an-email", "Ana"),
        ("@example.com", "Ana"),
        ("ana@example.com", "  "),
        ("ana@example.com", "x" * 101),
        ("a" * 250 + "@example.com", "Ana"),
    ])
    def test_rejects_invalid(self, email, name):
        with pytest.raises(InvalidUser):
            parse_login(email, name)


def test_description_none_becomes_empty():
    assert parse_description(None) == ""
    assert parse_description("  coffee ") == "coffee"
