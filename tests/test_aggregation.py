"""Tests for the aggregation engine."""

import random
from datetime import date
from decimal import Decimal

import pytest

from conftest import make_expense
from finance_tracker.models import Budget, Category, ReportPeriod, initial_budgets
from finance_tracker.queries import (
    available_periods,
    category_breakdown,
    dashboard_summary,
    is_near_limit,
    monthly_breakdown,
    monthly_report,
    spent_by_category,
    total_spent,
    utilization,
)
from finance_tracker.validation import InvalidCategory, InvalidDate


@pytest.fixture
def records():
    return [
        make_expense("500", Category.FOOD, date(2024, 3, 1)),
        make_expense("250.50", Category.FOOD, date(2024, 3, 20)),
        make_expense("12000", Category.RENT, date(2024, 3, 2)),
        make_expense("80", Category.BOOKS, date(2024, 2, 28)),
        make_expense("40", Category.FOOD, date(2023, 3, 5)),
    ]


class TestTotals:

    def test_total_spent(self, records):
        assert total_spent(records) == Decimal("12870.50")

    def test_total_of_nothing_is_zero(self):
        assert total_spent([]) == Decimal("0")

    def test_spent_by_category(self, records):
        assert spent_by_category(records, "Food") == Decimal("790.50")
        assert spent_by_category(records, Category.TUITION) == Decimal("0")

    def test_spent_by_unknown_category(self, records):
        with pytest.raises(InvalidCategory):
            spent_by_category(records, "Gadgets")

    def test_order_independent(self, records):
        shuffled = list(records)
        random.Random(7).shuffle(shuffled)
        assert total_spent(shuffled) == total_spent(records)
        assert category_breakdown(shuffled) == category_breakdown(records)

    def test_category_breakdown_has_every_category(self, records):
        breakdown = category_breakdown(records)
        assert list(breakdown) == list(Category)
        assert breakdown[Category.SOCIAL] == Decimal("0")


class TestUtilization:

    def test_partial(self):
        records = [make_expense("500", Category.FOOD)]
        assert utilization(records, Budget(category="Food", limit=2000)) == 25.0

    def test_capped_at_hundred(self):
        records = [make_expense("2500", Category.FOOD)]
        assert utilization(records, Budget(category="Food", limit=2000)) == 100.0

    def test_zero_limit(self):
        zero = Budget(category="Food", limit=0)
        assert utilization([], zero) == 0.0
        assert utilization([make_expense("1", Category.FOOD)], zero) == 100.0

    def test_only_counts_budget_category(self):
        records = [make_expense("1000", Category.RENT)]
        assert utilization(records, Budget(category="Food", limit=2000)) == 0.0

    def test_near_limit_is_strictly_above_threshold(self):
        budget = Budget(category="Food", limit=100)
        assert not is_near_limit([make_expense("90", Category.FOOD)], budget)
        assert is_near_limit([make_expense("91", Category.FOOD)], budget)
        assert is_near_limit([make_expense("60", Category.FOOD)], budget, threshold=50)


class TestMonthlyBreakdown:

    def test_only_requested_month(self, records):
        breakdown = monthly_breakdown(records, "2024-03")
        assert breakdown[Category.FOOD] == Decimal("750.50")
        assert breakdown[Category.RENT] == Decimal("12000")
        assert breakdown[Category.BOOKS] == Decimal("0")

    def test_same_month_other_year_excluded(self, records):
        breakdown = monthly_breakdown(records, ReportPeriod(year=2023, month=3))
        assert breakdown[Category.FOOD] == Decimal("40")
        assert sum(breakdown.values()) == Decimal("40")

    def test_accepts_date(self, records):
        assert monthly_breakdown(records, date(2024, 2, 1))[Category.BOOKS] == Decimal("80")

    def test_every_category_present(self):
        assert list(monthly_breakdown([], "2024-01")) == list(Category)

    def test_invalid_period(self, records):
        with pytest.raises(InvalidDate):
            monthly_breakdown(records, "2024/03")

    def test_available_periods_newest_first(self, records):
        assert [str(p) for p in available_periods(records)] == ["2024-03", "2024-02", "2023-03"]


class TestReports:

    def test_monthly_report(self, records):
        budgets = initial_budgets()
        report = monthly_report(records, budgets, "2024-03")
        assert report.period == ReportPeriod(year=2024, month=3)
        assert report.total == Decimal("12750.50")
        assert report.has_spending
        lines = {line.category: line for line in report.lines}
        assert lines[Category.RENT].utilization == 80.0
        assert lines[Category.RENT].limit == Decimal("15000")
        assert report.over_budget == []

    def test_monthly_report_flags_over_budget(self):
        records = [make_expense("2500", Category.FOOD, date(2024, 3, 1))]
        report = monthly_report(records, initial_budgets(), "2024-03")
        assert report.over_budget == [Category.FOOD]
        food = next(line for line in report.lines if line.category == Category.FOOD)
        assert food.utilization == 100.0
        assert food.near_limit

    def test_empty_month(self, records):
        report = monthly_report(records, initial_budgets(), "2022-01")
        assert report.total == Decimal("0")
        assert not report.has_spending

    def test_dashboard_summary(self, records):
        summary = dashboard_summary(records, initial_budgets())
        assert summary.total_spent == Decimal("12870.50")
        assert summary.expense_count == 5
        assert summary.top_category == Category.RENT
        assert [g.category for g in summary.goals] == [Category.FOOD, Category.TUITION, Category.SOCIAL]

    def test_dashboard_top_category_tie_goes_to_first_category(self):
        records = [
            make_expense("100", Category.BOOKS),
            make_expense("100", Category.FOOD),
        ]
        assert dashboard_summary(records, []).top_category == Category.FOOD

    def test_dashboard_without_spending(self):
        summary = dashboard_summary([], initial_budgets(), top=2)
        assert summary.top_category is None
        assert len(summary.goals) == 2
        assert all(g.utilization == 0.0 for g in summary.goals)

    def test_aggregation_does_not_mutate_input(self, records):
        snapshot = list(records)
        dashboard_summary(records, initial_budgets())
        monthly_report(records, initial_budgets(), "2024-03")
        assert records == snapshot
