"""
Aggregation Engine

DESIGN DECISION: Every statistic is DERIVED, never stored.
The functions below are pure: they read the snapshots they are given and
return new values. Same input, same output, in any record order.

Nothing here touches a store, storage or the audit log, which is what
lets the UI recompute freely on every render.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from finance_tracker.models.expense import (
    Budget,
    Category,
    CategorySpend,
    DashboardSummary,
    Expense,
    MonthlyReport,
    ReportPeriod,
)
from finance_tracker.validation import InvalidDate, parse_category


DEFAULT_NEAR_LIMIT_THRESHOLD = 90.0

PeriodLike = Union[ReportPeriod, str, date]


def to_period(value: PeriodLike) -> ReportPeriod:
    """
    Normalize a report period.

    Accepts a ReportPeriod, any date inside the month, or "YYYY-MM".

    Raises:
        InvalidDate: If a string is not a valid YYYY-MM month
    """
    if isinstance(value, ReportPeriod):
        return value
    if isinstance(value, date):
        return ReportPeriod.of(value)
    try:
        return ReportPeriod.parse(value)
    except ValueError as e:
        raise InvalidDate(str(e))


def total_spent(records: Iterable[Expense]) -> Decimal:
    """Sum of all amounts. Zero for no records."""
    return sum((r.amount for r in records), Decimal(0))


def spent_by_category(records: Iterable[Expense], category) -> Decimal:
    """Sum of amounts in one category."""
    category = parse_category(category)
    return sum((r.amount for r in records if r.category == category), Decimal(0))


def _percent_used(spent: Decimal, limit: Decimal) -> float:
    if limit == 0:
        return 100.0 if spent > 0 else 0.0
    return float(min(spent / limit * 100, Decimal(100)))


def utilization(records: Iterable[Expense], budget: Budget) -> float:
    """
    Percentage of a budget used, capped at 100.

    A zero limit is fully used as soon as anything is spent.
    """
    return _percent_used(spent_by_category(records, budget.category), budget.limit)


def is_near_limit(
    records: Iterable[Expense],
    budget: Budget,
    threshold: float = DEFAULT_NEAR_LIMIT_THRESHOLD,
) -> bool:
    """True when utilization is strictly above the threshold."""
    return utilization(records, budget) > threshold


def category_breakdown(records: Iterable[Expense]) -> dict[Category, Decimal]:
    """All-time spend per category. Every category is present."""
    totals = {category: Decimal(0) for category in Category}
    for record in records:
        totals[record.category] += record.amount
    return totals


def records_in_period(records: Iterable[Expense], period: PeriodLike) -> list[Expense]:
    """Records dated inside one calendar month."""
    period = to_period(period)
    return [r for r in records if period.contains(r.date)]


def monthly_breakdown(records: Iterable[Expense], period: PeriodLike) -> dict[Category, Decimal]:
    """
    Spend per category for one calendar month.

    Records from any other month, including the same month of another
    year, are ignored. Every category is present, in category order.
    """
    return category_breakdown(records_in_period(records, period))


def available_periods(records: Iterable[Expense]) -> list[ReportPeriod]:
    """Months that have at least one record, newest first."""
    periods = {ReportPeriod.of(r.date) for r in records}
    return sorted(periods, key=lambda p: (p.year, p.month), reverse=True)


def _category_line(
    category: Category,
    spent: Decimal,
    budget: Optional[Budget],
    threshold: float,
) -> CategorySpend:
    if budget is None:
        return CategorySpend(category=category, spent=spent)
    used = _percent_used(spent, budget.limit)
    return CategorySpend(
        category=category,
        spent=spent,
        limit=budget.limit,
        utilization=used,
        near_limit=used > threshold,
    )


def monthly_report(
    records: Iterable[Expense],
    budgets: Iterable[Budget],
    period: PeriodLike,
    threshold: float = DEFAULT_NEAR_LIMIT_THRESHOLD,
) -> MonthlyReport:
    """
    One month's spending measured against the current limits.

    A category is over budget when its spend exceeds its limit.
    """
    period = to_period(period)
    by_category = {b.category: b for b in budgets}
    breakdown = monthly_breakdown(records, period)

    lines = [
        _category_line(category, spent, by_category.get(category), threshold)
        for category, spent in breakdown.items()
    ]
    over_budget = [
        line.category for line in lines
        if line.limit is not None and line.spent > line.limit
    ]

    return MonthlyReport(
        period=period,
        total=sum(breakdown.values(), Decimal(0)),
        lines=lines,
        over_budget=over_budget,
    )


def dashboard_summary(
    records: Iterable[Expense],
    budgets: Iterable[Budget],
    top: int = 3,
    threshold: float = DEFAULT_NEAR_LIMIT_THRESHOLD,
) -> DashboardSummary:
    """
    Headline figures plus the first `top` budget utilizations.

    The top category is the one with the highest spend; ties go to the
    category listed first. None when nothing has been spent.
    """
    records = list(records)
    breakdown = category_breakdown(records)

    top_category = None
    highest = Decimal(0)
    for category, spent in breakdown.items():
        if spent > highest:
            top_category, highest = category, spent

    goals = [
        _category_line(budget.category, breakdown[budget.category], budget, threshold)
        for budget in list(budgets)[:max(top, 0)]
    ]

    return DashboardSummary(
        total_spent=total_spent(records),
        expense_count=len(records),
        top_category=top_category,
        goals=goals,
    )
