"""Aggregation queries over expense and budget snapshots."""

from finance_tracker.queries.aggregation import (
    DEFAULT_NEAR_LIMIT_THRESHOLD,
    available_periods,
    category_breakdown,
    dashboard_summary,
    is_near_limit,
    monthly_breakdown,
    monthly_report,
    records_in_period,
    spent_by_category,
    to_period,
    total_spent,
    utilization,
)

__all__ = [
    "DEFAULT_NEAR_LIMIT_THRESHOLD",
    "available_periods",
    "category_breakdown",
    "dashboard_summary",
    "is_near_limit",
    "monthly_breakdown",
    "monthly_report",
    "records_in_period",
    "spent_by_category",
    "to_period",
    "total_spent",
    "utilization",
]
