"""Expense aggregation and summary package."""

from expense_tracker.summaries.aggregator import (
    count_currencies,
    daily_costs_by_currency_for_week,
    daily_costs_for_current_week,
    daily_costs_for_week,
    expenses_in_month,
    expenses_in_week,
    expenses_in_year,
    monthly_costs_by_currency_for_year,
    monthly_costs_for_current_year,
    monthly_costs_for_year,
    months_with_data,
    most_common_currency,
    partition_by_currency,
    total_costs,
    unique_currencies,
    weekly_costs_by_currency_for_month,
    weekly_costs_for_current_month,
    weekly_costs_for_month,
    weeks_with_data,
    years_with_data,
)
from expense_tracker.summaries.chart import to_chart_series
from expense_tracker.summaries.report import build_summary_report

__all__ = [
    "build_summary_report",
    "count_currencies",
    "daily_costs_by_currency_for_week",
    "daily_costs_for_current_week",
    "daily_costs_for_week",
    "expenses_in_month",
    "expenses_in_week",
    "expenses_in_year",
    "monthly_costs_by_currency_for_year",
    "monthly_costs_for_current_year",
    "monthly_costs_for_year",
    "months_with_data",
    "most_common_currency",
    "partition_by_currency",
    "to_chart_series",
    "total_costs",
    "unique_currencies",
    "weekly_costs_by_currency_for_month",
    "weekly_costs_for_current_month",
    "weekly_costs_for_month",
    "weeks_with_data",
    "years_with_data",
]
