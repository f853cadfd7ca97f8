"""
Summary Report Builder

Composes the aggregator and the chart adapter into the per-currency view
a summary screen shows: for every currency, the days of the selected week,
the weeks of the selected month and the months of the selected year, each
with its total.

Like the aggregator, this is pure. The caller picks the anchors.
"""

from collections.abc import Sequence
from typing import Optional, Union

from expense_tracker.models.summary import (
    CurrencyBreakdown,
    PeriodBreakdown,
    SummaryReport,
)
from expense_tracker.summaries.aggregator import (
    ExpenseLike,
    daily_costs_for_week,
    expenses_in_month,
    expenses_in_week,
    expenses_in_year,
    monthly_costs_for_year,
    most_common_currency,
    partition_by_currency,
    total_costs,
    unique_currencies,
    weekly_costs_for_month,
)
from expense_tracker.summaries.chart import to_chart_series
from expense_tracker.summaries.periods import (
    DateLike,
    month_bounds,
    to_anchor_date,
    to_year,
    week_bounds,
)


def _breakdown(period: str, costs: dict[str, float]) -> PeriodBreakdown:
    return PeriodBreakdown(
        period=period,
        series=to_chart_series(costs),
        total=total_costs(costs),
    )


def build_summary_report(
    records: Sequence[ExpenseLike],
    week_anchor: DateLike,
    month_anchor: DateLike,
    year: Union[int, DateLike],
    currency_order: Sequence[str] = (),
    fallback_currency: Optional[str] = None,
) -> SummaryReport:
    """
    Build the per-currency summary for the selected periods.

    Args:
        records: Expense snapshot (e.g. ExpenseStore.expenses)
        week_anchor: Any day of the week to break down by day
        month_anchor: Any day of the month to break down by week
        year: Year to break down by month
        currency_order: Display order for currencies
        fallback_currency: Reported as most common for an empty collection
                           or an empty window

    Returns:
        SummaryReport with one CurrencyBreakdown per currency present,
        including currencies that have nothing in the selected periods
    """
    week_start = week_bounds(to_anchor_date(week_anchor))[0]
    month_start = month_bounds(to_anchor_date(month_anchor))[0]
    target_year = to_year(year)

    groups = partition_by_currency(records)
    breakdowns = []
    for currency in unique_currencies(records, currency_order):
        group = groups[currency]
        breakdowns.append(CurrencyBreakdown(
            currency=currency,
            week=_breakdown("week", daily_costs_for_week(group, week_start)),
            month=_breakdown("month", weekly_costs_for_month(group, month_start)),
            year=_breakdown("year", monthly_costs_for_year(group, target_year)),
        ))

    def label_currency(window: Sequence[ExpenseLike]) -> Optional[str]:
        return most_common_currency(
            window,
            currency_order=currency_order,
            default=fallback_currency,
        )

    return SummaryReport(
        week_start=week_start,
        month_start=month_start,
        year=target_year,
        currencies=breakdowns,
        most_common_currency=label_currency(records),
        week_currency=label_currency(expenses_in_week(records, week_start)),
        month_currency=label_currency(expenses_in_month(records, month_start)),
        year_currency=label_currency(expenses_in_year(records, target_year)),
    )
