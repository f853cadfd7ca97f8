"""
Expense Aggregation Engine

DESIGN DECISION: Aggregation is PURE.
Every function takes a collection of expenses and an anchor, and returns
a new cost map. Nothing here mutates its input, logs, or reads settings.

Three bucketings exist:
- days of the Monday-start week around an anchor, labelled by day name
- weeks of the month around an anchor, labelled "YYYY-MM-DD - YYYY-MM-DD"
- months of a year, labelled by month name

Buckets come back in calendar order. Only the expense's own date decides
whether it is in range; a week bucket may start before the month does.

An expense whose date does not parse is treated as outside every window.
The store keeps such dates out of new data, so this only matters for
legacy records.

Amounts are summed as given. Positivity is the store's job.
"""

from collections import Counter
from collections.abc import Callable, Hashable, Iterable, Sequence
from datetime import date
from typing import Optional, Protocol, Union

from expense_tracker.models.summary import CostMap
from expense_tracker.summaries.periods import (
    DateLike,
    day_name,
    month_bounds,
    month_name,
    parse_local_date,
    to_anchor_date,
    to_year,
    week_bounds,
    week_label,
    week_start,
)


class ExpenseLike(Protocol):
    """Anything with the fields the aggregator reads."""

    amount: float
    date: str
    currency: str


def _bucket(
    records: Iterable[ExpenseLike],
    in_range: Callable[[date], bool],
    bucket_key: Callable[[date], Hashable],
    bucket_label: Callable[[date], str],
) -> CostMap:
    sums: dict[Hashable, float] = {}
    labels: dict[Hashable, str] = {}

    for record in records:
        day = parse_local_date(record.date)
        if day is None or not in_range(day):
            continue
        key = bucket_key(day)
        labels.setdefault(key, bucket_label(day))
        sums[key] = sums.get(key, 0.0) + record.amount

    return {labels[key]: sums[key] for key in sorted(sums)}


# =============================================================================
# SINGLE-CURRENCY BUCKETING
# =============================================================================

def daily_costs_for_week(
    records: Iterable[ExpenseLike],
    week_anchor: DateLike,
) -> CostMap:
    """
    Sum expenses per day of the week containing week_anchor.

    Returns {"Monday": 100.0, "Tuesday": 50.0, ...}; days without
    expenses are absent, and a week without expenses gives {}.
    """
    start, end = week_bounds(to_anchor_date(week_anchor))
    return _bucket(
        records,
        in_range=lambda day: start <= day <= end,
        bucket_key=lambda day: day,
        bucket_label=day_name,
    )


def weekly_costs_for_month(
    records: Iterable[ExpenseLike],
    month_anchor: DateLike,
) -> CostMap:
    """
    Sum expenses per Monday-start week, for expenses dated in the month
    containing month_anchor.
    """
    start, end = month_bounds(to_anchor_date(month_anchor))
    return _bucket(
        records,
        in_range=lambda day: start <= day <= end,
        bucket_key=week_start,
        bucket_label=week_label,
    )


def monthly_costs_for_year(
    records: Iterable[ExpenseLike],
    year: Union[int, DateLike],
) -> CostMap:
    """Sum expenses per month name for one calendar year."""
    target = to_year(year)
    return _bucket(
        records,
        in_range=lambda day: day.year == target,
        bucket_key=lambda day: day.month,
        bucket_label=month_name,
    )


def daily_costs_for_current_week(
    records: Iterable[ExpenseLike],
    today: Optional[date] = None,
) -> CostMap:
    return daily_costs_for_week(records, today or date.today())


def weekly_costs_for_current_month(
    records: Iterable[ExpenseLike],
    today: Optional[date] = None,
) -> CostMap:
    return weekly_costs_for_month(records, today or date.today())


def monthly_costs_for_current_year(
    records: Iterable[ExpenseLike],
    today: Optional[date] = None,
) -> CostMap:
    return monthly_costs_for_year(records, (today or date.today()).year)


def total_costs(costs: CostMap) -> float:
    """Sum of every bucket; 0 for an empty map."""
    return sum(costs.values(), 0.0)


# =============================================================================
# WINDOW FILTERS
# =============================================================================

def _within(
    records: Iterable[ExpenseLike],
    in_range: Callable[[date], bool],
) -> list[ExpenseLike]:
    kept = []
    for record in records:
        day = parse_local_date(record.date)
        if day is not None and in_range(day):
            kept.append(record)
    return kept


def expenses_in_week(
    records: Iterable[ExpenseLike],
    week_anchor: DateLike,
) -> list[ExpenseLike]:
    """Expenses dated in the week containing week_anchor, in input order."""
    start, end = week_bounds(to_anchor_date(week_anchor))
    return _within(records, lambda day: start <= day <= end)


def expenses_in_month(
    records: Iterable[ExpenseLike],
    month_anchor: DateLike,
) -> list[ExpenseLike]:
    """Expenses dated in the month containing month_anchor, in input order."""
    start, end = month_bounds(to_anchor_date(month_anchor))
    return _within(records, lambda day: start <= day <= end)


def expenses_in_year(
    records: Iterable[ExpenseLike],
    year: Union[int, DateLike],
) -> list[ExpenseLike]:
    """Expenses dated in one calendar year, in input order."""
    target = to_year(year)
    return _within(records, lambda day: day.year == target)


# =============================================================================
# CURRENCY HANDLING
# =============================================================================

def partition_by_currency(
    records: Iterable[ExpenseLike],
) -> dict[str, list[ExpenseLike]]:
    """Group expenses by currency code, in order of first appearance."""
    groups: dict[str, list[ExpenseLike]] = {}
    for record in records:
        groups.setdefault(record.currency, []).append(record)
    return groups


def count_currencies(records: Iterable[ExpenseLike]) -> dict[str, int]:
    """How many expenses use each currency."""
    return dict(Counter(record.currency for record in records))


def unique_currencies(
    records: Iterable[ExpenseLike],
    currency_order: Sequence[str] = (),
) -> list[str]:
    """
    Currencies present in records.

    Known codes come first in currency_order; unknown ones follow
    alphabetically.
    """
    present = {record.currency for record in records}
    known = [code for code in currency_order if code in present]
    unknown = sorted(present.difference(currency_order))
    return known + unknown


def most_common_currency(
    records: Sequence[ExpenseLike],
    currency_order: Sequence[str] = (),
    default: Optional[str] = None,
) -> Optional[str]:
    """
    The currency used by the most expenses.

    Ties go to the code listed first in currency_order, then to the code
    that appears first in records. Returns default when records is empty.
    """
    counts = count_currencies(records)
    if not counts:
        return default

    best = max(counts.values())
    tied = [code for code, count in counts.items() if count == best]
    for code in currency_order:
        if code in tied:
            return code
    return tied[0]


def _per_currency(
    records: Iterable[ExpenseLike],
    bucketing: Callable[[list[ExpenseLike]], CostMap],
) -> dict[str, CostMap]:
    result: dict[str, CostMap] = {}
    for currency, group in partition_by_currency(records).items():
        costs = bucketing(group)
        if costs:
            result[currency] = costs
    return result


def daily_costs_by_currency_for_week(
    records: Iterable[ExpenseLike],
    week_anchor: DateLike,
) -> dict[str, CostMap]:
    """daily_costs_for_week() run separately for every currency."""
    return _per_currency(records, lambda group: daily_costs_for_week(group, week_anchor))


def weekly_costs_by_currency_for_month(
    records: Iterable[ExpenseLike],
    month_anchor: DateLike,
) -> dict[str, CostMap]:
    """weekly_costs_for_month() run separately for every currency."""
    return _per_currency(records, lambda group: weekly_costs_for_month(group, month_anchor))


def monthly_costs_by_currency_for_year(
    records: Iterable[ExpenseLike],
    year: Union[int, DateLike],
) -> dict[str, CostMap]:
    """monthly_costs_for_year() run separately for every currency."""
    return _per_currency(records, lambda group: monthly_costs_for_year(group, year))


# =============================================================================
# PERIOD DISCOVERY
# =============================================================================

def _parsed_dates(records: Iterable[ExpenseLike]) -> list[date]:
    days = []
    for record in records:
        day = parse_local_date(record.date)
        if day is not None:
            days.append(day)
    return days


def weeks_with_data(records: Iterable[ExpenseLike]) -> list[date]:
    """Mondays of every week that has at least one expense, oldest first."""
    return sorted({week_start(day) for day in _parsed_dates(records)})


def months_with_data(records: Iterable[ExpenseLike]) -> list[date]:
    """First day of every month that has at least one expense, oldest first."""
    return sorted({day.replace(day=1) for day in _parsed_dates(records)})


def years_with_data(records: Iterable[ExpenseLike]) -> list[int]:
    """Every year that has at least one expense, oldest first."""
    return sorted({day.year for day in _parsed_dates(records)})
