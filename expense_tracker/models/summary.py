"""
Summary Models

The shapes handed from the aggregation engine to whatever draws the charts.
A chart series is an ordered list of ChartPoint; a report bundles the
three period breakdowns for every currency.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


# Bucket label -> summed amount. Labels are display strings.
CostMap = dict[str, float]


class ChartPoint(BaseModel):
    """One slice of a chart."""

    label: str = Field(
        ...,
        description="Bucket label (day name, week range or month name)"
    )
    value: float = Field(
        ...,
        description="Summed amount for the bucket"
    )


class PeriodBreakdown(BaseModel):
    """Buckets for one period plus their total."""

    period: str = Field(
        ...,
        pattern="^(week|month|year)$",
        description="Which window the buckets cover"
    )
    series: list[ChartPoint] = Field(default_factory=list)
    total: float = 0.0


class CurrencyBreakdown(BaseModel):
    """Daily, weekly and monthly breakdowns for a single currency."""

    currency: str
    week: PeriodBreakdown
    month: PeriodBreakdown
    year: PeriodBreakdown


class SummaryReport(BaseModel):
    """
    Everything a summary screen needs.

    Totals are never mixed across currencies: each currency carries its own
    breakdowns, ordered by the configured currency order.
    """

    week_start: date
    month_start: date
    year: int
    currencies: list[CurrencyBreakdown] = Field(default_factory=list)
    most_common_currency: Optional[str] = None

    # Label currency for each selected window, for single-currency displays
    week_currency: Optional[str] = None
    month_currency: Optional[str] = None
    year_currency: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.currencies
