"""Chart data adapter: cost map in, ordered (label, value) points out."""

from expense_tracker.models.summary import ChartPoint, CostMap


def to_chart_series(costs: CostMap) -> list[ChartPoint]:
    """One point per bucket, in the cost map's order."""
    return [ChartPoint(label=label, value=value) for label, value in costs.items()]
