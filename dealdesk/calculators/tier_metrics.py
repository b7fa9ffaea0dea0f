"""
Financial Metrics Calculators for the Deal Desk Engine

Per-tier and aggregate revenue, margin, incentive and growth figures.
All use Decimal for precision; nothing here raises on missing or bad values.
"""

from collections.abc import Callable, Iterable
from decimal import Decimal

from ..models import (
    HUNDRED,
    ZERO,
    AggregateMetrics,
    DealTier,
    HistoricalBaseline,
    TierMetrics,
    to_decimal,
)


def tier_gross_profit(tier: DealTier) -> Decimal:
    return to_decimal(tier.annual_revenue) * to_decimal(tier.annual_gross_margin)


def tier_incentive_cost(tier: DealTier) -> Decimal:
    """Sum of itemized incentives, or the aggregated incentive value."""
    if tier.incentives:
        return sum((to_decimal(line.value) for line in tier.incentives), ZERO)
    return to_decimal(tier.incentive_value)


def adjusted_gross_profit(tier: DealTier) -> Decimal:
    return tier_gross_profit(tier) - tier_incentive_cost(tier)


def adjusted_gross_margin(tier: DealTier) -> Decimal:
    revenue = to_decimal(tier.annual_revenue)
    if revenue == 0:
        return ZERO
    return adjusted_gross_profit(tier) / revenue


def growth_rate(current, baseline) -> Decimal:
    """Year-over-year growth as a fraction. Non-positive baselines give 0."""
    base = to_decimal(baseline)
    if base <= 0:
        return ZERO
    return (to_decimal(current) - base) / base


def aggregate_across_tiers(tiers: Iterable[DealTier], field_fn: Callable[[DealTier], Decimal]) -> Decimal:
    return sum((to_decimal(field_fn(tier)) for tier in tiers), ZERO)


def weighted_gross_margin(tiers: list[DealTier]) -> Decimal:
    """Revenue-weighted gross margin across tiers, as a fraction."""
    total_revenue = aggregate_across_tiers(tiers, lambda t: t.annual_revenue)
    if total_revenue == 0:
        return ZERO
    return aggregate_across_tiers(tiers, tier_gross_profit) / total_revenue


def forecasted_margin(tiers: list[DealTier], baseline: HistoricalBaseline | None) -> Decimal:
    """Project next year's margin from the current margin and its growth trend."""
    current = weighted_gross_margin(tiers)
    trend = growth_rate(current, baseline.margin) if baseline else ZERO
    projected = current * (1 + trend)
    return max(ZERO, min(Decimal('1'), projected))


class TierMetricsCalculator:
    """Calculates derived figures for every tier of a deal."""

    def calculate(self, tiers: list[DealTier], baseline: HistoricalBaseline | None = None) -> list[TierMetrics]:
        return [self._calculate_tier(tier, baseline) for tier in tiers]

    def _calculate_tier(self, tier: DealTier, baseline: HistoricalBaseline | None) -> TierMetrics:
        metrics = TierMetrics(
            tier_number=tier.tier_number,
            annual_revenue=to_decimal(tier.annual_revenue),
            annual_gross_margin=to_decimal(tier.annual_gross_margin),
            gross_profit=tier_gross_profit(tier),
            incentive_cost=tier_incentive_cost(tier),
            adjusted_gross_profit=adjusted_gross_profit(tier),
            adjusted_gross_margin=adjusted_gross_margin(tier),
        )
        if baseline is None:
            return metrics

        metrics.revenue_growth = growth_rate(metrics.annual_revenue, baseline.revenue)
        metrics.margin_growth = growth_rate(metrics.annual_gross_margin, baseline.margin)
        metrics.gross_profit_growth = growth_rate(metrics.gross_profit, baseline.gross_profit)
        metrics.incentive_cost_growth = growth_rate(metrics.incentive_cost, baseline.incentive_cost)
        metrics.adjusted_gross_profit_growth = growth_rate(
            metrics.adjusted_gross_profit, baseline.adjusted_gross_profit
        )
        metrics.adjusted_gross_margin_growth = growth_rate(
            metrics.adjusted_gross_margin, baseline.adjusted_gross_margin
        )
        return metrics


class AggregateMetricsCalculator:
    """Calculates multi-tier totals for the deal financial summary."""

    def calculate(self, tiers: list[DealTier]) -> AggregateMetrics:
        total_revenue = aggregate_across_tiers(tiers, lambda t: t.annual_revenue)
        total_gross_margin = aggregate_across_tiers(tiers, tier_gross_profit)
        total_incentive = aggregate_across_tiers(tiers, tier_incentive_cost)

        if total_revenue > 0:
            average_margin_percent = total_gross_margin / total_revenue * HUNDRED
        else:
            average_margin_percent = ZERO

        return AggregateMetrics(
            total_revenue=total_revenue,
            total_gross_margin=total_gross_margin,
            total_incentive_value=total_incentive,
            projected_net_value=total_gross_margin - total_incentive,
            average_gross_margin_percent=average_margin_percent,
        )


class DealAnalyzer:
    """Produces a one-line advisory summary of a deal structure."""

    HIGH_INCENTIVE_RATE = Decimal('15')  # percent of revenue
    LOW_MARGIN_PERCENT = Decimal('25')

    def __init__(self):
        self.aggregate_calculator = AggregateMetricsCalculator()
        self.tier_calculator = TierMetricsCalculator()

    def analyze(self, tiers: list[DealTier], baseline: HistoricalBaseline | None = None) -> str:
        if not tiers:
            return (
                "Unable to analyze deal structure with the current data. "
                "Please ensure all tier values are completed."
            )

        totals = self.aggregate_calculator.calculate(tiers)
        first_tier = self.tier_calculator.calculate(tiers[:1], baseline)[0]

        if totals.total_revenue > 0:
            incentive_rate = totals.total_incentive_value / totals.total_revenue * HUNDRED
        else:
            incentive_rate = ZERO

        if incentive_rate > self.HIGH_INCENTIVE_RATE:
            return (
                "This deal structure has a high incentive rate (>15%). Consider reviewing the "
                "incentive structure to ensure it aligns with profitability targets."
            )
        if totals.average_gross_margin_percent < self.LOW_MARGIN_PERCENT:
            return (
                "This deal structure shows lower than typical gross margins (<25%). "
                "Recommend reviewing pricing strategy or cost structure."
            )
        if first_tier.revenue_growth > 0 and first_tier.gross_profit_growth > 0:
            return "This deal structure shows positive growth in both revenue and profitability."
        if first_tier.revenue_growth < 0:
            return (
                "This deal structure shows a revenue decrease compared to last year. "
                "Recommend revisiting revenue targets before submission."
            )
        return "Deal structure appears balanced with reasonable growth projections and margin targets."
