"""
Output Builder

Constructs the final API response from processing context.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext

from .models import (
    AggregateMetrics,
    ApprovalDecision,
    DealResult,
    PipelineStatus,
    ProcessingContext,
    TierMetrics,
)
from .calculators.approval_sequence import WORKFLOW_STEPS


def _quantize(value: Decimal, exponent: Decimal) -> Decimal:
    """Half-up rounding with enough precision for any finite magnitude."""
    value = Decimal(value)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - exponent.adjusted() + 2)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return float(_quantize(value, Decimal('0.01')))


def to_rate(value: Decimal) -> float:
    """Convert a Decimal ratio to float with 4 decimal places."""
    return float(_quantize(value, Decimal('0.0001')))


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"${value:,.2f}"


def _pct(value) -> str:
    """Format a fraction as a percentage string for descriptions."""
    return f"{float(value) * 100:.1f}%"


def tier_metrics_to_dict(metrics: TierMetrics) -> dict:
    return {
        "tier_number": metrics.tier_number,
        "annual_revenue": to_money(metrics.annual_revenue),
        "annual_gross_margin": to_rate(metrics.annual_gross_margin),
        "gross_profit": to_money(metrics.gross_profit),
        "incentive_cost": to_money(metrics.incentive_cost),
        "adjusted_gross_profit": to_money(metrics.adjusted_gross_profit),
        "adjusted_gross_margin": to_rate(metrics.adjusted_gross_margin),
        "growth": {
            "revenue": to_rate(metrics.revenue_growth),
            "margin": to_rate(metrics.margin_growth),
            "gross_profit": to_rate(metrics.gross_profit_growth),
            "incentive_cost": to_rate(metrics.incentive_cost_growth),
            "adjusted_gross_profit": to_rate(metrics.adjusted_gross_profit_growth),
            "adjusted_gross_margin": to_rate(metrics.adjusted_gross_margin_growth),
        },
    }


def aggregate_to_dict(aggregate: AggregateMetrics) -> dict:
    """Build the calculations section with value and dynamic description for each field."""
    total_revenue = to_money(aggregate.total_revenue)
    total_gross_margin = to_money(aggregate.total_gross_margin)
    total_incentive = to_money(aggregate.total_incentive_value)

    return {
        "total_revenue": {
            "value": total_revenue,
            "description": "Sum of annual revenue across all tiers"
        },
        "total_gross_margin": {
            "value": total_gross_margin,
            "description": "Sum of annual revenue × gross margin across all tiers"
        },
        "total_incentive_value": {
            "value": total_incentive,
            "description": "Sum of incentive cost across all tiers"
        },
        "projected_net_value": {
            "value": to_money(aggregate.projected_net_value),
            "description": f"gross margin ({_fmt(total_gross_margin)}) - incentives ({_fmt(total_incentive)}) = {_fmt(to_money(aggregate.projected_net_value))}"
        },
        "average_gross_margin_percent": {
            "value": to_money(aggregate.average_gross_margin_percent),
            "description": f"Revenue-weighted gross margin: {_fmt(total_gross_margin)} / {_fmt(total_revenue)}" if aggregate.total_revenue > 0 else "No revenue entered, margin defaults to 0%"
        },
    }


def approval_to_dict(decision: ApprovalDecision) -> dict:
    return {
        "level": decision.level.value,
        "title": decision.approver.title,
        "message": decision.message,
        "severity": decision.severity,
        "estimated_time": decision.approver.estimated_time,
        "reasons": list(decision.reasons),
        "factors": {
            "value": decision.value_level.value if decision.value_level else None,
            "discount": decision.discount_level.value if decision.discount_level else None,
            "contract_term": decision.contract_term_level.value if decision.contract_term_level else None,
        },
    }


def pipeline_status_to_dict(status: PipelineStatus, follow_ups: list[str]) -> dict:
    return {
        "deal_id": status.deal_id,
        "overall_status": status.overall_status,
        "current_step": status.current_step.value if status.current_step else None,
        "progress": status.progress,
        "completed_count": status.completed_count,
        "total_count": status.total_count,
        "bottlenecks": [r.to_dict() for r in status.bottlenecks],
        "next_actions": list(status.next_actions),
        "follow_up": follow_ups,
    }


class OutputBuilder:
    """Builds the final output response."""

    def build(self, ctx: ProcessingContext) -> DealResult:
        """Construct the complete deal result from processing context."""
        return DealResult(
            deal_summary=self._build_deal_summary(ctx),
            tier_metrics=[tier_metrics_to_dict(m) for m in ctx.tier_metrics],
            calculations=self._build_calculations(ctx),
            approval=approval_to_dict(ctx.approval),
            approval_sequence=self._build_sequence(ctx),
            approval_requirements=[r.to_dict() for r in ctx.approval_requirements],
            standard_deal={
                "is_standard": ctx.is_standard_deal,
                "reasons": list(ctx.non_standard_reasons),
            },
            analysis=ctx.analysis,
        )

    def _build_deal_summary(self, ctx: ProcessingContext) -> dict:
        """Build deal summary section."""
        deal = ctx.deal
        params = deal.parameters
        return {
            "deal_id": deal.deal_id,
            "deal_name": deal.deal_name,
            "tier_count": len(deal.tiers),
            "total_value": to_money(params.total_value),
            "discount_percentage": to_money(params.discount_percentage),
            "contract_term": params.contract_term,
            "deal_type": params.deal_type,
            "sales_channel": params.sales_channel,
            "has_baseline": ctx.baseline is not None,
        }

    def _build_calculations(self, ctx: ProcessingContext) -> dict:
        calculations = aggregate_to_dict(ctx.aggregate)
        calculations["forecasted_margin"] = {
            "value": to_rate(ctx.forecasted_margin),
            "description": f"Current margin projected forward with last year's margin trend: {_pct(ctx.forecasted_margin)}" if ctx.baseline else "No baseline available, forecast equals current weighted margin"
        }
        return calculations

    def _build_sequence(self, ctx: ProcessingContext) -> list:
        return [
            {
                "step": step.value,
                "title": WORKFLOW_STEPS[step].title,
                "estimated_time": WORKFLOW_STEPS[step].estimated_time,
            }
            for step in ctx.approval_sequence
        ]
