"""
Deal Processor - Main Orchestrator

Coordinates deal evaluation through discrete, testable steps.
"""

from typing import Dict, Any

from .models import (
    HUNDRED, ApprovalRequirement, DealInput, DealParameters, DealResult, DealTier,
    HistoricalBaseline, ProcessingContext
)
from .validators import InputValidator
from .calculators import (
    TierMetricsCalculator,
    AggregateMetricsCalculator,
    BaselineResolver,
    ApprovalMatrixResolver,
    ApprovalSequenceResolver,
    ApprovalPipeline,
    StandardDealEvaluator,
    DealAnalyzer,
)
from .calculators.standard_deal import StandardDealInput
from .calculators.tier_metrics import forecasted_margin, growth_rate, weighted_gross_margin
from .output import (
    OutputBuilder, aggregate_to_dict, approval_to_dict, pipeline_status_to_dict, tier_metrics_to_dict
)
from .tiers import migrate_legacy_tiers


class DealProcessor:
    """
    Main orchestrator for deal evaluation.

    Implements a clear pipeline pattern:
    1. Validate Input
    2. Resolve Baseline
    3. Calculate Tier Metrics
    4. Calculate Aggregate Metrics
    5. Resolve Approval Level
    6. Resolve Approval Sequence
    7. Generate Approval Requirements
    8. Evaluate Standard Deal Criteria
    9. Analyze Deal
    10. Build Output
    """

    def __init__(self):
        self.validator = InputValidator()
        self.baseline_resolver = BaselineResolver()
        self.tier_calculator = TierMetricsCalculator()
        self.aggregate_calculator = AggregateMetricsCalculator()
        self.approval_resolver = ApprovalMatrixResolver()
        self.sequence_resolver = ApprovalSequenceResolver()
        self.pipeline = ApprovalPipeline()
        self.standard_deal_evaluator = StandardDealEvaluator()
        self.analyzer = DealAnalyzer()
        self.output_builder = OutputBuilder()

    def process(self, input_data: DealInput) -> DealResult:
        """
        Process a deal through the complete pipeline.

        Args:
            input_data: DealInput object

        Returns:
            DealResult with metrics, approval decision and workflow
        """
        # Step 1: Validate
        self.validator.validate(input_data)

        # Step 2: Build initial context
        ctx = ProcessingContext(deal=input_data, baseline=self._resolve_baseline(input_data))
        params = input_data.parameters

        # Step 3-4: Financial metrics
        ctx.tier_metrics = self.tier_calculator.calculate(input_data.tiers, ctx.baseline)
        ctx.aggregate = self.aggregate_calculator.calculate(input_data.tiers)
        ctx.forecasted_margin = forecasted_margin(input_data.tiers, ctx.baseline)

        # Step 5: Single most senior approver
        ctx.approval = self.approval_resolver.resolve(params)

        # Step 6-7: Sequential workflow
        ctx.approval_sequence = self.sequence_resolver.resolve(
            params.total_value,
            params.deal_type,
            params.sales_channel,
            params.has_legal_exceptions,
            params.has_financial_exceptions,
        )
        ctx.approval_requirements = self.pipeline.generate(
            input_data.deal_id or "draft", ctx.approval_sequence
        )

        # Step 8: Standard deal criteria
        standard_input = self._build_standard_deal_input(ctx)
        ctx.is_standard_deal = self.standard_deal_evaluator.is_standard(standard_input)
        ctx.non_standard_reasons = self.standard_deal_evaluator.reasons(standard_input)

        # Step 9: Advisory text
        ctx.analysis = self.analyzer.analyze(input_data.tiers, ctx.baseline)

        # Step 10: Build output
        return self.output_builder.build(ctx)

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a deal from raw dictionary input.

        Convenience method for API usage. Accepts legacy tier records under
        'legacy_tiers' when 'tiers' is absent.
        """
        tiers = None
        if not data.get("tiers") and data.get("legacy_tiers"):
            tiers = migrate_legacy_tiers(data["legacy_tiers"])
        input_data = DealInput.from_dict(data, tiers=tiers)
        result = self.process(input_data)
        return self._result_to_dict(result)

    def tier_metrics_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Per-tier and aggregate metrics only."""
        tiers = [DealTier.from_dict(t) for t in data.get("tiers") or []]
        self.validator.validate_tiers(tiers)

        baseline = data.get("baseline")
        baseline = HistoricalBaseline.from_dict(baseline) if baseline else None
        return {
            "tier_metrics": [
                tier_metrics_to_dict(m) for m in self.tier_calculator.calculate(tiers, baseline)
            ],
            "calculations": aggregate_to_dict(self.aggregate_calculator.calculate(tiers)),
        }

    def approval_level_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        params = DealParameters.from_dict(data)
        self.validator.validate_parameters(params)
        return approval_to_dict(self.approval_resolver.resolve(params))

    def approval_sequence_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        params = DealParameters.from_dict(data)
        self.validator.validate_parameters(params)
        sequence = self.sequence_resolver.resolve(
            params.total_value,
            params.deal_type,
            params.sales_channel,
            params.has_legal_exceptions,
            params.has_financial_exceptions,
        )
        return {"approvers": [step.value for step in sequence]}

    def approval_status_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Pipeline status for a list of approval requirements."""
        try:
            requirements = [ApprovalRequirement.from_dict(r) for r in data.get("requirements") or []]
        except KeyError as e:
            raise ValueError(f"Requirement is missing field: {e}") from e
        self.validator.validate_requirements(requirements)
        status = self.pipeline.status(requirements)
        return pipeline_status_to_dict(status, self.pipeline.follow_up(status))

    def _resolve_baseline(self, input_data: DealInput) -> HistoricalBaseline | None:
        """Explicit baseline first, then client records or channel defaults."""
        if input_data.baseline is not None:
            return input_data.baseline
        if input_data.parameters.sales_channel:
            return self.baseline_resolver.resolve(
                input_data.parameters.sales_channel, input_data.advertiser, input_data.agency
            )
        return None

    def _build_standard_deal_input(self, ctx: ProcessingContext) -> StandardDealInput:
        """Derive the standard-deal facts from tier data and the baseline."""
        deal = ctx.deal
        params = deal.parameters
        extras = deal.standard_deal_facts

        revenue_growth = margin_growth = None
        if ctx.baseline is not None:
            current_margin = weighted_gross_margin(deal.tiers)
            revenue_growth = growth_rate(ctx.aggregate.total_revenue, ctx.baseline.revenue) * HUNDRED
            margin_growth = growth_rate(current_margin, ctx.baseline.margin) * HUNDRED

        return StandardDealInput(
            total_value=params.total_value,
            contract_term=params.contract_term,
            annual_value=ctx.aggregate.total_revenue,
            deal_type=params.deal_type,
            sales_channel=params.sales_channel,
            has_trade_am_implications=bool(extras.get("has_trade_am_implications", False)),
            yearly_revenue_growth_rate=revenue_growth,
            forecasted_margin=ctx.forecasted_margin * HUNDRED,
            yearly_margin_growth_rate=margin_growth,
            added_value_benefits_cost=ctx.aggregate.total_incentive_value,
            analytics_tier=extras.get("analytics_tier"),
            requires_custom_marketing=bool(extras.get("requires_custom_marketing", False)),
        )

    def _result_to_dict(self, result: DealResult) -> Dict[str, Any]:
        """Convert DealResult to dictionary for API response."""
        return {
            "deal_summary": result.deal_summary,
            "tier_metrics": result.tier_metrics,
            "calculations": result.calculations,
            "approval": result.approval,
            "approval_sequence": result.approval_sequence,
            "approval_requirements": result.approval_requirements,
            "standard_deal": result.standard_deal,
            "analysis": result.analysis,
        }


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def process_deal_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Process a deal from Python dict and return Python dict.
    """
    processor = DealProcessor()
    return processor.process_from_dict(input_data)
