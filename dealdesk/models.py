"""
Domain Models for the Deal Desk Engine

These dataclasses provide type-safe representations of all business entities.
All monetary values and ratios use Decimal for precision.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    """Coerce any input to a finite Decimal, defaulting to zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def normalize_margin(value, is_percent: bool = False) -> Decimal:
    """Normalize a gross margin to a 0-1 fraction.

    Values above 1 are read as percentages (35 -> 0.35).
    """
    margin = to_decimal(value)
    if is_percent or margin > 1:
        return margin / HUNDRED
    return margin


def margin_from_dict(data: dict, key: str, default=ZERO) -> Decimal:
    percent_key = f"{key}_percent"
    if data.get(percent_key) is not None:
        return normalize_margin(data[percent_key], is_percent=True)
    if data.get(key) is None:
        return to_decimal(default)
    return normalize_margin(data[key])


# =============================================================================
# REFERENCE DATA
# =============================================================================


class ApproverLevel(str, Enum):
    """Approver roles used by the approval matrix and the approval workflow."""

    # Matrix levels (single most-senior approver)
    MANAGER = "Manager"
    DIRECTOR = "Director"
    VP = "VP"
    SVP = "SVP"
    C_LEVEL = "CLevel"

    # Workflow steps (ordered approval sequence)
    REGIONAL_DIRECTOR = "RegionalDirector"
    FINANCE = "Finance"
    LEGAL = "Legal"
    MD = "MD"
    EXECUTIVE = "Executive"


@dataclass(frozen=True)
class ApprovalRule:
    """Static descriptor of an approver role."""

    level: ApproverLevel
    title: str
    description: str
    estimated_time: str
    order: int

    def to_dict(self) -> dict:
        return {
            "level": self.level.value,
            "title": self.title,
            "description": self.description,
            "estimated_time": self.estimated_time,
            "order": self.order,
        }


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass
class IncentiveLine:
    """One itemized incentive attached to a tier."""

    category: str
    sub_category: str
    option: str
    value: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "IncentiveLine":
        return cls(
            category=data.get("category", ""),
            sub_category=data.get("sub_category", ""),
            option=data.get("option", ""),
            value=to_decimal(data.get("value")),
        )


@dataclass
class DealTier:
    """A single row of a tiered deal structure."""

    tier_number: int
    annual_revenue: Decimal = ZERO
    annual_gross_margin: Decimal = ZERO  # 0-1 fraction
    incentive_value: Decimal = ZERO
    incentives: list[IncentiveLine] = field(default_factory=list)
    category_name: str = ""
    sub_category_name: str = ""
    incentive_option: str = ""
    incentive_notes: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "DealTier":
        incentives = [IncentiveLine.from_dict(i) for i in data.get("incentives") or []]
        return cls(
            tier_number=int(to_decimal(data.get("tier_number"))),
            annual_revenue=to_decimal(data.get("annual_revenue")),
            annual_gross_margin=margin_from_dict(data, "annual_gross_margin"),
            incentive_value=to_decimal(data.get("incentive_value")),
            incentives=incentives,
            category_name=data.get("category_name", ""),
            sub_category_name=data.get("sub_category_name", ""),
            incentive_option=data.get("incentive_option", ""),
            incentive_notes=data.get("incentive_notes") or "",
        )


@dataclass
class HistoricalBaseline:
    """Previous-year figures used for year-over-year growth rates."""

    revenue: Decimal = ZERO
    margin: Decimal = ZERO  # 0-1 fraction
    incentive_cost: Decimal = ZERO

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue * self.margin

    @property
    def adjusted_gross_profit(self) -> Decimal:
        return self.gross_profit - self.incentive_cost

    @property
    def adjusted_gross_margin(self) -> Decimal:
        if self.revenue == 0:
            return ZERO
        return self.adjusted_gross_profit / self.revenue

    @classmethod
    def from_dict(cls, data: dict) -> "HistoricalBaseline":
        return cls(
            revenue=to_decimal(data.get("revenue")),
            margin=margin_from_dict(data, "margin"),
            incentive_cost=to_decimal(data.get("incentive_cost")),
        )


@dataclass
class DealParameters:
    """Inputs to the approval resolvers, projected from a deal record."""

    total_value: Decimal
    has_non_standard_terms: bool = False
    discount_percentage: Decimal = ZERO  # percentage points, 25 = 25%
    contract_term: int = 12  # months
    deal_type: str | None = None
    sales_channel: str | None = None
    has_legal_exceptions: bool = False
    has_financial_exceptions: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "DealParameters":
        return cls(
            total_value=to_decimal(data.get("total_value")),
            has_non_standard_terms=bool(data.get("has_non_standard_terms", False)),
            discount_percentage=to_decimal(data.get("discount_percentage")),
            contract_term=int(to_decimal(data.get("contract_term", 12))),
            deal_type=data.get("deal_type"),
            sales_channel=data.get("sales_channel"),
            has_legal_exceptions=bool(data.get("has_legal_exceptions", False)),
            has_financial_exceptions=bool(data.get("has_financial_exceptions", False)),
        )


@dataclass
class DealInput:
    """Complete input for processing a deal."""

    deal_name: str
    tiers: list[DealTier]
    parameters: DealParameters
    deal_id: str | None = None
    baseline: HistoricalBaseline | None = None
    advertiser: dict | None = None
    agency: dict | None = None
    # has_trade_am_implications, analytics_tier, requires_custom_marketing
    standard_deal_facts: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict, tiers: list[DealTier] | None = None) -> "DealInput":
        if tiers is None:
            tiers = [DealTier.from_dict(t) for t in data.get("tiers") or []]
        baseline = data.get("baseline")
        params = dict(data.get("approval") or {})
        if params.get("total_value") is None:
            # Default to total annual revenue across tiers
            params["total_value"] = sum((t.annual_revenue for t in tiers), ZERO)
        return cls(
            deal_name=data.get("deal_name", "Unnamed Deal"),
            tiers=tiers,
            parameters=DealParameters.from_dict(params),
            deal_id=data.get("deal_id"),
            baseline=HistoricalBaseline.from_dict(baseline) if baseline else None,
            advertiser=data.get("advertiser"),
            agency=data.get("agency"),
            standard_deal_facts=dict(data.get("deal_profile") or {}),
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass
class TierMetrics:
    """Derived financial figures for one tier."""

    tier_number: int
    annual_revenue: Decimal = ZERO
    annual_gross_margin: Decimal = ZERO
    gross_profit: Decimal = ZERO
    incentive_cost: Decimal = ZERO
    adjusted_gross_profit: Decimal = ZERO
    adjusted_gross_margin: Decimal = ZERO
    revenue_growth: Decimal = ZERO
    margin_growth: Decimal = ZERO
    gross_profit_growth: Decimal = ZERO
    incentive_cost_growth: Decimal = ZERO
    adjusted_gross_profit_growth: Decimal = ZERO
    adjusted_gross_margin_growth: Decimal = ZERO


@dataclass
class AggregateMetrics:
    """Multi-tier totals."""

    total_revenue: Decimal = ZERO
    total_gross_margin: Decimal = ZERO
    total_incentive_value: Decimal = ZERO
    projected_net_value: Decimal = ZERO
    average_gross_margin_percent: Decimal = ZERO


@dataclass
class ApprovalDecision:
    """Result of resolving the single required approver level."""

    level: ApproverLevel
    approver: ApprovalRule
    message: str
    severity: str  # 'info', 'warning' or 'alert'
    reasons: list[str] = field(default_factory=list)
    value_level: ApproverLevel | None = None
    discount_level: ApproverLevel | None = None
    contract_term_level: ApproverLevel | None = None


@dataclass
class ApprovalRequirement:
    """One step of a deal's approval workflow."""

    id: str
    deal_id: str
    approver: ApproverLevel
    status: str = "pending"  # 'pending', 'approved' or 'revision_requested'
    dependencies: list[str] = field(default_factory=list)
    estimated_time: str = ""
    comments: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ApprovalRequirement":
        return cls(
            id=data["id"],
            deal_id=str(data.get("deal_id", "")),
            approver=ApproverLevel(data["approver"]),
            status=data.get("status", "pending"),
            dependencies=list(data.get("dependencies") or []),
            estimated_time=data.get("estimated_time", ""),
            comments=data.get("comments"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "deal_id": self.deal_id,
            "approver": self.approver.value,
            "status": self.status,
            "dependencies": list(self.dependencies),
            "estimated_time": self.estimated_time,
            "comments": self.comments,
        }


@dataclass
class PipelineStatus:
    """Progress of a deal through its approval workflow."""

    deal_id: str
    overall_status: str  # 'pending', 'in_progress', 'completed', 'revision_requested'
    current_step: ApproverLevel | None = None
    progress: int = 0
    completed_count: int = 0
    total_count: int = 0
    bottlenecks: list[ApprovalRequirement] = field(default_factory=list)
    next_actions: list[str] = field(default_factory=list)


@dataclass
class ProcessingContext:
    """
    Holds all intermediate state during deal processing.
    This is the "bag" that flows through the pipeline.
    """

    # Input (immutable during processing)
    deal: DealInput
    baseline: HistoricalBaseline | None = None

    # Step results (populated as we go)
    tier_metrics: list[TierMetrics] = field(default_factory=list)
    aggregate: AggregateMetrics = field(default_factory=AggregateMetrics)
    forecasted_margin: Decimal = ZERO
    approval: ApprovalDecision | None = None
    approval_sequence: list[ApproverLevel] = field(default_factory=list)
    approval_requirements: list[ApprovalRequirement] = field(default_factory=list)
    is_standard_deal: bool = False
    non_standard_reasons: list[str] = field(default_factory=list)

    # Final outputs
    analysis: str = ""


@dataclass
class DealResult:
    """Final output of deal processing."""

    deal_summary: dict
    tier_metrics: list
    calculations: dict
    approval: dict
    approval_sequence: list
    approval_requirements: list
    standard_deal: dict
    analysis: str
