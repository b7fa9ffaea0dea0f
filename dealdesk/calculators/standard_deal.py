"""
Standard Deal Evaluator

Checks a deal against the published "standard deal" criteria and explains
every criterion it misses.
"""

from dataclasses import dataclass
from decimal import Decimal

from ..models import ZERO, to_decimal


@dataclass(frozen=True)
class StandardDealCriteria:
    """Bounds a deal must satisfy to be considered standard."""

    deal_type: str = 'grow'
    sales_channels: tuple[str, ...] = ('independent_agency', 'client_direct')
    projected_annual_spend_min: Decimal = Decimal('1000000')
    projected_annual_spend_max: Decimal = Decimal('3000000')
    yearly_revenue_growth_rate: Decimal = Decimal('25')  # percent, minimum
    forecasted_margin: Decimal = Decimal('30')  # percent, minimum
    yearly_margin_growth_rate: Decimal = Decimal('-5')  # percent, minimum
    added_value_benefits_cost: Decimal = Decimal('100000')  # maximum
    analytics_tier: str = 'silver'


@dataclass
class StandardDealInput:
    """Deal facts evaluated against the standard criteria.

    Growth rates and forecasted margin are percentages (25 = 25%).
    """

    total_value: Decimal
    contract_term: int = 12
    annual_value: Decimal | None = None
    deal_type: str | None = None
    sales_channel: str | None = None
    has_trade_am_implications: bool = False
    yearly_revenue_growth_rate: Decimal | None = None
    forecasted_margin: Decimal | None = None
    yearly_margin_growth_rate: Decimal | None = None
    added_value_benefits_cost: Decimal = ZERO
    analytics_tier: str | None = None
    requires_custom_marketing: bool = False

    @property
    def projected_annual_value(self) -> Decimal:
        if self.annual_value:
            return to_decimal(self.annual_value)
        if self.contract_term <= 0:
            return to_decimal(self.total_value)
        return to_decimal(self.total_value) / (Decimal(self.contract_term) / Decimal('12'))

    @classmethod
    def from_dict(cls, data: dict) -> "StandardDealInput":
        def optional(key):
            return to_decimal(data[key]) if data.get(key) is not None else None

        return cls(
            total_value=to_decimal(data.get('total_value')),
            contract_term=int(to_decimal(data.get('contract_term', 12))),
            annual_value=optional('annual_value'),
            deal_type=data.get('deal_type'),
            sales_channel=data.get('sales_channel'),
            has_trade_am_implications=bool(data.get('has_trade_am_implications', False)),
            yearly_revenue_growth_rate=optional('yearly_revenue_growth_rate'),
            forecasted_margin=optional('forecasted_margin'),
            yearly_margin_growth_rate=optional('yearly_margin_growth_rate'),
            added_value_benefits_cost=to_decimal(data.get('added_value_benefits_cost')),
            analytics_tier=data.get('analytics_tier'),
            requires_custom_marketing=bool(data.get('requires_custom_marketing', False)),
        )


class StandardDealEvaluator:
    """Evaluates the full standard deal criteria."""

    def __init__(self, criteria: StandardDealCriteria | None = None):
        self.criteria = criteria or StandardDealCriteria()

    def is_standard(self, deal: StandardDealInput) -> bool:
        required = (
            deal.deal_type,
            deal.sales_channel,
            deal.yearly_revenue_growth_rate,
            deal.forecasted_margin,
            deal.yearly_margin_growth_rate,
        )
        if any(value is None for value in required):
            return False
        return not self.reasons(deal)

    def reasons(self, deal: StandardDealInput) -> list[str]:
        """Human-readable reason for every criterion the deal fails."""
        c = self.criteria
        reasons = []

        if (deal.deal_type or '').lower() != c.deal_type:
            reasons.append("Deal type is not 'Grow'")
        if deal.sales_channel not in c.sales_channels:
            reasons.append('Sales channel is not Independent Agency or Client Direct')
        if deal.has_trade_am_implications:
            reasons.append('Has Trading & AM resource implications')

        annual = deal.projected_annual_value
        if annual < c.projected_annual_spend_min or annual > c.projected_annual_spend_max:
            reasons.append('Projected annual spend not between $1M-$3M')

        if to_decimal(deal.yearly_revenue_growth_rate) < c.yearly_revenue_growth_rate:
            reasons.append('Yearly revenue growth rate < 25%')
        if to_decimal(deal.forecasted_margin) < c.forecasted_margin:
            reasons.append('Forecasted margin < 30%')
        if to_decimal(deal.yearly_margin_growth_rate) < c.yearly_margin_growth_rate:
            reasons.append('Yearly margin growth rate < -5%')
        if to_decimal(deal.added_value_benefits_cost) > c.added_value_benefits_cost:
            reasons.append('Added value benefits cost > $100K')
        if (deal.analytics_tier or '').lower() != c.analytics_tier:
            reasons.append('Analytics solutions tier is not Silver')
        if deal.requires_custom_marketing:
            reasons.append('Requires custom marketing/PR')

        return reasons
