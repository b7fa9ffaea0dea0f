"""
Baseline Resolver

Picks the previous-year figures a deal is compared against.
"""

from decimal import Decimal

from ..models import HistoricalBaseline, margin_from_dict, to_decimal


class BaselineResolver:
    """Resolves a historical baseline from client records or channel defaults.

    Direct deals compare against the advertiser's history; agency and
    holding-company deals compare against the agency's. Any figure missing
    from the record falls back to the channel default.
    """

    ADVERTISER_DEFAULTS = HistoricalBaseline(
        revenue=Decimal('2500000'), margin=Decimal('0.185'), incentive_cost=Decimal('45000')
    )
    AGENCY_DEFAULTS = HistoricalBaseline(
        revenue=Decimal('620000'), margin=Decimal('0.315'), incentive_cost=Decimal('22000')
    )
    INDUSTRY_DEFAULTS = HistoricalBaseline(
        revenue=Decimal('2500000'), margin=Decimal('0.25'), incentive_cost=Decimal('35000')
    )

    AGENCY_CHANNELS = ('holding_company', 'independent_agency')

    def resolve(
        self,
        sales_channel: str | None,
        advertiser: dict | None = None,
        agency: dict | None = None,
    ) -> HistoricalBaseline:
        if sales_channel == 'client_direct' and advertiser is not None:
            return self._from_record(advertiser, self.ADVERTISER_DEFAULTS)
        if sales_channel in self.AGENCY_CHANNELS and agency is not None:
            return self._from_record(agency, self.AGENCY_DEFAULTS)
        return self.INDUSTRY_DEFAULTS

    def _from_record(self, record: dict, defaults: HistoricalBaseline) -> HistoricalBaseline:
        revenue = to_decimal(record.get('previous_year_revenue'))
        incentive_cost = to_decimal(record.get('previous_year_incentive_cost'))
        margin = margin_from_dict(record, 'previous_year_margin')
        return HistoricalBaseline(
            revenue=revenue or defaults.revenue,
            margin=margin or defaults.margin,
            incentive_cost=incentive_cost or defaults.incentive_cost,
        )
