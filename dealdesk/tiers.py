"""
Tier Management

Add, remove and update deal tiers while keeping tier numbers contiguous,
validate tier rows, and migrate legacy tier records.
"""

from dataclasses import dataclass, replace
from decimal import Decimal

from .models import HUNDRED, ZERO, DealTier, normalize_margin, to_decimal

MAX_TIERS = 5
MIN_TIERS = 1
DEFAULT_GROSS_MARGIN = Decimal('0.35')

DEFAULT_CATEGORY = 'Financial'
DEFAULT_SUB_CATEGORY = 'Discounts'
DEFAULT_INCENTIVE_OPTION = 'Volume Discount'


@dataclass
class TierValidationError:
    tier_number: int
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"tier_number": self.tier_number, "field": self.field, "message": self.message}


def new_tier(tier_number: int) -> DealTier:
    return DealTier(
        tier_number=tier_number,
        annual_revenue=ZERO,
        annual_gross_margin=DEFAULT_GROSS_MARGIN,
        incentive_value=ZERO,
        category_name=DEFAULT_CATEGORY,
        sub_category_name=DEFAULT_SUB_CATEGORY,
        incentive_option=DEFAULT_INCENTIVE_OPTION,
    )


def renumber_tiers(tiers: list[DealTier]) -> list[DealTier]:
    """Return copies of the tiers numbered 1..n in their current order."""
    return [replace(tier, tier_number=index) for index, tier in enumerate(tiers, start=1)]


def add_tier(tiers: list[DealTier], max_tiers: int = MAX_TIERS) -> list[DealTier]:
    if len(tiers) >= max_tiers:
        raise ValueError(f"Maximum of {max_tiers} tiers allowed")
    return renumber_tiers(tiers) + [new_tier(len(tiers) + 1)]


def remove_tier(tiers: list[DealTier], tier_number: int, min_tiers: int = MIN_TIERS) -> list[DealTier]:
    if len(tiers) <= min_tiers:
        raise ValueError(f"Minimum of {min_tiers} tier(s) required")
    return renumber_tiers([t for t in tiers if t.tier_number != tier_number])


def update_tier(tiers: list[DealTier], tier_number: int, /, **updates) -> list[DealTier]:
    """Apply field updates to one tier. The tier number itself is not editable."""
    updates.pop('tier_number', None)
    if 'annual_gross_margin' in updates:
        updates['annual_gross_margin'] = normalize_margin(updates['annual_gross_margin'])
    for key in ('annual_revenue', 'incentive_value'):
        if key in updates:
            updates[key] = to_decimal(updates[key])
    return [replace(t, **updates) if t.tier_number == tier_number else t for t in tiers]


def validate_tiers(tiers: list[DealTier]) -> list[TierValidationError]:
    errors = []

    for tier in tiers:
        if tier.annual_revenue < 0:
            errors.append(TierValidationError(
                tier.tier_number, 'annual_revenue', 'Annual revenue cannot be negative'
            ))
        if tier.annual_gross_margin < 0 or tier.annual_gross_margin > 1:
            errors.append(TierValidationError(
                tier.tier_number, 'annual_gross_margin', 'Gross margin must be between 0 and 1 (decimal)'
            ))
        if tier.incentive_value < 0 or any(line.value < 0 for line in tier.incentives):
            errors.append(TierValidationError(
                tier.tier_number, 'incentive_value', 'Incentive value cannot be negative'
            ))

    numbers = [tier.tier_number for tier in tiers]
    if numbers != list(range(1, len(tiers) + 1)):
        errors.append(TierValidationError(
            0, 'tier_number', 'Tier numbers must be unique and contiguous starting at 1'
        ))

    return errors


LEGACY_OPTIONS = {
    'rebate': ('Discounts', 'Volume Discount'),
    'discount': ('Discounts', 'Volume Discount'),
    'bonus': ('Bonuses', 'Growth Bonus'),
}


def migrate_legacy_tier(legacy: dict) -> DealTier:
    """Convert an old-format tier record into a DealTier.

    Old records carried margin as a percentage and incentives either as an
    amount or as a percentage of revenue.
    """
    if legacy.get('annual_gross_margin_percent') is not None:
        margin = normalize_margin(legacy['annual_gross_margin_percent'], is_percent=True)
    elif legacy.get('annual_gross_margin') is not None:
        margin = normalize_margin(legacy['annual_gross_margin'])
    else:
        margin = DEFAULT_GROSS_MARGIN

    revenue = to_decimal(legacy.get('annual_revenue'))
    incentive = to_decimal(legacy.get('incentive_amount'))
    if not incentive and legacy.get('incentive_percentage'):
        incentive = to_decimal(legacy['incentive_percentage']) / HUNDRED * revenue

    sub_category, option = LEGACY_OPTIONS.get(
        legacy.get('incentive_type'), (DEFAULT_SUB_CATEGORY, DEFAULT_INCENTIVE_OPTION)
    )

    return DealTier(
        tier_number=int(to_decimal(legacy.get('tier_number'))),
        annual_revenue=revenue,
        annual_gross_margin=margin,
        incentive_value=incentive,
        category_name=DEFAULT_CATEGORY,
        sub_category_name=sub_category,
        incentive_option=option,
        incentive_notes=legacy.get('incentive_notes') or '',
    )


def migrate_legacy_tiers(legacy_tiers: list[dict]) -> list[DealTier]:
    return [migrate_legacy_tier(t) for t in legacy_tiers]
