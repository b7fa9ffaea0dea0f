"""
Approval Matrix Resolver

Determines the single most senior approver a deal needs, from deal value,
discount depth and contract length.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from ..models import ApprovalDecision, ApprovalRule, ApproverLevel, DealParameters, to_decimal

APPROVAL_LEVELS: dict[ApproverLevel, ApprovalRule] = {
    ApproverLevel.MANAGER: ApprovalRule(
        level=ApproverLevel.MANAGER,
        title='Sales Manager',
        description='Standard deals within delegated sales authority',
        estimated_time='1 business day',
        order=1,
    ),
    ApproverLevel.DIRECTOR: ApprovalRule(
        level=ApproverLevel.DIRECTOR,
        title='Sales Director',
        description='Mid-sized deals or small deals with special terms',
        estimated_time='1-2 business days',
        order=2,
    ),
    ApproverLevel.VP: ApprovalRule(
        level=ApproverLevel.VP,
        title='Vice President',
        description='Larger deals, deeper discounts or longer commitments',
        estimated_time='2-3 business days',
        order=3,
    ),
    ApproverLevel.SVP: ApprovalRule(
        level=ApproverLevel.SVP,
        title='Senior Vice President',
        description='High-value deals and multi-year commitments',
        estimated_time='3-5 business days',
        order=4,
    ),
    ApproverLevel.C_LEVEL: ApprovalRule(
        level=ApproverLevel.C_LEVEL,
        title='C-Level Executive',
        description='Strategic deals above $1M or with exceptional discounts',
        estimated_time='5-7 business days',
        order=5,
    ),
}


@dataclass(frozen=True)
class ValueBand:
    """A band of the deal-value axis. max=None means unbounded."""

    min: Decimal
    max: Decimal | None
    standard_terms: ApproverLevel
    non_standard_terms: ApproverLevel
    high_discount: ApproverLevel


@dataclass(frozen=True)
class Threshold:
    """Minimum value at which a level is required."""

    minimum: Decimal
    level: ApproverLevel


@dataclass
class ApprovalMatrix:
    """Ordered threshold tables that drive the resolver."""

    value_bands: list[ValueBand]
    discount_thresholds: list[Threshold]
    contract_term_thresholds: list[Threshold]
    levels: dict[ApproverLevel, ApprovalRule] = field(default_factory=lambda: dict(APPROVAL_LEVELS))
    high_discount_threshold: Decimal = Decimal('20')  # strictly greater than

    @property
    def lowest_level(self) -> ApproverLevel:
        return min(self.levels.values(), key=lambda rule: rule.order).level

    @property
    def highest_level(self) -> ApproverLevel:
        return max(self.levels.values(), key=lambda rule: rule.order).level

    def order_of(self, level: ApproverLevel) -> int:
        return self.levels[level].order


DEFAULT_MATRIX = ApprovalMatrix(
    value_bands=[
        ValueBand(Decimal('0'), Decimal('50000'),
                  ApproverLevel.MANAGER, ApproverLevel.DIRECTOR, ApproverLevel.DIRECTOR),
        ValueBand(Decimal('50001'), Decimal('250000'),
                  ApproverLevel.DIRECTOR, ApproverLevel.VP, ApproverLevel.VP),
        ValueBand(Decimal('250001'), Decimal('1000000'),
                  ApproverLevel.SVP, ApproverLevel.SVP, ApproverLevel.C_LEVEL),
        ValueBand(Decimal('1000001'), None,
                  ApproverLevel.C_LEVEL, ApproverLevel.C_LEVEL, ApproverLevel.C_LEVEL),
    ],
    discount_thresholds=[
        Threshold(Decimal('10'), ApproverLevel.DIRECTOR),
        Threshold(Decimal('20'), ApproverLevel.VP),
        Threshold(Decimal('30'), ApproverLevel.SVP),
        Threshold(Decimal('40'), ApproverLevel.C_LEVEL),
    ],
    contract_term_thresholds=[
        Threshold(Decimal('24'), ApproverLevel.DIRECTOR),
        Threshold(Decimal('36'), ApproverLevel.VP),
        Threshold(Decimal('60'), ApproverLevel.SVP),
    ],
)


def _fmt(value) -> str:
    """Format a number as currency string for messages."""
    return f"${value:,.0f}"


def _fmt_number(value) -> str:
    return f"{to_decimal(value).normalize():f}"


def _join_reasons(reasons: list[str]) -> str:
    if len(reasons) == 1:
        return reasons[0]
    if len(reasons) == 2:
        return ' and '.join(reasons)
    return f"{', '.join(reasons[:-1])}, and {reasons[-1]}"


class ApprovalMatrixResolver:
    """Evaluates the approval matrix and returns the most senior level triggered."""

    def __init__(self, matrix: ApprovalMatrix | None = None):
        self.matrix = matrix or DEFAULT_MATRIX

    def is_high_discount(self, discount_percentage) -> bool:
        return to_decimal(discount_percentage) > self.matrix.high_discount_threshold

    def find_value_band(self, total_value) -> ValueBand | None:
        """Return the first band whose upper bound covers the value.

        Values below the first band's minimum match no band.
        """
        value = max(to_decimal(total_value), Decimal('0'))
        bands = self.matrix.value_bands
        if not bands or value < bands[0].min:
            return None
        for band in bands:
            if band.max is None or value <= band.max:
                return band
        return None

    def value_based_level(self, total_value, has_non_standard_terms: bool, high_discount: bool) -> ApproverLevel:
        band = self.find_value_band(total_value)
        if band is None:
            # Outside every band of a custom matrix
            return self.matrix.highest_level
        if high_discount:
            return band.high_discount
        return band.non_standard_terms if has_non_standard_terms else band.standard_terms

    def discount_based_level(self, discount_percentage) -> ApproverLevel:
        return self._threshold_level(self.matrix.discount_thresholds, discount_percentage)

    def contract_term_based_level(self, contract_term) -> ApproverLevel:
        return self._threshold_level(self.matrix.contract_term_thresholds, contract_term)

    def higher_level(self, first: ApproverLevel, second: ApproverLevel) -> ApproverLevel:
        return first if self.matrix.order_of(first) >= self.matrix.order_of(second) else second

    def resolve(self, params: DealParameters) -> ApprovalDecision:
        """
        Determine the required approver level for a deal.

        Steps:
        1. Value band lookup (column chosen by terms and discount)
        2. Discount threshold lookup
        3. Contract-term threshold lookup
        4. Highest of the three by level order
        5. Message and severity
        """
        high_discount = self.is_high_discount(params.discount_percentage)

        value_level = self.value_based_level(params.total_value, params.has_non_standard_terms, high_discount)
        discount_level = self.discount_based_level(params.discount_percentage)
        term_level = self.contract_term_based_level(params.contract_term)

        level = self.higher_level(self.higher_level(value_level, discount_level), term_level)
        approver = self.matrix.levels[level]
        reasons = self._build_reasons(params, level, value_level, discount_level, term_level, high_discount)

        return ApprovalDecision(
            level=level,
            approver=approver,
            message=self._build_message(approver, reasons),
            severity=self.severity_for(level),
            reasons=reasons,
            value_level=value_level,
            discount_level=discount_level,
            contract_term_level=term_level,
        )

    def severity_for(self, level: ApproverLevel) -> str:
        order = self.matrix.order_of(level)
        if order <= 2:
            return 'info'
        if order <= 4:
            return 'warning'
        return 'alert'

    def _threshold_level(self, thresholds: list[Threshold], value) -> ApproverLevel:
        amount = to_decimal(value)
        for threshold in sorted(thresholds, key=lambda t: t.minimum, reverse=True):
            if amount >= threshold.minimum:
                return threshold.level
        return self.matrix.lowest_level

    def _build_reasons(
        self,
        params: DealParameters,
        level: ApproverLevel,
        value_level: ApproverLevel,
        discount_level: ApproverLevel,
        term_level: ApproverLevel,
        high_discount: bool,
    ) -> list[str]:
        """List the factors that pushed the deal to the resolved level."""
        if level == self.matrix.lowest_level:
            return []

        band = self.find_value_band(params.total_value)
        base_level = band.standard_terms if band else self.matrix.highest_level
        column_raised = value_level == level and value_level != base_level

        reasons = []
        if base_level == level:
            reasons.append(f"deal value of {_fmt(params.total_value)}")
        if column_raised and params.has_non_standard_terms and not high_discount:
            reasons.append('non-standard terms')
        if (column_raised and high_discount) or discount_level == level:
            reasons.append(f"discount of {_fmt_number(params.discount_percentage)}%")
        if term_level == level:
            reasons.append(f"contract term of {params.contract_term} months")
        return reasons

    def _build_message(self, approver: ApprovalRule, reasons: list[str]) -> str:
        message = f"This deal requires {approver.title} approval"
        if reasons:
            message += f" due to {_join_reasons(reasons)}. "
        else:
            message += '. '
        message += f"Estimated approval time: {approver.estimated_time}."
        return message


def resolve_approval_level(params: DealParameters, matrix: ApprovalMatrix | None = None) -> ApprovalDecision:
    """Convenience wrapper around ApprovalMatrixResolver."""
    return ApprovalMatrixResolver(matrix).resolve(params)
