"""
Approval Sequence Resolver

Builds the ordered list of approvers a deal passes through. This is a
separate policy from the approval matrix: it describes the workflow, not the
single most senior sign-off.
"""

from decimal import Decimal

from ..models import ApprovalRule, ApproverLevel, to_decimal

WORKFLOW_STEPS: dict[ApproverLevel, ApprovalRule] = {
    ApproverLevel.REGIONAL_DIRECTOR: ApprovalRule(
        level=ApproverLevel.REGIONAL_DIRECTOR,
        title='Regional Director',
        description='Confirms commercial fit for the region',
        estimated_time='1 business day',
        order=1,
    ),
    ApproverLevel.FINANCE: ApprovalRule(
        level=ApproverLevel.FINANCE,
        title='Finance',
        description='Reviews incentives, margins and overall deal viability',
        estimated_time='1-2 business days',
        order=2,
    ),
    ApproverLevel.LEGAL: ApprovalRule(
        level=ApproverLevel.LEGAL,
        title='Legal',
        description='Reviews contract exceptions and high-value agreements',
        estimated_time='2-3 business days',
        order=3,
    ),
    ApproverLevel.MD: ApprovalRule(
        level=ApproverLevel.MD,
        title='Managing Director',
        description='Standard approval for deals meeting standard criteria',
        estimated_time='1-2 business days',
        order=4,
    ),
    ApproverLevel.EXECUTIVE: ApprovalRule(
        level=ApproverLevel.EXECUTIVE,
        title='Executive Committee',
        description='Required for non-standard deals, high-value deals, or deals with special terms',
        estimated_time='3-5 business days',
        order=5,
    ),
}


class ApprovalSequenceResolver:
    """Determines the sequential approval workflow for a deal."""

    LEGAL_REVIEW_THRESHOLD = Decimal('250000')  # strictly greater than
    STANDARD_DEAL_CEILING = Decimal('500000')
    STANDARD_DEAL_TYPE = 'grow'
    STANDARD_SALES_CHANNELS = ('independent_agency', 'client_direct')

    def resolve(
        self,
        total_value,
        deal_type: str | None = None,
        sales_channel: str | None = None,
        has_legal_exceptions: bool = False,
        has_financial_exceptions: bool = False,
    ) -> list[ApproverLevel]:
        """
        Regional Director and Finance always review first, in that order.
        Legal joins for legal exceptions or large deals. The final sign-off
        is MD for standard deals and Executive otherwise.
        """
        value = to_decimal(total_value)
        sequence = [ApproverLevel.REGIONAL_DIRECTOR, ApproverLevel.FINANCE]

        if has_legal_exceptions or value > self.LEGAL_REVIEW_THRESHOLD:
            sequence.append(ApproverLevel.LEGAL)

        if self.meets_standard_criteria(value, deal_type, sales_channel, has_financial_exceptions):
            sequence.append(ApproverLevel.MD)
        else:
            sequence.append(ApproverLevel.EXECUTIVE)

        return sequence

    def meets_standard_criteria(
        self,
        total_value,
        deal_type: str | None,
        sales_channel: str | None,
        has_financial_exceptions: bool = False,
    ) -> bool:
        if has_financial_exceptions:
            return False
        if (deal_type or '').lower() != self.STANDARD_DEAL_TYPE:
            return False
        if sales_channel not in self.STANDARD_SALES_CHANNELS:
            return False
        return to_decimal(total_value) <= self.STANDARD_DEAL_CEILING

    @staticmethod
    def step_details(step: ApproverLevel) -> ApprovalRule:
        return WORKFLOW_STEPS[step]


def resolve_approval_sequence(
    total_value,
    deal_type: str | None = None,
    sales_channel: str | None = None,
    has_legal_exceptions: bool = False,
    has_financial_exceptions: bool = False,
) -> list[ApproverLevel]:
    """Convenience wrapper around ApprovalSequenceResolver."""
    return ApprovalSequenceResolver().resolve(
        total_value, deal_type, sales_channel, has_legal_exceptions, has_financial_exceptions
    )


# Name used by the deal submission handlers
determine_required_approvers = resolve_approval_sequence
