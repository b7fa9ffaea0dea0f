"""
Input Validation for the Deal Desk Engine

Validates request data before processing begins.
Raises ValueError with clear messages for any constraint violations.
"""

from .models import ApprovalRequirement, DealInput, DealParameters, DealTier
from .calculators.approval_sequence import WORKFLOW_STEPS
from .tiers import MAX_TIERS, validate_tiers

VALID_REQUIREMENT_STATUSES = ('pending', 'approved', 'revision_requested')


class InputValidator:
    """Validates deal input according to business rules."""

    def validate(self, input_data: DealInput) -> None:
        """
        Run all validations. Raises ValueError if any check fails.
        """
        self.validate_tiers(input_data.tiers)
        self.validate_parameters(input_data.parameters)

    def validate_tiers(self, tiers: list[DealTier]) -> None:
        """Validate tier count and every tier row."""
        if not tiers:
            raise ValueError("At least one tier is required")

        if len(tiers) > MAX_TIERS:
            raise ValueError(f"Maximum of {MAX_TIERS} tiers allowed, got: {len(tiers)}")

        errors = validate_tiers(tiers)
        if errors:
            details = "; ".join(f"tier {e.tier_number} {e.field}: {e.message}" for e in errors)
            raise ValueError(f"Invalid tiers: {details}")

    def validate_parameters(self, params: DealParameters) -> None:
        """Validate approval parameters."""
        if params.total_value < 0:
            raise ValueError(f"total_value cannot be negative, got: {params.total_value}")

        if not (0 <= params.discount_percentage <= 100):
            raise ValueError(
                f"discount_percentage must be between 0 and 100, got: {params.discount_percentage}"
            )

        if params.contract_term < 0:
            raise ValueError(f"contract_term cannot be negative, got: {params.contract_term}")

    def validate_requirements(self, requirements: list[ApprovalRequirement]) -> None:
        """Validate approval requirements submitted for status tracking."""
        ids = {r.id for r in requirements}
        for requirement in requirements:
            if requirement.approver not in WORKFLOW_STEPS:
                raise ValueError(f"Unknown workflow step: {requirement.approver.value}")
            if requirement.status not in VALID_REQUIREMENT_STATUSES:
                raise ValueError(
                    f"Invalid status: {requirement.status}. "
                    f"Must be one of {', '.join(VALID_REQUIREMENT_STATUSES)}"
                )
            missing = [dep for dep in requirement.dependencies if dep not in ids]
            if missing:
                raise ValueError(f"Requirement {requirement.id} depends on unknown ids: {missing}")
