"""
Approval Pipeline

Turns an approval sequence into trackable requirements and reports where a
deal stands in its workflow.
"""

from ..models import ApprovalRequirement, ApproverLevel, PipelineStatus
from .approval_sequence import WORKFLOW_STEPS

CONTACTS = {
    ApproverLevel.REGIONAL_DIRECTOR: 'regional-directors@company.com',
    ApproverLevel.FINANCE: 'finance-team@company.com',
    ApproverLevel.LEGAL: 'legal-team@company.com',
    ApproverLevel.MD: 'managing-directors@company.com',
    ApproverLevel.EXECUTIVE: 'executive-committee@company.com',
}


class ApprovalPipeline:
    """Generates approval requirements and computes pipeline status."""

    def generate(self, deal_id, sequence: list[ApproverLevel]) -> list[ApprovalRequirement]:
        """One pending requirement per step; each waits on every earlier step."""
        requirements = []
        for step in sequence:
            requirements.append(ApprovalRequirement(
                id=f"{deal_id}-{step.value}",
                deal_id=str(deal_id),
                approver=step,
                status='pending',
                dependencies=[r.id for r in requirements],
                estimated_time=WORKFLOW_STEPS[step].estimated_time,
            ))
        return requirements

    def status(self, requirements: list[ApprovalRequirement]) -> PipelineStatus:
        if not requirements:
            return PipelineStatus(deal_id='', overall_status='pending')

        by_id = {r.id: r for r in requirements}
        total = len(requirements)
        approved = sum(1 for r in requirements if r.status == 'approved')
        has_revisions = any(r.status == 'revision_requested' for r in requirements)

        if has_revisions:
            overall = 'revision_requested'
        elif approved == total:
            overall = 'completed'
        elif approved > 0:
            overall = 'in_progress'
        else:
            overall = 'pending'

        current = next((r.approver for r in requirements if r.status != 'approved'), None)

        bottlenecks = [
            r for r in requirements
            if r.status == 'pending'
            and all(by_id.get(dep) is not None and by_id[dep].status == 'approved' for dep in r.dependencies)
        ]

        return PipelineStatus(
            deal_id=requirements[0].deal_id,
            overall_status=overall,
            current_step=current,
            progress=round(approved / total * 100),
            completed_count=approved,
            total_count=total,
            bottlenecks=bottlenecks,
            next_actions=[f"Waiting for {WORKFLOW_STEPS[r.approver].title} approval" for r in bottlenecks],
        )

    def follow_up(self, status: PipelineStatus) -> list[str]:
        """Suggested follow-ups for the seller."""
        recommendations = [
            f"Contact {WORKFLOW_STEPS[r.approver].title} ({CONTACTS[r.approver]}) about deal {r.deal_id}"
            for r in status.bottlenecks
        ]
        if status.overall_status == 'revision_requested':
            recommendations.append('Address revision requests and resubmit')
        return recommendations
