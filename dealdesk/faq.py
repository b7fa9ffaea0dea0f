"""
FAQ Matcher

Literal keyword matching over a static deal desk knowledge base.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class KnowledgeBaseEntry:
    question: str
    answer: str
    keywords: tuple[str, ...]


KNOWLEDGE_BASE = (
    KnowledgeBaseEntry(
        question="How many steps does the deal process have?",
        answer=(
            "The commercial deal process has 7 steps: Scoping, Submission, Review & Approval, "
            "Negotiation, Contracting, Implementation, and Evaluation."
        ),
        keywords=("how many steps", "stages", "deal process", "steps"),
    ),
    KnowledgeBaseEntry(
        question="How long does deal review take?",
        answer=(
            "Standard deals typically take 2-3 business days for review and approval. "
            "Non-standard deals may take 3-5 business days."
        ),
        keywords=("how long", "timeframe", "how many days", "duration", "turnaround"),
    ),
    KnowledgeBaseEntry(
        question="Who needs to approve my deal?",
        answer=(
            "Approval depends on deal value, discount and contract term. Managers approve standard "
            "deals up to $50K, Directors up to $250K, SVPs up to $1M and C-Level executives above $1M. "
            "Discounts above 20% and non-standard terms raise the required level."
        ),
        keywords=("approve", "approval", "approver", "sign off", "authorization"),
    ),
    KnowledgeBaseEntry(
        question="What documents are required?",
        answer=(
            "Required documentation includes the Deal Submission Form, Customer Requirements Document, "
            "Statement of Work for service components, and Business Justification for non-standard "
            "terms or pricing."
        ),
        keywords=("document", "documentation", "paperwork", "files"),
    ),
    KnowledgeBaseEntry(
        question="How are incentives calculated?",
        answer=(
            "Each tier's incentive cost is the sum of its incentive line items. Incentive cost is "
            "subtracted from gross profit to give adjusted gross profit and adjusted gross margin."
        ),
        keywords=("incentive", "rebate", "bonus", "adjusted gross"),
    ),
    KnowledgeBaseEntry(
        question="How do I submit a new deal?",
        answer=(
            "Open the Submit Deal page, complete the deal overview, business context and value "
            "structure steps, then review and submit. You will receive a deal reference number."
        ),
        keywords=("submit", "new deal", "create a deal", "submission"),
    ),
    KnowledgeBaseEntry(
        question="How are urgent deals handled?",
        answer=(
            "Mark the deal as High Priority in the submission form and contact your regional "
            "deal desk manager directly."
        ),
        keywords=("urgent", "rush", "expedite", "priority", "escalat"),
    ),
)

FALLBACK_ANSWER = (
    "I'm not sure about that. Try asking about approvals, incentives, required documents, "
    "review timelines or how to submit a deal."
)


class FaqMatcher:
    """Answers questions by counting keyword hits against the knowledge base."""

    def __init__(self, entries=KNOWLEDGE_BASE):
        self.entries = tuple(entries)

    def match(self, text: str) -> KnowledgeBaseEntry | None:
        normalized = (text or '').lower().strip()
        if not normalized:
            return None

        best, best_score = None, 0
        for entry in self.entries:
            score = sum(1 for keyword in entry.keywords if keyword in normalized)
            if score > best_score:
                best, best_score = entry, score
        return best

    def answer(self, text: str) -> str:
        entry = self.match(text)
        return entry.answer if entry else FALLBACK_ANSWER
