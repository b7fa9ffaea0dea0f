"""
Calculators Package

Provides all calculation components for deal evaluation.
"""

from .approval_matrix import ApprovalMatrixResolver
from .approval_sequence import ApprovalSequenceResolver
from .baseline import BaselineResolver
from .pipeline import ApprovalPipeline
from .standard_deal import StandardDealEvaluator
from .tier_metrics import AggregateMetricsCalculator, DealAnalyzer, TierMetricsCalculator

__all__ = [
    "TierMetricsCalculator",
    "AggregateMetricsCalculator",
    "DealAnalyzer",
    "BaselineResolver",
    "ApprovalMatrixResolver",
    "ApprovalSequenceResolver",
    "ApprovalPipeline",
    "StandardDealEvaluator",
]
