"""
DEAL DESK CALCULATION ENGINE
Tier financials, approval matrix and approval workflow
"""

from .models import DealInput, DealResult
from .processor import DealProcessor

__all__ = ['DealProcessor', 'DealInput', 'DealResult']
