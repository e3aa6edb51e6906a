"""
Aggregators for the team review listing.
"""
from .review_summary import SUMMARY_COLUMNS, ReviewSummaryBuilder

__all__ = [
    'ReviewSummaryBuilder',
    'SUMMARY_COLUMNS',
]
