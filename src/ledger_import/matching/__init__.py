"""
Matching Package

Reconciles statement candidates against stored transactions.

Key Components:
- scorer: exact-amount, date-proximity confidence scoring
- finder: reference-first lookup and ranking
- merger: non-destructive merge and its compatibility validator
"""

from .finder import MatchFinder, RankedMatch, is_already_matched_in_batch
from .merger import (
    MergeResult,
    MergeValidationError,
    TransactionMerger,
    plan_merge,
    preview_merge_changes,
    validate_merge_compatibility,
)
from .scorer import (
    AUTO_MERGE_THRESHOLD,
    MAX_DAYS_DIFFERENCE,
    MatchScorer,
    calculate_match_confidence,
    should_auto_merge,
    should_flag_for_review,
)

__all__ = [
    "AUTO_MERGE_THRESHOLD",
    "MAX_DAYS_DIFFERENCE",
    "MatchFinder",
    "MatchScorer",
    "MergeResult",
    "MergeValidationError",
    "RankedMatch",
    "TransactionMerger",
    "calculate_match_confidence",
    "is_already_matched_in_batch",
    "plan_merge",
    "preview_merge_changes",
    "should_auto_merge",
    "should_flag_for_review",
    "validate_merge_compatibility",
]
