#!/usr/bin/env python3
"""
Match Scoring

Discrete confidence scoring between a statement candidate and a stored
transaction. Amounts must match to the cent; the date distance then picks one
of four fixed scores (same day, one, two or three days apart). Anything
further apart is not a match at all.
"""

from ..core.dates import FinancialDate

AUTO_MERGE_THRESHOLD = 90
MAX_DAYS_DIFFERENCE = 3
BASE_CONFIDENCE = 60

# Days apart -> bonus on top of the base score
DATE_PROXIMITY_BONUS = {0: 40, 1: 30, 2: 20, 3: 10}


class MatchScorer:
    """Confidence scoring for candidate/transaction pairs"""

    @staticmethod
    def calculate_confidence(
        candidate_amount: int | None,
        candidate_date: FinancialDate | None,
        transaction_amount: int | None,
        transaction_date: FinancialDate | None,
    ) -> int:
        """
        Calculate match confidence (0 to 100).

        Args:
            candidate_amount: Candidate total in cents
            candidate_date: Candidate issued date
            transaction_amount: Stored transaction total in cents
            transaction_date: Stored transaction issued date

        Returns:
            100, 90, 80 or 70 for 0-3 days apart with equal amounts, else 0
        """
        if candidate_amount is None or transaction_amount is None:
            return 0
        if candidate_date is None or transaction_date is None:
            return 0

        # No partial credit for amount proximity
        if candidate_amount != transaction_amount:
            return 0

        bonus = DATE_PROXIMITY_BONUS.get(candidate_date.days_between(transaction_date))
        if bonus is None:
            return 0
        return BASE_CONFIDENCE + bonus

    @staticmethod
    def should_auto_merge(confidence: int, threshold: int = AUTO_MERGE_THRESHOLD) -> bool:
        return confidence >= threshold

    @staticmethod
    def should_flag_for_review(confidence: int, threshold: int = AUTO_MERGE_THRESHOLD) -> bool:
        return 0 < confidence < threshold


def calculate_match_confidence(
    candidate_amount: int | None,
    candidate_date: FinancialDate | None,
    transaction_amount: int | None,
    transaction_date: FinancialDate | None,
) -> int:
    """Module-level shortcut for MatchScorer.calculate_confidence()."""
    return MatchScorer.calculate_confidence(candidate_amount, candidate_date, transaction_amount, transaction_date)


def should_auto_merge(confidence: int, threshold: int = AUTO_MERGE_THRESHOLD) -> bool:
    return MatchScorer.should_auto_merge(confidence, threshold)


def should_flag_for_review(confidence: int, threshold: int = AUTO_MERGE_THRESHOLD) -> bool:
    return MatchScorer.should_flag_for_review(confidence, threshold)
