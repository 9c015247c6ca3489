"""Scoring rules for Analysis dimensions.

Every auto-derived dimension score uses the same linear penalty::

    score(count) = max(0, 100 - 10 * count)

so a score can always be traced back to the violation count that produced
it. The overall score is the plain mean of the dimension scores.
"""

from typing import Optional, Sequence

MAX_SCORE = 100.0
MIN_SCORE = 0.0
PENALTY_PER_ISSUE = 10.0


def penalty_score(count: int) -> float:
    """Map a violation/issue count to a score in [0, 100].

    A count of zero (or a negative count) scores a full 100; each issue
    costs ten points and the score floors at zero from ten issues on.
    """
    if count <= 0:
        return MAX_SCORE
    return max(MIN_SCORE, MAX_SCORE - PENALTY_PER_ISSUE * count)


def overall_score(scores: Sequence[Optional[float]]) -> Optional[float]:
    """Unweighted mean of the scores that are set.

    Returns ``None`` when no score is set. With every dimension set this is
    the exact arithmetic mean of all of them.
    """
    present = [s for s in scores if s is not None]
    if not present:
        return None
    return sum(present) / len(present)


def compliance_level(score: Optional[float]) -> str:
    """Bucket a 0-100 score into a compliance grade."""
    if score is None:
        return "UNKNOWN"
    if score >= 95:
        return "EXCELLENT"
    if score >= 85:
        return "GOOD"
    if score >= 75:
        return "FAIR"
    if score >= 60:
        return "POOR"
    return "CRITICAL"


def risk_level(critical_count: int) -> str:
    """Bucket the number of critical violations into a risk grade."""
    if critical_count <= 0:
        return "LOW"
    if critical_count <= 2:
        return "MEDIUM"
    if critical_count <= 5:
        return "HIGH"
    return "CRITICAL"
