"""
Mastery tier mapping.

The canonical scale is the 0-5 tier used by remote packages. Local items
used to carry a 0-100 percent score; that scale only exists at the storage
and display boundary:

    percent   tier
    -------   ----
     0-19      0
    20-39      1
    40-59      2
    60-79      3
    80-99      4
     100       5
"""

from genmemo.domain.constants import MAX_PERCENT_SCORE, MAX_TIER, MIN_TIER, PERCENT_PER_TIER


def clamp_tier(tier: int) -> int:
    return max(MIN_TIER, min(MAX_TIER, tier))


def tier_from_percent(score: int) -> int:
    """Map a legacy 0-100 score to a tier. Out-of-range scores are clamped."""
    score = max(0, min(MAX_PERCENT_SCORE, score))
    return clamp_tier(score // PERCENT_PER_TIER)


def percent_from_tier(tier: int) -> int:
    return clamp_tier(tier) * PERCENT_PER_TIER
