"""
Net Promoter Score calculation.

Ratings of 9-10 are promoters, 7-8 passives and 0-6 detractors. Passives
count towards the total but not the numerator.
"""
from typing import Iterable

from nps_survey.domains import NpsBreakdown, nps_category

__all__ = ["calculate_nps", "nps_breakdown"]


def nps_breakdown(ratings: Iterable[int]) -> NpsBreakdown:
    """Count each category and calculate the score.

    Args:
        ratings: Ratings in any order

    Returns:
        Category counts and the NPS rounded to 2 decimal places
    """
    # Initialize counters
    counts = {"promoter": 0, "passive": 0, "detractor": 0}
    total = 0

    for rating in ratings:
        counts[nps_category(rating)] += 1
        total += 1

    if total > 0:
        nps = round((counts["promoter"] - counts["detractor"]) / total * 100, 2)
    else:
        nps = 0.0

    return NpsBreakdown(
        promoters=counts["promoter"],
        passives=counts["passive"],
        detractors=counts["detractor"],
        total=total,
        nps=nps,
    )


def calculate_nps(ratings: Iterable[int]) -> float:
    """Calculate the NPS for a collection of ratings, 0 when empty."""
    return nps_breakdown(ratings).nps
