"""
Points Calculation

Converts a ranked submission into integer points:

    points = round(total_rating x multiplier(rank))

with multipliers 5/3/2 for ranks 1/2/3 and 1 for everything below, and
halves rounded away from zero. Also owns the display labels for ranks.
"""

from typing import Iterable

from snapscape.config import (
    DEFAULT_MULTIPLIER,
    MEDALS,
    PODIUM_LABELS,
    PRIZE_NAMES,
    RANK_MULTIPLIERS,
)
from snapscape.results.models import PointsEntry, RankedSubmission
from snapscape.utils import round_half_away


def multiplier(rank: int) -> int:
    """Point multiplier for a rank tier: 1->5, 2->3, 3->2, otherwise 1."""
    if rank < 1:
        raise ValueError(f"rank must be >= 1, got {rank}")
    return RANK_MULTIPLIERS.get(rank, DEFAULT_MULTIPLIER)


def points_for(total_rating: float, rank: int) -> int:
    return round_half_away(total_rating * multiplier(rank))


def compute_points(ranked: RankedSubmission) -> PointsEntry:
    """Score one ranked submission."""
    factor = multiplier(ranked.rank)
    return PointsEntry(
        submission_id=ranked.id,
        competition_id=ranked.competition_id,
        rank=ranked.rank,
        total_rating=ranked.total_rating,
        multiplier=factor,
        points=round_half_away(ranked.total_rating * factor),
    )


def compute_all_points(ranked: Iterable[RankedSubmission]) -> list[PointsEntry]:
    return [compute_points(r) for r in ranked]


# --- Display Labels ---
def ordinal(n: int) -> str:
    """English ordinal: 1st, 2nd, 3rd, 4th ... 11th, 12th, 13th ... 21st."""
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def placement_label(rank: int) -> str:
    return PODIUM_LABELS.get(rank, ordinal(rank))


def medal(rank: int) -> str | None:
    """gold/silver/bronze for the podium, None otherwise."""
    return MEDALS.get(rank)


def prize_name(rank: int) -> str | None:
    return PRIZE_NAMES.get(rank)
