"""
Submission Ranking

Sorts one competition's approved submissions and assigns dense ranks by
total rating (average rating x rating count). This is the only place ranks
are computed; the results page, judge view and profile totals all read
from it.

Dense ranking: tied totals share a rank and the next distinct total gets
previous rank + 1, so ranks run 1..k with no gaps.
"""

from typing import Any, Iterable, Mapping

from snapscape.config import LEADERBOARD_LIMIT
from snapscape.results.models import RankedSubmission, Submission
from snapscape.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

ORDER_BY_OPTIONS = ("total_rating", "average_rating")


def _as_submission(item: Submission | Mapping[str, Any]) -> Submission:
    if isinstance(item, Submission):
        return item
    return Submission.from_record(item)


def sort_key(submission: Submission):
    """Scoring order: total rating, then average rating, then rating count, all descending."""
    return (
        -submission.total_rating,
        -submission.average_rating,
        -submission.rating_count,
        submission.id,
    )


def rank_submissions(submissions: Iterable[Submission | Mapping[str, Any]]) -> list[RankedSubmission]:
    """
    Rank a competition's submissions.

    Args:
        submissions: Approved submissions for one competition, either
                     Submission objects or raw store records

    Returns:
        RankedSubmission list in scoring order, each with its dense rank.
        Empty input returns an empty list.
    """
    ordered = sorted((_as_submission(s) for s in submissions), key=sort_key)

    ranked = []
    current_rank = 0
    previous_total = None
    for submission in ordered:
        total = submission.total_rating
        if total != previous_total:
            current_rank += 1
            previous_total = total
        ranked.append(RankedSubmission(submission=submission, total_rating=total, rank=current_rank))

    if ranked:
        logger.debug(f"Ranked {len(ranked)} submissions into {current_rank} distinct ranks")
    return ranked


def is_badge_eligible(ranked: RankedSubmission) -> bool:
    """A placement badge needs a podium rank and a non-zero total rating."""
    return ranked.rank <= 3 and ranked.total_rating > 0


def display_order(ranked: Iterable[RankedSubmission], order_by: str = "total_rating") -> list[RankedSubmission]:
    """
    Reorder ranked submissions for display without touching their ranks.

    "average_rating" is a cosmetic view only; points and badges always come
    from the total-rating rank.
    """
    if order_by not in ORDER_BY_OPTIONS:
        raise ValueError(
            f"Invalid order_by: '{order_by}'. Allowed values: {', '.join(ORDER_BY_OPTIONS)}"
        )
    items = list(ranked)
    if order_by == "total_rating":
        return sorted(items, key=lambda r: (r.rank, sort_key(r.submission)))
    return sorted(items, key=lambda r: (-r.average_rating, -r.rating_count, r.rank, r.id))


def top_submissions(ranked: Iterable[RankedSubmission], limit: int = LEADERBOARD_LIMIT) -> list[RankedSubmission]:
    """Leaderboard view: the best `limit` submissions that received at least one rating."""
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")
    rated = [r for r in ranked if r.rating_count > 0]
    rated.sort(key=lambda r: (r.rank, sort_key(r.submission)))
    return rated[:limit]
