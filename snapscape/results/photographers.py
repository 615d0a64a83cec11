"""
Photographer Standings

Groups scored submissions by photographer and ranks photographers by
cumulative points. Every submission counts toward its photographer's
totals, not only their best one.

Standings are ordered by total points, then total rating, then total
votes (all descending) and densely ranked on total points alone, unlike
the per-submission ranking, which keys on total rating.
"""

from collections import defaultdict
from typing import Iterable

from snapscape.config import LEADERBOARD_LIMIT, TOTAL_RATING_PRECISION
from snapscape.results.models import PhotographerStanding, PointsEntry, RankedSubmission, Submission
from snapscape.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def rank_photographers(
    points_entries: Iterable[PointsEntry],
    submissions: Iterable[Submission | RankedSubmission],
) -> list[PhotographerStanding]:
    """
    Aggregate points entries into ranked photographer standings.

    Args:
        points_entries: PointsEntry per scored submission (one competition,
                        or several for a cross-competition table)
        submissions: The submissions behind those entries; they supply the
                     photographer, rating count and average rating

    Returns:
        PhotographerStanding list, best first. Empty input gives [].
    """
    by_id = {s.id: s for s in submissions}

    # Group entries per photographer, preserving entry order so the first
    # of two equal totals wins the best-submission slot
    groups: defaultdict[str, list[tuple[PointsEntry, Submission | RankedSubmission]]] = defaultdict(list)
    for entry in points_entries:
        submission = by_id.get(entry.submission_id)
        if submission is None:
            logger.warning(f"No submission found for points entry {entry.submission_id!r}; skipping")
            continue
        groups[submission.photographer_id].append((entry, submission))

    unranked = []
    for photographer_id, members in groups.items():
        best_entry = members[0][0]
        for entry, _ in members[1:]:
            if entry.total_rating > best_entry.total_rating:
                best_entry = entry

        unranked.append(dict(
            photographer_id=photographer_id,
            name=members[0][1].photographer_name,
            best_submission_id=best_entry.submission_id,
            total_points=sum(entry.points for entry, _ in members),
            total_votes=sum(s.rating_count for _, s in members),
            total_rating=round(sum(entry.total_rating for entry, _ in members), TOTAL_RATING_PRECISION),
            total_submissions=len(members),
            average_rating=sum(s.average_rating for _, s in members) / len(members),
        ))

    unranked.sort(key=lambda d: (-d['total_points'], -d['total_rating'], -d['total_votes'], d['photographer_id']))

    standings = []
    current_rank = 0
    previous_points = None
    for data in unranked:
        if data['total_points'] != previous_points:
            current_rank += 1
            previous_points = data['total_points']
        standings.append(PhotographerStanding(rank=current_rank, **data))

    if standings:
        logger.debug(f"Ranked {len(standings)} photographers")
    return standings


def top_contributors(submissions: Iterable[Submission | RankedSubmission], limit: int = LEADERBOARD_LIMIT) -> list[dict]:
    """
    Photographers with the most submissions.

    Ordered by submission count, then by summed average rating. Each row
    carries photographer_id, name, submission_count and average_rating
    (mean of the submissions' average ratings).
    """
    counts: defaultdict[str, int] = defaultdict(int)
    rating_sums: defaultdict[str, float] = defaultdict(float)
    names: dict[str, str] = {}

    for s in submissions:
        counts[s.photographer_id] += 1
        rating_sums[s.photographer_id] += s.average_rating
        names.setdefault(s.photographer_id, s.photographer_name)

    rows = [
        {
            'photographer_id': pid,
            'name': names[pid],
            'submission_count': counts[pid],
            'average_rating': rating_sums[pid] / counts[pid],
        }
        for pid in counts
    ]
    rows.sort(key=lambda r: (-r['submission_count'], -rating_sums[r['photographer_id']], r['photographer_id']))
    return rows[:limit]
