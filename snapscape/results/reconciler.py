"""
User Points Reconciliation

Produces one consistent points total for a user's profile: the same
number you get by opening each completed competition's results and adding
up that user's entries, plus one point per distinct rating they cast.

Algorithm:
1. Keep only rows from competitions whose status is "completed"
2. Deduplicate by submission id, keeping the best (lowest) rank
3. Bucket by rank: 1st, 2nd, 3rd, everything else
4. Sum points per bucket, add voting points, round the grand total

Usage:
    from snapscape.results.reconciler import compute_user_points_breakdown
    breakdown = compute_user_points_breakdown("user-42", store)
"""

from typing import Iterable, Iterator

from snapscape.config import APPROVED_STATUS, COMPLETED_STATUS, VOTE_POINTS
from snapscape.results.models import (
    Competition,
    PointsEntry,
    ProfileStats,
    RankedSubmission,
    UserPointsBreakdown,
    UserPointsDetail,
)
from snapscape.results.placements import count_placements, derive_placements
from snapscape.results.points import compute_points
from snapscape.results.ranking import rank_submissions
from snapscape.utils import round_half_away, setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


class DuplicateRecordWarning(UserWarning):
    """The same submission appeared more than once while reconciling a user's points."""

    def __init__(self, submission_id: str, kept_rank: int, dropped_rank: int):
        super().__init__(
            f"Duplicate rows for submission {submission_id!r}: "
            f"kept rank {kept_rank}, dropped rank {dropped_rank}"
        )
        self.submission_id = submission_id
        self.kept_rank = kept_rank
        self.dropped_rank = dropped_rank


def build_detail_row(competition: Competition, ranked: RankedSubmission, entry: PointsEntry) -> UserPointsDetail:
    return UserPointsDetail(
        competition_id=competition.id,
        competition_title=competition.title,
        competition_status=competition.status,
        submission_id=ranked.id,
        title=ranked.title,
        rank=entry.rank,
        total_rating=entry.total_rating,
        rating_count=ranked.rating_count,
        points=entry.points,
    )


def deduplicate_rows(rows: Iterable[UserPointsDetail]) -> list[UserPointsDetail]:
    """
    Collapse rows sharing a submission id into the one with the lowest rank.

    Each dropped row is logged as a DuplicateRecordWarning; nothing is raised.
    Order of first appearance is kept.
    """
    kept: dict[str, UserPointsDetail] = {}
    for row in rows:
        current = kept.get(row.submission_id)
        if current is None:
            kept[row.submission_id] = row
            continue
        if row.rank < current.rank:
            kept[row.submission_id] = row
            warning = DuplicateRecordWarning(row.submission_id, row.rank, current.rank)
        else:
            warning = DuplicateRecordWarning(row.submission_id, current.rank, row.rank)
        logger.warning(str(warning))
    return list(kept.values())


def reconcile_user_points(user_id: str, rows: Iterable[UserPointsDetail], vote_count: int) -> UserPointsBreakdown:
    """
    Turn a user's detail rows and vote count into a points breakdown.

    Args:
        user_id: The user whose points are being totalled
        rows: One UserPointsDetail per scored submission; may contain rows
              from non-completed competitions and duplicates
        vote_count: Number of distinct ratings the user has cast

    Returns:
        UserPointsBreakdown with per-bucket subtotals and the grand total
    """
    if vote_count < 0:
        raise ValueError(f"vote_count must be non-negative, got {vote_count}")

    completed = [row for row in rows if row.competition_status == COMPLETED_STATUS]
    details = deduplicate_rows(completed)
    details.sort(key=lambda row: (row.competition_id, row.rank, row.submission_id))

    buckets = {1: 0, 2: 0, 3: 0, 4: 0}
    for row in details:
        buckets[min(row.rank, 4)] += row.points

    voting_points = vote_count * VOTE_POINTS
    total_points = round_half_away(sum(buckets.values()) + voting_points)

    return UserPointsBreakdown(
        user_id=user_id,
        first_place_points=buckets[1],
        second_place_points=buckets[2],
        third_place_points=buckets[3],
        other_submissions_points=buckets[4],
        voting_points=voting_points,
        total_points=total_points,
        details=tuple(details),
    )


def _completed_competitions_for(user_id: str, store) -> Iterator[tuple[Competition, list[RankedSubmission]]]:
    """Yield (competition, ranked submissions) for each completed competition the user entered."""
    completed = {c.id: c for c in store.list_competitions(status=COMPLETED_STATUS)}
    known = {c.id for c in store.list_competitions()}

    competition_ids = []
    for submission in store.get_user_submissions(user_id):
        if submission.status != APPROVED_STATUS or submission.competition_id in competition_ids:
            continue
        if submission.competition_id not in known:
            logger.warning(
                f"Submission {submission.id!r} of user {user_id} belongs to unknown "
                f"competition {submission.competition_id!r}; skipping"
            )
            continue
        competition_ids.append(submission.competition_id)

    for competition_id in competition_ids:
        if competition_id not in completed:
            logger.debug(f"Skipping competition {competition_id} (not completed) for user {user_id}")
            continue
        yield completed[competition_id], rank_submissions(store.get_approved_submissions(competition_id))


def collect_user_points_rows(user_id: str, store) -> list[UserPointsDetail]:
    """
    Rank every completed competition the user entered and return the user's rows.

    Each competition is ranked as a whole, so a row's rank and points match
    what that competition's results page shows.
    """
    rows = []
    for competition, ranked in _completed_competitions_for(user_id, store):
        for r in ranked:
            if r.photographer_id == user_id:
                rows.append(build_detail_row(competition, r, compute_points(r)))
    return rows


def compute_user_points_breakdown(user_id: str, store) -> UserPointsBreakdown:
    """
    Fetch a user's snapshot from the store and reconcile their points.

    Raises:
        DataFetchError: If the store cannot supply the snapshot
    """
    rows = collect_user_points_rows(user_id, store)
    vote_count = store.count_distinct_votes(user_id)
    breakdown = reconcile_user_points(user_id, rows, vote_count)
    logger.info(
        f"User {user_id}: {breakdown.total_points} points "
        f"({len(breakdown.details)} submissions, {breakdown.voting_points} voting)"
    )
    return breakdown


def compute_profile_stats(user_id: str, store) -> ProfileStats:
    """Profile summary: submission counts, podium finishes and the points breakdown."""
    user_submissions = store.get_user_submissions(user_id)

    rows = []
    placements = []
    for competition, ranked in _completed_competitions_for(user_id, store):
        for r in ranked:
            if r.photographer_id == user_id:
                rows.append(build_detail_row(competition, r, compute_points(r)))
        placements.extend(p for p in derive_placements(ranked) if p.photographer_id == user_id)

    breakdown = reconcile_user_points(user_id, rows, store.count_distinct_votes(user_id))
    podium = count_placements(placements)

    return ProfileStats(
        user_id=user_id,
        total_submissions=len(user_submissions),
        unique_competitions=len({s.competition_id for s in user_submissions}),
        first_place=podium['first_place'],
        second_place=podium['second_place'],
        third_place=podium['third_place'],
        total_top_three=podium['total_top_three'],
        total_points=breakdown.total_points,
        points_breakdown=breakdown,
    )
