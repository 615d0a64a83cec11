"""
Results Pipeline for SnapScape

This module runs the full results computation over a store snapshot:
- Ranks each competition's approved submissions (dense rank by total rating)
- Scores them with the rank-tier multiplier
- Builds photographer standings and podium placements
- Reconciles every user's cumulative points across completed competitions

Results are exported as CSV files in the processed data folder.

Usage:
    python -m snapscape.results.engine [SNAPSHOT_FOLDER]
    OR
    from snapscape.results import compute_competition_results
"""

import sys
from pathlib import Path

# Enable both `python snapscape/results/engine.py` and `python -m snapscape.results.engine` execution.
# Required for snapscape.config/snapscape.utils imports to resolve correctly.
_project_root = str(Path(__file__).parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from datetime import datetime
from typing import Iterable

import pandas as pd

from snapscape.config import OUTPUT_FOLDER, SNAPSHOT_FOLDER
from snapscape.ingestion.snapshot import DataFetchError, SnapshotStore
from snapscape.results.models import (
    CompetitionResults,
    PhotographerStanding,
    PlacementRecord,
    PointsEntry,
    RankedSubmission,
    UserPointsBreakdown,
)
from snapscape.results.photographers import rank_photographers
from snapscape.results.placements import derive_placements
from snapscape.results.points import compute_all_points, medal, placement_label
from snapscape.results.ranking import is_badge_eligible, rank_submissions
from snapscape.results.reconciler import compute_user_points_breakdown
from snapscape.utils import atomic_write_csv, cleanup_old_files, setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

RESULTS_COLUMNS = [
    'rank', 'placement', 'medal', 'badge_eligible', 'submission_id', 'title',
    'photographer_id', 'photographer_name', 'average_rating', 'rating_count',
    'total_rating', 'multiplier', 'points',
]
STANDINGS_COLUMNS = [
    'rank', 'photographer_id', 'name', 'total_points', 'total_rating', 'total_votes',
    'total_submissions', 'average_rating', 'best_submission_id',
]
BREAKDOWN_COLUMNS = [
    'user_id', 'total_points', 'first_place_points', 'second_place_points',
    'third_place_points', 'other_submissions_points', 'voting_points', 'scored_submissions',
]
PLACEMENT_COLUMNS = ['competition_id', 'position', 'photographer_id', 'submission_id', 'final_score', 'prize']


def compute_competition_results(competition_id: str, store) -> CompetitionResults:
    """
    Rank, score and aggregate one competition from the store.

    Raises:
        DataFetchError: If the competition or its submissions cannot be fetched
    """
    competition = store.get_competition(competition_id)
    ranked = rank_submissions(store.get_approved_submissions(competition_id))
    points = compute_all_points(ranked)
    standings = rank_photographers(points, ranked)
    placements = derive_placements(ranked)
    return CompetitionResults(
        competition=competition,
        ranked=tuple(ranked),
        points=tuple(points),
        standings=tuple(standings),
        placements=tuple(placements),
    )


def results_cache_key(competition_id: str, status: str, latest_rating_at, submission_count: int = 0) -> tuple:
    """
    Cache key for a competition's computed results.

    Includes the status, the newest rating time and the number of approved
    submissions, so a status change, a new vote or a newly approved photo
    produces a new key and the next read recomputes.
    """
    stamp = None if latest_rating_at is None or pd.isna(latest_rating_at) else pd.Timestamp(latest_rating_at).isoformat()
    return (str(competition_id), status, stamp, int(submission_count))


# --- DataFrame builders ---
def ranked_to_frame(ranked: Iterable[RankedSubmission], points: Iterable[PointsEntry]) -> pd.DataFrame:
    points_by_id = {p.submission_id: p for p in points}
    rows = []
    for r in ranked:
        entry = points_by_id[r.id]
        rows.append({
            'rank': r.rank,
            'placement': placement_label(r.rank),
            'medal': medal(r.rank) if is_badge_eligible(r) else None,
            'badge_eligible': is_badge_eligible(r),
            'submission_id': r.id,
            'title': r.title,
            'photographer_id': r.photographer_id,
            'photographer_name': r.photographer_name,
            'average_rating': round(r.average_rating, 2),
            'rating_count': r.rating_count,
            'total_rating': r.total_rating,
            'multiplier': entry.multiplier,
            'points': entry.points,
        })
    return pd.DataFrame(rows, columns=RESULTS_COLUMNS)


def standings_to_frame(standings: Iterable[PhotographerStanding]) -> pd.DataFrame:
    rows = [
        {
            'rank': s.rank,
            'photographer_id': s.photographer_id,
            'name': s.name,
            'total_points': s.total_points,
            'total_rating': s.total_rating,
            'total_votes': s.total_votes,
            'total_submissions': s.total_submissions,
            'average_rating': round(s.average_rating, 2),
            'best_submission_id': s.best_submission_id,
        }
        for s in standings
    ]
    return pd.DataFrame(rows, columns=STANDINGS_COLUMNS)


def breakdowns_to_frame(breakdowns: Iterable[UserPointsBreakdown]) -> pd.DataFrame:
    rows = [
        {
            'user_id': b.user_id,
            'total_points': b.total_points,
            'first_place_points': b.first_place_points,
            'second_place_points': b.second_place_points,
            'third_place_points': b.third_place_points,
            'other_submissions_points': b.other_submissions_points,
            'voting_points': b.voting_points,
            'scored_submissions': len(b.details),
        }
        for b in breakdowns
    ]
    df = pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)
    return df.sort_values(['total_points', 'user_id'], ascending=[False, True]).reset_index(drop=True)


def placements_to_frame(placements: Iterable[PlacementRecord]) -> pd.DataFrame:
    rows = [
        {
            'competition_id': p.competition_id,
            'position': p.position,
            'photographer_id': p.photographer_id,
            'submission_id': p.submission_id,
            'final_score': round(p.final_score, 2),
            'prize': p.prize,
        }
        for p in placements
    ]
    return pd.DataFrame(rows, columns=PLACEMENT_COLUMNS)


# --- Pipeline ---
def _export(df: pd.DataFrame, name: str, stamp: str, output_folder: Path) -> Path:
    path = output_folder / f"{name}_{stamp}.csv"
    atomic_write_csv(df, path, index=False)
    cleanup_old_files(f"{name}_*.csv", keep_file=path, folder=output_folder)
    return path


def process_snapshot(snapshot_folder: Path | None = None, output_folder: Path | None = None) -> dict:
    """
    Compute and export results for every competition and user in a snapshot.

    Returns:
        Dict with 'competitions' (competition_id -> CompetitionResults) and
        'users' (list of UserPointsBreakdown)

    Raises:
        DataFetchError: If the snapshot cannot be loaded. Nothing is written.
    """
    output_folder = Path(output_folder or OUTPUT_FOLDER)
    store = SnapshotStore.from_folder(snapshot_folder)

    # Compute everything before writing anything
    competitions = {}
    for competition in store.list_competitions():
        competitions[competition.id] = compute_competition_results(competition.id, store)
    users = [compute_user_points_breakdown(user_id, store) for user_id in store.list_user_ids()]

    latest = store.latest_rating_at()
    stamp = (latest if latest is not None else datetime.now()).strftime('%Y%m%d')

    logger.info("=" * 60)
    logger.info(f"Exporting results for {len(competitions)} competitions, {len(users)} users")
    logger.info("=" * 60)

    all_placements = []
    for competition_id, results in competitions.items():
        if results.is_empty:
            logger.info(f"Competition {competition_id} ({results.competition.status}): no submissions")
        else:
            winner = results.standings[0]
            logger.info(
                f"Competition {competition_id} ({results.competition.status}): "
                f"{len(results.ranked)} submissions, leader {winner.name} with {winner.total_points} points"
            )
        _export(ranked_to_frame(results.ranked, results.points), f"{competition_id}_results", stamp, output_folder)
        _export(standings_to_frame(results.standings), f"{competition_id}_photographers", stamp, output_folder)
        all_placements.extend(results.placements)

    users_df = breakdowns_to_frame(users)
    _export(users_df, "user_points", stamp, output_folder)
    _export(placements_to_frame(all_placements), "placements", stamp, output_folder)

    if not users_df.empty:
        logger.info("Top 10 Users by Points:")
        logger.info("\n" + users_df.head(10).to_string(index=False))

    return {'competitions': competitions, 'users': users}


def main(argv: list[str] | None = None):
    argv = sys.argv[1:] if argv is None else argv
    snapshot_folder = Path(argv[0]) if argv else SNAPSHOT_FOLDER
    try:
        return process_snapshot(snapshot_folder)
    except DataFetchError as e:
        logger.error(f"Results unavailable: {e}")
        return None


if __name__ == "__main__":
    results = main()
