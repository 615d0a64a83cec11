"""
Snapshot Store

Loads a point-in-time export of the competition, submission and rating
stores and answers the queries the results engine needs. The engine
itself never fetches anything; callers build a store once per request
and pass it in.

Expected files in the snapshot folder:
    competitions.csv  id, title, status
    submissions.csv   id, competition_id, photographer_id, photographer_name,
                      title, average_rating, rating_count, status
    ratings.csv       user_id, submission_id, rating, created_at

Usage:
    from snapscape.ingestion.snapshot import SnapshotStore
    store = SnapshotStore.from_folder(Path("data/raw"))
"""

from pathlib import Path

import pandas as pd

from snapscape.config import (
    APPROVED_STATUS,
    COMPETITION_COLUMNS,
    COMPETITIONS_FILE,
    RATING_COLUMNS,
    RATINGS_FILE,
    SNAPSHOT_FOLDER,
    SUBMISSION_COLUMNS,
    SUBMISSIONS_FILE,
)
from snapscape.results.models import Competition, Submission
from snapscape.utils import missing_columns, setup_logging, validate_competition_status

# --- Module Logger ---
logger = setup_logging(__name__)

ID_COLUMNS = ("id", "competition_id", "photographer_id", "user_id", "submission_id")


class SnapshotError(Exception):
    """Base exception for snapshot loading errors"""
    pass


class DataFetchError(SnapshotError):
    """A store could not be read; the whole request fails with no partial results"""
    pass


class CompetitionNotFoundError(DataFetchError):
    """Raised when a competition id is not in the snapshot"""

    def __init__(self, competition_id: str):
        super().__init__(f"Competition '{competition_id}' not found")
        self.competition_id = competition_id


def _read_csv(path: Path) -> pd.DataFrame:
    try:
        # Everything as text; numeric fields are parsed by Submission.from_record
        return pd.read_csv(path, dtype=str)
    except FileNotFoundError as e:
        raise DataFetchError(f"Snapshot file not found: {path}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataFetchError(f"Could not parse {path}: {e}") from e
    except OSError as e:
        raise DataFetchError(f"Could not read {path}: {e}") from e


def _competition(row: dict) -> Competition:
    title = row.get('title')
    return Competition(
        id=str(row['id']),
        title='' if pd.isna(title) else str(title),
        status=str(row['status']),
    )


def _check_columns(df: pd.DataFrame, required, label: str) -> None:
    missing = missing_columns(df.columns, required)
    if missing:
        raise DataFetchError(f"{label} is missing columns: {', '.join(missing)}")


def _drop_blank_ids(df: pd.DataFrame, columns: list[str], label: str) -> pd.DataFrame:
    """Drop rows with an empty id in any of the given columns, logging how many."""
    blank = (df[columns] == "").any(axis=1)
    if blank.any():
        logger.warning(f"Dropping {int(blank.sum())} {label} rows with a missing {'/'.join(columns)}")
    return df[~blank].reset_index(drop=True)


class SnapshotStore:
    """Read-only view over one snapshot of the competition, submission and rating stores."""

    def __init__(self, competitions: pd.DataFrame, submissions: pd.DataFrame, ratings: pd.DataFrame | None = None):
        if ratings is None:
            ratings = pd.DataFrame(columns=sorted(RATING_COLUMNS))

        _check_columns(competitions, COMPETITION_COLUMNS, "competitions")
        _check_columns(submissions, SUBMISSION_COLUMNS, "submissions")
        _check_columns(ratings, RATING_COLUMNS, "ratings")

        self._competitions = competitions.copy()
        self._submissions = submissions.copy()
        self._ratings = ratings.copy()

        for df in (self._competitions, self._submissions, self._ratings):
            for column in ID_COLUMNS:
                if column in df.columns:
                    df[column] = df[column].fillna("").astype(str).str.strip()

        self._competitions = _drop_blank_ids(self._competitions, ["id"], "competitions")
        self._submissions = _drop_blank_ids(self._submissions, ["id", "competition_id", "photographer_id"], "submissions")
        self._ratings = _drop_blank_ids(self._ratings, ["user_id", "submission_id"], "ratings")

        self._ratings['created_at'] = pd.to_datetime(self._ratings['created_at'], errors='coerce')

        for status in self._competitions['status'].unique():
            try:
                validate_competition_status(status)
            except ValueError as e:
                logger.warning(f"{e}; competitions with this status never accrue points")

        logger.debug(
            f"Snapshot holds {len(self._competitions)} competitions, "
            f"{len(self._submissions)} submissions, {len(self._ratings)} ratings"
        )

    @classmethod
    def from_folder(cls, folder: Path | None = None) -> "SnapshotStore":
        """
        Load a snapshot from CSV exports.

        Raises:
            DataFetchError: If a file is missing, unreadable or lacks columns
        """
        folder = Path(folder or SNAPSHOT_FOLDER)
        logger.info(f"Loading snapshot from {folder}")
        return cls(
            competitions=_read_csv(folder / COMPETITIONS_FILE),
            submissions=_read_csv(folder / SUBMISSIONS_FILE),
            ratings=_read_csv(folder / RATINGS_FILE),
        )

    # --- Competition store ---
    def list_competitions(self, status: str | None = None) -> list[Competition]:
        df = self._competitions
        if status is not None:
            df = df[df['status'] == status]
        return [_competition(row) for row in df.to_dict('records')]

    def get_competition(self, competition_id: str) -> Competition:
        match = self._competitions[self._competitions['id'] == str(competition_id)]
        if match.empty:
            raise CompetitionNotFoundError(competition_id)
        return _competition(match.iloc[0].to_dict())

    # --- Submission store ---
    def get_approved_submissions(self, competition_id: str) -> list[Submission]:
        """All approved submissions for a competition, as normalised Submission records."""
        self.get_competition(competition_id)
        df = self._submissions
        df = df[(df['competition_id'] == str(competition_id)) & (df['status'] == APPROVED_STATUS)]
        return [Submission.from_record(record) for record in df.to_dict('records')]

    def get_user_submissions(self, user_id: str) -> list[Submission]:
        """Every submission by a user, whatever its status."""
        df = self._submissions[self._submissions['photographer_id'] == str(user_id)]
        return [Submission.from_record(record) for record in df.to_dict('records')]

    def count_approved_submissions(self, competition_id: str) -> int:
        df = self._submissions
        return int(((df['competition_id'] == str(competition_id)) & (df['status'] == APPROVED_STATUS)).sum())

    def list_user_ids(self) -> list[str]:
        """Everyone who has submitted or rated, sorted."""
        users = set(self._submissions['photographer_id']) | set(self._ratings['user_id'])
        return sorted(users)

    # --- Rating store ---
    def count_distinct_votes(self, user_id: str) -> int:
        """Number of distinct photos the user has rated; re-rating a photo counts once."""
        mine = self._ratings[self._ratings['user_id'] == str(user_id)]
        return int(mine['submission_id'].nunique())

    def latest_rating_at(self, competition_id: str | None = None) -> pd.Timestamp | None:
        """Timestamp of the most recent rating, in one competition or across the snapshot."""
        ratings = self._ratings
        if competition_id is not None:
            in_competition = self._submissions.loc[
                self._submissions['competition_id'] == str(competition_id), 'id'
            ]
            ratings = ratings[ratings['submission_id'].isin(in_competition)]
        latest = ratings['created_at'].max()
        return None if pd.isna(latest) else latest
