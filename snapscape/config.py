"""
Central configuration for the SnapScape results engine.

All shared constants and configuration values should be defined here
to avoid duplication and ensure consistency across modules.
"""

from pathlib import Path

# --- Project Paths ---
PROJECT_ROOT = Path(__file__).parent.parent
DATA_FOLDER = PROJECT_ROOT / "data"
OUTPUT_FOLDER = DATA_FOLDER / "processed"
SNAPSHOT_FOLDER = DATA_FOLDER / "raw"

# --- Snapshot Files ---
COMPETITIONS_FILE = "competitions.csv"
SUBMISSIONS_FILE = "submissions.csv"
RATINGS_FILE = "ratings.csv"

# Columns each snapshot file must provide
COMPETITION_COLUMNS = frozenset({"id", "title", "status"})
SUBMISSION_COLUMNS = frozenset({
    "id", "competition_id", "photographer_id", "photographer_name",
    "title", "average_rating", "rating_count", "status",
})
RATING_COLUMNS = frozenset({"user_id", "submission_id", "rating", "created_at"})

# --- Lifecycle Statuses ---
APPROVED_STATUS = "approved"
COMPLETED_STATUS = "completed"
COMPETITION_STATUSES = frozenset({"upcoming", "active", "voting", "completed"})

# --- Scoring Configuration ---
RANK_MULTIPLIERS = {1: 5, 2: 3, 3: 2}
DEFAULT_MULTIPLIER = 1  # Rank 4 and below
VOTE_POINTS = 1  # Points per distinct rating cast

MIN_AVERAGE_RATING = 0.0
MAX_AVERAGE_RATING = 5.0

# average_rating * rating_count is rounded to this many decimals before
# comparison, so 4.333333 * 3 and 13.0 rank together
TOTAL_RATING_PRECISION = 6

# --- Display Configuration ---
PODIUM_LABELS = {1: "1st", 2: "2nd", 3: "3rd"}
MEDALS = {1: "gold", 2: "silver", 3: "bronze"}
PRIZE_NAMES = {1: "Gold Medal", 2: "Silver Medal", 3: "Bronze Medal"}
LEADERBOARD_LIMIT = 10

# --- Caller Messages ---
RESULTS_UNAVAILABLE_MESSAGE = "Results are unavailable right now. Please try again later."
NO_SUBMISSIONS_MESSAGE = "No submissions yet."
