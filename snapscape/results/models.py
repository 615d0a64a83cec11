"""
Shared result types.

Every record the engine produces is a frozen dataclass: results are
recomputed from a fresh snapshot on each read and never mutated in place.
Raw store records enter through Submission.from_record, which applies the
rating-field defaulting rule.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from snapscape.config import (
    APPROVED_STATUS,
    MAX_AVERAGE_RATING,
    MIN_AVERAGE_RATING,
    TOTAL_RATING_PRECISION,
)
from snapscape.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

# Store exports use camelCase, the engine uses snake_case
FIELD_ALIASES = {
    "competitionId": "competition_id",
    "photographerId": "photographer_id",
    "photographerName": "photographer_name",
    "averageRating": "average_rating",
    "ratingCount": "rating_count",
    "_id": "id",
}


class MalformedRecordError(ValueError):
    """A submission record is missing a rating field or holds a non-numeric one."""

    def __init__(self, submission_id, field_name: str, value=None):
        super().__init__(
            f"Submission {submission_id!r} has malformed {field_name}: {value!r}"
        )
        self.submission_id = submission_id
        self.field_name = field_name
        self.value = value


def _normalise_keys(record: Mapping[str, Any]) -> dict:
    return {FIELD_ALIASES.get(key, key): value for key, value in record.items()}


def _parse_number(record: Mapping[str, Any], field_name: str) -> float:
    """Strictly parse a numeric rating field, raising MalformedRecordError."""
    value = record.get(field_name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MalformedRecordError(record.get("id"), field_name, value) from None
    if math.isnan(number) or math.isinf(number):
        raise MalformedRecordError(record.get("id"), field_name, value)
    return number


def _text(value, default: str = "") -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return default
    return str(value)


def total_rating_of(average_rating: float, rating_count: int) -> float:
    """Total rating = average x count, rounded to TOTAL_RATING_PRECISION."""
    return round(average_rating * rating_count, TOTAL_RATING_PRECISION)


@dataclass(frozen=True)
class Competition:
    """A competition as returned by the competition store."""
    id: str
    title: str
    status: str


@dataclass(frozen=True)
class Submission:
    """An approved photo submission with its aggregated rating."""
    id: str
    competition_id: str
    photographer_id: str
    photographer_name: str
    title: str
    average_rating: float
    rating_count: int
    status: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Submission":
        """
        Build a Submission from a loosely-typed store record.

        Missing or non-numeric rating fields default to average_rating=0 and
        rating_count=0; the problem is logged and the record is kept.
        Out-of-range values are clamped to the valid range.
        """
        data = _normalise_keys(record)
        submission_id = _text(data.get("id"))

        try:
            average_rating = _parse_number(data, "average_rating")
            rating_count = _parse_number(data, "rating_count")
        except MalformedRecordError as e:
            logger.warning(f"{e}; defaulting ratings to zero")
            average_rating, rating_count = 0.0, 0

        if not MIN_AVERAGE_RATING <= average_rating <= MAX_AVERAGE_RATING:
            logger.warning(
                f"Submission {submission_id!r} average_rating {average_rating} out of range; clamping"
            )
            average_rating = min(max(average_rating, MIN_AVERAGE_RATING), MAX_AVERAGE_RATING)
        if rating_count < 0:
            logger.warning(f"Submission {submission_id!r} has negative rating_count; using 0")
            rating_count = 0
        if rating_count != int(rating_count):
            logger.warning(f"Submission {submission_id!r} has fractional rating_count {rating_count}; truncating")

        return cls(
            id=submission_id,
            competition_id=_text(data.get("competition_id")),
            photographer_id=_text(data.get("photographer_id")),
            photographer_name=_text(data.get("photographer_name"), "Unknown"),
            title=_text(data.get("title")),
            average_rating=float(average_rating),
            rating_count=int(rating_count),
            status=_text(data.get("status"), APPROVED_STATUS),
        )

    @property
    def total_rating(self) -> float:
        return total_rating_of(self.average_rating, self.rating_count)


@dataclass(frozen=True)
class RankedSubmission:
    """A submission tagged with its total rating and dense rank."""
    submission: Submission
    total_rating: float
    rank: int

    # Convenience pass-throughs so callers can treat this like a submission
    @property
    def id(self) -> str:
        return self.submission.id

    @property
    def competition_id(self) -> str:
        return self.submission.competition_id

    @property
    def photographer_id(self) -> str:
        return self.submission.photographer_id

    @property
    def photographer_name(self) -> str:
        return self.submission.photographer_name

    @property
    def title(self) -> str:
        return self.submission.title

    @property
    def average_rating(self) -> float:
        return self.submission.average_rating

    @property
    def rating_count(self) -> int:
        return self.submission.rating_count


@dataclass(frozen=True)
class PointsEntry:
    submission_id: str
    competition_id: str
    rank: int
    total_rating: float
    multiplier: int
    points: int


@dataclass(frozen=True)
class PhotographerStanding:
    photographer_id: str
    name: str
    best_submission_id: str
    total_points: int
    total_votes: int
    total_rating: float
    total_submissions: int
    average_rating: float
    rank: int


@dataclass(frozen=True)
class UserPointsDetail:
    """One scored submission of a user, as it appears in a points breakdown."""
    competition_id: str
    competition_title: str
    competition_status: str
    submission_id: str
    title: str
    rank: int
    total_rating: float
    rating_count: int
    points: int


@dataclass(frozen=True)
class UserPointsBreakdown:
    user_id: str
    first_place_points: int
    second_place_points: int
    third_place_points: int
    other_submissions_points: int
    voting_points: int
    total_points: int
    details: tuple[UserPointsDetail, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PlacementRecord:
    """A podium finish: a photographer's best submission at one position."""
    competition_id: str
    photographer_id: str
    submission_id: str
    position: int
    final_score: float
    prize: str


@dataclass(frozen=True)
class ProfileStats:
    user_id: str
    total_submissions: int
    unique_competitions: int
    first_place: int
    second_place: int
    third_place: int
    total_top_three: int
    total_points: int
    points_breakdown: UserPointsBreakdown


@dataclass(frozen=True)
class CompetitionResults:
    """Everything a results page needs for one competition."""
    competition: Competition
    ranked: tuple[RankedSubmission, ...]
    points: tuple[PointsEntry, ...]
    standings: tuple[PhotographerStanding, ...]
    placements: tuple[PlacementRecord, ...]

    @property
    def is_empty(self) -> bool:
        return not self.ranked
