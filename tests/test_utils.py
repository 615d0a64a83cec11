"""
Tests for shared utilities.
"""

import pandas as pd
import pytest

from snapscape.results.models import MalformedRecordError, Submission
from snapscape.utils import (
    atomic_write_csv,
    cleanup_old_files,
    missing_columns,
    round_half_away,
    validate_competition_status,
)


class TestRoundHalfAway:
    """Tests for round_half_away function."""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (-2.5, -3), (12.0, 12), (0, 0),
    ])
    def test_rounding(self, value, expected):
        assert round_half_away(value) == expected

    def test_returns_int(self):
        assert isinstance(round_half_away(7.0), int)

    def test_differs_from_builtin_round(self):
        assert round(2.5) == 2
        assert round_half_away(2.5) == 3


class TestFileOperations:
    """Tests for atomic_write_csv and cleanup_old_files."""

    def test_atomic_write_creates_parent(self, tmp_path):
        path = tmp_path / "nested" / "out.csv"
        atomic_write_csv(pd.DataFrame({"a": [1, 2]}), path, index=False)
        assert pd.read_csv(path)['a'].tolist() == [1, 2]
        assert list(path.parent.glob("*.csv")) == [path]

    def test_cleanup_keeps_newest(self, tmp_path):
        old = tmp_path / "c1_results_20250101.csv"
        new = tmp_path / "c1_results_20250201.csv"
        other = tmp_path / "c2_results_20250101.csv"
        for f in (old, new, other):
            f.write_text("x")
        deleted = cleanup_old_files("c1_results_*.csv", keep_file=new, folder=tmp_path)
        assert deleted == [old]
        assert new.exists()
        assert other.exists()


class TestValidation:
    """Tests for validation helpers."""

    def test_known_status(self):
        validate_competition_status("completed")

    def test_unknown_status(self):
        with pytest.raises(ValueError, match="Invalid competition status"):
            validate_competition_status("archived")

    def test_missing_columns(self):
        assert missing_columns(["id", "title"], {"id", "title", "status"}) == ["status"]
        assert missing_columns(["id"], {"id"}) == []


class TestSubmissionFromRecord:
    """Tests for Submission.from_record normalisation."""

    def test_camel_case_aliases(self):
        s = Submission.from_record({
            "_id": "s1", "competitionId": "c1", "photographerId": "u1",
            "photographerName": "Ann", "title": "T", "averageRating": 3.5, "ratingCount": 2,
        })
        assert (s.id, s.competition_id, s.photographer_id) == ("s1", "c1", "u1")
        assert s.total_rating == 7.0
        assert s.status == "approved"

    def test_non_numeric_defaults_to_zero(self, caplog):
        s = Submission.from_record({"id": "s1", "average_rating": "great", "rating_count": 4})
        assert (s.average_rating, s.rating_count) == (0.0, 0)
        assert any("malformed average_rating" in rec.getMessage() for rec in caplog.records)

    def test_out_of_range_is_clamped(self):
        s = Submission.from_record({"id": "s1", "average_rating": 7, "rating_count": -3})
        assert s.average_rating == 5.0
        assert s.rating_count == 0

    def test_fractional_count_truncated_with_warning(self, caplog):
        s = Submission.from_record({"id": "s1", "average_rating": 4, "rating_count": "2.7"})
        assert s.rating_count == 2
        assert any("fractional rating_count" in rec.getMessage() for rec in caplog.records)

    def test_malformed_error_carries_context(self):
        error = MalformedRecordError("s1", "rating_count", None)
        assert error.submission_id == "s1"
        assert isinstance(error, ValueError)
