"""
Tests for the results pipeline.
"""

import pandas as pd
import pytest

from snapscape.config import COMPETITIONS_FILE, RATINGS_FILE, SUBMISSIONS_FILE
from snapscape.ingestion.snapshot import DataFetchError, SnapshotStore
from snapscape.results.engine import (
    breakdowns_to_frame,
    compute_competition_results,
    main,
    process_snapshot,
    ranked_to_frame,
    results_cache_key,
    standings_to_frame,
)


def submission(sid, competition, photographer, avg, count, status="approved"):
    return {
        "id": sid, "competition_id": competition, "photographer_id": photographer,
        "photographer_name": photographer.title(), "title": sid,
        "average_rating": avg, "rating_count": count, "status": status,
    }


@pytest.fixture
def store():
    competitions = pd.DataFrame([
        {"id": "c1", "title": "Landscapes", "status": "completed"},
        {"id": "empty", "title": "Nobody Came", "status": "completed"},
    ])
    submissions = pd.DataFrame([
        submission("a", "c1", "ann", 5, 2),
        submission("b", "c1", "ben", 4, 3),
        submission("c", "c1", "cy", 4, 3),
        submission("d", "c1", "ann", 1, 1),
    ])
    ratings = pd.DataFrame([
        {"user_id": "ben", "submission_id": "a", "rating": 5, "created_at": "2026-04-01"},
    ])
    return SnapshotStore(competitions, submissions, ratings)


class TestComputeCompetitionResults:
    """Tests for compute_competition_results function."""

    def test_worked_example(self, store):
        results = compute_competition_results("c1", store)
        assert [(r.id, r.rank) for r in results.ranked] == [("b", 1), ("c", 1), ("a", 2), ("d", 3)]
        assert [p.points for p in results.points] == [60, 60, 30, 2]

    def test_standings(self, store):
        results = compute_competition_results("c1", store)
        standings = {s.photographer_id: s for s in results.standings}
        # ann: 30 + 2, ben: 60, cy: 60
        assert standings["ann"].total_points == 32
        assert standings["ann"].total_submissions == 2
        assert standings["ben"].rank == standings["cy"].rank == 1
        assert standings["ann"].rank == 2

    def test_placements(self, store):
        results = compute_competition_results("c1", store)
        assert [(p.photographer_id, p.position, p.prize) for p in results.placements] == [
            ("ben", 1, "Gold Medal"), ("cy", 1, "Gold Medal"),
            ("ann", 2, "Silver Medal"), ("ann", 3, "Bronze Medal"),
        ]

    def test_empty_competition(self, store):
        results = compute_competition_results("empty", store)
        assert results.is_empty
        assert results.ranked == ()
        assert results.standings == ()

    def test_unknown_competition(self, store):
        with pytest.raises(DataFetchError):
            compute_competition_results("nope", store)


class TestResultsCacheKey:
    """Tests for results_cache_key function."""

    def test_new_vote_changes_key(self):
        before = results_cache_key("c1", "voting", pd.Timestamp("2026-04-01 10:00"))
        after = results_cache_key("c1", "voting", pd.Timestamp("2026-04-01 10:05"))
        assert before != after

    def test_status_change_changes_key(self):
        stamp = pd.Timestamp("2026-04-01 10:00")
        assert results_cache_key("c1", "voting", stamp) != results_cache_key("c1", "completed", stamp)

    def test_no_ratings(self):
        assert results_cache_key("c1", "active", None) == ("c1", "active", None, 0)

    def test_new_submission_changes_key(self):
        assert results_cache_key("c1", "active", None, 2) != results_cache_key("c1", "active", None, 3)

    def test_store_counts_approved_submissions(self, store):
        assert store.count_approved_submissions("c1") == 4
        assert store.count_approved_submissions("empty") == 0


class TestFrames:
    """Tests for DataFrame builders."""

    def test_ranked_frame(self, store):
        results = compute_competition_results("c1", store)
        df = ranked_to_frame(results.ranked, results.points)
        assert list(df['points']) == [60, 60, 30, 2]
        assert list(df['placement']) == ["1st", "1st", "2nd", "3rd"]
        assert list(df['medal']) == ["gold", "gold", "silver", "bronze"]

    def test_empty_frames_keep_columns(self):
        assert 'points' in ranked_to_frame([], []).columns
        assert 'total_points' in standings_to_frame([]).columns
        assert breakdowns_to_frame([]).empty


class TestProcessSnapshot:
    """Tests for the CSV pipeline."""

    @pytest.fixture
    def snapshot_folder(self, tmp_path):
        folder = tmp_path / "raw"
        folder.mkdir()
        pd.DataFrame([{"id": "c1", "title": "Landscapes", "status": "completed"}]).to_csv(
            folder / COMPETITIONS_FILE, index=False)
        pd.DataFrame([
            submission("a", "c1", "ann", 5, 2),
            submission("b", "c1", "ben", 4, 1),
        ]).to_csv(folder / SUBMISSIONS_FILE, index=False)
        pd.DataFrame([
            {"user_id": "ben", "submission_id": "a", "rating": 5, "created_at": "2026-04-01"},
            {"user_id": "ann", "submission_id": "b", "rating": 4, "created_at": "2026-04-02"},
        ]).to_csv(folder / RATINGS_FILE, index=False)
        return folder

    def test_writes_outputs(self, snapshot_folder, tmp_path):
        output = tmp_path / "processed"
        result = process_snapshot(snapshot_folder, output)

        names = sorted(p.name for p in output.glob("*.csv"))
        assert names == [
            "c1_photographers_20260402.csv",
            "c1_results_20260402.csv",
            "placements_20260402.csv",
            "user_points_20260402.csv",
        ]
        users = pd.read_csv(output / "user_points_20260402.csv")
        # ann: 10 x 5 + 1 vote, ben: 4 x 3 + 1 vote
        assert dict(zip(users['user_id'], users['total_points'])) == {"ann": 51, "ben": 13}
        assert set(result['competitions']) == {"c1"}

    def test_replaces_older_exports(self, snapshot_folder, tmp_path):
        output = tmp_path / "processed"
        output.mkdir()
        (output / "user_points_20250101.csv").write_text("stale")
        process_snapshot(snapshot_folder, output)
        assert not (output / "user_points_20250101.csv").exists()

    def test_orphan_submission_does_not_abort_export(self, snapshot_folder, tmp_path):
        pd.DataFrame([
            submission("a", "c1", "ann", 5, 2),
            submission("b", "c1", "ben", 4, 1),
            submission("o", "gone", "ann", 5, 5),
        ]).to_csv(snapshot_folder / SUBMISSIONS_FILE, index=False)
        output = tmp_path / "processed"
        process_snapshot(snapshot_folder, output)

        users = pd.read_csv(output / "user_points_20260402.csv")
        assert dict(zip(users['user_id'], users['total_points'])) == {"ann": 51, "ben": 13}
        assert (output / "c1_results_20260402.csv").exists()

    def test_fetch_failure_writes_nothing(self, tmp_path):
        output = tmp_path / "processed"
        with pytest.raises(DataFetchError):
            process_snapshot(tmp_path / "missing", output)
        assert not output.exists()

    def test_main_reports_unavailable(self, tmp_path):
        assert main([str(tmp_path / "missing")]) is None
