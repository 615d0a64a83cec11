"""
Tests for photographer standings.
"""

import pytest

from snapscape.results.models import PointsEntry, Submission
from snapscape.results.photographers import rank_photographers, top_contributors
from snapscape.results.points import compute_all_points
from snapscape.results.ranking import rank_submissions


def sub(sid, avg, count, photographer):
    return Submission(sid, "c1", photographer, photographer.title(), sid, avg, count, "approved")


def standings_for(submissions):
    ranked = rank_submissions(submissions)
    return rank_photographers(compute_all_points(ranked), ranked)


class TestRankPhotographers:
    """Tests for rank_photographers function."""

    def test_empty_input(self):
        assert rank_photographers([], []) == []

    def test_sums_every_submission(self):
        # alice: 12 at rank 1 -> 60; alice: 3 at rank 4 -> 3
        submissions = [
            sub("a1", 4, 3, "alice"),
            sub("b1", 5, 2, "bob"),
            sub("c1", 2, 3, "carol"),
            sub("a2", 1, 3, "alice"),
        ]
        standings = {s.photographer_id: s for s in standings_for(submissions)}
        alice = standings["alice"]
        assert alice.total_points == 63
        assert alice.total_votes == 6
        assert alice.total_submissions == 2
        assert alice.total_rating == 15
        assert alice.best_submission_id == "a1"

    def test_total_points_equals_sum_of_entries(self):
        submissions = [sub(f"s{i}", 1 + (i % 5) * 0.8, 1 + i % 4, f"p{i % 3}") for i in range(12)]
        ranked = rank_submissions(submissions)
        entries = compute_all_points(ranked)
        standings = rank_photographers(entries, ranked)
        by_photographer = {r.id: r.photographer_id for r in ranked}
        for standing in standings:
            expected = sum(e.points for e in entries if by_photographer[e.submission_id] == standing.photographer_id)
            assert standing.total_points == expected

    def test_average_rating_is_unweighted_mean(self):
        standings = standings_for([sub("a", 5, 1, "alice"), sub("b", 3, 9, "alice")])
        # A count-weighted mean would be 3.2
        assert standings[0].average_rating == pytest.approx(4.0)

    def test_sorted_by_points_then_rating_then_votes(self):
        entries = [
            PointsEntry("x", "c1", 1, 10, 5, 50),
            PointsEntry("y", "c1", 1, 12, 5, 50),
            PointsEntry("z", "c1", 2, 12, 3, 50),
        ]
        submissions = [
            sub("x", 5, 2, "xena"),
            sub("y", 4, 3, "yuri"),
            sub("z", 2, 6, "zoe"),
        ]
        standings = rank_photographers(entries, submissions)
        assert [s.photographer_id for s in standings] == ["zoe", "yuri", "xena"]

    def test_dense_rank_on_total_points(self):
        entries = [
            PointsEntry("x", "c1", 1, 10, 5, 50),
            PointsEntry("y", "c1", 1, 12, 5, 50),
            PointsEntry("z", "c1", 2, 8, 3, 24),
        ]
        submissions = [sub("x", 5, 2, "xena"), sub("y", 4, 3, "yuri"), sub("z", 4, 2, "zoe")]
        ranks = {s.photographer_id: s.rank for s in rank_photographers(entries, submissions)}
        # Different total ratings but equal points share a rank
        assert ranks == {"yuri": 1, "xena": 1, "zoe": 2}

    def test_best_submission_first_wins_ties(self):
        entries = [PointsEntry("first", "c1", 1, 6, 5, 30), PointsEntry("second", "c1", 1, 6, 5, 30)]
        submissions = [sub("first", 3, 2, "pat"), sub("second", 2, 3, "pat")]
        standing = rank_photographers(entries, submissions)[0]
        assert standing.best_submission_id == "first"

    def test_skips_entries_without_submission(self):
        entries = [PointsEntry("ghost", "c1", 1, 5, 5, 25), PointsEntry("real", "c1", 2, 4, 3, 12)]
        standings = rank_photographers(entries, [sub("real", 4, 1, "pat")])
        assert len(standings) == 1
        assert standings[0].total_points == 12


class TestTopContributors:
    """Tests for top_contributors function."""

    def test_orders_by_submission_count(self):
        submissions = [
            sub("a1", 2, 1, "alice"), sub("a2", 2, 1, "alice"),
            sub("b1", 5, 1, "bob"),
        ]
        rows = top_contributors(submissions)
        assert [r['photographer_id'] for r in rows] == ["alice", "bob"]
        assert rows[0]['submission_count'] == 2
        assert rows[0]['average_rating'] == pytest.approx(2.0)

    def test_tie_broken_by_rating_sum(self):
        submissions = [sub("a1", 2, 1, "alice"), sub("b1", 5, 1, "bob")]
        rows = top_contributors(submissions, limit=1)
        assert [r['photographer_id'] for r in rows] == ["bob"]
