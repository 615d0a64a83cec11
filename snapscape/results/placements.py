"""
Podium placements (achievements).

A photographer earns at most one placement per podium position in a
competition: their best submission holding that rank. Only submissions
eligible for a badge (rank 1-3 with a non-zero total rating) qualify.
"""

from typing import Iterable

from snapscape.results.models import PlacementRecord, RankedSubmission
from snapscape.results.points import prize_name
from snapscape.results.ranking import is_badge_eligible


def derive_placements(ranked: Iterable[RankedSubmission]) -> list[PlacementRecord]:
    """Build placement records for one competition's ranked submissions."""
    best: dict[tuple[str, int], RankedSubmission] = {}
    for r in ranked:
        if not is_badge_eligible(r):
            continue
        key = (r.photographer_id, r.rank)
        current = best.get(key)
        if current is None or r.average_rating > current.average_rating:
            best[key] = r

    records = [
        PlacementRecord(
            competition_id=r.competition_id,
            photographer_id=r.photographer_id,
            submission_id=r.id,
            position=r.rank,
            final_score=r.average_rating,
            prize=prize_name(r.rank),
        )
        for r in best.values()
    ]
    records.sort(key=lambda p: (p.competition_id, p.position, p.photographer_id))
    return records


def count_placements(records: Iterable[PlacementRecord]) -> dict[str, int]:
    counts = {'first_place': 0, 'second_place': 0, 'third_place': 0}
    names = {1: 'first_place', 2: 'second_place', 3: 'third_place'}
    for record in records:
        counts[names[record.position]] += 1
    counts['total_top_three'] = sum(counts.values())
    return counts
