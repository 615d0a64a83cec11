"""
Competition Results

Modules:
- models: Shared result types
- ranking: Dense ranking of a competition's submissions
- points: Rank-tier multipliers, points and labels
- photographers: Photographer standings
- placements: Podium placements
- reconciler: Cross-competition user points
- engine: Full pipeline and CSV export
"""

_EXPORTS = {
    "rank_submissions": "snapscape.results.ranking",
    "compute_points": "snapscape.results.points",
    "rank_photographers": "snapscape.results.photographers",
    "compute_user_points_breakdown": "snapscape.results.reconciler",
    "reconcile_user_points": "snapscape.results.reconciler",
    "compute_profile_stats": "snapscape.results.reconciler",
    "compute_competition_results": "snapscape.results.engine",
    "run_results": "snapscape.results.engine",
}


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name in _EXPORTS:
        import importlib
        module = importlib.import_module(_EXPORTS[name])
        return getattr(module, "main" if name == "run_results" else name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
