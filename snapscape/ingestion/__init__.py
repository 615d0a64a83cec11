"""
Data Ingestion

Modules:
- snapshot: Load competition, submission and rating store exports
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "SnapshotStore":
        from snapscape.ingestion.snapshot import SnapshotStore
        return SnapshotStore
    if name == "DataFetchError":
        from snapscape.ingestion.snapshot import DataFetchError
        return DataFetchError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
