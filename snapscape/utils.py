"""
Shared utilities for the SnapScape results engine.

This module provides common functions used across multiple modules
to avoid code duplication.
"""

import logging
import shutil
import tempfile
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from snapscape.config import COMPETITION_STATUSES, OUTPUT_FOLDER


# --- Logging Setup ---
def setup_logging(name: str | None = None, level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__ from the calling module)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


# --- Rounding ---
def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3).

    Python's built-in round() uses banker's rounding, so every points
    figure goes through this function instead.
    """
    # str() gives the shortest repr, so 12.5 stays 12.5 rather than 12.4999...
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# --- File Operations ---
def cleanup_old_files(pattern: str, keep_file: Path | None = None, folder: Path | None = None) -> list[Path]:
    """
    Remove old files matching pattern, optionally keeping one specific file.

    Args:
        pattern: Glob pattern to match files (e.g., "c1_results_*.csv")
        keep_file: Path to the file that should NOT be deleted (usually the newest)
        folder: Folder to search in (default: OUTPUT_FOLDER)

    Returns:
        List of deleted file paths
    """
    logger = setup_logging(__name__)
    target_folder = folder or OUTPUT_FOLDER
    deleted = []

    for f in target_folder.glob(pattern):
        if keep_file and f.resolve() == keep_file.resolve():
            continue
        try:
            f.unlink()
            deleted.append(f)
            logger.debug(f"Deleted old file: {f}")
        except OSError as e:
            logger.warning(f"Could not delete {f}: {e}")

    return deleted


def atomic_write_csv(df, path: Path, **kwargs) -> None:
    """
    Write a DataFrame to CSV atomically using a temporary file.

    This prevents a half-written results file if the write is interrupted.

    Args:
        df: pandas DataFrame to write
        path: Destination path for the CSV file
        **kwargs: Additional arguments to pass to df.to_csv()
    """
    logger = setup_logging(__name__)

    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            delete=False,
            suffix='.csv',
            dir=path.parent  # Same filesystem for atomic move
        ) as tmp:
            tmp_path = Path(tmp.name)
            df.to_csv(tmp, **kwargs)

        shutil.move(str(tmp_path), str(path))
        logger.debug(f"Atomically wrote {len(df)} rows to {path}")

    except Exception:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


# --- Validation ---
def validate_competition_status(status: str) -> None:
    """
    Validate that a competition status is one the engine knows about.

    Raises:
        ValueError: If status is not in COMPETITION_STATUSES
    """
    if status not in COMPETITION_STATUSES:
        raise ValueError(
            f"Invalid competition status: '{status}'. "
            f"Allowed values: {', '.join(sorted(COMPETITION_STATUSES))}"
        )


def missing_columns(columns, required) -> list[str]:
    """Return the required column names absent from columns, sorted."""
    return sorted(set(required) - set(columns))


__all__ = [
    # Logging
    'setup_logging',
    # Rounding
    'round_half_away',
    # File operations
    'cleanup_old_files',
    'atomic_write_csv',
    # Validation
    'validate_competition_status',
    'missing_columns',
]
