"""
SnapScape Results Engine - Core Package

This package contains the core modules for:
- Competition ranking, points and standings (snapscape.results)
- Snapshot loading from the submission, rating and competition stores (snapscape.ingestion)
- Shared configuration and utilities
"""

from snapscape.config import *
