"""Utility functions for neousage."""

from neousage.utils.helpers import iter_files, truncate

__all__ = ["iter_files", "truncate"]
