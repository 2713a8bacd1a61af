"""Utility functions for neousage."""

from pathlib import Path
from typing import Iterator


def iter_files(root: Path, suffix: str) -> Iterator[Path]:
    """
    Recursively yield files under ``root`` whose name ends with ``suffix``.
    
    Entries are visited in name order at every level, so a given directory
    snapshot always produces the same sequence. Symlinked directories are
    not descended into.
    
    Args:
        root: Directory to walk. A missing root yields nothing.
        suffix: File name suffix to match (e.g. ".jsonl").
    
    Raises:
        NotADirectoryError: If ``root`` exists but is not a directory.
    """
    if not root.exists():
        return
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    
    yield from _walk(root, suffix)


def _walk(directory: Path, suffix: str) -> Iterator[Path]:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if not entry.is_symlink():
                yield from _walk(entry, suffix)
        elif entry.is_file() and entry.name.endswith(suffix):
            yield entry


def truncate(text: str, max_length: int, marker: str = "...") -> str:
    """Cut ``text`` to ``max_length`` characters, appending ``marker`` if it was cut."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + marker
