"""Session path cache: maps session IDs to log files under the projects root."""

from pathlib import Path

from loguru import logger

from neousage.utils.helpers import iter_files


class SessionLocator:
    """
    Resolve session IDs to file paths relative to the projects root.
    
    The tree is walked once, on ``build()`` or on the first ``resolve()``,
    and every later lookup is a dict read. The cache is never refreshed
    behind the caller's back; call ``invalidate()`` or ``build()`` to pick
    up files added since.
    
    When two files share a session ID the one seen last in the walk wins.
    """
    
    def __init__(self, root: Path, extension: str = ".jsonl"):
        self.root = root
        self.extension = extension
        self._paths: dict[str, Path] | None = None
    
    @property
    def is_built(self) -> bool:
        """Whether the path cache has been built."""
        return self._paths is not None
    
    def build(self) -> dict[str, Path]:
        """
        Walk the projects root and (re)build the path cache.
        
        A missing root builds an empty cache.
        
        Raises:
            NotADirectoryError: If the root exists but is not a directory.
        """
        paths: dict[str, Path] = {}
        for file_path in iter_files(self.root, self.extension):
            session_id = file_path.name[: -len(self.extension)]
            paths[session_id] = file_path.relative_to(self.root)
        
        self._paths = paths
        logger.debug(f"Indexed {len(paths)} session file(s) under {self.root}")
        return dict(paths)
    
    def resolve(self, session_id: str) -> Path:
        """
        Get the path of a session log relative to the root.
        
        Falls back to ``<session_id><extension>`` when the ID is unknown;
        loading that path then finds nothing.
        """
        if self._paths is None:
            self.build()
        
        path = self._paths.get(session_id)
        if path is None:
            return Path(f"{session_id}{self.extension}")
        return path
    
    def invalidate(self) -> None:
        """Drop the cache so the next ``resolve()`` walks the tree again."""
        self._paths = None
