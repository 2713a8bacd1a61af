"""Session enumeration: lightweight descriptors for every log in the tree."""

from datetime import datetime
from pathlib import Path

from loguru import logger

from neousage.usage.loader import SessionLoader
from neousage.usage.models import SessionInfo
from neousage.usage.parser import decode_line
from neousage.utils.helpers import iter_files, truncate


class SessionScanner:
    """
    Enumerate session logs under the projects root.
    
    Only the summary is extracted from each file; usage data is left to
    the aggregator. One unreadable file never fails the whole scan.
    """
    
    def __init__(
        self,
        root: Path,
        extension: str = ".jsonl",
        summary_max_length: int = 50,
        loader: SessionLoader | None = None,
    ):
        self.root = root
        self.extension = extension
        self.summary_max_length = summary_max_length
        self._loader = loader or SessionLoader()
    
    def list_sessions(self) -> list[SessionInfo]:
        """
        List all sessions, most recently modified first.
        
        Returns:
            Session descriptors; empty if the root does not exist.
        
        Raises:
            NotADirectoryError: If the root exists but is not a directory.
        """
        sessions = [self._describe(path) for path in iter_files(self.root, self.extension)]
        
        # Stable: equal mtimes keep walk order
        sessions.sort(key=lambda s: s.modified, reverse=True)
        
        logger.debug(f"Found {len(sessions)} session(s) under {self.root}")
        return sessions
    
    def _describe(self, path: Path) -> SessionInfo:
        """Build the descriptor of one log file."""
        session_id = path.name[: -len(self.extension)]
        
        try:
            modified = datetime.fromtimestamp(path.stat().st_mtime)
        except OSError as e:
            logger.warning(f"Failed to stat session log {path}: {e}")
            modified = datetime.fromtimestamp(0)
        
        lines = self._loader.read_lines(path)
        if lines is None:
            return SessionInfo(session_id=session_id, modified=modified)
        
        summary = self.extract_summary(lines)
        return SessionInfo(
            session_id=session_id,
            modified=modified,
            message_count=len(lines),
            summary=truncate(summary, self.summary_max_length) if summary else "",
        )
    
    @staticmethod
    def extract_summary(lines: list[str]) -> str:
        """
        Pick a human-readable summary for a session.
        
        A leading ``config`` record's summary wins; otherwise the content of
        the first user message with plain-text content is used. Returns an
        empty string when neither exists.
        """
        if not lines:
            return ""
        
        first = decode_line(lines[0])
        if first is not None and first.get("type") == "config":
            config = first.get("config")
            if isinstance(config, dict):
                summary = config.get("summary")
                if isinstance(summary, str) and summary:
                    return summary
        
        for line in lines:
            data = decode_line(line)
            if data is None:
                continue
            if (
                data.get("type") == "message"
                and data.get("role") == "user"
                and isinstance(data.get("content"), str)
            ):
                return data["content"]
        
        return ""
