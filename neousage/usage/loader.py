"""Session loader: reads the message records of one session log."""

from pathlib import Path

from loguru import logger

from neousage.usage.models import MessageRecord
from neousage.usage.parser import decode_line, iter_lines, to_message


class SessionLoader:
    """
    Load message records from session log files.
    
    Nothing is cached; every call reads the file again.
    """
    
    def read_lines(self, path: Path) -> list[str] | None:
        """
        Read the non-empty lines of a log file.
        
        Returns:
            The lines, or None if the file is missing or unreadable.
        """
        if not path.exists():
            return None
        
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Failed to read session log {path}: {e}")
            return None
        
        return list(iter_lines(content))
    
    def load(self, path: Path) -> list[MessageRecord]:
        """
        Load every ``message`` record from a session log.
        
        A missing or unreadable file yields no records, and lines that do
        not decode are skipped.
        
        Args:
            path: Path to the session log.
        
        Returns:
            Message records in file order.
        """
        lines = self.read_lines(path)
        if lines is None:
            return []
        
        records = []
        skipped = 0
        for line in lines:
            data = decode_line(line)
            if data is None:
                skipped += 1
                continue
            record = to_message(data)
            if record is not None:
                records.append(record)
        
        if skipped:
            logger.debug(f"Skipped {skipped} malformed line(s) in {path}")
        
        return records
