"""
Tolerant line parser for session logs.

Session logs are append-only and may be truncated mid-write, so a line that
fails to decode is expected and simply skipped; it is never an error.
"""

import json
from typing import Any, Iterator

from neousage.usage.models import MessageRecord


def iter_lines(text: str) -> Iterator[str]:
    """Split log content on newlines, dropping empty lines (incl. a trailing one)."""
    for line in text.split("\n"):
        if line:
            yield line


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite JSON constant: {name}")


def decode_line(line: str) -> dict[str, Any] | None:
    """
    Decode one log line.
    
    Returns:
        The decoded JSON object, or None if the line is not valid JSON
        or does not hold an object. NaN and Infinity are not JSON and
        make the line malformed; so does nesting too deep to decode.
    """
    try:
        data = json.loads(line, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def to_message(data: dict[str, Any]) -> MessageRecord | None:
    """Turn a decoded line into a message record; other record types give None."""
    if data.get("type") != "message":
        return None
    return MessageRecord.from_dict(data)


def parse_message(line: str) -> MessageRecord | None:
    """Decode a line and keep it only if it is a ``message`` record."""
    data = decode_line(line)
    return to_message(data) if data is not None else None
