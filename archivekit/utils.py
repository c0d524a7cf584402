"""
Shared utility functions for ArchiveKit.

Provides timestamp parsing and formatting used by the subtitle converter,
the cue parser and the playback progress model.
"""

from typing import Optional


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return text.replace('\r\n', '\n').replace('\r', '\n')


def _parse_number(value: str) -> Optional[float]:
    value = value.strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def timestamp_to_seconds(timestamp: str) -> Optional[float]:
    """
    Convert a subtitle timestamp to seconds.

    Accepts HH:MM:SS.mmm and MM:SS.mmm. The fractional part of the seconds
    may be separated by a period or a comma, so SRT timings parse too.

    Args:
        timestamp: Timestamp string

    Returns:
        Time in seconds, or None if the timestamp is not valid

    Example:
        >>> timestamp_to_seconds("00:01:30.500")
        90.5
        >>> timestamp_to_seconds("01:30,500")
        90.5
        >>> timestamp_to_seconds("90.5") is None
        True
    """
    parts = timestamp.strip().split(':')
    if len(parts) == 3:
        hours = _parse_number(parts[0])
        minutes = _parse_number(parts[1])
        seconds = _parse_number(parts[2].replace(',', '.'))
    elif len(parts) == 2:
        hours = 0.0
        minutes = _parse_number(parts[0])
        seconds = _parse_number(parts[1].replace(',', '.'))
    else:
        return None

    if hours is None or minutes is None or seconds is None:
        return None
    return hours * 3600 + minutes * 60 + seconds


def format_time(seconds: float) -> str:
    """
    Format a playback position for display.

    Example:
        >>> format_time(5025)
        '1:23:45'
        >>> format_time(1425)
        '23:45'
    """
    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
