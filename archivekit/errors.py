"""
Exception types for ArchiveKit.

Best-effort text transforms (SRT conversion, tag stripping, encoding
detection) never raise. These exceptions cover structural parse failures
and the network/filesystem boundary around them.
"""

from enum import Enum
from typing import Optional


class ArchiveKitError(Exception):
    """Base class for all ArchiveKit errors."""


class ParseErrorKind(str, Enum):
    """Closed set of reasons a subtitle document can be rejected."""
    INVALID_ENCODING = "invalid_encoding"
    MISSING_HEADER = "missing_header"
    MALFORMED_STRUCTURE = "malformed_structure"


_PARSE_ERROR_MESSAGES = {
    ParseErrorKind.INVALID_ENCODING: "Unable to decode subtitle file",
    ParseErrorKind.MISSING_HEADER: "Invalid WebVTT file - missing WEBVTT header",
    ParseErrorKind.MALFORMED_STRUCTURE: "Invalid subtitle file format",
}


class SubtitleParseError(ArchiveKitError):
    """Raised when a subtitle document has the wrong top-level shape."""

    def __init__(self, kind: ParseErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or _PARSE_ERROR_MESSAGES[kind]
        super().__init__(f"[{kind.value}] {self.message}")


class SubtitleDownloadError(ArchiveKitError):
    """Raised when a subtitle file cannot be fetched."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class SubtitleCacheError(ArchiveKitError):
    """Raised when the subtitle cache directory cannot be used."""
