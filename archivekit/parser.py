"""
WebVTT parser for subtitle display.

Turns a WebVTT document into an ordered list of SubtitleCue objects and
answers "which cues are showing at time T" queries for an overlay.

A document without the WEBVTT header is rejected outright. Individual
blocks with bad timings or no text are skipped; the rest of the document
still parses.
"""

import logging
import re
from typing import List, Optional, Tuple

import requests

from .converter import TIMING_ARROW, WEBVTT_HEADER, is_timing_line
from .errors import ParseErrorKind, SubtitleDownloadError, SubtitleParseError
from .models import SubtitleCue
from .utils import normalize_line_endings, timestamp_to_seconds

logger = logging.getLogger(__name__)

# Styling tags: <b>, <i>, <u>, <c.classname>, <v speaker>, <00:00:01.000>
_TAG_RE = re.compile(r'<[^>]+>')


def strip_tags(text: str) -> str:
    """
    Remove WebVTT/HTML-like styling tags from cue text.

    Example:
        >>> strip_tags("<v Roger><b>Hi</b> there</v>")
        'Hi there'
    """
    return _TAG_RE.sub('', text)


def parse_timing_line(line: str) -> Optional[Tuple[float, float]]:
    """
    Parse a timing line such as ``00:00:01.000 --> 00:00:04.000 align:start``.

    Cue settings after the end timestamp are ignored.

    Returns:
        (start, end) in seconds, or None if either timestamp is invalid
    """
    components = line.split(TIMING_ARROW)
    if len(components) < 2:
        return None

    end_tokens = components[1].split()
    if not end_tokens:
        return None

    start = timestamp_to_seconds(components[0].strip())
    end = timestamp_to_seconds(end_tokens[0])
    if start is None or end is None:
        return None
    return start, end


def _parse_cue_block(block: str) -> Optional[SubtitleCue]:
    lines = block.split('\n')

    timing_index = None
    for index, line in enumerate(lines):
        if is_timing_line(line):
            timing_index = index
            break
    if timing_index is None:
        return None

    timing = parse_timing_line(lines[timing_index])
    if timing is None:
        logger.debug(f"Skipping cue with invalid timing: {lines[timing_index]!r}")
        return None

    start, end = timing
    if end < start:
        logger.debug(f"Skipping cue that ends before it starts: {lines[timing_index]!r}")
        return None

    text = '\n'.join(lines[timing_index + 1:]).strip()
    text = strip_tags(text)
    if not text:
        return None

    return SubtitleCue(start_time=start, end_time=end, text=text)


def parse_vtt_content(vtt_content: str) -> List[SubtitleCue]:
    """
    Parse WebVTT content into cues sorted by start time.

    Args:
        vtt_content: WebVTT file content as string

    Returns:
        List of SubtitleCue sorted ascending by start time

    Raises:
        SubtitleParseError: If the content does not start with WEBVTT, or
            the header line is followed by something other than whitespace

    Example:
        >>> cues = parse_vtt_content("WEBVTT\\n\\n00:01.000 --> 00:04.000\\nHello")
        >>> cues[0].start_time, cues[0].text
        (1.0, 'Hello')
    """
    normalized = normalize_line_endings(vtt_content).lstrip("\ufeff")
    if not normalized.startswith(WEBVTT_HEADER):
        raise SubtitleParseError(ParseErrorKind.MISSING_HEADER)

    # "WEBVTT" must be followed by whitespace or end of line
    header_line = normalized.split("\n", 1)[0]
    rest = header_line[len(WEBVTT_HEADER):]
    if rest and not rest[0].isspace():
        raise SubtitleParseError(
            ParseErrorKind.MALFORMED_STRUCTURE,
            f"Invalid WebVTT header line: {header_line[:40]!r}",
        )

    blocks = normalized.split('\n\n')
    cues = []
    # First block is the header
    for block in blocks[1:]:
        cue = _parse_cue_block(block)
        if cue is not None:
            cues.append(cue)

    cues.sort(key=lambda cue: cue.start_time)
    logger.debug(f"Parsed {len(cues)} cues from {len(blocks) - 1} blocks")
    return cues


def cues_at(cues: List[SubtitleCue], time: float) -> List[SubtitleCue]:
    """Return every cue active at ``time``."""
    return [cue for cue in cues if cue.is_active(time)]


class SubtitleParser:
    """
    Parser for WebVTT documents from strings, bytes or URLs.
    """

    def __init__(self, timeout: int = 30, verify_ssl: bool = True):
        """
        Initialize subtitle parser.

        Args:
            timeout: Request timeout in seconds for parse_url (default: 30)
            verify_ssl: Whether to verify SSL certificates (default: True)
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def parse(self, vtt_content: str) -> List[SubtitleCue]:
        """Parse a WebVTT string. See parse_vtt_content."""
        return parse_vtt_content(vtt_content)

    def parse_bytes(self, data: bytes) -> List[SubtitleCue]:
        """
        Parse WebVTT bytes, which must be UTF-8.

        Raises:
            SubtitleParseError: If the bytes are not UTF-8 or the header is missing
        """
        try:
            content = data.decode('utf-8')
        except UnicodeDecodeError as e:
            logger.warning(f"WebVTT data is not valid UTF-8: {str(e)}")
            raise SubtitleParseError(ParseErrorKind.INVALID_ENCODING) from e
        return self.parse(content)

    def parse_url(self, url: str) -> List[SubtitleCue]:
        """
        Download and parse a WebVTT file.

        Raises:
            SubtitleDownloadError: If the download fails
            SubtitleParseError: If the document is not valid WebVTT
        """
        logger.info(f"Fetching WebVTT from: {url[:100]}")
        try:
            response = requests.get(url, timeout=self.timeout, verify=self.verify_ssl)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to download WebVTT from {url[:100]}: {str(e)}")
            raise SubtitleDownloadError(url, f"WebVTT download failed: {str(e)}") from e

        cues = self.parse_bytes(response.content)
        logger.info(f"Parsed {len(cues)} cues from {url[:100]}")
        return cues
