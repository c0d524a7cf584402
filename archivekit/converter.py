"""
SRT to WebVTT conversion for ArchiveKit.

Players that only understand WebVTT need SRT (SubRip) subtitles rewritten:
a WEBVTT header is added, cue index lines are dropped and the millisecond
separator in timing lines changes from a comma to a period.

Every function here is best-effort. Malformed input degrades to partial
or empty output and nothing raises.
"""

import logging
import re
from typing import List, Optional

from .utils import normalize_line_endings

logger = logging.getLogger(__name__)

WEBVTT_HEADER = "WEBVTT"
TIMING_ARROW = " --> "

# Decoding order matters: latin-1 maps every byte, so it has to come last
# or it would swallow valid UTF-8 as mojibake.
_FALLBACK_ENCODINGS = ("utf-8", "cp1252")

_SRT_EXTENSION_RE = re.compile(re.escape(".srt"), re.IGNORECASE)


def is_timing_line(line: str) -> bool:
    """
    Check if a line is an SRT/VTT timing line.

    Example:
        >>> is_timing_line("00:00:01,000 --> 00:00:04,000")
        True
    """
    return TIMING_ARROW in line


def convert_timestamp(srt_timestamp: str) -> str:
    """
    Convert SRT timestamp notation to VTT notation (comma to period).

    No range validation is done; anything else passes through unchanged.

    Example:
        >>> convert_timestamp("00:01:23,456")
        '00:01:23.456'
    """
    return srt_timestamp.replace(',', '.')


def vtt_filename_from_srt(srt_filename: str) -> str:
    """
    Generate a VTT filename from an SRT filename.

    Example:
        >>> vtt_filename_from_srt("movie_english.SRT")
        'movie_english.vtt'
    """
    return _SRT_EXTENSION_RE.sub(".vtt", srt_filename)


def decode_subtitle_data(data: bytes) -> str:
    """
    Decode raw subtitle bytes, guessing the encoding.

    Tries UTF-8, then Windows-1252 (keeps smart quotes and dashes from
    legacy European files), and finally Latin-1, which accepts any byte
    sequence.

    Args:
        data: Raw subtitle file content

    Returns:
        Decoded text
    """
    for encoding in _FALLBACK_ENCODINGS:
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"Subtitle data is not valid {encoding}")
            continue
        if encoding != "utf-8":
            logger.info(f"Decoded subtitle data as {encoding}")
        return text

    logger.info("Decoded subtitle data as latin-1")
    return data.decode("latin-1")


def _find_timing_line(lines: List[str]) -> Optional[int]:
    for index, line in enumerate(lines):
        if is_timing_line(line):
            return index
    return None


def convert_srt_to_vtt(srt_content: str) -> str:
    """
    Convert SRT subtitle content to WebVTT.

    Blocks are separated by blank lines. Within each block the first line
    containing `` --> `` is the timing line; everything after it is cue
    text. Blocks without a timing line or without text are dropped, as
    are cue index lines.

    Args:
        srt_content: SRT file content as string

    Returns:
        WebVTT content, always starting with the WEBVTT header

    Example:
        >>> srt = "1\\n00:00:01,000 --> 00:00:04,000\\nHello"
        >>> print(convert_srt_to_vtt(srt))
        WEBVTT
        <BLANKLINE>
        00:00:01.000 --> 00:00:04.000
        Hello
        <BLANKLINE>
        <BLANKLINE>
    """
    vtt = f"{WEBVTT_HEADER}\n\n"
    blocks = normalize_line_endings(srt_content).split('\n\n')

    converted = 0
    for block in blocks:
        lines = block.split('\n')
        if len(lines) < 2:
            continue

        timing_index = _find_timing_line(lines)
        if timing_index is None:
            continue

        timing_line = convert_timestamp(lines[timing_index])
        text = '\n'.join(lines[timing_index + 1:]).strip()
        if not text:
            continue

        vtt += f"{timing_line}\n"
        vtt += f"{text}\n\n"
        converted += 1

    logger.debug(f"Converted {converted} of {len(blocks)} SRT blocks to VTT cues")
    return vtt


def convert_srt_bytes_to_vtt(data: bytes) -> str:
    """Decode raw SRT bytes and convert them to WebVTT."""
    return convert_srt_to_vtt(decode_subtitle_data(data))
