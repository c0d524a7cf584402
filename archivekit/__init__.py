"""
ArchiveKit - Playback toolkit for Internet Archive media

Pure-Python building blocks for an Internet Archive media player:
subtitle conversion and parsing, subtitle track discovery, resume
progress persistence and an audio play queue.

Features:
- Convert SRT subtitles to WebVTT with encoding detection
- Parse WebVTT into timed cues and look up the active cue
- Download and cache converted subtitles
- Detect subtitle tracks and their languages from item file lists
- Persist playback progress with bounded retention
- Audio queue with shuffle and repeat

Example usage:
    >>> from archivekit import PlaybackProgressManager, PlaybackProgress
    >>>
    >>> manager = PlaybackProgressManager()
    >>> manager.save_progress(PlaybackProgress(
    ...     item_identifier="movie1",
    ...     filename="a.mp4",
    ...     current_time=1800,
    ...     duration=3600,
    ... ))
    >>> manager.get_progress("movie1", "a.mp4").progress_fraction()
    0.5
"""

import logging

__version__ = "0.1.0"
__author__ = "ArchiveKit Contributors"
__license__ = "MIT"

# Add NullHandler to prevent "No handler found" warnings
# Users should configure logging in their application if they want to see logs
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Core utility functions
from .utils import (
    timestamp_to_seconds,
    format_time,
)

# SRT to WebVTT conversion
from .converter import (
    convert_timestamp,
    convert_srt_to_vtt,
    convert_srt_bytes_to_vtt,
    decode_subtitle_data,
    vtt_filename_from_srt,
    is_timing_line,
)

# WebVTT parsing
from .parser import SubtitleParser, parse_vtt_content, parse_timing_line, strip_tags, cues_at

# Main classes
from .downloader import SubtitleDownloader
from .tracks import SubtitleManager, SubtitleLanguage
from .playqueue import AudioQueueManager, RepeatMode
from .progress import (
    PlaybackProgressManager,
    KeyValueStore,
    MemoryKeyValueStore,
    JSONFileKeyValueStore,
    Migration,
)

# Data models
from .models import (
    SubtitleCue,
    SubtitleFormat,
    SubtitleTrack,
    AudioTrack,
    sort_by_track_number,
    PlaybackProgress,
    MediaProgressInfo,
    ProgressStoreConfig,
    SubtitleCacheConfig,
    ALBUM_MARKER_FILENAME,
)

# Errors
from .errors import (
    ArchiveKitError,
    ParseErrorKind,
    SubtitleParseError,
    SubtitleDownloadError,
    SubtitleCacheError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Timestamp helpers
    "timestamp_to_seconds",
    "format_time",

    # Conversion
    "convert_timestamp",
    "convert_srt_to_vtt",
    "convert_srt_bytes_to_vtt",
    "decode_subtitle_data",
    "vtt_filename_from_srt",
    "is_timing_line",

    # Parsing
    "SubtitleParser",
    "parse_vtt_content",
    "parse_timing_line",
    "strip_tags",
    "cues_at",

    # Main classes
    "SubtitleDownloader",
    "SubtitleManager",
    "SubtitleLanguage",
    "AudioQueueManager",
    "RepeatMode",
    "PlaybackProgressManager",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "Migration",

    # Models
    "SubtitleCue",
    "SubtitleFormat",
    "SubtitleTrack",
    "AudioTrack",
    "sort_by_track_number",
    "PlaybackProgress",
    "MediaProgressInfo",
    "ProgressStoreConfig",
    "SubtitleCacheConfig",
    "ALBUM_MARKER_FILENAME",

    # Errors
    "ArchiveKitError",
    "ParseErrorKind",
    "SubtitleParseError",
    "SubtitleDownloadError",
    "SubtitleCacheError",
]
