"""
Data models for ArchiveKit.

Defines the core data structures used throughout the package.
"""

import math
import os
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from .utils import format_time, timestamp_to_seconds

# Media types as reported by the Internet Archive
VIDEO_MEDIA_TYPE = "movies"
AUDIO_MEDIA_TYPE = "etree"

# Marker filename for album-level audio progress (instead of per-track)
ALBUM_MARKER_FILENAME = "__album__"

COMPLETION_THRESHOLD = 0.95
RESUME_THRESHOLD_SECONDS = 10.0

_VALID_IDENTIFIER_RE = re.compile(r'^[a-zA-Z0-9._-]+$')

DEFAULT_DOWNLOAD_BASE_URL = "https://archive.org"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class SubtitleCue:
    """A timed span of subtitle text."""
    start_time: float  # seconds
    end_time: float    # seconds
    text: str

    def __post_init__(self):
        if self.start_time > self.end_time:
            raise ValueError(
                f"Cue ends before it starts: {self.start_time} > {self.end_time}"
            )

    def is_active(self, time: float) -> bool:
        """Start-inclusive, end-exclusive check for display at ``time``."""
        return self.start_time <= time < self.end_time


class SubtitleFormat(str, Enum):
    """Supported subtitle file formats."""
    SRT = "srt"
    VTT = "vtt"
    WEBVTT = "webvtt"

    @property
    def file_extension(self) -> str:
        return f".{self.value}"

    @property
    def is_natively_supported(self) -> bool:
        """WebVTT plays as-is; SRT has to be converted first."""
        return self is not SubtitleFormat.SRT

    @classmethod
    def from_filename(cls, filename: str) -> Optional["SubtitleFormat"]:
        lowercased = filename.lower()
        for fmt in cls:
            if lowercased.endswith(fmt.file_extension):
                return fmt
        return None


@dataclass(frozen=True)
class SubtitleTrack:
    """A subtitle file attached to an item, with its detected language."""
    filename: str
    format: SubtitleFormat
    language_code: Optional[str]
    language_display_name: str
    is_default: bool
    url: str

    @property
    def identifier(self) -> str:
        """Unique identifier combining filename and language for deduplication."""
        return f"{self.filename}_{self.language_code or 'unknown'}"


@dataclass(eq=False)
class AudioTrack:
    """
    An audio file in an album play queue.

    Tracks are identified by ``id`` (``"<item>/<filename>"``); two tracks
    with the same id are equal even if their metadata differs.
    """
    id: str
    item_identifier: str
    filename: str
    title: str
    stream_url: str
    track_number: Optional[int] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration: Optional[float] = None  # seconds
    thumbnail_url: Optional[str] = None

    def __eq__(self, other):
        if not isinstance(other, AudioTrack):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    @property
    def formatted_duration(self) -> str:
        if self.duration is None:
            return "--:--"
        return format_time(self.duration)

    @property
    def formatted_track_number(self) -> str:
        """Zero-padded track number (``"03"``), empty when unnumbered."""
        if self.track_number is None:
            return ""
        return f"{self.track_number:02d}"

    @property
    def artist_album_display(self) -> str:
        return " - ".join(part for part in (self.artist, self.album) if part)

    @classmethod
    def from_file(
        cls,
        file: Mapping[str, Any],
        item_identifier: str,
        item_title: Optional[str] = None,
        image_url: Optional[str] = None,
        base_url: str = DEFAULT_DOWNLOAD_BASE_URL,
    ) -> "AudioTrack":
        """
        Build a track from one entry of an item's metadata file list.

        Args:
            file: File metadata with ``name`` and optional ``track``,
                ``title``, ``creator``, ``album`` and ``length`` keys
            item_identifier: Item the file belongs to
            item_title: Item title, used when the file has no album
            image_url: Item thumbnail
            base_url: Site root used to build the stream URL

        Raises:
            KeyError: If the file has no name
        """
        name = file['name']
        title = file.get('title') or os.path.splitext(os.path.basename(name))[0]
        return cls(
            id=f"{item_identifier}/{name}",
            item_identifier=item_identifier,
            filename=name,
            title=title,
            stream_url=f"{base_url.rstrip('/')}/download/{item_identifier}/{quote(name, safe='/')}",
            track_number=_parse_track_number(file.get('track')),
            artist=file.get('creator'),
            album=file.get('album') or item_title,
            duration=_parse_length(file.get('length')),
            thumbnail_url=image_url,
        )


def _parse_track_number(value: Any) -> Optional[int]:
    # "3", "03" or "3/12"
    if value is None:
        return None
    head = str(value).split('/', 1)[0].strip()
    return int(head) if head.isdigit() else None


def _parse_length(value: Any) -> Optional[float]:
    # Seconds ("205.3") or a clock value ("3:25")
    if value is None:
        return None
    text = str(value).strip()
    if ':' in text:
        return timestamp_to_seconds(text)
    try:
        return float(text)
    except ValueError:
        return None


def sort_by_track_number(tracks: List[AudioTrack]) -> List[AudioTrack]:
    """Tracks ordered by track number, unnumbered ones last in their original order."""
    return sorted(tracks, key=lambda t: (t.track_number is None, t.track_number or 0))


@dataclass
class MediaProgressInfo:
    """Parameters for creating a PlaybackProgress entry."""
    identifier: str
    filename: str
    current_time: float
    duration: float
    title: Optional[str] = None
    image_url: Optional[str] = None
    # Audio only
    track_index: Optional[int] = None
    track_filename: Optional[str] = None
    track_current_time: Optional[float] = None


@dataclass(frozen=True, eq=False)
class PlaybackProgress:
    """
    Saved playback position for one (item identifier, filename) pair.

    For album-level audio tracking ``filename`` is ``ALBUM_MARKER_FILENAME``
    and ``current_time``/``duration`` hold a 0-100 percentage; the real
    in-track position lives in the ``track_*`` fields.

    Two records are equal when their item identifier and filename match,
    regardless of position, title or date.
    """
    item_identifier: str
    filename: str
    current_time: float
    duration: float
    last_watched_date: datetime = field(default_factory=utc_now)
    title: Optional[str] = None
    media_type: str = VIDEO_MEDIA_TYPE
    image_url: Optional[str] = None
    track_index: Optional[int] = None
    track_filename: Optional[str] = None
    track_current_time: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, 'current_time', max(float(self.current_time), 0.0))
        object.__setattr__(self, 'duration', max(float(self.duration), 0.0))
        object.__setattr__(self, 'last_watched_date', as_utc(self.last_watched_date))

    def __eq__(self, other):
        if not isinstance(other, PlaybackProgress):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    @property
    def key(self):
        return (self.item_identifier, self.filename)

    @property
    def is_video(self) -> bool:
        return self.media_type == VIDEO_MEDIA_TYPE

    @property
    def is_audio(self) -> bool:
        return self.media_type == AUDIO_MEDIA_TYPE

    @property
    def thumbnail_url(self) -> Optional[str]:
        return self.image_url or None

    def progress_fraction(self) -> float:
        """Progress from 0.0 to 1.0."""
        if self.duration <= 0:
            return 0.0
        return min(max(self.current_time / self.duration, 0.0), 1.0)

    def is_complete(self) -> bool:
        return self.progress_fraction() >= COMPLETION_THRESHOLD

    def time_remaining(self) -> float:
        """Seconds remaining (percentage points for album records)."""
        return max(self.duration - self.current_time, 0.0)

    def has_resumable_progress(self) -> bool:
        """
        Whether there is enough progress to offer resume.

        Audio records compare the in-track position when it is known.
        Without it they fall back to ``current_time``, which for album
        records is a percentage, not seconds.
        """
        if self.is_audio and self.track_current_time is not None:
            return self.track_current_time >= RESUME_THRESHOLD_SECONDS
        return self.current_time >= RESUME_THRESHOLD_SECONDS

    def is_valid(self) -> bool:
        """Whether this entry is usable for Continue Watching/Listening lists."""
        if not self.item_identifier or not self.filename:
            return False
        if not _VALID_IDENTIFIER_RE.match(self.item_identifier):
            return False
        for value in (self.current_time, self.duration):
            if not math.isfinite(value) or value < 0:
                return False
        return True

    def formatted_time_remaining(self) -> str:
        """Human readable remaining time, e.g. ``"12 min remaining"``."""
        # Album records use a 0-100 scale, not seconds
        if self.is_audio and self.duration == 100.0:
            percent_remaining = int(round(100.0 - self.progress_fraction() * 100.0))
            return f"{percent_remaining}% remaining"

        remaining = self.time_remaining()
        if remaining >= 3600:
            hours = int(remaining // 3600)
            minutes = int((remaining % 3600) // 60)
            if minutes > 0:
                return f"{hours} hr {minutes} min remaining"
            return f"{hours} hr remaining"
        if remaining >= 60:
            return f"{int(remaining // 60)} min remaining"
        return f"{int(remaining)} sec remaining"

    def formatted_current_time(self) -> str:
        return format_time(self.current_time)

    def formatted_duration(self) -> str:
        return format_time(self.duration)

    def with_updated_time(self, new_time: float, now: Optional[datetime] = None) -> "PlaybackProgress":
        """Copy of this entry at a new position, stamped with the current date."""
        return replace(self, current_time=new_time, last_watched_date=now or utc_now())

    @classmethod
    def video(cls, info: MediaProgressInfo, now: Optional[datetime] = None) -> "PlaybackProgress":
        return cls(
            item_identifier=info.identifier,
            filename=info.filename,
            current_time=info.current_time,
            duration=info.duration,
            last_watched_date=now or utc_now(),
            title=info.title,
            media_type=VIDEO_MEDIA_TYPE,
            image_url=info.image_url,
        )

    @classmethod
    def audio(cls, info: MediaProgressInfo, now: Optional[datetime] = None) -> "PlaybackProgress":
        return cls(
            item_identifier=info.identifier,
            filename=info.filename,
            current_time=info.current_time,
            duration=info.duration,
            last_watched_date=now or utc_now(),
            title=info.title,
            media_type=AUDIO_MEDIA_TYPE,
            image_url=info.image_url,
            track_index=info.track_index,
            track_filename=info.track_filename,
            track_current_time=info.track_current_time,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'item_identifier': self.item_identifier,
            'filename': self.filename,
            'current_time': self.current_time,
            'duration': self.duration,
            'last_watched_date': self.last_watched_date.isoformat(),
            'title': self.title,
            'media_type': self.media_type,
            'image_url': self.image_url,
            'track_index': self.track_index,
            'track_filename': self.track_filename,
            'track_current_time': self.track_current_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlaybackProgress":
        """
        Build an entry from its ``to_dict`` form.

        Raises:
            KeyError, TypeError, ValueError: If required fields are missing
                or malformed
        """
        for key in ('item_identifier', 'filename'):
            if not isinstance(data[key], str):
                raise TypeError(f"{key} must be a string, got {type(data[key]).__name__}")

        track_current_time = data.get('track_current_time')
        track_index = data.get('track_index')
        return cls(
            item_identifier=data['item_identifier'],
            filename=data['filename'],
            current_time=float(data['current_time']),
            duration=float(data['duration']),
            last_watched_date=datetime.fromisoformat(data['last_watched_date']),
            title=data.get('title'),
            media_type=data.get('media_type', VIDEO_MEDIA_TYPE),
            image_url=data.get('image_url'),
            track_index=int(track_index) if track_index is not None else None,
            track_filename=data.get('track_filename'),
            track_current_time=float(track_current_time) if track_current_time is not None else None,
        )


@dataclass
class ProgressStoreConfig:
    """Configuration for the playback progress store."""
    max_items: int = 50
    max_age_days: int = 30
    storage_key: str = "playback_progress_items"
    default_limit: int = 20


@dataclass
class SubtitleCacheConfig:
    """Configuration for subtitle download and conversion."""
    cache_dir: str = field(
        default_factory=lambda: os.path.join(os.path.expanduser("~"), ".cache", "archivekit", "subtitles")
    )
    timeout: int = 30
    verify_ssl: bool = True
    base_url: str = "https://archive.org"
