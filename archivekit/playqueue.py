"""
Audio play queue with shuffle and repeat.

Holds the tracks of an album, the index of the current one, and the
shuffle/repeat state. Navigation methods return the track to play next,
or None when playback should stop.
"""

import logging
import random
from enum import Enum
from typing import List, Optional

from .models import AudioTrack

logger = logging.getLogger(__name__)


class RepeatMode(Enum):
    OFF = 0
    ALL = 1
    ONE = 2

    @property
    def is_active(self) -> bool:
        return self is not RepeatMode.OFF


class AudioQueueManager:
    """
    Manages an audio playback queue.

    Shuffling keeps the current track at the front; turning shuffle off
    restores the original order and keeps the current track playing.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source for shuffling (default: a new random.Random)
        """
        self.rng = rng or random.Random()
        self.tracks: List[AudioTrack] = []
        self.current_index = 0
        self.is_shuffled = False
        self.repeat_mode = RepeatMode.OFF
        self._original_order: List[AudioTrack] = []

    @property
    def current_track(self) -> Optional[AudioTrack]:
        if 0 <= self.current_index < len(self.tracks):
            return self.tracks[self.current_index]
        return None

    @property
    def has_next(self) -> bool:
        if self.repeat_mode.is_active:
            return bool(self.tracks)
        return self.current_index < len(self.tracks) - 1

    @property
    def has_previous(self) -> bool:
        if self.repeat_mode is RepeatMode.ALL:
            return bool(self.tracks)
        return self.current_index > 0

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    @property
    def current_position(self) -> int:
        """1-based position for display."""
        return self.current_index + 1

    def _shuffled(self, tracks: List[AudioTrack], keep_first: Optional[AudioTrack]) -> List[AudioTrack]:
        if keep_first is None:
            shuffled = list(tracks)
            self.rng.shuffle(shuffled)
            return shuffled

        rest = [track for track in tracks if track != keep_first]
        self.rng.shuffle(rest)
        return [keep_first] + rest

    def set_queue(self, tracks: List[AudioTrack], start_at: int = 0) -> None:
        """Replace the queue, starting at ``start_at`` (clamped to range)."""
        self._original_order = list(tracks)
        clamped = min(max(start_at, 0), max(len(tracks) - 1, 0))

        if self.is_shuffled and tracks:
            self.tracks = self._shuffled(tracks, tracks[clamped])
            self.current_index = 0
        else:
            self.tracks = list(tracks)
            self.current_index = clamped
        logger.debug(f"Queued {len(tracks)} tracks, starting at {clamped}")

    def clear(self) -> None:
        self.tracks = []
        self._original_order = []
        self.current_index = 0
        self.is_shuffled = False
        self.repeat_mode = RepeatMode.OFF

    def next(self) -> Optional[AudioTrack]:
        """Advance; repeat-one stays put, repeat-all wraps to the start."""
        if not self.tracks:
            return None

        if self.repeat_mode is RepeatMode.ONE:
            return self.current_track

        if self.current_index < len(self.tracks) - 1:
            self.current_index += 1
        elif self.repeat_mode is RepeatMode.ALL:
            self.current_index = 0
        else:
            return None
        return self.current_track

    def previous(self) -> Optional[AudioTrack]:
        """Go back; at the start this wraps with repeat-all, else restarts the current track."""
        if not self.tracks:
            return None

        if self.current_index > 0:
            self.current_index -= 1
        elif self.repeat_mode is RepeatMode.ALL:
            self.current_index = len(self.tracks) - 1
        return self.current_track

    def jump_to_index(self, index: int) -> Optional[AudioTrack]:
        if not 0 <= index < len(self.tracks):
            return None
        self.current_index = index
        return self.current_track

    def jump_to_track(self, track: AudioTrack) -> Optional[AudioTrack]:
        try:
            index = self.tracks.index(track)
        except ValueError:
            return None
        return self.jump_to_index(index)

    def toggle_shuffle(self) -> None:
        self.is_shuffled = not self.is_shuffled
        current = self.current_track
        if current is None:
            return

        if self.is_shuffled:
            self.tracks = self._shuffled(self._original_order, current)
            self.current_index = 0
        else:
            self.tracks = list(self._original_order)
            self.current_index = self.tracks.index(current) if current in self.tracks else 0

    def cycle_repeat_mode(self) -> RepeatMode:
        """off -> all -> one -> off"""
        modes = list(RepeatMode)
        self.repeat_mode = modes[(modes.index(self.repeat_mode) + 1) % len(modes)]
        return self.repeat_mode

    def set_repeat_mode(self, mode: RepeatMode) -> None:
        self.repeat_mode = mode
