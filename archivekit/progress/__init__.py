"""
Playback progress package.

Persists resume positions for Continue Watching/Listening with bounded
retention and one-time migrations.
"""

from .store import PlaybackProgressManager
from .storage import KeyValueStore, MemoryKeyValueStore, JSONFileKeyValueStore
from .migrations import Migration, DEFAULT_MIGRATIONS, AUDIO_PROGRESS_MIGRATION_V1, drop_audio_progress

__all__ = [
    "PlaybackProgressManager",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "Migration",
    "DEFAULT_MIGRATIONS",
    "AUDIO_PROGRESS_MIGRATION_V1",
    "drop_audio_progress",
]
