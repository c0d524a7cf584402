"""
Playback progress persistence for Continue Watching/Listening.

PlaybackProgressManager keeps at most ``max_items`` PlaybackProgress
entries, keyed on (item identifier, filename), serialized as one JSON
array under a single key of a KeyValueStore.

Behaviour summary:
- The list is loaded from storage on first access and then served from
  memory; every mutation writes the whole list back before returning.
- Saving a complete entry (>= 95%) deletes it instead of storing it.
- After every save, entries older than ``max_age_days`` are dropped and
  the list is capped at ``max_items``, keeping the most recent.
- A blob that cannot be decoded is treated as an empty list.

Not thread-safe; callers serialize access.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..models import PlaybackProgress, ProgressStoreConfig, as_utc, utc_now
from .migrations import DEFAULT_MIGRATIONS, Migration, pending_migrations
from .storage import KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)


class PlaybackProgressManager:
    """
    Saves and retrieves playback progress for resume functionality.

    One instance should be created by the application and passed to
    whatever needs it.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        config: Optional[ProgressStoreConfig] = None,
        clock: Callable[[], datetime] = utc_now,
        migrations: Optional[List[Migration]] = None,
    ):
        """
        Initialize the manager and run pending migrations.

        Args:
            store: Key-value persistence (default: in-memory)
            config: Limits and storage key (default: ProgressStoreConfig())
            clock: Returns the current time, used for pruning
            migrations: One-time migrations to run (default: DEFAULT_MIGRATIONS)
        """
        self.store = store if store is not None else MemoryKeyValueStore()
        self.config = config or ProgressStoreConfig()
        self.clock = clock
        self._cached: Optional[List[PlaybackProgress]] = None

        self._run_migrations(DEFAULT_MIGRATIONS if migrations is None else migrations)

    # Migration

    def _run_migrations(self, migrations: List[Migration]) -> None:
        for migration in pending_migrations(self.store, migrations):
            items = self._all_progress
            migrated = migration.apply(list(items))
            removed = len(items) - len(migrated)
            self._all_progress = migrated
            logger.info(
                f"Ran progress migration {migration.flag_key}"
                f" ({migration.description or 'no description'}): removed {removed} entries"
            )
            self.store.store_bool(migration.flag_key, True)

    # Storage

    def _load_if_needed(self) -> None:
        if self._cached is not None:
            return

        data = self.store.load(self.config.storage_key)
        if data is None:
            self._cached = []
            return

        try:
            raw_items = json.loads(data.decode('utf-8'))
            if not isinstance(raw_items, list):
                raise ValueError(f"expected a list, got {type(raw_items).__name__}")
            self._cached = [PlaybackProgress.from_dict(raw) for raw in raw_items]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to decode saved playback progress: {str(e)}, starting fresh")
            self._cached = []
            return

        logger.debug(f"Loaded {len(self._cached)} playback progress entries")

    @property
    def _all_progress(self) -> List[PlaybackProgress]:
        self._load_if_needed()
        return list(self._cached)

    @_all_progress.setter
    def _all_progress(self, items: List[PlaybackProgress]) -> None:
        self._cached = list(items)
        payload = json.dumps([item.to_dict() for item in self._cached])
        self.store.store(self.config.storage_key, payload.encode('utf-8'))

    def _prune_old_entries(self) -> None:
        items = self._all_progress

        cutoff = as_utc(self.clock()) - timedelta(days=self.config.max_age_days)
        kept = [item for item in items if item.last_watched_date >= cutoff]

        if len(kept) > self.config.max_items:
            kept.sort(key=lambda item: item.last_watched_date, reverse=True)
            kept = kept[:self.config.max_items]

        if len(kept) != len(items):
            logger.debug(f"Pruned {len(items) - len(kept)} playback progress entries")
        self._all_progress = kept

    # Public API

    def save_progress(self, progress: PlaybackProgress) -> None:
        """
        Save or update progress for an item.

        Any existing entry with the same key is replaced. A complete entry
        is not stored, which removes the item from Continue Watching.
        Pruning runs afterwards.
        """
        items = [item for item in self._all_progress if item.key != progress.key]

        if progress.is_complete():
            logger.debug(f"Progress complete for {progress.item_identifier}/{progress.filename}, removing")
        else:
            items.append(progress)

        self._all_progress = items
        self._prune_old_entries()

    def get_progress(self, identifier: str, filename: Optional[str] = None) -> Optional[PlaybackProgress]:
        """
        Get saved progress.

        With a filename, returns the exact entry. Without one, returns the
        most recently watched entry for the item.
        """
        if filename is not None:
            for item in self._all_progress:
                if item.item_identifier == identifier and item.filename == filename:
                    return item
            return None

        matches = [item for item in self._all_progress if item.item_identifier == identifier]
        if not matches:
            return None
        return max(matches, key=lambda item: item.last_watched_date)

    def remove_progress(self, identifier: str, filename: Optional[str] = None) -> None:
        """Remove one entry, or every entry for the item when filename is None."""
        items = self._all_progress
        if filename is None:
            kept = [item for item in items if item.item_identifier != identifier]
        else:
            kept = [item for item in items if item.key != (identifier, filename)]
        self._all_progress = kept

    def _recent(self, predicate, limit: Optional[int]) -> List[PlaybackProgress]:
        if limit is None:
            limit = self.config.default_limit
        items = [
            item for item in self._all_progress
            if predicate(item) and not item.is_complete() and item.is_valid()
        ]
        items.sort(key=lambda item: item.last_watched_date, reverse=True)
        return items[:max(limit, 0)]

    def get_continue_watching_items(self, limit: Optional[int] = None) -> List[PlaybackProgress]:
        """Incomplete video entries, most recently watched first."""
        return self._recent(lambda item: item.is_video, limit)

    def get_continue_listening_items(self, limit: Optional[int] = None) -> List[PlaybackProgress]:
        """Incomplete audio entries, most recently listened first."""
        return self._recent(lambda item: item.is_audio, limit)

    def has_resumable_progress(self, identifier: str) -> bool:
        """True if any file of the item has an incomplete, resumable position."""
        return any(
            not p.is_complete() and p.has_resumable_progress()
            for p in self._all_progress
            if p.item_identifier == identifier
        )

    def clear_all_progress(self) -> None:
        """Forget every entry and delete the persisted blob."""
        self._cached = []
        self.store.remove(self.config.storage_key)
        logger.info("Cleared all playback progress")

    def get_all_progress(self) -> List[PlaybackProgress]:
        return self._all_progress

    @property
    def progress_count(self) -> int:
        return len(self._all_progress)
