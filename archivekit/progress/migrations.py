"""
One-time data migrations for persisted playback progress.

Each migration is gated by a boolean flag in the key-value store and runs
at most once per installation, in list order, when the progress manager
is constructed.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from ..models import PlaybackProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    """A named transformation of the stored progress list."""
    flag_key: str
    apply: Callable[[List[PlaybackProgress]], List[PlaybackProgress]]
    description: str = ""


def drop_audio_progress(items: List[PlaybackProgress]) -> List[PlaybackProgress]:
    """Remove every audio entry; album-level tracking replaced per-track entries."""
    return [item for item in items if not item.is_audio]


AUDIO_PROGRESS_MIGRATION_V1 = Migration(
    flag_key="audio_progress_migration_v1_complete",
    apply=drop_audio_progress,
    description="clear per-track audio progress",
)

DEFAULT_MIGRATIONS: List[Migration] = [AUDIO_PROGRESS_MIGRATION_V1]


def pending_migrations(store, migrations: List[Migration]) -> List[Migration]:
    """Migrations whose completion flag is not yet set in ``store``."""
    return [m for m in migrations if not store.load_bool(m.flag_key)]
