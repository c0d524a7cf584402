"""
Subtitle track detection and preferences.

Finds subtitle files in an item's file list, guesses their language from
the filename, builds download URLs and remembers the user's choice of
track through a KeyValueStore.
"""

import logging
import re
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from .models import SubtitleFormat, SubtitleTrack
from .progress.storage import KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://archive.org"

_SEPARATOR_RE = re.compile(r'[_\-\s.]+')


class SubtitleLanguage(Enum):
    """Languages recognized in subtitle filenames: (code, display name, variations)."""
    ENGLISH = ("en", "English", ("english", "eng", "en", "en-us", "en-gb", "en_us", "en_gb"))
    SPANISH = ("es", "Spanish", ("spanish", "español", "espanol", "spa", "es", "es-es", "es-mx", "es_es"))
    FRENCH = ("fr", "French", ("french", "français", "francais", "fra", "fre", "fr", "fr-fr"))
    GERMAN = ("de", "German", ("german", "deutsch", "ger", "deu", "de", "de-de"))
    ITALIAN = ("it", "Italian", ("italian", "italiano", "ita", "it", "it-it"))
    PORTUGUESE = ("pt", "Portuguese", ("portuguese", "português", "portugues", "por", "pt", "pt-br", "pt-pt"))
    RUSSIAN = ("ru", "Russian", ("russian", "русский", "rus", "ru"))
    JAPANESE = ("ja", "Japanese", ("japanese", "日本語", "jpn", "ja", "jp"))
    KOREAN = ("ko", "Korean", ("korean", "한국어", "kor", "ko", "kr"))
    CHINESE = ("zh", "Chinese", ("chinese", "中文", "chi", "zho", "zh", "zh-cn", "zh-tw", "mandarin", "cantonese"))
    ARABIC = ("ar", "Arabic", ("arabic", "العربية", "ara", "ar"))
    HINDI = ("hi", "Hindi", ("hindi", "हिन्दी", "hin", "hi"))
    DUTCH = ("nl", "Dutch", ("dutch", "nederlands", "nld", "dut", "nl"))
    POLISH = ("pl", "Polish", ("polish", "polski", "pol", "pl"))
    SWEDISH = ("sv", "Swedish", ("swedish", "svenska", "swe", "sv"))
    NORWEGIAN = ("no", "Norwegian", ("norwegian", "norsk", "nor", "no", "nb", "nn"))
    DANISH = ("da", "Danish", ("danish", "dansk", "dan", "da"))
    FINNISH = ("fi", "Finnish", ("finnish", "suomi", "fin", "fi"))
    TURKISH = ("tr", "Turkish", ("turkish", "türkçe", "turkce", "tur", "tr"))
    GREEK = ("el", "Greek", ("greek", "ελληνικά", "gre", "ell", "el"))
    HEBREW = ("he", "Hebrew", ("hebrew", "עברית", "heb", "he", "iw"))
    THAI = ("th", "Thai", ("thai", "ไทย", "tha", "th"))
    VIETNAMESE = ("vi", "Vietnamese", ("vietnamese", "tiếng việt", "vie", "vi"))
    INDONESIAN = ("id", "Indonesian", ("indonesian", "bahasa indonesia", "ind", "id"))
    CZECH = ("cs", "Czech", ("czech", "čeština", "ces", "cze", "cs"))
    HUNGARIAN = ("hu", "Hungarian", ("hungarian", "magyar", "hun", "hu"))
    ROMANIAN = ("ro", "Romanian", ("romanian", "română", "ron", "rum", "ro"))
    UKRAINIAN = ("uk", "Ukrainian", ("ukrainian", "українська", "ukr", "uk"))

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def display_name(self) -> str:
        return self.value[1]

    @property
    def filename_variations(self) -> Tuple[str, ...]:
        return self.value[2]

    @classmethod
    def from_component(cls, component: str) -> Optional["SubtitleLanguage"]:
        """Match one filename component (e.g. ``"eng"``) to a language."""
        lowercased = component.lower()
        for language in cls:
            if lowercased in language.filename_variations:
                return language
        return None


def _strip_subtitle_extension(filename: str) -> str:
    fmt = SubtitleFormat.from_filename(filename)
    if fmt is None:
        return filename
    return filename[:-len(fmt.file_extension)]


def _file_name(file: Union[str, Mapping[str, Any]]) -> Optional[str]:
    if isinstance(file, str):
        return file
    return file.get('name')


class SubtitleManager:
    """
    Manages subtitle detection, language parsing and user preferences.

    Preferences are stored as JSON values in the given KeyValueStore.
    """

    SUBTITLES_ENABLED_KEY = "subtitles_enabled"
    PREFERRED_LANGUAGE_KEY = "subtitle_preferred_language"
    LAST_SELECTED_TRACK_KEY = "subtitle_last_selected_track"

    def __init__(self, store: Optional[KeyValueStore] = None, base_url: str = DEFAULT_BASE_URL):
        self.store = store if store is not None else MemoryKeyValueStore()
        self.base_url = base_url.rstrip('/')

    # Detection

    def parse_language(self, filename: str) -> Tuple[Optional[str], str, bool]:
        """
        Guess the language of a subtitle file from its name.

        Components are checked from the end of the name, so
        ``movie.en.srt`` and ``movie_english.srt`` both resolve to English.

        Returns:
            (language code, display name, is_default). Files with no
            recognizable language are treated as the default track.
        """
        components = [c.lower() for c in _SEPARATOR_RE.split(_strip_subtitle_extension(filename)) if c]

        for component in reversed(components):
            language = SubtitleLanguage.from_component(component)
            if language is not None:
                return language.code, language.display_name, False

        is_closed_caption = any(c in ("cc", "sdh", "hi") for c in components)
        return None, "Closed Captions" if is_closed_caption else "Subtitles", True

    def build_subtitle_url(self, filename: str, identifier: str, server: Optional[str] = None) -> str:
        """Download URL for a file of an item, optionally on a specific server."""
        base_url = f"https://{server}" if server else self.base_url
        return f"{base_url}/download/{identifier}/{quote(filename, safe='/')}"

    def extract_subtitle_tracks(
        self,
        files: Iterable[Union[str, Mapping[str, Any]]],
        identifier: str,
        server: Optional[str] = None,
    ) -> List[SubtitleTrack]:
        """
        Extract subtitle tracks from an item's file list.

        Args:
            files: File names, or metadata dicts with a ``name`` key
            identifier: Item identifier for URL building
            server: Optional specific server (falls back to base_url)

        Returns:
            Subtitle tracks, default track first, then by language name
        """
        tracks = []
        for file in files:
            name = _file_name(file)
            if not name:
                continue
            fmt = SubtitleFormat.from_filename(name)
            if fmt is None:
                continue

            code, display_name, is_default = self.parse_language(name)
            tracks.append(SubtitleTrack(
                filename=name,
                format=fmt,
                language_code=code,
                language_display_name=display_name,
                is_default=is_default,
                url=self.build_subtitle_url(name, identifier, server),
            ))

        tracks.sort(key=lambda t: (not t.is_default, t.language_display_name))
        logger.debug(f"Found {len(tracks)} subtitle tracks for {identifier}")
        return tracks

    # Preferences

    @property
    def subtitles_enabled(self) -> bool:
        return self.store.load_bool(self.SUBTITLES_ENABLED_KEY)

    @subtitles_enabled.setter
    def subtitles_enabled(self, value: bool) -> None:
        self.store.store_bool(self.SUBTITLES_ENABLED_KEY, value)

    @property
    def preferred_language_code(self) -> Optional[str]:
        return self.store.load_str(self.PREFERRED_LANGUAGE_KEY)

    @preferred_language_code.setter
    def preferred_language_code(self, value: Optional[str]) -> None:
        self.store.store_str(self.PREFERRED_LANGUAGE_KEY, value)

    @property
    def last_selected_track_identifier(self) -> Optional[str]:
        return self.store.load_str(self.LAST_SELECTED_TRACK_KEY)

    @last_selected_track_identifier.setter
    def last_selected_track_identifier(self, value: Optional[str]) -> None:
        self.store.store_str(self.LAST_SELECTED_TRACK_KEY, value)

    def preferred_track(self, tracks: List[SubtitleTrack]) -> Optional[SubtitleTrack]:
        """
        Pick the track to show, or None when subtitles are off.

        Order: last selected track, preferred language, English, first track.
        """
        if not self.subtitles_enabled or not tracks:
            return None

        last_id = self.last_selected_track_identifier
        preferred_code = self.preferred_language_code

        for predicate in (
            lambda t: last_id is not None and t.identifier == last_id,
            lambda t: preferred_code is not None and t.language_code == preferred_code,
            lambda t: t.language_code == "en",
        ):
            for track in tracks:
                if predicate(track):
                    return track
        return tracks[0]

    def save_track_selection(self, track: SubtitleTrack) -> None:
        self.last_selected_track_identifier = track.identifier
        if track.language_code:
            self.preferred_language_code = track.language_code
        self.subtitles_enabled = True

    def clear_track_selection(self) -> None:
        """User turned subtitles off."""
        self.last_selected_track_identifier = None
        self.subtitles_enabled = False
