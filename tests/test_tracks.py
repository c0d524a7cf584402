import pytest

from archivekit.models import SubtitleFormat
from archivekit.progress.storage import MemoryKeyValueStore
from archivekit.tracks import SubtitleLanguage, SubtitleManager


@pytest.fixture
def manager():
    return SubtitleManager(store=MemoryKeyValueStore())


@pytest.mark.parametrize("filename, expected", [
    ("movie_english.srt", ("en", "English", False)),
    ("movie.es.vtt", ("es", "Spanish", False)),
    ("Film-Deutsch.SRT", ("de", "German", False)),
    ("movie.srt", (None, "Subtitles", True)),
    ("movie.sdh.srt", (None, "Closed Captions", True)),
])
def test_parse_language(manager, filename, expected):
    assert manager.parse_language(filename) == expected


def test_language_lookup():
    assert SubtitleLanguage.from_component("ENG") is SubtitleLanguage.ENGLISH
    assert SubtitleLanguage.from_component("xx") is None
    assert SubtitleLanguage.JAPANESE.code == "ja"


def test_extract_subtitle_tracks(manager):
    files = [
        {"name": "movie.mp4"},
        {"name": "movie_spanish.srt"},
        {"name": "movie.vtt"},
        "movie_english.srt",
        {"format": "Metadata"},
    ]
    tracks = manager.extract_subtitle_tracks(files, "movie1")

    assert [t.filename for t in tracks] == ["movie.vtt", "movie_english.srt", "movie_spanish.srt"]
    assert tracks[0].is_default
    assert tracks[1].format is SubtitleFormat.SRT
    assert tracks[1].url == "https://archive.org/download/movie1/movie_english.srt"


def test_build_subtitle_url_encodes_and_uses_server(manager):
    url = manager.build_subtitle_url("my movie/en sub.srt", "item", server="ia800.us.archive.org")
    assert url == "https://ia800.us.archive.org/download/item/my%20movie/en%20sub.srt"


def test_preferred_track_when_disabled(manager):
    tracks = manager.extract_subtitle_tracks(["a_english.srt"], "item")
    assert manager.preferred_track(tracks) is None


def test_preferred_track_order(manager):
    tracks = manager.extract_subtitle_tracks(
        ["a.srt", "a_french.srt", "a_english.srt", "a_german.srt"], "item"
    )
    manager.subtitles_enabled = True
    assert manager.preferred_track(tracks).language_code == "en"

    manager.preferred_language_code = "de"
    assert manager.preferred_track(tracks).language_code == "de"

    french = next(t for t in tracks if t.language_code == "fr")
    manager.last_selected_track_identifier = french.identifier
    assert manager.preferred_track(tracks) == french


def test_preferred_track_falls_back_to_first(manager):
    tracks = manager.extract_subtitle_tracks(["a.srt", "a_french.srt"], "item")
    manager.subtitles_enabled = True
    assert manager.preferred_track(tracks).filename == "a.srt"


def test_save_and_clear_track_selection(manager):
    track = manager.extract_subtitle_tracks(["a_italian.srt"], "item")[0]
    manager.save_track_selection(track)
    assert manager.subtitles_enabled
    assert manager.preferred_language_code == "it"
    assert manager.last_selected_track_identifier == "a_italian.srt_it"

    manager.clear_track_selection()
    assert not manager.subtitles_enabled
    assert manager.last_selected_track_identifier is None
    assert manager.preferred_language_code == "it"
