import os

import pytest
import requests

from archivekit import downloader as downloader_module
from archivekit.downloader import SubtitleDownloader
from archivekit.errors import SubtitleCacheError, SubtitleDownloadError
from archivekit.models import SubtitleCacheConfig, SubtitleFormat, SubtitleTrack

SRT_BYTES = "1\n00:00:01,000 --> 00:00:02,000\n“Bonjour”\n".encode("cp1252")


class _FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code


@pytest.fixture
def downloader(tmp_path):
    return SubtitleDownloader(SubtitleCacheConfig(cache_dir=str(tmp_path / "subs"), timeout=7))


def _track(filename, fmt):
    return SubtitleTrack(
        filename=filename,
        format=fmt,
        language_code="fr",
        language_display_name="French",
        is_default=False,
        url=f"https://archive.org/download/item/{filename}",
    )


def test_native_vtt_is_used_directly(downloader, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("no download expected")

    monkeypatch.setattr(downloader_module.requests, "get", fail)
    track = _track("movie.fr.vtt", SubtitleFormat.VTT)
    assert downloader.get_webvtt_path(track) == track.url


def test_srt_is_downloaded_converted_and_cached(downloader, monkeypatch):
    calls = []

    def fake_get(url, timeout, verify):
        calls.append((url, timeout, verify))
        return _FakeResponse(SRT_BYTES)

    monkeypatch.setattr(downloader_module.requests, "get", fake_get)
    track = _track("movie.fr.SRT", SubtitleFormat.SRT)

    path = downloader.get_webvtt_path(track)
    assert path == os.path.join(downloader.cache_dir, "movie.fr.vtt")
    with open(path, encoding="utf-8") as f:
        content = f.read()
    assert content == "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\n“Bonjour”\n\n"
    assert calls == [(track.url, 7, True)]

    # Second request is served from the cache
    assert downloader.get_webvtt_path(track) == path
    assert len(calls) == 1


def test_non_200_response_raises(downloader, monkeypatch):
    monkeypatch.setattr(
        downloader_module.requests, "get",
        lambda url, timeout, verify: _FakeResponse(b"", status_code=404),
    )
    with pytest.raises(SubtitleDownloadError) as exc_info:
        downloader.convert_srt_to_vtt("https://archive.org/download/item/x.srt", "x.srt")
    assert exc_info.value.status_code == 404
    assert not os.path.exists(downloader.get_cache_path("x.srt"))


def test_network_error_raises(downloader, monkeypatch):
    def fake_get(url, timeout, verify):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(downloader_module.requests, "get", fake_get)
    with pytest.raises(SubtitleDownloadError):
        downloader.convert_srt_to_vtt("https://archive.org/download/item/x.srt", "x.srt")


def test_session_is_used_when_given(tmp_path):
    class Session:
        def __init__(self):
            self.urls = []

        def get(self, url, timeout, verify):
            self.urls.append(url)
            return _FakeResponse(SRT_BYTES)

    session = Session()
    downloader = SubtitleDownloader(SubtitleCacheConfig(cache_dir=str(tmp_path)), session=session)
    downloader.convert_srt_to_vtt("https://archive.org/download/item/y.srt", "y.srt")
    assert session.urls == ["https://archive.org/download/item/y.srt"]


def test_cache_size_and_clear(downloader, monkeypatch):
    assert downloader.cache_size() == 0
    downloader.clear_cache()

    monkeypatch.setattr(downloader_module.requests, "get", lambda url, timeout, verify: _FakeResponse(SRT_BYTES))
    path = downloader.convert_srt_to_vtt("https://archive.org/download/item/z.srt", "z.srt")

    assert downloader.cache_size() == os.path.getsize(path)
    downloader.clear_cache()
    assert downloader.cache_size() == 0
    assert not os.path.exists(path)


def test_unusable_cache_dir_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory", encoding="utf-8")
    downloader = SubtitleDownloader(SubtitleCacheConfig(cache_dir=str(blocker / "subs")))
    with pytest.raises(SubtitleCacheError):
        downloader.convert_srt_to_vtt("https://archive.org/download/item/x.srt", "x.srt")


def test_failed_write_leaves_no_cache_entry(downloader, monkeypatch):
    monkeypatch.setattr(downloader_module.requests, "get", lambda url, timeout, verify: _FakeResponse(SRT_BYTES))
    real_fdopen = os.fdopen

    class _DiskFullWriter:
        def __init__(self, f):
            self._f = f

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            self._f.close()

        def write(self, text):
            self._f.write(text[:5])
            self._f.flush()
            raise OSError("disk full")

    monkeypatch.setattr(downloader_module.os, "fdopen", lambda *args, **kwargs: _DiskFullWriter(real_fdopen(*args, **kwargs)))
    with pytest.raises(SubtitleCacheError):
        downloader.convert_srt_to_vtt("https://archive.org/download/item/w.srt", "w.srt")

    path = downloader.get_cache_path("w.srt")
    assert not os.path.exists(path)
    assert os.listdir(downloader.cache_dir) == []

    # Disk has space again: the next call downloads and writes the whole file
    monkeypatch.setattr(downloader_module.os, "fdopen", real_fdopen)
    assert downloader.convert_srt_to_vtt("https://archive.org/download/item/w.srt", "w.srt") == path
    with open(path, encoding="utf-8") as f:
        assert f.read() == "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\n“Bonjour”\n\n"
