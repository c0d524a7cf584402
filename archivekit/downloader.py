"""
Subtitle downloader for ArchiveKit.

Resolves a subtitle track to something a WebVTT-only player can load.
VTT tracks are used as-is from their URL. SRT tracks are downloaded,
decoded with encoding detection, converted to WebVTT and saved into a
local cache directory; later requests for the same file hit the cache.
"""

import logging
import os
import tempfile
from typing import Optional

import requests

from .converter import convert_srt_to_vtt, decode_subtitle_data, vtt_filename_from_srt
from .errors import SubtitleCacheError, SubtitleDownloadError
from .models import SubtitleCacheConfig, SubtitleTrack

logger = logging.getLogger(__name__)


class SubtitleDownloader:
    """
    Downloads and caches converted subtitle files.

    Converted files are saved to ``{cache_dir}/{name}.vtt`` where name is
    the original SRT filename with its extension swapped.
    """

    def __init__(self, config: Optional[SubtitleCacheConfig] = None, session: Optional[requests.Session] = None):
        """
        Initialize subtitle downloader.

        Args:
            config: Cache location and HTTP settings (default: SubtitleCacheConfig())
            session: Optional requests session to reuse connections
        """
        self.config = config or SubtitleCacheConfig()
        self.session = session

    @property
    def cache_dir(self) -> str:
        return self.config.cache_dir

    def _ensure_cache_dir(self) -> None:
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as e:
            logger.error(f"Unable to create subtitle cache directory {self.cache_dir}: {str(e)}")
            raise SubtitleCacheError(f"Unable to access subtitle cache directory: {str(e)}") from e

    def _fetch(self, url: str) -> bytes:
        getter = self.session.get if self.session is not None else requests.get
        try:
            response = getter(url, timeout=self.config.timeout, verify=self.config.verify_ssl)
        except requests.RequestException as e:
            logger.error(f"Failed to download subtitles from {url[:100]}: {str(e)}")
            raise SubtitleDownloadError(url, f"Subtitle download failed: {str(e)}") from e

        if response.status_code != 200:
            logger.error(f"Subtitle download from {url[:100]} returned HTTP {response.status_code}")
            raise SubtitleDownloadError(
                url,
                f"Subtitle download failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.content

    def get_cache_path(self, filename: str) -> str:
        """Local path where the converted form of ``filename`` is stored."""
        return os.path.join(self.cache_dir, os.path.basename(vtt_filename_from_srt(filename)))

    def get_webvtt_path(self, track: SubtitleTrack) -> str:
        """
        Get a WebVTT location for a subtitle track, converting SRT if needed.

        Returns:
            The track URL for native WebVTT, or a local cache path for SRT

        Raises:
            SubtitleDownloadError: If the SRT file cannot be fetched
            SubtitleCacheError: If the cache directory cannot be used
        """
        if track.format.is_natively_supported:
            return track.url
        return self.convert_srt_to_vtt(track.url, track.filename)

    def convert_srt_to_vtt(self, srt_url: str, filename: str) -> str:
        """
        Download an SRT file and save its WebVTT conversion to the cache.

        Args:
            srt_url: URL of the SRT file
            filename: Original filename, used to name the cache entry

        Returns:
            Local path of the converted WebVTT file

        Raises:
            SubtitleDownloadError: If the download fails or is not HTTP 200
            SubtitleCacheError: If the cache directory cannot be used
        """
        self._ensure_cache_dir()
        cache_path = self.get_cache_path(filename)

        if os.path.exists(cache_path):
            logger.debug(f"Using cached subtitles: {cache_path}")
            return cache_path

        logger.info(f"Downloading SRT subtitles from: {srt_url[:100]}")
        data = self._fetch(srt_url)

        vtt_content = convert_srt_to_vtt(decode_subtitle_data(data))

        # A partial write must never become a cache entry
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix='.', suffix='.vtt.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(vtt_content)
            os.replace(tmp_path, cache_path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            logger.error(f"Failed to save converted subtitles: {str(e)}")
            raise SubtitleCacheError(f"Subtitle save failed: {str(e)}") from e

        logger.info(f"Converted subtitles saved to: {cache_path}")
        return cache_path

    def clear_cache(self) -> None:
        """Delete every cached subtitle file."""
        if not os.path.isdir(self.cache_dir):
            return

        removed = 0
        for entry in os.scandir(self.cache_dir):
            if entry.is_file():
                os.remove(entry.path)
                removed += 1
        logger.info(f"Cleared {removed} cached subtitle files from {self.cache_dir}")

    def cache_size(self) -> int:
        """Total size of cached subtitle files in bytes."""
        if not os.path.isdir(self.cache_dir):
            return 0

        total = 0
        for root, _dirs, files in os.walk(self.cache_dir):
            for name in files:
                try:
                    total += os.path.getsize(os.path.join(root, name))
                except OSError:
                    continue
        return total
