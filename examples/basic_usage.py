"""
Basic ArchiveKit usage example.

Demonstrates finding the subtitle tracks of an item, converting an SRT
track to WebVTT and printing the cue shown at a given time.
"""

from archivekit import SubtitleDownloader, SubtitleManager, SubtitleParser, SubtitleCacheConfig, cues_at

def main():
    manager = SubtitleManager()
    downloader = SubtitleDownloader(SubtitleCacheConfig(cache_dir="/tmp/archivekit/subtitles"))
    parser = SubtitleParser()

    # File list as returned by the item metadata API
    files = [
        {"name": "night_of_the_living_dead.mp4"},
        {"name": "night_of_the_living_dead_english.srt"},
        {"name": "night_of_the_living_dead.es.vtt"},
    ]
    tracks = manager.extract_subtitle_tracks(files, identifier="night_of_the_living_dead")
    for track in tracks:
        print(f"{track.language_display_name}: {track.filename} ({track.format.value})")

    # Convert the first SRT track so a WebVTT-only player can use it
    srt_track = next(t for t in tracks if not t.format.is_natively_supported)
    print("\nConverting SRT track...")
    vtt_path = downloader.get_webvtt_path(srt_track)
    print(f"Converted to: {vtt_path}")

    with open(vtt_path, "r", encoding="utf-8") as f:
        cues = parser.parse(f.read())
    print(f"Parsed {len(cues)} cues")

    for cue in cues_at(cues, 120.0):
        print(f"At 2:00 -> {cue.text}")

if __name__ == "__main__":
    main()
