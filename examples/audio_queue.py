"""
Audio queue example.

Demonstrates building tracks from an item's file list, queueing the album,
shuffling and repeat modes.
"""

from archivekit import AudioQueueManager, AudioTrack, RepeatMode, sort_by_track_number

# Shape of the "files" entries in an item's metadata response
FILES = [
    {"name": "gd77-05-08d2t03.mp3", "track": "12", "title": "Fire on the Mountain", "length": "3:59"},
    {"name": "gd77-05-08d1t01.mp3", "track": "01", "title": "Minglewood Blues", "length": "331.2"},
    {"name": "gd77-05-08d1t02.mp3", "track": "2/12", "title": "Loser", "length": "7:52"},
    {"name": "gd77-05-08-crowd.mp3", "creator": "Audience"},
]


def main():
    tracks = sort_by_track_number([
        AudioTrack.from_file(f, "gd1977-05-08", item_title="Live at Barton Hall")
        for f in FILES
    ])
    for track in tracks:
        print(f"{track.formatted_track_number:>2} {track.title} [{track.formatted_duration}] {track.artist_album_display}")

    queue = AudioQueueManager()
    queue.set_queue(tracks, start_at=1)
    print(f"Now playing: {queue.current_track.title} ({queue.current_position}/{queue.track_count})")
    print(f"Stream: {queue.current_track.stream_url}")

    queue.toggle_shuffle()
    print("Shuffled order:", [t.title for t in queue.tracks])

    queue.set_repeat_mode(RepeatMode.ALL)
    while queue.has_next and queue.current_position < queue.track_count:
        print(f"Next: {queue.next().title}")

if __name__ == "__main__":
    main()
