"""
Playback progress example.

Demonstrates saving resume positions to a JSON file and building the
Continue Watching and Continue Listening rows.
"""

from archivekit import (
    ALBUM_MARKER_FILENAME,
    JSONFileKeyValueStore,
    MediaProgressInfo,
    PlaybackProgress,
    PlaybackProgressManager,
)

def main():
    manager = PlaybackProgressManager(store=JSONFileKeyValueStore("/tmp/archivekit/state.json"))

    manager.save_progress(PlaybackProgress.video(MediaProgressInfo(
        identifier="night_of_the_living_dead",
        filename="night_of_the_living_dead.mp4",
        current_time=1800,
        duration=5760,
        title="Night of the Living Dead",
    )))

    # Album-level audio progress is a 0-100 percentage with the track position alongside
    manager.save_progress(PlaybackProgress.audio(MediaProgressInfo(
        identifier="gd1977-05-08.sbd.miller",
        filename=ALBUM_MARKER_FILENAME,
        current_time=35,
        duration=100,
        title="Grateful Dead Live at Barton Hall",
        track_index=4,
        track_filename="gd77-05-08d1t05.mp3",
        track_current_time=212.0,
    )))

    print("Continue Watching:")
    for item in manager.get_continue_watching_items():
        print(f"  {item.title} - {item.formatted_current_time()} ({item.formatted_time_remaining()})")

    print("\nContinue Listening:")
    for item in manager.get_continue_listening_items():
        print(f"  {item.title} - track {item.track_index} ({item.formatted_time_remaining()})")

if __name__ == "__main__":
    main()
