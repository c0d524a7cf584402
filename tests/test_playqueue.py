import random
from dataclasses import replace

import pytest

from archivekit.models import AudioTrack
from archivekit.playqueue import AudioQueueManager, RepeatMode


def make_tracks(count=5):
    return [
        AudioTrack(
            id=f"album/{i}.mp3",
            item_identifier="album",
            filename=f"{i}.mp3",
            title=f"Track {i}",
            stream_url=f"https://archive.org/download/album/{i}.mp3",
            track_number=i + 1,
        )
        for i in range(count)
    ]


@pytest.fixture
def queue():
    return AudioQueueManager(rng=random.Random(7))


def test_empty_queue(queue):
    assert queue.is_empty
    assert queue.current_track is None
    assert queue.next() is None
    assert queue.previous() is None
    assert not queue.has_next


def test_set_queue_clamps_start(queue):
    tracks = make_tracks(3)
    queue.set_queue(tracks, start_at=10)
    assert queue.current_track == tracks[2]
    queue.set_queue(tracks, start_at=-3)
    assert queue.current_position == 1


def test_next_stops_at_end_without_repeat(queue):
    tracks = make_tracks(2)
    queue.set_queue(tracks)
    assert queue.next() == tracks[1]
    assert not queue.has_next
    assert queue.next() is None
    assert queue.current_track == tracks[1]


def test_repeat_all_wraps_both_ways(queue):
    tracks = make_tracks(3)
    queue.set_queue(tracks, start_at=2)
    queue.set_repeat_mode(RepeatMode.ALL)
    assert queue.next() == tracks[0]
    assert queue.previous() == tracks[2]


def test_repeat_one_stays_on_track(queue):
    tracks = make_tracks(3)
    queue.set_queue(tracks, start_at=1)
    queue.set_repeat_mode(RepeatMode.ONE)
    assert queue.next() == tracks[1]
    assert queue.has_next


def test_previous_at_start_restarts_current(queue):
    tracks = make_tracks(3)
    queue.set_queue(tracks)
    assert queue.previous() == tracks[0]
    assert not queue.has_previous


def test_jump(queue):
    tracks = make_tracks(4)
    queue.set_queue(tracks)
    assert queue.jump_to_index(2) == tracks[2]
    assert queue.jump_to_index(9) is None
    assert queue.current_index == 2
    assert queue.jump_to_track(tracks[3]) == tracks[3]


def test_jump_to_track_matches_by_id(queue):
    t1, t2 = make_tracks(2)
    queue.set_queue([t1, t2])
    updated = AudioTrack(
        id=t2.id,
        item_identifier=t2.item_identifier,
        filename=t2.filename,
        title=t2.title,
        stream_url=t2.stream_url,
        duration=200.0,
    )
    assert queue.jump_to_track(updated) is t2
    assert queue.current_index == 1


def test_shuffle_with_updated_current_track_keeps_one_copy(queue):
    tracks = make_tracks(5)
    queue.set_queue(tracks, start_at=2)
    # Player fills in the duration once the stream loads
    queue.tracks[2] = replace(tracks[2], duration=321.0)

    queue.toggle_shuffle()
    assert queue.track_count == 5
    assert [t.id for t in queue.tracks].count(tracks[2].id) == 1
    assert queue.current_track.duration == 321.0

    queue.toggle_shuffle()
    assert queue.current_index == 2


def test_shuffle_keeps_current_first_and_restores_order(queue):
    tracks = make_tracks(6)
    queue.set_queue(tracks, start_at=3)

    queue.toggle_shuffle()
    assert queue.is_shuffled
    assert queue.current_index == 0
    assert queue.current_track == tracks[3]
    assert sorted(t.id for t in queue.tracks) == sorted(t.id for t in tracks)

    queue.next()
    playing = queue.current_track
    queue.toggle_shuffle()
    assert queue.tracks == tracks
    assert queue.current_track == playing


def test_set_queue_while_shuffled_starts_with_requested_track(queue):
    tracks = make_tracks(5)
    queue.toggle_shuffle()
    queue.set_queue(tracks, start_at=4)
    assert queue.current_index == 0
    assert queue.current_track == tracks[4]


def test_cycle_repeat_mode(queue):
    assert queue.cycle_repeat_mode() is RepeatMode.ALL
    assert queue.cycle_repeat_mode() is RepeatMode.ONE
    assert queue.cycle_repeat_mode() is RepeatMode.OFF
    assert not RepeatMode.OFF.is_active


def test_clear_resets_modes(queue):
    queue.set_queue(make_tracks(2))
    queue.toggle_shuffle()
    queue.set_repeat_mode(RepeatMode.ALL)
    queue.clear()
    assert queue.is_empty
    assert not queue.is_shuffled
    assert queue.repeat_mode is RepeatMode.OFF
