"""
Tests for slowverb/playback/session: state machine and position continuity across rebuilds.
"""
import sys
import os
import threading

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from slowverb.core.errors import SessionStateError
from slowverb.core.types import EffectParameters, SessionState
from slowverb.playback.session import PlaybackSession

from conftest import FakeClock, FakeSink, make_buffer


def _session(clock=None, sink=None, seconds=10.0):
    session = PlaybackSession(sink or FakeSink(), clock=clock or FakeClock())
    session.load(make_buffer(channels=1, frames=int(seconds * 1000), sample_rate=1000))
    return session


# -----------------------------------------------------------------------------
# Continuity
# -----------------------------------------------------------------------------

def test_rebuild_continues_from_elapsed_source_time(clock):
    session = _session(clock)
    session.play(EffectParameters(speed=1.0, wetness=0.2))
    clock.advance(2.5)

    offset = session.on_parameter_change(EffectParameters(speed=0.5, wetness=0.4))

    assert offset == pytest.approx(2.5)
    assert session.graph.description.start_offset == pytest.approx(2.5)
    assert session.cursor.position_seconds == pytest.approx(2.5)
    assert session.state is SessionState.PLAYING


def test_start_reference_tracks_new_speed(clock):
    """After slowing to 0.5x, one wall second advances half a source second."""
    session = _session(clock)
    session.play(EffectParameters(speed=1.0, wetness=0.2))
    clock.advance(2.5)
    session.on_parameter_change(EffectParameters(speed=0.5, wetness=0.2))
    clock.advance(1.0)
    assert session.position() == pytest.approx(3.0)

    offset = session.on_parameter_change(EffectParameters(speed=1.5, wetness=0.2))
    assert offset == pytest.approx(3.0)
    clock.advance(2.0)
    assert session.position() == pytest.approx(6.0)


def test_repeated_changes_do_not_drift(clock):
    session = _session(clock, seconds=100.0)
    session.play(EffectParameters(speed=1.0, wetness=0.0))
    expected = 0.0
    speeds = [0.5, 1.2, 0.8, 1.5, 1.0, 0.65] * 5
    previous = 1.0
    for speed in speeds:
        clock.advance(0.3)
        expected += 0.3 * previous
        offset = session.on_parameter_change(EffectParameters(speed=speed, wetness=0.0))
        assert offset == pytest.approx(expected)
        previous = speed


def test_offset_wraps_past_clip_end(clock):
    session = _session(clock, seconds=2.0)
    session.play(EffectParameters(speed=1.0, wetness=0.1))
    clock.advance(5.0)
    offset = session.on_parameter_change(EffectParameters(speed=1.0, wetness=0.3))
    assert offset == pytest.approx(1.0)
    assert session.position() == pytest.approx(1.0)


def test_rebuild_detaches_before_attaching():
    sink = FakeSink()
    session = _session(sink=sink)
    session.play(EffectParameters())
    first = session.graph
    session.on_parameter_change(EffectParameters(speed=0.9, wetness=0.6))
    assert sink.events == ["attach", "detach", "attach"]
    assert first.stopped
    assert sink.graph is session.graph
    assert session.graph is not first


def test_concurrent_changes_serialize():
    sink = FakeSink()
    session = _session(sink=sink)
    session.play(EffectParameters())

    def change(i):
        session.on_parameter_change(EffectParameters(speed=0.5 + i * 0.1, wetness=0.1 * i))

    threads = [threading.Thread(target=change, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sink.events == ["attach"] + ["detach", "attach"] * 8
    assert session.state is SessionState.PLAYING


# -----------------------------------------------------------------------------
# State machine
# -----------------------------------------------------------------------------

def test_play_resets_cursor_and_starts_at_zero(clock):
    session = _session(clock)
    session.play(EffectParameters(speed=0.7, wetness=0.5))
    assert session.state is SessionState.PLAYING
    assert session.graph.description.start_offset == 0.0
    assert session.position() == 0.0


def test_stop_resets_and_releases_graph(clock):
    sink = FakeSink()
    session = _session(clock, sink)
    session.play(EffectParameters())
    clock.advance(1.0)
    session.on_parameter_change(EffectParameters(speed=0.5, wetness=0.5))
    graph = session.graph
    session.stop()

    assert session.state is SessionState.IDLE
    assert session.cursor.position_seconds == 0.0
    assert session.graph is None
    assert sink.graph is None
    assert graph.stopped
    assert session.position() == 0.0


def test_play_again_after_stop_starts_from_zero(clock):
    session = _session(clock)
    session.play(EffectParameters())
    clock.advance(3.0)
    session.stop()
    session.play(EffectParameters())
    assert session.graph.description.start_offset == 0.0


def test_play_requires_loaded_buffer():
    session = PlaybackSession(FakeSink())
    with pytest.raises(SessionStateError):
        session.play(EffectParameters())


def test_play_twice_raises():
    session = _session()
    session.play(EffectParameters())
    with pytest.raises(SessionStateError):
        session.play(EffectParameters())


def test_change_and_stop_require_playing():
    session = _session()
    with pytest.raises(SessionStateError):
        session.on_parameter_change(EffectParameters())
    with pytest.raises(SessionStateError):
        session.stop()


def test_loading_new_buffer_stops_playback():
    sink = FakeSink()
    session = _session(sink=sink)
    session.play(EffectParameters())
    session.load(make_buffer())
    assert session.state is SessionState.IDLE
    assert sink.graph is None


def test_close_stops_and_releases_sink():
    sink = FakeSink()
    session = _session(sink=sink)
    session.play(EffectParameters())
    session.close()
    assert session.state is SessionState.IDLE
    assert sink.closed


def test_empty_buffer_rejected_on_load():
    session = _session()
    with pytest.raises(SessionStateError):
        session.load(make_buffer(frames=0))
    # The previous clip stays loaded and playable
    assert session.buffer.frame_count == 10000
    session.play(EffectParameters())
    assert session.state is SessionState.PLAYING


def test_play_rejects_empty_buffer_without_side_effects():
    sink = FakeSink()
    session = PlaybackSession(sink, clock=FakeClock())
    # Bypass load() the way a caller assigning the attribute directly would
    session.buffer = make_buffer(frames=0)
    with pytest.raises(SessionStateError):
        session.play(EffectParameters())
    assert session.state is SessionState.IDLE
    assert sink.events == []
