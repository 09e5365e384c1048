"""
Live preview session: Idle -> Playing -> Idle, with a Rebuilding step on every
parameter change.

Each rebuild reads the elapsed source time from the wall clock and the old
speed, starts a new graph at that offset (wrapped to the clip length), and
moves the start reference to now - offset / new_speed. The reference shift is
what keeps later elapsed-time reads correct after a speed change.
"""
import logging
import threading
import time
from typing import Callable, Optional

import torch

from slowverb.core.errors import SessionStateError
from slowverb.core.types import EffectParameters, PlaybackCursor, SampleBuffer, SessionState
from slowverb.dsp.graph import EffectGraph

logger = logging.getLogger(__name__)


class PlaybackSession:
    def __init__(
        self,
        sink,
        clock: Callable[[], float] = time.monotonic,
        generator: Optional[torch.Generator] = None,
    ):
        """
        sink: object with attach(graph), detach() -> graph, close().
        clock: wall-clock seconds; injectable for tests.
        generator: random source for impulse synthesis (None = global RNG).
        """
        self.sink = sink
        self.clock = clock
        self.generator = generator
        self.buffer: Optional[SampleBuffer] = None
        self.params: Optional[EffectParameters] = None
        self.cursor = PlaybackCursor()
        self.state = SessionState.IDLE
        self.graph: Optional[EffectGraph] = None
        self._start_reference = 0.0
        # Rebuilds read the graph they replace; one at a time
        self._lock = threading.RLock()

    @property
    def is_playing(self) -> bool:
        return self.state is not SessionState.IDLE

    def load(self, buffer: SampleBuffer) -> None:
        """Replace the source buffer; stops playback first if needed."""
        if buffer.frame_count == 0:
            raise SessionStateError("cannot play an empty buffer")
        with self._lock:
            if self.is_playing:
                self.stop()
            self.buffer = buffer

    def elapsed_source_time(self) -> float:
        """Source seconds played since the start reference (unwrapped)."""
        if not self.is_playing:
            return 0.0
        return (self.clock() - self._start_reference) * self.params.speed

    def position(self) -> float:
        """Current source position in seconds, wrapped to the clip length."""
        with self._lock:
            if not self.is_playing:
                return 0.0
            return self.elapsed_source_time() % self.buffer.duration

    def play(self, params: EffectParameters) -> None:
        with self._lock:
            if self.is_playing:
                raise SessionStateError("already playing")
            if self.buffer is None:
                raise SessionStateError("no audio loaded")
            if self.buffer.frame_count == 0:
                raise SessionStateError("cannot play an empty buffer")
            self.cursor.reset()
            self.params = params
            self._start_graph(self.clock())
            self.state = SessionState.PLAYING
            logger.info("Playback started: speed=%.2f wetness=%.2f", params.speed, params.wetness)

    def on_parameter_change(self, params: EffectParameters) -> float:
        """
        Rebuild the running graph under new params without restarting.
        Returns the source offset (seconds) the new graph starts from.
        """
        with self._lock:
            if not self.is_playing:
                raise SessionStateError("parameter change requires an active playback")
            self.state = SessionState.REBUILDING
            try:
                now = self.clock()
                self.cursor.position_seconds = (now - self._start_reference) * self.params.speed
                self._discard_graph()
                self.params = params
                offset = self._start_graph(now)
            finally:
                self.state = SessionState.PLAYING
            logger.debug("Rebuilt graph at %.3fs: speed=%.2f wetness=%.2f", offset, params.speed, params.wetness)
            return offset

    def stop(self) -> None:
        with self._lock:
            if not self.is_playing:
                raise SessionStateError("not playing")
            self._discard_graph()
            self.cursor.reset()
            self.state = SessionState.IDLE
            logger.info("Playback stopped")

    def close(self) -> None:
        """Stop (if needed) and release the sink."""
        with self._lock:
            if self.is_playing:
                self.stop()
            self.sink.close()

    def _start_graph(self, now: float) -> float:
        offset = self.cursor.position_seconds % self.buffer.duration
        graph = EffectGraph.build(
            self.buffer,
            self.params,
            start_offset=offset,
            output_rate=getattr(self.sink, "sample_rate", None) or self.buffer.sample_rate,
            generator=self.generator,
        )
        graph.start()
        self.sink.attach(graph)
        self.graph = graph
        self._start_reference = now - (offset / self.params.speed)
        return offset

    def _discard_graph(self) -> None:
        # Detach first so the audio thread stops pulling before teardown
        self.sink.detach()
        if self.graph is not None:
            self.graph.stop()
            self.graph = None
