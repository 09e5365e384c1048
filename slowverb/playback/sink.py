"""
Live output sink: a PortAudio output stream whose callback pulls from the
currently attached graph. Graph swaps happen under the same lock the callback
holds while pulling, so the audio thread sees either the old graph or the new
one, never both; between detach and attach it plays silence.
"""
import logging
import threading
from typing import Optional

import numpy as np

from slowverb.dsp.graph import EffectGraph
from slowverb.params.canonical_defaults import ENGINE_DEFAULTS

logger = logging.getLogger(__name__)


class LiveSink:
    def __init__(
        self,
        block_size: int = ENGINE_DEFAULTS["block_size"],
        sample_rate: Optional[int] = ENGINE_DEFAULTS["live_sample_rate"],
        device=None,
    ):
        """sample_rate: fixed device rate; None follows the first graph attached."""
        self.block_size = block_size
        self.device = device
        self.sample_rate = sample_rate
        self.channels: Optional[int] = None
        self._stream = None
        self._graph: Optional[EffectGraph] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def open(self, sample_rate: int, channels: int) -> None:
        """Open (or reopen with a new format) the output stream."""
        if self.is_open and (sample_rate, channels) == (self.sample_rate, self.channels):
            return
        self.close()

        # PortAudio is only needed once something is actually played
        import sounddevice as sd

        self._stream = sd.OutputStream(
            samplerate=sample_rate,
            channels=channels,
            blocksize=self.block_size,
            dtype="float32",
            device=self.device,
            callback=self._callback,
        )
        self._stream.start()
        self.sample_rate = sample_rate
        self.channels = channels
        logger.info("Output stream open: %d Hz, %d ch, block %d", sample_rate, channels, self.block_size)

    def close(self) -> None:
        self.detach()
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
            logger.info("Output stream closed")

    def attach(self, graph: EffectGraph) -> None:
        if not self.is_open or graph.channels != self.channels or graph.description.output_rate != self.sample_rate:
            self.open(graph.description.output_rate, graph.channels)
        with self._lock:
            self._graph = graph

    def detach(self) -> Optional[EffectGraph]:
        with self._lock:
            graph, self._graph = self._graph, None
        return graph

    def _callback(self, outdata, frames, time_info, status):
        if status:
            logger.warning("Output stream status: %s", status)
        with self._lock:
            graph = self._graph
            if graph is None or graph.finished:
                outdata.fill(0)
                return
            block = graph.pull(frames)
        outdata[:] = np.clip(block.numpy().T, -1.0, 1.0)
