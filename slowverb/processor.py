"""
Control surface: load a file, preview live, tweak speed/wetness, export.
Owns the live sink for its lifetime; use as a context manager to guarantee release.
"""
import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Optional

import torch

from slowverb.core.errors import RenderError
from slowverb.core.io import SoundfileDecoder
from slowverb.core.types import EffectParameters, SampleBuffer, SessionState
from slowverb.export.wave import WaveEncoder
from slowverb.params.resolve import resolve_params, validate_param
from slowverb.playback.session import PlaybackSession
from slowverb.playback.sink import LiveSink
from slowverb.render.offline import OfflineRenderer

logger = logging.getLogger(__name__)


class AudioProcessor:
    def __init__(
        self,
        sink=None,
        decoder=SoundfileDecoder,
        clock: Callable[[], float] = time.monotonic,
        generator: Optional[torch.Generator] = None,
    ):
        self.decoder = decoder
        self.generator = generator
        self.params = resolve_params({})
        self.session = PlaybackSession(sink or LiveSink(), clock=clock, generator=generator)
        self.renderer = OfflineRenderer()
        # Setters merge onto the current params; read-merge-store-rebuild is one step
        self._lock = threading.RLock()

    def __enter__(self) -> "AudioProcessor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def buffer(self) -> Optional[SampleBuffer]:
        return self.session.buffer

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def is_playing(self) -> bool:
        return self.session.is_playing

    def load_file(self, data: bytes, container: Optional[str] = None) -> SampleBuffer:
        """Decode and make current. On DecodeError the previous buffer stays loaded."""
        buffer = self.decoder.decode(data, container)
        self.session.load(buffer)
        logger.info(
            "Loaded %d ch, %d Hz, %.2fs", buffer.channels, buffer.sample_rate, buffer.duration,
        )
        return buffer

    def play(self) -> None:
        with self._lock:
            self.session.play(self.params)

    def stop(self) -> None:
        if not self.session.is_playing:
            return
        self.session.stop()

    def set_speed(self, speed: float) -> None:
        speed = validate_param("speed", speed)
        with self._lock:
            self._update(replace(self.params, speed=speed))

    def set_wetness(self, wetness: float) -> None:
        wetness = validate_param("wetness", wetness)
        with self._lock:
            self._update(replace(self.params, wetness=wetness))

    def set_params(self, **params) -> None:
        with self._lock:
            self._update(resolve_params(params, base=self.params))

    def render(self) -> SampleBuffer:
        if self.buffer is None:
            raise RenderError("No audio loaded; nothing to export")
        return self.renderer.render(self.buffer, self.params, generator=self.generator)

    def export_to_bytes(self) -> bytes:
        data = WaveEncoder.encode(self.render())
        logger.info("Exported %d bytes", len(data))
        return data

    def close(self) -> None:
        self.session.close()

    def _update(self, params: EffectParameters) -> None:
        # Caller holds self._lock. Idle: store only, picked up by the next play()
        self.params = params
        if self.session.is_playing:
            self.session.on_parameter_change(params)
