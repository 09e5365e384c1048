"""
Effect graph: source -> {dry gain, convolver -> wet gain} -> summing output.

Built in two steps. describe_graph() is a pure description of what to wire
(rates, gains, offset, a freshly drawn impulse); EffectGraph instantiates it
as a pull-based processor for a sink or an offline target. A graph is single
use: parameter changes build a new one.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import torch

from slowverb.core.errors import SessionStateError
from slowverb.core.types import EffectParameters, SampleBuffer
from slowverb.dsp.convolver import Convolver
from slowverb.dsp.impulse import ReverbImpulse, decay_for_wetness
from slowverb.dsp.mixer import GainStage, SummingBus, crossfade_gains
from slowverb.dsp.source import BufferSource
from slowverb.params.canonical_defaults import ENGINE_DEFAULTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphDescription:
    source: SampleBuffer
    playback_rate: float
    start_offset: float  # source seconds
    output_rate: int
    impulse: SampleBuffer
    dry_gain: float
    wet_gain: float
    normalize_impulse: bool = True

    @property
    def decay_seconds(self) -> float:
        return self.impulse.frame_count / self.impulse.sample_rate


def describe_graph(
    buffer: SampleBuffer,
    params: EffectParameters,
    start_offset: float = 0.0,
    output_rate: Optional[int] = None,
    generator: Optional[torch.Generator] = None,
) -> GraphDescription:
    """
    Describe the graph for `buffer` under `params`, starting at `start_offset`
    source seconds. The impulse is synthesized at the output rate with decay
    wetness * 3 s.
    """
    output_rate = output_rate or buffer.sample_rate
    gains = crossfade_gains(params.wetness)
    impulse = ReverbImpulse.synthesize(output_rate, decay_for_wetness(params.wetness), generator=generator)
    return GraphDescription(
        source=buffer,
        playback_rate=params.speed,
        start_offset=start_offset,
        output_rate=output_rate,
        impulse=impulse,
        dry_gain=gains["dry"],
        wet_gain=gains["wet"],
        normalize_impulse=ENGINE_DEFAULTS["normalize_impulse"],
    )


class EffectGraph:
    """Pull-based instance of a GraphDescription."""

    def __init__(self, description: GraphDescription):
        self.description = description
        buffer = description.source
        self.source = BufferSource(buffer, description.playback_rate, description.output_rate, description.start_offset)
        self.convolver = Convolver(description.impulse, buffer.channels, normalize=description.normalize_impulse)
        self.dry = GainStage("dry", description.dry_gain)
        self.wet = GainStage("wet", description.wet_gain)
        self.bus = SummingBus()
        self.started = False
        self.stopped = False

    @classmethod
    def build(
        cls,
        buffer: SampleBuffer,
        params: EffectParameters,
        start_offset: float = 0.0,
        output_rate: Optional[int] = None,
        generator: Optional[torch.Generator] = None,
    ) -> "EffectGraph":
        return cls(describe_graph(buffer, params, start_offset, output_rate, generator))

    @property
    def channels(self) -> int:
        return self.description.source.channels

    @property
    def finished(self) -> bool:
        """Source exhausted and reverb tail drained (or explicitly stopped)."""
        if self.stopped:
            return True
        return self.source.exhausted and self.convolver.tail_energy == 0.0

    def start(self) -> None:
        if self.started:
            raise SessionStateError("graph already started; build a new one")
        self.started = True
        logger.debug(
            "Graph start: offset=%.3fs rate=%.2f dry=%.2f wet=%.2f impulse=%d frames",
            self.description.start_offset, self.description.playback_rate,
            self.dry.gain, self.wet.gain, self.description.impulse.frame_count,
        )

    def stop(self) -> None:
        self.stopped = True
        self.convolver.reset()

    def pull(self, frames: int) -> torch.Tensor:
        """Render the next `frames` output frames, shape (channels, frames)."""
        if not self.started:
            raise SessionStateError("graph not started")
        if self.stopped:
            return torch.zeros(self.channels, frames)

        block = self.source.read(frames)
        self.bus.add(self.dry.apply(block))
        self.bus.add(self.wet.apply(self.convolver.process(block)))
        return self.bus.mix()
