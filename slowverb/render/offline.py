"""
Offline renderer: one graph, run to completion against a fixed-size target.
Uses the same graph construction as live preview, so exports match what was heard.
"""
import logging
import math
from typing import Optional

import torch

from slowverb.core.errors import RenderError
from slowverb.core.types import EffectParameters, SampleBuffer
from slowverb.dsp.graph import EffectGraph

logger = logging.getLogger(__name__)


def target_frame_count(frame_count: int, speed: float) -> int:
    """Frames in the time-scaled output: ceil(frames / speed)."""
    return int(math.ceil(frame_count / speed))


class OfflineRenderer:
    def __init__(self, block_size: Optional[int] = None):
        """
        block_size: pull the graph in blocks of this many frames
        (None = one pull for the whole target).
        """
        self.block_size = block_size

    def render(
        self,
        source: Optional[SampleBuffer],
        params: EffectParameters,
        generator: Optional[torch.Generator] = None,
    ) -> SampleBuffer:
        if source is None:
            raise RenderError("No audio loaded; nothing to render")

        frames = target_frame_count(source.frame_count, params.speed)
        target = torch.zeros(source.channels, frames, dtype=torch.float32)

        graph = EffectGraph.build(source, params, start_offset=0.0, output_rate=source.sample_rate, generator=generator)
        graph.start()

        step = self.block_size or max(frames, 1)
        pos = 0
        while pos < frames:
            count = min(step, frames - pos)
            target[:, pos:pos + count] = graph.pull(count)
            pos += count
        graph.stop()

        logger.info(
            "Rendered %d frames (%.2fs) at speed=%.2f wetness=%.2f",
            frames, frames / source.sample_rate, params.speed, params.wetness,
        )
        return SampleBuffer(samples=target, sample_rate=source.sample_rate)
