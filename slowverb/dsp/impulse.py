"""
Synthetic reverb impulse: tapered white noise, one fresh draw per call.
"""
import math
from typing import Optional

import torch

from slowverb.core.types import SampleBuffer
from slowverb.params.canonical_defaults import IMPULSE_CHANNELS, MIN_DECAY_SECONDS, REVERB_DECAY_SCALE


def decay_for_wetness(wetness: float) -> float:
    """Reverb tail length in seconds for a wetness value (0..1 -> 0..3 s)."""
    return wetness * REVERB_DECAY_SCALE


def impulse_length(sample_rate: int, decay_seconds: float) -> int:
    """Frames in the impulse; decay is clamped up to MIN_DECAY_SECONDS."""
    safe_decay = max(MIN_DECAY_SECONDS, decay_seconds)
    return max(1, int(round(sample_rate * safe_decay)))


class ReverbImpulse:
    @staticmethod
    def synthesize(
        sample_rate: int,
        decay_seconds: float,
        generator: Optional[torch.Generator] = None,
    ) -> SampleBuffer:
        """
        Stereo impulse: uniform(-1, 1) noise * (1 - i/length) ** decay.
        The exponent is the clamped decay itself, so longer tails also fall off
        more gently at the same normalized position.
        Pass a seeded generator for reproducible draws.
        """
        if not isinstance(sample_rate, int) or sample_rate <= 0:
            raise ValueError(f"sample_rate must be a positive integer, got {sample_rate!r}")
        if math.isnan(decay_seconds):
            raise ValueError("decay_seconds is NaN")

        safe_decay = max(MIN_DECAY_SECONDS, float(decay_seconds))
        length = impulse_length(sample_rate, safe_decay)

        # Envelope in float64 so pow() on long tails keeps its precision
        position = torch.arange(length, dtype=torch.float64) / length
        envelope = torch.pow(1.0 - position, safe_decay).to(torch.float32)

        noise = torch.rand(IMPULSE_CHANNELS, length, generator=generator) * 2.0 - 1.0
        return SampleBuffer(samples=noise * envelope, sample_rate=sample_rate)
