"""
Streaming convolution stage (overlap-add).
Block-wise processing yields the same samples as one whole-signal pass, so live
preview and offline export share one implementation.
"""
import math

import torch
import torchaudio.functional as F

from slowverb.core.types import SampleBuffer

# Platform convolver normalization constants
GAIN_CALIBRATION = 0.00125
GAIN_CALIBRATION_SAMPLE_RATE = 44100
MIN_POWER = 0.000125


def normalization_scale(impulse: SampleBuffer) -> float:
    """
    Scale applied to the impulse so loud or long kernels do not blow up the
    wet level: calibrated inverse RMS over all channels and frames.
    """
    samples = impulse.samples.to(torch.float64)
    power = math.sqrt(float(torch.sum(samples ** 2)) / (impulse.channels * impulse.frame_count))
    power = max(power, MIN_POWER)
    scale = (1.0 / power) * GAIN_CALIBRATION
    scale *= GAIN_CALIBRATION_SAMPLE_RATE / impulse.sample_rate
    if impulse.channels == 4:
        scale *= 0.5
    return scale


class Convolver:
    def __init__(self, impulse: SampleBuffer, channels: int, normalize: bool = True):
        """
        impulse: kernel buffer; output channel c uses impulse channel c mod impulse.channels.
        channels: channel count of the signal that will be processed.
        """
        if impulse.frame_count == 0:
            raise ValueError("impulse must not be empty")
        self.impulse = impulse
        self.channels = channels
        self.scale = normalization_scale(impulse) if normalize else 1.0

        rows = [c % impulse.channels for c in range(channels)]
        self.kernel = impulse.samples[rows] * self.scale
        self._tail = torch.zeros(channels, impulse.frame_count - 1, dtype=self.kernel.dtype)

    @property
    def tail_energy(self) -> float:
        """Energy still pending in the overlap tail."""
        return float(torch.sum(self._tail ** 2))

    def reset(self) -> None:
        self._tail.zero_()

    def process(self, block: torch.Tensor) -> torch.Tensor:
        """Convolve a (channels, frames) block, carrying the tail into the next call."""
        frames = block.shape[-1]
        if frames == 0:
            return block.clone()

        conv = F.fftconvolve(block, self.kernel)  # (channels, frames + len - 1)
        conv[:, : self._tail.shape[-1]] += self._tail
        out = conv[:, :frames].clone()
        self._tail = conv[:, frames:].clone()
        return out
