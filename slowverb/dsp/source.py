"""
Buffer source reader: plays a SampleBuffer at a fixed playback rate.
Rate != 1 resamples (linear interpolation), which shifts pitch along with tempo.
"""
import math

import torch

from slowverb.core.types import SampleBuffer


class BufferSource:
    def __init__(self, buffer: SampleBuffer, playback_rate: float, output_rate: int, start_offset: float = 0.0):
        """
        playback_rate: source seconds advanced per output second.
        output_rate: sample rate of the target pulling from this source.
        start_offset: start position in source seconds.
        """
        if playback_rate <= 0:
            raise ValueError(f"playback_rate must be positive, got {playback_rate}")
        self.buffer = buffer
        self.playback_rate = playback_rate
        # Source frames advanced per output frame
        self.step = playback_rate * buffer.sample_rate / output_rate
        self.start_frame = start_offset * buffer.sample_rate
        self.frames_read = 0

    @property
    def remaining_frames(self) -> int:
        """Output frames left before the read position passes the last source frame."""
        left = self.buffer.frame_count - self.start_frame - self.frames_read * self.step
        if left <= 0:
            return 0
        return int(math.ceil(left / self.step))

    @property
    def exhausted(self) -> bool:
        return self.remaining_frames == 0

    def read(self, count: int) -> torch.Tensor:
        """
        Read `count` output frames, shape (channels, count).
        Frames past the end of the source are silence.
        """
        samples = self.buffer.samples
        n = self.buffer.frame_count
        out = torch.zeros(samples.shape[0], count, dtype=samples.dtype)
        if count == 0 or n == 0:
            self.frames_read += count
            return out

        # Absolute positions in float64 so long playbacks do not drift
        grid = torch.arange(self.frames_read, self.frames_read + count, dtype=torch.float64)
        positions = self.start_frame + grid * self.step
        valid = positions < n

        # Linear interpolation: y = x[floor] * (1 - frac) + x[ceil] * frac
        indices_floor = torch.floor(positions).long().clamp(0, n - 1)
        indices_ceil = (indices_floor + 1).clamp(max=n - 1)
        frac = (positions - torch.floor(positions)).to(samples.dtype)

        interp = samples[:, indices_floor] * (1.0 - frac) + samples[:, indices_ceil] * frac
        out[:, valid] = interp[:, valid]

        self.frames_read += count
        return out
