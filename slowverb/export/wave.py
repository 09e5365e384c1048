"""
16-bit PCM WAV encoder.
Writes the canonical 44-byte RIFF header followed by interleaved little-endian samples.
"""
import struct

import numpy as np

from slowverb.core.types import SampleBuffer

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
WAVE_FORMAT_PCM = 1


def quantize(samples: np.ndarray) -> np.ndarray:
    """
    Float -> int16. Clamp to [-1, 1]; samples below -0.5 (after the +0.5 bias
    check) scale by 32768, the rest by 32767; truncate toward zero.
    """
    clamped = np.clip(samples.astype(np.float64), -1.0, 1.0)
    scaled = np.where(0.5 + clamped < 0, clamped * 32768.0, clamped * 32767.0)
    return np.trunc(scaled).astype("<i2")


class WaveEncoder:
    @staticmethod
    def header(channels: int, sample_rate: int, frame_count: int) -> bytes:
        data_size = frame_count * channels * BYTES_PER_SAMPLE
        block_align = channels * BYTES_PER_SAMPLE
        return struct.pack(
            "<4sI4s4sIHHIIHH4sI",
            b"RIFF",
            HEADER_SIZE + data_size - 8,
            b"WAVE",
            b"fmt ",
            16,
            WAVE_FORMAT_PCM,
            channels,
            sample_rate,
            sample_rate * block_align,
            block_align,
            BITS_PER_SAMPLE,
            b"data",
            data_size,
        )

    @staticmethod
    def encode(buffer: SampleBuffer) -> bytes:
        """Encode a SampleBuffer; deterministic, output length 44 + frames * channels * 2."""
        data = buffer.samples.detach().cpu().numpy()
        # (channels, frames) -> frame-major interleave
        interleaved = quantize(data.T.reshape(-1))
        head = WaveEncoder.header(buffer.channels, buffer.sample_rate, buffer.frame_count)
        return head + interleaved.tobytes()
