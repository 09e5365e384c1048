import io
import logging
from typing import Optional

import numpy as np
import soundfile as sf
import torch

from slowverb.core.errors import DecodeError
from slowverb.core.types import SampleBuffer

logger = logging.getLogger(__name__)

SUPPORTED_CONTAINERS = ("wav", "mp3")


def container_from_filename(filename: str) -> Optional[str]:
    """'song.MP3' -> 'mp3'; None when there is no extension."""
    if "." not in filename:
        return None
    return filename.rsplit(".", 1)[-1].lower()


class SoundfileDecoder:
    @staticmethod
    def decode(data: bytes, container: Optional[str] = None) -> SampleBuffer:
        """
        Decode WAV/MP3 bytes into a float32 SampleBuffer.
        container: declared type ("wav", "mp3"); None lets libsndfile sniff it.
        """
        if container is not None and container.lower() not in SUPPORTED_CONTAINERS:
            raise DecodeError(f"Unsupported container: {container}")
        if not data:
            raise DecodeError("Empty input")

        try:
            samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (sf.LibsndfileError, RuntimeError) as e:
            logger.warning("Decode failed (%s): %s", container or "unknown", e)
            raise DecodeError(f"Could not decode audio: {e}") from e

        if samples.shape[0] == 0:
            raise DecodeError("Decoded audio has no frames")

        # soundfile gives (frames, channels)
        tensor = torch.from_numpy(np.ascontiguousarray(samples.T))
        return SampleBuffer(samples=tensor, sample_rate=int(sample_rate))


class AudioIO:
    @staticmethod
    def load(path: str) -> SampleBuffer:
        """Decode a file from disk."""
        with open(path, "rb") as f:
            data = f.read()
        return SoundfileDecoder.decode(data, container_from_filename(path))

