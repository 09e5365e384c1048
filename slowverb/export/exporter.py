from pathlib import Path
from typing import Union

from slowverb.core.types import SampleBuffer
from slowverb.export.wave import WaveEncoder

WAV_MIME_TYPE = "audio/wav"
DEFAULT_EXPORT_NAME = "processed-audio.wav"


def export_filename(stem: str = "processed-audio") -> str:
    """Export name with the .wav extension consumers expect."""
    stem = Path(stem).stem or "processed-audio"
    return f"{stem}.wav"


class Exporter:
    @staticmethod
    def to_bytes(buffer: SampleBuffer) -> bytes:
        return WaveEncoder.encode(buffer)

    @staticmethod
    def save_wav(buffer: SampleBuffer, path: Union[str, Path]) -> Path:
        """Write the encoded bytes verbatim; forces a .wav suffix."""
        path = Path(path)
        if path.suffix.lower() != ".wav":
            path = path.with_suffix(".wav")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(WaveEncoder.encode(buffer))
        return path
