from dataclasses import dataclass
from enum import Enum

import torch


@dataclass(frozen=True)
class SampleBuffer:
    """
    Decoded (or rendered) audio. samples is float32, shape (channels, frames).
    Treated as read-only once constructed; share it, never write into it.
    """
    samples: torch.Tensor
    sample_rate: int

    def __post_init__(self):
        if self.samples.dim() != 2:
            raise ValueError(f"samples must be (channels, frames), got shape {tuple(self.samples.shape)}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")

    @property
    def channels(self) -> int:
        return self.samples.shape[0]

    @property
    def frame_count(self) -> int:
        return self.samples.shape[1]

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.frame_count / self.sample_rate

    def channel(self, index: int) -> torch.Tensor:
        return self.samples[index]


@dataclass(frozen=True)
class EffectParameters:
    speed: float = 1.0    # 0.5..1.5, couples tempo and pitch
    wetness: float = 0.5  # 0 = dry, 1 = wet

    @property
    def dry_gain(self) -> float:
        return 1.0 - self.wetness

    @property
    def wet_gain(self) -> float:
        return self.wetness


@dataclass
class PlaybackCursor:
    """Offset into the source timeline (source seconds, not wall-clock)."""
    position_seconds: float = 0.0

    def reset(self) -> None:
        self.position_seconds = 0.0


class SessionState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    REBUILDING = "rebuilding"
