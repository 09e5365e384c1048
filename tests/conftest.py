"""
Shared fixtures: deterministic buffers, a fake clock and a fake output sink.
"""
import io
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import numpy as np
import pytest
import soundfile as sf
import torch

from slowverb.core.types import SampleBuffer


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSink:
    """Records attach/detach in order; never touches an audio device."""

    def __init__(self, sample_rate=None):
        self.sample_rate = sample_rate
        self.graph = None
        self.events = []
        self.closed = False

    def attach(self, graph):
        assert self.graph is None, "attached while another graph was live"
        self.graph = graph
        self.events.append("attach")

    def detach(self):
        graph, self.graph = self.graph, None
        self.events.append("detach")
        return graph

    def close(self):
        self.closed = True


def make_buffer(channels: int = 2, frames: int = 2000, sample_rate: int = 1000, seed: int = 0) -> SampleBuffer:
    g = torch.Generator().manual_seed(seed)
    samples = (torch.rand(channels, frames, generator=g) * 2.0 - 1.0) * 0.5
    return SampleBuffer(samples=samples, sample_rate=sample_rate)


def wav_bytes(buffer: SampleBuffer, subtype: str = "FLOAT") -> bytes:
    out = io.BytesIO()
    sf.write(out, buffer.samples.numpy().T, buffer.sample_rate, format="WAV", subtype=subtype)
    return out.getvalue()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def buffer():
    return make_buffer()


@pytest.fixture
def mono_buffer():
    return make_buffer(channels=1, frames=1500, seed=3)
