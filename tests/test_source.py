"""
Tests for slowverb/dsp/source: playback rate, interpolation, offsets, exhaustion.
"""
import sys
import os
import math

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch
from slowverb.core.types import SampleBuffer
from slowverb.dsp.source import BufferSource


def _ramp(frames=4, sample_rate=10):
    return SampleBuffer(samples=torch.arange(frames, dtype=torch.float32).view(1, -1), sample_rate=sample_rate)


def test_unity_rate_reads_samples_verbatim():
    buffer = SampleBuffer(samples=torch.randn(2, 64), sample_rate=100)
    source = BufferSource(buffer, 1.0, 100)
    assert source.remaining_frames == 64
    torch.testing.assert_close(source.read(64), buffer.samples)
    assert source.exhausted


def test_half_speed_interpolates_between_frames():
    source = BufferSource(_ramp(), 0.5, 10)
    assert source.remaining_frames == 8
    out = source.read(8)
    expected = torch.tensor([[0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.0]])
    torch.testing.assert_close(out, expected)


def test_fast_rate_shortens_output():
    buffer = SampleBuffer(samples=torch.randn(1, 1000), sample_rate=100)
    source = BufferSource(buffer, 1.5, 100)
    assert source.remaining_frames == math.ceil(1000 / 1.5)


def test_start_offset_in_source_seconds():
    source = BufferSource(_ramp(frames=10), 1.0, 10, start_offset=0.2)
    out = source.read(3)
    torch.testing.assert_close(out, torch.tensor([[2.0, 3.0, 4.0]]))
    assert source.remaining_frames == 5


def test_reads_past_end_are_silent():
    source = BufferSource(_ramp(), 1.0, 10)
    out = source.read(6)
    torch.testing.assert_close(out, torch.tensor([[0.0, 1.0, 2.0, 3.0, 0.0, 0.0]]))
    assert source.exhausted
    assert float(torch.sum(torch.abs(source.read(4)))) == 0.0


def test_output_rate_differs_from_source_rate():
    """Source at 10 Hz pulled by a 20 Hz target at unity speed advances half a frame per output frame."""
    source = BufferSource(_ramp(), 1.0, 20)
    assert source.step == 0.5
    torch.testing.assert_close(source.read(3), torch.tensor([[0.0, 0.5, 1.0]]))


def test_consecutive_reads_continue_position():
    buffer = SampleBuffer(samples=torch.randn(2, 300), sample_rate=100)
    whole = BufferSource(buffer, 0.75, 100).read(400)
    source = BufferSource(buffer, 0.75, 100)
    parts = torch.cat([source.read(128), source.read(128), source.read(144)], dim=-1)
    torch.testing.assert_close(parts, whole)
