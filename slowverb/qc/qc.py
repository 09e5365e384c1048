"""
Quality checks for rendered buffers: level, DC, clipping, fingerprint.
"""
import hashlib
from typing import Dict, Any

import numpy as np
import torch

from slowverb.core.types import SampleBuffer
from slowverb.qc.thresholds import QC_THRESHOLDS


def _dbfs(x: float) -> float:
    """Convert linear amplitude to dBFS (full scale)."""
    if x <= 0:
        return -np.inf
    return 20.0 * np.log10(abs(x))


def fingerprint(buffer: SampleBuffer) -> str:
    """SHA256 of the float32 sample bytes."""
    data = buffer.samples.detach().cpu().to(torch.float32).numpy()
    return hashlib.sha256(np.ascontiguousarray(data).tobytes()).hexdigest()


def analyze(buffer: SampleBuffer) -> Dict[str, Any]:
    """
    Summarize a render. `passed` is False when the output clips or carries DC
    beyond QC_THRESHOLDS.
    """
    samples = buffer.samples.to(torch.float64)
    if samples.numel() == 0:
        return {
            "peak": 0.0, "peak_dbfs": -np.inf, "rms": 0.0, "dc_offset": 0.0,
            "clipped_samples": 0, "sha256": fingerprint(buffer), "passed": True,
        }

    peak = float(torch.max(torch.abs(samples)))
    rms = float(torch.sqrt(torch.mean(samples ** 2)))
    dc = float(torch.max(torch.abs(torch.mean(samples, dim=-1))))
    clipped = int(torch.sum(torch.abs(samples) > QC_THRESHOLDS["clip_level"]))

    return {
        "peak": peak,
        "peak_dbfs": _dbfs(peak),
        "rms": rms,
        "dc_offset": dc,
        "clipped_samples": clipped,
        "sha256": fingerprint(buffer),
        "passed": clipped <= QC_THRESHOLDS["max_clipped_samples"] and dc <= QC_THRESHOLDS["dc_max"],
    }
