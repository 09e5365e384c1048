"""
Core rendering utilities with debug outputs, fingerprinting, and param tracing.
Used by the render.py tool.
"""
import sys
import os
import json
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch

from slowverb.core.io import AudioIO
from slowverb.core.types import SampleBuffer
from slowverb.export.exporter import Exporter
from slowverb.params.resolve import resolve_params
from slowverb.qc.qc import analyze
from slowverb.render.offline import OfflineRenderer


def _get_git_hash() -> str:
    """Get short git commit hash."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            cwd=os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except OSError:
        pass
    return "unknown"


def render_file(
    input_path: Path,
    params: dict,
    output_dir: Path,
    filename: str,
    seed: Optional[int] = None,
    debug: bool = False,
    script_name: str = "unknown",
) -> Tuple[SampleBuffer, Dict]:
    """
    Render one input file offline with full param tracing and fingerprinting.

    Args:
        input_path: WAV/MP3 file to process
        params: {"speed": ..., "wetness": ...} (missing keys use defaults)
        output_dir: Directory to save WAV and debug JSON
        filename: Base filename (without extension)
        seed: Impulse seed (None = random)
        debug: Save resolved.json beside the wav
        script_name: Name of calling script (for debug JSON)

    Returns:
        Tuple of (rendered buffer, debug_info dict)
    """
    if seed is None:
        import random
        seed = random.randint(0, 2**31 - 1)

    input_params = dict(params) if params else {}
    resolved = resolve_params(input_params)

    source = AudioIO.load(str(input_path))
    generator = torch.Generator().manual_seed(seed)
    rendered = OfflineRenderer().render(source, resolved, generator=generator)

    qc_result = analyze(rendered)
    wav_path = Exporter.save_wav(rendered, Path(output_dir) / f"{filename}.wav")

    debug_info = {
        "script_name": script_name,
        "timestamp": datetime.now().isoformat(),
        "git_hash": _get_git_hash(),
        "seed": seed,
        "input_path": str(input_path),
        "input_params": input_params,
        "resolved_params": {"speed": resolved.speed, "wetness": resolved.wetness},
        "source": {
            "channels": source.channels,
            "sample_rate": source.sample_rate,
            "frames": source.frame_count,
        },
        "frames": rendered.frame_count,
        "qc_result": qc_result,
        "wav_path": str(wav_path),
    }

    if debug:
        json_path = Path(output_dir) / f"{filename}.resolved.json"
        with open(json_path, "w") as f:
            json.dump(debug_info, f, indent=2, default=str)

    return rendered, debug_info


def get_unique_output_dir(base_name: str) -> Path:
    """
    Generate unique output directory: renders/{base_name}/YYYYMMDD_HHMMSS_{gitshort}/
    """
    now = datetime.now()
    date_str = now.strftime("%Y%m%d")
    time_str = now.strftime("%H%M%S")
    git_hash = _get_git_hash()
    short_hash = git_hash[:8] if git_hash != "unknown" else "unknown"

    return Path("renders") / base_name / f"{date_str}_{time_str}_{short_hash}"
