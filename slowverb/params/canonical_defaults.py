"""
Canonical engine defaults: single source for effect and engine initialization.
Slider defaults match what the preview UI starts with (speed 1.00x, reverb 50%).
"""

from typing import Dict, Any

# Reverb decay (seconds) = wetness * REVERB_DECAY_SCALE; no separate cap.
REVERB_DECAY_SCALE = 3.0
# Shorter impulses are clamped up to this; a zero-length kernel is invalid.
MIN_DECAY_SECONDS = 0.01
IMPULSE_CHANNELS = 2

ENGINE_DEFAULTS: Dict[str, Any] = {
    "speed": 1.0,
    "wetness": 0.5,
    "reverb_decay_scale": REVERB_DECAY_SCALE,
    "min_decay_seconds": MIN_DECAY_SECONDS,
    "impulse_channels": IMPULSE_CHANNELS,
    "normalize_impulse": True,
    # Live sink
    "block_size": 2048,
    "live_sample_rate": None,  # None = follow the loaded buffer
}
