"""
Gain stages and the summing bus that joins the dry and wet paths.
"""
from dataclasses import dataclass
from typing import Dict, List

import torch


# -----------------------------------------------------------------------------
# Gain stage
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GainStage:
    """Linear gain applied to one path."""
    name: str
    gain: float

    def apply(self, block: torch.Tensor) -> torch.Tensor:
        return block * self.gain


def crossfade_gains(wetness: float) -> Dict[str, float]:
    """Linear dry/wet law: dry + wet == 1. Not equal-power."""
    return {"dry": 1.0 - wetness, "wet": wetness}


# -----------------------------------------------------------------------------
# Summing bus
# -----------------------------------------------------------------------------

class SummingBus:
    """
    Sum path outputs into one block.
    Shorter inputs are zero-padded to the longest one.
    """

    def __init__(self):
        self._inputs: List[torch.Tensor] = []

    def add(self, block: torch.Tensor) -> None:
        self._inputs.append(block)

    def mix(self) -> torch.Tensor:
        if not self._inputs:
            return torch.zeros(0, 0, dtype=torch.float32)

        ref_len = max(b.shape[-1] for b in self._inputs)
        master = None
        for block in self._inputs:
            length = block.shape[-1]
            if length < ref_len:
                block = torch.nn.functional.pad(block, (0, ref_len - length))
            master = block.clone() if master is None else master + block

        self._inputs = []
        return master
