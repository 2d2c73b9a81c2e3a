# hamming_image_sim/channel.py
# ---------------------------------------------------------------------
# Single-bit-error channel. An error source is any callable taking the
# codeword length and returning the 0-based index of the bit to flip.
# The simulator never draws randomness itself; it asks the source.
# ---------------------------------------------------------------------

from __future__ import annotations
from typing import Callable, Iterable, Optional, Sequence, Tuple
import numpy as np

ErrorSource = Callable[[int], int]

__all__ = ["ErrorSource", "RandomErrorSource", "ScriptedErrorSource", "flip_bit"]


def flip_bit(codeword: Sequence[int], index: int) -> Tuple[int, ...]:
    """Return a copy of `codeword` with bit `index` (0-based) toggled."""
    bits = [int(b) & 1 for b in codeword]
    i = int(index)
    if not 0 <= i < len(bits):
        raise ValueError(f"Bit index {index} out of range for {len(bits)}-bit word")
    bits[i] ^= 1
    return tuple(bits)


class RandomErrorSource:
    """
    Uniform bit positions from numpy's default_rng.

    Args
    ----
    seed : int | None
        Same seed -> same sequence of positions. None draws fresh entropy.
    """
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def __call__(self, n_bits: int) -> int:
        return int(self.rng.integers(0, n_bits))


class ScriptedErrorSource:
    """Cycles through a fixed list of positions (for tests and replays)."""
    def __init__(self, indices: Iterable[int]):
        self.indices = [int(i) for i in indices]
        if not self.indices:
            raise ValueError("ScriptedErrorSource needs at least one index")
        self._k = 0

    def __call__(self, n_bits: int) -> int:
        i = self.indices[self._k % len(self.indices)]
        if not 0 <= i < n_bits:
            raise ValueError(f"Scripted index {i} out of range for {n_bits}-bit word")
        self._k += 1
        return i
