# hamming_image_sim/hamming74.py
"""
Hamming(7,4) with the classic positional layout

    position:  1   2   3   4   5   6   7
    bit:       p1  p2  d1  p3  d2  d3  d4

p1 = d1 ^ d2 ^ d4   (positions 1,3,5,7)
p2 = d1 ^ d3 ^ d4   (positions 2,3,6,7)
p3 = d2 ^ d3 ^ d4   (positions 4,5,6,7)

so the syndrome s1 + 2*s2 + 4*s3 is directly the 1-based position of a
single flipped bit. Scalar encode()/decode() work on one block and return
tuples; encode_blocks()/decode_blocks() do the same on (N,4)/(N,7) arrays.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple
import numpy as np

from .utils import nibble_to_bits, bits_to_nibble

__all__ = [
    "DecodeResult", "encode", "decode", "encode_blocks", "decode_blocks",
    "GENERATOR_MATRIX", "PARITY_CHECK_MATRIX", "DATA_POSITIONS",
    "nibble_to_bits", "bits_to_nibble",
]

N_BITS = 7
K_BITS = 4
# 0-based indices of d1..d4 inside a codeword
DATA_POSITIONS = (2, 4, 5, 6)

# Rows are the codewords of the unit data words d1..d4.
GENERATOR_MATRIX = np.array([
    [1, 1, 1, 0, 0, 0, 0],
    [1, 0, 0, 1, 1, 0, 0],
    [0, 1, 0, 1, 0, 1, 0],
    [1, 1, 0, 1, 0, 0, 1],
], dtype=np.uint8)

# Column j is the binary expansion (LSB in the top row) of position j+1.
PARITY_CHECK_MATRIX = np.array([
    [1, 0, 1, 0, 1, 0, 1],
    [0, 1, 1, 0, 0, 1, 1],
    [0, 0, 0, 1, 1, 1, 1],
], dtype=np.uint8)

Bits = Tuple[int, ...]


@dataclass(frozen=True)
class DecodeResult:
    data_bits: Bits
    syndrome_bits: Bits
    error_position: int          # 0 = no error, 1..7 = flipped position
    corrected_codeword: Bits

    @property
    def nibble(self) -> int:
        return bits_to_nibble(self.data_bits)


def _masked(bits: Sequence[int], n: int, what: str) -> list[int]:
    b = [int(v) & 1 for v in bits]
    if len(b) != n:
        raise ValueError(f"{what} must have {n} bits, got {len(b)}")
    return b


def encode(data_bits: Sequence[int]) -> Bits:
    """[d1, d2, d3, d4] -> (p1, p2, d1, p3, d2, d3, d4)."""
    d1, d2, d3, d4 = _masked(data_bits, K_BITS, "Data word")
    p1 = d1 ^ d2 ^ d4
    p2 = d1 ^ d3 ^ d4
    p3 = d2 ^ d3 ^ d4
    return (p1, p2, d1, p3, d2, d3, d4)


def decode(received: Sequence[int]) -> DecodeResult:
    b = _masked(received, N_BITS, "Codeword")
    b1, b2, b3, b4, b5, b6, b7 = b
    s1 = b1 ^ b3 ^ b5 ^ b7
    s2 = b2 ^ b3 ^ b6 ^ b7
    s3 = b4 ^ b5 ^ b6 ^ b7
    pos = s1 + (s2 << 1) + (s3 << 2)

    corrected = list(b)
    if 1 <= pos <= N_BITS:
        corrected[pos - 1] ^= 1

    return DecodeResult(
        data_bits=tuple(corrected[i] for i in DATA_POSITIONS),
        syndrome_bits=(s1, s2, s3),
        error_position=pos,
        corrected_codeword=tuple(corrected),
    )


# ---------- Block (vectorized) variants ----------
def encode_blocks(data: np.ndarray) -> np.ndarray:
    D = np.asarray(data, dtype=np.uint8).reshape(-1, K_BITS) & 1
    if D.shape[0] == 0:
        return np.zeros((0, N_BITS), dtype=np.uint8)
    d1, d2, d3, d4 = D[:, 0], D[:, 1], D[:, 2], D[:, 3]
    p1 = (d1 ^ d2 ^ d4).astype(np.uint8)
    p2 = (d1 ^ d3 ^ d4).astype(np.uint8)
    p3 = (d2 ^ d3 ^ d4).astype(np.uint8)
    return np.stack([p1, p2, d1, p3, d2, d3, d4], axis=1)


def decode_blocks(received: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    (N,7) received words -> ((N,4) corrected data, (N,) error positions).
    The syndrome is H·r (mod 2) read as a little-endian 3-bit number.
    """
    C = (np.asarray(received, dtype=np.uint8).reshape(-1, N_BITS) & 1).copy()
    if C.shape[0] == 0:
        return np.zeros((0, K_BITS), dtype=np.uint8), np.zeros(0, dtype=np.uint8)
    S = (C.astype(np.int64) @ PARITY_CHECK_MATRIX.T.astype(np.int64)) & 1
    err_pos = (S[:, 0] + (S[:, 1] << 1) + (S[:, 2] << 2)).astype(np.uint8)
    rows = np.nonzero(err_pos)[0]
    C[rows, err_pos[rows].astype(np.int64) - 1] ^= 1
    return C[:, list(DATA_POSITIONS)], err_pos
