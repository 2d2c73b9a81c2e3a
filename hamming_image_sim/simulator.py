# hamming_image_sim/simulator.py
"""
Region simulation: every pixel in the selection becomes one luma byte,
split into two nibbles, each sent through Hamming(7,4) with exactly one
bit flipped by the error source, then decoded.

Outputs are fresh copies of the input image. Inside the region the
"corrected" copy holds the decoded luma and the "corrupted" copy holds the
luma read straight from the received data positions (parity ignored).
Everything else, alpha included, is left as it was.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import List, Literal, Optional, Tuple
import logging
import math
import numpy as np
from tqdm.auto import tqdm

from . import hamming74 as ham
from .channel import ErrorSource, RandomErrorSource, flip_bit
from .utils import luma, split_byte, join_nibbles, nibble_to_bits, bits_to_nibble

logger = logging.getLogger(__name__)

Status = Literal["completed", "region_too_small"]


# ----------------- Region -----------------
@dataclass(frozen=True)
class Region:
    x: float
    y: float
    width: float
    height: float

    @property
    def pixel_count(self) -> int:
        return max(0, int(self.width)) * max(0, int(self.height))

    @property
    def is_empty(self) -> bool:
        return self.pixel_count == 0


def _clamp_origin(v: float) -> int:
    return 0 if v == -math.inf else max(0, math.floor(v))

def _clamp_extent(size: float, room: int) -> int:
    # NaN / -inf -> nothing, +inf -> up to the image edge
    if math.isnan(size) or size == -math.inf:
        return 0
    if size == math.inf:
        return max(0, room)
    return max(0, min(room, math.floor(size)))

def clamp_region(selection: Region, image_width: int, image_height: int) -> Region:
    """Floor a (possibly fractional / out of bounds / non-finite) selection onto the image grid."""
    x, y = float(selection.x), float(selection.y)
    if math.isnan(x) or math.isnan(y) or x == math.inf or y == math.inf:
        return Region(0, 0, 0, 0)
    sx = _clamp_origin(x)
    sy = _clamp_origin(y)
    sw = _clamp_extent(float(selection.width), int(image_width) - sx)
    sh = _clamp_extent(float(selection.height), int(image_height) - sy)
    return Region(sx, sy, sw, sh)


# ----------------- Records / stats -----------------
@dataclass(frozen=True)
class CodewordRecord:
    x: int
    y: int
    nibble_index: int            # 0 = high nibble, 1 = low nibble
    gray: int
    data_bits: Tuple[int, ...]
    codeword: Tuple[int, ...]
    error_bit_index: int         # 0-based
    received: Tuple[int, ...]
    decode_result: ham.DecodeResult

    @property
    def nibble(self) -> int:
        return bits_to_nibble(self.data_bits)

    @property
    def received_nibble(self) -> int:
        return bits_to_nibble([self.received[i] for i in ham.DATA_POSITIONS])


@dataclass
class RunStatistics:
    total_blocks: int = 0
    total_codewords: int = 0
    errors_introduced: int = 0
    errors_corrected: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SimulationResult:
    corrected: np.ndarray
    corrupted: np.ndarray
    records: List[CodewordRecord] = field(default_factory=list)
    stats: RunStatistics = field(default_factory=RunStatistics)
    region: Region = Region(0, 0, 0, 0)
    status: Status = "completed"

    @property
    def region_too_small(self) -> bool:
        return self.status == "region_too_small"

    def clamp_index(self, index: int) -> int:
        n = len(self.records)
        if n == 0:
            raise IndexError("No codeword records: the region was empty")
        return min(max(int(index), 1), n)

    def inspect(self, index: int) -> CodewordRecord:
        """1-based record lookup; out-of-range indices clamp to [1, N]."""
        return self.records[self.clamp_index(index) - 1]


# ----------------- Core -----------------
def _as_pixels(pixels) -> np.ndarray:
    arr = np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) pixel array, got shape {arr.shape}")
    return arr


def _send_nibble(nibble: int, error_source: ErrorSource) -> tuple[tuple, tuple, int, tuple, ham.DecodeResult]:
    data_bits = nibble_to_bits(nibble)
    codeword = ham.encode(data_bits)
    bit_index = int(error_source(ham.N_BITS))
    received = flip_bit(codeword, bit_index)
    return data_bits, codeword, bit_index, received, ham.decode(received)


def run_on_region(pixels,
                  selection: Region,
                  error_source: Optional[ErrorSource] = None,
                  progress: bool = False) -> SimulationResult:
    """
    Simulate Hamming(7,4) transmission of every pixel's luma in `selection`.

    Args
    ----
    pixels : array-like (H, W, 3) or (H, W, 4), values 0..255
        Source image; never modified.
    selection : Region
        Selection rectangle in pixel coordinates, clamped to the image.
    error_source : callable(n_bits) -> int, optional
        Picks the bit to flip in each codeword. Defaults to an unseeded
        RandomErrorSource.
    progress : bool
        Show a tqdm bar over region rows.

    Returns
    -------
    SimulationResult with records in row-major order, high nibble first.
    """
    src = _as_pixels(pixels)
    H, W = src.shape[0], src.shape[1]
    if error_source is None:
        error_source = RandomErrorSource()

    corrupted = src.copy()
    corrected = src.copy()
    region = clamp_region(selection, W, H)
    stats = RunStatistics()
    records: List[CodewordRecord] = []

    if region.is_empty:
        logger.warning("Selection %s clamps to an empty region on a %dx%d image", selection, W, H)
        return SimulationResult(corrected, corrupted, records, stats, region, "region_too_small")

    logger.info("Running Hamming(7,4) over region x=%d y=%d w=%d h=%d",
                region.x, region.y, region.width, region.height)

    rows = range(region.y, region.y + region.height)
    for y in tqdm(rows, desc="Hamming rows", unit="row", disable=not progress):
        for x in range(region.x, region.x + region.width):
            r, g, b = (int(v) for v in src[y, x, :3])
            gray = luma(r, g, b)

            decoded_nibbles = []
            corrupted_nibbles = []
            for nibble_index, nibble in enumerate(split_byte(gray)):
                data_bits, codeword, bit_index, received, result = _send_nibble(nibble, error_source)
                stats.total_blocks += 1
                stats.total_codewords += 1
                stats.errors_introduced += 1
                if result.error_position > 0:
                    stats.errors_corrected += 1

                rec = CodewordRecord(
                    x=x, y=y, nibble_index=nibble_index, gray=gray,
                    data_bits=data_bits, codeword=codeword,
                    error_bit_index=bit_index, received=received,
                    decode_result=result,
                )
                records.append(rec)
                decoded_nibbles.append(result.nibble)
                corrupted_nibbles.append(rec.received_nibble)
                logger.debug("(%d,%d) nibble %d: %s -> %s flip %d -> pos %d",
                             x, y, nibble_index, data_bits, codeword, bit_index, result.error_position)

            corrected[y, x, :3] = join_nibbles(*decoded_nibbles)
            corrupted[y, x, :3] = join_nibbles(*corrupted_nibbles)

    logger.info("Done: %d codewords, %d errors introduced, %d corrected",
                stats.total_codewords, stats.errors_introduced, stats.errors_corrected)
    return SimulationResult(corrected, corrupted, records, stats, region, "completed")
