# hamming_image_sim/application.py
"""
Presentation side of the simulator: image load/save through Pillow and
plain-text views of a run (summary counters, G/H matrices, and the
per-codeword inspector).
"""

from __future__ import annotations
import os
import numpy as np
from PIL import Image

from .hamming74 import GENERATOR_MATRIX, PARITY_CHECK_MATRIX
from .simulator import CodewordRecord, SimulationResult
from .utils import byte_bit_string

NIBBLE_LABELS = {
    0: "High nibble (bits b7-b4)",
    1: "Low nibble (bits b3-b0)",
}

# ----------------- I/O helpers -----------------
def load_image_rgb(path: str) -> np.ndarray:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Input image not found: {path}")
    im = Image.open(path)
    if im.mode != "RGB":
        im = im.convert("RGB")
    return np.array(im).astype(np.uint8)

def save_image_rgb(path: str, arr: np.ndarray) -> None:
    a = np.asarray(arr)
    if a.ndim != 3 or a.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) array, got shape {a.shape}")
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    Image.fromarray(np.clip(a, 0, 255).astype(np.uint8)).save(path, format="PNG")

# ----------------- Text views -----------------
def _bits(bits) -> str:
    return " ".join(str(int(b)) for b in bits)

def render_matrix(matrix) -> str:
    return "\n".join("[ " + " ".join(str(int(v)) for v in row) + " ]" for row in np.asarray(matrix))

def status_message(result: SimulationResult) -> str:
    if result.region_too_small or not result.records:
        return "Selection region is too small. Please select a larger area."
    return "Simulation completed. All matrices and codewords below are live from the selected region."

def format_summary(result: SimulationResult) -> str:
    s = result.stats
    r = result.region
    lines = [
        f"Region: x={r.x} y={r.y} w={r.width} h={r.height}",
        f"Total pixels:       {r.pixel_count}",
        f"4-bit blocks:       {s.total_blocks}",
        f"Codewords:          {s.total_codewords}",
        f"Errors introduced:  {s.errors_introduced}",
        f"Errors corrected:   {s.errors_corrected}",
    ]
    return "\n".join(lines)

def format_matrices() -> str:
    return ("Generator matrix G (4x7):\n" + render_matrix(GENERATOR_MATRIX)
            + "\nParity-check matrix H (3x7):\n" + render_matrix(PARITY_CHECK_MATRIX))

def format_record(record: CodewordRecord, index: int) -> str:
    dr = record.decode_result
    lines = [
        f"Codeword #{index}",
        f"  Pixel:                 ({record.x}, {record.y})",
        f"  Nibble:                {NIBBLE_LABELS[record.nibble_index]}",
        f"  Gray value:            {record.gray}",
        f"  Gray bits:             {byte_bit_string(record.gray)}",
        f"  Data bits d:           {_bits(record.data_bits)}",
        f"  Codeword C:            {_bits(record.codeword)}",
        f"  Error bit (1-based):   {record.error_bit_index + 1}",
        f"  Received r:            {_bits(record.received)}",
        f"  Syndrome S:            {_bits(dr.syndrome_bits)}",
        f"  Error position:        {dr.error_position}",
        f"  Corrected codeword:    {_bits(dr.corrected_codeword)}",
        f"  Decoded data bits:     {_bits(dr.data_bits)}",
    ]
    return "\n".join(lines)

def inspect_record(result: SimulationResult, index: int) -> str:
    """Inspector view for a 1-based index (clamped to the available range)."""
    i = result.clamp_index(index)
    return format_record(result.records[i - 1], i)

def record_to_dict(record: CodewordRecord) -> dict:
    dr = record.decode_result
    return {
        "x": record.x,
        "y": record.y,
        "nibble_index": record.nibble_index,
        "gray": record.gray,
        "nibble": record.nibble,
        "data_bits": list(record.data_bits),
        "codeword": list(record.codeword),
        "error_bit_index": record.error_bit_index,
        "received": list(record.received),
        "decode_result": {
            "data_bits": list(dr.data_bits),
            "syndrome_bits": list(dr.syndrome_bits),
            "error_position": dr.error_position,
            "corrected_codeword": list(dr.corrected_codeword),
        },
    }
