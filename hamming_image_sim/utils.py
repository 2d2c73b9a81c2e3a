from __future__ import annotations
import os, json, re, datetime
import numpy as np

# ----------------- Bits/Nibbles -----------------
def nibble_to_bits(nibble: int) -> tuple[int, int, int, int]:
    """4-bit value -> (d1, d2, d3, d4), MSB first."""
    n = int(nibble) & 0xF
    return ((n >> 3) & 1, (n >> 2) & 1, (n >> 1) & 1, n & 1)

def bits_to_nibble(bits) -> int:
    """(d1, d2, d3, d4) MSB first -> 4-bit value. Bits are masked to 0/1."""
    b = [int(v) & 1 for v in bits]
    if len(b) != 4:
        raise ValueError(f"Expected 4 bits, got {len(b)}")
    return (b[0] << 3) | (b[1] << 2) | (b[2] << 1) | b[3]

def split_byte(value: int) -> tuple[int, int]:
    v = int(value)
    return (v >> 4) & 0xF, v & 0xF

def join_nibbles(high: int, low: int) -> int:
    return ((int(high) & 0xF) << 4) | (int(low) & 0xF)

def byte_bit_string(value: int) -> str:
    """8-bit pattern with spaces, e.g. 181 -> '1 0 1 1 0 1 0 1'."""
    return " ".join(format(int(value) & 0xFF, "08b"))

# ----------------- Luma -----------------
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

def luma(r: int, g: int, b: int) -> int:
    """Rec.601 luma rounded half-up (not Python's banker's rounding)."""
    v = LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b
    return int(np.floor(v + 0.5))

def luma_array(rgb: np.ndarray) -> np.ndarray:
    """(H,W,>=3) array -> (H,W) uint8 luma, same rounding as luma()."""
    a = np.asarray(rgb, dtype=np.float64)
    v = LUMA_WEIGHTS[0] * a[..., 0] + LUMA_WEIGHTS[1] * a[..., 1] + LUMA_WEIGHTS[2] * a[..., 2]
    return np.floor(v + 0.5).astype(np.uint8)

# ----------------- Output dirs / JSON -----------------
def _sanitize(s: str) -> str:
    return re.sub(r'[^0-9A-Za-z_.-]+', '-', str(s)).strip('-')

def make_output_dir(output_root: str, image_path: str, region, seed) -> str:
    ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
    stem = os.path.splitext(os.path.basename(image_path))[0]
    folder = (
        f"{ts}__{stem}"
        f"__x{region.x}y{region.y}w{region.width}h{region.height}"
        f"_seed{seed if seed is not None else 'rand'}"
    )
    base = os.path.join(output_root, _sanitize(folder))
    os.makedirs(base, exist_ok=True)
    return base

def _json_default(o):
    if isinstance(o, np.integer):
        return int(o)
    if isinstance(o, np.floating):
        return float(o)
    if isinstance(o, np.ndarray):
        return o.tolist()
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

def finite_or_none(o):
    """Recursively replace inf/nan floats with None (strict JSON has no such tokens)."""
    if isinstance(o, dict):
        return {k: finite_or_none(v) for k, v in o.items()}
    if isinstance(o, (list, tuple)):
        return [finite_or_none(v) for v in o]
    if isinstance(o, (float, np.floating)):
        return float(o) if np.isfinite(o) else None
    return o

def write_json(path: str, obj) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(finite_or_none(obj), f, ensure_ascii=False, indent=2,
                  allow_nan=False, default=_json_default)
