import numpy as np

from .hamming74 import DATA_POSITIONS
from .utils import luma_array

def psnr(a: np.ndarray, b: np.ndarray, data_range: int = 255) -> float:
    a = a.astype(np.float64)
    b = b.astype(np.float64)
    if a.size == 0:
        return float("nan")
    mse = np.mean((a - b) ** 2)
    if mse == 0:
        return float("inf")
    return float(20 * np.log10(data_range) - 10 * np.log10(mse))

def region_psnr(reference_rgb: np.ndarray, output_rgb: np.ndarray, region) -> float:
    """
    PSNR of the reference luma against the output luma inside `region`.
    Outputs are flat gray there, so comparing luma to luma is exact.
    """
    ys = slice(region.y, region.y + region.height)
    xs = slice(region.x, region.x + region.width)
    ref = luma_array(np.asarray(reference_rgb)[ys, xs])
    out = luma_array(np.asarray(output_rgb)[ys, xs])
    return psnr(ref, out, data_range=255)

def data_bit_errors(records) -> tuple[int, int]:
    """
    (raw, residual) data-bit error counts over a run.
    raw: data positions of the received word vs. the original data word.
    residual: decoded data vs. the original data word.
    """
    raw = 0
    residual = 0
    for rec in records:
        sent = rec.data_bits
        rx = [rec.received[i] for i in DATA_POSITIONS]
        raw += sum(int(s != r) for s, r in zip(sent, rx))
        residual += sum(int(s != d) for s, d in zip(sent, rec.decode_result.data_bits))
    return raw, residual
