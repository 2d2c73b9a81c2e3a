"""
Hamming(7,4) region simulation runner.
Minimal examples:
  hamming-image-sim --image examples/sample.png
  hamming-image-sim --image photo.jpg --x 10 --y 10 --w 32 --h 16 --inspect 1 5 40
  hamming-image-sim --image photo.jpg --preset center --seed 7
  hamming-image-sim --self-check
"""

from __future__ import annotations
import os, sys, argparse, logging
from dataclasses import asdict
from typing import Optional, Sequence
import numpy as np

from .config import SimulationConfig, load_config
from .presets import REGION_PRESETS, resolve_preset
from .simulator import Region, SimulationResult, run_on_region
from .channel import RandomErrorSource
from .application import (
    load_image_rgb, save_image_rgb, status_message, format_summary,
    format_matrices, inspect_record, record_to_dict,
)
from .metrics import region_psnr, data_bit_errors
from .utils import make_output_dir, write_json
from . import hamming74 as ham

logger = logging.getLogger(__name__)

# ---------- helpers ----------
def self_check() -> bool:
    """Every data word x every single-bit flip must decode back exactly."""
    data = np.array([ham.nibble_to_bits(n) for n in range(16)], dtype=np.uint8)
    C = ham.encode_blocks(data)
    rx = np.repeat(C, ham.N_BITS, axis=0)
    flips = np.tile(np.arange(ham.N_BITS), 16)
    rx[np.arange(len(rx)), flips] ^= 1
    dec, pos = ham.decode_blocks(rx)
    ok_data = bool(np.array_equal(dec, np.repeat(data, ham.N_BITS, axis=0)))
    ok_pos = bool(np.array_equal(pos.astype(np.int64), flips + 1))
    return ok_data and ok_pos

def _selection_from_cfg(cfg: SimulationConfig, width: int, height: int) -> Region:
    rc = cfg.region
    if rc.preset:
        return resolve_preset(rc.preset, width, height)
    w = rc.w if rc.w is not None else width - rc.x
    h = rc.h if rc.h is not None else height - rc.y
    return Region(rc.x, rc.y, w, h)

def _merge_cli_over_cfg(cfg: SimulationConfig, args) -> SimulationConfig:
    if args.image:              cfg.paths.image_path = args.image
    if args.outdir:             cfg.paths.output_root = args.outdir
    if args.seed is not None:   cfg.chan.seed = int(args.seed)
    if args.x is not None:      cfg.region.x = float(args.x)
    if args.y is not None:      cfg.region.y = float(args.y)
    if args.w is not None:      cfg.region.w = float(args.w)
    if args.h is not None:      cfg.region.h = float(args.h)
    # explicit rectangle on the CLI beats a preset from the config file
    if any(v is not None for v in (args.x, args.y, args.w, args.h)):
        cfg.region.preset = None
    if args.preset:             cfg.region.preset = args.preset
    if args.inspect:            cfg.output.inspect = list(args.inspect)
    if args.no_images:          cfg.output.save_images = False
    if args.no_records:         cfg.output.save_records = False
    if args.progress:           cfg.output.progress = True
    return cfg

def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Hamming(7,4) single-error simulation over an image region")
    ap.add_argument("--config", type=str, default=None, help="JSON config file")
    ap.add_argument("--image", type=str, default=None)
    ap.add_argument("--outdir", type=str, default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--x", type=float, default=None)
    ap.add_argument("--y", type=float, default=None)
    ap.add_argument("--w", type=float, default=None)
    ap.add_argument("--h", type=float, default=None)
    ap.add_argument("--preset", type=str, choices=sorted(REGION_PRESETS), default=None)
    ap.add_argument("--inspect", type=int, nargs="+", default=None, help="1-based codeword indices")
    ap.add_argument("--no-images", action="store_true")
    ap.add_argument("--no-records", action="store_true")
    ap.add_argument("--progress", action="store_true")
    ap.add_argument("--verbose", action="store_true")
    ap.add_argument("--self-check", action="store_true",
                    help="Exhaustive 16x7 single-error check, then exit")
    return ap

def _write_outputs(out_dir: str, cfg: SimulationConfig, original: np.ndarray,
                   result: SimulationResult) -> dict:
    outputs = {}
    if cfg.output.save_images:
        for name, arr in (("original", original), ("corrupted", result.corrupted), ("corrected", result.corrected)):
            p = os.path.join(out_dir, f"{name}.png")
            save_image_rgb(p, arr)
            outputs[name] = p
    if cfg.output.save_records:
        p = os.path.join(out_dir, "records.json")
        write_json(p, [record_to_dict(r) for r in result.records])
        outputs["records"] = p
    return outputs

# ---------- main ----------
def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.self_check:
        ok = self_check()
        print(f"Hamming(7,4) self-check (16 data words x 7 flips): {'OK' if ok else 'FAILED'}")
        return 0 if ok else 1

    cfg = _merge_cli_over_cfg(load_config(args.config), args)
    image = load_image_rgb(cfg.paths.image_path)
    H, W = image.shape[:2]

    selection = _selection_from_cfg(cfg, W, H)
    result = run_on_region(image, selection,
                           error_source=RandomErrorSource(cfg.chan.seed),
                           progress=cfg.output.progress)

    out_dir = make_output_dir(cfg.paths.output_root, cfg.paths.image_path, result.region, cfg.chan.seed)
    write_json(os.path.join(out_dir, "run_meta.json"), {
        **asdict(cfg),
        "image_size": [W, H],
        "selection": asdict(selection),
        "output_dir": out_dir,
    })
    outputs = _write_outputs(out_dir, cfg, image, result)

    raw_bits, residual_bits = data_bit_errors(result.records)
    report = {
        "status": result.status,
        "region": asdict(result.region),
        "total_pixels": result.region.pixel_count,
        **result.stats.to_dict(),
        "data_bit_errors_raw": raw_bits,
        "data_bit_errors_residual": residual_bits,
        "psnr_corrupted_db": region_psnr(image, result.corrupted, result.region),
        "psnr_corrected_db": region_psnr(image, result.corrected, result.region),
        "outputs": outputs,
    }
    write_json(os.path.join(out_dir, "stats.json"), report)
    logger.info("Wrote %d files to %s", len(outputs) + 2, out_dir)

    print("=== Hamming(7,4) Simulation Report ===")
    print(f"Output dir: {out_dir}")
    print(f"Image: {cfg.paths.image_path} ({W}x{H})  Seed: {cfg.chan.seed}")
    print(status_message(result))
    print(format_summary(result))
    if not result.region_too_small:
        print(f"Data-bit errors: raw {raw_bits}, after correction {residual_bits}")
        print(f"PSNR(dB) corrupted: {report['psnr_corrupted_db']:.2f}  corrected: {report['psnr_corrected_db']:.2f}")
        print(format_matrices())
        print(f"Inspectable codeword indices: 1 to {len(result.records)}")
        for idx in cfg.output.inspect:
            print(inspect_record(result, idx))
    return 0

if __name__ == "__main__":
    sys.exit(main())
