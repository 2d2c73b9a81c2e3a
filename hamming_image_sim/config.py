"""
Configuration dataclasses for the Hamming(7,4) region simulation.
JSON config files map onto these sections; CLI flags override them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import os

@dataclass
class ChannelConfig:
    # Seed for the bit-error position source. None -> fresh entropy per run.
    seed: Optional[int] = 12345

@dataclass
class RegionConfig:
    # Selection rectangle in image pixels (fractions / out of range allowed,
    # clamped by the simulator). w/h None -> extend to the image edge.
    x: float = 0.0
    y: float = 0.0
    w: Optional[float] = None
    h: Optional[float] = None
    # Named fractional selection from presets.REGION_PRESETS (overrides x/y/w/h)
    preset: Optional[str] = None

@dataclass
class OutputConfig:
    save_images: bool = True
    save_records: bool = True
    # 1-based codeword indices printed by the inspector
    inspect: List[int] = field(default_factory=lambda: [1])
    progress: bool = False

@dataclass
class Paths:
    image_path: str = "examples/sample.png"
    output_root: str = "outputs"

@dataclass
class SimulationConfig:
    chan: ChannelConfig = field(default_factory=ChannelConfig)
    region: RegionConfig = field(default_factory=RegionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    paths: Paths = field(default_factory=Paths)


def _opt_float(v) -> Optional[float]:
    return None if v is None else float(v)

def config_from_dict(d: Dict[str, Any]) -> SimulationConfig:
    ch = d.get("channel", {})
    rg = d.get("region", {})
    out = d.get("output", {})
    chan = ChannelConfig(
        seed=ch.get("seed", d.get("seed", 12345)),
    )
    region = RegionConfig(
        x=float(rg.get("x", 0.0)),
        y=float(rg.get("y", 0.0)),
        w=_opt_float(rg.get("w")),
        h=_opt_float(rg.get("h")),
        preset=rg.get("preset"),
    )
    output = OutputConfig(
        save_images=bool(out.get("save_images", True)),
        save_records=bool(out.get("save_records", True)),
        inspect=[int(i) for i in out.get("inspect", [1])],
        progress=bool(out.get("progress", False)),
    )
    paths = Paths(
        image_path=d.get("image", Paths.image_path),
        output_root=d.get("outdir", Paths.output_root),
    )
    return SimulationConfig(chan=chan, region=region, output=output, paths=paths)

def load_config(path: Optional[str]) -> SimulationConfig:
    """Read a JSON config; a missing/empty path yields the defaults."""
    if not path or not os.path.isfile(path):
        return SimulationConfig()
    with open(path, "r", encoding="utf-8") as f:
        return config_from_dict(json.load(f))
