from __future__ import annotations
from typing import Dict, Tuple

from .simulator import Region

# Fractional selections (x, y, w, h) relative to image width/height
REGION_PRESETS: Dict[str, Tuple[float, float, float, float]] = {
    "full":         (0.0,  0.0,  1.0,  1.0),
    "center":       (0.25, 0.25, 0.5,  0.5),
    "top_left":     (0.0,  0.0,  0.5,  0.5),
    "top_right":    (0.5,  0.0,  0.5,  0.5),
    "bottom_left":  (0.0,  0.5,  0.5,  0.5),
    "bottom_right": (0.5,  0.5,  0.5,  0.5),
    "top_strip":    (0.0,  0.0,  1.0,  0.1),
}

def resolve_preset(name: str, width: int, height: int) -> Region:
    if name not in REGION_PRESETS:
        raise ValueError(f"Unknown region preset: {name} (choose from {sorted(REGION_PRESETS)})")
    fx, fy, fw, fh = REGION_PRESETS[name]
    return Region(fx * width, fy * height, fw * width, fh * height)
