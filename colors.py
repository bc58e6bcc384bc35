from __future__ import annotations
import random
import re
from typing import Tuple

RGB = Tuple[int, int, int]

# Well-formed color text accepted at the outer boundaries (HTTP, CLI).
HEX_PATTERN = r"^#?[0-9a-fA-F]{6}$"

# Per-channel offset range before scaling by magnitude.
PERTURB_MIN = 20
PERTURB_SPAN = 60

def is_hex_color(text: str) -> bool:
    return re.match(HEX_PATTERN, text) is not None

def hex_to_rgb(hex_str: str) -> RGB:
    n = int(hex_str.lstrip("#"), 16)
    return (n >> 16) & 255, (n >> 8) & 255, n & 255

def rgb_to_hex(rgb: RGB) -> str:
    return "#" + "".join(f"{c:02x}" for c in rgb)

def _to_linear(channel: int) -> float:
    s = channel / 255.0
    if s <= 0.04045:
        return s / 12.92
    return ((s + 0.055) / 1.055) ** 2.4

def hex_to_luminance(hex_str: str) -> float:
    """
    Relative luminance of a #rrggbb color in [0, 1].
    sRGB channels are linearised, then weighted 0.2126 R + 0.7152 G + 0.0722 B.
    """
    r, g, b = hex_to_rgb(hex_str)
    return 0.2126 * _to_linear(r) + 0.7152 * _to_linear(g) + 0.0722 * _to_linear(b)

def random_color(rng: random.Random) -> str:
    return f"#{rng.randrange(0xFFFFFF):06x}"

def _clamp(v: int) -> int:
    return max(0, min(255, v))

def perturb_color(base: str, magnitude: float, rng: random.Random) -> str:
    """
    Nudge every channel of `base` by a signed offset of
    round((20..80) * magnitude), clamped to [0, 255].
    """
    out = []
    for channel in hex_to_rgb(base):
        offset = int((PERTURB_MIN + rng.random() * PERTURB_SPAN) * magnitude + 0.5)
        sign = -1 if rng.random() < 0.5 else 1
        out.append(_clamp(channel + sign * offset))
    return rgb_to_hex((out[0], out[1], out[2]))

def channel_distance(a: str, b: str) -> int:
    """Largest absolute per-channel difference between two colors."""
    return max(abs(x - y) for x, y in zip(hex_to_rgb(a), hex_to_rgb(b)))
