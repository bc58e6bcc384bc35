from __future__ import annotations
import math
import random
from typing import List, Optional, Sequence

from colors import channel_distance, hex_to_luminance, perturb_color, random_color
from judge import round_half_up
from models import OrderingRound, ReflexRound, SimilarityRound, Swatch, TargetInterval

MAX_ATTEMPTS = 10

# Ordering
MIN_SWATCHES = 5
MAX_SWATCHES = 8
MIN_UNIQUE_SWATCHES = 3
DARK_ANCHOR = "#111111"
LIGHT_ANCHOR = "#eeeeee"

# Reflex
BASE_WIDTH = 20
MIN_WIDTH = 6
WIDTH_PER_POINT = 0.2
TRACK_LENGTH = 100.0

# Similarity
BASE_MAGNITUDE = 1.0
MIN_MAGNITUDE = 0.2
MAGNITUDE_PER_POINT = 0.03
# Smallest per-channel offset perturb_color can draw at MIN_MAGNITUDE.
MIN_CHANNEL_DELTA = 4

class RoundGenerationError(RuntimeError):
    """Rejection sampling ran out of attempts without a valid round."""

# ---------- Ordering ----------
def build_ordering_round(hexes: Sequence[str], rng: Optional[random.Random] = None,
                         shuffle: bool = True) -> OrderingRound:
    """
    Build a round from the given colors. Exact duplicates are dropped
    (first occurrence wins); ground truth is a stable ascending sort by
    luminance over the given order.
    """
    rng = rng or random.Random()
    unique = list(dict.fromkeys(h.lower() for h in hexes))
    if len(unique) < MIN_UNIQUE_SWATCHES:
        raise ValueError(f"Need at least {MIN_UNIQUE_SWATCHES} distinct colors, got {len(unique)}")

    token = f"{rng.getrandbits(32):08x}"
    swatches = [Swatch(id=f"{token}-{i}", hex=h, luminance=hex_to_luminance(h))
                for i, h in enumerate(unique)]
    correct = tuple(s.id for s in sorted(swatches, key=lambda s: s.luminance))

    presented: List[Swatch] = list(swatches)
    if shuffle:
        rng.shuffle(presented)
    return OrderingRound(swatches=tuple(presented), correct_order=correct)

def generate_ordering_round(rng: random.Random, count: Optional[int] = None) -> OrderingRound:
    if count is None:
        count = rng.randint(MIN_SWATCHES, MAX_SWATCHES)
    elif not MIN_SWATCHES <= count <= MAX_SWATCHES:
        raise ValueError(f"count must be between {MIN_SWATCHES} and {MAX_SWATCHES}, got {count}")
    for _ in range(MAX_ATTEMPTS):
        base = [DARK_ANCHOR, LIGHT_ANCHOR] + [random_color(rng) for _ in range(count - 2)]
        if len(set(base)) >= MIN_UNIQUE_SWATCHES:
            return build_ordering_round(base, rng)
    raise RoundGenerationError("Could not generate enough distinct swatches")

# ---------- Reflex ----------
def target_width(score: int) -> int:
    """Narrows as score grows, plateaus at MIN_WIDTH."""
    return max(MIN_WIDTH, round_half_up(BASE_WIDTH - score * WIDTH_PER_POINT))

def generate_reflex_round(rng: random.Random, score: int) -> ReflexRound:
    width = target_width(score)
    start = math.floor(rng.random() * (TRACK_LENGTH - width))
    return ReflexRound(target=TargetInterval(start=float(start), end=float(start + width)))

# ---------- Similarity ----------
def perturbation_magnitude(score: int) -> float:
    return max(MIN_MAGNITUDE, BASE_MAGNITUDE - score * MAGNITUDE_PER_POINT)

def generate_similarity_round(rng: random.Random, score: int) -> SimilarityRound:
    """
    Half the time an identical pair; otherwise the right color is a
    perturbation of the left that differs by at least MIN_CHANNEL_DELTA
    in some channel (clamping at 0/255 can eat the offset, so resample).
    """
    if rng.random() < 0.5:
        left = random_color(rng)
        return SimilarityRound(left=left, right=left)

    magnitude = perturbation_magnitude(score)
    for _ in range(MAX_ATTEMPTS):
        left = random_color(rng)
        right = perturb_color(left, magnitude, rng)
        if channel_distance(left, right) >= MIN_CHANNEL_DELTA:
            return SimilarityRound(left=left, right=right, magnitude=magnitude)
    raise RoundGenerationError("Could not generate a distinguishable color pair")
