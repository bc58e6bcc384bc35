from __future__ import annotations
import math
from typing import Sequence

from models import OrderingResult, SimilarityRound, TargetInterval, Verdict

MISS_PENALTY = -20
GOOD_THRESHOLD = 70

def round_half_up(x: float) -> int:
    """Round to nearest integer, halves toward +inf (browser Math.round)."""
    return int(math.floor(x + 0.5))

def judge_order(current_ids: Sequence[str], correct_order: Sequence[str]) -> OrderingResult:
    """
    Position-by-position comparison of the player's arrangement against the
    ground-truth id sequence. Pure: same arrangement, same result.
    """
    total = len(correct_order)
    matches = sum(1 for got, want in zip(current_ids, correct_order) if got == want)
    accuracy = round_half_up(100.0 * matches / total) if total else 0
    if accuracy == 100:
        verdict = Verdict.PERFECT
    elif accuracy >= GOOD_THRESHOLD:
        verdict = Verdict.GOOD
    else:
        verdict = Verdict.PRACTICE
    return OrderingResult(accuracy=accuracy, matches=matches, total=total, verdict=verdict)

def judge_stop(position: float, target: TargetInterval) -> int:
    if not target.contains(position):
        return MISS_PENALTY
    dist = abs(position - target.midpoint)
    return max(1, round_half_up(100.0 * (1.0 - dist / target.half_width)))

def judge_answer(rnd: SimilarityRound, said_same: bool) -> int:
    return 1 if rnd.same == said_same else -1
