from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

class GameKind(str, Enum):
    ORDERING = "ordering"
    REFLEX = "reflex"
    SIMILARITY = "similarity"

class Phase(str, Enum):
    ACTIVE = "active"
    JUDGED = "judged"
    ENDED = "ended"

class Verdict(str, Enum):
    PERFECT = "perfect"
    GOOD = "good"
    PRACTICE = "practice"

    def message(self, accuracy: int) -> str:
        if self is Verdict.PERFECT:
            return "Perfect! Nailed the order."
        if self is Verdict.GOOD:
            return f"Good job! Accuracy: {accuracy}%"
        return f"Keep practicing! Accuracy: {accuracy}%"

@dataclass(frozen=True)
class Swatch:
    id: str
    hex: str
    luminance: float

@dataclass(frozen=True)
class OrderingRound:
    # Presented (shuffled) arrangement.
    swatches: Tuple[Swatch, ...]
    # Ids sorted by ascending luminance, fixed at generation time.
    correct_order: Tuple[str, ...]

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(s.id for s in self.swatches)

@dataclass(frozen=True)
class TargetInterval:
    start: float
    end: float

    @property
    def width(self) -> float:
        return self.end - self.start

    @property
    def midpoint(self) -> float:
        return (self.start + self.end) / 2.0

    @property
    def half_width(self) -> float:
        return self.width / 2.0

    def contains(self, position: float) -> bool:
        return self.start <= position <= self.end

@dataclass(frozen=True)
class ReflexRound:
    target: TargetInterval

@dataclass(frozen=True)
class SimilarityRound:
    left: str
    right: str
    # Perturbation magnitude the pair was generated with (0 for a match).
    magnitude: float = 0.0

    @property
    def same(self) -> bool:
        return self.left == self.right

@dataclass(frozen=True)
class SessionState:
    score: int = 0
    round_index: int = 1
    phase: Phase = Phase.ACTIVE

@dataclass(frozen=True)
class OrderingResult:
    accuracy: int
    matches: int
    total: int
    verdict: Verdict

    @property
    def message(self) -> str:
        return self.verdict.message(self.accuracy)

@dataclass(frozen=True)
class StopResult:
    position: float
    inside: bool
    gained: int
    score: int

@dataclass(frozen=True)
class AnswerResult:
    correct: bool
    gained: int
    score: int
