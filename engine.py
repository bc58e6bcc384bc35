from __future__ import annotations
import logging
import random
import uuid
from dataclasses import replace
from typing import Dict, Optional, Sequence, Union

from generators import (
    generate_ordering_round,
    generate_reflex_round,
    generate_similarity_round,
    TRACK_LENGTH,
)
from judge import judge_answer, judge_order, judge_stop
from models import (
    AnswerResult,
    GameKind,
    OrderingResult,
    OrderingRound,
    Phase,
    ReflexRound,
    SessionState,
    SimilarityRound,
    StopResult,
)
from scheduler import Handle, ManualScheduler

logger = logging.getLogger(__name__)

# Reflex marker speed, percent of the track per millisecond.
REFLEX_SPEED = 0.10
# Similarity countdown.
COUNTDOWN_SECONDS = 30
COUNTDOWN_INTERVAL_MS = 1000

# ---------- Pure state transitions ----------
def _judged(state: SessionState, gained: int = 0) -> SessionState:
    return replace(state, score=state.score + gained, phase=Phase.JUDGED)

def _scored(state: SessionState, gained: int) -> SessionState:
    # Similarity: judge and move straight on to the next pair.
    return replace(state, score=state.score + gained, round_index=state.round_index + 1)

def _advanced(state: SessionState) -> SessionState:
    return replace(state, round_index=state.round_index + 1, phase=Phase.ACTIVE)

def _ended(state: SessionState) -> SessionState:
    return replace(state, phase=Phase.ENDED)

# ---------- Sessions ----------
class _Session:
    kind: GameKind

    def __init__(self, session_id: str, rng: random.Random, scheduler: Optional[ManualScheduler] = None):
        self.session_id = session_id
        self.rng = rng
        self.scheduler = scheduler or ManualScheduler()
        self.state = SessionState()
        self._handle: Optional[Handle] = None
        self.closed = False

    def advance(self, delta_ms: float) -> None:
        self._require_open()
        self.scheduler.advance(delta_ms)

    def _acquire(self, interval_ms: Optional[float], callback) -> None:
        self._release()
        self._handle = self.scheduler.schedule_repeating(interval_ms, callback)

    def _release(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def close(self) -> None:
        """Teardown: revoke every scheduled callback."""
        self._release()
        self.scheduler.cancel_all()
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _require_open(self) -> None:
        if self.closed:
            raise ValueError("Session is closed.")

class OrderingSession(_Session):
    """
    Sort swatches by ascending luminance. Checking sets the `checked`
    overlay; the session never ends on its own.
    """
    kind = GameKind.ORDERING

    def __init__(self, session_id: str, rng: random.Random, scheduler: Optional[ManualScheduler] = None,
                 round_: Optional[OrderingRound] = None):
        super().__init__(session_id, rng, scheduler)
        self.round = round_ or generate_ordering_round(rng)
        self.last_result: Optional[OrderingResult] = None

    @property
    def checked(self) -> bool:
        return self.state.phase == Phase.JUDGED

    def submit_order(self, current_ids: Sequence[str]) -> OrderingResult:
        self._require_open()
        ids = list(current_ids)
        if sorted(ids) != sorted(self.round.ids):
            raise ValueError("Order must be a permutation of the round's swatch ids")
        result = judge_order(ids, self.round.correct_order)
        self.state = _judged(self.state)
        self.last_result = result
        logger.debug("ordering %s round %d: %d%%", self.session_id, self.state.round_index, result.accuracy)
        return result

    def hint(self) -> Dict[str, str]:
        return {
            "first": self.round.correct_order[0],
            "last": self.round.correct_order[-1],
            "message": "Place the darkest color first and the lightest last.",
        }

    def new_round(self) -> OrderingRound:
        self._require_open()
        self.round = generate_ordering_round(self.rng)
        self.last_result = None
        self.state = _advanced(self.state)
        return self.round

class ReflexSession(_Session):
    """
    A marker sweeps [0, 100) at REFLEX_SPEED while running; stop() freezes it
    and scores against the target interval.
    """
    kind = GameKind.REFLEX

    def __init__(self, session_id: str, rng: random.Random, scheduler: Optional[ManualScheduler] = None):
        super().__init__(session_id, rng, scheduler)
        self.position = 0.0
        self.round: ReflexRound = generate_reflex_round(rng, self.state.score)
        self.last_result: Optional[StopResult] = None
        self._acquire(None, self._on_frame)

    @property
    def running(self) -> bool:
        return self.state.phase == Phase.ACTIVE and not self.closed

    def _on_frame(self, delta_ms: float) -> None:
        if not self.running:
            return
        self.position = (self.position + delta_ms * REFLEX_SPEED) % TRACK_LENGTH

    def stop(self) -> StopResult:
        self._require_open()
        if not self.running:
            raise ValueError("Marker already stopped; request the next round.")
        # No frame may move the marker once stop has been accepted.
        self._release()
        gained = judge_stop(self.position, self.round.target)
        self.state = _judged(self.state, gained)
        self.last_result = StopResult(
            position=self.position,
            inside=self.round.target.contains(self.position),
            gained=gained,
            score=self.state.score,
        )
        logger.debug("reflex %s stop at %.2f: %+d", self.session_id, self.position, gained)
        return self.last_result

    def next_round(self) -> ReflexRound:
        self._require_open()
        if self.running:
            raise ValueError("Stop the marker before starting the next round.")
        self.round = generate_reflex_round(self.rng, self.state.score)
        self.position = 0.0
        self.last_result = None
        self.state = _advanced(self.state)
        self._acquire(None, self._on_frame)
        return self.round

class SimilaritySession(_Session):
    """
    Same-or-different judgement against a fixed 30 second countdown.
    Score does not change the time budget, only the perturbation size.
    """
    kind = GameKind.SIMILARITY

    def __init__(self, session_id: str, rng: random.Random, scheduler: Optional[ManualScheduler] = None):
        super().__init__(session_id, rng, scheduler)
        self.time_left = COUNTDOWN_SECONDS
        self.round: SimilarityRound = generate_similarity_round(rng, self.state.score)
        self.last_result: Optional[AnswerResult] = None
        self._acquire(COUNTDOWN_INTERVAL_MS, self._on_second)

    @property
    def ended(self) -> bool:
        return self.state.phase == Phase.ENDED

    def _on_second(self, _elapsed_ms: float) -> None:
        if self.ended:
            return
        self.time_left = max(0, self.time_left - 1)
        if self.time_left == 0:
            self._release()
            self.state = _ended(self.state)
            logger.info("similarity %s time up, final score %d", self.session_id, self.state.score)

    def answer(self, said_same: bool) -> AnswerResult:
        self._require_open()
        if self.ended:
            raise ValueError("Time is up; no further answers accepted.")
        gained = judge_answer(self.round, said_same)
        state = _scored(self.state, gained)
        # Difficulty follows the score as of this transition; nothing is
        # committed unless the next pair was generated.
        next_round = generate_similarity_round(self.rng, state.score)
        self.state = state
        self.round = next_round
        self.last_result = AnswerResult(correct=gained > 0, gained=gained, score=state.score)
        return self.last_result

    def close(self) -> None:
        if not self.closed and not self.ended:
            self.state = _ended(self.state)
        super().close()

Session = Union[OrderingSession, ReflexSession, SimilaritySession]

_SESSION_TYPES = {
    GameKind.ORDERING: OrderingSession,
    GameKind.REFLEX: ReflexSession,
    GameKind.SIMILARITY: SimilaritySession,
}

class UnknownSession(LookupError):
    pass

class ColorGameEngine:
    """
    Holds independent game sessions keyed by id and routes presentation
    events (submit order, stop, answer, tick, new round) to them.
    No state is shared between sessions; each gets its own RNG and clock.
    """
    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)
        self._sessions: Dict[str, Session] = {}

    # ---------- Session lifecycle ----------
    def start_session(self, game: Union[GameKind, str]) -> Session:
        kind = GameKind(game)
        sid = str(uuid.uuid4())
        session = _SESSION_TYPES[kind](sid, random.Random(self._rng.getrandbits(64)))
        self._sessions[sid] = session
        logger.info("started %s session %s", kind.value, sid)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> Session:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise UnknownSession(session_id)
        session.close()
        logger.info("ended %s session %s (score %d)", session.kind.value, session_id, session.state.score)
        return session

    def shutdown(self) -> None:
        for sid in list(self._sessions):
            self.end_session(sid)

    # ---------- Events ----------
    def submit_order(self, session_id: str, current_ids: Sequence[str]) -> OrderingResult:
        return self._require(session_id, OrderingSession).submit_order(current_ids)

    def hint(self, session_id: str) -> Dict[str, str]:
        return self._require(session_id, OrderingSession).hint()

    def stop(self, session_id: str) -> StopResult:
        return self._require(session_id, ReflexSession).stop()

    def answer(self, session_id: str, said_same: bool) -> AnswerResult:
        return self._require(session_id, SimilaritySession).answer(said_same)

    def advance_tick(self, session_id: str, delta_ms: float) -> Session:
        session = self._require(session_id)
        session.advance(delta_ms)
        return session

    def request_new_round(self, session_id: str) -> Session:
        session = self._require(session_id)
        if isinstance(session, OrderingSession):
            session.new_round()
        elif isinstance(session, ReflexSession):
            session.next_round()
        else:
            raise ValueError("Similarity rounds advance on every answer.")
        logger.debug("%s session %s now on round %d", session.kind.value, session_id, session.state.round_index)
        return session

    # ---------- helpers ----------
    def _require(self, session_id: str, expected: Optional[type] = None):
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession(session_id)
        if expected is not None and not isinstance(session, expected):
            raise ValueError(f"Event not supported by a {session.kind.value} session")
        return session
