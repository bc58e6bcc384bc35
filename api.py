from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

import config
from colors import HEX_PATTERN, hex_to_luminance
from engine import (
    ColorGameEngine,
    OrderingSession,
    ReflexSession,
    Session,
    SimilaritySession,
    UnknownSession,
)
from generators import RoundGenerationError
from models import AnswerResult, GameKind, OrderingResult, StopResult

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ---------- Pydantic IO models ----------
class StartSessionIn(BaseModel):
    game: GameKind = Field(..., examples=["ordering"])

class OrderIn(BaseModel):
    ids: List[str]

class AnswerIn(BaseModel):
    same: bool

class TickIn(BaseModel):
    delta_ms: float = Field(..., ge=0, allow_inf_nan=False)

class LuminanceIn(BaseModel):
    hex: str = Field(..., pattern=HEX_PATTERN, examples=["#4f46e5"])

class LuminanceOut(BaseModel):
    hex: str
    luminance: float

class SwatchOut(BaseModel):
    id: str
    hex: str
    luminance: float

class OrderResultOut(BaseModel):
    accuracy: int
    matches: int
    total: int
    verdict: str
    message: str

class StopResultOut(BaseModel):
    position: float
    inside: bool
    gained: int
    score: int

class AnswerResultOut(BaseModel):
    correct: bool
    gained: int
    score: int

class HintOut(BaseModel):
    first: str
    last: str
    message: str

class SessionOut(BaseModel):
    session_id: str
    game: GameKind
    score: int
    round_index: int
    phase: str
    # Ordering:
    swatches: Optional[List[SwatchOut]] = None
    checked: Optional[bool] = None
    correct_order: Optional[List[str]] = None
    last_order_result: Optional[OrderResultOut] = None
    # Reflex:
    position: Optional[float] = None
    target_start: Optional[float] = None
    target_end: Optional[float] = None
    last_stop_result: Optional[StopResultOut] = None
    # Similarity:
    left: Optional[str] = None
    right: Optional[str] = None
    time_left: Optional[int] = None
    last_answer_result: Optional[AnswerResultOut] = None

# ---------- App ----------
_engine = ColorGameEngine(seed=config.SEED)

@asynccontextmanager
async def lifespan(app):
    """Close every open session (and its scheduled callbacks) on shutdown."""
    try:
        yield
    finally:
        _engine.shutdown()
        logger.info("Stop Server")

app = FastAPI(title="Color Games API", version="1.0.0", lifespan=lifespan)

def _to_order_out(r: OrderingResult) -> OrderResultOut:
    return OrderResultOut(
        accuracy=r.accuracy,
        matches=r.matches,
        total=r.total,
        verdict=r.verdict.value,
        message=r.message,
    )

def _to_stop_out(r: StopResult) -> StopResultOut:
    return StopResultOut(position=r.position, inside=r.inside, gained=r.gained, score=r.score)

def _to_answer_out(r: AnswerResult) -> AnswerResultOut:
    return AnswerResultOut(correct=r.correct, gained=r.gained, score=r.score)

def _to_session_out(s: Session) -> SessionOut:
    out = SessionOut(
        session_id=s.session_id,
        game=s.kind,
        score=s.state.score,
        round_index=s.state.round_index,
        phase=s.state.phase.value,
    )
    if isinstance(s, OrderingSession):
        out.swatches = [SwatchOut(id=w.id, hex=w.hex, luminance=w.luminance) for w in s.round.swatches]
        out.checked = s.checked
        # Only reveal the answer once the arrangement has been checked
        if s.checked:
            out.correct_order = list(s.round.correct_order)
        if s.last_result is not None:
            out.last_order_result = _to_order_out(s.last_result)
    elif isinstance(s, ReflexSession):
        out.position = s.position
        out.target_start = s.round.target.start
        out.target_end = s.round.target.end
        if s.last_result is not None:
            out.last_stop_result = _to_stop_out(s.last_result)
    elif isinstance(s, SimilaritySession):
        out.left = s.round.left
        out.right = s.round.right
        out.time_left = s.time_left
        if s.last_result is not None:
            out.last_answer_result = _to_answer_out(s.last_result)
    return out

def _call(fn, *args):
    try:
        return fn(*args)
    except UnknownSession:
        raise HTTPException(404, "Session not found")
    except RoundGenerationError as e:
        logger.error("round generation failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/v1/games/sessions", response_model=SessionOut, response_model_exclude_none=True)
def start_session(payload: StartSessionIn):
    st = _call(_engine.start_session, payload.game)
    return _to_session_out(st)

@app.get("/v1/games/sessions/{session_id}", response_model=SessionOut, response_model_exclude_none=True)
def get_state(session_id: str):
    st = _engine.get_session(session_id)
    if not st:
        raise HTTPException(404, "Session not found")
    return _to_session_out(st)

@app.delete("/v1/games/sessions/{session_id}", response_model=SessionOut, response_model_exclude_none=True)
def end_session(session_id: str):
    st = _call(_engine.end_session, session_id)
    return _to_session_out(st)

@app.post("/v1/games/sessions/{session_id}/order", response_model=OrderResultOut)
def submit_order(session_id: str, payload: OrderIn):
    return _to_order_out(_call(_engine.submit_order, session_id, payload.ids))

@app.post("/v1/games/sessions/{session_id}/hint", response_model=HintOut)
def hint(session_id: str):
    return HintOut(**_call(_engine.hint, session_id))

@app.post("/v1/games/sessions/{session_id}/stop", response_model=StopResultOut)
def stop(session_id: str):
    return _to_stop_out(_call(_engine.stop, session_id))

@app.post("/v1/games/sessions/{session_id}/answer", response_model=AnswerResultOut)
def answer(session_id: str, payload: AnswerIn):
    return _to_answer_out(_call(_engine.answer, session_id, payload.same))

@app.post("/v1/games/sessions/{session_id}/tick", response_model=SessionOut, response_model_exclude_none=True)
def tick(session_id: str, payload: TickIn):
    st = _call(_engine.advance_tick, session_id, payload.delta_ms)
    return _to_session_out(st)

@app.post("/v1/games/sessions/{session_id}/rounds", response_model=SessionOut, response_model_exclude_none=True)
def new_round(session_id: str):
    st = _call(_engine.request_new_round, session_id)
    return _to_session_out(st)

@app.post("/v1/colors/luminance", response_model=LuminanceOut)
def luminance(payload: LuminanceIn):
    hex_str = "#" + payload.hex.lstrip("#").lower()
    return LuminanceOut(hex=hex_str, luminance=hex_to_luminance(hex_str))
