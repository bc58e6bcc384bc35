from __future__ import annotations
import math
from typing import Callable, List, Optional

FrameCallback = Callable[[float], None]

class Handle:
    """
    Revocation token for a scheduled repeating callback.
    cancel() is idempotent; once cancelled the callback never runs again,
    even if the scheduler is mid-way through a pass.
    """
    def __init__(self, interval_ms: Optional[float], callback: FrameCallback):
        self.interval_ms = interval_ms
        self.callback = callback
        self.elapsed_ms = 0.0
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

class Scheduler:
    """
    Repeating-callback scheduler.
    - interval_ms=None: per-frame callback, invoked with the elapsed ms of each tick.
    - interval_ms>0: fixed-interval callback, invoked with interval_ms once per
      whole interval elapsed.
    """
    def __init__(self):
        self._handles: List[Handle] = []

    def schedule_repeating(self, interval_ms: Optional[float], callback: FrameCallback) -> Handle:
        if interval_ms is not None and interval_ms <= 0:
            raise ValueError("interval_ms must be positive (or None for per-frame)")
        handle = Handle(interval_ms, callback)
        self._handles.append(handle)
        return handle

    def cancel_all(self) -> None:
        for h in self._handles:
            h.cancel()
        self._handles.clear()

    @property
    def active_count(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

class ManualScheduler(Scheduler):
    """
    Virtual clock advanced explicitly by the presentation layer
    (advanceTick(deltaMs) events) or by tests.
    """
    def __init__(self):
        super().__init__()
        self.now_ms = 0.0

    def advance(self, delta_ms: float) -> None:
        if not math.isfinite(delta_ms) or delta_ms < 0:
            raise ValueError("delta_ms must be a finite number >= 0")
        self.now_ms += delta_ms
        # Snapshot: callbacks may schedule or cancel while we iterate.
        for handle in list(self._handles):
            if handle.cancelled:
                continue
            if handle.interval_ms is None:
                handle.callback(delta_ms)
                continue
            handle.elapsed_ms += delta_ms
            while handle.elapsed_ms >= handle.interval_ms and not handle.cancelled:
                handle.elapsed_ms -= handle.interval_ms
                handle.callback(handle.interval_ms)
        self._handles = [h for h in self._handles if not h.cancelled]
