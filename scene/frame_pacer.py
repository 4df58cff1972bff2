"""
Frame pacing for the fluted glass scene.

The host loop spins as fast as it likes; :class:`FramePacer` decides which of
those native ticks are allowed to draw. It owns the scene's frame-loop mode
through a :class:`RenderLoopOwner` for as long as it is active, and hands the
mode back untouched on teardown.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from errors import InvalidParameter, RenderLoopBusy, TimerFailure

LOG = logging.getLogger(__name__)

MillisecondClock = Callable[[], float]

LOOP_MODES = ("always", "demand", "never")


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class Scheduler(Protocol):
    """Host timing primitive: one-shot deferred callbacks."""

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class RenderLoop:
    """Scene-wide frame-loop state shared by everything that draws."""

    def __init__(self, advance: Callable[[], None], mode: str = "always") -> None:
        if mode not in LOOP_MODES:
            raise InvalidParameter(f"Unknown frame loop mode '{mode}'")
        self._advance = advance
        self._mode = mode
        self._owner: Optional["RenderLoopOwner"] = None

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def owned(self) -> bool:
        return self._owner is not None

    def claim(self) -> "RenderLoopOwner":
        """Hand out the single capability allowed to drive this loop."""

        if self._owner is not None:
            raise RenderLoopBusy("render loop already has an owner")
        self._owner = RenderLoopOwner(self)
        return self._owner

    def advance(self) -> None:
        self._advance()

    def _set_mode(self, mode: str) -> None:
        if mode not in LOOP_MODES:
            raise InvalidParameter(f"Unknown frame loop mode '{mode}'")
        self._mode = mode

    def _release(self, owner: "RenderLoopOwner") -> None:
        if self._owner is owner:
            self._owner = None


class RenderLoopOwner:
    """Exclusive handle on a :class:`RenderLoop`; dead once released."""

    def __init__(self, loop: RenderLoop) -> None:
        self._loop: Optional[RenderLoop] = loop

    @property
    def released(self) -> bool:
        return self._loop is None

    @property
    def mode(self) -> str:
        return self._require().mode

    def set_mode(self, mode: str) -> None:
        self._require()._set_mode(mode)

    def advance(self) -> None:
        self._require().advance()

    def release(self) -> None:
        if self._loop is not None:
            self._loop._release(self)
            self._loop = None

    def _require(self) -> RenderLoop:
        if self._loop is None:
            raise RenderLoopBusy("render loop ownership was released")
        return self._loop


class PacerPhase(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class PacerState:
    """Snapshot of a pacer's bookkeeping."""

    blocked: bool
    target_interval_ms: float
    last_delta_ms: float


class FramePacer:
    """
    Caps how often native ticks turn into drawn frames.

    Each accepted tick schedules its own release ``target_interval_ms`` after
    the tick began, then advances one frame; ticks arriving before the
    release are dropped. Slow hosts simply draw less often.
    """

    def __init__(
        self,
        owner: RenderLoopOwner,
        scheduler: Scheduler,
        target_fps: float = 30.0,
        *,
        clock: Optional[MillisecondClock] = None,
    ) -> None:
        self._owner = owner
        self._scheduler = scheduler
        self._clock: MillisecondClock = clock if clock is not None else _monotonic_ms
        self._target_interval_ms = self._interval_for(target_fps)
        self._phase = PacerPhase.IDLE
        self._last_delta_ms = 0.0
        self._pending: Any = None
        self._generation = 0
        self._active = False
        self._torn_down = False
        self._previous_mode: Optional[str] = None
        self._timer_failing = False

    # ------------------------------------------------------------------ helpers

    @staticmethod
    def _interval_for(target_fps: float) -> float:
        if not target_fps > 0.0:
            raise InvalidParameter(f"target_fps must be positive, got {target_fps}")
        return 1000.0 / float(target_fps)

    def _release(self, generation: int) -> None:
        if generation != self._generation or not self._active:
            return
        self._pending = None
        self._phase = PacerPhase.IDLE

    def _cancel_pending(self) -> None:
        self._generation += 1
        handle, self._pending = self._pending, None
        if handle is not None:
            self._scheduler.cancel(handle)

    # ------------------------------------------------------------------ public API

    @property
    def active(self) -> bool:
        return self._active

    @property
    def phase(self) -> PacerPhase:
        return self._phase

    @property
    def target_interval_ms(self) -> float:
        return self._target_interval_ms

    @property
    def state(self) -> PacerState:
        return PacerState(
            blocked=self._phase is PacerPhase.BLOCKED,
            target_interval_ms=self._target_interval_ms,
            last_delta_ms=self._last_delta_ms,
        )

    def set_target_fps(self, target_fps: float) -> None:
        self._target_interval_ms = self._interval_for(target_fps)

    def activate(self) -> None:
        """Take over the frame loop and draw the first frame."""

        if self._torn_down:
            raise RenderLoopBusy("frame pacer was torn down")
        if self._active:
            return
        self._previous_mode = self._owner.mode
        self._active = True
        self._phase = PacerPhase.IDLE
        if self._previous_mode != "never":
            self._owner.set_mode("never")
        LOG.info(
            "Frame pacer active at %.1f fps (loop mode was '%s').",
            1000.0 / self._target_interval_ms,
            self._previous_mode,
        )
        self.on_native_tick()

    def on_native_tick(self, tick_started_ms: Optional[float] = None) -> bool:
        """
        Offer one host tick to the pacer.

        Returns ``True`` when the tick was turned into a frame advance.
        """

        if not self._active or self._phase is not PacerPhase.IDLE:
            return False

        self._phase = PacerPhase.ARMED
        now = self._clock()
        started = now if tick_started_ms is None else float(tick_started_ms)
        self._last_delta_ms = max(0.0, now - started)
        delay = max(0.0, self._target_interval_ms - self._last_delta_ms)

        self._generation += 1
        generation = self._generation
        try:
            handle = self._scheduler.schedule(delay, lambda: self._release(generation))
        except TimerFailure as exc:
            if not self._timer_failing:
                LOG.warning("Frame pacing timer unavailable (%s); drawing at native rate.", exc)
            self._timer_failing = True
            self._pending = None
            self._phase = PacerPhase.IDLE
        else:
            if self._timer_failing:
                LOG.info("Frame pacing timer recovered.")
            self._timer_failing = False
            # A zero delay may already have released synchronously.
            if self._phase is PacerPhase.ARMED:
                self._pending = handle
                self._phase = PacerPhase.BLOCKED

        self._owner.advance()
        return True

    def deactivate(self) -> None:
        """Tear down: drop any pending release and restore the loop mode."""

        if self._torn_down:
            return
        self._torn_down = True
        was_active = self._active
        self._active = False
        self._cancel_pending()
        self._phase = PacerPhase.IDLE
        if not self._owner.released:
            if was_active and self._previous_mode is not None:
                self._owner.set_mode(self._previous_mode)
            self._owner.release()
        LOG.info("Frame pacer torn down; loop mode restored to '%s'.", self._previous_mode)

    def __enter__(self) -> "FramePacer":
        self.activate()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.deactivate()
