import logging
from typing import Callable, Dict, List, Tuple

import pytest

from errors import InvalidParameter, RenderLoopBusy, TimerFailure
from scene.frame_pacer import FramePacer, PacerPhase, RenderLoop


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeScheduler:
    """Deterministic stand-in for the host timer, driven by a FakeClock."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.pending: Dict[int, Tuple[float, Callable[[], None]]] = {}
        self.delays: List[float] = []
        self.cancelled: List[int] = []
        self._next = 0

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> int:
        self._next += 1
        self.delays.append(delay_ms)
        self.pending[self._next] = (self.clock.now + delay_ms, callback)
        return self._next

    def cancel(self, handle: int) -> None:
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def run_due(self) -> None:
        for handle, (due, callback) in sorted(self.pending.items(), key=lambda item: item[1][0]):
            if due <= self.clock.now:
                del self.pending[handle]
                callback()


class FailingScheduler:
    def __init__(self) -> None:
        self.attempts = 0

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> int:
        self.attempts += 1
        raise TimerFailure("no timers left")

    def cancel(self, handle: int) -> None:
        raise AssertionError("nothing was scheduled")


class ImmediateScheduler:
    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> int:
        callback()
        return 1

    def cancel(self, handle: int) -> None:
        pass


def _make_pacer(target_fps: float, scheduler_factory=FakeScheduler):
    clock = FakeClock()
    advances: List[float] = []
    loop = RenderLoop(advance=lambda: advances.append(clock.now), mode="always")
    scheduler = scheduler_factory(clock) if scheduler_factory is FakeScheduler else scheduler_factory()
    pacer = FramePacer(loop.claim(), scheduler, target_fps=target_fps, clock=clock)
    return pacer, loop, scheduler, clock, advances


def _drive(pacer: FramePacer, scheduler: FakeScheduler, clock: FakeClock, periods) -> None:
    for period in periods:
        clock.now += period
        scheduler.run_due()
        pacer.on_native_tick(clock.now)


def test_activation_claims_loop_and_draws_first_frame() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0)

    pacer.activate()

    assert loop.mode == "never"
    assert advances == [0.0]
    assert pacer.phase is PacerPhase.BLOCKED
    assert scheduler.delays == [pytest.approx(1000.0 / 30.0)]


def test_fast_host_is_capped_to_target_rate() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0)
    pacer.activate()

    _drive(pacer, scheduler, clock, [16.0] * 120)

    gaps = [b - a for a, b in zip(advances, advances[1:])]
    assert gaps
    assert min(gaps) >= 1000.0 / 30.0
    # 16 ms ticks snap a 33.3 ms interval to every third tick.
    assert set(gaps) == {48.0}


def test_irregular_ticks_never_beat_the_interval() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(24.0)
    pacer.activate()

    _drive(pacer, scheduler, clock, [5.0, 40.0, 3.0, 12.0, 30.0, 1.0, 90.0, 7.0, 41.0, 2.0] * 10)

    gaps = [b - a for a, b in zip(advances, advances[1:])]
    assert min(gaps) >= 1000.0 / 24.0


def test_slow_host_draws_on_every_tick() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(120.0)
    pacer.activate()

    _drive(pacer, scheduler, clock, [16.0] * 30)

    assert len(advances) == 31


def test_release_accounts_for_time_already_spent_in_tick() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(25.0)
    pacer.activate()
    clock.now = 100.0
    scheduler.run_due()

    clock.now = 110.0
    assert pacer.on_native_tick(tick_started_ms=100.0)

    assert pacer.state.last_delta_ms == pytest.approx(10.0)
    assert scheduler.delays[-1] == pytest.approx(30.0)


def test_teardown_mid_wait_restores_mode_and_stops_advancing() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0)
    pacer.activate()
    _drive(pacer, scheduler, clock, [16.0])
    assert pacer.phase is PacerPhase.BLOCKED

    pacer.deactivate()
    drawn = len(advances)
    _drive(pacer, scheduler, clock, [16.0] * 20)

    assert loop.mode == "always"
    assert not loop.owned
    assert scheduler.pending == {}
    assert len(advances) == drawn
    assert not pacer.active


def test_teardown_is_idempotent_and_frees_the_loop() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0)
    with pacer:
        assert loop.owned
    pacer.deactivate()

    assert loop.mode == "always"
    loop.claim()
    with pytest.raises(RenderLoopBusy):
        pacer.activate()


def test_render_loop_has_a_single_owner() -> None:
    loop = RenderLoop(advance=lambda: None)
    loop.claim()

    with pytest.raises(RenderLoopBusy):
        loop.claim()


def test_released_owner_cannot_drive_the_loop() -> None:
    loop = RenderLoop(advance=lambda: None)
    owner = loop.claim()
    owner.release()

    assert owner.released
    with pytest.raises(RenderLoopBusy):
        owner.advance()


def test_timer_failure_degrades_to_native_rate(caplog) -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0, scheduler_factory=FailingScheduler)

    with caplog.at_level(logging.WARNING, logger="scene.frame_pacer"):
        pacer.activate()
        for _ in range(5):
            clock.now += 16.0
            assert pacer.on_native_tick(clock.now)

    assert len(advances) == 6
    assert scheduler.attempts == 6
    assert pacer.phase is PacerPhase.IDLE
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1


def test_synchronous_release_leaves_pacer_idle() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0, scheduler_factory=ImmediateScheduler)
    pacer.activate()

    assert pacer.phase is PacerPhase.IDLE
    assert pacer.on_native_tick()
    assert len(advances) == 2


def test_ticks_before_activation_are_ignored() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0)

    assert not pacer.on_native_tick()
    assert advances == []


@pytest.mark.parametrize("fps", [0.0, -5.0, float("nan")])
def test_target_fps_must_be_positive(fps: float) -> None:
    loop = RenderLoop(advance=lambda: None)
    with pytest.raises(InvalidParameter):
        FramePacer(loop.claim(), ImmediateScheduler(), target_fps=fps)


def test_target_fps_can_change_while_active() -> None:
    pacer, loop, scheduler, clock, advances = _make_pacer(30.0)
    pacer.activate()
    pacer.set_target_fps(10.0)
    _drive(pacer, scheduler, clock, [40.0])

    assert scheduler.delays[-1] == pytest.approx(100.0)
    with pytest.raises(InvalidParameter):
        pacer.set_target_fps(0.0)
