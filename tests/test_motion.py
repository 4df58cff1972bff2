import math

import pytest

from errors import InvalidParameter
from scene.motion import MotionState, OscillatingMotion, PointerFollowMotion, wobble_rotation


def test_follow_converges_without_overshoot() -> None:
    motion = PointerFollowMotion()
    target = (0.0, -1.0)
    state = MotionState.at((1.0, -0.5))

    previous = state.current_position
    for frame in range(400):
        state = motion.step(state, target, 1.0 / 60.0, frame / 60.0)
        x, y = state.current_position
        assert 0.0 <= x <= previous[0]
        assert -1.0 <= y <= previous[1]
        previous = (x, y)

    assert state.current_position == pytest.approx(target, abs=1e-6)
    assert state.raw_target == target


def test_follow_lags_behind_smoothed_target() -> None:
    motion = PointerFollowMotion(smoothing=0.08, easing=0.1)
    state = motion.step(MotionState.at((0.0, 0.0)), (1.0, 0.0), 0.016, 0.016)

    assert state.smoothed_target == pytest.approx((0.08, 0.0))
    assert state.current_position == pytest.approx((0.008, 0.0))
    assert state.elapsed == 0.016


def test_step_returns_a_new_state() -> None:
    start = MotionState.at((0.0, 0.0))
    after = PointerFollowMotion().step(start, (1.0, 1.0), 0.016, 0.016)

    assert after is not start
    assert start.current_position == (0.0, 0.0)


def test_unit_factors_snap_to_target() -> None:
    motion = PointerFollowMotion(smoothing=1.0, easing=1.0)
    state = motion.step(MotionState.at((0.0, 0.0)), (0.3, -0.7), 0.016, 0.0)

    assert state.current_position == pytest.approx((0.3, -0.7))


@pytest.mark.parametrize("kwargs", [{"smoothing": 0.0}, {"easing": 1.5}, {"smoothing": -0.1}])
def test_follow_factors_must_be_in_unit_interval(kwargs: dict) -> None:
    with pytest.raises(InvalidParameter):
        PointerFollowMotion(**kwargs)


def test_oscillating_motion_follows_its_waves() -> None:
    motion = OscillatingMotion()
    elapsed = 12.5
    state = motion.step(MotionState.at((0.0, 0.0)), (5.0, 5.0), 0.016, elapsed)

    expected = (0.6 + math.sin(elapsed * 0.07) * 0.4, -1.2 + math.cos(elapsed * 0.05) * 0.2)
    assert state.current_position == pytest.approx(expected)
    assert motion.depth == -1.0


def test_oscillating_motion_stays_in_its_box() -> None:
    motion = OscillatingMotion()
    for step in range(0, 2000, 7):
        x, y = motion.position_at(step * 0.5)
        assert 0.2 - 1e-12 <= x <= 1.0 + 1e-12
        assert -1.4 - 1e-12 <= y <= -1.0 + 1e-12


def test_wobble_rotation() -> None:
    assert wobble_rotation(0.0) == pytest.approx((0.0, 0.0, 0.05))
    rx, ry, rz = wobble_rotation(3.0, amount=0.1)
    assert rx == pytest.approx(math.sin(1.5) * 0.1)
    assert ry == 0.0
    assert rz == pytest.approx(math.cos(1.2) * 0.1)
