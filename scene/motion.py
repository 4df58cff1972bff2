"""Per-frame motion for the glowing sphere."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Protocol, Tuple

from errors import InvalidParameter

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class MotionState:
    """Everything one object's motion carries from frame to frame."""

    raw_target: Vec2
    smoothed_target: Vec2
    current_position: Vec2
    elapsed: float = 0.0

    @classmethod
    def at(cls, position: Vec2) -> "MotionState":
        return cls(raw_target=position, smoothed_target=position, current_position=position)


class MotionStrategy(Protocol):
    depth: float

    def step(self, state: MotionState, raw_target: Vec2, dt: float, elapsed: float) -> MotionState:
        ...


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


@dataclass(frozen=True)
class OscillatingMotion:
    """Drift around ``base`` on independent sine/cosine waves; ignores input."""

    base: Vec2 = (0.6, -1.2)
    amplitude: Vec2 = (0.4, 0.2)
    frequency: Vec2 = (0.07, 0.05)
    depth: float = -1.0

    def position_at(self, elapsed: float) -> Vec2:
        return (
            self.base[0] + math.sin(elapsed * self.frequency[0]) * self.amplitude[0],
            self.base[1] + math.cos(elapsed * self.frequency[1]) * self.amplitude[1],
        )

    def step(self, state: MotionState, raw_target: Vec2, dt: float, elapsed: float) -> MotionState:
        position = self.position_at(elapsed)
        return MotionState(
            raw_target=raw_target,
            smoothed_target=position,
            current_position=position,
            elapsed=elapsed,
        )


@dataclass(frozen=True)
class PointerFollowMotion:
    """Chase a noisy 2D target through two convex smoothing stages.

    The target is first smoothed exponentially, then the drawn position
    eases towards the smoothed target. Both factors are applied once per
    tick, so the motion is tied to the frame rate the pacer allows.
    """

    smoothing: float = 0.08
    easing: float = 0.1
    depth: float = -0.5

    def __post_init__(self) -> None:
        for name in ("smoothing", "easing"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise InvalidParameter(f"{name} must lie in (0, 1], got {value}")

    def step(self, state: MotionState, raw_target: Vec2, dt: float, elapsed: float) -> MotionState:
        smoothed = (
            _lerp(state.smoothed_target[0], raw_target[0], self.smoothing),
            _lerp(state.smoothed_target[1], raw_target[1], self.smoothing),
        )
        current = (
            _lerp(state.current_position[0], smoothed[0], self.easing),
            _lerp(state.current_position[1], smoothed[1], self.easing),
        )
        return replace(
            state,
            raw_target=raw_target,
            smoothed_target=smoothed,
            current_position=current,
            elapsed=elapsed,
        )


def wobble_rotation(elapsed: float, amount: float = 0.05) -> Vec3:
    """Small rocking rotation (radians) for the pointer-following sphere."""

    return (math.sin(elapsed * 0.5) * amount, 0.0, math.cos(elapsed * 0.4) * amount)
