"""Cross-section builder for the fluted glass panel."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from errors import InvalidParameter

Vec2 = Tuple[float, float]

SAMPLES_PER_FLUTE = 10


@dataclass(frozen=True)
class ShapeParameters:
    """Immutable inputs for one panel generation."""

    width: float
    height: float
    flute_count: int
    depth: float
    curvature: float

    def validate(self) -> None:
        if self.flute_count < 1:
            raise InvalidParameter(f"flute_count must be >= 1, got {self.flute_count}")
        if not self.width > 0.0 or not math.isfinite(self.width):
            raise InvalidParameter(f"width must be positive, got {self.width}")
        if not self.height > 0.0 or not math.isfinite(self.height):
            raise InvalidParameter(f"height must be positive, got {self.height}")
        if not math.isfinite(self.depth):
            raise InvalidParameter(f"depth must be finite, got {self.depth}")
        if not 0.0 <= self.curvature <= 1.0:
            raise InvalidParameter(f"curvature must lie in [0, 1], got {self.curvature}")

    @property
    def flute_width(self) -> float:
        return self.width / self.flute_count


@dataclass(frozen=True)
class BezierSegment:
    """One flute: a cubic arch from ``start`` to ``end``."""

    start: Vec2
    control1: Vec2
    control2: Vec2
    end: Vec2

    def evaluate(self, t: np.ndarray) -> np.ndarray:
        """Return the ``(len(t), 2)`` points at curve parameters ``t``."""

        t = np.asarray(t, dtype=np.float64)[:, None]
        u = 1.0 - t
        p0 = np.array(self.start)
        p1 = np.array(self.control1)
        p2 = np.array(self.control2)
        p3 = np.array(self.end)
        return (
            (u * u * u) * p0
            + (3.0 * u * u * t) * p1
            + (3.0 * u * t * t) * p2
            + (t * t * t) * p3
        )


@dataclass(frozen=True)
class ProfilePath:
    """Sampled outline of the panel's cross-section."""

    segments: Tuple[BezierSegment, ...]
    points: np.ndarray

    def __len__(self) -> int:
        return int(self.points.shape[0])

    @property
    def span(self) -> float:
        return float(self.points[:, 0].max() - self.points[:, 0].min())


def flute_segments(params: ShapeParameters) -> List[BezierSegment]:
    """Lay out one inward arch per flute.

    Every arch rests on ``y = 0`` at both ends and bulges towards ``depth``.
    The control points sit ``flute_width * curvature`` inside the arch ends,
    which keeps x monotone along each arch for any curvature in [0, 1].
    """

    params.validate()
    width = params.width
    flute_width = params.flute_width
    inset = flute_width * params.curvature
    segments: List[BezierSegment] = []
    for i in range(params.flute_count):
        x1 = i * flute_width - width / 2.0
        x2 = (i + 1) * flute_width - width / 2.0
        if i == params.flute_count - 1:
            # Pin the last anchor so the span is exactly ``width``.
            x2 = width / 2.0
        segments.append(
            BezierSegment(
                start=(x1, 0.0),
                control1=(x1 + inset, params.depth),
                control2=(x2 - inset, params.depth),
                end=(x2, 0.0),
            )
        )
    return segments


def sample_segments(segments: Sequence[BezierSegment], count: int) -> np.ndarray:
    """Sample ``count`` points evenly in the path's global parameter."""

    if not segments:
        raise InvalidParameter("cannot sample an empty path")
    if count < 2:
        raise InvalidParameter(f"need at least two samples, got {count}")
    segment_count = len(segments)
    u = np.linspace(0.0, 1.0, count) * segment_count
    index = np.minimum(np.floor(u).astype(int), segment_count - 1)
    local_t = u - index
    points = np.empty((count, 2), dtype=np.float64)
    for seg_index, segment in enumerate(segments):
        mask = index == seg_index
        if np.any(mask):
            points[mask] = segment.evaluate(local_t[mask])
    return points


def build_profile(params: ShapeParameters) -> ProfilePath:
    """Build the sampled fluted cross-section for ``params``."""

    segments = flute_segments(params)
    points = sample_segments(segments, params.flute_count * SAMPLES_PER_FLUTE)
    points.setflags(write=False)
    return ProfilePath(segments=tuple(segments), points=points)


class CurveProfileBuilder:
    """Callable front for :func:`build_profile`."""

    def build(self, params: ShapeParameters) -> ProfilePath:
        return build_profile(params)
