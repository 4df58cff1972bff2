"""Window-size and pointer helpers for the fluted glass scene."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

Vec2 = Tuple[float, float]
Size = Tuple[int, int]

LOG = logging.getLogger(__name__)


@dataclass
class Viewport:
    """Tracks the display surface and derives the panel's world size."""

    window_size: Size
    panel_extent: float = 2.0

    def update(self, window_size: Size) -> None:
        """Take a new window size; minimised or collapsed sizes keep the last one."""

        width, height = window_size
        if width <= 0 or height <= 0:
            LOG.debug("Ignoring empty window size %sx%s.", width, height)
            return
        self.window_size = window_size

    @property
    def aspect_ratio(self) -> float:
        width, height = self.window_size
        if width <= 0 or height <= 0:
            return 1.0
        return width / height

    def panel_dimensions(self) -> Tuple[float, float]:
        """Stretch the panel along the window's long axis so it always covers it."""

        aspect = self.aspect_ratio
        if aspect > 1.0:
            return (self.panel_extent * aspect, self.panel_extent)
        return (self.panel_extent, self.panel_extent / aspect)

    def normalize_pointer(self, point: Vec2) -> Vec2:
        """Map a window pixel to the follow sphere's target range.

        x spans [-1, 1]; y is squeezed into [-1.5, -0.5] so the sphere stays
        in the lower half behind the glass.
        """

        width, height = self.window_size
        if width <= 0 or height <= 0:
            return (0.0, -1.0)
        x = (point[0] / width) * 2.0 - 1.0
        y = (-(point[1] / height) * 2.0 + 1.0) * 0.5 - 1.0
        return (x, y)
