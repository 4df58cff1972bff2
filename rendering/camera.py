"""Orthographic camera for the fluted glass scene."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

Vec3 = Tuple[float, float, float]


def _normalize(vec: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vec)
    if norm == 0:
        return vec
    return vec / norm


def _look_at_matrix(position: Vec3, target: Vec3, up: Vec3) -> np.ndarray:
    pos = np.array(position, dtype=np.float32)
    tgt = np.array(target, dtype=np.float32)
    up_vec = np.array(up, dtype=np.float32)

    forward = _normalize(tgt - pos)
    side = _normalize(np.cross(forward, up_vec))
    true_up = np.cross(side, forward)

    view = np.identity(4, dtype=np.float32)
    view[0, :3] = side
    view[1, :3] = true_up
    view[2, :3] = -forward
    view[0, 3] = -np.dot(side, pos)
    view[1, 3] = -np.dot(true_up, pos)
    view[2, 3] = np.dot(forward, pos)
    return view


def _orthographic_matrix(
    left: float, right: float, bottom: float, top: float, near: float, far: float
) -> np.ndarray:
    ortho = np.identity(4, dtype=np.float32)
    ortho[0, 0] = 2.0 / (right - left)
    ortho[1, 1] = 2.0 / (top - bottom)
    ortho[2, 2] = -2.0 / (far - near)
    ortho[0, 3] = -(right + left) / (right - left)
    ortho[1, 3] = -(top + bottom) / (top - bottom)
    ortho[2, 3] = -(far + near) / (far - near)
    return ortho


@dataclass
class OrthographicCamera:
    viewport_size: Tuple[int, int]
    position: Vec3 = (0.0, 0.0, 2.0)
    target: Vec3 = (0.0, 0.0, 0.0)
    frustum_size: float = 5.0
    zoom: float = 10.0
    min_zoom: float = 1.0
    max_zoom: float = 40.0
    zoom_speed: float = 0.5
    near_clip: float = -1000.0
    far_clip: float = 1000.0
    up: Vec3 = (0.0, 1.0, 0.0)

    def zoom_by(self, scroll_delta: float) -> None:
        """Scale the view in or out, clamped to the zoom limits."""

        desired = self.zoom + scroll_delta * self.zoom_speed
        self.zoom = max(self.min_zoom, min(self.max_zoom, desired))

    def update_viewport(self, size: Tuple[int, int]) -> None:
        if size[0] <= 0 or size[1] <= 0:
            return
        self.viewport_size = size

    def aspect(self) -> float:
        width, height = self.viewport_size
        if width <= 0 or height <= 0:
            return 1.0
        return width / height

    def frustum(self) -> Tuple[float, float, float, float]:
        """Return ``(left, right, bottom, top)`` after zoom is applied."""

        half_w = self.frustum_size * self.aspect() / 2.0 / self.zoom
        half_h = self.frustum_size / 2.0 / self.zoom
        return (-half_w, half_w, -half_h, half_h)

    def view_matrix(self) -> np.ndarray:
        return _look_at_matrix(self.position, self.target, self.up)

    def projection_matrix(self) -> np.ndarray:
        left, right, bottom, top = self.frustum()
        return _orthographic_matrix(left, right, bottom, top, self.near_clip, self.far_clip)

    def view_projection_matrix(self) -> np.ndarray:
        return self.projection_matrix() @ self.view_matrix()
