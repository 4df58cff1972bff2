"""Solid meshes for the fluted glass scene.

The panel is a flat-capped prism swept from the sampled cross-section and
then turned into the scene's reference orientation. The sphere and its glow
shell share the same :class:`Mesh3D` container so the renderer only has to
know one vertex/index layout.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from errors import DegenerateGeometry, InvalidParameter
from .fluted_profile import ProfilePath

Vec3 = Tuple[float, float, float]
Triangle = Tuple[int, int, int]

# Applied in order, each about the world axis, after extrusion.
PANEL_ROTATIONS: Tuple[Tuple[str, float], ...] = (
    ("x", math.pi / 2.0),
    ("y", math.pi * 0.25),
)

_DUPLICATE_TOLERANCE = 1e-12


@dataclass(frozen=True, eq=False)
class Mesh3D:
    """Triangle mesh with read-only vertex and index buffers."""

    vertices: np.ndarray
    faces: np.ndarray
    profile_size: int = 0

    def __post_init__(self) -> None:
        vertices = np.array(self.vertices, dtype=np.float64).reshape(-1, 3)
        faces = np.array(self.faces, dtype=np.int64).reshape(-1, 3)
        vertices.setflags(write=False)
        faces.setflags(write=False)
        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "faces", faces)

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def face_count(self) -> int:
        return int(self.faces.shape[0])

    def transformed(
        self,
        offset: Vec3 = (0.0, 0.0, 0.0),
        scale: float = 1.0,
    ) -> "Mesh3D":
        """Return a new mesh with vertices offset/scaled for drawing."""

        moved = self.vertices * scale + np.asarray(offset, dtype=np.float64)
        return Mesh3D(moved, self.faces, self.profile_size)

    def face_normals(self) -> np.ndarray:
        tri = self.vertices[self.faces]
        normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        lengths[lengths == 0.0] = 1.0
        return normals / lengths


def rotation_matrix(axis: str, angle: float) -> np.ndarray:
    c = math.cos(angle)
    s = math.sin(angle)
    if axis == "x":
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])
    if axis == "y":
        return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])
    if axis == "z":
        return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    raise InvalidParameter(f"Unknown rotation axis: {axis}")


def _signed_area(points: np.ndarray) -> float:
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def _orient(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    return float((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0]))


def _distinct_outline(points: np.ndarray) -> np.ndarray:
    """Drop consecutive repeats, including a closing copy of the first point."""

    keep: List[int] = []
    for index in range(points.shape[0]):
        if keep and np.all(np.abs(points[index] - points[keep[-1]]) <= _DUPLICATE_TOLERANCE):
            continue
        keep.append(index)
    if len(keep) > 1 and np.all(np.abs(points[keep[-1]] - points[keep[0]]) <= _DUPLICATE_TOLERANCE):
        keep.pop()
    return points[keep]


def _walk(start: int, stop: int, count: int) -> List[int]:
    chain = [start]
    index = start
    while index != stop:
        index = (index + 1) % count
        chain.append(index)
    return chain


def _triangulate_monotone(points: np.ndarray) -> List[Triangle]:
    """Triangulate a counter-clockwise, x-monotone polygon in place.

    Returns ``len(points) - 2`` triangles over the existing vertices, each
    wound counter-clockwise.
    """

    count = points.shape[0]
    keys = [(float(points[i, 0]), float(points[i, 1])) for i in range(count)]
    left = min(range(count), key=keys.__getitem__)
    right = max(range(count), key=keys.__getitem__)

    forward = _walk(left, right, count)
    backward = _walk(right, left, count)[::-1]
    for chain in (forward, backward):
        xs = points[chain, 0]
        if np.any(np.diff(xs) < 0.0):
            raise DegenerateGeometry("profile is not x-monotone; cannot cap the extrusion")

    side: Dict[int, int] = {}
    for index in forward[1:-1]:
        side[index] = 0
    for index in backward[1:-1]:
        side[index] = 1

    inner_a = forward[1:-1]
    inner_b = backward[1:-1]
    merged: List[int] = [left]
    ia = ib = 0
    while ia < len(inner_a) or ib < len(inner_b):
        if ib >= len(inner_b) or (ia < len(inner_a) and keys[inner_a[ia]] <= keys[inner_b[ib]]):
            merged.append(inner_a[ia])
            ia += 1
        else:
            merged.append(inner_b[ib])
            ib += 1
    merged.append(right)

    triangles: List[Triangle] = []

    def emit(a: int, b: int, c: int) -> None:
        if _orient(points[a], points[b], points[c]) < 0.0:
            b, c = c, b
        triangles.append((a, b, c))

    stack = [merged[0], merged[1]]
    for j in range(2, count - 1):
        current = merged[j]
        if side[current] != side.get(stack[-1], -1):
            for i in range(len(stack) - 1):
                emit(stack[i], stack[i + 1], current)
            stack = [merged[j - 1], current]
            continue
        last = stack.pop()
        while stack:
            turn = _orient(points[stack[-1]], points[last], points[current])
            inside = turn > 0.0 if side[current] == 0 else turn < 0.0
            if not inside:
                break
            emit(stack[-1], last, current)
            last = stack.pop()
        stack.append(last)
        stack.append(current)

    for i in range(len(stack) - 1):
        emit(stack[i], stack[i + 1], right)
    return triangles


def extrude_polygon(outline: np.ndarray, depth: float) -> Mesh3D:
    """Sweep a closed 2D outline from ``z = 0`` to ``z = depth`` with flat caps."""

    if not math.isfinite(depth) or depth <= 0.0:
        raise InvalidParameter(f"extrusion depth must be positive, got {depth}")
    points = _distinct_outline(np.asarray(outline, dtype=np.float64))
    if points.shape[0] < 3:
        raise DegenerateGeometry(f"profile has {points.shape[0]} distinct points; need at least 3")
    area = _signed_area(points)
    if abs(area) <= _DUPLICATE_TOLERANCE:
        raise DegenerateGeometry("profile encloses no area")
    if area < 0.0:
        points = points[::-1].copy()

    count = points.shape[0]
    cap = np.array(_triangulate_monotone(points), dtype=np.int64)

    front = np.column_stack([points, np.zeros(count)])
    back = np.column_stack([points, np.full(count, depth)])
    vertices = np.vstack([front, back])

    current = np.arange(count)
    following = (current + 1) % count
    sides = np.vstack(
        [
            np.column_stack([current, following, following + count]),
            np.column_stack([current, following + count, current + count]),
        ]
    )
    faces = np.vstack([cap[:, ::-1], cap + count, sides])
    return Mesh3D(vertices, faces, profile_size=count)


def orient_panel(
    mesh: Mesh3D,
    rotations: Sequence[Tuple[str, float]] = PANEL_ROTATIONS,
) -> Mesh3D:
    """Rotate ``mesh`` into the scene's reference orientation."""

    vertices = mesh.vertices
    for axis, angle in rotations:
        vertices = vertices @ rotation_matrix(axis, angle).T
    return Mesh3D(vertices, mesh.faces, mesh.profile_size)


def generate_mesh(profile: ProfilePath, depth_along_axis: float) -> Mesh3D:
    """Extrude ``profile`` into a panel and orient it for the scene."""

    return orient_panel(extrude_polygon(profile.points, depth_along_axis))


class ExtrusionMeshGenerator:
    """Builds panel meshes with a fixed orientation sequence."""

    def __init__(self, rotations: Sequence[Tuple[str, float]] = PANEL_ROTATIONS) -> None:
        self.rotations = tuple(rotations)

    def generate(self, profile: ProfilePath, depth_along_axis: float) -> Mesh3D:
        return orient_panel(extrude_polygon(profile.points, depth_along_axis), self.rotations)


def create_uv_sphere_mesh(radius: float = 0.2, segments: int = 32) -> Mesh3D:
    """Approximate a sphere with a latitude/longitude grid."""

    if radius <= 0.0:
        raise InvalidParameter(f"sphere radius must be positive, got {radius}")
    if segments < 3:
        raise InvalidParameter(f"sphere needs at least 3 segments, got {segments}")

    vertices: List[Vec3] = [(0.0, radius, 0.0)]
    for ring in range(1, segments):
        phi = math.pi * ring / segments
        ring_radius = math.sin(phi) * radius
        y = math.cos(phi) * radius
        for step in range(segments):
            theta = math.tau * step / segments
            vertices.append((math.cos(theta) * ring_radius, y, math.sin(theta) * ring_radius))
    vertices.append((0.0, -radius, 0.0))
    bottom = len(vertices) - 1

    def ring_index(ring: int, step: int) -> int:
        return 1 + (ring - 1) * segments + (step % segments)

    faces: List[Triangle] = []
    for step in range(segments):
        faces.append((0, ring_index(1, step), ring_index(1, step + 1)))
    for ring in range(1, segments - 1):
        for step in range(segments):
            a = ring_index(ring, step)
            b = ring_index(ring, step + 1)
            c = ring_index(ring + 1, step + 1)
            d = ring_index(ring + 1, step)
            faces.append((a, d, c))
            faces.append((a, c, b))
    for step in range(segments):
        faces.append((bottom, ring_index(segments - 1, step + 1), ring_index(segments - 1, step)))

    vertex_array = np.array(vertices, dtype=np.float64)
    face_array = np.array(faces, dtype=np.int64)
    tri = vertex_array[face_array]
    normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
    inward = np.einsum("ij,ij->i", normals, tri.mean(axis=1)) < 0.0
    face_array[inward] = face_array[inward][:, ::-1]
    return Mesh3D(vertex_array, face_array)
