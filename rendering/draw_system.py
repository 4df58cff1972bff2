"""Immediate-mode renderer for the fluted glass scene."""
from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from OpenGL import GL as gl

from .camera import OrthographicCamera
from .extrusion import Mesh3D
from .opengl_context import DIRECTIONAL_LIGHT_POSITION

Vec3 = Tuple[float, float, float]
RGBA = Tuple[float, float, float, float]

GLOW_SHELL_COLOR: Vec3 = (0.0, 0.27, 1.0)
GLASS_TINT: Vec3 = (0.85, 0.9, 1.0)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class SceneRenderer:
    """Applies one frame's values to GL state and draws the scene.

    The glass is approximated: transmission and thickness drive its opacity,
    roughness its shininess. Everything else the material carries is kept
    for renderers that can use it.
    """

    def __init__(self, camera: OrthographicCamera) -> None:
        self.camera = camera

    def draw(self, frame) -> None:
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        width, height = self.camera.viewport_size
        gl.glViewport(0, 0, width, height)
        self._apply_camera()
        gl.glLightfv(gl.GL_LIGHT0, gl.GL_POSITION, DIRECTIONAL_LIGHT_POSITION)

        gl.glPushMatrix()
        gl.glTranslatef(*frame.group_offset)
        self._draw_sphere(frame)
        self._draw_glow(frame)
        self._draw_glass(frame)
        gl.glPopMatrix()

    # ------------------------------------------------------------------
    def _apply_camera(self) -> None:
        gl.glMatrixMode(gl.GL_PROJECTION)
        # numpy is row-major, OpenGL expects column-major.
        gl.glLoadMatrixf(np.ascontiguousarray(self.camera.projection_matrix().T))
        gl.glMatrixMode(gl.GL_MODELVIEW)
        gl.glLoadMatrixf(np.ascontiguousarray(self.camera.view_matrix().T))

    def _draw_sphere(self, frame) -> None:
        transform = frame.sphere
        material = frame.sphere_material
        color = material.color
        r, g, b = (_clamp01(channel) for channel in color.display_rgb)
        emissive = tuple(
            _clamp01(channel * color.emissive_intensity) for channel in color.emissive_rgb
        )
        gl.glMaterialfv(gl.GL_FRONT, gl.GL_AMBIENT_AND_DIFFUSE, (r, g, b, 1.0))
        gl.glMaterialfv(gl.GL_FRONT, gl.GL_EMISSION, emissive + (1.0,))
        specular = 0.2 + 0.8 * material.metalness
        gl.glMaterialfv(gl.GL_FRONT, gl.GL_SPECULAR, (specular, specular, specular, 1.0))
        gl.glMaterialf(gl.GL_FRONT, gl.GL_SHININESS, 128.0 * (1.0 - material.roughness))

        gl.glPushMatrix()
        gl.glTranslatef(*transform.position)
        rx, ry, rz = transform.rotation
        gl.glRotatef(math.degrees(rx), 1.0, 0.0, 0.0)
        gl.glRotatef(math.degrees(ry), 0.0, 1.0, 0.0)
        gl.glRotatef(math.degrees(rz), 0.0, 0.0, 1.0)
        self._draw_mesh(frame.sphere_mesh, smooth=True)
        gl.glPopMatrix()

    def _draw_glow(self, frame) -> None:
        glow = frame.glow
        if glow is None or glow.opacity <= 0.0:
            return
        emissive = tuple(_clamp01(c * glow.emissive_intensity) for c in GLOW_SHELL_COLOR)
        gl.glMaterialfv(gl.GL_FRONT_AND_BACK, gl.GL_AMBIENT_AND_DIFFUSE, (1.0, 1.0, 1.0, glow.opacity))
        gl.glMaterialfv(gl.GL_FRONT_AND_BACK, gl.GL_EMISSION, emissive + (glow.opacity,))
        gl.glDepthMask(gl.GL_FALSE)
        gl.glPushMatrix()
        gl.glTranslatef(*frame.sphere.position)
        self._draw_mesh(glow.mesh, smooth=True)
        gl.glPopMatrix()
        gl.glDepthMask(gl.GL_TRUE)

    def _draw_glass(self, frame) -> None:
        glass = frame.glass
        alpha = _clamp01(1.0 - glass.transmission * (1.0 - 0.35 * glass.thickness))
        alpha = max(alpha, 0.12)
        tint = GLASS_TINT + (alpha,)
        gl.glMaterialfv(gl.GL_FRONT_AND_BACK, gl.GL_AMBIENT_AND_DIFFUSE, tint)
        gl.glMaterialfv(gl.GL_FRONT_AND_BACK, gl.GL_EMISSION, (0.0, 0.0, 0.0, 1.0))
        gl.glMaterialfv(gl.GL_FRONT_AND_BACK, gl.GL_SPECULAR, (1.0, 1.0, 1.0, 1.0))
        gl.glMaterialf(gl.GL_FRONT_AND_BACK, gl.GL_SHININESS, 128.0 * (1.0 - glass.roughness))
        gl.glDepthMask(gl.GL_FALSE)
        if glass.backside:
            gl.glLightModeli(gl.GL_LIGHT_MODEL_TWO_SIDE, gl.GL_TRUE)
        self._draw_mesh(frame.panel_mesh, smooth=False)
        gl.glLightModeli(gl.GL_LIGHT_MODEL_TWO_SIDE, gl.GL_FALSE)
        gl.glDepthMask(gl.GL_TRUE)

    @staticmethod
    def _draw_mesh(mesh: Mesh3D, *, smooth: bool) -> None:
        vertices = mesh.vertices
        if smooth:
            # Sphere meshes are centered on the origin, so positions double as normals.
            lengths = np.linalg.norm(vertices, axis=1, keepdims=True)
            lengths[lengths == 0.0] = 1.0
            normals = vertices / lengths
        else:
            normals = mesh.face_normals()
        gl.glBegin(gl.GL_TRIANGLES)
        for face_index, face in enumerate(mesh.faces):
            if not smooth:
                gl.glNormal3f(*normals[face_index])
            for vertex_index in face:
                if smooth:
                    gl.glNormal3f(*normals[vertex_index])
                gl.glVertex3f(*vertices[vertex_index])
        gl.glEnd()

