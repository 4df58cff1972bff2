"""OpenGL context helpers for the fluted glass viewer."""
from __future__ import annotations

from typing import Tuple

from OpenGL import GL as gl


BACKGROUND_COLOR = (0.0, 0.0, 0.0, 1.0)
AMBIENT_LIGHT = (0.5, 0.5, 0.5, 1.0)
DIRECTIONAL_LIGHT = (1.0, 1.0, 1.0, 1.0)
# w = 0 makes this a directional light shining from (5, 5, 5).
DIRECTIONAL_LIGHT_POSITION = (5.0, 5.0, 5.0, 0.0)


def initialize_gl(surface_size: Tuple[int, int]) -> None:
    """Configure OpenGL state for lit, blended triangle rendering."""
    width, height = surface_size
    gl.glViewport(0, 0, width, height)
    gl.glClearColor(*BACKGROUND_COLOR)

    gl.glEnable(gl.GL_DEPTH_TEST)
    gl.glDepthFunc(gl.GL_LEQUAL)
    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)
    gl.glShadeModel(gl.GL_SMOOTH)

    gl.glEnable(gl.GL_LIGHTING)
    gl.glLightModelfv(gl.GL_LIGHT_MODEL_AMBIENT, AMBIENT_LIGHT)
    gl.glEnable(gl.GL_LIGHT0)
    gl.glLightfv(gl.GL_LIGHT0, gl.GL_DIFFUSE, DIRECTIONAL_LIGHT)
    gl.glLightfv(gl.GL_LIGHT0, gl.GL_SPECULAR, DIRECTIONAL_LIGHT)
    gl.glEnable(gl.GL_NORMALIZE)


def resize_viewport(surface_size: Tuple[int, int]) -> None:
    """Update viewport when the window changes size."""
    initialize_gl(surface_size)
