"""Composition of the fluted glass panel and the glowing sphere behind it."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from errors import InvalidParameter
from rendering.extrusion import ExtrusionMeshGenerator, Mesh3D, create_uv_sphere_mesh
from rendering.fluted_profile import CurveProfileBuilder, ShapeParameters
from .color import DRIFT_SPHERE_WAVES, FOLLOW_SPHERE_WAVES, ChannelWave, ColorOscillator, ColorSample
from .motion import (
    MotionState,
    MotionStrategy,
    OscillatingMotion,
    PointerFollowMotion,
    wobble_rotation,
)
from .parameters import GlassMaterial, ParameterSet, get_parameter_definition
from .viewport import Viewport

LOG = logging.getLogger(__name__)

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]

# World offset shared by the panel and the sphere.
GROUP_OFFSET: Vec3 = (0.125, 1.0, 0.0)
GLOW_SHELL_SCALE = 1.5
MOTION_MODES = ("follow", "drift")

_SHAPE_KEYS = frozenset({"flutes", "depth", "curvature"})
_MOTION_KEYS = frozenset({"smoothing", "easing"})


@dataclass(frozen=True)
class SphereTransform:
    position: Vec3
    rotation: Vec3
    radius: float


@dataclass(frozen=True)
class SphereMaterial:
    color: ColorSample
    metalness: float
    roughness: float


@dataclass(frozen=True)
class GlowShell:
    """Blended shell around the drifting sphere, already scaled to its radius."""

    mesh: Mesh3D
    radius: float
    opacity: float
    emissive_intensity: float


@dataclass(frozen=True)
class FrameOutput:
    """Everything the renderer applies before the next draw."""

    elapsed: float
    group_offset: Vec3
    panel_mesh: Mesh3D
    glass: GlassMaterial
    sphere_mesh: Mesh3D
    sphere: SphereTransform
    sphere_material: SphereMaterial
    glow: Optional[GlowShell]


class FlutedGlassScene:
    """Owns the derived state of the scene and rebuilds it only on change."""

    def __init__(
        self,
        parameters: Optional[ParameterSet] = None,
        viewport: Optional[Viewport] = None,
        *,
        motion: str = "follow",
    ) -> None:
        if motion not in MOTION_MODES:
            raise InvalidParameter(f"Unknown motion mode '{motion}'")
        self.parameters = parameters if parameters is not None else ParameterSet()
        self.viewport = viewport if viewport is not None else Viewport((1280, 720))
        self.motion_mode = motion
        self._profile_builder = CurveProfileBuilder()
        self._mesh_generator = ExtrusionMeshGenerator()
        self._shape: Optional[ShapeParameters] = None
        self._panel_mesh: Optional[Mesh3D] = None
        self._sphere_key: Optional[Tuple[float, int]] = None
        self._sphere_mesh: Optional[Mesh3D] = None
        self._glow_mesh: Optional[Mesh3D] = None
        self._pointer: Vec2 = (0.0, 0.0)
        self._watchers: Dict[str, List[Callable[[float], None]]] = {}
        self._motion: MotionStrategy = self._build_motion()
        if motion == "follow":
            self._motion_state = MotionState.at((0.0, -1.0))
        else:
            self._motion_state = MotionState.at(OscillatingMotion().position_at(0.0))

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------
    def resize(self, window_size: Tuple[int, int]) -> None:
        self.viewport.update(window_size)

    def pointer_moved(self, point: Vec2) -> None:
        self._pointer = self.viewport.normalize_pointer(point)

    def watch(self, name: str, callback: Callable[[float], None]) -> None:
        """Call ``callback(value)`` whenever ``name`` changes through :meth:`update_parameters`."""

        get_parameter_definition(name)
        self._watchers.setdefault(name, []).append(callback)

    def update_parameters(self, **changes: float) -> frozenset:
        changed = self.parameters.update(**changes)
        if changed & _MOTION_KEYS:
            self._motion = self._build_motion()
        if changed & _SHAPE_KEYS:
            LOG.debug("Shape parameters changed: %s", ", ".join(sorted(changed & _SHAPE_KEYS)))
        for name in sorted(changed):
            for callback in self._watchers.get(name, ()):
                callback(self.parameters[name])
        return changed

    @property
    def motion_state(self) -> MotionState:
        return self._motion_state

    # ------------------------------------------------------------------
    # Derived geometry
    # ------------------------------------------------------------------
    def shape_parameters(self) -> ShapeParameters:
        width, height = self.viewport.panel_dimensions()
        return ShapeParameters(
            width=width,
            height=height,
            flute_count=int(self.parameters["flutes"]),
            depth=float(self.parameters["depth"]),
            curvature=float(self.parameters["curvature"]),
        )

    def panel_mesh(self) -> Mesh3D:
        """Return the panel, regenerating it when the shape has changed."""

        shape = self.shape_parameters()
        if self._panel_mesh is None or shape != self._shape:
            profile = self._profile_builder.build(shape)
            mesh = self._mesh_generator.generate(profile, shape.height)
            self._shape = shape
            self._panel_mesh = mesh
            LOG.debug(
                "Regenerated panel: %d flutes, %d vertices, %d faces.",
                shape.flute_count,
                mesh.vertex_count,
                mesh.face_count,
            )
        return self._panel_mesh

    def sphere_mesh(self) -> Mesh3D:
        key = (float(self.parameters["sphere_size"]), int(self.parameters["segments"]))
        if self._sphere_mesh is None or key != self._sphere_key:
            self._sphere_mesh = create_uv_sphere_mesh(radius=key[0], segments=key[1])
            self._glow_mesh = None
            self._sphere_key = key
        return self._sphere_mesh

    def glow_mesh(self) -> Mesh3D:
        sphere = self.sphere_mesh()
        if self._glow_mesh is None:
            self._glow_mesh = sphere.transformed(scale=GLOW_SHELL_SCALE)
        return self._glow_mesh

    # ------------------------------------------------------------------
    # Per-frame evaluation
    # ------------------------------------------------------------------
    def color_oscillator(self) -> ColorOscillator:
        if self.motion_mode == "follow":
            return ColorOscillator(
                waves=FOLLOW_SPHERE_WAVES,
                base_intensity=float(self.parameters["emissive_intensity"]),
            )
        return ColorOscillator(
            waves=DRIFT_SPHERE_WAVES,
            base_intensity=float(self.parameters["emissive_intensity"]),
            glow=ChannelWave(
                amplitude=float(self.parameters["blue_glow_intensity"]),
                frequency=float(self.parameters["glow_speed"]),
            ),
        )

    def frame(self, elapsed: float, dt: float) -> FrameOutput:
        """Advance motion and sample colors for one drawn frame."""

        panel = self.panel_mesh()
        sphere_mesh = self.sphere_mesh()

        self._motion_state = self._motion.step(self._motion_state, self._pointer, dt, elapsed)
        x, y = self._motion_state.current_position
        if self.motion_mode == "follow":
            rotation = wobble_rotation(elapsed)
        else:
            rotation = (0.0, 0.0, 0.0)
        radius = float(self.parameters["sphere_size"])

        base = (
            float(self.parameters["base_red"]),
            float(self.parameters["base_green"]),
            float(self.parameters["base_blue"]),
        )
        color = self.color_oscillator().sample(base, elapsed)

        return FrameOutput(
            elapsed=elapsed,
            group_offset=GROUP_OFFSET,
            panel_mesh=panel,
            glass=GlassMaterial.from_parameters(self.parameters),
            sphere_mesh=sphere_mesh,
            sphere=SphereTransform(position=(x, y, self._motion.depth), rotation=rotation, radius=radius),
            sphere_material=SphereMaterial(
                color=color,
                metalness=float(self.parameters["metalness"]),
                roughness=float(self.parameters["sphere_roughness"]),
            ),
            glow=self._glow_shell(radius),
        )

    def _glow_shell(self, radius: float) -> Optional[GlowShell]:
        # Only the drifting sphere carries a glow shell.
        if self.motion_mode != "drift":
            return None
        return GlowShell(
            mesh=self.glow_mesh(),
            radius=radius * GLOW_SHELL_SCALE,
            opacity=float(self.parameters["glow_opacity"]),
            emissive_intensity=float(self.parameters["blue_glow_intensity"]),
        )

    def _build_motion(self) -> MotionStrategy:
        if self.motion_mode == "follow":
            return PointerFollowMotion(
                smoothing=float(self.parameters["smoothing"]),
                easing=float(self.parameters["easing"]),
            )
        return OscillatingMotion()
