"""Tunable scene parameters with their slider ranges."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Union

from errors import InvalidParameter

LOG = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class ParameterDefinition:
    """Default and range for one adjustable value."""

    name: str
    group: str
    default: Number
    minimum: Number
    maximum: Number
    step: Number
    integer: bool = False

    def coerce(self, value: Number) -> Number:
        """Clamp ``value`` into range, snapping integers to whole steps."""

        clamped = max(self.minimum, min(self.maximum, value))
        if self.integer:
            steps = round((clamped - self.minimum) / self.step)
            return int(min(self.maximum, self.minimum + steps * self.step))
        return float(clamped)


def _float(name: str, group: str, default: float, minimum: float, maximum: float, step: float) -> ParameterDefinition:
    return ParameterDefinition(name, group, default, minimum, maximum, step)


def _int(name: str, group: str, default: int, minimum: int, maximum: int, step: int = 1) -> ParameterDefinition:
    return ParameterDefinition(name, group, default, minimum, maximum, step, integer=True)


_PARAMETERS: Dict[str, ParameterDefinition] = {
    definition.name: definition
    for definition in (
        # Glass material, passed through to the renderer untouched.
        _int("samples", "glass", 32, 1, 1024),
        _int("resolution", "glass", 256, 256, 2048, 256),
        _float("thickness", "glass", 0.3, 0.0, 1.0, 0.1),
        _float("roughness", "glass", 0.5, 0.0, 1.0, 0.1),
        _float("transmission", "glass", 1.0, 0.0, 1.0, 0.1),
        _float("ior", "glass", 1.5, 1.0, 3.0, 0.1),
        _float("distortion", "glass", 1.0, 0.0, 1.0, 0.1),
        _float("distortion_scale", "glass", 1.0, 0.0, 1.0, 0.1),
        _float("temporal_distortion", "glass", 0.1, 0.0, 1.0, 0.1),
        _float("clearcoat", "glass", 0.0, 0.0, 1.0, 0.1),
        _float("attenuation_distance", "glass", 0.5, 0.0, 2.0, 0.1),
        # Panel shape.
        _int("flutes", "shape", 20, 5, 50),
        _float("depth", "shape", 0.2, 0.01, 0.2, 0.01),
        _float("curvature", "shape", 0.1, 0.1, 0.5, 0.01),
        # Pacing.
        _float("target_fps", "pacing", 30.0, 1.0, 240.0, 1.0),
        # Sphere colors.
        _float("base_red", "sphere", 0.9, 0.0, 1.0, 0.1),
        _float("base_green", "sphere", 0.3, 0.0, 1.0, 0.1),
        _float("base_blue", "sphere", 0.1, 0.0, 1.0, 0.1),
        _float("blue_glow_intensity", "sphere", 0.1, 0.0, 2.0, 0.1),
        _float("glow_speed", "sphere", 0.5, 0.1, 2.0, 0.1),
        # Sphere material and geometry.
        _float("metalness", "sphere", 0.3, 0.0, 1.0, 0.1),
        _float("sphere_roughness", "sphere", 0.3, 0.0, 1.0, 0.1),
        _float("emissive_intensity", "sphere", 1.5, 0.0, 2.0, 0.05),
        _float("glow_opacity", "sphere", 0.3, 0.0, 1.0, 0.05),
        _float("sphere_size", "sphere", 0.2, 0.1, 1.0, 0.1),
        _int("segments", "sphere", 32, 8, 64),
        # Pointer following.
        _float("smoothing", "motion", 0.08, 0.01, 1.0, 0.01),
        _float("easing", "motion", 0.1, 0.01, 1.0, 0.01),
    )
}


def get_parameter_definition(name: str) -> ParameterDefinition:
    """Look up a parameter definition by name."""

    if name not in _PARAMETERS:
        raise InvalidParameter(f"Unknown parameter: {name}")
    return _PARAMETERS[name]


def all_parameter_definitions() -> Iterable[ParameterDefinition]:
    """Iterate over every tunable parameter."""

    return _PARAMETERS.values()


class ParameterSet:
    """Current values of every tunable, initialised from the defaults."""

    def __init__(self, **overrides: Number) -> None:
        self._values: Dict[str, Number] = {
            definition.name: definition.default for definition in all_parameter_definitions()
        }
        if overrides:
            self.update(**overrides)

    def __getitem__(self, name: str) -> Number:
        get_parameter_definition(name)
        return self._values[name]

    def as_dict(self) -> Dict[str, Number]:
        return dict(self._values)

    def update(self, **changes: Number) -> FrozenSet[str]:
        """Apply any subset of values and report which ones actually changed."""

        coerced: Dict[str, Number] = {}
        for name, value in changes.items():
            definition = get_parameter_definition(name)
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise InvalidParameter(f"{name} must be numeric, got {value!r}") from exc
            if not math.isfinite(number):
                raise InvalidParameter(f"{name} must be finite, got {value!r}")
            result = definition.coerce(number)
            if result != number:
                LOG.debug("Clamped %s from %s to %s.", name, value, result)
            coerced[name] = result

        changed = frozenset(name for name, value in coerced.items() if self._values[name] != value)
        self._values.update(coerced)
        return changed


@dataclass(frozen=True)
class GlassMaterial:
    """Transmission material inputs handed to the renderer as-is."""

    samples: int
    resolution: int
    thickness: float
    roughness: float
    transmission: float
    ior: float
    distortion: float
    distortion_scale: float
    temporal_distortion: float
    clearcoat: float
    attenuation_distance: float
    backside: bool = True
    attenuation_color: str = "#ffffff"

    @classmethod
    def from_parameters(cls, parameters: ParameterSet) -> "GlassMaterial":
        return cls(
            samples=int(parameters["samples"]),
            resolution=int(parameters["resolution"]),
            thickness=float(parameters["thickness"]),
            roughness=float(parameters["roughness"]),
            transmission=float(parameters["transmission"]),
            ior=float(parameters["ior"]),
            distortion=float(parameters["distortion"]),
            distortion_scale=float(parameters["distortion_scale"]),
            temporal_distortion=float(parameters["temporal_distortion"]),
            clearcoat=float(parameters["clearcoat"]),
            attenuation_distance=float(parameters["attenuation_distance"]),
        )
