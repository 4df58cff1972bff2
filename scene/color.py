"""Slow color breathing for the glowing sphere."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from errors import InvalidParameter

RGB = Tuple[float, float, float]


@dataclass(frozen=True)
class ChannelWave:
    amplitude: float
    frequency: float

    def at(self, elapsed: float) -> float:
        return math.sin(elapsed * self.frequency) * self.amplitude

    @property
    def period(self) -> float:
        return math.tau / self.frequency


# (amplitude, frequency) per red, green, blue channel.
FOLLOW_SPHERE_WAVES: Tuple[ChannelWave, ChannelWave, ChannelWave] = (
    ChannelWave(0.1, 0.3),
    ChannelWave(0.15, 0.5),
    ChannelWave(0.05, 0.7),
)
DRIFT_SPHERE_WAVES: Tuple[ChannelWave, ChannelWave, ChannelWave] = (
    ChannelWave(0.1, 0.15),
    ChannelWave(0.15, 0.25),
    ChannelWave(0.05, 0.35),
)

EMISSIVE_SCALE: RGB = (0.5, 0.3, 0.2)
INTENSITY_WAVE = ChannelWave(0.5, 0.4)


@dataclass(frozen=True)
class ColorSample:
    display_rgb: RGB
    emissive_rgb: RGB
    emissive_intensity: float
    glow: float = 0.0


@dataclass(frozen=True)
class ColorOscillator:
    """Pure function of (base color, elapsed time); holds only constants.

    ``glow`` is an optional secondary wave added to the blue emissive
    channel for the cool rim glow.
    """

    waves: Sequence[ChannelWave] = FOLLOW_SPHERE_WAVES
    base_intensity: float = 1.5
    emissive_scale: RGB = EMISSIVE_SCALE
    intensity_wave: ChannelWave = INTENSITY_WAVE
    glow: Optional[ChannelWave] = None

    def sample(self, base: RGB, elapsed: float) -> ColorSample:
        if len(base) != 3 or any(not 0.0 <= channel <= 1.0 for channel in base):
            raise InvalidParameter(f"base color channels must lie in [0, 1], got {base}")
        r, g, b = (channel + wave.at(elapsed) for channel, wave in zip(base, self.waves))
        glow = self.glow.at(elapsed) if self.glow is not None else 0.0
        sr, sg, sb = self.emissive_scale
        return ColorSample(
            display_rgb=(r, g, b),
            emissive_rgb=(r * sr, g * sg, b * sb + glow),
            emissive_intensity=self.base_intensity + self.intensity_wave.at(elapsed),
            glow=glow,
        )
