"""Error types shared by the fluted glass geometry and frame pacing code."""
from __future__ import annotations


class FlutedGlassError(Exception):
    """Base class for fluted glass errors."""


class InvalidParameter(FlutedGlassError, ValueError):
    """Raised when a shape, pacing, motion or color input is out of domain."""


class DegenerateGeometry(FlutedGlassError):
    """Raised when a profile collapses to something that is not a polygon."""


class TimerFailure(FlutedGlassError, RuntimeError):
    """Raised by a scheduler when the host timer primitive is unavailable."""


class RenderLoopBusy(FlutedGlassError, RuntimeError):
    """Raised when a second owner tries to claim a scene's render loop."""
