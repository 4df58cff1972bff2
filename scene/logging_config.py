"""Root logger set-up for the viewer's ``--log-level`` flag.

Pacer warnings, mesh regeneration and clamped parameter updates all go
through module loggers; this only decides where they end up.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, Union

from errors import InvalidParameter

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Accept a numeric level or a name such as ``"debug"``."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise InvalidParameter(f"Unknown log level: {level}")
    return resolved


def configure_logging(level: Union[int, str] = logging.INFO, format: Optional[str] = None) -> None:
    """Send log records to stdout, unless the host already installed handlers."""

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(resolve_level(level))
        return

    logging.basicConfig(
        level=resolve_level(level),
        format=format or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
