import logging

import pytest

from errors import InvalidParameter
from scene.logging_config import resolve_level


def test_level_names_resolve_case_insensitively() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("WARNING") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR


def test_unknown_level_name() -> None:
    with pytest.raises(InvalidParameter):
        resolve_level("chatty")
