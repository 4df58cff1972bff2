"""pygame-backed one-shot timers for the frame pacer."""
from __future__ import annotations

import itertools
import logging
import math
from typing import Callable, Dict, Optional

import pygame

from errors import TimerFailure

LOG = logging.getLogger(__name__)


class PygameTimerScheduler:
    """Deferred callbacks delivered through the pygame event queue.

    ``pygame.time.set_timer`` posts a one-shot event after the delay; the main
    loop forwards matching events to :meth:`dispatch`, which runs the callback
    on the loop's own thread. Only the most recent timer is armed at a time.
    """

    def __init__(self, event_type: Optional[int] = None) -> None:
        self.event_type = event_type if event_type is not None else pygame.event.custom_type()
        self._tokens = itertools.count(1)
        self._callbacks: Dict[int, Callable[[], None]] = {}

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> int:
        token = next(self._tokens)
        event = pygame.event.Event(self.event_type, token=token)
        millis = int(math.ceil(max(0.0, delay_ms)))
        try:
            if millis == 0:
                # set_timer treats 0 as "disable", so post straight away.
                pygame.event.post(event)
            else:
                pygame.time.set_timer(event, millis, 1)
        except pygame.error as exc:
            raise TimerFailure(str(exc)) from exc
        self._callbacks = {token: callback}
        return token

    def cancel(self, handle: int) -> None:
        if self._callbacks.pop(handle, None) is None:
            return
        try:
            pygame.time.set_timer(self.event_type, 0)
        except pygame.error:
            LOG.debug("Could not disarm pacing timer %s.", handle, exc_info=True)

    def dispatch(self, event: pygame.event.Event) -> bool:
        """Run the callback for ``event``; returns ``True`` if it was ours."""

        if event.type != self.event_type:
            return False
        callback = self._callbacks.pop(getattr(event, "token", -1), None)
        if callback is not None:
            callback()
        return True
