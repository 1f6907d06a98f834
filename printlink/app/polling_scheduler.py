"""Scheduler helper that owns the timers driving connectivity ticks.

The composition root passes ``after``/``after_cancel``-style callables into
this class (Tk's ``after`` in a GUI, ``sched.scheduler`` in the CLI) so timer
state lives in one place and can be cancelled safely on shutdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

ScheduleFn = Callable[[int, Callable[[], None]], Any]
CancelFn = Callable[[Any], None]

log = logging.getLogger(__name__)


@dataclass
class PollHandle:
    """Timer token associated with a single channel.

    Attributes:
        channel: Channel key (for example ``connectivity``).
        token: Token returned by the underlying scheduler.
        interval_ms: Repeat interval for periodic channels, else ``None``.
    """
    channel: str
    token: Any
    interval_ms: Optional[int] = None


class PollingScheduler:
    """Manage per-channel timers on top of an ``after``-style scheduler."""

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        """Store schedule/cancel functions and initialize handle registry.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, PollHandle] = {}

    def every(self, channel: str, interval_ms: int, callback: Callable[[], None]) -> None:
        """Run ``callback`` now-ish and then every ``interval_ms`` until cancelled.

        A callback that raises is logged and the channel keeps ticking.
        """
        interval = max(1, int(interval_ms))
        self.cancel(channel)

        def _fire() -> None:
            handle = self._handles.get(channel)
            if handle is None or handle.interval_ms is None:
                return
            try:
                callback()
            except Exception:
                log.exception("Tick on channel %r failed", channel)
            if self._handles.get(channel) is handle:
                handle.token = self._schedule(interval, _fire)

        token = self._schedule(1, _fire)
        self._handles[channel] = PollHandle(channel=channel, token=token, interval_ms=interval)

    def cancel(self, channel: str) -> None:
        handle = self._handles.pop(channel, None)
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except ValueError:
            # already fired; sched raises ValueError for unknown events
            pass


__all__ = ["PollHandle", "PollingScheduler"]
