"""Controller that drives discovery from a single periodic tick.

Each tick resolves finished probes and routed sends, fires the scan timer
when due, and reports reachability changes to an optional listener (for
example a connection indicator).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from printlink.adapters.discovery_probe import DiscoveryProbe

from .polling_scheduler import PollingScheduler

CHANNEL = "connectivity"


def _noop(_: bool) -> None:
    """Default listener."""


class ConnectivityController:
    """Own the connectivity tick for one ``DiscoveryProbe``."""

    def __init__(
        self,
        *,
        probe: DiscoveryProbe,
        scheduler: PollingScheduler,
        tick_interval_ms: Optional[int] = None,
        on_reachability_changed: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.probe = probe
        self.scheduler = scheduler
        self.tick_interval_ms = tick_interval_ms or probe.settings.tick_interval_ms
        self.on_reachability_changed = on_reachability_changed or _noop
        self._last_reachable = probe.reachable()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._log.debug("Connectivity tick every %d ms", self.tick_interval_ms)
        self.scheduler.every(CHANNEL, self.tick_interval_ms, self.tick)

    def stop(self) -> None:
        self.scheduler.cancel(CHANNEL)
        self._running = False

    def tick(self) -> None:
        self.probe.tick()
        reachable = self.probe.reachable()
        if reachable != self._last_reachable:
            self._last_reachable = reachable
            if reachable:
                self._log.info("Printer reachable at %s", self.probe.address)
            else:
                self._log.info("Printer no longer reachable")
            self.on_reachability_changed(reachable)


__all__ = ["CHANNEL", "ConnectivityController"]
