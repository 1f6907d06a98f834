"""Local-network transport that finds the printer by probing a /24 subnet.

This adapter implements the ``Transport`` port. A discovery campaign fans out
one ``HEAD /find_printer`` probe per candidate host at once and the first
probe to succeed (per ``ResolutionPolicy``) locks the printer address. Routed
requests are then sent straight to that address.

Dependencies:
    - ``requests`` (through ``HttpsSession``) for probes and routed requests.
    - ``concurrent.futures.ThreadPoolExecutor`` for the concurrent fan-out.

Call context:
    - ``tick()`` is driven by ``ConnectivityController`` from a single
      scheduler thread. Worker threads only perform I/O and complete futures;
      every state transition happens inside ``tick``/``poll``.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from printlink.domain.errors import (
    TransportError,
    TransportNetworkError,
    TransportTimeout,
    TransportUnreachable,
)
from printlink.domain.ports import TransportResponse
from printlink.domain.requests import RequestKind, default_method, path_for
from printlink.domain.settings import ConnectivitySettings, ResolutionPolicy
from printlink.utils.futures import failed

from .http_client import HttpConfig, HttpsSession

log = logging.getLogger(__name__)

DISCOVERY_PATH = "/find_printer"

ProbeFn = Callable[[str, float], bool]
Clock = Callable[[], float]


class ProbeState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    LOCKED = "locked"


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of one discovery probe, produced on a worker thread."""

    ok: bool
    completed_at: float
    error: Optional[str] = None


@dataclass
class PendingProbe:
    candidate: int
    started_at: float
    future: "Future[ProbeOutcome]"


def make_http_probe(verify_tls: bool | str = False) -> ProbeFn:
    """Build the default probe: ``HEAD`` the URL; any HTTP answer counts.

    A non-2xx status still proves the host served the request. Timeouts and
    connection errors propagate as ``TransportError``.
    """

    def _probe(url: str, timeout_s: float) -> bool:
        http = HttpsSession(HttpConfig(request_timeout_s=timeout_s, verify_tls=verify_tls))
        try:
            resp = http.head(url, timeout=timeout_s)
            log.debug("%s answered HTTP %d", url, resp.status_code)
            return True
        finally:
            http.close()

    return _probe


class DiscoveryProbe:
    """Discover the printer on the local subnet and forward requests to it."""

    def __init__(
        self,
        settings: Optional[ConnectivitySettings] = None,
        *,
        probe: Optional[ProbeFn] = None,
        http: Optional[HttpsSession] = None,
        executor: Optional[Executor] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        """Create an idle probe; nothing is sent until the first ``tick``.

        Args:
            settings: Subnet, range, interval and timeout configuration.
            probe: Callable ``(url, timeout_s) -> bool`` used per candidate.
            http: Session used for routed requests once locked.
            executor: Executor running probes and routed requests. Sized to the
                candidate count by default so every probe starts immediately.
            clock: Monotonic clock, injectable for tests.
        """
        self.settings = settings or ConnectivitySettings()
        self._probe = probe or make_http_probe(self.settings.verify_tls)
        self._http = http or HttpsSession(
            HttpConfig(
                request_timeout_s=self.settings.request_timeout_s,
                verify_tls=self.settings.verify_tls,
            )
        )
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.candidate_count + 4,
            thread_name_prefix="printlink-probe",
        )
        self._clock = clock

        self._address: Optional[int] = None
        self._pending: Dict[int, PendingProbe] = {}
        self._abandon: Optional[threading.Event] = None
        self._sends: List[Tuple[int, Future]] = []
        self._consecutive_failures = 0
        self._last_timer_at: Optional[float] = None
        self._campaigns = 0
        self._closed = False

    # ------------------------------------------------------------------
    # Transport port
    # ------------------------------------------------------------------
    def reachable(self) -> bool:
        return self._address is not None

    def send(
        self,
        kind: RequestKind,
        body: Optional[bytes] = None,
        method: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Future[TransportResponse]":
        """Send ``kind`` to the locked printer address.

        Returns an already-failed future with ``TransportUnreachable`` when no
        address is locked, instead of waiting for discovery.
        """
        path = path_for(kind)
        octet = self._address
        if octet is None or self._closed:
            return failed(TransportUnreachable("printer address not resolved", context=path))
        url = f"{self.settings.base_url_for(octet)}/{path}"
        verb = (method or default_method(kind)).upper()
        fut = self._executor.submit(self._http.request, verb, url, data=body, headers=headers)
        self._sends.append((octet, fut))
        return fut

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> ProbeState:
        if self._address is not None:
            return ProbeState.LOCKED
        if self._pending:
            return ProbeState.SCANNING
        return ProbeState.IDLE

    @property
    def address(self) -> Optional[str]:
        """Locked printer host (for example ``192.168.1.42``) or ``None``."""
        if self._address is None:
            return None
        return self.settings.host_for(self._address)

    @property
    def locked_octet(self) -> Optional[int]:
        return self._address

    @property
    def pending_candidates(self) -> List[int]:
        return sorted(self._pending)

    @property
    def campaigns_started(self) -> int:
        return self._campaigns

    # ------------------------------------------------------------------
    # Tick entry points
    # ------------------------------------------------------------------
    def tick(self) -> None:
        """Resolve finished probes, then fire the scan timer when it is due."""
        self.poll()
        now = self._clock()
        if self._last_timer_at is None or now - self._last_timer_at >= self.settings.scan_interval_s:
            self._last_timer_at = now
            self.scan_if_needed()

    def scan_if_needed(self) -> bool:
        """Start a campaign unless locked or one is already in flight.

        Returns:
            ``True`` when a new campaign was launched.
        """
        if self._closed or self._address is not None or self._pending:
            return False
        self._start_campaign()
        return True

    def poll(self) -> None:
        """Inspect pending probes and routed sends once."""
        self._drain_sends()
        if not self._pending:
            return

        # Snapshot completions so a probe finishing mid-pass is seen next tick.
        completed: Dict[int, Optional[ProbeOutcome]] = {}
        now = self._clock()
        deadline_s = self.settings.effective_probe_timeout_s
        for octet, pending in self._pending.items():
            if pending.future.done():
                completed[octet] = self._outcome(pending)
            elif now - pending.started_at >= deadline_s:
                # requests times connect and each read separately; cap the whole probe
                pending.future.cancel()
                log.debug("probe %d exceeded %.2fs", octet, deadline_s)
                completed[octet] = None
        if not completed:
            return

        winner = self._pick_winner(completed)
        if winner is not None:
            self._lock(winner)
            return

        for octet in completed:
            del self._pending[octet]
        if not self._pending:
            self._abandon_pending()
            log.info(
                "No printer answered on %s.%d-%d; retrying next interval",
                self.settings.subnet_prefix,
                self.settings.first_octet,
                self.settings.last_octet,
            )

    def invalidate(self, reason: str = "requested") -> None:
        """Forget the locked address so the next tick starts a fresh campaign."""
        if self._address is None:
            return
        log.info("Dropping printer address %s (%s)", self.address, reason)
        self._address = None
        self._consecutive_failures = 0
        self._last_timer_at = None

    def close(self) -> None:
        """Abandon outstanding probes and release the executor and session."""
        if self._closed:
            return
        self._closed = True
        self._abandon_pending()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._http.close()

    def __enter__(self) -> "DiscoveryProbe":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _start_campaign(self) -> None:
        cfg = self.settings
        timeout_s = cfg.effective_probe_timeout_s
        abandon = threading.Event()
        started_at = self._clock()
        self._campaigns += 1
        self._abandon = abandon
        log.info(
            "Scanning %s.%d-%d for printer (campaign %d, timeout %.1fs)",
            cfg.subnet_prefix,
            cfg.first_octet,
            cfg.last_octet,
            self._campaigns,
            timeout_s,
        )
        for octet in range(cfg.first_octet, cfg.last_octet + 1):
            url = f"{cfg.base_url_for(octet)}{DISCOVERY_PATH}"
            fut = self._executor.submit(self._run_probe, url, timeout_s, abandon)
            self._pending[octet] = PendingProbe(candidate=octet, started_at=started_at, future=fut)

    def _run_probe(self, url: str, timeout_s: float, abandon: threading.Event) -> ProbeOutcome:
        # Runs on a worker thread: touch nothing but the arguments.
        if abandon.is_set():
            return ProbeOutcome(ok=False, completed_at=self._clock(), error="abandoned")
        try:
            ok = self._probe(url, timeout_s)
        except TransportError as exc:
            return ProbeOutcome(ok=False, completed_at=self._clock(), error=str(exc))
        return ProbeOutcome(ok=bool(ok), completed_at=self._clock(), error=None if ok else "rejected")

    @staticmethod
    def _outcome(pending: PendingProbe) -> Optional[ProbeOutcome]:
        fut = pending.future
        if fut.cancelled():
            return None
        exc = fut.exception()
        if exc is not None:
            log.debug("probe %d raised %r", pending.candidate, exc)
            return None
        outcome = fut.result()
        if not outcome.ok:
            log.debug("probe %d failed: %s", pending.candidate, outcome.error)
        return outcome

    def _pick_winner(self, completed: Mapping[int, Optional[ProbeOutcome]]) -> Optional[int]:
        successes = {
            octet: outcome
            for octet, outcome in completed.items()
            if outcome is not None and outcome.ok
        }
        if not successes:
            return None
        if self.settings.resolution is ResolutionPolicy.FIRST_COMPLETED:
            # Equal timestamps fall back to the higher octet so reruns agree.
            return min(successes, key=lambda octet: (successes[octet].completed_at, -octet))
        return max(successes)

    def _lock(self, octet: int) -> None:
        self._address = octet
        self._consecutive_failures = 0
        self._abandon_pending()
        log.info("Printer found at %s", self.settings.host_for(octet))

    def _abandon_pending(self) -> None:
        if self._abandon is not None:
            self._abandon.set()
            self._abandon = None
        for pending in self._pending.values():
            pending.future.cancel()
        self._pending.clear()

    def _drain_sends(self) -> None:
        if not self._sends:
            return
        still_running: List[Tuple[int, Future]] = []
        for octet, fut in self._sends:
            if not fut.done():
                still_running.append((octet, fut))
                continue
            if fut.cancelled() or octet != self._address:
                continue
            exc = fut.exception()
            if isinstance(exc, (TransportTimeout, TransportNetworkError)):
                self._consecutive_failures += 1
            elif exc is None:
                self._consecutive_failures = 0
        self._sends = still_running

        threshold = self.settings.failure_threshold
        if self._address is not None and self._consecutive_failures >= threshold:
            self.invalidate(f"{self._consecutive_failures} consecutive request failures")


__all__ = [
    "DISCOVERY_PATH",
    "DiscoveryProbe",
    "PendingProbe",
    "ProbeOutcome",
    "ProbeState",
    "make_http_probe",
]
