# printlink/app/main.py
# Usage examples:
#   printlink discover
#   printlink --subnet 10.0.0 --scan-interval 2 files
#   printlink status
#   printlink gcode "G28" "G1 X10 Y10"
from __future__ import annotations

import argparse
import json
import logging
import sched
import sys
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..adapters.discovery_probe import DiscoveryProbe
from ..adapters.storage_local import SettingsStore
from ..adapters.transport_router import TransportRouter
from ..domain.errors import (
    TransportError,
    TransportTimeout,
    TransportUnreachable,
    UseCaseError,
    map_transport_error,
)
from ..domain.settings import ConnectivitySettings, ResolutionPolicy
from ..usecases.files import DeleteFile, ListFiles, PrintFile, UploadFile
from ..usecases.motion import MoveAxis
from ..usecases.print_status import GetPrintStatus, GetPrinterState, TogglePause
from ..usecases.terminal import GCodeHistoryReader, SendGCode
from ..utils import logging as logging_utils
from .connectivity_controller import ConnectivityController
from .polling_scheduler import PollingScheduler

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNREACHABLE = 2


@dataclass
class Runtime:
    """Composition root: wire probe, router and tick loop on a ``sched`` scheduler."""

    settings: ConnectivitySettings
    loop: sched.scheduler
    probe: DiscoveryProbe
    router: TransportRouter
    controller: ConnectivityController
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def build(cls, settings: ConnectivitySettings, *, probe: Optional[DiscoveryProbe] = None) -> "Runtime":
        loop = sched.scheduler(time.monotonic, time.sleep)
        scheduler = PollingScheduler(
            schedule=lambda delay_ms, cb: loop.enter(delay_ms / 1000.0, 0, cb),
            cancel=loop.cancel,
        )
        probe = probe or DiscoveryProbe(settings)
        router = TransportRouter()
        router.register(probe)
        controller = ConnectivityController(probe=probe, scheduler=scheduler)
        return cls(settings=settings, loop=loop, probe=probe, router=router, controller=controller)

    def pump_until(self, predicate: Callable[[], bool], timeout_s: float) -> bool:
        """Run scheduled ticks until ``predicate()`` holds or ``timeout_s`` passes."""
        if not self.controller.running:
            self.controller.start()
        deadline = self.clock() + timeout_s
        while not predicate():
            remaining = deadline - self.clock()
            if remaining <= 0:
                return predicate()
            delay = self.loop.run(blocking=False)
            idle = self.settings.tick_interval_ms / 1000.0
            self.sleep(max(0.0, min(remaining, delay if delay is not None else idle)))
        return True

    def wait_for_printer(self, timeout_s: float) -> bool:
        return self.pump_until(self.probe.reachable, timeout_s)

    def await_result(self, fut: "Future[Any]", timeout_s: float) -> Any:
        """Tick until ``fut`` resolves.

        Raises:
            TransportTimeout: If ``fut`` is still pending after ``timeout_s``.
        """
        # Keep ticking while waiting so failed sends are accounted for.
        if not self.pump_until(fut.done, timeout_s):
            fut.cancel()
            raise TransportTimeout(f"no answer within {timeout_s:g}s")
        return fut.result()

    def close(self) -> None:
        self.controller.stop()
        self.probe.close()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
def _ack(result: Optional[bool]) -> Optional[Dict[str, Any]]:
    return None if result is None else {"ok": bool(result)}


def _to_dict(result: Any) -> Any:
    return None if result is None else result.to_dict()


def _run_command(args: argparse.Namespace, rt: Runtime) -> Any:
    router = rt.router
    cmd = args.command
    if cmd == "discover":
        return {"address": rt.probe.address, "base_url": rt.settings.base_url_for(rt.probe.locked_octet)}
    if cmd == "files":
        return _to_dict(rt.await_result(ListFiles(router)(), args.timeout))
    if cmd == "status":
        status = rt.await_result(GetPrintStatus(router)(), args.timeout)
        if status is None:
            return None
        out = status.to_dict()
        out.update({"remainingSeconds": status.remaining_seconds, "progressPct": status.progress_pct})
        return out
    if cmd == "state":
        return _to_dict(rt.await_result(GetPrinterState(router)(), args.timeout))
    if cmd == "pause":
        return _ack(rt.await_result(TogglePause(router)(), args.timeout))
    if cmd == "print":
        return _ack(rt.await_result(PrintFile(router)(args.file_id), args.timeout))
    if cmd == "delete":
        return _ack(rt.await_result(DeleteFile(router)(args.file_id), args.timeout))
    if cmd == "upload":
        return _ack(rt.await_result(UploadFile(router)(args.path), args.timeout))
    if cmd == "gcode":
        return _ack(rt.await_result(SendGCode(router)(args.lines), args.timeout))
    if cmd == "history":
        reader = GCodeHistoryReader(router, start_line=args.start_line)
        fut = reader.request()
        window = rt.await_result(fut, args.timeout)
        if window is None:
            return None
        return {"lines": reader.accept(window), "nextLine": reader.next_line}
    if cmd == "move":
        return _ack(rt.await_result(MoveAxis(router)(args.axis, args.direction), args.timeout))
    raise UseCaseError("UNKNOWN_COMMAND", f"Unknown command: {cmd}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="printlink", description="Find the printer on the LAN and talk to it")
    ap.add_argument("--settings-dir", default=".", help="Directory holding user_settings.json")
    ap.add_argument("--subnet", dest="subnet_prefix", help="First three octets to scan, e.g. 192.168.1")
    ap.add_argument("--first", dest="first_octet", type=int, help="First host octet to probe")
    ap.add_argument("--last", dest="last_octet", type=int, help="Last host octet to probe")
    ap.add_argument("--port", type=int, help="HTTPS port of the printer")
    ap.add_argument("--scan-interval", dest="scan_interval_s", type=float, help="Seconds between campaigns")
    ap.add_argument("--probe-timeout", dest="probe_timeout_s", type=float, help="Per-probe timeout (s)")
    ap.add_argument("--resolution", choices=[p.value for p in ResolutionPolicy],
                    help="Which successful probe wins a campaign")
    ap.add_argument("--verify-tls", dest="verify_tls", action="store_true", default=None,
                    help="Verify the printer's TLS certificate")
    ap.add_argument("--timeout", type=float, default=30.0, help="Give up after this many seconds")
    ap.add_argument("--save", action="store_true", help="Persist the effective settings")
    ap.add_argument("--debug", action="store_true", help="Enable DEBUG logging")

    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("discover", help="Scan until the printer answers and print its address")
    sub.add_parser("files", help="List files stored on the printer")
    sub.add_parser("status", help="Show print progress")
    sub.add_parser("state", help="Show hotend and bed temperatures")
    sub.add_parser("pause", help="Pause or resume the current print")
    p = sub.add_parser("print", help="Print a stored file")
    p.add_argument("file_id", type=int)
    p = sub.add_parser("delete", help="Delete a stored file")
    p.add_argument("file_id", type=int)
    p = sub.add_parser("upload", help="Upload a G-code file")
    p.add_argument("path")
    p = sub.add_parser("gcode", help="Send G-code lines")
    p.add_argument("lines", nargs="+")
    p = sub.add_parser("history", help="Show executed G-code lines")
    p.add_argument("--start-line", type=int, default=0)
    p = sub.add_parser("move", help="Jog one axis")
    p.add_argument("axis", choices=["X", "Y", "Z", "x", "y", "z"])
    p.add_argument("direction", type=float)
    return ap


_OVERRIDE_KEYS = (
    "subnet_prefix",
    "first_octet",
    "last_octet",
    "port",
    "scan_interval_s",
    "probe_timeout_s",
    "resolution",
    "verify_tls",
)


def resolve_settings(args: argparse.Namespace, store: SettingsStore) -> ConnectivitySettings:
    """Persisted settings with command-line overrides applied on top."""
    settings = store.load_settings()
    overrides = {key: getattr(args, key) for key in _OVERRIDE_KEYS if getattr(args, key, None) is not None}
    if args.debug:
        overrides["debug_logging"] = True
    if overrides:
        settings = settings.apply_dict(overrides)
    return settings


def _report(exc: Exception) -> int:
    """Print the stable error code for ``exc`` and pick the exit status."""
    err = map_transport_error(exc)
    print(f"{err.code}: {err.message}", file=sys.stderr)
    return EXIT_FAILED if isinstance(exc, UseCaseError) else EXIT_UNREACHABLE


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging_utils.configure_root()
    args = build_parser().parse_args(argv)

    store = SettingsStore(args.settings_dir)
    try:
        settings = resolve_settings(args, store)
    except ValueError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        return EXIT_FAILED
    logging_utils.apply_preferences(settings.debug_logging)
    if args.save:
        store.save_settings(settings)

    rt = Runtime.build(settings)
    try:
        if not rt.wait_for_printer(args.timeout):
            return _report(TransportUnreachable(f"no answer from {settings.subnet_prefix}.0/24"))
        try:
            result = _run_command(args, rt)
        except (UseCaseError, TransportError) as exc:
            return _report(exc)
        if result is None:
            # the router has already logged the cause
            print("NO_ANSWER: Printer did not answer.", file=sys.stderr)
            return EXIT_UNREACHABLE
        print(json.dumps(result, indent=2))
        if isinstance(result, dict) and result.get("ok") is False:
            return EXIT_FAILED
        return EXIT_OK
    finally:
        rt.close()


__all__: List[str] = ["Runtime", "build_parser", "main", "resolve_settings"]


if __name__ == "__main__":
    sys.exit(main())
