from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional

from printlink.adapters.transport_router import TransportRouter
from printlink.domain.models import PrintStatus, PrinterStateSnapshot
from printlink.domain.requests import RequestKind

from .payloads import acknowledged


@dataclass
class GetPrintStatus:
    router: TransportRouter

    def __call__(self) -> "Future[Optional[PrintStatus]]":
        return self.router.route_typed(RequestKind.PRINT_STATUS, PrintStatus.from_dict)


@dataclass
class TogglePause:
    """Pause a running print, or resume a paused one (the firmware toggles)."""

    router: TransportRouter

    def __call__(self) -> "Future[Optional[bool]]":
        return acknowledged(self.router.route(RequestKind.PAUSE_OR_RESUME))


@dataclass
class GetPrinterState:
    router: TransportRouter

    def __call__(self) -> "Future[Optional[PrinterStateSnapshot]]":
        return self.router.route_typed(RequestKind.PRINTER_STATE, PrinterStateSnapshot.from_dict)


__all__ = ["GetPrintStatus", "GetPrinterState", "TogglePause"]
