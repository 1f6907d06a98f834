"""Terminal use cases: read the printer's G-code history and send G-code lines."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from printlink.adapters.transport_router import TransportRouter
from printlink.domain.errors import UseCaseError
from printlink.domain.models import GCodeWindow, SendGCodeRequest
from printlink.domain.requests import RequestKind
from printlink.utils.futures import map_future

from .payloads import acknowledged, encode_json

log = logging.getLogger(__name__)


class GCodeHistoryReader:
    """Incrementally read the firmware's in-memory G-code history.

    The firmware only keeps the most recent batch of executed lines, so the
    reader must be polled regularly. It remembers the next line number to ask
    for and sends it in the ``Starting-Line`` header.
    """

    def __init__(self, router: TransportRouter, start_line: int = 0) -> None:
        if start_line < 0:
            raise UseCaseError("INVALID_LINE", "start_line must not be negative.")
        self.router = router
        self._next_line = start_line

    @property
    def next_line(self) -> int:
        return self._next_line

    def request(self) -> "Future[Optional[GCodeWindow]]":
        headers = {"Starting-Line": str(self._next_line)}
        return self.router.route_typed(
            RequestKind.LIST_GCODE_COMMANDS_IN_MEMORY,
            GCodeWindow.from_dict,
            headers=headers,
        )

    def accept(self, window: Optional[GCodeWindow]) -> List[str]:
        """Advance the cursor past ``window`` and return its lines."""
        if window is None:
            return []
        lines = window.lines()
        self._next_line = max(self._next_line, window.next_line())
        return lines

    def __call__(self) -> "Future[List[str]]":
        return map_future(self.request(), self.accept)


@dataclass
class SendGCode:
    router: TransportRouter

    def __call__(self, lines: Union[str, Iterable[str]]) -> "Future[Optional[bool]]":
        """Queue G-code lines on the printer.

        Raises:
            UseCaseError: ``EMPTY_GCODE`` when there is nothing to send.
        """
        text = lines if isinstance(lines, str) else "\n".join(lines)
        cleaned = "\n".join(line.strip() for line in text.splitlines() if line.strip())
        if not cleaned:
            raise UseCaseError("EMPTY_GCODE", "No G-code to send.")
        log.debug("Sending G-code: %s", cleaned.replace("\n", " | "))
        body = encode_json(SendGCodeRequest(commands=cleaned).to_dict())
        return acknowledged(self.router.route(RequestKind.SEND_GCODE_COMMANDS, body=body))


__all__ = ["GCodeHistoryReader", "SendGCode"]
