from __future__ import annotations

import json
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

from .errors import DecodeError
from .requests import RequestKind


@dataclass(frozen=True)
class TransportResponse:
    """HTTP response as seen by the domain, free of ``requests`` types."""

    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            DecodeError: If the body is empty or not valid JSON.
        """
        if not self.body:
            raise DecodeError(f"empty response body (HTTP {self.status_code})")
        try:
            return json.loads(self.body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            snippet = self.body[:200].decode("utf-8", errors="replace")
            raise DecodeError(f"Invalid JSON response: {snippet}") from exc


# ---- Ports (Hexagonal boundaries) ----
class Transport(Protocol):
    """A way to reach the printer."""

    def reachable(self) -> bool: ...

    def send(
        self,
        kind: RequestKind,
        body: Optional[bytes] = None,
        method: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Future[TransportResponse]": ...


__all__ = ["Transport", "TransportResponse"]
