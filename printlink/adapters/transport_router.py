"""Route semantic requests through the first reachable transport.

Callers never see transport errors from here: an unreachable printer, a
timeout or a malformed body all resolve to ``None`` so the UI layer can show
a disconnected state instead of an error dialog.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, TypeVar

from printlink.domain.errors import DecodeError, TransportError, TransportUnreachable
from printlink.domain.ports import Transport, TransportResponse
from printlink.domain.requests import RequestKind, path_for
from printlink.utils.futures import resolved

log = logging.getLogger(__name__)

T = TypeVar("T")


class TransportRouter:
    """Ordered set of transports; registration order is priority."""

    def __init__(self, transports: Iterable[Transport] = ()) -> None:
        self._transports: List[Transport] = list(transports)

    def register(self, transport: Transport) -> None:
        """Append ``transport`` with the lowest priority so far.

        The router keeps a reference only; closing transports stays with
        whoever created them.
        """
        self._transports.append(transport)

    @property
    def transports(self) -> Tuple[Transport, ...]:
        return tuple(self._transports)

    def reachable(self) -> bool:
        return self.select() is not None

    def select(self) -> Optional[Transport]:
        for transport in self._transports:
            if transport.reachable():
                return transport
        return None

    def route(
        self,
        kind: RequestKind,
        body: Optional[bytes] = None,
        method: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Future[Optional[TransportResponse]]":
        """Send ``kind`` through the first reachable transport.

        Returns:
            Future resolving to the response, or ``None`` when no transport is
            reachable or the send failed at the transport level.
        """
        transport = self.select()
        if transport is None:
            log.debug("%s: no reachable transport", path_for(kind))
            return resolved(None)
        try:
            inner = transport.send(kind, body=body, method=method, headers=headers)
        except TransportError as exc:
            _log_transport_error(kind, exc)
            return resolved(None)

        out: Future = Future()

        def _done(fut: "Future[TransportResponse]") -> None:
            if fut.cancelled():
                out.set_result(None)
                return
            exc = fut.exception()
            if exc is None:
                out.set_result(fut.result())
            elif isinstance(exc, TransportError):
                _log_transport_error(kind, exc)
                out.set_result(None)
            else:
                out.set_exception(exc)

        inner.add_done_callback(_done)
        return out

    def route_typed(
        self,
        kind: RequestKind,
        decode: Callable[[Any], T],
        body: Optional[bytes] = None,
        method: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Future[Optional[T]]":
        """Like ``route`` but JSON-decode a 2xx body through ``decode``.

        ``decode`` receives the parsed JSON value (usually a model's
        ``from_dict``). Non-2xx statuses and ``DecodeError`` resolve to ``None``.
        """
        out: Future = Future()

        def _done(fut: "Future[Optional[TransportResponse]]") -> None:
            if fut.cancelled():
                out.set_result(None)
                return
            exc = fut.exception()
            if exc is not None:
                out.set_exception(exc)
                return
            resp = fut.result()
            if resp is None:
                out.set_result(None)
                return
            if not resp.ok:
                log.warning("%s: HTTP %d", path_for(kind), resp.status_code)
                out.set_result(None)
                return
            try:
                out.set_result(decode(resp.json()))
            except DecodeError as err:
                log.warning("%s: %s", path_for(kind), err)
                out.set_result(None)
            except Exception as err:
                out.set_exception(err)

        self.route(kind, body=body, method=method, headers=headers).add_done_callback(_done)
        return out


def _log_transport_error(kind: RequestKind, exc: TransportError) -> None:
    # Unreachable is the normal state while discovery runs.
    if isinstance(exc, TransportUnreachable):
        log.debug("%s: %s", path_for(kind), exc)
    else:
        log.warning("%s failed: %s", path_for(kind), exc)


__all__ = ["TransportRouter"]
