"""Small helpers for composing ``concurrent.futures.Future`` objects."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Callable, TypeVar

T = TypeVar("T")
U = TypeVar("U")


def resolved(value: T) -> "Future[T]":
    """Return a future that already holds ``value``."""
    fut: Future = Future()
    fut.set_result(value)
    return fut


def failed(exc: BaseException) -> "Future":
    """Return a future that already holds ``exc``."""
    fut: Future = Future()
    fut.set_exception(exc)
    return fut


def map_future(source: "Future[T]", fn: Callable[[T], U]) -> "Future[U]":
    """Return a future resolving to ``fn(source.result())``.

    Exceptions raised by ``source`` or ``fn`` propagate into the returned
    future. ``fn`` runs on whichever thread completes ``source``.
    """
    out: Future = Future()

    def _done(fut: "Future[T]") -> None:
        if fut.cancelled():
            out.cancel()
            return
        exc = fut.exception()
        if exc is not None:
            out.set_exception(exc)
            return
        try:
            out.set_result(fn(fut.result()))
        except Exception as err:
            out.set_exception(err)

    source.add_done_callback(_done)
    return out


__all__ = ["failed", "map_future", "resolved"]
