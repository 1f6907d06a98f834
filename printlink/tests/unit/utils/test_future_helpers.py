from __future__ import annotations

from concurrent.futures import Future

import pytest

from printlink.utils.futures import failed, map_future, resolved


def test_resolved_and_failed_are_already_done() -> None:
    assert resolved(3).result() == 3
    assert isinstance(failed(ValueError("x")).exception(), ValueError)


def test_map_future_applies_function_on_completion() -> None:
    source: Future = Future()
    mapped = map_future(source, lambda value: value * 2)

    assert not mapped.done()
    source.set_result(21)
    assert mapped.result() == 42


def test_map_future_propagates_errors() -> None:
    assert isinstance(map_future(failed(KeyError("k")), str).exception(), KeyError)

    def _bad(_: int) -> int:
        raise ZeroDivisionError

    with pytest.raises(ZeroDivisionError):
        map_future(resolved(1), _bad).result()


def test_map_future_propagates_cancellation() -> None:
    source: Future = Future()
    mapped = map_future(source, str)

    source.cancel()

    assert mapped.cancelled()
