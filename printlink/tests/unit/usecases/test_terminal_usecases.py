from __future__ import annotations

import json
from concurrent.futures import Future
from typing import Any, Dict, List

import pytest

from printlink.adapters.transport_router import TransportRouter
from printlink.domain.errors import UseCaseError
from printlink.domain.ports import TransportResponse
from printlink.domain.requests import RequestKind
from printlink.usecases.terminal import GCodeHistoryReader, SendGCode
from printlink.utils.futures import resolved


class _ScriptedTransport:
    def __init__(self, responses: List[TransportResponse]) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def reachable(self) -> bool:
        return True

    def send(self, kind, body=None, method=None, headers=None) -> Future:
        self.calls.append({"kind": kind, "body": body, "method": method, "headers": headers})
        return resolved(self.responses.pop(0))


def _window(first: int, commands: str) -> TransportResponse:
    return TransportResponse(200, json.dumps({"lineOfFirstCommand": first, "commands": commands}).encode())


def test_history_reader_advances_cursor_between_polls() -> None:
    transport = _ScriptedTransport([_window(0, "G28\nG1 X1\n"), _window(2, "M105\n")])
    reader = GCodeHistoryReader(TransportRouter([transport]))

    assert reader().result() == ["G28", "G1 X1"]
    assert reader.next_line == 2
    assert reader().result() == ["M105"]
    assert reader.next_line == 3

    assert [call["headers"] for call in transport.calls] == [{"Starting-Line": "0"}, {"Starting-Line": "2"}]
    assert transport.calls[0]["kind"] is RequestKind.LIST_GCODE_COMMANDS_IN_MEMORY


def test_history_reader_keeps_cursor_on_empty_or_stale_window() -> None:
    transport = _ScriptedTransport([_window(5, ""), _window(1, "G28\n")])
    reader = GCodeHistoryReader(TransportRouter([transport]), start_line=5)

    assert reader().result() == []
    assert reader().result() == ["G28"]
    assert reader.next_line == 5


def test_history_reader_offline_returns_no_lines() -> None:
    reader = GCodeHistoryReader(TransportRouter(), start_line=7)

    assert reader().result() == []
    assert reader.next_line == 7


def test_history_reader_rejects_negative_start() -> None:
    with pytest.raises(UseCaseError):
        GCodeHistoryReader(TransportRouter(), start_line=-1)


def test_send_gcode_joins_and_strips_lines() -> None:
    transport = _ScriptedTransport([TransportResponse(200)])

    ok = SendGCode(TransportRouter([transport]))(["G28", "  ", " G1 X10 Y10 "]).result()

    assert ok is True
    assert transport.calls[0]["kind"] is RequestKind.SEND_GCODE_COMMANDS
    assert json.loads(transport.calls[0]["body"]) == {"commands": "G28\nG1 X10 Y10"}


def test_send_gcode_accepts_a_single_string() -> None:
    transport = _ScriptedTransport([TransportResponse(500)])

    assert SendGCode(TransportRouter([transport]))("M104 S200\r\n").result() is False
    assert json.loads(transport.calls[0]["body"]) == {"commands": "M104 S200"}


@pytest.mark.parametrize("lines", ["", "\n \n", []])
def test_send_gcode_rejects_empty_input(lines) -> None:
    with pytest.raises(UseCaseError) as err:
        SendGCode(TransportRouter())(lines)

    assert err.value.code == "EMPTY_GCODE"
