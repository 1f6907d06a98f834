from __future__ import annotations

import json
from concurrent.futures import Future
from typing import Any, Dict, List, Optional

import pytest

from printlink.adapters.storage_local import SettingsStore
from printlink.app import main as cli
from printlink.domain.errors import TransportTimeout
from printlink.domain.ports import TransportResponse
from printlink.domain.requests import RequestKind
from printlink.domain.settings import ConnectivitySettings, ResolutionPolicy
from printlink.utils.futures import resolved


class _ProbeStub:
    """Stands in for ``DiscoveryProbe``; finds the printer after a few ticks."""

    def __init__(
        self,
        settings: ConnectivitySettings,
        *,
        ticks_until_found: int = 2,
        responses: Optional[Dict[RequestKind, Optional[TransportResponse]]] = None,
    ) -> None:
        self.settings = settings
        self.ticks_until_found = ticks_until_found
        self.responses = dict(responses or {})
        self.ticks = 0
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def reachable(self) -> bool:
        return self.ticks >= self.ticks_until_found

    def tick(self) -> None:
        self.ticks += 1

    @property
    def locked_octet(self) -> Optional[int]:
        return 77 if self.reachable() else None

    @property
    def address(self) -> Optional[str]:
        return None if self.locked_octet is None else self.settings.host_for(77)

    def send(self, kind, body=None, method=None, headers=None) -> Future:
        self.calls.append({"kind": kind, "body": body, "headers": headers})
        response = self.responses.get(kind, TransportResponse(200, b""))
        # None means the printer never answers
        return Future() if response is None else resolved(response)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_runtime(monkeypatch):
    """Patch ``Runtime.build`` so ``main`` runs against a probe stub."""
    created: Dict[str, _ProbeStub] = {}
    options: Dict[str, Any] = {}
    real_build = cli.Runtime.build

    def _build(settings, probe=None):
        stub = _ProbeStub(settings.apply_dict({"tick_interval_ms": 1}), **options)
        created["probe"] = stub
        return real_build(stub.settings, probe=stub)

    monkeypatch.setattr(cli.Runtime, "build", _build)
    return created, options


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_parser_reads_global_overrides() -> None:
    args = cli.build_parser().parse_args(
        ["--subnet", "10.0.0", "--first", "5", "--resolution", "first_completed", "move", "x", "-2.5"]
    )

    assert args.subnet_prefix == "10.0.0"
    assert args.first_octet == 5
    assert args.command == "move"
    assert (args.axis, args.direction) == ("x", -2.5)


def test_resolve_settings_layers_overrides_on_stored_values(tmp_path) -> None:
    store = SettingsStore(str(tmp_path))
    store.save_settings(ConnectivitySettings(subnet_prefix="10.0.0", port=8443))
    args = cli.build_parser().parse_args(["--scan-interval", "3", "--debug", "discover"])

    settings = cli.resolve_settings(args, store)

    assert settings.subnet_prefix == "10.0.0"
    assert settings.port == 8443
    assert settings.scan_interval_s == 3.0
    assert settings.debug_logging is True
    assert settings.resolution is ResolutionPolicy.DESCENDING


def test_runtime_pumps_ticks_until_printer_found() -> None:
    settings = ConnectivitySettings(tick_interval_ms=1)
    probe = _ProbeStub(settings, ticks_until_found=3)
    rt = cli.Runtime.build(settings, probe=probe)
    try:
        assert rt.wait_for_printer(2.0) is True
        assert probe.ticks >= 3
        assert rt.router.reachable() is True
    finally:
        rt.close()

    assert probe.closed is True
    assert rt.controller.running is False


def test_runtime_wait_times_out() -> None:
    settings = ConnectivitySettings(tick_interval_ms=1)
    rt = cli.Runtime.build(settings, probe=_ProbeStub(settings, ticks_until_found=10**9))
    try:
        assert rt.wait_for_printer(0.05) is False
    finally:
        rt.close()


def test_main_discover_prints_address(tmp_path, capsys, fake_runtime) -> None:
    code = cli.main(["--settings-dir", str(tmp_path), "--timeout", "2", "discover"])

    assert code == cli.EXIT_OK
    out = json.loads(capsys.readouterr().out)
    assert out == {"address": "192.168.1.77", "base_url": "https://192.168.1.77"}
    created, _ = fake_runtime
    assert created["probe"].closed is True


def test_main_lists_files(tmp_path, capsys, fake_runtime) -> None:
    _, options = fake_runtime
    body = json.dumps({"Files": [{"Name": "benchy", "SizeInBytes": 10, "ID": {"FileID": 1}}]}).encode()
    options["responses"] = {RequestKind.LIST_FILES: TransportResponse(200, body)}

    code = cli.main(["--settings-dir", str(tmp_path), "--timeout", "2", "files"])

    assert code == cli.EXIT_OK
    assert json.loads(capsys.readouterr().out)["Files"][0]["Name"] == "benchy"


def test_main_reports_rejected_command(tmp_path, capsys, fake_runtime) -> None:
    _, options = fake_runtime
    options["responses"] = {RequestKind.PRINT_FILE: TransportResponse(409)}

    code = cli.main(["--settings-dir", str(tmp_path), "--timeout", "2", "print", "4"])

    assert code == cli.EXIT_FAILED
    assert json.loads(capsys.readouterr().out) == {"ok": False}


def test_main_use_case_error_exits_failed(tmp_path, capsys, fake_runtime) -> None:
    code = cli.main(["--settings-dir", str(tmp_path), "--timeout", "2", "upload", str(tmp_path / "none.gcode")])

    assert code == cli.EXIT_FAILED
    assert "FILE_NOT_FOUND" in capsys.readouterr().err


def test_main_unreachable_printer(tmp_path, capsys, fake_runtime) -> None:
    _, options = fake_runtime
    options["ticks_until_found"] = 10**9

    code = cli.main(["--settings-dir", str(tmp_path), "--timeout", "0.05", "status"])

    assert code == cli.EXIT_UNREACHABLE
    err = capsys.readouterr().err
    assert err.startswith("DEVICE_UNREACHABLE:")
    assert "Printer not found" in err


def test_main_save_persists_overrides(tmp_path, fake_runtime) -> None:
    cli.main(["--settings-dir", str(tmp_path), "--timeout", "2", "--subnet", "10.9.8", "--save", "discover"])

    assert SettingsStore(str(tmp_path)).load_settings().subnet_prefix == "10.9.8"


def test_main_rejects_invalid_settings(tmp_path, capsys) -> None:
    code = cli.main(["--settings-dir", str(tmp_path), "--first", "300", "discover"])

    assert code == cli.EXIT_FAILED
    assert "Invalid settings" in capsys.readouterr().err


def test_main_request_timeout_maps_to_error_code(tmp_path, capsys, fake_runtime) -> None:
    _, options = fake_runtime
    options["responses"] = {RequestKind.PRINT_STATUS: None}

    code = cli.main(["--settings-dir", str(tmp_path), "--timeout", "0.2", "status"])

    assert code == cli.EXIT_UNREACHABLE
    assert capsys.readouterr().err.startswith("REQUEST_TIMEOUT:")


def test_await_result_raises_transport_timeout() -> None:
    settings = ConnectivitySettings(tick_interval_ms=1)
    rt = cli.Runtime.build(settings, probe=_ProbeStub(settings))
    pending: Future = Future()
    try:
        with pytest.raises(TransportTimeout):
            rt.await_result(pending, 0.02)
    finally:
        rt.close()

    assert pending.cancelled()
