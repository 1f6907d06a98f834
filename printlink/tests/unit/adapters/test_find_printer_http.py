from __future__ import annotations

import time
from typing import Any, Dict, List

import pytest
import requests
from requests import exceptions as req_exc

from printlink.adapters.discovery_probe import DiscoveryProbe, make_http_probe
from printlink.domain.errors import TransportNetworkError, TransportTimeout
from printlink.domain.settings import ConnectivitySettings


class _Response:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        self.content = b""
        self.headers: Dict[str, str] = {}


class _SessionPatch:
    """Replaces ``requests.Session`` I/O; answers are keyed by URL."""

    def __init__(self, answers: Dict[str, Any], default: Any = None) -> None:
        self.answers = answers
        self.default = default if default is not None else req_exc.ConnectionError("refused")
        self.calls: List[Dict[str, Any]] = []
        self.closed = 0

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        answer = self.answers.get(url, self.default)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def patched_session(monkeypatch):
    def _install(answers: Dict[str, Any], default: Any = None) -> _SessionPatch:
        patch = _SessionPatch(answers, default)
        monkeypatch.setattr(requests.Session, "request", patch.request)
        monkeypatch.setattr(requests.Session, "close", patch.close)
        return patch

    return _install


URL = "https://192.168.1.9/find_printer"


@pytest.mark.parametrize("status", [200, 204, 404, 500])
def test_any_http_answer_counts_as_found(patched_session, status: int) -> None:
    patch = patched_session({URL: _Response(status)})

    assert make_http_probe()(URL, 0.75) is True

    call = patch.calls[0]
    assert call["method"] == "HEAD"
    assert call["timeout"] == 0.75
    assert call["verify"] is False
    assert patch.closed == 1


def test_timeout_raises_and_closes_session(patched_session) -> None:
    patch = patched_session({URL: req_exc.ConnectTimeout("no route")})

    with pytest.raises(TransportTimeout):
        make_http_probe()(URL, 0.5)

    assert len(patch.calls) == 1
    assert patch.closed == 1


def test_connection_error_raises_network_error(patched_session) -> None:
    patch = patched_session({URL: req_exc.ConnectionError("refused")})

    with pytest.raises(TransportNetworkError):
        make_http_probe(verify_tls="/etc/printer-ca.pem")(URL, 0.5)

    assert patch.calls[0]["verify"] == "/etc/printer-ca.pem"
    assert patch.closed == 1


def test_campaign_locks_host_that_answers_with_error_status(patched_session) -> None:
    patched_session({URL: _Response(404)})
    settings = ConnectivitySettings(first_octet=8, last_octet=10)

    with DiscoveryProbe(settings) as probe:
        probe.tick()
        give_up = time.monotonic() + 5.0
        while probe.pending_candidates and time.monotonic() < give_up:
            time.sleep(0.01)
            probe.poll()

        assert probe.address == "192.168.1.9"
