"""Shared HTTPS transport utilities for the printer adapters.

This module provides a thin wrapper around ``requests.Session`` so the
discovery probe and the routed transport share timeout policy, TLS
verification and the translation of ``requests`` exceptions into domain
``TransportError`` types.

Dependencies:
    - ``requests`` for network I/O.
    - ``printlink.domain.errors`` for typed transport failures.

Call context:
    - Constructed by ``DiscoveryProbe`` (one session for probes of a campaign,
      one long-lived session for routed requests).
    - Methods run on executor worker threads; they never touch probe state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import requests
import urllib3
from requests import exceptions as req_exc

from printlink.domain.errors import TransportNetworkError, TransportTimeout
from printlink.domain.ports import TransportResponse

log = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Timeout, retry and TLS configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for routed requests.
        retries: Number of retry attempts after the initial request.
        verify_tls: ``requests`` ``verify`` value. The printer presents a
            self-signed certificate, so this is usually ``False`` or a path to
            the device's CA bundle.
    """
    request_timeout_s: float = 10.0
    retries: int = 0
    verify_tls: bool | str = False


class HttpsSession:
    """Requests wrapper that returns ``TransportResponse`` or raises ``TransportError``.

    This class is intentionally transport-only. Callers build absolute URLs and
    decide what a status code means.
    """

    def __init__(self, cfg: HttpConfig, session: Optional[requests.Session] = None) -> None:
        """Create a session.

        Args:
            cfg: Shared timeout, retry and TLS settings.
            session: Optional pre-built session (tests inject fakes here).

        Side Effects:
            Creates a persistent ``requests.Session`` object when none is given.
        """
        self.session = session if session is not None else requests.Session()
        self.cfg = cfg
        if cfg.verify_tls is False:
            # self-signed device certificate; the warning would fire per request
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @staticmethod
    def _headers(extra: Optional[Mapping[str, str]], *, has_body: bool) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        url: str,
        *,
        data: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        """Send one request with retries on timeout/connectivity failures.

        Args:
            method: HTTP verb.
            url: Absolute endpoint URL.
            data: Raw request body, already serialized.
            headers: Extra headers; override the JSON defaults.
            timeout: Optional timeout override in seconds.

        Returns:
            ``TransportResponse`` for any HTTP status received.

        Raises:
            TransportTimeout: If the last attempt timed out.
            TransportNetworkError: If the last attempt failed at the I/O level.
        """
        context = f"{method} {url}"
        last_err: Exception | None = None
        attempts = self.cfg.retries + 1
        for _ in range(attempts):
            try:
                resp = self.session.request(
                    method,
                    url,
                    data=data,
                    headers=self._headers(headers, has_body=data is not None),
                    timeout=timeout or self.cfg.request_timeout_s,
                    verify=self.cfg.verify_tls,
                )
            except req_exc.Timeout:
                last_err = TransportTimeout(f"Timeout contacting {url}", context=context)
            except req_exc.RequestException as exc:
                last_err = TransportNetworkError(f"Network error contacting {url}: {exc}", context=context)
            else:
                return TransportResponse(
                    status_code=resp.status_code,
                    body=resp.content or b"",
                    headers=dict(resp.headers or {}),
                )
            log.debug("%s failed: %s", context, last_err)
        raise last_err

    def head(self, url: str, *, timeout: Optional[float] = None) -> TransportResponse:
        return self.request("HEAD", url, timeout=timeout)

    def close(self) -> None:
        self.session.close()


__all__ = ["HttpConfig", "HttpsSession"]
