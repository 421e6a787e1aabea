"""JSON-over-HTTPS helper shared by the director and UAA clients."""

from __future__ import annotations

import http.client
import json
import os
import ssl
import time
import urllib.error
import urllib.request
from typing import Any, Callable

from loguru import logger

from bosh_ssh.errors import DirectorError

OpenFn = Callable[..., Any]


def build_ssl_context(ca_cert: str = "") -> ssl.SSLContext:
    """
    Verifying TLS context.

    ``ca_cert`` may be PEM text or a path to a PEM file; empty uses system roots.
    """
    value = (ca_cert or "").strip()
    if not value:
        return ssl.create_default_context()
    try:
        if "-----BEGIN" in value:
            return ssl.create_default_context(cadata=value)
        path = os.path.expanduser(value)
        if os.path.isfile(path):
            return ssl.create_default_context(cafile=path)
    except ssl.SSLError as exc:
        raise DirectorError(f"Invalid CA certificate: {exc}") from exc
    raise DirectorError(f"CA certificate is neither PEM text nor a readable file: {value[:60]}")


class JSONClient:
    """Small urllib client with retries for connection errors and 5xx responses."""

    def __init__(
        self,
        base_url: str,
        ssl_context: ssl.SSLContext | None = None,
        timeout_s: float = 30.0,
        retries: int = 3,
        opener: OpenFn | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.ssl_context = ssl_context
        self.timeout_s = timeout_s
        self.retries = max(0, retries)
        self._open = opener or urllib.request.urlopen
        self._sleep = sleep

    def request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Any:
        """Send one request and decode the JSON response."""
        url = f"{self.base_url}{path}"
        req_headers = {"Accept": "application/json"}
        req_headers.update(headers or {})

        interval = 0.5
        attempt = 0
        while True:
            req = urllib.request.Request(url=url, data=body, headers=req_headers, method=method)
            try:
                with self._open(req, timeout=self.timeout_s, context=self.ssl_context) as resp:
                    raw = resp.read().decode("utf-8", errors="ignore")
                break
            except urllib.error.HTTPError as exc:
                body_text = exc.read().decode("utf-8", errors="ignore")
                if exc.code < 500 or attempt >= self.retries:
                    raise DirectorError(
                        f"{method} {url} returned HTTP {exc.code}: {body_text.strip() or exc.reason}",
                        status=exc.code,
                    ) from exc
                reason = f"HTTP {exc.code}"
            except urllib.error.URLError as exc:
                if isinstance(exc.reason, ssl.SSLError):
                    raise DirectorError(f"{method} {url} TLS error: {exc.reason}") from exc
                if attempt >= self.retries:
                    raise DirectorError(f"{method} {url} connection error: {exc.reason}") from exc
                reason = str(exc.reason)
            except (http.client.HTTPException, ConnectionError) as exc:
                if attempt >= self.retries:
                    raise DirectorError(f"{method} {url} connection error: {exc!r}") from exc
                reason = type(exc).__name__
            except TimeoutError as exc:
                if attempt >= self.retries:
                    raise DirectorError(f"{method} {url} timed out after {self.timeout_s:g}s") from exc
                reason = "timeout"

            attempt += 1
            logger.debug(f"[http] {method} {url} failed ({reason}), retry {attempt}/{self.retries} in {interval:.2f}s")
            self._sleep(interval)
            interval = min(interval * 1.4, 5.0)

        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DirectorError(f"{method} {url} returned invalid JSON: {exc}") from exc
