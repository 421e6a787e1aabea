"""UAA client-credentials token session."""

from __future__ import annotations

import base64
import time
import urllib.parse
from typing import Callable

from loguru import logger

from bosh_ssh.director.http import JSONClient
from bosh_ssh.errors import AuthenticationError, DirectorError

REFRESH_MARGIN_S = 30.0


class UAATokenSession:
    """Fetches and caches a client-credentials access token."""

    def __init__(
        self,
        http: JSONClient,
        client: str,
        client_secret: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.http = http
        self.client = client
        self.client_secret = client_secret
        self._clock = clock
        self._token = ""
        self._token_type = "bearer"
        self._expires_at = 0.0

    def _fetch(self) -> None:
        credentials = f"{self.client}:{self.client_secret}".encode("utf-8")
        headers = {
            "Authorization": "Basic " + base64.b64encode(credentials).decode("ascii"),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        body = urllib.parse.urlencode({"grant_type": "client_credentials"}).encode("utf-8")
        try:
            data = self.http.request("POST", "/oauth/token", headers=headers, body=body)
        except DirectorError as exc:
            if exc.status in (400, 401, 403):
                raise AuthenticationError(f"UAA rejected client '{self.client}': {exc}", status=exc.status) from exc
            raise

        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthenticationError("UAA response did not contain an access token")

        self._token = str(data["access_token"])
        self._token_type = str(data.get("token_type") or "bearer")
        expires_in = data.get("expires_in")
        lifetime = float(expires_in) if isinstance(expires_in, (int, float)) else 0.0
        self._expires_at = self._clock() + max(0.0, lifetime - REFRESH_MARGIN_S)
        logger.debug(f"[uaa] token issued for {self.client}, expires in {lifetime:.0f}s")

    def authorization_header(self) -> str:
        """Return ``Authorization`` header value, refreshing the token when due."""
        if not self._token or self._clock() >= self._expires_at:
            self._fetch()
        scheme = "Bearer" if self._token_type.lower() == "bearer" else self._token_type
        return f"{scheme} {self._token}"
