"""BOSH director client: info and deployment instances."""

from __future__ import annotations

import urllib.parse

from loguru import logger

from bosh_ssh.config.schema import Settings
from bosh_ssh.director.http import JSONClient, build_ssl_context
from bosh_ssh.director.models import DirectorInfo, Instance
from bosh_ssh.director.uaa import UAATokenSession
from bosh_ssh.errors import DeploymentNotFoundError, DirectorError


class Director:
    """Read-only view of a BOSH director."""

    def __init__(self, http: JSONClient, tokens: UAATokenSession | None = None) -> None:
        self.http = http
        self.tokens = tokens

    def _auth_headers(self) -> dict[str, str]:
        if self.tokens is None:
            return {}
        return {"Authorization": self.tokens.authorization_header()}

    def info(self) -> DirectorInfo:
        """``GET /info``, no authentication required."""
        data = self.http.request("GET", "/info")
        if not isinstance(data, dict):
            raise DirectorError("Director /info returned an unexpected payload")
        return DirectorInfo.from_payload(data)

    def instances(self, deployment: str) -> list[Instance]:
        """Instances of ``deployment`` in director order."""
        path = f"/deployments/{urllib.parse.quote(deployment, safe='')}/instances"
        try:
            data = self.http.request("GET", path, headers=self._auth_headers())
        except DirectorError as exc:
            if exc.status == 404:
                raise DeploymentNotFoundError(f"Deployment '{deployment}' not found", status=404) from exc
            raise
        if not isinstance(data, list):
            raise DirectorError(f"Director returned an unexpected instances payload for '{deployment}'")

        instances = [Instance.from_payload(item) for item in data if isinstance(item, dict)]
        logger.debug(f"[director] {deployment}: {len(instances)} instance(s)")
        return instances


def uaa_mismatch(info: DirectorInfo, uaa_url: str) -> bool:
    """True when the director advertises a UAA other than ``uaa_url``."""
    if info.auth_type != "uaa" or not info.uaa_url:
        return False
    if info.uaa_url.rstrip("/") == (uaa_url or "").rstrip("/"):
        return False
    logger.warning(f"[director] {info.name} advertises UAA {info.uaa_url}, configured {uaa_url}")
    return True


def build_uaa(settings: Settings) -> UAATokenSession:
    """Token session for the configured UAA and client credentials."""
    http = JSONClient(
        settings.uaa_url,
        ssl_context=build_ssl_context(settings.ca_cert),
        timeout_s=settings.http_timeout_s,
        retries=settings.http_retries,
    )
    return UAATokenSession(http, client=settings.client, client_secret=settings.client_secret)


def build_director(settings: Settings, uaa: UAATokenSession) -> Director:
    """Director client that fetches UAA tokens when needed."""
    http = JSONClient(
        settings.director_url,
        ssl_context=build_ssl_context(settings.ca_cert),
        timeout_s=settings.http_timeout_s,
        retries=settings.http_retries,
    )
    return Director(http, tokens=uaa)
