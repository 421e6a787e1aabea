"""Director data models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DirectorInfo:
    """Subset of ``GET /info`` the tool cares about."""

    name: str
    uuid: str = ""
    version: str = ""
    auth_type: str = ""
    uaa_url: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> "DirectorInfo":
        auth = data.get("user_authentication")
        auth = auth if isinstance(auth, dict) else {}
        options = auth.get("options")
        options = options if isinstance(options, dict) else {}
        return cls(
            name=str(data.get("name") or ""),
            uuid=str(data.get("uuid") or ""),
            version=str(data.get("version") or ""),
            auth_type=str(auth.get("type") or ""),
            uaa_url=str(options.get("url") or ""),
        )


@dataclass(frozen=True)
class Instance:
    """One instance of a deployment, addressed as ``group/id``."""

    group: str
    id: str
    index: int | None = None
    az: str = ""
    ips: tuple[str, ...] = field(default_factory=tuple)
    process_state: str = ""
    bootstrap: bool = False

    @property
    def slug(self) -> str:
        """Matching and display string, ``group/id``."""
        return f"{self.group}/{self.id}"

    def __str__(self) -> str:
        return self.slug

    @classmethod
    def from_payload(cls, data: dict) -> "Instance":
        """Build from one entry of ``GET /deployments/:name/instances``."""
        raw_index = data.get("index")
        ips = data.get("ips")
        return cls(
            group=str(data.get("job") or ""),
            id=str(data.get("id") or ""),
            index=raw_index if isinstance(raw_index, int) else None,
            az=str(data.get("az") or ""),
            ips=tuple(str(ip) for ip in ips) if isinstance(ips, list) else (),
            process_state=str(data.get("process_state") or ""),
            bootstrap=bool(data.get("bootstrap", False)),
        )
