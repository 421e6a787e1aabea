"""Settings loading."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import ValidationError

from bosh_ssh.config.schema import Settings
from bosh_ssh.errors import ConfigError

ENV_NAMES = {
    "director_url": "DIRECTOR_URL",
    "uaa_url": "UAA_URL",
    "client": "BOSH_CLIENT",
    "client_secret": "BOSH_CLIENT_SECRET",
    "ca_cert": "BOSH_CA_CERT",
}


def load_settings(overrides: Mapping[str, object] | None = None) -> Settings:
    """Build settings from the environment, applying non-empty ``overrides``."""
    values = {key: value for key, value in (overrides or {}).items() if value not in (None, "")}
    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(describe_validation_error(exc)) from exc


def describe_validation_error(exc: ValidationError) -> str:
    """Readable summary naming the environment variables at fault."""
    problems: list[str] = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else "settings"
        name = field if field.isupper() else ENV_NAMES.get(field, f"BOSH_SSH_{field.upper()}")
        if error.get("type") == "missing":
            problems.append(f"{name} is not set")
        else:
            problems.append(f"{name}: {error.get('msg', 'invalid value')}")
    return "Invalid configuration: " + "; ".join(problems)
