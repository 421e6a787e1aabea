"""Configuration schema for bosh-ssh."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Root configuration, read once from the environment at startup."""

    director_url: str = Field(validation_alias="DIRECTOR_URL")
    uaa_url: str = Field(validation_alias="UAA_URL")
    client: str = Field(validation_alias="BOSH_CLIENT")
    client_secret: str = Field(
        validation_alias="BOSH_CLIENT_SECRET",
        repr=False,
    )
    ca_cert: str = Field(default="", validation_alias="BOSH_CA_CERT", repr=False)

    session_name: str = "bosh-ssh"
    bosh_command: str = "bosh"
    tmux_command: str = "tmux"
    tmux_timeout_s: float = Field(default=10.0, gt=0, validation_alias="BOSH_SSH_TMUX_TIMEOUT")
    http_timeout_s: float = Field(default=30.0, gt=0, validation_alias="BOSH_SSH_HTTP_TIMEOUT")
    http_retries: int = Field(default=3, ge=0)
    cleanup_on_error: bool = False

    model_config = SettingsConfigDict(
        env_prefix="BOSH_SSH_",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("director_url", "uaa_url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        value = (value or "").strip().rstrip("/")
        if not value:
            raise ValueError("URL must not be empty")
        if "://" not in value:
            value = f"https://{value}"
        if not value.startswith("https://"):
            raise ValueError("HTTPS is required")
        return value

    @field_validator("client", "client_secret", "session_name", "bosh_command", "tmux_command")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("must not be empty")
        return value
