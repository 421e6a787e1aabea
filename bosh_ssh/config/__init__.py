"""Configuration module for bosh-ssh."""

from bosh_ssh.config.loader import load_settings
from bosh_ssh.config.schema import Settings

__all__ = ["Settings", "load_settings"]
