"""CLI module for bosh-ssh."""
