"""Entry point for ``python -m bosh_ssh``."""

from bosh_ssh.cli.commands import app

if __name__ == "__main__":
    app()
