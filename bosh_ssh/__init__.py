"""bosh-ssh - synchronized tmux ssh sessions into BOSH deployment instances."""

__version__ = "0.1.0"
