"""BOSH director and UAA access."""

from bosh_ssh.director.client import Director, build_director, build_uaa, uaa_mismatch
from bosh_ssh.director.models import DirectorInfo, Instance
from bosh_ssh.director.uaa import UAATokenSession

__all__ = ["Director", "DirectorInfo", "Instance", "UAATokenSession", "build_director", "build_uaa", "uaa_mismatch"]
