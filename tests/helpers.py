"""Shared test helpers."""

from bosh_ssh.director.models import Instance


def make_instances(*slugs: str) -> list[Instance]:
    """Instances from ``group/id`` strings."""
    result = []
    for slug in slugs:
        group, _, instance_id = slug.partition("/")
        result.append(Instance(group=group, id=instance_id))
    return result
