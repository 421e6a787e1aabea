"""Job-name prefix filtering over deployment instances."""

from __future__ import annotations

from typing import Iterable, Sequence

from bosh_ssh.director.models import Instance


def matches_prefixes(slug: str, prefixes: Sequence[str]) -> bool:
    """Return True when ``slug`` starts with any of ``prefixes``."""
    return any(slug.startswith(prefix) for prefix in prefixes)


def filter_instances(instances: Iterable[Instance], prefixes: Sequence[str]) -> list[Instance]:
    """
    Select instances whose ``group/id`` starts with one of ``prefixes``.

    Order follows ``instances``. Each ``group/id`` appears at most once, even when it
    matches several prefixes. No prefixes selects nothing.
    """
    wanted = [p for p in prefixes if p]
    if not wanted:
        return []

    selected: list[Instance] = []
    seen: set[str] = set()
    for instance in instances:
        slug = instance.slug
        if slug in seen or not matches_prefixes(slug, wanted):
            continue
        seen.add(slug)
        selected.append(instance)
    return selected
