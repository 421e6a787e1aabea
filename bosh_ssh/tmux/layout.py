"""Pane grid selection for a given instance count."""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType

from bosh_ssh.errors import LayoutError


@dataclass(frozen=True)
class Layout:
    """Target grid, ``rows`` stacked vertically with ``columns`` panes each."""

    rows: int
    columns: int

    @property
    def capacity(self) -> int:
        return self.rows * self.columns

    def __str__(self) -> str:
        return f"{self.rows}x{self.columns}"


LAYOUTS = MappingProxyType({
    1: Layout(rows=1, columns=1),
    2: Layout(rows=2, columns=1),
    3: Layout(rows=2, columns=2),
    4: Layout(rows=2, columns=2),
    5: Layout(rows=2, columns=3),
    6: Layout(rows=2, columns=3),
    7: Layout(rows=3, columns=3),
    8: Layout(rows=3, columns=3),
    9: Layout(rows=3, columns=3),
    10: Layout(rows=4, columns=3),
})

MAX_TABLE_COUNT = max(LAYOUTS)


def select_layout(count: int) -> Layout:
    """
    Return the grid for ``count`` panes.

    Counts 1..10 come from the fixed table. Larger counts get a near-square grid with
    ``ceil(sqrt(count))`` rows. Counts below 1 raise ``LayoutError``.
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise LayoutError(f"Pane count must be an integer, got {count!r}")
    if count < 1:
        raise LayoutError(f"Pane count must be at least 1, got {count}")

    layout = LAYOUTS.get(count)
    if layout is not None:
        return layout

    rows = math.isqrt(count - 1) + 1
    columns = -(-count // rows)
    return Layout(rows=rows, columns=columns)
