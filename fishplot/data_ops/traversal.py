"""
Parent-before-child draw order for a LayoutForest.

Shapes are painted in traversal order, so later clones sit on top of
earlier ones. The order is breadth-first from the root sentinel: every
child group is found in index order and emitted as soon as its parent is
expanded.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Optional

from .forest import ROOT, Clone, LayoutForest

ROOT_PAD_FRACTION = 1.0
CHILD_PAD_FRACTION = 0.4


def clone_pad(parent: Optional[int], pad: float) -> float:
    """Left padding for a clone: the full pad for roots, 40% of it for children."""
    if parent is ROOT:
        return pad * ROOT_PAD_FRACTION
    return pad * CHILD_PAD_FRACTION


def draw_order(forest: LayoutForest) -> list[tuple[int, Optional[int]]]:
    """Visit order as (clone index, parent) pairs.

    Work queue of parent ids still to expand, seeded with ROOT. Each pop
    finds that parent's children, queues them for expansion and emits them
    immediately.
    """
    order: list[tuple[int, Optional[int]]] = []
    pending: deque[Optional[int]] = deque([ROOT])
    while pending:
        parent = pending.popleft()
        children = [c.index for c in forest.children_of(parent)]
        pending.extend(children)
        order.extend((i, parent) for i in children)
    return order


def traverse(
    forest: LayoutForest,
    pad: float,
    visit: Callable[[Clone, float], None],
) -> None:
    """Call ``visit(clone, pad_left)`` for every clone in draw order."""
    for index, parent in draw_order(forest):
        visit(forest[index], clone_pad(parent, pad))
