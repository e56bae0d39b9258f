"""Breadth-first pathfinding on the open 4-connected grid.

The grid has no walls, so every cell is passable and BFS returns a
shortest path whose length equals the Manhattan distance.  Cells are
marked visited when enqueued, so each is processed at most once.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from munchers.world.cell import Position
    from munchers.world.grid import Grid


def find_path(grid: Grid, start: Position, goal: Position) -> list[Position]:
    """Return the steps from ``start`` to ``goal``, excluding ``start``.

    Args:
        grid: Grid providing bounds and neighbours.
        start: Origin position.
        goal: Destination position.

    Returns:
        Ordered positions ending at ``goal``; empty when already there or
        when ``goal`` is off the grid.
    """
    if start == goal or not grid.in_bounds(goal):
        return []

    parents: dict[Position, Position | None] = {start: None}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for nxt in grid.neighbours(current):
            if nxt in parents:
                continue
            parents[nxt] = current
            if nxt == goal:
                return _unwind(parents, goal)
            queue.append(nxt)
    return []


def _unwind(parents: dict[Position, Position | None], goal: Position) -> list[Position]:
    path: list[Position] = []
    node: Position | None = goal
    while node is not None and parents[node] is not None:
        path.append(node)
        node = parents[node]
    path.reverse()
    return path
