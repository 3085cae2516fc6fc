"""Hourglass layout: ancestors above the root, descendants below."""

from collections import deque
from collections.abc import Callable
import logging

from kingraph.graph import FamilyGraph
from kingraph.layout_common import Geometry, build_result
from kingraph.models import LayoutOptions, LayoutResult

logger = logging.getLogger(__name__)


def centered_offsets(count: int, spacing: float) -> list[float]:
    """Breadth offsets for ``count`` nodes centred on 0."""
    total_width = (count - 1) * spacing
    start = -total_width / 2
    return [start + i * spacing for i in range(count)]


def _walk(
    root_id: str,
    expand: Callable[[str], list[str]],
    step: int,
    generations: dict[str, int],
    rows: dict[int, list[str]],
) -> None:
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        gen = generations[current] + step
        for nb in expand(current):
            if nb in generations:
                continue
            generations[nb] = gen
            rows.setdefault(gen, []).append(nb)
            queue.append(nb)


class HourglassLayout:
    """
    Root at the origin, ancestors at negative generations, descendants at positive ones.

    Each generation row is centred on its own; tree_type is ignored because the
    hourglass always shows both directions.
    """

    name = "hourglass"

    def compute_layout(
        self, graph: FamilyGraph, root_id: str, options: LayoutOptions
    ) -> LayoutResult:
        if root_id not in graph.nodes:
            raise ValueError(f"Person ID {root_id} not found in graph")

        geometry = Geometry(options, clamp=False)
        generations = {root_id: 0}
        rows: dict[int, list[str]] = {0: [root_id]}

        # Ancestors first; with looped data a person stays where first reached
        _walk(root_id, graph.parents_of, -1, generations, rows)
        _walk(root_id, graph.children_of, 1, generations, rows)

        positions: dict[str, tuple[float, float]] = {}
        for gen, row in rows.items():
            for pid, b in zip(row, centered_offsets(len(row), geometry.breadth_pitch)):
                positions[pid] = (b, gen * geometry.depth_pitch)

        logger.debug(
            "Hourglass layout: %d ancestor rows, %d descendant rows",
            sum(1 for g in rows if g < 0),
            sum(1 for g in rows if g > 0),
        )
        return build_result(positions, generations, geometry, self.name)
