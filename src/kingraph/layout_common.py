"""Shared geometry for the layout engines."""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from kingraph.graph import FamilyGraph
from kingraph.models import LayoutOptions, LayoutResult, NodePosition

# Minimum free space between two boxes in the same row
MIN_NODE_GAP = 20
# Gap between groups of siblings with different parents, in units of the sibling pitch
FAMILY_GAP_MULTIPLIER = 1.5


class LayoutEngine(Protocol):
    name: str

    def compute_layout(
        self, graph: FamilyGraph, root_id: str, options: LayoutOptions
    ) -> LayoutResult: ...


@dataclass(frozen=True)
class Geometry:
    """
    Maps (breadth, depth) layout coordinates onto x/y.

    Breadth runs along a generation row and depth across generations. Vertical
    layouts put depth on the y axis, horizontal layouts on the x axis.
    """

    options: LayoutOptions
    clamp: bool = True

    @property
    def horizontal(self) -> bool:
        return self.options.direction == "horizontal"

    @property
    def breadth_extent(self) -> float:
        return self.options.node_height if self.horizontal else self.options.node_width

    @property
    def depth_extent(self) -> float:
        return self.options.node_width if self.horizontal else self.options.node_height

    @property
    def breadth_pitch(self) -> float:
        """Distance between neighbouring nodes in one generation row."""
        if not self.clamp:
            return self.options.node_spacing_x
        return max(self.options.node_spacing_x, self.breadth_extent + MIN_NODE_GAP)

    @property
    def depth_pitch(self) -> float:
        """Distance between generation rows."""
        if not self.clamp:
            return self.options.node_spacing_y
        return max(self.options.node_spacing_y, self.depth_extent + MIN_NODE_GAP)

    def to_xy(self, breadth: float, depth: float) -> tuple[float, float]:
        if self.horizontal:
            return depth, breadth
        return breadth, depth


def assign_generations(graph: FamilyGraph, root_id: str, members: Iterable[str]) -> dict[str, int]:
    """
    Generation index of every member relative to the root (parents -1, children +1, spouses 0).

    Breadth-first, so with cycles the first generation reached wins. Members not
    reachable from the root within the member set get generation 0.
    """
    member_list = list(members)
    member_set = set(member_list)
    generations = {root_id: 0}
    queue = deque([root_id])

    while queue:
        current = queue.popleft()
        gen = generations[current]
        for nb, offset in (
            [(p, -1) for p in graph.parents_of(current)]
            + [(c, 1) for c in graph.children_of(current)]
            + [(s, 0) for s in graph.spouses_of(current)]
        ):
            if nb not in member_set or nb in generations:
                continue
            generations[nb] = gen + offset
            queue.append(nb)

    for person_id in member_list:
        generations.setdefault(person_id, 0)
    return generations


def build_result(
    placed: dict[str, tuple[float, float]],
    generations: dict[str, int],
    geometry: Geometry,
    engine: str,
) -> LayoutResult:
    """
    Convert (breadth, depth) placements into a LayoutResult.

    Positions are ordered by generation, then breadth, then id, so repeated runs
    give identical lists.
    """
    order = sorted(placed, key=lambda pid: (generations.get(pid, 0), placed[pid][0], pid))
    positions = []
    for person_id in order:
        breadth, depth = placed[person_id]
        x, y = geometry.to_xy(breadth, depth)
        positions.append(
            NodePosition(person_id=person_id, x=x, y=y, generation=generations.get(person_id))
        )
    return LayoutResult(positions=tuple(positions), options=geometry.options, engine=engine)


def find_overlaps(result: LayoutResult) -> list[tuple[str, str]]:
    """Pairs of nodes whose boxes intersect. Sweep over x, so close to linear for sparse layouts."""
    width = result.options.node_width
    height = result.options.node_height
    boxes = sorted(result.positions, key=lambda p: (p.x, p.y, p.person_id))

    overlaps = []
    for i, a in enumerate(boxes):
        for b in boxes[i + 1:]:
            if b.x >= a.x + width:
                break
            if abs(a.y - b.y) < height:
                overlaps.append((a.person_id, b.person_id))
    return overlaps
