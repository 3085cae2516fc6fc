"""Standard hierarchical tree layout, one row per generation."""

from collections.abc import Callable
import logging

from kingraph.graph import FamilyGraph, collect_tree_members
from kingraph.layout_common import FAMILY_GAP_MULTIPLIER, Geometry, assign_generations, build_result
from kingraph.models import LayoutOptions, LayoutResult

logger = logging.getLogger(__name__)


def _mean(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def order_layer(
    ids: list[str],
    group_key: Callable[[str], tuple | None],
    anchors: Callable[[str], list[str]],
    spouses: Callable[[str], list[str]],
    placed: dict[str, float],
) -> list[tuple[str, tuple]]:
    """
    Order one generation row into sibling groups.

    Args:
        ids: Row members in discovery order
        group_key: Key shared by siblings (sorted parent ids), or None for people
            without relatives on the anchoring side
        anchors: Relatives whose breadth positions are already known
        spouses: Spouse ids of a person
        placed: Breadth of already placed people

    Returns:
        (person id, group key) pairs from left to right. Keyless people follow
        their spouse and share the spouse's group.
    """
    groups: dict[tuple, list[str]] = {}
    group_of: dict[str, tuple] = {}
    loose: list[str] = []

    for pid in ids:
        key = group_key(pid)
        if key:
            groups.setdefault(key, []).append(pid)
            group_of[pid] = key
        else:
            loose.append(pid)

    attached: dict[str, list[str]] = {}
    for pid in loose:
        partner = next((s for s in spouses(pid) if s in group_of), None)
        if partner is not None:
            attached.setdefault(partner, []).append(pid)
            group_of[pid] = group_of[partner]
        else:
            key = ("self", pid)
            groups[key] = [pid]
            group_of[pid] = key

    first_index = {key: i for i, key in enumerate(groups)}

    def barycenter(key: tuple) -> float | None:
        values = [placed[a] for pid in groups[key] for a in anchors(pid) if a in placed]
        return _mean(values)

    def sort_key(key: tuple):
        bary = barycenter(key)
        return (bary is None, bary if bary is not None else 0.0, first_index[key])

    row: list[tuple[str, tuple]] = []

    def emit(pid: str, key: tuple) -> None:
        row.append((pid, key))
        for spouse_id in attached.get(pid, []):
            emit(spouse_id, key)

    for key in sorted(groups, key=sort_key):
        for pid in groups[key]:
            emit(pid, key)
    return row


def spread_row(row: list[tuple[str, tuple]], pitch: float) -> dict[str, float]:
    """Assign breadth: 1x pitch inside a sibling group, 1.5x between groups, row centred on 0."""
    breadth: dict[str, float] = {}
    cursor = 0.0
    prev_key = None
    for i, (pid, key) in enumerate(row):
        if i > 0:
            cursor += pitch if key == prev_key else pitch * FAMILY_GAP_MULTIPLIER
        breadth[pid] = cursor
        prev_key = key

    shift = cursor / 2
    return {pid: b - shift for pid, b in breadth.items()}


class StandardTreeLayout:
    """
    Classic layered layout keyed by generation depth from the root.

    Rows are ordered outward from the root: ancestor rows upward (grouped by the
    children they share), then descendant rows downward (grouped by parents).
    Cost is dominated by sorting each row, so it stays usable for large trees.
    """

    name = "standard"

    def compute_layout(
        self, graph: FamilyGraph, root_id: str, options: LayoutOptions
    ) -> LayoutResult:
        members = collect_tree_members(graph, root_id, options.tree_type)
        member_set = set(members)
        generations = assign_generations(graph, root_id, members)
        geometry = Geometry(options)

        layers: dict[int, list[str]] = {}
        for pid in members:
            layers.setdefault(generations[pid], []).append(pid)

        def parents_key(pid: str) -> tuple | None:
            parents = sorted(p for p in graph.parents_of(pid) if p in member_set)
            return tuple(parents) or None

        def children_key(pid: str) -> tuple | None:
            children = sorted(c for c in graph.children_of(pid) if c in member_set)
            return tuple(children) or None

        def member_parents(pid: str) -> list[str]:
            return [p for p in graph.parents_of(pid) if p in member_set]

        def member_children(pid: str) -> list[str]:
            return [c for c in graph.children_of(pid) if c in member_set]

        def member_spouses(pid: str) -> list[str]:
            return [
                s
                for s in graph.spouses_of(pid)
                if s in member_set and generations[s] == generations[pid]
            ]

        placed: dict[str, float] = {}
        pitch = geometry.breadth_pitch

        def place(gen: int, key_fn, anchor_fn) -> None:
            row = order_layer(layers[gen], key_fn, anchor_fn, member_spouses, placed)
            placed.update(spread_row(row, pitch))

        place(0, parents_key, member_parents)
        for gen in sorted((g for g in layers if g < 0), reverse=True):
            place(gen, children_key, member_children)
        for gen in sorted(g for g in layers if g > 0):
            place(gen, parents_key, member_parents)

        min_gen = min(layers)
        depth_pitch = geometry.depth_pitch
        positions = {
            pid: (placed[pid], (generations[pid] - min_gen) * depth_pitch) for pid in members
        }

        logger.debug("Standard layout placed %d persons in %d rows", len(positions), len(layers))
        return build_result(positions, generations, geometry, self.name)
