"""Spouse-aware ("family-chart") layout for small and medium trees."""

from dataclasses import dataclass
import logging

from kingraph.graph import FamilyGraph, collect_tree_members
from kingraph.layout_common import FAMILY_GAP_MULTIPLIER, Geometry, assign_generations, build_result
from kingraph.models import LayoutOptions, LayoutResult

logger = logging.getLogger(__name__)

# Root ancestor scoring
ROOT_DESCENDANT_BONUS = 10_000
FAMILY_LINE_BONUS = 100
COUPLE_LINE_BONUS = 50

# Offset of a spouse from their partner, in units of the sibling pitch
SPOUSE_OFFSET_MULTIPLIER = 1.5


@dataclass(frozen=True)
class AncestorScore:
    person_id: str
    descendant_count: int
    root_bonus: int
    line_bonus: int
    couple_bonus: int

    @property
    def total(self) -> int:
        return self.descendant_count + self.root_bonus + self.line_bonus + self.couple_bonus


def score_ancestor_candidates(
    graph: FamilyGraph,
    root_id: str,
    candidates: list[str],
    members: set[str],
) -> list[AncestorScore]:
    """
    Score candidate top ancestors; best first, ties broken by candidate order.

    Score = descendants in the tree
            + ROOT_DESCENDANT_BONUS if the root descends from the candidate (or is it)
            + FAMILY_LINE_BONUS for each child line that continues further down
            + COUPLE_LINE_BONUS if a spouse of the candidate is also a candidate
    """
    candidate_set = set(candidates)
    scores = []
    for pid in candidates:
        descendants = graph.descendants(pid) & members
        root_bonus = ROOT_DESCENDANT_BONUS if pid == root_id or root_id in descendants else 0
        lines = sum(
            1
            for child in graph.children_of(pid)
            if child in members and any(gc in members for gc in graph.children_of(child))
        )
        couple = any(s in candidate_set for s in graph.spouses_of(pid))
        scores.append(
            AncestorScore(
                person_id=pid,
                descendant_count=len(descendants),
                root_bonus=root_bonus,
                line_bonus=lines * FAMILY_LINE_BONUS,
                couple_bonus=COUPLE_LINE_BONUS if couple else 0,
            )
        )

    order = {pid: i for i, pid in enumerate(candidates)}
    scores.sort(key=lambda s: (-s.total, order[s.person_id]))
    return scores


class FamilyChartLayout:
    """
    Spouse-aware layout.

    Starts from the best scoring top ancestor and lays its descendants out as a tidy
    tree where every subtree owns its own horizontal band. Spouses who have no
    parents in the tree are left out of the descent pass and then placed next to
    their partner in a space reserved for them.
    """

    name = "family-chart"

    def compute_layout(
        self, graph: FamilyGraph, root_id: str, options: LayoutOptions
    ) -> LayoutResult:
        members = collect_tree_members(graph, root_id, options.tree_type)
        member_set = set(members)
        generations = assign_generations(graph, root_id, members)
        geometry = Geometry(options)
        pitch = geometry.breadth_pitch
        spouse_offset = pitch * SPOUSE_OFFSET_MULTIPLIER
        depth_pitch = geometry.depth_pitch
        min_gen = min(generations.values())

        def parents(pid: str) -> list[str]:
            return [p for p in graph.parents_of(pid) if p in member_set]

        def children(pid: str) -> list[str]:
            return [c for c in graph.children_of(pid) if c in member_set]

        def spouses(pid: str) -> list[str]:
            return [s for s in graph.spouses_of(pid) if s in member_set]

        parentless = [pid for pid in members if not parents(pid)]
        related_to_root = {root_id} | graph.ancestors(root_id) | set(spouses(root_id))
        candidates = [pid for pid in parentless if pid in related_to_root]
        if not candidates:
            candidates = [root_id]
        ranked = score_ancestor_candidates(graph, root_id, candidates, member_set)
        top_id = ranked[0].person_id

        # Remaining parentless people seed their own trees, best scoring first
        others = [pid for pid in parentless if pid not in candidates]
        others_scored = score_ancestor_candidates(graph, root_id, others, member_set)
        others_ranked = [s.person_id for s in others_scored]
        ordered_tops = [s.person_id for s in ranked] + others_ranked

        # A parentless person married into the tree is a spouse, not a seed
        seeds: list[str] = []
        attached: set[str] = set()
        for pid in ordered_tops:
            partner_anchored = any(parents(s) or s in seeds for s in spouses(pid))
            if pid != top_id and partner_anchored:
                attached.add(pid)
            else:
                seeds.append(pid)

        placed: dict[str, tuple[float, int]] = {}  # pid -> (breadth, level)
        reserved: dict[str, list[str]] = {}  # partner -> spouses waiting for a slot
        claimed: set[str] = set()

        def layout_subtree(pid: str, offset: float, level: int) -> float:
            """Place pid and its unplaced descendants in [offset, offset + width); return width."""
            placed[pid] = (offset, level)
            slots = [
                s for s in spouses(pid) if s in attached and s not in claimed and s not in placed
            ]
            claimed.update(slots)
            reserved[pid] = slots
            unit_width = pitch + spouse_offset * len(slots)

            # Children of reserved spouses by other partners share the band
            family_children = children(pid) + [c for s in slots for c in children(s)]

            child_offset = offset
            child_breadths = []
            for child_id in family_children:
                if child_id in placed:
                    continue
                width = layout_subtree(child_id, child_offset, level + 1)
                child_breadths.append(placed[child_id][0])
                child_offset += width

            children_width = child_offset - offset
            width = max(unit_width, children_width)
            if child_breadths:
                # Centre the couple over the children, staying inside the band
                centre = (child_breadths[0] + child_breadths[-1]) / 2
                start = centre - spouse_offset * len(slots) / 2
                start = min(max(start, offset), offset + width - unit_width)
                placed[pid] = (start, level)
            return width

        offset = 0.0
        for seed in seeds:
            if seed in placed:
                continue
            width = layout_subtree(seed, offset, generations[seed] - min_gen)
            offset += width + pitch * (FAMILY_GAP_MULTIPLIER - 1)

        # Secondary pass: spouses the descent pass could not reach go beside their partner
        unplaced_spouses = 0
        for partner, slots in reserved.items():
            if partner not in placed:
                continue
            breadth, level = placed[partner]
            for i, spouse_id in enumerate(slots, start=1):
                if spouse_id in placed:
                    continue
                placed[spouse_id] = (breadth + spouse_offset * i, level)
                unplaced_spouses += 1

        # Anyone still missing gets a plain row slot to the right of the chart
        leftovers = [pid for pid in members if pid not in placed]
        if leftovers:
            logger.warning(
                "Family chart layout could not place %d persons by descent; using row fallback",
                len(leftovers),
            )
            rightmost = max((b for b, _ in placed.values()), default=-pitch)
            right_edge = rightmost + pitch * FAMILY_GAP_MULTIPLIER
            next_in_row: dict[int, float] = {}
            for pid in leftovers:
                level = generations[pid] - min_gen
                breadth = next_in_row.get(level, right_edge)
                placed[pid] = (breadth, level)
                next_in_row[level] = breadth + pitch

        logger.debug(
            "Family chart layout from top ancestor %s: %d seeds, %d spouses placed beside partners",
            top_id,
            len(seeds),
            unplaced_spouses,
        )

        positions = {
            pid: (breadth, level * depth_pitch) for pid, (breadth, level) in placed.items()
        }
        return build_result(positions, generations, geometry, self.name)
