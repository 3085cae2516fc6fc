"""Timeline layout: birth year along the breadth axis, generation bands across it."""

import logging

from kingraph.dates import extract_year
from kingraph.graph import FamilyGraph, collect_tree_members
from kingraph.layout_common import (
    FAMILY_GAP_MULTIPLIER,
    MIN_NODE_GAP,
    Geometry,
    assign_generations,
    build_result,
)
from kingraph.models import LayoutOptions, LayoutResult

logger = logging.getLogger(__name__)

# One year spans node_spacing_x / YEAR_SCALE_DIVISOR pixels
YEAR_SCALE_DIVISOR = 10
# Assumed parent-to-child age gap when estimating a missing birth year
GENERATION_YEARS = 25


def estimate_birth_years(
    graph: FamilyGraph, members: list[str]
) -> tuple[dict[str, int], dict[str, int]]:
    """
    Known and estimated birth years.

    A missing year is interpolated from the known years of the person's parents
    (+GENERATION_YEARS) and children (-GENERATION_YEARS), averaged. People with no
    dated parent or child are left out of both mappings.

    Returns:
        (known years, estimated years)
    """
    member_set = set(members)
    known: dict[str, int] = {}
    for pid in members:
        year = extract_year(graph.nodes[pid].record.birth_date)
        if year is not None:
            known[pid] = year

    estimated: dict[str, int] = {}
    for pid in members:
        if pid in known:
            continue
        dated_parents = [p for p in graph.parents_of(pid) if p in member_set and p in known]
        dated_children = [c for c in graph.children_of(pid) if c in member_set and c in known]
        guesses = [known[p] + GENERATION_YEARS for p in dated_parents]
        guesses += [known[c] - GENERATION_YEARS for c in dated_children]
        if guesses:
            estimated[pid] = round(sum(guesses) / len(guesses))
    return known, estimated


def pack_lanes(items: list[tuple[str, float]], extent: float) -> dict[str, int]:
    """Greedy interval packing: lane index per item so boxes in one lane never touch."""
    lane_ends: list[float] = []
    lanes: dict[str, int] = {}
    for pid, start in sorted(items, key=lambda item: (item[1], item[0])):
        for i, end in enumerate(lane_ends):
            if start >= end + MIN_NODE_GAP:
                lanes[pid] = i
                lane_ends[i] = start + extent
                break
        else:
            lanes[pid] = len(lane_ends)
            lane_ends.append(start + extent)
    return lanes


class TimelineLayout:
    """
    Places people by birth year.

    The generation index only decides which band a person sits in, so that
    contemporaries from different generations do not collide. Within a band,
    people whose boxes would overlap are stacked into extra lanes.
    """

    name = "timeline"

    def compute_layout(
        self, graph: FamilyGraph, root_id: str, options: LayoutOptions
    ) -> LayoutResult:
        members = collect_tree_members(graph, root_id, options.tree_type)
        generations = assign_generations(graph, root_id, members)
        geometry = Geometry(options)
        px_per_year = options.node_spacing_x / YEAR_SCALE_DIVISOR

        known, estimated = estimate_birth_years(graph, members)
        years = {**known, **estimated}

        breadth: dict[str, float] = {}
        if years:
            base_year = min(years.values())
            for pid, year in years.items():
                breadth[pid] = (year - base_year) * px_per_year

        # No date anywhere nearby: plain per-generation slots right of the timeline
        undated = [pid for pid in members if pid not in years]
        if undated:
            logger.info("Timeline layout: %d persons without any date information", len(undated))
            pitch = geometry.breadth_pitch
            start = max(breadth.values(), default=-pitch) + pitch * FAMILY_GAP_MULTIPLIER
            next_slot: dict[int, float] = {}
            for pid in undated:
                gen = generations[pid]
                breadth[pid] = next_slot.get(gen, start)
                next_slot[gen] = breadth[pid] + pitch

        bands: dict[int, list[tuple[str, float]]] = {}
        for pid in members:
            bands.setdefault(generations[pid], []).append((pid, breadth[pid]))

        positions: dict[str, tuple[float, float]] = {}
        band_top = 0.0
        for gen in sorted(bands):
            lanes = pack_lanes(bands[gen], geometry.breadth_extent)
            for pid, b in bands[gen]:
                positions[pid] = (b, band_top + lanes[pid] * geometry.depth_pitch)
            band_top += (max(lanes.values()) + 1) * geometry.depth_pitch

        logger.debug(
            "Timeline layout: %d dated, %d estimated, %d undated",
            len(known),
            len(estimated),
            len(undated),
        )
        return build_result(positions, generations, geometry, self.name)
