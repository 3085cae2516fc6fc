"""Choosing a layout engine and running it."""

import logging

from kingraph.graph import FamilyGraph, collect_tree_members
from kingraph.layout_common import LayoutEngine
from kingraph.layout_family_chart import FamilyChartLayout
from kingraph.layout_hourglass import HourglassLayout
from kingraph.layout_standard import StandardTreeLayout
from kingraph.layout_timeline import TimelineLayout
from kingraph.models import LayoutOptions, LayoutResult

logger = logging.getLogger(__name__)

# Above this many tree members the spouse-aware layout gives way to the standard one
LARGE_TREE_THRESHOLD = 200
COMPACT_SPACING_MULTIPLIER = 0.5


def select_layout_engine(node_count: int, layout_type: str = "standard") -> LayoutEngine:
    """
    Pick the engine for a request.

    Timeline and hourglass requests always get their own engine. Everything else
    uses the standard layout for large trees and the spouse-aware one otherwise.
    """
    if layout_type == "timeline":
        return TimelineLayout()
    if layout_type == "hourglass":
        return HourglassLayout()
    if node_count > LARGE_TREE_THRESHOLD:
        return StandardTreeLayout()
    return FamilyChartLayout()


def resolve_layout_options(options: LayoutOptions) -> LayoutOptions:
    """Apply the compact spacing multiplier; other layout types pass through."""
    if options.layout_type == "compact":
        return options.with_spacing_multiplier(COMPACT_SPACING_MULTIPLIER)
    return options


def compute_layout(
    graph: FamilyGraph, root_id: str, options: LayoutOptions | None = None
) -> LayoutResult:
    """
    Lay out the tree of ``options.tree_type`` around ``root_id``.

    Raises:
        ValueError: root_id is not in the graph
    """
    options = options or LayoutOptions()
    node_count = len(collect_tree_members(graph, root_id, options.tree_type))
    engine = select_layout_engine(node_count, options.layout_type)
    resolved = resolve_layout_options(options)

    logger.info(
        "Laying out %d persons around %s with %s (requested %s)",
        node_count,
        root_id,
        engine.name,
        options.layout_type,
    )
    return engine.compute_layout(graph, root_id, resolved)
