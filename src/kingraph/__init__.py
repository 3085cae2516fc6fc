"""Family relationship graph, kinship naming and tree layouts."""

from kingraph.graph import (
    FamilyGraph,
    build_family_graph,
    collect_tree_members,
    extract_tree,
    get_ego_subgraph,
)
from kingraph.layout_selector import compute_layout, select_layout_engine
from kingraph.models import (
    FamilyEdge,
    LayoutOptions,
    LayoutResult,
    NodePosition,
    PersonNode,
    PersonRecord,
    RelationshipResult,
    RelationshipStep,
)
from kingraph.relationship import find_relationship

__all__ = [
    "FamilyEdge",
    "FamilyGraph",
    "LayoutOptions",
    "LayoutResult",
    "NodePosition",
    "PersonNode",
    "PersonRecord",
    "RelationshipResult",
    "RelationshipStep",
    "build_family_graph",
    "collect_tree_members",
    "compute_layout",
    "extract_tree",
    "find_relationship",
    "get_ego_subgraph",
    "select_layout_engine",
]
