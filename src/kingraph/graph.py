"""Family graph building and tree extraction."""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
import logging

import networkx as nx

from kingraph.models import FamilyEdge, PersonNode, PersonRecord, TREE_TYPE_ALIASES

logger = logging.getLogger(__name__)

PARENT_OF = "parent"
SPOUSE_OF = "spouse"


@dataclass
class FamilyGraph:
    """
    Persons indexed by id, their typed edges, and a NetworkX view of the same data.

    The DiGraph holds parent -> child edges once and spouse edges in both directions,
    each tagged with a ``relationship_type`` attribute.
    """

    nodes: dict[str, PersonNode] = field(default_factory=dict)
    edges: list[FamilyEdge] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    digraph: nx.DiGraph = field(default_factory=nx.DiGraph)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, person_id: str | None) -> PersonNode | None:
        if person_id is None:
            return None
        return self.nodes.get(person_id)

    def parents_of(self, person_id: str) -> list[str]:
        return self.nodes[person_id].all_parent_ids()

    def children_of(self, person_id: str) -> list[str]:
        return list(self.nodes[person_id].children_ids)

    def spouses_of(self, person_id: str) -> list[str]:
        return list(self.nodes[person_id].spouse_ids)

    def neighbors_of(self, person_id: str) -> list[str]:
        """Parents, children and spouses, in that order."""
        return self.parents_of(person_id) + self.children_of(person_id) + self.spouses_of(person_id)

    def lineage_graph(self) -> nx.DiGraph:
        """Subgraph view restricted to parent -> child edges."""
        return nx.subgraph_view(
            self.digraph,
            filter_edge=lambda u, v: self.digraph.edges[u, v].get("relationship_type") == PARENT_OF,
        )

    def descendants(self, person_id: str) -> set[str]:
        return nx.descendants(self.lineage_graph(), person_id)

    def ancestors(self, person_id: str) -> set[str]:
        return nx.ancestors(self.lineage_graph(), person_id)


def _append_unique(items: list[str], value: str) -> bool:
    if value in items:
        return False
    items.append(value)
    return True


def build_family_graph(records: Iterable[PersonRecord]) -> FamilyGraph:
    """
    Build a FamilyGraph from person records.

    Dangling references (ids without a matching record) and self references are
    dropped and reported in ``graph.warnings``. Cycles are left as they are.

    Parent precedence: ``father_id`` and ``mother_id`` win; ``parent_ids`` entries
    repeating either are ignored, the remaining generic parents are kept as well.
    A child listed only in a parent's ``children_ids`` gets that parent as a
    generic parent.
    """
    graph = FamilyGraph()

    def warn(message: str, *args) -> None:
        text = message % args
        graph.warnings.append(text)
        logger.warning(text)

    # Add nodes (persons)
    for record in records:
        if record.id in graph.nodes:
            warn("Duplicate person id %s; keeping the first record", record.id)
            continue
        graph.nodes[record.id] = PersonNode(record=record)
        graph.digraph.add_node(
            record.id,
            person_name=record.name,
            sex=record.sex,
            birth_date=record.birth_date,
            death_date=record.death_date,
        )

    def resolve(person_id: str, field_name: str, ref: str) -> bool:
        if ref == person_id:
            warn("%s: %s references the person itself; reference dropped", person_id, field_name)
            return False
        if ref not in graph.nodes:
            warn("%s: %s %s not found; reference dropped", person_id, field_name, ref)
            return False
        return True

    parent_pairs: list[tuple[str, str]] = []
    seen_parent_pairs: set[tuple[str, str]] = set()

    def link_parent(parent_id: str, child_id: str) -> None:
        if (parent_id, child_id) in seen_parent_pairs:
            return
        seen_parent_pairs.add((parent_id, child_id))
        parent_pairs.append((parent_id, child_id))
        _append_unique(graph.nodes[parent_id].children_ids, child_id)

    # Parents declared on the child
    for person_id, node in graph.nodes.items():
        record = node.record
        if record.father_id and resolve(person_id, "father_id", record.father_id):
            node.father_id = record.father_id
            link_parent(record.father_id, person_id)
        if record.mother_id and resolve(person_id, "mother_id", record.mother_id):
            if record.mother_id == node.father_id:
                warn(
                    "%s: mother_id repeats father_id %s; reference dropped",
                    person_id,
                    record.mother_id,
                )
            else:
                node.mother_id = record.mother_id
                link_parent(record.mother_id, person_id)
        for parent_id in record.parent_ids:
            if parent_id in (node.father_id, node.mother_id):
                continue
            if resolve(person_id, "parent_ids", parent_id):
                _append_unique(node.parent_ids, parent_id)
                link_parent(parent_id, person_id)

    # Children declared on the parent
    for person_id, node in graph.nodes.items():
        for child_id in node.record.children_ids:
            if not resolve(person_id, "children_ids", child_id):
                continue
            child = graph.nodes[child_id]
            if person_id not in child.all_parent_ids():
                child.parent_ids.append(person_id)
            link_parent(person_id, child_id)

    spouse_pairs: list[tuple[str, str]] = []
    seen_spouse_pairs: set[frozenset[str]] = set()

    for person_id, node in graph.nodes.items():
        for spouse_id in node.record.spouse_ids:
            if not resolve(person_id, "spouse_ids", spouse_id):
                continue
            _append_unique(node.spouse_ids, spouse_id)
            _append_unique(graph.nodes[spouse_id].spouse_ids, person_id)
            pair = frozenset((person_id, spouse_id))
            if pair not in seen_spouse_pairs:
                seen_spouse_pairs.add(pair)
                spouse_pairs.append((person_id, spouse_id))

    # Add edges (relationships)
    for parent_id, child_id in parent_pairs:
        graph.edges.append(FamilyEdge(from_id=parent_id, to_id=child_id, type="parent"))
        graph.digraph.add_edge(parent_id, child_id, relationship_type=PARENT_OF)
    for a, b in spouse_pairs:
        graph.edges.append(FamilyEdge(from_id=a, to_id=b, type="spouse"))
        # Parent edges win when a pair is both (bad data); keep them intact
        if not graph.digraph.has_edge(a, b):
            graph.digraph.add_edge(a, b, relationship_type=SPOUSE_OF)
        if not graph.digraph.has_edge(b, a):
            graph.digraph.add_edge(b, a, relationship_type=SPOUSE_OF)

    logger.debug(
        "Built family graph with %d persons, %d edges, %d warnings",
        len(graph.nodes),
        len(graph.edges),
        len(graph.warnings),
    )
    return graph


def normalize_tree_type(tree_type: str) -> str:
    normalized = TREE_TYPE_ALIASES.get(str(tree_type).lower())
    if normalized is None:
        raise ValueError(f"Unknown tree type: {tree_type}")
    return normalized


def collect_tree_members(
    graph: FamilyGraph, root_id: str, tree_type: str = "descendant"
) -> list[str]:
    """
    Return the ids belonging to the tree of ``tree_type`` rooted at ``root_id``.

    The order is breadth-first from the root, so it is stable for a given graph.

    Args:
        graph: The family graph
        root_id: The person the tree is centred on
        tree_type: "ancestor", "descendant" or "full" (plural spellings accepted)

    Returns:
        Member ids, root first
    """
    if root_id not in graph.nodes:
        raise ValueError(f"Person ID {root_id} not found in graph")

    tree_type = normalize_tree_type(tree_type)

    if tree_type == "ancestor":
        expand = graph.parents_of
    elif tree_type == "descendant":
        expand = graph.children_of
    else:
        expand = graph.neighbors_of

    members = [root_id]
    seen = {root_id}
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        for nb in expand(current):
            if nb in seen:
                continue
            seen.add(nb)
            members.append(nb)
            queue.append(nb)

    if tree_type == "descendant":
        # Spouses of the root and of every descendant ride along
        for person_id in list(members):
            for spouse_id in graph.spouses_of(person_id):
                if spouse_id not in seen:
                    seen.add(spouse_id)
                    members.append(spouse_id)

    return members


def extract_tree(
    graph: FamilyGraph, root_id: str, tree_type: str = "descendant"
) -> tuple[list[str], list[FamilyEdge]]:
    """
    Extract the members of a tree and the edges between them.

    Ancestor trees report parent relations as ``child`` edges (child -> parent),
    descendant and full trees as ``parent`` edges (parent -> child).
    """
    members = collect_tree_members(graph, root_id, tree_type)
    member_set = set(members)
    ancestor_tree = normalize_tree_type(tree_type) == "ancestor"

    edges: list[FamilyEdge] = []
    for edge in graph.edges:
        if edge.from_id not in member_set or edge.to_id not in member_set:
            continue
        if edge.type == "parent" and ancestor_tree:
            edges.append(FamilyEdge(from_id=edge.to_id, to_id=edge.from_id, type="child"))
        else:
            edges.append(edge)
    return members, edges


def get_ego_subgraph(graph: FamilyGraph, center_id: str, radius: int = 2) -> nx.DiGraph:
    """
    Everyone within `radius` relation steps of `center_id`, as a copied DiGraph.

    Steps follow parent, child and spouse edges in either direction, so radius 1
    is the centre with parents, children and spouses.

    Raises:
        ValueError: center_id is unknown or radius is negative
    """
    if center_id not in graph.nodes:
        raise ValueError(f"Person ID {center_id} not found in graph")
    if radius < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")

    return nx.ego_graph(graph.digraph, center_id, radius=radius, undirected=True)


def neighbourhood_edges(graph: FamilyGraph, member_ids: Iterable[str]) -> list[FamilyEdge]:
    """Family edges with both ends among `member_ids`, each spouse pair once."""
    members = set(member_ids)
    return [e for e in graph.edges if e.from_id in members and e.to_id in members]
