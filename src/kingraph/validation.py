"""Data-quality checks for a family graph."""

import networkx as nx

from kingraph.dates import parse_date_string
from kingraph.graph import FamilyGraph

# Youngest plausible age of a parent at a child's birth
MIN_PARENT_AGE_YEARS = 12


def validate_graph(graph: FamilyGraph) -> list[str]:
    """
    Validate the family graph for:
    - Cycles in parent-child relationships (someone being their own ancestor)
    - Impossible ages (child born before parent, parent younger than 12)
    - Death before birth

    Marriages between relatives form cycles too; those are valid and not reported.
    Returns a list of warning messages.
    """
    warnings: list[str] = []

    try:
        cycle = nx.find_cycle(graph.lineage_graph(), orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    births = {pid: parse_date_string(node.record.birth_date) for pid, node in graph.nodes.items()}

    for edge in graph.edges:
        if edge.type != "parent":
            continue

        parent = graph.nodes[edge.from_id]
        child = graph.nodes[edge.to_id]
        parent_birth = births[edge.from_id]
        child_birth = births[edge.to_id]

        if parent_birth and child_birth:
            if child_birth < parent_birth:
                warnings.append(
                    f"Impossible: {child.name or child.id} born before parent "
                    f"{parent.name or parent.id}"
                )
            elif child_birth.year - parent_birth.year < MIN_PARENT_AGE_YEARS:
                warnings.append(
                    f"Suspicious: {parent.name or parent.id} was less than "
                    f"{MIN_PARENT_AGE_YEARS} years old when {child.name or child.id} was born"
                )

    for pid, node in graph.nodes.items():
        birth = births[pid]
        death = parse_date_string(node.record.death_date)
        if birth and death and death < birth:
            warnings.append(f"Impossible: {node.name or pid} died before being born")

    return warnings
