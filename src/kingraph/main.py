"""
Command line entry point.

1) Load person records handed over by the record source (a JSON array of mappings).
2) Build the family graph; dropped references are reported on stderr.
3) Describe the relationship between two people, lay out a tree around a root
   person, or list the neighbourhood of one person. Results are printed as JSON.
"""

import argparse
import json
import logging
from pathlib import Path
import sys

from kingraph.graph import FamilyGraph, build_family_graph, get_ego_subgraph, neighbourhood_edges
from kingraph.layout_selector import compute_layout
from kingraph.models import LayoutOptions, PersonRecord
from kingraph.relationship import find_relationship
from kingraph.validation import validate_graph

logger = logging.getLogger("kingraph")


def load_records(path: Path) -> list[PersonRecord]:
    """Read a JSON array of person mappings."""
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of person records")

    records = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"{path}: record {i} is not an object")
        try:
            records.append(PersonRecord.from_dict(item))
        except ValueError as exc:
            raise ValueError(f"{path}: record {i}: {exc}") from exc
    return records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kingraph",
        description="Family graph relationships and layouts",
    )
    parser.add_argument("records", type=Path, help="JSON file with an array of person records")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Report data-quality warnings on stderr",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    rel = sub.add_parser("relationship", help="Describe how person B is related to person A")
    rel.add_argument("person_a")
    rel.add_argument("person_b")

    lay = sub.add_parser("layout", help="Compute node positions for a tree")
    lay.add_argument("root")
    lay.add_argument(
        "--layout-type",
        default="standard",
        choices=["standard", "compact", "timeline", "hourglass"],
    )
    lay.add_argument(
        "--tree-type",
        default="descendant",
        choices=["ancestor", "descendant", "full"],
    )
    lay.add_argument("--direction", default="vertical", choices=["vertical", "horizontal"])
    lay.add_argument("--spacing-x", type=float, default=300)
    lay.add_argument("--spacing-y", type=float, default=200)
    lay.add_argument("--node-width", type=float, default=250)
    lay.add_argument("--node-height", type=float, default=120)

    hood = sub.add_parser("neighbourhood", help="List everyone within a few relation steps")
    hood.add_argument("center")
    hood.add_argument("--radius", type=int, default=2)
    return parser


def neighbourhood_to_dict(graph: FamilyGraph, center_id: str, radius: int) -> dict:
    ego = get_ego_subgraph(graph, center_id, radius=radius)
    # Keep record order; subgraph node order is not stable
    member_ids = [pid for pid in graph.nodes if pid in ego]
    return {
        "center": center_id,
        "radius": radius,
        "persons": [{"person_id": pid, "name": graph.nodes[pid].name} for pid in member_ids],
        "edges": [
            {"from": e.from_id, "to": e.to_id, "type": e.type}
            for e in neighbourhood_edges(graph, member_ids)
        ],
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        records = load_records(args.records)
    except (OSError, ValueError) as exc:
        print(f"Could not load records: {exc}", file=sys.stderr)
        return 2

    graph = build_family_graph(records)
    logger.info("Graph has %d persons and %d edges", len(graph.nodes), len(graph.edges))

    if args.validate:
        warnings = validate_graph(graph)
        for w in warnings[:10]:
            print(f"  - {w}", file=sys.stderr)
        if len(warnings) > 10:
            print(f"  ... and {len(warnings) - 10} more", file=sys.stderr)

    if args.command == "relationship":
        result = find_relationship(graph, args.person_a, args.person_b)
        print(json.dumps(result.to_dict(), indent=2))
        return 0 if result.status != "person_not_found" else 1

    try:
        if args.command == "neighbourhood":
            output = neighbourhood_to_dict(graph, args.center, args.radius)
        else:
            options = LayoutOptions(
                node_spacing_x=args.spacing_x,
                node_spacing_y=args.spacing_y,
                node_width=args.node_width,
                node_height=args.node_height,
                direction=args.direction,
                tree_type=args.tree_type,
                layout_type=args.layout_type,
            )
            output = compute_layout(graph, args.root, options).to_dict()
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
