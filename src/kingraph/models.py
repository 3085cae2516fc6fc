"""Data classes for person records, the family graph, relationships and layouts."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Literal

EdgeType = Literal["parent", "child", "spouse"]
StepRelationship = Literal["start", "father", "mother", "parent", "child", "spouse"]
StepDirection = Literal["start", "up", "down", "lateral"]
RelationshipStatus = Literal["same_person", "related", "not_related", "person_not_found"]
LayoutDirection = Literal["vertical", "horizontal"]
TreeType = Literal["ancestor", "descendant", "full"]
LayoutType = Literal["standard", "compact", "timeline", "hourglass"]

TREE_TYPE_ALIASES = {
    "ancestor": "ancestor",
    "ancestors": "ancestor",
    "descendant": "descendant",
    "descendants": "descendant",
    "full": "full",
}


def _as_id_tuple(value: Any) -> tuple[str, ...]:
    """Accept None, a single id or a list of ids and return a tuple of non-empty ids."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, Iterable):
        raise ValueError(f"Expected an id or a list of ids, got {value!r}")
    return tuple(str(v).strip() for v in value if v is not None and str(v).strip())


def _as_optional_id(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


@dataclass(frozen=True)
class PersonRecord:
    id: str
    name: str = ""
    birth_date: str | None = None  # raw string, may be partial or qualified ("ABT 1850")
    death_date: str | None = None
    sex: str | None = None
    father_id: str | None = None
    mother_id: str | None = None
    parent_ids: tuple[str, ...] = ()
    spouse_ids: tuple[str, ...] = ()
    children_ids: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersonRecord":
        """Build a record from a plain mapping handed over by the record source.

        Reference lists may be given either as a single id or as a list of ids.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Person record is not a mapping: {data!r}")
        person_id = _as_optional_id(data.get("id"))
        if person_id is None:
            raise ValueError(f"Person record without id: {data!r}")

        return cls(
            id=person_id,
            name=str(data.get("name") or ""),
            birth_date=data.get("birth_date") or None,
            death_date=data.get("death_date") or None,
            sex=data.get("sex") or None,
            father_id=_as_optional_id(data.get("father_id")),
            mother_id=_as_optional_id(data.get("mother_id")),
            parent_ids=_as_id_tuple(data.get("parent_ids")),
            spouse_ids=_as_id_tuple(data.get("spouse_ids")),
            children_ids=_as_id_tuple(data.get("children_ids")),
        )


@dataclass(eq=False)
class PersonNode:
    """
    A person in the graph with references resolved against the loaded records.

    Nodes compare and hash by identity so results referring to them stay hashable.
    """

    record: PersonRecord
    father_id: str | None = None
    mother_id: str | None = None
    parent_ids: list[str] = field(default_factory=list)
    children_ids: list[str] = field(default_factory=list)
    spouse_ids: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    def all_parent_ids(self) -> list[str]:
        """Father, mother, then generic parents."""
        out = []
        if self.father_id:
            out.append(self.father_id)
        if self.mother_id:
            out.append(self.mother_id)
        out.extend(self.parent_ids)
        return out


@dataclass(frozen=True)
class FamilyEdge:
    from_id: str
    to_id: str
    type: EdgeType


@dataclass(frozen=True)
class RelationshipStep:
    person: PersonNode
    relationship: StepRelationship
    direction: StepDirection


@dataclass(frozen=True)
class RelationshipResult:
    person_a: PersonNode | None
    person_b: PersonNode | None
    path: tuple[RelationshipStep, ...]
    description: str
    status: RelationshipStatus
    common_ancestor: PersonNode | None = None
    generations_up: int = 0
    generations_down: int = 0
    is_direct_line: bool = False
    is_blood_relation: bool = False
    # Search diagnostics
    iterations: int = 0
    visited_count: int = 0
    hit_iteration_cap: bool = False

    @property
    def found(self) -> bool:
        return self.status in ("same_person", "related")

    def to_dict(self) -> dict[str, Any]:
        return {
            "person_a": self.person_a.id if self.person_a else None,
            "person_b": self.person_b.id if self.person_b else None,
            "status": self.status,
            "description": self.description,
            "path": [
                {
                    "person_id": step.person.id,
                    "name": step.person.name,
                    "relationship": step.relationship,
                    "direction": step.direction,
                }
                for step in self.path
            ],
            "common_ancestor": self.common_ancestor.id if self.common_ancestor else None,
            "generations_up": self.generations_up,
            "generations_down": self.generations_down,
            "is_direct_line": self.is_direct_line,
            "is_blood_relation": self.is_blood_relation,
            "iterations": self.iterations,
            "visited_count": self.visited_count,
            "hit_iteration_cap": self.hit_iteration_cap,
        }


@dataclass(frozen=True)
class LayoutOptions:
    node_spacing_x: float = 300
    node_spacing_y: float = 200
    node_width: float = 250
    node_height: float = 120
    direction: LayoutDirection = "vertical"
    tree_type: TreeType = "descendant"
    layout_type: LayoutType = "standard"

    def __post_init__(self):
        tree_type = TREE_TYPE_ALIASES.get(str(self.tree_type).lower())
        if tree_type is None:
            raise ValueError(f"Unknown tree type: {self.tree_type}")
        # Frozen dataclass: normalise plural spellings in place
        object.__setattr__(self, "tree_type", tree_type)

        if self.direction not in ("vertical", "horizontal"):
            raise ValueError(f"Unknown layout direction: {self.direction}")
        if self.layout_type not in ("standard", "compact", "timeline", "hourglass"):
            raise ValueError(f"Unknown layout type: {self.layout_type}")
        for name in ("node_spacing_x", "node_spacing_y", "node_width", "node_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    def with_spacing_multiplier(self, multiplier: float) -> "LayoutOptions":
        return replace(
            self,
            node_spacing_x=self.node_spacing_x * multiplier,
            node_spacing_y=self.node_spacing_y * multiplier,
        )


@dataclass(frozen=True)
class NodePosition:
    person_id: str
    x: float
    y: float
    generation: int | None = None


@dataclass(frozen=True)
class LayoutResult:
    positions: tuple[NodePosition, ...]
    options: LayoutOptions
    engine: str

    def position_of(self, person_id: str) -> NodePosition | None:
        for pos in self.positions:
            if pos.person_id == person_id:
                return pos
        return None

    def to_dict(self) -> dict[str, Any]:
        opts = self.options
        return {
            "engine": self.engine,
            "options": {
                "node_spacing_x": opts.node_spacing_x,
                "node_spacing_y": opts.node_spacing_y,
                "node_width": opts.node_width,
                "node_height": opts.node_height,
                "direction": opts.direction,
                "tree_type": opts.tree_type,
                "layout_type": opts.layout_type,
            },
            "positions": [
                {"person_id": p.person_id, "x": p.x, "y": p.y, "generation": p.generation}
                for p in self.positions
            ],
        }
