"""Shortest relationship paths and kinship descriptions between two people."""

from collections import deque
from dataclasses import dataclass
import logging

from kingraph.graph import FamilyGraph
from kingraph.models import PersonNode, RelationshipResult, RelationshipStep

logger = logging.getLogger(__name__)

# Safety limit on BFS expansions
MAX_ITERATIONS = 10_000

NOT_RELATED = "Not related"
SAME_PERSON = "Same person"
PERSON_NOT_FOUND = "Person not found"


@dataclass
class PathAnalysis:
    generations_up: int
    generations_down: int
    has_spouse_connection: bool
    through_descendant: bool
    common_ancestor: PersonNode | None

    @property
    def is_direct_line(self) -> bool:
        return self.generations_up == 0 or self.generations_down == 0

    @property
    def is_blood_relation(self) -> bool:
        """
        True unless the only connection is a bare spousal step.

        Paths that go down to a shared descendant and back up (the unmarried
        parents of one child) are deliberately not blood relations either: the
        two people share no ancestor, only a child.
        """
        if self.through_descendant:
            return False
        if not self.has_spouse_connection:
            return True
        return self.generations_up > 0 or self.generations_down > 0


def format_ordinal(n: int) -> str:
    if n == 1:
        return "1st"
    if n == 2:
        return "2nd"
    if n == 3:
        return "3rd"
    return f"{n}th"


def _greats(count: int) -> str:
    return "Great-" * max(count, 0)


def ancestor_term(generations: int) -> str:
    if generations == 1:
        return "Parent"
    if generations == 2:
        return "Grandparent"
    return _greats(generations - 2) + "Grandparent"


def descendant_term(generations: int) -> str:
    if generations == 1:
        return "Child"
    if generations == 2:
        return "Grandchild"
    return _greats(generations - 2) + "Grandchild"


def cousin_term(generations_up: int, generations_down: int) -> str:
    """Cousin degree from the nearer side of the common ancestor, removal from the difference."""
    degree = min(generations_up, generations_down) - 1
    removal = abs(generations_up - generations_down)

    term = f"{format_ordinal(degree)} Cousin"
    if removal > 0:
        term += f" {removal} {'time' if removal == 1 else 'times'} removed"
    return term


def describe_relationship(
    generations_up: int,
    generations_down: int,
    has_spouse_connection: bool = False,
    through_descendant: bool = False,
) -> str:
    """
    Turn generation counts into a kinship term.

    Rules are applied in priority order; the first match wins.
    """
    up, down = generations_up, generations_down
    blood = not has_spouse_connection

    if up == 0 and down == 0 and has_spouse_connection:
        return "Spouse"

    # Down to a shared descendant and back up: no common ancestor, so no kinship
    # term applies (and the pair is not counted as blood, see PathAnalysis)
    if through_descendant and blood:
        return f"Related ({up} gen. up, {down} gen. down)"

    if blood:
        if up > 0 and down == 0:
            return ancestor_term(up)
        if up == 0 and down > 0:
            return descendant_term(down)
        if up == 1 and down == 1:
            return "Sibling"
        if up == 1 and down == 2:
            return "Niece/Nephew"
        if up == 2 and down == 1:
            return "Aunt/Uncle"
        if up > 1 and down > 1:
            return cousin_term(up, down)
        if up > 2 and down == 1:
            return _greats(up - 2) + "Grand Aunt/Uncle"
        if up == 1 and down > 2:
            return _greats(down - 2) + "Grand Niece/Nephew"
    else:
        if up == 1 and down == 0:
            return "Parent-in-law"
        if up == 0 and down == 1:
            return "Child-in-law"
        if up == 1 and down == 1:
            return "Sibling-in-law"
        return "Related by marriage"

    return f"Related ({up} gen. up, {down} gen. down)"


def analyze_path(path: list[RelationshipStep] | tuple[RelationshipStep, ...]) -> PathAnalysis:
    """
    Count generations walked up and down a path and locate the common ancestor.

    The common ancestor is the person reached by the last upward step taken before
    the path first turns downward (the final person of a purely upward path).
    """
    up = 0
    down = 0
    has_spouse = False
    through_descendant = False
    common_ancestor: PersonNode | None = None

    for step in path[1:]:
        if step.direction == "up":
            if down > 0:
                # Climbing again after descending: linked through a shared descendant
                through_descendant = True
            else:
                common_ancestor = step.person
            up += 1
        elif step.direction == "down":
            down += 1
        elif step.direction == "lateral":
            has_spouse = True

    if through_descendant:
        common_ancestor = None

    return PathAnalysis(
        generations_up=up,
        generations_down=down,
        has_spouse_connection=has_spouse,
        through_descendant=through_descendant,
        common_ancestor=common_ancestor,
    )


def _expansions(graph: FamilyGraph, node: PersonNode):
    """Neighbours in search order: father, mother, generic parents, children, spouses."""
    if node.father_id:
        yield node.father_id, "father", "up"
    if node.mother_id:
        yield node.mother_id, "mother", "up"
    for parent_id in node.parent_ids:
        yield parent_id, "parent", "up"
    for child_id in node.children_ids:
        yield child_id, "child", "down"
    for spouse_id in node.spouse_ids:
        yield spouse_id, "spouse", "lateral"


@dataclass
class SearchOutcome:
    path: list[RelationshipStep] | None
    iterations: int
    visited_count: int
    hit_iteration_cap: bool


def find_path(
    graph: FamilyGraph,
    person_a: PersonNode,
    person_b: PersonNode,
    *,
    max_iterations: int = MAX_ITERATIONS,
) -> SearchOutcome:
    """Breadth-first search for the shortest path (in hops) from person_a to person_b."""
    start = RelationshipStep(person=person_a, relationship="start", direction="start")
    came_from: dict[str, tuple[str | None, RelationshipStep]] = {person_a.id: (None, start)}
    queue = deque([person_a.id])

    iterations = 0
    while queue and iterations < max_iterations:
        iterations += 1
        current_id = queue.popleft()

        if current_id == person_b.id:
            # reconstruct
            path: list[RelationshipStep] = []
            cur: str | None = current_id
            while cur is not None:
                prev, step = came_from[cur]
                path.append(step)
                cur = prev
            path.reverse()
            logger.debug(
                "Path found from %s to %s after %d iterations (%d visited)",
                person_a.id,
                person_b.id,
                iterations,
                len(came_from),
            )
            return SearchOutcome(path, iterations, len(came_from), False)

        for nb_id, relationship, direction in _expansions(graph, graph.nodes[current_id]):
            nb = graph.nodes.get(nb_id)
            if nb is None or nb_id in came_from:
                continue
            step = RelationshipStep(person=nb, relationship=relationship, direction=direction)
            came_from[nb_id] = (current_id, step)
            queue.append(nb_id)

    hit_cap = bool(queue) and iterations >= max_iterations
    logger.warning(
        "No path found from %s to %s: %d iterations, %d visited, iteration cap hit: %s",
        person_a.id,
        person_b.id,
        iterations,
        len(came_from),
        hit_cap,
    )
    return SearchOutcome(None, iterations, len(came_from), hit_cap)


def find_relationship(
    graph: FamilyGraph,
    id_a: str,
    id_b: str,
    *,
    max_iterations: int = MAX_ITERATIONS,
) -> RelationshipResult:
    """
    Find how person ``id_b`` is related to person ``id_a``.

    The description names what B is to A ("Parent" when B is A's parent).
    Unknown ids give a ``person_not_found`` result instead of raising.
    """
    person_a = graph.get(id_a)
    person_b = graph.get(id_b)

    if person_a is None or person_b is None:
        logger.warning(
            "Person not found: %s (found: %s), %s (found: %s)",
            id_a,
            person_a is not None,
            id_b,
            person_b is not None,
        )
        return RelationshipResult(
            person_a=person_a,
            person_b=person_b,
            path=(),
            description=PERSON_NOT_FOUND,
            status="person_not_found",
        )

    if id_a == id_b:
        return RelationshipResult(
            person_a=person_a,
            person_b=person_b,
            path=(RelationshipStep(person=person_a, relationship="start", direction="start"),),
            description=SAME_PERSON,
            status="same_person",
            is_direct_line=True,
            is_blood_relation=True,
        )

    outcome = find_path(graph, person_a, person_b, max_iterations=max_iterations)
    if not outcome.path:
        return RelationshipResult(
            person_a=person_a,
            person_b=person_b,
            path=(),
            description=NOT_RELATED,
            status="not_related",
            iterations=outcome.iterations,
            visited_count=outcome.visited_count,
            hit_iteration_cap=outcome.hit_iteration_cap,
        )

    analysis = analyze_path(outcome.path)
    return RelationshipResult(
        person_a=person_a,
        person_b=person_b,
        path=tuple(outcome.path),
        description=describe_relationship(
            analysis.generations_up,
            analysis.generations_down,
            analysis.has_spouse_connection,
            analysis.through_descendant,
        ),
        status="related",
        common_ancestor=analysis.common_ancestor,
        generations_up=analysis.generations_up,
        generations_down=analysis.generations_down,
        is_direct_line=analysis.is_direct_line,
        is_blood_relation=analysis.is_blood_relation,
        iterations=outcome.iterations,
        visited_count=outcome.visited_count,
        hit_iteration_cap=outcome.hit_iteration_cap,
    )
