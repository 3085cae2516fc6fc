from __future__ import annotations

import pytest

from kingraph.graph import FamilyGraph, build_family_graph
from kingraph.models import PersonRecord
from kingraph.relationship import (
    analyze_path,
    ancestor_term,
    cousin_term,
    describe_relationship,
    descendant_term,
    find_relationship,
    format_ordinal,
)


@pytest.mark.parametrize(
    "generations, expected",
    [
        (1, "Parent"),
        (2, "Grandparent"),
        (3, "Great-Grandparent"),
        (4, "Great-Great-Grandparent"),
        (5, "Great-Great-Great-Grandparent"),
        (6, "Great-Great-Great-Great-Grandparent"),
    ],
)
def test_ancestor_terms(generations: int, expected: str) -> None:
    assert ancestor_term(generations) == expected
    expected_descendant = expected.replace("parent", "child").replace("Parent", "Child")
    assert descendant_term(generations) == expected_descendant


def test_ordinals() -> None:
    assert [format_ordinal(n) for n in (1, 2, 3, 4, 11)] == ["1st", "2nd", "3rd", "4th", "11th"]


def test_cousin_arithmetic() -> None:
    assert cousin_term(2, 2) == "1st Cousin"
    assert cousin_term(3, 3) == "2nd Cousin"
    assert cousin_term(3, 5) == "2nd Cousin 2 times removed"
    assert cousin_term(2, 3) == "1st Cousin 1 time removed"


def test_describe_relationship_rules() -> None:
    assert describe_relationship(0, 0, has_spouse_connection=True) == "Spouse"
    assert describe_relationship(1, 1) == "Sibling"
    assert describe_relationship(1, 2) == "Niece/Nephew"
    assert describe_relationship(2, 1) == "Aunt/Uncle"
    assert describe_relationship(3, 1) == "Great-Grand Aunt/Uncle"
    assert describe_relationship(1, 4) == "Great-Great-Grand Niece/Nephew"
    assert describe_relationship(1, 0, has_spouse_connection=True) == "Parent-in-law"
    assert describe_relationship(0, 1, has_spouse_connection=True) == "Child-in-law"
    assert describe_relationship(1, 1, has_spouse_connection=True) == "Sibling-in-law"
    assert describe_relationship(2, 3, has_spouse_connection=True) == "Related by marriage"
    assert (
        describe_relationship(1, 1, through_descendant=True) == "Related (1 gen. up, 1 gen. down)"
    )


def test_same_person_result(kin_graph: FamilyGraph) -> None:
    for person_id in kin_graph.nodes:
        result = find_relationship(kin_graph, person_id, person_id)
        assert result.status == "same_person"
        assert result.description == "Same person"
        assert result.generations_up == 0
        assert result.generations_down == 0
        assert len(result.path) == 1


@pytest.mark.parametrize(
    "a, b, forward, backward",
    [
        ("C1", "C2", "Sibling", "Sibling"),
        ("C1", "C3", "1st Cousin", "1st Cousin"),
        ("D1", "D3", "2nd Cousin", "2nd Cousin"),
        ("D1", "F3", "2nd Cousin 2 times removed", "2nd Cousin 2 times removed"),
        ("A1", "F1", "Great-Great-Great-Grandchild", "Great-Great-Great-Grandparent"),
        ("B2", "C1", "Niece/Nephew", "Aunt/Uncle"),
        ("B2", "D1", "Great-Grand Niece/Nephew", "Great-Grand Aunt/Uncle"),
        ("B1", "C1", "Child", "Parent"),
    ],
)
def test_blood_relationships_are_symmetric(
    kin_graph: FamilyGraph, a: str, b: str, forward: str, backward: str
) -> None:
    there = find_relationship(kin_graph, a, b)
    back = find_relationship(kin_graph, b, a)

    assert there.description == forward
    assert back.description == backward
    assert there.generations_up == back.generations_down
    assert there.generations_down == back.generations_up
    assert there.is_blood_relation and back.is_blood_relation


def test_cousin_path_details(kin_graph: FamilyGraph) -> None:
    result = find_relationship(kin_graph, "C1", "C3")

    assert result.status == "related"
    assert [step.person.id for step in result.path] == ["C1", "B1", "A1", "B2", "C3"]
    assert [step.direction for step in result.path] == ["start", "up", "up", "down", "down"]
    assert [step.relationship for step in result.path] == [
        "start",
        "father",
        "father",
        "child",
        "child",
    ]
    assert result.common_ancestor is not None and result.common_ancestor.id == "A1"
    assert result.generations_up == 2
    assert result.generations_down == 2
    assert not result.is_direct_line


def test_direct_line_flags(kin_graph: FamilyGraph) -> None:
    result = find_relationship(kin_graph, "F1", "A1")
    assert result.is_direct_line
    assert result.common_ancestor is not None and result.common_ancestor.id == "A1"

    down = find_relationship(kin_graph, "A1", "F1")
    assert down.is_direct_line
    assert down.common_ancestor is None


def test_spouse_and_in_laws(kin_graph: FamilyGraph) -> None:
    spouse = find_relationship(kin_graph, "B1", "B1S")
    assert spouse.description == "Spouse"
    assert not spouse.is_blood_relation
    assert find_relationship(kin_graph, "B1S", "B1").description == "Spouse"

    assert find_relationship(kin_graph, "A1", "B1S").description == "Child-in-law"
    assert find_relationship(kin_graph, "B1S", "A1").description == "Parent-in-law"

    sibling_in_law = find_relationship(kin_graph, "B1S", "B2")
    assert sibling_in_law.description == "Sibling-in-law"
    assert [step.direction for step in sibling_in_law.path] == ["start", "lateral", "up", "down"]


def test_unmarried_coparents_are_not_siblings() -> None:
    graph = build_family_graph(
        [
            PersonRecord(id="P1"),
            PersonRecord(id="P2"),
            PersonRecord(id="K", father_id="P1", mother_id="P2"),
        ]
    )
    result = find_relationship(graph, "P1", "P2")

    assert result.description == "Related (1 gen. up, 1 gen. down)"
    assert not result.is_blood_relation
    assert result.common_ancestor is None


def test_unrelated_people() -> None:
    graph = build_family_graph([PersonRecord(id="X"), PersonRecord(id="Y")])
    result = find_relationship(graph, "X", "Y")

    assert result.status == "not_related"
    assert result.description == "Not related"
    assert result.path == ()
    assert result.generations_up == 0 and result.generations_down == 0
    assert not result.is_direct_line and not result.is_blood_relation
    assert not result.hit_iteration_cap


def test_unknown_person_is_not_an_error(kin_graph: FamilyGraph) -> None:
    result = find_relationship(kin_graph, "A1", "nobody")

    assert result.status == "person_not_found"
    assert not result.found
    assert result.person_a is not None and result.person_b is None
    assert result.path == ()


def test_iteration_cap_reports_diagnostics() -> None:
    records = [PersonRecord(id="N0")]
    records += [PersonRecord(id=f"N{i}", father_id=f"N{i - 1}") for i in range(1, 50)]
    graph = build_family_graph(records)

    capped = find_relationship(graph, "N0", "N49", max_iterations=5)
    assert capped.description == "Not related"
    assert capped.hit_iteration_cap
    assert capped.iterations == 5
    assert capped.visited_count > 1

    full = find_relationship(graph, "N0", "N49")
    assert full.generations_down == 49
    assert not full.hit_iteration_cap


def test_cousin_marriage_cycle_terminates(kin_records: list[PersonRecord]) -> None:
    records = [r for r in kin_records if r.id not in ("C1", "C3")]
    by_id = {r.id: r for r in kin_records}
    records.append(PersonRecord(**{**by_id["C1"].__dict__, "spouse_ids": ("C3",)}))
    records.append(PersonRecord(**{**by_id["C3"].__dict__, "spouse_ids": ("C1",)}))
    records.append(PersonRecord(id="K", father_id="C1", mother_id="C3"))
    graph = build_family_graph(records)

    assert find_relationship(graph, "C1", "C3").description == "Spouse"
    assert find_relationship(graph, "K", "A1").description == "Great-Grandparent"
    assert find_relationship(graph, "K", "B2").description == "Grandparent"


def test_analyze_path_counts_generic_parents() -> None:
    graph = build_family_graph(
        [
            PersonRecord(id="P"),
            PersonRecord(id="C", parent_ids=("P",)),
        ]
    )
    result = find_relationship(graph, "C", "P")
    assert result.path[1].relationship == "parent"
    assert result.description == "Parent"

    analysis = analyze_path(result.path)
    assert analysis.generations_up == 1
    assert analysis.common_ancestor is not None and analysis.common_ancestor.id == "P"


def test_to_dict_is_plain_data(kin_graph: FamilyGraph) -> None:
    data = find_relationship(kin_graph, "C1", "C3").to_dict()
    assert data["description"] == "1st Cousin"
    assert data["common_ancestor"] == "A1"
    assert data["path"][0] == {
        "person_id": "C1",
        "name": "C1",
        "relationship": "start",
        "direction": "start",
    }


def test_results_are_hashable_values(kin_graph: FamilyGraph) -> None:
    result = find_relationship(kin_graph, "C1", "C3")
    again = find_relationship(kin_graph, "C1", "C3")

    assert hash(result) == hash(again)
    assert result == again
    assert len({result, again}) == 1
    assert len({step for step in result.path}) == len(result.path)
    assert isinstance(hash(find_relationship(kin_graph, "C1", "nobody")), int)
