from __future__ import annotations

from collections import deque
from collections.abc import Callable

import pytest

from kingraph.graph import FamilyGraph, build_family_graph
from kingraph.models import PersonRecord


def _person(pid: str, **kwargs) -> PersonRecord:
    return PersonRecord(id=pid, name=kwargs.pop("name", pid), **kwargs)


@pytest.fixture()
def kin_records() -> list[PersonRecord]:
    # Founders A1 + A2; two sons B1, B2 married to in-laws B1S, B2S.
    #   B1 -> C1 (with B1S), C2 (B1 only)      B2 -> C3 (with B2S)
    #   C1 -> D1 -> E1 -> F1                   C3 -> D3 -> E3 -> F3
    return [
        _person("A1", sex="M", birth_date="1800", spouse_ids=("A2",)),
        _person("A2", sex="F", birth_date="ABT 1802", spouse_ids=("A1",)),
        _person(
            "B1", sex="M", birth_date="1825", father_id="A1", mother_id="A2", spouse_ids=("B1S",)
        ),
        _person("B1S", sex="F", birth_date="1827"),
        _person(
            "B2", sex="M", birth_date="1828", father_id="A1", mother_id="A2", spouse_ids=("B2S",)
        ),
        _person("B2S", sex="F"),
        _person("C1", sex="M", birth_date="1850", father_id="B1", mother_id="B1S"),
        _person("C2", sex="F", birth_date="1853", father_id="B1"),
        _person("C3", sex="M", birth_date="1855", father_id="B2", mother_id="B2S"),
        _person("D1", sex="M", father_id="C1"),
        _person("D3", sex="F", father_id="C3"),
        _person("E1", sex="M", father_id="D1"),
        _person("E3", sex="M", mother_id="D3"),
        _person("F1", sex="F", father_id="E1"),
        _person("F3", sex="F", father_id="E3"),
    ]


@pytest.fixture()
def kin_graph(kin_records: list[PersonRecord]) -> FamilyGraph:
    return build_family_graph(kin_records)


def _synthetic_records(size: int) -> list[PersonRecord]:
    """Deterministic family of exactly ``size`` persons descending from one founding couple."""
    people: dict[str, dict] = {}

    def add(sex: str, year: int, **refs) -> str:
        pid = f"P{len(people) + 1}"
        people[pid] = {"sex": sex, "birth_date": str(year), "spouse_ids": [], **refs}
        return pid

    def marry(a: str, b: str) -> None:
        people[a]["spouse_ids"].append(b)
        people[b]["spouse_ids"].append(a)

    founder = add("M", 1800)
    if size > 1:
        marry(founder, add("F", 1802))

    couples = deque([(founder, "P2" if size > 1 else None, 1800)])
    while len(people) < size and couples:
        father, mother, year = couples.popleft()
        for i in range(3):
            if len(people) >= size:
                break
            sex = "M" if i % 2 == 0 else "F"
            child = add(sex, year + 25 + 2 * i, father_id=father, mother_id=mother)
            if len(people) >= size:
                break
            spouse = add("F" if sex == "M" else "M", year + 26 + 2 * i)
            marry(child, spouse)
            if sex == "M":
                couples.append((child, spouse, year + 25))
            else:
                couples.append((spouse, child, year + 25))

    return [
        PersonRecord(
            id=pid,
            name=f"Person {pid}",
            sex=data["sex"],
            birth_date=data["birth_date"],
            father_id=data.get("father_id"),
            mother_id=data.get("mother_id"),
            spouse_ids=tuple(data["spouse_ids"]),
        )
        for pid, data in people.items()
    ]


@pytest.fixture()
def synthetic_family() -> Callable[[int], list[PersonRecord]]:
    return _synthetic_records
