from __future__ import annotations

from pathlib import Path

import pytest

from genea.classifier import Kind, Relationship, Side
from genea.json_loader import load_json
from genea.models import Gender, Genea, Partnership, Person
from genea.naming import (
    NO_KNOWN_RELATION,
    collateral_modifiers,
    format_relationship,
    lineage_modifiers,
    ordinal,
    relationship_name,
    relationship_names,
    times,
)

SAMPLE_PATH = Path(__file__).resolve().parent.parent / "examples" / "sample.json"


def _build_aunt_niece() -> Genea:
    """A の子 B, C（C は女性）。B の子 D（女性）。B は E ともパートナー。"""
    people = [
        Person("A", "Adam Root", Gender.MALE, parent_in=("PA",)),
        Person("B", "Ben Root", Gender.MALE, child_in="PA", parent_in=("PB", "PE")),
        Person("C", "Cleo Root", Gender.FEMALE, child_in="PA"),
        Person("D", "Dina Root", Gender.FEMALE, child_in="PB"),
        Person("E", "Esme Vale", Gender.FEMALE, parent_in=("PE",)),
        Person("Z", "Zed Moss", Gender.MALE),
    ]
    partnerships = [
        Partnership("PA", parents=("A",), children=("B", "C")),
        Partnership("PB", parents=("B",), children=("D",)),
        Partnership("PE", parents=("B", "E")),
    ]
    return Genea.from_entities(people, partnerships)


class TestModifiers:
    def test_lineage(self) -> None:
        assert lineage_modifiers(1, "father") == "father"
        assert lineage_modifiers(2, "father") == "grandfather"
        assert lineage_modifiers(4, "mother") == "great-great-grandmother"

    def test_collateral(self) -> None:
        assert collateral_modifiers(1, "aunt") == "aunt"
        assert collateral_modifiers(2, "aunt") == "great-aunt"
        assert collateral_modifiers(3, "nephew") == "great-great-nephew"

    @pytest.mark.parametrize(
        ("n", "expected"),
        [
            (1, "first"),
            (2, "second"),
            (3, "third"),
            (4, "4th"),
            (11, "11th"),
            (12, "12th"),
            (13, "13th"),
            (21, "21st"),
            (22, "22nd"),
            (23, "23rd"),
            (112, "112th"),
        ],
    )
    def test_ordinal(self, n: int, expected: str) -> None:
        assert ordinal(n) == expected

    def test_times(self) -> None:
        assert times(1) == "once"
        assert times(2) == "twice"
        assert times(3) == "3 times"


class TestFormatRelationship:
    @pytest.mark.parametrize(
        ("relationship", "expected"),
        [
            (Relationship(Kind.SELF), "self"),
            (Relationship(Kind.PARTNER, Gender.FEMALE), "wife"),
            (Relationship(Kind.PARTNER), "partner"),
            (Relationship(Kind.ANCESTOR, Gender.MALE, depth=1), "father"),
            (Relationship(Kind.ANCESTOR, Gender.MALE, depth=3), "great-grandfather"),
            (Relationship(Kind.DESCENDANT, Gender.UNKNOWN, depth=2), "grandchild"),
            (Relationship(Kind.SIBLING, Gender.FEMALE, depth=1), "sister"),
            (Relationship(Kind.PIBLING, Gender.MALE, depth=1), "uncle"),
            (Relationship(Kind.PIBLING, Gender.UNKNOWN, depth=2), "great-pibling"),
            (Relationship(Kind.NIBLING, Gender.FEMALE, depth=1), "niece"),
            (Relationship(Kind.COUSIN, ordinal=1), "first cousin"),
            (
                Relationship(Kind.COUSIN, ordinal=2, removed=1),
                "second cousin once removed",
            ),
            (
                Relationship(Kind.COUSIN, ordinal=3, removed=4),
                "third cousin 4 times removed",
            ),
        ],
    )
    def test_blood(self, relationship: Relationship, expected: str) -> None:
        assert format_relationship(relationship) == expected

    @pytest.mark.parametrize(
        ("relationship", "expected"),
        [
            (Relationship(Kind.ANCESTOR, Gender.MALE, depth=1, step=True), "stepfather"),
            (
                Relationship(Kind.ANCESTOR, Gender.FEMALE, depth=2, step=True),
                "step-grandmother",
            ),
            (Relationship(Kind.DESCENDANT, Gender.MALE, depth=1, step=True), "stepson"),
            (Relationship(Kind.SIBLING, Gender.MALE, depth=1, step=True), "stepbrother"),
            (
                Relationship(Kind.COUSIN, ordinal=1, step=True),
                "first cousin by marriage",
            ),
            (
                Relationship(Kind.PIBLING, Gender.FEMALE, depth=1, step=True),
                "aunt by marriage",
            ),
        ],
    )
    def test_step(self, relationship: Relationship, expected: str) -> None:
        assert format_relationship(relationship) == expected

    @pytest.mark.parametrize(
        ("relationship", "expected"),
        [
            (
                Relationship(Kind.ANCESTOR, Gender.MALE, depth=1, in_law=True),
                "father-in-law",
            ),
            (
                Relationship(Kind.SIBLING, Gender.FEMALE, depth=1, in_law=True, step=True),
                "sister-in-law",
            ),
            (
                Relationship(Kind.ANCESTOR, Gender.MALE, depth=2, in_law=True),
                "grandfather by marriage",
            ),
        ],
    )
    def test_in_law(self, relationship: Relationship, expected: str) -> None:
        assert format_relationship(relationship) == expected

    def test_side_by_unique_gender(self) -> None:
        side = Side(
            person=Person("1", "Dan Ford"),
            parent=Person("2", "Amy Ford", Gender.FEMALE),
            unique_gender=True,
        )
        relationship = Relationship(Kind.COUSIN, ordinal=1, side=side)
        assert format_relationship(relationship) == "first cousin on Dan's mother's side"

    def test_side_by_name(self) -> None:
        """同じ性別の親が複数いる場合は名前で示す。"""
        side = Side(
            person=Person("1", "Dan Ford"),
            parent=Person("2", "Amy Ford", Gender.FEMALE),
            unique_gender=False,
        )
        relationship = Relationship(Kind.PIBLING, Gender.MALE, depth=1, side=side)
        assert format_relationship(relationship) == "uncle via Amy Ford"


class TestRelationshipName:
    def test_aunt(self) -> None:
        genea = _build_aunt_niece()
        name = relationship_name(
            genea, genea.person("D"), genea.person("C"), genea.partnership("PA")
        )
        assert name == "aunt"

    def test_niece(self) -> None:
        genea = _build_aunt_niece()
        name = relationship_name(
            genea, genea.person("C"), genea.person("D"), genea.partnership("PA")
        )
        assert name == "niece"

    def test_unreachable(self) -> None:
        genea = _build_aunt_niece()
        name = relationship_name(
            genea, genea.person("Z"), genea.person("C"), genea.partnership("PA")
        )
        assert name is None


class TestRelationshipNames:
    def test_self(self) -> None:
        genea = _build_aunt_niece()
        d = genea.person("D")
        assert relationship_names(genea, d, d) == ["self"]

    def test_step_mother(self) -> None:
        genea = _build_aunt_niece()
        assert relationship_names(genea, genea.person("D"), genea.person("E")) == [
            "stepmother"
        ]

    def test_no_known_relation(self) -> None:
        """共通の祖先がなければ空リスト。"""
        genea = _build_aunt_niece()
        assert relationship_names(genea, genea.person("D"), genea.person("Z")) == []
        assert NO_KNOWN_RELATION == "no known relation"

    @pytest.mark.parametrize(
        ("person", "relative", "expected"),
        [
            ("13", "4", ["great-aunt on Mia's father's side"]),
            ("7", "8", ["first cousin on Gary's father's side"]),
            ("7", "10", ["brother"]),
            ("10", "7", ["brother"]),
            ("7", "11", ["stepfather"]),
            ("7", "3", ["father"]),
            ("7", "12", ["wife"]),
            ("12", "1", ["grandfather by marriage"]),
            ("3", "4", ["sister"]),
        ],
    )
    def test_sample(self, person: str, relative: str, expected: list[str]) -> None:
        genea = load_json(SAMPLE_PATH)
        names = relationship_names(genea, genea.person(person), genea.person(relative))
        assert names == expected


class TestRelationshipNamesEdgeCases:
    def test_partners_of_same_person(self) -> None:
        """Bob の二人のパートナー同士には続柄がない。"""
        people = [
            Person("B", "Bob Lane", Gender.MALE, parent_in=("pX", "pE")),
            Person("X", "Xena Lane", Gender.FEMALE, parent_in=("pX",)),
            Person("E", "Eve Hart", Gender.FEMALE, parent_in=("pE",)),
        ]
        partnerships = [
            Partnership("pX", parents=("B", "X")),
            Partnership("pE", parents=("B", "E")),
        ]
        genea = Genea.from_entities(people, partnerships)
        assert relationship_names(genea, genea.person("X"), genea.person("E")) == []
        assert relationship_names(genea, genea.person("X"), genea.person("B")) == ["husband"]

    def test_blood_only_has_no_step_relations(self) -> None:
        genea = _build_aunt_niece()
        d, e = genea.person("D"), genea.person("E")
        assert relationship_names(genea, d, e, steps=False) == []
        assert relationship_names(genea, d, e) == ["stepmother"]

    def test_blood_only_sample(self) -> None:
        genea = load_json(SAMPLE_PATH)
        gary = genea.person("7")
        assert relationship_names(genea, gary, genea.person("11"), steps=False) == []
        assert relationship_names(genea, gary, genea.person("12"), steps=False) == ["wife"]
        assert relationship_names(genea, gary, genea.person("10"), steps=False) == ["brother"]
