"""続柄記述子を英語の親族名称に変換する。

例: "great-aunt", "second cousin twice removed",
"first cousin on Dan's mother's side"
"""

from __future__ import annotations

from genea.classifier import Kind, Relationship, Side, classify
from genea.models import Gender, Genea, Partnership, Person
from genea.traversal import common_ancestral_partnerships

NO_KNOWN_RELATION = "no known relation"

# 性別ごとの基本語彙（男性, 女性, 不明）
_VOCABULARY: dict[str, tuple[str, str, str]] = {
    "parent": ("father", "mother", "parent"),
    "child": ("son", "daughter", "child"),
    "pibling": ("uncle", "aunt", "pibling"),
    "nibling": ("nephew", "niece", "nibling"),
    "sibling": ("brother", "sister", "sibling"),
    "partner": ("husband", "wife", "partner"),
}


def gendered(term: str, gender: Gender) -> str:
    male, female, neutral = _VOCABULARY[term]
    if gender is Gender.MALE:
        return male
    if gender is Gender.FEMALE:
        return female
    return neutral


def parent_name(gender: Gender) -> str:
    return gendered("parent", gender)


def lineage_modifiers(depth: int, base: str) -> str:
    """直系の重ね: 1=base, 2=grand+base, 3以上=great- を (depth-2) 回 + grand+base。"""
    if depth <= 0:
        return "self"
    if depth == 1:
        return base
    return "great-" * (depth - 2) + "grand" + base


def collateral_modifiers(depth: int, base: str) -> str:
    """傍系（おじおば・甥姪）の重ね: 1=base, 2以上=great- を (depth-1) 回 + base。"""
    if depth <= 0:
        return "self"
    return "great-" * (depth - 1) + base


def ordinal(n: int) -> str:
    if n == 1:
        return "first"
    if n == 2:
        return "second"
    if n == 3:
        return "third"
    if n % 100 in (11, 12, 13):
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def times(n: int) -> str:
    if n == 1:
        return "once"
    if n == 2:
        return "twice"
    return f"{n} times"


def possessive(person: Person) -> str:
    return f"{person.first_name}'s"


def side_phrase(side: Side) -> str:
    if side.unique_gender:
        return f"on {possessive(side.person)} {parent_name(side.parent.gender)}'s side"
    return f"via {side.parent.name}"


def _base_term(relationship: Relationship) -> str:
    kind = relationship.kind
    gender = relationship.gender

    if kind is Kind.SELF:
        return "self"
    if kind is Kind.PARTNER:
        return gendered("partner", gender)
    if kind is Kind.ANCESTOR:
        return lineage_modifiers(relationship.depth, gendered("parent", gender))
    if kind is Kind.DESCENDANT:
        return lineage_modifiers(relationship.depth, gendered("child", gender))
    if kind is Kind.SIBLING:
        return gendered("sibling", gender)
    if kind is Kind.PIBLING:
        return collateral_modifiers(relationship.depth, gendered("pibling", gender))
    if kind is Kind.NIBLING:
        return collateral_modifiers(relationship.depth, gendered("nibling", gender))
    if kind is Kind.COUSIN:
        name = f"{ordinal(relationship.ordinal)} cousin"
        if relationship.removed:
            name = f"{name} {times(relationship.removed)} removed"
        return name
    raise ValueError(f"未対応の続柄です: {kind}")


def format_relationship(relationship: Relationship) -> str:
    """続柄記述子を英語の名称にする。"""
    term = _base_term(relationship)
    kind = relationship.kind
    immediate = kind is Kind.SIBLING or (
        kind in (Kind.ANCESTOR, Kind.DESCENDANT) and relationship.depth == 1
    )

    if kind in (Kind.SELF, Kind.PARTNER):
        pass
    elif relationship.in_law:
        term = f"{term}-in-law" if immediate else f"{term} by marriage"
    elif relationship.step:
        if immediate:
            term = f"step{term}"
        elif kind in (Kind.ANCESTOR, Kind.DESCENDANT):
            term = f"step-{term}"
        else:
            term = f"{term} by marriage"

    if relationship.side is not None:
        term = f"{term} {side_phrase(relationship.side)}"
    return term


def relationship_name(
    genea: Genea,
    person: Person,
    relative: Person,
    partnership: Partnership,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> str | None:
    """relative が person にとって何にあたるかを返す。

    例: relationship_name(genea, 姪, おば, 祖父母のパートナーシップ) == "aunt"

    到達できない場合は None。
    """
    relationship = classify(
        genea,
        relative,
        person,
        partnership,
        steps=steps,
        max_generations=max_generations,
    )
    if relationship is None:
        return None
    return format_relationship(relationship)


def relationship_names(
    genea: Genea,
    person: Person,
    relative: Person,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> list[str]:
    """最も近い共通の祖先パートナーシップごとの続柄名。空なら関係不明。"""
    if person.id == relative.id:
        return ["self"]

    names: list[str] = []
    for pid in common_ancestral_partnerships(
        genea, person, relative, steps=steps, max_generations=max_generations
    ):
        name = relationship_name(
            genea,
            person,
            relative,
            genea.partnership(pid),
            steps=steps,
            max_generations=max_generations,
        )
        if name is not None and name not in names:
            names.append(name)
    return names
