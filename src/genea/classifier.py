"""二人の人物と共通の祖先パートナーシップから続柄を分類する。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from genea.models import Gender, Genea, Partnership, Person
from genea.traversal import Path, StepKind, shortest_path_to_partnership


class Kind(Enum):
    SELF = "self"
    PARTNER = "partner"
    ANCESTOR = "ancestor"
    DESCENDANT = "descendant"
    SIBLING = "sibling"
    PIBLING = "pibling"
    NIBLING = "nibling"
    COUSIN = "cousin"


@dataclass(frozen=True)
class Side:
    """どちらの親の系統を通じた関係か。

    unique_gender が True のとき、parent は person の親の中でその性別の唯一の親。
    """

    person: Person
    parent: Person
    unique_gender: bool


@dataclass(frozen=True)
class Relationship:
    """続柄の記述子。subject が reference の「何」にあたるかを表す。

    depth は祖先・子孫・おじおば・甥姪の重ね数、ordinal / removed はいとこの
    親等と世代差。generations_from / generations_to は共通の祖先
    パートナーシップから subject / reference までの世代数。
    step は継親・継子を介する関係、in_law は本人のパートナーを介する関係。
    """

    kind: Kind
    gender: Gender = Gender.UNKNOWN
    depth: int = 0
    ordinal: int = 0
    removed: int = 0
    generations_from: int = 0
    generations_to: int = 0
    side: Side | None = None
    step: bool = False
    in_law: bool = False


def classify(
    genea: Genea,
    subject: Person,
    reference: Person,
    partnership: Partnership,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> Relationship | None:
    """subject が reference にとってどのような続柄かを分類する。

    どちらかがパートナーシップに到達できない場合、血縁のみ (steps=False) で
    継続関係になる場合、互いのパートナーではない二人がともに世代0の場合は
    None を返す。
    """
    if subject.id == reference.id:
        return Relationship(Kind.SELF, gender=subject.gender)

    subject_path = shortest_path_to_partnership(
        genea,
        subject,
        partnership,
        steps=steps,
        max_generations=max_generations,
        prefer=reference.id,
    )
    reference_path = shortest_path_to_partnership(
        genea,
        reference,
        partnership,
        steps=steps,
        max_generations=max_generations,
        prefer=subject.id,
    )
    if subject_path is None or reference_path is None:
        return None

    n = subject_path.generations
    m = reference_path.generations
    if n == 0 and m == 0:
        partner_ids = {p.id for p in genea.partners_of(reference)}
        if subject.id not in partner_ids:
            # 同じ人物の別々のパートナー同士に続柄はない
            return None
    kind, depth, ordinal, removed = _decide(n, m)

    step = _is_step(genea, subject_path, partnership) or _is_step(
        genea, reference_path, partnership
    )
    # 直系は、世代0側の本人へ到達していなければ継親・継子
    if n == 0 and m > 0 and reference_path.end != subject.id:
        step = True
    if m == 0 and n > 0 and subject_path.end != reference.id:
        step = True
    if step and not steps:
        return None

    return Relationship(
        kind=kind,
        gender=subject.gender,
        depth=depth,
        ordinal=ordinal,
        removed=removed,
        generations_from=n,
        generations_to=m,
        side=find_side(genea, reference, reference_path) if m >= 2 else None,
        step=step,
        in_law=_is_in_law(subject_path) or _is_in_law(reference_path),
    )


def _decide(n: int, m: int) -> tuple[Kind, int, int, int]:
    """世代数の組から (kind, depth, ordinal, removed) を決める。"""
    if n == 0 and m == 0:
        return Kind.PARTNER, 0, 0, 0
    if n == 0:
        return Kind.ANCESTOR, m, 0, 0
    if m == 0:
        return Kind.DESCENDANT, n, 0, 0
    if n == m:
        if n == 1:
            return Kind.SIBLING, 1, 0, 0
        return Kind.COUSIN, 0, n - 1, 0
    if n == 1:
        return Kind.PIBLING, m - 1, 0, 0
    if m == 1:
        return Kind.NIBLING, n - 1, 0, 0
    return Kind.COUSIN, 0, min(n, m), abs(n - m)


def _is_step(genea: Genea, path: Path, partnership: Partnership) -> bool:
    return path.has_partner_step() or path.end not in genea.parent_set(partnership)


def _is_in_law(path: Path) -> bool:
    """本人のパートナーを経由する経路（姻族）か。"""
    return bool(path.steps) and path.steps[0].kind is StepKind.PARTNER


def find_side(genea: Genea, person: Person, path: Path) -> Side | None:
    """経路の最初の親ステップから、どちらの親の系統かを判定する。

    親が一人しかいない場合は自明なので None。
    """
    if not path.steps or path.steps[0].kind is not StepKind.PARENT:
        return None

    parents = genea.parents_of(person)
    if len(parents) <= 1:
        return None

    parent = genea.person(path.steps[0].person)
    unique_gender = all(p.id == parent.id or p.gender != parent.gender for p in parents)
    return Side(person=person, parent=parent, unique_gender=unique_gender)
