from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field

from genea.models import Genea, Person


@dataclass
class PartnershipOutline:
    partner: Person | None
    children: list[PersonOutline] = field(default_factory=list)


@dataclass
class PersonOutline:
    person: Person
    partnerships: list[PartnershipOutline] = field(default_factory=list)


def build_outline(
    genea: Genea, *, include: Collection[str] | None = None
) -> list[PersonOutline]:
    """起点人物から子孫をたどるアウトラインを構築する。

    include を指定した場合、その集合に含まれない子は省く
    （共通の祖先だけを強調表示する用途）。
    """
    return [_person_outline(genea, p, include) for p in genea.root_people()]


def _person_outline(
    genea: Genea, person: Person, include: Collection[str] | None
) -> PersonOutline:
    outline = PersonOutline(person)
    for partnership in genea.parent_in_of(person):
        children = [
            _person_outline(genea, child, include)
            for child in genea.children_in(partnership)
            if include is None or child.id in include
        ]
        outline.partnerships.append(
            PartnershipOutline(genea.partner_to(partnership, person), children)
        )
    return outline


def format_outline(outlines: list[PersonOutline]) -> str:
    lines: list[str] = []
    for outline in outlines:
        _format_person(outline, 0, lines)
    return "\n".join(lines)


def _format_person(outline: PersonOutline, indent: int, lines: list[str]) -> None:
    pad = " " * indent
    name = outline.person.name
    if not outline.partnerships:
        lines.append(f"{pad}* {name}")
        return

    for partnership in outline.partnerships:
        if partnership.partner is not None:
            lines.append(f"{pad}* {name} + {partnership.partner.name}")
        else:
            lines.append(f"{pad}* {name}")
        for child in partnership.children:
            _format_person(child, indent + 2, lines)
