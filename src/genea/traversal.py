"""家系グラフの幅優先探索。

開始人物から祖先方向（または子孫方向）へ経路 (Path) を展開する。
経路は世代数の昇順で生成されるため、最初に条件を満たした経路が
常に最短（世代数最小）となる。

- 親・子へのステップは1世代として数える
- パートナーへのステップは0世代（横移動）で、継続関係が有効な場合のみ行う
- パートナーへのステップは連続しない
- 同じ経路上の人物は再訪しない（循環防止は経路単位）
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from genea.models import Genea, Partnership, Person

logger = logging.getLogger(__name__)


class StepKind(Enum):
    PARENT = "parent"
    CHILD = "child"
    PARTNER = "partner"


class Direction(Enum):
    ANCESTORS = "ancestors"
    DESCENDANTS = "descendants"


@dataclass(frozen=True)
class Step:
    kind: StepKind
    person: str  # 到達した人物の ID
    partnership: str  # 経由したパートナーシップの ID


@dataclass(frozen=True)
class Path:
    """開始人物と、そこからのステップ列。"""

    start: str
    steps: tuple[Step, ...] = ()

    @property
    def end(self) -> str:
        return self.steps[-1].person if self.steps else self.start

    @property
    def people(self) -> tuple[str, ...]:
        return (self.start, *(s.person for s in self.steps))

    @property
    def generations(self) -> int:
        return sum(1 for s in self.steps if s.kind is not StepKind.PARTNER)

    @property
    def last_kind(self) -> StepKind | None:
        return self.steps[-1].kind if self.steps else None

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.people

    def __len__(self) -> int:
        return len(self.steps)

    def extend(self, step: Step) -> Path:
        return Path(self.start, (*self.steps, step))

    def first_parent_step(self) -> Step | None:
        for step in self.steps:
            if step.kind is StepKind.PARENT:
                return step
        return None

    def last_parent_step(self) -> Step | None:
        for step in reversed(self.steps):
            if step.kind is StepKind.PARENT:
                return step
        return None

    def has_partner_step(self) -> bool:
        return any(s.kind is StepKind.PARTNER for s in self.steps)


# ---------------------------------------------------------------------------
# 経路の展開
# ---------------------------------------------------------------------------


def _partner_steps(genea: Genea, path: Path) -> Iterator[Path]:
    person = genea.person(path.end)
    seen: set[str] = set()
    for partnership in genea.parent_in_of(person):
        for partner in genea.partners_to(partnership, person):
            if partner.id in path or partner.id in seen:
                continue
            seen.add(partner.id)
            yield path.extend(Step(StepKind.PARTNER, partner.id, partnership.id))


def _parent_steps(genea: Genea, path: Path) -> Iterator[Path]:
    person = genea.person(path.end)
    partnership = genea.child_in_of(person)
    if partnership is None:
        return
    for parent in genea.parents_in(partnership):
        if parent.id not in path:
            yield path.extend(Step(StepKind.PARENT, parent.id, partnership.id))


def _child_steps(genea: Genea, path: Path) -> Iterator[Path]:
    person = genea.person(path.end)
    for partnership in genea.parent_in_of(person):
        for child in genea.children_in(partnership):
            if child.id not in path:
                yield path.extend(Step(StepKind.CHILD, child.id, partnership.id))


# 終点、最後のステップの種別とパートナーシップ、パートナーステップの有無
_State = tuple[str, StepKind | None, str | None, bool]


def _state(path: Path) -> _State:
    last = path.steps[-1] if path.steps else None
    return (
        path.end,
        last.kind if last else None,
        last.partnership if last else None,
        path.has_partner_step(),
    )


def _unseen(paths: list[Path], seen: set[_State]) -> list[Path]:
    result: list[Path] = []
    for path in paths:
        state = _state(path)
        if state not in seen:
            seen.add(state)
            result.append(path)
    return result


def walk(
    genea: Genea,
    start: Person,
    *,
    direction: Direction = Direction.ANCESTORS,
    steps: bool = True,
    max_generations: int | None = None,
    distinct: bool = False,
) -> Iterator[Path]:
    """start から到達できる全経路を世代数の昇順に生成する。

    各世代では、まず親（子）ステップで到達した経路を、続いてそこから
    パートナーへ1歩横移動した経路を生成する。

    Args:
        genea: 家系スナップショット
        start: 開始人物
        direction: 祖先方向か子孫方向か
        steps: パートナー・継親（継子）を辿るか
        max_generations: 探索する最大世代数（None は無制限）
        distinct: 同じ状態（終点・最後のステップ・パートナーステップの有無）の
            経路は最初の1本だけを残す
    """
    advance = _parent_steps if direction is Direction.ANCESTORS else _child_steps
    level = [Path(start.id)]
    seen: set[_State] = set()
    generation = 0

    while level:
        if distinct:
            level = _unseen(level, seen)
        if steps:
            partnered = [p for path in level for p in _partner_steps(genea, path)]
            level = level + (_unseen(partnered, seen) if distinct else partnered)
        yield from level

        if max_generations is not None and generation >= max_generations:
            return
        level = [p for path in level for p in advance(genea, path)]
        generation += 1


def ancestral_paths(
    genea: Genea,
    start: Person,
    *,
    steps: bool = True,
    max_generations: int | None = None,
    distinct: bool = False,
) -> Iterator[Path]:
    return walk(
        genea,
        start,
        direction=Direction.ANCESTORS,
        steps=steps,
        max_generations=max_generations,
        distinct=distinct,
    )


# ---------------------------------------------------------------------------
# 祖先・子孫の集合
# ---------------------------------------------------------------------------


def all_ancestors(
    genea: Genea,
    person: Person,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> set[str]:
    """祖先の ID 集合。本人を含み、継続関係が有効ならパートナーと継祖先も含む。"""
    result = {
        path.end
        for path in ancestral_paths(
            genea, person, steps=steps, max_generations=max_generations, distinct=True
        )
    }
    logger.debug("all_ancestors(%s, steps=%s): %d people", person.id, steps, len(result))
    return result


def all_descendants(
    genea: Genea,
    person: Person,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> set[str]:
    """子孫の ID 集合。本人を含み、継続関係が有効ならパートナーと継子孫も含む。"""
    return {
        path.end
        for path in walk(
            genea,
            person,
            direction=Direction.DESCENDANTS,
            steps=steps,
            max_generations=max_generations,
            distinct=True,
        )
    }


def member_partnerships(genea: Genea, person: Person, *, steps: bool = True) -> list[str]:
    """person が（継）親として属するパートナーシップの ID。

    ``Genea.member_set`` の逆引きにあたる。
    """
    ids = list(person.parent_in)
    if steps:
        for partner in genea.partners_of(person):
            ids.extend(partner.parent_in)
    return list(dict.fromkeys(ids))


def ancestral_partnerships(
    genea: Genea,
    person: Person,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> set[str]:
    """person から到達できるパートナーシップの ID 集合。

    祖先（本人を含む）が（継）親として属するパートナーシップすべて。
    """
    result: set[str] = set()
    for pid in all_ancestors(genea, person, steps=steps, max_generations=max_generations):
        result.update(member_partnerships(genea, genea.person(pid), steps=steps))
    return result


# ---------------------------------------------------------------------------
# 共通の祖先
# ---------------------------------------------------------------------------


def common_ancestral_partnerships(
    genea: Genea,
    person: Person,
    other: Person,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> list[str]:
    """person と other に最も近い共通の祖先パートナーシップを返す。

    other から幅優先で祖先を辿り、person からも到達できるパートナーシップが
    最初に見つかった世代の候補をすべて返す。共通の祖先がなければ空リスト。

    血縁のみ (steps=False) の場合、other 側で到達した人物が person の祖先で
    あるか、世代0で二人が同じパートナーシップの親である候補に限る。
    """
    targets = ancestral_partnerships(
        genea, person, steps=steps, max_generations=max_generations
    )
    blood_ancestors = (
        None
        if steps
        else all_ancestors(genea, person, steps=False, max_generations=max_generations)
    )
    found: list[str] = []
    found_generation: int | None = None

    for path in ancestral_paths(
        genea, other, steps=steps, max_generations=max_generations, distinct=True
    ):
        if found_generation is not None and path.generations > found_generation:
            break

        if not path.steps:
            # 世代0: other 自身が親であるパートナーシップ
            candidates = list(other.parent_in)
        elif path.last_kind is StepKind.PARENT:
            candidates = [path.steps[-1].partnership]
        else:
            # パートナーへの横移動は直前の親ステップで候補済み
            continue

        for candidate in candidates:
            if blood_ancestors is not None and not _shares_blood(
                genea, person, path, candidate, blood_ancestors
            ):
                continue
            if candidate in targets and candidate not in found:
                found.append(candidate)
                found_generation = path.generations

    logger.debug(
        "common_ancestral_partnerships(%s, %s): %s", person.id, other.id, found
    )
    return found


def _shares_blood(
    genea: Genea,
    person: Person,
    path: Path,
    candidate: str,
    blood_ancestors: set[str],
) -> bool:
    if path.end in blood_ancestors:
        return True
    return not path.steps and person.id in genea.partnership(candidate).parents


def shortest_path_to_partnership(
    genea: Genea,
    person: Person,
    partnership: Partnership,
    *,
    steps: bool = True,
    max_generations: int | None = None,
    prefer: str | None = None,
) -> Path | None:
    """person からパートナーシップの（継）親へ到達する最短経路。到達不能なら None。

    同じ世代数の経路が複数ある場合は、prefer の人物へ血縁で到達する経路、
    血縁の親へ到達する経路、それ以外（継親・パートナー経由）の順に優先する。
    """
    members = genea.member_set(partnership, steps)
    parents = genea.parent_set(partnership)

    def rank(path: Path) -> int:
        if path.has_partner_step():
            return 2
        if path.end == prefer:
            return 0
        return 1 if path.end in parents else 2

    best: Path | None = None
    for path in ancestral_paths(
        genea, person, steps=steps, max_generations=max_generations, distinct=True
    ):
        if best is not None and path.generations > best.generations:
            break
        if path.end not in members:
            continue
        if best is None or rank(path) < rank(best):
            best = path
        if rank(best) == 0 or (prefer is None and rank(best) == 1):
            break
    return best


def generations_from_ancestral_partnership(
    genea: Genea,
    person: Person,
    partnership: Partnership,
    *,
    steps: bool = True,
    max_generations: int | None = None,
) -> int | None:
    """パートナーシップから person までの世代数。

    person が（継）親なら 0。到達できない場合は None（0 とは区別する）。
    """
    path = shortest_path_to_partnership(
        genea, person, partnership, steps=steps, max_generations=max_generations
    )
    return None if path is None else path.generations
