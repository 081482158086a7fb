from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import quote

from genea.errors import (
    AlreadyPopulatedError,
    CycleError,
    NotFoundError,
    NotPopulatedError,
    UnexpectedTypeError,
)


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "?"

    @classmethod
    def parse(cls, value: str | None) -> Gender:
        """文字列から性別を判定する。不明な値は UNKNOWN。"""
        text = (value or "").strip().lower()
        if text in ("male", "m"):
            return cls.MALE
        if text in ("female", "f"):
            return cls.FEMALE
        return cls.UNKNOWN


@dataclass(frozen=True)
class Person:
    """個人を表すデータクラス。

    他の人物・パートナーシップへの参照はすべて ID で保持する。
    """

    id: str
    name: str
    gender: Gender = Gender.UNKNOWN
    comments: str = ""
    child_in: str | None = None
    parent_in: tuple[str, ...] = ()

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0]


@dataclass(frozen=True)
class Partnership:
    """婚姻などのパートナーシップ。親の人数は2人に限らない。"""

    id: str
    parents: tuple[str, ...] = ()
    children: tuple[str, ...] = ()


@dataclass(frozen=True)
class Root:
    """表示の起点となる人物の一覧。"""

    root_people: tuple[str, ...] = ()
    maintainer_link: str | None = None

    def maintainer_link_for(self, person: Person) -> str | None:
        """$ID / $NAME を置換した管理者向けリンクを返す。"""
        if self.maintainer_link is None:
            return None
        return self.maintainer_link.replace(
            "$ID", quote(person.id, safe="!~*'()")
        ).replace("$NAME", quote(person.name, safe="!~*'()"))


@dataclass
class Genea:
    """家系全体のスナップショット。

    人物・パートナーシップを ID をキーとする辞書に保持する。
    ``populate`` は一度だけ呼ぶことができ、以降は読み取り専用。
    """

    _root: Root | None = None
    _people: dict[str, Person] = field(default_factory=dict)
    _partnerships: dict[str, Partnership] = field(default_factory=dict)

    @classmethod
    def from_entities(
        cls,
        people: Iterable[Person],
        partnerships: Iterable[Partnership],
        root: Root | None = None,
    ) -> Genea:
        genea = cls()
        genea.populate(root or Root(), people, partnerships)
        return genea

    def populate(
        self,
        root: Root,
        people: Iterable[Person],
        partnerships: Iterable[Partnership],
    ) -> None:
        if self._root is not None:
            raise AlreadyPopulatedError("スナップショットは読み込み済みです")
        self._people = {p.id: p for p in people}
        self._partnerships = {p.id: p for p in partnerships}
        self._root = root

    def is_populated(self) -> bool:
        return self._root is not None

    def _check_populated(self) -> None:
        if self._root is None:
            raise NotPopulatedError("スナップショットが読み込まれていません")

    # ------------------------------------------------------------------
    # ID による参照
    # ------------------------------------------------------------------

    def person(self, person_id: str) -> Person:
        self._check_populated()
        try:
            return self._people[person_id]
        except KeyError:
            raise NotFoundError(f"人物が存在しません: {person_id}") from None

    def partnership(self, partnership_id: str) -> Partnership:
        self._check_populated()
        try:
            return self._partnerships[partnership_id]
        except KeyError:
            raise NotFoundError(
                f"パートナーシップが存在しません: {partnership_id}"
            ) from None

    def roots(self) -> Root:
        self._check_populated()
        assert self._root is not None
        return self._root

    def root_people(self) -> list[Person]:
        return [self.person(pid) for pid in self.roots().root_people]

    def people(self) -> Iterator[Person]:
        self._check_populated()
        return iter(self._people.values())

    def partnerships(self) -> Iterator[Partnership]:
        self._check_populated()
        return iter(self._partnerships.values())

    # ------------------------------------------------------------------
    # 関係の辿り方
    # ------------------------------------------------------------------

    def child_in_of(self, person: Person) -> Partnership | None:
        """子として属するパートナーシップ。なければ None。"""
        if person.child_in is None:
            return None
        return self.partnership(person.child_in)

    def parent_in_of(self, person: Person) -> list[Partnership]:
        return [self.partnership(pid) for pid in person.parent_in]

    def parents_of(self, person: Person) -> list[Person]:
        partnership = self.child_in_of(person)
        if partnership is None:
            return []
        return self.parents_in(partnership)

    def parents_in(self, partnership: Partnership) -> list[Person]:
        return [self.person(pid) for pid in partnership.parents]

    def children_in(self, partnership: Partnership) -> list[Person]:
        return [self.person(pid) for pid in partnership.children]

    def partners_to(self, partnership: Partnership, person: Person) -> list[Person]:
        """パートナーシップ内の person 以外の親。"""
        return [p for p in self.parents_in(partnership) if p.id != person.id]

    def partner_to(self, partnership: Partnership, person: Person) -> Person | None:
        partners = self.partners_to(partnership, person)
        return partners[0] if partners else None

    def partners_of(self, person: Person) -> list[Person]:
        """配偶者・パートナーの一覧（重複なし、登場順）。"""
        partners: list[Person] = []
        seen: set[str] = set()
        for partnership in self.parent_in_of(person):
            for partner in self.partners_to(partnership, person):
                if partner.id not in seen:
                    seen.add(partner.id)
                    partners.append(partner)
        return partners

    def parent_set(self, partnership: Partnership) -> frozenset[str]:
        return frozenset(partnership.parents)

    def parent_and_step_parent_set(self, partnership: Partnership) -> frozenset[str]:
        """親と、各親の他のパートナー（継親）の ID 集合。"""
        ids = set(partnership.parents)
        for parent in self.parents_in(partnership):
            ids.update(p.id for p in self.partners_of(parent))
        return frozenset(ids)

    def member_set(self, partnership: Partnership, steps: bool) -> frozenset[str]:
        if steps:
            return self.parent_and_step_parent_set(partnership)
        return self.parent_set(partnership)

    # ------------------------------------------------------------------
    # 検証
    # ------------------------------------------------------------------

    def dangling_references(self) -> list[str]:
        """解決できない参照を列挙する。"""
        self._check_populated()
        errors: list[str] = []

        for person in self._people.values():
            if person.child_in is not None and person.child_in not in self._partnerships:
                errors.append(
                    f"人物 {person.id} ({person.name}): "
                    f"childIn {person.child_in} が存在しません"
                )
            for pid in person.parent_in:
                if pid not in self._partnerships:
                    errors.append(
                        f"人物 {person.id} ({person.name}): "
                        f"parentIn {pid} が存在しません"
                    )

        for partnership in self._partnerships.values():
            for pid in (*partnership.parents, *partnership.children):
                if pid not in self._people:
                    errors.append(
                        f"パートナーシップ {partnership.id}: 人物 {pid} が存在しません"
                    )

        assert self._root is not None
        for pid in self._root.root_people:
            if pid not in self._people:
                errors.append(f"rootPeople: 人物 {pid} が存在しません")

        return errors

    def mistyped_references(self) -> list[str]:
        """別種別のレコードを指している参照を列挙する。"""
        self._check_populated()
        errors: list[str] = []

        for person in self._people.values():
            refs = (
                [("childIn", person.child_in)] if person.child_in is not None else []
            ) + [("parentIn", pid) for pid in person.parent_in]
            for key, pid in refs:
                if pid not in self._partnerships and pid in self._people:
                    errors.append(
                        f"人物 {person.id} ({person.name}): "
                        f"{key} {pid} はパートナーシップではなく人物です"
                    )

        for partnership in self._partnerships.values():
            for pid in (*partnership.parents, *partnership.children):
                if pid not in self._people and pid in self._partnerships:
                    errors.append(
                        f"パートナーシップ {partnership.id}: "
                        f"{pid} は人物ではなくパートナーシップです"
                    )

        assert self._root is not None
        for pid in self._root.root_people:
            if pid not in self._people and pid in self._partnerships:
                errors.append(f"rootPeople: {pid} は人物ではなくパートナーシップです")

        return errors

    def validate(self) -> None:
        """参照整合性と祖先関係の非循環性を検証する。

        Raises:
            UnexpectedTypeError: 参照が別種別のレコードを指している
            NotFoundError: 解決できない参照がある
            CycleError: 自分自身の祖先になっている人物がいる
        """
        mistyped = self.mistyped_references()
        if mistyped:
            raise UnexpectedTypeError(
                "参照の種別エラー:\n" + "\n".join(f"  - {e}" for e in mistyped)
            )
        errors = self.dangling_references()
        if errors:
            raise NotFoundError(
                "参照整合性エラー:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        self._check_acyclic()

    def _check_acyclic(self) -> None:
        # 0: 未訪問, 1: 探索中, 2: 完了
        state: dict[str, int] = {}
        for start in self._people:
            if state.get(start):
                continue
            stack: list[tuple[str, Iterator[Person]]] = [
                (start, iter(self.parents_of(self._people[start])))
            ]
            state[start] = 1
            while stack:
                pid, parents = stack[-1]
                parent = next(parents, None)
                if parent is None:
                    state[pid] = 2
                    stack.pop()
                    continue
                if state.get(parent.id) == 1:
                    raise CycleError(
                        f"人物 {parent.id} ({parent.name}) が自分自身の祖先になっています"
                    )
                if not state.get(parent.id):
                    state[parent.id] = 1
                    stack.append((parent.id, iter(self.parents_of(parent))))
