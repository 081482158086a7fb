from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from genea.errors import DocumentError, UnexpectedTypeError
from genea.models import Gender, Genea, Partnership, Person, Root

logger = logging.getLogger(__name__)

PERSON_TYPE = "person"
PARTNERSHIP_TYPE = "partnership"


def load_json(path: str | Path) -> Genea:
    """JSON:API 形式のファイルを読み込み、Genea オブジェクトを返す。

    Args:
        path: JSONファイルのパス（例: public/api/v1/roots）

    Returns:
        読み込み・検証済みの Genea

    Raises:
        DocumentError: ファイルが存在しない、または JSON として不正
        UnexpectedTypeError: レコード・参照の type が不正
        NotFoundError: 解決できない参照がある
    """
    path = Path(path)
    if not path.exists():
        raise DocumentError(f"ファイルが見つかりません: {path}")

    with path.open(encoding="utf-8") as f:
        try:
            document = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DocumentError(f"JSONとして読み込めません: {path}: {e}") from e

    return parse_document(document)


def parse_document(document: Any) -> Genea:
    """取得済みの JSON:API ドキュメント（dict）から Genea を構築する。"""
    if not isinstance(document, dict):
        raise DocumentError("ドキュメントはオブジェクトである必要があります")
    if "data" not in document:
        raise DocumentError("data がありません")

    root = _parse_root(document["data"])

    people: list[Person] = []
    partnerships: list[Partnership] = []
    seen: set[tuple[str, str]] = set()

    for i, record in enumerate(document.get("included") or []):
        try:
            record_type = record["type"]
            key = (record_type, str(record["id"]))
        except (KeyError, TypeError) as e:
            raise DocumentError(f"included[{i}]: type / id がありません") from e

        if record_type == PERSON_TYPE:
            item: Person | Partnership = _parse_person(record, i)
            people.append(item)
        elif record_type == PARTNERSHIP_TYPE:
            item = _parse_partnership(record, i)
            partnerships.append(item)
        else:
            raise UnexpectedTypeError(
                f"included[{i}]: 想定外のレコード種別です: {record_type}"
            )

        if key in seen:
            raise DocumentError(f"included[{i}]: IDが重複しています: {key[1]}")
        seen.add(key)

    genea = Genea()
    genea.populate(root, people, partnerships)
    genea.validate()
    logger.debug(
        "loaded %d people, %d partnerships", len(people), len(partnerships)
    )
    return genea


def _parse_root(data: Any) -> Root:
    if not isinstance(data, dict):
        raise DocumentError("data はオブジェクトである必要があります")
    attributes = data.get("attributes") or {}
    relationships = data.get("relationships") or {}
    root_people = _to_many(relationships, "rootPeople", PERSON_TYPE, "data")
    return Root(
        root_people=root_people,
        maintainer_link=attributes.get("maintainerLink"),
    )


def _parse_person(record: dict[str, Any], index: int) -> Person:
    where = f"included[{index}]"
    attributes = record.get("attributes") or {}
    relationships = record.get("relationships") or {}

    name = attributes.get("name")
    if not isinstance(name, str) or not name.strip():
        raise DocumentError(f"{where}: 名前が空です")

    return Person(
        id=str(record["id"]),
        name=name.strip(),
        gender=Gender.parse(attributes.get("gender")),
        comments=attributes.get("comments") or "",
        child_in=_to_one(relationships, "childIn", PARTNERSHIP_TYPE, where),
        parent_in=_to_many(relationships, "parentIn", PARTNERSHIP_TYPE, where),
    )


def _parse_partnership(record: dict[str, Any], index: int) -> Partnership:
    where = f"included[{index}]"
    relationships = record.get("relationships") or {}
    return Partnership(
        id=str(record["id"]),
        parents=_to_many(relationships, "parents", PERSON_TYPE, where),
        children=_to_many(relationships, "children", PERSON_TYPE, where),
    )


def _ref_id(ref: Any, expected_type: str, where: str) -> str:
    """参照 {"type", "id"} の型を確認し ID を返す。"""
    if not isinstance(ref, dict) or "id" not in ref:
        raise DocumentError(f"{where}: 参照の形式が不正です: {ref!r}")
    if ref.get("type") != expected_type:
        raise UnexpectedTypeError(
            f"{where}: 参照の type は {expected_type!r} である必要があります: "
            f"{json.dumps(ref, ensure_ascii=False)}"
        )
    return str(ref["id"])


def _to_one(
    relationships: dict[str, Any], key: str, expected_type: str, where: str
) -> str | None:
    ref = (relationships.get(key) or {}).get("data")
    if ref is None:
        return None
    return _ref_id(ref, expected_type, f"{where}.{key}")


def _to_many(
    relationships: dict[str, Any], key: str, expected_type: str, where: str
) -> tuple[str, ...]:
    refs = (relationships.get(key) or {}).get("data") or []
    if not isinstance(refs, list):
        raise DocumentError(f"{where}.{key}: 配列である必要があります")
    return tuple(_ref_id(ref, expected_type, f"{where}.{key}") for ref in refs)
