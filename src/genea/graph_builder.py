from __future__ import annotations

from collections.abc import Collection

import graphviz

from genea.config import ColorConfig
from genea.models import Gender, Genea, Person


def compute_generations(genea: Genea) -> dict[str, int]:
    """各人物の世代（depth）を算出する。

    親のいない人物を第0世代とし、子の世代は全ての親の世代の最大値 + 1。
    パートナーは同じ世代に揃える（より深い方に合わせ、子を再計算）。

    Returns:
        person_id -> generation のマッピング
    """
    people = list(genea.people())
    generations: dict[str, int] = {}
    parent_ids = {p.id: [q.id for q in genea.parents_of(p)] for p in people}

    for person in people:
        if not parent_ids[person.id]:
            generations[person.id] = 0

    # 子孫とのパートナーシップがあると揃え処理が収束しないため、回数を制限する
    for _ in range(len(people) + 1):
        changed = False

        # 全ての親の世代が確定している人物の世代を決める
        for person in people:
            pids = parent_ids[person.id]
            if not pids or not all(pid in generations for pid in pids):
                continue
            new_gen = max(generations[pid] for pid in pids) + 1
            if generations.get(person.id, -1) < new_gen:
                generations[person.id] = new_gen
                changed = True

        # パートナーを同じ世代に揃える
        for partnership in genea.partnerships():
            gens = [generations[pid] for pid in partnership.parents if pid in generations]
            if not gens:
                continue
            max_gen = max(gens)
            for pid in partnership.parents:
                if generations.get(pid, -1) < max_gen:
                    generations[pid] = max_gen
                    changed = True

        if not changed:
            break

    return generations


def _get_node_color(person: Person, colors: ColorConfig) -> str:
    if person.gender is Gender.MALE:
        return colors.male_fill
    if person.gender is Gender.FEMALE:
        return colors.female_fill
    return colors.unknown_fill


def _node_name(person_id: str) -> str:
    return f"person_{person_id}"


def build_graph(
    genea: Genea,
    *,
    colors: ColorConfig | None = None,
    highlight: Collection[str] = frozenset(),
    visible_ids: Collection[str] | None = None,
) -> graphviz.Digraph:
    """Genea から Graphviz の Digraph オブジェクトを生成する。

    Args:
        genea: 家系スナップショット
        colors: 描画色（省略時はデフォルト）
        highlight: 強調表示する人物 ID（共通の祖先など）
        visible_ids: 描画する人物 ID（省略時は全員）
    """
    colors = colors or ColorConfig()
    generations = compute_generations(genea)

    def visible(person_id: str) -> bool:
        return visible_ids is None or person_id in visible_ids

    dot = graphviz.Digraph(
        "genea",
        graph_attr={
            "rankdir": "TB",
            "splines": "polyline",
            "nodesep": "0.8",
            "ranksep": "1.0",
        },
        node_attr={
            "fontname": "Helvetica",
            "fontsize": "11",
            "shape": "box",
            "style": "filled,rounded",
        },
        edge_attr={
            "fontname": "Helvetica",
        },
    )

    for person in genea.people():
        if not visible(person.id):
            continue
        if person.id in highlight:
            dot.node(
                _node_name(person.id),
                label=person.name,
                fillcolor=colors.highlight,
                penwidth="3",
            )
        else:
            dot.node(
                _node_name(person.id),
                label=person.name,
                fillcolor=_get_node_color(person, colors),
            )

    for partnership in genea.partnerships():
        parents = [pid for pid in partnership.parents if visible(pid)]
        children = [pid for pid in partnership.children if visible(pid)]
        if not parents:
            continue

        # パートナーシップの中間ノード（不可視）
        mid_node = f"partnership_{partnership.id}"
        dot.node(mid_node, label="", shape="point", width="0.01", height="0.01")

        with dot.subgraph() as s:
            s.attr(rank="same")
            s.node(mid_node)
            for pid in parents:
                s.node(_node_name(pid))

        for pid in parents:
            dot.edge(
                _node_name(pid),
                mid_node,
                dir="none",
                color=colors.partnership_line,
                penwidth="2",
            )
        for cid in children:
            dot.edge(mid_node, _node_name(cid), color=colors.child_line)

    # 世代ごとに rank を揃える
    gen_groups: dict[int, list[str]] = {}
    for pid, gen in generations.items():
        if visible(pid):
            gen_groups.setdefault(gen, []).append(pid)

    for gen in sorted(gen_groups):
        with dot.subgraph() as s:
            s.attr(rank="same")
            for pid in gen_groups[gen]:
                s.node(_node_name(pid))

    return dot
