from __future__ import annotations

from pathlib import Path

import graphviz

FORMATS = ("dot", "png", "svg")


def render_graph(
    dot: graphviz.Digraph,
    output_path: str | Path,
    fmt: str = "png",
) -> Path:
    """Graphviz グラフをファイルとして出力する。

    Args:
        dot: Graphviz Digraph オブジェクト
        output_path: 出力ファイルパス（例: output/tree.svg）
        fmt: 出力形式（"dot" はソースのみ、"png" / "svg" は Graphviz で描画）

    Returns:
        出力されたファイルのパス
    """
    if fmt not in FORMATS:
        raise ValueError(f"未対応の出力形式です: {fmt}")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "dot":
        # DOT ソースの書き出しには Graphviz 本体は不要
        output_path.write_text(dot.source, encoding="utf-8")
        return output_path

    dot.render(
        outfile=str(output_path),
        format=fmt,
        cleanup=True,
        quiet=True,
    )
    return output_path
