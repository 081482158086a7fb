from pathlib import Path
from typing import Any

import click

from genea.config import AppConfig, configure_logging, load_config
from genea.errors import GeneaError
from genea.json_loader import load_json
from genea.models import Genea, Partnership, Person
from genea.naming import NO_KNOWN_RELATION, relationship_names
from genea.outline import build_outline, format_outline
from genea.traversal import all_ancestors, common_ancestral_partnerships

_CONFIG_OPTION = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
    default=None,
    help="設定ファイルのパス（省略時はカレントディレクトリの genea.toml を自動検索）",
)

_INPUT_OPTION = click.option(
    "--input", "input_path", required=True, help="入力JSONファイルパス（JSON:API 形式）"
)

_BLOOD_ONLY_OPTION = click.option(
    "--blood-only", is_flag=True, default=False, help="パートナー・継親を辿らない"
)


def _load(input_path: str) -> Genea:
    try:
        return load_json(input_path)
    except GeneaError as e:
        raise click.ClickException(str(e))


def _setup(config_path: str | None) -> AppConfig:
    config = load_config(Path(config_path) if config_path else None)
    configure_logging(config, verbose=click.get_current_context().find_root().params["verbose"])
    return config


def _traversal(config: AppConfig, blood_only: bool) -> dict[str, Any]:
    """探索オプション (steps, max_generations) を設定と --blood-only から決める。"""
    return {
        "steps": config.traversal.include_steps and not blood_only,
        "max_generations": config.traversal.max_generations,
    }


def _lookup(genea: Genea, person_id: str) -> Person:
    try:
        return genea.person(person_id)
    except GeneaError as e:
        raise click.ClickException(str(e))


def _describe_person(person: Person) -> str:
    return f"{person.name} ({person.id})"


def _describe_partnership(genea: Genea, partnership: Partnership) -> str:
    return " + ".join(p.name for p in genea.parents_in(partnership))


@click.group()
@click.option("--verbose", is_flag=True, default=False, help="デバッグログを出力する")
def cli(verbose: bool) -> None:
    """家系の祖先・共通祖先・続柄を調べるCLIアプリケーション"""
    pass


@cli.command()
@_INPUT_OPTION
@_CONFIG_OPTION
def check(input_path: str, config_path: str | None) -> None:
    """スナップショットを読み込み、整合性を検証する"""
    _setup(config_path)
    genea = _load(input_path)
    people = sum(1 for _ in genea.people())
    partnerships = sum(1 for _ in genea.partnerships())
    click.echo(f"OK: 人物 {people} 人、パートナーシップ {partnerships} 件")


@cli.command()
@_INPUT_OPTION
@click.option("--person", "person_id", default=None, help="表示対象の人物ID")
@click.option("--reference", "reference_id", default=None, help="基準人物ID")
@_BLOOD_ONLY_OPTION
@_CONFIG_OPTION
def outline(
    input_path: str,
    person_id: str | None,
    reference_id: str | None,
    blood_only: bool,
    config_path: str | None,
) -> None:
    """起点人物からのアウトラインを表示する（--person と --reference で共通の祖先に絞り込む）"""
    config = _setup(config_path)
    genea = _load(input_path)

    include: set[str] | None = None
    if person_id and reference_id:
        options = _traversal(config, blood_only)
        include = all_ancestors(genea, _lookup(genea, person_id), **options) | all_ancestors(
            genea, _lookup(genea, reference_id), **options
        )

    click.echo(format_outline(build_outline(genea, include=include)))


@cli.command()
@_INPUT_OPTION
@click.option("--person", "person_id", required=True, help="人物ID")
@_BLOOD_ONLY_OPTION
@_CONFIG_OPTION
def ancestors(
    input_path: str, person_id: str, blood_only: bool, config_path: str | None
) -> None:
    """祖先（本人を含む）を一覧表示する"""
    config = _setup(config_path)
    genea = _load(input_path)
    person = _lookup(genea, person_id)

    ids = all_ancestors(genea, person, **_traversal(config, blood_only))
    for pid in sorted(ids):
        click.echo(_describe_person(genea.person(pid)))


@cli.command()
@_INPUT_OPTION
@click.option("--person", "person_id", required=True, help="人物ID")
@click.option("--other", "other_id", required=True, help="比較する人物ID")
@_BLOOD_ONLY_OPTION
@_CONFIG_OPTION
def common(
    input_path: str,
    person_id: str,
    other_id: str,
    blood_only: bool,
    config_path: str | None,
) -> None:
    """二人に最も近い共通の祖先パートナーシップを表示する"""
    config = _setup(config_path)
    genea = _load(input_path)

    found = common_ancestral_partnerships(
        genea,
        _lookup(genea, person_id),
        _lookup(genea, other_id),
        **_traversal(config, blood_only),
    )
    if not found:
        click.echo(NO_KNOWN_RELATION)
        return
    for pid in found:
        click.echo(_describe_partnership(genea, genea.partnership(pid)))


@cli.command()
@_INPUT_OPTION
@click.option("--person", "person_id", required=True, help="基準人物ID")
@click.option("--relative", "relative_id", required=True, help="続柄を調べる人物ID")
@_BLOOD_ONLY_OPTION
@_CONFIG_OPTION
def relationship(
    input_path: str,
    person_id: str,
    relative_id: str,
    blood_only: bool,
    config_path: str | None,
) -> None:
    """relative が person にとって何にあたるかを表示する"""
    config = _setup(config_path)
    genea = _load(input_path)
    person = _lookup(genea, person_id)
    relative = _lookup(genea, relative_id)

    names = relationship_names(
        genea,
        person,
        relative,
        **_traversal(config, blood_only),
    )
    if not names:
        click.echo(NO_KNOWN_RELATION)
        return
    for name in names:
        click.echo(f"{relative.name} is {person.first_name}'s {name}")


@cli.command()
@_INPUT_OPTION
@click.option("--output", "output_path", required=True, help="出力ファイルパス")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["dot", "png", "svg"]),
    default="svg",
    help="出力形式",
)
@click.option("--person", "person_id", default=None, help="共通の祖先を強調する人物ID")
@click.option("--reference", "reference_id", default=None, help="基準人物ID")
@click.option(
    "--ancestors-only",
    is_flag=True,
    default=False,
    help="--person と --reference の祖先だけを描画する",
)
@_BLOOD_ONLY_OPTION
@_CONFIG_OPTION
def render(
    input_path: str,
    output_path: str,
    fmt: str,
    person_id: str | None,
    reference_id: str | None,
    ancestors_only: bool,
    blood_only: bool,
    config_path: str | None,
) -> None:
    """家系図を描画する（--person と --reference で共通の祖先を強調）"""
    from genea.graph_builder import build_graph
    from genea.renderer import render_graph

    config = _setup(config_path)
    genea = _load(input_path)

    highlight: set[str] = set()
    visible_ids: set[str] | None = None
    if person_id and reference_id:
        options = _traversal(config, blood_only)
        person_ancestors = all_ancestors(genea, _lookup(genea, person_id), **options)
        reference_ancestors = all_ancestors(genea, _lookup(genea, reference_id), **options)
        highlight = person_ancestors & reference_ancestors
        if ancestors_only:
            visible_ids = person_ancestors | reference_ancestors
    elif ancestors_only:
        raise click.UsageError("--ancestors-only には --person と --reference が必要です")

    dot = build_graph(
        genea, colors=config.colors, highlight=highlight, visible_ids=visible_ids
    )
    result = render_graph(dot, output_path, fmt=fmt)
    click.echo(f"出力しました: {result}")
