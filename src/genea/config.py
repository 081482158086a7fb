"""設定ファイルの読み込みと設定値の管理。

TOML 形式の設定ファイルを読み込み、AppConfig として返す。
設定ファイルが存在しない場合はデフォルト値を使用する。
"""

from __future__ import annotations

import logging
import re
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CONFIG_PATH = Path("genea.toml")


@dataclass
class TraversalConfig:
    """探索パラメータの設定。"""

    include_steps: bool = True         # パートナー・継親を辿るか
    max_generations: int | None = None  # 探索する最大世代数（None は無制限）


@dataclass
class ColorConfig:
    """グラフ描画色の設定（Graphviz の色名または #rrggbb）。"""

    male_fill: str = "lightblue"
    female_fill: str = "lightpink"
    unknown_fill: str = "lightgray"
    highlight: str = "gold"
    partnership_line: str = "darkred"
    child_line: str = "gray30"


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class AppConfig:
    """アプリケーション全体の設定。"""

    traversal: TraversalConfig = field(default_factory=TraversalConfig)
    colors: ColorConfig = field(default_factory=ColorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# バリデーション
# ---------------------------------------------------------------------------

_COLOR_KEYS = (
    "male_fill",
    "female_fill",
    "unknown_fill",
    "highlight",
    "partnership_line",
    "child_line",
)

_COLOR_PATTERN = re.compile(r"^(#[0-9a-fA-F]{6}|[a-zA-Z][a-zA-Z0-9]*)$")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _fail(message: str) -> None:
    print(f"設定エラー: {message}", file=sys.stderr)
    sys.exit(1)


def _build_traversal(data: dict[str, object]) -> TraversalConfig:
    cfg = TraversalConfig()
    if "include_steps" in data:
        val = data["include_steps"]
        if not isinstance(val, bool):
            _fail("traversal.include_steps は true / false で指定してください")
        cfg.include_steps = bool(val)
    if "max_generations" in data:
        val = data["max_generations"]
        if isinstance(val, bool) or not isinstance(val, int) or val < 0:
            _fail("traversal.max_generations は 0 以上の整数で指定してください")
        cfg.max_generations = int(val)  # type: ignore[arg-type]
    return cfg


def _build_colors(data: dict[str, object]) -> ColorConfig:
    cfg = ColorConfig()
    for key in _COLOR_KEYS:
        if key in data:
            val = data[key]
            if not isinstance(val, str) or not _COLOR_PATTERN.match(val):
                _fail(
                    f"style.colors.{key} は色名または #rrggbb 形式で指定してください"
                )
            setattr(cfg, key, val)
    return cfg


def _build_logging(data: dict[str, object]) -> LoggingConfig:
    cfg = LoggingConfig()
    if "level" in data:
        val = data["level"]
        if not isinstance(val, str) or val.upper() not in _LOG_LEVELS:
            _fail(f"logging.level は {', '.join(_LOG_LEVELS)} のいずれかで指定してください")
        cfg.level = str(val).upper()
    return cfg


# ---------------------------------------------------------------------------
# ロード
# ---------------------------------------------------------------------------


def load_config(path: Path | None) -> AppConfig:
    """設定ファイルを読み込んで AppConfig を返す。

    Args:
        path: 設定ファイルのパス。None の場合はカレントディレクトリの
              genea.toml を探索し、存在しなければデフォルト値を使用する。

    Returns:
        AppConfig オブジェクト。
    """
    config_path = path if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    app_config = AppConfig()

    traversal = data.get("traversal")
    if isinstance(traversal, dict):
        app_config.traversal = _build_traversal(traversal)

    style: dict[str, object] = data.get("style", {})  # type: ignore[assignment]
    if isinstance(style, dict):
        colors = style.get("colors")
        if isinstance(colors, dict):
            app_config.colors = _build_colors(colors)  # type: ignore[arg-type]

    log = data.get("logging")
    if isinstance(log, dict):
        app_config.logging = _build_logging(log)

    return app_config


def configure_logging(config: AppConfig, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )
