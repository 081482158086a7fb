from __future__ import annotations

import logging
from pathlib import Path

import pytest

from genea.config import AppConfig, configure_logging, load_config


class TestAppConfigDefaults:
    def test_default_traversal(self) -> None:
        cfg = AppConfig()
        assert cfg.traversal.include_steps is True
        assert cfg.traversal.max_generations is None

    def test_default_colors(self) -> None:
        cfg = AppConfig()
        assert cfg.colors.male_fill == "lightblue"
        assert cfg.colors.female_fill == "lightpink"
        assert cfg.colors.unknown_fill == "lightgray"
        assert cfg.colors.highlight == "gold"
        assert cfg.colors.partnership_line == "darkred"
        assert cfg.colors.child_line == "gray30"

    def test_default_logging(self) -> None:
        assert AppConfig().logging.level == "WARNING"


class TestLoadConfigNone:
    def test_no_file_returns_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """genea.toml が存在しないディレクトリでは AppConfig デフォルト値を返す。"""
        monkeypatch.chdir(tmp_path)
        cfg = load_config(None)
        assert isinstance(cfg, AppConfig)
        assert cfg.traversal.include_steps is True
        assert cfg.colors.highlight == "gold"

    def test_auto_discover_genea_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """カレントディレクトリに genea.toml があれば自動で読み込む。"""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "genea.toml").write_text(
            "[traversal]\ninclude_steps = false\n", encoding="utf-8"
        )
        cfg = load_config(None)
        assert cfg.traversal.include_steps is False
        # 指定していないキーはデフォルト値
        assert cfg.traversal.max_generations is None


class TestLoadConfigPartial:
    def test_partial_colors(self, tmp_path: Path) -> None:
        """一部の色だけ上書きして残りはデフォルト値になる。"""
        toml = tmp_path / "cfg.toml"
        toml.write_text(
            '[style.colors]\nhighlight = "#ffcc00"\n', encoding="utf-8"
        )
        cfg = load_config(toml)
        assert cfg.colors.highlight == "#ffcc00"
        assert cfg.colors.male_fill == "lightblue"  # デフォルト維持

    def test_traversal(self, tmp_path: Path) -> None:
        toml = tmp_path / "cfg.toml"
        toml.write_text(
            "[traversal]\ninclude_steps = false\nmax_generations = 6\n", encoding="utf-8"
        )
        cfg = load_config(toml)
        assert cfg.traversal.include_steps is False
        assert cfg.traversal.max_generations == 6

    def test_logging_level_is_case_insensitive(self, tmp_path: Path) -> None:
        toml = tmp_path / "cfg.toml"
        toml.write_text('[logging]\nlevel = "debug"\n', encoding="utf-8")
        cfg = load_config(toml)
        assert cfg.logging.level == "DEBUG"

    def test_empty_file(self, tmp_path: Path) -> None:
        """空ファイルはデフォルト値を返す。"""
        toml = tmp_path / "cfg.toml"
        toml.write_text("", encoding="utf-8")
        cfg = load_config(toml)
        assert cfg.colors.male_fill == "lightblue"
        assert cfg.logging.level == "WARNING"


class TestLoadConfigValidation:
    def test_include_steps_not_bool(self, tmp_path: Path) -> None:
        """include_steps が真偽値でない場合は sys.exit(1) する。"""
        toml = tmp_path / "cfg.toml"
        toml.write_text("[traversal]\ninclude_steps = 1\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            load_config(toml)
        assert exc_info.value.code == 1

    def test_max_generations_negative(self, tmp_path: Path) -> None:
        toml = tmp_path / "cfg.toml"
        toml.write_text("[traversal]\nmax_generations = -1\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            load_config(toml)
        assert exc_info.value.code == 1

    def test_max_generations_not_int(self, tmp_path: Path) -> None:
        toml = tmp_path / "cfg.toml"
        toml.write_text("[traversal]\nmax_generations = 2.5\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            load_config(toml)
        assert exc_info.value.code == 1

    def test_color_invalid(self, tmp_path: Path) -> None:
        """色が色名でも #rrggbb でもない場合は sys.exit(1) する。"""
        toml = tmp_path / "cfg.toml"
        toml.write_text('[style.colors]\nmale_fill = "#12"\n', encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            load_config(toml)
        assert exc_info.value.code == 1

    def test_color_not_string(self, tmp_path: Path) -> None:
        toml = tmp_path / "cfg.toml"
        toml.write_text("[style.colors]\nmale_fill = [1, 2, 3]\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            load_config(toml)
        assert exc_info.value.code == 1

    def test_unknown_log_level(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        toml = tmp_path / "cfg.toml"
        toml.write_text('[logging]\nlevel = "LOUD"\n', encoding="utf-8")
        with pytest.raises(SystemExit):
            load_config(toml)
        assert "設定エラー" in capsys.readouterr().err


class TestConfigureLogging:
    def test_verbose_sets_debug(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, object]] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        configure_logging(AppConfig(), verbose=True)
        assert calls[0]["level"] == logging.DEBUG

    def test_level_from_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, object]] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        cfg = AppConfig()
        cfg.logging.level = "ERROR"
        configure_logging(cfg)
        assert calls[0]["level"] == logging.ERROR
