from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from app.config import AppSettings, OutputSettings, load_settings
from domain.models import AnnotationSide, Size
from domain.services.placement_engine import Clearance, PlacementConfig


def test_default_settings_match_engine_defaults() -> None:
    settings = load_settings()

    assert settings.placement.to_config() == PlacementConfig()
    assert settings.placement.default_orientation == AnnotationSide.TOP
    assert settings.log_level == "WARNING"


def test_env_overrides_nested_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANNOTATE_PLACEMENT__EDGE_MARGIN", "8")
    monkeypatch.setenv("ANNOTATE_PLACEMENT__DEFAULT_ORIENTATION", "LEFT")
    monkeypatch.setenv("ANNOTATE_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.placement.edge_margin == 8
    assert settings.placement.default_orientation == AnnotationSide.LEFT
    assert settings.log_level == "DEBUG"


def test_yaml_file_is_loaded(tmp_path: Path) -> None:
    config_path = tmp_path / "annotate.yaml"
    config_path.write_text(
        "\n".join(
            [
                "placement:",
                "  glyph_width: 64",
                "  glyph_height: 24",
                "  measurement:",
                "    vertical: 20",
                "    horizontal: 10",
                "    reflow: 6",
                "output:",
                "  plan_suffix: annotations.json",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(config_path)
    config = settings.placement.to_config()

    assert config.glyph_size == Size(64, 24)
    assert config.measurement_clearance == Clearance(vertical=20, horizontal=10, reflow=6)
    assert config.text_clearance == PlacementConfig().text_clearance
    assert settings.output.plan_suffix == ".annotations.json"


def test_config_path_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "annotate.yaml"
    config_path.write_text("placement:\n  min_region_extent: 0\n", encoding="utf-8")
    monkeypatch.setenv("ANNOTATE_CONFIG_PATH", str(config_path))

    assert load_settings().placement.min_region_extent == 0


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_settings_factory_overrides(app_settings_factory: Callable[..., AppSettings]) -> None:
    settings = app_settings_factory(edge_margin=0.0)

    assert settings.placement.to_config().edge_margin == 0


def test_empty_plan_suffix_falls_back() -> None:
    assert OutputSettings(plan_suffix="").plan_suffix == ".plan.json"
