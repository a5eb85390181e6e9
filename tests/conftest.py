from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, OutputSettings, PlacementSettings
from domain.services.placement_engine import AnnotationPlacementEngine


def _clear_annotate_env() -> None:
    for key in list(os.environ):
        if key.startswith("ANNOTATE_"):
            os.environ.pop(key, None)


_clear_annotate_env()


@pytest.fixture(autouse=True)
def clear_annotate_env() -> Generator[None, None, None]:
    _clear_annotate_env()
    yield
    _clear_annotate_env()


@pytest.fixture
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Repository root not found")


@pytest.fixture
def basic_scene_path(repo_root: Path) -> Path:
    return repo_root / "examples" / "scenes" / "basic.json"


@pytest.fixture
def engine() -> AnnotationPlacementEngine:
    return AnnotationPlacementEngine()


@pytest.fixture
def app_settings_factory(tmp_path: Path) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        placement = PlacementSettings().model_copy(update=overrides)
        return AppSettings(
            placement=placement,
            output=OutputSettings(plan_dir=tmp_path / "plans"),
        )

    return _factory
