from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import AnnotationPlan, Scene


class SceneRepository(Protocol):
    def load_by_path(self, path: Path) -> Scene: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, Scene]]: ...


class PlanRepository(Protocol):
    def save(self, plan: AnnotationPlan, path: Path) -> None: ...
