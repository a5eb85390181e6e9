from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import AnnotationPlan, Scene
from domain.ports.scene import PlanRepository, SceneRepository


class FileSystemSceneRepository(SceneRepository):
    def load_by_path(self, path: Path) -> Scene:
        return Scene.model_validate(load_json(path))

    def load_all_with_paths(self, directory: Path) -> list[tuple[Path, Scene]]:
        return [(path, self.load_by_path(path)) for path in sorted(self._iter_paths(directory))]

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        for path in directory.glob("*.json"):
            if path.name.endswith(".plan.json"):
                continue
            yield path


class FileSystemPlanRepository(PlanRepository):
    def save(self, plan: AnnotationPlan, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, plan.to_dict())
