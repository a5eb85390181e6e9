from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.filesystem.scene_repository import FileSystemPlanRepository, FileSystemSceneRepository
from app.config import AppSettings, load_settings
from domain.models import AnnotationSide, AnnotationStyle, BoundingBox, Scene, Shape, Size
from domain.result import ErrorKind, Result, report_result
from domain.services.bounding_resolver import resolve_selection_box
from domain.services.frame_index import FrameIndex
from domain.services.gap_analyzer import compute_gap_position
from domain.services.overlap_decomposer import compute_overlap_regions, compute_padding_regions
from domain.services.placement_engine import AnnotationPlacementEngine
from domain.services.plan_measurements import MeasurementPlanner

app = typer.Typer(no_args_is_help=True)
console = Console()
logger = logging.getLogger("annotate")

_state: dict[str, AppSettings] = {}


def _settings() -> AppSettings:
    if "settings" not in _state:
        _state["settings"] = load_settings()
    return _state["settings"]


@app.callback()
def main(
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log placement decisions."),
) -> None:
    settings = load_settings(config)
    _state["settings"] = settings
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


def _load_scene(path: Path) -> Scene:
    if not path.exists():
        console.print(f"[red]File not found:[/] {path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemSceneRepository().load_by_path(path)
    except (ValidationError, ValueError) as exc:
        console.print(f"[red]Invalid scene:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _select(scene: Scene, shape_ids: List[str]) -> List[Shape]:
    shapes: List[Shape] = []
    for shape_id in shape_ids:
        shape = scene.shape(shape_id)
        if shape is None:
            console.print(f"[red]Unknown shape:[/] {shape_id}")
            raise typer.Exit(code=1)
        shapes.append(shape)
    return shapes


def _parse_numbers(raw: str, count: int, label: str) -> List[float]:
    try:
        values = [float(part) for part in raw.split(",")]
    except ValueError as exc:
        raise typer.BadParameter(f"{label} must be {count} comma-separated numbers") from exc
    if len(values) != count:
        raise typer.BadParameter(f"{label} must be {count} comma-separated numbers")
    return values


def _emit(result: Result[object]) -> None:
    report_result(result, logger)
    if not result.ok:
        console.print(f"[red]{result.toast or result.log}[/] ({result.kind.value})")
        raise typer.Exit(code=1)
    if result.payload is None:
        message = "No gap found" if result.kind == ErrorKind.NO_GAP_FOUND else "Nothing found"
        console.print(f"[yellow]{message}[/]")
        return
    console.print_json(data=result.payload.to_dict())


@app.command("bounds")
def bounds(
    scene_path: Path = typer.Argument(..., help="Scene snapshot JSON."),
    shape_ids: List[str] = typer.Argument(..., help="Shape ids to envelope."),
) -> None:
    scene = _load_scene(scene_path)
    shapes = _select(scene, shape_ids)
    _emit(resolve_selection_box(shapes, FrameIndex.from_scene(scene)))


@app.command("gap")
def gap(
    scene_path: Path = typer.Argument(..., help="Scene snapshot JSON."),
    first: str = typer.Argument(..., help="First shape id."),
    second: str = typer.Argument(..., help="Second shape id."),
) -> None:
    scene = _load_scene(scene_path)
    shapes = _select(scene, [first, second])
    _emit(compute_gap_position(shapes, FrameIndex.from_scene(scene)))


@app.command("overlap")
def overlap(
    scene_path: Path = typer.Argument(..., help="Scene snapshot JSON."),
    first: str = typer.Argument(..., help="First shape id."),
    second: str = typer.Argument(..., help="Second shape id."),
) -> None:
    scene = _load_scene(scene_path)
    shapes = _select(scene, [first, second])
    _emit(compute_overlap_regions(shapes, FrameIndex.from_scene(scene)))


@app.command("padding")
def padding_regions(
    scene_path: Path = typer.Argument(..., help="Scene snapshot JSON."),
    shape_id: str = typer.Argument(..., help="Auto-layout shape id."),
) -> None:
    scene = _load_scene(scene_path)
    (shape,) = _select(scene, [shape_id])
    _emit(compute_padding_regions(shape, FrameIndex.from_scene(scene)))


@app.command("place")
def place(
    target: str = typer.Option(..., help="Target box as x,y,width,height."),
    frame: str = typer.Option(..., help="Frame size as width,height."),
    glyph: Optional[str] = typer.Option(None, help="Glyph size as width,height."),
    orientation: Optional[AnnotationSide] = typer.Option(None, help="Requested side."),
    style: AnnotationStyle = typer.Option(AnnotationStyle.TEXT, help="Clearance style."),
) -> None:
    settings = _settings()
    config = settings.placement.to_config()
    x, y, width, height = _parse_numbers(target, 4, "target")
    frame_width, frame_height = _parse_numbers(frame, 2, "frame")
    glyph_size = config.glyph_size
    if glyph:
        glyph_width, glyph_height = _parse_numbers(glyph, 2, "glyph")
        glyph_size = Size(glyph_width, glyph_height)
    if width < 0 or height < 0:
        raise typer.BadParameter("target width and height must be non-negative")

    placement = AnnotationPlacementEngine(config).place(
        BoundingBox(x, y, width, height),
        Size(frame_width, frame_height),
        glyph_size,
        orientation or settings.placement.default_orientation,
        style,
    )
    console.print_json(data=placement.to_dict())


@app.command("plan")
def plan(
    scene_path: Path = typer.Argument(..., help="Scene snapshot JSON."),
    shape_ids: List[str] = typer.Argument(..., help="One or two shape ids."),
    padding: bool = typer.Option(False, help="Annotate auto-layout padding of one shape."),
    output: Optional[Path] = typer.Option(None, help="Write the plan to this file."),
) -> None:
    settings = _settings()
    scene = _load_scene(scene_path)
    planner = MeasurementPlanner(config=settings.placement.to_config())

    if padding:
        shapes = _select(scene, shape_ids)
        if len(shapes) != 1:
            console.print("[red]One layer must be selected[/]")
            raise typer.Exit(code=1)
        result = planner.plan_padding(shapes[0], FrameIndex.from_scene(scene))
    else:
        result = planner.plan(scene, shape_ids)

    report_result(result, logger)
    if not result.ok:
        console.print(f"[red]{result.toast or result.log}[/] ({result.kind.value})")
        raise typer.Exit(code=1)

    annotation_plan = result.unwrap()
    if output is None:
        output = settings.output.plan_dir / f"{scene_path.stem}{settings.output.plan_suffix}"
    FileSystemPlanRepository().save(annotation_plan, output)
    console.print(
        f"[green]Wrote[/] {len(annotation_plan.annotations)} annotation(s) to {output}"
    )


if __name__ == "__main__":
    app()
