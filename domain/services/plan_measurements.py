from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from domain.models import (
    AnnotationCategory,
    AnnotationPlan,
    AnnotationSide,
    AnnotationStyle,
    BoundingBox,
    DirectionalRegions,
    Frame,
    GapOrientation,
    PlannedAnnotation,
    Scene,
    Shape,
    Size,
)
from domain.result import ErrorKind, Result
from domain.services.bounding_resolver import resolve_selection_box
from domain.services.frame_index import FrameIndex
from domain.services.gap_analyzer import compute_gap_position
from domain.services.overlap_decomposer import (
    check_region,
    compute_overlap_regions,
    compute_padding_regions,
)
from domain.services.placement_engine import AnnotationPlacementEngine, PlacementConfig

logger = logging.getLogger(__name__)

ALL_DIRECTIONS = (
    AnnotationSide.TOP,
    AnnotationSide.BOTTOM,
    AnnotationSide.RIGHT,
    AnnotationSide.LEFT,
)


class MeasurementPlanner:
    """Runs resolve, analyze and place for one user action on a scene snapshot."""

    def __init__(
        self,
        engine: AnnotationPlacementEngine | None = None,
        config: PlacementConfig | None = None,
    ) -> None:
        self.config = config or (engine.config if engine else PlacementConfig())
        self.engine = engine or AnnotationPlacementEngine(self.config)

    def plan(
        self,
        scene: Scene,
        shape_ids: Sequence[str],
        glyph: Size | None = None,
        index: FrameIndex | None = None,
    ) -> Result[AnnotationPlan]:
        """Dimensions for one shape, spacing (gap or overlap) for two."""
        index = index or FrameIndex.from_scene(scene)
        shapes_result = _lookup_shapes(scene, shape_ids)
        if not shapes_result.ok:
            return Result.error(
                shapes_result.kind or ErrorKind.INVALID_SELECTION,
                shapes_result.log or "",
                toast=shapes_result.toast,
            )
        shapes = shapes_result.unwrap()
        if len(shapes) == 1:
            return self.plan_dimensions(shapes, index, glyph)
        if len(shapes) == 2:
            return self.plan_spacing(shapes, index, glyph)
        return Result.error(
            ErrorKind.INVALID_SELECTION,
            f"Measurement needs one or two shapes, got {len(shapes)}",
            toast="One or two layers must be selected",
        )

    def plan_dimensions(
        self, shapes: Sequence[Shape], index: FrameIndex, glyph: Size | None = None
    ) -> Result[AnnotationPlan]:
        frame_result = index.shared_frame(shapes)
        if not frame_result.ok:
            return _forward(frame_result)
        frame = frame_result.unwrap()
        box = resolve_selection_box(shapes, index).unwrap()
        shape_ids = tuple(shape.id for shape in shapes)

        annotations = [
            self._planned(
                AnnotationCategory.DIMENSION,
                box,
                frame,
                glyph,
                AnnotationSide.TOP,
                box.width,
                shape_ids,
            ),
            self._planned(
                AnnotationCategory.DIMENSION,
                box,
                frame,
                glyph,
                AnnotationSide.RIGHT,
                box.height,
                shape_ids,
            ),
        ]
        return Result.success(
            AnnotationPlan(frame_id=frame.id, annotations=annotations),
            log=f"Dimensions annotated for {', '.join(shape_ids)}",
        )

    def plan_spacing(
        self,
        shapes: Sequence[Shape],
        index: FrameIndex,
        glyph: Size | None = None,
        directions: Iterable[AnnotationSide] = ALL_DIRECTIONS,
    ) -> Result[AnnotationPlan]:
        gap_result = compute_gap_position(shapes, index)
        if not gap_result.ok:
            return _forward(gap_result)
        frame = index.shared_frame(shapes).unwrap()

        if gap_result.payload is not None:
            gap = gap_result.payload
            side = (
                AnnotationSide.TOP
                if gap.orientation == GapOrientation.VERTICAL
                else AnnotationSide.RIGHT
            )
            annotation = self._planned(
                AnnotationCategory.SPACING,
                gap.bounds(),
                frame,
                glyph,
                side,
                gap.length,
                (gap.shape_a_id, gap.shape_b_id),
            )
            return Result.success(
                AnnotationPlan(frame_id=frame.id, annotations=[annotation]),
                log=f"Spacing annotated between {gap.shape_a_id} and {gap.shape_b_id}",
            )

        overlap_result = compute_overlap_regions(shapes, index)
        if not overlap_result.ok:
            return _forward(overlap_result)
        regions = overlap_result.unwrap()
        annotations = self._region_annotations(
            regions,
            frame,
            glyph,
            directions,
            (regions.shape_a_id, regions.shape_b_id),
        )
        return Result.success(
            AnnotationPlan(frame_id=frame.id, annotations=annotations),
            log=f"Overlap spacing annotated for {regions.shape_a_id} and {regions.shape_b_id}",
        )

    def plan_padding(
        self, shape: Shape, index: FrameIndex, glyph: Size | None = None
    ) -> Result[AnnotationPlan]:
        padding_result = compute_padding_regions(shape, index)
        if not padding_result.ok:
            return _forward(padding_result)
        frame = index.frame_for(shape)
        annotations = self._region_annotations(
            padding_result.unwrap(), frame, glyph, ALL_DIRECTIONS, (shape.id,)
        )
        return Result.success(
            AnnotationPlan(frame_id=frame.id, annotations=annotations),
            log=f"Padding annotated for {shape.id}",
        )

    def _region_annotations(
        self,
        regions: DirectionalRegions,
        frame: Frame,
        glyph: Size | None,
        directions: Iterable[AnnotationSide],
        shape_ids: tuple[str, ...],
    ) -> list[PlannedAnnotation]:
        annotations: list[PlannedAnnotation] = []
        for direction in directions:
            region_result = check_region(
                regions.region(direction), self.config.min_region_extent
            )
            if not region_result.ok:
                logger.debug("Skipping %s region: %s", direction.value, region_result.log)
                continue
            region = region_result.unwrap()
            # label horizontal strips from the side, vertical strips from above
            side = (
                AnnotationSide.RIGHT
                if region.orientation == GapOrientation.HORIZONTAL
                else AnnotationSide.TOP
            )
            annotations.append(
                self._planned(
                    AnnotationCategory.SPACING,
                    region.bounds(),
                    frame,
                    glyph,
                    side,
                    region.length,
                    shape_ids,
                    direction=direction,
                )
            )
        return annotations

    def _planned(
        self,
        category: AnnotationCategory,
        target: BoundingBox,
        frame: Frame,
        glyph: Size | None,
        side: AnnotationSide,
        length: float,
        shape_ids: tuple[str, ...],
        direction: AnnotationSide | None = None,
    ) -> PlannedAnnotation:
        placement = self.engine.place(
            target,
            Size(frame.width, frame.height),
            glyph or self.config.glyph_size,
            side,
            AnnotationStyle.MEASUREMENT,
        )
        return PlannedAnnotation(
            category=category,
            placement=placement,
            target=target,
            length=length,
            shape_ids=shape_ids,
            direction=direction,
        )


def _lookup_shapes(scene: Scene, shape_ids: Sequence[str]) -> Result[list[Shape]]:
    shapes: list[Shape] = []
    for shape_id in shape_ids:
        shape = scene.shape(shape_id)
        if shape is None:
            return Result.error(
                ErrorKind.INVALID_SELECTION,
                f"Shape {shape_id} not found in scene",
                toast="Selected layer could not be found",
            )
        shapes.append(shape)
    return Result.success(shapes)


def _forward(result: Result[object]) -> Result[AnnotationPlan]:
    return Result.error(
        result.kind or ErrorKind.INVALID_SELECTION, result.log or "", toast=result.toast
    )
