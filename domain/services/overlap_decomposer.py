from __future__ import annotations

import logging
from collections.abc import Sequence

from domain.models import (
    AnnotationSide,
    BoundingBox,
    GapOrientation,
    OverlapRegions,
    PaddingRegions,
    Region,
    Shape,
)
from domain.result import ErrorKind, Result
from domain.services.frame_index import FrameIndex
from domain.services.gap_analyzer import compute_gap_position

logger = logging.getLogger(__name__)


def compute_overlap_regions(
    shapes: Sequence[Shape], index: FrameIndex
) -> Result[OverlapRegions]:
    """Split the space around two overlapping shapes into four rectangles.

    The shape lower in the stack is `A` (subordinate) and the higher one is `B`
    (dominant). Regions are measured from `B` out to the edges of `A`; a region
    with non-positive width or height means nothing lies in that direction.
    """
    gap_result = compute_gap_position(shapes, index)
    if not gap_result.ok:
        return Result.error(
            gap_result.kind or ErrorKind.INVALID_SELECTION,
            gap_result.log or "",
            toast=gap_result.toast,
        )
    if gap_result.payload is not None:
        return Result.error(
            ErrorKind.GAP_EXISTS,
            f"Shapes {shapes[0].id} and {shapes[1].id} do not overlap",
            toast="The selected layers need to overlap",
        )

    layer_a = shapes[0]
    layer_b = shapes[-1]
    if layer_a.stack_index > layer_b.stack_index:
        layer_a, layer_b = layer_b, layer_a
    if layer_a.stack_index == layer_b.stack_index:
        # cannot pick a dominant shape, e.g. layers picked from separate containers
        return Result.error(
            ErrorKind.AMBIGUOUS_STACK_ORDER,
            f"Shapes {layer_a.id} and {layer_b.id} share stack index {layer_a.stack_index}",
            toast="Could not find overlapped layers in your selection",
        )

    a = index.resolve_box(layer_a).unwrap()
    b = index.resolve_box(layer_b).unwrap()
    regions = decompose_overlap(a, b)
    return Result.success(
        OverlapRegions(
            top=regions[AnnotationSide.TOP],
            bottom=regions[AnnotationSide.BOTTOM],
            left=regions[AnnotationSide.LEFT],
            right=regions[AnnotationSide.RIGHT],
            shape_a_id=layer_a.id,
            shape_b_id=layer_b.id,
        )
    )


def decompose_overlap(a: BoundingBox, b: BoundingBox) -> dict[AnnotationSide, Region]:
    top_height = b.y - a.y
    left_width = b.x - a.x
    return {
        AnnotationSide.TOP: Region(
            x=b.x,
            y=a.y,
            width=b.width,
            height=top_height,
            orientation=GapOrientation.HORIZONTAL,
        ),
        AnnotationSide.BOTTOM: Region(
            x=b.x,
            y=a.y + top_height + b.height,
            width=b.width,
            height=a.height - top_height - b.height,
            orientation=GapOrientation.HORIZONTAL,
        ),
        AnnotationSide.LEFT: Region(
            x=a.x,
            y=b.y,
            width=left_width,
            height=b.height,
            orientation=GapOrientation.VERTICAL,
        ),
        AnnotationSide.RIGHT: Region(
            x=b.x + b.width,
            y=b.y,
            width=a.width - b.width - left_width,
            height=b.height,
            orientation=GapOrientation.VERTICAL,
        ),
    }


def compute_padding_regions(shape: Shape, index: FrameIndex) -> Result[PaddingRegions]:
    if not shape.has_auto_layout:
        return Result.error(
            ErrorKind.INVALID_SELECTION,
            f"Shape {shape.id} has no auto-layout",
            toast="A layer with auto-layout enabled must be selected",
        )
    box_result = index.resolve_box(shape)
    if not box_result.ok:
        return Result.error(
            ErrorKind.NOT_IN_FRAME, box_result.log or "", toast=box_result.toast
        )

    box = box_result.unwrap()
    padding = shape.padding
    content_width = box.width - padding.left - padding.right
    content_height = box.height - padding.top - padding.bottom
    return Result.success(
        PaddingRegions(
            top=Region(
                x=box.x + padding.left,
                y=box.y,
                width=content_width,
                height=padding.top,
                orientation=GapOrientation.HORIZONTAL,
            ),
            bottom=Region(
                x=box.x + padding.left,
                y=box.y_outer - padding.bottom,
                width=content_width,
                height=padding.bottom,
                orientation=GapOrientation.HORIZONTAL,
            ),
            left=Region(
                x=box.x,
                y=box.y + padding.top,
                width=padding.left,
                height=content_height,
                orientation=GapOrientation.VERTICAL,
            ),
            right=Region(
                x=box.x_outer - padding.right,
                y=box.y + padding.top,
                width=padding.right,
                height=content_height,
                orientation=GapOrientation.VERTICAL,
            ),
            shape_id=shape.id,
        )
    )


def check_region(region: Region, min_extent: float = 0.0) -> Result[Region]:
    if region.is_degenerate(min_extent):
        logger.debug("Skipping degenerate region %sx%s", region.width, region.height)
        return Result.error(
            ErrorKind.DEGENERATE_REGION,
            f"Region {region.width}x{region.height} is not larger than {min_extent}",
        )
    return Result.success(region)
