from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import BoundingBox, GapOrientation, GapResult, LayoutMode, Shape
from domain.result import ErrorKind, Result
from domain.services.frame_index import FrameIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Placed:
    shape: Shape
    box: BoundingBox


def inner_span(
    a_start: float, a_end: float, b_start: float, b_end: float
) -> tuple[float, float]:
    """Span on the perpendicular axis bounded by the innermost pair of edges.

    `a` is the shape that comes first on the gap axis. The branches are checked
    in a fixed order and the first match wins, which decides ties.
    """
    if b_start >= a_start:
        if a_end >= b_start:
            if b_end >= a_end:
                return b_start, a_end
            return b_start, b_end
        return a_end, b_start
    if b_end >= a_start:
        if a_end >= b_end:
            return a_start, b_end
        return a_start, a_end
    return b_end, a_start


def compute_gap_position(shapes: Sequence[Shape], index: FrameIndex) -> Result[GapResult]:
    """Locate the empty rectangle strictly between two shapes.

    The horizontal axis is checked first: when the left-most shape ends before the
    right-most one starts, the gap is `vertical`. Otherwise the vertical axis is
    checked for a `horizontal` gap. Only when neither axis is apart do touching
    shapes fall back to the auto-layout padding strip. Anything else succeeds with
    an empty payload and kind `NO_GAP_FOUND`.
    """
    if len(shapes) != 2:
        return Result.error(
            ErrorKind.INVALID_SELECTION,
            f"Gap analysis needs exactly two shapes, got {len(shapes)}",
            toast="Two layers must be selected",
        )

    frame_result = index.shared_frame(shapes)
    if not frame_result.ok:
        return Result.error(
            frame_result.kind or ErrorKind.NOT_IN_FRAME,
            frame_result.log or "",
            toast=frame_result.toast,
        )

    placed = [_Placed(shape, index.resolve_box(shape).unwrap()) for shape in shapes]

    left = placed[0]
    right = placed[0]
    for item in placed:
        if item.box.x < left.box.x:
            left = item
        if item.box.x > right.box.x:
            right = item

    if left.box.x_outer < right.box.x:
        return Result.success(_vertical_gap(left, right))

    # top-most / bottom-most, continuing from the left/right pick
    top, bottom = left, right
    for item in placed:
        if item.box.y < top.box.y:
            top = item
        if item.box.y > bottom.box.y:
            bottom = item

    if top.box.y_outer < bottom.box.y:
        return Result.success(_horizontal_gap(top, bottom))

    # touching shapes only count as a gap through auto-layout padding
    padded = _padding_gap_x(left, right) or _padding_gap_y(top, bottom)
    if padded is not None:
        return Result.success(padded)

    logger.debug("No gap between %s and %s", shapes[0].id, shapes[1].id)
    return Result.success(
        None,
        kind=ErrorKind.NO_GAP_FOUND,
        log=f"No gap between {shapes[0].id} and {shapes[1].id}",
    )


def _vertical_gap(layer_a: _Placed, layer_b: _Placed) -> GapResult:
    a, b = layer_a.box, layer_b.box
    left_edge = a.x_outer
    right_edge = b.x
    top_edge, bottom_edge = inner_span(a.y, a.y_outer, b.y, b.y_outer)
    height = bottom_edge - top_edge
    return GapResult(
        x=left_edge,
        y=top_edge + height / 2,
        width=right_edge - left_edge,
        height=height,
        orientation=GapOrientation.VERTICAL,
        shape_a_id=layer_a.shape.id,
        shape_b_id=layer_b.shape.id,
    )


def _horizontal_gap(layer_a: _Placed, layer_b: _Placed) -> GapResult:
    a, b = layer_a.box, layer_b.box
    top_edge = a.y_outer
    bottom_edge = b.y
    left_edge, right_edge = inner_span(a.x, a.x_outer, b.x, b.x_outer)
    width = right_edge - left_edge
    return GapResult(
        x=left_edge + width / 2,
        y=top_edge,
        width=width,
        height=bottom_edge - top_edge,
        orientation=GapOrientation.HORIZONTAL,
        shape_a_id=layer_a.shape.id,
        shape_b_id=layer_b.shape.id,
    )


def _padding_gap_x(layer_a: _Placed, layer_b: _Placed) -> GapResult | None:
    """Gap inside the horizontal auto-layout padding of one of two touching shapes."""
    if layer_a is layer_b or layer_a.box.x_outer != layer_b.box.x:
        return None

    a_shape, b_shape = layer_a.shape, layer_b.shape
    if a_shape.layout_mode == LayoutMode.HORIZONTAL and a_shape.padding.right > 0:
        owner = layer_a
        left_edge = layer_a.box.x_outer - a_shape.padding.right
        width = a_shape.padding.right
    elif b_shape.layout_mode == LayoutMode.HORIZONTAL and b_shape.padding.left > 0:
        owner = layer_b
        left_edge = layer_b.box.x
        width = b_shape.padding.left
    else:
        return None

    padding = owner.shape.padding
    top_edge = owner.box.y + padding.top
    height = max(owner.box.height - padding.top - padding.bottom, 0.0)
    logger.debug("Touching shapes; using padding of %s as gap", owner.shape.id)
    return GapResult(
        x=left_edge,
        y=top_edge + height / 2,
        width=width,
        height=height,
        orientation=GapOrientation.VERTICAL,
        shape_a_id=layer_a.shape.id,
        shape_b_id=layer_b.shape.id,
        inside_padding=True,
    )


def _padding_gap_y(layer_a: _Placed, layer_b: _Placed) -> GapResult | None:
    """Gap inside the vertical auto-layout padding of one of two touching shapes."""
    if layer_a is layer_b or layer_a.box.y_outer != layer_b.box.y:
        return None

    a_shape, b_shape = layer_a.shape, layer_b.shape
    if a_shape.layout_mode == LayoutMode.VERTICAL and a_shape.padding.bottom > 0:
        owner = layer_a
        top_edge = layer_a.box.y_outer - a_shape.padding.bottom
        height = a_shape.padding.bottom
    elif b_shape.layout_mode == LayoutMode.VERTICAL and b_shape.padding.top > 0:
        owner = layer_b
        top_edge = layer_b.box.y
        height = b_shape.padding.top
    else:
        return None

    padding = owner.shape.padding
    left_edge = owner.box.x + padding.left
    width = max(owner.box.width - padding.left - padding.right, 0.0)
    logger.debug("Touching shapes; using padding of %s as gap", owner.shape.id)
    return GapResult(
        x=left_edge + width / 2,
        y=top_edge,
        width=width,
        height=height,
        orientation=GapOrientation.HORIZONTAL,
        shape_a_id=layer_a.shape.id,
        shape_b_id=layer_b.shape.id,
        inside_padding=True,
    )
