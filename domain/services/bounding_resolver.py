from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from domain.models import BoundingBox, Frame, Shape
from domain.result import NotInFrameError, Result

if TYPE_CHECKING:
    from domain.services.frame_index import FrameIndex

_UNIT_CORNERS = ((0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0))


def resolve_bounding_box(shape: Shape, frame: Frame | None) -> BoundingBox:
    """Axis-aligned envelope of `shape`, relative to the origin of `frame`.

    The shape's absolute transform is shifted by the frame translation and its
    four local corners are mapped through it, so rotated shapes resolve to the
    rectangle covering their rotated footprint.
    """
    if frame is None:
        raise NotInFrameError(shape.id)

    transform = shape.absolute_transform().translated(-frame.x, -frame.y)
    xs: list[float] = []
    ys: list[float] = []
    for unit_x, unit_y in _UNIT_CORNERS:
        px, py = transform.apply(unit_x * shape.width, unit_y * shape.height)
        xs.append(px)
        ys.append(py)
    return BoundingBox.from_edges(min(xs), min(ys), max(xs), max(ys))


def resolve_selection_box(shapes: Sequence[Shape], index: FrameIndex) -> Result[BoundingBox]:
    frame_result = index.shared_frame(shapes)
    if not frame_result.ok:
        return Result.error(
            frame_result.kind, frame_result.log or "", toast=frame_result.toast
        )
    frame = frame_result.unwrap()

    envelope = resolve_bounding_box(shapes[0], frame)
    for shape in shapes[1:]:
        envelope = envelope.union(resolve_bounding_box(shape, frame))
    return Result.success(envelope)
