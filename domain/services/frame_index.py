from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from domain.models import BoundingBox, Frame, Scene, Shape
from domain.result import ErrorKind, Result
from domain.services.bounding_resolver import resolve_bounding_box


class FrameIndex:
    """Ownership index from shape id to its top-level frame.

    Built once per batch of operations so frame lookups are not re-walked for
    every call.
    """

    def __init__(self, frames: Iterable[Frame], owners: Mapping[str, str]) -> None:
        self._frames: dict[str, Frame] = {frame.id: frame for frame in frames}
        self._owners: dict[str, str] = dict(owners)

    @classmethod
    def from_scene(cls, scene: Scene) -> FrameIndex:
        return cls.from_shapes(scene.frames, scene.shapes)

    @classmethod
    def from_shapes(cls, frames: Iterable[Frame], shapes: Iterable[Shape]) -> FrameIndex:
        owners = {shape.id: shape.frame_id for shape in shapes if shape.frame_id}
        return cls(frames, owners)

    def frame_for(self, shape: Shape) -> Frame | None:
        frame_id = self._owners.get(shape.id)
        if frame_id is None:
            return None
        return self._frames.get(frame_id)

    def require_frame(self, shape: Shape) -> Result[Frame]:
        frame = self.frame_for(shape)
        if frame is None:
            return Result.error(
                ErrorKind.NOT_IN_FRAME,
                f"Shape {shape.id} is not placed inside a frame",
                toast="Your selection needs to be in a frame",
            )
        return Result.success(frame)

    def shared_frame(self, shapes: Sequence[Shape]) -> Result[Frame]:
        if not shapes:
            return Result.error(
                ErrorKind.INVALID_SELECTION,
                "Selection is empty",
                toast="At least one layer must be selected",
            )
        frames: list[Frame] = []
        for shape in shapes:
            frame_result = self.require_frame(shape)
            if not frame_result.ok:
                return frame_result
            frames.append(frame_result.unwrap())
        if len({frame.id for frame in frames}) > 1:
            return Result.error(
                ErrorKind.INVALID_SELECTION,
                "Shapes belong to different frames",
                toast="Selected layers must be in the same frame",
            )
        return Result.success(frames[0])

    def resolve_box(self, shape: Shape) -> Result[BoundingBox]:
        frame = self.frame_for(shape)
        if frame is None:
            return Result.error(
                ErrorKind.NOT_IN_FRAME,
                f"Shape {shape.id} is not placed inside a frame",
                toast="Your selection needs to be in a frame",
            )
        return Result.success(resolve_bounding_box(shape, frame))
