from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LayoutMode(str, Enum):
    NONE = "NONE"
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"


class GapOrientation(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class AnnotationSide(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> AnnotationSide:
        return _OPPOSITE_SIDES[self]


_OPPOSITE_SIDES = {
    AnnotationSide.TOP: AnnotationSide.BOTTOM,
    AnnotationSide.BOTTOM: AnnotationSide.TOP,
    AnnotationSide.LEFT: AnnotationSide.RIGHT,
    AnnotationSide.RIGHT: AnnotationSide.LEFT,
}


class AnnotationStyle(str, Enum):
    TEXT = "text"
    MEASUREMENT = "measurement"


class AnnotationCategory(int, Enum):
    # draw order, lowest first
    DIMENSION = 1
    SPACING = 2


class Transform(BaseModel):
    """Affine matrix in host layout: ``[[a, c, tx], [b, d, ty]]``."""

    model_config = ConfigDict(frozen=True)

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @classmethod
    def from_matrix(cls, matrix: List[List[float]]) -> Transform:
        if len(matrix) != 2 or any(len(row) != 3 for row in matrix):
            msg = "Transform matrix must have shape 2x3"
            raise ValueError(msg)
        (a, c, tx), (b, d, ty) = matrix
        return cls(a=a, b=b, c=c, d=d, tx=tx, ty=ty)

    @classmethod
    def from_rotation(cls, x: float, y: float, rotation: float) -> Transform:
        radians = math.radians(rotation)
        cos_r = math.cos(radians)
        sin_r = math.sin(radians)
        return cls(a=cos_r, b=-sin_r, c=sin_r, d=cos_r, tx=x, ty=y)

    def apply(self, px: float, py: float) -> tuple[float, float]:
        return (
            self.a * px + self.c * py + self.tx,
            self.b * px + self.d * py + self.ty,
        )

    def translated(self, dx: float, dy: float) -> Transform:
        return self.model_copy(update={"tx": self.tx + dx, "ty": self.ty + dy})


class Padding(BaseModel):
    model_config = ConfigDict(frozen=True)

    top: float = Field(default=0.0, ge=0)
    right: float = Field(default=0.0, ge=0)
    bottom: float = Field(default=0.0, ge=0)
    left: float = Field(default=0.0, ge=0)


class Frame(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class Shape(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    rotation: float = 0.0
    transform: Optional[Transform] = None
    stack_index: float = 0.0
    frame_id: Optional[str] = None
    layout_mode: LayoutMode = LayoutMode.NONE
    padding: Padding = Field(default_factory=Padding)

    @field_validator("transform", mode="before")
    @classmethod
    def parse_matrix(cls, value: object) -> object:
        if isinstance(value, list):
            return Transform.from_matrix(value)
        return value

    def absolute_transform(self) -> Transform:
        if self.transform is not None:
            return self.transform
        return Transform.from_rotation(self.x, self.y, self.rotation)

    @property
    def has_auto_layout(self) -> bool:
        return self.layout_mode != LayoutMode.NONE


class Scene(BaseModel):
    frames: List[Frame] = Field(default_factory=list)
    shapes: List[Shape] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_unique_ids(self) -> Scene:
        seen: Set[str] = set()
        for node in [*self.frames, *self.shapes]:
            if node.id in seen:
                msg = f"Duplicate id found in scene: {node.id}"
                raise ValueError(msg)
            seen.add(node.id)
        return self

    def shape(self, shape_id: str) -> Shape | None:
        return next((shape for shape in self.shapes if shape.id == shape_id), None)


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            msg = f"Bounding box size must be non-negative, got {self.width}x{self.height}"
            raise ValueError(msg)

    @property
    def x_outer(self) -> float:
        return self.x + self.width

    @property
    def y_outer(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> BoundingBox:
        return cls(x=left, y=top, width=right - left, height=bottom - top)

    def union(self, other: BoundingBox) -> BoundingBox:
        return BoundingBox.from_edges(
            min(self.x, other.x),
            min(self.y, other.y),
            max(self.x_outer, other.x_outer),
            max(self.y_outer, other.y_outer),
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class GapResult:
    x: float
    y: float
    width: float
    height: float
    orientation: GapOrientation
    shape_a_id: str
    shape_b_id: str
    inside_padding: bool = False

    def bounds(self) -> BoundingBox:
        # the perpendicular coordinate sits at the midpoint of the span
        if self.orientation == GapOrientation.VERTICAL:
            return BoundingBox(self.x, self.y - self.height / 2, self.width, self.height)
        return BoundingBox(self.x - self.width / 2, self.y, self.width, self.height)

    @property
    def length(self) -> float:
        return self.width if self.orientation == GapOrientation.VERTICAL else self.height

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "orientation": self.orientation.value,
            "shape_a_id": self.shape_a_id,
            "shape_b_id": self.shape_b_id,
            "inside_padding": self.inside_padding,
        }


@dataclass(frozen=True)
class Region:
    x: float
    y: float
    width: float
    height: float
    orientation: GapOrientation

    def is_degenerate(self, min_extent: float = 0.0) -> bool:
        return self.width <= min_extent or self.height <= min_extent

    def bounds(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, max(self.width, 0.0), max(self.height, 0.0))

    @property
    def length(self) -> float:
        return self.height if self.orientation == GapOrientation.HORIZONTAL else self.width

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "orientation": self.orientation.value,
        }


@dataclass(frozen=True)
class DirectionalRegions:
    top: Region
    bottom: Region
    left: Region
    right: Region

    def region(self, side: AnnotationSide) -> Region:
        return getattr(self, side.value)

    def items(self) -> List[tuple[AnnotationSide, Region]]:
        return [(side, self.region(side)) for side in AnnotationSide]

    def regions_dict(self) -> dict:
        return {side.value: region.to_dict() for side, region in self.items()}


@dataclass(frozen=True)
class OverlapRegions(DirectionalRegions):
    shape_a_id: str = ""
    shape_b_id: str = ""

    def to_dict(self) -> dict:
        return {
            **self.regions_dict(),
            "shape_a_id": self.shape_a_id,
            "shape_b_id": self.shape_b_id,
        }


@dataclass(frozen=True)
class PaddingRegions(DirectionalRegions):
    shape_id: str = ""

    def to_dict(self) -> dict:
        return {**self.regions_dict(), "shape_id": self.shape_id}


@dataclass(frozen=True)
class PlacedAnnotation:
    x: float
    y: float
    width: float
    height: float
    orientation: AnnotationSide
    requested: AnnotationSide = AnnotationSide.TOP

    @property
    def reflowed(self) -> bool:
        return self.orientation != self.requested

    @property
    def pointer(self) -> AnnotationSide:
        """Side of the glyph that carries the connector pointing at the target."""
        return self.orientation.opposite

    def bounds(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.width, self.height)

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "orientation": self.orientation.value,
            "requested": self.requested.value,
            "pointer": self.pointer.value,
        }


@dataclass(frozen=True)
class PlannedAnnotation:
    category: AnnotationCategory
    placement: PlacedAnnotation
    target: BoundingBox
    length: float
    shape_ids: tuple[str, ...]
    direction: Optional[AnnotationSide] = None

    def to_dict(self) -> dict:
        return {
            "category": self.category.name.lower(),
            "placement": self.placement.to_dict(),
            "target": self.target.to_dict(),
            "length": self.length,
            "shape_ids": list(self.shape_ids),
            "direction": self.direction.value if self.direction else None,
        }


@dataclass(frozen=True)
class AnnotationPlan:
    frame_id: str
    annotations: List[PlannedAnnotation] = field(default_factory=list)

    def ordered(self) -> List[PlannedAnnotation]:
        # stable: insertion order is kept within a category
        return sorted(self.annotations, key=lambda item: item.category.value)

    def to_dict(self) -> dict:
        return {
            "frame_id": self.frame_id,
            "annotations": [item.to_dict() for item in self.ordered()],
        }
