from __future__ import annotations

from typing import Protocol

from domain.models import (
    AnnotationSide,
    AnnotationStyle,
    BoundingBox,
    PlacedAnnotation,
    Size,
)


class PlacementEngine(Protocol):
    def place(
        self,
        target: BoundingBox,
        frame: BoundingBox | Size,
        glyph: Size,
        orientation: AnnotationSide = AnnotationSide.TOP,
        style: AnnotationStyle = AnnotationStyle.TEXT,
    ) -> PlacedAnnotation:
        ...
