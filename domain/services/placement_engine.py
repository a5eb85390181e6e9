from __future__ import annotations

import logging
from dataclasses import dataclass

from domain.models import (
    AnnotationSide,
    AnnotationStyle,
    BoundingBox,
    PlacedAnnotation,
    Size,
)
from domain.ports.placement import PlacementEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Clearance:
    vertical: float
    horizontal: float
    reflow: float


@dataclass(frozen=True)
class PlacementConfig:
    text_clearance: Clearance = Clearance(vertical=8.0, horizontal=5.0, reflow=5.0)
    measurement_clearance: Clearance = Clearance(vertical=15.0, horizontal=12.0, reflow=4.0)
    edge_margin: float = 5.0
    min_region_extent: float = 2.0
    glyph_size: Size = Size(40, 20)

    def clearance_for(self, style: AnnotationStyle) -> Clearance:
        if style == AnnotationStyle.MEASUREMENT:
            return self.measurement_clearance
        return self.text_clearance


class AnnotationPlacementEngine(PlacementEngine):
    def __init__(self, config: PlacementConfig | None = None) -> None:
        self.config = config or PlacementConfig()

    def place(
        self,
        target: BoundingBox,
        frame: BoundingBox | Size,
        glyph: Size,
        orientation: AnnotationSide = AnnotationSide.TOP,
        style: AnnotationStyle = AnnotationStyle.TEXT,
    ) -> PlacedAnnotation:
        """Position a glyph beside `target` without leaving the frame.

        Returns a best-effort placement; `orientation` of the result may differ from
        the requested one when the naive placement bleeds over a frame edge.
        """
        clearance = self.config.clearance_for(style)
        x, y = self._naive_position(target, glyph, orientation, clearance)
        edge_x, edge_y = self._detect_bleed(x, y, glyph, frame)

        side = orientation
        if edge_x or edge_y:
            side, x, y = self._reflow(target, glyph, orientation, clearance, edge_x, edge_y, x, y)
            if side != orientation:
                logger.debug(
                    "Reflowed %s annotation to %s (bleed x=%s y=%s)",
                    orientation.value,
                    side.value,
                    edge_x.value if edge_x else None,
                    edge_y.value if edge_y else None,
                )

        x = self._clamp(x, glyph.width, frame.width)
        y = self._clamp(y, glyph.height, frame.height)
        return PlacedAnnotation(
            x=x,
            y=y,
            width=glyph.width,
            height=glyph.height,
            orientation=side,
            requested=orientation,
        )

    def _naive_position(
        self,
        target: BoundingBox,
        glyph: Size,
        orientation: AnnotationSide,
        clearance: Clearance,
    ) -> tuple[float, float]:
        centered_x = target.center_x - glyph.width / 2
        centered_y = target.center_y - glyph.height / 2
        if orientation == AnnotationSide.BOTTOM:
            return centered_x, target.y_outer + clearance.vertical
        if orientation == AnnotationSide.LEFT:
            return target.x - glyph.width - clearance.horizontal, centered_y
        if orientation == AnnotationSide.RIGHT:
            return target.x_outer + clearance.horizontal, centered_y
        return centered_x, target.y - glyph.height - clearance.vertical

    def _detect_bleed(
        self, x: float, y: float, glyph: Size, frame: BoundingBox | Size
    ) -> tuple[AnnotationSide | None, AnnotationSide | None]:
        margin = self.config.edge_margin
        edge_x: AnnotationSide | None = None
        edge_y: AnnotationSide | None = None
        if x - margin < 0:
            edge_x = AnnotationSide.LEFT
        if x + margin + glyph.width > frame.width:
            edge_x = AnnotationSide.RIGHT
        if y - margin < 0:
            edge_y = AnnotationSide.TOP
        if y + margin > frame.height - glyph.height:
            edge_y = AnnotationSide.BOTTOM
        return edge_x, edge_y

    def _reflow(
        self,
        target: BoundingBox,
        glyph: Size,
        orientation: AnnotationSide,
        clearance: Clearance,
        edge_x: AnnotationSide | None,
        edge_y: AnnotationSide | None,
        x: float,
        y: float,
    ) -> tuple[AnnotationSide, float, float]:
        gap = clearance.reflow
        centered_y = target.center_y - glyph.height / 2

        if orientation in (AnnotationSide.TOP, AnnotationSide.BOTTOM):
            if edge_x == AnnotationSide.LEFT:
                return AnnotationSide.RIGHT, target.x_outer + gap, centered_y
            if edge_x == AnnotationSide.RIGHT:
                return AnnotationSide.LEFT, target.x - glyph.width - gap, centered_y
            if orientation == AnnotationSide.TOP and edge_y == AnnotationSide.TOP:
                return AnnotationSide.BOTTOM, x, target.y_outer + gap
            if orientation == AnnotationSide.BOTTOM and edge_y == AnnotationSide.BOTTOM:
                return AnnotationSide.TOP, x, target.y - glyph.height - gap
            return orientation, x, y

        if orientation == AnnotationSide.RIGHT and edge_x == AnnotationSide.RIGHT:
            return AnnotationSide.LEFT, target.x - glyph.width - gap, y
        if orientation == AnnotationSide.LEFT and edge_x == AnnotationSide.LEFT:
            return AnnotationSide.RIGHT, target.x_outer + gap, y
        # vertical bleed of a side annotation is handled by the final clamp
        return orientation, x, y

    def _clamp(self, value: float, extent: float, limit: float) -> float:
        margin = self.config.edge_margin
        upper = max(limit - extent - margin, margin)
        return min(max(value, margin), upper)


def place_annotation(
    target: BoundingBox,
    frame: BoundingBox | Size,
    glyph: Size,
    orientation: AnnotationSide = AnnotationSide.TOP,
    style: AnnotationStyle = AnnotationStyle.TEXT,
    config: PlacementConfig | None = None,
) -> PlacedAnnotation:
    return AnnotationPlacementEngine(config).place(target, frame, glyph, orientation, style)
