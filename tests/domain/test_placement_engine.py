from __future__ import annotations

import itertools

import pytest

from domain.models import AnnotationSide, AnnotationStyle, BoundingBox, Size
from domain.services.placement_engine import (
    AnnotationPlacementEngine,
    PlacementConfig,
    place_annotation,
)

FRAME = Size(500, 500)
GLYPH = Size(40, 20)


def test_top_annotation_is_centered_above_target(engine: AnnotationPlacementEngine) -> None:
    placed = engine.place(BoundingBox(200, 200, 100, 40), FRAME, GLYPH)

    assert (placed.x, placed.y) == (230, 172)
    assert placed.orientation == AnnotationSide.TOP
    assert placed.reflowed is False
    assert placed.pointer == AnnotationSide.BOTTOM


def test_measurement_style_uses_wider_clearance(engine: AnnotationPlacementEngine) -> None:
    placed = engine.place(
        BoundingBox(200, 200, 100, 40), FRAME, GLYPH, style=AnnotationStyle.MEASUREMENT
    )

    assert placed.y == 165


def test_top_annotation_near_top_edge_flips_below(engine: AnnotationPlacementEngine) -> None:
    placed = engine.place(BoundingBox(100, 2, 50, 30), FRAME, GLYPH, AnnotationSide.TOP)

    assert placed.orientation == AnnotationSide.BOTTOM
    assert placed.requested == AnnotationSide.TOP
    assert placed.reflowed is True
    assert placed.pointer == AnnotationSide.TOP
    assert placed.x == 105
    assert placed.y == 37


def test_bottom_annotation_near_bottom_edge_flips_above(
    engine: AnnotationPlacementEngine,
) -> None:
    placed = engine.place(BoundingBox(200, 470, 50, 20), FRAME, GLYPH, AnnotationSide.BOTTOM)

    assert placed.orientation == AnnotationSide.TOP
    assert (placed.x, placed.y) == (205, 445)


def test_top_annotation_bleeding_left_moves_beside_target(
    engine: AnnotationPlacementEngine,
) -> None:
    placed = engine.place(BoundingBox(0, 100, 20, 20), FRAME, GLYPH)

    assert placed.orientation == AnnotationSide.RIGHT
    assert placed.pointer == AnnotationSide.LEFT
    assert (placed.x, placed.y) == (25, 100)


def test_top_annotation_bleeding_right_moves_beside_target(
    engine: AnnotationPlacementEngine,
) -> None:
    placed = engine.place(BoundingBox(480, 100, 20, 20), FRAME, GLYPH)

    assert placed.orientation == AnnotationSide.LEFT
    assert (placed.x, placed.y) == (435, 100)


def test_horizontal_bleed_wins_over_vertical_bleed(engine: AnnotationPlacementEngine) -> None:
    placed = engine.place(BoundingBox(0, 0, 20, 20), FRAME, GLYPH)

    assert placed.orientation == AnnotationSide.RIGHT


def test_right_annotation_bleeding_right_flips_left(engine: AnnotationPlacementEngine) -> None:
    placed = engine.place(BoundingBox(440, 100, 40, 20), FRAME, GLYPH, AnnotationSide.RIGHT)

    assert placed.orientation == AnnotationSide.LEFT
    assert (placed.x, placed.y) == (395, 100)


def test_left_annotation_bleeding_left_flips_right(engine: AnnotationPlacementEngine) -> None:
    placed = engine.place(BoundingBox(10, 100, 40, 20), FRAME, GLYPH, AnnotationSide.LEFT)

    assert placed.orientation == AnnotationSide.RIGHT
    assert (placed.x, placed.y) == (55, 100)


def test_side_annotation_bleeding_vertically_is_clamped(
    engine: AnnotationPlacementEngine,
) -> None:
    placed = engine.place(BoundingBox(100, 0, 40, 10), FRAME, GLYPH, AnnotationSide.RIGHT)

    assert placed.orientation == AnnotationSide.RIGHT
    assert (placed.x, placed.y) == (145, 5)


def test_oversized_glyph_is_pinned_to_margin(engine: AnnotationPlacementEngine) -> None:
    placed = engine.place(BoundingBox(0, 0, 10, 10), Size(30, 30), GLYPH)

    assert placed.x == engine.config.edge_margin


def test_frame_may_be_given_as_bounding_box(engine: AnnotationPlacementEngine) -> None:
    target = BoundingBox(100, 2, 50, 30)

    assert engine.place(target, BoundingBox(0, 0, 500, 500), GLYPH) == engine.place(
        target, FRAME, GLYPH
    )


@pytest.mark.parametrize("style", list(AnnotationStyle))
def test_placement_never_leaves_frame(
    engine: AnnotationPlacementEngine, style: AnnotationStyle
) -> None:
    frame = Size(300, 200)
    positions = itertools.product([0, 10, 130, 270, 290], [0, 3, 90, 180, 195])
    for (x, y), side in itertools.product(positions, list(AnnotationSide)):
        placed = engine.place(BoundingBox(x, y, 10, 5), frame, GLYPH, side, style)
        assert 0 <= placed.x
        assert placed.x + placed.width <= frame.width
        assert 0 <= placed.y
        assert placed.y + placed.height <= frame.height


def test_custom_config_changes_clearances() -> None:
    config = PlacementConfig(edge_margin=0)
    placed = place_annotation(
        BoundingBox(200, 200, 100, 40), FRAME, GLYPH, config=config
    )

    assert placed.y == 172
    assert place_annotation(BoundingBox(0, 30, 40, 10), FRAME, GLYPH, config=config).x == 0


def test_placement_is_idempotent(engine: AnnotationPlacementEngine) -> None:
    target = BoundingBox(3.5, 7.25, 41, 13)

    assert engine.place(target, FRAME, GLYPH) == engine.place(target, FRAME, GLYPH)
