from __future__ import annotations

import math

import pytest

from domain.models import BoundingBox, Frame, Shape
from domain.result import ErrorKind, NotInFrameError
from domain.services.bounding_resolver import resolve_bounding_box, resolve_selection_box
from tests.helpers.scene_fixtures import index_for, make_frame, make_shape


def test_unrotated_shape_is_relative_to_frame_origin() -> None:
    frame = make_frame(x=100, y=50)
    shape = make_shape("a", 130, 70, 40, 20)

    box = resolve_bounding_box(shape, frame)

    assert box == BoundingBox(30, 20, 40, 20)
    assert box.x_outer == 70
    assert box.y_outer == 40


def test_quarter_turn_swaps_extents() -> None:
    shape = make_shape("a", 100, 100, 40, 20, rotation=90)

    box = resolve_bounding_box(shape, make_frame())

    assert box.x == pytest.approx(100)
    assert box.y == pytest.approx(60)
    assert box.width == pytest.approx(20)
    assert box.height == pytest.approx(40)


def test_diagonal_rotation_covers_rotated_footprint() -> None:
    shape = make_shape("a", 0, 0, 10, 10, rotation=45)

    box = resolve_bounding_box(shape, make_frame())

    diagonal = 10 * math.sqrt(2)
    assert box.x == pytest.approx(0)
    assert box.y == pytest.approx(-diagonal / 2)
    assert box.width == pytest.approx(diagonal)
    assert box.height == pytest.approx(diagonal)


def test_explicit_transform_overrides_position_and_rotation() -> None:
    shape = make_shape(
        "a", 999, 999, 30, 10, rotation=33, transform=[[1, 0, 10], [0, 1, 20]]
    )

    box = resolve_bounding_box(shape, make_frame(x=5, y=5))

    assert box == BoundingBox(5, 15, 30, 10)


@pytest.mark.parametrize("rotation", [0, 15, 45, 90, 135, 180, -30, 270, 359.5])
def test_size_is_never_negative(rotation: float) -> None:
    shape = make_shape("a", 40, 40, 25, 60, rotation=rotation)

    box = resolve_bounding_box(shape, make_frame())

    assert box.width >= 0
    assert box.height >= 0


def test_zero_sized_shape_resolves_to_point() -> None:
    box = resolve_bounding_box(make_shape("line", 10, 10, 0, 0, rotation=30), make_frame())

    assert box.width == pytest.approx(0)
    assert box.height == pytest.approx(0)


def test_missing_frame_raises() -> None:
    shape = Shape(id="a", width=10, height=10)

    with pytest.raises(NotInFrameError):
        resolve_bounding_box(shape, None)


def test_index_reports_not_in_frame() -> None:
    orphan = make_shape("orphan", 0, 0, 10, 10, frame_id=None)

    result = index_for(orphan).resolve_box(orphan)

    assert not result.ok
    assert result.kind == ErrorKind.NOT_IN_FRAME


def test_selection_box_envelopes_all_shapes() -> None:
    a = make_shape("a", 10, 10, 20, 20)
    b = make_shape("b", 50, 5, 10, 50)

    result = resolve_selection_box([a, b], index_for(a, b))

    assert result.ok
    assert result.unwrap() == BoundingBox(10, 5, 50, 50)


def test_selection_box_rejects_empty_selection() -> None:
    result = resolve_selection_box([], index_for())

    assert result.kind == ErrorKind.INVALID_SELECTION


def test_selection_box_rejects_shapes_from_different_frames() -> None:
    frames = [make_frame(), Frame(id="frame-2", x=2000, width=500, height=500)]
    a = make_shape("a", 10, 10, 20, 20)
    b = make_shape("b", 2010, 10, 20, 20, frame_id="frame-2")

    result = resolve_selection_box([a, b], index_for(a, b, frames=frames))

    assert result.kind == ErrorKind.INVALID_SELECTION


def test_resolution_is_idempotent() -> None:
    shape = make_shape("a", 12.5, 7.25, 33, 14, rotation=17)
    frame = make_frame(x=3, y=4)

    assert resolve_bounding_box(shape, frame) == resolve_bounding_box(shape, frame)
