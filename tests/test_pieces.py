import pytest

from sheetlayout.geometry import ViewBox
from sheetlayout.pieces import EMPTY_BOX, Gather, gather, polygon, rectangle


def _bounds(piece):
    return piece.get_bounding_box().as_bounds()


def test_rectangle_bounding_box():
    assert rectangle(4, 2).get_bounding_box() == ViewBox(0, 0, 4, 2)
    assert rectangle(1, 1, min_x=2, min_y=3).get_bounding_box() == ViewBox(2, 3, 1, 1)


def test_operations_return_new_pieces():
    original = rectangle(4, 2)
    moved = original.translate(1, 2)
    assert moved.get_bounding_box() == ViewBox(1, 2, 4, 2)
    assert original.get_bounding_box() == ViewBox(0, 0, 4, 2)
    assert moved is not original


def test_scale_and_rotate():
    assert rectangle(4, 2).scale(2, 3).get_bounding_box() == ViewBox(0, 0, 8, 6)
    assert _bounds(rectangle(2, 1).rotate(90)) == pytest.approx((-1, 0, 0, 2))


def test_gather_bounding_box_is_union():
    g = gather(rectangle(1, 1), rectangle(2, 2, min_x=3, min_y=1))
    assert g.get_bounding_box() == ViewBox(0, 0, 5, 3)


def test_gather_flattens_and_skips_none():
    g = gather([rectangle(1, 1), None, [rectangle(1, 1, min_x=2)]])
    assert isinstance(g, Gather)
    assert len(g.parts) == 2


def test_empty_gather():
    assert gather().get_bounding_box() == EMPTY_BOX


def test_bounding_box_override_survives_transforms_and_gathering():
    p = rectangle(2, 2).with_bounding_box({"min_x": -1, "min_y": -1, "width": 4, "height": 4})
    assert p.get_bounding_box() == ViewBox(-1, -1, 4, 4)
    assert p.translate(1, 0).get_bounding_box() == ViewBox(0, -1, 4, 4)
    assert gather(p, rectangle(1, 1)).get_bounding_box() == ViewBox(-1, -1, 4, 4)


def test_extend_bounding_box():
    p = rectangle(2, 2).extend_bounding_box(1)
    assert p.get_bounding_box() == ViewBox(-1, -1, 4, 4)


def test_leaves_carry_the_full_transform():
    g = gather(rectangle(1, 1, name="a").translate(1, 0)).translate(0, 2)
    leaves = list(g.leaves())
    assert len(leaves) == 1
    shape, tf = leaves[0]
    assert shape.name == "a"
    assert tf.apply(0, 0) == pytest.approx((1, 2))


def test_center():
    p = rectangle(4, 2).translate(5, 5).center()
    assert _bounds(p) == pytest.approx((-2, -1, 2, 1))


def test_center_and_fit_to_1by1():
    p = rectangle(4, 2).translate(3, 3).center_and_fit_to_1by1()
    assert _bounds(p) == pytest.approx((-0.5, -0.25, 0.5, 0.25))


def test_pad():
    p = rectangle(10, 10).pad(1)
    assert _bounds(p) == pytest.approx((1, 1, 9, 9))


def test_polygon():
    p = polygon([(0, 0), (4, 0), (2, 3)])
    assert p.get_bounding_box() == ViewBox(0, 0, 4, 3)
