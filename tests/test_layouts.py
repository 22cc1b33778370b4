import pytest

from sheetlayout import config
from sheetlayout.errors import ConfigurationError
from sheetlayout.geometry import ViewBox
from sheetlayout.layouts import PackGroup, column, layout, pack, repeat, row
from sheetlayout.pieces import EMPTY_BOX, rectangle


def _bounds(piece):
    return piece.get_bounding_box().as_bounds()


def _leaf_bounds(piece):
    out = {}
    for shape, tf in piece.leaves():
        out[shape.name] = tf.map_view_box(ViewBox.from_bounds(*shape.source.bounds)).as_bounds()
    return out


def test_layout_calls_function_per_index():
    g = layout([2, 3], lambda r, c: rectangle(1, 1).translate(c * 2, r * 2))
    assert len(g.parts) == 6
    assert g.get_bounding_box() == ViewBox(0, 0, 5, 3)


def test_layout_skips_missing_pieces():
    g = layout(3, lambda i: None if i == 1 else rectangle(1, 1).translate_x(i * 2))
    assert len(g.parts) == 2


def test_layout_with_zero_count_is_empty():
    assert layout([0, 5], lambda r, c: rectangle(1, 1)).get_bounding_box() == EMPTY_BOX


def test_repeat_grid():
    g = repeat(rectangle(2, 1), rows=2, columns=3, gap=1)
    assert len(g.parts) == 6
    assert g.get_bounding_box() == ViewBox(0, 0, 8, 3)


def test_repeat_places_each_copy_on_the_grid():
    g = repeat(rectangle(2, 1), rows=2, columns=3, gap=1)
    corners = sorted((p.get_bounding_box().min_x, p.get_bounding_box().min_y) for p in g.parts)
    assert corners == [(0, 0), (0, 2), (3, 0), (3, 2), (6, 0), (6, 2)]


def test_repeat_separate_gaps():
    g = repeat(rectangle(2, 1), rows=2, columns=2, gap=1, gap_y=0)
    assert g.get_bounding_box() == ViewBox(0, 0, 5, 2)


def test_repeat_uses_default_gap(monkeypatch):
    monkeypatch.setattr(config, "DEFAULT_GAP", 0.5)
    g = repeat(rectangle(2, 1), columns=2)
    assert g.get_bounding_box().width == pytest.approx(4.5)


def test_column_stacks_and_skips_none():
    g = column([rectangle(2, 1), rectangle(3, 2), None], gap=1)
    assert len(g.parts) == 2
    assert g.parts[1].get_bounding_box() == ViewBox(0, 2, 3, 2)
    assert g.get_bounding_box() == ViewBox(0, 0, 3, 4)


def test_row_keeps_cross_axis_position():
    g = row([rectangle(1, 1).translate(5, 5), rectangle(1, 1)], gap=0)
    assert g.parts[0].get_bounding_box() == ViewBox(0, 5, 1, 1)
    assert g.parts[1].get_bounding_box() == ViewBox(1, 0, 1, 1)


def test_row_flattens_nested_lists():
    g = row([rectangle(1, 1), [rectangle(1, 1), [rectangle(1, 1)]]], gap=1)
    assert g.get_bounding_box() == ViewBox(0, 0, 5, 1)


def test_pack_alternates_axes_and_centers():
    g = pack(
        [
            [rectangle(2, 2, name="A"), rectangle(2, 2, name="B")],
            [rectangle(4, 1, name="C"), rectangle(2, 1, name="D")],
        ],
        gap=1,
    )
    assert _bounds(g) == pytest.approx((0, -2.5, 7, 2.5))
    leaves = _leaf_bounds(g)
    assert leaves["A"] == pytest.approx((0, -2.5, 2, -0.5))
    assert leaves["B"] == pytest.approx((0, 0.5, 2, 2.5))
    assert leaves["C"] == pytest.approx((3, -1.5, 7, -0.5))
    assert leaves["D"] == pytest.approx((4, 0.5, 6, 1.5))


def test_pack_without_normalisation_is_a_row():
    g = pack([rectangle(1, 1).translate(0, 5), rectangle(1, 1)], gap=0, normalise=None)
    assert _bounds(g) == pytest.approx((0, 0, 2, 6))


def test_pack_group_overrides_axis():
    a, b = rectangle(1, 1), rectangle(1, 1)
    nested = pack([[a, b]], gap=0)
    grouped = pack([PackGroup([a, b], axis="x")], gap=0)
    assert nested.get_bounding_box().width == pytest.approx(1)
    assert nested.get_bounding_box().height == pytest.approx(2)
    assert grouped.get_bounding_box().width == pytest.approx(2)
    assert grouped.get_bounding_box().height == pytest.approx(1)


def test_pack_group_mapping_overrides_gap():
    g = pack([{"pieces": [rectangle(1, 1), rectangle(1, 1)], "gap": 3}], gap=0)
    assert g.get_bounding_box().height == pytest.approx(5)


def test_pack_top_level_group():
    g = pack(PackGroup([rectangle(1, 1), rectangle(1, 1)], gap=2))
    assert g.get_bounding_box().width == pytest.approx(4)


def test_pack_rejects_unknown_group_keys():
    with pytest.raises(ConfigurationError):
        pack([{"pieces": [rectangle(1, 1)], "spacing": 2}])


def test_pack_is_deterministic():
    def build():
        return pack([[rectangle(2, 3, name="a"), rectangle(1, 1, name="b")], rectangle(4, 4, name="c")])

    assert _leaf_bounds(build()) == _leaf_bounds(build())
