import pytest

from sheetlayout import config
from sheetlayout.errors import ConfigurationError
from sheetlayout.geometry import Margin, ViewBox
from sheetlayout.packing import fill_box, fit_in_boxes, get_row
from sheetlayout.pieces import rectangle

NO_MARGIN = Margin()


def _leaf_bounds(piece):
    return [
        tf.map_view_box(ViewBox.from_bounds(*shape.source.bounds)).as_bounds()
        for shape, tf in piece.leaves()
    ]


def _approx(boxes):
    return [pytest.approx(b) for b in boxes]


def _pieces(n, width=5, height=2):
    return [rectangle(width, height, name=f"p{i}") for i in range(n)]


def test_two_of_three_fit_in_a_row():
    result = fit_in_boxes(_pieces(3), [{"width": 12, "height": 10}], gap=1, margin=0)
    assert len(result.boxed_pieces) == 1
    assert result.remaining_pieces == []
    assert _leaf_bounds(result.boxed_pieces[0]) == _approx([
        (0, 0, 5, 2),
        (6, 0, 11, 2),
        (0, 3, 5, 5),
    ])


def test_third_piece_is_left_over_without_vertical_room():
    pieces = _pieces(3)
    result = fit_in_boxes(pieces, [{"width": 12, "height": 4}], gap=1, margin=0)
    assert len(result.boxed_pieces) == 1
    assert result.remaining_pieces == [pieces[2]]


def test_overflow_goes_to_the_next_box():
    boxes = [{"width": 12, "height": 4}, {"min_x": 20, "width": 12, "height": 4}]
    result = fit_in_boxes(_pieces(3), boxes, gap=1, margin=0)
    assert result.box_indices == [0, 1]
    assert _leaf_bounds(result.boxed_pieces[1]) == _approx([(20, 0, 25, 2)])
    assert result.remaining_pieces == []


def test_box_without_rows_is_recorded_as_none():
    boxes = [{"width": 2, "height": 2}, {"width": 12, "height": 12}]
    result = fit_in_boxes(_pieces(1), boxes, gap=1, margin=0)
    assert result.boxed_pieces[0] is None
    assert result.boxed_pieces[1] is not None


def test_pieces_are_never_reordered():
    pieces = [rectangle(4, 1, name="a"), rectangle(4, 1, name="b"), rectangle(8, 1, name="c"), rectangle(1, 1, name="d")]
    result = fit_in_boxes(pieces, [{"width": 9, "height": 9}], gap=1, margin=0)
    names = [shape.name for shape, _ in result.boxed_pieces[0].leaves()]
    assert names == ["a", "b", "c", "d"]
    assert _leaf_bounds(result.boxed_pieces[0])[2] == pytest.approx((0, 2, 8, 3))


def test_margin_defaults_to_gap():
    result = fit_in_boxes(_pieces(3), [{"width": 12, "height": 10}], gap=1)
    assert _leaf_bounds(result.boxed_pieces[0]) == _approx([
        (1, 1, 6, 3),
        (1, 4, 6, 6),
        (1, 7, 6, 9),
    ])


def test_repeat_last_box_until_pieces_run_out():
    result = fit_in_boxes(_pieces(10), [{"width": 12, "height": 4}], repeat_boxes="last", gap=1, margin=0)
    assert len(result.boxed_pieces) == 6
    assert all(p is not None for p in result.boxed_pieces[:5])
    assert result.boxed_pieces[5] is None
    assert result.box_indices == [0] * 6
    assert result.remaining_pieces == []


def test_final_empty_repeat_pass_is_recorded():
    result = fit_in_boxes(_pieces(4), [{"width": 12, "height": 4}], repeat_boxes="last", gap=1, margin=0)
    assert len(result.boxed_pieces) == 3
    assert result.boxed_pieces[0] is not None
    assert result.boxed_pieces[1] is not None
    assert result.boxed_pieces[2] is None
    assert result.remaining_pieces == []


def test_repeat_all_boxes():
    boxes = [{"width": 12, "height": 4}, {"width": 6, "height": 4}]
    result = fit_in_boxes(_pieces(6), boxes, repeat_boxes=True, gap=1, margin=0)
    # Each pass places 2 + 1 pieces; the third pass places nothing.
    assert result.box_indices == [0, 1, 0, 1, 0, 1]
    assert result.boxed_pieces[4:] == [None, None]
    assert result.remaining_pieces == []


def test_repeat_trailing_count():
    boxes = [{"width": 6, "height": 4}, {"width": 12, "height": 4}]
    result = fit_in_boxes(_pieces(5), boxes, repeat_boxes=1, gap=1, margin=0)
    assert result.box_indices == [0, 1, 1, 1]
    assert result.boxed_pieces[3] is None


def test_repeating_more_boxes_than_given_fails():
    with pytest.raises(ConfigurationError, match="Should repeat last 3 boxes, but only 2 specified."):
        fit_in_boxes(_pieces(1), [{"width": 1}, {"width": 1}], repeat_boxes=3)


def test_oversized_piece_with_repeat_terminates_as_leftover():
    big = rectangle(20, 20)
    result = fit_in_boxes([big], [{"width": 10, "height": 10}], repeat_boxes="last")
    assert result.boxed_pieces == [None]
    assert result.remaining_pieces == [big]


def test_oversized_piece_blocks_the_rest():
    pieces = [rectangle(2, 2), rectangle(20, 20), rectangle(2, 2)]
    result = fit_in_boxes(pieces, [{"width": 10, "height": 10}], repeat_boxes="last", gap=1, margin=0)
    assert len(result.boxed_pieces) == 2
    assert result.boxed_pieces[1] is None
    assert result.remaining_pieces == pieces[1:]


def test_get_row():
    pieces = _pieces(3)
    attempt = get_row(pieces, 1, 12, NO_MARGIN, 1)
    assert attempt.next_cursor == 3
    assert attempt.height == 2
    assert get_row(pieces, 0, 4, NO_MARGIN, 1) is None
    assert get_row(pieces, 3, 12, NO_MARGIN, 1) is None


def test_get_row_height_is_tallest_piece():
    pieces = [rectangle(1, 1), rectangle(1, 3), rectangle(1, 2)]
    assert get_row(pieces, 0, 10, NO_MARGIN, 0).height == 3


def test_fill_box_keeps_cursor_when_nothing_fits():
    placement, cursor = fill_box(_pieces(2), 0, ViewBox(0, 0, 12, 1), NO_MARGIN, 1)
    assert placement is None
    assert cursor == 0


def test_fill_box_places_in_box_coordinates():
    placement, cursor = fill_box(_pieces(1), 0, ViewBox(3, 4, 12, 12), Margin(1, 1, 2, 2), 1)
    assert cursor == 1
    assert _leaf_bounds(placement) == _approx([(4, 6, 9, 8)])


def test_fit_logs_steps_when_debugging(monkeypatch, capsys):
    monkeypatch.setattr(config, "LAYOUT_DEBUG", True)
    fit_in_boxes(_pieces(3), [{"width": 12, "height": 4}], gap=1, margin=0)
    out = capsys.readouterr().out
    assert "fit_in_boxes box=0 placed=2" in out
    assert "left over 1 pieces" in out


def test_fit_is_deterministic():
    def run():
        result = fit_in_boxes(_pieces(7, width=3), [{"width": 10, "height": 5}], repeat_boxes=True)
        return [_leaf_bounds(p) for p in result.boxed_pieces if p is not None]

    assert run() == run()
