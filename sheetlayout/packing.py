"""Greedy row-major fitting of an ordered piece list into fixed boxes.

Pieces are never reordered or rotated. Every step takes the cursor (index of
the first unplaced piece) and returns the cursor for the next step.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from . import config
from .errors import ConfigurationError
from .geometry import Margin, ViewBox, margin_from_partial, view_box_from_partial
from .pieces import Piece, as_piece, gather
from .utils import flatten


@dataclass(frozen=True)
class RowAttempt:
    row: Piece
    height: float
    next_cursor: int


@dataclass
class BoxFitResult:
    """One placement (or ``None``) per box instance, plus the pieces that did not fit.

    ``box_indices[i]`` is the index into the given boxes of the box that
    ``boxed_pieces[i]`` was laid out in.
    """

    boxed_pieces: List[Optional[Piece]]
    remaining_pieces: List[Piece]
    box_indices: List[int] = field(default_factory=list)


def _gap(gap: float | None) -> float:
    return config.DEFAULT_GAP if gap is None else float(gap)


def get_row(pieces: Sequence[Piece], cursor: int, width: float, margin: Margin, gap: float) -> RowAttempt | None:
    """Lays out as many pieces as fit in one row of the given width, starting at ``cursor``."""
    row: List[Piece] = []
    x = margin.left
    height = 0.0
    index = cursor
    while index < len(pieces):
        piece = pieces[index]
        box = piece.get_bounding_box()
        if x + box.width > width - margin.right:
            break
        row.append(piece.normalise(config.FIT_ROW_NORMALISE).translate_x(x))
        x += box.width + gap
        height = max(height, box.height)
        index += 1
    if not row:
        return None
    return RowAttempt(gather(row), height, index)


def fill_box(pieces: Sequence[Piece], cursor: int, rect: ViewBox, margin: Margin,
             gap: float) -> Tuple[Piece | None, int]:
    """Stacks rows into ``rect`` until the next row would not fit; returns the placement and new cursor."""
    rows: List[Piece] = []
    y = margin.top
    while True:
        attempt = get_row(pieces, cursor, rect.width, margin, gap)
        if attempt is None:
            break
        if y + attempt.height > rect.height - margin.bottom:
            break
        cursor = attempt.next_cursor
        rows.append(attempt.row.translate_y(y))
        y += attempt.height + gap
    if not rows:
        return None, cursor
    return gather(rows).translate(rect.min_x, rect.min_y), cursor


def _repeat_count(repeat_boxes: Any, n: int) -> int:
    if repeat_boxes is None or repeat_boxes is False:
        return 0
    if repeat_boxes is True:
        count = n
    elif repeat_boxes == "last":
        count = 1
    elif isinstance(repeat_boxes, int):
        count = repeat_boxes
    else:
        raise ConfigurationError(f"Bad repeat_boxes value: {repeat_boxes!r}")
    if count < 0:
        raise ConfigurationError(f"Bad repeat_boxes value: {repeat_boxes!r}")
    if count > n:
        raise ConfigurationError(f"Should repeat last {count} boxes, but only {n} specified.")
    return count


def fit_in_boxes(pieces: Sequence[Any], boxes: Any, repeat_boxes: Any = False,
                 gap: float | None = None, margin: Any = None) -> BoxFitResult:
    """Fits the pieces, in order, into rows inside the boxes.

    With ``repeat_boxes`` (``True`` for all boxes, ``"last"`` or a trailing
    count) the trailing boxes are laid out again and again until a whole pass
    over them places nothing. Every box of every pass is in the result, the
    final empty pass included, as ``None`` where no row fitted.
    """
    pieces = [as_piece(p) for p in pieces]
    rects = [view_box_from_partial(b) for b in flatten(boxes)]
    n_repeat = _repeat_count(repeat_boxes, len(rects))
    g = _gap(gap)
    full_margin = margin_from_partial(g if margin is None else margin)

    boxed: List[Optional[Piece]] = []
    indices: List[int] = []
    cursor = 0
    pass_indices = list(range(len(rects)))
    while True:
        start = cursor
        for i in pass_indices:
            before = cursor
            placement, cursor = fill_box(pieces, cursor, rects[i], full_margin, g)
            boxed.append(placement)
            indices.append(i)
            config.log_step(f"fit_in_boxes box={i} placed={cursor - before} cursor={cursor}/{len(pieces)}")
        if cursor == start or not n_repeat:
            break
        pass_indices = list(range(len(rects) - n_repeat, len(rects)))

    remaining = pieces[cursor:]
    if remaining:
        config.log_step(f"fit_in_boxes left over {len(remaining)} pieces")
    return BoxFitResult(boxed, remaining, indices)
