from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Sequence

from . import config
from .alignment import Axis, axis_from
from .counts import MultiIndex
from .errors import ConfigurationError
from .pieces import Gather, Piece, as_piece, gather
from .utils import flatten_filter

INHERIT = object()


def _gap(gap: float | None) -> float:
    return config.DEFAULT_GAP if gap is None else float(gap)


def layout(count: Any, piece_func: Callable[..., Piece | None]) -> Gather:
    """Calls ``piece_func`` with every multi-index of ``count`` and gathers the results.

    ``None`` results are skipped. The pieces are not moved: ``piece_func``
    positions each piece itself.
    """
    parts: List[Piece] = []
    for index in MultiIndex(count):
        piece = piece_func(*index)
        if piece is not None:
            parts.append(piece)
    return gather(parts)


def repeat(piece: Piece, rows: Any = 1, columns: Any = 1, gap: float | None = None,
           gap_x: float | None = None, gap_y: float | None = None) -> Gather:
    """Grid of copies of ``piece``, spaced by its bounding box plus the gaps."""
    piece = as_piece(piece)
    g = _gap(gap)
    gx = g if gap_x is None else float(gap_x)
    gy = g if gap_y is None else float(gap_y)
    box = piece.get_bounding_box()
    parts = [
        piece.translate(c * (box.width + gx), r * (box.height + gy))
        for r, c in MultiIndex([rows, columns])
    ]
    return gather(parts)


def stack(pieces: Any, gap: float | None = None, axis: Any = Axis.Y) -> Gather:
    """Places the pieces end to end along ``axis``; the other axis is left alone."""
    axis = axis_from(axis)
    g = _gap(gap)
    cursor = 0.0
    parts: List[Piece] = []
    for piece in flatten_filter(pieces):
        piece = as_piece(piece)
        box = piece.get_bounding_box()
        if axis is Axis.X:
            parts.append(piece.translate_x(cursor - box.min_x))
            cursor += box.width + g
        else:
            parts.append(piece.translate_y(cursor - box.min_y))
            cursor += box.height + g
    return gather(parts)


def column(pieces: Any, gap: float | None = None) -> Gather:
    return stack(pieces, gap=gap, axis=Axis.Y)


def row(pieces: Any, gap: float | None = None) -> Gather:
    return stack(pieces, gap=gap, axis=Axis.X)


@dataclass(frozen=True)
class PackGroup:
    """A nesting level of ``pack`` with its own settings.

    ``axis=None`` means the opposite of the enclosing level's axis; ``gap=None``
    and ``normalise=INHERIT`` take the enclosing level's values, and
    ``normalise=None`` turns normalisation off for this level's items.
    """

    pieces: Sequence[Any]
    axis: Any = None
    gap: float | None = None
    normalise: Any = INHERIT


_GROUP_KEYS = ("pieces", "axis", "gap", "normalise")


def _as_group(raw: Mapping) -> PackGroup:
    unknown = set(raw) - set(_GROUP_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown pack group keys: {sorted(unknown)}")
    return PackGroup(
        pieces=raw["pieces"],
        axis=raw.get("axis"),
        gap=raw.get("gap"),
        normalise=raw.get("normalise", INHERIT),
    )


def _normalised(piece: Piece, spec: Any) -> Piece:
    if spec is None or spec is False:
        return piece
    return piece.normalise(spec)


def _pack_group(group: PackGroup, parent_axis: Axis, gap: float, normalise: Any, depth: int) -> Gather:
    axis = parent_axis.other if group.axis is None else axis_from(group.axis)
    level_gap = gap if group.gap is None else float(group.gap)
    level_normalise = normalise if group.normalise is INHERIT else group.normalise
    return _pack_level(group.pieces, axis, level_gap, level_normalise, depth)


def _pack_level(items: Any, axis: Axis, gap: float, normalise: Any, depth: int) -> Gather:
    if not isinstance(items, (list, tuple)):
        items = [items]
    placed: List[Piece] = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, Mapping):
            item = _as_group(item)
        if isinstance(item, PackGroup):
            sub = _pack_group(item, axis, gap, normalise, depth + 1)
        elif isinstance(item, (list, tuple)):
            sub = _pack_level(item, axis.other, gap, normalise, depth + 1)
        else:
            sub = as_piece(item)
        placed.append(_normalised(sub, normalise))
    config.log_step(f"pack depth={depth} axis={axis.value} items={len(placed)}")
    return stack(placed, gap=gap, axis=axis)


def pack(pieces: Any, gap: float | None = None, axis: Any = None, normalise: Any = INHERIT) -> Gather:
    """Packs a nested structure of pieces, flipping the axis at every nesting level.

    The top level runs along ``axis`` (x by default), so ``pack([[a, b], [c, d]])``
    gives two columns side by side. Every item is normalised before being placed
    (centered by default), nested lists and ``PackGroup`` items after being packed.
    """
    top_axis = axis_from(config.PACK_AXIS if axis is None else axis)
    top_normalise = config.PACK_NORMALISE if normalise is INHERIT else normalise
    if isinstance(pieces, Mapping):
        pieces = _as_group(pieces)
    if isinstance(pieces, PackGroup):
        # The group sits at the top level itself, so its axis defaults to top_axis.
        group_axis = top_axis if pieces.axis is None else pieces.axis
        return _pack_group(
            PackGroup(pieces.pieces, group_axis, pieces.gap, pieces.normalise),
            top_axis, _gap(gap), top_normalise, 0,
        )
    return _pack_level(pieces, top_axis, _gap(gap), top_normalise, 0)
