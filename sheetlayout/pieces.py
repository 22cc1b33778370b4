"""Immutable pieces: shapely geometry plus an accumulated affine transform.

A ``Shape`` wraps one shapely geometry; a ``Gather`` groups other pieces and
reports the union of their bounding boxes. Every operation returns a new
piece, nothing is modified in place.
"""
from __future__ import annotations

from typing import Any, Iterator, List, Sequence, Tuple

from shapely.affinity import affine_transform
from shapely.geometry import GeometryCollection, Polygon, box
from shapely.geometry.base import BaseGeometry

from .geometry import ViewBox, margin_from_partial, view_box_from_partial
from .transform import IDENTITY, Transform
from .utils import flatten_filter

EMPTY_BOX = ViewBox(0.0, 0.0, 0.0, 0.0)


class Piece:
    """Base of all pieces. Subclasses provide ``_local_geometry`` and ``_with_tf``."""

    __slots__ = ("tf", "name", "_box_override", "_bbox_cache")

    def __init__(self, tf: Transform = IDENTITY, name: str | None = None, box_override: ViewBox | None = None):
        self.tf = tf
        self.name = name
        self._box_override = box_override
        self._bbox_cache: ViewBox | None = None

    def _local_geometry(self, for_bbox: bool = False) -> BaseGeometry:
        raise NotImplementedError

    def _with_tf(self, tf: Transform) -> "Piece":
        raise NotImplementedError

    def _transformed(self, for_bbox: bool) -> BaseGeometry:
        if for_bbox and self._box_override is not None:
            geom = box(*self._box_override.as_bounds())
        else:
            geom = self._local_geometry(for_bbox)
        if self.tf.is_identity or geom.is_empty:
            return geom
        return affine_transform(geom, self.tf.to_shapely())

    @property
    def geometry(self) -> BaseGeometry:
        return self._transformed(False)

    def get_bounding_box(self, margin: Any = None) -> ViewBox:
        if self._bbox_cache is None:
            geom = self._transformed(True)
            self._bbox_cache = EMPTY_BOX if geom.is_empty else ViewBox.from_bounds(*geom.bounds)
        if margin is None:
            return self._bbox_cache
        return self._bbox_cache.extend(margin)

    def leaves(self, outer: Transform = IDENTITY) -> Iterator[Tuple["Shape", Transform]]:
        raise NotImplementedError

    # -- transforms --

    def transform(self, tf: Transform) -> "Piece":
        return self._with_tf(self.tf.then(tf))

    def translate(self, dx: float, dy: float = 0.0) -> "Piece":
        return self._with_tf(self.tf.translate(dx, dy))

    def translate_x(self, dx: float) -> "Piece":
        return self.translate(dx, 0.0)

    def translate_y(self, dy: float) -> "Piece":
        return self.translate(0.0, dy)

    def scale(self, kx: float, ky: float | None = None, center: Tuple[float, float] | None = None) -> "Piece":
        return self._with_tf(self.tf.scale(kx, ky, center))

    def scale_x(self, kx: float, center_x: float = 0.0) -> "Piece":
        return self._with_tf(self.tf.scale_x(kx, center_x))

    def scale_y(self, ky: float, center_y: float = 0.0) -> "Piece":
        return self._with_tf(self.tf.scale_y(ky, center_y))

    def rotate(self, angle_deg: float, center: Tuple[float, float] | None = None) -> "Piece":
        return self._with_tf(self.tf.rotate(angle_deg, center))

    def flip_x(self, center_x: float = 0.0) -> "Piece":
        return self._with_tf(self.tf.flip_x(center_x))

    def flip_y(self, center_y: float = 0.0) -> "Piece":
        return self._with_tf(self.tf.flip_y(center_y))

    # -- normalisation --

    def normalise(self, spec: Any, margin: Any = None) -> "Piece":
        """Scales and/or translates the piece to match the normalisation spec."""
        from .normalise import get_normalise_transform

        return self.transform(get_normalise_transform(self.get_bounding_box(margin), spec))

    def center(self) -> "Piece":
        """Centers the piece around the origin."""
        return self.normalise("center")

    def center_in(self, target: Any, margin: Any = None) -> "Piece":
        return self.normalise({"target": target, "align": "center"}, margin=margin)

    def center_and_fit_to_1by1(self, margin: Any = None) -> "Piece":
        """Centers the piece around the origin, scaled so the larger side has length 1."""
        return self.center_in({"centered": True}, margin=margin)

    def pad(self, padding: Any, align: Any = None) -> "Piece":
        inner = self.get_bounding_box().extend(margin_from_partial(padding).multiply(-1))
        spec = {"target": inner}
        if align is not None:
            spec["align"] = align
        return self.normalise(spec)

    # -- bounding box overrides --

    def with_bounding_box(self, partial: Any) -> "Piece":
        """Returns a piece reporting the given box (in this piece's current coordinates)."""
        return Gather((self,), box_override=view_box_from_partial(partial))

    def extend_bounding_box(self, margin: Any) -> "Piece":
        return self.with_bounding_box(self.get_bounding_box(margin))

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{type(self).__name__}{label} bbox=({self.get_bounding_box()}) tf={self.tf}>"


class Shape(Piece):
    """Leaf piece wrapping one shapely geometry."""

    __slots__ = ("source",)

    def __init__(self, source: BaseGeometry, name: str | None = None, tf: Transform = IDENTITY,
                 box_override: ViewBox | None = None):
        super().__init__(tf, name, box_override)
        self.source = source

    def _local_geometry(self, for_bbox: bool = False) -> BaseGeometry:
        return self.source

    def _with_tf(self, tf: Transform) -> "Shape":
        return Shape(self.source, self.name, tf, self._box_override)

    def leaves(self, outer: Transform = IDENTITY) -> Iterator[Tuple["Shape", Transform]]:
        yield self, self.tf.then(outer)


class Gather(Piece):
    """Composite piece; its bounding box is the union of its members' boxes."""

    __slots__ = ("parts",)

    def __init__(self, parts: Sequence[Piece], name: str | None = None, tf: Transform = IDENTITY,
                 box_override: ViewBox | None = None):
        super().__init__(tf, name, box_override)
        self.parts: Tuple[Piece, ...] = tuple(parts)

    def _local_geometry(self, for_bbox: bool = False) -> BaseGeometry:
        flat: List[BaseGeometry] = []
        for part in self.parts:
            geom = part._transformed(for_bbox)
            if geom.is_empty:
                continue
            if geom.geom_type == "GeometryCollection":
                flat.extend(geom.geoms)
            else:
                flat.append(geom)
        return GeometryCollection(flat)

    def _with_tf(self, tf: Transform) -> "Gather":
        return Gather(self.parts, self.name, tf, self._box_override)

    def leaves(self, outer: Transform = IDENTITY) -> Iterator[Tuple[Shape, Transform]]:
        inner = self.tf.then(outer)
        for part in self.parts:
            yield from part.leaves(inner)


def as_piece(item: Any) -> Piece:
    if isinstance(item, Piece):
        return item
    if isinstance(item, BaseGeometry):
        return Shape(item)
    raise TypeError(f"Expected a Piece or a shapely geometry, got {type(item).__name__}")


def gather(*parts: Any, name: str | None = None) -> Gather:
    """Gathers pieces (nested lists allowed, ``None`` skipped) into one composite piece."""
    items: List[Piece] = [as_piece(p) for p in flatten_filter(list(parts))]
    return Gather(items, name=name)


def rectangle(width: float, height: float, min_x: float = 0.0, min_y: float = 0.0,
              name: str | None = None) -> Shape:
    return Shape(box(min_x, min_y, min_x + width, min_y + height), name=name)


def polygon(points: Sequence[Sequence[float]], name: str | None = None) -> Shape:
    return Shape(Polygon([(float(x), float(y)) for x, y in points]), name=name)
