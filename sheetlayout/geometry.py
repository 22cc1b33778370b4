from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Tuple

from . import config
from .errors import ConfigurationError
from .utils import almost_equal, as_number, join_numbers


@dataclass(frozen=True)
class ViewBox:
    """Axis-aligned rectangle: a bounding box, a normalisation target or a box to fill."""

    min_x: float
    min_y: float
    width: float
    height: float

    @classmethod
    def from_bounds(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> "ViewBox":
        return cls(min_x, min_y, max_x - min_x, max_y - min_y)

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.min_x + self.width / 2, self.min_y + self.height / 2)

    def as_bounds(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    def extend(self, margin: Any = None) -> "ViewBox":
        """Enlarges the box by the margin, or shrinks it for negative values."""
        m = margin_from_partial(margin)
        return ViewBox(
            self.min_x - m.left,
            self.min_y - m.top,
            self.width + m.left + m.right,
            self.height + m.top + m.bottom,
        )

    def __str__(self) -> str:
        return view_box_to_string(self)


@dataclass(frozen=True)
class Margin:
    """Four-sided margin. Positive values point outside of a rectangle."""

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0

    def multiply(self, multiplier: Any) -> "Margin":
        """Multiplies each side; sides missing from the multiplier stay as they are."""
        k = margin_from_partial(multiplier, default=1.0)
        return Margin(
            self.left * k.left,
            self.right * k.right,
            self.top * k.top,
            self.bottom * k.bottom,
        )


_MARGIN_KEYS = ("value", "x", "y", "left", "right", "top", "bottom")


def margin_from_partial(partial: Any = None, default: float = 0.0) -> Margin:
    if partial is None:
        partial = {}
    if isinstance(partial, Margin):
        return partial
    if isinstance(partial, (int, float)):
        partial = {"value": partial}
    if not isinstance(partial, Mapping):
        raise ConfigurationError(f"Bad margin: {partial!r}")
    unknown = set(partial) - set(_MARGIN_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown margin keys: {sorted(unknown)}")
    value = partial.get("value", default)
    x = partial.get("x", value)
    y = partial.get("y", value)
    return Margin(
        as_number(partial.get("left", x), "margin left"),
        as_number(partial.get("right", x), "margin right"),
        as_number(partial.get("top", y), "margin top"),
        as_number(partial.get("bottom", y), "margin bottom"),
    )


@dataclass(frozen=True)
class DimSpec:
    """A concrete range on one axis."""

    min: float
    len: float

    @property
    def max(self) -> float:
        return self.min + self.len


@dataclass(frozen=True)
class IncompleteDimSpec:
    """Range on one axis given by any subset of min, max, len and position."""

    pos: str | None = None
    min: float | None = None
    max: float | None = None
    len: float | None = None

    @property
    def is_definite(self) -> bool:
        return self.min is not None and self.max is not None and self.len is not None


_DIM_KEYS = ("pos", "min", "max", "len")


def dim_spec_from_mapping(raw: Any) -> IncompleteDimSpec:
    if raw is None:
        return IncompleteDimSpec()
    if isinstance(raw, IncompleteDimSpec):
        return raw
    if isinstance(raw, DimSpec):
        return IncompleteDimSpec(min=raw.min, max=raw.max, len=raw.len)
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Bad dimension spec: {raw!r}")
    unknown = set(raw) - set(_DIM_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown dimension spec keys: {sorted(unknown)}")
    pos = raw.get("pos")
    if pos not in (None, "default", "center"):
        raise ConfigurationError(f"Bad dimension position {pos!r}, expected 'default' or 'center'")
    return IncompleteDimSpec(
        pos=pos,
        min=None if raw.get("min") is None else as_number(raw["min"], "dimension min"),
        max=None if raw.get("max") is None else as_number(raw["max"], "dimension max"),
        len=None if raw.get("len") is None else as_number(raw["len"], "dimension len"),
    )


def _dim_spec_data(spec: IncompleteDimSpec) -> Tuple[IncompleteDimSpec, DimSpec | None, str | None]:
    pos = spec.pos

    def ret(lo: float, hi: float, length: float, forced: bool = False):
        if not almost_equal(length, hi - lo):
            return spec, None, "Incompatible dimensions"
        if pos == "default" and lo:
            return spec, None, "Incompatible dimensions"
        centered = almost_equal(hi, -lo)
        if pos == "center" and not centered:
            return spec, None, "Incompatible dimensions"
        inferred_pos = pos
        if inferred_pos is None:
            if not lo:
                inferred_pos = "default"
            elif centered:
                inferred_pos = "center"
        error = "Negative dimension length" if length < 0 else None
        inferred = spec if forced else IncompleteDimSpec(pos=inferred_pos, min=lo, max=hi, len=length)
        return inferred, DimSpec(lo, length), error

    lo, hi, length = spec.min, spec.max, spec.len
    if lo is not None:
        if hi is not None:
            return ret(lo, hi, hi - lo if length is None else length)
        if length is not None:
            return ret(lo, lo + length, length)
        if pos == "default":
            return ret(lo, 0.0, 0.0)
        if pos == "center":
            return ret(lo, -lo, -2 * lo)
        return ret(lo, 0.0, -lo, forced=True)
    if hi is not None:
        if length is not None:
            return ret(hi - length, hi, length)
        if pos == "default":
            return ret(0.0, hi, hi)
        if pos == "center":
            return ret(-hi, hi, 2 * hi)
        return ret(0.0, hi, hi, forced=True)
    if length is not None:
        if pos == "default":
            return ret(0.0, length, length)
        if pos == "center":
            return ret(-length / 2, length / 2, length)
        return ret(0.0, length, length, forced=True)
    if pos is None or pos == "default":
        return ret(0.0, 1.0, 1.0, forced=True)
    return ret(-0.5, 0.5, 1.0, forced=True)


def infer_dim_spec(spec: Any) -> IncompleteDimSpec:
    """Completes min, max and len where the given values determine them."""
    spec = dim_spec_from_mapping(spec)
    inferred, forced, error = _dim_spec_data(spec)
    if forced is None or (error is not None and inferred.is_definite):
        raise ConfigurationError(f"Error in dimension spec: {error} (input: {_spec_repr(spec)})")
    return inferred


def dim_spec_from_incomplete(spec: Any = None) -> DimSpec:
    """Resolves a concrete range, defaulting missing values to a unit range."""
    spec = dim_spec_from_mapping(spec)
    _, forced, error = _dim_spec_data(spec)
    if forced is None or error is not None:
        raise ConfigurationError(
            f"Error in partial dimension spec: {error or '(unknown)'} (input: {_spec_repr(spec)})"
        )
    return forced


def _spec_repr(spec: IncompleteDimSpec) -> str:
    return json.dumps({k: v for k, v in asdict(spec).items() if v is not None})


_FLAT_KEYS = (
    "centered", "side",
    "centered_x", "min_x", "max_x", "width",
    "centered_y", "min_y", "max_y", "height",
    "x", "y", "margin",
)


def _partial_to_separate(partial: Any) -> Tuple[IncompleteDimSpec, IncompleteDimSpec, Any]:
    if partial is None:
        partial = {}
    if isinstance(partial, ViewBox):
        return (
            IncompleteDimSpec(min=partial.min_x, len=partial.width),
            IncompleteDimSpec(min=partial.min_y, len=partial.height),
            None,
        )
    if not isinstance(partial, Mapping):
        raise ConfigurationError(f"Bad view box: {partial!r}")
    unknown = set(partial) - set(_FLAT_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown view box keys: {sorted(unknown)}")
    centered = partial.get("centered")
    side = partial.get("side")

    def axis_spec(name: str, lo_key: str, hi_key: str, len_key: str) -> IncompleteDimSpec:
        if partial.get(name) is not None:
            return dim_spec_from_mapping(partial[name])
        is_centered = partial.get(f"centered_{name}", centered)
        return dim_spec_from_mapping({
            "pos": "center" if is_centered else None,
            "min": partial.get(lo_key),
            "max": partial.get(hi_key),
            "len": partial.get(len_key, side),
        })

    x = axis_spec("x", "min_x", "max_x", "width")
    y = axis_spec("y", "min_y", "max_y", "height")
    return x, y, partial.get("margin")


def view_box_from_partial(partial: Any = None) -> ViewBox:
    if isinstance(partial, ViewBox):
        return partial
    x, y, margin = _partial_to_separate(partial)
    dx = dim_spec_from_incomplete(x)
    dy = dim_spec_from_incomplete(y)
    return ViewBox(dx.min, dy.min, dx.len, dy.len).extend(margin)


def get_margin(bounding_box: ViewBox, view_box: ViewBox) -> Margin:
    """Returns the actual margin between the bounding box and the view box."""
    return Margin(
        left=bounding_box.min_x - view_box.min_x,
        right=view_box.max_x - bounding_box.max_x,
        top=bounding_box.min_y - view_box.min_y,
        bottom=view_box.max_y - bounding_box.max_y,
    )


_MARGIN_SIDES = ("left", "right", "top", "bottom")


def _sides_fit(bounding_box: ViewBox, view_box: ViewBox, min_margin: Any = 0) -> List[Dict[str, Any]]:
    epsilon = max(view_box.width, view_box.height) * config.MARGIN_EPSILON_TO_SIZE_RATIO
    full_min = margin_from_partial(min_margin)
    actual = get_margin(bounding_box, view_box)
    out = []
    for side in _MARGIN_SIDES:
        lo = getattr(full_min, side)
        val = getattr(actual, side)
        out.append({"side": side, "min": lo, "actual": val, "fits": val >= lo - epsilon})
    return out


def fits_in_view_box(bounding_box: ViewBox, view_box: ViewBox, min_margin: Any = 0) -> bool:
    return all(s["fits"] for s in _sides_fit(bounding_box, view_box, min_margin))


def assert_fits_in_view_box(bounding_box: ViewBox, view_box: ViewBox, min_margin: Any = 0) -> None:
    sides = _sides_fit(bounding_box, view_box, min_margin)
    if all(s["fits"] for s in sides):
        return
    raise ConfigurationError(
        "The bounding box does not fit in the view box "
        f"(bounding box: {view_box_to_string(bounding_box)}, "
        f"view box: {view_box_to_string(view_box)}, "
        f"sides: {json.dumps(sides)})"
    )


def view_box_to_string(box: ViewBox) -> str:
    return join_numbers((box.min_x, box.min_y, box.width, box.height))
