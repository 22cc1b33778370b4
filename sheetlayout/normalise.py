"""Normalisation: the transform that aligns and scales a bounding box against a target.

A spec is built once from its user-facing form (a keyword string or a mapping)
into one of three variants:

- ``OriginSpec``: per-axis keywords placing the object relative to the origin
  (``"default"``, ``"center"``).
- ``BoxTargetSpec``: a target rectangle with a box alignment and a fitting policy.
- ``AxesSpec``: independent per-axis specs (``Unchanged``, ``NamedAlign``,
  ``BoxRange``, ``Hold``) with a fitting policy.

Each axis then resolves to an ``Anchor``: the object point ``source`` that is
moved to ``target``, with an optional scale proposal. Unless the fitting is
``stretch``, negotiable anchors share one scale: the smallest proposal for
``fit``, the largest for ``fill``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, List, Mapping, Tuple, Union

from .alignment import (
    FIT,
    STRETCH,
    Axis,
    box_alignment_from_partial,
    box_alignment_number,
    fitting_from,
    origin_alignment_from_partial,
    origin_alignment_number,
)
from .errors import ConfigurationError
from .geometry import ViewBox, infer_dim_spec, view_box_from_partial
from .transform import Tf, Transform


@dataclass(frozen=True)
class Unchanged:
    pass


UNCHANGED = Unchanged()


@dataclass(frozen=True)
class NamedAlign:
    """Origin-relative keyword, e.g. ``center`` or ``right_of_origin``."""

    name: str


@dataclass(frozen=True)
class BoxRange:
    """Target range on one axis. Missing values are inferred where possible."""

    min: float | None = None
    max: float | None = None
    len: float | None = None
    pos: str | None = None
    align: str | None = None


@dataclass(frozen=True)
class Hold:
    """Keeps the ``hold`` point of the object in place while scaling around it."""

    hold: str
    scale: float | None = None
    len: float | None = None


AxisSpec = Union[Unchanged, NamedAlign, BoxRange, Hold]


@dataclass(frozen=True)
class OriginSpec:
    x: str | None = None
    y: str | None = None


@dataclass(frozen=True)
class BoxTargetSpec:
    target: ViewBox
    align_x: str = "center"
    align_y: str = "center"
    fitting: str = FIT


@dataclass(frozen=True)
class AxesSpec:
    x: AxisSpec = UNCHANGED
    y: AxisSpec = UNCHANGED
    fitting: str = FIT


NormaliseSpec = Union[OriginSpec, BoxTargetSpec, AxesSpec]


@dataclass(frozen=True)
class Anchor:
    source: float
    target: float
    scale: float | None
    negotiable: bool


_BOX_TARGET_KEYS = ("target", "align", "fitting")
_AXES_KEYS = ("x", "y", "fitting")
_RANGE_KEYS = ("min", "max", "len", "pos", "align")
_HOLD_KEYS = ("hold", "scale", "len")


def _check_keys(raw: Mapping, allowed: Tuple[str, ...], what: str) -> None:
    unknown = set(raw) - set(allowed)
    if unknown:
        raise ConfigurationError(f"Unknown keys for {what}: {sorted(unknown)}")


def _num(value: Any) -> float | None:
    return None if value is None else float(value)


def axis_spec(axis: Axis, raw: Any) -> AxisSpec:
    """Builds the spec for one axis from a keyword, a mapping or a ready spec."""
    if raw is None or raw == "unchanged" or isinstance(raw, Unchanged):
        return UNCHANGED
    if isinstance(raw, (NamedAlign, BoxRange, Hold)):
        return raw
    if isinstance(raw, str):
        origin_alignment_number(axis, raw)
        return NamedAlign(raw)
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Bad spec for the {axis.value} axis: {raw!r}")
    if "hold" in raw:
        _check_keys(raw, _HOLD_KEYS, f"the {axis.value} axis hold spec")
        box_alignment_number(axis, raw["hold"])
        if raw.get("scale") is not None and raw.get("len") is not None:
            raise ConfigurationError(f"Hold spec for the {axis.value} axis has both scale and len")
        return Hold(raw["hold"], scale=_num(raw.get("scale")), len=_num(raw.get("len")))
    _check_keys(raw, _RANGE_KEYS, f"the {axis.value} axis range spec")
    align = raw.get("align")
    if align is not None:
        box_alignment_number(axis, align)
    return BoxRange(
        min=_num(raw.get("min")),
        max=_num(raw.get("max")),
        len=_num(raw.get("len")),
        pos=raw.get("pos"),
        align=align,
    )


def normalise_spec(raw: Any) -> NormaliseSpec:
    """Builds a normalisation spec variant from its user-facing form."""
    if isinstance(raw, (OriginSpec, BoxTargetSpec, AxesSpec)):
        return raw
    if isinstance(raw, str):
        align = origin_alignment_from_partial(raw)
        return OriginSpec(align[Axis.X], align[Axis.Y])
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Bad normalisation spec: {raw!r}")
    if "target" in raw:
        if "x" in raw or "y" in raw:
            raise ConfigurationError("A target spec cannot be combined with per-axis x/y specs")
        _check_keys(raw, _BOX_TARGET_KEYS, "a target spec")
        align = box_alignment_from_partial(raw.get("align"))
        return BoxTargetSpec(
            target=view_box_from_partial(raw["target"]),
            align_x=align[Axis.X],
            align_y=align[Axis.Y],
            fitting=fitting_from(raw.get("fitting")),
        )
    if "align" in raw:
        raise ConfigurationError("Unexpected align parameter for per-axis {x, y} specs")
    _check_keys(raw, _AXES_KEYS, "per-axis specs")
    return AxesSpec(
        x=axis_spec(Axis.X, raw.get("x")),
        y=axis_spec(Axis.Y, raw.get("y")),
        fitting=fitting_from(raw.get("fitting")),
    )


def _classify(spec: NormaliseSpec) -> Tuple[AxisSpec, AxisSpec, str]:
    if isinstance(spec, OriginSpec):
        x = UNCHANGED if spec.x is None else NamedAlign(spec.x)
        y = UNCHANGED if spec.y is None else NamedAlign(spec.y)
        return x, y, FIT
    if isinstance(spec, BoxTargetSpec):
        t = spec.target
        x = BoxRange(min=t.min_x, max=t.max_x, len=t.width, align=spec.align_x)
        y = BoxRange(min=t.min_y, max=t.max_y, len=t.height, align=spec.align_y)
        return x, y, spec.fitting
    if isinstance(spec, AxesSpec):
        return spec.x, spec.y, spec.fitting
    raise TypeError(f"Not a normalisation spec: {spec!r}")


def _point_at(lo: float, length: float, k: int) -> float:
    return lo + length * (k + 1) / 2


def get_anchor(axis: Axis, lo: float, length: float, spec: AxisSpec) -> Anchor:
    """Resolves one axis of the object's bounding box (``lo``, ``length``) against its spec."""
    if not length:
        return Anchor(0.0, 0.0, None, negotiable=False)
    if isinstance(spec, Unchanged):
        return Anchor(0.0, 0.0, 1.0, negotiable=False)
    if isinstance(spec, NamedAlign):
        k = origin_alignment_number(axis, spec.name)
        return Anchor(_point_at(lo, length, k), 0.0, None, negotiable=True)
    if isinstance(spec, Hold):
        hold_pos = _point_at(lo, length, box_alignment_number(axis, spec.hold))
        if spec.scale is not None:
            scale = spec.scale
        elif spec.len is not None:
            scale = spec.len / length
        else:
            scale = None
        return Anchor(hold_pos, hold_pos, scale, negotiable=True)
    if isinstance(spec, BoxRange):
        return _box_range_anchor(axis, lo, length, spec)
    raise TypeError(f"Not an axis spec: {spec!r}")


def _box_range_anchor(axis: Axis, lo: float, length: float, spec: BoxRange) -> Anchor:
    inferred = infer_dim_spec({"pos": spec.pos, "min": spec.min, "max": spec.max, "len": spec.len})
    t_min, t_max, t_len = inferred.min, inferred.max, inferred.len
    align = spec.align or ("center" if spec.pos == "center" else None)
    if align is not None:
        k = box_alignment_number(axis, align)
    elif t_min is not None and t_max is not None:
        k = 0
    elif t_min is not None:
        k = -1
    elif t_max is not None:
        k = 1
    else:
        raise ConfigurationError(f"Error for the {axis.value} axis: expected a known min or max in {spec}")
    scale = None if t_len is None else t_len / length
    if k == -1:
        if t_min is None:
            raise ConfigurationError(f"Error for the {axis.value} axis: expected known min for align {align}")
        return Anchor(lo, t_min, scale, negotiable=True)
    if k == 1:
        if t_max is None:
            raise ConfigurationError(f"Error for the {axis.value} axis: expected known max for align {align}")
        return Anchor(lo + length, t_max, scale, negotiable=True)
    if t_min is None or t_max is None:
        raise ConfigurationError(
            f"Error for the {axis.value} axis: expected a definite range for align {align or 'center'}"
        )
    return Anchor(lo + length / 2, (t_min + t_max) / 2, scale, negotiable=True)


def negotiate_scales(anchors: List[Anchor], fitting: str) -> List[Anchor]:
    """Gives all negotiable anchors the shared scale (min for fit, max for fill)."""
    if fitting == STRETCH:
        return anchors
    proposals = [a.scale for a in anchors if a.negotiable and a.scale is not None]
    if not proposals:
        return anchors
    shared = min(proposals) if fitting == FIT else max(proposals)
    return [replace(a, scale=shared) if a.negotiable else a for a in anchors]


def get_normalise_transform(bounding_box: ViewBox, spec: Any) -> Transform:
    """Returns the transform normalising an object with the given bounding box."""
    x_spec, y_spec, fitting = _classify(normalise_spec(spec))
    anchors = negotiate_scales(
        [
            get_anchor(Axis.X, bounding_box.min_x, bounding_box.width, x_spec),
            get_anchor(Axis.Y, bounding_box.min_y, bounding_box.height, y_spec),
        ],
        fitting,
    )
    ax, ay = anchors
    scale_x = 1.0 if ax.scale is None else ax.scale
    scale_y = 1.0 if ay.scale is None else ay.scale
    tf = Tf
    if ax.source or ay.source:
        tf = tf.translate(-ax.source, -ay.source)
    if scale_x != 1 or scale_y != 1:
        tf = tf.scale(scale_x, scale_y)
    if ax.target or ay.target:
        tf = tf.translate(ax.target, ay.target)
    return tf
