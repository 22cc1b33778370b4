from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping

from .errors import ConfigurationError

FIT = "fit"
FILL = "fill"
STRETCH = "stretch"
FITTINGS = (FIT, FILL, STRETCH)


class Axis(Enum):
    X = "x"
    Y = "y"

    @property
    def other(self) -> "Axis":
        return Axis.Y if self is Axis.X else Axis.X


# Each keyword maps to -1 (lower end), 0 (center) or 1 (upper end) of the object.
ORIGIN_ALIGNMENTS: Dict[Axis, Dict[str, int]] = {
    Axis.X: {"right_of_origin": -1, "center": 0, "left_of_origin": 1},
    Axis.Y: {"below_origin": -1, "center": 0, "above_origin": 1},
}
BOX_ALIGNMENTS: Dict[Axis, Dict[str, int]] = {
    Axis.X: {"left": -1, "min": -1, "center": 0, "right": 1, "max": 1},
    Axis.Y: {"top": -1, "min": -1, "center": 0, "bottom": 1, "max": 1},
}

DEFAULT_ORIGIN_ALIGNMENT = {Axis.X: "right_of_origin", Axis.Y: "below_origin"}
DEFAULT_BOX_ALIGNMENT = {Axis.X: "left", Axis.Y: "top"}
CENTER_ALIGNMENT = {Axis.X: "center", Axis.Y: "center"}


def axis_from(value: Any) -> Axis:
    if isinstance(value, Axis):
        return value
    try:
        return Axis(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown axis {value!r}, expected 'x' or 'y'") from None


def fitting_from(value: Any) -> str:
    fitting = FIT if value is None else value
    if fitting not in FITTINGS:
        raise ConfigurationError(f"Unknown fitting {value!r}, expected one of {FITTINGS}")
    return fitting


def _check(table: Dict[Axis, Dict[str, int]], axis: Axis, name: Any) -> str:
    if name not in table[axis]:
        raise ConfigurationError(
            f"Unknown alignment {name!r} for the {axis.value} axis, expected one of {sorted(table[axis])}"
        )
    return name


def origin_alignment_number(axis: Axis, name: str) -> int:
    return ORIGIN_ALIGNMENTS[axis][_check(ORIGIN_ALIGNMENTS, axis, name)]


def box_alignment_number(axis: Axis, name: str) -> int:
    return BOX_ALIGNMENTS[axis][_check(BOX_ALIGNMENTS, axis, name)]


def _per_axis(alignment: Mapping, table: Dict[Axis, Dict[str, int]]) -> Dict[Axis, str | None]:
    unknown = set(alignment) - {"x", "y"}
    if unknown:
        raise ConfigurationError(f"Unknown alignment keys: {sorted(unknown)}")
    out: Dict[Axis, str | None] = {}
    for axis in Axis:
        name = alignment.get(axis.value)
        out[axis] = None if name is None else _check(table, axis, name)
    return out


def origin_alignment_from_partial(alignment: Any = "default") -> Dict[Axis, str | None]:
    if alignment is None or alignment == "default":
        return dict(DEFAULT_ORIGIN_ALIGNMENT)
    if alignment == "center":
        return dict(CENTER_ALIGNMENT)
    if isinstance(alignment, Mapping):
        return _per_axis(alignment, ORIGIN_ALIGNMENTS)
    raise ConfigurationError(f"Unknown origin alignment {alignment!r}")


def box_alignment_from_partial(alignment: Any = None) -> Dict[Axis, str | None]:
    """Box alignment for a target; omitted means centered, ``"default"`` means left/top."""
    if alignment is None or alignment == "center":
        return dict(CENTER_ALIGNMENT)
    if alignment == "default":
        return dict(DEFAULT_BOX_ALIGNMENT)
    if isinstance(alignment, Mapping):
        partial = _per_axis(alignment, BOX_ALIGNMENTS)
        return {axis: partial[axis] or "center" for axis in Axis}
    raise ConfigurationError(f"Unknown box alignment {alignment!r}")
