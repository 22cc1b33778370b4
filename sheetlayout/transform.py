from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

import numpy as np

from . import svg_utils

if TYPE_CHECKING:
    from .geometry import ViewBox


@dataclass(frozen=True)
class Transform:
    """2D affine transform with SVG-ordered coefficients.

    Maps ``(x, y)`` to ``(a*x + c*y + e, b*x + d*y + f)``. Chained calls append
    operations, so ``Tf.translate(1, 0).scale(2)`` first translates, then scales.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def from_matrix(cls, m: np.ndarray) -> "Transform":
        return cls(
            float(m[0, 0]), float(m[1, 0]),
            float(m[0, 1]), float(m[1, 1]),
            float(m[0, 2]), float(m[1, 2]),
        )

    @classmethod
    def from_svg(cls, transform: str) -> "Transform":
        return cls.from_matrix(svg_utils.parse_transform_matrix(transform))

    def as_matrix(self) -> np.ndarray:
        return np.array(
            [[self.a, self.c, self.e], [self.b, self.d, self.f], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )

    def then(self, other: "Transform") -> "Transform":
        """Returns the transform applying ``self`` first and ``other`` second."""
        return Transform.from_matrix(other.as_matrix() @ self.as_matrix())

    def _append(self, name: str, params: Tuple[float, ...]) -> "Transform":
        return Transform.from_matrix(svg_utils._op_matrix(name, params) @ self.as_matrix())

    def translate(self, dx: float, dy: float = 0.0) -> "Transform":
        return self._append("translate", (dx, dy))

    def translate_x(self, dx: float) -> "Transform":
        return self.translate(dx, 0.0)

    def translate_y(self, dy: float) -> "Transform":
        return self.translate(0.0, dy)

    def scale(self, kx: float, ky: float | None = None, center: Tuple[float, float] | None = None) -> "Transform":
        if ky is None:
            ky = kx
        if center is not None:
            cx, cy = center
            return self.translate(-cx, -cy).scale(kx, ky).translate(cx, cy)
        return self._append("scale", (kx, ky))

    def scale_x(self, kx: float, center_x: float = 0.0) -> "Transform":
        return self.scale(kx, 1.0, (center_x, 0.0))

    def scale_y(self, ky: float, center_y: float = 0.0) -> "Transform":
        return self.scale(1.0, ky, (0.0, center_y))

    def rotate(self, angle_deg: float, center: Tuple[float, float] | None = None) -> "Transform":
        if center is not None:
            return self._append("rotate", (angle_deg, center[0], center[1]))
        return self._append("rotate", (angle_deg,))

    def flip_x(self, center_x: float = 0.0) -> "Transform":
        return self.scale_x(-1.0, center_x)

    def flip_y(self, center_y: float = 0.0) -> "Transform":
        return self.scale_y(-1.0, center_y)

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def map_view_box(self, box: "ViewBox") -> "ViewBox":
        from .geometry import ViewBox

        pts = np.array(
            [
                self.apply(box.min_x, box.min_y),
                self.apply(box.max_x, box.min_y),
                self.apply(box.min_x, box.max_y),
                self.apply(box.max_x, box.max_y),
            ],
            dtype=np.float64,
        )
        x_min, y_min = pts.min(axis=0)
        x_max, y_max = pts.max(axis=0)
        return ViewBox.from_bounds(float(x_min), float(y_min), float(x_max), float(y_max))

    @property
    def is_identity(self) -> bool:
        return self == IDENTITY

    def to_shapely(self) -> List[float]:
        """Coefficients in the order expected by ``shapely.affinity.affine_transform``."""
        return [self.a, self.c, self.b, self.d, self.e, self.f]

    def to_svg(self) -> str:
        return svg_utils.format_matrix(self.as_matrix())

    def __str__(self) -> str:
        return self.to_svg() or "identity"


IDENTITY = Transform()

# Starting point for building transforms, e.g. ``Tf.rotate(20).translate_x(10)``.
Tf = IDENTITY
