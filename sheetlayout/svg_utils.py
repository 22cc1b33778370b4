from __future__ import annotations

import math
import re
from typing import List, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError
from .utils import join_numbers

_TRANSFORM_RE = re.compile(r"([A-Za-z]+)\s*\(([^)]*)\)")
_SUPPORTED = ("translate", "scale", "rotate", "matrix")


def _parse_transform(transform: str) -> List[Tuple[str, Tuple[float, ...]]]:
    ops: List[Tuple[str, Tuple[float, ...]]] = []
    if not transform or not transform.strip():
        return ops
    consumed = 0
    for m in _TRANSFORM_RE.finditer(transform):
        if transform[consumed:m.start()].strip(" ,\t\n"):
            raise ConfigurationError(f"Cannot parse transform: {transform!r}")
        consumed = m.end()
        name, args = m.group(1), m.group(2)
        if name not in _SUPPORTED:
            raise ConfigurationError(f"Unsupported transform function {name!r} in {transform!r}")
        try:
            nums = [float(v) for v in re.split(r"[ ,]+", args.strip()) if v]
        except ValueError:
            raise ConfigurationError(f"Bad arguments for {name}: {args!r}") from None
        if name == "translate":
            tx = nums[0] if len(nums) > 0 else 0.0
            ty = nums[1] if len(nums) > 1 else 0.0
            ops.append(("translate", (tx, ty)))
        elif name == "scale":
            sx = nums[0] if len(nums) > 0 else 1.0
            sy = nums[1] if len(nums) > 1 else sx
            ops.append(("scale", (sx, sy)))
        elif name == "rotate":
            if len(nums) not in (1, 3):
                raise ConfigurationError(f"rotate expects 1 or 3 arguments, got {args!r}")
            ops.append(("rotate", tuple(nums)))
        else:
            if len(nums) != 6:
                raise ConfigurationError(f"matrix expects 6 arguments, got {args!r}")
            ops.append(("matrix", tuple(nums)))
    if transform[consumed:].strip(" ,\t\n"):
        raise ConfigurationError(f"Cannot parse transform: {transform!r}")
    return ops


def _op_matrix(name: str, params: Sequence[float]) -> np.ndarray:
    if name == "translate":
        tx, ty = params
        return np.array([[1, 0, tx], [0, 1, ty], [0, 0, 1]], dtype=np.float64)
    if name == "scale":
        sx, sy = params
        return np.array([[sx, 0, 0], [0, sy, 0], [0, 0, 1]], dtype=np.float64)
    if name == "rotate":
        ang = math.radians(params[0])
        c, s = math.cos(ang), math.sin(ang)
        rot = np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]], dtype=np.float64)
        if len(params) == 3:
            cx, cy = params[1], params[2]
            return _op_matrix("translate", (cx, cy)) @ rot @ _op_matrix("translate", (-cx, -cy))
        return rot
    a, b, c, d, e, f = params
    return np.array([[a, c, e], [b, d, f], [0, 0, 1]], dtype=np.float64)


def _ops_to_matrix(ops: List[Tuple[str, Tuple[float, ...]]]) -> np.ndarray:
    # Transform lists apply right to left, so each op multiplies on the right.
    m = np.eye(3, dtype=np.float64)
    for name, params in ops:
        m = m @ _op_matrix(name, params)
    return m


def parse_transform_matrix(transform: str) -> np.ndarray:
    return _ops_to_matrix(_parse_transform(transform))


def format_matrix(m: np.ndarray) -> str:
    if np.allclose(m, np.eye(3), rtol=0.0, atol=1e-12):
        return ""
    coeffs = (m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])
    return f"matrix({join_numbers(coeffs)})"
