from .errors import ConfigurationError
from .geometry import Margin, ViewBox, view_box_from_partial
from .layouts import PackGroup, column, layout, pack, repeat, row, stack
from .normalise import get_normalise_transform
from .packing import BoxFitResult, fit_in_boxes
from .pieces import Gather, Piece, Shape, gather, polygon, rectangle
from .transform import Tf, Transform

__all__ = [
    "BoxFitResult",
    "ConfigurationError",
    "Gather",
    "Margin",
    "PackGroup",
    "Piece",
    "Shape",
    "Tf",
    "Transform",
    "ViewBox",
    "column",
    "fit_in_boxes",
    "gather",
    "get_normalise_transform",
    "layout",
    "pack",
    "polygon",
    "rectangle",
    "repeat",
    "row",
    "stack",
    "view_box_from_partial",
]
