from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from . import config
from .errors import ConfigurationError
from .geometry import view_box_from_partial, view_box_to_string
from .packing import BoxFitResult, fit_in_boxes
from .pieces import Piece, polygon, rectangle
from .transform import Transform
from .utils import as_number, flatten


def _load_piece(raw: Any, index: int) -> List[Piece]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Piece #{index} is not an object: {raw!r}")
    name = str(raw.get("name", f"piece-{index}"))
    if "points" in raw:
        points = raw["points"]
        if not isinstance(points, list) or len(points) < 3:
            raise ConfigurationError(f"Piece {name!r} needs at least 3 points")
        coords = []
        for point in points:
            if not isinstance(point, (list, tuple)) or len(point) != 2:
                raise ConfigurationError(f"Piece {name!r} has a bad point: {point!r}")
            x, y = point
            coords.append((as_number(x, f"piece {name!r} point"), as_number(y, f"piece {name!r} point")))
        piece: Piece = polygon(coords, name=name)
    elif "width" in raw and "height" in raw:
        piece = rectangle(
            as_number(raw["width"], f"piece {name!r} width"),
            as_number(raw["height"], f"piece {name!r} height"),
            name=name,
        )
    else:
        raise ConfigurationError(f"Piece {name!r} needs either width and height or points")
    if raw.get("transform"):
        piece = piece.transform(Transform.from_svg(str(raw["transform"])))
    copies = raw.get("copies", 1)
    if isinstance(copies, bool) or not isinstance(copies, int) or copies < 0:
        raise ConfigurationError(f"Piece {name!r} has a bad copies value: {copies!r}")
    return [piece] * copies


def load_job(data: Any) -> Dict[str, Any]:
    """Validates a parsed job file and turns its pieces into ``Piece`` objects."""
    if not isinstance(data, Mapping):
        raise ConfigurationError("The job must be a JSON object")
    if "pieces" not in data or "boxes" not in data:
        raise ConfigurationError("The job needs both 'pieces' and 'boxes'")
    if not isinstance(data["pieces"], list):
        raise ConfigurationError("The job's 'pieces' must be a list")
    pieces: List[Piece] = []
    for i, raw in enumerate(data["pieces"]):
        pieces.extend(_load_piece(raw, i))
    boxes = data["boxes"]
    if not isinstance(boxes, list):
        boxes = [boxes]
    return {
        "pieces": pieces,
        "boxes": boxes,
        "repeat_boxes": data.get("repeat_boxes", False),
        "gap": None if data.get("gap") is None else as_number(data["gap"], "gap"),
        "margin": data.get("margin"),
    }


def result_to_json(result: BoxFitResult, boxes: Sequence[Any]) -> Dict[str, Any]:
    rects = [view_box_from_partial(b) for b in flatten(boxes)]
    out_boxes: List[Dict[str, Any] | None] = []
    for placement, index in zip(result.boxed_pieces, result.box_indices):
        if placement is None:
            out_boxes.append(None)
            continue
        out_boxes.append({
            "index": index,
            "view_box": view_box_to_string(rects[index]),
            "placements": [
                {"name": shape.name, "transform": tf.to_svg()}
                for shape, tf in placement.leaves()
            ],
        })
    return {
        "boxes": out_boxes,
        "remaining": [p.name for p in result.remaining_pieces],
    }


def run_job(data: Any) -> Dict[str, Any]:
    job = load_job(data)
    result = fit_in_boxes(
        job["pieces"],
        job["boxes"],
        repeat_boxes=job["repeat_boxes"],
        gap=job["gap"],
        margin=job["margin"],
    )
    return result_to_json(result, job["boxes"])


def main(argv: Sequence[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Fit pieces into boxes, row by row, and print their placements.")
    ap.add_argument("job", help="Path to the JSON job file")
    ap.add_argument("-o", "--output", default=None, help="Write the placements here instead of stdout")
    ap.add_argument("--debug", action="store_true", help="Print layout steps")
    args = ap.parse_args(argv)

    config._apply_layout_env()
    if args.debug:
        config.set_debug(True)

    job_path = Path(args.job)
    if not job_path.exists():
        raise SystemExit(f"Missing {job_path}")
    try:
        data = json.loads(job_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Bad job file {job_path}: {exc}") from None
    try:
        out = run_job(data)
    except ConfigurationError as exc:
        raise SystemExit(f"Bad job file {job_path}: {exc}") from None

    text = json.dumps(out, ensure_ascii=False, indent=config.JSON_INDENT)
    placed = sum(len(b["placements"]) for b in out["boxes"] if b)
    summary = f"Placed {placed} pieces in {sum(1 for b in out['boxes'] if b)} boxes, {len(out['remaining'])} left over"
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Wrote {args.output}: {summary}")
    else:
        print(text)
        print(summary, file=sys.stderr)


if __name__ == "__main__":
    main()
