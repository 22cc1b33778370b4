from __future__ import annotations

import os
import time

DEFAULT_GAP = float(os.getenv("LAYOUT_GAP", "1"))
PACK_AXIS = os.getenv("PACK_AXIS", "x")
PACK_NORMALISE = "center"
FIT_ROW_NORMALISE = "default"
COUNT_EPS = 1e-9
ALMOST_EQUAL_TOL = 1e-9
MARGIN_EPSILON_TO_SIZE_RATIO = 1e-9
SIGNIFICANT_DIGITS = 5
ZERO_TOLERANCE = 1e-9
JSON_INDENT = 2
LAYOUT_DEBUG = os.getenv("LAYOUT_DEBUG", "0").strip().lower() not in ("", "0", "false", "no")


def _apply_layout_env() -> None:
    global DEFAULT_GAP, PACK_AXIS, LAYOUT_DEBUG
    if "LAYOUT_GAP" in os.environ:
        DEFAULT_GAP = float(os.environ["LAYOUT_GAP"])
    if "PACK_AXIS" in os.environ:
        PACK_AXIS = str(os.environ["PACK_AXIS"]).strip().lower()
    if "LAYOUT_DEBUG" in os.environ:
        LAYOUT_DEBUG = os.environ["LAYOUT_DEBUG"].strip().lower() not in ("", "0", "false", "no")


def set_debug(enabled: bool) -> None:
    global LAYOUT_DEBUG
    LAYOUT_DEBUG = bool(enabled)


def log_step(msg: str) -> None:
    if not LAYOUT_DEBUG:
        return
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}")
