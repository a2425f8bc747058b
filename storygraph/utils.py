"""Generic helpers (logging, profiling, coercion, colors)."""

from __future__ import annotations

import functools
import logging
import math
import time
from typing import Any, Dict, List, Optional, Tuple

from storygraph.config import LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(message)s")


def profile_time(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logging.info("[PROFILE] Function '%s' executed in %.3f seconds", func.__name__, elapsed)
        return result

    return wrapper


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def coerce_float(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def coerce_vector(values: Any) -> List[float]:
    if not isinstance(values, (list, tuple)):
        return []
    vector: List[float] = []
    for value in values:
        number = coerce_float(value)
        if number is None:
            # A vector with holes cannot be compared component-wise.
            return []
        vector.append(number)
    return vector


def coerce_id_list(values: Any) -> List[str]:
    """Normalise a list of ids to unique strings, keeping first-seen order."""
    if values is None:
        return []
    if not isinstance(values, (list, tuple, set)):
        values = [values]
    seen = set()
    ids: List[str] = []
    for value in values:
        if value is None or isinstance(value, (dict, list)):
            continue
        text = str(value).strip()
        if text and text not in seen:
            seen.add(text)
            ids.append(text)
    return ids


def _hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: {hex_color}")
    return tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))


def _rgb_to_hex(rgb: Tuple[int, int, int]) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


def _blend_hex(color: str, target: str, ratio: float) -> str:
    ratio = clamp(ratio)
    r1, g1, b1 = _hex_to_rgb(color)
    r2, g2, b2 = _hex_to_rgb(target)
    r = round(r1 + (r2 - r1) * ratio)
    g = round(g1 + (g2 - g1) * ratio)
    b = round(b1 + (b2 - b1) * ratio)
    return _rgb_to_hex((r, g, b))


def _make_node_color(base: str) -> Dict[str, Any]:
    return {
        "background": base,
        "border": _blend_hex(base, "#1F2A37", 0.35),
        "highlight": {
            "background": _blend_hex(base, "#FFFFFF", 0.18),
            "border": _blend_hex(base, "#0F172A", 0.45),
        },
        "hover": {
            "background": _blend_hex(base, "#FFFFFF", 0.12),
            "border": _blend_hex(base, "#0F172A", 0.4),
        },
    }


def _make_edge_color(base: str, opacity: float = 0.78) -> Dict[str, Any]:
    return {
        "color": base,
        "highlight": _blend_hex(base, "#FFFFFF", 0.15),
        "hover": _blend_hex(base, "#FFFFFF", 0.08),
        "opacity": opacity,
    }


def truncate_label(text: Any, limit: int = 48) -> str:
    label = "" if text is None else str(text).strip()
    if len(label) > limit:
        return label[: limit - 3].rstrip() + "..."
    return label
