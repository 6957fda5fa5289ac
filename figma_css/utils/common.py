import os
import math
import logging
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Optional, Union, NewType

from figma_css.utils.identity import EDGE_KEYS, is_number

# Key into GlobalVars.styles, e.g. "FILL_3"
StyleId = NewType('StyleId', str)

# A paint after parse_paint: a hex or rgba() string for solid colors,
# a dict for images, gradients and unsupported paint types.
SimplifiedFill = Union[str, Dict[str, Any]]

GRADIENT_PAINT_TYPES = ("GRADIENT_LINEAR", "GRADIENT_RADIAL", "GRADIENT_ANGULAR", "GRADIENT_DIAMOND")

logger = logging.getLogger(__name__)


# --- Number formatting ---
# CSS strings are built the way a browser-side consumer expects them:
# integral floats print without a trailing ".0" and rounding is half-up.

def format_number(value: Union[int, float]) -> str:
    """
    Formats a number the way JavaScript's Number#toString would for
    ordinary magnitudes: 300.0 -> "300", 0.8 -> "0.8".
    """
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def round_half_up(value: float) -> int:
    """Math.round semantics: halves round toward positive infinity."""
    return int(math.floor(value + 0.5))


def to_fixed(value: float, digits: int) -> str:
    """
    Number#toFixed: rounds the exact binary value half away from zero.
    (Python's format() would round half to even on exact ties.)
    """
    if not math.isfinite(value):
        return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")
    if abs(value) >= 1e21:
        # toFixed falls back to exponent notation here
        return repr(float(value))
    if value == 0:
        value = 0.0  # drop the sign of -0.0
    quantum = Decimal(1).scaleb(-digits)
    with localcontext() as ctx:
        # 22 integer digits at most, plus the requested fraction
        ctx.prec = 22 + digits
        return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def channel_to_255(channel: Any) -> int:
    """Converts a 0-1 color channel to 0-255, clamping out-of-range input."""
    if not is_number(channel):
        return 0
    return round_half_up(max(0.0, min(1.0, channel)) * 255)


# --- Cleanup ---

def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, dict)) and not value)


def remove_empty_keys(data: Any) -> Any:
    """
    Drops None, [] and {} values from dicts at any depth. A dict that only
    held empty values is itself dropped from its parent. List items are
    cleaned but never removed, so 0 and False survive everywhere.
    """
    if isinstance(data, list):
        return [remove_empty_keys(item) for item in data]
    if not isinstance(data, dict):
        return data
    cleaned = {key: remove_empty_keys(value) for key, value in data.items()}
    return {key: value for key, value in cleaned.items() if not _is_empty(value)}


# --- Colors ---

def _alpha(color: Dict[str, Any]) -> float:
    alpha = color.get('a', 1.0)
    return alpha if is_number(alpha) else 1.0


def _rgb(color: Dict[str, Any]) -> tuple:
    return tuple(channel_to_255(color.get(channel)) for channel in ('r', 'g', 'b'))


def convert_color(color: Dict[str, Any], opacity: float = 1.0) -> Dict[str, Union[str, float]]:
    """
    Figma RGBA (0-1 floats) -> {"hex": "#RRGGBB", "opacity": n}.

    ``opacity`` is the paint's own opacity; it multiplies the color's alpha
    and the product is clamped to 0-1 and rounded to two decimals.
    """
    combined = max(0.0, min(1.0, opacity * _alpha(color)))
    r, g, b = _rgb(color)
    return {"hex": f"#{r:02X}{g:02X}{b:02X}", "opacity": round_half_up(combined * 100) / 100}


def format_rgba_color(color: Dict[str, Any], opacity: float = 1.0) -> str:
    """Figma RGBA -> 'rgba(R, G, B, A)' with 0-255 channels and the combined alpha."""
    r, g, b = _rgb(color)
    alpha = convert_color(color, opacity)["opacity"]
    return f"rgba({r}, {g}, {b}, {format_number(alpha)})"


def generate_var_id(prefix: str, sequence: int) -> StyleId:
    """Style table key for the given prefix, e.g. ("FILL", 3) -> FILL_3."""
    return StyleId(f"{prefix}_{sequence}")


def generate_css_shorthand(
    values: Dict[str, Union[int, float]],
    ignore_zero: bool = True,
    suffix: str = "px"
) -> Optional[str]:
    """
    Shortest CSS box shorthand (padding, margin, border-width) for a
    {top, right, bottom, left} dict. None when every side is 0 and
    ``ignore_zero`` is set.
    """
    missing = [edge for edge in EDGE_KEYS if edge not in values]
    if missing:
        raise ValueError(f"CSS shorthand is missing {', '.join(missing)}")

    if ignore_zero and all(values[edge] == 0 for edge in EDGE_KEYS):
        return None

    top, right, bottom, left = (f"{format_number(values[edge])}{suffix}" for edge in EDGE_KEYS)
    if right == left:
        if top == bottom:
            return top if top == right else f"{top} {right}"
        return f"{top} {right} {bottom}"
    return f"{top} {right} {bottom} {left}"


# --- Paints ---

def _paint_opacity(raw_paint: Dict[str, Any]) -> float:
    opacity = raw_paint.get("opacity", 1.0)
    return opacity if is_number(opacity) else 1.0


def _gradient_paint(raw_paint: Dict[str, Any], paint_opacity: float) -> Dict[str, Any]:
    stops = raw_paint.get("gradientStops")
    if not isinstance(stops, list):
        stops = []
    return {
        "type": raw_paint["type"],
        "gradientHandlePositions": raw_paint.get("gradientHandlePositions"),
        # The paint opacity is folded into every stop color
        "gradientStops": [
            {"position": stop.get("position"), "color": convert_color(_as_dict(stop.get("color")), paint_opacity)}
            for stop in stops
            if isinstance(stop, dict)
        ],
    }


def parse_paint(raw_paint: Dict[str, Any]) -> SimplifiedFill:
    """
    Simplifies one Figma paint.

    SOLID paints become a hex string when fully opaque, otherwise an rgba()
    string. IMAGE and gradient paints become dicts. Anything else is kept
    as ``{"type": ...}``; this never raises for an unfamiliar paint.
    """
    paint_type = raw_paint.get("type")
    paint_opacity = _paint_opacity(raw_paint)

    if paint_type == "SOLID":
        color = raw_paint.get("color")
        if not isinstance(color, dict):
            logger.debug("Solid paint without color data, keeping type only.")
            return {"type": "SOLID"}
        # color.a is the color's alpha; paint opacity applies on top of it
        if convert_color(color, paint_opacity)["opacity"] == 1:
            return convert_color(color)["hex"]
        return format_rgba_color(color, paint_opacity)

    if paint_type == "IMAGE":
        return {"type": "IMAGE", "imageRef": raw_paint.get("imageRef"), "scaleMode": raw_paint.get("scaleMode")}

    if paint_type in GRADIENT_PAINT_TYPES:
        return _gradient_paint(raw_paint, paint_opacity)

    logger.debug(f"Unsupported paint type {paint_type!r}, keeping type only.")
    return {"type": paint_type}


# --- Visibility ---

def is_visible(element: Dict[str, Any]) -> bool:
    """Nodes, paints and effects are visible unless 'visible' is explicitly False."""
    return element.get("visible", True) is not False


def visible_items(items: Any) -> List[Dict[str, Any]]:
    """Filters a paint/effect list down to dict entries that are not hidden."""
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict) and is_visible(item)]


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


# --- Files ---

def write_text_file(path: str, text: str) -> None:
    """Writes UTF-8 text to ``path``, creating missing parent directories."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
