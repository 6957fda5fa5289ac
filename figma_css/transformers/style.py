import math
from typing import Optional, List as PyList, Dict as PyDict, Any

from pydantic import BaseModel, Field

from figma_css.utils.common import (
    GRADIENT_PAINT_TYPES,
    SimplifiedFill,
    format_number,
    generate_css_shorthand,
    parse_paint,
    round_half_up,
    to_fixed,
    visible_items,
)
from figma_css.utils.identity import (
    get_list,
    get_number,
    has_bounding_size,
    has_value,
    is_non_empty_list,
    is_number,
    is_rectangle_corner_radii,
    is_stroke_weights,
)

TEXT_ALIGN_MAP = {
    "LEFT": "left",
    "CENTER": "center",
    "RIGHT": "right",
    "JUSTIFIED": "justify",
}

TEXT_CASE_MAP = {
    "UPPER": "uppercase",
    "LOWER": "lowercase",
    "TITLE": "capitalize",
    "ORIGINAL": "none",
    "SMALL_CAPS": "small-caps",
    "SMALL_CAPS_FORCED": "small-caps",
}

IMAGE_SCALE_MODE_MAP = {
    "FILL": "cover",
    "FIT": "contain",
}


# Pydantic Model for Simplified Stroke Style
class SimplifiedStroke(BaseModel):
    colors: PyList[SimplifiedFill] = Field(default_factory=list)
    stroke_weight: Optional[str] = Field(default=None, alias="strokeWeight")
    stroke_weights: Optional[str] = Field(default=None, alias="strokeWeights") # per-edge shorthand
    stroke_dashes: Optional[PyList[float]] = Field(default=None, alias="strokeDashes")
    stroke_align: Optional[str] = Field(default=None, alias="strokeAlign") # e.g., INSIDE, OUTSIDE, CENTER

    class Config:
        populate_by_name = True


class CSSProperties(BaseModel):
    """Derived CSS for one node. Dumped by alias, so keys come out camelCase."""
    width: Optional[str] = None
    height: Optional[str] = None
    opacity: Optional[str] = None

    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    background_image: Optional[str] = Field(default=None, alias="backgroundImage")
    background_size: Optional[str] = Field(default=None, alias="backgroundSize")
    background_repeat: Optional[str] = Field(default=None, alias="backgroundRepeat")
    background_position: Optional[str] = Field(default=None, alias="backgroundPosition")

    border_width: Optional[str] = Field(default=None, alias="borderWidth")
    border_style: Optional[str] = Field(default=None, alias="borderStyle")
    border_color: Optional[str] = Field(default=None, alias="borderColor")
    border_radius: Optional[str] = Field(default=None, alias="borderRadius")

    box_shadow: Optional[str] = Field(default=None, alias="boxShadow")
    filter: Optional[str] = None
    backdrop_filter: Optional[str] = Field(default=None, alias="backdropFilter")

    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    font_size: Optional[str] = Field(default=None, alias="fontSize")
    font_weight: Optional[str] = Field(default=None, alias="fontWeight")
    letter_spacing: Optional[str] = Field(default=None, alias="letterSpacing")
    line_height: Optional[str] = Field(default=None, alias="lineHeight")
    text_align: Optional[str] = Field(default=None, alias="textAlign")
    text_transform: Optional[str] = Field(default=None, alias="textTransform")

    transform: Optional[str] = None

    class Config:
        populate_by_name = True


# Main function to build simplified stroke style
def build_simplified_strokes(node_data: PyDict[str, Any]) -> PyDict[str, Any]:
    """
    Builds a simplified stroke style object from Figma node data.
    Processes visible stroke colors, weight, per-edge weights, dashes, and alignment.
    Returns a dictionary containing only the keys that have actual values.
    """
    stroke_colors: PyList[SimplifiedFill] = [
        parse_paint(stroke_paint) for stroke_paint in visible_items(node_data.get("strokes"))
    ]

    stroke_weight_val: Optional[str] = None
    weight = get_number(node_data, "strokeWeight")
    if weight is not None and weight > 0:
        stroke_weight_val = f"{format_number(weight)}px"

    # generate_css_shorthand returns None when every edge is 0
    stroke_weights_val: Optional[str] = None
    if has_value(node_data, "individualStrokeWeights", is_stroke_weights):
        stroke_weights_val = generate_css_shorthand(node_data["individualStrokeWeights"])

    stroke_dashes_val: Optional[PyList[float]] = None
    if has_value(node_data, "strokeDashes", is_non_empty_list):
        stroke_dashes_val = node_data["strokeDashes"]

    stroke_align_val: Optional[str] = None
    if has_value(node_data, "strokeAlign", lambda v: isinstance(v, str)):
        stroke_align_val = node_data["strokeAlign"]

    simplified_stroke_model = SimplifiedStroke(
        colors=stroke_colors,
        stroke_weight=stroke_weight_val,
        stroke_weights=stroke_weights_val,
        stroke_dashes=stroke_dashes_val,
        stroke_align=stroke_align_val,
    )

    dump = simplified_stroke_model.model_dump(exclude_none=True, by_alias=True)

    # 'colors' only appears when there are actual colors
    if "colors" in dump and not dump["colors"]:
        del dump["colors"]

    return dump


def build_border_radius(node_data: PyDict[str, Any]) -> Optional[str]:
    """
    `cornerRadius` > 0 gives "<r>px"; otherwise four `rectangleCornerRadii`
    give "<a>px <b>px <c>px <d>px" in the order Figma lists them.
    """
    corner_radius = get_number(node_data, "cornerRadius")
    if corner_radius is not None and corner_radius > 0:
        return f"{format_number(corner_radius)}px"
    if has_value(node_data, "rectangleCornerRadii", is_rectangle_corner_radii):
        return " ".join(f"{format_number(r)}px" for r in node_data["rectangleCornerRadii"])
    return None


# --- Color & gradient helpers ---

def _rgba_to_css(color: PyDict[str, Any]) -> str:
    channels = [color.get(k) for k in ("r", "g", "b")]
    r, g, b = (round_half_up(c * 255) if is_number(c) else 0 for c in channels)
    alpha = color.get("a")
    a = format_number(alpha) if is_number(alpha) else "1"
    return f"rgba({r}, {g}, {b}, {a})"


def _paint_color(paint: PyDict[str, Any]) -> Optional[str]:
    """Hex or rgba string for a solid paint, None when it has no usable color."""
    parsed = parse_paint(paint)
    if isinstance(parsed, str):
        return parsed
    return parsed.get("rgba") or parsed.get("hex")


def _calculate_angle(start: PyDict[str, Any], end: PyDict[str, Any]) -> float:
    """CSS angle (degrees, 0 = to top) for the direction start -> end."""
    dx = end.get("x", 0) - start.get("x", 0)
    dy = end.get("y", 0) - start.get("y", 0)
    angle = math.atan2(dy, dx) * (180 / math.pi)
    angle = 90 - angle
    return (angle + 360) % 360


def _is_vector(value: Any) -> bool:
    return isinstance(value, dict) and is_number(value.get("x", 0)) and is_number(value.get("y", 0))


def gradient_to_css(fill: PyDict[str, Any]) -> str:
    """
    Converts a Figma gradient paint into a CSS gradient function.
    Fewer than two stops yields "transparent".
    """
    stops = [stop for stop in get_list(fill, "gradientStops") if isinstance(stop, dict)]
    if len(stops) < 2:
        return "transparent"

    css_stops = ", ".join(
        f"{_rgba_to_css(stop.get('color') if isinstance(stop.get('color'), dict) else {})} "
        f"{round_half_up(stop['position'] * 100) if is_number(stop.get('position')) else 0}%"
        for stop in stops
    )

    fill_type = fill.get("type")
    handles = [h for h in get_list(fill, "gradientHandlePositions") if _is_vector(h)]

    if fill_type == "GRADIENT_LINEAR" and len(handles) >= 2:
        angle = _calculate_angle(handles[0], handles[1])
        return f"linear-gradient({format_number(angle)}deg, {css_stops})"
    if fill_type == "GRADIENT_RADIAL" and len(handles) >= 3:
        # Handle geometry is not mapped onto CSS size/position
        return f"radial-gradient(circle, {css_stops})"
    if fill_type == "GRADIENT_ANGULAR" and len(handles) >= 3:
        return f"conic-gradient(from 0deg, {css_stops})"

    return f"linear-gradient(to bottom, {css_stops})"


def _fill_layer(fill: PyDict[str, Any]) -> str:
    """One background layer of a composited (multi-fill) background."""
    fill_type = fill.get("type")
    if fill_type == "SOLID":
        return _paint_color(fill) or "transparent"
    if fill_type in GRADIENT_PAINT_TYPES:
        return gradient_to_css(fill)
    if fill_type == "IMAGE":
        return f"url({fill.get('imageRef') or ''})"
    return "transparent"


# --- Per-concern extractors, each writing into the props dict ---

def _extract_background(node: PyDict[str, Any], props: PyDict[str, str]) -> None:
    visible_fills = visible_items(node.get("fills"))
    if not visible_fills:
        return

    # Later fills paint over earlier ones
    top_fill = visible_fills[-1]
    top_type = top_fill.get("type")

    if top_type == "SOLID":
        color = _paint_color(top_fill)
        if color:
            props["backgroundColor"] = color
    elif top_type in GRADIENT_PAINT_TYPES:
        props["backgroundImage"] = gradient_to_css(top_fill)
    elif top_type == "IMAGE":
        props["backgroundImage"] = f"url({top_fill.get('imageRef') or ''})"
        background_size = IMAGE_SCALE_MODE_MAP.get(top_fill.get("scaleMode"))
        if background_size:
            props["backgroundSize"] = background_size
        props["backgroundRepeat"] = "no-repeat"
        props["backgroundPosition"] = "center"

    if len(visible_fills) > 1:
        # Bottom-to-top paint order becomes top-to-bottom CSS layer order
        layers = [_fill_layer(fill) for fill in visible_fills]
        layers.reverse()
        props["backgroundImage"] = ", ".join(layers)


def _extract_border(node: PyDict[str, Any], props: PyDict[str, str]) -> None:
    visible_strokes = visible_items(node.get("strokes"))
    if not visible_strokes:
        return

    stroke_weight = get_number(node, "strokeWeight")
    props["borderWidth"] = f"{format_number(stroke_weight)}px" if stroke_weight is not None else "1px"
    props["borderStyle"] = "dashed" if has_value(node, "strokeDashes", is_non_empty_list) else "solid"
    border_color = _paint_color(visible_strokes[0])
    if border_color:
        props["borderColor"] = border_color


def _format_shadow(effect: PyDict[str, Any]) -> str:
    offset = effect.get("offset") if isinstance(effect.get("offset"), dict) else {}
    offset_x = offset.get("x") if is_number(offset.get("x")) else 0
    offset_y = offset.get("y") if is_number(offset.get("y")) else 0
    blur = get_number(effect, "radius") or 0
    spread = 0 # Figma shadows carry no spread usable here

    color = "rgba(0,0,0,0.1)"
    if isinstance(effect.get("color"), dict):
        color = _rgba_to_css(effect["color"])

    inset = "inset " if effect.get("type") == "INNER_SHADOW" else ""
    return (
        f"{inset}{format_number(offset_x)}px {format_number(offset_y)}px "
        f"{format_number(blur)}px {spread}px {color}"
    )


def _format_blurs(effects: PyList[PyDict[str, Any]], effect_type: str) -> Optional[str]:
    blurs = [
        f"blur({format_number(get_number(effect, 'radius') or 0)}px)"
        for effect in effects
        if effect.get("type") == effect_type
    ]
    return " ".join(blurs) if blurs else None


def _extract_effects(node: PyDict[str, Any], props: PyDict[str, str]) -> None:
    effects = visible_items(node.get("effects"))
    if not effects:
        return

    shadows = [
        _format_shadow(effect) for effect in effects
        if effect.get("type") in ("DROP_SHADOW", "INNER_SHADOW")
    ]
    if shadows:
        props["boxShadow"] = ", ".join(shadows)

    layer_blur = _format_blurs(effects, "LAYER_BLUR")
    if layer_blur:
        props["filter"] = layer_blur

    background_blur = _format_blurs(effects, "BACKGROUND_BLUR")
    if background_blur:
        props["backdropFilter"] = background_blur


def _extract_typography(node: PyDict[str, Any], props: PyDict[str, str]) -> None:
    style = node.get("style")
    if not isinstance(style, dict):
        return

    if has_value(style, "fontFamily", lambda v: isinstance(v, str)):
        props["fontFamily"] = f'"{style["fontFamily"]}", sans-serif'

    font_size = get_number(style, "fontSize")
    has_font_size = font_size is not None and font_size > 0
    if font_size is not None:
        props["fontSize"] = f"{format_number(font_size)}px"

    font_weight = get_number(style, "fontWeight")
    if font_weight is not None:
        props["fontWeight"] = format_number(font_weight)

    letter_spacing = get_number(style, "letterSpacing")
    if letter_spacing is not None:
        if has_font_size:
            props["letterSpacing"] = f"{to_fixed(letter_spacing / font_size, 3)}em"
        else:
            props["letterSpacing"] = f"{format_number(letter_spacing)}px"

    line_height_px = get_number(style, "lineHeightPx")
    line_height_percent = get_number(style, "lineHeightPercent")
    if line_height_px is not None:
        if has_font_size:
            props["lineHeight"] = to_fixed(line_height_px / font_size, 2)
        else:
            props["lineHeight"] = f"{format_number(line_height_px)}px"
    elif line_height_percent is not None:
        props["lineHeight"] = format_number(line_height_percent / 100)

    if has_value(style, "textAlignHorizontal", lambda v: isinstance(v, str)):
        props["textAlign"] = TEXT_ALIGN_MAP.get(style["textAlignHorizontal"], "left")

    if has_value(style, "textCase", lambda v: isinstance(v, str)):
        props["textTransform"] = TEXT_CASE_MAP.get(style["textCase"], "none")


def extract_transforms(node: PyDict[str, Any]) -> Optional[str]:
    """rotate() from `rotation` (radians) followed by scale() from the matrix diagonal."""
    transforms: PyList[str] = []

    rotation = get_number(node, "rotation")
    if rotation:
        degrees = (rotation * 180) / math.pi
        transforms.append(f"rotate({to_fixed(degrees, 2)}deg)")

    matrix = get_list(node, "relativeTransform")
    if (
        len(matrix) >= 2
        and all(isinstance(row, list) and len(row) >= 2 for row in matrix[:2])
        and is_number(matrix[0][0])
        and is_number(matrix[1][1])
    ):
        scale_x = matrix[0][0]
        scale_y = matrix[1][1]
        if scale_x != 1 or scale_y != 1:
            transforms.append(f"scale({to_fixed(scale_x, 2)}, {to_fixed(scale_y, 2)})")

    return " ".join(transforms) if transforms else None


def extract_css_properties(node: PyDict[str, Any]) -> PyDict[str, str]:
    """
    Converts a Figma node into the full set of CSS properties it implies.

    Every property is optional: a property whose source fields are missing or
    malformed is left out rather than defaulted. Never raises and never
    mutates the node.
    """
    props: PyDict[str, str] = {}

    if has_bounding_size(node):
        bbox = node["absoluteBoundingBox"]
        props["width"] = f"{format_number(bbox['width'])}px"
        props["height"] = f"{format_number(bbox['height'])}px"

    opacity = get_number(node, "opacity")
    if opacity is not None:
        props["opacity"] = format_number(opacity)

    _extract_background(node, props)
    _extract_border(node, props)

    border_radius = build_border_radius(node)
    if border_radius:
        props["borderRadius"] = border_radius

    _extract_effects(node, props)
    _extract_typography(node, props)

    transform = extract_transforms(node)
    if transform:
        props["transform"] = transform

    return CSSProperties(**props).model_dump(exclude_none=True, by_alias=True)
