from typing import Dict as PyDict, Optional, List as PyList, Any, Tuple, Union
from pydantic import BaseModel, Field

from figma_css.utils.common import format_number, generate_css_shorthand
from figma_css.utils.identity import EDGE_KEYS, Number, get_number, is_frame, is_layout, is_number


# Interned LAYOUT payload: how a node arranges its children (mode, alignment,
# gap, padding) and how it sits in its parent (sizing, position, dimensions).
class SimplifiedLayout(BaseModel):
    mode: str = "none"  # "none", "row" or "column"
    justify_content: Optional[str] = Field(default=None, alias="justifyContent")
    align_items: Optional[str] = Field(default=None, alias="alignItems")
    align_self: Optional[str] = Field(default=None, alias="alignSelf")
    wrap: Optional[bool] = None
    gap: Optional[str] = None
    location_relative_to_parent: Optional[PyDict[str, Number]] = Field(default=None, alias="locationRelativeToParent")
    dimensions: Optional[PyDict[str, Union[int, float, str]]] = None # width, height, aspectRatio
    padding: Optional[str] = None
    sizing: Optional[PyDict[str, str]] = None # horizontal, vertical
    overflow_scroll: Optional[PyList[str]] = Field(default=None, alias="overflowScroll")
    position: Optional[str] = None # "absolute" or None

    class Config:
        populate_by_name = True


LAYOUT_MODES = {"HORIZONTAL": "row", "VERTICAL": "column"}

SIZING_MODES = {"FIXED": "fixed", "FILL": "fill", "HUG": "hug"}

# primaryAxisAlignItems / counterAxisAlignItems
AXIS_ALIGNMENTS = {
    "MIN": "flex-start",
    "MAX": "flex-end",
    "CENTER": "center",
    "SPACE_BETWEEN": "space-between",
    "BASELINE": "baseline",
    "STRETCH": "stretch",
}

# layoutAlign of a child inside an autolayout parent
SELF_ALIGNMENTS = {
    "MIN": "flex-start",
    "MAX": "flex-end",
    "CENTER": "center",
    "STRETCH": "stretch",
}

SCROLL_DIRECTIONS = {
    "HORIZONTAL_SCROLLING": ["x"],
    "VERTICAL_SCROLLING": ["y"],
    "HORIZONTAL_AND_VERTICAL_SCROLLING": ["x", "y"],
}

PADDING_KEYS = ("paddingTop", "paddingRight", "paddingBottom", "paddingLeft")


def _is_autolayout(node_data: Optional[PyDict[str, Any]]) -> bool:
    return node_data is not None and is_frame(node_data) and node_data.get("layoutMode", "NONE") != "NONE"


def _overflow_scroll(node_data: PyDict[str, Any]) -> Optional[PyList[str]]:
    return SCROLL_DIRECTIONS.get(node_data.get("overflowDirection"))


def _padding(node_data: PyDict[str, Any]) -> Optional[str]:
    # None when every side is 0
    return generate_css_shorthand({
        edge: get_number(node_data, key) or 0
        for edge, key in zip(EDGE_KEYS, PADDING_KEYS)
    })


def _frame_values(node_data: PyDict[str, Any]) -> PyDict[str, Any]:
    """How a frame arranges its own children."""
    if not is_frame(node_data):
        return {"mode": "none"}

    mode = LAYOUT_MODES.get(node_data.get("layoutMode"), "none")
    if mode == "none":
        return {"mode": mode, "overflow_scroll": _overflow_scroll(node_data)}

    primary = AXIS_ALIGNMENTS.get(node_data.get("primaryAxisAlignItems"))
    counter = AXIS_ALIGNMENTS.get(node_data.get("counterAxisAlignItems"))
    justify_content, align_items = (primary, counter) if mode == "row" else (counter, primary)

    item_spacing = get_number(node_data, "itemSpacing") or 0

    return {
        "mode": mode,
        "justify_content": justify_content,
        "align_items": align_items,
        "align_self": SELF_ALIGNMENTS.get(node_data.get("layoutAlign")),
        "wrap": True if node_data.get("layoutWrap") == "WRAP" else None,
        "gap": f"{format_number(item_spacing)}px" if item_spacing > 0 else None,
        "padding": _padding(node_data),
        # Autolayout frames only scroll when they clip their content
        "overflow_scroll": _overflow_scroll(node_data) if node_data.get("clipsContent") else None,
    }


def _stretch_axes(
    node_data: PyDict[str, Any],
    parent_data: Optional[PyDict[str, Any]],
    own_mode: str,
) -> Tuple[bool, bool]:
    """(stretches horizontally, stretches vertically) for layoutAlign STRETCH."""
    if node_data.get("layoutAlign") != "STRETCH":
        return False, False
    horizontal = own_mode == "column"
    vertical = own_mode == "row"
    if _is_autolayout(parent_data):
        parent_mode = parent_data.get("layoutMode")
        horizontal = horizontal or parent_mode == "VERTICAL"
        vertical = vertical or parent_mode == "HORIZONTAL"
    return horizontal, vertical


def _dimension(size: Number, sizing: Optional[str], stretches: bool) -> Union[Number, str]:
    if stretches:
        return "stretch"
    if sizing == "hug":
        return "hug-contents"
    if sizing == "fill":
        return "fill-container"
    return size


def _placement_values(
    node_data: PyDict[str, Any],
    parent_data: Optional[PyDict[str, Any]],
    own_mode: str,
) -> PyDict[str, Any]:
    """How a node is sized and positioned inside its parent."""
    if not is_layout(node_data):
        return {}

    values: PyDict[str, Any] = {}
    box = node_data["absoluteBoundingBox"]

    sizing = {
        axis: SIZING_MODES[node_data[key]]
        for axis, key in (("horizontal", "layoutSizingHorizontal"), ("vertical", "layoutSizingVertical"))
        if node_data.get(key) in SIZING_MODES
    }
    if sizing:
        values["sizing"] = sizing

    is_absolute = node_data.get("layoutPositioning") == "ABSOLUTE"
    if is_absolute:
        values["position"] = "absolute"

    # Offsets only mean something inside a non-autolayout frame, or for
    # absolutely positioned children.
    if parent_data is not None and is_layout(parent_data):
        if is_absolute or (is_frame(parent_data) and not _is_autolayout(parent_data)):
            parent_box = parent_data["absoluteBoundingBox"]
            values["location_relative_to_parent"] = {
                "x": box["x"] - parent_box["x"],
                "y": box["y"] - parent_box["y"],
            }

    stretch_h, stretch_v = _stretch_axes(node_data, parent_data, own_mode)
    width, height = box["width"], box["height"]
    dimensions: PyDict[str, Union[int, float, str]] = {
        "width": _dimension(width, sizing.get("horizontal"), stretch_h),
        "height": _dimension(height, sizing.get("vertical"), stretch_v),
    }

    if node_data.get("preserveRatio", False) and not (stretch_h and stretch_v):
        if is_number(width) and is_number(height) and width > 0 and height > 0:
            dimensions["aspectRatio"] = round(width / height, 4)

    values["dimensions"] = dimensions
    return values


def build_simplified_layout(
    node_data: PyDict[str, Any],
    parent_data: Optional[PyDict[str, Any]] = None
) -> PyDict[str, Any]:
    """
    Layout descriptor for a node given its (read-only) parent.

    A result of just ``{"mode": "none"}`` means there is nothing worth recording.
    """
    frame_values = _frame_values(node_data)
    layout_data = {**frame_values, **_placement_values(node_data, parent_data, frame_values["mode"])}

    # align-self only applies to flex items of an autolayout parent
    if not _is_autolayout(parent_data) or layout_data.get("position") == "absolute":
        layout_data.pop("align_self", None)

    return SimplifiedLayout(**layout_data).model_dump(exclude_none=True, by_alias=True)
