# Raw Figma response -> SimplifiedDesign: a pruned node tree plus a shared style table

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field, ValidationError
import logging

from figma_css.utils.common import (
    parse_paint,
    is_visible,
    remove_empty_keys,
    visible_items,
    StyleId,
)
from figma_css.utils.identity import BOX_KEYS, Number, get_list, get_number, has_value, is_layout
from figma_css.services.global_vars import GlobalVars, find_or_create_var
from figma_css.transformers.layout import build_simplified_layout
from figma_css.transformers.style import (
    CSSProperties,
    build_border_radius,
    build_simplified_strokes,
    extract_css_properties,
)
from figma_css.transformers.effects import build_simplified_effects

logger = logging.getLogger(__name__)

# --- Pydantic Models ---

class TextStyle(BaseModel):
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    font_post_script_name: Optional[str] = Field(default=None, alias="fontPostScriptName")
    font_weight: Optional[Number] = Field(default=None, alias="fontWeight")
    font_size: Optional[Number] = Field(default=None, alias="fontSize")
    letter_spacing: Optional[Number] = Field(default=None, alias="letterSpacing")
    line_height_px: Optional[Number] = Field(default=None, alias="lineHeightPx")
    line_height_percent: Optional[Number] = Field(default=None, alias="lineHeightPercent")
    line_height_unit: Optional[str] = Field(default=None, alias="lineHeightUnit")
    text_align_horizontal: Optional[str] = Field(default=None, alias="textAlignHorizontal")
    text_align_vertical: Optional[str] = Field(default=None, alias="textAlignVertical")
    text_decoration: Optional[str] = Field(default=None, alias="textDecoration") # e.g., "UNDERLINE", "STRIKETHROUGH"
    text_case: Optional[str] = Field(default=None, alias="textCase") # e.g., "UPPER", "LOWER", "TITLE"

    class Config:
        populate_by_name = True
        extra = 'ignore' # Ignore extra fields from Figma style object


class BoundingBox(BaseModel):
    x: Number
    y: Number
    width: Number
    height: Number


class SimplifiedNode(BaseModel):
    id: str
    name: str
    type: str
    bounding_box: Optional[BoundingBox] = Field(default=None, alias="boundingBox")
    text: Optional[str] = None
    text_style: Optional[StyleId] = Field(default=None, alias="textStyle")
    fills: Optional[StyleId] = None # StyleId referencing a list of SimplifiedFill
    styles: Optional[StyleId] = None # StyleId referencing a raw styleOverrideTable
    strokes: Optional[StyleId] = None # StyleId referencing a SimplifiedStroke dict
    effects: Optional[StyleId] = None # StyleId referencing a SimplifiedEffects dict
    opacity: Optional[Number] = None
    border_radius: Optional[str] = Field(default=None, alias="borderRadius") # CSS shorthand string
    layout: Optional[StyleId] = None # StyleId referencing a SimplifiedLayout dict
    component_id: Optional[str] = Field(default=None, alias="componentId")
    component_properties: Optional[Dict[str, Any]] = Field(default=None, alias="componentProperties")
    css: Optional[CSSProperties] = None
    children: Optional[List['SimplifiedNode']] = None # Self-referential

    class Config:
        populate_by_name = True


class SimplifiedDesign(BaseModel):
    name: Optional[str] = None
    last_modified: Optional[str] = Field(default=None, alias="lastModified")
    thumbnail_url: str = Field(default="", alias="thumbnailUrl")
    nodes: List[SimplifiedNode] = Field(default_factory=list)
    global_vars: GlobalVars = Field(default_factory=GlobalVars, alias="globalVars")

    class Config:
        populate_by_name = True

    def to_output(self) -> Dict[str, Any]:
        """
        Plain dict with camelCase keys. Nodes never carry None, empty-list or
        empty-dict fields; style payloads are emitted exactly as interned.
        """
        output = self.model_dump(exclude_none=True, by_alias=True)
        output["nodes"] = remove_empty_keys(output["nodes"])
        return output


# children is a forward reference
SimplifiedNode.model_rebuild()


# --- Helper Functions ---

def _build_text_style(style_data: Dict[str, Any]) -> Dict[str, Any]:
    """Typography record kept in the style table. Unknown or mistyped fields are dropped."""
    known = {}
    for field_name, field in TextStyle.model_fields.items():
        alias = field.alias or field_name
        if alias in style_data:
            known[alias] = style_data[alias]
    try:
        text_style = TextStyle.model_validate(known)
    except ValidationError as e:
        logger.debug(f"Dropping mistyped text style fields: {e.error_count()} error(s)")
        valid = {
            key: value for key, value in known.items()
            if _validates(key, value)
        }
        text_style = TextStyle.model_validate(valid)
    return text_style.model_dump(exclude_none=True, by_alias=True)


def _validates(alias: str, value: Any) -> bool:
    try:
        TextStyle.model_validate({alias: value})
    except ValidationError:
        return False
    return True


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _text_field(node_data: Dict[str, Any], key: str, default: str) -> str:
    # null counts as missing; other scalars (numeric ids) are stringified
    value = node_data.get(key)
    return default if value is None else str(value)


def _intern_styles(global_vars: GlobalVars, node_data: Dict[str, Any], parent_data: Optional[Dict[str, Any]]) -> Dict[str, StyleId]:
    """Interns every shareable payload of a node, in a fixed order, and returns the keys."""
    refs: Dict[str, StyleId] = {}

    # The node's own typography, not a shared style reference
    if has_value(node_data, "style", lambda v: isinstance(v, dict)):
        text_style = _build_text_style(node_data["style"])
        if text_style:
            refs["text_style"] = find_or_create_var(global_vars, text_style, "TEXT_STYLE")

    fills = [parse_paint(paint) for paint in visible_items(node_data.get("fills"))]
    if fills:
        refs["fills"] = find_or_create_var(global_vars, fills, "FILL")

    # Per-range text overrides, kept raw
    if has_value(node_data, "styleOverrideTable", lambda v: isinstance(v, dict) and len(v) > 0):
        refs["styles"] = find_or_create_var(global_vars, node_data["styleOverrideTable"], "STYLE_TABLE")

    # Recorded only when at least one stroke paint is visible
    strokes = build_simplified_strokes(node_data)
    if strokes.get("colors"):
        refs["strokes"] = find_or_create_var(global_vars, strokes, "STROKE")

    effects = build_simplified_effects(node_data)
    if effects:
        refs["effects"] = find_or_create_var(global_vars, effects, "EFFECT")

    # {"mode": "none"} alone carries nothing
    layout = build_simplified_layout(node_data, parent_data)
    if len(layout) > 1:
        refs["layout"] = find_or_create_var(global_vars, layout, "LAYOUT")

    return refs


def parse_node(
    global_vars: GlobalVars,
    node_data: Dict[str, Any],
    parent_data: Optional[Dict[str, Any]] = None
) -> Optional[SimplifiedNode]:
    """
    Simplifies a Figma node and, recursively, its visible children.

    Style payloads are interned into ``global_vars`` in pre-order, so key
    numbering follows document order. Returns None for hidden nodes.
    """
    if not is_visible(node_data):
        return None

    node_id = _text_field(node_data, "id", "")
    node_name = _text_field(node_data, "name", "")
    node_type = _text_field(node_data, "type", "UNKNOWN")
    fields: Dict[str, Any] = {"id": node_id, "name": node_name, "type": node_type}

    if is_layout(node_data):
        box = node_data["absoluteBoundingBox"]
        fields["bounding_box"] = {key: box[key] for key in BOX_KEYS}

    if has_value(node_data, "characters", _is_str):
        fields["text"] = node_data["characters"]

    if node_type == "INSTANCE":
        if has_value(node_data, "componentId", _is_str):
            fields["component_id"] = node_data["componentId"]
        if has_value(node_data, "componentProperties", lambda v: isinstance(v, dict)):
            fields["component_properties"] = node_data["componentProperties"]

    fields.update(_intern_styles(global_vars, node_data, parent_data))

    fields["opacity"] = get_number(node_data, "opacity")
    fields["border_radius"] = build_border_radius(node_data)
    fields["css"] = extract_css_properties(node_data)

    children = (
        parse_node(global_vars, child, node_data)
        for child in get_list(node_data, "children")
        if isinstance(child, dict)
    )
    fields["children"] = [child for child in children if child is not None]

    try:
        return SimplifiedNode(**remove_empty_keys(fields))
    except ValidationError as e:
        logger.warning(f"Dropping node {node_id} ({node_name}): {e}")
        return None


def _collect_root_nodes(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Top-level nodes of a GetFileResponse (``document.children``) or a
    GetFileNodesResponse (``nodes[id].document``).
    """
    document = data.get("document")
    if isinstance(document, dict):
        children = document.get("children")
        return [child for child in children if isinstance(child, dict)] if isinstance(children, list) else []

    nodes = data.get("nodes")
    if isinstance(nodes, dict):
        return [
            node_info["document"]
            for node_info in nodes.values()
            if isinstance(node_info, dict) and isinstance(node_info.get("document"), dict)
        ]

    logger.warning("Could not find root nodes to parse in Figma response.")
    return []


# --- Main Parsing Function ---

def parse_figma_response(data: Dict[str, Any]) -> SimplifiedDesign:
    """
    Parses a raw Figma API response (GetFileResponse or GetFileNodesResponse)
    into a simplified design structure.

    Every call uses its own style table; nothing is shared between conversions.
    """
    global_vars = GlobalVars()

    parsed_nodes: List[SimplifiedNode] = []
    for root_node_data in _collect_root_nodes(data):
        if not is_visible(root_node_data):
            continue
        parsed_node = parse_node(global_vars, root_node_data)
        if parsed_node:
            parsed_nodes.append(parsed_node)

    logger.debug(f"Simplified {len(parsed_nodes)} top-level node(s), {len(global_vars.styles)} style(s) interned")

    return SimplifiedDesign(
        name=data.get("name"),
        last_modified=data.get("lastModified"),
        thumbnail_url=data.get("thumbnailUrl") or "",
        nodes=parsed_nodes,
        global_vars=global_vars,
    )
