import re
import json
import logging
from typing import Any, Callable, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field

from figma_css.utils.common import format_number, write_text_file
from figma_css.utils.identity import is_css_color_value, is_number

logger = logging.getLogger(__name__)

TokenFormat = Literal["css", "scss", "json", "ts", "yaml"]
TOKEN_FORMATS = ("css", "scss", "json", "ts", "yaml")

TOKEN_FILE_EXTENSIONS = {
    "css": "css",
    "scss": "scss",
    "json": "json",
    "ts": "ts",
    "yaml": "yaml",
}


# --- Pydantic Models ---

class DesignToken(BaseModel):
    value: Union[str, float, Dict[str, Any]]
    type: Literal["color", "dimension", "spacing", "typography", "shadow", "radius", "opacity", "gradient"]
    description: Optional[str] = None


class DesignTokens(BaseModel):
    colors: Dict[str, DesignToken] = Field(default_factory=dict)
    typography: Dict[str, DesignToken] = Field(default_factory=dict)
    spacing: Dict[str, DesignToken] = Field(default_factory=dict)
    radii: Dict[str, DesignToken] = Field(default_factory=dict)
    shadows: Dict[str, DesignToken] = Field(default_factory=dict)
    opacity: Dict[str, DesignToken] = Field(default_factory=dict)
    gradients: Dict[str, DesignToken] = Field(default_factory=dict)

    def groups(self) -> Dict[str, Dict[str, DesignToken]]:
        return {name: getattr(self, name) for name in type(self).model_fields}

    def count(self) -> int:
        return sum(len(group) for group in self.groups().values())


class TokenGenerationOptions(BaseModel):
    format: TokenFormat = "css"
    output_path: Optional[str] = Field(default=None, alias="outputPath")
    prefix: str = ""

    class Config:
        populate_by_name = True


# --- Naming ---

def normalize_token_name(name: str) -> str:
    """
    Turns a node or style name into a token name: punctuation dropped,
    whitespace runs collapsed to '-', lower-cased, always starting with a letter.
    """
    normalized = re.sub(r"[^a-zA-Z0-9\s\-_]", "", name)
    normalized = re.sub(r"\s+", "-", normalized).lower()
    if not re.match(r"[a-zA-Z]", normalized):
        normalized = "token-" + normalized
    return normalized


def _name_contains(node: Any, *keywords: str) -> bool:
    lowered = node.name.lower()
    return any(keyword in lowered for keyword in keywords)


def _walk(nodes: List[Any]):
    """Pre-order traversal over simplified nodes."""
    for node in nodes:
        yield node
        if node.children:
            yield from _walk(node.children)


def _format_value(value: Any) -> str:
    if is_number(value):
        return format_number(value)
    return str(value)


# --- Extractors ---

def _extract_color_tokens(design: Any) -> Dict[str, DesignToken]:
    color_tokens: Dict[str, DesignToken] = {}

    # Interned fill lists: the last color-bearing item wins
    for style_id, style_value in design.global_vars.styles.items():
        if not isinstance(style_value, list):
            continue
        for item in style_value:
            color_value = None
            if is_css_color_value(item):
                color_value = item
            elif isinstance(item, dict) and (item.get("hex") or item.get("rgba")):
                color_value = item.get("hex") or item.get("rgba")
            if color_value:
                color_tokens[normalize_token_name(f"color-{style_id}")] = DesignToken(
                    value=color_value,
                    type="color",
                    description=f"Color extracted from style {style_id}",
                )

    for node in design.nodes:
        if _name_contains(node, "color") and node.css and node.css.background_color:
            color_tokens[normalize_token_name(f"color-{node.name}")] = DesignToken(
                value=node.css.background_color,
                type="color",
                description=f"Color extracted from node {node.name}",
            )

    return color_tokens


def _extract_typography_tokens(design: Any) -> Dict[str, DesignToken]:
    typography_tokens: Dict[str, DesignToken] = {}
    for node in _walk(design.nodes):
        if node.type != "TEXT" or not node.css:
            continue
        css = node.css
        if not (css.font_family and css.font_size):
            continue
        value: Dict[str, Any] = {"fontFamily": css.font_family, "fontSize": css.font_size}
        if css.font_weight:
            value["fontWeight"] = css.font_weight
        if css.line_height:
            value["lineHeight"] = css.line_height
        if css.letter_spacing:
            value["letterSpacing"] = css.letter_spacing
        typography_tokens[normalize_token_name(f"typography-{node.name}")] = DesignToken(
            value=value,
            type="typography",
            description=f"Typography style extracted from node {node.name}",
        )
    return typography_tokens


def _extract_spacing_tokens(design: Any) -> Dict[str, DesignToken]:
    spacing_tokens: Dict[str, DesignToken] = {}
    for node in design.nodes:
        if _name_contains(node, "spacing", "space", "gap") and node.bounding_box:
            # The smaller side of a spacer is its spacing value
            value = min(node.bounding_box.width, node.bounding_box.height)
            spacing_tokens[normalize_token_name(f"spacing-{node.name}")] = DesignToken(
                value=f"{format_number(value)}px",
                type="spacing",
                description=f"Spacing value extracted from node {node.name}",
            )
    return spacing_tokens


def _extract_by_css(
    design: Any,
    keywords: tuple,
    name_prefix: str,
    token_type: str,
    label: str,
    read: Callable[[Any], Optional[str]],
) -> Dict[str, DesignToken]:
    tokens: Dict[str, DesignToken] = {}
    for node in _walk(design.nodes):
        value = read(node.css) if node.css else None
        if value and _name_contains(node, *keywords):
            tokens[normalize_token_name(f"{name_prefix}-{node.name}")] = DesignToken(
                value=value,
                type=token_type,
                description=f"{label} extracted from node {node.name}",
            )
    return tokens


def _gradient_image(css: Any) -> Optional[str]:
    image = css.background_image
    if image and any(kind in image for kind in ("linear-gradient", "radial-gradient", "conic-gradient")):
        return image
    return None


def _extract_opacity_tokens(design: Any) -> Dict[str, DesignToken]:
    opacity_tokens: Dict[str, DesignToken] = {}
    for node in _walk(design.nodes):
        if is_number(node.opacity) and _name_contains(node, "opacity"):
            opacity_tokens[normalize_token_name(f"opacity-{node.name}")] = DesignToken(
                value=node.opacity,
                type="opacity",
                description=f"Opacity value extracted from node {node.name}",
            )
    return opacity_tokens


def extract_design_tokens(design: Any) -> DesignTokens:
    """Collects every token category from a SimplifiedDesign. The design is only read."""
    return DesignTokens(
        colors=_extract_color_tokens(design),
        typography=_extract_typography_tokens(design),
        spacing=_extract_spacing_tokens(design),
        radii=_extract_by_css(
            design, ("radius", "corner", "rounded"), "radius", "radius", "Border radius",
            lambda css: css.border_radius,
        ),
        shadows=_extract_by_css(
            design, ("shadow", "elevation"), "shadow", "shadow", "Box shadow",
            lambda css: css.box_shadow,
        ),
        opacity=_extract_opacity_tokens(design),
        gradients=_extract_by_css(
            design, ("gradient", "background"), "gradient", "gradient", "Gradient",
            _gradient_image,
        ),
    )


# --- Emitters ---

# css and scss list composite typography last
_STYLESHEET_ORDER = [
    ("colors", "Colors"),
    ("spacing", "Spacing"),
    ("radii", "Border Radius"),
    ("shadows", "Shadows"),
    ("opacity", "Opacity"),
    ("gradients", "Gradients"),
    ("typography", "Typography"),
]


def _camel_to_kebab(prop: str) -> str:
    return re.sub(r"([A-Z])", r"-\1", prop).lower()


def _kebab_to_camel(name: str) -> str:
    return re.sub(r"-([a-z])", lambda m: m.group(1).upper(), name)


def tokens_to_css(tokens: DesignTokens, prefix: str = "") -> str:
    lines = [":root {"]
    for group_name, _ in _STYLESHEET_ORDER:
        for name, token in getattr(tokens, group_name).items():
            var_name = f"--{prefix}{name}"
            if isinstance(token.value, dict):
                for prop, value in token.value.items():
                    lines.append(f"  {var_name}-{prop}: {_format_value(value)};")
            else:
                lines.append(f"  {var_name}: {_format_value(token.value)};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def tokens_to_scss(tokens: DesignTokens, prefix: str = "") -> str:
    scss = ""
    for group_name, title in _STYLESHEET_ORDER:
        scss += f"// {title}\n"
        for name, token in getattr(tokens, group_name).items():
            if isinstance(token.value, dict):
                # Composite tokens become mixins
                scss += f"@mixin {prefix}{name} {{\n"
                for prop, value in token.value.items():
                    scss += f"  {_camel_to_kebab(prop)}: {_format_value(value)};\n"
                scss += "}\n\n"
            else:
                scss += f"${prefix}{name}: {_format_value(token.value)}; // {token.description or ''}\n"
        scss += "\n"
    return scss


def tokens_to_ts(tokens: DesignTokens, prefix: str = "") -> str:
    ts = "// Generated Design Tokens\n\n"
    ts += "export const designTokens = {\n"
    for group_name, group in tokens.groups().items():
        ts += f"  {group_name}: {{\n"
        for name, token in group.items():
            key = _kebab_to_camel(f"{prefix}{name}")
            if isinstance(token.value, dict):
                ts += f"    {key}: {{\n"
                for prop, value in token.value.items():
                    ts += f"      {prop}: '{_format_value(value)}',\n"
                ts += "    },\n"
            else:
                ts += f"    {key}: '{_format_value(token.value)}',\n"
        ts += "  },\n"
    ts += "};\n\n"

    for type_name, group_name in (
        ("ColorToken", "colors"),
        ("SpacingToken", "spacing"),
        ("RadiusToken", "radii"),
        ("ShadowToken", "shadows"),
        ("TypographyToken", "typography"),
        ("OpacityToken", "opacity"),
        ("GradientToken", "gradients"),
    ):
        ts += f"export type {type_name} = keyof typeof designTokens.{group_name};\n"
    return ts


def render_design_tokens(tokens: DesignTokens, options: TokenGenerationOptions) -> str:
    """Serializes tokens in the requested format."""
    token_format = options.format
    if token_format == "css":
        return tokens_to_css(tokens, options.prefix)
    if token_format == "scss":
        return tokens_to_scss(tokens, options.prefix)
    if token_format == "ts":
        return tokens_to_ts(tokens, options.prefix)
    if token_format == "json":
        return json.dumps(tokens.model_dump(exclude_none=True), indent=2)
    if token_format == "yaml":
        return yaml.dump(tokens.model_dump(exclude_none=True), sort_keys=False, default_flow_style=False)
    raise ValueError(f"Unsupported token format: {token_format}")


def generate_design_tokens(design: Any, options: TokenGenerationOptions) -> DesignTokens:
    """
    Extracts design tokens from a simplified design and, when
    ``options.output_path`` is set, writes them in ``options.format``
    (creating parent directories as needed).
    """
    if options.format not in TOKEN_FORMATS:
        raise ValueError(f"Unsupported token format: {options.format}")

    tokens = extract_design_tokens(design)
    logger.debug(f"Extracted {tokens.count()} design token(s)")

    if options.output_path:
        write_text_file(options.output_path, render_design_tokens(tokens, options))
        logger.info(f"Wrote {options.format} design tokens to {options.output_path}")

    return tokens
