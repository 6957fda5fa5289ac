from typing import Optional, List, Dict as PyDict, Any
from pydantic import BaseModel, Field

from figma_css.utils.common import format_number, format_rgba_color, visible_items
from figma_css.utils.identity import get_number

DEFAULT_SHADOW_COLOR = {"r": 0, "g": 0, "b": 0, "a": 1}


# Interned EFFECT payload. Every field is a ready-to-use CSS value.
class SimplifiedEffects(BaseModel):
    box_shadow: Optional[str] = Field(default=None, alias="boxShadow")
    filter_blur: Optional[str] = Field(default=None, alias="filter") # 'filter' shadows a builtin
    backdrop_filter: Optional[str] = Field(default=None, alias="backdropFilter")
    text_shadow: Optional[str] = Field(default=None, alias="textShadow")

    class Config:
        populate_by_name = True


def _px(effect: PyDict[str, Any], key: str) -> str:
    return f"{format_number(get_number(effect, key) or 0)}px"


def _shadow(effect: PyDict[str, Any]) -> str:
    """offset-x offset-y blur spread color, e.g. '0px 4px 8px 0px rgba(0, 0, 0, 0.25)'."""
    offset = effect.get("offset")
    if not isinstance(offset, dict):
        offset = {}
    color = effect.get("color")
    if not isinstance(color, dict):
        color = DEFAULT_SHADOW_COLOR

    # The color's own alpha is the shadow's opacity
    shadow = f"{_px(offset, 'x')} {_px(offset, 'y')} {_px(effect, 'radius')} {_px(effect, 'spread')} {format_rgba_color(color)}"
    if effect.get("type") == "INNER_SHADOW":
        return f"inset {shadow}"
    return shadow


def _blur(effect: PyDict[str, Any]) -> str:
    return f"blur({_px(effect, 'radius')})"


# effect type -> (bucket, formatter)
EFFECT_HANDLERS: PyDict[str, tuple] = {
    "DROP_SHADOW": ("shadows", _shadow),
    "INNER_SHADOW": ("shadows", _shadow),
    "LAYER_BLUR": ("layer_blurs", _blur),
    "BACKGROUND_BLUR": ("background_blurs", _blur),
}


def build_simplified_effects(node_data: PyDict[str, Any]) -> PyDict[str, str]:
    """
    CSS for a node's visible effects. Shadows go to box-shadow, or to
    text-shadow on TEXT nodes; blurs go to filter and backdrop-filter.
    Unknown effect types are skipped. Returns {} when nothing is visible.
    """
    buckets: PyDict[str, List[str]] = {"shadows": [], "layer_blurs": [], "background_blurs": []}
    for effect in visible_items(node_data.get("effects")):
        handler = EFFECT_HANDLERS.get(effect.get("type"))
        if handler is None:
            continue
        bucket, formatter = handler
        buckets[bucket].append(formatter(effect))

    shadows = ", ".join(buckets["shadows"]) or None
    is_text = node_data.get("type") == "TEXT"

    effects_model = SimplifiedEffects(
        box_shadow=None if is_text else shadows,
        text_shadow=shadows if is_text else None,
        filter_blur=" ".join(buckets["layer_blurs"]) or None,
        backdrop_filter=" ".join(buckets["background_blurs"]) or None,
    )
    return effects_model.model_dump(exclude_none=True, by_alias=True)
