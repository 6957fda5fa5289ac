# Presence and type guards for raw Figma node dicts.
# A field that is missing or has the wrong type is treated as absent.

from typing import Any, Callable, Iterable, Optional, List, Union

Number = Union[int, float]

BOX_KEYS = ("x", "y", "width", "height")
EDGE_KEYS = ("top", "right", "bottom", "left")


def is_number(val: Any) -> bool:
    """True for ints and floats. Booleans are rejected even though bool subclasses int."""
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def is_non_empty_list(val: Any) -> bool:
    return isinstance(val, list) and len(val) > 0


def _numeric_fields(val: Any, keys: Iterable[str]) -> bool:
    return isinstance(val, dict) and all(is_number(val.get(k)) for k in keys)


def has_value(
    obj: Any,
    key: str,
    type_guard: Optional[Callable[[Any], bool]] = None
) -> bool:
    """
    True when ``obj`` is a dict holding ``key``. With a ``type_guard`` the value
    must also pass it; without one it only has to be non-None.
    """
    if not isinstance(obj, dict) or key not in obj:
        return False
    if type_guard is None:
        return obj[key] is not None
    return type_guard(obj[key])


def get_number(obj: Any, key: str) -> Optional[Number]:
    """obj[key] when it is a number, else None."""
    return obj[key] if has_value(obj, key, is_number) else None


def get_list(obj: Any, key: str) -> List[Any]:
    """obj[key] when it is a list, else an empty list."""
    return obj[key] if has_value(obj, key, lambda v: isinstance(v, list)) else []


def is_frame(val: Any) -> bool:
    # Only frame-like nodes (FRAME, COMPONENT, INSTANCE, ...) carry a boolean clipsContent
    return has_value(val, "clipsContent", lambda v: isinstance(v, bool))


def is_rectangle(obj: Any, key: Optional[str] = None) -> bool:
    """
    A rectangle is a dict with numeric x, y, width and height.
    With ``key`` the check applies to ``obj[key]`` instead of ``obj``.
    """
    if key is not None:
        if not has_value(obj, key):
            return False
        obj = obj[key]
    return _numeric_fields(obj, BOX_KEYS)


def is_layout(val: Any) -> bool:
    """Nodes with a complete absoluteBoundingBox can be placed and sized."""
    return is_rectangle(val, "absoluteBoundingBox")


def has_bounding_size(node: Any) -> bool:
    """Weaker than is_layout: only width and height have to be numeric."""
    return has_value(node, "absoluteBoundingBox") and _numeric_fields(
        node["absoluteBoundingBox"], ("width", "height")
    )


def is_stroke_weights(val: Any) -> bool:
    """individualStrokeWeights: numeric top, right, bottom and left."""
    return _numeric_fields(val, EDGE_KEYS)


def is_rectangle_corner_radii(val: Any) -> bool:
    """Exactly four numbers, kept in the order Figma lists them."""
    return isinstance(val, list) and len(val) == 4 and all(is_number(v) for v in val)


def is_css_color_value(val: Any) -> bool:
    """A paint already rendered as a CSS color string (hex or rgba())."""
    return isinstance(val, str) and val.startswith(("#", "rgba"))
