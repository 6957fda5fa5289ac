# Style table shared by every node of one conversion

import hashlib
import json
import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field, PrivateAttr

from figma_css.utils.common import StyleId, generate_var_id

logger = logging.getLogger(__name__)


def _canonical_numbers(value: Any) -> Any:
    """Integral floats become ints, so 1 and 1.0 serialize alike."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _canonical_numbers(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical_numbers(item) for item in value]
    return value


def _content_hash(value: Any) -> str:
    """
    Canonical JSON (sorted keys, no whitespace) hashed with SHA-1.
    Dict key order and 1 vs 1.0 do not change the hash; list order does.
    """
    canonical = json.dumps(_canonical_numbers(value), sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


class GlobalVars(BaseModel):
    """
    Style payloads (text styles, fill lists, stroke/effect bundles, layouts,
    style override tables) keyed by generated ids such as ``FILL_3``.

    Equal payloads share one key. Keys are never overwritten or removed.
    One instance belongs to exactly one conversion.
    """
    styles: Dict[StyleId, Any] = Field(default_factory=dict)

    _sequence: int = PrivateAttr(default=0)
    _buckets: Dict[str, List[StyleId]] = PrivateAttr(default_factory=dict)


def find_or_create_var(global_vars: GlobalVars, value: Any, prefix: str) -> StyleId:
    """
    Checks if a style value already exists in global_vars.styles.
    If yes, returns its ID.
    If no, generates a new ID, stores the value, and returns the new ID.
    """
    bucket_key = _content_hash(value)
    bucket = global_vars._buckets.setdefault(bucket_key, [])

    # A hash hit is confirmed with a structural comparison
    for style_id in bucket:
        if global_vars.styles[style_id] == value:
            return style_id

    global_vars._sequence += 1
    new_id = generate_var_id(prefix, global_vars._sequence)
    global_vars.styles[new_id] = value
    bucket.append(new_id)
    logger.debug(f"Interned new style {new_id}")
    return new_id
