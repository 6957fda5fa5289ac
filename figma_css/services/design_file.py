import os
import json
import yaml # PyYAML
import logging
from typing import Any, Dict, Literal

from figma_css.services.simplify_node_response import SimplifiedDesign, parse_figma_response

logger = logging.getLogger(__name__)

OutputFormat = Literal["yaml", "json"]
OUTPUT_FORMATS = ("yaml", "json")

YAML_EXTENSIONS = (".yaml", ".yml")

# --- Custom Exception ---

class DesignFileError(Exception):
    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Design file error ({path}): {message}")


# --- Loading ---

def load_design_file(path: str) -> Dict[str, Any]:
    """
    Reads a saved Figma API response. ``.yaml``/``.yml`` files are parsed with
    PyYAML, anything else as JSON. The document must be a mapping.
    """
    is_yaml = os.path.splitext(path)[1].lower() in YAML_EXTENSIONS
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) if is_yaml else json.load(f)
    except OSError as e:
        raise DesignFileError(path, f"Could not read file: {e}") from e
    except json.JSONDecodeError as e:
        raise DesignFileError(path, f"Invalid JSON: {e}") from e
    except yaml.YAMLError as e:
        raise DesignFileError(path, f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise DesignFileError(path, f"Expected a JSON/YAML object at the top level, got {type(data).__name__}")

    logger.debug(f"Loaded design file {path}")
    return data


def simplify_design_file(path: str) -> SimplifiedDesign:
    """Loads a design file and runs it through the simplifier."""
    return parse_figma_response(load_design_file(path))


# --- Rendering ---

def render_output(data: Any, fmt: str = "yaml") -> str:
    """Serializes simplified output as YAML (insertion order kept) or indented JSON."""
    if fmt == "yaml":
        return yaml.dump(data, sort_keys=False, allow_unicode=True)
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    raise ValueError(f"Unsupported output format: {fmt}")
