# Re-export key functionalities to make them available at the package level

# From .services.simplify_node_response (Simplified data structures)
from .services.simplify_node_response import (
    parse_figma_response,
    parse_node,
    SimplifiedDesign,
    SimplifiedNode,
    BoundingBox,
    TextStyle,
)

# From .services.global_vars (shared style table)
from .services.global_vars import GlobalVars, find_or_create_var

# From .transformers.style (CSS derivation)
from .transformers.style import extract_css_properties, CSSProperties

# From .services.design_file (reading saved responses, writing output)
from .services.design_file import DesignFileError, load_design_file, render_output, simplify_design_file

# From .utils.design_tokens (token export)
from .utils.design_tokens import DesignTokens, TokenGenerationOptions, generate_design_tokens

# From .config (converter configuration loading)
from .config import get_converter_config, ConverterConfig

__all__ = [
    "parse_figma_response",
    "parse_node",
    "SimplifiedDesign",
    "SimplifiedNode",
    "BoundingBox",
    "TextStyle",
    "GlobalVars",
    "find_or_create_var",
    "extract_css_properties",
    "CSSProperties",
    "DesignFileError",
    "load_design_file",
    "render_output",
    "simplify_design_file",
    "DesignTokens",
    "TokenGenerationOptions",
    "generate_design_tokens",
    "get_converter_config",
    "ConverterConfig",
]

__version__ = "0.1.0" # Should match pyproject.toml
