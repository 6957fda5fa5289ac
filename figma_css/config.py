import os
import sys
import argparse
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from dotenv import load_dotenv

from figma_css.services.design_file import OUTPUT_FORMATS, OutputFormat
from figma_css.utils.design_tokens import TOKEN_FILE_EXTENSIONS, TOKEN_FORMATS, TokenFormat
from figma_css.utils.logger import log, error as log_error


# --- Pydantic Models ---

class ConfigSources(BaseModel):
    input_source: str = Field(default="none", alias="inputSource")
    output_source: str = Field(default="none", alias="outputSource")
    format_source: str = Field(default="none", alias="formatSource")
    tokens_source: str = Field(default="none", alias="tokensSource")
    tokens_output_source: str = Field(default="none", alias="tokensOutputSource")
    token_prefix_source: str = Field(default="none", alias="tokenPrefixSource")

    class Config:
        populate_by_name = True


class ConverterConfig(BaseModel):
    input_path: str
    output_path: Optional[str] = None # None writes to stdout
    output_format: OutputFormat = "yaml"
    token_format: Optional[TokenFormat] = None
    token_output_path: Optional[str] = None
    token_prefix: str = ""
    config_sources: ConfigSources = Field(default_factory=ConfigSources)

    @field_validator("output_format", "token_format", mode="before")
    @classmethod
    def lower_case_format(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v


# --- Helper Functions ---

def _resolve(
    cli_value: Optional[str],
    env_name: str,
    default: Optional[str],
    sources: Dict[str, str],
    source_key: str,
) -> Optional[str]:
    """CLI beats environment beats default; records where the value came from."""
    if cli_value is not None:
        sources[source_key] = "cli"
        return cli_value
    env_value = os.getenv(env_name)
    if env_value:
        sources[source_key] = "env"
        return env_value
    if default is not None:
        sources[source_key] = "default"
        return default
    sources[source_key] = "none"
    return None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="figma-css",
        description="Simplify a saved Figma API response and derive CSS for every node",
    )
    parser.add_argument(
        "input", nargs="?", default=None, help="Path to a Figma file/nodes response (.json, .yaml, .yml)"
    )
    parser.add_argument(
        "-o", "--output", type=str, default=None, help="Write the simplified design here instead of stdout"
    )
    parser.add_argument(
        "--format", type=str, choices=OUTPUT_FORMATS, default=None, help="Output format (default: yaml)"
    )
    parser.add_argument(
        "--tokens", type=str, choices=TOKEN_FORMATS, default=None, help="Also export design tokens in this format"
    )
    parser.add_argument(
        "--tokens-output", type=str, default=None, help="Design token file (default: design-tokens.<format>)"
    )
    parser.add_argument(
        "--token-prefix", type=str, default=None, help="Prefix for generated token names"
    )
    return parser


# --- Main Configuration Function ---

def get_converter_config(argv: Optional[List[str]] = None) -> ConverterConfig:
    """
    Retrieves converter configuration from CLI arguments, environment variables, and defaults.
    Prioritizes CLI > Environment > Defaults.
    """
    load_dotenv() # Load .env file if present

    args = _build_parser().parse_args(argv)

    sources: Dict[str, str] = {}

    input_path = _resolve(args.input, "FIGMA_CSS_INPUT", None, sources, "input_source")
    output_path = _resolve(args.output, "FIGMA_CSS_OUTPUT", None, sources, "output_source")
    output_format = _resolve(args.format, "FIGMA_CSS_FORMAT", "yaml", sources, "format_source")
    token_format = _resolve(args.tokens, "FIGMA_CSS_TOKENS", None, sources, "tokens_source")

    token_default = None
    if token_format:
        token_default = f"design-tokens.{TOKEN_FILE_EXTENSIONS.get(token_format.lower(), token_format)}"
    token_output_path = _resolve(
        args.tokens_output, "FIGMA_CSS_TOKENS_OUTPUT", token_default, sources, "tokens_output_source"
    )
    token_prefix = _resolve(args.token_prefix, "FIGMA_CSS_TOKEN_PREFIX", "", sources, "token_prefix_source")

    if not input_path:
        error_message = (
            "Input error: No design file was provided.\n"
            "Please provide one as a positional argument or via the FIGMA_CSS_INPUT environment variable."
        )
        sys.stderr.write(error_message + "\n")
        sys.exit(1)

    try:
        config = ConverterConfig(
            input_path=input_path,
            output_path=output_path,
            output_format=output_format,
            token_format=token_format,
            token_output_path=token_output_path if token_format else None,
            token_prefix=token_prefix,
            config_sources=ConfigSources(**sources),
        )
    except ValidationError as e:
        log_error(f"Invalid configuration: {e}")
        sys.exit(1)

    log("Converter Configuration Initialized:")
    log(f"  Input: {config.input_path} (Source: {sources['input_source']})")
    log(f"  Output: {config.output_path or 'stdout'} (Source: {sources['output_source']})")
    log(f"  Format: {config.output_format} (Source: {sources['format_source']})")
    if config.token_format:
        log(f"  Tokens: {config.token_format} -> {config.token_output_path} (Source: {sources['tokens_source']})")

    return config
