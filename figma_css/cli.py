#!/usr/bin/env python

import sys
from typing import List, Optional

from figma_css.config import get_converter_config, ConverterConfig
from figma_css.services.design_file import DesignFileError, render_output, simplify_design_file
from figma_css.utils.common import write_text_file
from figma_css.utils.design_tokens import TokenGenerationOptions, generate_design_tokens
from figma_css.utils.logger import Logger, set_stdout_reserved


def run(config: ConverterConfig) -> int:
    """
    Converts one design file according to ``config``. Returns the process exit status.
    """
    try:
        design = simplify_design_file(config.input_path)
        rendered = render_output(design.to_output(), config.output_format)
    except (DesignFileError, ValueError) as e:
        Logger.error(str(e))
        return 1

    if config.output_path:
        try:
            write_text_file(config.output_path, rendered)
        except OSError as e:
            Logger.error(f"Could not write {config.output_path}: {e}")
            return 1
        Logger.log(f"Wrote {config.output_format} output to {config.output_path}")
    else:
        sys.stdout.write(rendered)
        sys.stdout.flush()

    Logger.log(f"Simplified {len(design.nodes)} top-level node(s), {len(design.global_vars.styles)} shared style(s)")

    if config.token_format:
        options = TokenGenerationOptions(
            format=config.token_format,
            output_path=config.token_output_path,
            prefix=config.token_prefix,
        )
        try:
            tokens = generate_design_tokens(design, options)
        except (OSError, ValueError) as e:
            Logger.error(f"Could not export design tokens: {e}")
            return 1
        Logger.log(f"Exported {tokens.count()} design token(s) to {config.token_output_path}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``figma-css`` console script."""
    # Startup messages stay off stdout until we know where the document goes
    set_stdout_reserved(True)
    config = get_converter_config(argv)
    set_stdout_reserved(config.output_path is None)
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
