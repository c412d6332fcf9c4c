#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration template generator for ampExtract pipeline.

Writes a JSON configuration file holding the commonly modified settings with
their current values, which users edit and pass back with ``--config``.
"""

import os
import json
from datetime import datetime
import colorama
from colorama import Fore, Style
import logging

logger = logging.getLogger(__name__)

# Settings written to the template, in display order
TEMPLATE_KEYS = [
    "NUM_PROCESSES",
    "BATCH_SIZE",
    "SHOW_PROGRESS",
    "MAX_MISMATCH",
    "MATCH_AMBIGUOUS_TARGET",
    "TRIM_PRIMERS",
    "ORIENT_TO_FORWARD",
    "MAX_AMPLICON_LENGTH",
    "HALT_ON_AMBIGUOUS",
    "ENABLE_FALLBACK",
    "MIN_COVERAGE",
    "MIN_IDENTITY",
    "ORIENTATION_ANCHOR",
    "SPECIES_LABEL_PATTERN",
    "USE_CACHE",
]


def generate_config_template(config_cls, filename=None, output_dir=None):
    """
    Generate a template configuration file based on current settings.

    Args:
        config_cls: The Config class containing default settings
        filename (str, optional): Filename to save template. Uses default if None.
        output_dir (str, optional): Directory to save template. Uses current if None.

    Returns:
        str: Path to the generated template file

    Raises:
        TemplateGenerationError: If template generation fails

    Example:
        >>> from ampextract.config import Config
        >>> template_path = generate_config_template(Config, "my_config.json")
    """
    logger.debug(f"Generating config template: filename={filename}, output_dir={output_dir}")

    colorama.init()

    if output_dir is None:
        output_dir = os.getcwd()
    else:
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            error_msg = f"Failed to create output directory: {output_dir}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise TemplateGenerationError(error_msg) from e

    if filename is None:
        filename = f"ampextract_config_template_{datetime.now().strftime('%Y%m%d')}.json"

    if not filename.lower().endswith('.json'):
        filename += '.json'

    filepath = os.path.join(output_dir, filename)

    template = {
        "# ampExtract Configuration Template": "Generated on " + datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "# Instructions": "Modify the values below and run: ampextract --config your_config.json",
    }
    template.update(_build_template_dict(config_cls))

    try:
        with open(filepath, 'w') as f:
            json.dump(template, f, indent=4)
    except OSError as e:
        error_msg = f"Failed to write template file to {filepath}"
        logger.error(error_msg)
        logger.debug(f"Error details: {str(e)}", exc_info=True)
        raise TemplateGenerationError(error_msg) from e

    print(f"\nTemplate saved to: {Fore.CYAN}{filepath}{Style.RESET_ALL}")
    print(f"Run: {Fore.CYAN}ampextract --config {filepath}{Style.RESET_ALL}\n")

    logger.debug("Template generation completed successfully")
    return filepath


def _build_template_dict(config_cls):
    """Collect the template settings from the config class."""
    template = {}
    for key in TEMPLATE_KEYS:
        if hasattr(config_cls, key):
            template[key] = getattr(config_cls, key)
        else:
            logger.debug(f"Config has no attribute {key}, skipped in template")
    return template


class TemplateGenerationError(Exception):
    """Error during configuration template generation."""
    pass
