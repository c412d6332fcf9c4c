#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration display module for the ampExtract pipeline.
"""

import textwrap
import colorama
from colorama import Fore, Style


CATEGORIES = {
    "Pipeline Mode Options": [
        "DEBUG_MODE", "HALT_ON_AMBIGUOUS", "ENABLE_FALLBACK"
    ],
    "Performance Settings": [
        "NUM_PROCESSES", "BATCH_SIZE", "SHOW_PROGRESS"
    ],
    "Primer Matching Parameters": [
        "MAX_MISMATCH", "MATCH_AMBIGUOUS_TARGET", "TRIM_PRIMERS",
        "ORIENT_TO_FORWARD", "MAX_AMPLICON_LENGTH"
    ],
    "Fallback Alignment Parameters": [
        "MIN_COVERAGE", "MIN_IDENTITY", "ALIGN_MATCH_SCORE",
        "ALIGN_MISMATCH_SCORE", "ALIGN_OPEN_GAP_SCORE", "ALIGN_EXTEND_GAP_SCORE"
    ],
    "Cleanup Parameters": [
        "ORIENTATION_ANCHOR", "ANCHOR_SEARCH_WINDOW", "SPECIES_LABEL_PATTERN"
    ],
    "Cache and Tool Options": [
        "USE_CACHE", "CACHE_DIR", "REQUIRED_TOOLS"
    ],
}


def display_config(config_cls):
    """
    Display all configuration settings in a structured, easy-to-read format.

    Args:
        config_cls: The Config class
    """
    colorama.init()

    settings = config_cls.get_all_settings()

    print(f"\n{Fore.CYAN}{'='*80}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'ampExtract Configuration Settings':^80}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'='*80}{Style.RESET_ALL}\n")

    categories = dict(CATEGORIES)
    categorized_keys = [key for keys in categories.values() for key in keys]
    other_keys = [key for key in settings if key not in categorized_keys]
    if other_keys:
        categories["Other"] = other_keys

    for category, keys in categories.items():
        print(f"{Fore.GREEN}{category}{Style.RESET_ALL}")
        print(f"{Fore.GREEN}{'-' * len(category)}{Style.RESET_ALL}")

        for key in keys:
            if key in settings:
                value = settings[key]
                if isinstance(value, list) and len(str(value)) > 60:
                    formatted_value = "\n" + textwrap.indent(str(value), " " * 4)
                else:
                    formatted_value = str(value)

                print(f"{Fore.YELLOW}{key}{Style.RESET_ALL}: {formatted_value}")
        print()

    print(f"{Fore.CYAN}{'='*80}{Style.RESET_ALL}")
    print(f"\n{Fore.WHITE}Configuration Options:{Style.RESET_ALL}")
    print(f"- View settings: {Fore.YELLOW}ampextract --config{Style.RESET_ALL}")
    print(f"- Generate a template config file: {Fore.YELLOW}ampextract --config template{Style.RESET_ALL}")
    print(f"- Use custom config: {Fore.YELLOW}ampextract --config your_config.json{Style.RESET_ALL}")
    print(f"\nExample config file format:")
    print(f"{Fore.BLUE}{{")
    print(f'    "MIN_COVERAGE": 0.9,')
    print(f'    "MAX_MISMATCH": 0,')
    print(f'    "ORIENTATION_ANCHOR": "TTTAGAGAATAATG"')
    print(f"}}{Style.RESET_ALL}\n")
