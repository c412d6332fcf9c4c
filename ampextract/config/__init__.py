#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration package for the ampExtract pipeline.
"""

from .config import Config, ExtractionSettings
from .logging_config import setup_logging
from .exceptions import (
    AmpExtractError,
    FileError,
    FileFormatError,
    ConfigError,
    SequenceProcessingError,
    AmbiguousAmplificationError,
    AlignmentError,
    CacheError,
    WorkflowError,
    ExternalToolError,
    ToolUnavailableError,
)
from .config_display import display_config
from .template_generator import generate_config_template

__all__ = [
    'Config',
    'ExtractionSettings',
    'setup_logging',
    'AmpExtractError',
    'FileError',
    'FileFormatError',
    'ConfigError',
    'SequenceProcessingError',
    'AmbiguousAmplificationError',
    'AlignmentError',
    'CacheError',
    'WorkflowError',
    'ExternalToolError',
    'ToolUnavailableError',
    'display_config',
    'generate_config_template'
]
