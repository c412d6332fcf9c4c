#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration module for ampExtract pipeline.

Contains functionality for:
1. Central configuration settings management with singleton pattern
2. JSON configuration file loading/saving
3. Immutable per-run settings snapshots for the extraction core

The Config class holds user-facing defaults and is what configuration files
and command line flags modify. The extraction core never reads Config
directly: each run takes an ExtractionSettings snapshot, which worker
processes receive and the result cache hashes.
"""

import os
import json
import logging
from dataclasses import dataclass, asdict, fields
from multiprocessing import cpu_count
from typing import Any, ClassVar, Dict, Optional, Tuple

from .exceptions import ConfigError, FileFormatError

logger = logging.getLogger(__name__)


class Config:
    """
    Central configuration settings for ampExtract pipeline with singleton pattern.

    This class manages all configuration settings for the pipeline as class
    attributes, providing consistent settings access across modules and
    JSON configuration file support.

    Attributes:
        DEBUG_MODE: Enable debug logging mode
        NUM_PROCESSES: Number of parallel processes to use
        MIN_COVERAGE: Minimum fraction of a reference amplicon a fallback
            alignment must span

    Example:
        >>> config = Config.get_instance()
        >>> config.MIN_COVERAGE = 0.95
        >>> Config.load_from_file("my_config.json")
    """

    # Singleton instance
    _instance = None

    #############################################################################
    #                           Pipeline Mode Options
    #############################################################################
    DEBUG_MODE = False                   # Debug logging mode (enable with --debug flag)
    HALT_ON_AMBIGUOUS = True             # Abort the run on ambiguous amplification
    ENABLE_FALLBACK = True               # Recover partial references by alignment

    #############################################################################
    #                           Performance Settings
    #############################################################################
    NUM_PROCESSES = max(1, int(cpu_count() * 0.75))  # Use 75% of cores
    BATCH_SIZE = 50
    SHOW_PROGRESS = True

    #############################################################################
    #                           Primer Matching Parameters
    #############################################################################
    MAX_MISMATCH = 0                     # Non-matching positions tolerated per primer site
    MATCH_AMBIGUOUS_TARGET = True        # IUPAC codes in references match any represented base
    TRIM_PRIMERS = True                  # Strip primer binding sites from the amplicon
    ORIENT_TO_FORWARD = False            # Reverse complement minus-strand amplicons
    MAX_AMPLICON_LENGTH = None           # Upper bound on window length incl. primers (None = no limit)

    #############################################################################
    #                           Fallback Alignment Parameters
    #############################################################################
    MIN_COVERAGE = 0.90                  # Fraction of the reference amplicon covered
    MIN_IDENTITY = 0.0                   # Fraction of identical aligned columns
    ALIGN_MATCH_SCORE = 1.0
    ALIGN_MISMATCH_SCORE = -1.0
    ALIGN_OPEN_GAP_SCORE = -2.0
    ALIGN_EXTEND_GAP_SCORE = -1.0

    #############################################################################
    #                           Cleanup Parameters
    #############################################################################
    ORIENTATION_ANCHOR = None            # IUPAC motif expected near the 5' end of amplicons
    ANCHOR_SEARCH_WINDOW = 30            # Bases from the 5' end searched for the anchor
    SPECIES_LABEL_PATTERN = None         # Regex with a 'species' group applied to FASTA headers

    #############################################################################
    #                           Cache and Tool Options
    #############################################################################
    USE_CACHE = False
    CACHE_DIR = None                     # Defaults to ~/.ampextract/cache
    REQUIRED_TOOLS = ["vsearch", "mafft", "blastn", "cutadapt"]

    def __init__(self):
        """Initialize Config instance with default values."""
        # Implementation left empty as we're using class variables
        pass

    @classmethod
    def get_instance(cls) -> 'Config':
        """
        Get the singleton instance of Config.

        Returns:
            Config: Singleton instance
        """
        if cls._instance is None:
            logger.debug("Creating new Config singleton instance")
            cls._instance = cls()
            if cls.CACHE_DIR is None:
                cls.CACHE_DIR = os.path.join(cls.get_user_config_dir(), "cache")
                logger.debug(f"Initialized CACHE_DIR to {cls.CACHE_DIR}")
        return cls._instance

    @classmethod
    def get_user_config_dir(cls) -> str:
        """
        Get the user configuration directory, creating it if necessary.

        Returns:
            Path to user configuration directory

        Raises:
            ConfigError: If directory cannot be created
        """
        config_dir = os.path.join(os.path.expanduser("~"), ".ampextract")

        try:
            os.makedirs(config_dir, exist_ok=True)
            logger.debug(f"User config directory: {config_dir}")
            return config_dir
        except OSError as e:
            error_msg = f"Failed to create user config directory {config_dir}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise ConfigError(error_msg) from e

    @classmethod
    def load_from_file(cls, filepath: str) -> bool:
        """
        Load settings from a JSON configuration file.

        Unknown keys are ignored with a warning; known keys overwrite the
        class attribute of the same name.

        Args:
            filepath: Path to the settings file

        Returns:
            bool: True if settings were loaded successfully

        Raises:
            ConfigError: If file loading fails

        Example:
            >>> Config.load_from_file("my_config.json")
            True
        """
        logger.debug(f"Loading configuration from {filepath}")

        try:
            cls.get_instance()

            if not os.path.exists(filepath):
                error_msg = f"Configuration file not found: {filepath}"
                logger.error(error_msg)
                raise FileFormatError(error_msg)

            with open(filepath, 'r') as f:
                settings = json.load(f)

            if not isinstance(settings, dict):
                raise FileFormatError(f"Configuration file must contain a JSON object: {filepath}")

            logger.debug(f"Loaded {len(settings)} settings from JSON")

            for key, value in settings.items():
                if key.startswith('#'):
                    # Template comments
                    continue
                if key.startswith('_') or not hasattr(cls, key) or callable(getattr(cls, key)):
                    logger.warning(f"Ignoring unknown configuration key: {key}")
                    continue
                setattr(cls, key, value)
                logger.debug(f"Updated {key} = {value}")

            # Fail early on values the snapshot would reject
            ExtractionSettings.from_config(cls)
            return True

        except Exception as e:
            error_msg = f"Failed to load settings from {filepath}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise ConfigError(error_msg) from e

    @classmethod
    def save_to_file(cls, filepath: str) -> bool:
        """
        Save current settings in JSON format.

        Args:
            filepath: Path to save the settings

        Returns:
            bool: True if settings were saved successfully

        Raises:
            ConfigError: If saving fails
        """
        try:
            settings = {}
            for key, value in cls.get_all_settings().items():
                if isinstance(value, (str, int, float, bool, list, dict, tuple)) or value is None:
                    settings[key] = value

            with open(filepath, 'w') as f:
                json.dump(settings, f, indent=4, sort_keys=True)

            logger.debug(f"Saved JSON format settings to {filepath}")
            return True
        except Exception as e:
            error_msg = f"Failed to save JSON settings to {filepath}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise ConfigError(error_msg) from e

    @classmethod
    def get_all_settings(cls) -> Dict[str, Any]:
        """
        Get all settings as a dictionary.

        Returns:
            dict: Dictionary of all configuration settings
        """
        settings = {}

        for key in dir(cls):
            if key.isupper() and not key.startswith('_') and not callable(getattr(cls, key)):
                settings[key] = getattr(cls, key)

        logger.debug(f"Retrieved {len(settings)} configuration settings")
        return settings

    @classmethod
    def get_extraction_settings(cls, **overrides) -> 'ExtractionSettings':
        """
        Snapshot the current configuration for a single extraction run.

        Args:
            **overrides: ExtractionSettings fields to replace in the snapshot

        Returns:
            ExtractionSettings: Immutable settings snapshot
        """
        cls.get_instance()
        return ExtractionSettings.from_config(cls, **overrides)


@dataclass(frozen=True)
class ExtractionSettings:
    """
    Immutable parameters of one extraction run.

    Instances are hashable and picklable, so they can be passed to worker
    processes and folded into the result cache key.
    """

    max_mismatch: int = 0
    ambiguous_target: bool = True
    trim_primers: bool = True
    orient_to_forward: bool = False
    max_amplicon_length: Optional[int] = None
    halt_on_ambiguous: bool = True
    enable_fallback: bool = True
    min_coverage: float = 0.90
    min_identity: float = 0.0
    match_score: float = 1.0
    mismatch_score: float = -1.0
    open_gap_score: float = -2.0
    extend_gap_score: float = -1.0
    orientation_anchor: Optional[str] = None
    anchor_search_window: int = 30
    num_processes: int = 1
    batch_size: int = 50
    show_progress: bool = False

    # Fields that do not change results and stay out of the cache key
    RUNTIME_FIELDS: ClassVar[Tuple[str, ...]] = ("num_processes", "batch_size", "show_progress")

    def __post_init__(self):
        if self.max_mismatch < 0:
            raise ConfigError(f"max_mismatch must be >= 0, got {self.max_mismatch}")
        if not 0.0 <= self.min_coverage <= 1.0:
            raise ConfigError(f"min_coverage must be within [0, 1], got {self.min_coverage}")
        if not 0.0 <= self.min_identity <= 1.0:
            raise ConfigError(f"min_identity must be within [0, 1], got {self.min_identity}")
        if self.max_amplicon_length is not None and self.max_amplicon_length <= 0:
            raise ConfigError(f"max_amplicon_length must be positive, got {self.max_amplicon_length}")
        if self.num_processes < 1:
            raise ConfigError(f"num_processes must be >= 1, got {self.num_processes}")
        if self.batch_size < 1:
            raise ConfigError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.anchor_search_window < 0:
            raise ConfigError(f"anchor_search_window must be >= 0, got {self.anchor_search_window}")

    @classmethod
    def from_config(cls, config_cls=Config, **overrides) -> 'ExtractionSettings':
        """
        Build a snapshot from a Config class.

        Args:
            config_cls: Class holding the upper-case settings attributes
            **overrides: Field values taking precedence over config_cls

        Returns:
            ExtractionSettings snapshot
        """
        values = dict(
            max_mismatch=int(config_cls.MAX_MISMATCH),
            ambiguous_target=bool(config_cls.MATCH_AMBIGUOUS_TARGET),
            trim_primers=bool(config_cls.TRIM_PRIMERS),
            orient_to_forward=bool(config_cls.ORIENT_TO_FORWARD),
            max_amplicon_length=config_cls.MAX_AMPLICON_LENGTH,
            halt_on_ambiguous=bool(config_cls.HALT_ON_AMBIGUOUS),
            enable_fallback=bool(config_cls.ENABLE_FALLBACK),
            min_coverage=float(config_cls.MIN_COVERAGE),
            min_identity=float(config_cls.MIN_IDENTITY),
            match_score=float(config_cls.ALIGN_MATCH_SCORE),
            mismatch_score=float(config_cls.ALIGN_MISMATCH_SCORE),
            open_gap_score=float(config_cls.ALIGN_OPEN_GAP_SCORE),
            extend_gap_score=float(config_cls.ALIGN_EXTEND_GAP_SCORE),
            orientation_anchor=config_cls.ORIENTATION_ANCHOR or None,
            anchor_search_window=int(config_cls.ANCHOR_SEARCH_WINDOW),
            num_processes=int(config_cls.NUM_PROCESSES),
            batch_size=int(config_cls.BATCH_SIZE),
            show_progress=bool(config_cls.SHOW_PROGRESS),
        )
        values.update(overrides)
        return cls(**values)

    def result_parameters(self) -> Dict[str, Any]:
        """Return the fields that influence extraction results."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in self.RUNTIME_FIELDS
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
