#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
External tool pre-flight checks for ampExtract pipeline.

Extracted amplicons are handed to external programs (vsearch clustering,
mafft alignment, BLAST classification, cutadapt trimming). This module only
verifies that they are installed before a long run starts; it never
invokes them for analysis.
"""

import shutil
import logging
from typing import Dict, Iterable, Optional

from ..config import ToolUnavailableError

# Set up module logger
logger = logging.getLogger(__name__)


class ToolChecker:
    """
    Locates external command line tools on PATH.

    Example:
        >>> ToolChecker.check(["vsearch", "mafft"])
        {'vsearch': '/usr/bin/vsearch', 'mafft': None}
        >>> ToolChecker.require(["vsearch"])
    """

    @staticmethod
    def find(tool) -> Optional[str]:
        """Return the absolute path of a tool, or None if it is not on PATH."""
        path = shutil.which(tool)
        logger.debug(f"{tool}: {path or 'not found'}")
        return path

    @classmethod
    def check(cls, tools: Iterable[str]) -> Dict[str, Optional[str]]:
        """
        Locate several tools.

        Args:
            tools: Tool executable names

        Returns:
            Dictionary mapping tool name to path (None when missing), in input order
        """
        return {tool: cls.find(tool) for tool in tools}

    @classmethod
    def require(cls, tools: Iterable[str]) -> Dict[str, str]:
        """
        Ensure every tool is installed.

        Args:
            tools: Tool executable names

        Returns:
            Dictionary mapping tool name to path

        Raises:
            ToolUnavailableError: If any tool is missing
        """
        found = cls.check(tools)
        missing = [tool for tool, path in found.items() if path is None]
        if missing:
            error = ToolUnavailableError(missing)
            logger.error(str(error))
            raise error
        logger.debug(f"All required tools available: {', '.join(found)}")
        return found
