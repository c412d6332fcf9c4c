#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Custom exceptions for the ampExtract pipeline.

This module defines exception classes used throughout the ampExtract pipeline
so callers can tell fatal conditions (ambiguous amplification, missing tools,
unreadable inputs) apart from one another. Expected per-sequence outcomes such
as "no primer match" or "alignment recovery failed" are not exceptions; they
are recorded as a Provenance value on the extraction result.
"""


class AmpExtractError(Exception):
    """Base exception class for all ampExtract-specific errors."""
    pass


class FileError(AmpExtractError):
    """Base class for file-related errors."""
    pass


class FileFormatError(FileError):
    """Error with file formatting or parsing."""
    pass


class ConfigError(AmpExtractError):
    """Error with configuration parameters or primer definitions."""
    pass


class SequenceProcessingError(AmpExtractError):
    """Error during sequence processing."""
    pass


class AmbiguousAmplificationError(SequenceProcessingError):
    """
    A reference sequence yields more than one amplicon window.

    Raised when direct primer search resolves to several non-overlapping
    windows, which signals tandem copies or chimeric priming. The run must
    not pick one of them.
    """

    def __init__(self, sequence_id, windows=None):
        """
        Initialize with the offending sequence and its candidate windows.

        Args:
            sequence_id (str): Identifier of the reference sequence
            windows (list, optional): Reduced candidate windows
        """
        self.sequence_id = sequence_id
        self.windows = list(windows or [])

        spans = ", ".join(f"{w.start}-{w.end}({w.strand})" for w in self.windows)
        message = f"Ambiguous amplification for sequence '{sequence_id}'"
        if len(self.windows) > 1:
            message += f": primers anchor {len(self.windows)} non-overlapping amplicon windows [{spans}]"
        elif spans:
            message += f": amplicon window [{spans}]"

        super().__init__(message)

    def __reduce__(self):
        return (self.__class__, (self.sequence_id, self.windows))


class AlignmentError(AmpExtractError):
    """Error during fallback sequence alignment."""
    pass


class CacheError(AmpExtractError):
    """Error reading or writing the result cache."""
    pass


class WorkflowError(AmpExtractError):
    """Error in workflow execution."""
    pass


class ExternalToolError(AmpExtractError):
    """Error related to external tools like vsearch, mafft or BLAST."""

    def __init__(self, message, tool_name=None, command=None, return_code=None, stdout=None, stderr=None):
        """
        Initialize with extended information about the external tool error.

        Args:
            message (str): Error message
            tool_name (str, optional): Name of the external tool
            command (str, optional): Command that was executed
            return_code (int, optional): Return code from the command
            stdout (str, optional): Standard output from the command
            stderr (str, optional): Standard error from the command
        """
        self.tool_name = tool_name
        self.command = command
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr

        detailed_message = message
        if tool_name:
            detailed_message = f"{tool_name} error: {message}"
        if return_code is not None:
            detailed_message += f" (return code: {return_code})"

        super().__init__(detailed_message)


class ToolUnavailableError(ExternalToolError):
    """A required external tool is not installed or not on PATH."""

    def __init__(self, missing_tools):
        self.missing_tools = list(missing_tools)
        super().__init__(
            f"Required tool(s) not found on PATH: {', '.join(self.missing_tools)}"
        )

    def __reduce__(self):
        return (self.__class__, (self.missing_tools,))
