"""
Core processing modules for the ampExtract pipeline.

This subpackage contains the main processing functionality:
- records: Immutable input records and per-sequence results
- primer_matcher: IUPAC-aware primer site search
- amplicon_resolver: Primer hits to a single amplicon window
- fallback_aligner: Alignment-based recovery of partial sequences
- cleanup_processor: Orientation check, de-duplication and ordering
- extraction_processor: Parallel extraction workflow and run reports
"""

__all__ = [
    'Provenance',
    'TerminalState',
    'Direction',
    'ReferenceSequence',
    'Primer',
    'PrimerPair',
    'AmpliconWindow',
    'ExtractionResult',
    'PrimerMatcher',
    'PrimerSites',
    'AmpliconResolver',
    'FallbackAligner',
    'CleanupProcessor',
    'AmpliconExtractor',
    'ExtractionReport'
]

from .records import (
    Provenance,
    TerminalState,
    Direction,
    ReferenceSequence,
    Primer,
    PrimerPair,
    AmpliconWindow,
    ExtractionResult,
)
from .primer_matcher import PrimerMatcher, PrimerSites
from .amplicon_resolver import AmpliconResolver
from .fallback_aligner import FallbackAligner
from .cleanup_processor import CleanupProcessor
from .extraction_processor import AmpliconExtractor, ExtractionReport
