"""
Utility modules for the ampExtract pipeline.

This subpackage contains utility functions:
- sequence_utils: IUPAC sequence utilities
- taxon_label: Species labels from FASTA headers
- common_utils: Batching helpers
- tool_checker: External tool pre-flight checks
- file_io: FASTA, primer table and provenance table I/O
- cache: Result cache keyed by run inputs

file_io and cache build core records and are imported from their modules
(``from ampextract.utils.file_io import FileIO``), since the core package
itself depends on this one.
"""

from .sequence_utils import SequenceUtils
from .taxon_label import TaxonLabel
from .common_utils import CommonUtils
from .tool_checker import ToolChecker

__all__ = [
    'SequenceUtils',
    'TaxonLabel',
    'CommonUtils',
    'ToolChecker'
]
