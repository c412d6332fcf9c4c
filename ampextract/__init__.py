"""
ampExtract: in-silico PCR amplicon extraction for metabarcoding reference databases.
"""

__version__ = "0.1.0"
