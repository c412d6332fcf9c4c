#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sequence utility functions for ampExtract pipeline.

Contains functionality for:
1. Sequence normalization and validation against the IUPAC DNA alphabet
2. Reverse complement generation with ambiguity codes
3. Encoding of bases as 4-bit nucleotide set masks

Each IUPAC letter stands for a set of bases. Encoding that set as a bit mask
(A=1, C=2, G=4, T=8) turns "do these two letters share a base" into a
single bitwise AND, which the primer matcher uses for vectorized search.
"""

import logging

import numpy as np
from Bio.Data.IUPACData import ambiguous_dna_values

# Set up module logger
logger = logging.getLogger(__name__)

BASE_BITS = {'A': 1, 'C': 2, 'G': 4, 'T': 8}

# IUPAC letter -> bit mask of the bases it represents
IUPAC_MASKS = {
    code: sum(BASE_BITS[base] for base in bases)
    for code, bases in ambiguous_dna_values.items()
    if code != 'X'
}
IUPAC_MASKS['U'] = BASE_BITS['T']

COMPLEMENT = {
    'A': 'T', 'C': 'G', 'G': 'C', 'T': 'A', 'U': 'A',
    'N': 'N', 'R': 'Y', 'Y': 'R', 'S': 'S',
    'W': 'W', 'K': 'M', 'M': 'K', 'B': 'V',
    'D': 'H', 'H': 'D', 'V': 'B', '-': '-'
}

# Lookup table for vectorized encoding; unknown bytes map to 0 (never match)
_MASK_TABLE = np.zeros(256, dtype=np.uint8)
for _code, _mask in IUPAC_MASKS.items():
    _MASK_TABLE[ord(_code)] = _mask
    _MASK_TABLE[ord(_code.lower())] = _mask


class SequenceUtils:
    """
    Sequence-specific utility functions for DNA analysis.

    Example:
        >>> SequenceUtils.reverse_complement("ATCR")
        'YGAT'
        >>> SequenceUtils.bases_compatible("R", "A")
        True
    """

    @staticmethod
    def normalize(seq):
        """
        Upper-case a sequence and drop whitespace.

        Args:
            seq: Raw sequence text

        Returns:
            Normalized sequence string, empty for None
        """
        if seq is None:
            return ""
        return "".join(str(seq).split()).upper()

    @staticmethod
    def invalid_characters(seq):
        """
        Return the characters of a sequence outside the IUPAC DNA alphabet.

        Gap characters ('-') are allowed.

        Args:
            seq: DNA sequence to validate

        Returns:
            Sorted list of offending characters, empty if the sequence is valid
        """
        allowed = set(IUPAC_MASKS) | {'-'}
        return sorted(set(seq.upper()) - allowed)

    @staticmethod
    def reverse_complement(seq):
        """
        Generate the reverse complement of a DNA sequence.

        Supports IUPAC ambiguous nucleotide codes, which complement to the
        code for the complementary base set (e.g. R <-> Y).

        Args:
            seq: DNA sequence to reverse complement

        Returns:
            Reverse complement sequence (upper case)

        Raises:
            ValueError: If sequence contains invalid characters

        Example:
            >>> SequenceUtils.reverse_complement("ATCG")
            'CGAT'
        """
        if not seq or not isinstance(seq, str):
            return ""

        seq_upper = seq.upper()

        invalid_chars = set(seq_upper) - set(COMPLEMENT)
        if invalid_chars:
            error_msg = f"Invalid nucleotide characters found: {', '.join(sorted(invalid_chars))}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        return ''.join(COMPLEMENT[base] for base in reversed(seq_upper))

    @staticmethod
    def encode_masks(seq):
        """
        Encode a sequence as an array of nucleotide set masks.

        Args:
            seq: DNA sequence (any case)

        Returns:
            numpy uint8 array, one mask per position; 0 for characters
            outside the IUPAC alphabet
        """
        raw = np.frombuffer(seq.encode('ascii', errors='replace'), dtype=np.uint8)
        return _MASK_TABLE[raw]

    @staticmethod
    def literal_masks(seq):
        """
        Encode a sequence keeping only unambiguous bases.

        Ambiguity codes and N map to 0, so they match nothing.

        Args:
            seq: DNA sequence (any case)

        Returns:
            numpy uint8 array of masks
        """
        masks = SequenceUtils.encode_masks(seq)
        single_base = (masks != 0) & ((masks & (masks - 1)) == 0)
        return np.where(single_base, masks, 0).astype(np.uint8)

    @staticmethod
    def bases_compatible(a, b):
        """
        Check whether two IUPAC letters share at least one base.

        Example:
            >>> SequenceUtils.bases_compatible("Y", "T")
            True
            >>> SequenceUtils.bases_compatible("R", "C")
            False
        """
        return bool(IUPAC_MASKS.get(a.upper(), 0) & IUPAC_MASKS.get(b.upper(), 0))
